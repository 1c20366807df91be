"""Synthetic pattern generators for 6D microscopy arrays.

Each channel is filled from a pattern variant evaluated on the (Y, X) pixel
grid of every frame, then uniform additive noise in
``[-noise_level, +noise_level]`` is applied and values are clamped at zero.

Noise is added to every variant, including :class:`Noise` itself, so that
channel compounds two independent noise sources.

Randomness never touches global state: spot positions come from a
``numpy.random.Generator`` seeded from ``(spot index, time index)`` and the
additive noise from a generator created per :func:`generate` call.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Sequence, Tuple, Union

import numpy as np
from loguru import logger

from stack6d.array6d import DTYPE, Array6D
from stack6d.dimensions import Dimensions
from stack6d.errors import ChannelPatternCountError

SPOT_SEED_STRIDE = 12345
TIME_SEED_STRIDE = 67890


@dataclass(frozen=True)
class Uniform:
    """Same value at every pixel."""

    value: float


@dataclass(frozen=True)
class Gradient:
    """Linear ramp from the top-left corner to the bottom-right corner."""


@dataclass(frozen=True)
class Circles:
    """Radial falloff from the frame center."""


@dataclass(frozen=True)
class Noise:
    """Independent uniform noise in ``[min, max)``."""

    min: float
    max: float


@dataclass(frozen=True)
class GaussianSpots:
    """Gaussian spots at pseudo-random positions, re-drawn per time point."""

    num_spots: int
    intensity: float


@dataclass(frozen=True)
class SineWave:
    """Product of a sine along X and a sine along Y."""

    frequency: float
    amplitude: float


@dataclass(frozen=True)
class MovingSpots:
    """Spots orbiting the frame center; the angle advances with time."""

    num_spots: int
    speed: float


PatternType = Union[Uniform, Gradient, Circles, Noise, GaussianSpots, SineWave, MovingSpots]

# Defaults used by the command line generator
PATTERN_PRESETS = {
    "noise": Noise(min=50.0, max=200.0),
    "gaussian": GaussianSpots(num_spots=3, intensity=800.0),
    "gradient": Gradient(),
    "circles": Circles(),
    "uniform": Uniform(150.0),
    "sine-wave": SineWave(frequency=0.1, amplitude=200.0),
    "moving-spots": MovingSpots(num_spots=2, speed=0.1),
}  # type: Dict[str, PatternType]


@dataclass(frozen=True)
class GeneratorConfig:
    """Everything needed to synthesize an :class:`Array6D`."""

    dimensions: Dimensions
    channel_patterns: Tuple[Tuple[str, PatternType], ...] = field(default_factory=tuple)
    pixel_size_um: float = 0.65
    time_interval_s: float = 1.0
    data_type: str = "uint16"
    base_intensity: float = 100.0
    noise_level: float = 10.0
    seed: Optional[int] = None

    @classmethod
    def new(cls, dimensions: Dimensions) -> "GeneratorConfig":
        """Default configuration: a gradient in channel 1, Gaussian spots elsewhere."""
        patterns = []
        for i in range(dimensions.channel):
            pattern = Gradient() if i == 0 else GaussianSpots(num_spots=3, intensity=500.0)
            patterns.append((f"Channel{i + 1}", pattern))
        return cls(dimensions=dimensions, channel_patterns=tuple(patterns))

    def with_channels(self, channels):
        # type: (Sequence[Tuple[str, PatternType]]) -> GeneratorConfig
        """Replace all channel patterns.

        :raises ChannelPatternCountError: If the count differs from the channel axis
        """
        channels = tuple((name, pattern) for name, pattern in channels)
        if len(channels) != self.dimensions.channel:
            raise ChannelPatternCountError(
                f"Number of channels ({len(channels)}) must match dimension "
                f"({self.dimensions.channel})"
            )
        return replace(self, channel_patterns=channels)

    def with_pixel_size(self, size_um: float) -> "GeneratorConfig":
        return replace(self, pixel_size_um=size_um)

    def with_time_interval(self, interval_s: float) -> "GeneratorConfig":
        return replace(self, time_interval_s=interval_s)

    def with_base_intensity(self, intensity: float) -> "GeneratorConfig":
        return replace(self, base_intensity=intensity)

    def with_noise_level(self, noise: float) -> "GeneratorConfig":
        return replace(self, noise_level=noise)

    def with_seed(self, seed: Optional[int]) -> "GeneratorConfig":
        return replace(self, seed=seed)


def spot_rng(spot_id: int, t: int) -> np.random.Generator:
    """Random source that places spot ``spot_id`` at time point ``t``."""
    return np.random.default_rng(spot_id * SPOT_SEED_STRIDE + t * TIME_SEED_STRIDE)


def _pixel_grid(dims: Dimensions) -> Tuple[np.ndarray, np.ndarray]:
    y, x = np.meshgrid(
        np.arange(dims.height, dtype=np.float64),
        np.arange(dims.width, dtype=np.float64),
        indexing="ij",
    )
    return x, y


def _gaussian(x, y, spot_x, spot_y, sigma):
    distance_sq = (x - spot_x) ** 2 + (y - spot_y) ** 2
    return np.exp(-distance_sq / (2.0 * sigma * sigma))


def pattern_frame(
    pattern: PatternType,
    t: int,
    dims: Dimensions,
    base_intensity: float,
    rng: np.random.Generator,
) -> np.ndarray:
    """Evaluate a pattern over one (height, width) frame at time point ``t``.

    Args:
        pattern: Pattern variant
        t: Time index, used by the spot patterns
        dims: Array dimensions (only height and width matter)
        base_intensity: Scale for gradient, circles, sine and spot backgrounds
        rng: Source for the :class:`Noise` variant

    Returns:
        float64 array of shape (height, width)
    """
    x, y = _pixel_grid(dims)
    center_x = dims.width / 2.0
    center_y = dims.height / 2.0
    max_distance = math.hypot(center_x, center_y)
    shape = (dims.height, dims.width)

    if isinstance(pattern, Uniform):
        return np.full(shape, pattern.value, dtype=np.float64)

    if isinstance(pattern, Gradient):
        dx = x / dims.width
        dy = y / dims.height
        return base_intensity * (dx + dy) / 2.0

    if isinstance(pattern, Circles):
        distance = np.hypot(x - center_x, y - center_y)
        return base_intensity * np.maximum(1.0 - distance / max_distance, 0.0)

    if isinstance(pattern, Noise):
        return pattern.min + rng.random(shape) * (pattern.max - pattern.min)

    if isinstance(pattern, GaussianSpots):
        value = np.full(shape, base_intensity * 0.1)
        for spot_id in range(pattern.num_spots):
            placement = spot_rng(spot_id, t)
            spot_x = placement.random() * dims.width
            spot_y = placement.random() * dims.height
            sigma = 10.0 + placement.random() * 20.0
            value += pattern.intensity * _gaussian(x, y, spot_x, spot_y, sigma)
        return value

    if isinstance(pattern, SineWave):
        phase = 2.0 * math.pi * pattern.frequency
        wave_x = np.sin(x * phase / dims.width)
        wave_y = np.sin(y * phase / dims.height)
        return base_intensity + pattern.amplitude * wave_x * wave_y

    if isinstance(pattern, MovingSpots):
        value = np.full(shape, base_intensity * 0.2)
        radius = 50.0
        for spot_id in range(pattern.num_spots):
            angle = t * pattern.speed + spot_id * 2.0 * math.pi / pattern.num_spots
            spot_x = center_x + radius * math.cos(angle)
            spot_y = center_y + radius * math.sin(angle)
            value += 500.0 * _gaussian(x, y, spot_x, spot_y, 15.0)
        return value

    raise TypeError(f"Unknown pattern type: {pattern!r}")


def generate(config: GeneratorConfig) -> Array6D:
    """Generate a 6D array from a configuration.

    Raises:
        DimensionError: If any dimension is zero
        CapacityError: If the array would exceed the memory ceiling
        ChannelPatternCountError: If channel patterns do not match the channel axis
    """
    dims = config.dimensions
    dims.validate()

    if len(config.channel_patterns) != dims.channel:
        raise ChannelPatternCountError(
            f"Number of channel patterns ({len(config.channel_patterns)}) must match "
            f"channel dimension ({dims.channel})"
        )

    rng = np.random.default_rng(config.seed)
    data = np.zeros(dims.shape(), dtype=DTYPE)
    frame_shape = (dims.height, dims.width)

    logger.debug(f"Generating {dims} array ({dims.memory_mb()} MB)")
    for c, (name, pattern) in enumerate(config.channel_patterns):
        logger.debug(f"Channel {c} ({name}): {pattern}")
        for t in range(dims.time):
            for p in range(dims.position):
                for z in range(dims.z):
                    value = pattern_frame(pattern, t, dims, config.base_intensity, rng)
                    noise = rng.uniform(-1.0, 1.0, frame_shape) * config.noise_level
                    data[t, p, z, c] = np.maximum(value + noise, 0.0)

    channel_names = [name for name, _ in config.channel_patterns]
    return Array6D(
        data,
        dims,
        config.pixel_size_um,
        config.time_interval_s,
        channel_names,
        config.data_type,
    )


def generate_test_array(t: int, p: int, z: int, c: int, h: int, w: int) -> Array6D:
    """Noise-free array with the default channel patterns."""
    config = (
        GeneratorConfig.new(Dimensions(t, p, z, c, h, w))
        .with_base_intensity(100.0)
        .with_noise_level(0.0)
    )
    return generate(config)


def generate_minimal(seed: Optional[int] = None) -> Array6D:
    """Small two-channel array of uniform values with light noise."""
    dims = Dimensions.new_2d(2, 1, 2, 8, 8)
    config = (
        GeneratorConfig.new(dims)
        .with_channels([("Test1", Uniform(50.0)), ("Test2", Uniform(150.0))])
        .with_base_intensity(100.0)
        .with_noise_level(5.0)
        .with_seed(seed)
    )
    return generate(config)
