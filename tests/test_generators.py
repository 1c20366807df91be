import numpy as np
import pytest

from stack6d.dimensions import Dimensions
from stack6d.errors import CapacityError, ChannelPatternCountError, DimensionError
from stack6d.generators import (
    PATTERN_PRESETS,
    Circles,
    GaussianSpots,
    GeneratorConfig,
    Gradient,
    MovingSpots,
    Noise,
    SineWave,
    Uniform,
    generate,
    generate_minimal,
    generate_test_array,
    pattern_frame,
)


def _single_channel(pattern, height=4, width=4, time=1, noise=0.0, base=100.0):
    dims = Dimensions.new_2d(time, 1, 1, height, width)
    return (
        GeneratorConfig.new(dims)
        .with_channels([("Test", pattern)])
        .with_base_intensity(base)
        .with_noise_level(noise)
    )


def test_generator_config_creation():
    dims = Dimensions.new_2d(5, 1, 3, 64, 64)
    config = (
        GeneratorConfig.new(dims)
        .with_pixel_size(0.5)
        .with_time_interval(2.0)
        .with_base_intensity(200.0)
        .with_noise_level(15.0)
    )

    assert config.pixel_size_um == 0.5
    assert config.time_interval_s == 2.0
    assert config.base_intensity == 200.0
    assert config.noise_level == 15.0
    assert config.data_type == "uint16"
    assert [name for name, _ in config.channel_patterns] == [
        "Channel1",
        "Channel2",
        "Channel3",
    ]
    assert config.channel_patterns[0][1] == Gradient()
    assert config.channel_patterns[1][1] == GaussianSpots(num_spots=3, intensity=500.0)


def test_with_channels_count_mismatch():
    dims = Dimensions.new_2d(1, 1, 3, 4, 4)
    with pytest.raises(ChannelPatternCountError):
        GeneratorConfig.new(dims).with_channels(
            [("Only1", Uniform(42.0)), ("Only2", Uniform(84.0))]
        )


def test_generate_rejects_pattern_count_mismatch():
    dims = Dimensions.new_2d(1, 1, 2, 4, 4)
    config = GeneratorConfig(dimensions=dims, channel_patterns=(("A", Uniform(1.0)),))
    with pytest.raises(ChannelPatternCountError):
        generate(config)


def test_generate_propagates_dimension_errors():
    with pytest.raises(DimensionError):
        generate(GeneratorConfig.new(Dimensions(1, 1, 1, 1, 0, 4)))
    with pytest.raises(CapacityError):
        generate(GeneratorConfig.new(Dimensions(1000, 1, 1, 1, 1000, 1000)))


def test_generate_minimal_array():
    array = generate_minimal()

    assert array.dimensions == Dimensions(2, 1, 1, 2, 8, 8)
    assert array.channel_names == ["Test1", "Test2"]
    frame1 = array.get_frame(0, 0, 0, 0)
    frame2 = array.get_frame(0, 0, 0, 1)
    assert frame1[0, 0] != frame2[0, 0]
    assert np.all(np.abs(frame1 - 50.0) <= 5.0)
    assert np.all(np.abs(frame2 - 150.0) <= 5.0)


def test_generate_test_array():
    array = generate_test_array(3, 1, 1, 2, 10, 10)
    assert array.dimensions == Dimensions(3, 1, 1, 2, 10, 10)
    assert array.channel_names == ["Channel1", "Channel2"]


def test_uniform_pattern():
    array = generate(_single_channel(Uniform(42.0)))
    assert np.all(array.get_frame(0, 0, 0, 0) == 42.0)


def test_gradient_pattern_is_monotonic():
    array = generate(_single_channel(Gradient(), height=6, width=9))
    frame = array.get_frame(0, 0, 0, 0)

    assert frame[0, 0] < frame[5, 8]
    assert np.all(np.diff(frame, axis=1) >= 0)
    assert np.all(np.diff(frame, axis=0) >= 0)


def test_circles_peak_at_center():
    array = generate(_single_channel(Circles(), height=9, width=9))
    frame = array.get_frame(0, 0, 0, 0)
    assert frame.max() == frame[4:6, 4:6].max()
    assert frame[0, 0] < frame[4, 4]
    assert frame.min() >= 0.0


def test_noise_pattern_stays_in_range():
    array = generate(_single_channel(Noise(min=50.0, max=150.0), height=10, width=10))
    frame = array.get_frame(0, 0, 0, 0)

    assert np.all((frame >= 50.0) & (frame <= 150.0))
    assert np.any(np.abs(frame - frame[0, 0]) > 1.0)


def test_noise_is_clamped_at_zero():
    array = generate(_single_channel(Uniform(0.0), height=16, width=16, noise=10.0))
    assert array.get_frame(0, 0, 0, 0).min() >= 0.0


def test_seed_makes_generation_reproducible():
    config = _single_channel(Noise(min=0.0, max=10.0), noise=3.0).with_seed(7)
    first = generate(config).data
    second = generate(config).data
    np.testing.assert_array_equal(first, second)


def test_gaussian_spots_are_deterministic_per_time_point():
    dims = Dimensions.new_2d(2, 1, 1, 32, 32)
    rng = np.random.default_rng(0)
    pattern = GaussianSpots(num_spots=2, intensity=500.0)

    t0 = pattern_frame(pattern, 0, dims, 100.0, rng)
    t0_again = pattern_frame(pattern, 0, dims, 100.0, np.random.default_rng(99))
    t1 = pattern_frame(pattern, 1, dims, 100.0, rng)

    np.testing.assert_array_equal(t0, t0_again)
    assert not np.array_equal(t0, t1)
    assert t0.min() >= 10.0


def test_gaussian_spots_identical_across_channels():
    dims = Dimensions.new_2d(1, 1, 2, 16, 16)
    pattern = GaussianSpots(num_spots=3, intensity=500.0)
    config = (
        GeneratorConfig.new(dims)
        .with_channels([("A", pattern), ("B", pattern)])
        .with_noise_level(0.0)
    )
    array = generate(config)
    np.testing.assert_array_equal(array.get_frame(0, 0, 0, 0), array.get_frame(0, 0, 0, 1))


def test_sine_wave_pattern():
    dims = Dimensions.new_2d(1, 1, 1, 8, 8)
    frame = pattern_frame(SineWave(frequency=1.0, amplitude=50.0), 0, dims, 100.0, None)
    assert frame[0, 0] == 100.0
    assert frame[2, 2] == pytest.approx(150.0)
    assert frame.min() >= 50.0 - 1e-9
    assert frame.max() <= 150.0 + 1e-9


def test_moving_spots_move_with_time():
    dims = Dimensions.new_2d(2, 1, 1, 128, 128)
    pattern = MovingSpots(num_spots=1, speed=0.5)
    t0 = pattern_frame(pattern, 0, dims, 100.0, None)
    t1 = pattern_frame(pattern, 1, dims, 100.0, None)

    peak_t0 = np.unravel_index(np.argmax(t0), t0.shape)
    peak_t1 = np.unravel_index(np.argmax(t1), t1.shape)
    # first spot starts to the right of center at angle 0
    assert peak_t0 == (64, 114)
    assert peak_t0 != peak_t1


def test_position_and_z_frames_share_pattern():
    dims = Dimensions(1, 2, 2, 1, 8, 8)
    config = GeneratorConfig.new(dims).with_noise_level(0.0)
    array = generate(config)
    reference = array.get_frame(0, 0, 0, 0)
    np.testing.assert_array_equal(array.get_frame(0, 1, 1, 0), reference)


def test_all_presets_generate():
    dims = Dimensions.new_2d(2, 1, 1, 8, 8)
    for name, pattern in PATTERN_PRESETS.items():
        config = GeneratorConfig.new(dims).with_channels([(name, pattern)])
        array = generate(config)
        assert array.data.min() >= 0.0, name
