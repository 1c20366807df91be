"""Shape descriptor for 6D microscopy arrays.

Arrays follow the TPZCYX convention:

- T: time points
- P: stage positions
- Z: z-stack depth
- C: channels
- Y: height
- X: width
"""

import os
from dataclasses import dataclass, fields
from typing import Dict, Tuple

from stack6d.errors import CapacityError, DimensionError

BYTES_PER_SAMPLE = 4
MIB = 1024 * 1024
DEFAULT_MAX_MEMORY_MB = 1024
MAX_MEMORY_ENV = "STACK6D_MAX_MEMORY_MB"

AXIS_NAMES = ("time", "position", "z", "channel", "height", "width")


def max_memory_mb() -> int:
    """Return the memory ceiling in MiB, honouring ``STACK6D_MAX_MEMORY_MB``."""
    value = os.environ.get(MAX_MEMORY_ENV)
    if not value:
        return DEFAULT_MAX_MEMORY_MB
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{MAX_MEMORY_ENV} must be an integer, got {value!r}")


@dataclass(frozen=True)
class Dimensions:
    """Sizes of the six TPZCYX axes.

    Construction never fails; call :meth:`validate` before allocating.
    """

    time: int
    position: int
    z: int
    channel: int
    height: int
    width: int

    @classmethod
    def new_2d(cls, time, position, channel, height, width):
        # type: (int, int, int, int, int) -> Dimensions
        """Create dimensions for a single z-plane."""
        return cls(time, position, 1, channel, height, width)

    def total_elements(self) -> int:
        return (
            self.time
            * self.position
            * self.z
            * self.channel
            * self.height
            * self.width
        )

    def shape(self) -> Tuple[int, int, int, int, int, int]:
        return (self.time, self.position, self.z, self.channel, self.height, self.width)

    def memory_mb(self) -> int:
        """Estimated float32 footprint in whole MiB."""
        return (self.total_elements() * BYTES_PER_SAMPLE) // MIB

    def check_positive(self):
        for name in AXIS_NAMES:
            if getattr(self, name) < 1:
                raise DimensionError(
                    f"All dimensions must be greater than 0 ({name}={getattr(self, name)})"
                )

    def validate(self):
        """Check that every axis is non-empty and the array fits in memory.

        Raises:
            DimensionError: If any axis has size zero
            CapacityError: If the float32 footprint exceeds the memory ceiling
        """
        self.check_positive()

        limit = max_memory_mb()
        memory_mb = self.memory_mb()
        if memory_mb > limit:
            raise CapacityError(memory_mb, limit)

    def to_dict(self) -> Dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, values):
        # type: (Dict[str, int]) -> Dimensions
        return cls(**{name: values[name] for name in AXIS_NAMES})

    def __str__(self):
        return "×".join(str(n) for n in self.shape())
