"""Exception types raised by the 6D array engine."""


class Stack6DError(Exception):
    """Base class for all engine errors."""


class DimensionError(Stack6DError, ValueError):
    """A dimension field is zero."""


class CapacityError(Stack6DError, ValueError):
    """Estimated memory of an array exceeds the configured ceiling."""

    def __init__(self, memory_mb, max_memory_mb):
        self.memory_mb = memory_mb
        self.max_memory_mb = max_memory_mb
        super().__init__(
            f"Array would use {memory_mb}MB memory, maximum is {max_memory_mb}MB"
        )


class ShapeMismatchError(Stack6DError, ValueError):
    """Buffer shape does not match the declared dimensions."""


class ChannelCountError(Stack6DError, ValueError):
    """Number of channel names does not match the channel dimension."""


class IndexOutOfBoundsError(Stack6DError, IndexError):
    """Frame index outside the extent of one axis."""

    def __init__(self, axis, index, extent):
        self.axis = axis
        self.index = index
        self.extent = extent
        super().__init__(
            f"{axis} index {index} out of bounds (valid range: 0..{extent - 1})"
        )


class FrameShapeMismatchError(Stack6DError, ValueError):
    """Frame written to an array has the wrong (height, width)."""


class ChannelPatternCountError(Stack6DError, ValueError):
    """Number of channel patterns does not match the channel dimension."""


class FormatError(Stack6DError):
    """Base class for persistence failures."""


class NonContiguousBufferError(FormatError, ValueError):
    """In-memory buffer is not C-contiguous and cannot be written as-is."""


class MetadataParseError(FormatError, ValueError):
    """Metadata file is not valid structured text or lacks required fields."""


class DataFileNotFoundError(FormatError, FileNotFoundError):
    """Binary data file paired with a metadata file is missing."""


class SizeMismatchError(FormatError, ValueError):
    """Binary data file length disagrees with the metadata dimensions."""

    def __init__(self, expected, actual):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Data file size mismatch: expected {expected} bytes, got {actual}"
        )


class PathConflictError(FormatError, ValueError):
    """Metadata path and data path of a split-format pair are the same file."""
