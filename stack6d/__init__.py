from loguru import logger

from stack6d.array6d import Array6D
from stack6d.dimensions import Dimensions
from stack6d.errors import (
    CapacityError,
    ChannelCountError,
    ChannelPatternCountError,
    DataFileNotFoundError,
    DimensionError,
    FormatError,
    FrameShapeMismatchError,
    IndexOutOfBoundsError,
    MetadataParseError,
    NonContiguousBufferError,
    PathConflictError,
    ShapeMismatchError,
    SizeMismatchError,
    Stack6DError,
)
from stack6d.formats import ArrayMetadata, load_array, save_array, validate_file
from stack6d.generators import GeneratorConfig, generate
from stack6d.stats import FrameStats

# Library code stays quiet unless the application enables it
logger.disable("stack6d")

__version__ = "0.1.0"
