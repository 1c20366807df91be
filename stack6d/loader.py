"""Data loading service for viewers consuming 6D arrays.

Callers that only need shape and calibration use :func:`load_array_file`,
which reads the metadata file and checks the data file size without reading
the samples. :func:`load_full_array` pays for the full payload.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from loguru import logger

from stack6d.array6d import Array6D
from stack6d.dimensions import BYTES_PER_SAMPLE, MIB, Dimensions
from stack6d.errors import Stack6DError
from stack6d.formats import PathLike, data_path_for, load_array, validate_file
from stack6d.stats import FrameStats


@dataclass
class MicroscopyMetadata:
    """Summary of a stored array for display."""

    file_path: str
    dimensions: Dimensions
    pixel_size_um: float
    time_interval_s: float
    channel_names: List[str]
    data_type: str
    memory_usage_mb: int

    @classmethod
    def from_array(cls, array: Array6D, file_path: str = "") -> "MicroscopyMetadata":
        return cls(
            file_path=file_path,
            dimensions=array.dimensions,
            pixel_size_um=array.pixel_size_um,
            time_interval_s=array.time_interval_s,
            channel_names=array.channel_names,
            data_type=array.data_type,
            memory_usage_mb=array.memory_usage_mb(),
        )


def load_array_file(file_path: PathLike) -> MicroscopyMetadata:
    """Read metadata of a stored array without loading its samples."""
    path = Path(file_path)
    metadata = validate_file(path)

    return MicroscopyMetadata(
        file_path=str(path),
        dimensions=metadata.dimensions,
        pixel_size_um=metadata.pixel_size_um,
        time_interval_s=metadata.time_interval_s,
        channel_names=metadata.channel_names,
        data_type=metadata.data_type,
        memory_usage_mb=(metadata.dimensions.total_elements() * BYTES_PER_SAMPLE) // MIB,
    )


def load_full_array(file_path: PathLike) -> Array6D:
    return load_array(file_path)


def get_frame_statistics(
    file_path: PathLike,
    t: int,
    p: int,
    z: int,
    c: int,
    saturation_threshold: float,
) -> FrameStats:
    """Statistics of one frame of a stored array.

    The whole array is loaded; the split format has no frame index.
    """
    array = load_array(file_path)
    return array.get_frame_stats(t, p, z, c, saturation_threshold)


def is_valid_6d_file(file_path: PathLike) -> bool:
    """True if both files exist and the pair passes :func:`validate_file`."""
    path = Path(file_path)
    if not path.exists() or not data_path_for(path).exists():
        return False

    try:
        validate_file(path)
    except (Stack6DError, OSError) as e:
        logger.debug(f"{path.name} is not a valid 6D file: {e}")
        return False
    return True


def get_file_info(file_path: PathLike) -> Tuple[int, int]:
    """Sizes in bytes of the metadata file and the data file."""
    path = Path(file_path)
    meta_size = path.stat().st_size
    data_size = data_path_for(path).stat().st_size
    return meta_size, data_size
