"""Split-format persistence for 6D arrays.

A logical array is stored as two files:

- ``<name>.meta``: pretty-printed JSON metadata (dimensions, calibration,
  channel names, data type, format version, creation time)
- ``<name>.data``: raw little-endian float32 samples in C-order
  (TPZCYX, X fastest) with no header

The data file name is the metadata path with its extension replaced by
:data:`DATA_SUFFIX`.
"""

import json
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Union

import numpy as np
from loguru import logger

from stack6d.array6d import DTYPE, Array6D
from stack6d.dimensions import AXIS_NAMES, BYTES_PER_SAMPLE, Dimensions
from stack6d.errors import (
    DataFileNotFoundError,
    DimensionError,
    MetadataParseError,
    NonContiguousBufferError,
    PathConflictError,
    SizeMismatchError,
)

FORMAT_VERSION = "1.0"
META_SUFFIX = ".meta"
DATA_SUFFIX = ".data"
METADATA_SIZE_ESTIMATE = 1024

# On-disk sample layout, independent of host byte order
DISK_DTYPE = np.dtype("<f4")

PathLike = Union[str, Path]


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _positive_real(raw: Dict[str, Any], key: str) -> float:
    value = raw[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MetadataParseError(f"'{key}' must be a number, got {value!r}")
    if not math.isfinite(value) or value <= 0:
        raise MetadataParseError(f"'{key}' must be a positive number, got {value!r}")
    return float(value)


@dataclass
class ArrayMetadata:
    """Non-bulk fields of an :class:`Array6D` as written to the metadata file."""

    dimensions: Dimensions
    pixel_size_um: float
    time_interval_s: float
    channel_names: List[str]
    data_type: str
    format_version: str = FORMAT_VERSION
    created_at: str = field(default_factory=_utc_timestamp)

    @classmethod
    def from_array(cls, array: Array6D) -> "ArrayMetadata":
        return cls(
            dimensions=array.dimensions,
            pixel_size_um=array.pixel_size_um,
            time_interval_s=array.time_interval_s,
            channel_names=array.channel_names,
            data_type=array.data_type,
        )

    def expected_data_bytes(self) -> int:
        return self.dimensions.total_elements() * BYTES_PER_SAMPLE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dimensions": self.dimensions.to_dict(),
            "pixel_size_um": self.pixel_size_um,
            "time_interval_s": self.time_interval_s,
            "channel_names": list(self.channel_names),
            "data_type": self.data_type,
            "format_version": self.format_version,
            "created_at": self.created_at,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> "ArrayMetadata":
        """Parse metadata JSON.

        Raises:
            MetadataParseError: On malformed JSON, missing fields or bad values
        """
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise MetadataParseError(f"Invalid metadata JSON: {e}") from e

        if not isinstance(raw, dict):
            raise MetadataParseError("Metadata must be a JSON object")

        try:
            dims_raw = raw["dimensions"]
            for name in AXIS_NAMES:
                value = dims_raw[name]
                if isinstance(value, bool) or not isinstance(value, int):
                    raise MetadataParseError(
                        f"Dimension '{name}' must be an integer, got {value!r}"
                    )
            dimensions = Dimensions.from_dict(dims_raw)
            dimensions.check_positive()

            channel_names = raw["channel_names"]
            if not isinstance(channel_names, list) or not all(
                isinstance(name, str) for name in channel_names
            ):
                raise MetadataParseError("channel_names must be a list of strings")

            return cls(
                dimensions=dimensions,
                pixel_size_um=_positive_real(raw, "pixel_size_um"),
                time_interval_s=_positive_real(raw, "time_interval_s"),
                channel_names=channel_names,
                data_type=str(raw["data_type"]),
                format_version=str(raw["format_version"]),
                created_at=str(raw["created_at"]),
            )
        except MetadataParseError:
            raise
        except KeyError as e:
            raise MetadataParseError(f"Missing metadata field: {e}") from e
        except (TypeError, ValueError, DimensionError) as e:
            raise MetadataParseError(f"Invalid metadata value: {e}") from e


def data_path_for(path: PathLike) -> Path:
    """Path of the binary data file paired with a metadata path."""
    return Path(path).with_suffix(DATA_SUFFIX)


def _paired_paths(path: PathLike):
    path = Path(path)
    data_path = data_path_for(path)
    if data_path == path:
        raise PathConflictError(
            f"Metadata path {path} must not use the {DATA_SUFFIX} extension"
        )
    return path, data_path


def encode_samples(data: np.ndarray) -> bytes:
    """Convert a C-contiguous float32 buffer to little-endian bytes.

    Raises:
        NonContiguousBufferError: If the buffer is not C-contiguous
    """
    if not data.flags.c_contiguous:
        raise NonContiguousBufferError("Array data is not contiguous in memory")
    return data.astype(DISK_DTYPE, copy=False).tobytes(order="C")


def decode_samples(buffer: bytes, dimensions: Dimensions) -> np.ndarray:
    """Convert little-endian bytes back to a native float32 array of ``dimensions.shape()``.

    Raises:
        SizeMismatchError: If the byte count does not match the dimensions
    """
    expected = dimensions.total_elements() * BYTES_PER_SAMPLE
    if len(buffer) != expected:
        raise SizeMismatchError(expected, len(buffer))
    samples = np.frombuffer(buffer, dtype=DISK_DTYPE)
    return samples.astype(DTYPE).reshape(dimensions.shape())


def _read_metadata(path: Path) -> ArrayMetadata:
    raw = path.read_bytes()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MetadataParseError(f"Metadata is not valid UTF-8: {e}") from e
    return ArrayMetadata.from_json(text)


def save_array(array: Array6D, path: PathLike):
    """Save an array as a metadata file at ``path`` plus a sibling data file.

    Raises:
        NonContiguousBufferError: If the array buffer is not contiguous
        PathConflictError: If the path has the data file extension
        OSError: If either file cannot be written
    """
    path, data_path = _paired_paths(path)

    payload = encode_samples(array.data)
    metadata = ArrayMetadata.from_array(array)

    path.write_text(metadata.to_json(), encoding="utf-8")
    logger.debug(f"Wrote metadata: {path}")

    data_path.write_bytes(payload)
    logger.debug(f"Wrote {len(payload)} bytes: {data_path}")

    logger.info(f"Saved {array.dimensions} array to {path.name} + {data_path.name}")


def load_array(path: PathLike) -> Array6D:
    """Load an array saved by :func:`save_array`.

    Raises:
        FileNotFoundError: If the metadata file is missing
        MetadataParseError: If the metadata is malformed
        PathConflictError: If the path has the data file extension
        DataFileNotFoundError: If the data file is missing
        SizeMismatchError: If the data file length disagrees with the metadata
    """
    path, data_path = _paired_paths(path)
    metadata = _read_metadata(path)

    try:
        buffer = data_path.read_bytes()
    except FileNotFoundError as e:
        raise DataFileNotFoundError(f"Data file not found: {data_path}") from e
    logger.debug(f"Read {len(buffer)} bytes: {data_path}")

    data = decode_samples(buffer, metadata.dimensions)
    array = Array6D(
        data,
        metadata.dimensions,
        metadata.pixel_size_um,
        metadata.time_interval_s,
        metadata.channel_names,
        metadata.data_type,
    )
    logger.info(f"Loaded {metadata.dimensions} array from {path.name}")
    return array


def validate_file(path: PathLike) -> ArrayMetadata:
    """Check a split-format file pair without reading the sample data.

    Returns:
        Parsed metadata

    Raises:
        FileNotFoundError: If the metadata file is missing
        MetadataParseError: If the metadata is malformed
        PathConflictError: If the path has the data file extension
        DataFileNotFoundError: If the data file is missing
        SizeMismatchError: If the data file length disagrees with the metadata
    """
    path, data_path = _paired_paths(path)
    metadata = _read_metadata(path)

    if not data_path.is_file():
        raise DataFileNotFoundError(f"Data file not found: {data_path}")

    actual = data_path.stat().st_size
    expected = metadata.expected_data_bytes()
    if actual != expected:
        raise SizeMismatchError(expected, actual)

    logger.debug(f"Validated {path.name}: {metadata.dimensions}")
    return metadata


def estimate_file_size(array: Array6D) -> int:
    """Approximate bytes on disk: raw samples plus a metadata allowance."""
    return array.memory_usage() + METADATA_SIZE_ESTIMATE * 2
