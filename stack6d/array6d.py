"""In-memory 6D array container with calibration metadata."""

from typing import List, Sequence

import numpy as np

from stack6d.dimensions import BYTES_PER_SAMPLE, MIB, Dimensions
from stack6d.errors import (
    ChannelCountError,
    FrameShapeMismatchError,
    IndexOutOfBoundsError,
    ShapeMismatchError,
)
from stack6d.stats import FrameStats

DTYPE = np.float32


class Array6D:
    """Dense float32 TPZCYX array with pixel size, time interval and channel names.

    The backing buffer is a single C-contiguous numpy array of shape
    ``dimensions.shape()``; X varies fastest. Dimensions and the number of
    channels are fixed for the lifetime of the container.
    """

    def __init__(
        self,
        data: np.ndarray,
        dimensions: Dimensions,
        pixel_size_um: float,
        time_interval_s: float,
        channel_names: Sequence[str],
        data_type: str,
    ):
        """Wrap an existing buffer.

        Args:
            data: Either a 6D array shaped like ``dimensions.shape()`` or a flat
                buffer with ``dimensions.total_elements()`` samples
            dimensions: Array dimensions
            pixel_size_um: Pixel size in micrometers
            time_interval_s: Time between frames in seconds
            channel_names: One name per channel
            data_type: Free-text description of the original sample type

        Raises:
            ShapeMismatchError: If the buffer does not fit the dimensions
            ChannelCountError: If the channel names do not match the channel axis
        """
        data = np.asarray(data)
        expected_shape = dimensions.shape()

        if data.ndim == 1:
            if data.size != dimensions.total_elements():
                raise ShapeMismatchError(
                    f"Buffer length {data.size} does not match dimensions "
                    f"{expected_shape} ({dimensions.total_elements()} elements)"
                )
            data = data.reshape(expected_shape)
        elif data.shape != expected_shape:
            raise ShapeMismatchError(
                f"Data shape {data.shape} does not match dimensions {expected_shape}"
            )

        if len(channel_names) != dimensions.channel:
            raise ChannelCountError(
                f"Number of channel names ({len(channel_names)}) does not match "
                f"channel dimension ({dimensions.channel})"
            )

        self._data = np.ascontiguousarray(data, dtype=DTYPE)
        if not self._data.flags.writeable:
            self._data = self._data.copy()
        self._dimensions = dimensions
        self._pixel_size_um = float(pixel_size_um)
        self._time_interval_s = float(time_interval_s)
        self._channel_names = tuple(channel_names)
        self._data_type = data_type

    @classmethod
    def zeros(
        cls,
        dimensions: Dimensions,
        pixel_size_um: float,
        time_interval_s: float,
        channel_names: Sequence[str],
        data_type: str,
    ) -> "Array6D":
        """Create a zero-filled array after validating the dimensions."""
        dimensions.validate()
        data = np.zeros(dimensions.shape(), dtype=DTYPE)
        return cls(
            data, dimensions, pixel_size_um, time_interval_s, channel_names, data_type
        )

    @property
    def dimensions(self) -> Dimensions:
        return self._dimensions

    @property
    def pixel_size_um(self) -> float:
        return self._pixel_size_um

    @property
    def time_interval_s(self) -> float:
        return self._time_interval_s

    @property
    def channel_names(self) -> List[str]:
        return list(self._channel_names)

    @property
    def data_type(self) -> str:
        return self._data_type

    @property
    def data(self) -> np.ndarray:
        """Read-only view of the full 6D buffer."""
        view = self._data.view()
        view.flags.writeable = False
        return view

    def _check_index(self, t, p, z, c):
        dims = self._dimensions
        for axis, index, extent in (
            ("Time", t, dims.time),
            ("Position", p, dims.position),
            ("Z", z, dims.z),
            ("Channel", c, dims.channel),
        ):
            if not 0 <= index < extent:
                raise IndexOutOfBoundsError(axis, index, extent)

    def get_frame(self, t: int, p: int, z: int, c: int) -> np.ndarray:
        """Return a read-only (height, width) view of one frame.

        The view shares memory with the container; no data is copied.

        Raises:
            IndexOutOfBoundsError: If any index is outside its axis
        """
        self._check_index(t, p, z, c)
        frame = self._data[t, p, z, c]
        frame.flags.writeable = False
        return frame

    def set_frame(self, t: int, p: int, z: int, c: int, frame: np.ndarray):
        """Overwrite one frame in place.

        Raises:
            IndexOutOfBoundsError: If any index is outside its axis
            FrameShapeMismatchError: If ``frame`` is not (height, width)
        """
        self._check_index(t, p, z, c)

        frame = np.asarray(frame)
        expected = (self._dimensions.height, self._dimensions.width)
        if frame.shape != expected:
            raise FrameShapeMismatchError(
                f"Frame shape {frame.shape} does not match expected "
                f"[{expected[0]}x{expected[1]}]"
            )

        self._data[t, p, z, c] = frame

    def get_frame_stats(
        self, t: int, p: int, z: int, c: int, saturation_threshold: float
    ) -> FrameStats:
        frame = self.get_frame(t, p, z, c)
        return FrameStats.from_frame(frame, saturation_threshold)

    def memory_usage(self) -> int:
        """Size of the sample buffer in bytes."""
        return self._dimensions.total_elements() * BYTES_PER_SAMPLE

    def memory_usage_mb(self) -> int:
        return self.memory_usage() // MIB

    def __repr__(self):
        return (
            f"Array6D(dimensions={self._dimensions}, channels={list(self._channel_names)}, "
            f"pixel_size_um={self._pixel_size_um}, time_interval_s={self._time_interval_s}, "
            f"data_type={self._data_type!r})"
        )
