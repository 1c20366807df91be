"""Descriptive statistics over a single 2D frame."""

from dataclasses import dataclass, asdict

import numpy as np


@dataclass(frozen=True)
class FrameStats:
    """Summary statistics of one (height, width) frame.

    All values are computed in float64 even though samples are stored as
    float32. ``std_dev`` uses the population formula (divisor N).
    """

    mean: float
    median: float
    std_dev: float
    min: float
    max: float
    total_pixels: int
    saturated_pixels: int
    saturation_threshold: float

    @classmethod
    def from_frame(cls, frame: np.ndarray, saturation_threshold: float) -> "FrameStats":
        """Compute statistics for a frame view.

        Args:
            frame: 2D array view of pixel values
            saturation_threshold: Pixels at or above this value count as saturated

        Returns:
            FrameStats for the frame; all numeric fields are zero for an empty frame
        """
        values = np.asarray(frame, dtype=np.float64).ravel()
        total_pixels = int(values.size)

        if total_pixels == 0:
            return cls(
                mean=0.0,
                median=0.0,
                std_dev=0.0,
                min=0.0,
                max=0.0,
                total_pixels=0,
                saturated_pixels=0,
                saturation_threshold=saturation_threshold,
            )

        sorted_values = np.sort(values)
        mean = float(values.sum() / total_pixels)

        middle = total_pixels // 2
        if total_pixels % 2 == 0:
            median = float((sorted_values[middle - 1] + sorted_values[middle]) / 2.0)
        else:
            median = float(sorted_values[middle])

        variance = float(np.sum((values - mean) ** 2) / total_pixels)

        return cls(
            mean=mean,
            median=median,
            std_dev=float(np.sqrt(variance)),
            min=float(sorted_values[0]),
            max=float(sorted_values[-1]),
            total_pixels=total_pixels,
            saturated_pixels=int(np.count_nonzero(values >= saturation_threshold)),
            saturation_threshold=saturation_threshold,
        )

    def to_dict(self):
        return asdict(self)
