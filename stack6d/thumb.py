"""Frame thumbnail rendering."""

import time
from pathlib import Path
from typing import Tuple

import numpy as np
from PIL import Image
from loguru import logger

from stack6d.array6d import Array6D


def frame_to_uint8(frame: np.ndarray) -> np.ndarray:
    """Scale a float frame to 8 bits for display.

    Uses 2nd/98th percentile limits and square root scaling, which keeps dim
    structure visible next to bright spots. A flat frame maps to zeros.
    """
    if frame.dtype == np.uint8:
        return frame

    if frame.size == 0:
        return np.zeros(frame.shape, dtype=np.uint8)

    p2, p98 = np.percentile(frame, [2, 98])
    if p98 > p2:
        normalized = np.clip((frame - p2) / (p98 - p2), 0, 1)
        normalized = np.sqrt(normalized)
        return (normalized * 255).astype(np.uint8)
    return np.zeros(frame.shape, dtype=np.uint8)


def save_frame_thumbnail(
    array: Array6D,
    output_path: Path,
    t: int = 0,
    p: int = 0,
    z: int = 0,
    c: int = 0,
    max_size: Tuple[int, int] = (512, 512),
) -> Path:
    """Render one frame as a grayscale PNG.

    Args:
        array: Source array
        output_path: Destination PNG path
        t: Time index
        p: Position index
        z: Z index
        c: Channel index
        max_size: Maximum thumbnail dimensions (width, height)

    Returns:
        Path to the saved thumbnail
    """
    start_time = time.time()
    output_path = Path(output_path)

    frame = array.get_frame(t, p, z, c)
    pil_image = Image.fromarray(frame_to_uint8(frame))
    pil_image.thumbnail(max_size, Image.Resampling.LANCZOS)
    pil_image.save(output_path, "PNG")

    elapsed = time.time() - start_time
    logger.debug(f"Thumbnail t={t} p={p} z={z} c={c} saved in {elapsed:.2f}s: {output_path}")
    return output_path
