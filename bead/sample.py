import math
import numpy as np
from pathlib import Path
from PIL import Image, UnidentifiedImageError
from typing import Tuple, Union

from bead.errors import InvalidDimensions, RenderTargetUnavailable


def _round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; grid sizes round .5 away from zero
    return int(math.floor(value + 0.5))


def target_dimensions(width_px: int, height_px: int, box_size: int) -> Tuple[int, int]:
    """
    Fit a width_px x height_px image into a box_size x box_size box, keeping aspect ratio.

    The longer side becomes box_size and the shorter side is scaled and rounded.

    Returns:
        Tuple[int, int]: (target_width, target_height)

    Raises:
        InvalidDimensions: If box_size < 1 or either source dimension is not positive.
    """
    if box_size < 1:
        raise InvalidDimensions(f"Grid size must be at least 1, got {box_size}.")
    if width_px <= 0 or height_px <= 0:
        raise InvalidDimensions(f"Source image has invalid dimensions {width_px}x{height_px}.")

    aspect_ratio = width_px / height_px
    target_width = box_size
    target_height = _round_half_up(box_size / aspect_ratio)

    if target_height > box_size:
        target_height = box_size
        target_width = _round_half_up(box_size * aspect_ratio)

    return max(1, target_width), max(1, target_height)


def sample(image: Union[Image.Image, str, Path], box_size: int) -> np.ndarray:
    """
    Downsample an image to a small RGB pixel matrix whose longer side is box_size.

    Uses box (area-averaging) resampling; alpha is dropped. The input image is not modified.

    Args:
        image: PIL Image, or a path to an image file.
        box_size: Length of the longer output side, in cells.

    Returns:
        np.ndarray: HxWx3 uint8 pixel matrix.

    Raises:
        InvalidDimensions: For a non-positive box_size or source dimension.
        RenderTargetUnavailable: If the image cannot be decoded or resized.
    """
    if box_size < 1:
        raise InvalidDimensions(f"Grid size must be at least 1, got {box_size}.")

    if isinstance(image, (str, Path)):
        try:
            with Image.open(image) as opened:
                opened.load()
                return sample(opened, box_size)
        except FileNotFoundError:
            raise
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            raise RenderTargetUnavailable(f"Could not open image {image}: {e}") from e

    width_px, height_px = image.size
    target_width, target_height = target_dimensions(width_px, height_px, box_size)

    try:
        rgb_image = image.convert("RGB")
        resized = rgb_image.resize((target_width, target_height), Image.Resampling.BOX)
    except (OSError, ValueError, MemoryError) as e:
        raise RenderTargetUnavailable(
            f"Could not resample {width_px}x{height_px} image to {target_width}x{target_height}: {e}"
        ) from e

    return np.array(resized, dtype=np.uint8)
