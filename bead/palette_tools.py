import math
import numpy as np
from typing import Dict, Sequence, Tuple

from bead.errors import EmptyPalette, InvalidDimensions

Color = Tuple[int, int, int]

# Symbols are handed out by palette index and wrap around past the last one.
SYMBOL_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789!@#$%^&*"


def color_distance(c1: Sequence[int], c2: Sequence[int]) -> float:
    """Euclidean distance between two RGB colors."""
    return math.sqrt(
        (int(c1[0]) - int(c2[0])) ** 2
        + (int(c1[1]) - int(c2[1])) ** 2
        + (int(c1[2]) - int(c2[2])) ** 2
    )


def color_key(color) -> Color:
    """Hashable (r, g, b) tuple of plain ints for a numpy row, list or tuple."""
    return (int(color[0]), int(color[1]), int(color[2]))


def as_pixel_matrix(pixels) -> np.ndarray:
    """
    Coerce nested rows of colors (or an existing array) into an HxWx3 uint8 matrix.

    Raises:
        InvalidDimensions: If the rows are ragged, empty, or not RGB triples.
        ValueError: If a channel falls outside 0-255.
    """
    try:
        arr = np.asarray(pixels)
    except ValueError as e:  # numpy refuses inhomogeneous nesting
        raise InvalidDimensions(f"Pixel rows must all have the same width: {e}") from e

    if arr.ndim != 3 or arr.shape[2] != 3 or arr.dtype == object:
        raise InvalidDimensions(f"Expected an HxWx3 pixel matrix, got shape {arr.shape}.")
    if arr.shape[0] < 1 or arr.shape[1] < 1:
        raise InvalidDimensions(f"Pixel matrix must be at least 1x1, got {arr.shape[1]}x{arr.shape[0]}.")

    if arr.dtype != np.uint8:
        if arr.size and (arr.min() < 0 or arr.max() > 255):
            raise ValueError("Color channels must be within 0-255.")
        arr = arr.astype(np.uint8)
    return arr


def nearest_palette_indices(flat_colors: np.ndarray, palette: np.ndarray) -> np.ndarray:
    """
    Index of the nearest palette color for each row of an Nx3 color array.

    Squared integer distances order exactly like Euclidean ones. A later palette
    entry only wins when strictly closer, so ties go to the lowest index.
    """
    flat = np.asarray(flat_colors, dtype=np.int64).reshape((-1, 3))
    pal = np.asarray(palette, dtype=np.int64).reshape((-1, 3))

    best_idx = np.zeros(len(flat), dtype=np.intp)
    best_dist = np.full(len(flat), np.iinfo(np.int64).max, dtype=np.int64)
    for idx, color in enumerate(pal):
        dist = ((flat - color) ** 2).sum(axis=1)
        closer = dist < best_dist
        best_idx[closer] = idx
        best_dist[closer] = dist[closer]
    return best_idx


def assign_symbols(palette) -> Dict[Color, str]:
    """
    Give each palette color the symbol at its index (modulo the alphabet length).

    Duplicate colors collapse onto one key; the later index wins.
    """
    symbol_map: Dict[Color, str] = {}
    for idx, color in enumerate(palette):
        symbol_map[color_key(color)] = SYMBOL_ALPHABET[idx % len(SYMBOL_ALPHABET)]
    return symbol_map


def map_image_to_palette(image_array, palette) -> Tuple[np.ndarray, Dict[Color, str]]:
    """
    Map every pixel in the image to the nearest color in the palette.

    Args:
        image_array: HxWx3 RGB pixel matrix (or nested rows of colors)
        palette: Kx3 palette, in symbol order

    Returns:
        Tuple of (HxWx3 uint8 matrix holding only palette colors, color -> symbol map)

    Raises:
        EmptyPalette: If the palette has no colors.
    """
    pixels = as_pixel_matrix(image_array)
    palette_arr = np.asarray(palette, dtype=np.uint8).reshape((-1, 3))
    if len(palette_arr) == 0:
        raise EmptyPalette("Cannot map pixels onto an empty palette.")

    h, w, _ = pixels.shape
    flat = pixels.reshape((-1, 3))

    # Find nearest palette color for each pixel
    nearest = nearest_palette_indices(flat, palette_arr)
    quantized_flat = palette_arr[nearest]

    return quantized_flat.reshape((h, w, 3)), assign_symbols(palette_arr)
