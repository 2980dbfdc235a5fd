from dataclasses import dataclass
import numpy as np
from pathlib import Path
from PIL import Image
from typing import Dict, List, Tuple, Union

from bead.palette_tools import Color, color_key, map_image_to_palette
from bead.quantize import quantize_pixels
from bead.sample import sample

DEFAULT_GRID_SIZE = 30
DEFAULT_NUM_COLORS = 16


@dataclass(frozen=True, eq=False)
class QuantizedResult:
    """Remapped pixel grid plus the color -> symbol legend that covers every cell."""

    pixels: np.ndarray
    symbol_map: Dict[Color, str]

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    def color_at(self, row: int, col: int) -> Color:
        return color_key(self.pixels[row, col])

    def symbol_at(self, row: int, col: int) -> str:
        return self.symbol_map[self.color_at(row, col)]

    def color_counts(self) -> Dict[Color, int]:
        """Number of cells using each legend color, in legend order (unused colors count 0)."""
        unique_colors, counts = np.unique(self.pixels.reshape(-1, 3), axis=0, return_counts=True)
        used = {color_key(color): int(count) for color, count in zip(unique_colors, counts)}
        return {color: used.get(color, 0) for color in self.symbol_map}

    def legend_entries(self) -> List[Tuple[Color, str, int]]:
        counts = self.color_counts()
        return [(color, symbol, counts[color]) for color, symbol in self.symbol_map.items()]


def generate_pattern(
    image: Union[Image.Image, str, Path],
    grid_size: int = DEFAULT_GRID_SIZE,
    num_colors: int = DEFAULT_NUM_COLORS,
    rng=None,
) -> QuantizedResult:
    """
    Turn an image into a bead/stitch pattern.

    Samples the image down to a grid whose longer side is grid_size cells, clusters
    the grid colors into at most num_colors palette entries, and snaps every cell
    to its nearest palette color.

    Args:
        image: PIL Image or path to an image file.
        grid_size: Longer side of the pattern, in cells.
        num_colors: Target palette size.
        rng: Random source for the clustering step (see quantize.RandomSource).

    Returns:
        QuantizedResult: The remapped grid and its symbol legend.
    """
    pixels = sample(image, grid_size)
    palette = quantize_pixels(pixels, num_colors, rng=rng)
    mapped, symbol_map = map_image_to_palette(pixels, palette)
    mapped.flags.writeable = False
    return QuantizedResult(pixels=mapped, symbol_map=symbol_map)
