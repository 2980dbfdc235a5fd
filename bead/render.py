from PIL import Image, ImageDraw, ImageFont, ImageColor
import os
from typing import Optional, Tuple

from bead.pattern import QuantizedResult


def load_font(font_path: Optional[str], font_size: int) -> ImageFont.ImageFont:
    """Load a TrueType font, falling back to Arial and then Pillow's built-in font."""
    font_to_use = None
    if font_path and os.path.isfile(font_path):
        try:
            font_to_use = ImageFont.truetype(font_path, font_size)
        except IOError:
            pass
    if font_to_use is None:
        try:
            font_to_use = ImageFont.truetype("arial.ttf", font_size)
        except IOError:
            try:
                font_to_use = ImageFont.load_default(size=font_size)
            except TypeError:  # Pillow < 10.1 has no size argument
                font_to_use = ImageFont.load_default()
    return font_to_use


def contrast_color(rgb: Tuple[int, int, int]) -> Tuple[int, int, int]:
    """Black or white, whichever reads better on top of rgb."""
    brightness = (rgb[0] * 299 + rgb[1] * 587 + rgb[2] * 114) / 1000
    return (0, 0, 0) if brightness > 128 else (255, 255, 255)


def render_guide_image(result: QuantizedResult) -> Image.Image:
    """The quantized grid at one pixel per cell."""
    return Image.fromarray(result.pixels.copy(), "RGB")


def render_pattern_image(
    result: QuantizedResult,
    cell_size: int = 20,
    show_symbols: bool = True,
    show_grid_lines: bool = True,
    font_path: Optional[str] = None,
    grid_line_color: str = "#cccccc",
) -> Image.Image:
    """
    Draw the pattern chart: one filled square per cell, optionally overlaid with
    the cell's legend symbol and a grid.

    Args:
        result: Pattern to draw.
        cell_size: Edge length of one cell in pixels.
        show_symbols: Draw each cell's symbol in a contrasting color.
        show_grid_lines: Outline every cell.
        font_path: Optional .ttf for symbols.
        grid_line_color: Any color string Pillow understands.

    Returns:
        PIL.Image.Image: RGB image of size (width * cell_size, height * cell_size).
    """
    if cell_size < 1:
        raise ValueError(f"cell_size must be positive, got {cell_size}")

    output_img = Image.new("RGB", (result.width * cell_size, result.height * cell_size), color=(255, 255, 255))
    draw = ImageDraw.Draw(output_img)
    line_rgb = ImageColor.getrgb(grid_line_color)
    font = load_font(font_path, max(1, int(cell_size * 0.6))) if show_symbols else None

    for y in range(result.height):
        for x in range(result.width):
            pixel = result.color_at(y, x)
            pos_x, pos_y = x * cell_size, y * cell_size
            box = [pos_x, pos_y, pos_x + cell_size - 1, pos_y + cell_size - 1]

            draw.rectangle(box, fill=pixel, outline=line_rgb if show_grid_lines else None)

            if show_symbols:
                symbol = result.symbol_map.get(pixel, "")
                center = (pos_x + cell_size / 2.0, pos_y + cell_size / 2.0)
                try:
                    draw.text(center, symbol, font=font, fill=contrast_color(pixel), anchor="mm")
                except ValueError:
                    # Bitmap fonts cannot anchor; center by bounding box instead
                    bbox = draw.textbbox((0, 0), symbol, font=font)
                    draw.text(
                        (center[0] - (bbox[2] - bbox[0]) / 2.0 - bbox[0], center[1] - (bbox[3] - bbox[1]) / 2.0 - bbox[1]),
                        symbol,
                        font=font,
                        fill=contrast_color(pixel),
                    )
    return output_img
