from PIL import Image, ImageDraw
import math
from typing import List, Optional, Sequence, Tuple

from bead.render import contrast_color, load_font

LegendEntry = Tuple[Tuple[int, int, int], str, int]


def rgb_to_hex(rgb) -> str:
    return "#" + "".join(f"{int(c):02x}" for c in rgb[:3])


def format_legend_lines(legend_entries: Sequence[LegendEntry]) -> List[str]:
    """Plain-text legend: one line per color plus a total."""
    lines = [f"{symbol}  {rgb_to_hex(color)}  rgb{tuple(int(c) for c in color)}  x{count}" for color, symbol, count in legend_entries]
    lines.append(f"{len(legend_entries)} colors in total")
    return lines


def _centered_text(draw, box_center, text, font, fill):
    # bbox offsets keep glyphs centered regardless of font ascent
    bbox = draw.textbbox((0, 0), text, font=font)
    text_w = bbox[2] - bbox[0]
    text_h = bbox[3] - bbox[1]
    draw.text(
        (box_center[0] - text_w / 2.0 - bbox[0], box_center[1] - text_h / 2.0 - bbox[1]),
        text,
        fill=fill,
        font=font,
    )


def create_legend_image(
    legend_entries: Sequence[LegendEntry],
    font_path: Optional[str] = None,
    font_size: int = 14,
    swatch_size: int = 40,
    padding: int = 10,
    columns: Optional[int] = None,
) -> Optional[Image.Image]:
    """
    Creates a pattern legend PIL Image: one swatch per color with its symbol
    drawn on it and its cell count written underneath.

    Args:
        legend_entries: (rgb, symbol, count) triples, e.g. QuantizedResult.legend_entries().
        font_path (str, optional): Path to a TTF font file.
        font_size (int): Font size for symbols and counts.
        swatch_size (int): Width/height of each color swatch.
        padding (int): Space around elements and between swatches.
        columns (int, optional): Swatches per row. Default: all in one row.

    Returns:
        PIL.Image.Image: The generated legend image, or None if there are no entries.
    """
    num_colors = len(legend_entries)
    if num_colors == 0:
        return None

    cols = min(num_colors, columns) if columns else num_colors
    rows = math.ceil(num_colors / cols)
    row_height = swatch_size + font_size + padding

    width = (swatch_size * cols) + (padding * (cols + 1))
    height = (row_height * rows) + padding

    image = Image.new("RGB", (width, height), color=(255, 255, 255))
    draw = ImageDraw.Draw(image)
    font = load_font(font_path, font_size)

    for idx, (color, symbol, count) in enumerate(legend_entries):
        fill_color = tuple(int(c) for c in color)
        x_start = padding + (idx % cols) * (swatch_size + padding)
        y_start = padding + (idx // cols) * row_height

        draw.rectangle(
            [x_start, y_start, x_start + swatch_size, y_start + swatch_size],
            fill=fill_color,
            outline=(0, 0, 0),
        )
        swatch_center = (x_start + swatch_size / 2.0, y_start + swatch_size / 2.0)
        _centered_text(draw, swatch_center, symbol, font, contrast_color(fill_color))

        count_center = (x_start + swatch_size / 2.0, y_start + swatch_size + (font_size + padding) / 2.0)
        _centered_text(draw, count_center, str(count), font, (0, 0, 0))

    return image
