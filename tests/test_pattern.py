# tests/test_pattern.py
import numpy as np
import pytest
from PIL import Image, ImageDraw
from bead import pattern
from bead.errors import InvalidDimensions, InvalidK
from bead.quantize import RandomSource


def create_dummy_image():
    img = Image.new("RGB", (256, 128), color=(150, 120, 200))
    draw = ImageDraw.Draw(img)
    draw.rectangle([(20, 20), (120, 100)], fill=(200, 50, 50))
    draw.ellipse([(140, 10), (240, 110)], fill=(50, 200, 50))
    return img


def test_generate_pattern_shape_and_legend_coverage():
    result = pattern.generate_pattern(create_dummy_image(), grid_size=30, num_colors=4, rng=RandomSource())

    assert (result.width, result.height) == (30, 15)
    assert result.pixels.shape == (15, 30, 3)
    assert 1 <= len(result.symbol_map) <= 4
    for color in result.pixels.reshape(-1, 3).tolist():
        assert tuple(color) in result.symbol_map


def test_generate_pattern_result_is_read_only():
    result = pattern.generate_pattern(create_dummy_image(), grid_size=10, num_colors=3)
    with pytest.raises(ValueError):
        result.pixels[0, 0] = (1, 2, 3)


def test_generate_pattern_single_color():
    result = pattern.generate_pattern(create_dummy_image(), grid_size=12, num_colors=1)

    assert len(result.symbol_map) == 1
    (only_color, only_symbol), = result.symbol_map.items()
    assert only_symbol == "A"
    assert (result.pixels == np.array(only_color, dtype=np.uint8)).all()


def test_generate_pattern_single_color_is_rounded_mean():
    img = Image.new("RGB", (2, 1))
    img.putpixel((0, 0), (0, 0, 0))
    img.putpixel((1, 0), (255, 101, 3))

    result = pattern.generate_pattern(img, grid_size=2, num_colors=1)

    # 127.5, 50.5, 1.5 all round up
    assert result.symbol_map == {(128, 51, 2): "A"}
    assert result.symbol_at(0, 0) == "A"


def test_generate_pattern_more_colors_than_cells():
    img = Image.new("RGB", (2, 2))
    colors = [(10, 0, 0), (0, 20, 0), (0, 0, 30), (40, 40, 40)]
    for idx, color in enumerate(colors):
        img.putpixel((idx % 2, idx // 2), color)

    result = pattern.generate_pattern(img, grid_size=2, num_colors=10)

    assert result.pixels.reshape(-1, 3).tolist() == [list(c) for c in colors]
    assert list(result.symbol_map.values()) == ["A", "B", "C", "D"]


def test_color_counts_and_legend_entries():
    result = pattern.generate_pattern(create_dummy_image(), grid_size=20, num_colors=5, rng=RandomSource(7))

    counts = result.color_counts()
    assert list(counts) == list(result.symbol_map)
    assert sum(counts.values()) == result.width * result.height

    entries = result.legend_entries()
    assert [symbol for _, symbol, _ in entries] == list(result.symbol_map.values())
    assert all(count == counts[color] for color, _, count in entries)


def test_generate_pattern_propagates_errors():
    with pytest.raises(InvalidDimensions):
        pattern.generate_pattern(create_dummy_image(), grid_size=0, num_colors=4)
    with pytest.raises(InvalidK):
        pattern.generate_pattern(create_dummy_image(), grid_size=10, num_colors=0)
