# tests/test_palette_tools.py
import numpy as np
import pytest
from bead import palette_tools
from bead.errors import EmptyPalette, InvalidDimensions

RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)


def test_color_distance_is_euclidean():
    assert palette_tools.color_distance((0, 0, 0), (3, 4, 0)) == 5.0
    assert palette_tools.color_distance(RED, RED) == 0.0
    # uint8 inputs must not wrap around
    assert palette_tools.color_distance(np.array([0, 0, 0], dtype=np.uint8), np.array([255, 0, 0], dtype=np.uint8)) == 255.0


def test_symbol_alphabet_layout():
    alphabet = palette_tools.SYMBOL_ALPHABET
    assert len(alphabet) == 70
    assert len(set(alphabet)) == 70
    assert alphabet.startswith("ABC")
    assert alphabet.endswith("!@#$%^&*")


def test_assign_symbols_unique_for_distinct_palette():
    palette = [(i, 255 - i, (i * 3) % 256) for i in range(70)]
    symbol_map = palette_tools.assign_symbols(palette)
    assert len(symbol_map) == 70
    assert len(set(symbol_map.values())) == 70
    assert symbol_map[palette[0]] == "A"
    assert symbol_map[palette[69]] == "*"


def test_assign_symbols_wraps_past_alphabet():
    palette = [(i, i, i) for i in range(72)]
    symbol_map = palette_tools.assign_symbols(palette)
    assert symbol_map[(70, 70, 70)] == "A"
    assert symbol_map[(71, 71, 71)] == "B"


def test_assign_symbols_duplicate_colors_last_write_wins():
    symbol_map = palette_tools.assign_symbols([(1, 2, 3), (9, 9, 9), (1, 2, 3)])
    assert symbol_map == {(1, 2, 3): "C", (9, 9, 9): "B"}


def test_map_image_to_palette_uses_only_palette_colors():
    rng = np.random.default_rng(3)
    image = rng.integers(0, 256, size=(6, 9, 3), dtype=np.uint8)
    palette = np.array([RED, GREEN, BLUE, (255, 255, 255)], dtype=np.uint8)

    mapped, symbol_map = palette_tools.map_image_to_palette(image, palette)

    assert mapped.shape == image.shape
    assert mapped.dtype == np.uint8
    palette_set = {tuple(c) for c in palette.tolist()}
    for color in mapped.reshape(-1, 3).tolist():
        assert tuple(color) in palette_set
        assert tuple(color) in symbol_map


def test_map_image_to_palette_picks_nearest():
    image = [[(250, 10, 10), (5, 240, 3)], [(0, 0, 200), (200, 30, 40)]]
    mapped, _ = palette_tools.map_image_to_palette(image, [RED, GREEN, BLUE])
    assert mapped.tolist() == [[list(RED), list(GREEN)], [list(BLUE), list(RED)]]


def test_map_image_to_palette_tie_goes_to_first_index():
    mapped, _ = palette_tools.map_image_to_palette([[(10, 10, 10)]], [(0, 0, 0), (20, 20, 20)])
    assert tuple(mapped[0, 0]) == (0, 0, 0)
    mapped, _ = palette_tools.map_image_to_palette([[(10, 10, 10)]], [(20, 20, 20), (0, 0, 0)])
    assert tuple(mapped[0, 0]) == (20, 20, 20)


def test_map_image_to_palette_is_deterministic():
    rng = np.random.default_rng(11)
    image = rng.integers(0, 256, size=(5, 5, 3), dtype=np.uint8)
    palette = rng.integers(0, 256, size=(7, 3), dtype=np.uint8)

    first_pixels, first_map = palette_tools.map_image_to_palette(image, palette)
    second_pixels, second_map = palette_tools.map_image_to_palette(image, palette)

    assert np.array_equal(first_pixels, second_pixels)
    assert first_map == second_map


def test_map_image_to_palette_does_not_touch_input():
    image = np.array([[(10, 20, 30), (200, 100, 50)]], dtype=np.uint8)
    before = image.copy()
    palette_tools.map_image_to_palette(image, [RED])
    assert np.array_equal(image, before)


def test_map_image_to_palette_empty_palette():
    with pytest.raises(EmptyPalette):
        palette_tools.map_image_to_palette([[RED]], [])


def test_as_pixel_matrix_rejects_ragged_rows():
    with pytest.raises(InvalidDimensions):
        palette_tools.as_pixel_matrix([[RED, GREEN], [BLUE]])


def test_as_pixel_matrix_rejects_empty_and_bad_shapes():
    with pytest.raises(InvalidDimensions):
        palette_tools.as_pixel_matrix([])
    with pytest.raises(InvalidDimensions):
        palette_tools.as_pixel_matrix([[(1, 2)]])


def test_as_pixel_matrix_rejects_out_of_range_channels():
    with pytest.raises(ValueError):
        palette_tools.as_pixel_matrix([[(256, 0, 0)]])
    with pytest.raises(ValueError):
        palette_tools.as_pixel_matrix([[(-1, 0, 0)]])


def test_nearest_palette_indices_matches_brute_force():
    rng = np.random.default_rng(5)
    colors = rng.integers(0, 256, size=(40, 3))
    palette = rng.integers(0, 256, size=(6, 3))

    got = palette_tools.nearest_palette_indices(colors, palette)

    for color, idx in zip(colors, got):
        dists = [palette_tools.color_distance(color, p) for p in palette]
        assert idx == dists.index(min(dists))
