"""
Tests for value-to-colour gradient mapping.
"""

import logging

import numpy as np
import pytest

from heatmapkit.color.gradient import (
    Color,
    ColorGradientMapper,
    ColorRange,
    color_for,
    gradient_stops,
)
from heatmapkit.core.errors import InvalidInputError, InvalidRangeError
from heatmapkit.core.matrix import HeatmapMatrix

BLACK = Color(0, 0, 0)
WHITE = Color(255, 255, 255)
BLUE = Color(0, 0, 255)
RED = Color(255, 0, 0)


@pytest.fixture
def grey_range():
    return ColorRange(0, 10, BLACK, WHITE)


class TestColor:
    """Colour value object and parsing."""

    def test_channels_validated(self):
        with pytest.raises(ValueError):
            Color(256, 0, 0)
        with pytest.raises(ValueError):
            Color(0, -1, 0)
        with pytest.raises(ValueError):
            Color(0.5, 0, 0)

    def test_default_alpha_opaque(self):
        assert Color(1, 2, 3).a == 255

    @pytest.mark.parametrize("spec, expected", [
        ("red", Color(255, 0, 0)),
        ("#00ff00", Color(0, 255, 0)),
        ((0, 0, 255), Color(0, 0, 255)),
        ((1, 2, 3, 4), Color(1, 2, 3, 4)),
    ])
    def test_parse(self, spec, expected):
        assert Color.parse(spec) == expected

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unrecognised"):
            Color.parse("not-a-colour")

    def test_to_hex(self):
        assert Color(255, 0, 16).to_hex() == "#ff0010"
        assert Color(255, 0, 16, 128).to_hex(alpha=True) == "#ff001080"


class TestColorRange:
    """Range validation."""

    def test_low_above_high(self):
        with pytest.raises(InvalidRangeError):
            ColorRange(5, 1, BLACK, WHITE)

    def test_non_finite_bound(self):
        with pytest.raises(InvalidRangeError):
            ColorRange(0, float("inf"), BLACK, WHITE)

    def test_range_error_is_value_error(self):
        with pytest.raises(ValueError):
            ColorRange(float("nan"), 1, BLACK, WHITE)

    def test_colours_parsed(self):
        color_range = ColorRange(0, 1, "blue", "red")
        assert color_range.low_color == BLUE
        assert color_range.high_color == RED

    def test_from_matrix(self, tiny_matrix):
        color_range = ColorRange.from_matrix(tiny_matrix, BLUE, RED)
        assert (color_range.low, color_range.high) == (1.0, 6.0)

    def test_with_bounds_validates(self, grey_range):
        assert grey_range.with_bounds(-1, 1).low == -1.0
        with pytest.raises(InvalidRangeError):
            grey_range.with_bounds(2, 1)


class TestTwoColourGradient:
    """Linear interpolation between low and high colours."""

    def test_boundaries_exact(self, grey_range):
        assert color_for(0, grey_range) == BLACK
        assert color_for(10, grey_range) == WHITE

    @pytest.mark.parametrize("low, high", [(-3.5, 2.25), (0, 1e-9), (1e6, 1e6 + 1)])
    def test_boundaries_exact_any_range(self, low, high):
        color_range = ColorRange(low, high, Color(12, 200, 7), Color(250, 3, 99))
        assert color_for(low, color_range) == color_range.low_color
        assert color_for(high, color_range) == color_range.high_color

    def test_values_outside_range_clamp(self, grey_range):
        assert color_for(-100, grey_range) == color_for(0, grey_range)
        assert color_for(110, grey_range) == color_for(10, grey_range)
        assert color_for(float("-inf"), grey_range) == BLACK
        assert color_for(float("inf"), grey_range) == WHITE

    def test_midpoint_is_mid_grey(self, grey_range):
        c = color_for(5, grey_range)
        for channel in (c.r, c.g, c.b):
            assert abs(channel - 128) <= 1

    def test_rounding_half_up(self):
        # 0.5 * 255 = 127.5
        color_range = ColorRange(0, 1, BLACK, Color(255, 0, 0))
        assert color_for(0.5, color_range).r == 128

    def test_alpha_interpolated(self):
        color_range = ColorRange(0, 1, Color(0, 0, 0, 0), Color(0, 0, 0, 200))
        assert color_for(0.5, color_range).a == 100

    def test_nan_rejected(self, grey_range):
        with pytest.raises(InvalidInputError):
            color_for(float("nan"), grey_range)


class TestDegenerateRange:
    """low == high maps everything to the high colour."""

    @pytest.mark.parametrize("value", [0, 5, 100])
    def test_all_values_high_colour(self, value):
        color_range = ColorRange(5, 5, BLUE, RED)
        assert color_for(value, color_range) == RED

    def test_mapper_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            ColorGradientMapper(ColorRange(5, 5, BLUE, RED))
        assert "Degenerate" in caplog.text


class TestWideRanges:
    """Bounds near the float limits still give valid colours."""

    def test_two_colour_endpoints(self):
        color_range = ColorRange(-1e308, 1e308, BLACK, WHITE)
        assert color_for(1e308, color_range) == WHITE
        assert color_for(-1e308, color_range) == BLACK
        assert color_for(0.0, color_range) == Color(128, 128, 128)

    def test_three_colour_halves(self):
        color_range = ColorRange(-1e308, 1.5e308, BLUE, RED, mid_color=WHITE)
        assert color_for(-1e308, color_range) == BLUE
        assert color_for(color_range.midpoint, color_range) == WHITE
        assert color_for(1.5e308, color_range) == RED

    def test_grid_has_no_transparent_cells(self):
        color_range = ColorRange(-1.7e308, 1.7e308, BLACK, WHITE)
        matrix = HeatmapMatrix([[-1.7e308, -1e300, 0.0, 1e300, 1.7e308]])
        grid = ColorGradientMapper(color_range).rgba_grid(matrix)
        assert np.all(grid[..., 3] == 255)
        assert grid[0, 0].tolist() == [0, 0, 0, 255]
        assert grid[0, -1].tolist() == [255, 255, 255, 255]


class TestThreeColourGradient:
    """low → mid → high split at the range midpoint."""

    @pytest.fixture
    def diverging(self):
        return ColorRange(-2, 2, BLUE, RED, mid_color=WHITE)

    def test_anchor_colours(self, diverging):
        assert color_for(-2, diverging) == BLUE
        assert color_for(0, diverging) == WHITE
        assert color_for(2, diverging) == RED

    def test_halves(self, diverging):
        assert color_for(-1, diverging) == Color(128, 128, 255)
        assert color_for(1, diverging) == Color(255, 128, 128)

    def test_clamps(self, diverging):
        assert color_for(-50, diverging) == BLUE
        assert color_for(50, diverging) == RED


class TestMapper:
    """Grid colouring agrees with scalar colouring."""

    def test_grid_matches_scalar(self, small_matrix):
        color_range = ColorRange.from_matrix(small_matrix, BLUE, RED, WHITE)
        mapper = ColorGradientMapper(color_range)
        grid = mapper.rgba_grid(small_matrix)
        assert grid.shape == small_matrix.shape + (4,)
        assert grid.dtype == np.uint8
        for i in range(0, small_matrix.n_rows, 7):
            for j in range(small_matrix.n_columns):
                expected = color_for(small_matrix.data[i, j], color_range)
                assert Color(*grid[i, j].tolist()) == expected

    def test_colors_for_nested_lists(self, tiny_matrix):
        mapper = ColorGradientMapper(ColorRange.from_matrix(tiny_matrix, BLACK, WHITE))
        colors = mapper.colors_for(tiny_matrix)
        assert len(colors) == 2 and len(colors[0]) == 3
        assert colors[0][0] == BLACK
        assert colors[1][2] == WHITE

    def test_hex_grid(self, tiny_matrix):
        mapper = ColorGradientMapper(ColorRange.from_matrix(tiny_matrix, BLACK, WHITE))
        hexes = mapper.hex_grid(tiny_matrix, alpha=False)
        assert hexes[0][0] == "#000000"
        assert hexes[1][2] == "#ffffff"

    def test_nan_cell_rejected(self):
        matrix = HeatmapMatrix([[0.0, np.nan]])
        mapper = ColorGradientMapper(ColorRange(0, 1, BLACK, WHITE))
        with pytest.raises(InvalidInputError):
            mapper.rgba_grid(matrix)

    def test_gradient_stops(self, grey_range):
        stops = gradient_stops(grey_range, n=3)
        assert stops[0] == BLACK
        assert stops[-1] == WHITE
        with pytest.raises(ValueError):
            gradient_stops(grey_range, n=1)
