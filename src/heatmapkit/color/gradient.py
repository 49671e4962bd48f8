"""
Value-to-colour gradient mapping for heatmap cells.

Each cell value is positioned inside a [low, high] range and converted into a
colour interpolated between two (or three) reference colours. The mapping is
pure: the same value and range always produce the same colour, so a renderer
may colour cells in any order or in parallel.

Gradient Rules
--------------
Two colours (low, high):
    t = clamp((v - low) / (high - low), 0, 1)
    channel = low_channel + t × (high_channel - low_channel), rounded half up

Three colours (low, mid, high):
    The range is split at mid = (low + high) / 2.
    v <  mid → low → mid over [low, mid]
    v >= mid → mid → high over [mid, high]

Degenerate range (low == high):
    Every value maps to high_color.

Values outside the range are clamped to the boundary colours, never
extrapolated. Alpha is interpolated like any other channel, so it passes
through unchanged when both ends share it.

Examples
--------
>>> from heatmapkit.color.gradient import Color, ColorRange, color_for
>>> grey = ColorRange(0, 10, Color(0, 0, 0), Color(255, 255, 255))
>>> color_for(5, grey)
Color(r=128, g=128, b=128, a=255)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np
from matplotlib import colors as mcolors
from numpy.typing import NDArray

from heatmapkit.core.errors import InvalidInputError, InvalidRangeError
from heatmapkit.core.matrix import HeatmapMatrix

logger = logging.getLogger(__name__)

__all__ = [
    'Color',
    'ColorLike',
    'ColorRange',
    'ColorGradientMapper',
    'color_for',
    'gradient_stops',
]


@dataclass(frozen=True)
class Color:
    """
    RGBA colour with integer channels in 0-255.

    Attributes
    ----------
    r, g, b : int
        Colour channels
    a : int
        Alpha channel; carried through interpolation, no blending semantics
    """
    r: int
    g: int
    b: int
    a: int = 255

    def __post_init__(self) -> None:
        for name in ("r", "g", "b", "a"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise ValueError(f"Color channel {name} must be an int, got {value!r}")
            if not 0 <= value <= 255:
                raise ValueError(f"Color channel {name} must be in 0-255, got {value}")
            object.__setattr__(self, name, int(value))

    @classmethod
    def parse(cls, value: ColorLike) -> Color:
        """
        Build a Color from a Color, an (r, g, b[, a]) int tuple, or a
        matplotlib colour spec ("red", "#ff0000", "tab:blue", ...).

        Raises
        ------
        ValueError
            If the value is not a recognised colour
        """
        if isinstance(value, Color):
            return value
        if isinstance(value, (tuple, list)) and all(
            isinstance(c, (int, np.integer)) and not isinstance(c, bool) for c in value
        ):
            if len(value) not in (3, 4):
                raise ValueError(f"Color tuple must have 3 or 4 channels, got {len(value)}")
            return cls(*value)
        try:
            rgba = mcolors.to_rgba(value)
        except ValueError as e:
            raise ValueError(f"Unrecognised colour: {value!r}") from e
        return cls(*(int(math.floor(c * 255 + 0.5)) for c in rgba))

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.r, self.g, self.b, self.a)

    def to_hex(self, alpha: bool = False) -> str:
        """Hex string, "#rrggbb" or "#rrggbbaa" when alpha=True."""
        text = f"#{self.r:02x}{self.g:02x}{self.b:02x}"
        return text + f"{self.a:02x}" if alpha else text


ColorLike = Union[Color, str, Sequence[int]]


@dataclass(frozen=True)
class ColorRange:
    """
    Numeric range plus the colours at its ends (and optionally its middle).

    Raises
    ------
    InvalidRangeError
        If low > high or a bound is not finite
    """
    low: float
    high: float
    low_color: Color
    high_color: Color
    mid_color: Optional[Color] = None

    def __post_init__(self) -> None:
        if not (math.isfinite(self.low) and math.isfinite(self.high)):
            raise InvalidRangeError(f"Range bounds must be finite, got [{self.low}, {self.high}]")
        if self.low > self.high:
            raise InvalidRangeError(f"Range low ({self.low}) must be <= high ({self.high})")
        object.__setattr__(self, "low", float(self.low))
        object.__setattr__(self, "high", float(self.high))
        object.__setattr__(self, "low_color", Color.parse(self.low_color))
        object.__setattr__(self, "high_color", Color.parse(self.high_color))
        if self.mid_color is not None:
            object.__setattr__(self, "mid_color", Color.parse(self.mid_color))

    @classmethod
    def from_matrix(
        cls,
        matrix: HeatmapMatrix,
        low_color: ColorLike,
        high_color: ColorLike,
        mid_color: Optional[ColorLike] = None,
    ) -> ColorRange:
        """Range spanning the matrix minimum and maximum."""
        return cls(matrix.min(), matrix.max(), low_color, high_color, mid_color)

    @property
    def is_degenerate(self) -> bool:
        return self.low == self.high

    @property
    def midpoint(self) -> float:
        # Halves first so that wide finite ranges do not overflow
        return self.low / 2.0 + self.high / 2.0

    def with_bounds(self, low: float, high: float) -> ColorRange:
        """Same colours, new bounds (validated)."""
        return ColorRange(low, high, self.low_color, self.high_color, self.mid_color)


def _channels(color: Color) -> NDArray[np.float64]:
    return np.array(color.as_tuple(), dtype=float)


def _lerp(t: NDArray[np.float64], start: Color, end: Color) -> NDArray[np.float64]:
    # t has shape (...), result (..., 4)
    a = _channels(start)
    b = _channels(end)
    return a + t[..., np.newaxis] * (b - a)


def _position(values: NDArray[np.float64], start: float, stop: float) -> NDArray[np.float64]:
    """Clamped fraction of the way from start to stop, for start < stop."""
    # Differences of halves stay finite for any pair of finite bounds
    span = stop / 2.0 - start / 2.0
    if span == 0:
        # Adjacent subnormal bounds
        return (values >= stop).astype(float)
    return np.clip((values / 2.0 - start / 2.0) / span, 0.0, 1.0)


def _rgba(values: NDArray[np.float64], color_range: ColorRange) -> NDArray[np.uint8]:
    values = np.asarray(values, dtype=float)
    if np.any(np.isnan(values)):
        raise InvalidInputError("Cannot map NaN to a colour")

    if color_range.is_degenerate:
        out = np.broadcast_to(_channels(color_range.high_color), values.shape + (4,))
    elif color_range.mid_color is None:
        t = _position(values, color_range.low, color_range.high)
        out = _lerp(t, color_range.low_color, color_range.high_color)
    else:
        mid = color_range.midpoint
        t_low = _position(values, color_range.low, mid)
        t_high = _position(values, mid, color_range.high)
        out = np.where(
            (values < mid)[..., np.newaxis],
            _lerp(t_low, color_range.low_color, color_range.mid_color),
            _lerp(t_high, color_range.mid_color, color_range.high_color),
        )

    # Round half up, then guard the 0-255 invariant
    return np.clip(np.floor(out + 0.5), 0, 255).astype(np.uint8)


def color_for(value: float, color_range: ColorRange) -> Color:
    """
    Colour of a single value.

    Parameters
    ----------
    value : float
        Value to colour; +/-inf clamp to the boundary colours
    color_range : ColorRange
        Range and reference colours

    Returns
    -------
    Color

    Raises
    ------
    InvalidInputError
        If value is NaN
    """
    r, g, b, a = _rgba(np.array(value, dtype=float), color_range).tolist()
    return Color(r, g, b, a)


def gradient_stops(color_range: ColorRange, n: int = 10) -> list[Color]:
    """Evenly spaced colours from low to high, for drawing a legend."""
    if n < 2:
        raise ValueError(f"n must be >= 2, got {n}")
    values = np.linspace(color_range.low, color_range.high, n)
    return [Color(*px) for px in _rgba(values, color_range).tolist()]


class ColorGradientMapper:
    """
    Stateless mapper bound to one ColorRange.

    Examples
    --------
    >>> mapper = ColorGradientMapper(ColorRange.from_matrix(matrix, "blue", "red"))
    >>> pixels = mapper.rgba_grid(matrix)    # uint8 (rows, cols, 4)
    >>> mapper.colors_for(matrix)[0][0]
    Color(r=0, g=0, b=255, a=255)
    """

    def __init__(self, color_range: ColorRange) -> None:
        self.color_range = color_range
        if color_range.is_degenerate:
            logger.warning(
                f"Degenerate colour range [{color_range.low:g}, {color_range.high:g}]; "
                "all cells will use the high colour"
            )

    def color_for(self, value: float) -> Color:
        return color_for(value, self.color_range)

    def rgba_grid(self, matrix: HeatmapMatrix) -> NDArray[np.uint8]:
        """Vectorised colours for every cell, shape (rows, columns, 4)."""
        return _rgba(matrix.data, self.color_range)

    def colors_for(self, matrix: HeatmapMatrix) -> list[list[Color]]:
        """Colours for every cell as nested lists (row-major)."""
        return [[Color(*px) for px in row] for row in self.rgba_grid(matrix).tolist()]

    def hex_grid(self, matrix: HeatmapMatrix, alpha: bool = True) -> list[list[str]]:
        return [[c.to_hex(alpha=alpha) for c in row] for row in self.colors_for(matrix)]
