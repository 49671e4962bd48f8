"""
Selectable colour palettes for heatmap and statistics-table views.

A heatmap view lets the user pick its low and high colours from a short list.
This module keeps that list consistent with the colours actually in use, and
assigns stable colours to experimental conditions (statistics-table headers).

Conventions
-----------
- Default pickable colours: red, green, blue
- Conditions use the seaborn "Set2" qualitative palette (colorblind-friendly)
- Palettes are immutable; every edit returns a new palette
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Hashable, Iterable, Sequence

import seaborn as sns

from heatmapkit.color.gradient import Color, ColorLike

__all__ = [
    'ColorPalette',
    'PaletteChange',
    'DEFAULT_COLORS',
    'PALETTES',
    'condition_colors',
]

DEFAULT_COLORS: tuple[Color, ...] = (
    Color(255, 0, 0),
    Color(0, 255, 0),
    Color(0, 0, 255),
)


@dataclass(frozen=True)
class PaletteChange:
    """
    Result of replacing the colours of a palette.

    Attributes
    ----------
    palette : ColorPalette
        The new palette
    low_color, high_color : Color
        Selections after the change
    changed : bool
        True when either selection had to move because its colour was removed
    """
    palette: ColorPalette
    low_color: Color
    high_color: Color
    changed: bool


@dataclass(frozen=True)
class ColorPalette:
    """Ordered, duplicate-free list of colours offered for low/high selection."""
    colors: tuple[Color, ...] = field(default=DEFAULT_COLORS)

    def __post_init__(self) -> None:
        unique: list[Color] = []
        for c in self.colors:
            parsed = Color.parse(c)
            if parsed not in unique:
                unique.append(parsed)
        object.__setattr__(self, "colors", tuple(unique))

    @classmethod
    def of(cls, colors: Iterable[ColorLike]) -> ColorPalette:
        return cls(tuple(Color.parse(c) for c in colors))

    def __len__(self) -> int:
        return len(self.colors)

    def __contains__(self, color: object) -> bool:
        try:
            return Color.parse(color) in self.colors
        except ValueError:
            return False

    def ensure_contains(self, *colors: ColorLike) -> ColorPalette:
        """
        Palette with any missing colours appended.

        Used when a heatmap is created with colours that are not among the
        pickable ones, so the current selection can still be displayed.
        """
        missing = [Color.parse(c) for c in colors if c not in self]
        if not missing:
            return self
        return ColorPalette(self.colors + tuple(missing))

    def replace(
        self,
        new_colors: Sequence[ColorLike],
        current_low: ColorLike,
        current_high: ColorLike,
    ) -> PaletteChange:
        """
        Swap in a new colour list, keeping selections that are still offered.

        A low selection that disappears falls back to the first colour, a
        high selection to the last.

        Raises
        ------
        ValueError
            If fewer than two distinct colours are given
        """
        palette = ColorPalette.of(new_colors)
        if len(palette) < 2:
            raise ValueError(f"A palette needs at least 2 distinct colours, got {len(palette)}")

        low = Color.parse(current_low)
        high = Color.parse(current_high)
        changed = False
        if low not in palette:
            low = palette.colors[0]
            changed = True
        if high not in palette:
            high = palette.colors[-1]
            changed = True
        return PaletteChange(palette, low, high, changed)


PALETTES = {
    "default": ColorPalette(),
    "diverging": ColorPalette.of(["#2166ac", "#f7f7f7", "#b2182b"]),
    "print": ColorPalette.of(["#000000", "#808080", "#ffffff"]),
}


def condition_colors(conditions: Sequence[Hashable], palette: str = "Set2") -> dict[Hashable, Color]:
    """
    One colour per distinct condition, in order of first appearance.

    Colours cycle when there are more conditions than palette entries.

    Examples
    --------
    >>> colors = condition_colors(["CTRL", "CTRL", "ALS", "ALS"])
    >>> list(colors)
    ['CTRL', 'ALS']
    """
    distinct = list(dict.fromkeys(conditions))
    base = sns.color_palette(palette, max(len(distinct), 1)).as_hex()
    return {cond: Color.parse(base[i % len(base)]) for i, cond in enumerate(distinct)}
