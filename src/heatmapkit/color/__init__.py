"""
Colour handling for heatmaps and statistics tables.

- gradient: Color, ColorRange and the value-to-colour mapping
- palette: pickable colour lists and per-condition colours
"""

from heatmapkit.color.gradient import (
    Color,
    ColorRange,
    ColorGradientMapper,
    color_for,
    gradient_stops,
)
from heatmapkit.color.palette import ColorPalette, PaletteChange, PALETTES, condition_colors

__all__ = [
    'Color',
    'ColorRange',
    'ColorGradientMapper',
    'color_for',
    'gradient_stops',
    'ColorPalette',
    'PaletteChange',
    'PALETTES',
    'condition_colors',
]
