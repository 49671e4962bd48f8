"""
heatmapkit - data transformation and colour mapping for bioinformatics heatmaps

Transforms labelled numeric matrices (log, z-score, centering, clipping) and
maps their values to colour gradients for rendering by a front end.
"""

__version__ = "0.1.0"

from heatmapkit.core.matrix import HeatmapMatrix
from heatmapkit.core.errors import HeatmapError, InvalidInputError, InvalidRangeError
from heatmapkit.heatmap.operations import (
    Centering,
    MatrixTransformer,
    ScalarTransform,
    TransformSpec,
    transform,
)
from heatmapkit.color.gradient import Color, ColorGradientMapper, ColorRange, color_for

__all__ = [
    "HeatmapMatrix",
    "HeatmapError",
    "InvalidInputError",
    "InvalidRangeError",
    "Centering",
    "MatrixTransformer",
    "ScalarTransform",
    "TransformSpec",
    "transform",
    "Color",
    "ColorGradientMapper",
    "ColorRange",
    "color_for",
]
