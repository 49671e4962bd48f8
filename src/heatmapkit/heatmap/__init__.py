"""
Heatmap data operations and view state.

Examples:
    >>> from heatmapkit.heatmap import (
    ...     HeatmapModel, TransformSpec, ScalarTransform, Centering, transform
    ... )
    >>> spec = TransformSpec(ScalarTransform.LOG2_PLUS_ONE, Centering.MEAN, clip=True)
    >>> log_centered = transform(matrix, spec)
"""

from heatmapkit.heatmap.operations import (
    ScalarTransform,
    Centering,
    ClipMethod,
    TransformSpec,
    MatrixTransformer,
    apply_scalar_transform,
    center,
    clip_bound,
    transform,
)
from heatmapkit.heatmap.model import HeatmapConfig, HeatmapModel, DialogSpec

__all__ = [
    'ScalarTransform',
    'Centering',
    'ClipMethod',
    'TransformSpec',
    'MatrixTransformer',
    'apply_scalar_transform',
    'center',
    'clip_bound',
    'transform',
    'HeatmapConfig',
    'HeatmapModel',
    'DialogSpec',
]
