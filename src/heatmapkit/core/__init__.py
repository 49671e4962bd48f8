"""
Core data structures for heatmap data processing.

1. HeatmapMatrix: Labelled numeric grid with per-cell provenance flags
2. QualityFlag: Bitwise flags recording what a transform did to each cell
3. Transform: Abstract base class for immutable matrix transformations
4. Errors: HeatmapError, InvalidInputError, InvalidRangeError

Design Philosophy:
    - Immutability: All operations return new instances (functional style)
    - Fail fast: Invalid input raises immediately, no partial results
    - Composability: Small operations chain into complex pipelines
"""

from heatmapkit.core.errors import HeatmapError, InvalidInputError, InvalidRangeError
from heatmapkit.core.matrix import HeatmapMatrix
from heatmapkit.core.quality import QualityFlag
from heatmapkit.core.transform import Transform

__all__ = [
    'HeatmapError',
    'InvalidInputError',
    'InvalidRangeError',
    'HeatmapMatrix',
    'QualityFlag',
    'Transform',
]
