"""
Per-cell provenance flags for transformed heatmap matrices.

A transform can silently alter individual values: a non-positive value is
floored before taking its logarithm, an extreme value is clamped to the clip
bound, a constant column collapses to zero under z-score normalization. The
rendered heatmap looks the same either way, so these flags keep a record of
which cells were touched and why.

Engineering Design:
    IntFlag enables efficient bitwise operations:
    - Multiple flags per value: FLOORED | CLIPPED
    - Fast bitwise checks: if flags & QualityFlag.CLIPPED
    - Memory efficient: single int per value

Examples:
    >>> import numpy as np
    >>> from heatmapkit.core.quality import QualityFlag
    >>>
    >>> flags = np.array([0, 1, 2, 3], dtype=np.uint8)
    >>> n_clipped = np.sum((flags & QualityFlag.CLIPPED) != 0)
    >>> n_clipped
    2
"""

from __future__ import annotations

from enum import IntFlag

__all__ = ['QualityFlag']


class QualityFlag(IntFlag):
    """
    Bitwise flags describing what a transform did to a single cell.

    Attributes:
        ORIGINAL: Value passed through every step unaltered in kind (0)
        FLOORED: Non-positive log argument replaced by the positive floor (1)
        CLIPPED: Value clamped to the symmetric clip bound (2)
        ZERO_VARIANCE: Column had no variance; z-score defined as 0 (4)
    """

    ORIGINAL = 0
    """Untouched by any special-case handling."""

    FLOORED = 1
    """
    Logarithm argument was <= 0 and was replaced by the smallest positive
    normal float before the log was taken. The resulting value is a very large
    negative number and usually dominates the colour range.
    """

    CLIPPED = 2
    """Value exceeded +/- clip bound and was clamped to it."""

    ZERO_VARIANCE = 4
    """Column had sigma == 0 under z-score normalization; value set to 0."""
