"""
Error taxonomy for heatmap data operations.

Every failure raised by the transformation and colour-mapping pipeline derives
from HeatmapError. The concrete errors also subclass ValueError so that callers
(UI actions, CLI commands) that already guard numeric input with
``except ValueError`` keep working unchanged.

Examples:
    >>> from heatmapkit.core.errors import InvalidInputError
    >>> try:
    ...     transform(matrix, spec)
    ... except InvalidInputError as e:
    ...     print(f"Cannot transform: {e} (row={e.row}, column={e.column})")
"""

from __future__ import annotations

from typing import Hashable, Optional

__all__ = ['HeatmapError', 'InvalidInputError', 'InvalidRangeError']


class HeatmapError(Exception):
    """Base class for all heatmapkit errors."""
    pass


class InvalidInputError(HeatmapError, ValueError):
    """
    Raised for malformed, empty or non-finite matrix input.

    Attributes:
        row: Offending row (label if the matrix is labelled, else position), or None
        column: Offending column (label or position), or None
    """

    def __init__(
        self,
        message: str,
        row: Optional[Hashable] = None,
        column: Optional[Hashable] = None,
    ) -> None:
        super().__init__(message)
        self.row = row
        self.column = column


class InvalidRangeError(HeatmapError, ValueError):
    """Raised when a value range has low > high or non-finite bounds."""
    pass
