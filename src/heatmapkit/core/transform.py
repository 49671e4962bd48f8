"""
Base transformation framework for immutable matrix operations.

Every data operation offered by a heatmap ("Transform data", centering,
clipping) is a Transform: a pure function that takes a HeatmapMatrix and
returns a new one, leaving the input untouched.

Engineering Design:
    A Transform never edits the matrix it is given. The same input and the
    same params always give the same output, so one matrix can back several
    heatmap views at once, and a view can return to its source data after
    any number of "Transform data" actions.

    params is recorded verbatim next to CLI outputs ({base}.params.json).

Examples:
    >>> from heatmapkit.core.transform import Transform
    >>> from heatmapkit.core.matrix import HeatmapMatrix
    >>>
    >>> class Negate(Transform):
    ...     def __init__(self):
    ...         super().__init__(name="Negate", params={})
    ...
    ...     def apply(self, matrix: HeatmapMatrix) -> HeatmapMatrix:
    ...         return matrix.with_data(-matrix.data)
    >>>
    >>> negated = Negate().apply(matrix)
    >>> # matrix is unchanged
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from heatmapkit.core.matrix import HeatmapMatrix

__all__ = ['Transform']


class Transform(ABC):
    """
    Abstract base class for all matrix transformations.

    Attributes:
        name: Human-readable transformation name (e.g., "MatrixTransformer")
        params: Dictionary of parameters used for this transformation
        timestamp: When this transform instance was created (for audit trail)
    """

    def __init__(self, name: str, params: dict[str, Any]) -> None:
        """
        Initialize transformation with name and parameters.

        Args:
            name: Human-readable transformation name
            params: Dictionary of parameters. Must be JSON-serializable so
                   that CLI runs can record them next to their output.
        """
        self.name = name
        self.params = params
        self.timestamp = datetime.now()

    @abstractmethod
    def apply(self, matrix: HeatmapMatrix) -> HeatmapMatrix:
        """
        Execute transformation and return new matrix.

        Must never modify the input matrix.

        Raises:
            InvalidInputError: If the transformation cannot be applied
        """
        pass

    def validate(self, matrix: HeatmapMatrix) -> list[str]:
        """
        Check preconditions before applying transformation.

        Subclasses should override and call super().validate() first.

        Returns:
            List of error messages (empty list = valid)
        """
        errors: list[str] = []

        if matrix.n_rows == 0 or matrix.n_columns == 0:
            errors.append(f"Cannot process empty matrix (shape {matrix.shape})")
            return errors

        bad = ~np.isfinite(matrix.data)
        if np.any(bad):
            r, c = np.argwhere(bad)[0]
            errors.append(
                f"Matrix contains {int(bad.sum())} non-finite values "
                f"(first at row {matrix.row_label(r)!r}, column {matrix.column_label(c)!r})"
            )

        return errors

    def __repr__(self) -> str:
        """
        String representation for logging and debugging.

        Examples:
            >>> print(MatrixTransformer(TransformSpec(ScalarTransform.LOG2)))
            MatrixTransformer(transform=log2, centering=none, clip=False, ...)
        """
        params_str = ", ".join(f"{k}={v}" for k, v in self.params.items())
        return f"{self.name}({params_str})"
