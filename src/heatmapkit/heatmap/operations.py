"""
Data operations applied to heatmap matrices before colouring.

A heatmap rarely displays raw measurements. Users typically:
- Log-transform count/intensity data so that fold changes are symmetric
- Z-score each sample so that columns are comparable
- Center each feature (row) on its mean or median to see relative up/down regulation
- Clip extreme values so that a few outliers do not wash out the colour gradient

This module implements that pipeline as a single Transform:

    scalar transform  →  row centering  →  symmetric clipping

Policies:
    - Log of non-positive values: the argument is floored to the smallest
      positive normal float (np.finfo(float).tiny) before the log, and the
      cell is flagged QualityFlag.FLOORED. The operation never fails on
      non-positive input.
    - Z-score: per column, population standard deviation (ddof=0). A column
      with sigma == 0 becomes all zeros (flagged ZERO_VARIANCE).
    - Clip bound: clip_multiplier × IQR (default) or × population std of the
      centred data, applied symmetrically as [-bound, +bound].

Examples:
    >>> from heatmapkit.heatmap.operations import (
    ...     transform, TransformSpec, ScalarTransform, Centering
    ... )
    >>> spec = TransformSpec(ScalarTransform.IDENTITY, Centering.MEAN)
    >>> transform(HeatmapMatrix([[1, 2, 3], [4, 5, 6]]), spec).data
    array([[-1.,  0.,  1.],
           [-1.,  0.,  1.]])
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

import numpy as np
from numpy.typing import NDArray
from scipy import stats

from heatmapkit.core.errors import InvalidInputError
from heatmapkit.core.matrix import HeatmapMatrix
from heatmapkit.core.quality import QualityFlag
from heatmapkit.core.transform import Transform

logger = logging.getLogger(__name__)

__all__ = [
    'ScalarTransform',
    'Centering',
    'ClipMethod',
    'TransformSpec',
    'MatrixTransformer',
    'LOG_FLOOR',
    'apply_scalar_transform',
    'center',
    'clip_bound',
    'transform',
]

LOG_FLOOR = float(np.finfo(float).tiny)


class ScalarTransform(Enum):
    """Element-wise transforms offered by the "Transform data" action."""

    IDENTITY = "identity"
    LOG2 = "log2"
    LOG10 = "log10"
    LOG2_PLUS_ONE = "log2p1"    # log2(x + 1)
    LOG10_PLUS_ONE = "log10p1"  # log10(x + 1)
    ZSCORE = "zscore"           # per-column (sample) standardization

    @property
    def is_log(self) -> bool:
        return self in _LOG_FUNCTIONS


class Centering(Enum):
    """Per-row reference statistic subtracted after the transform."""

    NONE = "none"
    MEAN = "mean"
    MEDIAN = "median"


class ClipMethod(Enum):
    """How the symmetric clip bound is derived from the data."""

    IQR = "iqr"
    STD = "std"


# (log function, pseudocount)
_LOG_FUNCTIONS = {
    ScalarTransform.LOG2: (np.log2, 0.0),
    ScalarTransform.LOG10: (np.log10, 0.0),
    ScalarTransform.LOG2_PLUS_ONE: (np.log2, 1.0),
    ScalarTransform.LOG10_PLUS_ONE: (np.log10, 1.0),
}


@dataclass(frozen=True)
class TransformSpec:
    """
    Immutable description of one "Transform data" request.

    Attributes:
        transform: Element-wise scalar transform
        centering: Per-row centering applied after the transform
        clip: Clamp the result to [-bound, +bound]
        clip_method: How the bound is derived (IQR or STD)
        clip_multiplier: Multiple of the spread used as the bound
    """

    transform: ScalarTransform = ScalarTransform.IDENTITY
    centering: Centering = Centering.NONE
    clip: bool = False
    clip_method: ClipMethod = ClipMethod.IQR
    clip_multiplier: float = 3.0

    def __post_init__(self) -> None:
        # Accept enum values given as strings (config files, CLI)
        object.__setattr__(self, "transform", ScalarTransform(self.transform))
        object.__setattr__(self, "centering", Centering(self.centering))
        object.__setattr__(self, "clip_method", ClipMethod(self.clip_method))
        if not math.isfinite(self.clip_multiplier) or self.clip_multiplier <= 0:
            raise ValueError(
                f"clip_multiplier must be a positive finite number, got {self.clip_multiplier}"
            )

    @classmethod
    def identity(cls) -> TransformSpec:
        return cls()

    def to_params(self) -> dict:
        """JSON-serializable parameters for provenance records."""
        return {
            "transform": self.transform.value,
            "centering": self.centering.value,
            "clip": self.clip,
            "clip_method": self.clip_method.value,
            "clip_multiplier": self.clip_multiplier,
        }


def apply_scalar_transform(
    data: NDArray[np.float64],
    kind: ScalarTransform,
) -> tuple[NDArray[np.float64], NDArray[np.uint8]]:
    """
    Apply one scalar transform to a finite 2D array.

    Args:
        data: Finite values (rows × columns)
        kind: Transform to apply

    Returns:
        (values, flags) where flags marks FLOORED / ZERO_VARIANCE cells
    """
    data = np.asarray(data, dtype=float)
    flags = np.zeros(data.shape, dtype=np.uint8)

    if kind is ScalarTransform.IDENTITY:
        return data.copy(), flags

    if kind is ScalarTransform.ZSCORE:
        # Constant columns are detected on the values: the mean of repeated
        # 0.1s is not exactly 0.1, so sigma can be a tiny non-zero number
        flat = np.all(data == data[:1], axis=0)
        mu = data.mean(axis=0, keepdims=True)
        sigma = np.where(flat, 1.0, data.std(axis=0, ddof=0))[np.newaxis, :]
        values = np.where(flat, 0.0, (data - mu) / sigma)
        if np.any(flat):
            flags[:, flat] |= int(QualityFlag.ZERO_VARIANCE)
            logger.warning(
                f"{int(flat.sum())} column(s) have zero variance; z-scores set to 0"
            )
        return values, flags

    log_fn, pseudocount = _LOG_FUNCTIONS[kind]
    argument = data + pseudocount
    non_positive = argument <= 0
    if np.any(non_positive):
        flags[non_positive] |= int(QualityFlag.FLOORED)
        logger.warning(
            f"{kind.value}: {int(non_positive.sum())} value(s) <= 0 floored to {LOG_FLOOR:g} before log"
        )
        argument = np.where(non_positive, LOG_FLOOR, argument)
    return log_fn(argument), flags


def center(matrix: HeatmapMatrix, centering: Centering) -> HeatmapMatrix:
    """
    Subtract the per-row mean or median from every cell in that row.

    Args:
        matrix: Matrix to center (finite values)
        centering: NONE returns an equal matrix

    Returns:
        New centred matrix (same labels and flags)
    """
    centering = Centering(centering)
    if centering is Centering.NONE:
        return matrix.copy(deep=False)
    if centering is Centering.MEAN:
        reference = matrix.data.mean(axis=1, keepdims=True)
    else:
        reference = np.median(matrix.data, axis=1, keepdims=True)
    return matrix.with_data(matrix.data - reference)


def clip_bound(
    data: NDArray[np.float64],
    method: ClipMethod = ClipMethod.IQR,
    multiplier: float = 3.0,
) -> float:
    """
    Symmetric clip bound derived from the distribution of all values.

    Args:
        data: Values (any shape)
        method: IQR (interquartile range) or STD (population std)
        multiplier: Multiple of the spread

    Returns:
        Non-negative bound; 0 for constant data
    """
    values = np.asarray(data, dtype=float).ravel()
    if ClipMethod(method) is ClipMethod.IQR:
        spread = float(stats.iqr(values))
    else:
        spread = float(np.std(values, ddof=0))
    return multiplier * spread


class MatrixTransformer(Transform):
    """
    Scalar transform → centering → clipping, as one immutable Transform.

    Examples:
        >>> spec = TransformSpec(ScalarTransform.LOG2, Centering.MEDIAN, clip=True)
        >>> transformer = MatrixTransformer(spec)
        >>> result = transformer.apply(matrix)
        >>> int((result.quality_flags & QualityFlag.CLIPPED).astype(bool).sum())
    """

    def __init__(self, spec: TransformSpec | None = None) -> None:
        spec = spec or TransformSpec()
        super().__init__(name="MatrixTransformer", params=spec.to_params())
        self.spec = spec

    def apply(self, matrix: HeatmapMatrix) -> HeatmapMatrix:
        errors = self.validate(matrix)
        if errors:
            bad = ~np.isfinite(matrix.data) if matrix.data.size else None
            if bad is not None and np.any(bad):
                r, c = np.argwhere(bad)[0]
                raise InvalidInputError(
                    "; ".join(errors), row=matrix.row_label(r), column=matrix.column_label(c)
                )
            raise InvalidInputError("; ".join(errors))

        logger.debug(f"Applying {self!r} to {matrix.n_rows}x{matrix.n_columns} matrix")

        values, flags = apply_scalar_transform(matrix.data, self.spec.transform)
        flags |= matrix.quality_flags

        result = center(matrix.with_data(values, flags), self.spec.centering)

        if self.spec.clip:
            bound = clip_bound(result.data, self.spec.clip_method, self.spec.clip_multiplier)
            clipped = np.clip(result.data, -bound, bound)
            changed = clipped != result.data
            new_flags = np.array(result.quality_flags)
            new_flags[changed] |= int(QualityFlag.CLIPPED)
            logger.debug(f"Clipped {int(changed.sum())} value(s) to +/-{bound:g}")
            result = result.with_data(clipped, new_flags)

        return result


def transform(matrix: HeatmapMatrix, spec: TransformSpec) -> HeatmapMatrix:
    """
    Apply a TransformSpec to a matrix and return a new matrix.

    Args:
        matrix: Source matrix (non-empty, finite)
        spec: What to do

    Returns:
        New matrix with identical shape and labels

    Raises:
        InvalidInputError: Empty matrix, or NaN/inf anywhere in the input
    """
    return MatrixTransformer(spec).apply(matrix)
