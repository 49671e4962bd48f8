"""
Core data structure for heatmap matrices.

HeatmapMatrix couples a rectangular grid of numbers with optional row and
column labels and with per-cell provenance flags (which values were floored,
clipped, or zeroed by a transform).

Biological Context:
    Heatmaps in bioinformatics almost always display an expression-like matrix:
    - Rows = features (genes, proteins, probes)
    - Columns = samples (patients, conditions, time points)
    - Values = measurements (counts, intensities, fold changes)

    The labels are what users interact with: they pick visible rows and
    columns by name, and they read the row/column names off the heatmap axes.

Engineering Design:
    - Immutable: data is stored as a read-only copy; operations return new instances
    - Labels optional: unlabelled matrices are addressed by position only
    - Validated: constructor checks shape consistency, label uniqueness
    - Fail fast: malformed input raises InvalidInputError

Examples:
    >>> import numpy as np
    >>> from heatmapkit.core.matrix import HeatmapMatrix
    >>>
    >>> matrix = HeatmapMatrix(
    ...     np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]]),
    ...     row_names=["GENE_A", "GENE_B"],
    ...     column_names=["S1", "S2", "S3"],
    ... )
    >>> matrix.value("GENE_B", "S2")
    5.0
    >>> subset = matrix.select_columns(["S1", "S3"])
    >>> subset.shape
    (2, 2)
"""

from __future__ import annotations

from typing import Hashable, Optional, Sequence, Union

import numpy as np
import pandas as pd

from heatmapkit.core.errors import InvalidInputError
from heatmapkit.core.quality import QualityFlag

__all__ = ['HeatmapMatrix']

Key = Union[int, Hashable]
Labels = Optional[Union[pd.Index, Sequence[Hashable]]]


def _as_index(labels: Labels, expected: int, axis_name: str) -> Optional[pd.Index]:
    if labels is None:
        return None
    index = labels if isinstance(labels, pd.Index) else pd.Index(list(labels))
    if len(index) != expected:
        raise InvalidInputError(
            f"{axis_name} length ({len(index)}) must match data {axis_name.split('_')[0]}s ({expected})"
        )
    if not index.is_unique:
        dupes = index[index.duplicated()].unique().tolist()
        raise InvalidInputError(f"{axis_name} must be unique, duplicated: {dupes[:5]}")
    return index


class HeatmapMatrix:
    """
    Immutable labelled matrix displayed by a heatmap.

    Attributes:
        data: Read-only float array (rows × columns)
        row_names: Row labels (pd.Index) or None
        column_names: Column labels (pd.Index) or None
        quality_flags: Per-cell QualityFlag values (same shape as data)

    Shape Invariants:
        - data.ndim == 2
        - len(row_names) == data.shape[0] when labels are present
        - len(column_names) == data.shape[1] when labels are present
        - quality_flags.shape == data.shape
    """

    def __init__(
        self,
        data,
        row_names: Labels = None,
        column_names: Labels = None,
        quality_flags: Optional[np.ndarray] = None,
    ):
        """
        Initialize HeatmapMatrix with validation.

        Args:
            data: 2D array-like of numbers. Nested lists must be rectangular.
            row_names: Optional row labels (unique)
            column_names: Optional column labels (unique)
            quality_flags: Optional per-cell flags; defaults to all ORIGINAL

        Raises:
            InvalidInputError: If data is ragged, not 2D, not numeric, or if
                labels/flags do not match the data dimensions
        """
        try:
            array = np.array(data, dtype=float)
        except (TypeError, ValueError) as e:
            raise InvalidInputError(f"data must be a rectangular numeric grid: {e}") from e

        if array.ndim != 2:
            raise InvalidInputError(f"data must be 2D, got shape {array.shape}")

        n_rows, n_columns = array.shape
        self._row_names = _as_index(row_names, n_rows, "row_names")
        self._column_names = _as_index(column_names, n_columns, "column_names")

        if quality_flags is None:
            flags = np.full(array.shape, int(QualityFlag.ORIGINAL), dtype=np.uint8)
        else:
            flags = np.array(quality_flags, dtype=np.uint8)
            if flags.shape != array.shape:
                raise InvalidInputError(
                    f"quality_flags shape {flags.shape} must match data shape {array.shape}"
                )

        # Store as read-only copies (immutability enforced by numpy)
        array.setflags(write=False)
        flags.setflags(write=False)
        self._data = array
        self._quality_flags = flags

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame) -> HeatmapMatrix:
        """Build a labelled matrix from a DataFrame (index = rows, columns = columns)."""
        non_numeric = [c for c in df.columns if not pd.api.types.is_numeric_dtype(df[c])]
        if non_numeric:
            raise InvalidInputError(
                f"Non-numeric columns cannot be displayed: {non_numeric[:5]}",
                column=non_numeric[0],
            )
        return cls(df.to_numpy(dtype=float), row_names=df.index, column_names=df.columns)

    def to_dataframe(self) -> pd.DataFrame:
        """Return the values as a DataFrame, using positions where labels are absent."""
        return pd.DataFrame(
            np.array(self._data),
            index=self._row_names if self._row_names is not None else pd.RangeIndex(self.n_rows),
            columns=self._column_names if self._column_names is not None else pd.RangeIndex(self.n_columns),
        )

    @property
    def data(self) -> np.ndarray:
        """Read-only value grid (rows × columns)."""
        return self._data

    @property
    def row_names(self) -> Optional[pd.Index]:
        """Row labels, or None for an unlabelled matrix."""
        return self._row_names

    @property
    def column_names(self) -> Optional[pd.Index]:
        """Column labels, or None for an unlabelled matrix."""
        return self._column_names

    @property
    def quality_flags(self) -> np.ndarray:
        """Per-cell QualityFlag values (read-only)."""
        return self._quality_flags

    @property
    def shape(self) -> tuple[int, int]:
        return self._data.shape

    @property
    def n_rows(self) -> int:
        return self._data.shape[0]

    @property
    def n_columns(self) -> int:
        return self._data.shape[1]

    @property
    def is_empty(self) -> bool:
        return self._data.size == 0

    @property
    def has_labels(self) -> bool:
        """True when both row and column labels are present."""
        return self._row_names is not None and self._column_names is not None

    def row_label(self, position: int) -> Hashable:
        """Label of a row for messages: its name if labelled, else its position."""
        return self._row_names[position] if self._row_names is not None else position

    def column_label(self, position: int) -> Hashable:
        return self._column_names[position] if self._column_names is not None else position

    def row_index(self, key: Key) -> int:
        """
        Resolve a row key (label or integer position) to a position.

        Labels take precedence over positions, so integer labels resolve by
        label on labelled matrices.

        Raises:
            InvalidInputError: If the key names no row
        """
        return self._resolve(key, self._row_names, self.n_rows, "row")

    def column_index(self, key: Key) -> int:
        """Resolve a column key (label or integer position) to a position."""
        return self._resolve(key, self._column_names, self.n_columns, "column")

    @staticmethod
    def _resolve(key: Key, labels: Optional[pd.Index], size: int, axis: str) -> int:
        if not isinstance(key, Hashable):
            raise InvalidInputError(
                f"{axis} key must be a label or position, got {type(key).__name__}: {key!r}",
                **{axis: key},
            )
        if labels is not None and key in labels:
            return int(labels.get_loc(key))
        if isinstance(key, (int, np.integer)) and not isinstance(key, bool):
            if -size <= key < size:
                return int(key) % size
            raise InvalidInputError(f"{axis} position {key} out of range for {size} {axis}s")
        raise InvalidInputError(f"Unknown {axis}: {key!r}", **{axis: key})

    def value(self, row: Key, column: Key) -> float:
        """Single cell value addressed by label or position."""
        return float(self._data[self.row_index(row), self.column_index(column)])

    def row(self, key: Key) -> np.ndarray:
        """Values of one row (read-only view)."""
        return self._data[self.row_index(key), :]

    def column(self, key: Key) -> np.ndarray:
        """Values of one column (read-only view)."""
        return self._data[:, self.column_index(key)]

    def min(self) -> float:
        if self.is_empty:
            raise InvalidInputError("Cannot take the minimum of an empty matrix")
        return float(np.min(self._data))

    def max(self) -> float:
        if self.is_empty:
            raise InvalidInputError("Cannot take the maximum of an empty matrix")
        return float(np.max(self._data))

    def _selection(self, selector, labels: Optional[pd.Index], size: int, axis: str) -> np.ndarray:
        if isinstance(selector, pd.Series):
            selector = selector.values
        selector = np.asarray(selector)
        if selector.dtype == bool:
            if len(selector) != size:
                raise InvalidInputError(
                    f"mask length ({len(selector)}) must match n_{axis}s ({size})"
                )
            return np.flatnonzero(selector)
        return np.array([self._resolve(k, labels, size, axis) for k in selector.tolist()], dtype=int)

    def select_rows(self, selector) -> HeatmapMatrix:
        """
        Subset rows by boolean mask, or by a sequence of labels/positions.

        Label/position selections keep the order given by the caller.

        Examples:
            >>> visible = matrix.select_rows(["GENE_B", "GENE_A"])
            >>> high = matrix.select_rows(matrix.data.mean(axis=1) > 2)
        """
        idx = self._selection(selector, self._row_names, self.n_rows, "row")
        return HeatmapMatrix(
            self._data[idx, :],
            row_names=self._row_names[idx] if self._row_names is not None else None,
            column_names=self._column_names,
            quality_flags=self._quality_flags[idx, :],
        )

    def select_columns(self, selector) -> HeatmapMatrix:
        """Subset columns by boolean mask, or by a sequence of labels/positions."""
        idx = self._selection(selector, self._column_names, self.n_columns, "column")
        return HeatmapMatrix(
            self._data[:, idx],
            row_names=self._row_names,
            column_names=self._column_names[idx] if self._column_names is not None else None,
            quality_flags=self._quality_flags[:, idx],
        )

    def with_data(self, data: np.ndarray, quality_flags: Optional[np.ndarray] = None) -> HeatmapMatrix:
        """
        New matrix with the same labels and replacement values.

        Args:
            data: Replacement values; must have the same shape
            quality_flags: Replacement flags; defaults to the current flags

        Raises:
            InvalidInputError: If the shape changes
        """
        data = np.asarray(data, dtype=float)
        if data.shape != self.shape:
            raise InvalidInputError(
                f"Replacement data shape {data.shape} must match matrix shape {self.shape}"
            )
        return HeatmapMatrix(
            data,
            row_names=self._row_names,
            column_names=self._column_names,
            quality_flags=self._quality_flags if quality_flags is None else quality_flags,
        )

    def copy(self, deep: bool = True) -> HeatmapMatrix:
        """
        Create a copy of this matrix.

        Because values are stored read-only, a shallow copy is always safe;
        a deep copy additionally duplicates the label indices.
        """
        if deep:
            return HeatmapMatrix(
                self._data.copy(),
                row_names=self._row_names.copy() if self._row_names is not None else None,
                column_names=self._column_names.copy() if self._column_names is not None else None,
                quality_flags=self._quality_flags.copy(),
            )
        return HeatmapMatrix(
            self._data,
            row_names=self._row_names,
            column_names=self._column_names,
            quality_flags=self._quality_flags,
        )

    def equals(self, other: HeatmapMatrix) -> bool:
        """True when values and labels are identical (flags are ignored)."""
        if not isinstance(other, HeatmapMatrix) or other.shape != self.shape:
            return False
        return (
            bool(np.array_equal(self._data, other._data))
            and _labels_equal(self._row_names, other._row_names)
            and _labels_equal(self._column_names, other._column_names)
        )

    def __repr__(self) -> str:
        """String representation for debugging."""
        text = f"HeatmapMatrix({self.n_rows} rows × {self.n_columns} columns)"
        if self._row_names is not None and self.n_rows:
            text += f"\n  Rows: {self._row_names[0]}...{self._row_names[-1]}"
        if self._column_names is not None and self.n_columns:
            text += f"\n  Columns: {self._column_names[0]}...{self._column_names[-1]}"
        return text


def _labels_equal(a: Optional[pd.Index], b: Optional[pd.Index]) -> bool:
    if a is None or b is None:
        return a is None and b is None
    return a.equals(b)
