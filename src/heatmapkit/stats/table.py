"""
Numeric backend of the statistics-test table.

The table shows one row per feature and one column per sample, with samples
grouped by experimental condition. Next to the measurements it shows a p-value
per feature (one-way ANOVA across conditions by default) and, optionally, a
q-value from a multiple-testing correction. Cells are coloured with a
heatmap-like gradient and condition boundaries are drawn as separators.

Everything here is independent of how the table is drawn:
- StatisticsDataset: measurements + one condition label per sample
- one_way_anova / fdr_correction: the numeric contracts of test and correction
- StatisticsTestTable: computes and caches the results, and answers the
  highlighter questions (significant rows, separators, cell/header colours)

References:
    - Benjamini & Hochberg (1995) J R Stat Soc B 57(1):289-300
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Callable, Hashable, Literal, Optional

import numpy as np
import pandas as pd
from numpy.typing import NDArray
from scipy import stats

from heatmapkit.color.gradient import Color, ColorGradientMapper, ColorLike, ColorRange
from heatmapkit.color.palette import condition_colors
from heatmapkit.core.errors import InvalidInputError
from heatmapkit.core.matrix import HeatmapMatrix

logger = logging.getLogger(__name__)

__all__ = [
    'StatisticsDataset',
    'StatisticsTestTable',
    'one_way_anova',
    'fdr_correction',
]

CorrectionMethod = Literal["BH", "BY", "bonferroni"]
ProgressCallback = Callable[[int, int], None]
StatisticalTest = Callable[["StatisticsDataset"], NDArray[np.float64]]


@dataclass(frozen=True)
class StatisticsDataset:
    """
    Measurements (features × samples) plus the condition of every sample.

    Attributes:
        matrix: Labelled or unlabelled measurements
        conditions: One condition label per column
    """
    matrix: HeatmapMatrix
    conditions: tuple[Hashable, ...]

    def __post_init__(self) -> None:
        conditions = tuple(self.conditions)
        if len(conditions) != self.matrix.n_columns:
            raise InvalidInputError(
                f"conditions length ({len(conditions)}) must match number of samples "
                f"({self.matrix.n_columns})"
            )
        object.__setattr__(self, "conditions", conditions)

    @property
    def condition_names(self) -> list[Hashable]:
        """Distinct conditions in order of first appearance."""
        return list(dict.fromkeys(self.conditions))

    def groups(self, row: int) -> list[NDArray[np.float64]]:
        """Values of one feature split by condition (NaNs dropped)."""
        values = self.matrix.data[row]
        labels = np.array(self.conditions, dtype=object)
        out = []
        for cond in self.condition_names:
            group = values[labels == cond]
            out.append(group[~np.isnan(group)])
        return out


def one_way_anova(dataset: StatisticsDataset) -> NDArray[np.float64]:
    """
    Per-feature one-way ANOVA p-value across conditions.

    Features whose statistic is undefined (fewer than two usable groups, or
    no variance within and between groups) get NaN.

    Returns:
        Array of p-values, one per row
    """
    pvalues = np.full(dataset.matrix.n_rows, np.nan)
    for i in range(dataset.matrix.n_rows):
        groups = [g for g in dataset.groups(i) if len(g) > 0]
        if len(groups) < 2 or sum(len(g) for g in groups) <= len(groups):
            continue
        with warnings.catch_warnings():
            # Constant input warns and returns NaN, which is the contract here
            warnings.simplefilter("ignore")
            result = stats.f_oneway(*groups)
        pvalues[i] = float(result.pvalue)
    return pvalues


def fdr_correction(
    pvalues: NDArray[np.float64],
    method: CorrectionMethod = "BH",
    alpha: float = 0.05,
) -> NDArray[np.float64]:
    """
    Apply multiple testing correction.

    Args:
        pvalues: Array of raw p-values (NaN allowed, preserved)
        method: "BH" (Benjamini-Hochberg), "BY" (Benjamini-Yekutieli), or
            "bonferroni"
        alpha: Significance threshold passed to statsmodels

    Returns:
        Array of adjusted p-values (q-values)
    """
    from statsmodels.stats.multitest import multipletests

    pvalues = np.asarray(pvalues, dtype=float)
    valid_mask = ~np.isnan(pvalues)
    adj_pvals = np.full_like(pvalues, np.nan)

    if not np.any(valid_mask):
        return adj_pvals

    method_map = {"BH": "fdr_bh", "BY": "fdr_by", "bonferroni": "bonferroni"}
    if method not in method_map:
        raise ValueError(f"Unknown correction method: {method}")
    _, adj_pvals[valid_mask], _, _ = multipletests(
        pvalues[valid_mask],
        alpha=alpha,
        method=method_map[method],
    )

    return adj_pvals


class StatisticsTestTable:
    """
    Results and highlighting decisions for a statistics-test table.

    The q-value column only exists when a correction is configured.

    Examples:
        >>> dataset = StatisticsDataset(matrix, ["A"] * 5 + ["B"] * 5 + ["C"] * 5)
        >>> table = StatisticsTestTable(dataset, correction="BH")
        >>> results = table.compute()
        >>> results.columns.tolist()
        ['p_value', 'q_value']
        >>> table.significant_rows()
    """

    def __init__(
        self,
        dataset: StatisticsDataset,
        test: StatisticalTest = one_way_anova,
        correction: Optional[CorrectionMethod] = "BH",
        alpha: float = 0.05,
        progress: Optional[ProgressCallback] = None,
        batch_size: int = 100,
    ) -> None:
        if not 0 < alpha < 1:
            raise ValueError(f"alpha must be in (0, 1), got {alpha}")
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.dataset = dataset
        self.test = test
        self.correction = correction
        self.alpha = alpha
        self.progress = progress
        self.batch_size = batch_size
        self._results: Optional[pd.DataFrame] = None

    @property
    def matrix(self) -> HeatmapMatrix:
        return self.dataset.matrix

    def _row_index(self) -> pd.Index:
        names = self.matrix.row_names
        return names if names is not None else pd.RangeIndex(self.matrix.n_rows)

    def compute(self) -> pd.DataFrame:
        """
        Compute p-values (and q-values), reporting progress per row batch.

        Results are cached; the dataset is immutable.
        """
        if self._results is not None:
            return self._results

        n = self.matrix.n_rows
        pvalues = np.full(n, np.nan)
        for start in range(0, n, self.batch_size):
            stop = min(start + self.batch_size, n)
            mask = np.zeros(n, dtype=bool)
            mask[start:stop] = True
            batch = StatisticsDataset(self.matrix.select_rows(mask), self.dataset.conditions)
            pvalues[start:stop] = self.test(batch)
            if self.progress is not None:
                self.progress(stop, n)

        results = pd.DataFrame({"p_value": pvalues}, index=self._row_index())
        if self.correction is not None:
            results["q_value"] = fdr_correction(pvalues, self.correction, self.alpha)

        n_nan = int(np.isnan(pvalues).sum())
        if n_nan:
            logger.warning(f"{n_nan}/{n} feature(s) have an undefined p-value")
        self._results = results
        return results

    def significant_rows(self) -> list[Hashable]:
        """Rows with q-value (or p-value without correction) below alpha."""
        results = self.compute()
        column = "q_value" if "q_value" in results.columns else "p_value"
        return results.index[results[column] < self.alpha].tolist()

    def condition_boundaries(self) -> list[int]:
        """Column positions where a new condition starts (excluding column 0)."""
        conditions = self.dataset.conditions
        return [i for i in range(1, len(conditions)) if conditions[i] != conditions[i - 1]]

    def value_colors(
        self,
        low_color: ColorLike = Color(255, 0, 0),
        high_color: ColorLike = Color(0, 255, 0),
        mid_color: Optional[ColorLike] = None,
    ) -> list[list[Color]]:
        """
        Gradient colours for every measurement, over the data range.

        Raises:
            InvalidInputError: If the measurements contain NaN
        """
        finite = self.matrix.data[np.isfinite(self.matrix.data)]
        if finite.size == 0:
            raise InvalidInputError("No finite values to colour")
        color_range = ColorRange(float(finite.min()), float(finite.max()), low_color, high_color, mid_color)
        return ColorGradientMapper(color_range).colors_for(self.matrix)

    def header_colors(self) -> list[Color]:
        """Colour of each sample header, by condition."""
        mapping = condition_colors(self.dataset.conditions)
        return [mapping[c] for c in self.dataset.conditions]

    def to_frame(self) -> pd.DataFrame:
        """Measurements followed by the result columns, as displayed."""
        values = self.matrix.to_dataframe()
        values.index = self._row_index()
        return pd.concat([values, self.compute()], axis=1)
