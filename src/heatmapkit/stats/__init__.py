"""Statistics-test table: p-values, q-values and highlighting."""

from heatmapkit.stats.table import (
    StatisticsDataset,
    StatisticsTestTable,
    one_way_anova,
    fdr_correction,
)

__all__ = [
    'StatisticsDataset',
    'StatisticsTestTable',
    'one_way_anova',
    'fdr_correction',
]
