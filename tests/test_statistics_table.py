"""
Tests for per-feature ANOVA, FDR correction and the statistics-test table.
"""

import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_allclose
from scipy import stats

from conftest import conditions_of
from heatmapkit.color.gradient import Color
from heatmapkit.core.errors import InvalidInputError
from heatmapkit.core.matrix import HeatmapMatrix
from heatmapkit.stats.table import (
    StatisticsDataset,
    StatisticsTestTable,
    fdr_correction,
    one_way_anova,
)


@pytest.fixture
def dataset(small_matrix):
    """log2 intensities, where the 8x effect is a 3-unit shift."""
    log_matrix = small_matrix.with_data(np.log2(small_matrix.data))
    return StatisticsDataset(log_matrix, conditions_of(small_matrix))


class TestStatisticsDataset:

    def test_condition_count_must_match(self, tiny_matrix):
        with pytest.raises(InvalidInputError, match="conditions length"):
            StatisticsDataset(tiny_matrix, ["A", "B"])

    def test_condition_names_in_first_appearance_order(self, tiny_matrix):
        dataset = StatisticsDataset(tiny_matrix, ["B", "A", "B"])
        assert dataset.condition_names == ["B", "A"]
        groups = dataset.groups(0)
        assert_allclose(groups[0], [1.0, 3.0])
        assert_allclose(groups[1], [2.0])

    def test_groups_drop_nan(self):
        matrix = HeatmapMatrix([[1.0, np.nan, 3.0, 4.0]])
        dataset = StatisticsDataset(matrix, ["A", "A", "B", "B"])
        assert_allclose(dataset.groups(0)[0], [1.0])


class TestOneWayAnova:

    def test_matches_scipy(self, dataset):
        pvalues = one_way_anova(dataset)
        expected = stats.f_oneway(*dataset.groups(3)).pvalue
        assert pvalues.shape == (dataset.matrix.n_rows,)
        assert pvalues[3] == pytest.approx(expected)

    def test_effect_genes_are_significant(self, dataset):
        pvalues = one_way_anova(dataset)
        assert np.all(pvalues[:6] < 0.01)

    def test_single_condition_is_nan(self, tiny_matrix):
        dataset = StatisticsDataset(tiny_matrix, ["A", "A", "A"])
        assert np.all(np.isnan(one_way_anova(dataset)))

    def test_no_within_group_df_is_nan(self, tiny_matrix):
        dataset = StatisticsDataset(tiny_matrix, ["A", "B", "C"])
        assert np.all(np.isnan(one_way_anova(dataset)))


class TestFdrCorrection:

    def test_bh_monotone_and_bounded(self):
        pvalues = np.array([0.001, 0.01, 0.02, 0.04, 0.5])
        qvalues = fdr_correction(pvalues, "BH")
        assert np.all(qvalues >= pvalues)
        assert np.all(qvalues <= 1.0)
        order = np.argsort(pvalues)
        assert np.all(np.diff(qvalues[order]) >= 0)

    def test_nan_preserved(self):
        qvalues = fdr_correction(np.array([0.01, np.nan, 0.02]))
        assert np.isnan(qvalues[1])
        assert not np.isnan(qvalues[0])

    def test_bonferroni(self):
        assert_allclose(fdr_correction(np.array([0.01, 0.2]), "bonferroni"), [0.02, 0.4])

    def test_unknown_method(self):
        with pytest.raises(ValueError, match="Unknown correction"):
            fdr_correction(np.array([0.1]), "holm-sidak")


class TestStatisticsTestTable:

    def test_columns_with_correction(self, dataset):
        results = StatisticsTestTable(dataset, correction="BH").compute()
        assert list(results.columns) == ["p_value", "q_value"]
        assert results.index.equals(dataset.matrix.row_names)

    def test_no_correction_no_q_column(self, dataset):
        results = StatisticsTestTable(dataset, correction=None).compute()
        assert list(results.columns) == ["p_value"]

    def test_results_cached(self, dataset):
        table = StatisticsTestTable(dataset)
        assert table.compute() is table.compute()

    def test_progress_reported_per_batch(self, medium_matrix):
        dataset = StatisticsDataset(medium_matrix, conditions_of(medium_matrix))
        calls = []
        table = StatisticsTestTable(dataset, progress=lambda done, total: calls.append((done, total)),
                                    batch_size=200)
        batched = table.compute()
        assert calls == [(200, 500), (400, 500), (500, 500)]
        unbatched = one_way_anova(dataset)
        assert_allclose(batched["p_value"].to_numpy(), unbatched)

    def test_significant_rows(self, dataset):
        significant = StatisticsTestTable(dataset, correction="BH").significant_rows()
        assert set(significant) >= {f"GENE_{i:05d}" for i in range(6)}

    def test_invalid_parameters(self, dataset):
        with pytest.raises(ValueError, match="alpha"):
            StatisticsTestTable(dataset, alpha=1.5)
        with pytest.raises(ValueError, match="batch_size"):
            StatisticsTestTable(dataset, batch_size=0)

    def test_condition_boundaries(self, dataset):
        assert StatisticsTestTable(dataset).condition_boundaries() == [3, 6]

    def test_header_colors(self, dataset):
        headers = StatisticsTestTable(dataset).header_colors()
        assert len(headers) == 9
        assert headers[0] == headers[2]
        assert headers[0] != headers[3]

    def test_value_colors_span_red_to_green(self, tiny_matrix):
        table = StatisticsTestTable(StatisticsDataset(tiny_matrix, ["A", "A", "B"]))
        colors = table.value_colors()
        assert colors[0][0] == Color(255, 0, 0)
        assert colors[1][2] == Color(0, 255, 0)

    def test_to_frame(self, dataset):
        frame = StatisticsTestTable(dataset).to_frame()
        assert isinstance(frame, pd.DataFrame)
        assert frame.shape == (60, 9 + 2)
        assert list(frame.columns[-2:]) == ["p_value", "q_value"]
