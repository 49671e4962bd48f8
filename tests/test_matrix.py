"""
Tests for HeatmapMatrix construction, addressing and immutability.
"""

import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_allclose

from heatmapkit.core.errors import HeatmapError, InvalidInputError
from heatmapkit.core.matrix import HeatmapMatrix
from heatmapkit.core.quality import QualityFlag


class TestConstruction:
    """Shape and label validation."""

    def test_nested_lists(self, tiny_matrix):
        assert tiny_matrix.shape == (2, 3)
        assert tiny_matrix.data.dtype == np.float64
        assert list(tiny_matrix.row_names) == ["GENE_A", "GENE_B"]

    def test_unlabelled(self):
        matrix = HeatmapMatrix([[1, 2], [3, 4]])
        assert matrix.row_names is None
        assert matrix.column_names is None
        assert not matrix.has_labels

    def test_ragged_rows_rejected(self):
        with pytest.raises(InvalidInputError):
            HeatmapMatrix([[1.0, 2.0], [3.0]])

    def test_one_dimensional_rejected(self):
        with pytest.raises(InvalidInputError, match="2D"):
            HeatmapMatrix([1.0, 2.0, 3.0])

    def test_non_numeric_rejected(self):
        with pytest.raises(InvalidInputError):
            HeatmapMatrix([["a", "b"]])

    def test_label_length_mismatch(self):
        with pytest.raises(InvalidInputError, match="row_names"):
            HeatmapMatrix([[1, 2]], row_names=["A", "B"])

    def test_duplicate_labels(self):
        with pytest.raises(InvalidInputError, match="unique"):
            HeatmapMatrix([[1, 2]], column_names=["S1", "S1"])

    def test_empty_matrix_is_allowed(self):
        matrix = HeatmapMatrix(np.empty((0, 3)))
        assert matrix.is_empty
        assert matrix.shape == (0, 3)

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            HeatmapMatrix([1.0])
        assert issubclass(InvalidInputError, HeatmapError)

    def test_default_flags_are_original(self, tiny_matrix):
        assert tiny_matrix.quality_flags.shape == tiny_matrix.shape
        assert np.all(tiny_matrix.quality_flags == QualityFlag.ORIGINAL)

    def test_flag_shape_mismatch(self):
        with pytest.raises(InvalidInputError, match="quality_flags"):
            HeatmapMatrix([[1, 2]], quality_flags=np.zeros((2, 2)))


class TestImmutability:
    """Stored arrays are read-only copies."""

    def test_source_array_not_shared(self):
        source = np.array([[1.0, 2.0]])
        matrix = HeatmapMatrix(source)
        source[0, 0] = 99.0
        assert matrix.value(0, 0) == 1.0

    def test_data_is_read_only(self, tiny_matrix):
        with pytest.raises(ValueError):
            tiny_matrix.data[0, 0] = 10.0
        with pytest.raises(ValueError):
            tiny_matrix.quality_flags[0, 0] = 1

    def test_with_data_returns_new_matrix(self, tiny_matrix):
        doubled = tiny_matrix.with_data(tiny_matrix.data * 2)
        assert doubled is not tiny_matrix
        assert doubled.value("GENE_A", "S1") == 2.0
        assert tiny_matrix.value("GENE_A", "S1") == 1.0
        assert list(doubled.column_names) == ["S1", "S2", "S3"]

    def test_with_data_shape_checked(self, tiny_matrix):
        with pytest.raises(InvalidInputError, match="shape"):
            tiny_matrix.with_data(np.zeros((3, 2)))

    def test_copy_equals(self, tiny_matrix):
        assert tiny_matrix.copy().equals(tiny_matrix)
        assert tiny_matrix.copy(deep=False).equals(tiny_matrix)


class TestAddressing:
    """Label and position lookups."""

    def test_value_by_label_and_position(self, tiny_matrix):
        assert tiny_matrix.value("GENE_B", "S2") == 5.0
        assert tiny_matrix.value(1, 1) == 5.0
        assert tiny_matrix.value(-1, -1) == 6.0

    def test_unknown_label(self, tiny_matrix):
        with pytest.raises(InvalidInputError) as exc_info:
            tiny_matrix.value("GENE_Z", "S1")
        assert exc_info.value.row == "GENE_Z"

    def test_position_out_of_range(self, tiny_matrix):
        with pytest.raises(InvalidInputError, match="out of range"):
            tiny_matrix.column_index(3)

    @pytest.mark.parametrize("key", [["GENE_A"], {"GENE_A": 0}, np.array([0])])
    def test_unhashable_key(self, tiny_matrix, key):
        with pytest.raises(InvalidInputError, match="label or position"):
            tiny_matrix.row_index(key)

    def test_unhashable_key_in_selection(self, tiny_matrix):
        with pytest.raises(InvalidInputError):
            tiny_matrix.select_columns([["S1"], ["S2"]])

    def test_integer_labels_take_precedence(self):
        matrix = HeatmapMatrix([[1.0, 2.0]], row_names=["r"], column_names=[1, 0])
        assert matrix.value("r", 0) == 2.0

    def test_row_and_column(self, tiny_matrix):
        assert_allclose(tiny_matrix.row("GENE_A"), [1.0, 2.0, 3.0])
        assert_allclose(tiny_matrix.column("S3"), [3.0, 6.0])

    def test_min_max(self, tiny_matrix):
        assert tiny_matrix.min() == 1.0
        assert tiny_matrix.max() == 6.0

    def test_min_of_empty_raises(self):
        with pytest.raises(InvalidInputError):
            HeatmapMatrix(np.empty((0, 0))).min()


class TestSelection:
    """Row/column subsetting."""

    def test_select_rows_keeps_caller_order(self, tiny_matrix):
        subset = tiny_matrix.select_rows(["GENE_B", "GENE_A"])
        assert list(subset.row_names) == ["GENE_B", "GENE_A"]
        assert_allclose(subset.data[0], [4.0, 5.0, 6.0])

    def test_select_columns_by_mask(self, tiny_matrix):
        subset = tiny_matrix.select_columns(np.array([True, False, True]))
        assert list(subset.column_names) == ["S1", "S3"]
        assert subset.shape == (2, 2)

    def test_mask_length_checked(self, tiny_matrix):
        with pytest.raises(InvalidInputError, match="mask length"):
            tiny_matrix.select_rows(np.array([True]))

    def test_selection_carries_flags(self):
        flags = np.array([[0, 1], [2, 4]])
        matrix = HeatmapMatrix([[1, 2], [3, 4]], quality_flags=flags)
        assert_allclose(matrix.select_rows([1]).quality_flags, [[2, 4]])


class TestDataFrame:
    """pandas round trip."""

    def test_from_dataframe(self):
        df = pd.DataFrame({"S1": [1.0, 2.0], "S2": [3.0, 4.0]}, index=["A", "B"])
        matrix = HeatmapMatrix.from_dataframe(df)
        assert matrix.value("B", "S2") == 4.0
        pd.testing.assert_frame_equal(matrix.to_dataframe(), df)

    def test_from_dataframe_rejects_text(self):
        df = pd.DataFrame({"S1": [1.0], "note": ["x"]}, index=["A"])
        with pytest.raises(InvalidInputError) as exc_info:
            HeatmapMatrix.from_dataframe(df)
        assert exc_info.value.column == "note"

    def test_to_dataframe_unlabelled_uses_positions(self):
        df = HeatmapMatrix([[1, 2]]).to_dataframe()
        assert list(df.index) == [0]
        assert list(df.columns) == [0, 1]
