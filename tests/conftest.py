"""
Pytest configuration and shared fixtures for heatmapkit tests.

This module provides test data generators and shared fixtures for all test suites.
"""

import numpy as np
import pandas as pd
import pytest
from pathlib import Path

from heatmapkit.core.matrix import HeatmapMatrix


def generate_synthetic_expression_matrix(
    n_genes: int,
    n_samples: int,
    n_conditions: int = 3,
    effect_fraction: float = 0.1,
    seed: int = 42
) -> HeatmapMatrix:
    """
    Generate a synthetic expression matrix with condition-structured samples.

    Args:
        n_genes: Number of genes (rows)
        n_samples: Number of samples (columns); should be divisible by n_conditions
        n_conditions: Number of experimental conditions, samples grouped in order
        effect_fraction: Fraction of genes shifted in the last condition
        seed: Random seed for reproducibility

    Returns:
        Labelled HeatmapMatrix of positive, log-normal intensities

    Design:
        - Log-normal values (realistic for intensities, always > 0)
        - The first effect_fraction of genes are up-regulated 8x in the last
          condition, so ANOVA has something to find
        - Column labels encode the condition: "COND{k}_{i}"
    """
    rng = np.random.RandomState(seed)
    data = rng.lognormal(mean=5, sigma=0.3, size=(n_genes, n_samples))

    per_condition = n_samples // n_conditions
    n_effect = int(n_genes * effect_fraction)
    last_start = (n_conditions - 1) * per_condition
    data[:n_effect, last_start:] *= 8.0

    row_names = [f"GENE_{i:05d}" for i in range(n_genes)]
    column_names = [
        f"COND{min(i // per_condition, n_conditions - 1)}_{i:03d}" for i in range(n_samples)
    ]
    return HeatmapMatrix(data, row_names=row_names, column_names=column_names)


def conditions_of(matrix: HeatmapMatrix) -> list[str]:
    """Condition label encoded in each column name."""
    return [str(name).split("_")[0] for name in matrix.column_names]


@pytest.fixture
def tiny_matrix():
    """2 × 3 labelled matrix with hand-checkable values."""
    return HeatmapMatrix(
        [[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]],
        row_names=["GENE_A", "GENE_B"],
        column_names=["S1", "S2", "S3"],
    )


@pytest.fixture
def small_matrix():
    """Small test matrix (60 genes x 9 samples, 3 conditions) for fast unit tests."""
    return generate_synthetic_expression_matrix(n_genes=60, n_samples=9, seed=42)


@pytest.fixture
def medium_matrix():
    """Medium test matrix (500 genes x 30 samples) for batch/progress tests."""
    return generate_synthetic_expression_matrix(n_genes=500, n_samples=30, seed=7)


def save_test_matrix_csv(matrix: HeatmapMatrix, path: Path) -> Path:
    """
    Save a HeatmapMatrix to CSV (row labels in first column).

    Args:
        matrix: Matrix to save
        path: Output CSV path

    Returns:
        The path, for chaining
    """
    df = pd.DataFrame(matrix.data, index=matrix.row_names, columns=matrix.column_names)
    df.to_csv(path)
    return path


@pytest.fixture
def small_csv(tmp_path, small_matrix):
    """small_matrix written to a CSV file."""
    return save_test_matrix_csv(small_matrix, tmp_path / "small.csv")
