"""
I/O for heatmap matrices.

Key Functions:
    - load_csv_matrix: Load a labelled matrix from CSV
    - write_csv_matrix: Write a matrix (data + quality flags) to CSV
    - write_color_grid: Write per-cell colours as hex strings

Examples:
    >>> from heatmapkit.io import load_csv_matrix, write_csv_matrix
    >>> matrix = load_csv_matrix(Path("expression.csv"))
    >>> write_csv_matrix(transformed, Path("results/expression_log2"))
"""

from heatmapkit.io.loaders import load_csv_matrix
from heatmapkit.io.writers import write_csv_matrix, write_color_grid

__all__ = [
    'load_csv_matrix',
    'write_csv_matrix',
    'write_color_grid',
]
