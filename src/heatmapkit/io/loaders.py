"""
CSV loader for heatmap matrices.

Expected CSV format:
- First column: row labels (genes, proteins, probes)
- Header: column labels (samples, conditions)
- Remaining cells: numbers

Example:
```
"","CTRL_1","CTRL_2","ALS_1"
"GENE_A",612,1056,98
"GENE_B",0,1,4
```

Missing cells are loaded as NaN; the transform step rejects them, so impute
or drop them first.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from heatmapkit.core.errors import InvalidInputError
from heatmapkit.core.matrix import HeatmapMatrix

logger = logging.getLogger(__name__)

__all__ = ['load_csv_matrix']


def load_csv_matrix(path: Path, sep: str = ",") -> HeatmapMatrix:
    """
    Load a CSV matrix with row labels in the first column.

    Args:
        path: Path to CSV file
        sep: Field delimiter ("," or "\\t")

    Returns:
        Labelled HeatmapMatrix

    Raises:
        FileNotFoundError: If path does not exist
        InvalidInputError: If the file is empty, has no numeric cells, or
            contains non-numeric values
    """
    if not isinstance(path, Path):
        path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {path}")

    if not path.is_file():
        raise InvalidInputError(f"Path is not a file: {path}")

    try:
        df = pd.read_csv(path, index_col=0, sep=sep)
    except pd.errors.EmptyDataError as e:
        raise InvalidInputError(f"CSV file is empty: {path}") from e
    except pd.errors.ParserError as e:
        raise InvalidInputError(f"Failed to parse CSV file {path}: {e}") from e

    if df.empty:
        raise InvalidInputError(f"CSV contains no data: {path}")

    for column in df.columns:
        if not pd.api.types.is_numeric_dtype(df[column]):
            coerced = pd.to_numeric(df[column], errors="coerce")
            bad = coerced.isna() & df[column].notna()
            if not bad.any():
                df[column] = coerced
                continue
            row = df.index[bad.to_numpy()][0]
            raise InvalidInputError(
                f"Non-numeric value {df.at[row, column]!r} in {path} "
                f"(row {row!r}, column {column!r})",
                row=row,
                column=column,
            )

    matrix = HeatmapMatrix.from_dataframe(df)
    logger.info(f"Loaded {matrix.n_rows} rows × {matrix.n_columns} columns from {path}")
    return matrix
