"""
CSV writers for transformed matrices and cell colours.

Output Files:
    {base}.data.csv   transformed values (row labels + column labels)
    {base}.flags.csv  QualityFlag integers per cell (optional)
    colour grid       "#rrggbbaa" per cell, consumed by an external renderer

All files are written atomically (temp file + rename), so an interrupted run
never leaves a half-written CSV behind.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from heatmapkit.color.gradient import ColorGradientMapper
from heatmapkit.core.matrix import HeatmapMatrix
from heatmapkit.utils.fileio import atomic_write_text

logger = logging.getLogger(__name__)

__all__ = ['write_csv_matrix', 'write_color_grid']


def _frame(matrix: HeatmapMatrix, values) -> pd.DataFrame:
    df = matrix.to_dataframe()
    return pd.DataFrame(values, index=df.index, columns=df.columns)


def write_csv_matrix(
    matrix: HeatmapMatrix,
    path: Path,
    write_quality_flags: bool = True,
) -> list[Path]:
    """
    Write a matrix to {path}.data.csv (and {path}.flags.csv).

    Args:
        matrix: Matrix to write
        path: Base path (without extension)
        write_quality_flags: Also write per-cell quality flags

    Returns:
        Paths written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    written = []
    data_path = path.with_name(path.name + ".data.csv")
    atomic_write_text(data_path, matrix.to_dataframe().to_csv())
    written.append(data_path)
    logger.info(f"Wrote data matrix to {data_path}")

    if write_quality_flags:
        flags_path = path.with_name(path.name + ".flags.csv")
        atomic_write_text(flags_path, _frame(matrix, matrix.quality_flags.astype(int)).to_csv())
        written.append(flags_path)
        logger.info(f"Wrote quality flags to {flags_path}")

    return written


def write_color_grid(
    matrix: HeatmapMatrix,
    mapper: ColorGradientMapper,
    path: Path,
    alpha: bool = True,
) -> Path:
    """
    Write the colour of every cell as a hex-string CSV.

    Args:
        matrix: Matrix to colour
        mapper: Gradient mapper holding the colour range
        path: Output CSV path
        alpha: Include the alpha channel ("#rrggbbaa")

    Returns:
        Path written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    atomic_write_text(path, _frame(matrix, mapper.hex_grid(matrix, alpha=alpha)).to_csv())
    logger.info(f"Wrote {matrix.n_rows}x{matrix.n_columns} colour grid to {path}")
    return path
