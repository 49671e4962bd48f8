"""
heatmapkit stats command - per-feature ANOVA p-values and FDR q-values.

Usage:
    heatmapkit stats --input data.csv --conditions CTRL,CTRL,ALS,ALS,SOD1,SOD1 --output anova.csv
"""

import argparse
import logging
from pathlib import Path

from heatmapkit.cli._validators import _label_list, _positive_int, _probability
from heatmapkit.io.loaders import load_csv_matrix
from heatmapkit.stats.table import StatisticsDataset, StatisticsTestTable
from heatmapkit.utils.fileio import atomic_write_text


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the stats subcommand."""
    parser = subparsers.add_parser(
        "stats",
        help="Per-feature ANOVA p-values and FDR q-values",
        description="One-way ANOVA across conditions for every row, with optional multiple-testing correction"
    )

    parser.add_argument("--input", "-i", type=Path, required=True,
                        help="Input CSV (row labels in first column, column labels in header)")
    parser.add_argument("--output", "-o", type=Path, required=True,
                        help="Output CSV (measurements + p_value [+ q_value])")
    parser.add_argument("--conditions", type=_label_list, required=True,
                        help="Comma-separated condition of every column, in column order")
    parser.add_argument("--correction", choices=["BH", "BY", "bonferroni", "none"], default="BH",
                        help="Multiple-testing correction (default: BH)")
    parser.add_argument("--alpha", type=_probability, default=0.05,
                        help="Significance threshold (default: 0.05)")
    parser.add_argument("--batch-size", type=_positive_int, default=500,
                        help="Rows per progress update (default: 500)")
    parser.add_argument("--sep", default=",",
                        help="Input field delimiter (default: ',')")

    parser.set_defaults(func=run_stats)


def run_stats(args: argparse.Namespace) -> int:
    """Execute the stats command."""
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    logger = logging.getLogger(__name__)

    def report(done: int, total: int) -> None:
        logger.info(f"  p-values: {done}/{total} rows")

    try:
        matrix = load_csv_matrix(args.input, sep=args.sep)
        dataset = StatisticsDataset(matrix, tuple(args.conditions))
        table = StatisticsTestTable(
            dataset,
            correction=None if args.correction == "none" else args.correction,
            alpha=args.alpha,
            progress=report,
            batch_size=args.batch_size,
        )
        frame = table.to_frame()
    except (FileNotFoundError, ValueError) as e:
        print(f"ERROR: {e}")
        return 1

    args.output.parent.mkdir(parents=True, exist_ok=True)
    atomic_write_text(args.output, frame.to_csv())

    significant = table.significant_rows()
    print(f"Conditions: {', '.join(map(str, dataset.condition_names))}")
    print(f"Significant rows (alpha={args.alpha}): {len(significant)}/{matrix.n_rows}")
    print(f"Wrote results to {args.output}")
    return 0
