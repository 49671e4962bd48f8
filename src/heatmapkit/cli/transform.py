"""
heatmapkit transform command - transform, center and clip a matrix.

Usage:
    heatmapkit transform --input data.csv --output results/data_log2 --transform log2p1 --centering median --clip
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

import numpy as np

from heatmapkit.cli._validators import _positive_float
from heatmapkit.core.quality import QualityFlag
from heatmapkit.heatmap.operations import (
    Centering,
    ClipMethod,
    MatrixTransformer,
    ScalarTransform,
    TransformSpec,
)
from heatmapkit.io.loaders import load_csv_matrix
from heatmapkit.io.writers import write_csv_matrix
from heatmapkit.utils.fileio import atomic_write_json


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the transform subcommand."""
    parser = subparsers.add_parser(
        "transform",
        help="Log/z-score transform, center and clip a matrix",
        description="Apply a scalar transform, per-row centering and symmetric clipping to a CSV matrix"
    )

    parser.add_argument("--config", "-c", type=Path, default=None,
                        help="Path to YAML/JSON config file (optional, CLI args override config values)")
    parser.add_argument("--input", "-i", type=Path, required=False,
                        help="Input CSV (row labels in first column, column labels in header)")
    parser.add_argument("--output", "-o", type=Path, required=False,
                        help="Output base path (without extension)")
    parser.add_argument("--transform", choices=[t.value for t in ScalarTransform], default="identity",
                        help="Element-wise transform (default: identity). log2p1/log10p1 = log(x + 1); "
                             "zscore standardizes each column")
    parser.add_argument("--centering", choices=[c.value for c in Centering], default="none",
                        help="Subtract the per-row mean or median after the transform (default: none)")
    parser.add_argument("--clip", dest="clip", action="store_true", default=False,
                        help="Clamp values to +/- clip-multiplier x spread")
    parser.add_argument("--no-clip", dest="clip", action="store_false",
                        help="Disable clipping (overrides a config file)")
    parser.add_argument("--clip-method", choices=[m.value for m in ClipMethod], default="iqr",
                        help="Spread used for the clip bound: iqr or std (default: iqr)")
    parser.add_argument("--clip-multiplier", type=_positive_float, default=3.0,
                        help="Multiple of the spread used as clip bound (default: 3.0)")
    parser.add_argument("--no-flags", dest="write_flags", action="store_false", default=True,
                        help="Do not write the .flags.csv quality flag file")
    parser.add_argument("--sep", default=",",
                        help="Input field delimiter (default: ',')")

    parser.set_defaults(func=run_transform)


def run_transform(args: argparse.Namespace) -> int:
    """Execute the transform command."""
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    logger = logging.getLogger(__name__)

    if args.config:
        from heatmapkit.cli.config import load_config, merge_config_with_args, validate_config

        print(f"Loading configuration from: {args.config}")
        try:
            config = load_config(args.config)
            validate_config(config)
            args = merge_config_with_args(config, args, getattr(args, "_raw_args", sys.argv[2:]))
            print("  Configuration loaded successfully")
        except (FileNotFoundError, ValueError) as e:
            print(f"ERROR: Config file error: {e}")
            return 1

    if not args.input:
        print("ERROR: --input is required (via CLI or config file)")
        return 1
    if not args.output:
        print("ERROR: --output is required (via CLI or config file)")
        return 1

    start_time = datetime.now()

    try:
        spec = TransformSpec(
            transform=args.transform,
            centering=args.centering,
            clip=args.clip,
            clip_method=args.clip_method,
            clip_multiplier=float(args.clip_multiplier),
        )
        matrix = load_csv_matrix(args.input, sep=args.sep)
        print(f"Loaded {matrix.n_rows} rows × {matrix.n_columns} columns from {args.input}")

        transformer = MatrixTransformer(spec)
        print(f"Applying {transformer!r}")
        result = transformer.apply(matrix)
    except (FileNotFoundError, ValueError) as e:
        print(f"ERROR: {e}")
        return 1

    written = write_csv_matrix(result, args.output, write_quality_flags=args.write_flags)

    flags = result.quality_flags
    counts = {
        flag.name.lower(): int(np.sum((flags & int(flag)) != 0))
        for flag in (QualityFlag.FLOORED, QualityFlag.CLIPPED, QualityFlag.ZERO_VARIANCE)
    }
    params = {
        'timestamp': start_time.isoformat(),
        'input': str(args.input),
        'output': [str(p) for p in written],
        'n_rows': result.n_rows,
        'n_columns': result.n_columns,
        'spec': spec.to_params(),
        'value_range': [result.min(), result.max()],
        'flag_counts': counts,
    }
    params_path = Path(str(args.output) + ".params.json")
    atomic_write_json(params_path, params)
    logger.info(f"Wrote parameters to {params_path}")

    print(f"\nTransformed values range: [{result.min():.4g}, {result.max():.4g}]")
    for name, count in counts.items():
        if count:
            print(f"  {name}: {count} cell(s)")
    print(f"Done in {(datetime.now() - start_time).total_seconds():.2f}s")
    return 0
