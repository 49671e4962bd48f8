"""
heatmapkit colorize command - map matrix values to gradient colours.

Usage:
    heatmapkit colorize --input data.csv --output colors.csv --low-color blue --high-color red
    heatmapkit colorize --input data.csv --output colors.csv --mid-color white --range -2 2
"""

import argparse
import logging
import sys
from pathlib import Path

from heatmapkit.cli._validators import _color
from heatmapkit.color.gradient import Color, ColorGradientMapper, ColorRange
from heatmapkit.io.loaders import load_csv_matrix
from heatmapkit.io.writers import write_color_grid


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the colorize subcommand."""
    parser = subparsers.add_parser(
        "colorize",
        help="Map matrix values to a colour gradient",
        description="Write the gradient colour of every cell as '#rrggbbaa' hex strings"
    )

    parser.add_argument("--config", "-c", type=Path, default=None,
                        help="Path to YAML/JSON config file (optional, CLI args override config values)")
    parser.add_argument("--input", "-i", type=Path, required=False,
                        help="Input CSV (row labels in first column, column labels in header)")
    parser.add_argument("--output", "-o", type=Path, required=False,
                        help="Output CSV of hex colours")
    parser.add_argument("--low-color", type=_color, default=Color(0, 0, 255),
                        help="Colour of the range minimum: name, #rrggbb or r,g,b (default: blue)")
    parser.add_argument("--high-color", type=_color, default=Color(255, 0, 0),
                        help="Colour of the range maximum (default: red)")
    parser.add_argument("--mid-color", type=_color, default=None,
                        help="Optional colour of the range midpoint (three-colour gradient)")
    parser.add_argument("--range", nargs=2, type=float, default=None, metavar=("LOW", "HIGH"),
                        help="Colour range (default: data min and max)")
    parser.add_argument("--no-alpha", dest="alpha", action="store_false", default=True,
                        help="Write '#rrggbb' without the alpha channel")
    parser.add_argument("--sep", default=",",
                        help="Input field delimiter (default: ',')")

    parser.set_defaults(func=run_colorize)


def run_colorize(args: argparse.Namespace) -> int:
    """Execute the colorize command."""
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

    if args.config:
        from heatmapkit.cli.config import load_config, merge_config_with_args, validate_config

        print(f"Loading configuration from: {args.config}")
        try:
            config = load_config(args.config)
            validate_config(config)
            args = merge_config_with_args(config, args, getattr(args, "_raw_args", sys.argv[2:]))
        except (FileNotFoundError, ValueError) as e:
            print(f"ERROR: Config file error: {e}")
            return 1

    if not args.input:
        print("ERROR: --input is required (via CLI or config file)")
        return 1
    if not args.output:
        print("ERROR: --output is required (via CLI or config file)")
        return 1

    try:
        matrix = load_csv_matrix(args.input, sep=args.sep)
        if args.range is not None:
            color_range = ColorRange(args.range[0], args.range[1], args.low_color, args.high_color, args.mid_color)
        else:
            color_range = ColorRange.from_matrix(matrix, args.low_color, args.high_color, args.mid_color)
        mapper = ColorGradientMapper(color_range)
        path = write_color_grid(matrix, mapper, args.output, alpha=args.alpha)
    except (FileNotFoundError, ValueError) as e:
        print(f"ERROR: {e}")
        return 1

    print(f"Colour range: [{color_range.low:.4g}, {color_range.high:.4g}] "
          f"{color_range.low_color.to_hex()} -> {color_range.high_color.to_hex()}")
    print(f"Wrote {matrix.n_rows}x{matrix.n_columns} colours to {path}")
    return 0
