"""
heatmapkit CLI - transform matrices and compute heatmap colours.

Commands:
    heatmapkit transform  - Log/z-score transform, center and clip a matrix
    heatmapkit colorize   - Map matrix values to a colour gradient
    heatmapkit stats      - Per-feature ANOVA p-values and FDR q-values
"""

import argparse
import sys
from typing import Optional, List


def main(args: Optional[List[str]] = None) -> int:
    """Main CLI dispatcher for heatmapkit."""
    parser = argparse.ArgumentParser(
        prog="heatmapkit",
        description="Data transformation and colour mapping for bioinformatics heatmaps",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  transform   Log/z-score transform, center and clip a matrix
  colorize    Map matrix values to a colour gradient (hex CSV)
  stats       Per-feature ANOVA p-values and FDR q-values

Examples:
  heatmapkit transform --input data.csv --output results/data_log2 --transform log2p1 --centering median --clip
  heatmapkit colorize --input results/data_log2.data.csv --output results/colors.csv --low-color blue --high-color red
  heatmapkit stats --input data.csv --conditions CTRL,CTRL,ALS,ALS --output results/anova.csv
        """
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version="%(prog)s 0.1.0"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    from heatmapkit.cli import transform, colorize, stats
    transform.register_parser(subparsers)
    colorize.register_parser(subparsers)
    stats.register_parser(subparsers)

    parsed_args = parser.parse_args(args)

    if parsed_args.command is None:
        parser.print_help()
        return 0

    # Subcommands detect explicit overrides of config values from the raw args
    parsed_args._raw_args = list(args) if args is not None else sys.argv[1:]

    return parsed_args.func(parsed_args)


if __name__ == "__main__":
    sys.exit(main())
