"""Shared argparse type validators for CLI parameter bounds checking.

These validators produce clear error messages when users pass invalid
values (e.g., ``--alpha 2.0``, ``--clip-multiplier -1``). They are
intended to be used as the ``type=`` argument in ``add_argument()``.
"""

from __future__ import annotations

import argparse

from heatmapkit.color.gradient import Color


def _probability(value: str) -> float:
    """argparse type for values in the open interval (0, 1)."""
    fvalue = float(value)
    if not (0 < fvalue < 1):
        raise argparse.ArgumentTypeError(
            f"{value} is not a valid probability (must be in (0, 1))"
        )
    return fvalue


def _positive_float(value: str) -> float:
    """argparse type for positive floats (> 0)."""
    fvalue = float(value)
    if not fvalue > 0:
        raise argparse.ArgumentTypeError(f"{value} is not a positive float")
    return fvalue


def _positive_int(value: str) -> int:
    """argparse type for positive integers (> 0)."""
    ivalue = int(value)
    if ivalue <= 0:
        raise argparse.ArgumentTypeError(f"{value} is not a positive integer")
    return ivalue


def _color(value: str) -> Color:
    """argparse type for colours: names ("red"), hex ("#ff0000") or "r,g,b[,a]"."""
    try:
        if "," in value:
            return Color.parse(tuple(int(part) for part in value.split(",")))
        return Color.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _label_list(value: str) -> list[str]:
    """argparse type for comma-separated labels."""
    labels = [part.strip() for part in value.split(",")]
    if not all(labels):
        raise argparse.ArgumentTypeError(f"{value!r} contains an empty label")
    return labels
