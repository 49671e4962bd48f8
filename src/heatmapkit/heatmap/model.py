"""
Toolkit-independent state of an interactive heatmap view.

A heatmap widget offers a handful of user actions: set the colour range,
transform the data, choose visible rows and columns, pick low/high colours
and edit the list of pickable colours. HeatmapModel holds the state behind
those actions so that any front end (Qt, Tk, a notebook, a CLI) can drive it.

All configuration is passed in explicitly through HeatmapConfig; nothing is
read from process-wide state.

Examples:
    >>> model = HeatmapModel(matrix, HeatmapConfig(low_color="blue", high_color="red"))
    >>> model.apply_transformations(ScalarTransform.LOG2, Centering.MEDIAN)
    >>> model.set_visible_row_names(["GENE_A", "GENE_C"])
    >>> colors = model.cell_colors()   # visible cells only
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Hashable, Optional, Sequence

import numpy as np

from heatmapkit.color.gradient import Color, ColorGradientMapper, ColorLike, ColorRange
from heatmapkit.color.palette import ColorPalette
from heatmapkit.core.errors import InvalidInputError
from heatmapkit.core.matrix import HeatmapMatrix
from heatmapkit.heatmap.operations import (
    Centering,
    ScalarTransform,
    TransformSpec,
    transform,
)

logger = logging.getLogger(__name__)

__all__ = [
    'HeatmapConfig',
    'HeatmapModel',
    'DialogSpec',
    'RANGE_DIALOG',
    'FONT_DIALOG',
    'VISIBLE_ROWS_DIALOG',
    'VISIBLE_COLUMNS_DIALOG',
]


@dataclass(frozen=True)
class DialogSpec:
    """Title and description shown by a configuration dialog."""
    title: str
    description: str


RANGE_DIALOG = DialogSpec(
    "Set range",
    "This dialog allows you to select the minimum and maximum values used "
    "to create the color gradient.",
)
FONT_DIALOG = DialogSpec(
    "Configure font",
    "This dialog allows you to select the style and size of the font used "
    "in the heatmap.",
)
VISIBLE_ROWS_DIALOG = DialogSpec(
    "Visible rows",
    "This dialog allows you to configure the visible rows. To do so, move "
    "them from one list to another using the controls.",
)
VISIBLE_COLUMNS_DIALOG = DialogSpec(
    "Visible columns",
    "This dialog allows you to configure the visible columns. To do so, move "
    "them from one list to another using the controls.",
)


@dataclass(frozen=True)
class HeatmapConfig:
    """
    Construction-time configuration of a heatmap view.

    Attributes:
        low_color: Colour of the range minimum
        high_color: Colour of the range maximum
        mid_color: Optional colour of the range midpoint (three-colour gradient)
        palette: Pickable colours; extended to include low/high if needed
        value_range: Optional (low, high) override of the data min/max
    """
    low_color: ColorLike = Color(0, 0, 255)
    high_color: ColorLike = Color(255, 0, 0)
    mid_color: Optional[ColorLike] = None
    palette: ColorPalette = field(default_factory=ColorPalette)
    value_range: Optional[tuple[float, float]] = None


class HeatmapModel:
    """
    Mutable view state over an immutable HeatmapMatrix.

    The data itself is never edited in place: transformations swap in a new
    matrix, so callers holding the previous matrix keep an unchanged copy.
    """

    def __init__(self, matrix: HeatmapMatrix, config: Optional[HeatmapConfig] = None):
        config = config or HeatmapConfig()
        if matrix.is_empty:
            raise InvalidInputError(f"Cannot display an empty matrix (shape {matrix.shape})")

        self._matrix = _labelled(matrix)
        self._low_color = Color.parse(config.low_color)
        self._high_color = Color.parse(config.high_color)
        self._mid_color = Color.parse(config.mid_color) if config.mid_color is not None else None
        self._palette = config.palette.ensure_contains(self._low_color, self._high_color)
        self._value_range: Optional[tuple[float, float]] = None
        self._visible_rows = list(self._matrix.row_names)
        self._visible_columns = list(self._matrix.column_names)

        if config.value_range is not None:
            self.set_values_range(*config.value_range)

    # --- data ---------------------------------------------------------------

    @property
    def data(self) -> HeatmapMatrix:
        return self._matrix

    def set_data(self, matrix: HeatmapMatrix) -> None:
        """
        Replace the displayed data.

        Visible rows/columns that still exist stay visible; if none survive,
        everything in the new matrix becomes visible.
        """
        if matrix.is_empty:
            raise InvalidInputError(f"Cannot display an empty matrix (shape {matrix.shape})")
        matrix = _labelled(matrix)
        rows = [r for r in self._visible_rows if r in matrix.row_names]
        columns = [c for c in self._visible_columns if c in matrix.column_names]
        self._matrix = matrix
        self._visible_rows = _in_order(rows, matrix.row_names) if rows else list(matrix.row_names)
        self._visible_columns = (
            _in_order(columns, matrix.column_names) if columns else list(matrix.column_names)
        )

    def apply_transformations(
        self,
        scalar: ScalarTransform = ScalarTransform.IDENTITY,
        centering: Centering = Centering.NONE,
        clip: bool = True,
    ) -> HeatmapMatrix:
        """
        Transform the data, center it, clip it and display the result.

        Returns:
            The new displayed matrix
        """
        spec = TransformSpec(scalar, centering, clip=clip)
        logger.info(f"Transforming heatmap data: {spec.to_params()}")
        self.set_data(transform(self._matrix, spec))
        return self._matrix

    # --- visibility ---------------------------------------------------------

    @property
    def row_names(self) -> list[Hashable]:
        return list(self._matrix.row_names)

    @property
    def column_names(self) -> list[Hashable]:
        return list(self._matrix.column_names)

    @property
    def visible_row_names(self) -> list[Hashable]:
        return list(self._visible_rows)

    @property
    def visible_column_names(self) -> list[Hashable]:
        return list(self._visible_columns)

    def set_visible_row_names(self, names: Sequence[Hashable]) -> None:
        self._visible_rows = self._checked(names, self._matrix.row_names, "row")

    def set_visible_column_names(self, names: Sequence[Hashable]) -> None:
        self._visible_columns = self._checked(names, self._matrix.column_names, "column")

    @staticmethod
    def _checked(names, labels, axis: str) -> list[Hashable]:
        unknown = [n for n in names if n not in labels]
        if unknown:
            raise InvalidInputError(f"Unknown {axis} name(s): {unknown[:5]}", **{axis: unknown[0]})
        return _in_order(list(dict.fromkeys(names)), labels)

    def visible_matrix(self) -> HeatmapMatrix:
        return self._matrix.select_rows(self._visible_rows).select_columns(self._visible_columns)

    # --- range --------------------------------------------------------------

    @property
    def low_value(self) -> float:
        return self._value_range[0] if self._value_range else self._matrix.min()

    @property
    def high_value(self) -> float:
        return self._value_range[1] if self._value_range else self._matrix.max()

    def set_values_range(self, low: float, high: float) -> None:
        """
        Override the range used to build the colour gradient.

        Raises:
            InvalidRangeError: If low > high or a bound is not finite
        """
        ColorRange(low, high, self._low_color, self._high_color)
        self._value_range = (float(low), float(high))

    def reset_values_range(self) -> None:
        self._value_range = None

    # --- colours ------------------------------------------------------------

    @property
    def low_color(self) -> Color:
        return self._low_color

    @property
    def high_color(self) -> Color:
        return self._high_color

    @property
    def mid_color(self) -> Optional[Color]:
        return self._mid_color

    @property
    def palette(self) -> ColorPalette:
        return self._palette

    def set_colors(self, low: ColorLike, high: ColorLike, mid: Optional[ColorLike] = None) -> None:
        self._low_color = Color.parse(low)
        self._high_color = Color.parse(high)
        self._mid_color = Color.parse(mid) if mid is not None else None
        self._palette = self._palette.ensure_contains(self._low_color, self._high_color)

    def set_palette(self, colors: Sequence[ColorLike]) -> bool:
        """
        Replace the pickable colours.

        Returns:
            True when the low or high colour had to change
        """
        change = self._palette.replace(colors, self._low_color, self._high_color)
        self._palette = change.palette
        self._low_color = change.low_color
        self._high_color = change.high_color
        return change.changed

    def color_range(self) -> ColorRange:
        return ColorRange(
            self.low_value, self.high_value, self._low_color, self._high_color, self._mid_color
        )

    def mapper(self) -> ColorGradientMapper:
        return ColorGradientMapper(self.color_range())

    def cell_colors(self) -> list[list[Color]]:
        """Colours of the visible cells, row-major."""
        return self.mapper().colors_for(self.visible_matrix())

    def rgba_grid(self) -> np.ndarray:
        return self.mapper().rgba_grid(self.visible_matrix())

    def config(self) -> HeatmapConfig:
        """Snapshot of the current configuration."""
        return HeatmapConfig(
            low_color=self._low_color,
            high_color=self._high_color,
            mid_color=self._mid_color,
            palette=self._palette,
            value_range=self._value_range,
        )


def _labelled(matrix: HeatmapMatrix) -> HeatmapMatrix:
    # Visibility is managed by name, so unlabelled axes get positional names
    if matrix.has_labels:
        return matrix
    return HeatmapMatrix(
        matrix.data,
        row_names=matrix.row_names if matrix.row_names is not None else range(matrix.n_rows),
        column_names=matrix.column_names if matrix.column_names is not None else range(matrix.n_columns),
        quality_flags=matrix.quality_flags,
    )


def _in_order(names: list[Hashable], labels) -> list[Hashable]:
    position = {label: i for i, label in enumerate(labels)}
    return sorted(names, key=position.__getitem__)
