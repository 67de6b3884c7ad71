"""
Height map over the pallet footprint.

The footprint is discretised into square cells of ``resolution`` length.
Row ``r`` runs along the pallet width (z axis), column ``c`` along the pallet
length (x axis).  Each cell stores the top height of whatever is stacked on
it, starting at the pallet deck height.
"""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np


def window_max(values: np.ndarray, size: int, axis: int) -> np.ndarray:
    """Maximum of every run of ``size`` cells along ``axis``.

    Block prefix and suffix maxima (van Herk / Gil-Werman), linear in the
    number of cells whatever the window size.
    """
    values = np.moveaxis(values, axis, -1)
    n = values.shape[-1]
    blocks = -(-n // size)
    pad = [(0, 0)] * (values.ndim - 1) + [(0, blocks * size - n)]
    padded = np.pad(values, pad, constant_values=-np.inf)
    shaped = padded.reshape(values.shape[:-1] + (blocks, size))
    prefix = np.maximum.accumulate(shaped, axis=-1).reshape(padded.shape)
    suffix = np.maximum.accumulate(shaped[..., ::-1], axis=-1)[..., ::-1].reshape(padded.shape)
    count = n - size + 1
    result = np.maximum(suffix[..., :count], prefix[..., size - 1 : size - 1 + count])
    return np.moveaxis(result, -1, axis)


class HeightMap:
    """Grid of current top heights; cells are only ever raised."""

    __slots__ = ("resolution", "rows", "cols", "tolerance", "heights")

    def __init__(
        self,
        length: float,
        width: float,
        base_height: float,
        *,
        resolution: float = 0.5,
        tolerance: float = 0.01,
    ) -> None:
        self.resolution = resolution
        self.tolerance = tolerance
        self.cols = max(int(math.ceil(length / resolution)), 0)
        self.rows = max(int(math.ceil(width / resolution)), 0)
        self.heights: np.ndarray = np.full(
            (self.rows, self.cols), float(base_height), dtype=np.float64
        )

    # ── Coordinate conversion ────────────────────────────────────────────

    def span(self, extent: float) -> int:
        """Number of cells covered by ``extent``."""
        return int(math.ceil(extent / self.resolution))

    def to_x(self, col: int) -> float:
        return col * self.resolution

    def to_z(self, row: int) -> float:
        return row * self.resolution

    # ── Queries ──────────────────────────────────────────────────────────

    def height_at(self, row: int, col: int) -> float:
        return float(self.heights[row, col])

    def region(self, col: int, row: int, end_col: int, end_row: int) -> np.ndarray:
        return self.heights[row:min(end_row, self.rows), col:min(end_col, self.cols)]

    def uniform_height(
        self, col: int, row: int, end_col: int, end_row: int
    ) -> Tuple[bool, float]:
        """Whether every cell is within tolerance of the first one."""
        region = self.region(col, row, end_col, end_row)
        if region.size == 0:
            return False, 0.0
        first = float(region[0, 0])
        uniform = bool(np.all(np.abs(region - first) <= self.tolerance))
        return uniform, first

    def uniform_anchors(self, span_cols: int, span_rows: int) -> np.ndarray:
        """Boolean mask of anchors whose window is uniform at the anchor height.

        The mask has shape ``(rows - span_rows + 1, cols - span_cols + 1)``;
        entry ``[r, c]`` describes the window starting at row ``r`` and column
        ``c``.  It matches :meth:`uniform_height` evaluated at every anchor.
        """
        if span_rows > self.rows or span_cols > self.cols or span_rows <= 0 or span_cols <= 0:
            return np.zeros((0, 0), dtype=bool)
        highest = window_max(window_max(self.heights, span_cols, 1), span_rows, 0)
        lowest = -window_max(window_max(-self.heights, span_cols, 1), span_rows, 0)
        anchors = self.heights[: highest.shape[0], : highest.shape[1]]
        return (highest - anchors <= self.tolerance) & (anchors - lowest <= self.tolerance)

    # ── Mutation ─────────────────────────────────────────────────────────

    def raise_region(
        self, col: int, row: int, end_col: int, end_row: int, height: float
    ) -> None:
        region = self.region(col, row, end_col, end_row)
        np.maximum(region, height, out=region)

    def __repr__(self) -> str:
        top = float(self.heights.max()) if self.heights.size else 0.0
        return f"HeightMap({self.rows}x{self.cols}, res={self.resolution}, top={top:.2f})"
