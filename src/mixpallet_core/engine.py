from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .aggregate import NO_UNITS_WARNING, build_result, collect_input_warnings, empty_result
from .algorithms.heightmap import HeightMap
from .models import MixedPalletResult, Orientation, PalletSpec, Placement, UnitType
from .orientations import unit_orientations
from .settings import PackingSettings, load_settings

logger = logging.getLogger(__name__)

CancelCheck = Callable[[], bool]

# (orientation, footprint length, footprint width) as it would be placed
FootprintOption = Tuple[Orientation, float, float]


@dataclass
class PrimaryFootprint:
    """The column a unit type is pinned to while it stacks vertically."""

    unit_id: str
    col: int
    row: int
    length: float
    width: float
    top_height: float
    is_full: bool = False


@dataclass
class Candidate:
    unit: UnitType
    orientation: Orientation
    fit_l: float
    fit_w: float
    col: int
    row: int
    base_height: float
    score: float
    is_continuation: bool
    order: Tuple[int, ...] = ()


@dataclass
class PackingOutcome:
    placements: List[Placement] = field(default_factory=list)
    total_height: float = 0.0
    iterations: int = 0
    cancelled: bool = False


def footprint_options(
    orientations: Sequence[Orientation], tol: float
) -> List[FootprintOption]:
    """Every orientation in both footprint rotations, duplicates dropped."""
    options: List[FootprintOption] = []
    for orientation in orientations:
        rotations = [(orientation.length, orientation.width)]
        if abs(orientation.length - orientation.width) > tol:
            rotations.append((orientation.width, orientation.length))
        for fit_l, fit_w in rotations:
            duplicate = any(
                abs(fit_l - l) <= tol and abs(fit_w - w) <= tol and abs(orientation.height - o.height) <= tol
                for o, l, w in options
            )
            if not duplicate:
                options.append((orientation, fit_l, fit_w))
    return options


def grid_resolution_for(pallet: PalletSpec, settings: PackingSettings) -> float:
    """Configured resolution, doubled until the grid fits ``max_grid_cells``."""
    resolution = settings.grid_resolution
    if pallet.length <= 0 or pallet.width <= 0 or settings.max_grid_cells <= 0:
        return resolution
    while (
        math.ceil(pallet.length / resolution) * math.ceil(pallet.width / resolution)
        > settings.max_grid_cells
    ):
        resolution *= 2
    if resolution != settings.grid_resolution:
        logger.info(
            "Grid resolution coarsened to %g for a %g x %g pallet",
            resolution,
            pallet.length,
            pallet.width,
        )
    return resolution


class HeightMapPacker:
    """One mixed-orientation packing run over a height-map grid.

    The packer owns all run state (grid, primary footprints, remaining
    quantities) and is discarded after :meth:`run`.  Each :meth:`step`
    places at most one box:

    1. stack continuation on a non-full primary footprint, lowest stack first;
    2. otherwise the best new position anywhere on the grid for unit types
       that are free to start a column.
    """

    def __init__(
        self,
        units: Sequence[UnitType],
        pallet: PalletSpec,
        *,
        settings: Optional[PackingSettings] = None,
        should_cancel: Optional[CancelCheck] = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.pallet = pallet
        self.should_cancel = should_cancel
        tol = self.settings.tolerance
        self.units = [unit for unit in units if unit.has_positive_dimensions()]
        self.height_map = HeightMap(
            pallet.length,
            pallet.width,
            pallet.height,
            resolution=grid_resolution_for(pallet, self.settings),
            tolerance=tol,
        )
        self.orientations: Dict[str, List[Orientation]] = {
            unit.id: unit_orientations(unit, tol=tol) for unit in self.units
        }
        self.options: Dict[str, List[FootprintOption]] = {
            unit.id: footprint_options(self.orientations[unit.id], tol) for unit in self.units
        }
        self.remaining: Dict[str, int] = {
            unit.id: unit.quantity_limit or self.settings.unlimited_quantity
            for unit in self.units
        }
        self.footprints: Dict[str, PrimaryFootprint] = {}
        self.placements: List[Placement] = []
        self.iterations = 0
        self.finished = False

    # ── Footprint bookkeeping ────────────────────────────────────────────

    def refresh_full_footprints(self) -> None:
        """Mark footprints where no box of the exact footprint fits anymore."""
        tol = self.settings.tolerance
        max_height = self.pallet.max_height
        for footprint in self.footprints.values():
            if footprint.is_full:
                continue
            headroom = max_height - footprint.top_height
            can_fit = False
            for o in self.orientations[footprint.unit_id]:
                same = abs(o.length - footprint.length) < tol and abs(o.width - footprint.width) < tol
                turned = abs(o.width - footprint.length) < tol and abs(o.length - footprint.width) < tol
                if (same or turned) and o.height <= headroom + tol:
                    can_fit = True
                    break
            if not can_fit:
                footprint.is_full = True

    # ── Candidate search ─────────────────────────────────────────────────

    def find_continuation(self) -> Optional[Candidate]:
        """Phase 1: continue a pinned column, preferring the lowest one."""
        s = self.settings
        tol = s.tolerance
        hm = self.height_map
        units = {unit.id: unit for unit in self.units}
        best: Optional[Candidate] = None
        for footprint in self.footprints.values():
            if footprint.is_full or self.remaining[footprint.unit_id] <= 0:
                continue
            base = footprint.top_height
            headroom = self.pallet.max_height - base
            if headroom < s.min_grid_headroom:
                continue
            end_col = footprint.col + hm.span(footprint.length)
            end_row = footprint.row + hm.span(footprint.width)
            uniform, region_height = hm.uniform_height(footprint.col, footprint.row, end_col, end_row)
            if not uniform or abs(region_height - base) > tol:
                continue
            for orientation, fit_l, fit_w in self.options[footprint.unit_id]:
                if orientation.height > headroom + tol:
                    continue
                if abs(fit_l - footprint.length) > tol or abs(fit_w - footprint.width) > tol:
                    continue
                score = s.continuation_bias + headroom
                if best is None or score > best.score:
                    best = Candidate(
                        unit=units[footprint.unit_id],
                        orientation=orientation,
                        fit_l=fit_l,
                        fit_w=fit_w,
                        col=footprint.col,
                        row=footprint.row,
                        base_height=base,
                        score=score,
                        is_continuation=True,
                    )
        return best

    def find_new_position(self) -> Optional[Candidate]:
        """Phase 2: best anchor cell for unit types free to start a column.

        Every anchor is scored by headroom, footprint area and a bonus for
        touching the origin edges.  The grid is evaluated per footprint span
        with sliding windows; ties keep the first candidate in (row, col,
        unit, option) order.
        """
        s = self.settings
        tol = s.tolerance
        pallet = self.pallet
        hm = self.height_map
        usable = pallet.max_height - pallet.height
        pallet_area = pallet.length * pallet.width
        if usable <= 0 or pallet_area <= 0 or hm.heights.size == 0:
            return None

        uniform_cache: Dict[Tuple[int, int], np.ndarray] = {}
        best: Optional[Candidate] = None
        for unit_index, unit in enumerate(self.units):
            if self.remaining[unit.id] <= 0:
                continue
            footprint = self.footprints.get(unit.id)
            if footprint is not None and not footprint.is_full:
                continue
            for option_index, (orientation, fit_l, fit_w) in enumerate(self.options[unit.id]):
                span_cols = hm.span(fit_l)
                span_rows = hm.span(fit_w)
                key = (span_cols, span_rows)
                if key not in uniform_cache:
                    uniform_cache[key] = hm.uniform_anchors(span_cols, span_rows)
                uniform = uniform_cache[key]
                if uniform.size == 0:
                    continue
                n_rows, n_cols = uniform.shape
                base = hm.heights[:n_rows, :n_cols]
                headroom = pallet.max_height - base
                cols_ok = (np.arange(n_cols) + span_cols) * hm.resolution <= pallet.length + tol
                rows_ok = (np.arange(n_rows) + span_rows) * hm.resolution <= pallet.width + tol
                valid = (
                    uniform
                    & cols_ok[np.newaxis, :]
                    & rows_ok[:, np.newaxis]
                    & (headroom >= s.min_grid_headroom)
                    & (orientation.height <= headroom + tol)
                )
                if not valid.any():
                    continue

                corner = np.zeros((n_rows, n_cols))
                corner[:, 0] += s.corner_bonus
                corner[0, :] += s.corner_bonus
                area_score = (fit_l * fit_w) / pallet_area * s.area_weight
                scores = headroom / usable * s.headroom_weight + area_score + corner
                scores = np.where(valid, scores, -np.inf)

                row, col = divmod(int(np.argmax(scores)), n_cols)
                score = float(scores[row, col])
                order = (row, col, unit_index, option_index)
                if best is None or score > best.score or (score == best.score and order < best.order):
                    best = Candidate(
                        unit=unit,
                        orientation=orientation,
                        fit_l=fit_l,
                        fit_w=fit_w,
                        col=col,
                        row=row,
                        base_height=float(base[row, col]),
                        score=score,
                        is_continuation=False,
                        order=order,
                    )
        return best

    # ── Placement ────────────────────────────────────────────────────────

    def place(self, candidate: Candidate) -> Placement:
        pallet = self.pallet
        hm = self.height_map
        orientation = candidate.orientation
        unit = candidate.unit
        placement = Placement(
            unit_id=unit.id,
            unit_name=unit.name,
            color=unit.color,
            position=(
                -pallet.length / 2 + hm.to_x(candidate.col) + candidate.fit_l / 2,
                candidate.base_height + orientation.height / 2,
                -pallet.width / 2 + hm.to_z(candidate.row) + candidate.fit_w / 2,
            ),
            dimensions=(candidate.fit_l, candidate.fit_w, orientation.height),
            rotated=abs(candidate.fit_l - orientation.length) > self.settings.tolerance,
        )
        new_top = candidate.base_height + orientation.height
        hm.raise_region(
            candidate.col,
            candidate.row,
            candidate.col + hm.span(candidate.fit_l),
            candidate.row + hm.span(candidate.fit_w),
            new_top,
        )

        # A type keeps its first footprint for the whole run; later
        # placements only move its top height.
        footprint = self.footprints.get(unit.id)
        if footprint is not None:
            footprint.top_height = new_top
        else:
            self.footprints[unit.id] = PrimaryFootprint(
                unit_id=unit.id,
                col=candidate.col,
                row=candidate.row,
                length=candidate.fit_l,
                width=candidate.fit_w,
                top_height=new_top,
            )
        self.remaining[unit.id] -= 1
        self.placements.append(placement)
        return placement

    def step(self) -> Optional[Placement]:
        """Place the next box; ``None`` once the pallet is saturated."""
        if self.finished:
            return None
        self.iterations += 1
        if not any(count > 0 for count in self.remaining.values()):
            self.finished = True
            return None

        self.refresh_full_footprints()
        candidate = self.find_continuation()
        if candidate is None:
            candidate = self.find_new_position()
        if candidate is None:
            self.finished = True
            return None
        logger.debug(
            "Placing %s at col=%d row=%d base=%.2f score=%.3f%s",
            candidate.unit.id,
            candidate.col,
            candidate.row,
            candidate.base_height,
            candidate.score,
            " (stack)" if candidate.is_continuation else "",
        )
        return self.place(candidate)

    def total_height(self) -> float:
        if not self.placements:
            return self.pallet.height
        return max(p.top_height for p in self.placements)

    def run(self) -> PackingOutcome:
        cancelled = False
        while not self.finished and self.iterations < self.settings.max_iterations:
            if self.should_cancel is not None and self.should_cancel():
                cancelled = True
                break
            if self.step() is None:
                break
        logger.debug(
            "Height-map packing placed %d boxes in %d iterations",
            len(self.placements),
            self.iterations,
        )
        return PackingOutcome(
            placements=list(self.placements),
            total_height=self.total_height(),
            iterations=self.iterations,
            cancelled=cancelled,
        )


def calculate_mixed_pallet(
    units: Sequence[UnitType],
    pallet: PalletSpec,
    *,
    settings: Optional[PackingSettings] = None,
    should_cancel: Optional[CancelCheck] = None,
) -> MixedPalletResult:
    """Best mixed pallet for ``units`` using the height-map packer.

    Degenerate input never raises: the result is flagged invalid and
    ``warnings`` explains why.
    """
    if not units:
        return empty_result(pallet, [NO_UNITS_WARNING])
    settings = settings or load_settings()
    warnings = collect_input_warnings(units, pallet, tol=settings.tolerance)
    packer = HeightMapPacker(units, pallet, settings=settings, should_cancel=should_cancel)
    outcome = packer.run()
    return build_result(
        units,
        pallet,
        outcome.placements,
        warnings=warnings,
        cancelled=outcome.cancelled,
        tol=settings.tolerance,
    )
