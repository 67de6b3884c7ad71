"""Layer-based stacking strategies.

A *strategy* fixes one orientation per unit type (an orientation map) and
stacks flat layers built by :func:`pack_layer` until the height ceiling is
reached.  The mixed search switches from a primary to a secondary map after
a number of layers.  These are the alternative to the height-map packer in
:mod:`mixpallet_core.engine`.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from .aggregate import NO_UNITS_WARNING, build_result, collect_input_warnings, empty_result, layer_area
from .algorithms.free_rects import BoxToPack, LocalBox, pack_layer
from .models import MixedPalletResult, Orientation, PalletLayer, PalletSpec, Placement, UnitType
from .orientations import unit_orientations
from .settings import PackingSettings, load_settings

logger = logging.getLogger(__name__)

OrientationMap = Dict[str, Orientation]

# Picks the orientation map for a layer: (layer index, headroom, remaining) -> map
MapChooser = Callable[[int, float, Dict[str, int]], Optional[OrientationMap]]


@dataclass
class StrategyResult:
    description: str
    orientation_map: OrientationMap
    total_units: int = 0
    total_height: float = 0.0
    layers: List[PalletLayer] = field(default_factory=list)
    placements: List[Placement] = field(default_factory=list)
    is_valid: bool = False


def _packable(units: Sequence[UnitType]) -> List[UnitType]:
    return [unit for unit in units if unit.has_positive_dimensions()]


def describe_map(orientation_map: OrientationMap) -> str:
    return ", ".join(
        f"{unit_id}={o.length:g}x{o.width:g}x{o.height:g}"
        for unit_id, o in orientation_map.items()
    )


def orientation_maps(
    units: Sequence[UnitType], settings: Optional[PackingSettings] = None
) -> List[OrientationMap]:
    """Cartesian product of per-type orientations, first type varying slowest.

    Enumerated with a mixed-radix counter and capped at
    ``settings.max_orientation_maps``.
    """
    settings = settings or load_settings()
    units = _packable(units)
    choices = [unit_orientations(unit, tol=settings.tolerance) for unit in units]
    if not choices:
        return []

    total = math.prod(len(c) for c in choices)
    limit = settings.max_orientation_maps
    if total > limit:
        logger.warning(
            "Orientation search truncated to %d of %d combinations", limit, total
        )

    digits = [0] * len(choices)
    maps: List[OrientationMap] = []
    while len(maps) < limit:
        maps.append({unit.id: choices[i][digits[i]] for i, unit in enumerate(units)})
        pos = len(digits) - 1
        while pos >= 0:
            digits[pos] += 1
            if digits[pos] < len(choices[pos]):
                break
            digits[pos] = 0
            pos -= 1
        if pos < 0:
            break
    return maps


def _to_pallet_placements(
    boxes: Sequence[LocalBox], pallet: PalletSpec, base_height: float
) -> List[Placement]:
    return [
        Placement(
            unit_id=box.unit.id,
            unit_name=box.unit.name,
            color=box.unit.color,
            position=(
                -pallet.length / 2 + box.x + box.length / 2,
                base_height + box.height / 2,
                -pallet.width / 2 + box.z + box.width / 2,
            ),
            dimensions=(box.length, box.width, box.height),
            rotated=box.rotated,
        )
        for box in boxes
    ]


def _initial_remaining(units: Sequence[UnitType], settings: PackingSettings) -> Dict[str, int]:
    return {unit.id: unit.quantity_limit or settings.unlimited_quantity for unit in units}


def _min_height(
    orientation_map: OrientationMap, remaining: Dict[str, int]
) -> Optional[float]:
    heights = [
        o.height for unit_id, o in orientation_map.items() if remaining.get(unit_id, 0) > 0
    ]
    return min(heights) if heights else None


def stack_layers(
    units: Sequence[UnitType],
    pallet: PalletSpec,
    choose: MapChooser,
    *,
    description: str,
    orientation_map: OrientationMap,
    settings: PackingSettings,
) -> StrategyResult:
    """Stack layers bottom-up, asking ``choose`` for each layer's map.

    Remaining quantities carry over between layers, also when the map
    changes.
    """
    tol = settings.tolerance
    units = _packable(units)
    remaining = _initial_remaining(units, settings)
    layers: List[PalletLayer] = []
    placements: List[Placement] = []
    base = pallet.height

    while len(layers) < settings.max_layers:
        headroom = pallet.max_height - base
        if headroom < settings.min_layer_headroom:
            break
        current = choose(len(layers), headroom, remaining)
        if current is None:
            break
        boxes = [
            BoxToPack(unit, current[unit.id], remaining[unit.id])
            for unit in units
            if unit.id in current
        ]
        layer = pack_layer(
            boxes,
            pallet.length,
            pallet.width,
            headroom,
            tol=tol,
            min_rect=settings.min_free_rect,
        )
        if layer.is_empty or layer.thickness <= 0:
            break
        if base + layer.thickness > pallet.max_height + tol:
            break
        for unit_id, count in layer.used.items():
            remaining[unit_id] -= count

        placed = _to_pallet_placements(layer.placements, pallet, base)
        layers.append(
            PalletLayer(
                index=len(layers),
                height=layer.thickness,
                base_height=base,
                placements=placed,
                area_used=layer_area(placed),
                area_total=pallet.footprint_area,
            )
        )
        placements.extend(placed)
        base += layer.thickness

    return StrategyResult(
        description=description,
        orientation_map=dict(orientation_map),
        total_units=len(placements),
        total_height=base,
        layers=layers,
        placements=placements,
        is_valid=len(placements) > 0 and base <= pallet.max_height + tol,
    )


def run_strategy(
    units: Sequence[UnitType],
    pallet: PalletSpec,
    orientation_map: OrientationMap,
    *,
    settings: Optional[PackingSettings] = None,
    description: Optional[str] = None,
) -> StrategyResult:
    """Stack layers with a single fixed orientation per unit type."""
    settings = settings or load_settings()

    def choose(index: int, headroom: float, remaining: Dict[str, int]) -> Optional[OrientationMap]:
        return orientation_map

    return stack_layers(
        units,
        pallet,
        choose,
        description=description or f"single: {describe_map(orientation_map)}",
        orientation_map=orientation_map,
        settings=settings,
    )


def search_single_strategies(
    units: Sequence[UnitType],
    pallet: PalletSpec,
    *,
    settings: Optional[PackingSettings] = None,
    maps: Optional[List[OrientationMap]] = None,
) -> List[StrategyResult]:
    settings = settings or load_settings()
    if maps is None:
        maps = orientation_maps(units, settings)
    results = [run_strategy(units, pallet, m, settings=settings) for m in maps]
    logger.debug("Evaluated %d single-orientation strategies", len(results))
    return results


def _switching_chooser(
    primary: OrientationMap,
    secondary: OrientationMap,
    switch_after: int,
    tol: float,
) -> MapChooser:
    def choose(index: int, headroom: float, remaining: Dict[str, int]) -> Optional[OrientationMap]:
        preferred, other = (secondary, primary) if index >= switch_after else (primary, secondary)
        lowest = _min_height(preferred, remaining)
        if lowest is not None and lowest <= headroom + tol:
            return preferred
        lowest = _min_height(other, remaining)
        if lowest is not None and lowest <= headroom + tol:
            return other
        return None

    return choose


def search_mixed_layers(
    units: Sequence[UnitType],
    pallet: PalletSpec,
    *,
    settings: Optional[PackingSettings] = None,
    maps: Optional[List[OrientationMap]] = None,
) -> List[StrategyResult]:
    """Try every (primary, secondary) map pair switching after 1..N layers."""
    settings = settings or load_settings()
    if maps is None:
        maps = orientation_maps(units, settings)
    results: List[StrategyResult] = []
    if len(maps) < 2:
        return results

    for primary_index, primary in enumerate(maps):
        for secondary_index, secondary in enumerate(maps):
            if primary_index == secondary_index:
                continue
            for switch_after in range(1, settings.switch_after_max + 1):
                result = stack_layers(
                    units,
                    pallet,
                    _switching_chooser(primary, secondary, switch_after, settings.tolerance),
                    description=(
                        f"mixed: map {primary_index + 1} for {switch_after} layer(s), "
                        f"then map {secondary_index + 1}"
                    ),
                    orientation_map=primary,
                    settings=settings,
                )
                if result.total_units > 0 and result.is_valid:
                    results.append(result)
    logger.debug("Kept %d mixed-layer strategies", len(results))
    return results


def best_strategy(results: Sequence[StrategyResult]) -> Optional[StrategyResult]:
    """Most units, then lowest stack, then the earliest result."""
    best: Optional[StrategyResult] = None
    for result in results:
        if result.total_units <= 0:
            continue
        if (
            best is None
            or result.total_units > best.total_units
            or (result.total_units == best.total_units and result.total_height < best.total_height)
        ):
            best = result
    return best


def calculate_layered_pallet(
    units: Sequence[UnitType],
    pallet: PalletSpec,
    *,
    settings: Optional[PackingSettings] = None,
) -> MixedPalletResult:
    """Best flat-layer arrangement over single and switching strategies."""
    if not units:
        return empty_result(pallet, [NO_UNITS_WARNING])
    settings = settings or load_settings()
    warnings = collect_input_warnings(units, pallet, tol=settings.tolerance)

    maps = orientation_maps(units, settings)
    candidates = search_single_strategies(units, pallet, settings=settings, maps=maps)
    candidates += search_mixed_layers(units, pallet, settings=settings, maps=maps)
    best = best_strategy(candidates)
    if best is not None:
        logger.info("Best layered strategy: %s (%d units)", best.description, best.total_units)

    return build_result(
        units,
        pallet,
        best.placements if best is not None else [],
        warnings=warnings,
        tol=settings.tolerance,
    )
