from __future__ import annotations

from typing import Dict, List, Sequence

from .models import MixedPalletResult, PalletLayer, PalletSpec, Placement, UnitSummary, UnitType
from .orientations import unit_fits_pallet
from .settings import DEFAULT_SETTINGS

TOLERANCE = DEFAULT_SETTINGS.tolerance

NO_UNITS_WARNING = "No unit types defined"
NOTHING_PLACED_WARNING = "No units could be placed on the pallet"
CANCELLED_WARNING = "Calculation was cancelled before completion; the result is partial"


def layer_area(placements: Sequence[Placement]) -> float:
    return sum(p.footprint_area for p in placements)


def group_into_layers(
    placements: Sequence[Placement], pallet: PalletSpec
) -> List[PalletLayer]:
    """Bucket placements by base height rounded to two decimals."""
    groups: Dict[float, List[Placement]] = {}
    for placement in placements:
        base = round(placement.base_height, 2)
        groups.setdefault(base, []).append(placement)

    layers: List[PalletLayer] = []
    for index, base in enumerate(sorted(groups)):
        members = groups[base]
        layers.append(
            PalletLayer(
                index=index,
                height=max(p.dimensions[2] for p in members),
                base_height=base,
                placements=members,
                area_used=layer_area(members),
                area_total=pallet.footprint_area,
            )
        )
    return layers


def summarize_units(
    units: Sequence[UnitType], placements: Sequence[Placement]
) -> List[UnitSummary]:
    counts: Dict[str, int] = {}
    for placement in placements:
        counts[placement.unit_id] = counts.get(placement.unit_id, 0) + 1
    summaries: List[UnitSummary] = []
    for unit in units:
        placed = counts.get(unit.id, 0)
        requested = unit.quantity_limit
        remaining = max(0, requested - placed) if requested is not None else None
        summaries.append(
            UnitSummary(
                unit_id=unit.id,
                unit_name=unit.name,
                color=unit.color,
                count_placed=placed,
                quantity_requested=requested,
                quantity_remaining=remaining,
            )
        )
    return summaries


def units_weight(units: Sequence[UnitType], placements: Sequence[Placement]) -> float:
    weights = {unit.id: unit.weight or 0.0 for unit in units}
    return sum(weights.get(p.unit_id, 0.0) for p in placements)


def volume_efficiency(placements: Sequence[Placement], pallet: PalletSpec) -> float:
    available = pallet.footprint_area * pallet.usable_height
    if available <= 0:
        return 0.0
    used = sum(p.volume for p in placements)
    return used / available * 100


def area_efficiency(layers: Sequence[PalletLayer], pallet: PalletSpec) -> float:
    area = pallet.footprint_area
    if area <= 0 or not layers:
        return 0.0
    return max(layer.area_used for layer in layers) / area * 100


def total_height(placements: Sequence[Placement], pallet: PalletSpec) -> float:
    if not placements:
        return pallet.height
    return max(p.top_height for p in placements)


def collect_input_warnings(
    units: Sequence[UnitType], pallet: PalletSpec, *, tol: float = TOLERANCE
) -> List[str]:
    """Human readable problems with the input that do not stop a run."""
    warnings: List[str] = []
    if pallet.length <= 0 or pallet.width <= 0:
        warnings.append("Pallet length and width must be positive")
    if pallet.max_height < pallet.height:
        warnings.append("Maximum height is below the pallet base height")
    for unit in units:
        if not unit.has_positive_dimensions():
            warnings.append(f"Unit '{unit.name}' has non-positive dimensions and was skipped")
        elif not unit_fits_pallet(unit, pallet, tol=tol):
            warnings.append(f"Unit '{unit.name}' does not fit on the pallet in any orientation")
    return warnings


def empty_result(pallet: PalletSpec, warnings: Sequence[str]) -> MixedPalletResult:
    return MixedPalletResult(
        pallet_weight=pallet.weight or 0.0,
        combined_weight=pallet.weight or 0.0,
        total_height=pallet.height,
        warnings=list(warnings),
        is_valid=False,
    )


def build_result(
    units: Sequence[UnitType],
    pallet: PalletSpec,
    placements: Sequence[Placement],
    *,
    warnings: Sequence[str] = (),
    cancelled: bool = False,
    tol: float = TOLERANCE,
) -> MixedPalletResult:
    """Derive layers, summaries and metrics from a flat placement list."""
    placements = list(placements)
    layers = group_into_layers(placements, pallet)
    height = total_height(placements, pallet)
    weight = units_weight(units, placements)
    pallet_weight = pallet.weight or 0.0

    notes = list(warnings)
    if not placements:
        notes.append(NOTHING_PLACED_WARNING)
    if cancelled:
        notes.append(CANCELLED_WARNING)
    if height > pallet.max_height + tol:
        notes.append("Total height exceeds the maximum allowed height")

    return MixedPalletResult(
        layers=layers,
        placements=placements,
        unit_summaries=summarize_units(units, placements),
        total_units=len(placements),
        total_weight=weight,
        pallet_weight=pallet_weight,
        combined_weight=pallet_weight + weight,
        total_height=height,
        volume_efficiency=volume_efficiency(placements, pallet),
        area_efficiency=area_efficiency(layers, pallet),
        warnings=notes,
        is_valid=len(placements) > 0 and height <= pallet.max_height + tol,
    )
