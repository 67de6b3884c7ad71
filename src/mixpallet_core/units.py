from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:  # pragma: no cover
    from .models import PalletSpec, UnitType

MM = float
KG = float

UnitSystem = Literal["in", "mm"]

MM_PER_INCH = 25.4
KG_PER_LB = 0.453592
LB_PER_KG = 2.20462

UNIT_SYSTEMS = ("in", "mm")


def parse_float(value: str) -> float:
    text = value.strip()
    if not text:
        raise ValueError("empty input")
    text = text.replace(",", ".")
    return float(text)


def format_float(value: float, ndigits: int = 2) -> str:
    return f"{value:.{ndigits}f}"


def _check_system(system: str) -> None:
    if system not in UNIT_SYSTEMS:
        raise ValueError(f"unknown unit system: {system!r}")


def convert(value: float, from_system: str, to_system: str) -> float:
    """Convert a length between inches and millimetres."""
    _check_system(from_system)
    _check_system(to_system)
    if from_system == to_system:
        return value
    if from_system == "in":
        return value * MM_PER_INCH
    return value / MM_PER_INCH


def convert_weight(value: float, from_system: str, to_system: str) -> float:
    """Convert a weight between lbs (imperial) and kg (metric)."""
    _check_system(from_system)
    _check_system(to_system)
    if from_system == to_system:
        return value
    if from_system == "in":
        return value * KG_PER_LB
    return value * LB_PER_KG


def convert_unit_type(unit: "UnitType", from_system: str, to_system: str) -> "UnitType":
    """Unit weights are kept as entered; only the edges are converted."""
    return replace(
        unit,
        length=convert(unit.length, from_system, to_system),
        width=convert(unit.width, from_system, to_system),
        height=convert(unit.height, from_system, to_system),
    )


def convert_pallet(pallet: "PalletSpec", from_system: str, to_system: str) -> "PalletSpec":
    return replace(
        pallet,
        length=convert(pallet.length, from_system, to_system),
        width=convert(pallet.width, from_system, to_system),
        height=convert(pallet.height, from_system, to_system),
        max_height=convert(pallet.max_height, from_system, to_system),
        weight=convert_weight(pallet.weight, from_system, to_system),
    )
