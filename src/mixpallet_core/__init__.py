"""Mixed-unit pallet stacking."""

from .engine import HeightMapPacker, calculate_mixed_pallet
from .layering import calculate_layered_pallet
from .models import (
    MixedPalletResult,
    Orientation,
    PalletLayer,
    PalletSpec,
    Placement,
    ProjectInfo,
    UnitSummary,
    UnitType,
)
from .orientations import enumerate_orientations
from .presets import COMMON_PALLETS, find_preset
from .settings import PackingSettings, load_settings

__all__ = [
    "MixedPalletResult",
    "Orientation",
    "PalletLayer",
    "PalletSpec",
    "Placement",
    "ProjectInfo",
    "UnitSummary",
    "UnitType",
    "HeightMapPacker",
    "calculate_mixed_pallet",
    "calculate_layered_pallet",
    "enumerate_orientations",
    "COMMON_PALLETS",
    "find_preset",
    "PackingSettings",
    "load_settings",
]
