from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .models import PalletSpec


@dataclass(frozen=True)
class PalletPreset:
    name: str
    length: float
    width: float
    units: str
    weight: float
    weight_unit: str

    def to_spec(self, height: float = 0.0, max_height: float = 0.0) -> PalletSpec:
        """Pallet with this footprint and weight; heights come from the caller."""
        return PalletSpec(
            length=self.length,
            width=self.width,
            height=height,
            max_height=max_height,
            weight=self.weight,
        )


COMMON_PALLETS: List[PalletPreset] = [
    PalletPreset("Standard NA (48 x 40 in)", 48, 40, "in", 45, "lbs"),
    PalletPreset("Standard NA (48 x 48 in)", 48, 48, "in", 55, "lbs"),
    PalletPreset("Euro (1200 x 800 mm)", 1200, 800, "mm", 25, "kg"),
    PalletPreset("Industry (1200 x 1000 mm)", 1200, 1000, "mm", 30, "kg"),
    PalletPreset("Half Pallet (40 x 24 in)", 40, 24, "in", 25, "lbs"),
]

# Pallet form defaults (inches, lbs)
DEFAULT_PALLET = PalletSpec(length=48, width=40, height=5.9, max_height=52, weight=45)


def find_preset(name: str) -> Optional[PalletPreset]:
    """Look a preset up by exact name, falling back to a case-insensitive prefix."""
    for preset in COMMON_PALLETS:
        if preset.name == name:
            return preset
    key = name.strip().lower()
    if not key:
        return None
    for preset in COMMON_PALLETS:
        if preset.name.lower().startswith(key):
            return preset
    return None
