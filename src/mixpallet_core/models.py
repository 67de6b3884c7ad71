from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .units import KG, MM

DEFAULT_COLOR = "#3b82f6"
DEFAULT_COLORS = [
    "#3b82f6",
    "#ef4444",
    "#22c55e",
    "#f59e0b",
    "#8b5cf6",
    "#ec4899",
    "#06b6d4",
    "#f97316",
]

# (x0, z0, l, w) in pallet-centred coordinates
Footprint = Tuple[float, float, float, float]


def color_for_index(index: int) -> str:
    return DEFAULT_COLORS[index % len(DEFAULT_COLORS)]


@dataclass
class UnitType:
    """One box type with external dimensions.

    The three edges are interchangeable; the packer decides which one is
    vertical.  ``quantity`` of ``None`` (or anything <= 0) means unlimited.
    """

    id: str
    name: str
    length: MM
    width: MM
    height: MM
    weight: KG = 0.0
    quantity: Optional[int] = None
    color: str = DEFAULT_COLOR

    @property
    def dimensions(self) -> Tuple[float, float, float]:
        return self.length, self.width, self.height

    @property
    def volume(self) -> float:
        return self.length * self.width * self.height

    @property
    def quantity_limit(self) -> Optional[int]:
        if self.quantity is not None and self.quantity > 0:
            return int(self.quantity)
        return None

    def has_positive_dimensions(self) -> bool:
        return all(value > 0 for value in self.dimensions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "externalL": self.length,
            "externalW": self.width,
            "externalH": self.height,
            "weight": self.weight,
            "quantity": self.quantity,
            "color": self.color,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any], index: int = 0) -> "UnitType":
        quantity = payload.get("quantity")
        return cls(
            id=str(payload.get("id", f"unit-{index + 1}")),
            name=str(payload.get("name", f"Box {index + 1}")),
            length=float(payload["externalL"]),
            width=float(payload["externalW"]),
            height=float(payload["externalH"]),
            weight=float(payload.get("weight") or 0.0),
            quantity=int(quantity) if quantity not in (None, "") else None,
            color=str(payload.get("color") or color_for_index(index)),
        )


@dataclass
class PalletSpec:
    """Pallet footprint, deck height and the height ceiling."""

    length: MM
    width: MM
    height: MM = 0.0
    max_height: MM = 0.0
    weight: KG = 0.0

    @property
    def footprint_area(self) -> float:
        return self.length * self.width

    @property
    def usable_height(self) -> float:
        return self.max_height - self.height

    def to_dict(self) -> Dict[str, float]:
        return {
            "length": self.length,
            "width": self.width,
            "height": self.height,
            "maxHeight": self.max_height,
            "palletWeight": self.weight,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "PalletSpec":
        return cls(
            length=float(payload["length"]),
            width=float(payload["width"]),
            height=float(payload.get("height") or 0.0),
            max_height=float(payload["maxHeight"]),
            weight=float(payload.get("palletWeight") or 0.0),
        )


@dataclass(frozen=True)
class Orientation:
    """Footprint (length x width) and height of a box as stacked."""

    length: float
    width: float
    height: float
    vertical_edge: int = 2

    @property
    def footprint_area(self) -> float:
        return self.length * self.width

    def rotated(self) -> "Orientation":
        return Orientation(self.width, self.length, self.height, self.vertical_edge)


@dataclass(frozen=True)
class Placement:
    """A single box on the pallet.

    ``position`` is the box centre (x, y, z) with ``y`` vertical, the pallet
    centred on the origin horizontally and ``y`` starting at the deck height.
    ``dimensions`` is (l, w, h) as placed, ``l`` along x and ``w`` along z.
    """

    unit_id: str
    unit_name: str
    color: str
    position: Tuple[float, float, float]
    dimensions: Tuple[float, float, float]
    rotated: bool = False

    @property
    def base_height(self) -> float:
        return self.position[1] - self.dimensions[2] / 2

    @property
    def top_height(self) -> float:
        return self.position[1] + self.dimensions[2] / 2

    @property
    def footprint(self) -> Footprint:
        x, _, z = self.position
        length, width, _ = self.dimensions
        return (x - length / 2, z - width / 2, length, width)

    @property
    def footprint_area(self) -> float:
        return self.dimensions[0] * self.dimensions[1]

    @property
    def volume(self) -> float:
        length, width, height = self.dimensions
        return length * width * height

    def to_dict(self) -> Dict[str, Any]:
        x, y, z = self.position
        length, width, height = self.dimensions
        return {
            "unitId": self.unit_id,
            "unitName": self.unit_name,
            "color": self.color,
            "position": {"x": x, "y": y, "z": z},
            "dimensions": {"l": length, "w": width, "h": height},
            "rotated": self.rotated,
        }


@dataclass
class PalletLayer:
    index: int
    height: float
    base_height: float
    placements: List[Placement]
    area_used: float
    area_total: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "layerIndex": self.index,
            "height": self.height,
            "baseY": self.base_height,
            "placements": [placement.to_dict() for placement in self.placements],
            "areaUsed": self.area_used,
            "areaTotal": self.area_total,
        }


@dataclass
class UnitSummary:
    unit_id: str
    unit_name: str
    color: str
    count_placed: int
    quantity_requested: Optional[int] = None
    quantity_remaining: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "unitId": self.unit_id,
            "unitName": self.unit_name,
            "color": self.color,
            "countPlaced": self.count_placed,
            "quantityRequested": self.quantity_requested,
            "quantityRemaining": self.quantity_remaining,
        }


@dataclass
class MixedPalletResult:
    layers: List[PalletLayer] = field(default_factory=list)
    placements: List[Placement] = field(default_factory=list)
    unit_summaries: List[UnitSummary] = field(default_factory=list)
    total_units: int = 0
    total_weight: float = 0.0
    pallet_weight: float = 0.0
    combined_weight: float = 0.0
    total_height: float = 0.0
    volume_efficiency: float = 0.0
    area_efficiency: float = 0.0
    warnings: List[str] = field(default_factory=list)
    is_valid: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "layers": [layer.to_dict() for layer in self.layers],
            "placements": [placement.to_dict() for placement in self.placements],
            "unitSummaries": [summary.to_dict() for summary in self.unit_summaries],
            "totalUnits": self.total_units,
            "totalWeight": self.total_weight,
            "palletWeight": self.pallet_weight,
            "combinedWeight": self.combined_weight,
            "totalHeight": self.total_height,
            "volumeEfficiency": self.volume_efficiency,
            "areaEfficiency": self.area_efficiency,
            "warnings": list(self.warnings),
            "isValid": self.is_valid,
        }


@dataclass
class ProjectInfo:
    """Report metadata, not used by the packer."""

    customer_name: str = ""
    project_name: str = ""
    contact_name: str = ""
    customer_order_number: str = ""
    customer_order_qty: str = ""
    pack_out_qty: str = ""
    notes: str = ""

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ProjectInfo":
        return cls(
            customer_name=str(payload.get("customerName", "")),
            project_name=str(payload.get("projectName", "")),
            contact_name=str(payload.get("contactName", "")),
            customer_order_number=str(payload.get("customerOrderNumber", "")),
            customer_order_qty=str(payload.get("customerOrderQty", "")),
            pack_out_qty=str(payload.get("packOutQty", "")),
            notes=str(payload.get("notes", "")),
        )
