from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..models import Orientation, UnitType
from ..settings import DEFAULT_SETTINGS

# Free rectangle (x, z, w, d): corner plus extent along pallet length / width
FreeRect = Tuple[float, float, float, float]


@dataclass
class BoxToPack:
    """One unit type in one fixed orientation with a remaining count."""

    unit: UnitType
    orientation: Orientation
    remaining: int

    @property
    def length(self) -> float:
        return self.orientation.length

    @property
    def width(self) -> float:
        return self.orientation.width

    @property
    def height(self) -> float:
        return self.orientation.height

    @property
    def footprint_area(self) -> float:
        return self.orientation.footprint_area


@dataclass(frozen=True)
class LocalBox:
    """A box placed in a layer, corner-based in local footprint coordinates."""

    unit: UnitType
    x: float
    z: float
    length: float
    width: float
    height: float
    rotated: bool


@dataclass
class LayerPackResult:
    placements: List[LocalBox] = field(default_factory=list)
    thickness: float = 0.0
    used: Dict[str, int] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.placements


def _rect_score(rect: FreeRect) -> float:
    return rect[0] + rect[1]


def _best_rect(
    free_rects: Sequence[FreeRect], box_l: float, box_w: float, tol: float
) -> Tuple[int, float, float]:
    """Lowest x + z rectangle holding the box; unrotated wins ties."""
    best_index = -1
    best_fit: Tuple[float, float] = (0.0, 0.0)
    best_score: Optional[float] = None
    for i, rect in enumerate(free_rects):
        _, _, w, d = rect
        score = _rect_score(rect)
        for fit_l, fit_w in ((box_l, box_w), (box_w, box_l)):
            if fit_l <= w + tol and fit_w <= d + tol:
                if best_score is None or score < best_score:
                    best_score = score
                    best_index = i
                    best_fit = (fit_l, fit_w)
    return best_index, best_fit[0], best_fit[1]


def split_rect(rect: FreeRect, fit_l: float, fit_w: float) -> Tuple[FreeRect, FreeRect]:
    """Guillotine split into the right and the top remainder."""
    x, z, w, d = rect
    right = (x + fit_l, z, w - fit_l, fit_w)
    top = (x, z + fit_w, w, d - fit_w)
    return right, top


def pack_layer(
    boxes: Sequence[BoxToPack],
    pallet_l: float,
    pallet_w: float,
    max_layer_height: float,
    *,
    tol: float = DEFAULT_SETTINGS.tolerance,
    min_rect: float = DEFAULT_SETTINGS.min_free_rect,
) -> LayerPackResult:
    """Fill one horizontal layer using a free-rectangle guillotine strategy.

    ``boxes`` are consumed in place: ``remaining`` is decremented for every
    box placed.  Eligible types are tried largest footprint first and each
    box goes to the free rectangle closest to the origin corner.  An empty
    result means no layer can be built.
    """
    result = LayerPackResult()
    free_rects: List[FreeRect] = [(0.0, 0.0, pallet_l, pallet_w)]

    eligible = [
        box
        for box in boxes
        if box.remaining > 0 and box.height <= max_layer_height + tol
    ]
    eligible.sort(key=lambda box: box.footprint_area, reverse=True)

    for box in eligible:
        while box.remaining > 0:
            index, fit_l, fit_w = _best_rect(free_rects, box.length, box.width, tol)
            if index < 0:
                break
            rect = free_rects.pop(index)
            result.placements.append(
                LocalBox(
                    unit=box.unit,
                    x=rect[0],
                    z=rect[1],
                    length=fit_l,
                    width=fit_w,
                    height=box.height,
                    rotated=abs(fit_l - box.length) > tol,
                )
            )
            box.remaining -= 1
            result.used[box.unit.id] = result.used.get(box.unit.id, 0) + 1
            result.thickness = max(result.thickness, box.height)

            for piece in split_rect(rect, fit_l, fit_w):
                if piece[2] > min_rect and piece[3] > min_rect:
                    free_rects.append(piece)
            free_rects.sort(key=_rect_score)

    return result
