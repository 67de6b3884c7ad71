from __future__ import annotations

from typing import List, Sequence, Tuple

from .models import PalletSpec, Placement
from .settings import DEFAULT_SETTINGS

EPS = DEFAULT_SETTINGS.tolerance

# (min_x, min_y, min_z, max_x, max_y, max_z)
Bounds = Tuple[float, float, float, float, float, float]


def placement_bounds(placement: Placement) -> Bounds:
    x, y, z = placement.position
    length, width, height = placement.dimensions
    return (
        x - length / 2,
        y - height / 2,
        z - width / 2,
        x + length / 2,
        y + height / 2,
        z + width / 2,
    )


def _intersects(a: Bounds, b: Bounds, eps: float) -> bool:
    return not (
        a[3] <= b[0] + eps
        or b[3] <= a[0] + eps
        or a[4] <= b[1] + eps
        or b[4] <= a[1] + eps
        or a[5] <= b[2] + eps
        or b[5] <= a[2] + eps
    )


def out_of_bounds(
    placements: Sequence[Placement], pallet: PalletSpec, eps: float = EPS
) -> List[int]:
    """Indices of boxes sticking out of the pallet footprint or height range."""
    half_l = pallet.length / 2
    half_w = pallet.width / 2
    bad: List[int] = []
    for i, placement in enumerate(placements):
        x0, y0, z0, x1, y1, z1 = placement_bounds(placement)
        if (
            x0 < -half_l - eps
            or x1 > half_l + eps
            or z0 < -half_w - eps
            or z1 > half_w + eps
            or y0 < pallet.height - eps
            or y1 > pallet.max_height + eps
        ):
            bad.append(i)
    return bad


def find_overlaps(
    placements: Sequence[Placement], eps: float = EPS
) -> List[Tuple[int, int]]:
    """Index pairs of boxes whose volumes intersect by more than ``eps``."""
    bounds = [placement_bounds(p) for p in placements]
    overlaps: List[Tuple[int, int]] = []
    for i, a in enumerate(bounds):
        for j in range(i + 1, len(bounds)):
            if _intersects(a, bounds[j], eps):
                overlaps.append((i, j))
    return overlaps


def is_sane(placements: Sequence[Placement], pallet: PalletSpec, eps: float = EPS) -> bool:
    return not out_of_bounds(placements, pallet, eps) and not find_overlaps(placements, eps)
