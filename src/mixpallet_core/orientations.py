from __future__ import annotations

from typing import List, Sequence

from .models import Orientation, PalletSpec, UnitType
from .settings import DEFAULT_SETTINGS

TOLERANCE = DEFAULT_SETTINGS.tolerance


def _same(a: Orientation, b: Orientation, tol: float) -> bool:
    return (
        abs(a.length - b.length) < tol
        and abs(a.width - b.width) < tol
        and abs(a.height - b.height) < tol
    )


def enumerate_orientations(
    dims: Sequence[float], *, tol: float = TOLERANCE
) -> List[Orientation]:
    """Return the distinct ways a box can stand.

    Each edge is tried as the vertical one; the remaining two edges form the
    footprint in both assignments so the packer can pick whichever wastes
    less space.  Orientations equal within ``tol`` are collapsed.

    Examples
    --------
    >>> [(o.length, o.width, o.height) for o in enumerate_orientations((10, 10, 5))]
    [(10, 5, 10), (5, 10, 10), (10, 10, 5)]
    """
    orientations: List[Orientation] = []
    for vertical in range(3):
        height = dims[vertical]
        a, b = (dims[i] for i in range(3) if i != vertical)
        for length, width in ((a, b), (b, a)):
            candidate = Orientation(length, width, height, vertical)
            if any(_same(candidate, existing, tol) for existing in orientations):
                continue
            orientations.append(candidate)
    return orientations


def unit_orientations(unit: UnitType, *, tol: float = TOLERANCE) -> List[Orientation]:
    return enumerate_orientations(unit.dimensions, tol=tol)


def fits_pallet(
    orientation: Orientation, pallet: PalletSpec, *, tol: float = TOLERANCE
) -> bool:
    """True when the orientation fits the footprint and the usable height."""
    if orientation.height > pallet.usable_height + tol:
        return False
    straight = (
        orientation.length <= pallet.length + tol
        and orientation.width <= pallet.width + tol
    )
    turned = (
        orientation.width <= pallet.length + tol
        and orientation.length <= pallet.width + tol
    )
    return straight or turned


def unit_fits_pallet(unit: UnitType, pallet: PalletSpec, *, tol: float = TOLERANCE) -> bool:
    return any(fits_pallet(o, pallet, tol=tol) for o in unit_orientations(unit, tol=tol))
