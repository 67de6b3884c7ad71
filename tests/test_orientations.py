from mixpallet_core.models import Orientation, PalletSpec, UnitType
from mixpallet_core.orientations import enumerate_orientations, fits_pallet, unit_fits_pallet


def _dims(orientations):
    return [(o.length, o.width, o.height) for o in orientations]


def test_distinct_edges_give_six_orientations_in_order():
    assert _dims(enumerate_orientations((12, 10, 8))) == [
        (10, 8, 12),
        (8, 10, 12),
        (12, 8, 10),
        (8, 12, 10),
        (12, 10, 8),
        (10, 12, 8),
    ]


def test_vertical_edge_recorded():
    edges = [o.vertical_edge for o in enumerate_orientations((12, 10, 8))]
    assert edges == [0, 0, 1, 1, 2, 2]


def test_square_box_collapses_duplicates():
    assert _dims(enumerate_orientations((10, 10, 5))) == [(10, 5, 10), (5, 10, 10), (10, 10, 5)]


def test_cube_has_single_orientation():
    assert len(enumerate_orientations((5, 5, 5))) == 1


def test_near_equal_edges_collapse_within_tolerance():
    assert len(enumerate_orientations((10, 10.005, 5))) == 3


def test_fits_pallet_checks_both_rotations():
    pallet = PalletSpec(length=48, width=40, height=0, max_height=52)
    assert fits_pallet(Orientation(30, 45, 10), pallet)
    assert not fits_pallet(Orientation(50, 30, 10), pallet)


def test_fits_pallet_checks_usable_height():
    pallet = PalletSpec(length=48, width=40, height=5.9, max_height=52)
    assert fits_pallet(Orientation(10, 10, 46.1), pallet)
    assert not fits_pallet(Orientation(10, 10, 46.2), pallet)


def test_unit_fits_pallet_when_laid_down():
    pallet = PalletSpec(length=48, width=40, height=5.9, max_height=52)
    tall = UnitType(id="t", name="Tall", length=10, width=10, height=47)
    huge = UnitType(id="h", name="Huge", length=12, width=10, height=60)
    assert unit_fits_pallet(tall, pallet)
    assert not unit_fits_pallet(huge, pallet)


def test_rotated_swaps_footprint():
    assert Orientation(12, 10, 8, 2).rotated() == Orientation(10, 12, 8, 2)
