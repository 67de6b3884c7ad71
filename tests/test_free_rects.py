import pytest

from mixpallet_core.algorithms.free_rects import BoxToPack, pack_layer, split_rect
from mixpallet_core.models import Orientation, UnitType


def _overlap(a, b):
    return not (
        a.x + a.length <= b.x + 1e-6
        or b.x + b.length <= a.x + 1e-6
        or a.z + a.width <= b.z + 1e-6
        or b.z + b.width <= a.z + 1e-6
    )


def _box(unit_id, l, w, h, remaining=1000):
    unit = UnitType(id=unit_id, name=unit_id.upper(), length=l, width=w, height=h)
    return BoxToPack(unit, Orientation(l, w, h), remaining)


def test_split_rect_right_and_top():
    right, top = split_rect((2.0, 3.0, 20.0, 15.0), 12.0, 10.0)
    assert right == (14.0, 3.0, 8.0, 10.0)
    assert top == (2.0, 13.0, 20.0, 5.0)


def test_uniform_boxes_tile_the_pallet():
    box = _box("a", 12, 10, 8)
    result = pack_layer([box], 48, 40, 46.1)

    assert len(result.placements) == 16
    assert result.thickness == pytest.approx(8)
    assert result.used == {"a": 16}
    assert box.remaining == 1000 - 16
    assert all(not p.rotated for p in result.placements)
    for p in result.placements:
        assert p.x + p.length <= 48 + 1e-6
        assert p.z + p.width <= 40 + 1e-6
    for i, a in enumerate(result.placements):
        for b in result.placements[i + 1 :]:
            assert not _overlap(a, b)


def test_first_box_goes_to_origin_corner():
    result = pack_layer([_box("a", 12, 10, 8)], 48, 40, 46.1)
    first = result.placements[0]
    assert (first.x, first.z) == (0.0, 0.0)


def test_remaining_quantity_limits_layer():
    box = _box("a", 12, 10, 8, remaining=5)
    result = pack_layer([box], 48, 40, 46.1)
    assert len(result.placements) == 5
    assert box.remaining == 0


def test_boxes_taller_than_ceiling_are_skipped():
    result = pack_layer([_box("a", 12, 10, 8)], 48, 40, 7.5)
    assert result.is_empty
    assert result.thickness == 0.0


def test_largest_footprint_goes_first():
    small = _box("small", 10, 10, 5, remaining=1)
    large = _box("large", 20, 20, 5, remaining=1)
    result = pack_layer([small, large], 48, 40, 46.1)
    assert [p.unit.id for p in result.placements] == ["large", "small"]
    assert (result.placements[0].x, result.placements[0].z) == (0.0, 0.0)


def test_box_is_rotated_when_only_rotation_fits():
    result = pack_layer([_box("a", 10, 30, 5, remaining=1)], 40, 20, 10)
    assert len(result.placements) == 1
    placed = result.placements[0]
    assert placed.rotated
    assert (placed.length, placed.width) == (30, 10)


def test_thickness_is_tallest_box():
    result = pack_layer(
        [_box("a", 20, 20, 5, remaining=1), _box("b", 10, 10, 9, remaining=1)], 48, 40, 20
    )
    assert result.thickness == pytest.approx(9)
