import pytest

from mixpallet_core.aggregate import (
    build_result,
    collect_input_warnings,
    group_into_layers,
    summarize_units,
    volume_efficiency,
)
from mixpallet_core.models import PalletSpec, Placement, UnitType


def _place(unit_id, x, base, z, l=10.0, w=10.0, h=5.0):
    return Placement(
        unit_id=unit_id,
        unit_name=unit_id.upper(),
        color="#3b82f6",
        position=(x, base + h / 2, z),
        dimensions=(l, w, h),
    )


PALLET = PalletSpec(length=40, width=20, height=5, max_height=30, weight=10)


def test_group_into_layers_by_base_height():
    placements = [
        _place("a", -15, 5, -5),
        _place("a", -5, 5.001, -5),
        _place("b", -15, 10, -5, h=8),
        _place("a", 5, 5, -5),
    ]
    layers = group_into_layers(placements, PALLET)

    assert [layer.index for layer in layers] == [0, 1]
    assert [len(layer.placements) for layer in layers] == [3, 1]
    assert layers[0].base_height == 5
    assert layers[1].height == 8
    assert layers[0].area_used == pytest.approx(300)
    assert layers[0].area_total == 800


def test_summaries_follow_unit_order():
    units = [
        UnitType(id="a", name="A", length=10, width=10, height=5, quantity=5),
        UnitType(id="b", name="B", length=10, width=10, height=8),
    ]
    placements = [_place("b", 0, 5, 0, h=8), _place("a", -10, 5, 0), _place("a", 10, 5, 0)]
    summaries = summarize_units(units, placements)

    assert [(s.unit_id, s.count_placed) for s in summaries] == [("a", 2), ("b", 1)]
    assert summaries[0].quantity_remaining == 3
    assert summaries[1].quantity_requested is None
    assert summaries[1].quantity_remaining is None


def test_volume_efficiency():
    placements = [_place("a", 0, 5, 0, l=40, w=20, h=12.5)]
    assert volume_efficiency(placements, PALLET) == pytest.approx(50)
    flat = PalletSpec(length=40, width=20, height=5, max_height=5)
    assert volume_efficiency(placements, flat) == 0.0


def test_build_result_metrics():
    units = [UnitType(id="a", name="A", length=10, width=10, height=5, weight=2.5)]
    placements = [_place("a", -15, 5, -5), _place("a", -5, 5, -5), _place("a", -15, 10, -5)]
    result = build_result(units, PALLET, placements)

    assert result.total_units == 3
    assert result.total_weight == pytest.approx(7.5)
    assert result.pallet_weight == 10
    assert result.combined_weight == pytest.approx(17.5)
    assert result.total_height == pytest.approx(15)
    assert result.area_efficiency == pytest.approx(200 / 800 * 100)
    assert result.is_valid
    assert result.warnings == []


def test_build_result_flags_overshoot():
    units = [UnitType(id="a", name="A", length=10, width=10, height=30)]
    result = build_result(units, PALLET, [_place("a", 0, 5, 0, h=30)])
    assert not result.is_valid
    assert any("exceeds" in w for w in result.warnings)


def test_build_result_without_placements():
    result = build_result([], PALLET, [])
    assert not result.is_valid
    assert result.total_height == 5
    assert result.warnings == ["No units could be placed on the pallet"]


def test_input_warnings():
    pallet = PalletSpec(length=40, width=20, height=5, max_height=30)
    units = [
        UnitType(id="a", name="Ok", length=10, width=10, height=5),
        UnitType(id="b", name="Flat", length=10, width=-1, height=5),
        UnitType(id="c", name="Wide", length=50, width=30, height=30),
    ]
    warnings = collect_input_warnings(units, pallet)
    assert warnings == [
        "Unit 'Flat' has non-positive dimensions and was skipped",
        "Unit 'Wide' does not fit on the pallet in any orientation",
    ]
