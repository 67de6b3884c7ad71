import pytest

from mixpallet_core.models import PalletSpec, UnitType
from mixpallet_core.units import (
    convert,
    convert_pallet,
    convert_unit_type,
    convert_weight,
    format_float,
    parse_float,
)


def test_parse_float_accepts_comma():
    assert parse_float("12,5") == 12.5


def test_parse_float_strips_whitespace():
    assert parse_float("  10.0 ") == 10.0


def test_parse_float_rejects_empty():
    with pytest.raises(ValueError):
        parse_float("")


def test_format_float():
    assert format_float(5.0) == "5.00"
    assert format_float(1.2345, 1) == "1.2"


def test_convert_lengths():
    assert convert(48, "in", "mm") == pytest.approx(1219.2)
    assert convert(1200, "mm", "in") == pytest.approx(47.244, abs=1e-3)
    assert convert(7, "mm", "mm") == 7


def test_convert_weights():
    assert convert_weight(45, "in", "mm") == pytest.approx(20.41164)
    assert convert_weight(25, "mm", "in") == pytest.approx(55.1155)


def test_unknown_system_rejected():
    with pytest.raises(ValueError):
        convert(1, "in", "cm")


def test_convert_unit_type_keeps_weight():
    unit = UnitType(id="a", name="A", length=10, width=5, height=2, weight=3)
    converted = convert_unit_type(unit, "in", "mm")
    assert converted.dimensions == pytest.approx((254, 127, 50.8))
    assert converted.weight == 3
    assert unit.length == 10


def test_convert_pallet():
    pallet = PalletSpec(length=48, width=40, height=5.9, max_height=52, weight=45)
    converted = convert_pallet(pallet, "in", "mm")
    assert converted.length == pytest.approx(1219.2)
    assert converted.max_height == pytest.approx(1320.8)
    assert converted.weight == pytest.approx(20.41164)
