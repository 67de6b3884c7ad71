import logging

import pytest

from mixpallet_core import settings as settings_mod
from mixpallet_core.engine import calculate_mixed_pallet
from mixpallet_core.models import PalletSpec, UnitType
from mixpallet_core.settings import DEFAULT_SETTINGS, load_settings, settings_from_mapping


@pytest.fixture(autouse=True)
def _fresh_cache():
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()


def test_packaged_file_matches_defaults(monkeypatch):
    monkeypatch.delenv(settings_mod.SETTINGS_ENV_VAR, raising=False)
    assert load_settings() == DEFAULT_SETTINGS


def test_env_var_points_to_custom_file(tmp_path, monkeypatch):
    path = tmp_path / "settings.yaml"
    path.write_text("grid_resolution: 1.0\nmax_iterations: 100\n", encoding="utf-8")
    monkeypatch.setenv(settings_mod.SETTINGS_ENV_VAR, str(path))

    loaded = load_settings()
    assert loaded.grid_resolution == 1.0
    assert loaded.max_iterations == 100
    assert loaded.headroom_weight == DEFAULT_SETTINGS.headroom_weight


def test_missing_file_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv(settings_mod.SETTINGS_ENV_VAR, str(tmp_path / "nope.yaml"))
    assert load_settings() == DEFAULT_SETTINGS


def test_broken_yaml_gives_defaults(tmp_path, monkeypatch, caplog):
    path = tmp_path / "settings.yaml"
    path.write_text("grid_resolution: [1, 2\n", encoding="utf-8")
    monkeypatch.setenv(settings_mod.SETTINGS_ENV_VAR, str(path))
    with caplog.at_level(logging.ERROR):
        assert load_settings() == DEFAULT_SETTINGS
    assert "Failed to parse" in caplog.text


def test_non_mapping_gives_defaults(tmp_path, monkeypatch):
    path = tmp_path / "settings.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    monkeypatch.setenv(settings_mod.SETTINGS_ENV_VAR, str(path))
    assert load_settings() == DEFAULT_SETTINGS


def test_unknown_and_invalid_keys_are_ignored(caplog):
    with caplog.at_level(logging.WARNING):
        loaded = settings_from_mapping(
            {"corner_bonus": 0, "colour": "blue", "max_layers": "many", "tolerance": True}
        )
    assert loaded.corner_bonus == 0.0
    assert loaded.max_layers == DEFAULT_SETTINGS.max_layers
    assert loaded.tolerance == DEFAULT_SETTINGS.tolerance
    assert "colour" in caplog.text
    assert "max_layers" in caplog.text


@pytest.mark.parametrize("value", [0, -0.5])
def test_non_positive_resolution_keeps_default(value, caplog):
    with caplog.at_level(logging.WARNING):
        loaded = settings_from_mapping({"grid_resolution": value})
    assert loaded.grid_resolution == DEFAULT_SETTINGS.grid_resolution
    assert "grid_resolution" in caplog.text


def test_out_of_range_values_are_ignored(caplog):
    with caplog.at_level(logging.WARNING):
        loaded = settings_from_mapping(
            {
                "max_iterations": 0,
                "max_layers": -3,
                "max_orientation_maps": 0,
                "tolerance": -0.01,
                "min_grid_headroom": 0,
                "headroom_weight": -50,
                "area_weight": float("nan"),
            }
        )
    assert loaded == DEFAULT_SETTINGS
    assert "max_orientation_maps" in caplog.text
    assert "headroom_weight" in caplog.text


def test_zero_resolution_file_still_packs(tmp_path, monkeypatch):
    path = tmp_path / "settings.yaml"
    path.write_text("grid_resolution: 0\n", encoding="utf-8")
    monkeypatch.setenv(settings_mod.SETTINGS_ENV_VAR, str(path))

    pallet = PalletSpec(length=48, width=40, height=5.9, max_height=52, weight=45)
    unit = UnitType(id="a", name="Small", length=12, width=10, height=8, weight=2, quantity=3)
    result = calculate_mixed_pallet([unit], pallet, settings=load_settings())
    assert result.total_units == 3
    assert result.is_valid
