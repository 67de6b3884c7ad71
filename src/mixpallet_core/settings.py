from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, fields, replace
from functools import lru_cache
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)

SETTINGS_ENV_VAR = "MIXPALLET_SETTINGS"


@dataclass(frozen=True)
class PackingSettings:
    """Heuristic knobs of the packers.

    The scoring weights and caps are empirically chosen; changing them
    changes the produced layouts.
    """

    grid_resolution: float = 0.5
    max_iterations: int = 5000
    max_layers: int = 100
    switch_after_max: int = 15
    max_orientation_maps: int = 36
    max_grid_cells: int = 200_000
    continuation_bias: float = 1000.0
    headroom_weight: float = 50.0
    area_weight: float = 30.0
    corner_bonus: float = 5.0
    tolerance: float = 0.01
    min_free_rect: float = 0.1
    min_layer_headroom: float = 0.1
    min_grid_headroom: float = 0.5
    unlimited_quantity: int = 10**9


DEFAULT_SETTINGS = PackingSettings()


def settings_path() -> str:
    env_path = os.getenv(SETTINGS_ENV_VAR)
    if env_path:
        return os.path.expanduser(env_path)
    return os.path.join(os.path.dirname(__file__), "settings.yaml")


# Must be strictly positive; the scoring weights only need to be non-negative.
_POSITIVE = frozenset(
    {
        "grid_resolution",
        "max_iterations",
        "max_layers",
        "switch_after_max",
        "max_orientation_maps",
        "max_grid_cells",
        "tolerance",
        "min_free_rect",
        "min_layer_headroom",
        "min_grid_headroom",
        "unlimited_quantity",
    }
)


def _coerce(name: str, value: Any) -> Any:
    default = getattr(DEFAULT_SETTINGS, name)
    if isinstance(default, bool) or isinstance(value, bool):
        raise TypeError(f"{name}: booleans are not accepted")
    converted = int(value) if isinstance(default, int) else float(value)
    if not math.isfinite(converted):
        raise ValueError(f"{name} must be finite")
    if name in _POSITIVE and converted <= 0:
        raise ValueError(f"{name} must be positive")
    if converted < 0:
        raise ValueError(f"{name} must not be negative")
    return converted


def settings_from_mapping(data: Dict[str, Any]) -> PackingSettings:
    """Override defaults with the known keys of ``data``."""
    known = {f.name for f in fields(PackingSettings)}
    overrides: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            logger.warning("Ignoring unknown setting %r", key)
            continue
        try:
            overrides[key] = _coerce(key, value)
        except (TypeError, ValueError, OverflowError):
            logger.warning("Ignoring invalid value %r for setting %r", value, key)
    return replace(DEFAULT_SETTINGS, **overrides)


@lru_cache(maxsize=None)
def load_settings() -> PackingSettings:
    """Load packing settings from ``settings.yaml`` when available."""

    path = settings_path()
    if not os.path.exists(path):
        return DEFAULT_SETTINGS
    with open(path, "r", encoding="utf-8") as f:
        try:
            loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError:
            logger.exception("Failed to parse settings file %s", path)
            return DEFAULT_SETTINGS
    if not isinstance(loaded, dict):
        logger.warning("Settings file %s does not hold a mapping", path)
        return DEFAULT_SETTINGS
    return settings_from_mapping(loaded)
