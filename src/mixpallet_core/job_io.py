"""Reading job descriptions and writing results.

A job file is YAML (JSON is valid YAML too)::

    project:
      customerName: ACME
    unitSystem: in
    pallet:
      preset: Standard NA (48 x 40 in)
      height: 5.9
      maxHeight: 52
    units:
      - name: Small box
        externalL: 12
        externalW: 10
        externalH: 8
        quantity: 20
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .models import MixedPalletResult, PalletSpec, ProjectInfo, UnitType
from .presets import find_preset
from .units import UNIT_SYSTEMS, convert, convert_pallet, convert_unit_type, convert_weight


@dataclass
class Job:
    units: List[UnitType]
    pallet: PalletSpec
    project: ProjectInfo = field(default_factory=ProjectInfo)
    unit_system: str = "in"

    def converted(self, to_system: str) -> "Job":
        """The same job expressed in another unit system."""
        return replace(
            self,
            units=[convert_unit_type(u, self.unit_system, to_system) for u in self.units],
            pallet=convert_pallet(self.pallet, self.unit_system, to_system),
            unit_system=to_system,
        )


def _section(data: Dict[str, Any], key: str, kind: type) -> Any:
    value = data.get(key)
    if not isinstance(value, kind):
        raise ValueError(f"job file needs a {kind.__name__} '{key}' section")
    return value


def _pallet_from_dict(payload: Dict[str, Any], unit_system: str) -> PalletSpec:
    data = dict(payload)
    preset_name = data.pop("preset", None)
    if preset_name:
        preset = find_preset(str(preset_name))
        if preset is None:
            raise ValueError(f"unknown pallet preset: {preset_name!r}")
        data.setdefault("length", convert(preset.length, preset.units, unit_system))
        data.setdefault("width", convert(preset.width, preset.units, unit_system))
        data.setdefault("palletWeight", convert_weight(preset.weight, preset.units, unit_system))
    try:
        return PalletSpec.from_dict(data)
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"invalid pallet: {exc}") from exc


def job_from_dict(data: Dict[str, Any]) -> Job:
    unit_system = str(data.get("unitSystem", "in"))
    if unit_system not in UNIT_SYSTEMS:
        raise ValueError(f"unknown unit system: {unit_system!r}")
    raw_units = _section(data, "units", list)
    units: List[UnitType] = []
    for index, raw in enumerate(raw_units):
        if not isinstance(raw, dict):
            raise ValueError(f"unit #{index + 1} is not a mapping")
        try:
            units.append(UnitType.from_dict(raw, index))
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"invalid unit #{index + 1}: {exc}") from exc
    pallet = _pallet_from_dict(_section(data, "pallet", dict), unit_system)
    project = ProjectInfo.from_dict(data.get("project") or {})
    return Job(units=units, pallet=pallet, project=project, unit_system=unit_system)


def load_job(path: str) -> Job:
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ValueError(f"cannot parse {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not describe a job")
    return job_from_dict(data)


def result_to_json(result: MixedPalletResult) -> str:
    return json.dumps(result.to_dict(), ensure_ascii=False, indent=2)


def save_result(path: str, result: MixedPalletResult) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(result.to_dict(), f, ensure_ascii=False, indent=2)


__all__ = [
    "Job",
    "job_from_dict",
    "load_job",
    "result_to_json",
    "save_result",
]
