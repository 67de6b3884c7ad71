from __future__ import annotations

import csv
import io
from typing import Any, List, Sequence

from .models import MixedPalletResult, PalletSpec, ProjectInfo, UnitType

Row = List[Any]


def _num(value: float) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return str(value)


def _project_rows(project: ProjectInfo) -> List[Row]:
    return [
        ["PROJECT INFORMATION"],
        ["Customer", project.customer_name],
        ["Project", project.project_name],
        ["Contact", project.contact_name],
        ["Customer Order Number", project.customer_order_number],
        ["Customer Order Qty", project.customer_order_qty],
        ["Pack Out Qty", project.pack_out_qty],
        ["Notes", project.notes],
        [],
    ]


def _pallet_rows(pallet: PalletSpec) -> List[Row]:
    return [
        ["PALLET SPECIFICATIONS"],
        ["Dimensions (L x W)", f"{_num(pallet.length)} x {_num(pallet.width)}"],
        ["Base Height", _num(pallet.height)],
        ["Max Allowed Height", _num(pallet.max_height)],
        ["Pallet Weight", _num(pallet.weight or 0)],
        [],
    ]


def _unit_rows(units: Sequence[UnitType]) -> List[Row]:
    rows: List[Row] = [
        ["UNIT TYPES"],
        ["Name", "External L", "External W", "External H", "Weight", "Qty Requested"],
    ]
    for unit in units:
        rows.append(
            [
                unit.name,
                f"{unit.length:.2f}",
                f"{unit.width:.2f}",
                f"{unit.height:.2f}",
                _num(unit.weight),
                unit.quantity_limit or "Unlimited",
            ]
        )
    rows.append([])
    return rows


def _result_rows(result: MixedPalletResult) -> List[Row]:
    rows: List[Row] = [
        ["OPTIMIZATION RESULTS"],
        ["Total Units on Pallet", result.total_units],
        ["Total Layers", len(result.layers)],
        ["Total Height", f"{result.total_height:.2f}"],
        ["Units Weight", f"{result.total_weight:.2f}"],
        ["Pallet Weight", f"{result.pallet_weight:.2f}"],
        ["Combined Weight (Pallet + Units)", f"{result.combined_weight:.2f}"],
        ["Volume Efficiency", f"{result.volume_efficiency:.1f}%"],
        [],
        ["UNITS PLACED BY TYPE"],
        ["Unit Name", "Qty Placed", "Qty Requested", "Remaining"],
    ]
    for summary in result.unit_summaries:
        rows.append(
            [
                summary.unit_name,
                summary.count_placed,
                summary.quantity_requested if summary.quantity_requested is not None else "Unlimited",
                summary.quantity_remaining if summary.quantity_remaining is not None else "N/A",
            ]
        )
    rows.append([])
    if result.warnings:
        rows.append(["WARNINGS"])
        rows.extend([warning] for warning in result.warnings)
    return rows


def generate_mixed_csv(
    project: ProjectInfo,
    units: Sequence[UnitType],
    pallet: PalletSpec,
    result: MixedPalletResult,
) -> str:
    """Render the pallet configuration report as CSV text."""
    rows: List[Row] = [["PALLET CONFIGURATION REPORT"], []]
    rows += _project_rows(project)
    rows += _pallet_rows(pallet)
    rows += _unit_rows(units)
    rows += _result_rows(result)

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerows(rows)
    # no line break after the last row
    return buffer.getvalue()[:-1]


def save_csv(path: str, text: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)
