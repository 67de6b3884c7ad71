from __future__ import annotations

import argparse
import logging
import sys
from importlib import metadata
from typing import List, Optional

from .engine import calculate_mixed_pallet
from .job_io import load_job, save_result
from .layering import calculate_layered_pallet
from .models import MixedPalletResult
from .report import generate_mixed_csv, save_csv
from .sanity import find_overlaps, out_of_bounds
from .units import UNIT_SYSTEMS

logger = logging.getLogger(__name__)


def _get_app_version() -> str:
    try:
        return metadata.version("mixpallet")
    except metadata.PackageNotFoundError:
        return "dev"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mixpallet",
        description="Stack mixed box types onto a pallet.",
    )
    parser.add_argument("job", help="YAML or JSON job file")
    parser.add_argument(
        "--layered",
        action="store_true",
        help="use flat layer strategies instead of the height-map packer",
    )
    parser.add_argument("--to-units", choices=UNIT_SYSTEMS, help="convert the job before packing")
    parser.add_argument("--csv", metavar="PATH", help="write the CSV report")
    parser.add_argument("--json", metavar="PATH", help="write the result as JSON")
    parser.add_argument("--plot", metavar="PATH", help="write a 3D rendering (png, svg, pdf)")
    parser.add_argument(
        "--check",
        action="store_true",
        help="exit with status 2 when boxes overlap or leave the pallet",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_get_app_version()}")
    return parser


def print_summary(result: MixedPalletResult, unit_system: str) -> None:
    length_unit = "in" if unit_system == "in" else "mm"
    weight_unit = "lbs" if unit_system == "in" else "kg"
    print(f"Units placed:      {result.total_units}")
    print(f"Layers:            {len(result.layers)}")
    print(f"Total height:      {result.total_height:.2f} {length_unit}")
    print(f"Combined weight:   {result.combined_weight:.2f} {weight_unit}")
    print(f"Volume efficiency: {result.volume_efficiency:.1f}%")
    for summary in result.unit_summaries:
        requested = summary.quantity_requested if summary.quantity_requested is not None else "unlimited"
        print(f"  {summary.unit_name}: {summary.count_placed} / {requested}")
    for warning in result.warnings:
        print(f"Warning: {warning}")
    print("Valid" if result.is_valid else "Not valid")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        job = load_job(args.job)
    except (OSError, ValueError) as exc:
        logger.error("Cannot load job %s: %s", args.job, exc)
        return 1
    if args.to_units and args.to_units != job.unit_system:
        job = job.converted(args.to_units)

    if args.layered:
        result = calculate_layered_pallet(job.units, job.pallet)
    else:
        result = calculate_mixed_pallet(job.units, job.pallet)
    print_summary(result, job.unit_system)

    try:
        if args.csv:
            save_csv(args.csv, generate_mixed_csv(job.project, job.units, job.pallet, result))
        if args.json:
            save_result(args.json, result)
        if args.plot:
            from .render import save_rendering

            save_rendering(result, job.pallet, args.plot)
    except OSError:
        logger.exception("Cannot write output")
        return 1

    if args.check:
        outside = out_of_bounds(result.placements, job.pallet)
        overlaps = find_overlaps(result.placements)
        if outside or overlaps:
            logger.error(
                "Layout check failed: %d box(es) out of bounds, %d overlapping pair(s)",
                len(outside),
                len(overlaps),
            )
            return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
