#!/usr/bin/env python3
"""Convert an SBTE result export (CSV, one row per course) into a wide workbook.

Steps:

1. Parse the export into result rows.
2. Pivot the rows to one record per register number.
3. Collect every course code seen, in order, as the subject columns.
4. Write the styled ``.xlsx`` sheet.
"""
from __future__ import annotations

import argparse
import json
import os
from pathlib import Path
from typing import Dict, Sequence

from parse_results import DEFAULT_ENCODING, read_results_file
from pivot_results import collect_courses, pivot_results
from render_results import (
    DEFAULT_FILLS,
    DEFAULT_HEADER_FILL,
    DEFAULT_SHEET_NAME,
    DEFAULT_SUBTITLE,
    DEFAULT_TITLE,
    write_workbook,
)
from result_errors import ResultFormatError

HERE = os.path.dirname(os.path.abspath(__file__))

DEFAULT_CONFIG: Dict = {
    "title": DEFAULT_TITLE,
    "subtitle": DEFAULT_SUBTITLE,
    "sheet_name": DEFAULT_SHEET_NAME,
    "output_name": "out-sheet.xlsx",
    "outdir": "outputs",
    "encoding": DEFAULT_ENCODING,
    "strict": False,
    "header_fill": DEFAULT_HEADER_FILL,
    "fills": dict(DEFAULT_FILLS),
}


def load_config(path: str) -> Dict:
    """Return DEFAULT_CONFIG updated with the JSON file at *path*, if present."""

    cfg = dict(DEFAULT_CONFIG)
    if not path or not os.path.isfile(path):
        return cfg
    try:
        with open(path, "r", encoding="utf-8") as f:
            user = json.load(f)
    except (OSError, ValueError) as exc:
        raise ResultFormatError(f"Unable to read config {path}: {exc}") from exc
    cfg.update(user)
    cfg["fills"] = {**DEFAULT_FILLS, **user.get("fills", {})}
    return cfg


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--input", required=True, help="Path to the result CSV export")
    parser.add_argument(
        "--config",
        default=os.path.join(HERE, "config.json"),
        help="Path to the JSON configuration file (default: %(default)s)",
    )
    parser.add_argument(
        "--outdir",
        default=None,
        help="Directory for the workbook (default: config 'outdir')",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Workbook file name (default: config 'output_name')",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Reject malformed cells and students whose details differ between rows",
    )
    return parser.parse_args(argv)


def format_results(input_path, output_path, cfg: Dict) -> Path:
    strict = bool(cfg.get("strict", False))
    rows = read_results_file(input_path, encoding=cfg.get("encoding", DEFAULT_ENCODING), strict=strict)
    print(f"[INFO] Parsed {len(rows)} result rows from {input_path}")

    students = pivot_results(rows, strict=strict)
    courses = collect_courses(students)
    print(f"[INFO] {len(students)} students across {len(courses)} courses")

    return write_workbook(students, courses, output_path, cfg)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        cfg = load_config(args.config)
        if args.strict:
            cfg["strict"] = True
        outdir = Path(args.outdir or cfg["outdir"]).resolve()
        output_path = outdir / (args.output or cfg["output_name"])
        written = format_results(Path(args.input).resolve(), output_path, cfg)
    except ResultFormatError as exc:
        print(f"[ERROR] {exc}")
        return 1
    except OSError as exc:
        print(f"[ERROR] Unable to write workbook: {exc}")
        return 1

    print(f"[SUCCESS] Wrote {written}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
