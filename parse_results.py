"""Read a long-format result export (one row per student/course) into records."""

from __future__ import annotations

import csv
import io
import re
from pathlib import Path
from typing import Callable, Dict, List, NamedTuple, Optional

import pandas as pd

from result_errors import (
    DecodeError,
    EmptyInputError,
    MalformedRowError,
    ReadError,
    ResultFormatError,
)
from result_types import (
    ATTENDANCE_VALUES,
    EXAM_TYPES,
    HEADER_FIELDS,
    RESULT_VALUES,
    WITHHELD_VALUES,
    FlatResult,
    Grade,
)

DEFAULT_ENCODING = "utf-8-sig"

NUMBER_RX = re.compile(r"^\s*-?(\d+\.?|\.\d+|\d+\.\d+)([eE][-+]?\d+)?\s*$")
INTEGER_RX = re.compile(r"^\s*-?\d+\s*$")
HEADER_WORD_RX = re.compile(r"(?:^\w|[A-Z]|\b\w)")
TRUE_TOKENS = {"true", "TRUE"}
FALSE_TOKENS = {"false", "FALSE"}


class ParsedCell(NamedTuple):
    value: object
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def split_lines(text: str) -> List[str]:
    return re.split(r"\r\n|\n", text)


def normalize_header(header: str) -> str:
    """Return the lowerCamelCase key for a header such as ``Register No``."""

    def _case(match: re.Match) -> str:
        word = match.group(0)
        return word.lower() if match.start() == 0 else word.upper()

    return re.sub(r"\s+", "", HEADER_WORD_RX.sub(_case, str(header)))


def is_empty(value) -> bool:
    if value is None:
        return True
    try:
        if pd.isna(value):
            return True
    except (TypeError, ValueError):
        pass
    return str(value) == ""


def coerce_cell(raw):
    """Best-effort typing of a raw cell: numbers, booleans, else the text itself."""

    if is_empty(raw):
        return None
    text = str(raw)
    if text in TRUE_TOKENS:
        return True
    if text in FALSE_TOKENS:
        return False
    if NUMBER_RX.match(text):
        if INTEGER_RX.match(text):
            return int(text)
        return float(text)
    return text


def parse_text(raw: str) -> ParsedCell:
    return ParsedCell(raw)


def parse_integer(raw: str) -> ParsedCell:
    if NUMBER_RX.match(raw):
        number = float(raw)
        if number.is_integer():
            return ParsedCell(int(number))
    return ParsedCell(None, f"expected a whole number, got {raw!r}")


def parse_number(raw: str) -> ParsedCell:
    if NUMBER_RX.match(raw):
        return ParsedCell(coerce_cell(raw))
    return ParsedCell(None, f"expected a number, got {raw!r}")


def parse_grade(raw: str) -> ParsedCell:
    try:
        return ParsedCell(Grade(raw))
    except ValueError:
        return ParsedCell(None, f"unknown grade {raw!r}")


def choice_parser(choices) -> Callable[[str], ParsedCell]:
    allowed = tuple(choices)

    def _parse(raw: str) -> ParsedCell:
        if raw in allowed:
            return ParsedCell(raw)
        return ParsedCell(None, f"expected one of {', '.join(allowed)}, got {raw!r}")

    return _parse


COLUMN_SCHEMA: Dict[str, Callable[[str], ParsedCell]] = {
    "registerNo": parse_integer,
    "studentName": parse_text,
    "branch": parse_text,
    "semester": parse_integer,
    "course": parse_text,
    "examType": choice_parser(EXAM_TYPES),
    "attendance": choice_parser(ATTENDANCE_VALUES),
    "withheld": choice_parser(WITHHELD_VALUES),
    "iMark": parse_number,
    "grade": parse_grade,
    "result": choice_parser(RESULT_VALUES),
}


def parse_cell(key: str, raw, strict: bool = False, row: Optional[int] = None):
    """Run *raw* through the column schema for *key*.

    Unknown columns and, outside strict mode, values the schema rejects are
    passed through :func:`coerce_cell` instead.
    """

    if is_empty(raw):
        return None
    parser = COLUMN_SCHEMA.get(key)
    if parser is None:
        return coerce_cell(raw)
    parsed = parser(str(raw))
    if parsed.ok:
        return parsed.value
    if strict:
        raise MalformedRowError(parsed.error, row=row, column=key)
    return coerce_cell(raw)


def is_blank_row(values) -> bool:
    return all(is_empty(v) or not str(v).strip() for v in values)


def _header_index(lines: List[str]) -> int:
    for idx, line in enumerate(lines):
        if line.strip():
            return idx
    return 0


def _read_frame(text: str, width: int, strict: bool) -> pd.DataFrame:
    def _long_row(fields: List[str]):
        if strict:
            raise MalformedRowError(f"expected {width} fields, got {len(fields)}")
        return fields[:width]

    try:
        return pd.read_csv(
            io.StringIO(text),
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            engine="python",
            on_bad_lines=_long_row,
        )
    except MalformedRowError:
        raise
    except (pd.errors.ParserError, pd.errors.EmptyDataError, csv.Error) as exc:
        raise MalformedRowError(f"Unable to parse file: {exc}") from exc


def parse_results_text(text: str, strict: bool = False) -> List[FlatResult]:
    """Parse delimited *text* into :class:`FlatResult` records in input order."""

    lines = split_lines(text)
    if sum(1 for line in lines if line.strip()) < 2:
        raise EmptyInputError("File is empty")

    header_idx = _header_index(lines)
    lines[header_idx] = lines[header_idx].replace(";", ",")
    width = len(next(csv.reader([lines[header_idx]])))

    # header=None so the header row fixes the width and longer rows reach _long_row
    frame = _read_frame("\n".join(lines), width, strict)
    keys = [normalize_header("" if is_empty(col) else col) for col in frame.iloc[0]]

    results: List[FlatResult] = []
    data = frame.iloc[1:].itertuples(index=False, name=None)
    for idx, values in enumerate(data, start=1):
        if is_blank_row(values):
            continue
        record = FlatResult()
        for key, raw in zip(keys, values):
            value = parse_cell(key, raw, strict=strict, row=idx)
            attr = HEADER_FIELDS.get(key)
            if attr:
                setattr(record, attr, value)
            else:
                record.extra[key] = value
        results.append(record)
    return results


def read_results_file(path, encoding: str = DEFAULT_ENCODING, strict: bool = False) -> List[FlatResult]:
    try:
        payload = Path(path).read_bytes()
    except OSError as exc:
        raise ReadError(f"Error reading file: {exc}") from exc
    try:
        text = payload.decode(encoding)
    except (UnicodeDecodeError, LookupError) as exc:
        raise DecodeError(f"Error reading file: {exc}") from exc
    return parse_results_text(text, strict=strict)


def _print_rows(rows: List[FlatResult]) -> None:
    print(f"[INFO] Parsed {len(rows)} result rows")


def _print_error(message: str) -> None:
    print(f"[ERROR] {message}")


def load_results(
    path,
    on_success: Optional[Callable[[List[FlatResult]], None]] = None,
    on_error: Optional[Callable[[str], None]] = None,
    encoding: str = DEFAULT_ENCODING,
    strict: bool = False,
) -> Optional[List[FlatResult]]:
    """Callback flavour of :func:`read_results_file`.

    Exactly one of *on_success* (with the parsed rows) or *on_error* (with a
    message) is called. Returns the rows, or ``None`` on failure.
    """

    on_success = on_success or _print_rows
    on_error = on_error or _print_error
    try:
        rows = read_results_file(path, encoding=encoding, strict=strict)
    except ResultFormatError as exc:
        on_error(str(exc))
        return None
    on_success(rows)
    return rows
