"""Write pivoted results to a styled worksheet (one row per student)."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from result_types import PivotedResult

STUDENT_HEADERS = ["Reg No", "Student Name", "Branch", "Sem", "Exam Type"]
COURSES_HEADER = "Subjects"
HEADER_ROWS = 4
FIRST_DATA_ROW = HEADER_ROWS + 1
FIRST_COURSE_COL = len(STUDENT_HEADERS) + 1

DEFAULT_TITLE = "SBTE FORMATTER"
DEFAULT_SUBTITLE = "Semester examination results"
DEFAULT_SHEET_NAME = "Formatted Result"
DEFAULT_HEADER_FILL = "2A6099"
DEFAULT_FILLS: Dict[str, str] = {
    "Absent": "FF9797",
    "F": "FF9797",
    "Withheld": "BF819E",
}
# Columns B..E are sized to their longest text.
AUTO_WIDTH_COLUMNS = (2, 3, 4, 5)
WIDTH_PADDING = 5

thin = Side(style="thin")
thin_border = Border(left=thin, right=thin, top=thin, bottom=thin)


def solid_fill(rgb: str) -> PatternFill:
    return PatternFill(start_color=rgb, end_color=rgb, fill_type="solid")


def course_label(code) -> str:
    """Column caption for a course code such as ``2011-MATHEMATICS``."""

    if code is None:
        return ""
    text = str(code)
    parts = text.split("-")
    return parts[1] if len(parts) > 1 else text


def sort_by_student_name(pivoted: Sequence[PivotedResult]) -> List[PivotedResult]:
    return sorted(pivoted, key=lambda s: "" if s.student_name is None else str(s.student_name))


def _header_cell(ws, row: int, col: int, value: str) -> None:
    cell = ws.cell(row=row, column=col, value=value)
    cell.font = Font(size=10, bold=True)
    cell.alignment = Alignment(horizontal="center", vertical="center")


def _write_banner(ws, last_col: int, title: str, subtitle: str, fill_rgb: str) -> None:
    last_letter = get_column_letter(last_col)
    fill = solid_fill(fill_rgb)

    ws.merge_cells(f"A1:{last_letter}1")
    title_cell = ws["A1"]
    title_cell.value = title
    title_cell.font = Font(size=20, bold=True, color="FFFFFF")
    title_cell.fill = fill
    title_cell.alignment = Alignment(horizontal="center", vertical="bottom")

    ws.merge_cells(f"A2:{last_letter}2")
    subtitle_cell = ws["A2"]
    subtitle_cell.value = subtitle
    subtitle_cell.font = Font(size=8, bold=True, color="FFFFFF")
    subtitle_cell.fill = fill
    subtitle_cell.alignment = Alignment(horizontal="center", vertical="top")

    ws.row_dimensions[1].height = 22.5
    ws.row_dimensions[2].height = 15


def _write_headers(ws, courses: Sequence) -> None:
    for col, label in enumerate(STUDENT_HEADERS, start=1):
        _header_cell(ws, 3, col, label)
        ws.merge_cells(start_row=3, start_column=col, end_row=4, end_column=col)

    if courses:
        last_course_col = FIRST_COURSE_COL + len(courses) - 1
        _header_cell(ws, 3, FIRST_COURSE_COL, COURSES_HEADER)
        if last_course_col > FIRST_COURSE_COL:
            ws.merge_cells(
                start_row=3,
                start_column=FIRST_COURSE_COL,
                end_row=3,
                end_column=last_course_col,
            )

    for offset, course in enumerate(courses):
        cell = ws.cell(row=4, column=FIRST_COURSE_COL + offset, value=course_label(course))
        cell.font = Font(size=10, bold=True)
        cell.alignment = Alignment(wrap_text=True)

    ws.row_dimensions[3].height = 15
    ws.row_dimensions[4].height = 15


def _student_values(student: PivotedResult, courses: Sequence) -> List[object]:
    values = [
        student.register_no,
        student.student_name,
        student.branch,
        student.semester,
        student.exam_type,
    ]
    values.extend(student.grade_row(courses))
    return values


def build_workbook(
    pivoted: Sequence[PivotedResult],
    courses: Sequence,
    cfg: Optional[Dict] = None,
) -> Workbook:
    """Lay out *pivoted* under a title banner with one column per course.

    Data cells get thin borders; "Absent", "F" and "Withheld" cells are
    highlighted; ``cfg["fills"]`` overrides single colours of DEFAULT_FILLS.
    """

    cfg = cfg or {}
    colours = {**DEFAULT_FILLS, **cfg.get("fills", {})}
    fills = {status: solid_fill(rgb) for status, rgb in colours.items()}

    wb = Workbook()
    ws = wb.active
    ws.title = cfg.get("sheet_name", DEFAULT_SHEET_NAME)

    last_col = len(STUDENT_HEADERS) + len(courses)
    _write_banner(
        ws,
        last_col,
        cfg.get("title", DEFAULT_TITLE),
        cfg.get("subtitle", DEFAULT_SUBTITLE),
        cfg.get("header_fill", DEFAULT_HEADER_FILL),
    )
    _write_headers(ws, courses)

    widths: Dict[int, int] = {}
    for row_idx, student in enumerate(sort_by_student_name(pivoted), start=FIRST_DATA_ROW):
        for col_idx, value in enumerate(_student_values(student, courses), start=1):
            if value is None:
                continue
            cell = ws.cell(row=row_idx, column=col_idx, value=value)
            cell.border = thin_border
            if isinstance(value, str):
                fill = fills.get(value)
                if fill is not None:
                    cell.fill = fill
                if col_idx in AUTO_WIDTH_COLUMNS:
                    widths[col_idx] = max(widths.get(col_idx, 0), len(value) + WIDTH_PADDING)

    for col_idx, width in widths.items():
        ws.column_dimensions[get_column_letter(col_idx)].width = width

    ws.freeze_panes = f"A{FIRST_DATA_ROW}"
    return wb


def write_workbook(
    pivoted: Sequence[PivotedResult],
    courses: Sequence,
    output_path,
    cfg: Optional[Dict] = None,
) -> Path:
    destination = Path(output_path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    wb = build_workbook(pivoted, courses, cfg)
    wb.save(destination)
    return destination
