"""Fold long-format result rows into one wide record per register number."""

from __future__ import annotations

from typing import Dict, Iterable, List

from result_errors import InconsistentStudentError
from result_types import (
    ABSENT,
    MALPRACTICE_WITHHELD,
    WITHHELD,
    CourseOutcome,
    FlatResult,
    Grade,
    PivotedResult,
)

# Attributes copied from the first row of a student and expected to repeat.
STUDENT_FIELDS = ("student_name", "branch", "semester", "exam_type", "withheld")


def derive_outcome(row: FlatResult) -> CourseOutcome:
    """Resolve grade/attendance/withheld of *row* into one display outcome.

    Precedence: explicit grade, absence, malpractice (shown as F), withheld.
    """

    if row.grade is not None:
        return CourseOutcome.graded(row.grade)
    if row.attendance == ABSENT:
        return CourseOutcome.absent()
    if row.withheld == MALPRACTICE_WITHHELD:
        return CourseOutcome.graded(Grade.F)
    if row.withheld == WITHHELD:
        return CourseOutcome.withheld()
    return CourseOutcome.unset()


def raw_grade_outcome(grade) -> CourseOutcome:
    if grade is None:
        return CourseOutcome.unset()
    return CourseOutcome.graded(grade)


def _check_consistent(student: PivotedResult, row: FlatResult) -> None:
    for name in STUDENT_FIELDS:
        first = getattr(student, name)
        later = getattr(row, name)
        if first != later:
            raise InconsistentStudentError(student.register_no, name, first, later)


def pivot_results(rows: Iterable[FlatResult], strict: bool = False) -> List[PivotedResult]:
    """Group *rows* by register number, preserving first-seen order.

    Only the first row of a student goes through :func:`derive_outcome`;
    every later row of the same student stores its grade column as is, so an
    absent or withheld repeat is recorded as unset. Student details always
    come from the first row; with ``strict`` a later row that disagrees
    raises :class:`InconsistentStudentError`. The returned records have
    read-only outcome mappings.
    """

    students: Dict[object, PivotedResult] = {}
    for row in rows:
        student = students.get(row.register_no)
        if student is None:
            student = PivotedResult.from_row(row)
            student.record_outcome(row.course, derive_outcome(row))
            students[row.register_no] = student
            continue
        if strict:
            _check_consistent(student, row)
        student.record_outcome(row.course, raw_grade_outcome(row.grade))
    for student in students.values():
        student.freeze()
    return list(students.values())


def collect_courses(pivoted: Iterable[PivotedResult]) -> List[object]:
    """Distinct course codes across all students, in first-seen order."""

    courses: List[object] = []
    seen = set()
    for student in pivoted:
        for course in student.outcomes:
            if course not in seen:
                seen.add(course)
                courses.append(course)
    return courses
