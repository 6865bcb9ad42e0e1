"""Record types shared by the parser, the pivot and the workbook writer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional


class Grade(str, Enum):
    F = "F"
    E = "E"
    D = "D"
    C = "C"
    B = "B"
    A = "A"
    S = "S"


EXAM_TYPES = ("Regular", "Supplementary")
ATTENDANCE_VALUES = ("Present", "Absent")
ABSENT = "Absent"
WITHHELD = "Withheld"
MALPRACTICE_WITHHELD = "With held for Malpractice"
WITHHELD_VALUES = (WITHHELD, MALPRACTICE_WITHHELD)
RESULT_VALUES = ("P", "F", "Pass", "Fail")

# normalised header key -> FlatResult attribute
HEADER_FIELDS: Dict[str, str] = {
    "registerNo": "register_no",
    "studentName": "student_name",
    "branch": "branch",
    "semester": "semester",
    "course": "course",
    "examType": "exam_type",
    "attendance": "attendance",
    "withheld": "withheld",
    "iMark": "i_mark",
    "grade": "grade",
    "result": "result",
}


@dataclass
class FlatResult:
    """One row of the export: a single student/course pair."""

    register_no: Optional[object] = None
    student_name: Optional[object] = None
    branch: Optional[object] = None
    semester: Optional[object] = None
    course: Optional[object] = None
    exam_type: Optional[object] = None
    attendance: Optional[object] = None
    withheld: Optional[object] = None
    i_mark: Optional[object] = None
    grade: Optional[object] = None
    result: Optional[object] = None
    extra: Dict[str, object] = field(default_factory=dict)


class OutcomeKind(Enum):
    GRADE = "grade"
    ABSENT = "absent"
    WITHHELD = "withheld"
    UNSET = "unset"


@dataclass(frozen=True)
class CourseOutcome:
    kind: OutcomeKind
    grade: Optional[object] = None

    @classmethod
    def graded(cls, grade) -> "CourseOutcome":
        return cls(OutcomeKind.GRADE, grade)

    @classmethod
    def absent(cls) -> "CourseOutcome":
        return cls(OutcomeKind.ABSENT)

    @classmethod
    def withheld(cls) -> "CourseOutcome":
        return cls(OutcomeKind.WITHHELD)

    @classmethod
    def unset(cls) -> "CourseOutcome":
        return cls(OutcomeKind.UNSET)

    @property
    def display(self):
        """Value written into the spreadsheet cell for this outcome."""

        if self.kind is OutcomeKind.GRADE:
            return self.grade.value if isinstance(self.grade, Grade) else self.grade
        if self.kind is OutcomeKind.ABSENT:
            return ABSENT
        if self.kind is OutcomeKind.WITHHELD:
            return WITHHELD
        return None


@dataclass
class PivotedResult:
    """One student with every course outcome collected into a single row.

    Outcomes are filled through :meth:`record_outcome` while pivoting;
    :meth:`freeze` then makes the mapping read-only before the record is
    handed to callers.
    """

    register_no: object
    student_name: object
    branch: object
    semester: object
    exam_type: object
    withheld: object
    outcomes: Mapping[object, CourseOutcome] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: FlatResult) -> "PivotedResult":
        return cls(
            register_no=row.register_no,
            student_name=row.student_name,
            branch=row.branch,
            semester=row.semester,
            exam_type=row.exam_type,
            withheld=row.withheld,
        )

    def record_outcome(self, course, outcome: CourseOutcome) -> None:
        self.outcomes[course] = outcome

    def freeze(self) -> None:
        self.outcomes = MappingProxyType(dict(self.outcomes))

    def grade_row(self, courses: Iterable) -> List[object]:
        """Display values for *courses*, ``None`` where the student has no entry."""

        row = []
        for course in courses:
            outcome = self.outcomes.get(course)
            row.append(outcome.display if outcome is not None else None)
        return row
