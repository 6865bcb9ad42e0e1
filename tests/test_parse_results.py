"""Tests for the parse_results module."""

import os
import shutil
import sys
import tempfile
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from parse_results import (
    coerce_cell,
    load_results,
    normalize_header,
    parse_cell,
    parse_results_text,
    read_results_file,
    split_lines,
)
from result_errors import DecodeError, EmptyInputError, MalformedRowError, ReadError
from result_types import Grade

HEADER = "Register No,Student Name,Branch,Semester,Course,Exam Type,Attendance,Withheld,I Mark,Grade,Result"


def _csv(*rows, header=HEADER, newline="\n"):
    return newline.join([header, *rows]) + newline


class TestSplitLines(unittest.TestCase):
    def test_mixed_line_endings(self):
        self.assertEqual(split_lines("a\r\nb\nc"), ["a", "b", "c"])


class TestNormalizeHeader(unittest.TestCase):
    def test_title_case_headers(self):
        self.assertEqual(normalize_header("Register No"), "registerNo")
        self.assertEqual(normalize_header("Student Name"), "studentName")
        self.assertEqual(normalize_header("Exam Type"), "examType")
        self.assertEqual(normalize_header("I Mark"), "iMark")
        self.assertEqual(normalize_header("Grade"), "grade")

    def test_already_joined(self):
        self.assertEqual(normalize_header("RegisterNo"), "registerNo")

    def test_lowercase_words(self):
        self.assertEqual(normalize_header("exam type"), "examType")


class TestCoerceCell(unittest.TestCase):
    def test_empty(self):
        self.assertIsNone(coerce_cell(""))
        self.assertIsNone(coerce_cell(None))

    def test_numbers(self):
        self.assertEqual(coerce_cell("42"), 42)
        self.assertIsInstance(coerce_cell("42"), int)
        self.assertEqual(coerce_cell("3.5"), 3.5)
        self.assertEqual(coerce_cell("-1e2"), -100.0)

    def test_booleans(self):
        self.assertIs(coerce_cell("true"), True)
        self.assertIs(coerce_cell("FALSE"), False)
        self.assertEqual(coerce_cell("True"), "True")

    def test_text(self):
        self.assertEqual(coerce_cell("Absent"), "Absent")


class TestParseCell(unittest.TestCase):
    def test_schema_types(self):
        self.assertEqual(parse_cell("registerNo", "2101"), 2101)
        self.assertIs(parse_cell("grade", "A"), Grade.A)
        self.assertEqual(parse_cell("course", "2011"), "2011")
        self.assertEqual(parse_cell("iMark", "38"), 38)

    def test_lenient_fallback(self):
        self.assertEqual(parse_cell("grade", "X"), "X")
        self.assertEqual(parse_cell("semester", "III"), "III")
        self.assertEqual(parse_cell("attendance", "1"), 1)

    def test_strict_rejects(self):
        with self.assertRaises(MalformedRowError) as ctx:
            parse_cell("grade", "X", strict=True, row=3)
        self.assertEqual(ctx.exception.row, 3)
        self.assertEqual(ctx.exception.column, "grade")

    def test_unknown_column_coerced(self):
        self.assertEqual(parse_cell("remarks", "12"), 12)


class TestParseResultsText(unittest.TestCase):
    def test_basic_rows(self):
        text = _csv(
            "101,Anu,CE,3,2011-MATHS,Regular,Present,,38,A,P",
            "101,Anu,CE,3,2012-PHYSICS,Regular,Absent,,,,F",
        )
        rows = parse_results_text(text)
        self.assertEqual(len(rows), 2)
        first = rows[0]
        self.assertEqual(first.register_no, 101)
        self.assertEqual(first.student_name, "Anu")
        self.assertEqual(first.semester, 3)
        self.assertEqual(first.course, "2011-MATHS")
        self.assertEqual(first.exam_type, "Regular")
        self.assertIsNone(first.withheld)
        self.assertEqual(first.i_mark, 38)
        self.assertEqual(first.grade, Grade.A)
        self.assertEqual(first.result, "P")
        self.assertEqual(rows[1].attendance, "Absent")
        self.assertIsNone(rows[1].grade)

    def test_crlf_input(self):
        text = _csv("101,Anu,CE,3,C1,Regular,Present,,,B,P", newline="\r\n")
        rows = parse_results_text(text)
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].grade, Grade.B)

    def test_header_only_is_empty(self):
        with self.assertRaises(EmptyInputError):
            parse_results_text(HEADER)
        with self.assertRaises(EmptyInputError):
            parse_results_text(HEADER + "\n")

    def test_empty_text(self):
        with self.assertRaises(EmptyInputError):
            parse_results_text("")

    def test_semicolon_header(self):
        header = "RegisterNo;StudentName;Branch;Semester;Course;ExamType;Attendance;Withheld;IMark;Grade;Result"
        text = _csv("7,Bala,ME,5,C9,Supplementary,Present,Withheld,,,", header=header)
        rows = parse_results_text(text)
        self.assertEqual(rows[0].register_no, 7)
        self.assertEqual(rows[0].exam_type, "Supplementary")
        self.assertEqual(rows[0].withheld, "Withheld")

    def test_semicolons_in_data_rows_are_kept(self):
        text = "Register No,Student Name\n1,Anu;Bala\n"
        rows = parse_results_text(text)
        self.assertEqual(rows[0].student_name, "Anu;Bala")

    def test_blank_and_empty_rows_skipped(self):
        text = _csv(
            "101,Anu,CE,3,C1,Regular,Present,,,A,P",
            "",
            ",,,,,,,,,,",
            "102,Bala,CE,3,C1,Regular,Present,,,B,P",
        )
        rows = parse_results_text(text)
        self.assertEqual([r.register_no for r in rows], [101, 102])

    def test_whitespace_only_rows_skipped(self):
        text = _csv(
            "101,Anu,CE,3,C1,Regular,Present,,,A,P",
            "  ,  ,  ",
            " \t, ,,,,,,,,, ",
        )
        rows = parse_results_text(text)
        self.assertEqual([(r.register_no, r.course) for r in rows], [(101, "C1")])

    def test_quoted_fields(self):
        text = 'Register No,Student Name\n1,"Nair, Anu"\n'
        rows = parse_results_text(text)
        self.assertEqual(rows[0].student_name, "Nair, Anu")

    def test_extra_columns_kept(self):
        text = "Register No,Remarks\n1,42\n"
        rows = parse_results_text(text)
        self.assertEqual(rows[0].extra, {"remarks": 42})

    def test_short_row_padded(self):
        text = "Register No,Student Name,Grade\n1,Anu\n"
        rows = parse_results_text(text)
        self.assertEqual(rows[0].student_name, "Anu")
        self.assertIsNone(rows[0].grade)

    def test_long_row_truncated(self):
        text = "Register No,Grade\n1,A,unexpected\n"
        rows = parse_results_text(text)
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].grade, Grade.A)

    def test_long_row_strict(self):
        text = "Register No,Grade\n1,A,unexpected\n"
        with self.assertRaises(MalformedRowError):
            parse_results_text(text, strict=True)

    def test_malformed_value_passes_through(self):
        text = _csv("101,Anu,CE,three,C1,Regular,Present,,,Z,P")
        rows = parse_results_text(text)
        self.assertEqual(rows[0].semester, "three")
        self.assertEqual(rows[0].grade, "Z")

    def test_malformed_value_strict(self):
        text = _csv(
            "101,Anu,CE,3,C1,Regular,Present,,,A,P",
            "101,Anu,CE,3,C2,Regular,Present,,,Z,P",
        )
        with self.assertRaises(MalformedRowError) as ctx:
            parse_results_text(text, strict=True)
        self.assertEqual(ctx.exception.row, 2)
        self.assertEqual(ctx.exception.column, "grade")


class TestReadResultsFile(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def _write(self, name, payload: bytes):
        path = os.path.join(self.tmpdir, name)
        with open(path, "wb") as f:
            f.write(payload)
        return path

    def test_reads_utf8_with_bom(self):
        path = self._write("r.csv", ("\ufeff" + _csv("1,Anu,CE,3,C1,Regular,Present,,,S,P")).encode("utf-8"))
        rows = read_results_file(path)
        self.assertEqual(rows[0].register_no, 1)
        self.assertEqual(rows[0].grade, Grade.S)

    def test_missing_file(self):
        with self.assertRaises(ReadError):
            read_results_file(os.path.join(self.tmpdir, "missing.csv"))

    def test_undecodable_bytes(self):
        path = self._write("bad.csv", b"Register No\n\xff\xfe\xfa\n")
        with self.assertRaises(DecodeError):
            read_results_file(path)

    def test_load_results_success_callback(self):
        path = self._write("r.csv", _csv("1,Anu,CE,3,C1,Regular,Present,,,S,P").encode("utf-8"))
        received, errors = [], []
        rows = load_results(path, on_success=received.append, on_error=errors.append)
        self.assertEqual(len(received), 1)
        self.assertIs(received[0], rows)
        self.assertEqual(errors, [])

    def test_load_results_error_callback(self):
        path = self._write("empty.csv", HEADER.encode("utf-8"))
        received, errors = [], []
        rows = load_results(path, on_success=received.append, on_error=errors.append)
        self.assertIsNone(rows)
        self.assertEqual(received, [])
        self.assertEqual(errors, ["File is empty"])


if __name__ == "__main__":
    unittest.main()
