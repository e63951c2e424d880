"""
Tests for student-id normalization, student selection and partial-grade
consolidation.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from readiness.logic.contracts import RawAcademicRecord
from readiness.logic.records import (
    coerce_records,
    consolidate_partial_grades,
    list_students,
    normalize_student_id,
    round_half_up,
    select_student_records,
)


ROWS = [
    {"rut": "12.345.678-9", "codigoAsignatura": "KIN101", "nota": 5.5, "malla": "2020"},
    {"rut": "12345678", "codigoAsignatura": "KIN102", "nota": 4.0, "malla": "2020"},
    {"rut": "9.876.543-K", "codigoAsignatura": "KIN101", "nota": 3.0, "malla": "2023"},
    {"codigoAsignatura": "KIN103", "nota": 6.0},
]


def test_normalize_student_id():
    assert normalize_student_id("12.345.678-9") == "12345678"
    assert normalize_student_id(" 9.876.543-k ") == "9876543"
    assert normalize_student_id(12345678.0) == "12345678"
    assert normalize_student_id(None) is None
    assert normalize_student_id("") is None


def test_coerce_records_accepts_dicts_and_records():
    record = RawAcademicRecord(codigoAsignatura="KIN101")
    records = coerce_records([record, {"codigo": "KIN102", "nota": "4,5"}])

    assert records[0] is record
    assert records[1].course_code == "KIN102"
    assert records[1].grade == 4.5


def test_raw_record_coercion():
    record = RawAcademicRecord.model_validate({
        "rut": 12345678,
        "codigoAsignatura": 101.0,
        "nota": "NCR",
        "anio": "2022",
        "semestre": 5,
        "oportunidad": 0,
    })

    assert record.student_id == "12345678"
    assert record.course_code == "101"
    assert record.grade is None
    assert record.year == 2022
    assert record.term == 1
    assert record.attempt == 1
    assert record.plan_id == "default"


def test_list_students():
    students = list_students(ROWS)

    assert [s.student_id for s in students] == ["12345678", "9876543"]
    assert students[0].record_count == 2
    assert students[0].plan_id == "2020"
    assert students[1].plan_id == "2023"


def test_select_student_records():
    selected = select_student_records(ROWS, "12345678-9")

    assert [r.course_code for r in selected] == ["KIN101", "KIN102"]
    assert select_student_records(ROWS, None) == []
    assert select_student_records(ROWS, "11111111") == []


def test_consolidate_weighted_partials():
    rows = [
        {"rut": "1", "codigoAsignatura": "KIN101", "nota": 4.0, "peso": 0.3, "anio": 2022, "semestre": 1},
        {"rut": "1", "codigoAsignatura": "KIN101", "nota": 5.0, "peso": 0.3, "anio": 2022, "semestre": 1},
        {"rut": "1", "codigoAsignatura": "KIN101", "nota": 3.0, "peso": 0.4, "anio": 2022, "semestre": 1},
    ]
    consolidated = consolidate_partial_grades(rows)

    assert len(consolidated) == 1
    assert consolidated[0].grade == 3.9
    assert consolidated[0].weight is None


def test_consolidate_simple_mean_rounds_half_up():
    rows = [
        {"rut": "1", "nombreAsignatura": "Anatomía", "nota": 3.0, "anio": 2022},
        {"rut": "1", "nombreAsignatura": "ANATOMIA", "nota": 4.9, "anio": 2022},
    ]
    consolidated = consolidate_partial_grades(rows)

    assert len(consolidated) == 1
    assert consolidated[0].grade == 4.0


def test_consolidate_keeps_attempts_apart():
    rows = [
        {"rut": "1", "codigoAsignatura": "KIN101", "nota": 3.0, "anio": 2022, "oportunidad": 1},
        {"rut": "1", "codigoAsignatura": "KIN101", "nota": 5.0, "anio": 2023, "oportunidad": 2},
        {"rut": "2", "codigoAsignatura": "KIN101", "nota": 6.0, "anio": 2022, "oportunidad": 1},
    ]
    assert len(consolidate_partial_grades(rows)) == 3


def test_consolidate_skips_absent_grades():
    rows = [
        {"rut": "1", "nombreAsignatura": "Anatomía", "nota": "sin nota", "anio": 2022},
        {"rut": "1", "nombreAsignatura": "Anatomía", "nota": 6.0, "anio": 2022},
    ]
    consolidated = consolidate_partial_grades(rows)
    assert consolidated[0].grade == 6.0

    ungraded = consolidate_partial_grades([{"rut": "1", "nombreAsignatura": "Anatomía"}])
    assert ungraded[0].grade is None


def test_round_half_up():
    assert round_half_up(3.95) == 4.0
    assert round_half_up(3.94) == 3.9
    assert round_half_up(2.25) == 2.3
    assert round_half_up(5.678, 2) == 5.68
