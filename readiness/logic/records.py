"""
Record Utilities

Helpers applied to academic-history rows before scoring: student-id
normalization, student listing and selection, and consolidation of partial
evaluations into one grade per course attempt.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .contracts import RawAcademicRecord, StudentSummary
from .normalizer import normalize_code, normalize_name

logger = logging.getLogger(__name__)

RecordLike = Union[RawAcademicRecord, Mapping]


def coerce_records(rows: Iterable[RecordLike]) -> List[RawAcademicRecord]:
    """Validate dict rows into RawAcademicRecord; records pass through."""
    records = []
    for row in rows:
        if isinstance(row, RawAcademicRecord):
            records.append(row)
        else:
            records.append(RawAcademicRecord.model_validate(row))
    return records


def normalize_student_id(value: Any) -> Optional[str]:
    """
    Canonical form of a student id (RUT).

    "12.345.678-9" -> "12345678"; numbers read from spreadsheets
    (12345678.0) lose the decimal part.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).replace(".", "").replace(" ", "").strip()
    text = text.split("-")[0].upper()
    return text or None


def list_students(records: Iterable[RecordLike]) -> List[StudentSummary]:
    """
    Distinct students found in a record set, in order of first appearance.

    The plan id of a student is the one on their first record.
    """
    summaries: Dict[str, StudentSummary] = {}
    for record in coerce_records(records):
        student_id = normalize_student_id(record.student_id)
        if student_id is None:
            continue
        if student_id not in summaries:
            summaries[student_id] = StudentSummary(student_id=student_id, plan_id=record.plan_id)
        summaries[student_id].record_count += 1
    return list(summaries.values())


def select_student_records(records: Iterable[RecordLike], student_id: Any) -> List[RawAcademicRecord]:
    """Records belonging to ``student_id``, compared after normalization."""
    wanted = normalize_student_id(student_id)
    if wanted is None:
        return []
    return [
        record for record in coerce_records(records)
        if normalize_student_id(record.student_id) == wanted
    ]


def consolidate_partial_grades(records: Iterable[RecordLike]) -> List[RawAcademicRecord]:
    """
    Merge partial evaluations of the same course attempt into one row.

    Rows are grouped by (student, course, year, term, attempt); the course
    is identified by its code, or its name when it has none. The grade of a
    group is the weighted mean when any weight is present, else the simple
    mean, rounded half-up to one decimal (3.95 -> 4.0). Metadata comes from
    the first row of the group.
    """
    groups: Dict[Tuple, List[RawAcademicRecord]] = {}
    rows = coerce_records(records)
    for record in rows:
        groups.setdefault(_attempt_key(record), []).append(record)

    consolidated = []
    for items in groups.values():
        consolidated.append(items[0].model_copy(update={
            "grade": _consolidated_grade(items),
            "weight": None,
        }))

    logger.info(f"Consolidated {len(rows)} rows into {len(consolidated)} course attempts")
    return consolidated


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _attempt_key(record: RawAcademicRecord) -> Tuple:
    course_id = normalize_code(record.course_code) or normalize_name(record.course_name)
    return (
        normalize_student_id(record.student_id),
        course_id,
        record.year,
        record.term,
        record.attempt,
    )


def _consolidated_grade(items: List[RawAcademicRecord]) -> Optional[float]:
    graded = [item for item in items if item.grade is not None]
    if not graded:
        return None

    total_weight = sum(item.weight or 0.0 for item in graded)
    if total_weight > 0:
        grade = sum(item.grade * (item.weight or 0.0) for item in graded) / total_weight
    else:
        grade = sum(item.grade for item in graded) / len(graded)

    return round_half_up(grade, 1)


def round_half_up(value: float, digits: int = 1) -> float:
    """Academic rounding: 3.95 -> 4.0, 3.94 -> 3.9."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))
