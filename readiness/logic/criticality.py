"""
Criticality Resolution

Turns an institution's criticality table into a 1-5 score per course.

Accepted table shapes:
- a list of rows: [{"codigo": "KIN101", "criticidad": "alta", "Porcentaje_2": 12.5}, ...]
- an object keyed by plan id, each holding a list of rows (falls back to "default")
- an object mapping course id -> label or row: {"KIN101": "alta", "KIN102": {...}}

Score priority for a course the student reached attempt N on:
1. failure percentage fields indexed by attempt, checked at N, N-1, ..., 1,
   then the unindexed field, then any level above N from the highest down
2. categorical label fields indexed by attempt, same order
3. DEFAULT_CRITICALITY_SCORE
"""

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .constants import (
    CRITICALITY_LABEL_KEY_MARKERS,
    CRITICALITY_LABEL_SCORES,
    DEFAULT_CRITICALITY_SCORE,
    FAILURE_PERCENTAGE_BANDS,
    FAILURE_PERCENTAGE_KEY_MARKERS,
    MAX_CRITICALITY_SCORE,
)
from .field_detection import field_value, is_scalar
from .normalizer import normalize_code, normalize_name, to_float

_TRAILING_LEVEL = re.compile(r"^(\D*?)(\d+)$")


def percentage_to_score(percentage: float) -> int:
    """
    Map a failure percentage to 1-5.

    Bands are closed on their lower bound: 5.0 -> 2, 4.99 -> 1, 30 -> 5.
    """
    for lower_bound, score in FAILURE_PERCENTAGE_BANDS:
        if percentage >= lower_bound:
            return score
    return DEFAULT_CRITICALITY_SCORE


def label_to_score(label: Any) -> Optional[int]:
    """Map a categorical label ("Muy Alta", "medium-high", 4) to 1-5, or None."""
    if not is_scalar(label):
        return None
    if isinstance(label, (int, float)):
        number = int(label)
        if 1 <= number <= MAX_CRITICALITY_SCORE:
            return number
        return None
    return CRITICALITY_LABEL_SCORES.get(normalize_code(label))


def _split_fields(entry: Mapping) -> Tuple[Dict[int, Any], Dict[int, Any]]:
    """
    Classify the keys of a table row.

    Returns (percentages, labels), each keyed by attempt level; level 0
    holds the unindexed field.
    """
    percentages: Dict[int, Any] = {}
    labels: Dict[int, Any] = {}

    for key, value in entry.items():
        if not is_scalar(value):
            continue
        norm_key = normalize_code(key)
        found = _TRAILING_LEVEL.match(norm_key)
        prefix, level = (found.group(1), int(found.group(2))) if found else (norm_key, 0)

        if any(marker in prefix for marker in FAILURE_PERCENTAGE_KEY_MARKERS):
            percentages.setdefault(level, value)
        elif any(marker in prefix for marker in CRITICALITY_LABEL_KEY_MARKERS):
            labels.setdefault(level, value)

    return percentages, labels


def _levels(attempt: int, available: Iterable[int]) -> List[int]:
    attempt = max(attempt, 1)
    higher = sorted((level for level in available if level > attempt), reverse=True)
    return list(range(attempt, 0, -1)) + [0] + higher


def resolve_criticality_score(entry: Optional[Mapping], attempt: int = 1) -> int:
    """
    Criticality score (1-5) of one table row for a student on ``attempt``.

    Args:
        entry: Criticality row, or None when the course has no row
        attempt: Highest attempt the student reached on the course

    Returns:
        Integer score between 1 and 5
    """
    if not entry:
        return DEFAULT_CRITICALITY_SCORE

    percentages, labels = _split_fields(entry)

    for level in _levels(attempt, percentages):
        if level in percentages:
            percentage = to_float(percentages[level])
            if percentage is not None:
                return percentage_to_score(percentage)

    for level in _levels(attempt, labels):
        if level in labels:
            score = label_to_score(labels[level])
            if score is not None:
                return score

    return DEFAULT_CRITICALITY_SCORE


class CriticalityLookup:
    """
    Criticality rows indexed by normalized course code and name.

    Usage:
        lookup = build_criticality_lookup(table, plan_id="2020")
        score = lookup.score_for(code="KIN101", name="Anatomía", attempt=2)
    """

    def __init__(self):
        self.by_code: Dict[str, Mapping] = {}
        self.by_name: Dict[str, Mapping] = {}

    def __len__(self) -> int:
        return len(self.by_code) + len(self.by_name)

    def add(self, row: Mapping, course_id: Any = None) -> None:
        code = field_value(row, "code")
        name = field_value(row, "name")
        if course_id is not None:
            code = code if code is not None else course_id
            name = name if name is not None else course_id

        norm_code = normalize_code(code)
        norm_name = normalize_name(name)
        if norm_code:
            self.by_code[norm_code] = row
        if norm_name:
            self.by_name[norm_name] = row

    def entry_for(self, codes: Iterable[Any] = (), names: Iterable[Any] = ()) -> Optional[Mapping]:
        """First row found for any of the codes, then any of the names."""
        for code in codes:
            norm_code = normalize_code(code)
            if norm_code and norm_code in self.by_code:
                return self.by_code[norm_code]
        for name in names:
            norm_name = normalize_name(name)
            if norm_name and norm_name in self.by_name:
                return self.by_name[norm_name]
        return None

    def score_for(self, code: Any = None, name: Any = None, attempt: int = 1) -> int:
        entry = self.entry_for(codes=[code], names=[name])
        return resolve_criticality_score(entry, attempt)


def _plan_table(table: Any, plan_id: str) -> Any:
    if isinstance(table, Mapping):
        for key in (plan_id, "default"):
            if key in table and isinstance(table[key], (list, Mapping)):
                return table[key]
    return table


def build_criticality_lookup(table: Any, plan_id: str = "default") -> CriticalityLookup:
    """
    Index a criticality table of any accepted shape.

    Args:
        table: List of rows, plan-keyed object, or course-keyed object
        plan_id: Curriculum plan of the student

    Returns:
        CriticalityLookup (empty for None or unrecognized input)
    """
    lookup = CriticalityLookup()
    rows = _plan_table(table, plan_id)

    if isinstance(rows, list):
        for row in rows:
            if isinstance(row, Mapping):
                lookup.add(row)
    elif isinstance(rows, Mapping):
        for course_id, value in rows.items():
            if isinstance(value, Mapping):
                lookup.add(value, course_id=course_id)
            elif isinstance(value, list):
                # Plan-keyed table without a row set for this plan
                for row in value:
                    if isinstance(row, Mapping):
                        lookup.add(row)
            elif is_scalar(value):
                lookup.add({"criticidad": value}, course_id=course_id)

    return lookup
