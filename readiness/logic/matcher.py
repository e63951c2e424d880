"""
Course Matcher

Resolves an academic-history record to the curriculum entry it belongs to.

Resolution order, first hit wins:
1. Code match     - strip-all normalized code found in ``by_code``
2. Name match     - collapsed normalized name found in ``by_name``
3. Fuzzy match    - first ``by_name`` key (insertion order) where one name
                    contains the other, unless both carry a level marker
                    and the markers differ ("INGLES 1" vs "INGLES 2",
                    "TALLER I" vs "TALLER II")

Fuzzy matching needs a normalized record name longer than
MIN_FUZZY_NAME_LENGTH. Candidates that short are skipped as well, so an
abbreviation like "TIC" never claims "ESTADISTICA"; they still match exactly.
"""

from typing import Optional

from .constants import MIN_FUZZY_NAME_LENGTH
from .contracts import CurriculumEntry, CurriculumIndex, RawAcademicRecord
from .normalizer import level_marker, normalize_code, normalize_name


def match_record(
    record: RawAcademicRecord,
    index: Optional[CurriculumIndex]
) -> Optional[CurriculumEntry]:
    """
    Find the curriculum entry for a record.

    Args:
        record: Academic-history row
        index: Curriculum index (None when no curriculum was loaded)

    Returns:
        The matched CurriculumEntry, or None when nothing qualifies
    """
    if index is None or record is None:
        return None

    record_code = normalize_code(record.course_code)
    record_name = normalize_name(record.course_name)

    if record_code and record_code in index.by_code:
        return index.by_code[record_code]

    if record_name and record_name in index.by_name:
        return index.by_name[record_name]

    if len(record_name) > MIN_FUZZY_NAME_LENGTH:
        return fuzzy_match_name(record_name, index)

    return None


def fuzzy_match_name(record_name: str, index: CurriculumIndex) -> Optional[CurriculumEntry]:
    """
    Tolerant name match for truncated or extended course names.

    "ANATOMIA GEN" finds "ANATOMIA GENERAL"; "ANATOMIA DEL APARATO
    LOCOMOTOR" finds "ANATOMIA". A truncated prefix is a substring too, so
    containment in either direction covers both cases.
    """
    record_level = level_marker(record_name)

    for candidate_name, entry in index.by_name.items():
        if len(candidate_name) <= MIN_FUZZY_NAME_LENGTH:
            continue

        if candidate_name not in record_name and record_name not in candidate_name:
            continue

        candidate_level = level_marker(candidate_name)
        if record_level is not None and candidate_level is not None and record_level != candidate_level:
            continue

        return entry

    return None
