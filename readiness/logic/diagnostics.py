"""
Coverage Diagnostics

Statistics about how well a student's history lines up with the curriculum,
and the warnings shown next to the indicator when it does not.
"""

from collections import Counter
from typing import List, Optional

from .constants import LOW_MATCH_RATE_THRESHOLD, TOP_UNMATCHED_LIMIT
from .contracts import CoverageReport, CurriculumIndex, EnrichedRecord, UnmatchedCourse


def plan_coverage_percentage(
    malla_records: List[EnrichedRecord],
    index: Optional[CurriculumIndex]
) -> float:
    """Distinct matched courses over curriculum courses, as a 0-100 percentage."""
    if index is None or index.course_count == 0:
        return 0.0
    distinct_matched = len({record.course_key for record in malla_records})
    return round(min(100.0, distinct_matched / index.course_count * 100), 2)


def build_coverage_report(
    enriched_records: List[EnrichedRecord],
    index: Optional[CurriculumIndex] = None,
    limit: int = TOP_UNMATCHED_LIMIT
) -> CoverageReport:
    """
    Summarize matching for one set of enriched records.

    Args:
        enriched_records: Output of enrich_records
        index: Curriculum index the records were matched against
        limit: Maximum number of unmatched course names to list

    Returns:
        CoverageReport; unmatched names are ordered by frequency, ties in
        order of first appearance
    """
    malla_records = [record for record in enriched_records if record.in_curriculum]
    total_rows = len(enriched_records)

    unmatched = Counter(
        record.course_name or record.course_code or "(unnamed)"
        for record in enriched_records
        if not record.in_curriculum
    )

    return CoverageReport(
        total_rows=total_rows,
        matched_rows=len(malla_records),
        match_rate=round(len(malla_records) / total_rows, 4) if total_rows else 0.0,
        distinct_courses=len({record.course_key for record in enriched_records}),
        distinct_matched_courses=len({record.course_key for record in malla_records}),
        curriculum_course_count=index.course_count if index is not None else 0,
        coverage_percentage=plan_coverage_percentage(malla_records, index),
        top_unmatched=[
            UnmatchedCourse(name=name, count=count)
            for name, count in unmatched.most_common(limit)
        ],
    )


def build_warnings(
    enriched_records: List[EnrichedRecord],
    index: Optional[CurriculumIndex] = None
) -> List[str]:
    """Human-readable warnings about missing data and poor matching."""
    warnings: List[str] = []

    if not enriched_records:
        warnings.append("No academic records were provided for this student.")
        return warnings

    if index is None or index.course_count == 0:
        warnings.append("No curriculum courses were found; every record is outside the curriculum.")
        return warnings

    matched = sum(1 for record in enriched_records if record.in_curriculum)
    if matched == 0:
        warnings.append("No record matched the curriculum. Check course codes and names.")
    elif matched / len(enriched_records) < LOW_MATCH_RATE_THRESHOLD:
        warnings.append(
            f"Only {matched} of {len(enriched_records)} records matched the curriculum; "
            f"the indicator may be underestimated."
        )

    return warnings
