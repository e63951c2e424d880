"""
Indicator Aggregator

Computes the seven component scores for one student and combines them into
the weighted total percentage, tier and summary statistics.
"""

from typing import Any, List, Mapping, Optional, Union

from .classifier import classify_tier
from .component_scorers import (
    is_approved,
    score_approval_rate,
    score_criticality,
    score_demographic,
    score_performance,
    score_permanence,
    score_relevance,
    score_repetition,
)
from .contracts import (
    CurriculumIndex,
    DemographicProfile,
    EnrichedRecord,
    IndicatorResult,
    IndicatorStats,
    ScoringOptions,
)
from .criticality import build_criticality_lookup
from .curriculum_indexer import build_index, resolve_plan_max_semester
from .diagnostics import build_warnings, plan_coverage_percentage


def calculate_indicator(
    enriched_records: List[EnrichedRecord],
    criticality_table: Any = None,
    curriculum_document: Any = None,
    demographics: Optional[Union[DemographicProfile, Mapping]] = None,
    options: Optional[ScoringOptions] = None,
    index: Optional[CurriculumIndex] = None,
    student_id: Optional[str] = None,
) -> IndicatorResult:
    """
    Compute the readiness indicator of one student.

    Args:
        enriched_records: The student's records after enrichment
        criticality_table: Criticality table in any accepted shape
        curriculum_document: Raw curriculum document (plan length lookup)
        demographics: DemographicProfile or a dict with its fields
        options: Formula configuration; defaults to ScoringOptions()
        index: Curriculum index, built from the document when omitted
        student_id: Reported as is; defaults to the records' student id

    Returns:
        IndicatorResult with components, total percentage, tier and stats
    """
    options = options or ScoringOptions()
    if isinstance(demographics, Mapping):
        demographics = DemographicProfile.model_validate(demographics)

    plan_id = enriched_records[0].plan_id if enriched_records else "default"
    if student_id is None and enriched_records:
        student_id = enriched_records[0].student_id

    if index is None and curriculum_document is not None:
        index = build_index(curriculum_document)

    malla_records = [record for record in enriched_records if record.in_curriculum]
    lookup = build_criticality_lookup(criticality_table, plan_id)
    plan_max_semester = resolve_plan_max_semester(curriculum_document, index, plan_id)

    relevance = score_relevance(malla_records, plan_max_semester)
    components = [
        score_approval_rate(malla_records),
        score_performance(malla_records),
        score_permanence(malla_records, options),
        score_repetition(malla_records),
        score_criticality(malla_records, lookup, options),
        relevance.component,
        score_demographic(demographics),
    ]

    total = sum(component.weighted_value for component in components) * 100
    total = max(0.0, min(100.0, total))

    return IndicatorResult(
        student_id=student_id,
        plan_id=plan_id,
        components=components,
        total_percentage=total,
        tier=classify_tier(total),
        stats=_build_stats(enriched_records, malla_records, relevance.last_semester_reached, index),
        warnings=build_warnings(enriched_records, index),
    )


def _build_stats(
    enriched_records: List[EnrichedRecord],
    malla_records: List[EnrichedRecord],
    last_semester_reached: int,
    index: Optional[CurriculumIndex]
) -> IndicatorStats:
    grades = [
        record.grade for record in malla_records
        if record.grade is not None and record.grade > 0
    ]
    average_grade = round(sum(grades) / len(grades), 2) if grades else 0.0

    return IndicatorStats(
        total_rows=len(enriched_records),
        malla_rows=len(malla_records),
        unique_courses=len({record.course_key for record in malla_records}),
        approved_courses=len({record.course_key for record in malla_records if is_approved(record)}),
        average_grade=average_grade,
        last_semester_reached=last_semester_reached,
        plan_coverage_percentage=plan_coverage_percentage(malla_records, index),
    )
