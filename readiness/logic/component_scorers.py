"""
Component Scorers

Individual scoring functions for the seven indicator components.
Each scorer receives the malla records (records matched to the curriculum)
and produces a normalized value between 0.0 and 1.0 with an audit detail.
Every scorer falls back to its EMPTY_DEFAULTS value when there is nothing
to score.
"""

from collections import Counter
from typing import Any, Dict, List, Optional

from .constants import (
    APPROVAL_GRADE,
    APPROVAL_STATUS_MARKERS,
    COMPONENT_LABELS,
    COMPONENT_WEIGHTS,
    EMPTY_DEFAULTS,
    GENDER_SCORING_VALUES,
    MAX_CRITICALITY_SCORE,
    MAX_GRADE,
    METROPOLITAN_CITY_MARKER,
    PERMANENCE_PENALTY_YEARS,
    PLAUSIBLE_YEAR_RANGE,
    PUBLIC_SCHOOL_MARKERS,
    REJECTION_STATUS_MARKERS,
)
from .contracts import (
    DemographicProfile,
    EnrichedRecord,
    IndicatorComponent,
    RelevanceOutcome,
    ScoringOptions,
)
from .criticality import CriticalityLookup, resolve_criticality_score
from .normalizer import normalize


def score_approval_rate(malla_records: List[EnrichedRecord]) -> IndicatorComponent:
    """
    Share of malla rows that were approved.

    A row is approved when its grade is at least 4.0 or its status text
    carries an approval marker without a rejection marker.
    """
    if not malla_records:
        return _build_component("approval_rate", EMPTY_DEFAULTS["approval_rate"], {"malla_rows": 0})

    approved = sum(1 for record in malla_records if is_approved(record))
    value = approved / len(malla_records)

    return _build_component("approval_rate", value, {
        "approved_rows": approved,
        "malla_rows": len(malla_records),
    })


def score_performance(malla_records: List[EnrichedRecord]) -> IndicatorComponent:
    """Mean of the positive malla grades over the 7.0 scale. Absent grades are skipped."""
    grades = [
        record.grade for record in malla_records
        if record.grade is not None and record.grade > 0
    ]
    if not grades:
        return _build_component("performance", EMPTY_DEFAULTS["performance"], {"graded_rows": 0})

    average = sum(grades) / len(grades)

    return _build_component("performance", average / MAX_GRADE, {
        "graded_rows": len(grades),
        "average_grade": round(average, 2),
        "max_grade": MAX_GRADE,
    })


def score_permanence(
    malla_records: List[EnrichedRecord],
    options: Optional[ScoringOptions] = None
) -> IndicatorComponent:
    """
    Penalty for the time spent in the program.

    Only plausible calendar years count. "grace_period" mode penalizes the
    years beyond ``options.expected_years``; "total_years" mode penalizes
    every year studied.
    """
    options = options or ScoringOptions()
    low, high = PLAUSIBLE_YEAR_RANGE
    years = [record.year for record in malla_records if low <= record.year <= high]

    if not years:
        return _build_component("permanence", EMPTY_DEFAULTS["permanence"], {
            "plausible_years": 0,
            "mode": options.permanence_mode,
        })

    first_year, last_year = min(years), max(years)
    span = last_year - first_year + 1

    if options.permanence_mode == "total_years":
        penalty_years = min(span, PERMANENCE_PENALTY_YEARS)
    else:
        penalty_years = max(0, span - options.expected_years)
    value = 1.0 - penalty_years / PERMANENCE_PENALTY_YEARS

    return _build_component("permanence", value, {
        "first_year": first_year,
        "last_year": last_year,
        "years_span": span,
        "penalized_years": penalty_years,
        "mode": options.permanence_mode,
    })


def score_repetition(malla_records: List[EnrichedRecord]) -> IndicatorComponent:
    """One minus the extra rows per distinct course over the malla rows."""
    if not malla_records:
        return _build_component("repetition", EMPTY_DEFAULTS["repetition"], {"malla_rows": 0})

    rows_per_course = Counter(record.course_key for record in malla_records)
    repetitions = sum(max(0, count - 1) for count in rows_per_course.values())
    value = 1.0 - repetitions / len(malla_records)

    return _build_component("repetition", value, {
        "repetitions": repetitions,
        "malla_rows": len(malla_records),
        "repeated_courses": sorted(key for key, count in rows_per_course.items() if count > 1),
    })


def score_criticality(
    malla_records: List[EnrichedRecord],
    lookup: Optional[CriticalityLookup] = None,
    options: Optional[ScoringOptions] = None
) -> IndicatorComponent:
    """
    Risk profile of the courses the student took.

    Sum of per-course scores (1-5) over 5 x distinct courses. Each course is
    scored at the highest attempt the student reached on it.
    """
    options = options or ScoringOptions()
    if not malla_records:
        return _build_component("criticality", EMPTY_DEFAULTS["criticality"], {
            "courses": 0,
            "mode": options.criticality_mode,
        })

    representatives: Dict[str, EnrichedRecord] = {}
    max_attempts: Dict[str, int] = {}
    for record in malla_records:
        key = record.course_key
        representatives.setdefault(key, record)
        max_attempts[key] = max(max_attempts.get(key, 1), record.attempt)

    course_scores: Dict[str, int] = {}
    for key, record in representatives.items():
        entry = None
        if lookup is not None:
            entry = lookup.entry_for(
                codes=[record.canonical_code, record.course_code],
                names=[record.canonical_name, record.course_name],
            )
        course_scores[key] = resolve_criticality_score(entry, max_attempts[key])

    total_score = sum(course_scores.values())
    value = total_score / (MAX_CRITICALITY_SCORE * len(course_scores))
    if options.criticality_mode == "inverted":
        value = 1.0 - value

    return _build_component("criticality", value, {
        "courses": len(course_scores),
        "total_score": total_score,
        "max_score": MAX_CRITICALITY_SCORE * len(course_scores),
        "course_scores": course_scores,
        "mode": options.criticality_mode,
    })


def score_relevance(
    malla_records: List[EnrichedRecord],
    plan_max_semester: int
) -> RelevanceOutcome:
    """
    Highest curricular semester reached over the plan length.

    Returns the component together with the semester statistics so the
    aggregator does not have to recompute them.
    """
    semesters = [
        record.curricular_semester for record in malla_records
        if record.curricular_semester and record.curricular_semester > 0
    ]
    last_semester = max(semesters, default=0)

    if not malla_records or plan_max_semester <= 0:
        value = EMPTY_DEFAULTS["relevance"]
    else:
        value = min(1.0, last_semester / plan_max_semester)

    component = _build_component("relevance", value, {
        "last_semester_reached": last_semester,
        "plan_max_semester": plan_max_semester,
    })
    return RelevanceOutcome(
        component=component,
        last_semester_reached=last_semester,
        plan_max_semester=plan_max_semester,
    )


def score_demographic(demographics: Optional[DemographicProfile]) -> IndicatorComponent:
    """
    Context factors: gender, city and school type, one point each.

    No demographic data gives the neutral 0.5.
    """
    if demographics is None or not demographics.has_data:
        return _build_component("demographic", EMPTY_DEFAULTS["demographic"], {"provided": False})

    gender_score = 1 if normalize(demographics.gender, True) in GENDER_SCORING_VALUES else 0

    city = normalize(demographics.city)
    city_score = 1 if city and METROPOLITAN_CITY_MARKER not in city else 0

    school = normalize(demographics.school_type, True)
    school_score = 1 if _contains_any(school, PUBLIC_SCHOOL_MARKERS) else 0

    value = (gender_score + city_score + school_score) / 3

    return _build_component("demographic", value, {
        "provided": True,
        "gender_score": gender_score,
        "city_score": city_score,
        "school_type_score": school_score,
    })


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def is_approved(record: EnrichedRecord) -> bool:
    if record.grade is not None and record.grade >= APPROVAL_GRADE:
        return True
    return status_is_approval(record.status)


def status_is_approval(status: Optional[str]) -> bool:
    """"Aprobado" and "Approved" count; "Reprobado" and "No aprobado" do not."""
    text = normalize(status, True)
    if not text:
        return False
    return _contains_any(text, APPROVAL_STATUS_MARKERS) and not _contains_any(text, REJECTION_STATUS_MARKERS)


def _contains_any(text: str, markers: List[str]) -> bool:
    return any(marker in text for marker in markers)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def _build_component(key: str, value: float, detail: Dict[str, Any]) -> IndicatorComponent:
    value = _clamp(value)
    weight = COMPONENT_WEIGHTS[key]
    label, description = COMPONENT_LABELS[key]

    return IndicatorComponent(
        key=key,
        label=label,
        description=description,
        value=value,
        weight=weight,
        weighted_value=value * weight,
        detail=detail,
    )
