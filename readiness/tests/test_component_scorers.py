"""
Tests for the seven indicator components, using the reference students of
the kinesiology program.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

import pytest

from readiness.logic.component_scorers import (
    is_approved,
    score_approval_rate,
    score_criticality,
    score_demographic,
    score_performance,
    score_permanence,
    score_relevance,
    score_repetition,
    status_is_approval,
)
from readiness.logic.contracts import DemographicProfile, ScoringOptions
from readiness.logic.criticality import build_criticality_lookup

from sample_data import CRITICALITY_TABLE, STUDENT_ONE, STUDENT_TWO, malla_record


# =============================================================================
# EMPTY SET DEFAULTS
# =============================================================================

def test_empty_malla_defaults():
    assert score_approval_rate([]).value == 0.0
    assert score_performance([]).value == 0.0
    assert score_permanence([]).value == 1.0
    assert score_repetition([]).value == 1.0
    assert score_criticality([]).value == 0.5
    assert score_relevance([], 10).component.value == 0.0
    assert score_demographic(None).value == 0.5


# =============================================================================
# APPROVAL / PERFORMANCE
# =============================================================================

def test_approval_rate_counts_rows():
    assert score_approval_rate(STUDENT_ONE).value == pytest.approx(0.9)
    assert score_approval_rate(STUDENT_TWO).value == pytest.approx(0.625)


def test_approval_by_status_text():
    records = [
        malla_record("KIN101", None, 2022, status="Aprobado"),
        malla_record("KIN102", None, 2022, status="Reprobado"),
        malla_record("KIN103", None, 2022, status="No aprobado"),
        malla_record("KIN104", None, 2022, status="APPROVED"),
    ]
    component = score_approval_rate(records)

    assert component.value == pytest.approx(0.5)
    assert component.detail == {"approved_rows": 2, "malla_rows": 4}


def test_status_is_approval():
    assert status_is_approval("aprobado")
    assert status_is_approval("Approved")
    assert not status_is_approval("reprobado")
    assert not status_is_approval("No Aprobado")
    assert not status_is_approval(None)
    assert is_approved(malla_record("KIN101", 4.0, 2022))
    assert not is_approved(malla_record("KIN101", 3.9, 2022))


def test_performance_is_mean_grade_over_seven():
    component = score_performance(STUDENT_ONE)

    assert component.value == pytest.approx(5.1 / 7.0)
    assert component.detail["average_grade"] == 5.1


def test_performance_ignores_absent_grades():
    records = [
        malla_record("KIN101", 6.0, 2022),
        malla_record("KIN102", None, 2022),
        malla_record("KIN103", 0.0, 2022),
    ]
    assert score_performance(records).value == pytest.approx(6.0 / 7.0)
    assert score_performance([malla_record("KIN101", None, 2022)]).value == 0.0


# =============================================================================
# PERMANENCE
# =============================================================================

def test_permanence_two_year_span():
    assert score_permanence(STUDENT_ONE).value == 1.0


def test_permanence_three_year_span():
    component = score_permanence(STUDENT_TWO)

    assert component.value == 1.0
    assert component.detail["years_span"] == 3


def test_permanence_penalizes_years_beyond_threshold():
    records = [malla_record("KIN101", 5.0, 2015), malla_record("KIN102", 5.0, 2021)]
    component = score_permanence(records)

    assert component.detail["years_span"] == 7
    assert component.value == pytest.approx(0.6)


def test_permanence_clamps_at_zero():
    records = [malla_record("KIN101", 5.0, 2000), malla_record("KIN102", 5.0, 2020)]
    assert score_permanence(records).value == 0.0


def test_permanence_ignores_implausible_years():
    records = [
        malla_record("KIN101", 5.0, 0),
        malla_record("KIN102", 5.0, 1995),
        malla_record("KIN103", 5.0, 2022),
    ]
    assert score_permanence(records).detail["years_span"] == 1
    assert score_permanence([malla_record("KIN101", 5.0, 0)]).value == 1.0


def test_permanence_total_years_mode():
    options = ScoringOptions(permanence_mode="total_years")

    assert score_permanence(STUDENT_ONE, options).value == pytest.approx(0.6)
    assert score_permanence(STUDENT_TWO, options).value == pytest.approx(0.4)


def test_permanence_expected_years_option():
    options = ScoringOptions(expected_years=1)
    assert score_permanence(STUDENT_TWO, options).value == pytest.approx(0.6)


# =============================================================================
# REPETITION
# =============================================================================

def test_repetition_one_repeat_in_ten_rows():
    component = score_repetition(STUDENT_ONE)

    assert component.value == pytest.approx(0.9)
    assert component.detail["repeated_courses"] == ["KIN104"]


def test_repetition_three_repeats_in_eight_rows():
    assert score_repetition(STUDENT_TWO).value == pytest.approx(0.625)


def test_repetition_uses_canonical_identity():
    records = [
        malla_record("KIN101", 3.0, 2022, course_name="Anatomia"),
        malla_record("KIN101", 4.0, 2023, attempt=2, course_name="ANATOMÍA GENERAL"),
    ]
    assert score_repetition(records).value == pytest.approx(0.5)


# =============================================================================
# CRITICALITY
# =============================================================================

def test_criticality_nine_courses():
    lookup = build_criticality_lookup(CRITICALITY_TABLE)
    component = score_criticality(STUDENT_ONE, lookup)

    assert component.detail["courses"] == 9
    assert component.detail["total_score"] == 43
    assert component.value == pytest.approx(43 / 45)


def test_criticality_inverted_mode():
    lookup = build_criticality_lookup(CRITICALITY_TABLE)
    options = ScoringOptions(criticality_mode="inverted")

    assert score_criticality(STUDENT_ONE, lookup, options).value == pytest.approx(2 / 45)


def test_criticality_uses_highest_attempt():
    lookup = build_criticality_lookup([{"codigo": "KIN101", "Porcentaje_1": 3, "Porcentaje_2": 40}])
    first_try = [malla_record("KIN101", 3.0, 2022)]
    second_try = first_try + [malla_record("KIN101", 4.5, 2023, attempt=2)]

    assert score_criticality(first_try, lookup).value == pytest.approx(1 / 5)
    assert score_criticality(second_try, lookup).value == pytest.approx(5 / 5)


def test_criticality_without_table():
    assert score_criticality(STUDENT_ONE).value == pytest.approx(9 / 45)


# =============================================================================
# RELEVANCE / DEMOGRAPHIC
# =============================================================================

def test_relevance_returns_semester_statistics():
    outcome = score_relevance(STUDENT_ONE, 10)

    assert outcome.component.value == pytest.approx(0.3)
    assert outcome.last_semester_reached == 3
    assert outcome.plan_max_semester == 10


def test_relevance_is_capped_at_one():
    assert score_relevance(STUDENT_ONE, 2).component.value == 1.0


def test_relevance_without_curricular_semesters():
    records = [malla_record("KIN101", 5.0, 2022, semester=None)]
    outcome = score_relevance(records, 10)

    assert outcome.component.value == 0.0
    assert outcome.last_semester_reached == 0


def test_demographic_scores():
    favourable = DemographicProfile(genero="Mujer", ciudad="Viña del Mar", tipoColegio="Municipal")
    unfavourable = DemographicProfile(genero="Hombre", ciudad="Santiago Centro", tipoColegio="Particular")
    mixed = DemographicProfile(gender="other", city="Santiago", school_type="Particular Subvencionado")

    assert score_demographic(favourable).value == 1.0
    assert score_demographic(unfavourable).value == 0.0
    assert score_demographic(mixed).value == pytest.approx(2 / 3)
    assert score_demographic(DemographicProfile()).value == 0.5


def test_components_carry_weights_and_labels():
    component = score_approval_rate(STUDENT_ONE)

    assert component.weight == 0.25
    assert component.weighted_value == pytest.approx(0.9 * 0.25)
    assert component.label == "Approval Rate"
