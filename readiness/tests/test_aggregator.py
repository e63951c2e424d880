"""
Tests for indicator aggregation, tier classification and summary stats.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

import pytest

from readiness.logic.aggregator import calculate_indicator
from readiness.logic.classifier import classify_tier
from readiness.logic.constants import COMPONENT_WEIGHTS, ReadinessTier
from readiness.logic.contracts import EnrichedRecord, ScoringOptions

from sample_data import CRITICALITY_TABLE, STUDENT_ONE, STUDENT_TWO


CURRICULUM = {"semestres_totales": 10, "semestres": []}
DEMOGRAPHICS = {"genero": "Mujer", "ciudad": "Viña", "tipoColegio": "Municipal"}


def test_weights_sum_to_one():
    assert len(COMPONENT_WEIGHTS) == 7
    assert sum(COMPONENT_WEIGHTS.values()) == pytest.approx(1.0)


def test_full_indicator_for_reference_student():
    result = calculate_indicator(STUDENT_ONE, CRITICALITY_TABLE, CURRICULUM, DEMOGRAPHICS)

    print(f"\nTotal: {result.total_percentage:.2f}% ({result.tier})")
    for component in result.components:
        print(f"  {component.key}: {component.value:.3f} x {component.weight}")

    assert [c.key for c in result.components] == list(COMPONENT_WEIGHTS)
    assert result.component("relevance").value == pytest.approx(0.3)
    assert result.component("demographic").value == 1.0
    assert result.total_percentage == pytest.approx(83.627, abs=0.01)
    assert result.tier == "high"
    assert result.student_id == "12345678"


def test_stats():
    result = calculate_indicator(STUDENT_ONE, CRITICALITY_TABLE, CURRICULUM)
    stats = result.stats

    assert stats.total_rows == 10
    assert stats.malla_rows == 10
    assert stats.unique_courses == 9
    assert stats.approved_courses == 9
    assert stats.average_grade == 5.1
    assert stats.last_semester_reached == 3


def test_only_malla_records_are_scored():
    outside = EnrichedRecord(course_name="Electivo Deportes", grade=1.0, year=2010, in_curriculum=False)
    with_outside = calculate_indicator(STUDENT_TWO + [outside], CRITICALITY_TABLE, CURRICULUM)
    without = calculate_indicator(STUDENT_TWO, CRITICALITY_TABLE, CURRICULUM)

    assert with_outside.total_percentage == pytest.approx(without.total_percentage)
    assert with_outside.stats.total_rows == 9
    assert with_outside.stats.malla_rows == 8


def test_empty_records_use_defaults():
    result = calculate_indicator([])

    assert result.component("approval_rate").value == 0.0
    assert result.component("repetition").value == 1.0
    assert result.total_percentage == pytest.approx(37.5)
    assert result.tier == "low"
    assert result.plan_id == "default"
    assert result.warnings


def test_total_is_bounded():
    for records in ([], STUDENT_ONE, STUDENT_TWO):
        for options in (ScoringOptions(), ScoringOptions(criticality_mode="inverted", permanence_mode="total_years")):
            result = calculate_indicator(records, CRITICALITY_TABLE, CURRICULUM, DEMOGRAPHICS, options)
            assert 0.0 <= result.total_percentage <= 100.0


def test_plan_coverage_uses_curriculum_index():
    codes = sorted({record.course_code for record in STUDENT_ONE}) + [f"KIN9{n:02d}" for n in range(11)]
    curriculum = [{"codigo": code, "nombre": f"Curso {code}", "semestre": 1} for code in codes]
    result = calculate_indicator(STUDENT_ONE, curriculum_document=curriculum)

    # 9 distinct matched courses out of 20
    assert result.stats.plan_coverage_percentage == 45.0


def test_classify_tier_boundaries():
    assert classify_tier(100.0) == ReadinessTier.HIGH
    assert classify_tier(80.0) == ReadinessTier.HIGH
    assert classify_tier(79.99) == ReadinessTier.MEDIUM
    assert classify_tier(60.0) == ReadinessTier.MEDIUM
    assert classify_tier(59.99) == ReadinessTier.LOW
    assert classify_tier(0.0) == ReadinessTier.LOW

