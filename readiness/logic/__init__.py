"""
Readiness Logic Module

Provides the deterministic curriculum-matching and graduation-readiness
scoring engine.
"""

from .contracts import (
    RawAcademicRecord,
    EnrichedRecord,
    CurriculumEntry,
    CurriculumIndex,
    DemographicProfile,
    ScoringOptions,
    IndicatorComponent,
    IndicatorResult,
    CoverageReport,
    StudentSummary,
    ReadinessOutput,
)
from .engine import ReadinessEngine, get_readiness
from .curriculum_indexer import build_index
from .matcher import match_record
from .enricher import enrich_records
from .aggregator import calculate_indicator
from .records import list_students, consolidate_partial_grades
from .constants import ReadinessTier

__all__ = [
    # Main engine
    "ReadinessEngine",
    "get_readiness",

    # Pipeline steps
    "build_index",
    "match_record",
    "enrich_records",
    "calculate_indicator",
    "list_students",
    "consolidate_partial_grades",

    # Contracts
    "RawAcademicRecord",
    "EnrichedRecord",
    "CurriculumEntry",
    "CurriculumIndex",
    "DemographicProfile",
    "ScoringOptions",
    "IndicatorComponent",
    "IndicatorResult",
    "CoverageReport",
    "StudentSummary",
    "ReadinessOutput",

    # Enums
    "ReadinessTier",
]
