"""
Readiness Engine

Main orchestrator that combines indexing, matching, enrichment and scoring
into a single pipeline. This is the primary entry point for computing a
student's graduation readiness.
"""

import logging
import time
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from .aggregator import calculate_indicator
from .constants import ENGINE_VERSION
from .contracts import (
    CoverageReport,
    DemographicProfile,
    EnrichedRecord,
    ReadinessOutput,
    ScoringOptions,
)
from .curriculum_indexer import build_index, describe_index
from .diagnostics import build_coverage_report
from .enricher import enrich_records
from .records import (
    RecordLike,
    coerce_records,
    consolidate_partial_grades,
    normalize_student_id,
    select_student_records,
)

logger = logging.getLogger(__name__)


class ReadinessEngine:
    """
    Main readiness engine that orchestrates the scoring pipeline.

    Pipeline flow:
    1. Indexing - Build the curriculum index once per engine
    2. Selection - Keep the requested student's records (optional)
    3. Consolidation - Merge partial evaluations (optional)
    4. Enrichment - Match every record against the curriculum
    5. Scoring - Seven components, weighted total and tier
    6. Diagnostics - Coverage report for the dashboard
    """

    def __init__(
        self,
        curriculum_document: Any = None,
        criticality_table: Any = None,
        options: Optional[ScoringOptions] = None
    ):
        """
        Initialize the readiness engine.

        Args:
            curriculum_document: Parsed curriculum (malla) of any shape
            criticality_table: Criticality table in any accepted shape
            options: Formula configuration; defaults to ScoringOptions()
        """
        self.curriculum_document = curriculum_document
        self.criticality_table = criticality_table
        self.options = options or ScoringOptions()
        self.version = ENGINE_VERSION

        self.index = build_index(curriculum_document) if curriculum_document is not None else None
        if self.index is not None:
            logger.info(f"Curriculum loaded: {describe_index(self.index)}")

    def enrich(self, records: Iterable[RecordLike]) -> Tuple[List[EnrichedRecord], CoverageReport]:
        """
        Match records against the curriculum without scoring them.

        Returns:
            (enriched records, coverage report)
        """
        enriched = enrich_records(coerce_records(records), self.index)
        return enriched, build_coverage_report(enriched, self.index)

    def evaluate(
        self,
        records: Iterable[RecordLike],
        demographics: Optional[Union[DemographicProfile, Mapping]] = None,
        student_id: Optional[str] = None,
        consolidate: bool = False
    ) -> ReadinessOutput:
        """
        Compute the readiness indicator for one student.

        Args:
            records: Academic-history rows (records or dicts)
            demographics: Optional demographic profile
            student_id: When given, only this student's rows are scored
            consolidate: Merge partial evaluations before scoring

        Returns:
            ReadinessOutput with indicator, coverage and enriched records
        """
        start_time = time.perf_counter()

        rows = coerce_records(records)
        if student_id is not None:
            rows = select_student_records(rows, student_id)
        if consolidate:
            rows = consolidate_partial_grades(rows)

        enriched = enrich_records(rows, self.index)
        indicator = calculate_indicator(
            enriched,
            criticality_table=self.criticality_table,
            curriculum_document=self.curriculum_document,
            demographics=demographics,
            options=self.options,
            index=self.index,
            student_id=normalize_student_id(student_id),
        )
        coverage = build_coverage_report(enriched, self.index)

        processing_time = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"Readiness for student {indicator.student_id}: {indicator.total_percentage:.1f}% "
            f"({indicator.tier}), {coverage.matched_rows}/{coverage.total_rows} rows matched"
        )

        return ReadinessOutput(
            indicator=indicator,
            coverage=coverage,
            enriched_records=enriched,
            processing_time_ms=round(processing_time, 2),
        )

    def evaluate_student(
        self,
        records: Iterable[RecordLike],
        student_id: str,
        demographics: Optional[Union[DemographicProfile, Mapping]] = None
    ) -> ReadinessOutput:
        """
        Compute the indicator of one student out of a multi-student record set.
        """
        return self.evaluate(records, demographics=demographics, student_id=student_id)

    def evaluate_from_dict(self, payload: dict, **kwargs) -> ReadinessOutput:
        """
        Compute the indicator from a dictionary payload.

        Convenience method for API integration. Recognized keys: records,
        demographics, student_id.

        Args:
            payload: Dictionary with the request data
            **kwargs: Additional arguments passed to evaluate()

        Returns:
            ReadinessOutput
        """
        return self.evaluate(
            payload.get("records") or [],
            demographics=payload.get("demographics"),
            student_id=payload.get("student_id"),
            **kwargs
        )


# Convenience function for simple usage
def get_readiness(
    records: Iterable[RecordLike],
    curriculum_document: Any = None,
    criticality_table: Any = None,
    demographics: Optional[Union[DemographicProfile, Mapping]] = None,
    options: Optional[ScoringOptions] = None,
    student_id: Optional[str] = None
) -> ReadinessOutput:
    """
    Convenience function to compute a readiness indicator.

    Args:
        records: Academic-history rows
        curriculum_document: Parsed curriculum document
        criticality_table: Criticality table
        demographics: Optional demographic profile
        options: Formula configuration
        student_id: Restrict scoring to this student

    Returns:
        ReadinessOutput
    """
    engine = ReadinessEngine(curriculum_document, criticality_table, options)
    return engine.evaluate(records, demographics=demographics, student_id=student_id)
