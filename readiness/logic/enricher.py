"""
Record Enricher

Annotates academic-history records with their curriculum match.
"""

import logging
from typing import Iterable, List, Optional

from .contracts import CurriculumIndex, EnrichedRecord, RawAcademicRecord
from .matcher import match_record

logger = logging.getLogger(__name__)


def enrich_record(
    record: RawAcademicRecord,
    index: Optional[CurriculumIndex]
) -> EnrichedRecord:
    """Copy of ``record`` with in_curriculum / curricular_semester / canonical fields set."""
    match = match_record(record, index)
    fields = record.model_dump(include=set(RawAcademicRecord.model_fields))
    if match is None:
        return EnrichedRecord(**fields)

    return EnrichedRecord(
        **fields,
        in_curriculum=True,
        curricular_semester=match.semester or None,
        canonical_code=match.code or None,
        canonical_name=match.name or None,
    )


def enrich_records(
    records: Iterable[RawAcademicRecord],
    index: Optional[CurriculumIndex]
) -> List[EnrichedRecord]:
    """
    Match every record against the curriculum index.

    Pure map: neither the records nor the index are modified. With no
    index every record comes back with in_curriculum=False.
    """
    enriched = [enrich_record(record, index) for record in records]

    matched = sum(1 for record in enriched if record.in_curriculum)
    logger.info(f"Enrichment: {len(enriched)} records processed, {matched} matched to the curriculum")
    return enriched
