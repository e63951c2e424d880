"""
Readiness API Routes

Exposes the readiness engine via REST API.
Main endpoint: POST /readiness
"""

import logging
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from settings import get_scoring_options
from .logic.contracts import (
    DemographicProfile,
    IndicatorComponent,
    RawAcademicRecord,
    ReadinessOutput,
    ScoringOptions,
)
from .logic.constants import ENGINE_VERSION
from .logic.engine import ReadinessEngine
from .logic.records import coerce_records, list_students

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/readiness", tags=["readiness"])


# =============================================================================
# REQUEST/RESPONSE SCHEMAS
# =============================================================================

class ReadinessRequest(BaseModel):
    """Request body for the readiness endpoint."""
    records: List[Dict[str, Any]] = Field(
        ...,
        description="Academic-history rows of one or more students",
        examples=[[
            {"rut": "12345678", "codigoAsignatura": "KIN101", "nombreAsignatura": "Anatomía",
             "nota": 5.2, "anio": 2022, "semestre": 1, "oportunidad": 1},
        ]],
    )
    curriculum: Optional[Any] = Field(
        default=None,
        description="Curriculum (malla) document of any shape"
    )
    criticality: Optional[Any] = Field(
        default=None,
        description="Criticality table: list, plan-keyed object, or course-keyed object"
    )
    demographics: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Gender / city / school type of the student"
    )
    student_id: Optional[str] = Field(
        default=None,
        description="Score only this student's rows"
    )
    consolidate: bool = Field(
        default=False,
        description="Merge partial evaluations of the same course attempt first"
    )
    format: Literal["full", "simple"] = Field(
        default="full",
        description="Response format: 'full' (indicator, stats, coverage) or 'simple' (score only)"
    )


class EnrichRequest(BaseModel):
    """Request body for the enrichment endpoint."""
    records: List[Dict[str, Any]]
    curriculum: Optional[Any] = None


class StudentsRequest(BaseModel):
    """Request body for the student listing endpoint."""
    records: List[Dict[str, Any]]


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("", summary="Compute the graduation readiness indicator")
@router.post("/", summary="Compute the graduation readiness indicator", include_in_schema=False)
def compute_readiness(
    request: ReadinessRequest,
    options: ScoringOptions = Depends(get_scoring_options)
):
    """
    Compute the seven-component readiness indicator of one student.

    **Request Body:**
    - `records`: Academic-history rows (Spanish or English field names)
    - `curriculum`: Curriculum document
    - `criticality`: Criticality table (optional)
    - `demographics`: Demographic data (optional)
    - `student_id`: Restrict to one student (optional)
    - `format`: 'full' or 'simple'

    **Response:**
    - Total percentage, tier and per-component values
    - Stats, coverage and warnings in 'full' format
    """
    try:
        records = _parse_records(request.records)

        try:
            demographics = (
                DemographicProfile.model_validate(request.demographics)
                if request.demographics else None
            )
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=f"Invalid demographics: {str(e)}")

        engine = ReadinessEngine(request.curriculum, request.criticality, options)
        output = engine.evaluate(
            records,
            demographics=demographics,
            student_id=request.student_id,
            consolidate=request.consolidate,
        )

        if request.format == "simple":
            return _serialize_simple(output)
        return _serialize_full(output)

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Readiness computation failed")
        return JSONResponse(
            status_code=500,
            content={"error": str(e)}
        )


@router.post("/enrich", summary="Match records against the curriculum")
def enrich(request: EnrichRequest):
    """
    Annotate each record with its curriculum match, plus a coverage report.
    """
    try:
        records = _parse_records(request.records)
        engine = ReadinessEngine(request.curriculum)
        enriched, coverage = engine.enrich(records)

        return {
            "records": [record.model_dump() for record in enriched],
            "coverage": coverage.model_dump(),
            "count": len(enriched),
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Enrichment failed")
        return JSONResponse(
            status_code=500,
            content={"error": str(e)}
        )


@router.post("/students", summary="List the students in a record set")
def students(request: StudentsRequest):
    """Distinct students (normalized id and plan) with their row counts."""
    records = _parse_records(request.records)
    summaries = list_students(records)
    return {
        "students": [summary.model_dump() for summary in summaries],
        "count": len(summaries),
    }


def _parse_records(rows: List[Dict[str, Any]]) -> List[RawAcademicRecord]:
    try:
        return coerce_records(rows)
    except ValidationError as e:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid academic records: {str(e)}"
        )


def _serialize_component(component: IndicatorComponent, with_detail: bool = True) -> Dict[str, Any]:
    """Convert IndicatorComponent to JSON-serializable dict."""
    data = {
        "key": component.key,
        "label": component.label,
        "description": component.description,
        "value": round(component.value, 4),
        "weight": component.weight,
        "weighted_value": round(component.weighted_value, 4),
    }
    if with_detail:
        data["detail"] = component.detail
    return data


def _serialize_simple(output: ReadinessOutput) -> Dict[str, Any]:
    indicator = output.indicator
    return {
        "student_id": indicator.student_id,
        "total_percentage": round(indicator.total_percentage, 2),
        "tier": indicator.tier,
        "components": {
            component.key: round(component.value, 4)
            for component in indicator.components
        },
    }


def _serialize_full(output: ReadinessOutput) -> Dict[str, Any]:
    indicator = output.indicator
    return {
        "student_id": indicator.student_id,
        "plan_id": indicator.plan_id,
        "total_percentage": round(indicator.total_percentage, 2),
        "tier": indicator.tier,
        "components": [_serialize_component(c) for c in indicator.components],
        "stats": indicator.stats.model_dump(),
        "coverage": output.coverage.model_dump(),
        "warnings": indicator.warnings,
        "processing_time_ms": output.processing_time_ms,
        "engine_version": indicator.engine_version,
    }


# =============================================================================
# HEALTH CHECK
# =============================================================================

@router.get("/health", summary="Readiness engine health check")
def health_check():
    """Check if readiness engine is operational."""
    return {"status": "ok", "engine": "readiness", "version": ENGINE_VERSION}
