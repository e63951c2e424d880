"""
Data Contracts for the Readiness Engine

Defines Pydantic models for academic records (input), curriculum entries,
and the IndicatorResult / ReadinessOutput (output). These contracts are the
API boundary of the engine.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from .constants import ENGINE_VERSION, EXPECTED_YEARS, ReadinessTier
from .normalizer import normalize_code, normalize_name, to_float, to_int


def _clean_text(value: Any) -> Optional[str]:
    """Identifiers arrive as text or as spreadsheet numbers (101.0)."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


# =============================================================================
# INPUT CONTRACTS
# =============================================================================

class RawAcademicRecord(BaseModel):
    """
    One row of a student's academic history.

    Accepts the spreadsheet field names (rut, codigoAsignatura, nota, ...)
    as aliases. Numeric fields are coerced defensively: a grade that is not
    a number becomes None (absent), never zero.
    """
    student_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("student_id", "rut", "RUT")
    )
    course_code: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("course_code", "codigoAsignatura", "codigo", "CODIGO_ASIGNATURA"),
    )
    course_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("course_name", "nombreAsignatura", "nombre", "ASIGNATURA"),
    )
    grade: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("grade", "nota", "NOTA")
    )
    weight: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("weight", "peso", "PESO")
    )
    year: int = Field(default=0, validation_alias=AliasChoices("year", "anio", "ANIO"))
    term: int = Field(default=1, validation_alias=AliasChoices("term", "semestre", "SEMESTRE"))
    attempt: int = Field(default=1, validation_alias=AliasChoices("attempt", "oportunidad", "OPORTUNIDAD"))
    plan_id: str = Field(default="default", validation_alias=AliasChoices("plan_id", "malla", "MALLA"))
    status: Optional[str] = Field(default=None, validation_alias=AliasChoices("status", "estado", "ESTADO"))

    class Config:
        frozen = True

    @field_validator("student_id", "course_code", "course_name", "status", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        return _clean_text(value)

    @field_validator("grade", "weight", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> Optional[float]:
        return to_float(value)

    @field_validator("year", mode="before")
    @classmethod
    def _coerce_year(cls, value: Any) -> int:
        return to_int(value) or 0

    @field_validator("term", mode="before")
    @classmethod
    def _coerce_term(cls, value: Any) -> int:
        term = to_int(value)
        return term if term in (1, 2) else 1

    @field_validator("attempt", mode="before")
    @classmethod
    def _coerce_attempt(cls, value: Any) -> int:
        attempt = to_int(value)
        return attempt if attempt and attempt > 0 else 1

    @field_validator("plan_id", mode="before")
    @classmethod
    def _coerce_plan(cls, value: Any) -> str:
        return _clean_text(value) or "default"


class DemographicProfile(BaseModel):
    """Self-reported context of a student. Every field is free text."""
    gender: Optional[str] = Field(default=None, validation_alias=AliasChoices("gender", "genero"))
    city: Optional[str] = Field(default=None, validation_alias=AliasChoices("city", "ciudad"))
    school_type: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("school_type", "tipoColegio", "tipo_colegio")
    )

    @field_validator("gender", "city", "school_type", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        return _clean_text(value)

    @property
    def has_data(self) -> bool:
        return any([self.gender, self.city, self.school_type])


class ScoringOptions(BaseModel):
    """
    Formula configuration points.

    criticality_mode:
        "direct" uses the normalized criticality score as is; "inverted"
        uses 1 - score.
    permanence_mode:
        "grace_period" penalizes only years beyond ``expected_years``;
        "total_years" penalizes every year studied (1 - min(span, 5) / 5).
    """
    criticality_mode: Literal["direct", "inverted"] = "direct"
    permanence_mode: Literal["grace_period", "total_years"] = "grace_period"
    expected_years: int = Field(default=EXPECTED_YEARS, ge=1)


# =============================================================================
# CURRICULUM CONTRACTS
# =============================================================================

class CurriculumEntry(BaseModel):
    """A canonical course of the plan (malla)."""
    name: str = ""
    code: str = ""
    semester: int = 0  # 0 = unknown
    source: Any = Field(default=None, exclude=True, repr=False)

    class Config:
        frozen = True

    @property
    def normalized_code(self) -> str:
        return normalize_code(self.code)

    @property
    def normalized_name(self) -> str:
        return normalize_name(self.name)


class CurriculumIndex(BaseModel):
    """
    Lookup tables over one curriculum document.

    ``by_name`` iterates in insertion order of its keys; fuzzy matching
    relies on that order.
    """
    by_code: Dict[str, CurriculumEntry] = Field(default_factory=dict)
    by_name: Dict[str, CurriculumEntry] = Field(default_factory=dict)
    all_entries: List[CurriculumEntry] = Field(default_factory=list)

    @property
    def course_count(self) -> int:
        return len(self.all_entries)

    @property
    def max_semester(self) -> int:
        return max((entry.semester for entry in self.all_entries), default=0)


class EnrichedRecord(RawAcademicRecord):
    """A RawAcademicRecord annotated with its curriculum match."""
    in_curriculum: bool = False
    curricular_semester: Optional[int] = None
    canonical_code: Optional[str] = None
    canonical_name: Optional[str] = None

    @property
    def course_key(self) -> str:
        """Distinct-course identity: canonical code, then names, then raw code."""
        return (
            self.canonical_code
            or self.canonical_name
            or self.course_name
            or self.course_code
            or ""
        )


# =============================================================================
# OUTPUT CONTRACTS
# =============================================================================

class IndicatorComponent(BaseModel):
    """Individual indicator component with its audit detail."""
    key: str
    label: str
    description: str = ""
    value: float = Field(ge=0.0, le=1.0)
    weight: float = Field(ge=0.0, le=1.0)
    weighted_value: float = Field(ge=0.0, le=1.0)
    detail: Dict[str, Any] = Field(default_factory=dict)


class RelevanceOutcome(BaseModel):
    """Relevance component plus the semester statistics the aggregator reuses."""
    component: IndicatorComponent
    last_semester_reached: int = 0
    plan_max_semester: int = 0


class IndicatorStats(BaseModel):
    """Summary statistics shown next to the indicator."""
    total_rows: int = 0
    malla_rows: int = 0
    unique_courses: int = 0
    approved_courses: int = 0
    average_grade: float = 0.0
    last_semester_reached: int = 0
    plan_coverage_percentage: float = 0.0


class IndicatorResult(BaseModel):
    """
    Output contract of the calculator.
    One instance per (student, dataset); recomputed on every call.
    """
    student_id: Optional[str] = None
    plan_id: str = "default"

    components: List[IndicatorComponent] = Field(default_factory=list)
    total_percentage: float = Field(ge=0.0, le=100.0)
    tier: ReadinessTier

    stats: IndicatorStats = Field(default_factory=IndicatorStats)
    warnings: List[str] = Field(default_factory=list)
    engine_version: str = ENGINE_VERSION

    class Config:
        use_enum_values = True

    def component(self, key: str) -> Optional[IndicatorComponent]:
        for component in self.components:
            if component.key == key:
                return component
        return None


class UnmatchedCourse(BaseModel):
    name: str
    count: int


class CoverageReport(BaseModel):
    """How well a student's history lines up with the curriculum."""
    total_rows: int = 0
    matched_rows: int = 0
    match_rate: float = 0.0
    distinct_courses: int = 0
    distinct_matched_courses: int = 0
    curriculum_course_count: int = 0
    coverage_percentage: float = 0.0
    top_unmatched: List[UnmatchedCourse] = Field(default_factory=list)


class StudentSummary(BaseModel):
    student_id: str
    plan_id: str = "default"
    record_count: int = 0


class ReadinessOutput(BaseModel):
    """Everything the dashboard needs for one student."""
    indicator: IndicatorResult
    coverage: CoverageReport
    enriched_records: List[EnrichedRecord] = Field(default_factory=list)
    processing_time_ms: Optional[float] = None
