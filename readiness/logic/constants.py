"""
Scoring Engine Constants

Defines component weights, tier thresholds, key-name tables and label maps
used by the readiness engine. All values are deterministic.
"""

from enum import Enum
from typing import Dict, List, Tuple

# =============================================================================
# COMPONENT WEIGHTS
# =============================================================================

# Weights for each indicator component (must sum to 1.0)
COMPONENT_WEIGHTS: Dict[str, float] = {
    "approval_rate": 0.25,   # Approved rows / malla rows
    "performance": 0.20,     # Mean grade / 7.0
    "permanence": 0.20,      # Delay beyond expected duration
    "repetition": 0.10,      # Extra attempts / malla rows
    "criticality": 0.10,     # Course risk profile
    "relevance": 0.10,       # Curricular semester reached
    "demographic": 0.05,     # Context factors
}

COMPONENT_LABELS: Dict[str, Tuple[str, str]] = {
    "approval_rate": ("Approval Rate", "Approved records / records in the curriculum"),
    "performance": ("Academic Performance", "Average grade / 7.0"),
    "permanence": ("Permanence", "1 - (years beyond expected duration / 5)"),
    "repetition": ("Repetition Index", "1 - (repeated attempts / records in the curriculum)"),
    "criticality": ("Course Criticality", "Criticality score / (5 x courses taken)"),
    "relevance": ("Semester Relevance", "Semester reached / plan semesters"),
    "demographic": ("Demographic Index", "(Gender + City + School type) / 3"),
}

# Values returned when a student has no records matched to the curriculum
EMPTY_DEFAULTS: Dict[str, float] = {
    "approval_rate": 0.0,
    "performance": 0.0,
    "permanence": 1.0,
    "repetition": 1.0,
    "criticality": 0.5,
    "relevance": 0.0,
    "demographic": 0.5,
}

# =============================================================================
# GRADING
# =============================================================================

MAX_GRADE = 7.0
APPROVAL_GRADE = 4.0

# Substrings of a strip-all-normalized status text
APPROVAL_STATUS_MARKERS: List[str] = ["APROB", "APPROVED", "PASSED"]
REJECTION_STATUS_MARKERS: List[str] = ["REPROB", "NOAPROB", "DISAPPROV", "NOTAPPROVED", "NOTPASSED"]

# =============================================================================
# PERMANENCE
# =============================================================================

EXPECTED_YEARS = 5
PERMANENCE_PENALTY_YEARS = 5
PLAUSIBLE_YEAR_RANGE: Tuple[int, int] = (2000, 2100)

# =============================================================================
# RELEVANCE
# =============================================================================

DEFAULT_PLAN_SEMESTERS = 10

# =============================================================================
# CRITICALITY
# =============================================================================

MAX_CRITICALITY_SCORE = 5
DEFAULT_CRITICALITY_SCORE = 1

# Lower bound (inclusive) of each failure-percentage band, highest first
FAILURE_PERCENTAGE_BANDS: List[Tuple[float, int]] = [
    (30.0, 5),
    (20.0, 4),
    (10.0, 3),
    (5.0, 2),
    (0.0, 1),
]

# Keys are strip-all-normalized labels
CRITICALITY_LABEL_SCORES: Dict[str, int] = {
    "MUYALTA": 5,
    "ALTA": 5,
    "CRITICA": 5,
    "CRITICAL": 5,
    "VERYHIGH": 5,
    "HIGH": 5,
    "MEDIAALTA": 4,
    "MEDIOALTA": 4,
    "MEDIUMHIGH": 4,
    "MEDIA": 3,
    "MEDIO": 3,
    "MEDIUM": 3,
    "BAJA": 2,
    "LOW": 2,
    "MUYBAJA": 1,
    "VERYLOW": 1,
    "5": 5,
    "4": 4,
    "3": 3,
    "2": 2,
    "1": 1,
}

# Normalized key prefixes that carry a failure percentage per attempt
# (e.g. "Porcentaje_3", "failure_pct_2")
FAILURE_PERCENTAGE_KEY_MARKERS: List[str] = ["PORCENTAJE", "PERCENTAGE", "PERCENT", "PCT", "REPROBACION", "FAILURE"]

# Normalized key prefixes that carry a categorical label
CRITICALITY_LABEL_KEY_MARKERS: List[str] = ["CRITICIDAD", "CRITICALITY", "CATEGORIA", "CATEGORY", "NIVELRIESGO"]

# =============================================================================
# DEMOGRAPHICS
# =============================================================================

GENDER_SCORING_VALUES: List[str] = [
    "MUJER", "FEMENINO", "FEMENINA", "FEMALE", "WOMAN", "F",
    "OTRO", "OTRA", "OTHER", "NOBINARIO", "NOBINARIE", "NONBINARY",
]
METROPOLITAN_CITY_MARKER = "SANTIAGO"
PUBLIC_SCHOOL_MARKERS: List[str] = ["PUBLIC", "MUNICIPAL", "SUBVENCIONAD", "SUBSIDIZED"]

# =============================================================================
# CURRICULUM TRAVERSAL
# =============================================================================

MAX_TRAVERSAL_DEPTH = 15

# Numeric container keys ("3": [...]) are semester indexes only in this range
SEMESTER_KEY_RANGE: Tuple[int, int] = (1, 12)

# Tokens in a container key that announce a semester ("Semestre 3", "nivel_2")
SEMESTER_KEY_TOKENS: List[str] = ["SEMESTRE", "SEMESTER", "NIVEL", "LEVEL", "BLOQUE", "CICLO"]

# Per-field key candidates, highest priority first. Keys are compared after
# strip-all normalization.
FIELD_KEY_CANDIDATES: Dict[str, Dict[str, List[str]]] = {
    "name": {
        "exact": ["NOMBREASIGNATURA", "ASIGNATURA", "NOMBRE", "NAME", "MATERIA", "SUBJECT", "COURSENAME", "TITLE"],
        "contains": ["ASIGNATURA", "NOMBRE", "NAME", "MATERIA", "SUBJECT", "DESCRIPCION", "DESC", "ASIG"],
        "exclude": ["CODIGO", "SIGLA", "CODE"],
    },
    "code": {
        "exact": ["CODIGOASIGNATURA", "CODIGO", "SIGLA", "COD", "CODE", "COURSECODE", "NRC", "ID", "CLAVE"],
        "contains": ["CODIGO", "SIGLA", "CODE", "COD", "NRC", "CLAVE"],
        "exclude": ["NOMBRE", "NAME", "DESCRIPCION"],
    },
    "semester": {
        "exact": ["SEMESTRE", "SEMESTER", "NIVEL", "LEVEL", "CICLO", "INDICESEMESTRE"],
        "contains": ["INDICESEMESTRE", "SEMESTRE", "SEMESTER", "NIVEL", "CICLO", "PERIODOMALLA"],
        "exclude": ["TOTAL", "MAX", "DURACION"],
    },
    "total_semesters": {
        "exact": [
            "SEMESTRESTOTALES", "TOTALSEMESTRES", "MAXSEMESTRE", "MAXSEMESTRES",
            "TOTALSEMESTERS", "MAXSEMESTER", "MAXSEMESTERS", "DURACIONSEMESTRES",
        ],
        "contains": [],
        "exclude": [],
    },
}

# =============================================================================
# MATCHING
# =============================================================================

# Normalized names must be longer than this to try fuzzy matching
MIN_FUZZY_NAME_LENGTH = 3

ROMAN_NUMERALS: Dict[str, int] = {
    "I": 1, "II": 2, "III": 3, "IV": 4, "V": 5, "VI": 6,
    "VII": 7, "VIII": 8, "IX": 9, "X": 10, "XI": 11, "XII": 12,
}

# =============================================================================
# TIERS
# =============================================================================

class ReadinessTier(str, Enum):
    """Qualitative tier of the final indicator."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Minimum total percentage for each tier, checked in order
TIER_THRESHOLDS: List[Tuple[ReadinessTier, float]] = [
    (ReadinessTier.HIGH, 80.0),
    (ReadinessTier.MEDIUM, 60.0),
    (ReadinessTier.LOW, 0.0),
]

# =============================================================================
# DIAGNOSTICS
# =============================================================================

LOW_MATCH_RATE_THRESHOLD = 0.5
TOP_UNMATCHED_LIMIT = 20

ENGINE_VERSION = "1.0.0"
