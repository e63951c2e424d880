import os
import logging
from dotenv import load_dotenv

from readiness.logic.contracts import ScoringOptions

load_dotenv()

logger = logging.getLogger(__name__)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

CRITICALITY_MODES = ("direct", "inverted")
PERMANENCE_MODES = ("grace_period", "total_years")


def get_scoring_options() -> ScoringOptions:
    """
    Scoring formula options from the environment.

    READINESS_CRITICALITY_MODE: direct | inverted
    READINESS_PERMANENCE_MODE: grace_period | total_years
    READINESS_EXPECTED_YEARS: positive integer

    Unknown values fall back to the defaults with a warning.
    """
    defaults = ScoringOptions()

    criticality_mode = os.getenv("READINESS_CRITICALITY_MODE", defaults.criticality_mode).strip().lower()
    if criticality_mode not in CRITICALITY_MODES:
        logger.warning(f"Unknown READINESS_CRITICALITY_MODE '{criticality_mode}', using '{defaults.criticality_mode}'")
        criticality_mode = defaults.criticality_mode

    permanence_mode = os.getenv("READINESS_PERMANENCE_MODE", defaults.permanence_mode).strip().lower()
    if permanence_mode not in PERMANENCE_MODES:
        logger.warning(f"Unknown READINESS_PERMANENCE_MODE '{permanence_mode}', using '{defaults.permanence_mode}'")
        permanence_mode = defaults.permanence_mode

    raw_years = os.getenv("READINESS_EXPECTED_YEARS", str(defaults.expected_years)).strip()
    try:
        expected_years = int(raw_years)
    except ValueError:
        expected_years = 0
    if expected_years < 1:
        logger.warning(f"Invalid READINESS_EXPECTED_YEARS '{raw_years}', using {defaults.expected_years}")
        expected_years = defaults.expected_years

    return ScoringOptions(
        criticality_mode=criticality_mode,
        permanence_mode=permanence_mode,
        expected_years=expected_years,
    )
