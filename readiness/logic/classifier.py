"""
Classifier

Classifies a total readiness percentage into a tier:
- High (>= 80)
- Medium (>= 60)
- Low (everything else)
"""

from .constants import TIER_THRESHOLDS, ReadinessTier


def classify_tier(total_percentage: float) -> ReadinessTier:
    """
    Classify a total percentage (0-100) into a ReadinessTier.

    Thresholds are inclusive: exactly 80.0 is HIGH, exactly 60.0 is MEDIUM.
    """
    for tier, minimum in TIER_THRESHOLDS:
        if total_percentage >= minimum:
            return tier
    return ReadinessTier.LOW

