"""
Text Normalizer

Canonicalizes course names and codes for comparison, plus the defensive
number coercion shared by the contracts and scorers.
"""

import math
import re
import unicodedata
from typing import Any, Optional

from .constants import ROMAN_NUMERALS

_NON_ALNUM = re.compile(r"[^A-Z0-9]")
_NON_ALNUM_SPACE = re.compile(r"[^A-Z0-9\s]")
_WHITESPACE = re.compile(r"\s+")
_DIGITS = re.compile(r"\d+")
_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")


def normalize(text: Any, strip_all_whitespace: bool = False) -> str:
    """
    Canonical form of a course name or code.

    Decomposes accents away, uppercases, and drops punctuation. With
    ``strip_all_whitespace`` every non-alphanumeric character goes (codes);
    otherwise whitespace runs collapse to a single space (names).

    Never fails: ``None`` and empty input give ``""``.
    """
    if text is None:
        return ""
    decomposed = unicodedata.normalize("NFD", str(text))
    without_marks = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    upper = without_marks.upper()

    if strip_all_whitespace:
        return _NON_ALNUM.sub("", upper)

    cleaned = _NON_ALNUM_SPACE.sub("", upper)
    return _WHITESPACE.sub(" ", cleaned).strip()


def normalize_code(text: Any) -> str:
    return normalize(text, strip_all_whitespace=True)


def normalize_name(text: Any) -> str:
    return normalize(text, strip_all_whitespace=False)


def level_marker(normalized_name: str) -> Optional[int]:
    """
    Sequence level of a normalized course name, if it carries one.

    "INGLES 2" -> 2, "TALLER INTEGRADO III" -> 3, "ANATOMIA" -> None.
    Digits win over Roman numerals; a Roman numeral only counts as a
    standalone token, and the last such token is used.
    """
    digits = _DIGITS.search(normalized_name)
    if digits:
        return int(digits.group())

    for token in reversed(normalized_name.split()):
        if token in ROMAN_NUMERALS:
            return ROMAN_NUMERALS[token]
    return None


def roman_to_int(token: str) -> Optional[int]:
    return ROMAN_NUMERALS.get(normalize_code(token))


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def to_float(value: Any) -> Optional[float]:
    """Coerce a loosely typed number ("4,5", "35%", 6) to float, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", ".")
        found = _NUMBER.search(text)
        if not found:
            return None
        number = float(found.group())
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def to_int(value: Any) -> Optional[int]:
    """Coerce a loosely typed integer ("2023", 3.0, "Semestre 4") to int, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return int(value)
    digits = _DIGITS.search(str(value))
    if digits:
        return int(digits.group())
    return None
