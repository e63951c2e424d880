"""
Field Detection

Finds course fields (name, code, semester, ...) in untyped mappings whose
key spelling varies between institutions: "CODIGO", "Sigla Asignatura",
"nombre_asignatura", "Semestre", etc.

Candidate keys live in FIELD_KEY_CANDIDATES as data. Lookup order is:
every exact candidate (in priority order), then every substring candidate
(in priority order); within one candidate the mapping's own key order
decides. Only scalar values qualify, so a key like "asignaturas" holding a
list of courses is never mistaken for a course name.
"""

from typing import Any, Dict, Mapping, Optional, Tuple

from .constants import FIELD_KEY_CANDIDATES
from .normalizer import normalize_code


def is_scalar(value: Any) -> bool:
    """True for non-empty strings and numbers (booleans excluded)."""
    if value is None or isinstance(value, bool):
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return isinstance(value, (int, float))


def normalized_keys(node: Mapping) -> Dict[str, Any]:
    """Map each key of ``node`` to its strip-all-normalized form, keeping order."""
    return {key: normalize_code(key) for key in node.keys()}


def find_field(node: Mapping, field: str) -> Optional[Tuple[Any, Any]]:
    """
    Locate ``field`` in ``node``.

    Args:
        node: Any mapping (a curriculum node, a criticality row, ...)
        field: A key of FIELD_KEY_CANDIDATES

    Returns:
        (original_key, value) of the best candidate, or None
    """
    table = FIELD_KEY_CANDIDATES[field]
    keys = normalized_keys(node)
    excluded = table.get("exclude", [])

    def usable(key: Any, norm_key: str) -> bool:
        if not is_scalar(node[key]):
            return False
        return not any(marker in norm_key for marker in excluded)

    for candidate in table["exact"]:
        for key, norm_key in keys.items():
            if norm_key == candidate and is_scalar(node[key]):
                return key, node[key]

    for candidate in table["contains"]:
        for key, norm_key in keys.items():
            if candidate in norm_key and usable(key, norm_key):
                return key, node[key]

    return None


def field_value(node: Mapping, field: str) -> Optional[Any]:
    """Value of ``field`` in ``node``, or None when absent."""
    hit = find_field(node, field)
    return hit[1] if hit else None


def has_field(node: Mapping, field: str) -> bool:
    return find_field(node, field) is not None
