"""
Curriculum Indexer

Scans an arbitrarily shaped curriculum document (a flat list of courses,
semesters keyed by name or number, blocks nested inside blocks, ...) and
builds code/name lookup tables over the courses it finds.

The walk classifies every node into a small closed set of roles and threads
an immutable TraversalContext down the tree:

    COURSE              mapping with a scalar name- or code-like field
    SEMESTER_CONTAINER  mapping with a semester field but no course fields
    CONTAINER           any other mapping, or a list/tuple
    SCALAR              everything else (ignored)

A COURSE may also contain further courses (a named semester block); it is
indexed and its children are still visited.
"""

import logging
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Mapping, NamedTuple, Optional

from .constants import (
    DEFAULT_PLAN_SEMESTERS,
    MAX_TRAVERSAL_DEPTH,
    SEMESTER_KEY_RANGE,
    SEMESTER_KEY_TOKENS,
)
from .contracts import CurriculumEntry, CurriculumIndex
from .field_detection import field_value, has_field
from .normalizer import normalize_name, roman_to_int, to_int

logger = logging.getLogger(__name__)


class NodeRole(str, Enum):
    COURSE = "course"
    SEMESTER_CONTAINER = "semester_container"
    CONTAINER = "container"
    SCALAR = "scalar"


class TraversalContext(NamedTuple):
    """Immutable state passed from a node to its children."""
    semester: int = 0
    depth: int = 0
    ancestors: FrozenSet[int] = frozenset()

    def descend(self, node: Any, semester: int) -> "TraversalContext":
        return TraversalContext(
            semester=semester,
            depth=self.depth + 1,
            ancestors=self.ancestors | {id(node)},
        )


def classify_node(node: Any) -> NodeRole:
    """Infer the role of a curriculum node."""
    if isinstance(node, Mapping):
        if has_field(node, "name") or has_field(node, "code"):
            return NodeRole.COURSE
        if has_field(node, "semester"):
            return NodeRole.SEMESTER_CONTAINER
        return NodeRole.CONTAINER
    if isinstance(node, (list, tuple)):
        return NodeRole.CONTAINER
    return NodeRole.SCALAR


def node_semester(node: Mapping) -> Optional[int]:
    """Positive semester declared by a field of the node itself."""
    semester = to_int(field_value(node, "semester"))
    if semester and semester > 0:
        return semester
    return None


def semester_from_key(key: Any) -> Optional[int]:
    """
    Semester implied by a container key.

    "3" -> 3, "Semestre 4" -> 4, "nivel_2" -> 2, "Semestre IV" -> 4,
    "asignaturas" -> None. Numbers outside SEMESTER_KEY_RANGE are not
    semesters ("2023", "bloque_2023").
    """
    low, high = SEMESTER_KEY_RANGE
    if isinstance(key, int) and not isinstance(key, bool):
        return key if low <= key <= high else None

    text = str(key).strip()
    if text.isdigit():
        number = int(text)
        return number if low <= number <= high else None

    normalized = normalize_name(text)
    if not any(token in normalized.replace(" ", "") for token in SEMESTER_KEY_TOKENS):
        return None

    number = to_int(normalized)
    if number is not None:
        return number if low <= number <= high else None
    for token in reversed(normalized.split()):
        roman = roman_to_int(token)
        if roman:
            return roman
    return None


def extract_entry(node: Mapping, inherited_semester: int) -> Optional[CurriculumEntry]:
    """Build a CurriculumEntry from a COURSE node, or None without name and code."""
    name = field_value(node, "name")
    code = field_value(node, "code")
    name_text = str(name).strip() if name is not None else ""
    code_text = _code_text(code)
    if not name_text and not code_text:
        return None

    semester = node_semester(node) or inherited_semester
    return CurriculumEntry(
        name=name_text,
        code=code_text,
        semester=semester or 0,
        source=node,
    )


def _code_text(code: Any) -> str:
    if code is None:
        return ""
    if isinstance(code, float) and code.is_integer():
        code = int(code)
    return str(code).strip()


class _IndexBuilder:
    """Accumulates entries for build_index."""

    def __init__(self):
        self.by_code: Dict[str, CurriculumEntry] = {}
        self.by_name: Dict[str, CurriculumEntry] = {}
        self.all_entries: List[CurriculumEntry] = []
        self._seen_codes = set()
        self._seen_names = set()

    def add(self, entry: CurriculumEntry) -> None:
        norm_code = entry.normalized_code
        norm_name = entry.normalized_name

        # Later entries overwrite the value; the key keeps its first position
        if norm_code:
            self.by_code[norm_code] = entry
        if norm_name:
            self.by_name[norm_name] = entry

        duplicate = (norm_code and norm_code in self._seen_codes) or (
            norm_name and norm_name in self._seen_names
        )
        if norm_code:
            self._seen_codes.add(norm_code)
        if norm_name:
            self._seen_names.add(norm_name)
        if not duplicate:
            self.all_entries.append(entry)

    def visit(self, node: Any, context: TraversalContext) -> None:
        if context.depth > MAX_TRAVERSAL_DEPTH or id(node) in context.ancestors:
            return

        if isinstance(node, CurriculumEntry):
            node = node.model_dump()

        role = classify_node(node)
        if role == NodeRole.SCALAR:
            return

        if isinstance(node, (list, tuple)):
            for item in node:
                self.visit(item, context.descend(node, context.semester))
            return

        semester = node_semester(node) or context.semester

        if role == NodeRole.COURSE:
            entry = extract_entry(node, semester)
            if entry is not None:
                self.add(entry)

        for key, value in node.items():
            if not isinstance(value, (Mapping, list, tuple, CurriculumEntry)):
                continue
            child_semester = semester_from_key(key) or semester
            self.visit(value, context.descend(node, child_semester))

    def build(self) -> CurriculumIndex:
        return CurriculumIndex(
            by_code=self.by_code,
            by_name=self.by_name,
            all_entries=self.all_entries,
        )


def build_index(curriculum_document: Any) -> CurriculumIndex:
    """
    Build the code/name index of a curriculum document.

    Args:
        curriculum_document: Parsed JSON-like structure of any shape

    Returns:
        CurriculumIndex; empty when the document holds no recognizable course
    """
    builder = _IndexBuilder()
    if curriculum_document is not None:
        builder.visit(curriculum_document, TraversalContext())

    index = builder.build()
    logger.debug(
        f"Curriculum index built: {index.course_count} courses, "
        f"{len(index.by_code)} codes, {len(index.by_name)} names"
    )
    return index


def _plan_document(curriculum_document: Any, plan_id: str) -> Any:
    """Sub-document for ``plan_id`` when the document is keyed by plan."""
    if isinstance(curriculum_document, Mapping):
        for key in (plan_id, "default"):
            if key in curriculum_document and isinstance(curriculum_document[key], (Mapping, list)):
                return curriculum_document[key]
    return curriculum_document


def resolve_plan_max_semester(
    curriculum_document: Any,
    index: Optional[CurriculumIndex] = None,
    plan_id: str = "default",
) -> int:
    """
    Number of semesters in the plan.

    Priority: an explicit total-semesters field (plan sub-document first,
    then the document root), else the highest semester seen while indexing,
    else DEFAULT_PLAN_SEMESTERS.
    """
    for document in (_plan_document(curriculum_document, plan_id), curriculum_document):
        if isinstance(document, Mapping):
            declared = to_int(field_value(document, "total_semesters"))
            if declared and declared > 0:
                return declared

    if index is None and curriculum_document is not None:
        index = build_index(curriculum_document)
    if index is not None and index.max_semester > 0:
        return index.max_semester
    return DEFAULT_PLAN_SEMESTERS


def describe_index(index: CurriculumIndex) -> Dict[str, Any]:
    """Small summary used in logs and diagnostics."""
    semesters = sorted({entry.semester for entry in index.all_entries if entry.semester})
    return {
        "courses": index.course_count,
        "codes": len(index.by_code),
        "names": len(index.by_name),
        "semesters": semesters,
        "without_code": sum(1 for entry in index.all_entries if not entry.normalized_code),
    }
