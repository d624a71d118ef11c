"""
Path Accessor

Resolves dot-separated field paths (e.g. "skills.primary") against the
plain-mapping form of a resume document.

Documents are trees of three node kinds: objects (dicts), arrays (lists) and
scalars (everything else). Paths only step through objects; there are no
array-index segments, so a path always addresses a whole field.

Reads return a PathLookup describing the outcome (ok / not found / conflict)
instead of raising. Writes are copy-on-write: every object on the path is
shallow-copied, the input document is never touched, and a write that would
have to step through an array or scalar raises PathConflictError.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from prism.contexts.resolution.exceptions import PathConflictError


class NodeKind(str, Enum):
    OBJECT = "object"
    ARRAY = "array"
    SCALAR = "scalar"


class LookupStatus(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"


class _Missing:
    """Marker for an absent field (distinct from a field holding None)."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


def node_kind(value: Any) -> NodeKind:
    """Classify a document value as object, array or scalar."""
    if isinstance(value, dict):
        return NodeKind.OBJECT
    if isinstance(value, list):
        return NodeKind.ARRAY
    return NodeKind.SCALAR


@dataclass(frozen=True)
class PathLookup:
    """
    Outcome of reading a path.

    Attributes:
        status: OK, NOT_FOUND or CONFLICT
        path: The path that was read
        value: Value found (MISSING unless status is OK)
        stopped_at: Path prefix where traversal stopped (NOT_FOUND / CONFLICT)
        found_kind: Kind of the value blocking traversal (CONFLICT only)
    """

    status: LookupStatus
    path: str
    value: Any = MISSING
    stopped_at: Optional[str] = None
    found_kind: Optional[NodeKind] = None

    @property
    def ok(self) -> bool:
        return self.status is LookupStatus.OK

    @property
    def kind(self) -> Optional[NodeKind]:
        """Kind of the value found, None unless the lookup succeeded."""
        return node_kind(self.value) if self.ok else None


def split_path(path: str) -> List[str]:
    """
    Split a dot-separated path into field names.

    Raises:
        ValueError: If the path is empty or has an empty segment ("a..b", ".a")
    """
    segments = path.split(".")
    if not path or any(not segment for segment in segments):
        raise ValueError(f"Invalid path '{path}'")
    return segments


def read_path(document: Dict[str, Any], path: str) -> PathLookup:
    """
    Read the value at a path.

    Args:
        document: Plain-mapping document
        path: Dot-separated field path

    Returns:
        PathLookup with status OK and the value, NOT_FOUND with the prefix
        that was missing, or CONFLICT with the prefix that isn't an object

    Examples:
        >>> read_path({"skills": {"primary": ["Go"]}}, "skills.primary").value
        ['Go']
        >>> read_path({"headline": "Lead"}, "headline.text").status
        <LookupStatus.CONFLICT: 'conflict'>
    """
    segments = split_path(path)
    current: Any = document

    for depth, segment in enumerate(segments):
        prefix = ".".join(segments[: depth + 1])
        if not isinstance(current, dict):
            parent = ".".join(segments[:depth])
            return PathLookup(LookupStatus.CONFLICT, path, stopped_at=parent, found_kind=node_kind(current))
        if segment not in current:
            return PathLookup(LookupStatus.NOT_FOUND, path, stopped_at=prefix)
        current = current[segment]

    return PathLookup(LookupStatus.OK, path, value=current)


def update_path(
    document: Dict[str, Any],
    path: str,
    updater: Callable[[Any], Any],
    create_missing: bool = True,
) -> Dict[str, Any]:
    """
    Return a copy of document with the field at path replaced by updater(current).

    updater receives the current value (or MISSING) and returns the new value;
    returning MISSING deletes the field.

    Args:
        document: Plain-mapping document (not modified)
        path: Dot-separated field path
        updater: Function computing the new leaf value
        create_missing: Create absent intermediate objects. When False, an
            absent intermediate leaves the document unchanged.

    Returns:
        New document sharing untouched subtrees with the input

    Raises:
        PathConflictError: If an intermediate value is an array or scalar
    """
    segments = split_path(path)
    return _update_node(document, segments, 0, updater, create_missing, path)


def _update_node(
    node: Dict[str, Any],
    segments: List[str],
    depth: int,
    updater: Callable[[Any], Any],
    create_missing: bool,
    path: str,
) -> Dict[str, Any]:
    key = segments[depth]

    if depth == len(segments) - 1:
        new_value = updater(node.get(key, MISSING))
        updated = dict(node)
        if new_value is MISSING:
            updated.pop(key, None)
        else:
            updated[key] = new_value
        return updated

    child = node.get(key, MISSING)
    if child is MISSING:
        if not create_missing:
            return node
        child = {}
    elif not isinstance(child, dict):
        raise PathConflictError(path, ".".join(segments[: depth + 1]), node_kind(child).value)

    updated = dict(node)
    updated[key] = _update_node(child, segments, depth + 1, updater, create_missing, path)
    return updated
