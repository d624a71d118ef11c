"""
Override Applier

Applies one path-addressed field mutation to the plain-mapping form of a
resume and returns a new document (copy-on-write through path_accessor).

Operations:
- set: write value at path, creating missing objects on the way. Arrays are
  replaced wholesale, never merged.
- add: append value to the array at path. A missing or non-array field is
  replaced by a new one-element array.
- remove: on an array, drop every element equal to value; on any other field,
  delete the field (value ignored). A missing path is a no-op.

`set` on the reserved path `experience_order` reorders experience entries by
id instead of writing a field.

Values written into the document are deep-copied so a resolved document never
shares containers with the variant that produced it.
"""

import copy
import json
from typing import Any, Dict, Iterable, List, Mapping

from prism.contexts.modeling.defaults import EXPERIENCE_ORDER_PATH
from prism.contexts.modeling.resume_data_structure import (
    AwardEntry,
    CertificationEntry,
    EducationEntry,
    ExperienceEntry,
)
from prism.contexts.modeling.variant_data_structure import (
    AddOverride,
    Override,
    RemoveOverride,
    SetOverride,
)
from prism.contexts.resolution.logger import _log_debug
from prism.contexts.resolution.path_accessor import MISSING, update_path

Document = Dict[str, Any]

# Record lists whose entries are compared in their normalized form by `remove`
RECORD_SECTIONS = {
    "experience": ExperienceEntry,
    "education": EducationEntry,
    "awards": AwardEntry,
    "certifications": CertificationEntry,
}


def canonical_json(value: Any) -> str:
    """Serialize a value so that deep-equal values give identical text."""
    return json.dumps(value, sort_keys=True, ensure_ascii=False, default=str)


def reorder_experience(experience: List[Dict[str, Any]], order: Iterable[str]) -> List[Dict[str, Any]]:
    """
    Reorder experience entries by id.

    Listed ids come first in the given order; unknown ids are ignored;
    entries not listed follow in their current order.

    Examples:
        >>> entries = [{"id": "a"}, {"id": "b"}, {"id": "c"}]
        >>> [e["id"] for e in reorder_experience(entries, ["c", "x", "a"])]
        ['c', 'a', 'b']
    """
    by_id = {entry.get("id"): entry for entry in experience}
    reordered = []
    for entry_id in order:
        if entry_id in by_id:
            reordered.append(by_id.pop(entry_id))
    reordered.extend(entry for entry in experience if entry.get("id") in by_id)
    return reordered


def _set(document: Document, override: SetOverride) -> Document:
    if override.path == EXPERIENCE_ORDER_PATH:
        result = dict(document)
        result["experience"] = reorder_experience(document.get("experience", []), override.value)
        return result

    return update_path(document, override.path, lambda current: copy.deepcopy(override.value))


def _add(document: Document, override: AddOverride) -> Document:
    def append(current: Any) -> List[Any]:
        items = list(current) if isinstance(current, list) else []
        items.append(copy.deepcopy(override.value))
        return items

    return update_path(document, override.path, append)


def normalize_record(path: str, value: Any) -> Any:
    """
    Bring a record into the form the document stores it in.

    Entries of the record sections are read back through their data structure,
    so a value written the way a YAML file stores it (missing `location`,
    numeric `year`, ...) compares equal to the stored entry. Other paths and
    non-mapping values are returned as they are.

    Raises:
        InvalidDocumentError: If value is a mapping that isn't a valid entry
    """
    entry_type = RECORD_SECTIONS.get(path)
    if entry_type is None or not isinstance(value, Mapping):
        return value
    return entry_type.from_dict(value, path).to_dict()


def _remove(document: Document, override: RemoveOverride) -> Document:
    """
    Remove matching elements, or the whole field when it isn't an array.

    Elements match by canonical JSON; on experience, education, awards and
    certifications both sides are normalized first (see normalize_record).
    """
    target = canonical_json(normalize_record(override.path, override.value))

    def remove(current: Any) -> Any:
        if current is MISSING:
            return MISSING
        if isinstance(current, list):
            return [item for item in current if canonical_json(normalize_record(override.path, item)) != target]
        return MISSING

    return update_path(document, override.path, remove, create_missing=False)


OVERRIDE_HANDLERS = {
    SetOverride: _set,
    AddOverride: _add,
    RemoveOverride: _remove,
}


def apply_override(document: Document, override: Override) -> Document:
    """
    Apply one override to a document.

    Args:
        document: Plain-mapping resume (not modified)
        override: Typed override from a VariantSpec

    Returns:
        New document with the override applied

    Raises:
        PathConflictError: If the path runs through an array or scalar
        TypeError: If override isn't one of the known override classes
    """
    handler = OVERRIDE_HANDLERS.get(type(override))
    if handler is None:
        raise TypeError(f"Unsupported override: {override!r}")

    result = handler(document, override)
    _log_debug(f"{override.operation} {override.path}")
    return result


def apply_overrides(document: Document, overrides: Iterable[Override]) -> Document:
    """Fold apply_override over overrides in order."""
    for override in overrides:
        document = apply_override(document, override)
    return document
