"""
Variant Specification Structure

A variant is a declarative overlay on the master resume: section visibility,
an ordered list of rules (filters and limits) and an ordered list of
overrides (path-addressed field mutations). It never stores resolved content.

Rules and overrides are closed sets of small frozen dataclasses, one per kind,
each carrying only the payload that kind needs. Their wire form is the
{type, value} / {path, operation, value} mapping used in YAML and JSON files.

A VariantSpec is checked when it is built (from the wire form or directly from
the typed classes) and again before resolution: every problem is collected and
reported together in a VariantValidationError.
"""

import copy
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, ClassVar, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from prism.contexts.modeling.defaults import (
    EXPERIENCE_ORDER_PATH,
    VARIANT_SECTION_NAMES,
    sections_to_project,
    with_default_section_settings,
)
from prism.contexts.modeling.exceptions import SpecificationIssue, VariantValidationError

# YYYY, YYYY-MM or YYYY-MM-DD
PARTIAL_DATE_PATTERN = re.compile(r"^(\d{4})(?:-(\d{2}))?(?:-(\d{2}))?$")


def parse_partial_date(text: str) -> date:
    """
    Parse a possibly partial ISO date, anchoring it to the start of the period.

    Args:
        text: "2021", "2021-12" or "2021-12-15"

    Returns:
        date for the first day the text can denote

    Raises:
        ValueError: If text isn't one of the accepted forms or isn't a real date

    Examples:
        >>> parse_partial_date("2021-12")
        datetime.date(2021, 12, 1)
    """
    match = PARTIAL_DATE_PATTERN.match(text.strip())
    if not match:
        raise ValueError(f"Unrecognised date '{text}' (expected YYYY, YYYY-MM or YYYY-MM-DD)")

    year, month, day = match.groups()
    if day is not None and month is None:
        raise ValueError(f"Unrecognised date '{text}'")
    return date(int(year), int(month or 1), int(day or 1))


# Rules


@dataclass(frozen=True)
class IncludeTags:
    """Keep only experience entries sharing at least one tag with `tags`."""

    tags: Tuple[str, ...]
    kind: ClassVar[str] = "include_tags"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, "value": list(self.tags)}


@dataclass(frozen=True)
class ExcludeTags:
    """Drop experience entries sharing at least one tag with `tags`."""

    tags: Tuple[str, ...]
    kind: ClassVar[str] = "exclude_tags"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, "value": list(self.tags)}


@dataclass(frozen=True)
class MaxBullets:
    """Truncate experience bullets, summary and key achievements to their first `n` items."""

    n: int
    kind: ClassVar[str] = "max_bullets"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, "value": self.n}


@dataclass(frozen=True)
class SectionOrder:
    """Requested section order. Accepted and carried, but resolution leaves documents untouched."""

    sections: Tuple[str, ...]
    kind: ClassVar[str] = "section_order"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, "value": list(self.sections)}


@dataclass(frozen=True)
class DateRange:
    """Keep experience entries whose start date falls in [start, end] inclusive."""

    start: str
    end: str
    kind: ClassVar[str] = "date_range"

    @property
    def start_date(self) -> date:
        return parse_partial_date(self.start)

    @property
    def end_date(self) -> date:
        return parse_partial_date(self.end)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, "value": {"start": self.start, "end": self.end}}


Rule = Union[IncludeTags, ExcludeTags, MaxBullets, SectionOrder, DateRange]

RULE_TYPES = tuple(cls.kind for cls in (IncludeTags, ExcludeTags, MaxBullets, SectionOrder, DateRange))


# Overrides


@dataclass(frozen=True)
class SetOverride:
    """Write `value` at `path`, replacing whatever is there (arrays included)."""

    path: str
    value: Any
    operation: ClassVar[str] = "set"

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "operation": self.operation, "value": copy.deepcopy(self.value)}


@dataclass(frozen=True)
class AddOverride:
    """Append `value` to the array at `path` (creating the array if needed)."""

    path: str
    value: Any
    operation: ClassVar[str] = "add"

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "operation": self.operation, "value": copy.deepcopy(self.value)}


@dataclass(frozen=True)
class RemoveOverride:
    """Remove elements equal to `value` from the array at `path`, or delete a non-array field."""

    path: str
    value: Any = None
    operation: ClassVar[str] = "remove"

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "operation": self.operation, "value": copy.deepcopy(self.value)}


Override = Union[SetOverride, AddOverride, RemoveOverride]

OVERRIDE_OPERATIONS = ("set", "add", "remove")
OVERRIDE_CLASSES = (SetOverride, AddOverride, RemoveOverride)


def _is_text_list(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value)


def rule_problem(rule: Any) -> Optional[str]:
    """
    Check a typed rule's payload.

    Returns:
        Description of what is wrong, or None if the rule is well formed
    """
    if isinstance(rule, (IncludeTags, ExcludeTags)):
        if not _is_text_list(rule.tags):
            return "value must be a list of tag names"
    elif isinstance(rule, MaxBullets):
        if isinstance(rule.n, bool) or not isinstance(rule.n, int) or rule.n < 0:
            return f"value must be a non-negative integer, got {rule.n!r}"
    elif isinstance(rule, SectionOrder):
        if not _is_text_list(rule.sections):
            return "value must be a list of section names"
    elif isinstance(rule, DateRange):
        for bound in ("start", "end"):
            text = getattr(rule, bound)
            if not isinstance(text, str) or not text.strip():
                return f"'{bound}' is required"
        try:
            start, end = rule.start_date, rule.end_date
        except ValueError as e:
            return str(e)
        if start > end:
            return f"start {rule.start} is after end {rule.end}"
    else:
        return f"not a rule: {rule!r}"
    return None


def override_problem(override: Any) -> Optional[str]:
    """
    Check a typed override's path (and value, for the reserved experience_order path).

    Returns:
        Description of what is wrong, or None if the override is well formed
    """
    if not isinstance(override, OVERRIDE_CLASSES):
        return f"not an override: {override!r}"

    path = override.path
    if not isinstance(path, str) or not path:
        return "path must be a non-empty dot-separated string"
    if any(not segment for segment in path.split(".")):
        return f"path '{path}' has an empty segment"

    if path == EXPERIENCE_ORDER_PATH:
        if not isinstance(override, SetOverride):
            return f"'{EXPERIENCE_ORDER_PATH}' only supports 'set'"
        if not _is_text_list(override.value):
            return f"'{EXPERIENCE_ORDER_PATH}' value must be a list of experience ids"
    return None


def section_problem(name: Any, enabled: Any) -> Optional[str]:
    if name not in VARIANT_SECTION_NAMES:
        return "unknown section"
    if not isinstance(enabled, bool):
        return f"'enabled' must be true or false, got {enabled!r}"
    return None


def _strip(text: Any) -> Any:
    return text.strip() if isinstance(text, str) else text


def _parse_rule(data: Any, index: int, issues: List[SpecificationIssue]) -> Optional[Rule]:
    """Build one rule from its wire form, recording an issue instead on failure."""

    def reject(kind: str, message: str) -> None:
        issues.append(SpecificationIssue("rule", index, kind, message))

    if not isinstance(data, Mapping):
        reject("?", f"expected a mapping with 'type' and 'value', got {type(data).__name__}")
        return None

    rule_type = data.get("type")
    value = data.get("value")

    if rule_type not in RULE_TYPES:
        reject(str(rule_type), f"unknown rule type (expected one of: {', '.join(RULE_TYPES)})")
        return None

    if rule_type in ("include_tags", "exclude_tags", "section_order"):
        if not isinstance(value, list):
            reject(rule_type, "value must be a list")
            return None
        if rule_type == "include_tags":
            rule = IncludeTags(tuple(value))
        elif rule_type == "exclude_tags":
            rule = ExcludeTags(tuple(value))
        else:
            rule = SectionOrder(tuple(value))
    elif rule_type == "max_bullets":
        rule = MaxBullets(value)
    else:
        if not isinstance(value, Mapping):
            reject(rule_type, "value must be a mapping with 'start' and 'end'")
            return None
        rule = DateRange(start=_strip(value.get("start")), end=_strip(value.get("end")))

    problem = rule_problem(rule)
    if problem:
        reject(rule_type, problem)
        return None
    return rule


def _parse_override(data: Any, index: int, issues: List[SpecificationIssue]) -> Optional[Override]:
    """Build one override from its wire form, recording an issue instead on failure."""

    def reject(kind: str, message: str) -> None:
        issues.append(SpecificationIssue("override", index, kind, message))

    if not isinstance(data, Mapping):
        reject("?", f"expected a mapping with 'path', 'operation' and 'value', got {type(data).__name__}")
        return None

    operation = data.get("operation")
    path = data.get("path")

    if operation not in OVERRIDE_OPERATIONS:
        reject(str(operation), f"unknown operation (expected one of: {', '.join(OVERRIDE_OPERATIONS)})")
        return None

    if operation in ("set", "add") and "value" not in data:
        reject(operation, f"'{operation}' on '{path}' needs a value")
        return None

    value = copy.deepcopy(data.get("value"))
    if operation == "set":
        override = SetOverride(path, value)
    elif operation == "add":
        override = AddOverride(path, value)
    else:
        override = RemoveOverride(path, value)

    problem = override_problem(override)
    if problem:
        reject(operation, problem)
        return None
    return override


def _parse_section_settings(data: Any, issues: List[SpecificationIssue]) -> Dict[str, bool]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        issues.append(SpecificationIssue("section", None, "?", "section_settings must be a mapping"))
        return {}

    settings = {}
    for name, entry in data.items():
        # Accept both `summary: {enabled: true}` and the shorthand `summary: true`
        enabled = entry.get("enabled") if isinstance(entry, Mapping) else entry
        problem = section_problem(name, enabled)
        if problem:
            issues.append(SpecificationIssue("section", None, str(name), problem))
            continue
        settings[name] = enabled
    return settings


def find_issues(
    rules: Iterable[Any], overrides: Iterable[Any], section_settings: Mapping[Any, Any]
) -> List[SpecificationIssue]:
    """Check already-typed rules, overrides and section settings, returning every problem found."""
    issues = []
    for index, rule in enumerate(rules):
        problem = rule_problem(rule)
        if problem:
            issues.append(SpecificationIssue("rule", index, getattr(rule, "kind", type(rule).__name__), problem))
    for index, override in enumerate(overrides):
        problem = override_problem(override)
        if problem:
            kind = getattr(override, "operation", type(override).__name__)
            issues.append(SpecificationIssue("override", index, kind, problem))
    for name, enabled in section_settings.items():
        problem = section_problem(name, enabled)
        if problem:
            issues.append(SpecificationIssue("section", None, str(name), problem))
    return issues


@dataclass
class VariantSpec:
    """
    Named overlay describing how to derive a targeted resume from the master.

    Attributes:
        id: Variant identifier
        name: Display name
        description: Free-text description
        section_settings: Explicit section visibility (absent sections use defaults)
        rules: Filters and limits, applied in order
        overrides: Field mutations, applied in order after all rules
        template_id: Presentation template chosen by the UI (not used by resolution)
        created_at: Opaque creation timestamp
        updated_at: Opaque modification timestamp
    """

    id: str = ""
    name: str = ""
    description: str = ""
    section_settings: Dict[str, bool] = field(default_factory=dict)
    rules: List[Rule] = field(default_factory=list)
    overrides: List[Override] = field(default_factory=list)
    template_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Check the typed rules, overrides and section settings.

        Runs on construction; resolution runs it again in case the lists were
        changed afterwards.

        Raises:
            VariantValidationError: Listing every malformed rule, override and
                section setting (by index and kind)
        """
        issues = find_issues(self.rules, self.overrides, self.section_settings)
        if issues:
            raise VariantValidationError(self.id, issues)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "VariantSpec":
        """
        Read and validate a variant specification.

        Accepts `section_settings` or the camelCase `sectionSettings` key.

        Args:
            data: Wire-form mapping

        Returns:
            VariantSpec with typed rules and overrides

        Raises:
            VariantValidationError: Listing every malformed rule, override and
                section setting (by index and kind)
        """
        issues: List[SpecificationIssue] = []

        if not isinstance(data, Mapping):
            raise VariantValidationError(
                "", [SpecificationIssue("variant", None, "?", "variant must be a mapping")]
            )

        variant_id = str(data.get("id") or "")

        raw_rules = data.get("rules") or []
        raw_overrides = data.get("overrides") or []
        if not isinstance(raw_rules, list):
            issues.append(SpecificationIssue("variant", None, "rules", "rules must be a list"))
            raw_rules = []
        if not isinstance(raw_overrides, list):
            issues.append(SpecificationIssue("variant", None, "overrides", "overrides must be a list"))
            raw_overrides = []

        rules = [_parse_rule(item, index, issues) for index, item in enumerate(raw_rules)]
        overrides = [_parse_override(item, index, issues) for index, item in enumerate(raw_overrides)]
        section_data = data.get("section_settings", data.get("sectionSettings"))
        section_settings = _parse_section_settings(section_data, issues)

        if issues:
            raise VariantValidationError(variant_id, issues)

        return cls(
            id=variant_id,
            name=str(data.get("name") or ""),
            description=str(data.get("description") or ""),
            section_settings=section_settings,
            rules=rules,
            overrides=overrides,
            template_id=data.get("template_id", data.get("templateId")),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "section_settings": {
                name: {"enabled": enabled} for name, enabled in self.section_settings.items()
            },
            "rules": [rule.to_dict() for rule in self.rules],
            "overrides": [override.to_dict() for override in self.overrides],
            "template_id": self.template_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @property
    def effective_section_settings(self) -> Dict[str, bool]:
        """Section visibility with defaults filled in for unspecified sections."""
        return with_default_section_settings(self.section_settings)

    @property
    def projected_section_settings(self) -> Dict[str, bool]:
        """Sections whose visibility resolution changes: explicit entries plus the hidden-by-default ones."""
        return sections_to_project(self.section_settings)
