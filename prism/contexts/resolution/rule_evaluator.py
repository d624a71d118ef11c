"""
Rule Evaluator

Applies one variant rule to the plain-mapping form of a resume and returns a
new document. Input documents are never modified: filtered lists are new
lists, and entries whose bullets are truncated are new dicts.

Rule semantics:
- include_tags: keep experience entries sharing any tag with the rule (OR).
  Entries without tags are dropped. An empty tag list filters nothing.
- exclude_tags: drop experience entries sharing any tag with the rule.
  An empty tag list filters nothing.
- max_bullets: keep the first n experience bullets, summary bullets and key
  achievements (prefix, not selection).
- section_order: accepted but inert; the document passes through unchanged.
- date_range: keep experience entries whose start date is within
  [start, end]. End dates are ignored. Entries with no or unreadable start
  date are kept.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional

from prism.contexts.modeling.variant_data_structure import (
    DateRange,
    ExcludeTags,
    IncludeTags,
    MaxBullets,
    Rule,
    SectionOrder,
    parse_partial_date,
)
from prism.contexts.resolution.logger import _log_debug

Document = Dict[str, Any]

BULLET_LISTS = ("summary", "key_achievements")


def shares_tag(entry_tags: Optional[Iterable[str]], tags: Iterable[str]) -> bool:
    """True if any of entry_tags is among tags."""
    wanted = set(tags)
    return any(tag in wanted for tag in (entry_tags or []))


def starts_within(date_start: Optional[str], rule: DateRange) -> bool:
    """
    Check an experience start date against a date_range rule.

    Missing or unreadable start dates count as within range so that entries
    are never dropped because of data-entry gaps.
    """
    if not date_start:
        return True
    try:
        start = parse_partial_date(date_start)
    except ValueError:
        _log_debug(f"Keeping entry with unreadable start date '{date_start}'")
        return True
    return rule.start_date <= start <= rule.end_date


def _with_experience(document: Document, experience: List[Dict[str, Any]]) -> Document:
    result = dict(document)
    result["experience"] = experience
    return result


def _include_tags(document: Document, rule: IncludeTags) -> Document:
    if not rule.tags:
        return dict(document)
    kept = [entry for entry in document.get("experience", []) if shares_tag(entry.get("tags"), rule.tags)]
    return _with_experience(document, kept)


def _exclude_tags(document: Document, rule: ExcludeTags) -> Document:
    if not rule.tags:
        return dict(document)
    kept = [entry for entry in document.get("experience", []) if not shares_tag(entry.get("tags"), rule.tags)]
    return _with_experience(document, kept)


def _max_bullets(document: Document, rule: MaxBullets) -> Document:
    result = _with_experience(
        document,
        [
            {**entry, "bullets": list(entry.get("bullets") or [])[: rule.n]}
            for entry in document.get("experience", [])
        ],
    )
    for key in BULLET_LISTS:
        if isinstance(document.get(key), list):
            result[key] = document[key][: rule.n]
    return result


def _section_order(document: Document, rule: SectionOrder) -> Document:
    # TODO: apply the order to the section map once export stops relying on rules being inert
    _log_debug(f"section_order {list(rule.sections)} recorded; document order unchanged")
    return dict(document)


def _date_range(document: Document, rule: DateRange) -> Document:
    kept = [entry for entry in document.get("experience", []) if starts_within(entry.get("date_start"), rule)]
    return _with_experience(document, kept)


RULE_HANDLERS: Dict[type, Callable[[Document, Any], Document]] = {
    IncludeTags: _include_tags,
    ExcludeTags: _exclude_tags,
    MaxBullets: _max_bullets,
    SectionOrder: _section_order,
    DateRange: _date_range,
}


def apply_rule(document: Document, rule: Rule) -> Document:
    """
    Apply one rule to a document.

    Args:
        document: Plain-mapping resume (not modified)
        rule: Typed rule from a VariantSpec

    Returns:
        New document with the rule applied

    Raises:
        TypeError: If rule isn't one of the known rule classes
    """
    handler = RULE_HANDLERS.get(type(rule))
    if handler is None:
        raise TypeError(f"Unsupported rule: {rule!r}")

    before = len(document.get("experience", []))
    result = handler(document, rule)
    _log_debug(f"{rule.kind}: experience {before} -> {len(result.get('experience', []))}")
    return result


def apply_rules(document: Document, rules: Iterable[Rule]) -> Document:
    """Fold apply_rule over rules in order; each rule sees the previous rule's output."""
    for rule in rules:
        document = apply_rule(document, rule)
    return document
