"""
Diff Engine

Summarizes what a variant changed between the master resume and a resolved
resume, for a human to sanity-check. This is a summary rather than a full
structural diff:

- Sections switched on/off or moved in the section map
- Experience entries added, removed (with the likely reason) or modified
- Headline change, summary and key-achievement count changes
- Bullet and entry totals
- One line per rule (with its impact measured on the master) and per override

The flat added/removed/modified string lists give the short form; the
structured fields carry the detail.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from prism.contexts.modeling.defaults import EXPERIENCE_ORDER_PATH
from prism.contexts.modeling.resume_data_structure import ExperienceEntry, MasterResume
from prism.contexts.modeling.variant_data_structure import (
    DateRange,
    ExcludeTags,
    IncludeTags,
    MaxBullets,
    Override,
    Rule,
    SectionOrder,
    SetOverride,
    VariantSpec,
)
from prism.contexts.resolution.rule_evaluator import shares_tag, starts_within
from prism.utils.report_formatter import Column, TableFormatter, format_delta


@dataclass
class SectionChanges:
    added: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    reordered: List[str] = field(default_factory=list)


@dataclass
class ExperienceRemoval:
    id: str
    title: str
    company: str
    reason: str


@dataclass
class ExperienceModification:
    id: str
    title: str
    company: str
    changes: List[str] = field(default_factory=list)


@dataclass
class ExperienceChanges:
    """
    Experience-level differences, matched by entry id.

    Attributes:
        added: Labels of entries only in the resolved document
        removed: Entries only in the master, with reasons
        modified: Entries in both whose bullets, title or company differ
        reordered: True if entries present in both appear in a different order
        original_order: "Company - Title" labels in master order
        new_order: "Company - Title" labels in resolved order
    """

    added: List[str] = field(default_factory=list)
    removed: List[ExperienceRemoval] = field(default_factory=list)
    modified: List[ExperienceModification] = field(default_factory=list)
    reordered: bool = False
    original_order: List[str] = field(default_factory=list)
    new_order: List[str] = field(default_factory=list)


@dataclass
class HeadlineChange:
    changed: bool
    original: str
    modified: str


@dataclass
class CountChange:
    changed: bool
    original_count: int
    modified_count: int
    difference: int

    @classmethod
    def between(cls, original: List[Any], modified: List[Any]) -> "CountChange":
        return cls(
            changed=len(original) != len(modified),
            original_count=len(original),
            modified_count=len(modified),
            difference=len(modified) - len(original),
        )


@dataclass
class ContentChanges:
    headline: HeadlineChange
    summary: CountChange
    key_achievements: CountChange


@dataclass
class DiffStats:
    master_experiences: int
    resolved_experiences: int
    experience_reduction: int
    total_bullets_original: int
    total_bullets_resolved: int
    bullet_reduction: int


@dataclass
class RuleImpact:
    type: str
    description: str
    impact: str


@dataclass
class OverrideDescription:
    path: str
    operation: str
    description: str


@dataclass
class DiffReport:
    """
    Differences between a master resume and one of its resolved variants.

    Attributes:
        added: Short descriptions of content present only in the resolved document
        removed: Short descriptions of content present only in the master
        modified: Short descriptions of content present in both but changed
        sections: Section map changes
        experiences: Experience entry changes
        content: Headline/summary/key-achievement changes
        stats: Entry and bullet totals
        rules_applied: Rule descriptions (empty without a variant)
        overrides_applied: Override descriptions (empty without a variant)
    """

    added: List[str]
    removed: List[str]
    modified: List[str]
    sections: SectionChanges
    experiences: ExperienceChanges
    content: ContentChanges
    stats: DiffStats
    rules_applied: List[RuleImpact] = field(default_factory=list)
    overrides_applied: List[OverrideDescription] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.modified)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _section_label(name: str) -> str:
    return name.replace("_", " ").title()


def _count_bullets(resume: MasterResume) -> int:
    return sum(len(entry.bullets) for entry in resume.experience)


def compare_sections(master: MasterResume, resolved: MasterResume) -> SectionChanges:
    changes = SectionChanges()
    for name, before in master.sections.items():
        after = resolved.sections.get(name)
        label = _section_label(name)
        if before.enabled and (after is None or not after.enabled):
            changes.removed.append(label)
        elif not before.enabled and after is not None and after.enabled:
            changes.added.append(label)
        elif after is not None and before.order != after.order:
            changes.reordered.append(f"{label} moved from position {before.order} to {after.order}")
    return changes


def explain_removal(entry: ExperienceEntry, variant: Optional[VariantSpec]) -> str:
    """
    Give the most likely reason an experience entry is missing from a variant.

    Rules are checked in order against the entry as it appears in the master;
    the first one that would drop it is reported.
    """
    if variant is None:
        return "Unknown"

    if not variant.effective_section_settings.get("experience", True):
        return "Experience section disabled"

    for rule in variant.rules:
        if isinstance(rule, IncludeTags) and rule.tags and not shares_tag(entry.tags, rule.tags):
            return f"Missing required tags: {', '.join(rule.tags)}"
        if isinstance(rule, ExcludeTags) and shares_tag(entry.tags, rule.tags):
            matched = [tag for tag in entry.tags if tag in rule.tags]
            return f"Excluded by tags: {', '.join(matched)}"
        if isinstance(rule, DateRange) and not starts_within(entry.date_start, rule):
            return f"Outside date range ({rule.start} to {rule.end})"

    for override in variant.overrides:
        if override.path == "experience" or override.path.startswith("experience."):
            return f"Removed by override ({override.operation} {override.path})"

    return "Unknown"


def compare_experience(
    master: MasterResume, resolved: MasterResume, variant: Optional[VariantSpec] = None
) -> ExperienceChanges:
    changes = ExperienceChanges(
        original_order=[entry.label for entry in master.experience],
        new_order=[entry.label for entry in resolved.experience],
    )

    master_by_id = {entry.id: entry for entry in master.experience}
    resolved_by_id = {entry.id: entry for entry in resolved.experience}

    for entry in resolved.experience:
        if entry.id not in master_by_id:
            changes.added.append(entry.label)

    for entry in master.experience:
        if entry.id not in resolved_by_id:
            changes.removed.append(
                ExperienceRemoval(entry.id, entry.title, entry.company, explain_removal(entry, variant))
            )

    kept_in_master_order = [entry_id for entry_id in master_by_id if entry_id in resolved_by_id]
    kept_in_resolved_order = [entry_id for entry_id in resolved_by_id if entry_id in master_by_id]
    changes.reordered = kept_in_master_order != kept_in_resolved_order

    for entry in resolved.experience:
        before = master_by_id.get(entry.id)
        if before is None:
            continue

        entry_changes = []
        reduction = len(before.bullets) - len(entry.bullets)
        if reduction:
            verb = "Reduced" if reduction > 0 else "Added"
            entry_changes.append(f"{verb} {abs(reduction)} bullet points")
        elif before.bullets != entry.bullets:
            entry_changes.append("Bullet text changed")
        if before.title != entry.title:
            entry_changes.append(f'Title changed from "{before.title}" to "{entry.title}"')
        if before.company != entry.company:
            entry_changes.append(f'Company changed from "{before.company}" to "{entry.company}"')

        if entry_changes:
            changes.modified.append(ExperienceModification(entry.id, entry.title, entry.company, entry_changes))

    return changes


def describe_rule(rule: Rule, master: MasterResume) -> RuleImpact:
    """Describe a rule and its effect when applied to the master on its own."""
    total = len(master.experience)

    if isinstance(rule, IncludeTags):
        included = sum(1 for entry in master.experience if not rule.tags or shares_tag(entry.tags, rule.tags))
        return RuleImpact(
            rule.kind,
            f"Include only experiences with tags: {', '.join(rule.tags)}",
            f"{included} of {total} experiences included",
        )
    if isinstance(rule, ExcludeTags):
        excluded = sum(1 for entry in master.experience if shares_tag(entry.tags, rule.tags))
        return RuleImpact(
            rule.kind,
            f"Exclude experiences with tags: {', '.join(rule.tags)}",
            f"{excluded} experiences excluded",
        )
    if isinstance(rule, MaxBullets):
        trimmed = sum(max(0, len(entry.bullets) - rule.n) for entry in master.experience)
        return RuleImpact(
            rule.kind,
            f"Limit bullets to maximum {rule.n} per experience",
            f"{trimmed} bullets removed total",
        )
    if isinstance(rule, SectionOrder):
        return RuleImpact(
            rule.kind,
            f"Reorder sections: {' > '.join(rule.sections)}",
            "Recorded only; section order unchanged",
        )
    if isinstance(rule, DateRange):
        in_range = sum(1 for entry in master.experience if starts_within(entry.date_start, rule))
        return RuleImpact(
            rule.kind,
            f"Filter by date range: {rule.start} to {rule.end}",
            f"{in_range} of {total} experiences in range",
        )
    raise TypeError(f"Unsupported rule: {rule!r}")


def describe_override(override: Override) -> OverrideDescription:
    if isinstance(override, SetOverride):
        if override.path == EXPERIENCE_ORDER_PATH:
            description = f"Reorder experiences: {len(override.value)} positions specified"
        else:
            description = f"Set {override.path} to new value"
    elif override.operation == "add":
        description = f"Add item to {override.path}"
    else:
        description = f"Remove item from {override.path}"
    return OverrideDescription(override.path, override.operation, description)


def generate_diff(
    master: Union[MasterResume, Mapping[str, Any]],
    resolved: Union[MasterResume, Mapping[str, Any]],
    variant: Optional[VariantSpec] = None,
) -> DiffReport:
    """
    Compare a master resume with a resolved resume.

    Args:
        master: Master resume (or its mapping form)
        resolved: Resolved resume (or its mapping form)
        variant: Variant that produced resolved; enables removal reasons and
            rule/override descriptions

    Returns:
        DiffReport
    """
    if not isinstance(master, MasterResume):
        master = MasterResume.from_dict(master)
    if not isinstance(resolved, MasterResume):
        resolved = MasterResume.from_dict(resolved)

    sections = compare_sections(master, resolved)
    experiences = compare_experience(master, resolved, variant)
    content = ContentChanges(
        headline=HeadlineChange(master.headline != resolved.headline, master.headline, resolved.headline),
        summary=CountChange.between(master.summary, resolved.summary),
        key_achievements=CountChange.between(master.key_achievements, resolved.key_achievements),
    )

    bullets_before = _count_bullets(master)
    bullets_after = _count_bullets(resolved)
    stats = DiffStats(
        master_experiences=len(master.experience),
        resolved_experiences=len(resolved.experience),
        experience_reduction=len(master.experience) - len(resolved.experience),
        total_bullets_original=bullets_before,
        total_bullets_resolved=bullets_after,
        bullet_reduction=bullets_before - bullets_after,
    )

    added = [f"Experience: {label}" for label in experiences.added]
    added += [f"Section: {label}" for label in sections.added]

    removed = [f"Experience: {r.company} - {r.title} ({r.reason})" for r in experiences.removed]
    removed += [f"Section: {label}" for label in sections.removed]

    modified = []
    if content.headline.changed:
        modified.append(f'Headline: "{master.headline}" -> "{resolved.headline}"')
    if content.summary.changed:
        modified.append(f"Summary: {format_delta(content.summary.original_count, content.summary.modified_count)} items")
    if content.key_achievements.changed:
        counts = content.key_achievements
        modified.append(f"Key achievements: {format_delta(counts.original_count, counts.modified_count)} items")
    for change in experiences.modified:
        modified.append(f"Experience: {change.company} - {change.title}: {'; '.join(change.changes)}")
    modified += [f"Section: {line}" for line in sections.reordered]
    if experiences.reordered:
        modified.append("Experience order changed")

    return DiffReport(
        added=added,
        removed=removed,
        modified=modified,
        sections=sections,
        experiences=experiences,
        content=content,
        stats=stats,
        rules_applied=[describe_rule(rule, master) for rule in variant.rules] if variant else [],
        overrides_applied=[describe_override(override) for override in variant.overrides] if variant else [],
    )


def format_diff_report(report: DiffReport, title: str = "Variant diff") -> str:
    """
    Render a DiffReport as a plain-text report.

    Args:
        report: Report from generate_diff()
        title: Heading line

    Returns:
        Multi-line text
    """
    formatter = TableFormatter(
        [Column("Metric", 24), Column("Master", 8, ">"), Column("Resolved", 10, ">"), Column("Change", 8, ">")]
    )
    formatter.add_section_header(title)
    formatter.add_table_header()

    stats = report.stats
    rows = [
        ("Experience entries", stats.master_experiences, stats.resolved_experiences),
        ("Experience bullets", stats.total_bullets_original, stats.total_bullets_resolved),
        ("Summary bullets", report.content.summary.original_count, report.content.summary.modified_count),
        (
            "Key achievements",
            report.content.key_achievements.original_count,
            report.content.key_achievements.modified_count,
        ),
    ]
    for metric, before, after in rows:
        formatter.add_row([metric, before, after, f"{after - before:+d}"])

    formatter.add_subheader("Added").add_bullets(report.added)
    formatter.add_subheader("Removed").add_bullets(report.removed)
    formatter.add_subheader("Modified").add_bullets(report.modified)

    if report.rules_applied:
        formatter.add_subheader("Rules")
        formatter.add_bullets(f"{rule.description} -> {rule.impact}" for rule in report.rules_applied)
    if report.overrides_applied:
        formatter.add_subheader("Overrides")
        formatter.add_bullets(override.description for override in report.overrides_applied)

    return formatter.render()
