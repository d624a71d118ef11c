"""
Default values for PRISM documents and variant specifications.

Every construction default lives here so that no caller has to inline
fallback literals:
- resume_data_structure.py: default section map for master resumes
- variant_data_structure.py: default section visibility for variants
- rule_evaluator.py / pipeline.py: empty forms of cleared sections
"""

from typing import Any, Dict, Mapping, Optional

# Display/export order of the master's toggleable sections
SECTION_NAMES = (
    "summary",
    "key_achievements",
    "experience",
    "education",
    "awards",
    "certifications",
    "skills",
)

# Headline is a scalar field, not part of the section map, but variants can hide it
HEADLINE = "headline"

VARIANT_SECTION_NAMES = (HEADLINE,) + SECTION_NAMES

# Visibility used when a variant does not mention a section. Sections missing
# here (certifications) keep whatever the master says.
DEFAULT_VARIANT_SECTION_SETTINGS = {
    "headline": True,
    "summary": False,
    "key_achievements": False,
    "experience": True,
    "education": True,
    "awards": True,
    "skills": True,
}

SKILL_BUCKETS = ("primary", "secondary")

# Reserved override path that reorders experience entries by id
EXPERIENCE_ORDER_PATH = "experience_order"


def get_default_sections() -> Dict[str, Dict[str, Any]]:
    """
    Build the default section-settings map for a master resume.

    Returns:
        Fresh dict mapping each section name to {"enabled": True, "order": n}
    """
    return {
        name: {"enabled": True, "order": position}
        for position, name in enumerate(SECTION_NAMES, start=1)
    }


def with_default_section_settings(settings: Optional[Mapping[str, bool]] = None) -> Dict[str, bool]:
    """
    Fill in section visibility a variant leaves unspecified.

    Explicit entries win over defaults; absent entries fall back to
    DEFAULT_VARIANT_SECTION_SETTINGS (summary and key achievements stay hidden
    unless a variant turns them on).

    Args:
        settings: Partial mapping of section name -> enabled

    Returns:
        Mapping covering every section in DEFAULT_VARIANT_SECTION_SETTINGS plus
        any explicit entries
    """
    resolved = dict(DEFAULT_VARIANT_SECTION_SETTINGS)
    if settings:
        resolved.update(settings)
    return resolved


def empty_section_content(section: str) -> Any:
    """
    Get the cleared form of a section's content.

    Args:
        section: Section name from VARIANT_SECTION_NAMES

    Returns:
        '' for the headline, empty skill buckets for skills, [] otherwise
    """
    if section == HEADLINE:
        return ""
    if section == "skills":
        return {bucket: [] for bucket in SKILL_BUCKETS}
    return []


def sections_to_project(settings: Optional[Mapping[str, bool]] = None) -> Dict[str, bool]:
    """
    Pick the section visibility changes resolution actually applies.

    Only the sections a variant names are switched, plus the sections hidden
    by default (summary, key achievements) when the variant is silent on them.
    A section the variant never mentions and that defaults to shown keeps the
    master's own flag, so a section switched off in the master stays off.

    Args:
        settings: Explicit mapping of section name -> enabled from a variant

    Returns:
        Mapping of section name -> enabled to project onto the document
    """
    projected = {name: False for name, enabled in DEFAULT_VARIANT_SECTION_SETTINGS.items() if not enabled}
    if settings:
        projected.update(settings)
    return projected
