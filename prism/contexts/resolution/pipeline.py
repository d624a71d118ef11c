"""
Resolution Pipeline

Derives a resolved resume from a master resume and a variant specification.

Stages, always run in this order:
1. Section projection: hide disabled sections (content cleared, section
   flag turned off) and show explicitly enabled ones. Only sections the
   variant names, plus the hidden-by-default ones, are touched
2. Custom content: extension point, currently a pass-through
3. Rules: applied in list order
4. Overrides: applied in list order
5. Materialize: read the working document back into a MasterResume

The pipeline starts from MasterResume.to_dict(), which shares no containers
with the master, and every stage returns a new document, so the master is
never modified and concurrent resolutions against one master are safe.

Resolution is all-or-nothing. Any failure raises ResolutionError naming the
stage (and the rule/override index) and no partial document is returned.
"""

import time
from typing import Any, Dict, Mapping, Union

from prism.contexts.modeling.defaults import HEADLINE, empty_section_content
from prism.contexts.modeling.exceptions import InvalidDocumentError
from prism.contexts.modeling.resume_data_structure import MasterResume
from prism.contexts.modeling.variant_data_structure import VariantSpec
from prism.contexts.resolution.exceptions import ResolutionError
from prism.contexts.resolution.logger import (
    _log_debug,
    log_resolution_failure,
    log_resolution_result,
    log_resolution_start,
)
from prism.contexts.resolution.override_applier import apply_override
from prism.contexts.resolution.rule_evaluator import apply_rule

Document = Dict[str, Any]


def project_sections(document: Document, section_settings: Mapping[str, bool]) -> Document:
    """
    Apply section visibility to a document.

    Acts only on the sections named in section_settings. Disabled sections
    have their content cleared ('' for the headline, empty buckets for skills,
    [] otherwise) and their flag in the section map set to False. Enabled
    sections get their flag set to True.

    Args:
        document: Plain-mapping resume (not modified)
        section_settings: Mapping of section name -> enabled for the sections to change

    Returns:
        New document
    """
    result = dict(document)
    sections = {name: dict(setting) for name, setting in document.get("sections", {}).items()}

    for name, enabled in section_settings.items():
        if not enabled:
            result[name] = empty_section_content(name)
            _log_debug(f"Section '{name}' disabled")

        # Headline is a plain field, not part of the section map
        if name != HEADLINE and name in sections:
            sections[name]["enabled"] = enabled

    result["sections"] = sections
    return result


def apply_custom_content(document: Document, variant: VariantSpec) -> Document:
    """Custom content is expressed entirely through overrides; nothing to do here."""
    return document


def _coerce_master(master: Union[MasterResume, Mapping[str, Any]]) -> MasterResume:
    if isinstance(master, MasterResume):
        return master
    return MasterResume.from_dict(master)


def _coerce_variant(variant: Union[VariantSpec, Mapping[str, Any]]) -> VariantSpec:
    if isinstance(variant, VariantSpec):
        # A built variant's lists can still be changed after construction
        variant.validate()
        return variant
    return VariantSpec.from_dict(variant)


def resolve_variant(
    master: Union[MasterResume, Mapping[str, Any]],
    variant: Union[VariantSpec, Mapping[str, Any]],
) -> MasterResume:
    """
    Resolve a variant against the master resume.

    Pure and deterministic: the same inputs always give an equal result, and
    a fresh MasterResume is returned on every call.

    Args:
        master: Master resume (or its mapping form)
        variant: Variant specification (or its wire-form mapping, validated first)

    Returns:
        Resolved resume with the master's shape

    Raises:
        InvalidDocumentError: If master is a mapping that isn't a valid resume
        VariantValidationError: If variant (a mapping or a VariantSpec) has
            malformed rules, overrides or section settings (nothing is resolved)
        ResolutionError: If a rule or override fails, or an override leaves
            the document wrongly shaped

    Example:
        >>> resolved = resolve_variant(master, VariantSpec.from_dict({
        ...     "rules": [{"type": "include_tags", "value": ["GRC"]}],
        ...     "overrides": [{"path": "headline", "operation": "set", "value": "GRC Lead"}],
        ... }))
    """
    master = _coerce_master(master)
    variant = _coerce_variant(variant)
    label = variant.name or variant.id or "(unnamed variant)"

    start_time = time.perf_counter()
    log_resolution_start(label, len(variant.rules), len(variant.overrides))

    try:
        document = project_sections(master.to_dict(), variant.projected_section_settings)
        document = apply_custom_content(document, variant)

        for index, rule in enumerate(variant.rules):
            try:
                document = apply_rule(document, rule)
            except Exception as e:
                raise ResolutionError(
                    f"Rule {index} ({rule.kind}) failed", stage="rules", index=index, kind=rule.kind, original_error=e
                ) from e

        resolved = None
        for index, override in enumerate(variant.overrides):
            try:
                document = apply_override(document, override)
                # Re-read after every override so a wrongly shaped write is blamed on its author
                resolved = MasterResume.from_dict(document)
            except Exception as e:
                raise ResolutionError(
                    f"Override {index} ({override.operation} '{override.path}') failed",
                    stage="overrides",
                    index=index,
                    kind=override.operation,
                    original_error=e,
                ) from e

        if resolved is None:
            try:
                resolved = MasterResume.from_dict(document)
            except InvalidDocumentError as e:
                raise ResolutionError(
                    "Resolved document is not a valid resume", stage="materialize", original_error=e
                ) from e

    except ResolutionError as e:
        log_resolution_failure(label, e)
        raise

    log_resolution_result(label, len(master.experience), len(resolved.experience), time.perf_counter() - start_time)
    return resolved
