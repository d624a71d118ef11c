"""
Modeling Context

Responsibilities:
- Defines the master resume and variant specification data structures
- Centralizes construction defaults (section map, variant section visibility)
- Validates variant specifications before they reach the resolution engine
- Loads and saves documents as YAML/JSON

Owns: Document shapes, specification validation
Never: Applies rules or overrides
"""

from prism.contexts.modeling.defaults import (
    get_default_sections,
    sections_to_project,
    with_default_section_settings,
)
from prism.contexts.modeling.exceptions import (
    InvalidDocumentError,
    SpecificationIssue,
    VariantValidationError,
)
from prism.contexts.modeling.loader import load_master, load_variant, resume_to_yaml, save_resume
from prism.contexts.modeling.resume_data_structure import (
    AwardEntry,
    CertificationEntry,
    Contact,
    EducationEntry,
    ExperienceEntry,
    MasterResume,
    SectionSetting,
    Skills,
)
from prism.contexts.modeling.variant_data_structure import (
    AddOverride,
    DateRange,
    ExcludeTags,
    IncludeTags,
    MaxBullets,
    Override,
    RemoveOverride,
    Rule,
    SectionOrder,
    SetOverride,
    VariantSpec,
)

__all__ = [
    # Defaults
    "get_default_sections",
    "sections_to_project",
    "with_default_section_settings",
    # Errors
    "InvalidDocumentError",
    "SpecificationIssue",
    "VariantValidationError",
    # File I/O
    "load_master",
    "load_variant",
    "save_resume",
    "resume_to_yaml",
    # Master resume
    "MasterResume",
    "Contact",
    "ExperienceEntry",
    "EducationEntry",
    "AwardEntry",
    "CertificationEntry",
    "Skills",
    "SectionSetting",
    # Variant specification
    "VariantSpec",
    "Rule",
    "IncludeTags",
    "ExcludeTags",
    "MaxBullets",
    "SectionOrder",
    "DateRange",
    "Override",
    "SetOverride",
    "AddOverride",
    "RemoveOverride",
]
