"""
Master Resume Structure

Defines the structured representation of the canonical master resume.
This structure is the interface between the Modeling and Resolution contexts.

Modeling owns:
- Reading mappings (YAML/JSON documents) into MasterResume instances
- Writing MasterResume instances back to plain mappings

Resolution operates on the plain-mapping form (see MasterResume.to_dict) and
hands its result back through MasterResume.from_dict, which is where shape
problems surface.

Invariants enforced on read:
- Experience ids are non-empty and unique within a document
- A tag appears at most once per experience entry (repeats are collapsed)
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from prism.contexts.modeling.defaults import SKILL_BUCKETS, get_default_sections
from prism.contexts.modeling.exceptions import InvalidDocumentError


def _read_text(data: Mapping[str, Any], key: str, field_name: str, default: Optional[str] = "") -> Optional[str]:
    """Read a text field, accepting numbers (YAML turns `year: 2010` into an int)."""
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        raise InvalidDocumentError(f"expected text, got boolean {value!r}", field_name)
    if isinstance(value, (int, float)):
        return str(value)
    if not isinstance(value, str):
        raise InvalidDocumentError(f"expected text, got {type(value).__name__}", field_name)
    return value


def _read_text_list(data: Mapping[str, Any], key: str, field_name: str) -> List[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidDocumentError(f"expected a list of text, got {type(value).__name__}", field_name)

    items = []
    for position, item in enumerate(value):
        if not isinstance(item, str):
            raise InvalidDocumentError(
                f"expected text, got {type(item).__name__}", f"{field_name}[{position}]"
            )
        items.append(item)
    return items


def _read_mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise InvalidDocumentError(f"expected a mapping, got {type(value).__name__}", field_name)
    return value


def _read_records(data: Mapping[str, Any], key: str) -> List[Mapping[str, Any]]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidDocumentError(f"expected a list of entries, got {type(value).__name__}", key)
    return [_read_mapping(item, f"{key}[{position}]") for position, item in enumerate(value)]


def _extra_keys(data: Mapping[str, Any], known: tuple) -> Dict[str, Any]:
    """Collect keys the schema doesn't name so they survive a round trip."""
    return {key: copy.deepcopy(value) for key, value in data.items() if key not in known}


def _dedupe(items: List[str]) -> List[str]:
    seen = set()
    unique = []
    for item in items:
        if item not in seen:
            seen.add(item)
            unique.append(item)
    return unique


@dataclass
class Contact:
    """
    Contact block shown under the owner's name.

    Attributes:
        email: Email address
        phone: Phone number
        website: Personal site URL
        linkedin: Profile link
        extra: Any other contact keys (github, location, ...)
    """

    email: str = ""
    phone: str = ""
    website: str = ""
    linkedin: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    FIELDS = ("email", "phone", "website", "linkedin")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Contact":
        values = {name: _read_text(data, name, f"contacts.{name}") for name in cls.FIELDS}
        return cls(**values, extra=_extra_keys(data, cls.FIELDS))

    def to_dict(self) -> Dict[str, Any]:
        result = {name: getattr(self, name) for name in self.FIELDS}
        result.update(copy.deepcopy(self.extra))
        return result


@dataclass
class ExperienceEntry:
    """
    One position in the work history.

    Attributes:
        id: Stable identifier, never reused within a document
        company: Employer name
        title: Job title
        location: Where the role was based
        date_start: Start date (YYYY, YYYY-MM or YYYY-MM-DD)
        date_end: End date, None while current
        bullets: Ordered accomplishment bullets
        tags: Labels used by include/exclude rules (no duplicates)
        extra: Unrecognised keys carried through untouched
    """

    id: str
    company: str = ""
    title: str = ""
    location: str = ""
    date_start: str = ""
    date_end: Optional[str] = None
    bullets: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    FIELDS = ("id", "company", "title", "location", "date_start", "date_end", "bullets", "tags")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], field_name: str = "experience") -> "ExperienceEntry":
        entry_id = _read_text(data, "id", f"{field_name}.id")
        if not entry_id:
            raise InvalidDocumentError("experience entries need a non-empty id", f"{field_name}.id")

        return cls(
            id=entry_id,
            company=_read_text(data, "company", f"{field_name}.company"),
            title=_read_text(data, "title", f"{field_name}.title"),
            location=_read_text(data, "location", f"{field_name}.location"),
            date_start=_read_text(data, "date_start", f"{field_name}.date_start"),
            date_end=_read_text(data, "date_end", f"{field_name}.date_end", default=None),
            bullets=_read_text_list(data, "bullets", f"{field_name}.bullets"),
            tags=_dedupe(_read_text_list(data, "tags", f"{field_name}.tags")),
            extra=_extra_keys(data, cls.FIELDS),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.id,
            "company": self.company,
            "title": self.title,
            "location": self.location,
            "date_start": self.date_start,
            "date_end": self.date_end,
            "bullets": list(self.bullets),
            "tags": list(self.tags),
        }
        result.update(copy.deepcopy(self.extra))
        return result

    @property
    def label(self) -> str:
        """Short "Company - Title" label used in reports."""
        return f"{self.company} - {self.title}"


@dataclass
class EducationEntry:
    id: str = ""
    degree: str = ""
    school: str = ""
    location: str = ""
    year: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    FIELDS = ("id", "degree", "school", "location", "year")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], field_name: str = "education") -> "EducationEntry":
        values = {name: _read_text(data, name, f"{field_name}.{name}") for name in cls.FIELDS}
        return cls(**values, extra=_extra_keys(data, cls.FIELDS))

    def to_dict(self) -> Dict[str, Any]:
        result = {name: getattr(self, name) for name in self.FIELDS}
        result.update(copy.deepcopy(self.extra))
        return result


@dataclass
class AwardEntry:
    id: str = ""
    title: str = ""
    date: str = ""
    description: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    FIELDS = ("id", "title", "date", "description")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], field_name: str = "awards") -> "AwardEntry":
        values = {name: _read_text(data, name, f"{field_name}.{name}") for name in cls.FIELDS}
        return cls(**values, extra=_extra_keys(data, cls.FIELDS))

    def to_dict(self) -> Dict[str, Any]:
        result = {name: getattr(self, name) for name in self.FIELDS}
        result.update(copy.deepcopy(self.extra))
        return result


@dataclass
class CertificationEntry:
    id: str = ""
    name: str = ""
    issuer: str = ""
    date: str = ""
    description: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    FIELDS = ("id", "name", "issuer", "date", "description")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], field_name: str = "certifications") -> "CertificationEntry":
        values = {name: _read_text(data, name, f"{field_name}.{name}") for name in cls.FIELDS}
        return cls(**values, extra=_extra_keys(data, cls.FIELDS))

    def to_dict(self) -> Dict[str, Any]:
        result = {name: getattr(self, name) for name in self.FIELDS}
        result.update(copy.deepcopy(self.extra))
        return result


@dataclass
class Skills:
    """Two named skill buckets."""

    primary: List[str] = field(default_factory=list)
    secondary: List[str] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Skills":
        return cls(
            primary=_read_text_list(data, "primary", "skills.primary"),
            secondary=_read_text_list(data, "secondary", "skills.secondary"),
            extra=_extra_keys(data, SKILL_BUCKETS),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {"primary": list(self.primary), "secondary": list(self.secondary)}
        result.update(copy.deepcopy(self.extra))
        return result


@dataclass
class SectionSetting:
    """
    Display settings for one section.

    Attributes:
        enabled: Whether the section is shown/exported
        order: Position used for display and export ordering (1-indexed)
    """

    enabled: bool = True
    order: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], field_name: str, default_order: int) -> "SectionSetting":
        enabled = data.get("enabled", True)
        order = data.get("order", default_order)
        if not isinstance(enabled, bool):
            raise InvalidDocumentError(f"expected true/false, got {enabled!r}", f"{field_name}.enabled")
        if isinstance(order, bool) or not isinstance(order, int):
            raise InvalidDocumentError(f"expected an integer, got {order!r}", f"{field_name}.order")
        return cls(enabled=enabled, order=order)

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "order": self.order}


def _read_sections(value: Any) -> Dict[str, SectionSetting]:
    raw = _read_mapping(value, "sections")
    defaults = get_default_sections()

    sections = {}
    for name, default in defaults.items():
        entry = _read_mapping(raw.get(name), f"sections.{name}")
        sections[name] = SectionSetting.from_dict(entry, f"sections.{name}", default["order"])

    # Sections the schema doesn't know about are kept as-is (custom sections)
    for name, entry in raw.items():
        if name not in sections:
            entry = _read_mapping(entry, f"sections.{name}")
            sections[name] = SectionSetting.from_dict(entry, f"sections.{name}", len(sections) + 1)

    return sections


@dataclass
class MasterResume:
    """
    Canonical resume record every variant derives from.

    Also used for resolved documents, which share the master's shape.
    Construct from mappings with from_dict(); convert back with to_dict().

    Attributes:
        id: Document identifier
        owner: Full name of the resume owner
        headline: Professional headline under the name
        contacts: Contact block
        summary: Summary bullets
        key_achievements: Key achievement bullets
        experience: Work history entries, in display order
        education: Education entries
        awards: Award entries
        certifications: Certification entries
        skills: Primary and secondary skill buckets
        sections: Section name -> SectionSetting
        created_at: Opaque creation timestamp
        updated_at: Opaque modification timestamp
        extra: Top-level keys outside the schema (e.g. written by overrides)
    """

    id: str = ""
    owner: str = ""
    headline: str = ""
    contacts: Contact = field(default_factory=Contact)
    summary: List[str] = field(default_factory=list)
    key_achievements: List[str] = field(default_factory=list)
    experience: List[ExperienceEntry] = field(default_factory=list)
    education: List[EducationEntry] = field(default_factory=list)
    awards: List[AwardEntry] = field(default_factory=list)
    certifications: List[CertificationEntry] = field(default_factory=list)
    skills: Skills = field(default_factory=Skills)
    sections: Dict[str, SectionSetting] = field(
        default_factory=lambda: {
            name: SectionSetting(**setting) for name, setting in get_default_sections().items()
        }
    )
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    FIELDS = (
        "id",
        "owner",
        "headline",
        "contacts",
        "summary",
        "key_achievements",
        "experience",
        "education",
        "awards",
        "certifications",
        "skills",
        "sections",
        "created_at",
        "updated_at",
    )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MasterResume":
        """
        Read a master (or resolved) resume from a plain mapping.

        Missing fields take their empty defaults so that partial documents and
        documents with fields deleted by overrides still load.

        Args:
            data: Mapping using the snake_case document keys

        Returns:
            MasterResume instance sharing no containers with data

        Raises:
            InvalidDocumentError: If a field has the wrong shape or experience
                ids are missing or duplicated
        """
        data = _read_mapping(data, "document")

        experience = [
            ExperienceEntry.from_dict(entry, f"experience[{position}]")
            for position, entry in enumerate(_read_records(data, "experience"))
        ]
        seen_ids = set()
        for position, entry in enumerate(experience):
            if entry.id in seen_ids:
                raise InvalidDocumentError(
                    f"duplicate experience id '{entry.id}'", f"experience[{position}].id"
                )
            seen_ids.add(entry.id)

        return cls(
            id=_read_text(data, "id", "id"),
            owner=_read_text(data, "owner", "owner"),
            headline=_read_text(data, "headline", "headline"),
            contacts=Contact.from_dict(_read_mapping(data.get("contacts"), "contacts")),
            summary=_read_text_list(data, "summary", "summary"),
            key_achievements=_read_text_list(data, "key_achievements", "key_achievements"),
            experience=experience,
            education=[
                EducationEntry.from_dict(entry, f"education[{position}]")
                for position, entry in enumerate(_read_records(data, "education"))
            ],
            awards=[
                AwardEntry.from_dict(entry, f"awards[{position}]")
                for position, entry in enumerate(_read_records(data, "awards"))
            ],
            certifications=[
                CertificationEntry.from_dict(entry, f"certifications[{position}]")
                for position, entry in enumerate(_read_records(data, "certifications"))
            ],
            skills=Skills.from_dict(_read_mapping(data.get("skills"), "skills")),
            sections=_read_sections(data.get("sections")),
            created_at=_read_text(data, "created_at", "created_at", default=None),
            updated_at=_read_text(data, "updated_at", "updated_at", default=None),
            extra=_extra_keys(data, cls.FIELDS),
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to a plain mapping built entirely from fresh containers.

        Returns:
            Dict safe to mutate without affecting this instance
        """
        result = {
            "id": self.id,
            "owner": self.owner,
            "headline": self.headline,
            "contacts": self.contacts.to_dict(),
            "summary": list(self.summary),
            "key_achievements": list(self.key_achievements),
            "experience": [entry.to_dict() for entry in self.experience],
            "education": [entry.to_dict() for entry in self.education],
            "awards": [entry.to_dict() for entry in self.awards],
            "certifications": [entry.to_dict() for entry in self.certifications],
            "skills": self.skills.to_dict(),
            "sections": {name: setting.to_dict() for name, setting in self.sections.items()},
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        result.update(copy.deepcopy(self.extra))
        return result

    def get_experience(self, entry_id: str) -> ExperienceEntry:
        """
        Find an experience entry by id.

        Raises:
            KeyError: If no entry has that id
        """
        for entry in self.experience:
            if entry.id == entry_id:
                return entry
        raise KeyError(f"Experience entry not found: {entry_id}")

    @property
    def experience_ids(self) -> List[str]:
        return [entry.id for entry in self.experience]

    @property
    def ordered_sections(self) -> List[str]:
        """Enabled section names sorted by their display order."""
        enabled = [name for name, setting in self.sections.items() if setting.enabled]
        return sorted(enabled, key=lambda name: (self.sections[name].order, name))
