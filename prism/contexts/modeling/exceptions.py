"""Custom exceptions for the modeling context with field and index references."""

from dataclasses import dataclass
from typing import List, Optional


class InvalidDocumentError(ValueError):
    """
    Exception raised when a mapping cannot be read as a master resume.

    Attributes:
        message: Error description
        field: Dotted name of the offending field (e.g., 'experience[2].tags')
    """

    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field

        if field:
            super().__init__(f"Invalid document field '{field}': {message}")
        else:
            super().__init__(f"Invalid document: {message}")


@dataclass(frozen=True)
class SpecificationIssue:
    """
    One problem found while validating a variant specification.

    Attributes:
        source: Where the problem is ("rule", "override", "section" or "variant")
        index: Position in the rules/overrides list (None for sections and variant fields)
        kind: The rule type, override operation or section name involved
        message: Error description
    """

    source: str
    index: Optional[int]
    kind: str
    message: str

    def __str__(self) -> str:
        location = self.source if self.index is None else f"{self.source} #{self.index}"
        return f"{location} ({self.kind}): {self.message}"


class VariantValidationError(ValueError):
    """
    Exception raised when a variant specification is malformed.

    All issues are collected before raising so a caller can show every problem
    at once instead of fixing them one resolution attempt at a time.

    Attributes:
        variant_id: Identifier of the rejected variant (may be empty)
        issues: Every SpecificationIssue found
    """

    def __init__(self, variant_id: str, issues: List[SpecificationIssue]):
        self.variant_id = variant_id
        self.issues = list(issues)

        label = f"'{variant_id}'" if variant_id else "(unnamed)"
        parts = [f"Variant {label} has {len(self.issues)} specification issue(s):"]
        parts.extend(f"  - {issue}" for issue in self.issues)

        super().__init__("\n".join(parts))
