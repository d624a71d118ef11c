"""Custom exceptions for the resolution context."""

from typing import Optional


class PathConflictError(ValueError):
    """
    Exception raised when an override path runs through a value that isn't an object.

    For example `contacts.email.primary` while `contacts.email` holds a string:
    writing there would have to destroy the string, so the write is refused.

    Attributes:
        path: Full override path
        segment: Prefix of the path where traversal stopped (e.g., 'contacts.email')
        found_kind: Kind of value found there ('array' or 'scalar')
    """

    def __init__(self, path: str, segment: str, found_kind: str):
        self.path = path
        self.segment = segment
        self.found_kind = found_kind

        super().__init__(
            f"Path conflict for '{path}': '{segment}' holds {'an' if found_kind == 'array' else 'a'} "
            f"{found_kind}, not an object"
        )


class ResolutionError(Exception):
    """
    Exception raised when resolving a variant fails part-way.

    Resolution is all-or-nothing: when this is raised no resolved document
    exists. The original error is chained as __cause__.

    Attributes:
        message: Error description
        stage: Pipeline stage that failed ("sections", "rules", "overrides", "materialize")
        index: Position of the failing rule/override in its list, if any
        kind: Rule type or override operation involved, if any
        original_error: The underlying exception
    """

    def __init__(
        self,
        message: str,
        stage: str,
        index: Optional[int] = None,
        kind: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.stage = stage
        self.index = index
        self.kind = kind
        self.original_error = original_error

        parts = [message, f"\nStage: {stage}"]
        if index is not None:
            parts.append(f"Index: {index}" + (f" ({kind})" if kind else ""))
        if original_error:
            parts.append(f"\nOriginal error: {original_error}")

        super().__init__("\n".join(parts))
