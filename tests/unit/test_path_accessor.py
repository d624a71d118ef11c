"""
Unit tests for the path accessor.

Tests read results (ok / not found / conflict) and copy-on-write updates.
"""

import pytest

from prism.contexts.resolution.exceptions import PathConflictError
from prism.contexts.resolution.path_accessor import (
    MISSING,
    LookupStatus,
    NodeKind,
    node_kind,
    read_path,
    split_path,
    update_path,
)


@pytest.fixture
def document():
    return {
        "headline": "Lead",
        "summary": ["a", "b"],
        "skills": {"primary": ["Go"], "secondary": []},
        "contacts": {"email": "x@example.com"},
    }


@pytest.mark.unit
class TestSplitPath:
    """Tests for split_path."""

    def test_dotted_path(self):
        assert split_path("skills.primary") == ["skills", "primary"]

    def test_single_segment(self):
        assert split_path("headline") == ["headline"]

    @pytest.mark.parametrize("path", ["", ".a", "a.", "a..b"])
    def test_empty_segments_rejected(self, path):
        with pytest.raises(ValueError):
            split_path(path)


@pytest.mark.unit
class TestNodeKind:
    """Tests for value classification."""

    def test_kinds(self):
        assert node_kind({}) is NodeKind.OBJECT
        assert node_kind([]) is NodeKind.ARRAY
        assert node_kind("text") is NodeKind.SCALAR
        assert node_kind(None) is NodeKind.SCALAR
        assert node_kind(3) is NodeKind.SCALAR


@pytest.mark.unit
class TestReadPath:
    """Tests for read_path."""

    def test_reads_nested_value(self, document):
        lookup = read_path(document, "skills.primary")

        assert lookup.ok
        assert lookup.status is LookupStatus.OK
        assert lookup.value == ["Go"]
        assert lookup.kind is NodeKind.ARRAY

    def test_missing_leaf(self, document):
        lookup = read_path(document, "contacts.github")

        assert lookup.status is LookupStatus.NOT_FOUND
        assert lookup.stopped_at == "contacts.github"
        assert lookup.value is MISSING
        assert lookup.kind is None

    def test_missing_intermediate(self, document):
        lookup = read_path(document, "custom.section.items")

        assert lookup.status is LookupStatus.NOT_FOUND
        assert lookup.stopped_at == "custom"

    def test_conflict_through_scalar(self, document):
        lookup = read_path(document, "headline.text")

        assert lookup.status is LookupStatus.CONFLICT
        assert lookup.stopped_at == "headline"
        assert lookup.found_kind is NodeKind.SCALAR

    def test_conflict_through_array(self, document):
        lookup = read_path(document, "summary.first")

        assert lookup.status is LookupStatus.CONFLICT
        assert lookup.found_kind is NodeKind.ARRAY

    def test_field_holding_none_is_found(self):
        lookup = read_path({"date_end": None}, "date_end")

        assert lookup.ok
        assert lookup.value is None


@pytest.mark.unit
class TestUpdatePath:
    """Tests for copy-on-write updates."""

    def test_replaces_leaf_without_touching_input(self, document):
        updated = update_path(document, "skills.primary", lambda current: ["Rust"])

        assert updated["skills"]["primary"] == ["Rust"]
        assert document["skills"]["primary"] == ["Go"]
        assert updated is not document
        assert updated["skills"] is not document["skills"]

    def test_untouched_branches_are_shared(self, document):
        updated = update_path(document, "skills.primary", lambda current: [])

        assert updated["contacts"] is document["contacts"]

    def test_creates_missing_objects(self, document):
        updated = update_path(document, "custom.projects.title", lambda current: "Side work")

        assert updated["custom"] == {"projects": {"title": "Side work"}}
        assert "custom" not in document

    def test_updater_receives_missing_marker(self, document):
        seen = []
        update_path(document, "contacts.github", lambda current: seen.append(current) or "gh")

        assert seen == [MISSING]

    def test_returning_missing_deletes_field(self, document):
        updated = update_path(document, "contacts.email", lambda current: MISSING)

        assert updated["contacts"] == {}
        assert document["contacts"] == {"email": "x@example.com"}

    def test_missing_intermediate_without_create_is_noop(self, document):
        updated = update_path(document, "custom.items", lambda current: MISSING, create_missing=False)

        assert updated == document
        assert "custom" not in updated

    def test_conflict_through_scalar_raises(self, document):
        with pytest.raises(PathConflictError) as exc_info:
            update_path(document, "headline.text", lambda current: "x")

        assert exc_info.value.segment == "headline"
        assert exc_info.value.found_kind == "scalar"
        assert document["headline"] == "Lead"

    def test_conflict_through_array_raises(self, document):
        with pytest.raises(PathConflictError, match="summary"):
            update_path(document, "summary.extra", lambda current: "x")

    def test_conflict_through_none_raises(self):
        with pytest.raises(PathConflictError):
            update_path({"contacts": None}, "contacts.email", lambda current: "x")
