"""
Integration tests for variant resolution.

Runs the full pipeline (section projection, rules, overrides) against small
in-memory resumes and against the YAML fixtures.
"""

import copy

import pytest

from prism.contexts.modeling import MasterResume, MaxBullets, VariantValidationError, load_master, load_variant
from prism.contexts.resolution import PathConflictError, ResolutionError, generate_diff, resolve_variant
from prism.contexts.resolution.pipeline import project_sections


@pytest.mark.integration
class TestResolveVariant:
    def test_empty_variant_applies_only_section_defaults(self, master, build_variant):
        resolved = resolve_variant(master, build_variant())

        assert resolved.experience == master.experience
        assert resolved.headline == master.headline
        # Summary and key achievements are hidden unless a variant enables them
        assert resolved.summary == []
        assert resolved.key_achievements == []
        assert resolved.sections["summary"].enabled is False

    def test_master_is_never_modified(self, master, build_variant):
        snapshot = copy.deepcopy(master)
        variant = build_variant(
            rules=[{"type": "include_tags", "value": ["GRC"]}, {"type": "max_bullets", "value": 1}],
            overrides=[
                {"path": "headline", "operation": "set", "value": "GRC Lead"},
                {"path": "skills.primary", "operation": "add", "value": "Risk"},
                {"path": "summary", "operation": "remove", "value": "s1"},
            ],
            section_settings={"summary": {"enabled": True}, "awards": {"enabled": False}},
        )

        resolve_variant(master, variant)

        assert master == snapshot

    def test_result_does_not_share_containers_with_master(self, master, build_variant):
        resolved = resolve_variant(master, build_variant())

        resolved.experience[0].bullets.append("extra")
        resolved.skills.primary.append("extra")

        assert master.experience[0].bullets == ["g1", "g2", "g3"]
        assert master.skills.primary == ["Alliances"]

    def test_resolution_is_deterministic(self, master, build_variant):
        variant = build_variant(
            rules=[{"type": "exclude_tags", "value": ["Partner"]}],
            overrides=[{"path": "skills.primary", "operation": "add", "value": "Risk"}],
        )

        first = resolve_variant(master, variant)
        second = resolve_variant(master, variant)

        assert first == second
        assert first is not second

    def test_include_tags_keeps_master_order(self, build_master, build_variant):
        master = build_master(
            experience=[
                {"id": "a", "tags": ["AI"]},
                {"id": "b", "tags": ["Partner"]},
                {"id": "c", "tags": ["GRC"]},
            ]
        )

        resolved = resolve_variant(master, build_variant(rules=[{"type": "include_tags", "value": ["GRC", "AI"]}]))

        assert resolved.experience_ids == ["a", "c"]

    def test_max_bullets_keeps_prefix(self, master, build_variant):
        variant = build_variant(
            rules=[{"type": "max_bullets", "value": 2}],
            section_settings={"summary": {"enabled": True}},
        )

        resolved = resolve_variant(master, variant)

        assert resolved.get_experience("exp-partner").bullets == ["p1", "p2"]
        assert resolved.summary == ["s1", "s2"]

    def test_add_appends_in_override_order(self, master, build_variant):
        variant = build_variant(
            overrides=[
                {"path": "skills.primary", "operation": "add", "value": "Risk"},
                {"path": "skills.primary", "operation": "add", "value": "AI Governance"},
            ]
        )

        resolved = resolve_variant(master, variant)
        assert resolved.skills.primary == ["Alliances", "Risk", "AI Governance"]

    def test_set_replaces_array_wholesale(self, master, build_variant):
        variant = build_variant(
            overrides=[{"path": "summary", "operation": "set", "value": ["Only line"]}],
            section_settings={"summary": {"enabled": True}},
        )

        assert resolve_variant(master, variant).summary == ["Only line"]

    def test_overrides_run_after_rules(self, master, build_variant):
        variant = build_variant(
            rules=[{"type": "max_bullets", "value": 1}],
            overrides=[{"path": "summary", "operation": "add", "value": "s4"}],
            section_settings={"summary": {"enabled": True}},
        )

        assert resolve_variant(master, variant).summary == ["s1", "s4"]

    def test_disabled_section_is_cleared(self, master, build_variant):
        variant = build_variant(section_settings={"summary": {"enabled": False}, "skills": {"enabled": False}})

        resolved = resolve_variant(master, variant)

        assert resolved.summary == []
        assert resolved.skills.primary == []
        assert resolved.skills.secondary == []
        assert resolved.sections["skills"].enabled is False

    def test_disabled_headline_is_blank(self, master, build_variant):
        resolved = resolve_variant(master, build_variant(section_settings={"headline": {"enabled": False}}))
        assert resolved.headline == ""

    def test_sections_the_variant_does_not_name_keep_the_master_flag(self, build_master, build_variant):
        master = build_master(sections={"certifications": {"enabled": False}, "awards": {"enabled": False}})

        resolved = resolve_variant(master, build_variant())

        assert resolved.sections["certifications"].enabled is False
        assert resolved.sections["awards"].enabled is False
        assert generate_diff(master, resolved).sections.added == []

    def test_explicit_setting_overrides_the_master_flag(self, build_master, build_variant):
        master = build_master(sections={"certifications": {"enabled": False}})
        variant = build_variant(section_settings={"certifications": {"enabled": True}})

        resolved = resolve_variant(master, variant)

        assert resolved.sections["certifications"].enabled is True

    def test_experience_order_override(self, master, build_variant):
        variant = build_variant(
            overrides=[{"path": "experience_order", "operation": "set", "value": ["exp-partner", "exp-grc"]}]
        )

        assert resolve_variant(master, variant).experience_ids == ["exp-partner", "exp-grc"]

    def test_section_order_rule_changes_nothing(self, master, build_variant):
        plain = resolve_variant(master, build_variant())
        ordered = resolve_variant(
            master, build_variant(rules=[{"type": "section_order", "value": ["skills", "experience"]}])
        )

        assert ordered == plain

    def test_end_to_end_grc_scenario(self, master, build_variant):
        variant = build_variant(
            rules=[{"type": "include_tags", "value": ["GRC"]}, {"type": "max_bullets", "value": 2}],
            overrides=[{"path": "headline", "operation": "set", "value": "GRC Lead"}],
        )

        resolved = resolve_variant(master, variant)

        assert resolved.experience_ids == ["exp-grc"]
        assert resolved.experience[0].bullets == ["g1", "g2"]
        assert resolved.headline == "GRC Lead"
        assert resolved.education == master.education

    def test_accepts_mapping_inputs(self, master, build_variant):
        variant = build_variant(rules=[{"type": "exclude_tags", "value": ["GRC"]}])

        resolved = resolve_variant(master.to_dict(), variant.to_dict())
        assert resolved.experience_ids == ["exp-partner"]


@pytest.mark.integration
class TestResolutionFailures:
    def test_malformed_variant_mapping_is_rejected_before_resolution(self, master):
        with pytest.raises(VariantValidationError) as exc_info:
            resolve_variant(master, {"rules": [{"type": "nope", "value": 1}]})

        assert exc_info.value.issues[0].kind == "nope"

    def test_path_conflict_names_the_override(self, master, build_variant):
        variant = build_variant(
            overrides=[
                {"path": "skills.primary", "operation": "add", "value": "Risk"},
                {"path": "headline.text", "operation": "set", "value": "x"},
            ]
        )

        with pytest.raises(ResolutionError) as exc_info:
            resolve_variant(master, variant)

        error = exc_info.value
        assert error.stage == "overrides"
        assert error.index == 1
        assert error.kind == "set"
        assert isinstance(error.original_error, PathConflictError)
        assert isinstance(error.__cause__, PathConflictError)

    def test_wrongly_shaped_override_is_blamed(self, master, build_variant):
        variant = build_variant(
            overrides=[
                {"path": "headline", "operation": "set", "value": "Fine"},
                {"path": "summary", "operation": "set", "value": "not a list"},
            ],
            section_settings={"summary": {"enabled": True}},
        )

        with pytest.raises(ResolutionError) as exc_info:
            resolve_variant(master, variant)

        assert exc_info.value.index == 1
        assert "summary" in str(exc_info.value.original_error)

    def test_spec_changed_after_construction_is_rechecked(self, master, build_variant):
        variant = build_variant()
        variant.rules.append(MaxBullets(-1))

        with pytest.raises(VariantValidationError) as exc_info:
            resolve_variant(master, variant)

        assert [(i.source, i.index, i.kind) for i in exc_info.value.issues] == [("rule", 0, "max_bullets")]
        assert master.experience[1].bullets == ["p1", "p2", "p3"]

    def test_failure_leaves_master_untouched(self, master, build_variant):
        snapshot = copy.deepcopy(master)
        variant = build_variant(
            overrides=[
                {"path": "headline", "operation": "set", "value": "Changed"},
                {"path": "contacts.email.primary", "operation": "set", "value": "x"},
            ]
        )

        with pytest.raises(ResolutionError):
            resolve_variant(master, variant)

        assert master == snapshot


@pytest.mark.integration
def test_project_sections_sets_flags(master_dict):
    projected = project_sections(master_dict, {"summary": True, "awards": False, "headline": False})

    assert projected["awards"] == []
    assert projected["headline"] == ""
    assert projected["sections"]["awards"]["enabled"] is False
    assert projected["sections"]["summary"]["enabled"] is True
    assert "headline" not in projected["sections"]
    assert master_dict["sections"]["awards"]["enabled"] is True


@pytest.mark.integration
class TestFixtures:
    @pytest.fixture
    def fixture_master(self, fixtures_path) -> MasterResume:
        return load_master(fixtures_path / "master_resume.yaml")

    def test_grc_variant(self, fixture_master, fixtures_path):
        variant = load_variant(fixtures_path / "variant_grc.yaml")

        resolved = resolve_variant(fixture_master, variant)

        assert resolved.experience_ids == ["exp-1", "exp-2"]
        assert all(len(entry.bullets) <= 2 for entry in resolved.experience)
        assert resolved.headline == "GRC Solution Advisory Lead"
        assert resolved.skills.primary == ["Partner Development", "Strategic Alliances", "AI Governance"]
        assert len(resolved.summary) == 2
        assert resolved.key_achievements == []
        assert resolved.awards == []
        assert resolved.sections["awards"].enabled is False
        assert resolved.certifications == fixture_master.certifications

    def test_grc_variant_diff(self, fixture_master, fixtures_path):
        variant = load_variant(fixtures_path / "variant_grc.yaml")
        resolved = resolve_variant(fixture_master, variant)

        report = generate_diff(fixture_master, resolved, variant)

        assert report.stats.experience_reduction == 2
        assert {removal.id for removal in report.experiences.removed} == {"exp-3", "exp-4"}
        assert all(removal.reason == "Missing required tags: GRC, AI" for removal in report.experiences.removed)
        assert set(report.sections.removed) == {"Key Achievements", "Awards"}
        assert report.rules_applied[2].impact == "Recorded only; section order unchanged"

    def test_invalid_variant_reports_every_issue(self, fixtures_path):
        with pytest.raises(VariantValidationError) as exc_info:
            load_variant(fixtures_path / "variant_invalid.yaml")

        issues = exc_info.value.issues
        assert exc_info.value.variant_id == "variant-broken"
        assert [(issue.source, issue.index, issue.kind) for issue in issues] == [
            ("rule", 0, "include_tag"),
            ("rule", 1, "max_bullets"),
            ("override", 0, "move"),
            ("override", 1, "set"),
        ]
