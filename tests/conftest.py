"""Shared fixtures for PRISM tests."""

from pathlib import Path

import pytest

from prism.contexts.modeling import MasterResume, VariantSpec

FIXTURES_PATH = Path(__file__).parent / "fixtures"


def make_master(**fields) -> MasterResume:
    """
    Build a small master resume: two entries tagged GRC and Partner, three bullets each.

    Keyword arguments replace top-level fields of the mapping form.
    """
    data = {
        "id": "master-test",
        "owner": "Jordan Reyes",
        "headline": "Partner Development Leader",
        "contacts": {"email": "jordan@example.com", "phone": "555-0100"},
        "summary": ["s1", "s2", "s3"],
        "key_achievements": ["k1", "k2", "k3"],
        "experience": [
            {
                "id": "exp-grc",
                "company": "Contoso",
                "title": "Solution Advisor",
                "date_start": "2021-12",
                "date_end": "2025-05",
                "bullets": ["g1", "g2", "g3"],
                "tags": ["GRC"],
            },
            {
                "id": "exp-partner",
                "company": "Fabrikam",
                "title": "Alliance Director",
                "date_start": "2019-11",
                "date_end": "2021-12",
                "bullets": ["p1", "p2", "p3"],
                "tags": ["Partner"],
            },
        ],
        "education": [{"id": "edu-1", "degree": "MBA", "school": "State University"}],
        "awards": [{"id": "award-1", "title": "Partner Excellence"}],
        "skills": {"primary": ["Alliances"], "secondary": ["Cloud"]},
    }
    data.update(fields)
    return MasterResume.from_dict(data)


def make_variant(rules=None, overrides=None, section_settings=None, **fields) -> VariantSpec:
    """Build a validated variant from wire-form rules/overrides."""
    data = {
        "id": "variant-test",
        "name": "Test Variant",
        "rules": rules or [],
        "overrides": overrides or [],
        "section_settings": section_settings or {},
    }
    data.update(fields)
    return VariantSpec.from_dict(data)


@pytest.fixture
def master() -> MasterResume:
    return make_master()


@pytest.fixture
def master_dict(master) -> dict:
    return master.to_dict()


@pytest.fixture
def build_master():
    return make_master


@pytest.fixture
def build_variant():
    return make_variant


@pytest.fixture
def fixtures_path() -> Path:
    return FIXTURES_PATH
