"""Unit tests for logger setup."""

import pytest
from loguru import logger

from prism.contexts.resolution import resolve_variant
from prism.contexts.resolution.logger import setup_resolution_logger
from prism.utils.logger import get_session_log_dir, setup_logger


@pytest.fixture
def restore_logger():
    yield
    logger.remove()
    logger.disable("prism")


@pytest.mark.unit
def test_session_log_dir_is_timestamped(tmp_path):
    log_dir = get_session_log_dir("resolve", base_dir=tmp_path)

    assert log_dir.parent == tmp_path
    assert log_dir.name.startswith("resolve_")
    assert not log_dir.exists()


@pytest.mark.unit
def test_setup_logger_writes_provenance(tmp_path, restore_logger):
    log_file = setup_logger("model", tmp_path / "session", extra_provenance={"Variant": "grc"})
    logger.remove()

    text = log_file.read_text()
    assert log_file.name == "model.log"
    assert "Working directory:" in text
    assert "Variant: grc" in text


@pytest.mark.unit
def test_resolution_logger_captures_engine_records(tmp_path, master, build_variant, restore_logger):
    log_file = setup_resolution_logger(tmp_path, variant_name="Test Variant", console_level="ERROR")
    resolve_variant(master, build_variant(rules=[{"type": "max_bullets", "value": 1}]))
    logger.remove()

    text = log_file.read_text()
    assert "[resolve]" in text
    assert "'Test Variant' resolved" in text
