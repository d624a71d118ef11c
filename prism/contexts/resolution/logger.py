"""
Resolution context logger.

Provides logging interface for the resolution context with automatic [resolve] prefix.
All resolution modules should import from this module, not from loguru directly.
"""

from pathlib import Path

from loguru import logger

from prism.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[resolve]"


def setup_resolution_logger(log_dir: Path, variant_name: str = "", console_level: str = "INFO") -> Path:
    """
    Setup logger for the resolution context.

    Args:
        log_dir: Directory for this resolution session
        variant_name: Variant being resolved, recorded in the provenance header
        console_level: Minimum level echoed to the console

    Returns:
        Path to log file

    Example:
        from prism.contexts.resolution.logger import setup_resolution_logger

        log_file = setup_resolution_logger(log_dir, variant_name="GRC Presales")
    """
    provenance = {"Variant": variant_name} if variant_name else None
    return _setup_logger(
        context_name="resolve",
        log_dir=log_dir,
        extra_provenance=provenance,
        console_level=console_level,
    )


# Wrapper functions with automatic [resolve] prefix


def _log_info(message: str) -> None:
    """Log info message with [resolve] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [resolve] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [resolve] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level resolution logging helpers


def log_resolution_start(variant_label: str, rule_count: int, override_count: int) -> None:
    """Log start of a resolution with the size of the variant."""
    _log_debug(f"Resolving '{variant_label}' ({rule_count} rules, {override_count} overrides)")


def log_resolution_result(variant_label: str, experience_before: int, experience_after: int, elapsed_time: float) -> None:
    """Log a finished resolution."""
    _log_info(
        f"'{variant_label}' resolved: experience {experience_before} -> {experience_after} "
        f"({elapsed_time * 1000:.2f}ms)"
    )


def log_resolution_failure(variant_label: str, error: Exception) -> None:
    """Log a failed resolution. The error is still raised to the caller."""
    _log_error(f"Failed to resolve '{variant_label}': {error}")
