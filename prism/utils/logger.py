"""
Logging setup shared by all PRISM contexts.

The engine modules only emit records through their context wrappers
(contexts/{context}/logger.py). Whoever runs the engine (a script, a
notebook) calls setup_logger() once to attach sinks and record where the
run came from.
"""

import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv
from loguru import logger

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {message}"
CONSOLE_FORMAT = "{time:HH:mm:ss} | <level>{level: <7}</level> | <level>{message}</level>"

# Console colors per level; levels not listed keep loguru's defaults
LEVEL_COLORS = {
    "WARNING": "<yellow>",
    "ERROR": "<red>",
    "CRITICAL": "<bold><red>",
}


def get_session_log_dir(session_name: str, base_dir: Optional[Path] = None) -> Path:
    """
    Build a timestamped directory path for one logging session.

    Args:
        session_name: Prefix for the directory (e.g., "resolve")
        base_dir: Parent directory (defaults to LOGS_PATH from environment)

    Returns:
        Path such as outs/logs/resolve_20261019_134501 (not created)
    """
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return (base_dir or LOGS_PATH) / f"{session_name}_{stamp}"


def setup_logger(
    context_name: str,
    log_dir: Path,
    extra_provenance: Optional[Dict[str, str]] = None,
    level_colors: Optional[Dict[str, str]] = None,
    console_level: str = "INFO",
) -> Path:
    """
    Attach a file sink and a console sink, then write a provenance header.

    Replaces any sinks configured earlier and enables the `prism` namespace,
    which the package disables on import.

    Args:
        context_name: Context identifier, used as the log file name (e.g., "resolve")
        log_dir: Directory for this session (created if missing)
        extra_provenance: Extra "key: value" lines for the header
        level_colors: Console colors overriding LEVEL_COLORS
        console_level: Minimum level echoed to stderr (the file always gets DEBUG)

    Returns:
        Path to the log file

    Example:
        from prism.utils.logger import get_session_log_dir, setup_logger

        log_file = setup_logger("resolve", get_session_log_dir("resolve"), {"Variant": "grc-presales"})
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{context_name}.log"

    logger.remove()
    logger.enable("prism")

    for level_name, color in {**LEVEL_COLORS, **(level_colors or {})}.items():
        logger.level(level_name, color=color)

    logger.add(log_file, format=FILE_FORMAT, level="DEBUG")
    # stderr, so resolved documents printed to stdout can be piped
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=console_level, colorize=True)

    log_provenance(extra_provenance)
    return log_file


def log_provenance(extra_context: Optional[Dict[str, str]] = None) -> None:
    """Write the run's script, command line, working directory and interpreter to the log."""
    details = {
        "Script": sys.argv[0],
        "Command": " ".join(sys.argv),
        "Working directory": str(Path.cwd()),
        "Python": sys.version.split()[0],
        **(extra_context or {}),
    }

    separator = "=" * 80
    logger.info(separator)
    for key, value in details.items():
        logger.info(f"{key}: {value}")
    logger.info(separator)
