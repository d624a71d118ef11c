"""
Shared utilities for PRISM.

Common functionality used across contexts:
- Logger setup with provenance tracking
- Plain-text report tables
"""

from prism.utils.logger import setup_logger
from prism.utils.report_formatter import Column, TableFormatter, format_delta

__all__ = ["setup_logger", "Column", "TableFormatter", "format_delta"]
