"""
PRISM - Profile Resolution via Inherited Selective Modifications

Keeps one canonical master resume and derives any number of named variants
from it without duplicating content.

Architecture:
- Modeling Context: Master resume and variant specification data structures
- Resolution Context: Variant resolution engine (rules, overrides, diffing)
"""

__version__ = "0.1.0"

from loguru import logger

# Library records stay silent until a consumer opts in (prism.utils.logger.setup_logger does)
logger.disable("prism")
