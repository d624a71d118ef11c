"""
Resolution Context

Responsibilities:
- Resolves dot-separated paths against resume documents
- Applies variant rules (tag/date filters, bullet limits) and overrides (set/add/remove)
- Orchestrates resolution of a variant against the master resume
- Reports differences between the master and a resolved resume

Owns: Variant resolution semantics, diff reports
Never: Persists documents or validates resume content for correctness
"""

from prism.contexts.resolution.diff_engine import DiffReport, format_diff_report, generate_diff
from prism.contexts.resolution.exceptions import PathConflictError, ResolutionError
from prism.contexts.resolution.override_applier import apply_override, apply_overrides
from prism.contexts.resolution.path_accessor import (
    LookupStatus,
    NodeKind,
    PathLookup,
    read_path,
    update_path,
)
from prism.contexts.resolution.pipeline import project_sections, resolve_variant
from prism.contexts.resolution.rule_evaluator import apply_rule, apply_rules

__all__ = [
    # Orchestration
    "resolve_variant",
    "project_sections",
    # Rules and overrides
    "apply_rule",
    "apply_rules",
    "apply_override",
    "apply_overrides",
    # Paths
    "read_path",
    "update_path",
    "PathLookup",
    "LookupStatus",
    "NodeKind",
    # Diffing
    "generate_diff",
    "format_diff_report",
    "DiffReport",
    # Errors
    "PathConflictError",
    "ResolutionError",
]
