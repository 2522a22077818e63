"""Post-layout graph validation."""

from .graph_checks import (
    CheckCategory,
    GraphFlag,
    GraphReport,
    Severity,
    check_containment,
    check_finite,
    check_graph,
    check_references,
    find_root_overlaps,
    require_valid,
)

__all__ = [
    "CheckCategory",
    "GraphFlag",
    "GraphReport",
    "Severity",
    "check_containment",
    "check_finite",
    "check_graph",
    "check_references",
    "find_root_overlaps",
    "require_valid",
]
