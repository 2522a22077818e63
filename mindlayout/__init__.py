"""
MindLayout - Mind-Map Layout Engine

Turns a hierarchical semantic analysis (central theme, headlines, sections,
details, cross-cutting insights) into a positioned node/edge graph for an
infinite-canvas renderer, and re-lays out edited graphs on request.
"""

__version__ = "0.1.0"
__author__ = "MindLayout Team"

from .api.engine import LayoutEngine, LayoutResult
from .errors import EdgeReferenceError, LayoutError, NumericError, ValidationError
from .graph.abstraction import Edge, Graph, Node, NodeRole
from .graph.semantic_tree import SemanticTree
from .profiles import LayoutProfile, get_profile

__all__ = [
    "LayoutEngine",
    "LayoutResult",
    "LayoutError",
    "ValidationError",
    "EdgeReferenceError",
    "NumericError",
    "Graph",
    "Node",
    "Edge",
    "NodeRole",
    "SemanticTree",
    "LayoutProfile",
    "get_profile",
]
