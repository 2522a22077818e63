"""Graph model: nodes, edges, semantic trees and JSON I/O."""

from .abstraction import DEFAULT_NODE_SIZE, Edge, Graph, Node, NodeRole
from .semantic_tree import (
    CrossCutting,
    DetailsDisplay,
    GlobalAction,
    Headline,
    HeadlinePlacement,
    Insight,
    LayoutRules,
    Quote,
    Section,
    SectionArrangement,
    SectionDetails,
    SemanticTree,
    ThemeItem,
)
from .io import build_envelope, load_graph, load_semantic_tree, read_json, write_json

__all__ = [
    # Core abstractions
    "Node",
    "Edge",
    "Graph",
    "NodeRole",
    "DEFAULT_NODE_SIZE",
    # Semantic tree
    "SemanticTree",
    "Headline",
    "Section",
    "SectionDetails",
    "Quote",
    "CrossCutting",
    "Insight",
    "ThemeItem",
    "GlobalAction",
    "LayoutRules",
    "HeadlinePlacement",
    "SectionArrangement",
    "DetailsDisplay",
    # JSON I/O
    "read_json",
    "write_json",
    "load_graph",
    "load_semantic_tree",
    "build_envelope",
]
