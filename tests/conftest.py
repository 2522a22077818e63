"""
Shared test fixtures for MindLayout tests.

Provides semantic trees, positioned graphs and style tables used across
the unit, facade and end-to-end tests.
"""

import pytest
from typing import Any, Dict, List

from mindlayout.graph.abstraction import Edge, Graph, Node, NodeRole
from mindlayout.styles import StyleTable, get_style_table


def make_node(node_id: str, x: float = 0.0, y: float = 0.0, role: NodeRole = NodeRole.SECTION,
              width: float = 200.0, height: float = 100.0, parent_id: str = None) -> Node:
    """Build a node with explicit geometry."""
    return Node(id=node_id, role=role, x=x, y=y, width=width, height=height, parent_id=parent_id)


def node_payload(node_id: str, x: float, y: float, role: str = "section", **extra) -> Dict[str, Any]:
    """JSON node dict as a caller would send it."""
    payload = {"id": node_id, "role": role, "position": {"x": x, "y": y}, "data": {"label": node_id}}
    payload.update(extra)
    return payload


@pytest.fixture
def style_table() -> StyleTable:
    """The packaged style table."""
    return get_style_table()


@pytest.fixture
def q1_tree() -> Dict[str, Any]:
    """Three headlines with two plain sections each."""
    return {
        "centralTheme": "Q1 Planning",
        "headlines": [
            {
                "id": f"h{i}",
                "title": f"Headline {i}",
                "sections": [
                    {"id": f"h{i}s{j}", "title": f"Section {i}.{j}"}
                    for j in range(2)
                ],
            }
            for i in range(3)
        ],
        "layout": {
            "primaryLayout": "radial",
            "layoutRules": {
                "headlinePlacement": "circular",
                "sectionArrangement": "hierarchical",
                "detailsDisplay": "nested",
            },
        },
    }


@pytest.fixture
def rich_tree() -> Dict[str, Any]:
    """One headline whose section carries every detail category, plus cross-cutting items."""
    return {
        "centralTheme": "Product Strategy",
        "headlines": [
            {
                "id": "h1",
                "title": "Growth",
                "sections": [
                    {
                        "id": "s1",
                        "title": "Acquisition",
                        "details": {
                            "keyPoints": ["Paid search", "Referrals", "Partnerships"],
                            "examples": ["Dropbox referral program"],
                            "data": ["CAC down 12%"],
                            "quotes": [{"text": "Growth is a system", "speaker": "CEO"}],
                            "actionItems": [{"action": "Hire growth lead"}],
                        },
                    },
                ],
            },
        ],
        "crossCutting": {
            "insights": [{"text": "Retention drives growth", "importance": "high"}],
            "themes": [{"name": "Focus", "description": "Fewer bets"}, "Speed"],
            "globalActions": [{"action": "Quarterly review", "priority": "high", "context": "Board"}],
        },
    }


@pytest.fixture
def two_node_graph() -> Graph:
    """Two root nodes 10px apart joined by one edge."""
    graph = Graph()
    graph.add_node(make_node("a", 0.0, 0.0, role=NodeRole.CENTRAL))
    graph.add_node(make_node("b", 10.0, 0.0))
    graph.add_edge(Edge(id="edge:a->b", source="a", target="b"))
    return graph


@pytest.fixture
def grouped_graph() -> Graph:
    """A root group holding nine children plus one free root node."""
    graph = Graph()
    graph.add_node(make_node("hub", 0.0, 0.0, role=NodeRole.CENTRAL))
    graph.add_node(make_node("box", 400.0, 0.0, role=NodeRole.GROUP, width=300.0, height=150.0))
    for i in range(9):
        graph.add_node(make_node(f"item-{i}", 0.0, 0.0, role=NodeRole.KEY_POINT,
                                 width=100.0, height=60.0, parent_id="box"))
    graph.add_edge(Edge(id="edge:hub->box", source="hub", target="box"))
    return graph


@pytest.fixture
def graph_payload() -> Dict[str, List[Dict[str, Any]]]:
    """Caller-supplied canvas JSON with a group and its children."""
    return {
        "nodes": [
            node_payload("c", 0, 0, role="central"),
            node_payload("h1", 50, 0, role="headline"),
            node_payload("h2", -50, 10, role="headline"),
            node_payload("g", 300, 300, role="group"),
            node_payload("k1", 0, 0, role="keyPoint", parentId="g"),
            node_payload("k2", 0, 0, role="keyPoint", parentId="g"),
        ],
        "edges": [
            {"id": "e1", "source": "c", "target": "h1"},
            {"id": "e2", "source": "c", "target": "h2"},
            {"id": "e3", "source": "h1", "target": "k1"},
        ],
    }
