"""
End-to-end layout tests.

Runs full semantic trees through every rule combination and feeds the
result back through relayout and the graph checks.
"""

import itertools
import math

import pytest

from mindlayout.api import LayoutEngine
from mindlayout.graph.abstraction import Graph
from mindlayout.layout.viewport import composition_bounds
from mindlayout.profiles import get_profile
from mindlayout.validation.graph_checks import check_containment, check_graph, check_references

PLACEMENTS = ["circular", "horizontal", "vertical", "chronological"]
ARRANGEMENTS = ["hierarchical", "radial", "grouped"]
DISPLAYS = ["nested", "satellite", "expandable"]


def assert_sound(graph: Graph, margin: float):
    for node in graph.iter_nodes():
        assert all(math.isfinite(v) for v in (node.x, node.y, node.width, node.height)), node.id
    min_x, min_y, max_x, max_y = composition_bounds(graph.root_nodes())
    assert (min_x + max_x) / 2 == pytest.approx(0, abs=1e-6)
    assert (min_y + max_y) / 2 == pytest.approx(0, abs=1e-6)
    assert check_references(graph) == []
    assert check_containment(graph, margin=margin) == []


@pytest.mark.parametrize(
    "placement,arrangement,display",
    list(itertools.product(PLACEMENTS, ARRANGEMENTS, DISPLAYS)),
)
def test_every_rule_combination(rich_tree, placement, arrangement, display):
    """Each combination yields a finite, centred, consistent canvas."""
    engine = LayoutEngine()
    rules = {
        "headlinePlacement": placement,
        "sectionArrangement": arrangement,
        "detailsDisplay": display,
    }
    result = engine.generate(rich_tree, rules=rules)
    assert result.ok, result.error
    assert_sound(result.graph, engine.profile.packer.margin)

    ids = [n["id"] for n in result.envelope["nodes"]]
    assert len(ids) == len(set(ids))
    edge_ids = [e["id"] for e in result.envelope["edges"]]
    assert len(edge_ids) == len(set(edge_ids))


@pytest.mark.parametrize("profile", ["compact", "default", "spacious"])
def test_generate_then_relayout(q1_tree, profile):
    """Generated canvases are valid relayout input."""
    engine = LayoutEngine(profile=get_profile(profile))
    generated = engine.generate(q1_tree)
    assert generated.ok

    relaid = engine.relayout(generated.envelope)
    assert relaid.ok, relaid.error
    assert relaid.envelope["metadata"]["totalNodes"] == generated.envelope["metadata"]["totalNodes"]
    assert_sound(relaid.graph, engine.profile.packer.margin)


def test_rich_tree_report(rich_tree):
    """A generated rich tree passes the combined report."""
    engine = LayoutEngine()
    result = engine.generate(rich_tree, relax=True)
    assert result.ok
    report = check_graph(result.graph, margin=engine.profile.packer.margin)
    assert report.passed, report.summary()
    assert report.group_count >= 1
