"""
Tests for post-layout graph checks.
"""

import pytest

from mindlayout.errors import EdgeReferenceError, NumericError
from mindlayout.graph.abstraction import Edge, Graph, Node, NodeRole
from mindlayout.layout.packer import pack_groups
from mindlayout.validation.graph_checks import (
    CheckCategory,
    Severity,
    check_containment,
    check_finite,
    check_graph,
    check_references,
    find_root_overlaps,
    require_valid,
)


class TestReferences:
    """Tests for dangling reference detection."""

    def test_clean_graph(self, grouped_graph):
        """A consistent graph has no reference flags."""
        assert check_references(grouped_graph) == []

    def test_dangling_edge_and_parent(self, grouped_graph):
        """Both edge endpoints and parents are checked."""
        grouped_graph.add_edge(Edge(id="bad", source="hub", target="ghost"))
        grouped_graph.nodes["item-0"].parent_id = "nowhere"
        flags = check_references(grouped_graph)
        assert {f.location for f in flags} == {"bad", "item-0"}
        assert all(f.severity == Severity.ERROR for f in flags)

    def test_require_valid_raises(self, grouped_graph):
        """require_valid turns the first reference flag into an exception."""
        grouped_graph.add_edge(Edge(id="bad", source="hub", target="ghost"))
        with pytest.raises(EdgeReferenceError):
            require_valid(grouped_graph)


class TestFinite:
    """Tests for NaN/inf detection."""

    def test_flags_nan(self, grouped_graph):
        """NaN coordinates are flagged."""
        grouped_graph.nodes["hub"].x = float("nan")
        flags = check_finite(grouped_graph)
        assert [f.location for f in flags] == ["hub"]
        assert flags[0].category == CheckCategory.NUMERIC

    def test_raises_when_asked(self, grouped_graph):
        """raise_on_error raises NumericError instead of flagging."""
        grouped_graph.nodes["box"].width = float("inf")
        with pytest.raises(NumericError):
            check_finite(grouped_graph, raise_on_error=True)


class TestContainment:
    """Tests for container size checks."""

    def test_packed_groups_pass(self, grouped_graph):
        """After packing, containers hold children plus margin."""
        pack_groups(grouped_graph)
        assert check_containment(grouped_graph, margin=50) == []

    def test_undersized_group_flagged(self, grouped_graph):
        """A container smaller than its children is flagged."""
        pack_groups(grouped_graph)
        grouped_graph.nodes["box"].width = 100
        flags = check_containment(grouped_graph, margin=50)
        assert [f.location for f in flags] == ["box"]
        assert flags[0].severity == Severity.WARNING


class TestOverlaps:
    """Tests for root overlap detection."""

    def test_overlapping_pair(self):
        """Intersecting root boxes are reported once, in order."""
        graph = Graph()
        graph.add_node(Node(id="a", role=NodeRole.SECTION, x=0, y=0))
        graph.add_node(Node(id="b", role=NodeRole.SECTION, x=50, y=0))
        graph.add_node(Node(id="c", role=NodeRole.SECTION, x=1000, y=0))
        assert find_root_overlaps(graph) == [("a", "b")]

    def test_touching_boxes_do_not_overlap(self):
        """Boxes that only share an edge are not overlapping."""
        graph = Graph()
        graph.add_node(Node(id="a", role=NodeRole.SECTION, x=0, y=0, width=100))
        graph.add_node(Node(id="b", role=NodeRole.SECTION, x=100, y=0, width=100))
        assert find_root_overlaps(graph) == []


class TestReport:
    """Tests for the combined report."""

    def test_clean_report(self, grouped_graph):
        """A packed, spread graph passes."""
        pack_groups(grouped_graph)
        report = check_graph(grouped_graph, margin=50)
        assert report.passed
        assert report.node_count == 11
        assert report.group_count == 1
        assert "No issues found" in report.summary()

    def test_failing_report(self, grouped_graph):
        """Errors fail the report and are listed first."""
        grouped_graph.nodes["item-0"].x = float("inf")
        grouped_graph.nodes["box"].x = 10
        report = check_graph(grouped_graph)
        assert not report.passed
        summary = report.summary()
        assert summary.index("[ERROR]") < summary.index("[INFO]")
        assert "Result: FAIL" in summary

    def test_to_dict(self, grouped_graph):
        """Report serializes its flags."""
        grouped_graph.nodes["box"].x = 10
        d = check_graph(grouped_graph).to_dict()
        assert d["passed"] is True
        assert d["flags"][0]["category"] == "overlap"
