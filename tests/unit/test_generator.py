"""
Tests for the structural layout generator.

Tests cover:
- Degenerate input (zero headlines)
- Headline placement strategies
- Section arrangements (hierarchical spacing, radial arcs, grouped grids)
- Detail display modes and satellite offsets
- Cross-cutting zones
- Edge tiers and determinism
"""

import math

import pytest

from mindlayout.errors import ValidationError
from mindlayout.graph.abstraction import NodeRole
from mindlayout.graph.semantic_tree import (
    DetailsDisplay,
    HeadlinePlacement,
    LayoutRules,
    SectionArrangement,
    SemanticTree,
)
from mindlayout.layout.generator import CENTRAL_ID, GeneratorConfig, StructuralLayoutGenerator
from mindlayout.layout.separation import count_close_pairs


def generate(payload, resolve_overlaps=False, **rules):
    """Generate with overlap separation off so raw placements are observable."""
    generator = StructuralLayoutGenerator(GeneratorConfig(resolve_overlaps=resolve_overlaps))
    tree = SemanticTree.from_dict(payload)
    return generator.generate(tree, LayoutRules(**rules) if rules else None)


def nodes_with_role(graph, role):
    return [n for n in graph.iter_nodes() if n.role == role]


# =============================================================================
# Basics
# =============================================================================

class TestBasics:
    """Tests for overall graph shape."""

    def test_zero_headlines(self):
        """Empty headlines produce exactly the central node and no edges."""
        graph = generate({"centralTheme": "Empty", "headlines": []}, resolve_overlaps=True)
        assert list(graph.nodes) == [CENTRAL_ID]
        assert graph.edges == []
        assert graph.nodes[CENTRAL_ID].data["label"] == "Empty"
        assert (graph.nodes[CENTRAL_ID].x, graph.nodes[CENTRAL_ID].y) == (0, 0)

    def test_q1_counts(self, q1_tree):
        """3 headlines x 2 sections gives 1 + 3 + 6 nodes and 9 edges."""
        graph = generate(q1_tree, resolve_overlaps=True)
        assert len(nodes_with_role(graph, NodeRole.CENTRAL)) == 1
        assert len(nodes_with_role(graph, NodeRole.HEADLINE)) == 3
        assert len(nodes_with_role(graph, NodeRole.SECTION)) == 6
        assert len(graph.nodes) == 10
        assert len(graph.edges) == 9

    def test_positions_finite_and_distinct(self, q1_tree):
        """Every node has a finite, unique position."""
        graph = generate(q1_tree, resolve_overlaps=True)
        positions = [(n.x, n.y) for n in graph.iter_nodes()]
        assert all(n.is_finite() for n in graph.iter_nodes())
        assert len(set(positions)) == len(positions)

    def test_deterministic(self, rich_tree):
        """Identical input gives an identical graph."""
        first = generate(rich_tree, resolve_overlaps=True).to_dict()
        second = generate(rich_tree, resolve_overlaps=True).to_dict()
        assert first == second

    def test_ids_follow_tree_path(self, q1_tree):
        """Node ids derive from headline and section indices."""
        graph = generate(q1_tree)
        assert "headline-2" in graph.nodes
        assert "headline-1.section-0" in graph.nodes
        assert graph.nodes["headline-1.section-0"].data["sourceId"] == "h1s0"

    def test_style_applied(self, q1_tree, style_table):
        """Nodes take size, type and z-order from the style table."""
        headline = generate(q1_tree).nodes["headline-0"]
        expected = style_table.for_role(NodeRole.HEADLINE)
        assert (headline.width, headline.height) == (expected.width, expected.height)
        assert headline.z_index == expected.z_index
        assert headline.node_type == "headline"

    def test_depth_limit(self, q1_tree):
        """Trees deeper than max_depth are rejected rather than walked."""
        generator = StructuralLayoutGenerator(GeneratorConfig(max_depth=2))
        with pytest.raises(ValidationError):
            generator.generate(SemanticTree.from_dict(q1_tree))


# =============================================================================
# Headline placement
# =============================================================================

class TestHeadlinePlacement:
    """Tests for headline strategies."""

    def test_circular(self, q1_tree):
        """Headlines sit on a 600px ring starting at the top."""
        graph = generate(q1_tree, headline_placement=HeadlinePlacement.CIRCULAR)
        first = graph.nodes["headline-0"]
        assert (first.x, first.y) == pytest.approx((0, -600))
        for h in nodes_with_role(graph, NodeRole.HEADLINE):
            assert math.hypot(h.x, h.y) == pytest.approx(600)

    def test_horizontal(self, q1_tree):
        """Horizontal placement uses 700px spacing on y=0."""
        graph = generate(q1_tree, headline_placement=HeadlinePlacement.HORIZONTAL)
        xs = [graph.nodes[f"headline-{i}"].x for i in range(3)]
        assert xs == pytest.approx([-700, 0, 700])

    def test_vertical(self, q1_tree):
        """Vertical placement uses 500px spacing on x=0."""
        graph = generate(q1_tree, headline_placement=HeadlinePlacement.VERTICAL)
        ys = [graph.nodes[f"headline-{i}"].y for i in range(3)]
        assert ys == pytest.approx([-500, 0, 500])

    def test_chronological(self, q1_tree):
        """Timeline starts at (-300, 100) and steps 600px right."""
        graph = generate(q1_tree, headline_placement=HeadlinePlacement.CHRONOLOGICAL)
        positions = [(graph.nodes[f"headline-{i}"].x, graph.nodes[f"headline-{i}"].y) for i in range(3)]
        assert positions == [(-300, 100), (300, 100), (900, 100)]


# =============================================================================
# Section arrangement
# =============================================================================

class TestSectionArrangement:
    """Tests for section positions relative to their headline."""

    def test_hierarchical_spacing_clamped(self):
        """Spacing is max(280, 250 + (5 - n) * 30)."""
        generator = StructuralLayoutGenerator()
        two = generator.section_positions(2, (0, 0), SectionArrangement.HIERARCHICAL)
        eight = generator.section_positions(8, (0, 0), SectionArrangement.HIERARCHICAL)
        assert two[1][0] - two[0][0] == pytest.approx(340)
        assert eight[1][0] - eight[0][0] == pytest.approx(280)
        assert all(y == 200 for _, y in two)

    def test_hierarchical_centred_below_headline(self):
        """Sections are centred under the headline."""
        positions = StructuralLayoutGenerator().section_positions(
            3, (100, -600), SectionArrangement.HIERARCHICAL
        )
        assert sum(x for x, _ in positions) / 3 == pytest.approx(100)
        assert positions[0][1] == pytest.approx(-400)

    def test_radial_faces_away_from_centre(self):
        """A headline right of centre fans its sections further right."""
        positions = StructuralLayoutGenerator().section_positions(
            3, (600, 0), SectionArrangement.RADIAL
        )
        assert positions[1] == pytest.approx((950, 0))
        for x, y in positions:
            assert math.hypot(x - 600, y) == pytest.approx(350)
            assert x >= 600 - 1e-9

    def test_radial_single_section_at_midpoint(self):
        """One section sits straight out from the headline."""
        (x, y), = StructuralLayoutGenerator().section_positions(1, (0, -600), SectionArrangement.RADIAL)
        assert (x, y) == pytest.approx((0, -950))

    def test_grouped_grid(self):
        """Grouped sections fill a near-square grid below the headline."""
        positions = StructuralLayoutGenerator().section_positions(4, (0, 0), SectionArrangement.GROUPED)
        flat = [v for point in positions for v in point]
        assert flat == pytest.approx([-150, 200, 150, 200, -150, 400, 150, 400])

    def test_no_sections(self):
        """Zero sections yields no positions."""
        assert StructuralLayoutGenerator().section_positions(0, (0, 0), SectionArrangement.RADIAL) == []


# =============================================================================
# Details
# =============================================================================

class TestDetails:
    """Tests for detail item placement."""

    SECTION = "headline-0.section-0"

    def test_nested_key_points(self, rich_tree):
        """Key points live in a group container, stacked by row."""
        graph = generate(rich_tree)
        group = graph.nodes[f"{self.SECTION}.keypoints"]
        children = graph.children_of(group.id)
        assert group.role == NodeRole.GROUP
        assert group.data["itemCount"] == 3
        assert [c.y for c in children] == [60, 160, 260]
        assert all(c.x == 20 for c in children)
        assert not any(c.hidden for c in children)

    def test_group_contains_children(self, rich_tree):
        """Synthesized group boxes hold their children plus padding."""
        graph = generate(rich_tree)
        group = graph.nodes[f"{self.SECTION}.keypoints"]
        for child in graph.children_of(group.id):
            _, _, max_x, max_y = child.get_bounding_box()
            assert max_x + 20 <= group.width
            assert max_y + 20 <= group.height

    def test_expandable_collapses_group(self, rich_tree):
        """Expandable mode marks the group collapsed and hides children."""
        graph = generate(rich_tree, details_display=DetailsDisplay.EXPANDABLE)
        group = graph.nodes[f"{self.SECTION}.keypoints"]
        assert group.data["collapsed"] is True
        assert all(c.hidden for c in graph.children_of(group.id))

    def test_satellite_key_points(self, rich_tree):
        """Satellite mode places key points as root nodes with no group."""
        graph = generate(rich_tree, details_display=DetailsDisplay.SATELLITE)
        assert f"{self.SECTION}.keypoints" not in graph.nodes
        points = nodes_with_role(graph, NodeRole.KEY_POINT)
        assert len(points) == 3
        assert all(p.is_root for p in points)

    def test_satellite_offsets(self, rich_tree):
        """Examples sit 300px right of their section."""
        graph = generate(rich_tree)
        section = graph.nodes[self.SECTION]
        example = graph.nodes[f"{self.SECTION}.example-0"]
        assert (example.x - section.x, example.y - section.y) == pytest.approx((300, 0))
        assert example.data["label"] == "Example: Dropbox referral program"

    def test_detail_edges(self, rich_tree):
        """Each satellite and the key point group connect to the section."""
        graph = generate(rich_tree)
        targets = {e.target for e in graph.edges if e.source == self.SECTION}
        assert targets == {
            f"{self.SECTION}.keypoints",
            f"{self.SECTION}.example-0",
            f"{self.SECTION}.data-0",
            f"{self.SECTION}.quote-0",
            f"{self.SECTION}.action-0",
        }

    def test_quote_speaker_kept(self, rich_tree):
        """Quote data carries the speaker."""
        graph = generate(rich_tree)
        assert graph.nodes[f"{self.SECTION}.quote-0"].data["speaker"] == "CEO"


# =============================================================================
# Cross-cutting and edges
# =============================================================================

class TestCrossCutting:
    """Tests for zone placement of cross-cutting items."""

    def test_zones(self, rich_tree):
        """Insights top-left, themes top-right, actions bottom-centre."""
        graph = generate(rich_tree)
        assert (graph.nodes["insights"].x, graph.nodes["insights"].y) == (-800, -600)
        assert (graph.nodes["theme-0"].x, graph.nodes["theme-0"].y) == (800, -600)
        assert (graph.nodes["theme-1"].x, graph.nodes["theme-1"].y) == (800, -350)
        assert (graph.nodes["global-actions"].x, graph.nodes["global-actions"].y) == (0, 800)

    def test_zone_children(self, rich_tree):
        """Zone groups hold their items as children."""
        graph = generate(rich_tree)
        insight = graph.nodes["insights.insight-0"]
        action = graph.nodes["global-actions.action-0"]
        assert insight.parent_id == "insights"
        assert insight.data["importance"] == "high"
        assert action.data["label"] == "[high] Quarterly review\nBoard"

    def test_cross_cutting_edges_from_central(self, rich_tree):
        """Every zone connects straight to the central node with the cross-cutting tier."""
        graph = generate(rich_tree)
        zone_edges = [e for e in graph.edges if e.data["tier"] == "cross_cutting"]
        assert {e.target for e in zone_edges} == {"insights", "theme-0", "theme-1", "global-actions"}
        assert all(e.source == CENTRAL_ID for e in zone_edges)

    def test_edge_tiers(self, q1_tree):
        """Central->headline is primary, headline->section secondary."""
        graph = generate(q1_tree)
        tiers = {e.id: e.data["tier"] for e in graph.edges}
        assert tiers["edge:central->headline-0"] == "primary"
        assert tiers["edge:headline-0->headline-0.section-1"] == "secondary"

    def test_edges_resolve(self, rich_tree):
        """Every edge endpoint exists."""
        graph = generate(rich_tree, resolve_overlaps=True)
        graph.validate_references()


# =============================================================================
# Overlap separation
# =============================================================================

class TestOverlapSeparation:
    """Tests for the size-aware separation pass."""

    def test_close_pairs_reduced(self, q1_tree):
        """Separation leaves fewer crowded root pairs than raw placement."""
        raw = generate(q1_tree, resolve_overlaps=False)
        separated = generate(q1_tree, resolve_overlaps=True)
        before = count_close_pairs(raw.root_nodes(), 100, size_aware=True)
        after = count_close_pairs(separated.root_nodes(), 100, size_aware=True)
        assert before > 0
        assert after < before

    def test_disabled(self, q1_tree):
        """With separation off, headlines stay exactly on the ring."""
        graph = generate(q1_tree, resolve_overlaps=False)
        assert graph.nodes["headline-0"].y == pytest.approx(-600)
