"""
Structural Layout Generator

Turns a semantic tree into an initial node/edge graph with deterministic
positions:

1. Central node at the origin
2. Headlines around it (circular, horizontal, vertical or chronological)
3. Sections fanned out from each headline (hierarchical, radial or grouped)
4. Detail items around each section: key points clustered in a group
   container, other categories as satellites at fixed offsets
5. Cross-cutting insights, themes and global actions in fixed canvas zones
6. A size-aware overlap separation pass over root-level nodes

The headline -> section -> detail walk uses an explicit work stack with a
depth limit, so malformed input cannot drive unbounded recursion.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import logging
import math

from ..errors import ValidationError
from ..graph.abstraction import Edge, Graph, Node, NodeRole
from ..graph.semantic_tree import (
    CrossCutting,
    DetailsDisplay,
    Headline,
    HeadlinePlacement,
    LayoutRules,
    Section,
    SectionArrangement,
    SemanticTree,
)
from ..styles import StyleTable, get_style_table
from .separation import separate_nodes
from .strategies import Orientation, Point, arc, axis, chronological, circular, grid, grid_columns

logger = logging.getLogger(__name__)

CENTRAL_ID = "central"


@dataclass
class GeneratorConfig:
    """Configuration for structural layout generation (canvas pixels)."""
    # Headline placement
    headline_radius: float = 600.0
    horizontal_spacing: float = 700.0
    vertical_spacing: float = 500.0
    chronological_spacing: float = 600.0

    # Section placement
    section_offset: float = 200.0          # Vertical drop below the headline
    section_min_spacing: float = 280.0     # Floor for hierarchical spacing
    section_base_spacing: float = 250.0
    section_spacing_step: float = 30.0     # Extra spacing per section below reference
    section_reference_count: int = 5
    radial_distance: float = 350.0
    grouped_spacing_x: float = 300.0
    grouped_spacing_y: float = 200.0

    # Key point container (local frame of the group)
    key_point_group_offset: Point = (-150.0, 120.0)  # Top edge of group relative to section
    group_padding: float = 20.0
    group_header: float = 60.0
    key_point_row_height: float = 100.0

    # Satellite placement: category -> (offset from section, per-index step)
    satellite_offsets: Dict[str, Tuple[Point, Point]] = field(default_factory=lambda: {
        "keyPoint": ((-300.0, 120.0), (0.0, 100.0)),
        "example": ((300.0, 0.0), (0.0, 80.0)),
        "dataPoint": ((150.0, 220.0), (0.0, 70.0)),
        "quote": ((-350.0, 150.0), (0.0, 120.0)),
        "actionItem": ((0.0, 320.0), (0.0, 90.0)),
    })

    # Cross-cutting zones (canvas space)
    insights_zone: Point = (-800.0, -600.0)
    themes_zone: Point = (800.0, -600.0)
    theme_step: float = 250.0
    global_actions_zone: Point = (0.0, 800.0)
    zone_header: float = 80.0
    insight_row_height: float = 120.0
    action_row_height: float = 100.0

    # Post-placement overlap separation
    resolve_overlaps: bool = True
    overlap_gap: float = 100.0
    overlap_passes: int = 8

    # Semantic trees are at most four levels deep (central, headline, section, detail)
    max_depth: int = 4


@dataclass
class _PlacementTask:
    """One pending step of the tree walk."""
    depth: int
    item: Any  # Headline or Section
    parent_id: str
    position: Point
    node_id: str


class StructuralLayoutGenerator:
    """
    Generate a positioned graph from a semantic tree.

    The style table supplies per-role sizes, colours and z-order; it is
    injected so callers can restyle output without touching layout code.
    """

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        styles: Optional[StyleTable] = None,
    ):
        self.config = config or GeneratorConfig()
        self.styles = styles or get_style_table()

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------

    def generate(self, tree: SemanticTree, rules: Optional[LayoutRules] = None) -> Graph:
        """
        Build the graph for a semantic tree.

        Args:
            tree: Parsed semantic tree
            rules: Layout rules overriding ``tree.layout``

        Returns:
            Graph with canvas-space root nodes and parent-local children
        """
        rules = rules or tree.layout
        graph = Graph()

        self._add_node(
            graph, CENTRAL_ID, NodeRole.CENTRAL, (0.0, 0.0),
            {"label": tree.central_theme},
        )

        if not tree.headlines:
            logger.debug("No headlines: emitting central node only")
            return graph

        self._walk_headlines(graph, tree.headlines, rules)
        self._add_cross_cutting(graph, tree.cross_cutting)

        if self.config.resolve_overlaps:
            separate_nodes(
                graph.root_nodes(),
                gap=self.config.overlap_gap,
                size_aware=True,
                max_passes=self.config.overlap_passes,
            )

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Generated graph: nodes=%d edges=%d headlines=%d sections=%d "
                "placement=%s arrangement=%s details=%s",
                len(graph.nodes),
                len(graph.edges),
                len(tree.headlines),
                tree.section_count,
                rules.headline_placement.value,
                rules.section_arrangement.value,
                rules.details_display.value,
            )
        return graph

    # ------------------------------------------------------------------
    # Tree walk
    # ------------------------------------------------------------------

    def _walk_headlines(self, graph: Graph, headlines: List[Headline], rules: LayoutRules):
        positions = self.headline_positions(len(headlines), rules.headline_placement)
        stack: List[_PlacementTask] = [
            _PlacementTask(1, headline, CENTRAL_ID, pos, f"headline-{i}")
            for i, (headline, pos) in enumerate(zip(headlines, positions))
        ]
        # Pop order must follow input order, so the stack holds tasks reversed
        stack.reverse()

        while stack:
            task = stack.pop()
            if task.depth >= self.config.max_depth:
                raise ValidationError(
                    f"Semantic tree exceeds maximum depth {self.config.max_depth}",
                    {"node": task.node_id},
                )

            if isinstance(task.item, Headline):
                headline = task.item
                self._add_node(
                    graph, task.node_id, NodeRole.HEADLINE, task.position,
                    {"label": headline.title, "sourceId": headline.id},
                )
                self._connect(graph, task.parent_id, task.node_id, "headline")

                section_positions = self.section_positions(
                    len(headline.sections), task.position, rules.section_arrangement
                )
                children = [
                    _PlacementTask(task.depth + 1, section, task.node_id, pos,
                                   f"{task.node_id}.section-{j}")
                    for j, (section, pos) in enumerate(zip(headline.sections, section_positions))
                ]
                stack.extend(reversed(children))

            elif isinstance(task.item, Section):
                section = task.item
                self._add_node(
                    graph, task.node_id, NodeRole.SECTION, task.position,
                    {"label": section.title, "sourceId": section.id},
                )
                self._connect(graph, task.parent_id, task.node_id, "section")
                self._place_details(graph, section, task.node_id, task.position,
                                    rules.details_display)

    # ------------------------------------------------------------------
    # Position calculation
    # ------------------------------------------------------------------

    def headline_positions(self, count: int, placement: HeadlinePlacement) -> List[Point]:
        """Headline centres for the chosen placement strategy."""
        if placement == HeadlinePlacement.HORIZONTAL:
            return axis(count, self.config.horizontal_spacing, Orientation.HORIZONTAL)
        if placement == HeadlinePlacement.VERTICAL:
            return axis(count, self.config.vertical_spacing, Orientation.VERTICAL)
        if placement == HeadlinePlacement.CHRONOLOGICAL:
            return chronological(count, self.config.chronological_spacing)
        return circular(count, self.config.headline_radius)

    def section_positions(
        self,
        count: int,
        parent: Point,
        arrangement: SectionArrangement,
    ) -> List[Point]:
        """Section centres relative to their headline's position."""
        if count == 0:
            return []
        px, py = parent
        cfg = self.config

        if arrangement == SectionArrangement.RADIAL:
            # Semicircle centred on the direction pointing away from the central node
            if px == 0 and py == 0:
                outward = math.pi / 2
            else:
                outward = math.atan2(py, px)
            return arc(count, cfg.radial_distance,
                       outward - math.pi / 2, outward + math.pi / 2, center=parent)

        if arrangement == SectionArrangement.GROUPED:
            columns = grid_columns(count)
            return [
                (px + (col - (columns - 1) / 2) * cfg.grouped_spacing_x,
                 py + cfg.section_offset + row * cfg.grouped_spacing_y)
                for row, col in grid(count)
            ]

        spacing = max(
            cfg.section_min_spacing,
            cfg.section_base_spacing
            + (cfg.section_reference_count - count) * cfg.section_spacing_step,
        )
        return axis(count, spacing, Orientation.HORIZONTAL,
                    center=(px, py + cfg.section_offset))

    # ------------------------------------------------------------------
    # Details
    # ------------------------------------------------------------------

    def _place_details(
        self,
        graph: Graph,
        section: Section,
        section_id: str,
        section_pos: Point,
        display: DetailsDisplay,
    ):
        details = section.details

        if details.key_points:
            if display == DetailsDisplay.SATELLITE:
                self._place_satellites(
                    graph, section_id, section_pos, "keyPoint", NodeRole.KEY_POINT,
                    [{"label": p} for p in details.key_points], "keypoint",
                )
            else:
                self._place_key_point_group(
                    graph, section_id, section_pos, details.key_points,
                    collapsed=display == DetailsDisplay.EXPANDABLE,
                )

        self._place_satellites(
            graph, section_id, section_pos, "example", NodeRole.EXAMPLE,
            [{"label": f"Example: {e}"} for e in details.examples], "example",
        )
        self._place_satellites(
            graph, section_id, section_pos, "dataPoint", NodeRole.DATA_POINT,
            [{"label": d} for d in details.data_points], "data",
        )
        self._place_satellites(
            graph, section_id, section_pos, "quote", NodeRole.QUOTE,
            [{"label": q.text, "speaker": q.speaker} for q in details.quotes], "quote",
        )
        self._place_satellites(
            graph, section_id, section_pos, "actionItem", NodeRole.ACTION_ITEM,
            [{"label": a} for a in details.action_items], "action",
        )

    def _place_key_point_group(
        self,
        graph: Graph,
        section_id: str,
        section_pos: Point,
        key_points: List[str],
        collapsed: bool,
    ):
        cfg = self.config
        group_id = f"{section_id}.keypoints"
        child_style = self.styles.for_role(NodeRole.KEY_POINT)

        locals_: List[Point] = [
            (cfg.group_padding, cfg.group_header + k * cfg.key_point_row_height)
            for k in range(len(key_points))
        ]
        width, height = self._container_size(locals_, child_style.width, child_style.height)

        dx, dy = cfg.key_point_group_offset
        group_data: Dict[str, Any] = {"label": "Key Points", "itemCount": len(key_points)}
        if collapsed:
            group_data["collapsed"] = True
        self._add_node(
            graph, group_id, NodeRole.GROUP,
            (section_pos[0] + dx, section_pos[1] + dy + height / 2),
            group_data, size=(width, height),
        )
        for k, (point, local) in enumerate(zip(key_points, locals_)):
            self._add_node(
                graph, f"{section_id}.keypoint-{k}", NodeRole.KEY_POINT, local,
                {"label": point}, parent_id=group_id, hidden=collapsed,
            )
        self._connect(graph, section_id, group_id, "keyPoint")

    def _place_satellites(
        self,
        graph: Graph,
        section_id: str,
        section_pos: Point,
        category: str,
        role: NodeRole,
        payloads: List[Dict[str, Any]],
        id_stem: str,
    ):
        if not payloads:
            return
        (ox, oy), (sx, sy) = self.config.satellite_offsets[category]
        for k, data in enumerate(payloads):
            node_id = f"{section_id}.{id_stem}-{k}"
            position = (section_pos[0] + ox + k * sx, section_pos[1] + oy + k * sy)
            self._add_node(graph, node_id, role, position, data)
            self._connect(graph, section_id, node_id, category)

    # ------------------------------------------------------------------
    # Cross-cutting zones
    # ------------------------------------------------------------------

    def _add_cross_cutting(self, graph: Graph, cross: CrossCutting):
        cfg = self.config
        if cross.is_empty:
            return

        if cross.insights:
            self._add_zone_group(
                graph, "insights", "Key Insights", cfg.insights_zone, NodeRole.INSIGHT,
                [{"label": i.text, "importance": i.importance} for i in cross.insights],
                cfg.insight_row_height, "insight", "insight",
            )

        for k, theme in enumerate(cross.themes):
            theme_id = f"theme-{k}"
            zx, zy = cfg.themes_zone
            self._add_node(
                graph, theme_id, NodeRole.THEME, (zx, zy + k * cfg.theme_step),
                {"label": theme.name, "description": theme.description},
            )
            self._connect(graph, CENTRAL_ID, theme_id, "theme")

        if cross.global_actions:
            self._add_zone_group(
                graph, "global-actions", "Global Action Items", cfg.global_actions_zone,
                NodeRole.ACTION_ITEM,
                [{"label": a.label, "priority": a.priority} for a in cross.global_actions],
                cfg.action_row_height, "action", "globalAction",
            )

    def _add_zone_group(
        self,
        graph: Graph,
        group_id: str,
        label: str,
        zone: Point,
        child_role: NodeRole,
        payloads: List[Dict[str, Any]],
        row_height: float,
        id_stem: str,
        link_kind: str,
    ):
        cfg = self.config
        child_style = self.styles.for_role(child_role)
        locals_ = [(cfg.group_padding, cfg.zone_header + k * row_height) for k in range(len(payloads))]
        width, height = self._container_size(locals_, child_style.width, child_style.height)

        self._add_node(
            graph, group_id, NodeRole.GROUP, zone,
            {"label": label, "itemCount": len(payloads)}, size=(width, height),
        )
        for k, (data, local) in enumerate(zip(payloads, locals_)):
            self._add_node(graph, f"{group_id}.{id_stem}-{k}", child_role, local, data,
                           parent_id=group_id)
        self._connect(graph, CENTRAL_ID, group_id, link_kind)

    # ------------------------------------------------------------------
    # Node/edge construction
    # ------------------------------------------------------------------

    def _container_size(self, locals_: List[Point], child_w: float, child_h: float) -> Tuple[float, float]:
        """Container box enclosing children at the given local offsets plus padding."""
        pad = self.config.group_padding
        max_x = max(x + child_w for x, _ in locals_)
        max_y = max(y + child_h for _, y in locals_)
        return (max_x + pad, max_y + pad)

    def _add_node(
        self,
        graph: Graph,
        node_id: str,
        role: NodeRole,
        position: Point,
        data: Dict[str, Any],
        parent_id: Optional[str] = None,
        size: Optional[Tuple[float, float]] = None,
        hidden: bool = False,
    ) -> Node:
        role_style = self.styles.for_role(role)
        width, height = size or (role_style.width, role_style.height)
        return graph.add_node(Node(
            id=node_id,
            role=role,
            x=float(position[0]),
            y=float(position[1]),
            width=width,
            height=height,
            parent_id=parent_id,
            z_index=role_style.z_index,
            node_type=role_style.node_type,
            hidden=hidden,
            style=role_style.to_style(),
            data=dict(data),
        ))

    def _connect(self, graph: Graph, source: str, target: str, kind: str) -> Edge:
        edge_style = self.styles.for_link(kind)
        return graph.add_edge(Edge(
            id=f"edge:{source}->{target}",
            source=source,
            target=target,
            style=edge_style.to_style(),
            data={"tier": edge_style.tier.value, "kind": kind},
        ))
