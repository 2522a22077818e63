"""
Group Packer

Arranges the children of every container node into a grid in the
container's local frame and resizes the container to fit.

- Children are packed in input order (no sorting), row-major, with
  columns = ceil(sqrt(n)).
- Child local position = (col * pitch_x + margin, row * pitch_y + margin).
- Container size = children's bounding box + margin on every side.
  Size flows one way, children to parent; deepest containers are packed
  first so nested groups are already final when their parent is sized.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import logging
import math

from ..errors import NumericError
from ..graph.abstraction import Graph, Node
from .strategies import grid

logger = logging.getLogger(__name__)


@dataclass
class PackerConfig:
    """Configuration for group packing."""
    spacing: float = 150.0  # Grid pitch between child origins
    margin: float = 50.0    # Inset of the grid and padding around children
    fit_cells: bool = False  # Widen pitch so children never overlap
    gutter: float = 20.0    # Gap between children when fit_cells is on


@dataclass
class PackedGroup:
    """Outcome for a single container."""
    parent_id: str
    child_count: int
    columns: int
    rows: int
    width: float
    height: float


@dataclass
class PackingResult:
    """Result of a packing pass."""
    groups: List[PackedGroup] = field(default_factory=list)

    @property
    def groups_packed(self) -> int:
        return len(self.groups)

    @property
    def children_placed(self) -> int:
        return sum(g.child_count for g in self.groups)

    def get(self, parent_id: str) -> Optional[PackedGroup]:
        for group in self.groups:
            if group.parent_id == parent_id:
                return group
        return None


def children_bounding_box(children: List[Node]) -> Tuple[float, float, float, float]:
    """Bounding box (min_x, min_y, max_x, max_y) of children in the parent frame."""
    boxes = [c.get_bounding_box() for c in children]
    return (
        min(b[0] for b in boxes),
        min(b[1] for b in boxes),
        max(b[2] for b in boxes),
        max(b[3] for b in boxes),
    )


class GroupPacker:
    """Pack container children into grids and size containers to fit."""

    def __init__(self, graph: Graph, config: Optional[PackerConfig] = None):
        self.graph = graph
        self.config = config or PackerConfig()

    def pack(self) -> PackingResult:
        """
        Pack every container in the graph.

        Returns:
            PackingResult listing each packed container

        Raises:
            NumericError: If a container ends up with a non-finite size
        """
        result = PackingResult()
        groups = self.graph.group_by_parent()
        parent_ids = [pid for pid in groups if pid is not None and pid in self.graph.nodes]

        # Deepest first; sorted() is stable so input order breaks ties
        depths = {pid: self.graph.depth_of(pid) for pid in parent_ids}
        for parent_id in sorted(parent_ids, key=lambda pid: -depths[pid]):
            result.groups.append(self._pack_group(self.graph.nodes[parent_id], groups[parent_id]))

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Packed %d groups (%d children) spacing=%.1f margin=%.1f fit_cells=%s",
                result.groups_packed, result.children_placed,
                self.config.spacing, self.config.margin, self.config.fit_cells,
            )
        return result

    def _pitch(self, children: List[Node]) -> Tuple[float, float]:
        cfg = self.config
        if not cfg.fit_cells:
            return cfg.spacing, cfg.spacing
        widest = max(c.width for c in children)
        tallest = max(c.height for c in children)
        return max(cfg.spacing, widest + cfg.gutter), max(cfg.spacing, tallest + cfg.gutter)

    def _pack_group(self, parent: Node, children: List[Node]) -> PackedGroup:
        margin = self.config.margin
        pitch_x, pitch_y = self._pitch(children)
        cells = grid(len(children))

        for child, (row, col) in zip(children, cells):
            child.x = col * pitch_x + margin
            child.y = row * pitch_y + margin

        _, _, max_x, max_y = children_bounding_box(children)
        parent.width = max_x + margin
        parent.height = max_y + margin

        if not (math.isfinite(parent.width) and math.isfinite(parent.height)):
            raise NumericError(
                f"Packing produced a non-finite size for group {parent.id!r}",
                {"node": parent.id, "width": repr(parent.width), "height": repr(parent.height)},
            )

        rows = cells[-1][0] + 1
        columns = max(col for _, col in cells) + 1
        return PackedGroup(
            parent_id=parent.id,
            child_count=len(children),
            columns=columns,
            rows=rows,
            width=parent.width,
            height=parent.height,
        )


def pack_groups(graph: Graph, config: Optional[PackerConfig] = None) -> PackingResult:
    """Convenience wrapper: pack all containers of ``graph`` in place."""
    return GroupPacker(graph, config).pack()
