"""
Graph Abstraction Layer

Provides the node/edge model shared by every layout component. Nodes carry a
closed role tag, a position, a size and an optional parent; everything the
renderer needs beyond geometry lives in the opaque ``data`` payload, which the
engine never touches.

Coordinates:
- Root-level nodes (no parent_id) are positioned by their centre in canvas space.
- Child nodes are positioned by their top-left corner in the parent's local
  frame, whose origin is the parent's top-left corner.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple
import copy
import math

from ..errors import EdgeReferenceError, ValidationError


class NodeRole(Enum):
    """Closed set of node roles understood by the layout engine."""
    CENTRAL = "central"
    HEADLINE = "headline"
    SECTION = "section"
    KEY_POINT = "keyPoint"
    EXAMPLE = "example"
    DATA_POINT = "dataPoint"
    QUOTE = "quote"
    ACTION_ITEM = "actionItem"
    INSIGHT = "insight"
    THEME = "theme"
    GROUP = "group"

    @classmethod
    def parse(cls, value: Any, node_id: str = "") -> "NodeRole":
        """Resolve a serialized role string, raising ValidationError if unknown."""
        try:
            return cls(value)
        except ValueError:
            valid = [r.value for r in cls]
            raise ValidationError(
                f"Unknown node role {value!r} for node {node_id!r}",
                {"node": node_id, "valid_roles": valid},
            ) from None

    @property
    def is_hub(self) -> bool:
        """Roles that anchor the composition (central/headline-like)."""
        return self in (NodeRole.CENTRAL, NodeRole.HEADLINE)


# Used when a node arrives without any size information
DEFAULT_NODE_SIZE = (200.0, 100.0)


def _require_number(value: Any, field_name: str, node_id: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(
            f"Field {field_name!r} of {node_id!r} must be a number",
            {"node": node_id, "field": field_name, "value": repr(value)},
        )
    try:
        number = float(value)
    except OverflowError:
        number = math.inf
    if not math.isfinite(number):
        raise ValidationError(
            f"Field {field_name!r} of {node_id!r} must be finite",
            {"node": node_id, "field": field_name, "value": repr(value)},
        )
    return number


def _first_present(*values: Any) -> Any:
    """First value that is not None; JSON null counts as missing."""
    for value in values:
        if value is not None:
            return value
    return None


@dataclass
class Node:
    """A positioned element on the canvas."""
    id: str
    role: NodeRole
    x: float = 0.0
    y: float = 0.0
    width: float = DEFAULT_NODE_SIZE[0]
    height: float = DEFAULT_NODE_SIZE[1]
    parent_id: Optional[str] = None
    z_index: int = 0
    node_type: str = "text"  # Renderer node type (headline, sticky, text, group)
    hidden: bool = False

    style: Dict[str, Any] = field(default_factory=dict)
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_root(self) -> bool:
        """True when positioned directly in canvas space."""
        return self.parent_id is None

    def get_bounding_box(self) -> Tuple[float, float, float, float]:
        """
        Get axis-aligned bounding box in the node's own coordinate frame.

        Root nodes are centred on (x, y); children extend right and down
        from (x, y) inside their parent's frame.

        Returns:
            (min_x, min_y, max_x, max_y)
        """
        if self.parent_id is None:
            hw, hh = self.width / 2, self.height / 2
            return (self.x - hw, self.y - hh, self.x + hw, self.y + hh)
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    def distance_to(self, other: "Node") -> float:
        """Calculate position-to-position distance to another node."""
        dx = self.x - other.x
        dy = self.y - other.y
        return math.sqrt(dx * dx + dy * dy)

    def is_finite(self) -> bool:
        """Check that position and size are real numbers."""
        return all(math.isfinite(v) for v in (self.x, self.y, self.width, self.height))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON node schema."""
        d: Dict[str, Any] = {
            "id": self.id,
            "role": self.role.value,
            "type": self.node_type,
            "position": {"x": self.x, "y": self.y},
            "width": self.width,
            "height": self.height,
            "zIndex": self.z_index,
            "data": self.data,
        }
        if self.style:
            d["style"] = self.style
        if self.parent_id is not None:
            d["parentId"] = self.parent_id
        if self.hidden:
            d["hidden"] = True
        return d

    @classmethod
    def from_dict(
        cls,
        payload: Dict[str, Any],
        default_size: Optional[Tuple[float, float]] = None,
    ) -> "Node":
        """
        Create from a JSON node dictionary.

        Size is read from ``width``/``height``, then ``style.width``/``style.height``
        (container nodes are often sized through style), then ``default_size``.

        Raises:
            ValidationError: If id, role or position is missing or malformed
        """
        if not isinstance(payload, dict):
            raise ValidationError("Node entries must be objects", {"value": repr(payload)[:80]})

        node_id = payload.get("id")
        if not isinstance(node_id, str) or not node_id:
            raise ValidationError("Node is missing a string 'id'", {"node": repr(node_id)})

        if "role" not in payload:
            raise ValidationError(f"Node {node_id!r} is missing 'role'", {"node": node_id})
        role = NodeRole.parse(payload["role"], node_id)

        position = payload.get("position")
        if not isinstance(position, dict):
            raise ValidationError(f"Node {node_id!r} is missing 'position'", {"node": node_id})
        x = _require_number(position.get("x"), "position.x", node_id)
        y = _require_number(position.get("y"), "position.y", node_id)

        style = payload.get("style") or {}
        if not isinstance(style, dict):
            raise ValidationError(f"Node {node_id!r} has a non-object 'style'", {"node": node_id})
        data = payload.get("data") or {}
        if not isinstance(data, dict):
            raise ValidationError(f"Node {node_id!r} has a non-object 'data'", {"node": node_id})

        fallback_w, fallback_h = default_size or DEFAULT_NODE_SIZE
        width = _first_present(payload.get("width"), style.get("width"), fallback_w)
        height = _first_present(payload.get("height"), style.get("height"), fallback_h)

        parent_id = payload.get("parentId", payload.get("parentNode"))
        if parent_id is not None and not isinstance(parent_id, str):
            raise ValidationError(f"Node {node_id!r} has a non-string 'parentId'", {"node": node_id})

        z_index = _first_present(payload.get("zIndex"), 0)

        return cls(
            id=node_id,
            role=role,
            x=x,
            y=y,
            width=_require_number(width, "width", node_id),
            height=_require_number(height, "height", node_id),
            parent_id=parent_id or None,
            z_index=int(_require_number(z_index, "zIndex", node_id)),
            node_type=str(payload.get("type", "group" if role == NodeRole.GROUP else "text")),
            hidden=bool(payload.get("hidden", False)),
            style=style,
            data=data,
        )


@dataclass
class Edge:
    """A connection between two nodes."""
    id: str
    source: str
    target: str
    edge_type: str = "default"
    style: Dict[str, Any] = field(default_factory=dict)
    data: Dict[str, Any] = field(default_factory=dict)

    def connects(self, node_id: str) -> bool:
        """Check whether this edge touches the given node."""
        return node_id in (self.source, self.target)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON edge schema."""
        d: Dict[str, Any] = {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "type": self.edge_type,
            "style": self.style,
        }
        if self.data:
            d["data"] = self.data
        return d

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Edge":
        """Create from a JSON edge dictionary."""
        if not isinstance(payload, dict):
            raise ValidationError("Edge entries must be objects", {"value": repr(payload)[:80]})
        for key in ("id", "source", "target"):
            if not isinstance(payload.get(key), str) or not payload.get(key):
                raise ValidationError(
                    f"Edge is missing a string {key!r}",
                    {"edge": repr(payload.get("id")), "field": key},
                )
        style = payload.get("style") or {}
        data = payload.get("data") or {}
        if not isinstance(style, dict) or not isinstance(data, dict):
            raise ValidationError(
                f"Edge {payload['id']!r} has a non-object 'style' or 'data'",
                {"edge": payload["id"]},
            )
        return cls(
            id=payload["id"],
            source=payload["source"],
            target=payload["target"],
            edge_type=str(payload.get("type", "default")),
            style=style,
            data=data,
        )


@dataclass
class Graph:
    """
    A node/edge graph ready for layout.

    Nodes are kept in insertion order; packing and bootstrap choices depend
    on that order, so it is preserved through serialization.
    """
    nodes: Dict[str, Node] = field(default_factory=dict)
    edges: List[Edge] = field(default_factory=list)

    def add_node(self, node: Node) -> Node:
        """Add a node, rejecting duplicate ids."""
        if node.id in self.nodes:
            raise ValidationError(f"Duplicate node id {node.id!r}", {"node": node.id})
        self.nodes[node.id] = node
        return node

    def add_edge(self, edge: Edge) -> Edge:
        """Add an edge. Endpoints are checked by validate_references()."""
        self.edges.append(edge)
        return edge

    def get_node(self, node_id: str) -> Optional[Node]:
        """Look up a node by id."""
        return self.nodes.get(node_id)

    def iter_nodes(self) -> Iterator[Node]:
        """Iterate nodes in insertion order."""
        return iter(self.nodes.values())

    def root_nodes(self) -> List[Node]:
        """Nodes positioned directly in canvas space."""
        return [n for n in self.nodes.values() if n.parent_id is None]

    def children_of(self, parent_id: str) -> List[Node]:
        """Direct children of a container, in insertion order."""
        return [n for n in self.nodes.values() if n.parent_id == parent_id]

    def group_by_parent(self) -> Dict[Optional[str], List[Node]]:
        """Partition nodes into disjoint positioning groups keyed by parent id."""
        groups: Dict[Optional[str], List[Node]] = {}
        for node in self.nodes.values():
            groups.setdefault(node.parent_id, []).append(node)
        return groups

    def depth_of(self, node_id: str) -> int:
        """
        Number of ancestors above a node (0 for root-level nodes).

        Raises:
            ValidationError: If the parent chain loops back on itself
        """
        depth = 0
        seen = {node_id}
        current = self.nodes[node_id].parent_id
        while current is not None:
            if current in seen:
                raise ValidationError(
                    f"Parent chain of {node_id!r} contains a cycle",
                    {"node": node_id, "cycle_at": current},
                )
            seen.add(current)
            depth += 1
            parent = self.nodes.get(current)
            if parent is None:
                break
            current = parent.parent_id
        return depth

    def validate_references(self):
        """
        Check that every edge endpoint and parentId resolves to a node.

        Raises:
            EdgeReferenceError: On the first dangling reference found
        """
        for edge in self.edges:
            for endpoint in (edge.source, edge.target):
                if endpoint not in self.nodes:
                    raise EdgeReferenceError(
                        f"Edge {edge.id!r} references unknown node {endpoint!r}",
                        {"edge": edge.id, "node": endpoint},
                    )
        for node in self.nodes.values():
            if node.parent_id is not None and node.parent_id not in self.nodes:
                raise EdgeReferenceError(
                    f"Node {node.id!r} references unknown parent {node.parent_id!r}",
                    {"node": node.id, "parent": node.parent_id},
                )

    def copy(self) -> "Graph":
        """Deep copy, so layout passes never alter the caller's graph."""
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON graph schema."""
        return {
            "nodes": [n.to_dict() for n in self.nodes.values()],
            "edges": [e.to_dict() for e in self.edges],
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any], style_table=None) -> "Graph":
        """
        Build a graph from ``{"nodes": [...], "edges": [...]}``.

        Args:
            payload: Parsed JSON graph
            style_table: Optional StyleTable used for role default sizes

        Raises:
            ValidationError: Missing/malformed fields or duplicate ids
            EdgeReferenceError: Dangling edge endpoints or parent ids
        """
        if not isinstance(payload, dict):
            raise ValidationError("Graph payload must be an object")
        nodes = payload.get("nodes")
        edges = payload.get("edges")
        if not isinstance(nodes, list) or not isinstance(edges, list):
            raise ValidationError(
                "Graph payload requires 'nodes' and 'edges' lists",
                {"has_nodes": isinstance(nodes, list), "has_edges": isinstance(edges, list)},
            )

        graph = cls()
        for raw in nodes:
            default_size = None
            if style_table is not None and isinstance(raw, dict) and raw.get("role") in style_table.role_names:
                role_style = style_table.for_role(NodeRole(raw["role"]))
                default_size = (role_style.width, role_style.height)
            graph.add_node(Node.from_dict(raw, default_size))
        for raw in edges:
            graph.add_edge(Edge.from_dict(raw))

        graph.validate_references()
        for node_id in graph.nodes:
            graph.depth_of(node_id)
        return graph
