"""
Graph Checks

Post-layout sanity checks on a positioned graph: dangling references,
non-finite coordinates, containers that do not hold their children, and
overlapping root-level nodes. Results are collected as flags in a
GraphReport so the CLI can print them.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from enum import Enum
import itertools
import logging

from ..errors import EdgeReferenceError, NumericError
from ..graph.abstraction import Graph, Node
from ..layout.packer import children_bounding_box

logger = logging.getLogger(__name__)


class Severity(Enum):
    """Severity levels for graph flags."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class CheckCategory(Enum):
    """Which check raised a flag."""
    REFERENCE = "reference"
    NUMERIC = "numeric"
    CONTAINMENT = "containment"
    OVERLAP = "overlap"


@dataclass
class GraphFlag:
    """A single finding about the graph."""
    severity: Severity
    category: CheckCategory
    location: str  # Node or edge id
    message: str

    def to_dict(self) -> Dict:
        return {
            "severity": self.severity.value,
            "category": self.category.value,
            "location": self.location,
            "message": self.message,
        }


@dataclass
class GraphReport:
    """Outcome of running all checks on a graph."""
    flags: List[GraphFlag] = field(default_factory=list)
    node_count: int = 0
    edge_count: int = 0
    group_count: int = 0

    @property
    def passed(self) -> bool:
        """True when nothing at ERROR severity was found."""
        return not any(f.severity == Severity.ERROR for f in self.flags)

    def get_flags_by_category(self, category: CheckCategory) -> List[GraphFlag]:
        return [f for f in self.flags if f.category == category]

    def summary(self) -> str:
        """Generate human-readable summary."""
        lines = [
            f"Nodes: {self.node_count}",
            f"Edges: {self.edge_count}",
            f"Groups: {self.group_count}",
            "",
        ]
        if not self.flags:
            lines.append("No issues found")
            return "\n".join(lines)

        lines.append("Flags:")
        for severity in (Severity.ERROR, Severity.WARNING, Severity.INFO):
            for flag in self.flags:
                if flag.severity == severity:
                    lines.append(f"  [{severity.name}] {flag.location}: {flag.message}")
        lines.append("")
        lines.append("Result: " + ("PASS" if self.passed else "FAIL"))
        return "\n".join(lines)

    def to_dict(self) -> Dict:
        return {
            "passed": self.passed,
            "node_count": self.node_count,
            "edge_count": self.edge_count,
            "group_count": self.group_count,
            "flags": [f.to_dict() for f in self.flags],
        }


def check_references(graph: Graph) -> List[GraphFlag]:
    """Flag edge endpoints and parent ids that do not resolve to a node."""
    flags = []
    for edge in graph.edges:
        for endpoint in (edge.source, edge.target):
            if endpoint not in graph.nodes:
                flags.append(GraphFlag(
                    Severity.ERROR, CheckCategory.REFERENCE, edge.id,
                    f"references unknown node {endpoint!r}",
                ))
    for node in graph.iter_nodes():
        if node.parent_id is not None and node.parent_id not in graph.nodes:
            flags.append(GraphFlag(
                Severity.ERROR, CheckCategory.REFERENCE, node.id,
                f"references unknown parent {node.parent_id!r}",
            ))
    return flags


def check_finite(graph: Graph, raise_on_error: bool = False) -> List[GraphFlag]:
    """
    Flag nodes whose position or size is NaN or infinite.

    Raises:
        NumericError: On the first bad node when ``raise_on_error`` is set
    """
    flags = []
    for node in graph.iter_nodes():
        if node.is_finite():
            continue
        if raise_on_error:
            raise NumericError(
                f"Node {node.id!r} has a non-finite position or size",
                {"node": node.id, "x": repr(node.x), "y": repr(node.y),
                 "width": repr(node.width), "height": repr(node.height)},
            )
        flags.append(GraphFlag(
            Severity.ERROR, CheckCategory.NUMERIC, node.id,
            f"non-finite geometry x={node.x!r} y={node.y!r} "
            f"width={node.width!r} height={node.height!r}",
        ))
    return flags


def check_containment(graph: Graph, margin: float = 0.0) -> List[GraphFlag]:
    """Flag containers whose box does not hold all children plus ``margin``."""
    flags = []
    for parent_id, children in graph.group_by_parent().items():
        parent = graph.get_node(parent_id) if parent_id is not None else None
        if parent is None:
            continue
        min_x, min_y, max_x, max_y = children_bounding_box(children)
        tolerance = 1e-6
        if min_x < -tolerance or min_y < -tolerance:
            flags.append(GraphFlag(
                Severity.WARNING, CheckCategory.CONTAINMENT, parent.id,
                f"children extend above or left of the container origin ({min_x:.1f}, {min_y:.1f})",
            ))
        if max_x + margin > parent.width + tolerance or max_y + margin > parent.height + tolerance:
            flags.append(GraphFlag(
                Severity.WARNING, CheckCategory.CONTAINMENT, parent.id,
                f"size {parent.width:.1f}x{parent.height:.1f} does not hold children "
                f"extent {max_x:.1f}x{max_y:.1f} plus margin {margin:.1f}",
            ))
    return flags


def _boxes_overlap(a: Tuple[float, float, float, float], b: Tuple[float, float, float, float]) -> bool:
    return a[0] < b[2] and b[0] < a[2] and a[1] < b[3] and b[1] < a[3]


def find_root_overlaps(graph: Graph) -> List[Tuple[str, str]]:
    """Pairs of root-level node ids whose boxes intersect, in insertion order."""
    roots: List[Node] = graph.root_nodes()
    boxes = {n.id: n.get_bounding_box() for n in roots}
    return [
        (a.id, b.id)
        for a, b in itertools.combinations(roots, 2)
        if _boxes_overlap(boxes[a.id], boxes[b.id])
    ]


def check_graph(graph: Graph, margin: Optional[float] = None) -> GraphReport:
    """
    Run every check and collect the flags into a report.

    Args:
        graph: Positioned graph
        margin: Containment margin; containment is only checked when given
    """
    report = GraphReport(
        node_count=len(graph.nodes),
        edge_count=len(graph.edges),
        group_count=sum(1 for pid in graph.group_by_parent() if pid is not None),
    )
    report.flags.extend(check_references(graph))
    report.flags.extend(check_finite(graph))
    if margin is not None and not any(f.category == CheckCategory.REFERENCE for f in report.flags):
        report.flags.extend(check_containment(graph, margin))
    for a, b in find_root_overlaps(graph):
        report.flags.append(GraphFlag(
            Severity.INFO, CheckCategory.OVERLAP, a, f"overlaps {b!r}",
        ))

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Graph check: %d flags, passed=%s", len(report.flags), report.passed)
    return report


def require_valid(graph: Graph):
    """
    Raise on the first reference or numeric problem.

    Raises:
        EdgeReferenceError: Dangling edge endpoint or parent id
        NumericError: Non-finite coordinate or size
    """
    refs = check_references(graph)
    if refs:
        raise EdgeReferenceError(f"{refs[0].location} {refs[0].message}", {"location": refs[0].location})
    check_finite(graph, raise_on_error=True)
