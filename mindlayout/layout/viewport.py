"""
Viewport Normalizer

Recentres a composition on the origin: the bounding box of all root-level
nodes (half-extents around each centre) is translated so its centre lands
on (0, 0). Children keep their parent-local positions and move with their
containers.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple
import logging
import math

from ..errors import NumericError
from ..graph.abstraction import Graph, Node

logger = logging.getLogger(__name__)


@dataclass
class ViewportConfig:
    """Configuration for viewport normalization."""
    enabled: bool = True


@dataclass
class ViewportResult:
    """Translation applied to root nodes."""
    offset_x: float = 0.0
    offset_y: float = 0.0
    bounds: Optional[Tuple[float, float, float, float]] = None  # Before translation
    nodes_moved: int = 0


def composition_bounds(nodes: List[Node]) -> Optional[Tuple[float, float, float, float]]:
    """Bounding box (min_x, min_y, max_x, max_y) of root nodes, or None if empty."""
    if not nodes:
        return None
    boxes = [n.get_bounding_box() for n in nodes]
    return (
        min(b[0] for b in boxes),
        min(b[1] for b in boxes),
        max(b[2] for b in boxes),
        max(b[3] for b in boxes),
    )


def normalize_viewport(graph: Graph, config: Optional[ViewportConfig] = None) -> ViewportResult:
    """
    Translate root-level nodes so their bounding box is centred on (0, 0).

    Raises:
        NumericError: If the bounding box is not finite
    """
    config = config or ViewportConfig()
    roots = graph.root_nodes()
    bounds = composition_bounds(roots)
    if not config.enabled or bounds is None:
        return ViewportResult(bounds=bounds)

    min_x, min_y, max_x, max_y = bounds
    center_x = (min_x + max_x) / 2
    center_y = (min_y + max_y) / 2
    if not (math.isfinite(center_x) and math.isfinite(center_y)):
        raise NumericError(
            "Composition bounds are not finite",
            {"bounds": [repr(v) for v in bounds]},
        )

    for node in roots:
        node.x -= center_x
        node.y -= center_y

    logger.debug("Viewport offset (%.2f, %.2f) applied to %d root nodes",
                 -center_x, -center_y, len(roots))
    return ViewportResult(
        offset_x=-center_x,
        offset_y=-center_y,
        bounds=bounds,
        nodes_moved=len(roots),
    )
