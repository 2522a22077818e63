"""
Force-Directed Relaxation

Physics-style re-layout of root-level nodes for any graph, including
user-rearranged canvases that never came from the structural generator.

Forces applied each iteration:
1. Repulsion - every pair of root nodes pushes apart with repulsion / d^2
2. Attraction - every edge between two root nodes pulls its ends together
   with d * attraction

Positions move by force * damping for a fixed number of iterations; there is
no convergence check, so cost is bounded at O(iterations * n^2). A final
separation pass then pushes apart any root pair still closer than
min_separation.

Children of groups are never moved here; the group packer owns them. Edges
with an endpoint inside a group contribute no attraction.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Set, Tuple
import logging
import math

from ..errors import NumericError
from ..graph.abstraction import Edge, Graph, Node
from .separation import SeparationResult, separate_nodes

logger = logging.getLogger(__name__)


class ForceType(Enum):
    """Types of forces in the simulation."""
    REPULSION = "repulsion"    # Pushes every root pair apart
    ATTRACTION = "attraction"  # Pulls connected nodes together


@dataclass
class Force:
    """A force vector with metadata."""
    fx: float
    fy: float
    force_type: ForceType
    source: str = ""  # Id of the node or edge that generated this force
    magnitude: float = field(init=False)

    def __post_init__(self):
        self.magnitude = math.sqrt(self.fx * self.fx + self.fy * self.fy)


@dataclass
class RelaxationConfig:
    """Configuration for force-directed relaxation."""
    # Force strengths
    repulsion: float = 5000.0
    attraction: float = 0.1

    # Physics parameters
    damping: float = 0.8
    iterations: int = 50

    # Spacing
    min_separation: float = 100.0  # Minimum centre distance after relaxation
    separation_passes: int = 8

    # Bootstrap: nodes stacked on one spot are spread on this circle first
    bootstrap_radius: float = 400.0
    spread_epsilon: float = 1e-6

    # Optional spatial-grid repulsion: ignore pairs farther apart than this
    repulsion_cutoff: Optional[float] = None


@dataclass
class RelaxationState:
    """Current state of the simulation."""
    positions: Dict[str, Tuple[float, float]]  # node id -> (x, y)
    iteration: int = 0
    total_energy: float = 0.0
    max_movement: float = 0.0
    bootstrapped: bool = False
    anchor_id: Optional[str] = None
    separation: SeparationResult = field(default_factory=SeparationResult)


class SpatialGrid:
    """Spatial grid for O(N) neighbour lookups in repulsion calculations.

    Instead of checking all N*(N-1)/2 node pairs, nodes are binned into
    square cells and only pairs in the same or adjacent cells are checked.
    With cell_size equal to the repulsion cutoff, any pair within the cutoff
    is guaranteed to be in neighbouring cells.
    """

    def __init__(self, cell_size: float):
        """
        Initialize spatial grid.

        Args:
            cell_size: Size of each grid cell (should be >= repulsion cutoff)
        """
        if cell_size <= 0:
            raise ValueError(f"Grid cell size must be positive, got {cell_size}")
        self.cell_size = cell_size
        self._cells: Dict[Tuple[int, int], List[str]] = {}
        self._positions: Dict[str, Tuple[float, float]] = {}

    def _cell_key(self, x: float, y: float) -> Tuple[int, int]:
        """Convert canvas coordinates to cell key."""
        return (int(math.floor(x / self.cell_size)),
                int(math.floor(y / self.cell_size)))

    def clear(self):
        """Clear the grid for rebuilding."""
        self._cells.clear()
        self._positions.clear()

    def insert(self, node_id: str, x: float, y: float):
        """Insert a node into the grid."""
        self._cells.setdefault(self._cell_key(x, y), []).append(node_id)
        self._positions[node_id] = (x, y)

    def get_neighbors(self, node_id: str) -> List[str]:
        """Get nodes in the 3x3 cell neighbourhood with id > node_id.

        The ordering filter means each unordered pair is returned once.
        """
        if node_id not in self._positions:
            return []

        cx, cy = self._cell_key(*self._positions[node_id])
        neighbors = []
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                for other_id in self._cells.get((cx + dx, cy + dy), ()):
                    if other_id > node_id:
                        neighbors.append(other_id)
        return neighbors


class ForceDirectedRelaxer:
    """
    Re-layout root-level nodes of a graph with repulsion and attraction.

    Nodes are updated in place; callers wanting an untouched input should
    pass ``graph.copy()``.
    """

    def __init__(self, graph: Graph, config: Optional[RelaxationConfig] = None):
        self.graph = graph
        self.config = config or RelaxationConfig()

        groups = graph.group_by_parent()
        self._roots: List[Node] = groups.get(None, [])
        self._root_ids: Set[str] = {n.id for n in self._roots}
        self._edges: List[Edge] = [
            e for e in graph.edges
            if e.source in self._root_ids and e.target in self._root_ids and e.source != e.target
        ]
        self._grid: Optional[SpatialGrid] = None
        if self.config.repulsion_cutoff:
            self._grid = SpatialGrid(self.config.repulsion_cutoff)

    def relax(self, callback: Optional[Callable[[RelaxationState], None]] = None
              ) -> RelaxationState:
        """
        Run the relaxation.

        Args:
            callback: Optional function called each iteration with current state

        Returns:
            Final RelaxationState

        Raises:
            NumericError: If any root position ends up NaN or infinite
        """
        cfg = self.config
        state = RelaxationState(positions={n.id: (n.x, n.y) for n in self._roots})
        if not self._roots:
            return state

        self._bootstrap(state)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Relaxation start: roots=%d edges=%d iterations=%d grid=%s",
                len(self._roots), len(self._edges), cfg.iterations,
                f"{cfg.repulsion_cutoff:.1f}" if cfg.repulsion_cutoff else "none",
            )
            logger.debug(
                "Relaxation config: repulsion=%.2f attraction=%.3f damping=%.2f min_sep=%.1f",
                cfg.repulsion, cfg.attraction, cfg.damping, cfg.min_separation,
            )

        log_every = 10
        for iteration in range(cfg.iterations):
            state.iteration = iteration
            forces = self._calculate_all_forces(state)
            state.max_movement = self._apply_forces(state, forces)
            self._check_positions(state, iteration)
            state.total_energy = self._calculate_energy(forces)

            if callback:
                callback(state)

            if logger.isEnabledFor(logging.DEBUG) and iteration % log_every == 0:
                summary = self._summarize_forces(forces)
                logger.debug(
                    "Iteration %d: energy=%.3f max_move=%.4f repulsion=%d attraction=%d max_force_node=%s",
                    iteration,
                    state.total_energy,
                    state.max_movement,
                    summary["counts"].get(ForceType.REPULSION, 0),
                    summary["counts"].get(ForceType.ATTRACTION, 0),
                    summary["max_node"],
                )

        for node in self._roots:
            node.x, node.y = state.positions[node.id]

        state.separation = separate_nodes(
            self._roots, cfg.min_separation, size_aware=False, max_passes=cfg.separation_passes,
        )
        for node in self._roots:
            state.positions[node.id] = (node.x, node.y)

        self._check_finite()
        logger.debug(
            "Relaxation done: iterations=%d energy=%.3f separation_pushes=%d",
            cfg.iterations, state.total_energy, state.separation.pushes,
        )
        return state

    # ------------------------------------------------------------------
    # Bootstrap
    # ------------------------------------------------------------------

    def _select_anchor(self) -> Node:
        """First central/headline-like root node, else the first root node."""
        for node in self._roots:
            if node.role.is_hub:
                return node
        return self._roots[0]

    def _has_spread(self, state: RelaxationState) -> bool:
        xs = [p[0] for p in state.positions.values()]
        ys = [p[1] for p in state.positions.values()]
        extent = max(max(xs) - min(xs), max(ys) - min(ys))
        return extent > self.config.spread_epsilon

    def _bootstrap(self, state: RelaxationState):
        """Spread root nodes on a circle around the anchor if they all coincide."""
        anchor = self._select_anchor()
        state.anchor_id = anchor.id
        if len(self._roots) < 2 or self._has_spread(state):
            return

        others = [n for n in self._roots if n.id != anchor.id]
        ax, ay = state.positions[anchor.id]
        radius = self.config.bootstrap_radius
        for index, node in enumerate(others):
            angle = (index / len(others)) * 2 * math.pi
            state.positions[node.id] = (ax + math.cos(angle) * radius,
                                        ay + math.sin(angle) * radius)
        state.bootstrapped = True
        logger.debug("Bootstrapped %d root nodes around anchor %s", len(others), anchor.id)

    # ------------------------------------------------------------------
    # Forces
    # ------------------------------------------------------------------

    def _calculate_all_forces(self, state: RelaxationState) -> Dict[str, List[Force]]:
        forces: Dict[str, List[Force]] = {n.id: [] for n in self._roots}
        self._add_repulsion_forces(state, forces)
        self._add_attraction_forces(state, forces)
        return forces

    def _repulsion_pairs(self, state: RelaxationState):
        """Yield candidate (id_a, id_b) pairs, each unordered pair once."""
        if self._grid is None:
            ids = [n.id for n in self._roots]
            for i, id_a in enumerate(ids):
                for id_b in ids[i + 1:]:
                    yield id_a, id_b
            return

        self._grid.clear()
        for node_id, (x, y) in state.positions.items():
            self._grid.insert(node_id, x, y)
        for node in self._roots:
            for other_id in self._grid.get_neighbors(node.id):
                yield node.id, other_id

    def _add_repulsion_forces(self, state: RelaxationState, forces: Dict[str, List[Force]]):
        cutoff = self.config.repulsion_cutoff
        for id_a, id_b in self._repulsion_pairs(state):
            ax, ay = state.positions[id_a]
            bx, by = state.positions[id_b]
            dx = bx - ax
            dy = by - ay
            distance = math.sqrt(dx * dx + dy * dy)

            # Coincident nodes have no defined direction
            if distance == 0:
                continue
            if cutoff and distance > cutoff:
                continue

            magnitude = self.config.repulsion / (distance * distance)
            fx = (dx / distance) * magnitude
            fy = (dy / distance) * magnitude
            forces[id_a].append(Force(-fx, -fy, ForceType.REPULSION, id_b))
            forces[id_b].append(Force(fx, fy, ForceType.REPULSION, id_a))

    def _add_attraction_forces(self, state: RelaxationState, forces: Dict[str, List[Force]]):
        for edge in self._edges:
            sx, sy = state.positions[edge.source]
            tx, ty = state.positions[edge.target]
            dx = tx - sx
            dy = ty - sy
            distance = math.sqrt(dx * dx + dy * dy)
            if distance == 0:
                continue

            magnitude = distance * self.config.attraction
            fx = (dx / distance) * magnitude
            fy = (dy / distance) * magnitude
            forces[edge.source].append(Force(fx, fy, ForceType.ATTRACTION, edge.id))
            forces[edge.target].append(Force(-fx, -fy, ForceType.ATTRACTION, edge.id))

    def _apply_forces(self, state: RelaxationState, forces: Dict[str, List[Force]]) -> float:
        """Move each root node by its net force times damping; return max movement."""
        damping = self.config.damping
        max_movement = 0.0
        for node_id, force_list in forces.items():
            fx = sum(f.fx for f in force_list)
            fy = sum(f.fy for f in force_list)
            mx, my = fx * damping, fy * damping
            x, y = state.positions[node_id]
            state.positions[node_id] = (x + mx, y + my)
            max_movement = max(max_movement, math.sqrt(mx * mx + my * my))
        return max_movement

    def _calculate_energy(self, forces: Dict[str, List[Force]]) -> float:
        """Sum of squared net force magnitudes."""
        energy = 0.0
        for force_list in forces.values():
            fx = sum(f.fx for f in force_list)
            fy = sum(f.fy for f in force_list)
            energy += fx * fx + fy * fy
        return energy

    def _summarize_forces(self, forces: Dict[str, List[Force]]) -> Dict:
        counts: Dict[ForceType, int] = {}
        max_node = None
        max_magnitude = -1.0
        for node_id, force_list in forces.items():
            for f in force_list:
                counts[f.force_type] = counts.get(f.force_type, 0) + 1
                if f.magnitude > max_magnitude:
                    max_magnitude = f.magnitude
                    max_node = node_id
        return {"counts": counts, "max_node": max_node, "max_magnitude": max(max_magnitude, 0.0)}

    def _check_positions(self, state: RelaxationState, iteration: int):
        """Stop as soon as the simulation diverges."""
        for node_id, (x, y) in state.positions.items():
            if not (math.isfinite(x) and math.isfinite(y)):
                raise NumericError(
                    f"Relaxation diverged at iteration {iteration} on node {node_id!r}",
                    {"node": node_id, "iteration": iteration, "x": repr(x), "y": repr(y)},
                )

    def _check_finite(self):
        for node in self._roots:
            if not (math.isfinite(node.x) and math.isfinite(node.y)):
                raise NumericError(
                    f"Relaxation produced a non-finite position for node {node.id!r}",
                    {"node": node.id, "x": repr(node.x), "y": repr(node.y)},
                )


def relax_graph(graph: Graph, config: Optional[RelaxationConfig] = None) -> RelaxationState:
    """Convenience wrapper: relax root-level nodes of ``graph`` in place."""
    return ForceDirectedRelaxer(graph, config).relax()
