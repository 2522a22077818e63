"""Layout engine: placement strategies, generation, relaxation, packing, viewport."""

from .strategies import Orientation, arc, axis, chronological, circular, grid, grid_columns
from .generator import GeneratorConfig, StructuralLayoutGenerator
from .force_directed import (
    ForceDirectedRelaxer,
    RelaxationConfig,
    RelaxationState,
    SpatialGrid,
    relax_graph,
)
from .separation import SeparationResult, separate_nodes
from .packer import GroupPacker, PackerConfig, PackingResult, pack_groups
from .viewport import ViewportConfig, ViewportResult, composition_bounds, normalize_viewport

__all__ = [
    # Placement strategies
    "Orientation",
    "circular",
    "axis",
    "chronological",
    "arc",
    "grid",
    "grid_columns",
    # Generator
    "StructuralLayoutGenerator",
    "GeneratorConfig",
    # Relaxation
    "ForceDirectedRelaxer",
    "RelaxationConfig",
    "RelaxationState",
    "SpatialGrid",
    "relax_graph",
    "separate_nodes",
    "SeparationResult",
    # Packing
    "GroupPacker",
    "PackerConfig",
    "PackingResult",
    "pack_groups",
    # Viewport
    "ViewportConfig",
    "ViewportResult",
    "composition_bounds",
    "normalize_viewport",
]
