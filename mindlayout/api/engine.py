"""
Layout Engine API

Single entry point for hosts (HTTP handlers, the CLI, notebooks). Each call
runs a complete pipeline on a private copy of its input and returns a
LayoutResult: either a fully positioned graph or an explicit error. Layout
exceptions never cross this boundary.

Usage:
    from mindlayout.api import LayoutEngine
    engine = LayoutEngine()
    result = engine.generate(tree_json)
    if result.ok:
        save(result.envelope)
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional
import copy
import json
import logging

from ..errors import ErrorKind, LayoutError, NumericError
from ..graph.abstraction import Graph
from ..graph.io import build_envelope
from ..graph.semantic_tree import LayoutRules, SemanticTree
from ..layout.force_directed import ForceDirectedRelaxer, RelaxationState
from ..layout.generator import StructuralLayoutGenerator
from ..layout.packer import GroupPacker, PackingResult
from ..layout.viewport import ViewportResult, normalize_viewport
from ..profiles import DEFAULT, LayoutProfile
from ..styles import StyleTable, get_style_table
from ..validation.graph_checks import require_valid

logger = logging.getLogger(__name__)

HTTP_STATUS = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.REFERENCE: 422,
    ErrorKind.NUMERIC: 500,
}

_LOG_INPUT_LIMIT = 2000


@dataclass
class LayoutResult:
    """Outcome of a layout call: a positioned graph or an error, never both."""
    ok: bool
    graph: Optional[Graph] = None
    envelope: Optional[Dict[str, Any]] = None
    error: Optional[LayoutError] = None

    # Stage diagnostics (success only)
    relaxation: Optional[RelaxationState] = None
    packing: Optional[PackingResult] = None
    viewport: Optional[ViewportResult] = None

    @property
    def http_status(self) -> int:
        if self.ok:
            return 200
        return HTTP_STATUS[self.error.kind]

    def to_dict(self) -> Dict[str, Any]:
        """Response envelope: ``{"ok": true, "data": ...}`` or ``{"ok": false, "error": ...}``."""
        if self.ok:
            return {"ok": True, "data": self.envelope}
        return {"ok": False, "error": self.error.to_dict()}

    @classmethod
    def failure(cls, error: LayoutError) -> "LayoutResult":
        return cls(ok=False, error=error)


def _truncate_input(payload: Any) -> str:
    text = json.dumps(payload, default=repr)
    if len(text) > _LOG_INPUT_LIMIT:
        return text[:_LOG_INPUT_LIMIT] + "...(truncated)"
    return text


@dataclass
class LayoutEngine:
    """
    Facade over the layout pipeline.

    generate: semantic tree -> structural layout -> [relaxation] -> packing -> viewport
    relayout: positioned graph -> relaxation -> packing -> viewport
    """
    profile: LayoutProfile = field(default_factory=lambda: DEFAULT)
    styles: StyleTable = field(default_factory=get_style_table)

    def generate(
        self,
        tree_payload: Dict[str, Any],
        rules: Optional[Dict[str, Any]] = None,
        relax: bool = False,
        generated_at: Optional[datetime] = None,
    ) -> LayoutResult:
        """
        Build a positioned graph from a semantic tree.

        Args:
            tree_payload: Parsed JSON tree (flat or analysis envelope)
            rules: Layout-rule overrides, e.g. ``{"headlinePlacement": "vertical"}``
            relax: Also run force-directed relaxation before packing
            generated_at: Timestamp for the metadata block (default: now)
        """
        try:
            tree = SemanticTree.from_dict(copy.deepcopy(tree_payload))
            layout_rules = self._merge_rules(tree.layout, rules)
            generator = StructuralLayoutGenerator(self.profile.generator, self.styles)
            graph = generator.generate(tree, layout_rules)
            result = self._finish(graph, relax)
        except NumericError as e:
            logger.error("Generation failed: %s input=%s", e.message, _truncate_input(tree_payload))
            return LayoutResult.failure(e)
        except LayoutError as e:
            logger.warning("Generation rejected: %s", e.message)
            return LayoutResult.failure(e)

        result.envelope = build_envelope(
            result.graph,
            layout_rules.primary_layout,
            generated_at=generated_at,
            extra={"structure": {
                "headlines": len(tree.headlines),
                "sections": tree.section_count,
                "totalPoints": tree.key_point_count,
            }},
        )
        return result

    def relayout(
        self,
        graph_payload: Dict[str, Any],
        overrides: Optional[Dict[str, Any]] = None,
        generated_at: Optional[datetime] = None,
    ) -> LayoutResult:
        """
        Relax, pack and recentre an existing graph.

        Args:
            graph_payload: Parsed JSON ``{"nodes": [...], "edges": [...]}``
            overrides: RelaxationConfig field overrides, e.g. ``{"iterations": 100}``
            generated_at: Timestamp for the metadata block (default: now)
        """
        try:
            engine = self
            if overrides:
                engine = replace(self, profile=self.profile.with_overrides({"relaxation": overrides}))
            graph = Graph.from_dict(copy.deepcopy(graph_payload), self.styles)
            result = engine._finish(graph, relax=True)
        except NumericError as e:
            logger.error("Relayout failed: %s input=%s", e.message, _truncate_input(graph_payload))
            return LayoutResult.failure(e)
        except LayoutError as e:
            logger.warning("Relayout rejected: %s", e.message)
            return LayoutResult.failure(e)

        result.envelope = build_envelope(result.graph, "force-directed", generated_at=generated_at)
        return result

    def _merge_rules(self, base: LayoutRules, rules: Optional[Dict[str, Any]]) -> LayoutRules:
        if not rules:
            return base
        merged = base.to_dict()
        merged["layoutRules"].update({k: v for k, v in rules.items() if k != "primaryLayout"})
        if rules.get("primaryLayout"):
            merged["primaryLayout"] = rules["primaryLayout"]
        return LayoutRules.from_dict(merged)

    def _finish(self, graph: Graph, relax: bool) -> LayoutResult:
        """Run the post-generation stages and the final validity gate."""
        state = None
        if relax:
            state = ForceDirectedRelaxer(graph, self.profile.relaxation).relax()
        packing = GroupPacker(graph, self.profile.packer).pack()
        viewport = normalize_viewport(graph, self.profile.viewport)
        require_valid(graph)
        return LayoutResult(ok=True, graph=graph, relaxation=state, packing=packing, viewport=viewport)
