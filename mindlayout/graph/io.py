"""
Graph JSON I/O

Reading and writing graphs and semantic trees as JSON, and building the
output envelope handed back to the caller:

```json
{
  "nodes": [...],
  "edges": [...],
  "metadata": {
    "totalNodes": 10,
    "totalEdges": 9,
    "generatedAt": "2026-01-14T10:30:00+00:00",
    "layoutStrategy": "radial"
  }
}
```
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union
import json
import logging

from ..errors import ValidationError
from .abstraction import Graph
from .semantic_tree import SemanticTree

logger = logging.getLogger(__name__)


def read_json(path: Union[str, Path]) -> Any:
    """
    Load a JSON document.

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If the file is not valid JSON
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ValidationError(
            f"Invalid JSON in {path}: {e.msg}",
            {"path": str(path), "line": e.lineno, "column": e.colno},
        ) from e


def load_graph(path: Union[str, Path], style_table=None) -> Graph:
    """Load a ``{nodes, edges}`` graph from a JSON file."""
    graph = Graph.from_dict(read_json(path), style_table=style_table)
    logger.debug("Loaded graph from %s: nodes=%d edges=%d", path, len(graph.nodes), len(graph.edges))
    return graph


def load_semantic_tree(path: Union[str, Path]) -> SemanticTree:
    """Load a semantic tree (flat or analysis envelope) from a JSON file."""
    return SemanticTree.from_dict(read_json(path))


def build_envelope(
    graph: Graph,
    layout_strategy: str,
    generated_at: Optional[datetime] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Wrap a positioned graph with its metadata block.

    Args:
        graph: Positioned graph
        layout_strategy: Name recorded as metadata.layoutStrategy
        generated_at: Timestamp to record (default: now, UTC)
        extra: Additional metadata keys (e.g. structure counts)
    """
    if generated_at is None:
        generated_at = datetime.now(timezone.utc)
    metadata: Dict[str, Any] = {
        "totalNodes": len(graph.nodes),
        "totalEdges": len(graph.edges),
        "generatedAt": generated_at.isoformat(),
        "layoutStrategy": layout_strategy,
    }
    if extra:
        metadata.update(extra)
    envelope = graph.to_dict()
    envelope["metadata"] = metadata
    return envelope


def write_json(payload: Any, path: Union[str, Path]) -> Path:
    """Write a JSON document, creating parent directories as needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)
        f.write("\n")
    logger.debug("Wrote %s", path)
    return path
