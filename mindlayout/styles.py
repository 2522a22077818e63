"""
Node and Edge Style Table

Loads per-role visual defaults (size, colour, z-order) and per-link edge
styling from node_styles.yaml. The loaded table is immutable: lookups return
frozen records and fresh style dicts, so nodes can never alias shared state.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional
import yaml

from .errors import ValidationError
from .graph.abstraction import NodeRole


class EdgeTier(Enum):
    """Depth tier of an edge, selecting its visual weight."""
    PRIMARY = "primary"              # central -> headline
    SECONDARY = "secondary"          # headline -> section
    DETAIL = "detail"                # section -> detail item
    CROSS_CUTTING = "cross_cutting"  # central -> insight/theme/action zones


@dataclass(frozen=True)
class RoleStyle:
    """Visual defaults for one node role."""
    role: NodeRole
    node_type: str
    width: float
    height: float
    z_index: int
    color: str
    font_size: Optional[int] = None
    extra: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def to_style(self) -> Dict[str, Any]:
        """Build a new renderer style dict for a node of this role."""
        style: Dict[str, Any] = {"color": self.color}
        if self.font_size is not None:
            style["fontSize"] = self.font_size
        style.update(self.extra)
        return style


@dataclass(frozen=True)
class EdgeStyle:
    """Stroke settings for one kind of link."""
    kind: str
    tier: EdgeTier
    color: str
    width: float
    dash: Optional[str] = None

    @property
    def is_dashed(self) -> bool:
        return self.dash is not None

    def to_style(self) -> Dict[str, Any]:
        """Build a new renderer style dict for an edge of this kind."""
        style: Dict[str, Any] = {"stroke": self.color, "strokeWidth": self.width}
        if self.dash:
            style["strokeDasharray"] = self.dash
        return style


class StyleTable:
    """
    Immutable lookup of role and link styles.

    Loads node_styles.yaml by default; a custom YAML file with the same
    structure can be supplied to restyle generated graphs.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Load the style table.

        Args:
            config_path: Optional path to a custom styles YAML file.
                        If None, uses the packaged node_styles.yaml.
        """
        if config_path is None:
            config_path = Path(__file__).parent / "node_styles.yaml"

        self.config_path = Path(config_path)
        roles, links = self._load_config()
        self._roles: Mapping[NodeRole, RoleStyle] = MappingProxyType(roles)
        self._links: Mapping[str, EdgeStyle] = MappingProxyType(links)
        self.role_names: FrozenSet[str] = frozenset(r.value for r in roles)

    def _load_config(self):
        """Parse and validate the YAML style file."""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Style configuration file not found: {self.config_path}")

        with open(self.config_path, "r") as f:
            config = yaml.safe_load(f) or {}

        missing = [s for s in ("roles", "links") if s not in config]
        if missing:
            raise ValidationError(
                f"Style configuration missing required sections: {missing}",
                {"path": str(self.config_path)},
            )

        roles: Dict[NodeRole, RoleStyle] = {}
        for role in NodeRole:
            entry = config["roles"].get(role.value)
            if entry is None:
                raise ValidationError(
                    f"Style configuration has no entry for role {role.value!r}",
                    {"path": str(self.config_path)},
                )
            try:
                roles[role] = RoleStyle(
                    role=role,
                    node_type=str(entry["type"]),
                    width=float(entry["width"]),
                    height=float(entry["height"]),
                    z_index=int(entry["z_index"]),
                    color=str(entry["color"]),
                    font_size=entry.get("font_size"),
                    extra=MappingProxyType(dict(entry.get("extra") or {})),
                )
            except (KeyError, TypeError, ValueError) as e:
                raise ValidationError(
                    f"Invalid style entry for role {role.value!r}: {e}",
                    {"path": str(self.config_path)},
                ) from e

        links: Dict[str, EdgeStyle] = {}
        for kind, entry in config["links"].items():
            try:
                links[kind] = EdgeStyle(
                    kind=kind,
                    tier=EdgeTier(entry["tier"]),
                    color=str(entry["color"]),
                    width=float(entry["width"]),
                    dash=entry.get("dash"),
                )
            except (KeyError, TypeError, ValueError) as e:
                raise ValidationError(
                    f"Invalid edge style entry {kind!r}: {e}",
                    {"path": str(self.config_path)},
                ) from e

        return roles, links

    @property
    def roles(self) -> Mapping[NodeRole, RoleStyle]:
        return self._roles

    @property
    def links(self) -> Mapping[str, EdgeStyle]:
        return self._links

    def for_role(self, role: NodeRole) -> RoleStyle:
        """Get the style record for a node role."""
        return self._roles[role]

    def for_link(self, kind: str) -> EdgeStyle:
        """
        Get the edge style for a link kind (e.g. 'headline', 'quote').

        Raises:
            ValueError: If the link kind is not configured
        """
        if kind not in self._links:
            raise ValueError(
                f"Unknown link kind: {kind}. Valid options: {list(self._links.keys())}"
            )
        return self._links[kind]


# The packaged table is immutable, so a single shared instance is safe
_default_table: Optional[StyleTable] = None


def get_style_table(config_path: Optional[str] = None) -> StyleTable:
    """
    Get a style table instance.

    Args:
        config_path: Optional path to a custom styles file.
                    If None, uses the cached packaged table.
    """
    global _default_table

    if config_path is not None:
        return StyleTable(config_path)

    if _default_table is None:
        _default_table = StyleTable()

    return _default_table
