"""
Layout Profiles

A profile bundles the configuration of every pipeline stage under one
name. Built-in profiles cover the common densities; custom profiles are
read from YAML files whose sections override the defaults field by field:

    generator:
      headline_radius: 800
    relaxation:
      iterations: 100
    packer:
      spacing: 200
"""

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import logging

import yaml

from .errors import ValidationError
from .layout.force_directed import RelaxationConfig
from .layout.generator import GeneratorConfig
from .layout.packer import PackerConfig
from .layout.viewport import ViewportConfig

logger = logging.getLogger(__name__)


@dataclass
class LayoutProfile:
    """Configuration for every stage of the layout pipeline."""

    name: str
    description: str = ""
    generator: GeneratorConfig = field(default_factory=GeneratorConfig)
    relaxation: RelaxationConfig = field(default_factory=RelaxationConfig)
    packer: PackerConfig = field(default_factory=PackerConfig)
    viewport: ViewportConfig = field(default_factory=ViewportConfig)

    def with_overrides(self, overrides: Dict[str, Any], name: Optional[str] = None) -> "LayoutProfile":
        """
        Return a new profile with per-section field overrides applied.

        Raises:
            ValidationError: Unknown section or field name, or wrong value type
        """
        unknown = set(overrides) - set(_SECTIONS)
        if unknown:
            raise ValidationError(
                f"Unknown profile section(s): {', '.join(sorted(unknown))}",
                {"unknown": sorted(unknown), "allowed": list(_SECTIONS)},
            )
        changes = {}
        for section in _SECTIONS:
            values = overrides.get(section)
            if values:
                changes[section] = _override_config(getattr(self, section), values, section)
        return replace(self, name=name or self.name, **changes)


_SECTIONS = ("generator", "relaxation", "packer", "viewport")


def _coerce(current: Any, value: Any, section: str, key: str) -> Any:
    """Convert a YAML value to the shape of the field it replaces."""
    if isinstance(current, bool):
        if not isinstance(value, bool):
            raise ValidationError(
                f"{section}.{key} must be a boolean",
                {"section": section, "field": key, "value": repr(value)},
            )
        return value
    if isinstance(current, (int, float)) or (current is None and isinstance(value, (int, float))):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(
                f"{section}.{key} must be a number",
                {"section": section, "field": key, "value": repr(value)},
            )
        return type(current)(value) if current is not None else float(value)
    if isinstance(current, tuple):
        if not isinstance(value, (list, tuple)) or len(value) != len(current):
            raise ValidationError(
                f"{section}.{key} must be a list of {len(current)} items",
                {"section": section, "field": key, "value": repr(value)},
            )
        return tuple(_coerce(c, v, section, key) for c, v in zip(current, value))
    if isinstance(current, dict):
        if not isinstance(value, dict):
            raise ValidationError(
                f"{section}.{key} must be a mapping",
                {"section": section, "field": key, "value": repr(value)},
            )
        merged = dict(current)
        for k, v in value.items():
            if k not in current:
                raise ValidationError(
                    f"Unknown entry {k!r} in {section}.{key}",
                    {"section": section, "field": key, "entry": k},
                )
            merged[k] = _coerce(current[k], v, section, f"{key}.{k}")
        return merged
    return value


def _override_config(config: Any, values: Any, section: str) -> Any:
    if not isinstance(values, dict):
        raise ValidationError(f"Profile section {section!r} must be a mapping", {"section": section})
    known = {f.name for f in fields(config)}
    unknown = set(values) - known
    if unknown:
        raise ValidationError(
            f"Unknown {section} setting(s): {', '.join(sorted(unknown))}",
            {"section": section, "unknown": sorted(unknown)},
        )
    changes = {key: _coerce(getattr(config, key), value, section, key) for key, value in values.items()}
    return replace(config, **changes)


# =============================================================================
# Predefined Profiles
# =============================================================================

DEFAULT = LayoutProfile(
    name="default",
    description="Canonical spacing for mind-map canvases",
    packer=PackerConfig(fit_cells=True),
)

COMPACT = LayoutProfile(
    name="compact",
    description="Tighter rings and grids for small screens",
    generator=GeneratorConfig(
        headline_radius=450.0,
        horizontal_spacing=550.0,
        vertical_spacing=400.0,
        chronological_spacing=450.0,
        radial_distance=280.0,
        overlap_gap=60.0,
    ),
    relaxation=RelaxationConfig(min_separation=70.0),
    packer=PackerConfig(spacing=120.0, margin=30.0, fit_cells=True, gutter=10.0),
)

SPACIOUS = LayoutProfile(
    name="spacious",
    description="Generous spacing for presentation walls",
    generator=GeneratorConfig(
        headline_radius=800.0,
        horizontal_spacing=900.0,
        vertical_spacing=650.0,
        chronological_spacing=800.0,
        radial_distance=450.0,
        overlap_gap=150.0,
    ),
    relaxation=RelaxationConfig(repulsion=8000.0, min_separation=150.0),
    packer=PackerConfig(spacing=200.0, margin=70.0, fit_cells=True, gutter=40.0),
)


PROFILES: Dict[str, LayoutProfile] = {
    "default": DEFAULT,
    "compact": COMPACT,
    "spacious": SPACIOUS,
}


def get_profile(name: str) -> LayoutProfile:
    """
    Get layout profile by name.

    Raises:
        ValidationError: If profile name is not found
    """
    if name not in PROFILES:
        available = ", ".join(sorted(PROFILES.keys()))
        raise ValidationError(f"Unknown layout profile '{name}'. Available: {available}",
                              {"profile": name})
    return PROFILES[name]


def list_profiles() -> List[str]:
    """List all available layout profile names."""
    return sorted(PROFILES.keys())


def load_profile(path: Union[str, Path], base: Optional[LayoutProfile] = None) -> LayoutProfile:
    """
    Load a profile from a YAML file layered over ``base`` (default profile).

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: Malformed YAML or unknown keys
    """
    path = Path(path)
    base = base or DEFAULT
    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid YAML in profile {path}: {e}", {"path": str(path)}) from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValidationError(f"Profile {path} must contain a mapping", {"path": str(path)})

    name = raw.pop("name", None) or path.stem
    raw.pop("description", None)
    profile = base.with_overrides(raw, name=str(name))
    logger.debug("Loaded layout profile %r from %s", profile.name, path)
    return profile
