"""
Semantic Tree Model

The hierarchical content summary consumed by the structural generator:
central theme -> headlines -> sections -> detail items, plus cross-cutting
insights, themes and global actions that do not belong to any one branch.

The extraction collaborator is trusted to follow the schema; only the
required top-level fields (centralTheme, headlines) are validated strictly.
Nested fields are read leniently, with missing lists treated as empty.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
import logging

from ..errors import ValidationError

logger = logging.getLogger(__name__)


class HeadlinePlacement(Enum):
    """Where headlines go around the central node."""
    CIRCULAR = "circular"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    CHRONOLOGICAL = "chronological"


class SectionArrangement(Enum):
    """How sections fan out from their headline."""
    HIERARCHICAL = "hierarchical"
    RADIAL = "radial"
    GROUPED = "grouped"


class DetailsDisplay(Enum):
    """How key points are presented around their section."""
    NESTED = "nested"          # Key points clustered inside a group container
    SATELLITE = "satellite"    # Key points placed as free satellites
    EXPANDABLE = "expandable"  # Nested, but the container starts collapsed


def _parse_enum(enum_cls, value: Any, default, rule_name: str):
    if value is None:
        return default
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning(
            "Unknown %s %r, falling back to %r", rule_name, value, default.value
        )
        return default


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _text_of(item: Any, *keys: str) -> str:
    """Pull display text out of either a bare string or an object."""
    if isinstance(item, dict):
        for key in keys:
            if item.get(key) is not None:
                return str(item[key])
        return ""
    return "" if item is None else str(item)


@dataclass
class LayoutRules:
    """Layout configuration chosen for a semantic tree."""
    headline_placement: HeadlinePlacement = HeadlinePlacement.CIRCULAR
    section_arrangement: SectionArrangement = SectionArrangement.HIERARCHICAL
    details_display: DetailsDisplay = DetailsDisplay.NESTED
    primary_layout: str = "hierarchical"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primaryLayout": self.primary_layout,
            "layoutRules": {
                "headlinePlacement": self.headline_placement.value,
                "sectionArrangement": self.section_arrangement.value,
                "detailsDisplay": self.details_display.value,
            },
        }

    @classmethod
    def from_dict(cls, layout: Optional[Dict[str, Any]]) -> "LayoutRules":
        """
        Read a ``layout`` block: ``{primaryLayout, layoutRules: {...}}``.

        The rule enums may also sit directly in the block. Unknown values
        fall back to the defaults with a warning.
        """
        if not isinstance(layout, dict):
            return cls()
        rules = layout.get("layoutRules")
        if not isinstance(rules, dict):
            rules = layout
        return cls(
            headline_placement=_parse_enum(
                HeadlinePlacement, rules.get("headlinePlacement"),
                HeadlinePlacement.CIRCULAR, "headlinePlacement",
            ),
            section_arrangement=_parse_enum(
                SectionArrangement, rules.get("sectionArrangement"),
                SectionArrangement.HIERARCHICAL, "sectionArrangement",
            ),
            details_display=_parse_enum(
                DetailsDisplay, rules.get("detailsDisplay"),
                DetailsDisplay.NESTED, "detailsDisplay",
            ),
            primary_layout=str(layout.get("primaryLayout") or "hierarchical"),
        )


@dataclass
class Quote:
    text: str
    speaker: str = ""


@dataclass
class SectionDetails:
    """Detail items attached to a section."""
    key_points: List[str] = field(default_factory=list)
    examples: List[str] = field(default_factory=list)
    data_points: List[str] = field(default_factory=list)
    quotes: List[Quote] = field(default_factory=list)
    action_items: List[str] = field(default_factory=list)

    @property
    def item_count(self) -> int:
        return (len(self.key_points) + len(self.examples) + len(self.data_points)
                + len(self.quotes) + len(self.action_items))

    @classmethod
    def from_dict(cls, payload: Any) -> "SectionDetails":
        if not isinstance(payload, dict):
            return cls()
        return cls(
            key_points=[_text_of(p, "text") for p in _as_list(payload.get("keyPoints"))],
            examples=[_text_of(p, "text") for p in _as_list(payload.get("examples"))],
            # The extraction service names this list "data"; "dataPoints" is accepted too
            data_points=[
                _text_of(p, "text")
                for p in _as_list(payload.get("data", payload.get("dataPoints")))
            ],
            quotes=[
                Quote(text=_text_of(q, "text"), speaker=_text_of(q, "speaker") if isinstance(q, dict) else "")
                for q in _as_list(payload.get("quotes"))
            ],
            action_items=[_text_of(p, "action", "text") for p in _as_list(payload.get("actionItems"))],
        )


@dataclass
class Section:
    id: str
    title: str
    details: SectionDetails = field(default_factory=SectionDetails)

    @classmethod
    def from_dict(cls, payload: Any, index: int) -> "Section":
        if not isinstance(payload, dict):
            return cls(id=str(index), title=_text_of(payload))
        return cls(
            id=str(payload.get("id", index)),
            title=_text_of(payload, "title", "text"),
            details=SectionDetails.from_dict(payload.get("details")),
        )


@dataclass
class Headline:
    id: str
    title: str
    sections: List[Section] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Any, index: int) -> "Headline":
        if not isinstance(payload, dict):
            return cls(id=str(index), title=_text_of(payload))
        return cls(
            id=str(payload.get("id", index)),
            title=_text_of(payload, "title", "text"),
            sections=[
                Section.from_dict(s, i) for i, s in enumerate(_as_list(payload.get("sections")))
            ],
        )


@dataclass
class Insight:
    text: str
    importance: str = "medium"


@dataclass
class ThemeItem:
    name: str
    description: str = ""


@dataclass
class GlobalAction:
    action: str
    priority: str = "medium"
    context: str = ""

    @property
    def label(self) -> str:
        """Display text: priority tag, action, then optional context line."""
        text = f"[{self.priority}] {self.action}"
        if self.context:
            text += f"\n{self.context}"
        return text


@dataclass
class CrossCutting:
    """Elements that span the whole tree rather than one branch."""
    insights: List[Insight] = field(default_factory=list)
    themes: List[ThemeItem] = field(default_factory=list)
    global_actions: List[GlobalAction] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.insights or self.themes or self.global_actions)

    @classmethod
    def from_dict(cls, payload: Any) -> "CrossCutting":
        if not isinstance(payload, dict):
            return cls()
        insights = []
        for item in _as_list(payload.get("insights")):
            importance = item.get("importance", "medium") if isinstance(item, dict) else "medium"
            insights.append(Insight(text=_text_of(item, "text"), importance=str(importance)))
        themes = []
        for item in _as_list(payload.get("themes")):
            if isinstance(item, dict):
                themes.append(ThemeItem(
                    name=_text_of(item, "name", "text"),
                    description=_text_of(item, "description"),
                ))
            else:
                themes.append(ThemeItem(name=_text_of(item)))
        actions = []
        for item in _as_list(payload.get("globalActions")):
            if isinstance(item, dict):
                actions.append(GlobalAction(
                    action=_text_of(item, "action", "text"),
                    priority=str(item.get("priority") or "medium"),
                    context=_text_of(item, "context"),
                ))
            else:
                actions.append(GlobalAction(action=_text_of(item)))
        return cls(insights=insights, themes=themes, global_actions=actions)


@dataclass
class SemanticTree:
    """Complete input to the structural layout generator."""
    central_theme: str
    headlines: List[Headline] = field(default_factory=list)
    cross_cutting: CrossCutting = field(default_factory=CrossCutting)
    layout: LayoutRules = field(default_factory=LayoutRules)

    @property
    def section_count(self) -> int:
        return sum(len(h.sections) for h in self.headlines)

    @property
    def key_point_count(self) -> int:
        return sum(len(s.details.key_points) for h in self.headlines for s in h.sections)

    @classmethod
    def from_dict(cls, payload: Any) -> "SemanticTree":
        """
        Parse a semantic tree.

        Accepts the flat schema ``{centralTheme, headlines, crossCutting, layout}``
        or the analysis envelope ``{metadata: {centralTheme}, structure:
        {headlines, crossCutting}, layout}``.

        Raises:
            ValidationError: If centralTheme or headlines is absent or malformed
        """
        if not isinstance(payload, dict):
            raise ValidationError("Semantic tree must be an object")

        structure = payload.get("structure")
        metadata = payload.get("metadata")
        body = structure if isinstance(structure, dict) else payload

        central_theme = payload.get("centralTheme")
        if central_theme is None and isinstance(metadata, dict):
            central_theme = metadata.get("centralTheme")
        if central_theme is None:
            raise ValidationError(
                "Semantic tree is missing required field 'centralTheme'",
                {"field": "centralTheme"},
            )
        if not isinstance(central_theme, str):
            raise ValidationError(
                "Field 'centralTheme' must be a string",
                {"field": "centralTheme", "value": repr(central_theme)[:80]},
            )

        if "headlines" not in body or body.get("headlines") is None:
            raise ValidationError(
                "Semantic tree is missing required field 'headlines'",
                {"field": "headlines"},
            )
        headlines = body["headlines"]
        if not isinstance(headlines, list):
            raise ValidationError(
                "Field 'headlines' must be a list",
                {"field": "headlines", "value": type(headlines).__name__},
            )

        return cls(
            central_theme=central_theme,
            headlines=[Headline.from_dict(h, i) for i, h in enumerate(headlines)],
            cross_cutting=CrossCutting.from_dict(body.get("crossCutting")),
            layout=LayoutRules.from_dict(payload.get("layout")),
        )
