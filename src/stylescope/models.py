"""Data models for style extraction."""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Literal, Optional, Tuple, Union

from .errors import InvalidInput

ALL_TAGS = "all"

# Tags that carry visual content on their own, even without styles or text
MEANINGFUL_TAGS = frozenset({"img", "svg", "canvas", "video", "audio"})

MAX_TEXT_LENGTH = 100

DEFAULT_PROPERTIES = ("background", "background-color")

# A capital that starts a new word inside a camelCase name
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def css_property_name(name: str) -> str:
    """Kebab-case a property name, so "backgroundColor" reads as "background-color"."""
    name = name.strip()
    if name.startswith("--"):
        return name
    return _CAMEL_BOUNDARY.sub(r"-\1", name).lower()


def _string_list(values: Any, what: str) -> List[str]:
    try:
        items = list(values)
    except TypeError:
        raise InvalidInput(f"{what} must be a list of strings") from None
    if not all(isinstance(item, str) for item in items):
        raise InvalidInput(f"{what} must be a list of strings")
    return items


@dataclass(frozen=True)
class ExtractionConfig:
    """Which elements and which computed properties a style tree covers."""

    tag_filter: Union[FrozenSet[str], Literal["all"]]
    properties: Tuple[str, ...]

    def __post_init__(self):
        if not self.properties:
            raise InvalidInput("At least one CSS property is required")
        if self.tag_filter != ALL_TAGS and not self.tag_filter:
            raise InvalidInput("Tag filter must be 'all' or a non-empty list of tags")

    @classmethod
    def create(
        cls,
        tags: Union[str, Iterable[str]] = ALL_TAGS,
        properties: Optional[Iterable[str]] = None,
    ) -> "ExtractionConfig":
        """
        Build a config from loosely-typed request input.

        Args:
            tags: "all" or an iterable of tag names (case-insensitive)
            properties: CSS property names; defaults to background properties

        Returns:
            Validated ExtractionConfig

        Raises:
            InvalidInput: If tags or properties are malformed
        """
        if tags is None:
            raise InvalidInput("Tags are required: 'all' or a list of tag names")
        if isinstance(tags, str):
            if tags.strip().lower() != ALL_TAGS:
                raise InvalidInput(f"Unknown tag sentinel: {tags!r}")
            tag_filter: Union[FrozenSet[str], str] = ALL_TAGS
        else:
            tags = _string_list(tags, "Tag names")
            tag_filter = frozenset(t.strip().lower() for t in tags if t.strip())

        if properties is None:
            properties = DEFAULT_PROPERTIES
        elif isinstance(properties, str):
            raise InvalidInput("Properties must be a list of CSS property names")
        properties = _string_list(properties, "CSS property names")

        cleaned: List[str] = []
        for prop in properties:
            prop = css_property_name(prop)
            if prop and prop not in cleaned:
                cleaned.append(prop)

        return cls(tag_filter=tag_filter, properties=tuple(cleaned))

    def includes_tag(self, tag: str) -> bool:
        """Whether elements with this tag name get their styles extracted."""
        return self.tag_filter == ALL_TAGS or tag.lower() in self.tag_filter

    def script_tags(self) -> Union[str, List[str]]:
        """Tag filter in the shape the in-page script expects."""
        if self.tag_filter == ALL_TAGS:
            return ALL_TAGS
        return sorted(self.tag_filter)


@dataclass
class StyleNode:
    """A retained element of the pruned style tree."""

    tag: str
    styles: Dict[str, str] = field(default_factory=dict)
    children: List["StyleNode"] = field(default_factory=list)
    id: Optional[str] = None
    classes: List[str] = field(default_factory=list)
    visible: bool = True
    text: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"tag": self.tag}
        if self.id:
            data["id"] = self.id
        if self.classes:
            data["classes"] = list(self.classes)
        data["styles"] = dict(self.styles)
        data["visible"] = self.visible
        if self.text:
            data["text"] = self.text
        data["children"] = [child.to_dict() for child in self.children]
        return data

    def count(self) -> int:
        """Number of nodes in this subtree, including this one."""
        return 1 + sum(child.count() for child in self.children)


@dataclass
class StyleTreeResult:
    """
    Result of walking one element: either a single node, or the flattened
    list of included descendants of an element that was itself excluded.
    """

    kind: Literal["node", "list"]
    node: Optional[StyleNode] = None
    nodes: List[StyleNode] = field(default_factory=list)

    @classmethod
    def of_node(cls, node: StyleNode) -> "StyleTreeResult":
        return cls(kind="node", node=node)

    @classmethod
    def of_list(cls, nodes: List[StyleNode]) -> "StyleTreeResult":
        return cls(kind="list", nodes=list(nodes))

    @property
    def is_list(self) -> bool:
        return self.kind == "list"

    def flatten(self) -> List[StyleNode]:
        """Nodes to splice into a parent's children."""
        if self.kind == "node":
            return [self.node]
        return list(self.nodes)

    def to_dict(self) -> Union[Dict[str, Any], List[Dict[str, Any]]]:
        if self.kind == "node":
            return self.node.to_dict()
        return [node.to_dict() for node in self.nodes]


@dataclass
class BoundingBox:
    """Element position and size from getBoundingClientRect."""
    width: float = 0.0
    height: float = 0.0
    x: float = 0.0
    y: float = 0.0

    @property
    def area(self) -> float:
        return self.width * self.height

    def to_dict(self) -> Dict[str, float]:
        return {"width": self.width, "height": self.height, "x": self.x, "y": self.y}


@dataclass
class ElementDimension:
    """Size and identity of one element sampled for the theme."""
    selector: str
    tag: str
    id: Optional[str] = None
    classes: List[str] = field(default_factory=list)
    bounding_box: BoundingBox = field(default_factory=BoundingBox)
    computed_width: str = ""
    computed_height: str = ""
    visible: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "selector": self.selector,
            "tag": self.tag,
            "id": self.id,
            "classes": list(self.classes),
            "boundingBox": self.bounding_box.to_dict(),
            "computedSize": {"width": self.computed_width, "height": self.computed_height},
            "visible": self.visible,
        }


@dataclass
class ZoneStyles:
    """Dimensions and first-seen meaningful theme styles of one zone."""
    dimensions: List[ElementDimension] = field(default_factory=list)
    styles: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"dimensions": [d.to_dict() for d in self.dimensions]}
        data.update(self.styles)
        return data


@dataclass
class FrequencyStyles:
    """Dominant styles across an even sample of the whole document."""
    sample_elements: List[ElementDimension] = field(default_factory=list)
    color: Optional[str] = None
    background_color: Optional[str] = None
    font_family: Optional[str] = None
    sampled_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sampleElements": [d.to_dict() for d in self.sample_elements],
            "color": self.color,
            "background-color": self.background_color,
            "font-family": self.font_family,
        }


@dataclass
class ViewportInfo:
    """Window and document geometry at extraction time."""
    width: int = 0
    height: int = 0
    device_pixel_ratio: float = 1.0
    scroll_width: int = 0
    scroll_height: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "devicePixelRatio": self.device_pixel_ratio,
            "scrollWidth": self.scroll_width,
            "scrollHeight": self.scroll_height,
        }


@dataclass
class PageInfo:
    """Identity of the extracted page."""
    title: str = ""
    url: str = ""
    extracted_at: str = ""
    user_agent: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "title": self.title,
            "url": self.url,
            "extractedAt": self.extracted_at,
            "userAgent": self.user_agent,
        }


@dataclass
class ThemeReport:
    """Aggregated visual theme of a page."""
    primary: ZoneStyles = field(default_factory=ZoneStyles)
    header: ZoneStyles = field(default_factory=ZoneStyles)
    content: ZoneStyles = field(default_factory=ZoneStyles)
    accent: ZoneStyles = field(default_factory=ZoneStyles)
    secondary: FrequencyStyles = field(default_factory=FrequencyStyles)
    variables: Dict[str, str] = field(default_factory=dict)
    viewport: ViewportInfo = field(default_factory=ViewportInfo)
    metadata: PageInfo = field(default_factory=PageInfo)

    def zone(self, name: str) -> ZoneStyles:
        return getattr(self, name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primary": self.primary.to_dict(),
            "header": self.header.to_dict(),
            "content": self.content.to_dict(),
            "accent": self.accent.to_dict(),
            "secondary": self.secondary.to_dict(),
            "variables": dict(self.variables),
            "viewport": self.viewport.to_dict(),
            "metadata": self.metadata.to_dict(),
        }
