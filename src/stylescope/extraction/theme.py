"""
Zone-based theme aggregation.

A page's theme is read from four fixed zones of selectors (primary, header,
content, accent), a frequency sample of the whole document, the CSS custom
properties declared on the root, and viewport/page metadata.

The in-page script (scripts.THEME_SNAPSHOT_SCRIPT) only gathers raw values;
all aggregation happens here.
"""

import logging
import re
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..models import (
    BoundingBox,
    ElementDimension,
    FrequencyStyles,
    PageInfo,
    ThemeReport,
    ViewportInfo,
    ZoneStyles,
)
from .meaningful import is_meaningful_theme_value
from .scripts import THEME_SNAPSHOT_SCRIPT
from .style_tree import is_visible

logger = logging.getLogger(__name__)


ZONE_SELECTORS: Dict[str, List[str]] = {
    "primary": ["body", "html"],
    "header": ["header", "nav", ".header", ".navbar", ".nav"],
    "content": ["main", "article", ".content", ".main", "section"],
    "accent": ["a", "button", ".btn", ".button", 'input[type="submit"]'],
}

THEME_PROPERTIES = [
    "background-color",
    "background",
    "color",
    "outline-color",
    "outline",
    "border-color",
    "border",
    "font-family",
    "font-size",
    "font-weight",
    "font",
]

SAMPLE_PROPERTIES = ["color", "background-color", "font-family"]

SAMPLE_SIZE = 200
TOP_SAMPLE_ELEMENTS = 20
MIN_SAMPLE_SIDE_PX = 10

CSS_VARIABLE_PATTERN = re.compile(r"(--[A-Za-z0-9_-]+)\s*:\s*([^;]+)")


def build_selector(tag: str, element_id: Optional[str], classes: Iterable[str]) -> str:
    """CSS selector identifying an element, e.g. 'nav#top.navbar.dark'."""
    selector = tag or "*"
    if element_id:
        selector += f"#{element_id}"
    for cls in classes:
        if cls:
            selector += f".{cls}"
    return selector


def to_dimension(raw: Dict[str, Any]) -> ElementDimension:
    """ElementDimension from one raw snapshot element."""
    rect = raw.get("rect") or {}
    classes = list(raw.get("classes") or [])
    tag = (raw.get("tag") or "").lower()
    return ElementDimension(
        selector=build_selector(tag, raw.get("id"), classes),
        tag=tag,
        id=raw.get("id") or None,
        classes=classes,
        bounding_box=BoundingBox(
            width=float(rect.get("width") or 0),
            height=float(rect.get("height") or 0),
            x=float(rect.get("x") or 0),
            y=float(rect.get("y") or 0),
        ),
        computed_width=raw.get("computedWidth") or "",
        computed_height=raw.get("computedHeight") or "",
        visible=is_visible(raw) if raw.get("rect") is not None else False,
    )


def mode(values: Sequence[str]) -> Optional[str]:
    """Most frequent value; the first one seen wins ties."""
    if not values:
        return None
    # most_common keeps insertion order for equal counts
    return Counter(values).most_common(1)[0][0]


def parse_css_variables(style_text: str) -> Dict[str, str]:
    """Custom property declarations ('--name: value') found in a style text."""
    variables = {}
    for match in CSS_VARIABLE_PATTERN.finditer(style_text or ""):
        variables[match.group(1)] = match.group(2).strip()
    return variables


def merge_css_variables(
    root_style_text: str,
    root_rules: Iterable[Tuple[str, str]],
) -> Dict[str, str]:
    """Root style declarations overlaid with :root rule declarations (later wins)."""
    variables = parse_css_variables(root_style_text)
    for name, value in root_rules or []:
        if name and name.startswith("--"):
            variables[name] = (value or "").strip()
    return variables


class ThemeAggregator:
    """
    Builds a ThemeReport from a live page.

    Usage:
        report = await ThemeAggregator().extract(page)
    """

    def __init__(
        self,
        zones: Optional[Dict[str, List[str]]] = None,
        properties: Optional[List[str]] = None,
        sample_size: int = SAMPLE_SIZE,
    ):
        self.zones = zones or ZONE_SELECTORS
        self.properties = properties or THEME_PROPERTIES
        self.sample_size = sample_size

    def script_args(self) -> Dict[str, Any]:
        return {
            "zones": self.zones,
            "properties": self.properties,
            "sampleProperties": SAMPLE_PROPERTIES,
            "sampleSize": self.sample_size,
        }

    async def extract(self, page) -> ThemeReport:
        """
        Snapshot the page and aggregate its theme.

        Args:
            page: PageHandle (anything with an async evaluate(script, arg))
        """
        snapshot = await page.evaluate(THEME_SNAPSHOT_SCRIPT, self.script_args())
        report = self.build(snapshot or {})
        logger.info(
            f"Theme extracted: {len(report.variables)} CSS variables, "
            f"{report.secondary.sampled_count} sampled elements"
        )
        return report

    def build(self, snapshot: Dict[str, Any], extracted_at: Optional[str] = None) -> ThemeReport:
        """Aggregate a raw theme snapshot into a ThemeReport."""
        zones = snapshot.get("zones") or {}
        report = ThemeReport(
            secondary=self.aggregate_samples(snapshot.get("samples") or []),
            variables=merge_css_variables(
                snapshot.get("rootStyleText") or "",
                [tuple(rule) for rule in snapshot.get("rootRules") or []],
            ),
            viewport=self._viewport(snapshot.get("viewport") or {}),
            metadata=self._page_info(snapshot.get("page") or {}, extracted_at),
        )
        for name in ZONE_SELECTORS:
            setattr(report, name, self.aggregate_zone(zones.get(name) or []))
        return report

    def aggregate_zone(self, elements: List[Dict[str, Any]]) -> ZoneStyles:
        """
        Dimensions of visible elements, plus the first meaningful value of
        each theme property across all matched elements.
        """
        zone = ZoneStyles()
        for raw in elements:
            dimension = to_dimension(raw)
            if dimension.visible:
                zone.dimensions.append(dimension)

            styles = raw.get("styles") or {}
            for prop in self.properties:
                if prop in zone.styles:
                    continue
                value = styles.get(prop)
                if value is not None and is_meaningful_theme_value(prop, value):
                    zone.styles[prop] = str(value).strip()
        return zone

    def aggregate_samples(self, samples: List[Dict[str, Any]]) -> FrequencyStyles:
        """
        Frequency statistics over the sampled elements.

        Visible elements larger than 10x10 are size candidates; the 20 largest
        are reported. Meaningful color, background-color and font-family values
        are tallied separately and the mode of each is reported.
        """
        candidates: List[ElementDimension] = []
        tallies: Dict[str, List[str]] = {prop: [] for prop in SAMPLE_PROPERTIES}

        for raw in samples:
            dimension = to_dimension(raw)
            box = dimension.bounding_box
            if dimension.visible and box.width > MIN_SAMPLE_SIDE_PX and box.height > MIN_SAMPLE_SIDE_PX:
                candidates.append(dimension)

            styles = raw.get("styles") or {}
            for prop in SAMPLE_PROPERTIES:
                value = styles.get(prop)
                if value is not None and is_meaningful_theme_value(prop, value):
                    tallies[prop].append(str(value).strip())

        largest = sorted(candidates, key=lambda d: d.bounding_box.area, reverse=True)

        return FrequencyStyles(
            sample_elements=largest[:TOP_SAMPLE_ELEMENTS],
            color=mode(tallies["color"]),
            background_color=mode(tallies["background-color"]),
            font_family=mode(tallies["font-family"]),
            sampled_count=len(samples),
        )

    @staticmethod
    def _viewport(raw: Dict[str, Any]) -> ViewportInfo:
        return ViewportInfo(
            width=int(raw.get("width") or 0),
            height=int(raw.get("height") or 0),
            device_pixel_ratio=float(raw.get("devicePixelRatio") or 1.0),
            scroll_width=int(raw.get("scrollWidth") or 0),
            scroll_height=int(raw.get("scrollHeight") or 0),
        )

    @staticmethod
    def _page_info(raw: Dict[str, Any], extracted_at: Optional[str]) -> PageInfo:
        return PageInfo(
            title=raw.get("title") or "",
            url=raw.get("url") or "",
            extracted_at=extracted_at or datetime.now(timezone.utc).isoformat(),
            user_agent=raw.get("userAgent") or "",
        )
