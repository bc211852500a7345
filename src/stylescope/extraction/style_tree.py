"""
Pruned per-tag style tree.

Turns a raw DOM snapshot (see scripts.STYLE_SNAPSHOT_SCRIPT) into a tree that
only contains elements worth looking at: tag-matched elements with meaningful
computed styles, own text, inherently visual content, or retained descendants.
Excluded elements are bypassed, their retained descendants spliced into the
nearest retained ancestor.
"""

import logging
from typing import Any, Dict, List, Optional

from ..models import (
    MAX_TEXT_LENGTH,
    MEANINGFUL_TAGS,
    ExtractionConfig,
    StyleNode,
    StyleTreeResult,
)
from .meaningful import is_meaningful
from .scripts import STYLE_SNAPSHOT_SCRIPT

logger = logging.getLogger(__name__)


def is_visible(raw: Dict[str, Any]) -> bool:
    """Visible = non-empty box, not visibility:hidden, not display:none."""
    rect = raw.get("rect")
    if rect is None:
        return True
    return (
        (rect.get("width") or 0) > 0
        and (rect.get("height") or 0) > 0
        and raw.get("visibility") != "hidden"
        and raw.get("display") != "none"
    )


class StyleTreeExtractor:
    """
    Builds pruned style trees for one ExtractionConfig.

    Usage:
        extractor = StyleTreeExtractor(ExtractionConfig.create(["div"], ["color"]))
        tree = await extractor.extract(page)
    """

    def __init__(self, config: ExtractionConfig, root: str = "body"):
        """
        Args:
            config: Tag filter and properties to extract
            root: Walk from document.body ("body") or documentElement ("html")
        """
        self.config = config
        self.root = root

    def script_args(self) -> Dict[str, Any]:
        return {
            "root": self.root,
            "tags": self.config.script_tags(),
            "properties": list(self.config.properties),
        }

    async def extract(self, page) -> StyleNode:
        """
        Snapshot the page's document and build its style tree.

        Args:
            page: PageHandle (anything with an async evaluate(script, arg))

        Returns:
            Root StyleNode
        """
        snapshot = await page.evaluate(STYLE_SNAPSHOT_SCRIPT, self.script_args())
        tree = self.build(snapshot)
        logger.info(f"Style tree extracted: {tree.count()} nodes")
        return tree

    def build(self, snapshot: Optional[Dict[str, Any]]) -> StyleNode:
        """
        Build the tree from a snapshot, always returning a single root node.

        A bare list from the walk is wrapped in a synthetic node carrying the
        root's own tag and, when that tag is included, its meaningful styles.
        """
        if not snapshot:
            return StyleNode(tag=self.root)

        result = self.walk(snapshot)
        if result is not None and not result.is_list:
            return result.node

        tag = (snapshot.get("tag") or self.root).lower()
        styles: Dict[str, str] = {}
        if self.config.includes_tag(tag):
            styles = self.meaningful_styles(snapshot.get("styles") or {})

        return StyleNode(
            tag=tag,
            styles=styles,
            children=result.nodes if result is not None else [],
            id=snapshot.get("id") or None,
            classes=list(snapshot.get("classes") or []),
            visible=is_visible(snapshot),
        )

    def walk(self, raw: Dict[str, Any]) -> Optional[StyleTreeResult]:
        """
        Post-order walk of one snapshot element.

        Returns:
            A node result, a flattened list result, or None when pruned
        """
        collected: List[StyleNode] = []
        for child in raw.get("children") or []:
            result = self.walk(child)
            if result is not None:
                collected.extend(result.flatten())

        tag = (raw.get("tag") or "").lower()
        if self.config.includes_tag(tag):
            node = self._make_node(raw, tag, collected)
            if self._is_retained(node):
                return StyleTreeResult.of_node(node)

        if collected:
            return StyleTreeResult.of_list(collected)
        return None

    def meaningful_styles(self, raw_styles: Dict[str, Any]) -> Dict[str, str]:
        """Requested properties whose values are meaningful, in request order."""
        styles = {}
        for prop in self.config.properties:
            value = raw_styles.get(prop)
            if value is not None and is_meaningful(prop, value):
                styles[prop] = str(value).strip()
        return styles

    def _make_node(self, raw: Dict[str, Any], tag: str, children: List[StyleNode]) -> StyleNode:
        text = (raw.get("text") or "").strip()
        return StyleNode(
            tag=tag,
            styles=self.meaningful_styles(raw.get("styles") or {}),
            children=children,
            id=raw.get("id") or None,
            classes=list(raw.get("classes") or []),
            visible=is_visible(raw),
            text=text[:MAX_TEXT_LENGTH] or None,
        )

    @staticmethod
    def _is_retained(node: StyleNode) -> bool:
        return bool(node.styles or node.children or node.text or node.tag in MEANINGFUL_TAGS)


def build_style_tree(snapshot: Optional[Dict[str, Any]], config: ExtractionConfig, root: str = "body") -> StyleNode:
    """Convenience wrapper around StyleTreeExtractor.build."""
    return StyleTreeExtractor(config, root=root).build(snapshot)
