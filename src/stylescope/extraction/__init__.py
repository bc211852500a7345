"""
Extraction Package.

Turns raw document snapshots into pruned style trees and theme reports.
"""

from .meaningful import is_meaningful, is_meaningful_theme_value
from .style_tree import StyleTreeExtractor, build_style_tree, is_visible
from .theme import (
    ThemeAggregator,
    ZONE_SELECTORS,
    THEME_PROPERTIES,
    SAMPLE_SIZE,
    build_selector,
    merge_css_variables,
    mode,
    parse_css_variables,
)

__all__ = [
    "is_meaningful",
    "is_meaningful_theme_value",
    "StyleTreeExtractor",
    "build_style_tree",
    "is_visible",
    "ThemeAggregator",
    "ZONE_SELECTORS",
    "THEME_PROPERTIES",
    "SAMPLE_SIZE",
    "build_selector",
    "merge_css_variables",
    "mode",
    "parse_css_variables",
]
