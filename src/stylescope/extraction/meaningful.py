"""
Meaningful computed-style values.

A computed value is "meaningful" when it says something about the page's
design rather than restating a browser default or an unresolved keyword.
Both predicates here are pure functions of (property, value).
"""

import re

GLOBAL_KEYWORDS = frozenset({"initial", "inherit", "unset"})

TRANSPARENT_VALUES = frozenset({"rgba(0,0,0,0)", "transparent", "initial", "inherit"})
BORDER_EMPTY_VALUES = frozenset({"none", "initial", "inherit"})
SIZE_EMPTY_VALUES = frozenset({"auto", "0px", "initial", "inherit"})
SHADOW_EMPTY_VALUES = frozenset({"none", "initial", "inherit"})
SHADOW_PROPERTIES = frozenset({"box-shadow", "text-shadow"})
SIZE_PROPERTIES = frozenset({"width", "height"})

_WHITESPACE = re.compile(r"\s+")


def is_meaningful(prop: str, value: str) -> bool:
    """
    Whether a computed value carries design information.

    Rules (case-insensitive, trimmed; empty values never count):
    - background family: not transparent black, 'transparent' or a keyword
    - border/outline family: no '0px' anywhere, not 'none' or a keyword
    - width/height: not 'auto', '0px' or a keyword
    - box-shadow/text-shadow: not 'none' or a keyword
    - anything else: not 'initial', 'inherit' or 'unset'

    The border rule rejects any value containing '0px', including multi-value
    shorthands such as '1px solid 0px'.

    Args:
        prop: CSS property name
        value: Raw computed value

    Returns:
        True if the value should be kept
    """
    if value is None:
        return False
    normalized = str(value).strip().lower()
    if not normalized:
        return False

    name = prop.strip().lower()

    if "background" in name:
        return _WHITESPACE.sub("", normalized) not in TRANSPARENT_VALUES
    if "border" in name or "outline" in name:
        return "0px" not in normalized and normalized not in BORDER_EMPTY_VALUES
    if name in SIZE_PROPERTIES:
        return normalized not in SIZE_EMPTY_VALUES
    if name in SHADOW_PROPERTIES:
        return normalized not in SHADOW_EMPTY_VALUES
    return normalized not in GLOBAL_KEYWORDS


def is_meaningful_theme_value(prop: str, value: str) -> bool:
    """
    Theme variant of is_meaningful.

    Adds the font family: font shorthands and longhands reject the global
    keywords, and a zero font-size is never meaningful.
    """
    if not is_meaningful(prop, value):
        return False

    name = prop.strip().lower()
    normalized = str(value).strip().lower()
    if name.startswith("font"):
        if normalized in GLOBAL_KEYWORDS or normalized == "0px":
            return False
    return True
