"""
Shared RSML element helpers.

Every ``io/`` reader should import helpers from this module rather than
defining its own copy.
"""

from __future__ import annotations

import math
import xml.etree.ElementTree as ET


def local_name(tag: str) -> str:
    """Strip a ``{namespace}`` prefix from a tag or attribute name."""
    if tag.startswith("{"):
        return tag.rsplit("}", 1)[-1]
    return tag


def text_content(element: ET.Element) -> str:
    """Concatenated text of an element and all of its descendants."""
    return "".join(element.itertext())


def first_child_text(parent: ET.Element, tag: str) -> str | None:
    """Text of the first *direct* child named ``tag``.

    Matches at any other nesting depth are ignored so that a value nested
    deeper in the tree is never picked up by accident.
    """
    child = parent.find(tag)
    if child is None:
        return None
    return text_content(child)


def parse_float_or_none(value: str | None) -> float | None:
    """Parse a string as a finite float, returning None when it is not one.

    Surrounding whitespace is ignored. ``nan``, ``inf`` and Python digit
    separators (``1_0``) are rejected. Callers record a diagnostic when
    None comes back.
    """
    if value is None or "_" in value:
        return None
    try:
        result = float(value.strip())
    except ValueError:
        return None
    return result if math.isfinite(result) else None


def parse_csv_floats(text: str) -> tuple[list[float], list[str]]:
    """Parse a comma-separated list of numbers leniently.

    Returns
    -------
    tuple[list[float], list[str]]
        Parsed values in input order, and the raw tokens that failed.
    """
    values: list[float] = []
    rejected: list[str] = []
    for token in text.split(","):
        if not token.strip():
            continue
        value = parse_float_or_none(token)
        if value is None:
            rejected.append(token.strip())
        else:
            values.append(value)
    return values, rejected


def get_attribute(element: ET.Element, *names: str) -> str:
    """Value of the first attribute present among ``names``.

    A name also matches a namespaced attribute with the same local part,
    so ``"po:accession"`` finds ``{http://...}accession``.
    """
    for name in names:
        if name in element.attrib:
            return element.attrib[name]
    wanted = {local_name(n.split(":", 1)[-1]) for n in names}
    for key, value in element.attrib.items():
        if key.startswith("{") and local_name(key) in wanted:
            return value
    return ""
