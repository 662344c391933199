"""
Capture date resolution for RSML files.

RSML files rarely declare their acquisition date reliably. Dates are
instead recovered heuristically: the file name, the metadata block and
every element's text and attributes are scanned for date-shaped
substrings, each one is parsed against a fixed chain of formats, and the
earliest successfully parsed date wins.

Example
-------
>>> from pyrsml.io.dates import parse_date, extract_date_strings
>>> parse_date("13_05_2018")
datetime.datetime(2018, 5, 13, 0, 0)
>>> extract_date_strings("13_05_2018_HA01_R004_h053.rsml")
['13_05_2018']
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Sequence

from pyrsml.core.diagnostics import DiagnosticKind, DiagnosticLog
from pyrsml.io.document import RSMLDocument
from pyrsml.io.rsml_utils import text_content

logger = logging.getLogger(__name__)

# Tried in order; the first format matching the whole string wins.
DATE_FORMATS: tuple[str, ...] = (
    "%d_%m_%Y_%H_%M_%S",
    "%d_%m_%Y",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%m-%d-%Y %H:%M:%S",
    "%d/%m/%Y",
    "%Y%m%d%H%M%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    # Date-only shapes produced by DATE_PATTERNS
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%Y%m%d",
    "%Y_%m_%d",
)

# Date-shaped substrings looked for in candidate text, in scan order.
DATE_PATTERNS: tuple[str, ...] = (
    r"\d{2}_\d{2}_\d{4}",  # 24_05_2018
    r"\b\d{4}-\d{2}-\d{2}\b",  # 2018-05-24
    r"\b\d{4}/\d{2}/\d{2}\b",  # 2018/05/24
    r"\b\d{2}/\d{2}/\d{4}\b",  # 24/05/2018
    r"\b\d{8}\b",  # 20180524
    r"\b\d{4}_\d{2}_\d{2}\b",  # 2018_05_24
)

_compiled_patterns: dict[tuple[str, ...], list[re.Pattern[str]]] = {}


def _compile(patterns: Sequence[str]) -> list[re.Pattern[str]]:
    key = tuple(patterns)
    if key not in _compiled_patterns:
        _compiled_patterns[key] = [re.compile(p) for p in key]
    return _compiled_patterns[key]


def parse_date(text: str | None, formats: Sequence[str] = DATE_FORMATS) -> datetime | None:
    """Parse a literal date string.

    Parameters
    ----------
    text : str or None
        The text to parse. Surrounding whitespace is ignored.
    formats : sequence of str
        ``strptime`` formats tried in order.

    Returns
    -------
    datetime or None
        The first successful parse (date-only values land on midnight),
        falling back to ISO-8601; None if nothing matches.
    """
    if text is None:
        return None
    stripped = text.strip()
    if not stripped:
        return None

    for fmt in formats:
        try:
            return datetime.strptime(stripped, fmt)
        except ValueError:
            continue

    try:
        parsed = datetime.fromisoformat(stripped)
    except ValueError:
        return None
    # Keep naive local times comparable with every other parsed date
    return parsed.replace(tzinfo=None)


def extract_date_strings(text: str | None, patterns: Sequence[str] = DATE_PATTERNS) -> list[str]:
    """Return every date-shaped substring of ``text``, pattern by pattern."""
    if not text:
        return []
    found: list[str] = []
    for pattern in _compile(patterns):
        found.extend(match.group() for match in pattern.finditer(text))
    return found


def collect_date_candidates(document: RSMLDocument, filepath: Path | str | None = None) -> set[str]:
    """Gather every text that may hold a capture date.

    Candidates are the file base name, the text of each direct child of
    ``<metadata>``, and for every element its full text content plus each
    attribute value.
    """
    candidates: set[str] = set()
    path = Path(filepath) if filepath is not None else document.path
    if path is not None:
        candidates.add(path.name)

    metadata = document.metadata_element
    if metadata is not None:
        for child in metadata:
            candidates.add(text_content(child))

    for element in document.iter_elements():
        candidates.add(text_content(element))
        candidates.update(element.attrib.values())

    return candidates


def earliest_date(
    texts: Iterable[str],
    formats: Sequence[str] = DATE_FORMATS,
    patterns: Sequence[str] = DATE_PATTERNS,
) -> datetime | None:
    """Earliest date parsed from the date-shaped substrings of ``texts``."""
    earliest: datetime | None = None
    for text in texts:
        for candidate in extract_date_strings(text, patterns):
            parsed = parse_date(candidate, formats)
            if parsed is not None and (earliest is None or parsed < earliest):
                earliest = parsed
    return earliest


def infer_earliest_date(
    document: RSMLDocument,
    filepath: Path | str | None = None,
    *,
    clock: Callable[[], datetime] = datetime.now,
    formats: Sequence[str] = DATE_FORMATS,
    patterns: Sequence[str] = DATE_PATTERNS,
    diagnostics: DiagnosticLog | None = None,
) -> datetime:
    """Infer the capture date of a document.

    Parameters
    ----------
    document : RSMLDocument
        The parsed document.
    filepath : Path or str, optional
        File whose base name is scanned. Defaults to ``document.path``.
    clock : callable
        Returns the fallback date when nothing parses. Tests inject a
        fixed clock here.
    formats, patterns : sequence of str
        Parse formats and scan patterns.
    diagnostics : DiagnosticLog, optional
        Receives a ``DATE_UNRESOLVED`` entry when the clock is used.

    Returns
    -------
    datetime
        The earliest date found, or ``clock()``.
    """
    candidates = collect_date_candidates(document, filepath)
    found = earliest_date(candidates, formats, patterns)
    if found is not None:
        logger.debug("Capture date of %s resolved to %s", document.path, found.isoformat())
        return found

    fallback = clock()
    message = f"No date found in document, using current time {fallback.isoformat()}"
    if diagnostics is not None:
        diagnostics.add(DiagnosticKind.DATE_UNRESOLVED, message, filepath=document.path)
    else:
        logger.warning("%s (%s)", message, document.path)
    return fallback
