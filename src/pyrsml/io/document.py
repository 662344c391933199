"""
RSML document loading.

:func:`load_document` opens one RSML file and returns an
:class:`RSMLDocument`: the parsed element tree plus a child-to-parent map,
which ElementTree does not keep on its own and which root order
computation needs.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator
from xml.parsers import expat

from pyrsml.core.exceptions import DocumentNotFoundError, MalformedDocumentError
from pyrsml.io.rsml_utils import local_name

logger = logging.getLogger(__name__)

_UNBOUND_PREFIX = expat.errors.codes[expat.errors.XML_ERROR_UNBOUND_PREFIX]
_PLACEHOLDER_NAMESPACE = "urn:pyrsml:undeclared:"

_NAME = rb"[A-Za-z_][\w.-]*"
_ELEMENT_PREFIX_RE = re.compile(rb"</?(" + _NAME + rb"):" + _NAME)
_ATTRIBUTE_PREFIX_RE = re.compile(rb"\s(" + _NAME + rb"):" + _NAME + rb"\s*=")
_DECLARED_PREFIX_RE = re.compile(rb"xmlns:(" + _NAME + rb")\s*=")
# First start tag that is not a declaration, processing instruction or comment
_ROOT_TAG_RE = re.compile(rb"<(?![?!/])" + _NAME + rb"(?::" + _NAME + rb")?")


@dataclass
class RSMLDocument:
    """A parsed RSML file.

    Attributes:
        path: Path the document was read from
        root: The ``<rsml>`` element
        parents: Mapping of every element to its parent element
    """

    path: Path
    root: ET.Element
    parents: dict[ET.Element, ET.Element] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if not self.parents:
            self.parents = {child: parent for parent in self.root.iter() for child in parent}

    @property
    def metadata_element(self) -> ET.Element | None:
        """First ``<metadata>`` element in document order."""
        if self.root.tag == "metadata":
            return self.root
        return self.root.find(".//metadata")

    def iter_elements(self) -> Iterator[ET.Element]:
        """Iterate over every element, document order."""
        return self.root.iter()

    def iter_scenes(self) -> Iterator[ET.Element]:
        return self.root.iter("scene")

    def parent_of(self, element: ET.Element) -> ET.Element | None:
        return self.parents.get(element)

    def ancestors(self, element: ET.Element) -> Iterator[ET.Element]:
        """Walk the parent chain of ``element`` up to the document root."""
        parent = self.parents.get(element)
        while parent is not None:
            yield parent
            parent = self.parents.get(parent)


def load_document(filepath: Path | str) -> RSMLDocument:
    """Load and parse an RSML file.

    Prefixes used without a declaration (``po:accession`` in files that omit
    ``xmlns:po``) are bound to placeholder namespaces and the file is parsed
    again. Namespaces are stripped from element tags, so a document with a
    default namespace reads like one without.

    Args:
        filepath: Path to the ``.rsml`` file

    Returns:
        The parsed document

    Raises:
        DocumentNotFoundError: If the path does not exist or is not a file
        MalformedDocumentError: If the file is not well-formed XML
    """
    path = Path(filepath)
    if not path.is_file():
        raise DocumentNotFoundError(f"RSML file not found: {path}", path)

    data = path.read_bytes()
    try:
        try:
            root = ET.fromstring(data)
        except ET.ParseError as exc:
            prefixes = _undeclared_prefixes(data)
            if exc.code != _UNBOUND_PREFIX or not prefixes:
                raise
            logger.info("Binding undeclared prefixes %s in %s", sorted(prefixes), path)
            root = ET.fromstring(_declare_prefixes(data, prefixes))
    except ET.ParseError as exc:
        line_number = exc.position[0] if getattr(exc, "position", None) else None
        raise MalformedDocumentError(
            f"Malformed RSML file {path}: {exc}", path, line_number=line_number
        ) from exc

    for element in root.iter():
        element.tag = local_name(element.tag)

    logger.debug("Loaded RSML document %s", path)
    return RSMLDocument(path=path, root=root)


def _undeclared_prefixes(data: bytes) -> set[str]:
    used = {m.decode("ascii") for m in _ELEMENT_PREFIX_RE.findall(data)}
    used |= {m.decode("ascii") for m in _ATTRIBUTE_PREFIX_RE.findall(data)}
    declared = {m.decode("ascii") for m in _DECLARED_PREFIX_RE.findall(data)}
    return used - declared - {"xml", "xmlns"}


def _declare_prefixes(data: bytes, prefixes: set[str]) -> bytes:
    """Insert ``xmlns:prefix`` declarations into the document element's start tag."""
    match = _ROOT_TAG_RE.search(data)
    if match is None:
        return data
    declarations = "".join(
        f' xmlns:{prefix}="{_PLACEHOLDER_NAMESPACE}{prefix}"' for prefix in sorted(prefixes)
    )
    return data[: match.end()] + declarations.encode("ascii") + data[match.end() :]
