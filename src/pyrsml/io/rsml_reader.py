"""
RSML extraction engine.

:class:`RSMLReader` walks one RSML document and turns it into plain
records: scenes, plants and roots (recursively), plus the metadata block.
No entity graph is built here; :mod:`pyrsml.io.tree_builder` does that
from the records.

Reading is lenient. Bad numeric values are skipped and recorded on the
reader's :class:`~pyrsml.core.diagnostics.DiagnosticLog`; only a missing
or malformed file, a document without scenes, or a document without any
root carrying geometry stops the read.

Example
-------
>>> from pyrsml.io.rsml_reader import RSMLReader
>>> parsed = RSMLReader("13_05_2018_HA01_R004_h053.rsml").read()  # doctest: +SKIP
>>> parsed.capture_date  # doctest: +SKIP
datetime.datetime(2018, 5, 13, 0, 0)
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from pyrsml.core.diagnostics import DiagnosticKind, DiagnosticLog
from pyrsml.core.exceptions import MissingSceneError, NoValidRootError
from pyrsml.core.roots import Annotation
from pyrsml.io.base import BaseReader
from pyrsml.io.config import ReaderConfig
from pyrsml.io.dates import infer_earliest_date, parse_date
from pyrsml.io.document import RSMLDocument, load_document
from pyrsml.io.point_parsers import PointParser, point_parser_for
from pyrsml.io.rsml_utils import (
    first_child_text,
    get_attribute,
    local_name,
    parse_csv_floats,
    parse_float_or_none,
    text_content,
)

logger = logging.getLogger(__name__)

# Single-valued metadata fields, element name -> record attribute
_METADATA_FIELDS = {
    "version": "version",
    "unit": "unit",
    "resolution": "resolution",
    "software": "software",
    "user": "user",
    "file-key": "file_key",
}


@dataclass
class RootRecord:
    """Raw data of one ``<root>`` element.

    Attributes
    ----------
    id, label, po_accession : str
        Identification attributes, empty when absent.
    order : int
        1 plus the number of ``root`` ancestors.
    properties : dict[str, float]
        Numeric properties.
    functions : dict[str, list[float]]
        Sample sequences by function name.
    annotations : list of Annotation
        Annotations in document order.
    polylines : list
        Non-empty polylines of points; empty when the root has no geometry.
    children : list of RootRecord
        Nested roots. Never filled for a root without geometry.
    """

    id: str = ""
    label: str = ""
    po_accession: str = ""
    order: int = 1
    properties: dict[str, float] = field(default_factory=dict)
    functions: dict[str, list[float]] = field(default_factory=dict)
    annotations: list[Annotation] = field(default_factory=list)
    polylines: list[list] = field(default_factory=list)
    children: list[RootRecord] = field(default_factory=list)

    @property
    def has_geometry(self) -> bool:
        return bool(self.polylines)


@dataclass
class PlantRecord:
    """Raw data of one ``<plant>`` element."""

    id: str = ""
    label: str = ""
    roots: list[RootRecord] = field(default_factory=list)


@dataclass
class SceneRecord:
    """Raw data of one ``<scene>`` element."""

    plants: list[PlantRecord] = field(default_factory=list)


@dataclass
class MetadataRecord:
    """Raw content of the ``<metadata>`` block.

    Single-valued fields keep their text; numeric conversion happens in
    :meth:`pyrsml.core.metadata.Metadata.from_record`.
    """

    version: str | None = None
    unit: str | None = None
    resolution: str | None = None
    software: str | None = None
    user: str | None = None
    file_key: str | None = None
    modify_date: datetime | None = None
    observation_hours: list[float] = field(default_factory=list)
    property_definitions: list[tuple[str, str, str]] = field(default_factory=list)
    image_info: dict[str, str] = field(default_factory=dict)
    present: bool = True


@dataclass
class ParsedDocument:
    """Everything extracted from one RSML file.

    Attributes
    ----------
    path : Path
        Source file.
    capture_date : datetime
        Resolved capture date.
    temporal : bool
        Whether spatio-temporal points were read.
    metadata : MetadataRecord
        The metadata block.
    scenes : list of SceneRecord
        Scenes in document order.
    flat_roots : list of RootRecord
        Every root record carrying geometry, in extraction order.
    diagnostics : DiagnosticLog
        Problems recorded while reading.
    """

    path: Path
    capture_date: datetime
    temporal: bool
    metadata: MetadataRecord
    scenes: list[SceneRecord]
    flat_roots: list[RootRecord]
    diagnostics: DiagnosticLog

    @property
    def n_roots(self) -> int:
        return len(self.flat_roots)


class RSMLReader(BaseReader):
    """
    Reader for one RSML file.

    Args:
        filepath: Path to the ``.rsml`` file
        config: Reader configuration; defaults to snapshot mode

    Attributes:
        diagnostics: Diagnostics recorded by the last :meth:`read`, kept on
            the reader so they survive a failed read
    """

    def __init__(self, filepath: Path | str, config: ReaderConfig | None = None) -> None:
        super().__init__(filepath)
        self.config = config or ReaderConfig()
        self.diagnostics = DiagnosticLog(filepath=self.filepath)
        self._parser: PointParser = point_parser_for(self.config.temporal)

    @property
    def format(self) -> str:
        return "rsml"

    def read(self) -> ParsedDocument:
        """
        Read the file.

        Returns:
            The extracted records

        Raises:
            MalformedDocumentError: If the file is not well-formed XML
            MissingSceneError: If the document has no ``<scene>``
            NoValidRootError: If no root carries geometry
        """
        self.diagnostics = DiagnosticLog(filepath=self.filepath)
        document = load_document(self.filepath)

        capture_date = infer_earliest_date(
            document,
            self.filepath,
            clock=self.config.clock,
            formats=self.config.date_formats,
            patterns=self.config.date_patterns,
            diagnostics=self.diagnostics,
        )
        metadata = self.read_metadata(document)

        scene_elements = list(document.iter_scenes())
        if not scene_elements:
            self.diagnostics.add(DiagnosticKind.MISSING_SCENE, "No scene found in document")
            raise MissingSceneError(f"No scene found in {self.filepath}", self.filepath)

        flat_roots: list[RootRecord] = []
        scenes = [self._read_scene(element, document, flat_roots) for element in scene_elements]

        if not flat_roots:
            self.diagnostics.add(
                DiagnosticKind.NO_VALID_ROOT, "No root with geometry found in document"
            )
            raise NoValidRootError(f"No valid root found in {self.filepath}", self.filepath)

        logger.info(
            "Read %d roots from %s (capture date %s)",
            len(flat_roots),
            self.filepath,
            capture_date.isoformat(),
        )
        return ParsedDocument(
            path=self.filepath,
            capture_date=capture_date,
            temporal=self.config.temporal,
            metadata=metadata,
            scenes=scenes,
            flat_roots=flat_roots,
            diagnostics=self.diagnostics,
        )

    # ------------------------------------------------------------------
    # Hierarchy
    # ------------------------------------------------------------------

    def _read_scene(
        self, element: ET.Element, document: RSMLDocument, flat_roots: list[RootRecord]
    ) -> SceneRecord:
        plants = [
            PlantRecord(
                id=get_attribute(plant, "ID", "id"),
                label=get_attribute(plant, "label"),
                roots=self._read_roots(plant, document, flat_roots),
            )
            for plant in element.iter("plant")
        ]
        return SceneRecord(plants=plants)

    def _read_roots(
        self, parent: ET.Element, document: RSMLDocument, flat_roots: list[RootRecord]
    ) -> list[RootRecord]:
        """Read the direct ``<root>`` children of ``parent``, recursively."""
        records = []
        for element in parent.findall("root"):
            record = self._read_root(element, document)
            records.append(record)
            if not record.has_geometry:
                self.diagnostics.add(
                    DiagnosticKind.EMPTY_GEOMETRY,
                    "Root has no usable geometry, root and its children skipped",
                    root_id=record.id,
                )
                continue
            flat_roots.append(record)
            record.children = self._read_roots(element, document, flat_roots)
        return records

    def _read_root(self, element: ET.Element, document: RSMLDocument) -> RootRecord:
        root_id = get_attribute(element, "ID", "id")
        order = 1 + sum(1 for ancestor in document.ancestors(element) if ancestor.tag == "root")
        return RootRecord(
            id=root_id,
            label=get_attribute(element, "label"),
            po_accession=get_attribute(element, "po:accession", "poaccession"),
            order=order,
            properties=self._read_properties(element, root_id),
            functions=self._read_functions(element, root_id),
            annotations=self._read_annotations(element),
            polylines=self._parser.parse_polylines(element, root_id, self.diagnostics),
        )

    def _read_properties(self, element: ET.Element, root_id: str) -> dict[str, float]:
        properties: dict[str, float] = {}
        block = element.find("properties")
        if block is None:
            return properties
        for child in block:
            name = local_name(child.tag)
            raw = text_content(child)
            if not raw.strip():
                raw = child.get("value", "")
            value = parse_float_or_none(raw)
            if value is None:
                self.diagnostics.add(
                    DiagnosticKind.INVALID_NUMERIC_FIELD,
                    f"Invalid property value {raw!r}, property skipped",
                    root_id=root_id,
                    field=name,
                )
                continue
            properties[name] = value
        return properties

    def _read_functions(self, element: ET.Element, root_id: str) -> dict[str, list[float]]:
        functions: dict[str, list[float]] = {}
        for function in [*element.findall("function"), *element.findall("functions/function")]:
            name = function.get("name", "")
            samples: list[float] = []
            for sample in function.iterfind("sample"):
                raw = text_content(sample)
                value = parse_float_or_none(raw)
                if value is None:
                    self.diagnostics.add(
                        DiagnosticKind.INVALID_NUMERIC_FIELD,
                        f"Invalid sample {raw!r} in function {name!r}, sample skipped",
                        root_id=root_id,
                        field=name,
                    )
                    continue
                samples.append(value)
            if samples:
                functions[name] = samples
        return functions

    def _read_annotations(self, element: ET.Element) -> list[Annotation]:
        return [
            Annotation(
                name=annotation.get("name", ""),
                values={local_name(child.tag): text_content(child).strip() for child in annotation},
            )
            for annotation in [
                *element.findall("annotation"),
                *element.findall("annotations/annotation"),
            ]
        ]

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def read_metadata(self, document: RSMLDocument) -> MetadataRecord:
        """Extract the first ``<metadata>`` block of ``document``."""
        element = document.metadata_element
        if element is None:
            self.diagnostics.add(DiagnosticKind.MISSING_METADATA, "No metadata found in document")
            return MetadataRecord(present=False)

        record = MetadataRecord()
        for tag, attribute in _METADATA_FIELDS.items():
            text = first_child_text(element, tag)
            setattr(record, attribute, text.strip() if text is not None else None)

        record.modify_date = self._read_modify_date(element)
        record.observation_hours = self._read_observation_hours(element)

        definitions = element.find("property-definitions")
        if definitions is not None:
            unknown = self.config.unknown_label
            for definition in definitions.iterfind("property-definition"):
                record.property_definitions.append(
                    tuple(
                        (first_child_text(definition, part) or "").strip() or unknown
                        for part in ("label", "type", "unit")
                    )
                )

        image = element.find("image")
        if image is not None:
            record.image_info = {local_name(c.tag): text_content(c).strip() for c in image}

        return record

    def _read_modify_date(self, element: ET.Element) -> datetime | None:
        text = first_child_text(element, "last-modified")
        if text is None or not text.strip():
            return None
        if text.strip().lower() == "today":
            return self.config.clock()
        parsed = parse_date(text, self.config.date_formats)
        if parsed is None:
            self.diagnostics.add(
                DiagnosticKind.DATE_UNRESOLVED,
                f"Unparsable last-modified date {text.strip()!r}",
                field="last-modified",
            )
        return parsed

    def _read_observation_hours(self, element: ET.Element) -> list[float]:
        text = first_child_text(element, "observation-hours")
        if text is None:
            return []
        values, rejected = parse_csv_floats(text)
        for token in rejected:
            self.diagnostics.add(
                DiagnosticKind.INVALID_NUMERIC_FIELD,
                f"Invalid observation hour {token!r}, value skipped",
                field="observation-hours",
            )
        return sorted([0.0, *values])
