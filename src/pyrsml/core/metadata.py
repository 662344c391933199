"""
Metadata of RSML files.

One :class:`Metadata` is built per file from its ``<metadata>`` block and
the resolved capture date. Metadata of several files is merged into one
with :meth:`Metadata.merge` or :meth:`Metadata.combine`; the first-seen
unit and resolution are kept and disagreeing files are reported as
``METADATA_MISMATCH`` diagnostics.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from pyrsml.core.diagnostics import DiagnosticKind, DiagnosticLog
from pyrsml.io.rsml_utils import parse_float_or_none

if TYPE_CHECKING:
    from pyrsml.io.rsml_reader import MetadataRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PropertyDefinition:
    """Declared property: label, value type and unit."""

    label: str
    type: str
    unit: str


@dataclass
class Metadata:
    """
    Metadata of one RSML file, or the merge of several.

    Attributes
    ----------
    version : float
        RSML version, 0.0 when absent or invalid.
    unit : str
        Length unit of the coordinates.
    resolution : float
        Image resolution, 0.0 when absent or invalid.
    modify_date : datetime or None
        Value of ``<last-modified>``.
    capture_dates : list of datetime
        Capture dates of the merged files, ascending, without duplicates.
    software, user, file_key : str
        Provenance strings.
    property_definitions : list of PropertyDefinition
        Declared root properties.
    observation_hours : list of float
        0 followed by the declared observation hours, ascending; empty when
        the file declares none.
    image_info : dict[str, str]
        Content of the ``<image>`` block.
    source_files : list of Path
        Files this metadata was built from.
    """

    version: float = 0.0
    unit: str = ""
    resolution: float = 0.0
    modify_date: datetime | None = None
    capture_dates: list[datetime] = field(default_factory=list)
    software: str = ""
    user: str = ""
    file_key: str = ""
    property_definitions: list[PropertyDefinition] = field(default_factory=list)
    observation_hours: list[float] = field(default_factory=list)
    image_info: dict[str, str] = field(default_factory=dict)
    source_files: list[Path] = field(default_factory=list)

    @classmethod
    def from_record(
        cls,
        record: MetadataRecord,
        capture_date: datetime | None = None,
        source: Path | str | None = None,
        diagnostics: DiagnosticLog | None = None,
    ) -> Metadata:
        """
        Build the metadata of one file.

        Parameters
        ----------
        record : MetadataRecord
            Raw metadata extracted by the reader.
        capture_date : datetime, optional
            Resolved capture date of the file.
        source : Path or str, optional
            File the record was read from.
        diagnostics : DiagnosticLog, optional
            Receives ``INVALID_NUMERIC_FIELD`` for a bad version or
            resolution.

        Returns
        -------
        Metadata
        """
        return cls(
            version=_lenient_float(record.version, "version", diagnostics),
            unit=record.unit or "",
            resolution=_lenient_float(record.resolution, "resolution", diagnostics),
            modify_date=record.modify_date,
            capture_dates=[capture_date] if capture_date is not None else [],
            software=record.software or "",
            user=record.user or "",
            file_key=record.file_key or "",
            property_definitions=[
                PropertyDefinition(*parts) for parts in record.property_definitions
            ],
            observation_hours=list(record.observation_hours),
            image_info=dict(record.image_info),
            source_files=[Path(source)] if source is not None else [],
        )

    def merge(self, other: Metadata, diagnostics: DiagnosticLog | None = None) -> None:
        """
        Merge another file's metadata into this one, in place.

        Capture dates and source files accumulate. Unit and resolution keep
        their first non-empty value; once a file has been merged, any
        ``other`` whose unit or resolution differs, including one that lacks
        the field, is reported. Empty fields are filled from ``other``.
        """
        source = other.source_files[0] if other.source_files else None
        if not self.is_blank:
            if self.resolution != other.resolution:
                _report_mismatch(
                    diagnostics,
                    f"Resolution mismatch: {self.resolution} vs {other.resolution}, "
                    f"keeping {self.resolution or other.resolution}",
                    source,
                    "resolution",
                )
            if self.unit != other.unit:
                _report_mismatch(
                    diagnostics,
                    f"Unit mismatch: {self.unit!r} vs {other.unit!r}, "
                    f"keeping {self.unit or other.unit!r}",
                    source,
                    "unit",
                )

        self.version = self.version or other.version
        self.unit = self.unit or other.unit
        self.resolution = self.resolution or other.resolution
        self.software = self.software or other.software
        self.user = self.user or other.user
        self.file_key = self.file_key or other.file_key
        if other.modify_date is not None and (
            self.modify_date is None or other.modify_date > self.modify_date
        ):
            self.modify_date = other.modify_date

        self.capture_dates = sorted(set(self.capture_dates) | set(other.capture_dates))
        for definition in other.property_definitions:
            if definition not in self.property_definitions:
                self.property_definitions.append(definition)
        if not self.observation_hours:
            self.observation_hours = list(other.observation_hours)
        for key, value in other.image_info.items():
            self.image_info.setdefault(key, value)
        for path in other.source_files:
            if path not in self.source_files:
                self.source_files.append(path)

    @classmethod
    def combine(
        cls, items: Iterable[Metadata], diagnostics: DiagnosticLog | None = None
    ) -> Metadata:
        """Fold metadata in input order into a new merged instance."""
        merged = cls()
        for item in items:
            merged.merge(item, diagnostics)
        return merged

    @property
    def is_blank(self) -> bool:
        """Whether no file has been merged into this instance yet."""
        return not self.source_files and not self.capture_dates

    @property
    def earliest_capture_date(self) -> datetime | None:
        return self.capture_dates[0] if self.capture_dates else None

    def property_definition(self, label: str) -> PropertyDefinition | None:
        for definition in self.property_definitions:
            if definition.label == label:
                return definition
        return None


def _lenient_float(value: str | None, name: str, diagnostics: DiagnosticLog | None) -> float:
    if value is None or not value.strip():
        return 0.0
    result = parse_float_or_none(value)
    if result is None:
        message = f"Invalid metadata {name} {value!r}, using 0.0"
        if diagnostics is not None:
            diagnostics.add(DiagnosticKind.INVALID_NUMERIC_FIELD, message, field=name)
        else:
            logger.warning("%s", message)
    return result if result is not None else 0.0


def _report_mismatch(
    diagnostics: DiagnosticLog | None, message: str, source: Path | None, name: str
) -> None:
    if diagnostics is not None:
        diagnostics.add(DiagnosticKind.METADATA_MISMATCH, message, filepath=source, field=name)
    else:
        logger.warning("%s", message)
