"""
Diagnostics collected while reading RSML files.

Reading is lenient: a bad numeric field, an empty polyline or an unusable
date never stops a file from loading. Each of those events becomes a
:class:`Diagnostic` recorded on a :class:`DiagnosticLog`, which also routes
the message through :mod:`logging` so callers see it without inspecting
the log.

Example
-------
>>> from pyrsml.core.diagnostics import DiagnosticKind, DiagnosticLog
>>> log = DiagnosticLog()
>>> log.add(DiagnosticKind.INVALID_NUMERIC_FIELD, "bad x", root_id="R1", field="x")
>>> log.count(DiagnosticKind.INVALID_NUMERIC_FIELD)
1
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)


class Severity(Enum):
    """Severity levels for diagnostics."""

    INFO = 1
    WARNING = 2
    ERROR = 3


class DiagnosticKind(Enum):
    """Kinds of problems reported while reading RSML files."""

    NOT_FOUND = "not_found"
    MALFORMED_DOCUMENT = "malformed_document"
    MISSING_SCENE = "missing_scene"
    NO_VALID_ROOT = "no_valid_root"
    INVALID_NUMERIC_FIELD = "invalid_numeric_field"
    DATE_UNRESOLVED = "date_unresolved"
    EMPTY_GEOMETRY = "empty_geometry"
    METADATA_MISMATCH = "metadata_mismatch"
    MISSING_METADATA = "missing_metadata"
    DUPLICATE_DATE = "duplicate_date"

    @property
    def severity(self) -> Severity:
        """Default severity of this kind."""
        return _SEVERITIES.get(self, Severity.WARNING)


_SEVERITIES = {
    DiagnosticKind.NOT_FOUND: Severity.ERROR,
    DiagnosticKind.MALFORMED_DOCUMENT: Severity.ERROR,
    DiagnosticKind.DUPLICATE_DATE: Severity.INFO,
}

_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


@dataclass
class Diagnostic:
    """A single diagnostic message.

    Attributes
    ----------
    kind : DiagnosticKind
        What went wrong.
    message : str
        Human readable text.
    filepath : Path or None
        File the diagnostic refers to.
    root_id : str or None
        Id of the offending root, when the problem is inside one.
    field : str or None
        Name of the offending attribute, property or function.
    """

    kind: DiagnosticKind
    message: str
    filepath: Path | None = None
    root_id: str | None = None
    field: str | None = None

    @property
    def severity(self) -> Severity:
        return self.kind.severity

    def __str__(self) -> str:
        parts = [self.message]
        if self.root_id is not None:
            parts.append(f"root={self.root_id}")
        if self.field is not None:
            parts.append(f"field={self.field}")
        if self.filepath is not None:
            parts.append(f"file={self.filepath}")
        return " | ".join(parts)


@dataclass
class DiagnosticLog:
    """Ordered collection of diagnostics.

    A log may be bound to a file; diagnostics added without an explicit
    ``filepath`` then inherit it.
    """

    filepath: Path | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def add(
        self,
        kind: DiagnosticKind,
        message: str,
        *,
        filepath: Path | str | None = None,
        root_id: str | None = None,
        field: str | None = None,
    ) -> Diagnostic:
        """Record a diagnostic and log it at its severity level."""
        path = Path(filepath) if filepath is not None else self.filepath
        diagnostic = Diagnostic(
            kind=kind, message=message, filepath=path, root_id=root_id, field=field
        )
        self.diagnostics.append(diagnostic)
        logger.log(_LOG_LEVELS[diagnostic.severity], "%s", diagnostic)
        return diagnostic

    def extend(self, other: DiagnosticLog) -> None:
        """Append diagnostics from another log without logging them again."""
        self.diagnostics.extend(other.diagnostics)

    def filter_by_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        """Return diagnostics of the given kind."""
        return [d for d in self.diagnostics if d.kind == kind]

    def filter_by_severity(self, severity: Severity) -> list[Diagnostic]:
        """Return diagnostics of the given severity."""
        return [d for d in self.diagnostics if d.severity == severity]

    def count(self, kind: DiagnosticKind) -> int:
        return len(self.filter_by_kind(kind))

    @property
    def warning_count(self) -> int:
        return len(self.filter_by_severity(Severity.WARNING))

    @property
    def error_count(self) -> int:
        return len(self.filter_by_severity(Severity.ERROR))

    def __len__(self) -> int:
        return len(self.diagnostics)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.diagnostics)
