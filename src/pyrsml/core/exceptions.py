"""Custom exceptions for pyrsml package."""

from __future__ import annotations

from pathlib import Path


class PyRSMLError(Exception):
    """Base exception for all pyrsml errors."""

    pass


class RSMLIOError(PyRSMLError):
    """Error related to reading RSML files."""

    pass


class DocumentNotFoundError(RSMLIOError, FileNotFoundError):
    """Error raised when an RSML file does not exist."""

    def __init__(self, message: str, filepath: Path | str | None = None) -> None:
        super().__init__(message)
        self.filepath = Path(filepath) if filepath is not None else None


class MalformedDocumentError(RSMLIOError):
    """Error raised when an RSML file is not well-formed XML."""

    def __init__(
        self,
        message: str,
        filepath: Path | str | None = None,
        line_number: int | None = None,
    ) -> None:
        super().__init__(message)
        self.filepath = Path(filepath) if filepath is not None else None
        self.line_number = line_number


class EmptyDocumentError(PyRSMLError):
    """Error raised when a well-formed document holds nothing usable."""

    def __init__(self, message: str, filepath: Path | str | None = None) -> None:
        super().__init__(message)
        self.filepath = Path(filepath) if filepath is not None else None


class MissingSceneError(EmptyDocumentError):
    """Error raised when a document has no ``<scene>`` element."""

    pass


class NoValidRootError(EmptyDocumentError):
    """Error raised when no root in a document carries geometry."""

    pass


class GeometryError(PyRSMLError):
    """Error related to geometry operations."""

    pass
