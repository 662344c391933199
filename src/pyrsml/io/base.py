"""
Base classes for RSML file I/O.

This module provides the abstract base class shared by RSML readers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from pyrsml.core.exceptions import DocumentNotFoundError


class BaseReader(ABC):
    """Abstract base class for RSML file readers."""

    def __init__(self, filepath: Path | str) -> None:
        """
        Initialize the reader.

        Args:
            filepath: Path to the file to read

        Raises:
            DocumentNotFoundError: If the path does not exist or is not a file
        """
        self.filepath = Path(filepath)
        self._validate_file()

    def _validate_file(self) -> None:
        """Validate that the file exists and is readable."""
        if not self.filepath.exists():
            raise DocumentNotFoundError(f"File not found: {self.filepath}", self.filepath)
        if not self.filepath.is_file():
            raise DocumentNotFoundError(f"Path is not a file: {self.filepath}", self.filepath)

    @abstractmethod
    def read(self) -> Any:
        """
        Read the file and return the parsed data.

        Returns:
            Parsed data (type depends on subclass)
        """
        pass

    @property
    @abstractmethod
    def format(self) -> str:
        """Return the file format identifier."""
        pass
