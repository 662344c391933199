"""
pyrsml - Python package for RSML (Root System Markup Language) files.

This package provides tools for:
- Reading RSML files into scenes, plants and root trees
- Resolving the capture date of each file
- Assembling several files into a snapshot or a date-indexed series
"""

from __future__ import annotations

__version__ = "0.1.0"

from pyrsml.core.diagnostics import Diagnostic, DiagnosticKind, DiagnosticLog, Severity
from pyrsml.core.exceptions import (
    DocumentNotFoundError,
    EmptyDocumentError,
    GeometryError,
    MalformedDocumentError,
    MissingSceneError,
    NoValidRootError,
    PyRSMLError,
    RSMLIOError,
)
from pyrsml.core.geometry import (
    Geometry,
    GeometryKind,
    SpatialPolyline,
    SpatioTemporalPolyline,
)
from pyrsml.core.metadata import Metadata, PropertyDefinition
from pyrsml.core.model import RootModel, RootModelEntry
from pyrsml.core.roots import Annotation, Plant, Root, Scene
from pyrsml.io.config import ReaderConfig
from pyrsml.io.model_loader import RootModelLoader, RootModelLoadResult, load_root_model

__all__ = [
    "__version__",
    # Entities
    "Scene",
    "Plant",
    "Root",
    "Annotation",
    # Geometry
    "Geometry",
    "GeometryKind",
    "SpatialPolyline",
    "SpatioTemporalPolyline",
    # Model
    "Metadata",
    "PropertyDefinition",
    "RootModel",
    "RootModelEntry",
    # Loading
    "ReaderConfig",
    "RootModelLoader",
    "RootModelLoadResult",
    "load_root_model",
    # Diagnostics
    "Diagnostic",
    "DiagnosticKind",
    "DiagnosticLog",
    "Severity",
    # Exceptions
    "PyRSMLError",
    "RSMLIOError",
    "DocumentNotFoundError",
    "MalformedDocumentError",
    "EmptyDocumentError",
    "MissingSceneError",
    "NoValidRootError",
    "GeometryError",
]
