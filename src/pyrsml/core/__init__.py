"""Core data structures for pyrsml."""

from __future__ import annotations

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
    PointTransform,
    SpatialPoint,
    SpatialPolyline,
    SpatioTemporalPolyline,
    TimedPoint,
)
from pyrsml.core.metadata import Metadata, PropertyDefinition
from pyrsml.core.model import RootModel, RootModelEntry
from pyrsml.core.roots import Annotation, Plant, Root, Scene

__all__ = [
    # Entities
    "Scene",
    "Plant",
    "Root",
    "Annotation",
    # Geometry
    "Geometry",
    "GeometryKind",
    "PointTransform",
    "SpatialPoint",
    "TimedPoint",
    "SpatialPolyline",
    "SpatioTemporalPolyline",
    # Metadata and model
    "Metadata",
    "PropertyDefinition",
    "RootModel",
    "RootModelEntry",
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
