"""I/O handlers for RSML files."""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING

# ---------------------------------------------------------------------------
# Lazy import mapping: symbol_name -> (module_path, attr_name)
# ---------------------------------------------------------------------------
_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    # Base classes and configuration
    "BaseReader": ("pyrsml.io.base", "BaseReader"),
    "ReaderConfig": ("pyrsml.io.config", "ReaderConfig"),
    # Documents and dates
    "RSMLDocument": ("pyrsml.io.document", "RSMLDocument"),
    "load_document": ("pyrsml.io.document", "load_document"),
    "DATE_FORMATS": ("pyrsml.io.dates", "DATE_FORMATS"),
    "DATE_PATTERNS": ("pyrsml.io.dates", "DATE_PATTERNS"),
    "parse_date": ("pyrsml.io.dates", "parse_date"),
    "extract_date_strings": ("pyrsml.io.dates", "extract_date_strings"),
    "infer_earliest_date": ("pyrsml.io.dates", "infer_earliest_date"),
    # Extraction
    "PointParser": ("pyrsml.io.point_parsers", "PointParser"),
    "SpatialPointParser": ("pyrsml.io.point_parsers", "SpatialPointParser"),
    "SpatioTemporalPointParser": ("pyrsml.io.point_parsers", "SpatioTemporalPointParser"),
    "point_parser_for": ("pyrsml.io.point_parsers", "point_parser_for"),
    "RSMLReader": ("pyrsml.io.rsml_reader", "RSMLReader"),
    "ParsedDocument": ("pyrsml.io.rsml_reader", "ParsedDocument"),
    "SceneRecord": ("pyrsml.io.rsml_reader", "SceneRecord"),
    "PlantRecord": ("pyrsml.io.rsml_reader", "PlantRecord"),
    "RootRecord": ("pyrsml.io.rsml_reader", "RootRecord"),
    "MetadataRecord": ("pyrsml.io.rsml_reader", "MetadataRecord"),
    "RootTreeBuilder": ("pyrsml.io.tree_builder", "RootTreeBuilder"),
    # Model loading
    "RootModelLoader": ("pyrsml.io.model_loader", "RootModelLoader"),
    "RootModelLoadResult": ("pyrsml.io.model_loader", "RootModelLoadResult"),
    "load_root_model": ("pyrsml.io.model_loader", "load_root_model"),
    # Discovery
    "is_rsml_path": ("pyrsml.io.discovery", "is_rsml_path"),
    "find_rsml_files": ("pyrsml.io.discovery", "find_rsml_files"),
}

__all__ = list(_LAZY_IMPORTS)


def __getattr__(name: str) -> object:
    """Lazy import of io symbols and submodules (PEP 562).

    Resolved values are cached in ``globals()`` so subsequent access is a
    plain dict lookup.
    """
    spec = _LAZY_IMPORTS.get(name)
    if spec is not None:
        module_path, attr_name = spec
        value = getattr(importlib.import_module(module_path), attr_name)
        globals()[name] = value
        return value

    try:
        module = importlib.import_module(f"pyrsml.io.{name}")
    except ImportError:
        raise AttributeError(f"module 'pyrsml.io' has no attribute {name!r}") from None
    globals()[name] = module
    return module


if TYPE_CHECKING:
    from pyrsml.io.base import BaseReader as BaseReader
    from pyrsml.io.config import ReaderConfig as ReaderConfig
    from pyrsml.io.dates import DATE_FORMATS as DATE_FORMATS
    from pyrsml.io.dates import DATE_PATTERNS as DATE_PATTERNS
    from pyrsml.io.dates import extract_date_strings as extract_date_strings
    from pyrsml.io.dates import infer_earliest_date as infer_earliest_date
    from pyrsml.io.dates import parse_date as parse_date
    from pyrsml.io.discovery import find_rsml_files as find_rsml_files
    from pyrsml.io.discovery import is_rsml_path as is_rsml_path
    from pyrsml.io.document import RSMLDocument as RSMLDocument
    from pyrsml.io.document import load_document as load_document
    from pyrsml.io.model_loader import RootModelLoader as RootModelLoader
    from pyrsml.io.model_loader import RootModelLoadResult as RootModelLoadResult
    from pyrsml.io.model_loader import load_root_model as load_root_model
    from pyrsml.io.point_parsers import PointParser as PointParser
    from pyrsml.io.point_parsers import SpatialPointParser as SpatialPointParser
    from pyrsml.io.point_parsers import SpatioTemporalPointParser as SpatioTemporalPointParser
    from pyrsml.io.point_parsers import point_parser_for as point_parser_for
    from pyrsml.io.rsml_reader import MetadataRecord as MetadataRecord
    from pyrsml.io.rsml_reader import ParsedDocument as ParsedDocument
    from pyrsml.io.rsml_reader import PlantRecord as PlantRecord
    from pyrsml.io.rsml_reader import RootRecord as RootRecord
    from pyrsml.io.rsml_reader import RSMLReader as RSMLReader
    from pyrsml.io.rsml_reader import SceneRecord as SceneRecord
    from pyrsml.io.tree_builder import RootTreeBuilder as RootTreeBuilder
