"""
Root model loader.

This module provides the entry point for loading one or many RSML files
into a :class:`~pyrsml.core.model.RootModel`. Every file goes through the
same pipeline (document loading, date resolution, record extraction,
tree building, metadata building), then the results are assembled:

- snapshot mode: all files are merged into a single entry keyed by the
  earliest capture date
- temporal mode: one entry per file keyed by its capture date; a later
  file with the same date replaces the earlier one

A file that cannot be used (missing, malformed, no scene, no valid root)
is skipped and recorded on the :class:`RootModelLoadResult`; the other
files still load.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from pyrsml.core.diagnostics import DiagnosticKind, DiagnosticLog
from pyrsml.core.exceptions import (
    DocumentNotFoundError,
    EmptyDocumentError,
    MalformedDocumentError,
)
from pyrsml.core.metadata import Metadata
from pyrsml.core.model import RootModel, RootModelEntry
from pyrsml.core.roots import Root, Scene
from pyrsml.io.config import ReaderConfig
from pyrsml.io.rsml_reader import ParsedDocument, RSMLReader
from pyrsml.io.tree_builder import RootTreeBuilder

logger = logging.getLogger(__name__)


@dataclass
class RootModelLoadResult:
    """Result of loading RSML files.

    Attributes:
        model: The assembled model; empty when no file could be used
        errors: Error message per skipped file
        warnings: Warning messages of the files that loaded
        diagnostics: Every diagnostic recorded, all files included
        skipped_files: Files that were skipped, in input order
    """

    model: RootModel = field(default_factory=RootModel)
    errors: dict[Path, str] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    diagnostics: DiagnosticLog = field(default_factory=DiagnosticLog)
    skipped_files: list[Path] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Whether at least one file was loaded."""
        return not self.model.is_empty

    @property
    def has_errors(self) -> bool:
        """Whether any file was skipped."""
        return len(self.errors) > 0


class RootModelLoader:
    """Load RSML files into a root model.

    Example::

        loader = RootModelLoader(["plate_01.rsml", "plate_02.rsml"], temporal=True)
        result = loader.load()
        if result.success:
            for date, entry in result.model.items():
                print(date, entry.n_roots)
    """

    def __init__(
        self,
        paths: Iterable[Path | str] | Path | str,
        temporal: bool = False,
        config: ReaderConfig | None = None,
    ) -> None:
        """Initialize the loader.

        Args:
            paths: One RSML file or several, processed in this order
            temporal: Build a date-indexed series from spatio-temporal
                points instead of a single snapshot. Overrides the flag of
                ``config``.
            config: Reader configuration
        """
        if isinstance(paths, (str, Path)):
            paths = [paths]
        self.paths = [Path(p) for p in paths]
        self.config = (config or ReaderConfig()).with_temporal(temporal)
        self.temporal = temporal

    def load(self) -> RootModelLoadResult:
        """Load every file and assemble the model.

        Returns:
            RootModelLoadResult with the model and the per-file problems
        """
        result = RootModelLoadResult(model=RootModel(temporal=self.temporal))
        parsed_documents = []
        for path in self.paths:
            parsed = self._read_file(path, result)
            if parsed is not None:
                parsed_documents.append(parsed)

        if self.temporal:
            self._assemble_temporal(parsed_documents, result)
        else:
            self._assemble_snapshot(parsed_documents, result)

        logger.info(
            "Loaded %d of %d RSML files into %d entries (%d roots)",
            len(parsed_documents),
            len(self.paths),
            len(result.model),
            result.model.n_roots,
        )
        return result

    def _read_file(self, path: Path, result: RootModelLoadResult) -> ParsedDocument | None:
        """Run the extraction engine on one file, recording failures."""
        try:
            reader = RSMLReader(path, self.config)
        except DocumentNotFoundError as e:
            self._skip(path, str(e), DiagnosticKind.NOT_FOUND, result)
            return None

        try:
            parsed = reader.read()
        except MalformedDocumentError as e:
            result.diagnostics.extend(reader.diagnostics)
            self._skip(path, str(e), DiagnosticKind.MALFORMED_DOCUMENT, result)
            return None
        except EmptyDocumentError as e:
            # The reader already recorded MISSING_SCENE / NO_VALID_ROOT
            result.diagnostics.extend(reader.diagnostics)
            self._skip(path, str(e), None, result)
            return None
        except OSError as e:
            result.diagnostics.extend(reader.diagnostics)
            self._skip(path, f"Cannot read {path}: {e}", DiagnosticKind.NOT_FOUND, result)
            return None

        result.diagnostics.extend(parsed.diagnostics)
        result.warnings.extend(str(d) for d in parsed.diagnostics)
        return parsed

    @staticmethod
    def _skip(
        path: Path,
        message: str,
        kind: DiagnosticKind | None,
        result: RootModelLoadResult,
    ) -> None:
        if kind is not None:
            result.diagnostics.add(kind, message, filepath=path)
        else:
            logger.warning("Skipping %s: %s", path, message)
        result.errors[path] = message
        result.skipped_files.append(path)

    def _build(
        self, parsed: ParsedDocument, result: RootModelLoadResult, scene: Scene | None = None
    ) -> tuple[Scene, list[Root], Metadata]:
        builder = RootTreeBuilder(temporal=parsed.temporal)
        scene, roots = builder.build_document(parsed, scene)
        metadata = Metadata.from_record(
            parsed.metadata, parsed.capture_date, parsed.path, result.diagnostics
        )
        return scene, roots, metadata

    def _assemble_snapshot(
        self, parsed_documents: list[ParsedDocument], result: RootModelLoadResult
    ) -> None:
        if not parsed_documents:
            return
        scene = Scene()
        all_roots: list[Root] = []
        metadata_items: list[Metadata] = []
        for parsed in parsed_documents:
            scene, roots, metadata = self._build(parsed, result, scene)
            all_roots.extend(roots)
            metadata_items.append(metadata)

        merged = Metadata.combine(metadata_items, result.diagnostics)
        capture_date = min(parsed.capture_date for parsed in parsed_documents)
        scene.capture_date = capture_date
        result.model.set_entry(
            RootModelEntry(capture_date=capture_date, scene=scene, metadata=merged, roots=all_roots)
        )

    def _assemble_temporal(
        self, parsed_documents: list[ParsedDocument], result: RootModelLoadResult
    ) -> None:
        for parsed in parsed_documents:
            scene, roots, metadata = self._build(parsed, result)
            replaced = result.model.set_entry(
                RootModelEntry(
                    capture_date=parsed.capture_date,
                    scene=scene,
                    metadata=metadata,
                    roots=roots,
                )
            )
            if replaced is not None:
                sources = ", ".join(str(p) for p in replaced.metadata.source_files)
                result.diagnostics.add(
                    DiagnosticKind.DUPLICATE_DATE,
                    f"Capture date {parsed.capture_date.isoformat()} already loaded from "
                    f"{sources}, replaced",
                    filepath=parsed.path,
                )


def load_root_model(
    paths: Iterable[Path | str] | Path | str,
    temporal: bool = False,
    config: ReaderConfig | None = None,
) -> RootModel:
    """Load RSML files into a root model.

    Files that cannot be used are skipped with a logged diagnostic; use
    :class:`RootModelLoader` to inspect them.

    Args:
        paths: One RSML file or several, processed in order
        temporal: Build a date-indexed series instead of a snapshot
        config: Reader configuration

    Returns:
        The assembled model, empty when no file could be loaded
    """
    return RootModelLoader(paths, temporal=temporal, config=config).load().model
