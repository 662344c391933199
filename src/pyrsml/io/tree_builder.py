"""
Root tree construction from extracted records.

:class:`RootTreeBuilder` turns the :class:`~pyrsml.io.rsml_reader.SceneRecord`
list of one document into a :class:`~pyrsml.core.roots.Scene` with linked
:class:`~pyrsml.core.roots.Root` trees. Parents are built before their
children. A record without geometry is dropped together with its subtree,
so it is never linked to a parent nor registered in a plant's flat index.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

from pyrsml.core.roots import Plant, Root, Scene
from pyrsml.io.point_parsers import PointParser, point_parser_for
from pyrsml.io.rsml_reader import ParsedDocument, PlantRecord, RootRecord, SceneRecord

logger = logging.getLogger(__name__)


class RootTreeBuilder:
    """
    Build entity graphs from extraction records.

    Parameters
    ----------
    temporal : bool
        Whether the records hold spatio-temporal points. Selects the
        geometry type of the built roots.
    """

    def __init__(self, temporal: bool = False) -> None:
        self.temporal = temporal
        self._parser: PointParser = point_parser_for(temporal)

    def build_scene(
        self,
        scene_records: Sequence[SceneRecord],
        capture_date: datetime | None = None,
        scene: Scene | None = None,
    ) -> tuple[Scene, list[Root]]:
        """
        Build one scene from the scenes of a document.

        Parameters
        ----------
        scene_records : sequence of SceneRecord
            Scenes in document order; their plants all go into one scene.
        capture_date : datetime, optional
            Stamped on the scene and on every geometry.
        scene : Scene, optional
            Existing scene to add the plants to.

        Returns
        -------
        tuple[Scene, list[Root]]
            The scene and the concatenation of the new plants' flat indexes.
        """
        if scene is None:
            scene = Scene(capture_date=capture_date)
        flat: list[Root] = []
        for scene_record in scene_records:
            for plant_record in scene_record.plants:
                plant = self.build_plant(plant_record, capture_date)
                scene.add_plant(plant)
                flat.extend(plant.flat_roots)
        logger.debug("Built scene with %d plants and %d roots", scene.n_plants, len(flat))
        return scene, flat

    def build_document(
        self, parsed: ParsedDocument, scene: Scene | None = None
    ) -> tuple[Scene, list[Root]]:
        """Build the scene of a parsed document, stamped with its capture date."""
        return self.build_scene(parsed.scenes, parsed.capture_date, scene)

    def build_plant(self, record: PlantRecord, capture_date: datetime | None = None) -> Plant:
        plant = Plant(id=record.id, label=record.label)
        for root_record in record.roots:
            root = self._build_root(root_record, plant, None, capture_date)
            if root is not None:
                plant.roots.append(root)
        return plant

    def _build_root(
        self,
        record: RootRecord,
        plant: Plant,
        parent: Root | None,
        capture_date: datetime | None,
    ) -> Root | None:
        if not record.has_geometry:
            return None

        root = Root(
            id=record.id,
            label=record.label,
            po_accession=record.po_accession,
            order=record.order,
            properties=dict(record.properties),
            functions={name: list(samples) for name, samples in record.functions.items()},
            annotations=list(record.annotations),
            geometry=self._parser.build_geometry(record.polylines, capture_date),
            plant=plant,
        )
        if parent is not None:
            parent.add_child(root)
        plant.register(root)

        for child_record in record.children:
            self._build_root(child_record, plant, root, capture_date)
        return root
