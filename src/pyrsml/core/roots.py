"""
Root system classes.

This module provides the entity graph built from an RSML file:

- :class:`Scene`: everything captured at one instant
- :class:`Plant`: one plant, its top-level roots and a flat index of all
  of its roots
- :class:`Root`: a node of a root tree with geometry, properties,
  functions and annotations
- :class:`Annotation`: a free-form named annotation of a root

Children are owned by their parent; ``Root.parent``, ``Root.plant`` and
``Plant.scene`` are back-references and are left out of ``repr`` and
equality so the cycles stay harmless.

Example
-------
Build a primary root with one lateral:

>>> from pyrsml.core.geometry import SpatialPolyline
>>> from pyrsml.core.roots import Plant, Root
>>> plant = Plant(id="1")
>>> primary = Root(id="R1", geometry=SpatialPolyline.from_points([(0, 0), (0, 10)]))
>>> plant.add_root(primary)
>>> lateral = Root(id="R1.1", order=2,
...                geometry=SpatialPolyline.from_points([(0, 5), (4, 8)]))
>>> primary.add_child(lateral)
>>> plant.register(lateral)
>>> plant.n_roots, lateral.parent_id
(2, 'R1')
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator

from pyrsml.core.geometry import Geometry


@dataclass
class Annotation:
    """A named annotation of a root.

    Attributes
    ----------
    name : str
        Value of the ``name`` attribute.
    values : dict[str, str]
        Text of each child element, keyed by tag.
    """

    name: str
    values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.values.get(key, default)


@dataclass(eq=False)
class Root:
    """
    A root, node of a plant's root tree.

    Parameters
    ----------
    id : str
        Value of the ``ID`` attribute. Not guaranteed unique.
    label : str
        Free text label, e.g. ``"primary"`` or ``"lateral"``.
    po_accession : str
        Plant ontology accession, passed through unvalidated.
    order : int
        Branching order; 1 for a primary root.
    properties : dict[str, float]
        Scalar properties.
    functions : dict[str, list[float]]
        Named sample sequences.
    annotations : list of Annotation
        Free-form annotations.
    geometry : Geometry, optional
        Centerline geometry owned by this root.
    parent : Root, optional
        Parent root; None for order 1.
    plant : Plant, optional
        Owning plant.
    children : list of Root
        Child roots in document order.
    """

    id: str = ""
    label: str = ""
    po_accession: str = ""
    order: int = 1
    properties: dict[str, float] = field(default_factory=dict)
    functions: dict[str, list[float]] = field(default_factory=dict)
    annotations: list[Annotation] = field(default_factory=list)
    geometry: Geometry | None = None
    parent: Root | None = field(default=None, repr=False)
    plant: Plant | None = field(default=None, repr=False)
    children: list[Root] = field(default_factory=list, repr=False)

    @property
    def parent_id(self) -> str | None:
        return self.parent.id if self.parent is not None else None

    @property
    def parent_label(self) -> str | None:
        return self.parent.label if self.parent is not None else None

    @property
    def is_primary(self) -> bool:
        return self.order == 1

    @property
    def has_geometry(self) -> bool:
        return self.geometry is not None and not self.geometry.is_empty

    @property
    def capture_date(self) -> datetime | None:
        return self.geometry.capture_date if self.geometry is not None else None

    def add_child(self, child: Root) -> None:
        """Attach ``child`` under this root."""
        child.parent = self
        child.plant = self.plant if child.plant is None else child.plant
        self.children.append(child)

    def iter_descendants(self) -> Iterator[Root]:
        """Depth-first iteration over all roots below this one."""
        for child in self.children:
            yield child
            yield from child.iter_descendants()

    def total_length(self) -> float:
        """Length of the centerline, 0.0 without geometry."""
        return self.geometry.total_length() if self.geometry is not None else 0.0

    def length_until(self, time: float) -> float:
        return self.geometry.length_until(time) if self.geometry is not None else 0.0

    def __repr__(self) -> str:
        return (
            f"Root(id={self.id!r}, order={self.order}, "
            f"n_children={len(self.children)}, geometry={self.geometry!r})"
        )


@dataclass(eq=False)
class Plant:
    """
    A plant and its root system.

    Parameters
    ----------
    id : str
        Plant identifier.
    label : str
        Plant label.
    roots : list of Root
        Top-level (order 1) roots, in document order.
    scene : Scene, optional
        Scene holding this plant.

    Notes
    -----
    Every root of the plant, whatever its order, is also registered in a
    flat index exactly once. :meth:`get_root_by_id` looks roots up there;
    when ids repeat, the first registered root wins.
    """

    id: str = ""
    label: str = ""
    roots: list[Root] = field(default_factory=list)
    scene: Scene | None = field(default=None, repr=False)
    _flat: dict[int, Root] = field(default_factory=dict, init=False, repr=False)
    _by_id: dict[str, Root] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        for root in self.roots:
            root.plant = self
            self.register(root)

    def add_root(self, root: Root) -> None:
        """Add a top-level root and register it in the flat index."""
        root.plant = self
        self.roots.append(root)
        self.register(root)

    def register(self, root: Root) -> None:
        """Register a root of any order in the flat index (idempotent)."""
        root.plant = self
        key = id(root)
        if key in self._flat:
            return
        self._flat[key] = root
        self._by_id.setdefault(root.id, root)

    @property
    def flat_roots(self) -> list[Root]:
        """All registered roots in registration order."""
        return list(self._flat.values())

    @property
    def n_roots(self) -> int:
        return len(self._flat)

    @property
    def root_ids(self) -> list[str]:
        return [root.id for root in self._flat.values()]

    @property
    def first_order_roots(self) -> list[Root]:
        return [root for root in self.roots if root.order == 1]

    def get_root_by_id(self, root_id: str) -> Root | None:
        return self._by_id.get(root_id)

    def iter_roots(self) -> Iterator[Root]:
        """Depth-first iteration over the root trees."""
        for root in self.roots:
            yield root
            yield from root.iter_descendants()

    def __contains__(self, root: object) -> bool:
        return id(root) in self._flat

    def __len__(self) -> int:
        return self.n_roots

    def __repr__(self) -> str:
        return f"Plant(id={self.id!r}, n_primary={len(self.roots)}, n_roots={self.n_roots})"


@dataclass(eq=False)
class Scene:
    """
    Plants captured at one instant.

    Parameters
    ----------
    plants : list of Plant
        Plants in document order.
    capture_date : datetime, optional
        Capture date of the scene.
    """

    plants: list[Plant] = field(default_factory=list)
    capture_date: datetime | None = None

    def __post_init__(self) -> None:
        for plant in self.plants:
            plant.scene = self

    def add_plant(self, plant: Plant) -> None:
        plant.scene = self
        self.plants.append(plant)

    @property
    def n_plants(self) -> int:
        return len(self.plants)

    def iter_roots(self) -> Iterator[Root]:
        """All registered roots of all plants, plant by plant."""
        for plant in self.plants:
            yield from plant.flat_roots

    @property
    def n_roots(self) -> int:
        return sum(plant.n_roots for plant in self.plants)

    def __iter__(self) -> Iterator[Plant]:
        return iter(self.plants)

    def __len__(self) -> int:
        return self.n_plants

    def __repr__(self) -> str:
        date = self.capture_date.isoformat() if self.capture_date else None
        return f"Scene(n_plants={self.n_plants}, n_roots={self.n_roots}, capture_date={date})"
