"""
Date-indexed root model.

:class:`RootModel` is the final product of loading RSML files: an
ascending mapping from capture date to a :class:`RootModelEntry` holding
the scene, the metadata and the flat root list of that date. A snapshot
load yields a single entry; a temporal load yields one entry per file.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator

from pyrsml.core.metadata import Metadata
from pyrsml.core.roots import Root, Scene

_ROOT_COLUMNS = frozenset(
    (
        "capture_date",
        "plant_id",
        "root_id",
        "label",
        "po_accession",
        "order",
        "parent_id",
        "n_points",
        "total_length",
    )
)


@dataclass
class RootModelEntry:
    """
    Everything captured at one date.

    Attributes:
        capture_date: Key of the entry
        scene: Plants and their root trees
        metadata: Metadata of the file(s) behind the entry
        roots: Flat list of every retained root of the scene
    """

    capture_date: datetime
    scene: Scene
    metadata: Metadata
    roots: list[Root] = field(default_factory=list)

    @property
    def n_roots(self) -> int:
        return len(self.roots)

    def __repr__(self) -> str:
        return (
            f"RootModelEntry(capture_date={self.capture_date.isoformat()}, "
            f"n_plants={self.scene.n_plants}, n_roots={self.n_roots})"
        )


class RootModel:
    """
    Root systems indexed by capture date.

    Keys are distinct and iterate in ascending order. Setting an entry for
    a date already present replaces it.

    Example:
        >>> model = load_root_model(["a.rsml", "b.rsml"], temporal=True)  # doctest: +SKIP
        >>> for date, entry in model.items():  # doctest: +SKIP
        ...     print(date, entry.n_roots)
    """

    def __init__(self, temporal: bool = False) -> None:
        self.temporal = temporal
        self._entries: dict[datetime, RootModelEntry] = {}
        self._dates: list[datetime] = []

    def set_entry(self, entry: RootModelEntry) -> RootModelEntry | None:
        """
        Add or replace the entry for ``entry.capture_date``.

        Returns:
            The replaced entry, or None if the date was new
        """
        date = entry.capture_date
        previous = self._entries.get(date)
        if previous is None:
            bisect.insort(self._dates, date)
        self._entries[date] = entry
        return previous

    @property
    def dates(self) -> list[datetime]:
        """Capture dates, ascending."""
        return list(self._dates)

    @property
    def entries(self) -> list[RootModelEntry]:
        return [self._entries[date] for date in self._dates]

    @property
    def first(self) -> RootModelEntry | None:
        return self._entries[self._dates[0]] if self._dates else None

    @property
    def last(self) -> RootModelEntry | None:
        return self._entries[self._dates[-1]] if self._dates else None

    def get(self, date: datetime) -> RootModelEntry | None:
        return self._entries.get(date)

    def items(self) -> Iterator[tuple[datetime, RootModelEntry]]:
        for date in self._dates:
            yield date, self._entries[date]

    @property
    def metadata(self) -> Metadata:
        """Merge of the metadata of every entry, in date order."""
        return Metadata.combine(entry.metadata for entry in self.entries)

    @property
    def all_roots(self) -> list[Root]:
        """Roots of every entry, in date order."""
        return [root for entry in self.entries for root in entry.roots]

    @property
    def n_roots(self) -> int:
        return sum(entry.n_roots for entry in self._entries.values())

    @property
    def is_empty(self) -> bool:
        return not self._entries

    def to_dataframe(self):
        """
        Convert to a pandas DataFrame with one row per root and date.

        Columns are the capture date, plant and root identification, order,
        parent id, point count, centerline length (``total_length``) and one
        column per root property. A property named like one of the fixed
        columns is stored as ``property_<name>``.

        Returns:
            DataFrame of the roots of every entry
        """
        import pandas as pd

        rows = []
        for date, entry in self.items():
            for root in entry.roots:
                row = {
                    "capture_date": date,
                    "plant_id": root.plant.id if root.plant is not None else None,
                    "root_id": root.id,
                    "label": root.label,
                    "po_accession": root.po_accession,
                    "order": root.order,
                    "parent_id": root.parent_id,
                    "n_points": root.geometry.n_points if root.geometry is not None else 0,
                    "total_length": root.total_length(),
                }
                for name, value in root.properties.items():
                    row[name if name not in _ROOT_COLUMNS else f"property_{name}"] = value
                rows.append(row)
        return pd.DataFrame(rows)

    def summary(self) -> str:
        """
        Return a summary string of the model.

        Returns:
            Multi-line summary of entries and root counts
        """
        mode = "temporal" if self.temporal else "snapshot"
        title = f"Root Model ({mode})"
        lines = [title, "=" * len(title), f"  Entries: {len(self)}", f"  Roots: {self.n_roots}"]
        for date, entry in self.items():
            lines.append(
                f"  {date.isoformat()}: {entry.scene.n_plants} plants, {entry.n_roots} roots"
            )
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[datetime]:
        return iter(list(self._dates))

    def __contains__(self, date: object) -> bool:
        return date in self._entries

    def __getitem__(self, date: datetime) -> RootModelEntry:
        return self._entries[date]

    def __repr__(self) -> str:
        return f"RootModel(temporal={self.temporal}, n_entries={len(self)}, n_roots={self.n_roots})"
