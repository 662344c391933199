"""
Point extraction strategies for root geometry.

A root's centerline is stored as ``<geometry>/<polyline>/<point>``
elements. Two point schemas exist:

- spatial: ``<point x= y=/>``
- spatio-temporal: ``<point coord_t= coord_th= coord_x= coord_y=
  diameter= vx= vy=/>``

Each schema has a strategy class; :func:`point_parser_for` picks one from
the temporal flag. A point with a missing or non-numeric required
attribute is dropped with a diagnostic, and a polyline left without points
is dropped entirely.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Generic, Sequence, TypeVar

from pyrsml.core.diagnostics import DiagnosticKind, DiagnosticLog
from pyrsml.core.geometry import (
    Geometry,
    SpatialPoint,
    TimedPoint,
    build_spatial,
    build_spatiotemporal,
)
from pyrsml.io.rsml_utils import parse_float_or_none

PointT = TypeVar("PointT", SpatialPoint, TimedPoint)


class PointParser(ABC, Generic[PointT]):
    """Base class of the point extraction strategies."""

    #: Attributes that must all parse as numbers for a point to be kept
    required_attributes: tuple[str, ...] = ()

    @property
    @abstractmethod
    def temporal(self) -> bool:
        """Whether this strategy reads time annotations."""

    @abstractmethod
    def _make_point(self, values: dict[str, float]) -> PointT:
        """Build a point from the parsed required attributes."""

    @abstractmethod
    def build_geometry(
        self, polylines: Sequence[Sequence[PointT]], capture_date: datetime | None = None
    ) -> Geometry:
        """Combine a root's polylines into its geometry."""

    def parse_point(self, element: ET.Element) -> tuple[PointT | None, str | None]:
        """Parse one ``<point>`` element.

        Returns:
            ``(point, None)`` on success, ``(None, attribute)`` naming the
            first attribute that was missing or not numeric
        """
        values: dict[str, float] = {}
        for name in self.required_attributes:
            value = parse_float_or_none(element.get(name))
            if value is None:
                return None, name
            values[name] = value
        return self._make_point(values), None

    def parse_polylines(
        self,
        root_element: ET.Element,
        root_id: str = "",
        diagnostics: DiagnosticLog | None = None,
    ) -> list[list[PointT]]:
        """Read every polyline of a root.

        Only ``<geometry>`` children of ``root_element`` itself are read;
        geometry of nested roots belongs to those roots.

        Returns:
            Non-empty polylines in document order; an empty list means the
            root has no usable geometry
        """
        polylines: list[list[PointT]] = []
        for polyline_element in root_element.iterfind("geometry/polyline"):
            polyline: list[PointT] = []
            for point_element in polyline_element.iterfind("point"):
                point, bad_attribute = self.parse_point(point_element)
                if point is None:
                    if diagnostics is not None:
                        raw = point_element.get(bad_attribute or "")
                        diagnostics.add(
                            DiagnosticKind.INVALID_NUMERIC_FIELD,
                            f"Invalid point coordinate {bad_attribute}={raw!r}, point dropped",
                            root_id=root_id,
                            field=bad_attribute,
                        )
                    continue
                polyline.append(point)
            if polyline:
                polylines.append(polyline)
        return polylines


class SpatialPointParser(PointParser[SpatialPoint]):
    """Reads ``x``/``y`` points."""

    required_attributes = ("x", "y")

    @property
    def temporal(self) -> bool:
        return False

    def _make_point(self, values: dict[str, float]) -> SpatialPoint:
        return SpatialPoint(values["x"], values["y"])

    def build_geometry(
        self, polylines: Sequence[Sequence[SpatialPoint]], capture_date: datetime | None = None
    ) -> Geometry:
        return build_spatial(polylines, capture_date)


class SpatioTemporalPointParser(PointParser[TimedPoint]):
    """Reads points annotated with time, hours, diameter and velocity."""

    required_attributes = ("coord_t", "coord_th", "coord_x", "coord_y", "diameter", "vx", "vy")

    @property
    def temporal(self) -> bool:
        return True

    def _make_point(self, values: dict[str, float]) -> TimedPoint:
        return TimedPoint(
            x=values["coord_x"],
            y=values["coord_y"],
            time=values["coord_t"],
            time_hours=values["coord_th"],
            diameter=values["diameter"],
            vx=values["vx"],
            vy=values["vy"],
        )

    def build_geometry(
        self, polylines: Sequence[Sequence[TimedPoint]], capture_date: datetime | None = None
    ) -> Geometry:
        return build_spatiotemporal(polylines, capture_date)


def point_parser_for(temporal: bool) -> PointParser:
    """Return the point extraction strategy for the temporal flag."""
    if temporal:
        return SpatioTemporalPointParser()
    return SpatialPointParser()
