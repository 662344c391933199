"""
Geometry classes for root centerlines.

A root owns exactly one geometry, built from the points of all its
polylines. Two variants exist and together form the :data:`Geometry`
union:

- :class:`SpatialPolyline`: plain (x, y) points
- :class:`SpatioTemporalPolyline`: (x, y) points annotated with elapsed
  time, elapsed hours and optionally diameter and growth velocity

Both variants share the same operations (scaling, lengths, applying an
external point transform) so callers only branch on :attr:`kind` when
they need the time axis itself.

Example
-------
>>> from pyrsml.core.geometry import SpatialPolyline
>>> line = SpatialPolyline.from_points([(0.0, 0.0), (3.0, 0.0), (3.0, 4.0)])
>>> line.total_length()
7.0
>>> line.scale(2.0)
>>> line.total_length()
14.0
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, NamedTuple, Protocol, Sequence, Union

import numpy as np
from numpy.typing import NDArray

from pyrsml.core.exceptions import GeometryError

# Textual point, optionally wrapped in brackets or parentheses: "(1.5, 2)"
_NUMBER = r"\s*(-?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?)\s*"
_POINT_2D_RE = re.compile(rf"^[\[(]?{_NUMBER},{_NUMBER}[\])]?$")
_POINT_3D_RE = re.compile(rf"^[\[(]?{_NUMBER},{_NUMBER},{_NUMBER}[\])]?$")


class GeometryKind(Enum):
    """Discriminator of the geometry union."""

    SPATIAL = "2d"
    SPATIOTEMPORAL = "2d+t"


class SpatialPoint(NamedTuple):
    """A plain 2D point read from a ``<point x= y=>`` element."""

    x: float
    y: float


class TimedPoint(NamedTuple):
    """A 2D point with its time annotations.

    ``time`` is the elapsed time index (``coord_t``) and ``time_hours`` the
    elapsed time in hours (``coord_th``).
    """

    x: float
    y: float
    time: float
    time_hours: float
    diameter: float = math.nan
    vx: float = math.nan
    vy: float = math.nan


class _TransformObject(Protocol):
    def transform_point(self, point: Sequence[float]) -> Sequence[float]: ...


#: An external 2D point transform: a callable or an object exposing
#: ``transform_point``. It receives ``(x, y, 0.0)`` and returns at least
#: two coordinates.
PointTransform = Union[Callable[[Sequence[float]], Sequence[float]], _TransformObject]


def _resolve_transform(transform: PointTransform) -> Callable[[Sequence[float]], Sequence[float]]:
    func = getattr(transform, "transform_point", None)
    if func is not None:
        return func
    if callable(transform):
        return transform
    raise GeometryError(f"Not a point transform: {transform!r}")


def _apply_transform(points: NDArray[np.float64], transform: PointTransform, stop: int) -> None:
    """Transform ``points[:stop]`` in place."""
    func = _resolve_transform(transform)
    for i in range(stop):
        result = func((float(points[i, 0]), float(points[i, 1]), 0.0))
        if len(result) < 2:
            raise GeometryError(
                f"Point transform returned {len(result)} coordinate(s), expected at least 2"
            )
        points[i, 0] = result[0]
        points[i, 1] = result[1]


def _as_xy_array(points: Any) -> NDArray[np.float64]:
    arr = np.asarray(points, dtype=np.float64)
    if arr.size == 0:
        return np.empty((0, 2), dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise GeometryError(f"Expected an (n, 2) point array, got shape {arr.shape}")
    return arr


def _segment_lengths(points: NDArray[np.float64]) -> NDArray[np.float64]:
    if len(points) < 2:
        return np.empty(0, dtype=np.float64)
    deltas = np.diff(points, axis=0)
    return np.hypot(deltas[:, 0], deltas[:, 1])


@dataclass(eq=False)
class SpatialPolyline:
    """
    A 2D polyline without time information.

    Parameters
    ----------
    points : ndarray of shape (n, 2)
        Ordered (x, y) coordinates.
    capture_date : datetime, optional
        Capture date of the image the polyline was traced on.

    Examples
    --------
    >>> line = SpatialPolyline.from_points([(0, 0), (1, 0)])
    >>> line.add("1, 1")
    >>> line.n_points
    3
    >>> line.length_until(0.0) == line.total_length()
    True
    """

    points: NDArray[np.float64] = field(default_factory=lambda: np.empty((0, 2)))
    capture_date: datetime | None = None

    kind = GeometryKind.SPATIAL

    def __post_init__(self) -> None:
        self.points = _as_xy_array(self.points)

    @classmethod
    def from_points(
        cls,
        points: Sequence[Sequence[float]],
        capture_date: datetime | None = None,
    ) -> SpatialPolyline:
        """Create a polyline from a sequence of (x, y) pairs."""
        return cls(points=[(p[0], p[1]) for p in points], capture_date=capture_date)

    @property
    def n_points(self) -> int:
        return len(self.points)

    @property
    def is_empty(self) -> bool:
        return self.n_points == 0

    @property
    def start(self) -> tuple[float, float] | None:
        """First point of the polyline, or None if empty."""
        if self.is_empty:
            return None
        return (float(self.points[0, 0]), float(self.points[0, 1]))

    @property
    def end(self) -> tuple[float, float] | None:
        """Last point of the polyline, or None if empty."""
        if self.is_empty:
            return None
        return (float(self.points[-1, 0]), float(self.points[-1, 1]))

    def scale(self, factor: float) -> None:
        """Multiply every coordinate by ``factor`` in place."""
        self.points *= factor

    def total_length(self) -> float:
        """Sum of Euclidean distances between consecutive points."""
        return float(_segment_lengths(self.points).sum())

    def length_until(self, time: float) -> float:
        """Length up to ``time``; without a time axis this is the total length."""
        return self.total_length()

    def transform(self, transform: PointTransform) -> None:
        """Apply an external point transform to every point in place."""
        _apply_transform(self.points, transform, self.n_points)

    def transform_before_time(self, transform: PointTransform, time: float) -> None:
        """Same as :meth:`transform`; there is no time axis to restrict on."""
        self.transform(transform)

    def add(self, item: Any) -> None:
        """
        Append points to the polyline.

        Parameters
        ----------
        item : tuple, SpatialPolyline, str or list
            A single ``(x, y)`` point, another :class:`SpatialPolyline`, a
            textual point such as ``"1.5, 2"`` or ``"(1.5, 2)"``, or a list
            of points and textual points.

        Raises
        ------
        GeometryError
            If ``item`` cannot be interpreted as 2D points.
        """
        if isinstance(item, SpatialPolyline):
            new = item.points
        elif isinstance(item, str):
            new = np.array([_parse_text_point(item, _POINT_2D_RE)])
        elif _is_point(item, 2):
            new = np.array([[float(item[0]), float(item[1])]])
        elif isinstance(item, (list, tuple)):
            rows = []
            for element in item:
                if isinstance(element, str):
                    rows.append(_parse_text_point(element, _POINT_2D_RE))
                elif _is_point(element, 2):
                    rows.append([float(element[0]), float(element[1])])
                else:
                    raise GeometryError(f"Not a 2D point: {element!r}")
            new = np.array(rows, dtype=np.float64).reshape(-1, 2)
        else:
            raise GeometryError(f"Unsupported type: {type(item).__name__}")
        self.points = np.vstack([self.points, new])

    def __len__(self) -> int:
        return self.n_points

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SpatialPolyline):
            return NotImplemented
        return np.array_equal(self.points, other.points)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"SpatialPolyline(n_points={self.n_points}, length={self.total_length():.3f})"


@dataclass(eq=False)
class SpatioTemporalPolyline:
    """
    A 2D polyline whose points carry time annotations.

    Parameters
    ----------
    points : ndarray of shape (n, 2)
        Ordered (x, y) coordinates.
    times : ndarray of shape (n,)
        Elapsed time index of each point.
    time_hours : ndarray of shape (n,)
        Elapsed time of each point in hours.
    diameters, vx, vy : ndarray of shape (n,), optional
        Per-point diameter and growth velocity. NaN where unavailable.
    capture_date : datetime, optional
        Capture date of the series the polyline belongs to.
    """

    points: NDArray[np.float64] = field(default_factory=lambda: np.empty((0, 2)))
    times: NDArray[np.float64] = field(default_factory=lambda: np.empty(0))
    time_hours: NDArray[np.float64] = field(default_factory=lambda: np.empty(0))
    diameters: NDArray[np.float64] | None = None
    vx: NDArray[np.float64] | None = None
    vy: NDArray[np.float64] | None = None
    capture_date: datetime | None = None

    kind = GeometryKind.SPATIOTEMPORAL

    def __post_init__(self) -> None:
        self.points = _as_xy_array(self.points)
        n = len(self.points)
        self.times = self._column(self.times, n, "times", required=True)
        self.time_hours = self._column(self.time_hours, n, "time_hours", required=True)
        self.diameters = self._column(self.diameters, n, "diameters")
        self.vx = self._column(self.vx, n, "vx")
        self.vy = self._column(self.vy, n, "vy")

    @staticmethod
    def _column(values: Any, n: int, name: str, required: bool = False) -> NDArray[np.float64]:
        if values is None:
            if required:
                raise GeometryError(f"'{name}' is required")
            return np.full(n, np.nan)
        arr = np.asarray(values, dtype=np.float64).reshape(-1)
        if len(arr) != n:
            raise GeometryError(f"'{name}' has {len(arr)} values for {n} points")
        return arr

    @classmethod
    def from_points(
        cls,
        points: Sequence[TimedPoint],
        capture_date: datetime | None = None,
    ) -> SpatioTemporalPolyline:
        """Create a polyline from :class:`TimedPoint` records."""
        return cls(
            points=[(p.x, p.y) for p in points],
            times=[p.time for p in points],
            time_hours=[p.time_hours for p in points],
            diameters=[p.diameter for p in points],
            vx=[p.vx for p in points],
            vy=[p.vy for p in points],
            capture_date=capture_date,
        )

    @property
    def n_points(self) -> int:
        return len(self.points)

    @property
    def is_empty(self) -> bool:
        return self.n_points == 0

    @property
    def start(self) -> tuple[float, float] | None:
        if self.is_empty:
            return None
        return (float(self.points[0, 0]), float(self.points[0, 1]))

    @property
    def end(self) -> tuple[float, float] | None:
        if self.is_empty:
            return None
        return (float(self.points[-1, 0]), float(self.points[-1, 1]))

    @property
    def max_time(self) -> float:
        """Largest elapsed time among the points (NaN if empty)."""
        return float(self.times.max()) if self.n_points else math.nan

    def scale(self, factor: float) -> None:
        """Multiply every coordinate by ``factor`` in place."""
        self.points *= factor

    def total_length(self) -> float:
        return float(_segment_lengths(self.points).sum())

    def length_until(self, time: float) -> float:
        """
        Length of the polyline grown by ``time``.

        Segments are summed in order and the sum stops at the first point
        whose elapsed time exceeds ``time``.
        """
        segments = _segment_lengths(self.points)
        exceeded = np.nonzero(self.times[1:] > time)[0]
        stop = int(exceeded[0]) if exceeded.size else len(segments)
        return float(segments[:stop].sum())

    def transform(self, transform: PointTransform) -> None:
        _apply_transform(self.points, transform, self.n_points)

    def transform_before_time(self, transform: PointTransform, time: float) -> None:
        """Transform the prefix of points whose elapsed time is <= ``time``."""
        exceeded = np.nonzero(self.times > time)[0]
        stop = int(exceeded[0]) if exceeded.size else self.n_points
        _apply_transform(self.points, transform, stop)

    def add(self, item: Any) -> None:
        """
        Append timed points to the polyline.

        Accepts a :class:`TimedPoint`, an ``(x, y, time)`` or
        ``(x, y, time, time_hours)`` tuple, another
        :class:`SpatioTemporalPolyline`, a textual ``"x, y, time"`` point,
        or a list of those. Points given without hours use ``time`` for both
        time columns.
        """
        if isinstance(item, SpatioTemporalPolyline):
            new = [
                TimedPoint(
                    float(item.points[i, 0]),
                    float(item.points[i, 1]),
                    float(item.times[i]),
                    float(item.time_hours[i]),
                    float(item.diameters[i]),
                    float(item.vx[i]),
                    float(item.vy[i]),
                )
                for i in range(item.n_points)
            ]
        elif isinstance(item, (str, TimedPoint)) or _is_point(item, 3) or _is_point(item, 4):
            new = [_to_timed_point(item)]
        elif isinstance(item, (list, tuple)):
            new = [_to_timed_point(element) for element in item]
        else:
            raise GeometryError(f"Unsupported type: {type(item).__name__}")
        if not new:
            return
        self.points = np.vstack([self.points, [(p.x, p.y) for p in new]])
        self.times = np.concatenate([self.times, [p.time for p in new]])
        self.time_hours = np.concatenate([self.time_hours, [p.time_hours for p in new]])
        self.diameters = np.concatenate([self.diameters, [p.diameter for p in new]])
        self.vx = np.concatenate([self.vx, [p.vx for p in new]])
        self.vy = np.concatenate([self.vy, [p.vy for p in new]])

    def __len__(self) -> int:
        return self.n_points

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SpatioTemporalPolyline):
            return NotImplemented
        return np.array_equal(self.points, other.points) and np.array_equal(
            self.times, other.times
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"SpatioTemporalPolyline(n_points={self.n_points}, "
            f"length={self.total_length():.3f}, max_time={self.max_time})"
        )


Geometry = Union[SpatialPolyline, SpatioTemporalPolyline]


def _is_point(item: Any, size: int) -> bool:
    if isinstance(item, (str, bytes)) or not isinstance(item, (tuple, list, np.ndarray)):
        return False
    if len(item) != size:
        return False
    return all(isinstance(v, (int, float, np.floating, np.integer)) for v in item)


def _parse_text_point(text: str, pattern: re.Pattern[str]) -> list[float]:
    match = pattern.match(text.strip())
    if match is None:
        raise GeometryError(f"Invalid point text: {text!r}")
    return [float(v) for v in match.groups()]


def _to_timed_point(item: Any) -> TimedPoint:
    if isinstance(item, TimedPoint):
        return item
    if isinstance(item, str):
        x, y, t = _parse_text_point(item, _POINT_3D_RE)
        return TimedPoint(x, y, t, t)
    if _is_point(item, 3):
        x, y, t = (float(v) for v in item)
        return TimedPoint(x, y, t, t)
    if _is_point(item, 4):
        x, y, t, th = (float(v) for v in item)
        return TimedPoint(x, y, t, th)
    raise GeometryError(f"Not a timed point: {item!r}")


def build_spatial(
    polylines: Sequence[Sequence[SpatialPoint]], capture_date: datetime | None = None
) -> SpatialPolyline:
    """Combine the polylines of one root into a single geometry."""
    points = [p for polyline in polylines for p in polyline]
    return SpatialPolyline.from_points(points, capture_date)


def build_spatiotemporal(
    polylines: Sequence[Sequence[TimedPoint]], capture_date: datetime | None = None
) -> SpatioTemporalPolyline:
    """Combine the timed polylines of one root into a single geometry."""
    points = [p for polyline in polylines for p in polyline]
    return SpatioTemporalPolyline.from_points(points, capture_date)
