"""Unit tests for geometry classes (core/geometry.py)."""

from __future__ import annotations

import math
from datetime import datetime

import numpy as np
import pytest

from pyrsml.core.exceptions import GeometryError
from pyrsml.core.geometry import (
    GeometryKind,
    SpatialPoint,
    SpatialPolyline,
    SpatioTemporalPolyline,
    TimedPoint,
    build_spatial,
    build_spatiotemporal,
)


def make_timed_line() -> SpatioTemporalPolyline:
    """(0,0) at t=1, (0,3) at t=2, (4,3) at t=3."""
    return SpatioTemporalPolyline.from_points(
        [
            TimedPoint(0.0, 0.0, 1.0, 0.0),
            TimedPoint(0.0, 3.0, 2.0, 6.0),
            TimedPoint(4.0, 3.0, 3.0, 12.0),
        ]
    )


class Shift:
    """Point transform object moving points by (dx, dy)."""

    def __init__(self, dx: float, dy: float) -> None:
        self.dx = dx
        self.dy = dy

    def transform_point(self, point):
        return (point[0] + self.dx, point[1] + self.dy, point[2])


# =============================================================================
# Test SpatialPolyline
# =============================================================================


class TestSpatialPolyline:
    """Tests for SpatialPolyline."""

    def test_from_points(self) -> None:
        """Test building from points."""
        date = datetime(2018, 5, 13)
        line = SpatialPolyline.from_points([(0, 0), (3, 0), (3, 4)], capture_date=date)

        assert line.kind == GeometryKind.SPATIAL
        assert line.n_points == 3
        assert len(line) == 3
        assert line.points.shape == (3, 2)
        assert line.capture_date == date
        assert line.start == (0.0, 0.0)
        assert line.end == (3.0, 4.0)

    def test_empty(self) -> None:
        """Test empty."""
        line = SpatialPolyline()
        assert line.is_empty
        assert line.start is None
        assert line.end is None
        assert line.total_length() == 0.0

    def test_single_point_length(self) -> None:
        """Test single point length."""
        assert SpatialPolyline.from_points([(1, 1)]).total_length() == 0.0

    def test_total_length(self) -> None:
        """Test total length."""
        line = SpatialPolyline.from_points([(0, 0), (3, 0), (3, 4)])
        assert line.total_length() == pytest.approx(7.0)

    def test_length_until_is_total(self) -> None:
        """Test length until is total."""
        line = SpatialPolyline.from_points([(0, 0), (3, 0), (3, 4)])
        assert line.length_until(0.0) == pytest.approx(7.0)
        assert line.length_until(-5.0) == pytest.approx(7.0)

    def test_scale_identity(self) -> None:
        """Test scale identity."""
        line = SpatialPolyline.from_points([(1.5, 2.0), (3.0, -4.0)])
        before = line.points.copy()
        line.scale(1.0)
        np.testing.assert_array_equal(line.points, before)

    def test_scale_round_trip(self) -> None:
        """Test scale round trip."""
        line = SpatialPolyline.from_points([(1.5, 2.0), (3.0, -4.0)])
        before = line.points.copy()
        line.scale(2.5)
        assert line.total_length() == pytest.approx(2.5 * math.hypot(1.5, 6.0))
        line.scale(1 / 2.5)
        np.testing.assert_allclose(line.points, before)

    def test_transform_callable(self) -> None:
        """Test transform callable."""
        line = SpatialPolyline.from_points([(0, 0), (1, 1)])
        calls = []

        def swap(point):
            calls.append(tuple(point))
            return (point[1] + 10, point[0])

        line.transform(swap)

        assert calls == [(0.0, 0.0, 0.0), (1.0, 1.0, 0.0)]
        np.testing.assert_array_equal(line.points, [[10.0, 0.0], [11.0, 1.0]])

    def test_transform_object(self) -> None:
        """Test transform object."""
        line = SpatialPolyline.from_points([(0, 0), (1, 1)])
        line.transform(Shift(1, -1))
        np.testing.assert_array_equal(line.points, [[1.0, -1.0], [2.0, 0.0]])

    def test_transform_before_time_transforms_all(self) -> None:
        """Test transform before time transforms all."""
        line = SpatialPolyline.from_points([(0, 0), (1, 1)])
        line.transform_before_time(Shift(1, 0), -100.0)
        np.testing.assert_array_equal(line.points[:, 0], [1.0, 2.0])

    def test_transform_short_result(self) -> None:
        """Test transform short result."""
        line = SpatialPolyline.from_points([(0, 0)])
        with pytest.raises(GeometryError, match="at least 2"):
            line.transform(lambda point: (point[0],))

    def test_transform_not_callable(self) -> None:
        """Test transform not callable."""
        line = SpatialPolyline.from_points([(0, 0)])
        with pytest.raises(GeometryError):
            line.transform(42)

    def test_add_point_and_text(self) -> None:
        """Test add point and text."""
        line = SpatialPolyline.from_points([(0, 0)])
        line.add((1, 0))
        line.add("2, 0")
        line.add("(3.5,1e1)")
        line.add(SpatialPoint(4.0, 4.0))
        np.testing.assert_array_equal(
            line.points, [[0, 0], [1, 0], [2, 0], [3.5, 10.0], [4.0, 4.0]]
        )

    def test_add_list_and_polyline(self) -> None:
        """Test add list and polyline."""
        line = SpatialPolyline()
        line.add([(0, 0), "1,1"])
        line.add(SpatialPolyline.from_points([(2, 2)]))
        assert line.n_points == 3
        assert line.end == (2.0, 2.0)

    def test_add_invalid(self) -> None:
        """Test add invalid."""
        line = SpatialPolyline()
        with pytest.raises(GeometryError):
            line.add("not a point")
        with pytest.raises(GeometryError):
            line.add(3.0)
        with pytest.raises(GeometryError):
            line.add([(1, 2, 3)])

    def test_bad_shape(self) -> None:
        """Test bad shape."""
        with pytest.raises(GeometryError):
            SpatialPolyline(points=np.zeros((3, 3)))

    def test_equality(self) -> None:
        """Test equality."""
        a = SpatialPolyline.from_points([(0, 0), (1, 1)])
        b = SpatialPolyline.from_points([(0, 0), (1, 1)])
        c = SpatialPolyline.from_points([(0, 0)])
        assert a == b
        assert a != c

    def test_repr(self) -> None:
        """Test string representation."""
        assert "SpatialPolyline(n_points=2" in repr(SpatialPolyline.from_points([(0, 0), (1, 0)]))


# =============================================================================
# Test SpatioTemporalPolyline
# =============================================================================


class TestSpatioTemporalPolyline:
    """Tests for SpatioTemporalPolyline."""

    def test_from_points(self) -> None:
        """Test building from points."""
        line = make_timed_line()

        assert line.kind == GeometryKind.SPATIOTEMPORAL
        assert line.n_points == 3
        np.testing.assert_array_equal(line.times, [1.0, 2.0, 3.0])
        np.testing.assert_array_equal(line.time_hours, [0.0, 6.0, 12.0])
        assert np.isnan(line.diameters).all()
        assert line.max_time == 3.0

    def test_optional_columns_default_to_nan(self) -> None:
        """Test optional columns default to nan."""
        line = SpatioTemporalPolyline(points=[(0, 0), (1, 0)], times=[0, 1], time_hours=[0, 1])
        assert np.isnan(line.vx).all()
        assert np.isnan(line.vy).all()

    def test_missing_times(self) -> None:
        """Test missing times."""
        with pytest.raises(GeometryError, match="times"):
            SpatioTemporalPolyline(points=[(0, 0)], times=None, time_hours=[0])

    def test_column_length_mismatch(self) -> None:
        """Test column length mismatch."""
        with pytest.raises(GeometryError, match="time_hours"):
            SpatioTemporalPolyline(points=[(0, 0), (1, 1)], times=[0, 1], time_hours=[0])

    def test_total_length(self) -> None:
        """Test total length."""
        assert make_timed_line().total_length() == pytest.approx(7.0)

    def test_length_until(self) -> None:
        """Test length until."""
        line = make_timed_line()
        assert line.length_until(0.5) == pytest.approx(0.0)
        assert line.length_until(1.0) == pytest.approx(0.0)
        assert line.length_until(2.0) == pytest.approx(3.0)
        assert line.length_until(2.9) == pytest.approx(3.0)
        assert line.length_until(3.0) == pytest.approx(7.0)

    def test_length_until_non_decreasing(self) -> None:
        """Test length until non decreasing."""
        line = make_timed_line()
        lengths = [line.length_until(t) for t in np.linspace(0.0, 5.0, 26)]
        assert all(a <= b for a, b in zip(lengths, lengths[1:]))
        assert lengths[-1] == pytest.approx(line.total_length())

    def test_length_until_stops_at_first_later_point(self) -> None:
        """Test length until stops at first later point."""
        line = SpatioTemporalPolyline(
            points=[(0, 0), (1, 0), (2, 0), (3, 0)],
            times=[1, 5, 2, 2],
            time_hours=[0, 0, 0, 0],
        )
        assert line.length_until(2.0) == pytest.approx(0.0)

    def test_transform_before_time(self) -> None:
        """Test transform before time."""
        line = make_timed_line()
        line.transform_before_time(Shift(10, 0), 2.0)
        np.testing.assert_array_equal(line.points[:, 0], [10.0, 10.0, 4.0])

    def test_transform_before_time_covers_all(self) -> None:
        """Test transform before time covers all."""
        line = make_timed_line()
        line.transform_before_time(Shift(1, 1), 10.0)
        np.testing.assert_array_equal(line.points, [[1, 1], [1, 4], [5, 4]])

    def test_transform(self) -> None:
        """Test transform."""
        line = make_timed_line()
        line.transform(lambda p: (p[0] * 2, p[1] * 2, p[2]))
        assert line.total_length() == pytest.approx(14.0)
        np.testing.assert_array_equal(line.times, [1.0, 2.0, 3.0])

    def test_scale_round_trip(self) -> None:
        """Test scale round trip."""
        line = make_timed_line()
        before = line.points.copy()
        line.scale(4.0)
        line.scale(0.25)
        np.testing.assert_allclose(line.points, before)

    def test_add_text_point_uses_time_for_hours(self) -> None:
        """Test add text point uses time for hours."""
        line = make_timed_line()
        line.add("5, 3, 4")
        assert line.n_points == 4
        assert line.times[-1] == 4.0
        assert line.time_hours[-1] == 4.0
        assert np.isnan(line.diameters[-1])

    def test_add_tuples_and_polyline(self) -> None:
        """Test add tuples and polyline."""
        line = SpatioTemporalPolyline(points=[], times=[], time_hours=[])
        line.add((0, 0, 1))
        line.add((1, 0, 2, 24))
        line.add(make_timed_line())
        assert line.n_points == 5
        np.testing.assert_array_equal(line.time_hours[:2], [1.0, 24.0])

    def test_add_invalid(self) -> None:
        """Test add invalid."""
        line = make_timed_line()
        with pytest.raises(GeometryError):
            line.add("1, 2")
        with pytest.raises(GeometryError):
            line.add(SpatialPolyline.from_points([(0, 0)]))

    def test_equality(self) -> None:
        """Test equality."""
        assert make_timed_line() == make_timed_line()


# =============================================================================
# Test Builders
# =============================================================================


class TestBuilders:
    """Tests for combining polylines into one geometry."""

    def test_build_spatial_concatenates(self) -> None:
        """Test build spatial concatenates."""
        date = datetime(2020, 1, 1)
        line = build_spatial(
            [[SpatialPoint(0, 0), SpatialPoint(1, 0)], [SpatialPoint(1, 1)]], date
        )
        assert line.n_points == 3
        assert line.capture_date == date

    def test_build_spatiotemporal(self) -> None:
        """Test build spatiotemporal."""
        points = [TimedPoint(0, 0, 1, 1, 0.5, 0.0, 1.0)]
        line = build_spatiotemporal([points, points])
        assert line.n_points == 2
        np.testing.assert_array_equal(line.diameters, [0.5, 0.5])
