"""Tests for obstacles and course preparation."""

import numpy as np
import pytest

from jump_pathfinder.obstacles import Course, Obstacle, ObstacleKind, as_course


class TestObstacle:
    def test_constructors(self):
        assert Obstacle.platform(0, 0, 10, 5).kind == ObstacleKind.PLATFORM
        assert Obstacle.spike(0, 0, 10, 5).kind == ObstacleKind.SPIKE
        pad = Obstacle.jump_pad(0, 0, 10)
        assert pad.kind == ObstacleKind.JUMP_PAD
        assert pad.h == 16.0
        assert pad.power == 0.0

    def test_bounds(self):
        o = Obstacle.platform(10, 20, 30, 40)
        assert o.bounds == (10, 20, 40, 60)
        assert o.top == 60
        assert o.right == 40

    def test_bb(self):
        bb = Obstacle.spike(10, 20, 30, 40).bb
        assert (bb.left, bb.bottom, bb.right, bb.top) == (10, 20, 40, 60)

    def test_frozen(self):
        o = Obstacle.platform(0, 0, 10, 10)
        with pytest.raises(AttributeError):
            o.x = 5

    def test_dict_roundtrip(self):
        for o in (Obstacle.platform(1.5, 2, 3, 4),
                  Obstacle.spike(5, 6, 7, 8),
                  Obstacle.jump_pad(9, 10, 11, power=720.0)):
            assert Obstacle.from_dict(o.to_dict()) == o

    def test_power_only_for_pads(self):
        assert "power" not in Obstacle.platform(0, 0, 1, 1).to_dict()
        assert Obstacle.jump_pad(0, 0, 1, power=5.0).to_dict()["power"] == 5.0
        assert Obstacle.spike(0, 0, 1, 1).to_dict()["type"] == "spike"


class TestCourse:
    def test_partition_keeps_order(self):
        pad_a = Obstacle.jump_pad(0, 0, 10, power=1.0)
        pad_b = Obstacle.jump_pad(5, 0, 10, power=2.0)
        course = Course([pad_a, Obstacle.platform(0, 0, 100, 10), pad_b, Obstacle.spike(50, 10, 5, 5)])
        assert len(course) == 4
        assert course.jump_pads == (pad_a, pad_b)
        assert len(course.platforms) == 1
        assert len(course.spikes) == 1
        np.testing.assert_array_equal(course.pad_power, np.array([1.0, 2.0], dtype=np.float32))

    def test_edges_are_float32(self):
        course = Course([Obstacle.platform(0.1, 0.2, 10, 10)])
        for arr in course.platform_edges.values():
            assert arr.dtype == np.float32
        assert course.platform_edges["top"][0] == np.float32(0.2) + np.float32(10)

    def test_iterates_in_source_order(self):
        obstacles = [Obstacle.spike(5, 0, 1, 1), Obstacle.platform(0, 0, 1, 1)]
        assert list(Course(obstacles)) == obstacles

    def test_implicit_floor_only_without_platforms(self):
        assert Course([]).has_implicit_floor
        assert Course([Obstacle.spike(0, 0, 1, 1)]).floor_y == np.float32(0)
        assert not Course([Obstacle.platform(0, 0, 1, 1)]).has_implicit_floor

    def test_implicit_floor_can_be_disabled(self):
        assert not Course([], floor_y=None).has_implicit_floor

    def test_ground_and_extent(self):
        course = Course([Obstacle.platform(0, 0, 100, 20), Obstacle.platform(150, 0, 300, 50)])
        assert course.ground_y() == 50
        assert course.platform_extent() == 450

    def test_ground_and_extent_without_platforms(self):
        course = Course([Obstacle.spike(0, 0, 10, 10)])
        assert course.ground_y() is None
        assert course.platform_extent() is None

    def test_bb_merge(self):
        course = Course([Obstacle.platform(0, 0, 100, 20), Obstacle.spike(200, 20, 10, 40)])
        bb = course.bb
        assert (bb.left, bb.bottom, bb.right, bb.top) == (0, 0, 210, 60)
        assert Course([]).bb is None

    def test_dump(self):
        course = Course([Obstacle.platform(0, 0, 100, 20)])
        assert course.dump() == [{"type": "platform", "x": 0, "y": 0, "w": 100, "h": 20}]

    def test_as_course(self):
        course = Course([])
        assert as_course(course) is course
        assert isinstance(as_course([Obstacle.spike(0, 0, 1, 1)]), Course)
