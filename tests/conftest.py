"""Pytest configuration and shared fixtures."""

import os

# Ensure headless pygame for all tests
os.environ['SDL_VIDEODRIVER'] = 'dummy'

import pytest

from jump_pathfinder.obstacles import Course, Obstacle


@pytest.fixture
def flat_obstacles():
    """Single ground platform, top edge at y=20, x in [0, 1000]."""
    return [Obstacle.platform(0, 0, 1000, 20)]


@pytest.fixture
def spike_obstacles(flat_obstacles):
    """Ground platform with one spike standing on it at x in [400, 420]."""
    return flat_obstacles + [Obstacle.spike(400, 20, 20, 20)]


@pytest.fixture
def flat_course(flat_obstacles):
    return Course(flat_obstacles)


@pytest.fixture
def spike_course(spike_obstacles):
    return Course(spike_obstacles)
