"""Tests for the greedy lookahead planner."""

import pytest

from jump_pathfinder.config import PlannerConfig
from jump_pathfinder.errors import Cancelled, FrameCapExceeded, Unsolvable
from jump_pathfinder.obstacles import Course, Obstacle
from jump_pathfinder.pathfinder import (
    FAILED_CANCELLED,
    FAILED_MAX_FRAMES,
    PlanResult,
    find_jump,
    plan,
    survives,
)
from jump_pathfinder.physics import AgentState
from jump_pathfinder.replay import replay_schedule
from jump_pathfinder.runner import derive_start


def start_for(course):
    return derive_start(course)


class TestSurvives:
    def test_flat_ground_is_safe(self, flat_course):
        assert survives(AgentState.create(10, 20, 220, 0, True), flat_course, 36)

    def test_spike_ahead_is_unsafe(self, spike_course):
        assert not survives(AgentState.create(300, 20, 220, 0, True), spike_course, 36)

    def test_does_not_modify_state(self, spike_course):
        state = AgentState.create(300, 20, 220, 0, True)
        survives(state, spike_course, 36)
        assert state == AgentState.create(300, 20, 220, 0, True)


class TestFindJump:
    def test_immediate_jump_over_spike(self, spike_course):
        # 100px before the spike: inside the horizon, and a jump now clears it
        state = AgentState.create(300, 20, 220, 0, True)
        assert find_jump(state, spike_course) == 0

    def test_airborne_waits_for_landing(self, flat_course):
        # Falling onto the ground: no immediate jump, a delayed one once landed
        state = AgentState.create(100, 21, 220, 0, False)
        delay = find_jump(state, flat_course)
        assert delay is not None and delay >= 1

    def test_no_delay_allowed(self, flat_course):
        state = AgentState.create(100, 60, 220, 0, False)
        assert find_jump(state, flat_course, planner=PlannerConfig(max_jump_delay=0)) is None


class TestPlan:
    def test_flat_course_needs_no_jumps(self, flat_course):
        result = plan(flat_course, start_for(flat_course), 1000.0)
        assert result.success
        assert result.jumps == ()

    def test_single_spike_single_jump(self, spike_course):
        result = plan(spike_course, start_for(spike_course), 1000.0)
        assert result.success
        assert len(result.jumps) == 1
        # Committed before the agent would have reached the spike on foot
        assert result.jumps[0] < 113

    def test_schedule_replays_to_goal(self, spike_course):
        start = start_for(spike_course)
        result = plan(spike_course, start, 1000.0)
        traj = replay_schedule(spike_course, start, result.jumps, goal_x=1000.0)
        assert traj.reached_goal(1000.0)
        assert not traj.died()

    def test_without_schedule_agent_dies(self, spike_course):
        traj = replay_schedule(spike_course, start_for(spike_course), [], goal_x=1000.0)
        assert traj.died()

    def test_deterministic(self, spike_course):
        start = start_for(spike_course)
        a = plan(spike_course, start, 1000.0)
        b = plan(spike_course, start, 1000.0)
        assert a.jumps == b.jumps
        assert a.diagnostics == b.diagnostics

    def test_start_not_modified(self, spike_course):
        start = start_for(spike_course)
        before = start.to_dict()
        plan(spike_course, start, 1000.0)
        assert start.to_dict() == before

    def test_jumps_strictly_increasing(self):
        course = Course([
            Obstacle.platform(0, 0, 2000, 20),
            Obstacle.spike(400, 20, 20, 20),
            Obstacle.spike(900, 20, 20, 20),
            Obstacle.spike(1400, 20, 20, 20),
        ])
        result = plan(course, start_for(course), 2000.0)
        assert result.success
        assert len(result.jumps) == 3
        assert list(result.jumps) == sorted(set(result.jumps))

    def test_goal_monotonicity(self, spike_course):
        start = start_for(spike_course)
        full = plan(spike_course, start, 1000.0).jumps
        for goal in (100.0, 300.0, 600.0):
            partial = plan(spike_course, start, goal)
            assert partial.success
            assert partial.jumps == full[:len(partial.jumps)]

    def test_delayed_jump_after_landing(self):
        # Drop off a ledge; the spike is noticed mid-fall and the jump waits
        # for the touchdown at frame 77.
        course = Course([
            Obstacle.platform(0, 0, 200, 100),
            Obstacle.platform(0, 0, 1000, 20),
            Obstacle.spike(378, 20, 20, 20),
        ])
        result = plan(course, start_for(course), 1000.0)
        assert result.success
        assert result.jumps == (77,)

    def test_start_at_goal(self, flat_course):
        result = plan(flat_course, AgentState.create(500, 20, 220, 0, True), 100.0)
        assert result.success
        assert result.jumps == ()
        assert result.diagnostics["frames"] == 0


class TestNoObstacles:
    def test_implicit_floor_success(self):
        course = Course([])
        result = plan(course, start_for(course), 300.0)
        assert result.success
        assert result.jumps == ()

    def test_frame_cap(self):
        course = Course([])
        result = plan(course, start_for(course), 1000.0, planner=PlannerConfig(max_frames=120))
        assert not result.success
        assert result.jumps == ()
        assert result.failed_reason == FAILED_MAX_FRAMES
        assert result.diagnostics["max_frames"] == 120
        assert isinstance(result.to_error(), FrameCapExceeded)


class TestFailure:
    @pytest.fixture
    def wall_course(self):
        # Taller than the jump apex: cannot be cleared
        return Course([Obstacle.platform(0, 0, 1000, 20), Obstacle.spike(300, 20, 20, 400)])

    def test_unsolvable(self, wall_course):
        result = plan(wall_course, start_for(wall_course), 1000.0)
        assert not result.success
        assert result.jumps == ()
        assert 40 <= result.failed_frame <= 87
        assert result.diagnostics["obj_count"] == 2
        assert result.diagnostics["goal_x"] == 1000.0

    def test_raise_for_failure(self, wall_course):
        result = plan(wall_course, start_for(wall_course), 1000.0)
        with pytest.raises(Unsolvable) as excinfo:
            result.raise_for_failure()
        assert excinfo.value.frame == result.failed_frame
        assert excinfo.value.cause == "unsolvable"

    def test_success_raises_nothing(self, flat_course):
        plan(flat_course, start_for(flat_course), 500.0).raise_for_failure()


class TestCallbacks:
    def test_cancel_immediately(self, flat_course):
        result = plan(flat_course, start_for(flat_course), 1000.0, should_stop=lambda: True)
        assert not result.success
        assert result.failed_reason == FAILED_CANCELLED
        assert isinstance(result.to_error(), Cancelled)

    def test_cancel_after_frames(self, flat_course):
        polls = []

        def should_stop():
            polls.append(1)
            return len(polls) > 10

        result = plan(flat_course, start_for(flat_course), 1000.0, should_stop=should_stop)
        assert result.failed_reason == FAILED_CANCELLED
        assert result.diagnostics["frames"] == 10

    def test_progress_monotonic(self, flat_course):
        seen = []
        result = plan(flat_course, start_for(flat_course), 500.0, progress=seen.append)
        assert result.success
        assert seen
        assert seen == sorted(seen)
        assert all(p <= 100.0 for p in seen)


class TestPlanResult:
    def test_failure_fields_absent_on_success(self):
        result = PlanResult(True, (3, 9), {"frames": 50})
        assert result.failed_frame is None
        assert result.failed_reason is None
        assert result.to_error() is None
