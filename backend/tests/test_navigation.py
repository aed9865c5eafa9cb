"""Tests for NavigationTracker state transitions and progress numbers."""

import math

import pytest

from geoshare.core.errors import (
    InvalidPositionError,
    NavigationTransitionError,
    RouteNotNavigableError,
)
from geoshare.core.geo import haversine_m
from geoshare.core.navigation import (
    NavigationConfig,
    NavigationPhase,
    NavigationPosition,
    NavigationState,
    NavigationTracker,
)
from geoshare.core.route_model import Route, Waypoint


def make_two_point_route() -> Route:
    """Two waypoints ~111 m apart on the equator."""
    return Route.from_waypoints(
        [Waypoint(lat=0.0, lng=0.0, order=0), Waypoint(lat=0.0, lng=0.001, order=1)],
        name="Short hop",
        id=7,
    )


def make_long_route() -> Route:
    """Two waypoints ~1.1 km apart on the equator."""
    return Route.from_waypoints(
        [Waypoint(lat=0.0, lng=0.0, order=0), Waypoint(lat=0.0, lng=0.01, order=1)],
        id=8,
    )


def test_new_tracker_is_idle():
    tracker = NavigationTracker()
    assert tracker.phase is NavigationPhase.IDLE
    assert tracker.state == NavigationState()
    assert not tracker.state.is_navigating


def test_start_initializes_from_route_geometry():
    route = make_two_point_route()
    tracker = NavigationTracker()
    tracker.start(route)

    state = tracker.state
    assert state.phase is NavigationPhase.NAVIGATING
    assert state.is_navigating
    assert state.current_route is route
    assert state.current_waypoint_index == 0
    assert state.distance_to_next_waypoint == 0.0
    assert state.total_distance_remaining == pytest.approx(route.total_length_m())
    assert state.estimated_time_remaining is None


def test_start_on_empty_route_fails_and_stays_idle():
    tracker = NavigationTracker()
    with pytest.raises(RouteNotNavigableError):
        tracker.start(Route.from_waypoints([]))
    assert tracker.phase is NavigationPhase.IDLE


def test_start_on_empty_loaded_route_stays_ready():
    tracker = NavigationTracker()
    tracker.load(Route.from_waypoints([]))
    assert tracker.phase is NavigationPhase.READY
    with pytest.raises(RouteNotNavigableError):
        tracker.start()
    assert tracker.phase is NavigationPhase.READY


def test_start_uses_loaded_route():
    route = make_two_point_route()
    tracker = NavigationTracker()
    tracker.load(route)
    tracker.start()
    assert tracker.state.current_route is route
    assert tracker.phase is NavigationPhase.NAVIGATING


def test_start_while_navigating_is_rejected():
    tracker = NavigationTracker()
    tracker.start(make_two_point_route())
    with pytest.raises(NavigationTransitionError):
        tracker.start(make_long_route())


def test_end_to_end_two_waypoints():
    """Arriving at both waypoints completes the route."""
    route = make_two_point_route()
    tracker = NavigationTracker()
    tracker.start(route)

    assert tracker.on_position(NavigationPosition(lat=0.0, lng=0.0, speed=1.0, timestamp=0.0))
    state = tracker.state
    assert state.phase is NavigationPhase.NAVIGATING
    assert state.current_waypoint_index == 1
    leg = haversine_m(0.0, 0.0, 0.0, 0.001)
    assert state.distance_to_next_waypoint == pytest.approx(leg)
    assert state.total_distance_remaining == pytest.approx(leg)
    assert state.estimated_time_remaining == pytest.approx(leg / 1.0)
    assert state.progress == pytest.approx(0.5)

    assert tracker.on_position(NavigationPosition(lat=0.0, lng=0.001, speed=1.0, timestamp=1.0))
    state = tracker.state
    assert state.phase is NavigationPhase.COMPLETED
    assert state.is_complete
    assert not state.is_navigating
    assert state.current_waypoint_index == route.waypoint_count()
    assert state.total_distance_remaining == 0.0
    assert state.distance_to_next_waypoint == 0.0
    assert state.estimated_time_remaining == 0.0
    assert state.progress == 1.0


def test_positions_after_completion_are_ignored():
    tracker = NavigationTracker()
    tracker.start(make_two_point_route())
    tracker.on_position(NavigationPosition(lat=0.0, lng=0.0, timestamp=0.0))
    tracker.on_position(NavigationPosition(lat=0.0, lng=0.001, timestamp=1.0))
    completed = tracker.state

    assert not tracker.on_position(NavigationPosition(lat=1.0, lng=1.0, speed=5.0, timestamp=2.0))
    assert tracker.state == completed


def test_outside_threshold_does_not_advance():
    route = make_long_route()
    tracker = NavigationTracker(NavigationConfig(arrival_threshold_m=20.0))
    tracker.start(route)

    # ~22 m east of the first waypoint
    tracker.on_position(NavigationPosition(lat=0.0, lng=0.0002, timestamp=0.0))
    state = tracker.state
    assert state.current_waypoint_index == 0
    expected = haversine_m(0.0, 0.0002, 0.0, 0.0)
    assert state.distance_to_next_waypoint == pytest.approx(expected)
    assert state.total_distance_remaining == pytest.approx(expected + route.total_length_m())


def test_custom_arrival_threshold():
    tracker = NavigationTracker(NavigationConfig(arrival_threshold_m=30.0))
    tracker.start(make_long_route())
    tracker.on_position(NavigationPosition(lat=0.0, lng=0.0002, timestamp=0.0))
    assert tracker.state.current_waypoint_index == 1


def test_stale_timestamp_is_ignored():
    tracker = NavigationTracker()
    tracker.start(make_long_route())
    assert tracker.on_position(NavigationPosition(lat=0.0, lng=0.002, speed=2.0, timestamp=10.0))
    before = tracker.state

    assert not tracker.on_position(NavigationPosition(lat=0.0, lng=0.0, speed=2.0, timestamp=5.0))
    assert tracker.state == before
    assert tracker.last_position.timestamp == 10.0


def test_equal_timestamp_is_accepted():
    tracker = NavigationTracker()
    tracker.start(make_long_route())
    assert tracker.on_position(NavigationPosition(lat=0.0, lng=0.003, timestamp=10.0))
    assert tracker.on_position(NavigationPosition(lat=0.0, lng=0.002, timestamp=10.0))


def test_eta_keeps_previous_estimate_without_speed():
    tracker = NavigationTracker()
    tracker.start(make_long_route())

    tracker.on_position(NavigationPosition(lat=0.0, lng=0.002, speed=2.0, timestamp=1.0))
    first = tracker.state
    assert first.estimated_time_remaining == pytest.approx(first.total_distance_remaining / 2.0)

    tracker.on_position(NavigationPosition(lat=0.0, lng=0.003, speed=None, timestamp=2.0))
    assert tracker.state.estimated_time_remaining == first.estimated_time_remaining

    tracker.on_position(NavigationPosition(lat=0.0, lng=0.004, speed=0.0, timestamp=3.0))
    assert tracker.state.estimated_time_remaining == first.estimated_time_remaining
    assert tracker.state.total_distance_remaining > first.total_distance_remaining


def test_non_finite_position_is_rejected():
    with pytest.raises(InvalidPositionError):
        NavigationPosition(lat=math.nan, lng=0.0, timestamp=0.0)
    with pytest.raises(ValueError):
        NavigationPosition(lat=0.0, lng=math.inf, timestamp=0.0)


def test_positions_ignored_when_not_navigating():
    tracker = NavigationTracker()
    assert not tracker.on_position(NavigationPosition(lat=0.0, lng=0.0, timestamp=0.0))
    assert tracker.state == NavigationState()


def test_stop_resets_everything():
    tracker = NavigationTracker()
    tracker.start(make_two_point_route())
    tracker.on_position(NavigationPosition(lat=0.0, lng=0.0, timestamp=0.0))

    tracker.stop()
    assert tracker.phase is NavigationPhase.IDLE
    assert tracker.state == NavigationState()
    assert tracker.last_position is None
    assert not tracker.on_position(NavigationPosition(lat=0.0, lng=0.001, timestamp=1.0))


def test_restart_after_completion_requires_stop():
    tracker = NavigationTracker()
    route = make_two_point_route()
    tracker.start(route)
    tracker.on_position(NavigationPosition(lat=0.0, lng=0.0, timestamp=0.0))
    tracker.on_position(NavigationPosition(lat=0.0, lng=0.001, timestamp=1.0))

    with pytest.raises(NavigationTransitionError):
        tracker.start(route)
    tracker.stop()
    tracker.start(route)
    assert tracker.phase is NavigationPhase.NAVIGATING


def test_off_route_flag():
    tracker = NavigationTracker(NavigationConfig(off_route_threshold_m=50.0))
    tracker.start(make_long_route())

    # ~11 m north of the route line, halfway along
    tracker.on_position(NavigationPosition(lat=0.0001, lng=0.005, timestamp=0.0))
    assert not tracker.state.off_route
    assert tracker.state.route_progress == pytest.approx(0.5, abs=0.01)

    # ~111 m north
    tracker.on_position(NavigationPosition(lat=0.001, lng=0.005, timestamp=1.0))
    assert tracker.state.off_route
    assert tracker.phase is NavigationPhase.NAVIGATING


def test_target_and_bearing():
    tracker = NavigationTracker()
    route = make_long_route()
    tracker.start(route)
    assert tracker.current_target() == route.waypoint_at(0)
    assert tracker.bearing_to_target() is None

    # East of the first waypoint, so the target lies due west
    tracker.on_position(NavigationPosition(lat=0.0, lng=0.002, timestamp=0.0))
    assert tracker.bearing_to_target() == pytest.approx(270.0)

    tracker.stop()
    assert tracker.current_target() is None


def test_sessions_do_not_share_state():
    a = NavigationTracker()
    b = NavigationTracker()
    a.start(make_two_point_route())
    b.start(make_two_point_route())
    a.on_position(NavigationPosition(lat=0.0, lng=0.0, timestamp=0.0))
    assert a.state.current_waypoint_index == 1
    assert b.state.current_waypoint_index == 0


def test_non_finite_timestamp_is_rejected():
    with pytest.raises(InvalidPositionError):
        NavigationPosition(lat=0.0, lng=0.0, timestamp=math.nan)
    with pytest.raises(InvalidPositionError):
        NavigationPosition(lat=0.0, lng=0.0, timestamp=math.inf)


def test_bad_timestamp_leaves_stale_check_working():
    """A rejected fix must not become the reference for later ordering checks."""
    tracker = NavigationTracker()
    tracker.start(make_long_route())
    assert tracker.on_position(NavigationPosition(lat=0.0, lng=0.002, timestamp=100.0))
    before = tracker.state

    for bad in (math.nan, math.inf):
        with pytest.raises(InvalidPositionError):
            tracker.on_position(NavigationPosition(lat=0.0, lng=0.003, timestamp=bad))
    assert tracker.state == before
    assert tracker.last_position.timestamp == 100.0

    assert not tracker.on_position(NavigationPosition(lat=0.0, lng=0.0, timestamp=1.0))
    assert tracker.on_position(NavigationPosition(lat=0.0, lng=0.003, timestamp=200.0))
    assert tracker.last_position.timestamp == 200.0
