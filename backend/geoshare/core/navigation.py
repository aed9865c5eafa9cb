"""Route-progress tracking for a single navigation session.

The tracker is fed position fixes synchronously from whichever callback owns
the session (an HTTP handler, a WebSocket loop, a test). It never awaits and
never shares state with other sessions.

    tracker = NavigationTracker(NavigationConfig())
    tracker.start(route)

    # for every fix:
    tracker.on_position(NavigationPosition(lat, lng, timestamp=t, speed=v))
    state = tracker.state
"""

import logging
import math
from dataclasses import dataclass, replace
from enum import Enum

from geoshare.core.errors import (
    InvalidPositionError,
    NavigationTransitionError,
    RouteNotNavigableError,
)
from geoshare.core.geo import bearing_deg, haversine_m
from geoshare.core.route_matcher import RouteMatcher
from geoshare.core.route_model import Route, Waypoint

logger = logging.getLogger(__name__)

DEFAULT_ARRIVAL_THRESHOLD_M = 20.0
DEFAULT_OFF_ROUTE_THRESHOLD_M = 50.0


@dataclass(frozen=True)
class NavigationConfig:
    arrival_threshold_m: float = DEFAULT_ARRIVAL_THRESHOLD_M
    off_route_threshold_m: float = DEFAULT_OFF_ROUTE_THRESHOLD_M


@dataclass(frozen=True)
class NavigationPosition:
    """A single observed fix. ``timestamp`` is in seconds."""

    lat: float
    lng: float
    timestamp: float
    accuracy: float | None = None
    heading: float | None = None
    speed: float | None = None  # m/s

    def __post_init__(self) -> None:
        if not (math.isfinite(self.lat) and math.isfinite(self.lng)):
            raise InvalidPositionError(f"Non-finite position ({self.lat}, {self.lng})")
        if not math.isfinite(self.timestamp):
            raise InvalidPositionError(f"Non-finite timestamp {self.timestamp}")


class NavigationPhase(str, Enum):
    IDLE = "idle"
    READY = "ready"
    NAVIGATING = "navigating"
    COMPLETED = "completed"


@dataclass(frozen=True)
class NavigationState:
    phase: NavigationPhase = NavigationPhase.IDLE
    current_route: Route | None = None
    # index of the target waypoint; equals the waypoint count once completed
    current_waypoint_index: int = 0
    distance_to_next_waypoint: float = 0.0
    total_distance_remaining: float = 0.0
    estimated_time_remaining: float | None = None  # seconds, None until a speed is known
    off_route: bool = False
    route_progress: float = 0.0  # position snapped along the route polyline, 0.0–1.0

    @property
    def is_navigating(self) -> bool:
        return self.phase is NavigationPhase.NAVIGATING

    @property
    def is_complete(self) -> bool:
        return self.phase is NavigationPhase.COMPLETED

    @property
    def progress(self) -> float:
        """Fraction of waypoints reached."""
        if self.current_route is None or self.current_route.is_empty():
            return 0.0
        return self.current_waypoint_index / self.current_route.waypoint_count()


class NavigationTracker:
    """Idle → Ready → Navigating → Completed, and back to Idle on stop()."""

    def __init__(self, config: NavigationConfig | None = None) -> None:
        self.config = config or NavigationConfig()
        self._state = NavigationState()
        self._matcher: RouteMatcher | None = None
        self._last_position: NavigationPosition | None = None

    @property
    def state(self) -> NavigationState:
        return self._state

    @property
    def phase(self) -> NavigationPhase:
        return self._state.phase

    @property
    def last_position(self) -> NavigationPosition | None:
        return self._last_position

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def load(self, route: Route) -> None:
        """Attach a route without starting navigation."""
        if self._state.phase not in (NavigationPhase.IDLE, NavigationPhase.READY):
            raise NavigationTransitionError(f"Cannot load a route while {self._state.phase.value}")
        self._state = NavigationState(phase=NavigationPhase.READY, current_route=route)

    def start(self, route: Route | None = None) -> None:
        """Begin navigating ``route``, or the loaded one when omitted."""
        if self._state.phase not in (NavigationPhase.IDLE, NavigationPhase.READY):
            raise NavigationTransitionError(f"Cannot start navigation while {self._state.phase.value}")

        route = route if route is not None else self._state.current_route
        if route is None or route.is_empty():
            raise RouteNotNavigableError("Route has no waypoints")

        self._matcher = RouteMatcher(route.coords())
        self._last_position = None
        self._state = NavigationState(
            phase=NavigationPhase.NAVIGATING,
            current_route=route,
            current_waypoint_index=0,
            distance_to_next_waypoint=0.0,
            total_distance_remaining=route.total_length_m(),
        )
        logger.info(
            "Navigation started on route %s (%d waypoints, %.0f m)",
            route.id, route.waypoint_count(), route.total_length_m(),
        )

    def stop(self) -> None:
        """Return to Idle from any phase and forget the route."""
        if self._state.phase is not NavigationPhase.IDLE:
            logger.info("Navigation stopped (was %s)", self._state.phase.value)
        self._state = NavigationState()
        self._matcher = None
        self._last_position = None

    # ------------------------------------------------------------------
    # Position updates
    # ------------------------------------------------------------------

    def on_position(self, pos: NavigationPosition) -> bool:
        """Consume one fix. Returns False when the fix was ignored."""
        state = self._state
        if state.phase is not NavigationPhase.NAVIGATING:
            logger.debug("Ignoring fix while %s", state.phase.value)
            return False

        if self._last_position is not None and pos.timestamp < self._last_position.timestamp:
            logger.debug(
                "Ignoring stale fix at %s (last accepted %s)",
                pos.timestamp, self._last_position.timestamp,
            )
            return False

        route = state.current_route
        index = state.current_waypoint_index
        target = route.waypoint_at(index)
        distance = haversine_m(pos.lat, pos.lng, target.lat, target.lng)

        eta = state.estimated_time_remaining
        match = self._matcher.match(pos.lat, pos.lng) if self._matcher else None
        off_route = match is not None and match.distance_m > self.config.off_route_threshold_m
        route_progress = match.progress if match else state.route_progress
        self._last_position = pos

        if distance < self.config.arrival_threshold_m:
            index += 1
            logger.info("Reached waypoint %d/%d", index, route.waypoint_count())
            if index >= route.waypoint_count():
                self._state = replace(
                    state,
                    phase=NavigationPhase.COMPLETED,
                    current_waypoint_index=route.waypoint_count(),
                    distance_to_next_waypoint=0.0,
                    total_distance_remaining=0.0,
                    estimated_time_remaining=0.0,
                    off_route=False,
                    route_progress=1.0,
                )
                logger.info("Route %s completed", route.id)
                return True

            target = route.waypoint_at(index)
            distance = haversine_m(pos.lat, pos.lng, target.lat, target.lng)

        remaining = distance + route.remaining_length_after(index)
        if pos.speed is not None and pos.speed > 0:
            eta = remaining / pos.speed

        self._state = replace(
            state,
            current_waypoint_index=index,
            distance_to_next_waypoint=distance,
            total_distance_remaining=remaining,
            estimated_time_remaining=eta,
            off_route=off_route,
            route_progress=route_progress,
        )
        return True

    # ------------------------------------------------------------------
    # Read-only helpers
    # ------------------------------------------------------------------

    def current_target(self) -> Waypoint | None:
        state = self._state
        if state.phase is not NavigationPhase.NAVIGATING:
            return None
        return state.current_route.waypoint_at(state.current_waypoint_index)

    def bearing_to_target(self) -> float | None:
        target = self.current_target()
        if target is None or self._last_position is None:
            return None
        return bearing_deg(self._last_position.lat, self._last_position.lng, target.lat, target.lng)
