"""Domain errors raised by the navigation core."""


class NavigationError(Exception):
    """Base class for navigation/route errors."""


class RouteDataError(NavigationError):
    """Route records are inconsistent."""


class DuplicateWaypointOrderError(RouteDataError):
    def __init__(self, order: int) -> None:
        super().__init__(f"Duplicate waypoint order {order}")
        self.order = order


class WaypointIndexError(NavigationError, IndexError):
    def __init__(self, index: int, count: int) -> None:
        super().__init__(f"Waypoint index {index} out of range (route has {count})")
        self.index = index
        self.count = count


class RouteNotNavigableError(NavigationError):
    """Raised when navigation is started on a route without waypoints."""


class NavigationTransitionError(NavigationError):
    """Operation not allowed in the tracker's current phase."""


class InvalidPositionError(NavigationError, ValueError):
    """Position fix with non-finite coordinates."""


class SessionNotFoundError(NavigationError, KeyError):
    def __init__(self, session_id: str) -> None:
        super().__init__(session_id)
        self.session_id = session_id

    def __str__(self) -> str:
        return f"Navigation session {self.session_id} not found"
