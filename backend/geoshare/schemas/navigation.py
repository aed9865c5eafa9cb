from pydantic import BaseModel, Field

from geoshare.schemas.route import RouteCreate, WaypointInfo


class SessionCreate(BaseModel):
    """Either a stored route id or an inline route."""

    route_id: int | None = None
    route: RouteCreate | None = None


class PositionIn(BaseModel):
    lat: float
    lng: float
    timestamp: float = Field(allow_inf_nan=False)  # seconds since epoch
    accuracy: float | None = None
    heading: float | None = None
    speed: float | None = None  # m/s


class NavigationStateOut(BaseModel):
    session_id: str
    phase: str
    is_navigating: bool
    completed: bool
    route_id: int | None = None
    route_name: str | None = None
    current_waypoint_index: int
    waypoint_count: int
    target: WaypointInfo | None = None
    distance_to_next_waypoint: float
    distance_to_next_text: str
    total_distance_remaining: float
    total_distance_text: str
    estimated_time_remaining: float | None = None
    estimated_time_text: str
    progress: float
    route_progress: float
    off_route: bool
    bearing_to_target: float | None = None
    position: str | None = None  # formatted DMS of the last accepted fix


class PositionResult(BaseModel):
    accepted: bool
    state: NavigationStateOut
