from pydantic import BaseModel, Field

from geoshare.core.route_model import Visibility


class WaypointInfo(BaseModel):
    lat: float = Field(allow_inf_nan=False)
    lng: float = Field(allow_inf_nan=False)
    order: int
    name: str | None = None


class RouteCreate(BaseModel):
    name: str = ""
    description: str = ""
    visibility: Visibility = Visibility.PUBLIC
    points: list[WaypointInfo] = []


class RouteInfo(BaseModel):
    id: int | None = None
    name: str
    description: str = ""
    visibility: Visibility
    waypoint_count: int
    distance_m: float
    distance_text: str
    start_location: str | None = None  # formatted DMS of the first waypoint


class RouteDetail(RouteInfo):
    points: list[WaypointInfo] = []
