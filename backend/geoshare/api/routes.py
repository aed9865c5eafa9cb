"""Saved route REST API endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from geoshare.core.coordinates import format_distance, format_location
from geoshare.core.errors import DuplicateWaypointOrderError
from geoshare.core.route_model import Route, Visibility, Waypoint
from geoshare.core.route_store import RouteStore
from geoshare.db.session import get_session
from geoshare.schemas.route import RouteCreate, RouteDetail, RouteInfo, WaypointInfo

router = APIRouter(prefix="/api/routes", tags=["routes"])


def route_from_payload(payload: RouteCreate) -> Route:
    """Build a core Route from a request body; duplicate orders → 409."""
    try:
        return Route.from_waypoints(
            (Waypoint(lat=p.lat, lng=p.lng, order=p.order, name=p.name) for p in payload.points),
            name=payload.name,
            description=payload.description,
            visibility=payload.visibility,
        )
    except DuplicateWaypointOrderError as e:
        raise HTTPException(status_code=409, detail=str(e))


def route_info(route: Route) -> RouteInfo:
    start = None
    if not route.is_empty():
        first = route.waypoint_at(0)
        start = format_location(first.lat, first.lng)
    length = route.total_length_m()
    return RouteInfo(
        id=route.id,
        name=route.name,
        description=route.description,
        visibility=route.visibility,
        waypoint_count=route.waypoint_count(),
        distance_m=length,
        distance_text=format_distance(length),
        start_location=start,
    )


def route_detail(route: Route) -> RouteDetail:
    return RouteDetail(
        **route_info(route).model_dump(),
        points=[
            WaypointInfo(lat=w.lat, lng=w.lng, order=w.order, name=w.name)
            for w in route.waypoints
        ],
    )


@router.get("", response_model=list[RouteInfo])
async def list_routes(
    visibility: Visibility | None = None,
    session: AsyncSession = Depends(get_session),
):
    """Get saved routes, newest first."""
    routes = await RouteStore(session).list(visibility=visibility)
    return [route_info(r) for r in routes]


@router.get("/{route_id}", response_model=RouteDetail)
async def get_route(route_id: int, session: AsyncSession = Depends(get_session)):
    """Get route detail with its waypoints."""
    route = await RouteStore(session).get(route_id)
    if route is None:
        raise HTTPException(status_code=404, detail="Route not found")
    return route_detail(route)


@router.post("", response_model=RouteDetail, status_code=201)
async def create_route(payload: RouteCreate, session: AsyncSession = Depends(get_session)):
    route = route_from_payload(payload)
    saved = await RouteStore(session).create(route)
    return route_detail(saved)


@router.delete("/{route_id}", status_code=204)
async def delete_route(route_id: int, session: AsyncSession = Depends(get_session)):
    if not await RouteStore(session).delete(route_id):
        raise HTTPException(status_code=404, detail="Route not found")
