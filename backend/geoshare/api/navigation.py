"""Navigation session REST API endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from geoshare.api.routes import route_from_payload
from geoshare.core.coordinates import format_distance, format_duration, format_location
from geoshare.core.errors import InvalidPositionError, RouteNotNavigableError, SessionNotFoundError
from geoshare.core.navigation import NavigationPosition
from geoshare.core.route_store import RouteStore
from geoshare.core.sessions import NavigationSession
from geoshare.db.session import get_session
from geoshare.schemas.navigation import NavigationStateOut, PositionIn, PositionResult, SessionCreate
from geoshare.schemas.route import WaypointInfo

router = APIRouter(prefix="/api/navigation", tags=["navigation"])

# Will be set by main.py
sessions = None
broadcaster = None


def state_out(session: NavigationSession) -> NavigationStateOut:
    """Render a session's state, converting metres to display strings."""
    tracker = session.tracker
    state = tracker.state
    route = state.current_route

    target = tracker.current_target()
    last = tracker.last_position
    return NavigationStateOut(
        session_id=session.id,
        phase=state.phase.value,
        is_navigating=state.is_navigating,
        completed=state.is_complete,
        route_id=route.id if route else None,
        route_name=route.name if route else None,
        current_waypoint_index=state.current_waypoint_index,
        waypoint_count=route.waypoint_count() if route else 0,
        target=WaypointInfo(lat=target.lat, lng=target.lng, order=target.order, name=target.name)
        if target else None,
        distance_to_next_waypoint=state.distance_to_next_waypoint,
        distance_to_next_text=format_distance(state.distance_to_next_waypoint),
        total_distance_remaining=state.total_distance_remaining,
        total_distance_text=format_distance(state.total_distance_remaining),
        estimated_time_remaining=state.estimated_time_remaining,
        estimated_time_text=format_duration(state.estimated_time_remaining),
        progress=state.progress,
        route_progress=state.route_progress,
        off_route=state.off_route,
        bearing_to_target=tracker.bearing_to_target(),
        position=format_location(last.lat, last.lng) if last else None,
    )


def _get(session_id: str) -> NavigationSession:
    if sessions is None:
        raise HTTPException(status_code=503, detail="Navigation not initialized")
    try:
        return sessions.get(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


async def _publish(session: NavigationSession, state: NavigationStateOut) -> None:
    if broadcaster is not None:
        await broadcaster.publish(session.id, state.model_dump(mode="json"))


@router.post("/sessions", response_model=NavigationStateOut, status_code=201)
async def open_session(payload: SessionCreate, db: AsyncSession = Depends(get_session)):
    """Start navigating a stored route (``route_id``) or an inline one."""
    if sessions is None:
        raise HTTPException(status_code=503, detail="Navigation not initialized")

    if payload.route is not None:
        route = route_from_payload(payload.route)
    elif payload.route_id is not None:
        route = await RouteStore(db).get(payload.route_id)
        if route is None:
            raise HTTPException(status_code=404, detail="Route not found")
    else:
        raise HTTPException(status_code=422, detail="Either route_id or route is required")

    try:
        session = sessions.open(route)
    except RouteNotNavigableError as e:
        raise HTTPException(status_code=422, detail=str(e))

    state = state_out(session)
    await _publish(session, state)
    return state


@router.get("/sessions/{session_id}", response_model=NavigationStateOut)
async def get_session_state(session_id: str):
    return state_out(_get(session_id))


@router.post("/sessions/{session_id}/positions", response_model=PositionResult)
async def post_position(session_id: str, payload: PositionIn):
    """Feed one position fix; stale or post-completion fixes come back with accepted=false."""
    session = _get(session_id)
    try:
        pos = NavigationPosition(**payload.model_dump())
    except InvalidPositionError as e:
        raise HTTPException(status_code=422, detail=str(e))

    _, accepted = sessions.update(session.id, pos)
    state = state_out(session)
    if accepted:
        await _publish(session, state)
    return PositionResult(accepted=accepted, state=state)


@router.delete("/sessions/{session_id}", status_code=204)
async def close_session(session_id: str):
    session = _get(session_id)
    sessions.close(session.id)
    if broadcaster is not None:
        await broadcaster.forget(session.id)
