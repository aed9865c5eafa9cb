"""Read/write saved routes in the relational store."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from geoshare.core.errors import RouteDataError
from geoshare.core.route_model import Route, Visibility, Waypoint
from geoshare.models import tables

logger = logging.getLogger(__name__)


def route_from_row(row: tables.Route) -> Route:
    """Map an ORM route with its points to a validated core Route."""
    waypoints = [
        Waypoint(lat=p.lat, lng=p.lng, order=p.order, name=p.name)
        for p in row.points
    ]
    return Route.from_waypoints(
        waypoints,
        name=row.name,
        description=row.description or "",
        visibility=row.visibility,
        id=row.id,
    )


def row_from_route(route: Route, user_id: str | None = None) -> tables.Route:
    return tables.Route(
        user_id=user_id,
        name=route.name,
        description=route.description,
        visibility=route.visibility.value,
        points=[
            tables.RoutePoint(lat=w.lat, lng=w.lng, order=w.order, name=w.name)
            for w in route.waypoints
        ],
    )


class RouteStore:
    """Route persistence over one AsyncSession."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, route_id: int) -> Route | None:
        result = await self.session.execute(
            select(tables.Route)
            .where(tables.Route.id == route_id)
            .options(selectinload(tables.Route.points))
        )
        row = result.scalar_one_or_none()
        if row is None:
            return None
        return route_from_row(row)

    async def list(self, visibility: Visibility | None = None) -> list[Route]:
        query = (
            select(tables.Route)
            .options(selectinload(tables.Route.points))
            .order_by(tables.Route.created_at.desc())
        )
        if visibility is not None:
            query = query.where(tables.Route.visibility == visibility.value)
        result = await self.session.execute(query)
        routes = []
        for row in result.scalars().all():
            try:
                routes.append(route_from_row(row))
            except RouteDataError as e:
                logger.warning("Skipping route %s: %s", row.id, e)
        return routes

    async def create(self, route: Route, user_id: str | None = None) -> Route:
        row = row_from_route(route, user_id=user_id)
        self.session.add(row)
        await self.session.commit()
        logger.info("Saved route %d (%s, %d points)", row.id, row.name, len(route.waypoints))
        return Route.from_waypoints(
            route.waypoints,
            name=route.name,
            description=route.description,
            visibility=route.visibility,
            id=row.id,
        )

    async def delete(self, route_id: int) -> bool:
        row = await self.session.get(
            tables.Route, route_id, options=[selectinload(tables.Route.points)],
        )
        if row is None:
            return False
        await self.session.delete(row)
        await self.session.commit()
        logger.info("Deleted route %d", route_id)
        return True
