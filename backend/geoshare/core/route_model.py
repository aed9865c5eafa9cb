"""Ordered waypoint sequences that navigation sessions follow."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from geoshare.core.errors import DuplicateWaypointOrderError, WaypointIndexError
from geoshare.core.geo import haversine_m

logger = logging.getLogger(__name__)


class Visibility(str, Enum):
    PUBLIC = "public"
    FOLLOWERS = "followers"
    PRIVATE = "private"


@dataclass(frozen=True)
class Waypoint:
    lat: float
    lng: float
    order: int
    name: str | None = None


@dataclass(frozen=True)
class Route:
    """Waypoints sorted by ``order``, plus display metadata.

    Build through :meth:`from_waypoints`; the constructor trusts its input.
    """

    waypoints: tuple[Waypoint, ...] = ()
    name: str = ""
    description: str = ""
    visibility: Visibility = Visibility.PUBLIC
    id: int | None = None
    # leg_lengths[i] = distance from waypoint i to waypoint i+1
    leg_lengths: tuple[float, ...] = field(default=(), compare=False, repr=False)

    @classmethod
    def from_waypoints(
        cls,
        waypoints: Iterable[Waypoint],
        name: str = "",
        description: str = "",
        visibility: Visibility | str = Visibility.PUBLIC,
        id: int | None = None,
    ) -> "Route":
        """Sort waypoints by order and reject duplicate order values."""
        ordered = sorted(waypoints, key=lambda w: w.order)
        for prev, curr in zip(ordered, ordered[1:]):
            if prev.order == curr.order:
                logger.warning("Route %s (%s): duplicate waypoint order %d", id, name, curr.order)
                raise DuplicateWaypointOrderError(curr.order)

        legs = tuple(
            haversine_m(a.lat, a.lng, b.lat, b.lng)
            for a, b in zip(ordered, ordered[1:])
        )
        return cls(
            waypoints=tuple(ordered),
            name=name,
            description=description,
            visibility=Visibility(visibility),
            id=id,
            leg_lengths=legs,
        )

    def waypoint_count(self) -> int:
        return len(self.waypoints)

    def is_empty(self) -> bool:
        return not self.waypoints

    def waypoint_at(self, index: int) -> Waypoint:
        # negative indices are not positions on the route
        if not 0 <= index < len(self.waypoints):
            raise WaypointIndexError(index, len(self.waypoints))
        return self.waypoints[index]

    def leg_length_m(self, index: int) -> float:
        """Distance from waypoint ``index`` to the one after it."""
        if not 0 <= index < len(self.leg_lengths):
            raise WaypointIndexError(index, len(self.leg_lengths))
        return self.leg_lengths[index]

    def remaining_length_after(self, index: int) -> float:
        """Sum of legs from waypoint ``index`` to the end of the route."""
        return sum(self.leg_lengths[max(index, 0):])

    def total_length_m(self) -> float:
        return sum(self.leg_lengths)

    def coords(self) -> list[tuple[float, float]]:
        return [(w.lat, w.lng) for w in self.waypoints]
