"""Measure how far a GPS fix strays from a route polyline using Shapely."""

import logging
import math
from dataclasses import dataclass

from shapely.geometry import LineString, Point

logger = logging.getLogger(__name__)

LAT_M_PER_DEG = 111_320.0


@dataclass
class MatchResult:
    distance_m: float  # perpendicular distance from the route polyline
    progress: float  # 0.0–1.0 along the polyline


class RouteMatcher:
    """Snaps positions to one route's geometry.

    Coordinates are projected to a local flat plane in metres, scaled at the
    route's mean latitude. Good enough for the off-route check on routes a
    few tens of kilometres long.
    """

    def __init__(self, coords: list[tuple[float, float]]) -> None:
        """coords = [(lat, lon), ...]"""
        self._geom: LineString | Point | None = None
        self._lon_m_per_deg = LAT_M_PER_DEG
        if not coords:
            return

        mean_lat = sum(c[0] for c in coords) / len(coords)
        self._lon_m_per_deg = LAT_M_PER_DEG * math.cos(math.radians(mean_lat))
        # Shapely uses (x, y) = (lon, lat)
        projected = [self._project(lat, lon) for lat, lon in coords]
        if len(projected) == 1:
            self._geom = Point(projected[0])
        else:
            self._geom = LineString(projected)

    def _project(self, lat: float, lon: float) -> tuple[float, float]:
        return (lon * self._lon_m_per_deg, lat * LAT_M_PER_DEG)

    def match(self, lat: float, lon: float) -> MatchResult | None:
        """Distance and normalized progress of a fix; None for an empty route."""
        if self._geom is None:
            return None

        point = Point(self._project(lat, lon))
        distance = self._geom.distance(point)
        if isinstance(self._geom, LineString) and self._geom.length > 0:
            progress = self._geom.project(point, normalized=True)
        else:
            progress = 0.0
        return MatchResult(distance_m=distance, progress=progress)
