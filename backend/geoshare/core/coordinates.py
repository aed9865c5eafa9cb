"""Human-readable rendering of coordinates, distances and durations."""

import math


def format_coordinate(value: float, is_latitude: bool) -> str:
    """Format decimal degrees as degrees/minutes/seconds with a hemisphere suffix.

    Each unit is floor-truncated, so 59.999 seconds stays 59 and never
    carries into the minutes. Range is not checked.
    """
    absolute = abs(value)
    degrees = math.floor(absolute)
    minutes_full = (absolute - degrees) * 60
    minutes = math.floor(minutes_full)
    seconds = math.floor((minutes_full - minutes) * 60)

    if is_latitude:
        suffix = "N" if value >= 0 else "S"
    else:
        suffix = "E" if value >= 0 else "W"

    return f"{degrees}° {minutes}' {seconds}\" {suffix}"


def format_location(lat: float, lng: float) -> str:
    return f"{format_coordinate(lat, True)}, {format_coordinate(lng, False)}"


def format_distance(meters: float) -> str:
    """'250m' below one kilometre, '1.25km' above."""
    if meters < 1000:
        return f"{round(meters)}m"
    return f"{meters / 1000:.2f}km"


def format_duration(seconds: float | None) -> str:
    if seconds is None:
        return "--"
    total = int(seconds)
    if total < 60:
        return f"{total}s"
    minutes = total // 60
    if minutes < 60:
        return f"{minutes} min"
    return f"{minutes // 60} h {minutes % 60} min"
