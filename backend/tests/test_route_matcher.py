"""Tests for RouteMatcher."""

from geoshare.core.route_matcher import RouteMatcher


def test_basic_matching():
    """Test that a point on a route line returns valid progress."""
    # Simple straight route along a latitude line in Yekaterinburg
    matcher = RouteMatcher([
        (56.8389, 60.5900),
        (56.8389, 60.6000),
        (56.8389, 60.6100),
    ])

    # Point exactly in the middle
    result = matcher.match(56.8389, 60.6000)
    assert result is not None
    assert 0.4 < result.progress < 0.6
    assert result.distance_m < 1


def test_distance_from_route():
    """~0.001 degrees of latitude north of the line is ~111 m."""
    matcher = RouteMatcher([(56.8389, 60.5900), (56.8389, 60.6100)])
    result = matcher.match(56.8399, 60.6000)
    assert result is not None
    assert 100 < result.distance_m < 125


def test_empty_route():
    """Matching against an empty route returns None."""
    assert RouteMatcher([]).match(56.8389, 60.6000) is None


def test_single_point_route():
    matcher = RouteMatcher([(0.0, 0.0)])
    result = matcher.match(0.0, 0.001)
    assert result is not None
    assert result.progress == 0.0
    assert 100 < result.distance_m < 125
