from fakes import POIS
from navigator.map_view import DEFAULT_CENTER, DEFAULT_ZOOM, build_map_view
from navigator.models import PointOfInterest, Waypoint


def test_empty_lists_reset_to_default_view():
    view = build_map_view([], [])
    assert view.center == DEFAULT_CENTER
    assert view.zoom == DEFAULT_ZOOM
    assert view.markers == [] and view.route == []
    assert view.bounds is None


def test_single_waypoint_draws_no_route(waypoints):
    view = build_map_view(waypoints[:1], [])
    assert view.route == []
    assert view.bounds is None
    assert view.center == DEFAULT_CENTER


def test_route_and_markers_fit_bounds(waypoints):
    pois = [PointOfInterest(**p) for p in POIS]
    view = build_map_view(waypoints, pois)
    assert view.route == [(w.lat, w.lng) for w in waypoints]
    assert [m.title for m in view.markers] == ["Taipei 101", "Taroko Gorge"]
    assert view.markers[0].popup == "**Taipei 101**\nNo. 7, Section 5, Xinyi Road, Taipei"
    assert view.bounds.north == 25.0339
    assert view.bounds.south == 23.991
    assert view.bounds.west == 121.5645
    assert view.bounds.east == 121.753
    assert view.center is None


def test_markers_without_route():
    poi = PointOfInterest(name="Sun Moon Lake campsite", address="Yuchi, Nantou", lat=23.86, lng=120.91)
    view = build_map_view([Waypoint(name="Taichung", lat=24.15, lng=120.67)], [poi])
    assert view.route == []
    assert view.bounds.north == view.bounds.south == 23.86
