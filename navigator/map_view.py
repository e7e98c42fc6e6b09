from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel

from .models import PointOfInterest, Waypoint


DEFAULT_CENTER: Tuple[float, float] = (23.9, 121.5)
DEFAULT_ZOOM = 7
FIT_PADDING_PX = 50


class Marker(BaseModel):
    lat: float
    lng: float
    title: str
    popup: str


class Bounds(BaseModel):
    south: float
    west: float
    north: float
    east: float


class MapView(BaseModel):
    markers: List[Marker] = []
    route: List[Tuple[float, float]] = []
    bounds: Optional[Bounds] = None
    padding_px: int = FIT_PADDING_PX
    # Used only when there is nothing to fit
    center: Optional[Tuple[float, float]] = None
    zoom: Optional[int] = None


def _bounds(points: Sequence[Tuple[float, float]]) -> Bounds:
    lats = [p[0] for p in points]
    lngs = [p[1] for p in points]
    return Bounds(south=min(lats), west=min(lngs), north=max(lats), east=max(lngs))


def build_map_view(waypoints: Sequence[Waypoint], pois: Sequence[PointOfInterest]) -> MapView:
    """Markers for every POI, a route line for two or more waypoints, and the view to show them."""
    has_route = len(waypoints) >= 2
    if not has_route and not pois:
        return MapView(center=DEFAULT_CENTER, zoom=DEFAULT_ZOOM)

    markers = [
        Marker(lat=poi.lat, lng=poi.lng, title=poi.name, popup=f"**{poi.name}**\n{poi.address}")
        for poi in pois
    ]
    route = [(wp.lat, wp.lng) for wp in waypoints] if has_route else []
    points = [(m.lat, m.lng) for m in markers] + route
    return MapView(markers=markers, route=route, bounds=_bounds(points))
