import math
from typing import Optional

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in kilometres"""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance_between(origin, target) -> Optional[float]:
    """
    Distance in km between two objects exposing latitude/longitude, or None when
    either side has no coordinates.
    """
    if origin is None or target is None:
        return None
    if not getattr(origin, "has_coordinates", False) or not getattr(target, "has_coordinates", False):
        return None
    return haversine_km(origin.latitude, origin.longitude, target.latitude, target.longitude)


def coordinates_to_lat_lng(coordinates: Optional[list[float]]) -> tuple[Optional[float], Optional[float]]:
    """Split a GeoJSON-ordered [longitude, latitude] pair; [0, 0] means unknown"""
    if not coordinates or len(coordinates) != 2:
        return None, None
    longitude, latitude = coordinates
    if longitude == 0 and latitude == 0:
        return None, None
    return latitude, longitude


def lat_lng_to_coordinates(latitude: Optional[float], longitude: Optional[float]) -> Optional[list[float]]:
    if latitude is None or longitude is None:
        return None
    return [longitude, latitude]
