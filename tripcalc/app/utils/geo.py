"""Straight-line geo helpers (no routing)."""

import math
from urllib.parse import urlencode

from tripcalc.app.models.common import GeoLocation

EARTH_RADIUS_KM = 6371.0
MATCH_TOLERANCE_M = 50.0
WALKING_SPEED_KMH = 5.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two coordinates in kilometers."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def locations_match(a: GeoLocation | None, b: GeoLocation | None) -> bool:
    """Same place id, or within 50 m of each other."""
    if a is None or b is None:
        return False
    if a.place_id and b.place_id and a.place_id == b.place_id:
        return True
    return haversine_km(a.lat, a.lon, b.lat, b.lon) * 1000 <= MATCH_TOLERANCE_M


def estimate_walking_minutes(km: float) -> int:
    """Walking time at 5 km/h, rounded to the minute."""
    return round(km / WALKING_SPEED_KMH * 60)


def format_distance(km: float) -> str:
    """``350 m`` below one kilometer, ``1.2 km`` above."""
    if km < 1:
        return f"{round(km * 1000)} m"
    return f"{km:.1f} km"


def google_maps_directions_url(
    origin: GeoLocation, destination: GeoLocation, travel_mode: str = "walking"
) -> str:
    """Directions link between two points."""
    params = {
        "api": "1",
        "origin": f"{origin.lat},{origin.lon}",
        "destination": f"{destination.lat},{destination.lon}",
        "travelmode": travel_mode,
    }
    return f"https://www.google.com/maps/dir/?{urlencode(params)}"
