"""Great-circle distance helpers."""

import math

from company_proximity.core.models import Coordinates

# Mean earth radius of 6371008.8 m expressed in statute miles.
EARTH_RADIUS_MILES = 3958.7613


def haversine_miles(origin: Coordinates, destination: Coordinates) -> float:
    """Great-circle distance between two (longitude, latitude) points, in miles."""
    lon1, lat1 = origin
    lon2, lat2 = destination
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return EARTH_RADIUS_MILES * (2 * math.atan2(math.sqrt(a), math.sqrt(1 - a)))
