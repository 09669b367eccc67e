from __future__ import annotations
import math
from typing import List, Tuple

from geographiclib.geodesic import Geodesic


geod = Geodesic.WGS84

# Smaller than any WGS84 radius of curvature, so the box below never under-covers.
_MIN_RADIUS_M = 6_335_439.0


def distance_m(lng1: float, lat1: float, lng2: float, lat2: float) -> float:
    return geod.Inverse(lat1, lng1, lat2, lng2, Geodesic.DISTANCE)["s12"]


def bounding_box(lng: float, lat: float, radius_m: float) -> Tuple[float, float, List[Tuple[float, float]]]:
    """
    Conservative box around a circle on the ellipsoid.

    Returns (min_lat, max_lat, lng_ranges). lng_ranges has one (west, east) pair,
    or two when the circle straddles the antimeridian.
    """
    ang = radius_m / _MIN_RADIUS_M
    lat_r = math.radians(lat)
    min_lat_r = lat_r - ang
    max_lat_r = lat_r + ang

    # Circle reaches a pole: every meridian is in range
    if max_lat_r >= math.pi / 2 or min_lat_r <= -math.pi / 2:
        return (
            max(math.degrees(min_lat_r), -90.0),
            min(math.degrees(max_lat_r), 90.0),
            [(-180.0, 180.0)],
        )

    dlng = math.degrees(math.asin(min(1.0, math.sin(ang) / math.cos(lat_r))))
    west, east = lng - dlng, lng + dlng
    if west < -180.0:
        ranges = [(west + 360.0, 180.0), (-180.0, east)]
    elif east > 180.0:
        ranges = [(west, 180.0), (-180.0, east - 360.0)]
    else:
        ranges = [(west, east)]
    return math.degrees(min_lat_r), math.degrees(max_lat_r), ranges
