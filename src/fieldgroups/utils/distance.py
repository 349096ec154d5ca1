"""Great-circle distances and centroids for latitude/longitude pairs."""

import math
from collections.abc import Sequence

import numpy as np
from haversine import Unit, haversine

EARTH_RADIUS_KM = 6371.0

Coordinate = tuple[float, float]


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """Haversine distance in kilometres between two (lat, lon) points in degrees.

    The ``haversine`` package uses the mean radius 6371.0088 km for its
    kilometre unit; the central angle is scaled by 6371 km here instead.
    Any non-finite coordinate yields ``nan``.
    """
    if not all(math.isfinite(v) for v in (*a, *b)):
        return math.nan
    angle = haversine(a, b, unit=Unit.RADIANS, normalize=False, check=False)
    return EARTH_RADIUS_KM * angle


def centroid(points: Sequence[Coordinate]) -> Coordinate:
    """Arithmetic mean of latitudes and longitudes; ``(0.0, 0.0)`` when empty."""
    if len(points) == 0:
        return (0.0, 0.0)
    coords = np.asarray(points, dtype=np.float64)
    lat, lon = coords.mean(axis=0)
    return (float(lat), float(lon))
