"""Great-circle distances between (lon, lat) positions."""
from __future__ import annotations

from typing import Sequence

from pyproj import Geod

GEOD = Geod(ellps="WGS84")


def distance_km(a: Sequence[float], b: Sequence[float]) -> float:
    """Return great-circle distance (km) between two WGS84 ``(lon, lat)`` points.

    Longitudes outside [-180, 180] (the shifted graph frame) are accepted.
    """
    _, _, dist_m = GEOD.inv(a[0], a[1], b[0], b[1])
    return dist_m / 1000.0
