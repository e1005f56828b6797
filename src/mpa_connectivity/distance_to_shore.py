"""Minimum distance from each sketch to the (unshrunk) coastline.

Distances are measured on the ellipsoid: for every sketch vertex the nearby
land is projected into an azimuthal equidistant CRS centred on that vertex,
where the planar distance from the origin is the geodesic distance.
"""
from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Optional

import geopandas as gpd
from shapely.geometry import Point, box
from shapely.geometry.base import BaseGeometry

from .antimeridian import normalize_geometry, polygon_parts
from .datasources import Datasources, default_datasources
from .land import CRS_LATLON, LandMask
from .sketches import Sketch, to_sketch_array

METRIC_ID = "distanceToShore"

KM_PER_DEG_LAT = 110.0  # lower bound of a meridian degree (110.57 km at the equator)
DENSIFY_DEG = 0.05      # land edges are straight in lon/lat, not in the local projection


def _local_crs(lon: float, lat: float) -> str:
    return f"+proj=aeqd +lat_0={lat} +lon_0={lon} +datum=WGS84 +units=m +no_defs"


def _geodesic_distance_km(lon: float, lat: float, geoms: Iterable[BaseGeometry]) -> float:
    local = gpd.GeoSeries(list(geoms), crs=CRS_LATLON).segmentize(DENSIFY_DEG).to_crs(_local_crs(lon, lat))
    return float(local.distance(Point(0, 0)).min()) / 1000.0


def _search_window(lon: float, lat: float, km: float) -> BaseGeometry:
    """Lon/lat box holding every position within *km* of (lon, lat)."""
    dlat = km / KM_PER_DEG_LAT
    edge = min(abs(lat) + dlat, 89.0)
    dlon = min(km / (KM_PER_DEG_LAT * math.cos(math.radians(edge))), 360.0)
    return box(lon - dlon, lat - dlat, lon + dlon, lat + dlat)


def vertex_distance_to_shore(lon: float, lat: float, coast: LandMask) -> float:
    """Geodesic distance (km) from one position to the closest land polygon."""
    nearest = coast.nearest(Point(lon, lat))
    if nearest is None:
        return -1.0
    # the planar nearest polygon bounds the search; a closer one on the
    # ground must lie inside the window
    best = _geodesic_distance_km(lon, lat, [nearest])
    candidates = [g for g in coast.candidates(_search_window(lon, lat, best)) if g is not nearest]
    if candidates:
        best = min(best, _geodesic_distance_km(lon, lat, candidates))
    return best


def sketch_distance_to_shore(sketch: Sketch, coast: LandMask) -> float:
    """0 when the sketch touches land, -1 when there is no land at all."""
    geom = normalize_geometry(sketch.geometry)
    if len(coast) == 0:
        return -1.0
    if coast.intersects(geom):
        return 0.0

    best = float("inf")
    for poly in polygon_parts(geom):
        for ring in (poly.exterior, *poly.interiors):
            for x, y, *_ in ring.coords[:-1]:
                best = min(best, vertex_distance_to_shore(x, y, coast))
    return best


def distance_to_shore(
    sketch: Dict[str, Any], datasources: Optional[Datasources] = None
) -> List[Dict[str, Any]]:
    """One metric row per sketch: ``{metricId, sketchId, value, extra}``."""
    ds = datasources if datasources is not None else default_datasources()
    coast = ds.coast
    return [
        {
            "metricId": METRIC_ID,
            "sketchId": sk.id,
            "value": sketch_distance_to_shore(sk, coast),
            "extra": {"sketchName": sk.name},
        }
        for sk in to_sketch_array(sketch)
    ]
