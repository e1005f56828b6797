"""Antimeridian-safe coordinate handling.

The study region straddles the 180° meridian, so every geometry entering the
graph subsystem goes through :func:`normalize_geometry` first:

1. positions are wrapped into [-180, 180] / [-90, 90];
2. polygons that cross the antimeridian are split into one piece per side;
3. every polygon piece west of ``config.GRAPH_LON_PIVOT`` is shifted by +360
   so the region is continuous in the *graph frame* used for nodes, bounding
   boxes and visibility tests.
"""
from __future__ import annotations

import math
from typing import Any, Dict, List, Sequence

import numpy as np
from shapely import affinity
from shapely.geometry import MultiPolygon, Point, Polygon, box, mapping, shape
from shapely.geometry.base import BaseGeometry

from . import config
from .errors import InvalidInputError

# ---------------------------------------------------------------------------
# Position cleaning
# ---------------------------------------------------------------------------


def clean_longitude(lon: float) -> float:
    """Return *lon* wrapped into [-180, 180]."""
    if lon is None:
        raise InvalidInputError("longitude is required")
    if lon > 180 or lon < -180:
        lon = math.fmod(lon, 360.0)
        if lon > 180:
            lon -= 360.0
        elif lon < -180:
            lon += 360.0
    return 0.0 if lon == 0 else lon


def clean_latitude(lat: float) -> float:
    """Return *lat* wrapped into [-90, 90]."""
    if lat is None:
        raise InvalidInputError("latitude is required")
    if lat > 90 or lat < -90:
        lat = math.fmod(lat, 180.0)
        if lat > 90:
            lat -= 180.0
        elif lat < -90:
            lat += 180.0
    return 0.0 if lat == 0 else lat


def _clean_position(pos: Sequence[float]) -> List[float]:
    return [clean_longitude(pos[0]), clean_latitude(pos[1])]


def _clean_line(line: Sequence[Sequence[float]]) -> List[List[float]]:
    return [_clean_position(p) for p in line]


def _clean_geometry(geom: Dict[str, Any]) -> Dict[str, Any]:
    gtype = geom.get("type")
    coords = geom.get("coordinates")
    if gtype == "Point":
        new = _clean_position(coords)
    elif gtype == "LineString":
        new = _clean_line(coords)
    elif gtype in ("MultiLineString", "Polygon"):
        new = [_clean_line(line) for line in coords]
    elif gtype == "MultiPolygon":
        new = [[_clean_line(ring) for ring in poly] for poly in coords]
    elif gtype == "MultiPoint":
        seen = set()
        new = []
        for p in coords:
            key = tuple(p)
            if key not in seen:
                seen.add(key)
                new.append(_clean_position(p))
    else:
        raise InvalidInputError(f"{gtype} geometry not supported")
    return {"type": gtype, "coordinates": new}


def clean_coords(geojson: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of *geojson* with every position inside world bounds.

    Accepts a bare geometry, a Feature or a FeatureCollection. Collection-level
    ``properties`` (sketch collections carry them) are kept. The input is not
    mutated.
    """
    if not geojson:
        raise InvalidInputError("geojson is required")

    gtype = geojson.get("type")
    if gtype == "FeatureCollection":
        out: Dict[str, Any] = {
            "type": "FeatureCollection",
            "features": [clean_coords(f) for f in geojson.get("features", [])],
        }
        if geojson.get("properties") is not None:
            out["properties"] = geojson["properties"]
        return out

    if gtype == "Feature":
        if geojson.get("geometry") is None:
            raise InvalidInputError("feature has no geometry")
        out = {
            "type": "Feature",
            "properties": geojson.get("properties"),
            "geometry": _clean_geometry(geojson["geometry"]),
        }
        if "id" in geojson:
            out["id"] = geojson["id"]
        if "bbox" in geojson:
            out["bbox"] = clean_bbox(geojson["bbox"])
        return out

    return _clean_geometry(geojson)


# ---------------------------------------------------------------------------
# Bounding boxes
# ---------------------------------------------------------------------------


def clean_bbox(bbox: Sequence[float]) -> List[float]:
    """Normalise bbox longitudes into [-180, 180]."""
    min_x, min_y, max_x, max_y = bbox[:4]
    norm_min_x = ((min_x + 180) % 360 + 360) % 360 - 180
    norm_max_x = ((max_x + 180) % 360 + 360) % 360 - 180
    return [norm_min_x, min_y, norm_max_x, max_y]


# ---------------------------------------------------------------------------
# Polygon splitting
# ---------------------------------------------------------------------------


def _ring_crosses(coords: np.ndarray) -> bool:
    return bool(len(coords) > 1 and np.any(np.abs(np.diff(coords[:, 0])) > 180.0))


def polygon_parts(geom: BaseGeometry) -> List[Polygon]:
    if geom.is_empty:
        return []
    if isinstance(geom, Polygon):
        return [geom]
    if isinstance(geom, MultiPolygon):
        return list(geom.geoms)
    if hasattr(geom, "geoms"):
        return [p for g in geom.geoms for p in polygon_parts(g)]
    return []


def crosses_antimeridian(geom: BaseGeometry) -> bool:
    """True when any ring of *geom* jumps more than 180° between vertices."""
    for poly in polygon_parts(geom):
        rings = [poly.exterior, *poly.interiors]
        if any(_ring_crosses(np.asarray(r.coords)) for r in rings):
            return True
    return False


def _unwrap_ring(coords: np.ndarray, reference: float | None = None) -> np.ndarray:
    out = coords.copy()
    out[:, 0] = np.unwrap(coords[:, 0], period=360.0)
    if reference is not None:
        # keep holes in the same 360° window as their shell
        out[:, 0] += 360.0 * round((reference - out[:, 0].mean()) / 360.0)
    return out


def unwrap_polygon(poly: Polygon) -> Polygon:
    """Return *poly* with continuous longitudes (may extend past ±180)."""
    shell = _unwrap_ring(np.asarray(poly.exterior.coords))
    centre = float(shell[:, 0].mean())
    holes = [_unwrap_ring(np.asarray(r.coords), centre) for r in poly.interiors]
    return Polygon(shell, holes)


def split_polygon_antimeridian(geom: BaseGeometry) -> BaseGeometry:
    """Split a (Multi)Polygon on the antimeridian.

    Each returned part lies entirely on one side of ±180°. Polygons that do not
    cross are returned unchanged.
    """
    parts: List[Polygon] = []
    for poly in polygon_parts(geom):
        if not crosses_antimeridian(poly):
            parts.append(poly)
            continue
        continuous = unwrap_polygon(poly)
        for k in (-1, 0, 1):
            window = box(-180.0 + 360.0 * k, -90.0, 180.0 + 360.0 * k, 90.0)
            piece = continuous.intersection(window)
            for p in polygon_parts(piece):
                parts.append(affinity.translate(p, xoff=-360.0 * k))
    if not parts:
        raise InvalidInputError("geometry has no polygon area")
    if len(parts) == 1 and isinstance(geom, Polygon):
        return parts[0]
    return MultiPolygon(parts)


# ---------------------------------------------------------------------------
# Graph frame
# ---------------------------------------------------------------------------


def normalize_longitude(lon: float, pivot: float = config.GRAPH_LON_PIVOT) -> float:
    """Shift a canonical longitude into the graph frame."""
    return lon + 360.0 if lon < pivot else lon


def to_graph_frame(geom: BaseGeometry, pivot: float = config.GRAPH_LON_PIVOT) -> BaseGeometry:
    """Shift polygon parts (or points) west of *pivot* by +360.

    Shifting happens per polygon part so a part is never torn apart.
    """
    if isinstance(geom, Point):
        return Point(normalize_longitude(geom.x, pivot), geom.y)
    parts = []
    for poly in polygon_parts(geom):
        if poly.centroid.x < pivot:
            poly = affinity.translate(poly, xoff=360.0)
        parts.append(poly)
    if isinstance(geom, Polygon) and len(parts) == 1:
        return parts[0]
    return MultiPolygon(parts)


def normalize_geometry(geom: BaseGeometry, pivot: float = config.GRAPH_LON_PIVOT) -> BaseGeometry:
    """Clean, split and shift *geom* into the graph frame.

    Mandatory before any node extraction, bbox computation or visibility test.
    """
    if geom is None or geom.is_empty:
        raise InvalidInputError("empty geometry")
    cleaned = shape(clean_coords(mapping(geom)))
    if isinstance(cleaned, Point):
        return to_graph_frame(cleaned, pivot)
    return to_graph_frame(split_polygon_antimeridian(cleaned), pivot)
