"""Land mask, line-of-sight test and polygon vertex extraction."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import geopandas as gpd
import shapely
from loguru import logger
from shapely.geometry import LineString, Point, box, mapping, shape
from shapely.geometry.base import BaseGeometry
from shapely.strtree import STRtree

from . import config
from .antimeridian import polygon_parts
from .nodes import Coord, coast_node_id, sketch_node_id

CRS_LATLON = "EPSG:4326"

# ---------------------------------------------------------------------------
# Land mask
# ---------------------------------------------------------------------------


class LandMask:
    """Immutable collection of land polygons with a bbox index.

    Geometries are expected in the graph frame (see ``antimeridian``).
    """

    def __init__(self, geometries: Iterable[BaseGeometry]):
        self._geoms: Tuple[BaseGeometry, ...] = tuple(
            g
            for g in geometries
            if g is not None and not g.is_empty and g.geom_type in ("Polygon", "MultiPolygon")
        )
        self._tree = STRtree(self._geoms) if self._geoms else None

    def __len__(self) -> int:
        return len(self._geoms)

    def __iter__(self) -> Iterator[BaseGeometry]:
        return iter(self._geoms)

    @property
    def geometries(self) -> Tuple[BaseGeometry, ...]:
        return self._geoms

    @property
    def bounds(self) -> Optional[Tuple[float, float, float, float]]:
        if not self._geoms:
            return None
        xs0, ys0, xs1, ys1 = zip(*(g.bounds for g in self._geoms))
        return (min(xs0), min(ys0), max(xs1), max(ys1))

    # -- construction ------------------------------------------------------

    @classmethod
    def from_geojson(cls, fc: Dict[str, Any]) -> "LandMask":
        features = fc.get("features", []) if fc.get("type") == "FeatureCollection" else [fc]
        geoms = []
        for f in features:
            geom = f.get("geometry") if f.get("type") == "Feature" else f
            if geom:
                geoms.append(shape(geom))
        return cls(geoms)

    @classmethod
    def from_file(cls, path: Path) -> "LandMask":
        gdf = gpd.read_file(path)
        return cls(gdf.geometry)

    def to_geojson(self) -> Dict[str, Any]:
        return {
            "type": "FeatureCollection",
            "features": [
                {"type": "Feature", "properties": {}, "geometry": mapping(g)} for g in self._geoms
            ],
        }

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.exists():
            path.unlink()
        gdf = gpd.GeoDataFrame(geometry=list(self._geoms), crs=CRS_LATLON)
        gdf.to_file(path, driver="GeoJSON")

    # -- derived masks -----------------------------------------------------

    def shrink(self, margin_deg: float = config.LAND_SHRINK_DEG) -> "LandMask":
        """Buffer every polygon inward by *margin_deg*; vanished slivers are dropped."""
        if not self._geoms:
            return self
        # margin is in degrees on purpose, so buffer the raw geometries
        shrunk = shapely.buffer(list(self._geoms), -margin_deg)
        kept = [g for g in shrunk if not g.is_empty]
        logger.info(f"Shrunk land by {margin_deg}° → {len(kept)}/{len(self._geoms)} polygons kept")
        return LandMask(kept)

    def subset_for_bounds(self, bounds: Sequence[float]) -> "LandMask":
        """Keep only polygons whose bbox intersects *bounds* (input order kept)."""
        if self._tree is None:
            return self
        idx = sorted(int(i) for i in self._tree.query(box(*bounds)))
        return LandMask(self._geoms[i] for i in idx)

    def nearest(self, geom: BaseGeometry) -> Optional[BaseGeometry]:
        """Polygon closest to *geom* in planar (degree) distance."""
        if self._tree is None:
            return None
        return self._geoms[int(self._tree.nearest(geom))]

    def candidates(self, geom: BaseGeometry) -> List[BaseGeometry]:
        """Polygons whose bbox intersects the bbox of *geom*."""
        if self._tree is None:
            return []
        return [self._geoms[int(i)] for i in sorted(self._tree.query(geom))]

    def intersects(self, geom: BaseGeometry) -> bool:
        if self._tree is None:
            return False
        return len(self._tree.query(geom, predicate="intersects")) > 0


def is_line_clear(coord1: Sequence[float], coord2: Sequence[float], land: LandMask) -> bool:
    """Return True iff the straight segment between the coordinates touches no land."""
    if tuple(coord1[:2]) == tuple(coord2[:2]):
        geom: BaseGeometry = Point(coord1[:2])
    else:
        geom = LineString([coord1[:2], coord2[:2]])
    return not land.intersects(geom)


# ---------------------------------------------------------------------------
# Vertex extraction
# ---------------------------------------------------------------------------


def _ring_vertices(ring) -> List[Coord]:
    coords = [(float(x), float(y)) for x, y, *_ in ring.coords]
    if len(coords) > 1 and coords[0] == coords[-1]:
        coords = coords[:-1]  # closing vertex duplicates the first
    return coords


def extract_vertices(geom: BaseGeometry, feature_index: int) -> Dict[str, Coord]:
    """Every exterior and interior ring vertex of a coastline feature.

    Ring indices run across all parts of a MultiPolygon so ids stay unique.
    """
    vertices: Dict[str, Coord] = {}
    ring_index = 0
    for poly in polygon_parts(geom):
        for ring in (poly.exterior, *poly.interiors):
            for vertex_index, coord in enumerate(_ring_vertices(ring)):
                vertices[coast_node_id(feature_index, ring_index, vertex_index)] = coord
            ring_index += 1
    return vertices


def extract_exterior_vertices(geom: BaseGeometry, sketch_index: int) -> Dict[str, Coord]:
    """Exterior ring vertices only; holes are not used for sketch connectivity."""
    vertices: Dict[str, Coord] = {}
    for part_index, poly in enumerate(polygon_parts(geom)):
        for vertex_index, coord in enumerate(_ring_vertices(poly.exterior)):
            vertices[sketch_node_id(sketch_index, part_index, vertex_index)] = coord
    return vertices
