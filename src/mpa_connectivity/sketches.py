"""Sketch and port inputs (GeoJSON-like dicts → typed records)."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, List

from shapely.geometry import Point, mapping, shape
from shapely.geometry.base import BaseGeometry

from . import config
from .antimeridian import normalize_geometry, polygon_parts
from .errors import InvalidInputError
from .nodes import Coord


@dataclass(frozen=True)
class Sketch:
    id: str
    name: str
    geometry: BaseGeometry

    def to_feature(self) -> Dict[str, Any]:
        return {
            "type": "Feature",
            "properties": {"id": self.id, "name": self.name},
            "geometry": mapping(self.geometry),
        }


@dataclass(frozen=True)
class Port:
    name: str
    coord: Coord


def is_collection(geojson: Dict[str, Any]) -> bool:
    return geojson.get("type") == "FeatureCollection"


def _sketch_from_feature(feature: Dict[str, Any], index: int) -> Sketch:
    if feature.get("type") != "Feature" or not feature.get("geometry"):
        raise InvalidInputError(f"Sketch {index} is not a GeoJSON feature with geometry")
    geom = shape(feature["geometry"])
    if geom.geom_type not in ("Polygon", "MultiPolygon"):
        raise InvalidInputError(f"Sketch {index} has unsupported geometry {geom.geom_type}")
    props = feature.get("properties") or {}
    sketch_id = str(props.get("id", feature.get("id", index)))
    return Sketch(id=sketch_id, name=str(props.get("name", sketch_id)), geometry=geom)


def to_sketch_array(geojson: Dict[str, Any]) -> List[Sketch]:
    """Return the member sketches of a sketch (Feature) or collection."""
    if not is_collection(geojson):
        return [_sketch_from_feature(geojson, 0)]

    sketches = [_sketch_from_feature(f, i) for i, f in enumerate(geojson.get("features", []))]
    seen = set()
    for sketch in sketches:
        # node ownership and MST vertices are keyed by sketch id
        if sketch.id in seen:
            raise InvalidInputError(f"Duplicate sketch id {sketch.id!r} in collection")
        seen.add(sketch.id)
    return sketches


def prepare_sketch(sketch: Sketch, tolerance: float = config.SIMPLIFY_TOLERANCE_DEG) -> Sketch:
    """Normalise into the graph frame, then simplify to bound vertex count."""
    geom = normalize_geometry(sketch.geometry)
    simplified = geom.simplify(tolerance, preserve_topology=True)
    if not polygon_parts(simplified):
        raise InvalidInputError(f"Sketch {sketch.name} is empty after simplification")
    return replace(sketch, geometry=simplified)


def load_ports(geojson: Dict[str, Any]) -> List[Port]:
    """Read named Point features (``PORT_NAME`` or ``name`` property)."""
    ports: List[Port] = []
    for i, f in enumerate(geojson.get("features", [])):
        geom = shape(f["geometry"]) if f.get("geometry") else None
        if not isinstance(geom, Point):
            raise InvalidInputError(f"Port feature {i} is not a Point")
        props = f.get("properties") or {}
        name = props.get("PORT_NAME") or props.get("name")
        if not name:
            raise InvalidInputError(f"Port feature {i} has no name")
        if any(p.name == str(name) for p in ports):
            raise InvalidInputError(f"Duplicate port name {name!r}")
        frame = normalize_geometry(geom)
        ports.append(Port(name=str(name), coord=(frame.x, frame.y)))
    return ports
