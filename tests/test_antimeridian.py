import math

import pytest
from shapely.geometry import Point, Polygon, box
from shapely.ops import unary_union

from mpa_connectivity import antimeridian as am
from mpa_connectivity.errors import InvalidInputError

CROSSING = Polygon([(170, -10), (-170, -10), (-170, 10), (170, 10)])


def test_clean_longitude_wraps():
    assert am.clean_longitude(190) == -170
    assert am.clean_longitude(-190) == 170
    assert am.clean_longitude(45.5) == 45.5
    assert am.clean_longitude(180) == 180


def test_clean_longitude_negative_zero():
    out = am.clean_longitude(-0.0)
    assert out == 0.0
    assert math.copysign(1, out) == 1


def test_clean_latitude_wraps():
    assert am.clean_latitude(95) == -85
    assert am.clean_latitude(-45) == -45


def test_clean_longitude_requires_value():
    with pytest.raises(InvalidInputError):
        am.clean_longitude(None)


def test_clean_coords_feature_collection():
    fc = {
        "type": "FeatureCollection",
        "properties": {"name": "network"},
        "features": [
            {"type": "Feature", "properties": {"id": "a"}, "geometry": {"type": "Point", "coordinates": [190, 10]}}
        ],
    }
    out = am.clean_coords(fc)
    assert out["properties"] == {"name": "network"}
    assert out["features"][0]["geometry"]["coordinates"] == [-170, 10]
    # input untouched
    assert fc["features"][0]["geometry"]["coordinates"] == [190, 10]


def test_clean_coords_rejects_unknown_geometry():
    with pytest.raises(InvalidInputError):
        am.clean_coords({"type": "GeometryCollection", "geometries": []})


def test_clean_bbox():
    assert am.clean_bbox([190, -10, 200, 10]) == [-170, -10, -160, 10]


def test_clean_coords_feature_bbox():
    feature = {"type": "Feature", "properties": {}, "bbox": [190, 0, 191, 1], "geometry": {"type": "Point", "coordinates": [190.5, 0.5]}}
    assert am.clean_coords(feature)["bbox"] == [-170, 0, -169, 1]


def test_crosses_antimeridian():
    assert am.crosses_antimeridian(CROSSING)
    assert not am.crosses_antimeridian(box(10, 10, 20, 20))


def test_split_polygon_keeps_area():
    split = am.split_polygon_antimeridian(CROSSING)
    parts = am.polygon_parts(split)
    assert len(parts) == 2
    assert sum(p.area for p in parts) == pytest.approx(400.0)
    for p in parts:
        minx, _, maxx, _ = p.bounds
        assert -180 <= minx and maxx <= 180
        assert minx >= 0 or maxx <= 0


def test_split_polygon_passthrough():
    poly = box(10, 10, 20, 20)
    assert am.split_polygon_antimeridian(poly).equals(poly)


def test_normalize_longitude():
    assert am.normalize_longitude(-170) == 190
    assert am.normalize_longitude(-150) == -150


def test_normalize_geometry_is_continuous():
    frame = am.normalize_geometry(CROSSING)
    minx, miny, maxx, maxy = frame.bounds
    assert minx == pytest.approx(170)
    assert maxx == pytest.approx(190)
    assert frame.area == pytest.approx(400.0)


def test_normalize_geometry_point():
    assert am.normalize_geometry(Point(-175, 5)).x == pytest.approx(185)
    assert am.normalize_geometry(Point(10, 5)).x == pytest.approx(10)


def test_split_parts_reconstruct_unwrapped_ring():
    unwrapped = am.unwrap_polygon(CROSSING)
    assert unwrapped.bounds == pytest.approx((170, -10, 190, 10))
    rejoined = unary_union(am.polygon_parts(am.normalize_geometry(CROSSING)))
    assert rejoined.symmetric_difference(unwrapped).area == pytest.approx(0.0, abs=1e-9)
