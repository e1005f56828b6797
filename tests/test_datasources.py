import json

import pytest
from shapely.geometry import box, mapping

from mpa_connectivity import datasources as ds_mod
from mpa_connectivity.datasources import Datasources, fetch_json


def _write(path, data):
    path.write_text(json.dumps(data))
    return path


def test_fetch_json_local(tmp_path):
    path = _write(tmp_path / "doc.json", {"a": 1})
    assert fetch_json(path) == {"a": 1}
    assert fetch_json(str(path)) == {"a": 1}


def test_fetch_json_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        fetch_json(tmp_path / "nope.json")


def test_fetch_json_url(monkeypatch):
    calls = []

    class FakeResponse:
        def raise_for_status(self):
            pass

        def json(self):
            return {"type": "FeatureCollection", "features": []}

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return FakeResponse()

    monkeypatch.setattr(ds_mod.requests, "get", fake_get)
    assert fetch_json("https://example.org/land.json")["type"] == "FeatureCollection"
    assert calls == [("https://example.org/land.json", (30, None))]


def test_lazy_loading_once(tmp_path, network):
    graph, land = network
    graph_path = tmp_path / "network.json"
    graph.save(graph_path)
    land_path = _write(tmp_path / "land.json", land.to_geojson())
    ports_path = _write(
        tmp_path / "ports.json",
        {
            "type": "FeatureCollection",
            "features": [
                {"type": "Feature", "properties": {"PORT_NAME": "Harbour"}, "geometry": {"type": "Point", "coordinates": [1.5, 0.5]}}
            ],
        },
    )
    coast_path = _write(
        tmp_path / "coast.json",
        {"type": "FeatureCollection", "features": [{"type": "Feature", "properties": {}, "geometry": mapping(box(0, 0, 1, 1))}]},
    )

    ds = Datasources(graph=graph_path, land=land_path, ports=ports_path, coast=coast_path)
    assert ds.graph.edge_count() == graph.edge_count()
    assert ds.graph is ds.graph
    assert len(ds.land) == 1
    assert [p.name for p in ds.ports] == ["Harbour"]
    assert len(ds.coast) == 1


def test_from_objects_skips_files(network):
    graph, land = network
    ds = Datasources.from_objects(graph=graph, land=land)
    assert ds.graph is graph
    assert ds.land is land
