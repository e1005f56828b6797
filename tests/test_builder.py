import json

from shapely.geometry import box, mapping

from mpa_connectivity import builder
from mpa_connectivity.graph import NavGraph
from mpa_connectivity.land import LandMask, is_line_clear


def test_island_graph(network):
    graph, land = network
    # four corners, joined only along the shore; diagonals cross the island
    assert graph.node_count() == 4
    assert graph.edge_count() == 4
    assert graph.has_edge("node_0_0_0", "node_0_0_1")
    assert len(land) == 1


def test_edges_are_symmetric(network):
    graph, _ = network
    for u, v, w in graph.edges():
        assert graph.weight(v, u) == w
        assert w > 0


def test_no_edge_crosses_land(network):
    graph, land = network
    for u, v, _ in graph.edges():
        assert is_line_clear(graph.coord(u), graph.coord(v), land)


def test_two_islands_connect_across_water():
    coast = LandMask([box(0, 0, 1, 1), box(2, 0, 3, 1)])
    graph, _ = builder.build_network(coast, progress_every=0)
    assert graph.node_count() == 8
    owners = {graph.node(u).owner for u, v, _ in graph.edges()} | {graph.node(v).owner for u, v, _ in graph.edges()}
    assert owners == {"coast_0", "coast_1"}
    assert any(graph.node(u).owner != graph.node(v).owner for u, v, _ in graph.edges())


def test_run_writes_outputs(tmp_path):
    coast_path = tmp_path / "coast.json"
    coast_path.write_text(
        json.dumps(
            {
                "type": "FeatureCollection",
                "features": [{"type": "Feature", "properties": {}, "geometry": mapping(box(0, 0, 1, 1))}],
            }
        )
    )
    graph_out = tmp_path / "bin" / "network.json"
    land_out = tmp_path / "bin" / "landShrunk.json"

    graph = builder.run(coast_path, graph_out, land_out, progress_every=0)

    assert graph_out.exists() and land_out.exists()
    assert NavGraph.load(graph_out).edge_count() == graph.edge_count()
    with land_out.open() as f:
        assert len(LandMask.from_geojson(json.load(f))) == 1


def test_progress_is_logged(coast, log_messages):
    builder.build_network(coast, progress_every=2)
    remaining = [m for m in log_messages if m.startswith("Remaining nodes:")]
    assert remaining == ["Remaining nodes: 2", "Remaining nodes: 0"]
    assert any("candidate pairs" in m for m in log_messages)
    assert any(m.startswith("It took") for m in log_messages)
