import pytest

from mpa_connectivity.errors import MissingNodeDataError
from mpa_connectivity.graph import NavGraph
from mpa_connectivity.nodes import CoastlineNode, PortNode, SketchNode, same_owner


def _small_graph():
    g = NavGraph()
    g.add_node(CoastlineNode("node_0_0_0", (0.0, 0.0), "coast_0"))
    g.add_node(SketchNode("polynode_0_0_0", (1.0, 0.0), "A"))
    g.add_node(PortNode("port_Harbour", (2.0, 0.0), "Harbour"))
    g.add_edges([("node_0_0_0", "polynode_0_0_0", 111.3), ("polynode_0_0_0", "port_Harbour", 111.3)])
    return g


def test_edges_are_symmetric():
    g = _small_graph()
    assert g.has_edge("node_0_0_0", "polynode_0_0_0")
    assert g.has_edge("polynode_0_0_0", "node_0_0_0")
    assert g.weight("polynode_0_0_0", "node_0_0_0") == g.weight("node_0_0_0", "polynode_0_0_0")


def test_no_self_loops():
    g = _small_graph()
    g.add_edge("node_0_0_0", "node_0_0_0", 0.0)
    assert not g.has_edge("node_0_0_0", "node_0_0_0")


def test_typed_nodes():
    g = _small_graph()
    assert isinstance(g.node("polynode_0_0_0"), SketchNode)
    assert isinstance(g.node("port_Harbour"), PortNode)
    assert g.node("unknown") is None


def test_copy_does_not_touch_original():
    g = _small_graph()
    c = g.copy()
    c.add_node(CoastlineNode("node_0_0_1", (3.0, 0.0), "coast_0"))
    assert "node_0_0_1" in c
    assert "node_0_0_1" not in g


def test_missing_coordinates():
    g = _small_graph()
    g.nx.add_node("broken")
    assert g.node("broken") is None
    assert "broken" not in {n.id for n in g.nodes_with_coords()}
    with pytest.raises(MissingNodeDataError) as excinfo:
        g.coord("broken")
    assert "broken" in str(excinfo.value)


def test_json_round_trip(tmp_path):
    g = _small_graph()
    path = tmp_path / "network.json"
    g.save(path)
    again = NavGraph.load(path)
    assert again.node_count() == 3
    assert again.edge_count() == 2
    assert again.coord("port_Harbour") == (2.0, 0.0)
    assert again.node("polynode_0_0_0") == g.node("polynode_0_0_0")


def test_same_owner():
    a = SketchNode("polynode_0_0_0", (0.0, 0.0), "A")
    b = SketchNode("polynode_0_0_1", (1.0, 0.0), "A")
    c = SketchNode("polynode_1_0_0", (1.0, 0.0), "B")
    port = PortNode("port_A", (1.0, 0.0), "A")
    assert same_owner(a, b)
    assert not same_owner(a, c)
    assert not same_owner(a, port)
