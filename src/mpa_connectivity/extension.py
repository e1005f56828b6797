"""Request-scoped extension of the base graph with sketch and port nodes.

Both entry points return a *new* graph; the base graph passed in is never
mutated, so concurrent requests can share one loaded base graph.

Pair rule: two nodes are joined when the straight segment between them is
clear of land, or when they are closer than ``slack_km`` (land-mask
imprecision would otherwise block near-touching sketches). Nodes of the same
sketch/port are never joined and no node is joined to itself.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from loguru import logger
from shapely.geometry import MultiPoint
from shapely.geometry.base import BaseGeometry

from . import config
from .geodesy import distance_km
from .graph import NavGraph
from .errors import InvalidInputError
from .land import LandMask, extract_exterior_vertices, is_line_clear
from .nodes import Coord, Node, PortNode, SketchNode, port_node_id, same_owner
from .sketches import Port, Sketch

Edge = Tuple[str, str, float]


@dataclass(frozen=True)
class ExtendedGraph:
    graph: NavGraph
    # sketch id / port name → node ids contributed to the graph
    owner_nodes: Dict[str, List[str]] = field(default_factory=dict)


def connectable(
    a: Coord, b: Coord, land: LandMask, slack_km: float = config.SLACK_KM
) -> Optional[float]:
    """Edge weight (km) when *a* and *b* may be joined, else ``None``."""
    dist = distance_km(a, b)
    if dist < slack_km or is_line_clear(a, b, land):
        return dist
    return None


def query_bounds(
    sketches: Sequence[Sketch], ports: Sequence[Port] = ()
) -> Optional[Tuple[float, float, float, float]]:
    """Combined bbox of the query set in the graph frame."""
    geoms: List[BaseGeometry] = [s.geometry for s in sketches]
    if ports:
        geoms.append(MultiPoint([p.coord for p in ports]))
    if not geoms:
        return None
    xs0, ys0, xs1, ys1 = zip(*(g.bounds for g in geoms))
    return (min(xs0), min(ys0), max(xs1), max(ys1))


def query_land(land: LandMask, sketches: Sequence[Sketch], ports: Sequence[Port] = ()) -> LandMask:
    """Restrict *land* to polygons whose bbox meets the query bbox.

    Land lying wholly outside that bbox is ignored, even when a path leaves
    the bbox to get around it.
    """
    bounds = query_bounds(sketches, ports)
    if bounds is None:
        return land
    subset = land.subset_for_bounds(bounds)
    logger.debug(f"Land mask filtered to query bbox → {len(subset)}/{len(land)} polygons")
    return subset


def _connect(
    new_nodes: Sequence[Node],
    candidates: Iterable[Node],
    land: LandMask,
    slack_km: float,
) -> List[Edge]:
    candidates = list(candidates)
    edges: List[Edge] = []
    for a in new_nodes:
        for b in candidates:
            if a.id == b.id or same_owner(a, b):
                continue
            dist = connectable(a.coord, b.coord, land, slack_km)
            if dist is not None:
                edges.append((a.id, b.id, dist))
    return edges


def add_sketches(
    graph: NavGraph,
    sketches: Sequence[Sketch],
    land: LandMask,
    *,
    slack_km: float = config.SLACK_KM,
    connect_sketches: bool = True,
) -> ExtendedGraph:
    """Inject exterior-ring vertices of prepared *sketches* into a copy of *graph*.

    With ``connect_sketches=False`` sketches only reach each other through
    the base graph.
    """
    out = graph.copy()
    existing = list(graph.nodes_with_coords())

    sketch_nodes: Dict[str, List[str]] = {}
    new_nodes: List[Node] = []
    for sketch_index, sketch in enumerate(sketches):
        vertices = extract_exterior_vertices(sketch.geometry, sketch_index)
        sketch_nodes[sketch.id] = list(vertices)
        if not vertices:
            logger.warning(f"Sketch {sketch.name} contributed no nodes")
        for node_id, coord in vertices.items():
            node = SketchNode(id=node_id, coord=coord, owner=sketch.id)
            new_nodes.append(node)
            out.add_node(node)

    # First, connect sketches directly
    direct: List[Edge] = []
    for i, a in enumerate(new_nodes if connect_sketches else ()):
        direct.extend(_connect([a], new_nodes[i + 1:], land, slack_km))
    logger.info(f"Directly connected sketches with {len(direct)} edges")

    # Then, connect with wider graph
    wider = _connect(new_nodes, existing, land, slack_km)
    out.add_edges(direct)
    out.add_edges(wider)
    logger.info(f"Connected sketches to graph with {len(direct) + len(wider)} edges total")

    return ExtendedGraph(graph=out, owner_nodes=sketch_nodes)


def add_ports(
    graph: NavGraph,
    ports: Sequence[Port],
    land: LandMask,
    *,
    slack_km: float = config.SLACK_KM,
) -> ExtendedGraph:
    """Inject each port as a single node into a copy of *graph*."""
    names = [p.name for p in ports]
    if len(set(names)) != len(names):
        raise InvalidInputError("Port names must be unique")
    out = graph.copy()
    existing = list(graph.nodes_with_coords())

    port_nodes: Dict[str, List[str]] = {}
    new_nodes: List[Node] = []
    for port in ports:
        node = PortNode(id=port_node_id(port.name), coord=port.coord, owner=port.name)
        port_nodes[port.name] = [node.id]
        new_nodes.append(node)
        out.add_node(node)

    edges: List[Edge] = []
    for i, a in enumerate(new_nodes):
        edges.extend(_connect([a], new_nodes[i + 1:], land, slack_km))
    edges.extend(_connect(new_nodes, existing, land, slack_km))
    out.add_edges(edges)
    logger.info(f"Connected {len(new_nodes)} ports to graph with {len(edges)} edges")

    return ExtendedGraph(graph=out, owner_nodes=port_nodes)
