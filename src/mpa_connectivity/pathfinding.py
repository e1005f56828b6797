"""Shortest paths over the navigability graph and the sketch-centroid MST."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import networkx as nx
from loguru import logger
from shapely.geometry import LineString, mapping

from .errors import InvalidInputError, NoPathError
from .geodesy import distance_km
from .graph import NavGraph
from .nodes import Coord
from .sketches import Sketch


@dataclass(frozen=True)
class PathResult:
    nodes: Tuple[str, ...]
    coords: Tuple[Coord, ...]
    distance_km: float

    def to_linestring(self) -> LineString:
        coords = list(self.coords)
        if len(coords) == 1:
            coords = coords * 2  # single-node path (touching sketches)
        return LineString(coords)

    def to_feature(self, **properties: Any) -> Dict[str, Any]:
        return {
            "type": "Feature",
            "properties": {"distance": self.distance_km, **properties},
            "geometry": mapping(self.to_linestring()),
        }


def _usable(graph: NavGraph, node_ids: Sequence[str]) -> List[str]:
    usable = []
    for node_id in node_ids:
        if graph.node(node_id) is None:
            logger.warning(f"Node {node_id} is missing or has no coordinates – skipped")
            continue
        usable.append(node_id)
    return usable


def shortest_path(
    graph: NavGraph,
    source_nodes: Sequence[str],
    target_nodes: Sequence[str],
    *,
    source_name: str = "source",
    target_name: str = "target",
) -> PathResult:
    """Minimum-distance path from any source node to any target node.

    Dijkstra runs from every source node in turn, since the closest vertex of a
    polygon is not known in advance. Ties keep the first minimum found
    (source order, then target order).
    """
    if not source_nodes or not target_nodes:
        raise InvalidInputError(
            f"No valid nodes found within one or both of {source_name} and {target_name}"
        )

    sources = _usable(graph, source_nodes)
    targets = _usable(graph, target_nodes)
    target_set = set(targets)

    best: Optional[Tuple[float, List[str]]] = None
    for source in sources:
        if source in target_set:
            # touching geometries share a node
            best = (0.0, [source])
            break

        cutoff = best[0] if best is not None else None
        dist, paths = nx.single_source_dijkstra(graph.nx, source, cutoff=cutoff, weight="weight")
        for target in targets:
            d = dist.get(target)
            if d is None:
                continue
            if best is None or d < best[0]:
                best = (float(d), paths[target])

    if best is None:
        raise NoPathError(source_name, target_name)

    total, path = best
    coords = []
    for node_id in path:
        node = graph.node(node_id)
        if node is None:
            logger.warning(f"Path node {node_id} has no coordinates – left out of the line")
            continue
        coords.append(node.coord)
    return PathResult(nodes=tuple(path), coords=tuple(coords), distance_km=total)


def centroid_mst(sketches: Sequence[Sketch]) -> List[Tuple[Sketch, Sketch]]:
    """Sketch pairs on the minimum spanning tree of centroid distances (Prim).

    N sketches give exactly N−1 pairs, returned in input order.
    """
    if len(sketches) < 2:
        return []

    centroids = {s.id: s.geometry.centroid for s in sketches}
    mst_graph = nx.Graph()
    for sketch in sketches:
        mst_graph.add_node(sketch.id)
    for i, a in enumerate(sketches):
        ca = centroids[a.id]
        for b in sketches[i + 1:]:
            cb = centroids[b.id]
            mst_graph.add_edge(a.id, b.id, weight=distance_km((ca.x, ca.y), (cb.x, cb.y)))

    mst = nx.minimum_spanning_tree(mst_graph, weight="weight", algorithm="prim")

    order = {s.id: i for i, s in enumerate(sketches)}
    by_id = {s.id: s for s in sketches}
    pairs = [tuple(sorted((u, v), key=order.__getitem__)) for u, v in mst.edges()]
    pairs.sort(key=lambda p: (order[p[0]], order[p[1]]))
    return [(by_id[u], by_id[v]) for u, v in pairs]
