"""Offline builder for the base navigability graph.

Run through the CLI::

    mpa-connectivity build-graph --coast data/reference/land.01.1000000.json

Inputs:
    • coastline polygons (any format geopandas can read)

Outputs:
    • data/bin/landShrunk.01.json  – land mask, coastline buffered inward
    • data/bin/network.01.json     – coastline vertices + clear-water edges

Edge construction is O(V²) in coastline vertices and can run for hours on a
global coastline; it is a batch job, never a request-time step. A failed run
is simply restarted, nothing is checkpointed.
"""
from __future__ import annotations

import time
from pathlib import Path
from typing import List, Sequence, Tuple

from loguru import logger

from . import config
from .antimeridian import normalize_geometry
from .geodesy import distance_km
from .graph import NavGraph
from .land import LandMask, extract_vertices, is_line_clear
from .nodes import CoastlineNode, Node

Edge = Tuple[str, str, float]


def normalize_coast(coast: LandMask) -> LandMask:
    """Move every coastline polygon into the graph frame."""
    logger.info("Normalizing coast data …")
    return LandMask(normalize_geometry(g) for g in coast)


def create_graph(coast: LandMask) -> NavGraph:
    """One node per ring vertex of every coastline feature, no edges yet."""
    graph = NavGraph()
    for feature_index, geom in enumerate(coast):
        owner = f"coast_{feature_index}"
        for node_id, coord in extract_vertices(geom, feature_index).items():
            graph.add_node(CoastlineNode(id=node_id, coord=coord, owner=owner))
    logger.success(f"Coastline graph → {graph.node_count()} nodes")
    return graph


def _edges_for_node(node: Node, others: Sequence[Node], land: LandMask) -> List[Edge]:
    """Clear-water edges from *node* to each of *others*; independent of other nodes."""
    edges: List[Edge] = []
    for other in others:
        if is_line_clear(node.coord, other.coord, land):
            edges.append((node.id, other.id, distance_km(node.coord, other.coord)))
    return edges


def add_ocean_edges(
    graph: NavGraph,
    land: LandMask,
    *,
    progress_every: int = config.PROGRESS_EVERY,
) -> NavGraph:
    """Return a copy of *graph* with an edge for every mutually visible node pair."""
    t0 = time.monotonic()
    nodes = list(graph.nodes_with_coords())
    n = len(nodes)
    logger.info(f"Adding edges for {n} nodes – about {n * (n - 1) // 2} candidate pairs")

    out = graph.copy()
    for i, node in enumerate(nodes):
        out.add_edges(_edges_for_node(node, nodes[i + 1:], land))
        remaining = n - i - 1
        if progress_every and remaining % progress_every == 0:
            logger.info(f"Remaining nodes: {remaining}")

    minutes = (time.monotonic() - t0) / 60.0
    logger.success(f"It took {minutes:.2f} minutes to load {out.edge_count()} edges")
    return out


def build_network(
    coast: LandMask,
    *,
    margin_deg: float = config.LAND_SHRINK_DEG,
    progress_every: int = config.PROGRESS_EVERY,
) -> Tuple[NavGraph, LandMask]:
    """Build ``(base graph, shrunk land mask)`` from raw coastline polygons."""
    coast = normalize_coast(coast)
    land = coast.shrink(margin_deg)
    graph = create_graph(coast)
    graph = add_ocean_edges(graph, land, progress_every=progress_every)
    return graph, land


def run(
    coast_path: Path = config.COAST_GEOJSON,
    graph_out: Path = config.NETWORK_JSON,
    land_out: Path = config.LAND_SHRUNK_GEOJSON,
    *,
    margin_deg: float = config.LAND_SHRINK_DEG,
    progress_every: int = config.PROGRESS_EVERY,
) -> NavGraph:
    logger.info("=== BUILD NAVIGABILITY GRAPH ===")
    if not Path(coast_path).exists():
        raise FileNotFoundError(f"Coastline file {coast_path} not found")

    coast = LandMask.from_file(coast_path)
    logger.success(f"Loaded {len(coast)} coastline polygons → {coast_path}")

    graph, land = build_network(coast, margin_deg=margin_deg, progress_every=progress_every)
    land.save(Path(land_out))
    logger.success(f"Shrunk land written → {land_out}")
    graph.save(Path(graph_out))
    return graph
