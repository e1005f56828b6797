"""Over-water distance from each sketch to its closest port."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import geopandas as gpd
import networkx as nx
import pandas as pd
from loguru import logger

from . import config
from .datasources import Datasources, default_datasources
from .errors import InvalidInputError, NoPathError
from .extension import add_ports, add_sketches, query_land
from .pathfinding import PathResult, shortest_path
from .sketches import prepare_sketch, to_sketch_array

NM_TO_KM = 1.852

# Fuel efficiency → km per litre
_EFFICIENCY_UNITS = {
    "km/L": lambda v: v,
    "L/km": lambda v: 1.0 / v,
    "L/nm": lambda v: NM_TO_KM / v,
    "nm/L": lambda v: v * NM_TO_KM,
}


@dataclass(frozen=True)
class PortDistance:
    sketch_id: str
    sketch_name: str
    port: str
    path: PathResult

    @property
    def distance_km(self) -> float:
        return self.path.distance_km


def distance_to_port(
    sketch: Dict[str, Any],
    datasources: Optional[Datasources] = None,
    *,
    slack_km: float = config.SLACK_KM,
    tolerance: float = config.SIMPLIFY_TOLERANCE_DEG,
    filter_land: bool = True,
) -> List[PortDistance]:
    """Closest port (by over-water path length) for every sketch.

    A sketch that reaches no port raises ``NoPathError``.
    """
    ds = datasources if datasources is not None else default_datasources()
    ports = ds.ports
    if not ports:
        raise InvalidInputError("No ports available")

    sketches = [prepare_sketch(s, tolerance) for s in to_sketch_array(sketch)]
    land = query_land(ds.land, sketches, ports) if filter_land else ds.land

    with_sketches = add_sketches(ds.graph, sketches, land, slack_km=slack_km)
    with_ports = add_ports(with_sketches.graph, ports, land, slack_km=slack_km)

    port_by_node = {ids[0]: name for name, ids in with_ports.owner_nodes.items()}
    port_nodes = list(port_by_node)

    results: List[PortDistance] = []
    for sk in sketches:
        logger.info(f"Finding shortest path from {sk.name} to {len(port_nodes)} ports")
        _log_unreachable_ports(with_ports.graph.nx, with_sketches.owner_nodes[sk.id], port_by_node, sk.name)
        try:
            result = shortest_path(
                with_ports.graph,
                with_sketches.owner_nodes[sk.id],
                port_nodes,
                source_name=sk.name,
                target_name="any port",
            )
        except NoPathError:
            logger.error(f"No port reachable from {sk.name}")
            raise
        port = port_by_node[result.nodes[-1]]
        logger.info(f"Shortest distance: {result.distance_km:.1f} km to {port}")
        results.append(PortDistance(sk.id, sk.name, port, result))
    return results


def _log_unreachable_ports(
    graph: nx.Graph, source_nodes: Sequence[str], port_by_node: Dict[str, str], sketch_name: str
) -> None:
    reachable: set = set()
    for node_id in source_nodes:
        if node_id in graph and node_id not in reachable:
            reachable |= nx.node_connected_component(graph, node_id)
    for node_id, port in port_by_node.items():
        if node_id not in reachable:
            logger.warning(f"Port {port} is unreachable from {sketch_name} – skipped")


def furthest(results: Sequence[PortDistance]) -> Optional[PortDistance]:
    """Sketch lying furthest from its closest port."""
    if not results:
        return None
    return max(results, key=lambda r: r.distance_km)


def to_dataframe(results: Sequence[PortDistance]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"sketch_id": r.sketch_id, "sketch_name": r.sketch_name, "port": r.port, "distance_km": r.distance_km}
            for r in results
        ],
        columns=["sketch_id", "sketch_name", "port", "distance_km"],
    )


def to_geodataframe(results: Sequence[PortDistance]) -> gpd.GeoDataFrame:
    return gpd.GeoDataFrame(
        to_dataframe(results),
        geometry=[r.path.to_linestring() for r in results],
        crs="EPSG:4326",
    )


def fuel_cost(
    distance_km: float,
    efficiency: float = 1.5,
    unit: str = "km/L",
    price_per_litre: float = 2.31,
) -> Tuple[float, float]:
    """One-way and round-trip fuel cost for a trip of *distance_km*.

    Returns ``(nan, nan)`` for a non-positive efficiency.
    """
    if unit not in _EFFICIENCY_UNITS:
        raise ValueError(f"Unknown efficiency unit {unit!r}")
    if efficiency <= 0:
        return (float("nan"), float("nan"))
    km_per_litre = _EFFICIENCY_UNITS[unit](efficiency)
    one_way = distance_km / km_per_litre * price_per_litre
    return (one_way, one_way * 2)
