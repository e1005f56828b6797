"""Over-water connectivity between the member sketches of a collection.

Only the edges of the minimum spanning tree over sketch centroids are resolved
into shortest paths, so N sketches cost N−1 path queries instead of
N(N−1)/2. This connects every sketch into one network at minimal
as-the-crow-flies cost; it does not report the optimum for every pair.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import geopandas as gpd
import pandas as pd
from loguru import logger

from . import config
from .datasources import Datasources, default_datasources
from .extension import add_sketches, query_land
from .pathfinding import PathResult, centroid_mst, shortest_path
from .sketches import Sketch, is_collection, prepare_sketch, to_sketch_array

PATH_COLUMNS = ["source_id", "source_name", "target_id", "target_name", "distance_km"]


@dataclass(frozen=True)
class ConnectionPath:
    source_id: str
    source_name: str
    target_id: str
    target_name: str
    path: PathResult

    @property
    def distance_km(self) -> float:
        return self.path.distance_km


@dataclass(frozen=True)
class ConnectivityResult:
    sketches: List[Sketch]
    paths: List[ConnectionPath] = field(default_factory=list)

    def to_dataframe(self) -> pd.DataFrame:
        rows = [
            {
                "source_id": p.source_id,
                "source_name": p.source_name,
                "target_id": p.target_id,
                "target_name": p.target_name,
                "distance_km": p.distance_km,
            }
            for p in self.paths
        ]
        return pd.DataFrame(rows, columns=PATH_COLUMNS)

    def to_geodataframe(self) -> gpd.GeoDataFrame:
        return gpd.GeoDataFrame(
            self.to_dataframe(),
            geometry=[p.path.to_linestring() for p in self.paths],
            crs="EPSG:4326",
        )

    def summary(self) -> Dict[str, float]:
        """Count and min/mean/max path length (km)."""
        df = self.to_dataframe()
        if df.empty:
            return {"count": 0, "min_km": float("nan"), "mean_km": float("nan"), "max_km": float("nan")}
        return {
            "count": int(len(df)),
            "min_km": float(df.distance_km.min()),
            "mean_km": float(df.distance_km.mean()),
            "max_km": float(df.distance_km.max()),
        }


def connectivity(
    sketch: Dict[str, Any],
    datasources: Optional[Datasources] = None,
    *,
    slack_km: float = config.SLACK_KM,
    tolerance: float = config.SIMPLIFY_TOLERANCE_DEG,
    filter_land: bool = True,
) -> ConnectivityResult:
    """Shortest over-water paths along the centroid MST of a sketch collection.

    A single sketch has nothing to connect to and returns no paths.
    Raises ``InvalidInputError`` / ``NoPathError`` (see ``errors``).
    """
    ds = datasources if datasources is not None else default_datasources()
    sketches = [prepare_sketch(s, tolerance) for s in to_sketch_array(sketch)]
    if not is_collection(sketch) or len(sketches) < 2:
        return ConnectivityResult(sketches=sketches)

    land = query_land(ds.land, sketches) if filter_land else ds.land
    extended = add_sketches(ds.graph, sketches, land, slack_km=slack_km)

    paths: List[ConnectionPath] = []
    for source, target in centroid_mst(sketches):
        result = shortest_path(
            extended.graph,
            extended.owner_nodes[source.id],
            extended.owner_nodes[target.id],
            source_name=source.name,
            target_name=target.name,
        )
        logger.debug(f"{source.name} → {target.name}: {result.distance_km:.1f} km")
        paths.append(ConnectionPath(source.id, source.name, target.id, target.name, result))

    logger.success(f"Resolved {len(paths)} connections across {len(sketches)} sketches")
    return ConnectivityResult(sketches=sketches, paths=paths)
