"""Reference datasets consumed at request time.

A :class:`Datasources` instance is an explicit, lazily-initialised handle: each
dataset is fetched (local path or http(s) URL) on first use and then reused
for the lifetime of the instance. Tests build one from in-memory objects with
:meth:`Datasources.from_objects` instead of touching persisted data.
"""
from __future__ import annotations

import json
from functools import cached_property, lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import requests
from loguru import logger

from . import config
from .antimeridian import normalize_geometry
from .graph import NavGraph
from .land import LandMask
from .sketches import Port, load_ports

Location = Union[str, Path]


def _is_url(location: Location) -> bool:
    return isinstance(location, str) and location.startswith(("http://", "https://"))


def fetch_json(location: Location) -> Dict[str, Any]:
    """Read a JSON document from a local path or an http(s) URL."""
    if _is_url(location):
        logger.info(f"Fetching {location} …")
        # Separate connect/read timeouts: 30 s connect, unlimited read
        r = requests.get(str(location), timeout=(30, None))
        r.raise_for_status()
        return r.json()

    path = Path(location)
    if not path.exists():
        raise FileNotFoundError(f"Expected datasource {path} not found – run build-graph first?")
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


class Datasources:
    def __init__(
        self,
        graph: Location = config.NETWORK_JSON,
        land: Location = config.LAND_SHRUNK_GEOJSON,
        ports: Location = config.PORTS_GEOJSON,
        coast: Location = config.COAST_GEOJSON,
    ):
        self.locations = {"graph": graph, "land": land, "ports": ports, "coast": coast}

    @classmethod
    def from_objects(
        cls,
        *,
        graph: Optional[NavGraph] = None,
        land: Optional[LandMask] = None,
        ports: Optional[List[Port]] = None,
        coast: Optional[LandMask] = None,
    ) -> "Datasources":
        ds = cls()
        # cached_property reads the instance __dict__ first
        for name, value in (("graph", graph), ("land", land), ("ports", ports), ("coast", coast)):
            if value is not None:
                ds.__dict__[name] = value
        return ds

    @cached_property
    def graph(self) -> NavGraph:
        """Persisted base graph (read-only; copy before extending)."""
        graph = NavGraph.from_json(fetch_json(self.locations["graph"]))
        logger.success(f"Loaded base graph → {graph.node_count()} nodes, {graph.edge_count()} edges")
        return graph

    @cached_property
    def land(self) -> LandMask:
        """Shrunk land mask written by the offline builder."""
        land = LandMask.from_geojson(fetch_json(self.locations["land"]))
        logger.success(f"Loaded land mask → {len(land)} polygons")
        return land

    @cached_property
    def ports(self) -> List[Port]:
        return load_ports(fetch_json(self.locations["ports"]))

    @cached_property
    def coast(self) -> LandMask:
        """Unshrunk coastline, used by the distance-to-shore report."""
        raw = LandMask.from_geojson(fetch_json(self.locations["coast"]))
        return LandMask(normalize_geometry(g) for g in raw)


@lru_cache(maxsize=1)
def default_datasources() -> Datasources:
    """Process-wide handle over the configured reference files."""
    return Datasources()
