"""Navigability graph handle.

A thin wrapper over an undirected :class:`networkx.Graph` whose nodes carry a
typed payload (see ``nodes``) and whose edges carry ``weight`` in kilometres.
Undirected storage makes every edge symmetric by construction.

The handle has value semantics: request-time code calls :meth:`NavGraph.copy`
(or an extension function that does) and never mutates the base graph loaded
from disk.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

import networkx as nx
from loguru import logger

from .errors import MissingNodeDataError
from .nodes import Coord, Node, node_attrs, node_from_attrs

FORMAT_VERSION = 1


class NavGraph:
    def __init__(self, graph: Optional[nx.Graph] = None):
        self._g = graph if graph is not None else nx.Graph()

    # -- read access -------------------------------------------------------

    @property
    def nx(self) -> nx.Graph:
        """Underlying networkx graph (treat as read-only)."""
        return self._g

    def node_count(self) -> int:
        return self._g.number_of_nodes()

    def edge_count(self) -> int:
        return self._g.number_of_edges()

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._g

    def node_ids(self) -> List[str]:
        return list(self._g.nodes)

    def node(self, node_id: str) -> Optional[Node]:
        """Typed node, or ``None`` when unknown or missing its coordinates."""
        if node_id not in self._g:
            return None
        return node_from_attrs(node_id, self._g.nodes[node_id])

    def coord(self, node_id: str) -> Coord:
        node = self.node(node_id)
        if node is None:
            raise MissingNodeDataError(node_id)
        return node.coord

    def nodes_with_coords(self) -> Iterator[Node]:
        """Every node that has a coordinate payload; malformed ones are logged and skipped."""
        for node_id in list(self._g.nodes):
            node = self.node(node_id)
            if node is None:
                logger.warning(f"Node {node_id} does not have coordinates – skipped")
                continue
            yield node

    def has_edge(self, u: str, v: str) -> bool:
        return self._g.has_edge(u, v)

    def weight(self, u: str, v: str) -> float:
        return float(self._g.edges[u, v]["weight"])

    def edges(self) -> Iterator[Tuple[str, str, float]]:
        for u, v, w in self._g.edges(data="weight"):
            yield u, v, float(w)

    # -- construction (use on private copies only) ------------------------

    def copy(self) -> "NavGraph":
        return NavGraph(self._g.copy())

    def add_node(self, node: Node) -> None:
        self._g.add_node(node.id, **node_attrs(node))

    def add_edge(self, u: str, v: str, weight: float) -> None:
        if u == v:
            return
        self._g.add_edge(u, v, weight=float(weight))

    def add_edges(self, edges: Iterable[Tuple[str, str, float]]) -> None:
        for u, v, w in edges:
            self.add_edge(u, v, w)

    # -- persistence -------------------------------------------------------

    def to_json(self) -> Dict[str, Any]:
        nodes = {}
        for node_id, attrs in self._g.nodes(data=True):
            payload = dict(attrs)
            if "coord" in payload:
                payload["coord"] = list(payload["coord"])
            nodes[node_id] = payload
        return {
            "version": FORMAT_VERSION,
            "nodes": nodes,
            "edges": [[u, v, w] for u, v, w in self.edges()],
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "NavGraph":
        g = nx.Graph()
        for node_id, attrs in data.get("nodes", {}).items():
            attrs = dict(attrs or {})
            if attrs.get("coord") is not None:
                attrs["coord"] = tuple(attrs["coord"])
            g.add_node(node_id, **attrs)
        for u, v, w in data.get("edges", []):
            g.add_edge(u, v, weight=float(w))
        return cls(g)

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            json.dump(self.to_json(), f)
        logger.success(f"Graph written → {path} ({self.node_count()} nodes, {self.edge_count()} edges)")

    @classmethod
    def load(cls, path: Path) -> "NavGraph":
        with Path(path).open("r", encoding="utf-8") as f:
            return cls.from_json(json.load(f))
