"""Typed graph nodes.

Three node kinds share the graph: coastline vertices from the offline builder,
sketch vertices and port points injected per request. Every node records the
polygon (or port) it came from in ``owner`` so the "never connect two nodes
of the same polygon" rule is a structural comparison, not an id-prefix
convention.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

Coord = Tuple[float, float]


def coast_node_id(feature_index: int, ring_index: int, vertex_index: int) -> str:
    return f"node_{feature_index}_{ring_index}_{vertex_index}"


def sketch_node_id(sketch_index: int, part_index: int, vertex_index: int) -> str:
    return f"polynode_{sketch_index}_{part_index}_{vertex_index}"


def port_node_id(name: str) -> str:
    return f"port_{name}"


@dataclass(frozen=True)
class CoastlineNode:
    id: str
    coord: Coord
    owner: str

    kind = "coast"


@dataclass(frozen=True)
class SketchNode:
    id: str
    coord: Coord
    owner: str  # sketch id

    kind = "sketch"


@dataclass(frozen=True)
class PortNode:
    id: str
    coord: Coord
    owner: str  # port name

    kind = "port"


Node = Union[CoastlineNode, SketchNode, PortNode]

_KINDS = {cls.kind: cls for cls in (CoastlineNode, SketchNode, PortNode)}


def same_owner(a: Node, b: Node) -> bool:
    """True when both nodes come from the same source polygon or port."""
    return type(a) is type(b) and a.owner == b.owner


def node_attrs(node: Node) -> Dict[str, Any]:
    """Attribute payload stored on the graph (and in the persisted JSON)."""
    return {"kind": node.kind, "coord": tuple(node.coord), "owner": node.owner}


def node_from_attrs(node_id: str, attrs: Dict[str, Any]) -> Optional[Node]:
    """Rebuild a typed node; ``None`` when the coordinate payload is missing."""
    coord = attrs.get("coord")
    if coord is None or len(coord) < 2:
        return None
    cls = _KINDS.get(attrs.get("kind", "coast"), CoastlineNode)
    return cls(id=node_id, coord=(float(coord[0]), float(coord[1])), owner=str(attrs.get("owner", "")))
