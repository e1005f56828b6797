"""Failure kinds raised by the navigability graph subsystem.

None of these are retried anywhere: they indicate bad input geometry or bad
reference data, not transient faults.
"""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    NO_PATH = "no_path"
    MISSING_NODE_DATA = "missing_node_data"


class ConnectivityError(Exception):
    """Base class; ``kind`` lets callers branch without matching messages."""

    kind: ErrorKind


class InvalidInputError(ConnectivityError, ValueError):
    """Empty/degenerate geometry or malformed GeoJSON input."""

    kind = ErrorKind.INVALID_INPUT


class NoPathError(ConnectivityError):
    """The graph holds no edge sequence between two node sets."""

    kind = ErrorKind.NO_PATH

    def __init__(self, source: str, target: str) -> None:
        self.source = source
        self.target = target
        super().__init__(f"No path found between {source} and {target}")


class MissingNodeDataError(ConnectivityError, KeyError):
    """A node is referenced but carries no coordinate payload."""

    kind = ErrorKind.MISSING_NODE_DATA

    def __init__(self, node_id: str) -> None:
        self.node_id = node_id
        super().__init__(f"Node {node_id} does not have coordinates")

    def __str__(self) -> str:  # KeyError would repr() the message
        return self.args[0]
