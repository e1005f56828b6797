"""Maritime connectivity reports for marine protected area sketches."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("mpa-connectivity")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

from . import config  # re-export for convenience
from .connectivity import connectivity
from .distance_to_port import distance_to_port
from .distance_to_shore import distance_to_shore
from .errors import ConnectivityError, ErrorKind, InvalidInputError, MissingNodeDataError, NoPathError

__all__ = [
    "config",
    "connectivity",
    "distance_to_port",
    "distance_to_shore",
    "ConnectivityError",
    "ErrorKind",
    "InvalidInputError",
    "MissingNodeDataError",
    "NoPathError",
    "__version__",
]
