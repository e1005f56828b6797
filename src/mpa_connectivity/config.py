"""Global configuration constants for the maritime connectivity reports."""
from __future__ import annotations

from pathlib import Path

# ---------------------------------------------------------------------------
# Core paths
# ---------------------------------------------------------------------------
ROOT_DIR = Path(__file__).resolve().parents[2]
DATA_DIR = ROOT_DIR / "data"
REFERENCE_DIR = DATA_DIR / "reference"
GRAPH_DIR = DATA_DIR / "bin"
RESULTS_DIR = ROOT_DIR / "results"

# Ensure sub-directories exist
for _dir in (REFERENCE_DIR, GRAPH_DIR, RESULTS_DIR):
    _dir.mkdir(parents=True, exist_ok=True)

# Reference datasets --------------------------------------------------------
COAST_GEOJSON = REFERENCE_DIR / "land.01.1000000.json"
PORTS_GEOJSON = REFERENCE_DIR / "ports.json"

# Offline builder outputs (read-only at request time)
LAND_SHRUNK_GEOJSON = GRAPH_DIR / "landShrunk.01.json"
NETWORK_JSON = GRAPH_DIR / "network.01.json"

# ---------------------------------------------------------------------------
# Graph invariants
# ---------------------------------------------------------------------------
# Negative buffer applied to the coastline to build the land mask (degrees,
# ~1.1 km at the equator). Request-time code reuses the same mask.
LAND_SHRINK_DEG = 0.01

# Longitudes west of the pivot are shifted by +360 so the study region,
# which straddles the antimeridian, is continuous in the graph frame.
GRAPH_LON_PIVOT = -160.0

# Tunables ------------------------------------------------------------------
SIMPLIFY_TOLERANCE_DEG = 0.005  # sketch simplification before node extraction
SLACK_KM = 0.5                  # pairs closer than this connect regardless of land
PROGRESS_EVERY = 10             # builder logs remaining nodes every N nodes

