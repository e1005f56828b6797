"""Command line entry points.

    mpa-connectivity build-graph
    mpa-connectivity connectivity sketches.geojson        # → results/connectivity_paths.gpkg
    mpa-connectivity distance-to-port sketches.geojson --out ports.geojson
    mpa-connectivity distance-to-shore sketches.geojson
"""
from __future__ import annotations

import importlib
import json
from pathlib import Path

import click
import pandas as pd
from loguru import logger

from . import builder, config
from .connectivity import connectivity
from .datasources import Datasources
from .distance_to_shore import distance_to_shore
from .errors import ConnectivityError

dtp = importlib.import_module(".distance_to_port", __package__)

_path = click.Path(path_type=Path)


def _read_sketch(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _write(gdf, out: Path) -> None:
    out.parent.mkdir(parents=True, exist_ok=True)
    if out.exists():
        out.unlink()
    driver = "GeoJSON" if out.suffix.lower() in (".json", ".geojson") else "GPKG"
    gdf.to_file(out, driver=driver)
    logger.success(f"Paths written → {out}")


def _datasources(graph: Path, land: Path, ports: Path, coast: Path) -> Datasources:
    return Datasources(graph=graph, land=land, ports=ports, coast=coast)


def _data_options(f):
    f = click.option("--graph", type=_path, default=config.NETWORK_JSON, show_default=True, help="Persisted base graph")(f)
    f = click.option("--land", type=_path, default=config.LAND_SHRUNK_GEOJSON, show_default=True, help="Shrunk land mask")(f)
    f = click.option("--ports", type=_path, default=config.PORTS_GEOJSON, show_default=True, help="Port points")(f)
    f = click.option("--coast", type=_path, default=config.COAST_GEOJSON, show_default=True, help="Coastline polygons")(f)
    return f


@click.group()
def main() -> None:
    """Maritime connectivity reports for MPA sketches."""


@main.command("build-graph")
@click.option("--coast", type=_path, default=config.COAST_GEOJSON, show_default=True, help="Coastline polygons")
@click.option("--out-graph", type=_path, default=config.NETWORK_JSON, show_default=True)
@click.option("--out-land", type=_path, default=config.LAND_SHRUNK_GEOJSON, show_default=True)
@click.option("--margin-deg", default=config.LAND_SHRINK_DEG, show_default=True, help="Inward land buffer (degrees)")
@click.option("--progress-every", default=config.PROGRESS_EVERY, show_default=True)
def build_graph(coast, out_graph, out_land, margin_deg, progress_every):
    """Build the base navigability graph (long-running batch job)."""
    builder.run(coast, out_graph, out_land, margin_deg=margin_deg, progress_every=progress_every)


@main.command("connectivity")
@click.argument("sketch", type=_path)
@_data_options
@click.option("--slack-km", default=config.SLACK_KM, show_default=True, help="Join nodes closer than this regardless of land")
@click.option("--tolerance", default=config.SIMPLIFY_TOLERANCE_DEG, show_default=True, help="Sketch simplification (degrees)")
@click.option("--out", type=_path, default=config.RESULTS_DIR / "connectivity_paths.gpkg", show_default=True, help="Paths GeoPackage/GeoJSON")
def connectivity_cmd(sketch, graph, land, ports, coast, slack_km, tolerance, out):
    """Shortest over-water paths between the sketches of a collection."""
    try:
        result = connectivity(
            _read_sketch(sketch),
            _datasources(graph, land, ports, coast),
            slack_km=slack_km,
            tolerance=tolerance,
        )
    except ConnectivityError as exc:
        logger.error(f"{exc.kind.value}: {exc}")
        raise SystemExit(1)

    pd.set_option("display.width", 120)
    print(result.to_dataframe().to_string(index=False))
    print(result.summary())
    _write(result.to_geodataframe(), out)


@main.command("distance-to-port")
@click.argument("sketch", type=_path)
@_data_options
@click.option("--slack-km", default=config.SLACK_KM, show_default=True)
@click.option("--tolerance", default=config.SIMPLIFY_TOLERANCE_DEG, show_default=True)
@click.option("--out", type=_path, default=config.RESULTS_DIR / "port_paths.gpkg", show_default=True, help="Paths GeoPackage/GeoJSON")
def distance_to_port_cmd(sketch, graph, land, ports, coast, slack_km, tolerance, out):
    """Closest port (over water) for each sketch."""
    try:
        results = dtp.distance_to_port(
            _read_sketch(sketch),
            _datasources(graph, land, ports, coast),
            slack_km=slack_km,
            tolerance=tolerance,
        )
    except ConnectivityError as exc:
        logger.error(f"{exc.kind.value}: {exc}")
        raise SystemExit(1)

    print(dtp.to_dataframe(results).to_string(index=False))
    far = dtp.furthest(results)
    if far is not None:
        one_way, round_trip = dtp.fuel_cost(far.distance_km)
        print(f"Furthest: {far.sketch_name} ~{far.distance_km:.0f} km from {far.port}")
        print(f"Fuel cost estimate: {one_way:.0f} one-way, {round_trip:.0f} round-trip")
    _write(dtp.to_geodataframe(results), out)


@main.command("distance-to-shore")
@click.argument("sketch", type=_path)
@_data_options
def distance_to_shore_cmd(sketch, graph, land, ports, coast):
    """Minimum distance from each sketch to the coastline."""
    metrics = distance_to_shore(_read_sketch(sketch), _datasources(graph, land, ports, coast))
    print(pd.DataFrame(metrics).drop(columns=["extra"]).to_string(index=False))


if __name__ == "__main__":  # pragma: no cover
    main()
