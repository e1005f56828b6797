"""Synthetic reference data: one square island with sketches on either side.

    island   (0, 0) – (1, 1)
    sketch A (-0.3, 0.4) – (-0.2, 0.6)   west of the island
    sketch B ( 1.2, 0.4) – ( 1.3, 0.6)   east of the island
    port "Harbour" (1.5, 0.5), port "Far" (5, 5)
"""
import pytest
from loguru import logger
from shapely.geometry import box, mapping

from mpa_connectivity import builder
from mpa_connectivity.datasources import Datasources
from mpa_connectivity.land import LandMask
from mpa_connectivity.sketches import Port

ISLAND = box(0.0, 0.0, 1.0, 1.0)


def sketch_feature(sketch_id, geom, name=None):
    return {
        "type": "Feature",
        "properties": {"id": sketch_id, "name": name or sketch_id},
        "geometry": mapping(geom),
    }


def collection(*features):
    return {"type": "FeatureCollection", "properties": {"name": "network"}, "features": list(features)}


@pytest.fixture(scope="session")
def coast():
    return LandMask([ISLAND])


@pytest.fixture(scope="session")
def network(coast):
    """(base graph, shrunk land) built from the island."""
    return builder.build_network(coast, progress_every=0)


@pytest.fixture
def ports():
    return [Port(name="Harbour", coord=(1.5, 0.5)), Port(name="Far", coord=(5.0, 5.0))]


@pytest.fixture
def datasources(network, ports, coast):
    graph, land = network
    return Datasources.from_objects(graph=graph, land=land, ports=ports, coast=coast)


@pytest.fixture
def sketch_a():
    return sketch_feature("A", box(-0.3, 0.4, -0.2, 0.6), "West")


@pytest.fixture
def sketch_b():
    return sketch_feature("B", box(1.2, 0.4, 1.3, 0.6), "East")


@pytest.fixture
def two_sketches(sketch_a, sketch_b):
    return collection(sketch_a, sketch_b)


@pytest.fixture
def log_messages():
    """Messages logged through loguru while the test runs."""
    messages = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
