from __future__ import annotations

import django
import pyproj
import pytest

from gisinfo.output import EncoderSettings, Feature, FeatureCollection, SimpleFeatureCollection
from gisinfo.parsers import GetFeatureInfo
from tests.utils import BASE_URL


def pytest_configure():
    print(f"Running with Django {django.__version__}, PROJ={pyproj.proj_version_str}")


@pytest.fixture()
def encoder_settings() -> EncoderSettings:
    return EncoderSettings(
        num_decimals=8,
        xml_namespaces={"http://example.org/gisinfo": "app"},
    )


@pytest.fixture()
def lakes() -> SimpleFeatureCollection:
    """A layer with a known coordinate system."""
    return SimpleFeatureCollection(
        "lakes",
        [
            Feature(
                id=1,
                properties={"name": "Sloterplas", "depth": 8.5},
                geometry={"type": "Point", "coordinates": [4.8, 52.36]},
                geometry_name="the_geom",
            )
        ],
        crs="EPSG:4326",
    )


@pytest.fixture()
def roads() -> SimpleFeatureCollection:
    """A layer without coordinate system information."""
    return SimpleFeatureCollection(
        "roads",
        [
            Feature(
                id="a1",
                properties={"name": "A10", "lanes": 4, "toll": None},
                geometry={"type": "LineString", "coordinates": [[4.85, 52.33], [4.9, 52.4]]},
            )
        ],
        crs=None,
    )


@pytest.fixture()
def results(lakes, roads) -> FeatureCollection:
    return FeatureCollection([lakes, roads])


@pytest.fixture()
def feature_info_request() -> GetFeatureInfo:
    return GetFeatureInfo(
        base_url=BASE_URL,
        query_layers=["lakes", "roads"],
        info_format="application/vnd.ogc.gml",
    )
