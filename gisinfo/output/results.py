"""Wrappers for the results of GetFeatureInfo.

The "SimpleFeatureCollection" and "FeatureCollection" and their
properties match the WFS spec closely, as the GML output is written for that.
Each queried layer produces one :class:`SimpleFeatureCollection`.
"""

from __future__ import annotations

import typing
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timezone
from functools import cached_property

from django.utils.timezone import now

from gisinfo import conf
from gisinfo.geometries import get_geometry_mapping

if typing.TYPE_CHECKING:
    import pyproj

    from gisinfo.crs import CRS


@dataclass
class Feature:
    """A single feature that was found at the queried location."""

    #: The identifier, rendered as ``fid`` / ``gml:id``.
    id: str | int | None
    #: The attribute values, in the order they should be written.
    properties: dict = field(default_factory=dict)
    #: A GeoJSON-style mapping, or object with a ``__geo_interface__``.
    geometry: typing.Any = None
    #: The element name for the geometry.
    geometry_name: str = "geometry"

    @cached_property
    def geometry_mapping(self) -> Mapping | None:
        return get_geometry_mapping(self.geometry)


class SimpleFeatureCollection:
    """The features of a single layer.

    This object type is defined in the WFS spec.
    It holds a collection of ``<wfs:member>`` objects.
    """

    def __init__(
        self,
        name: str,
        features: list[Feature],
        crs: CRS | pyproj.CRS | str | int | None = None,
        xml_namespace: str | None = None,
    ):
        """
        :param name: The layer name, which becomes the XML tag for each feature.
        :param features: The features found in this layer.
        :param crs: The coordinate reference system of the geometries.
        :param xml_namespace: The XML namespace of the feature elements.
        """
        self.name = name
        self.features = features
        self.crs = crs
        self.xml_namespace = xml_namespace or conf.GISINFO_XML_NAMESPACE

    def __iter__(self):
        return iter(self.features)

    def __len__(self):
        return len(self.features)

    @property
    def number_returned(self) -> int:
        """Return the number of results for this layer."""
        return len(self.features)

    @property
    def number_matched(self) -> int:
        # Feature info results are never paginated.
        return len(self.features)

    def __repr__(self):
        return f"<SimpleFeatureCollection: {self.name} ({len(self.features)} features)>"


class FeatureCollection:
    """WFS object that holds the result type for ``GetFeature``.
    This object type is defined in the WFS spec.
    It holds a collection of :class:`SimpleFeatureCollection` results.
    """

    def __init__(self, results: list[SimpleFeatureCollection] | None = None):
        """
        :param results: All retrieved feature collections (one per layer)
        """
        self.results = results if results is not None else []
        self.date = now()
        self.timestamp = self.date.astimezone(timezone.utc).isoformat()

    @property
    def number_returned(self) -> int:
        """Return the total number of returned features"""
        return sum(c.number_returned for c in self.results)

    @property
    def number_matched(self) -> int:
        return sum(c.number_matched for c in self.results)

    def __iter__(self):
        return iter(self.results)

    def __len__(self):
        return len(self.results)
