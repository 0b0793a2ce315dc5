"""Helper classes to handle geometry data types.

Geometries are read as GeoJSON-style mappings (``{"type": ..., "coordinates": ...}``).
Any object that implements the ``__geo_interface__`` protocol (e.g. Shapely or
GeoDjango geometries converted by the caller) is accepted as well.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass

from gisinfo.parsers.values import URI

__all__ = [
    "BoundingBox",
    "get_geometry_mapping",
    "iter_positions",
]


def get_geometry_mapping(value) -> Mapping | None:
    """Read the GeoJSON-style mapping of a geometry value."""
    if value is None:
        return None

    geo_interface = getattr(value, "__geo_interface__", None)
    if geo_interface is not None:
        return geo_interface
    elif isinstance(value, Mapping) and "type" in value:
        return value
    else:
        raise TypeError(f"Unsupported geometry value: {value!r}")


def iter_positions(geometry: Mapping) -> Iterator[tuple[float, ...]]:
    """Iterate over all coordinate tuples of a geometry."""
    if geometry["type"] == "GeometryCollection":
        for child in geometry["geometries"]:
            yield from iter_positions(child)
    else:
        yield from _iter_nested(geometry["coordinates"])


def _iter_nested(coordinates) -> Iterator[tuple[float, ...]]:
    if not coordinates:
        return
    elif isinstance(coordinates[0], (int, float)):
        yield tuple(coordinates)
    else:
        for item in coordinates:
            yield from _iter_nested(item)


@dataclass
class BoundingBox:
    """A bounding box.

    This is used for the ``<gml:boundedBy>`` element of a feature or collection.
    The X/Y coordinates can be either latitude or longitude, depending on the CRS.
    """

    min_x: float
    min_y: float
    max_x: float
    max_y: float
    srs_name: URI | str | None = None

    @classmethod
    def from_geometries(
        cls, geometries: list[Mapping], srs_name: URI | str | None = None
    ) -> BoundingBox | None:
        """Calculate the extent of a collection of geometries."""
        # Start with an obviously invalid bbox,
        # which corrects at the first extend_to call.
        result = cls(math.inf, math.inf, -math.inf, -math.inf, srs_name=srs_name)
        for geometry in geometries:
            for position in iter_positions(geometry):
                x, y = position[:2]
                result.extend_to(x, y, x, y)

        return result if result.min_x != math.inf else None

    @property
    def lower_corner(self):
        return [self.min_x, self.min_y]

    @property
    def upper_corner(self):
        return [self.max_x, self.max_y]

    def extend_to(self, min_x: float, min_y: float, max_x: float, max_y: float):
        """Expand the bounding box in-place"""
        self.min_x = min(self.min_x, min_x)
        self.min_y = min(self.min_y, min_y)
        self.max_x = max(self.max_x, max_x)
        self.max_y = max(self.max_y, max_y)

    def __add__(self, other):
        """Combine both extents into a larger box."""
        if isinstance(other, BoundingBox):
            if other.srs_name != self.srs_name:
                raise ValueError(
                    "Can't combine instances with different spatial reference systems"
                )
            return self.__class__(
                min(self.min_x, other.min_x),
                min(self.min_y, other.min_y),
                max(self.max_x, other.max_x),
                max(self.max_y, other.max_y),
                srs_name=self.srs_name,
            )
        else:
            return NotImplemented
