import pytest

from gisinfo.geometries import BoundingBox, get_geometry_mapping, iter_positions

POLYGON = {
    "type": "Polygon",
    "coordinates": [[[0, 0], [10, 0], [10, 5], [0, 5], [0, 0]], [[2, 2], [3, 2], [3, 3], [2, 2]]],
}


class GeoInterface:
    """Anything that implements the geo interface protocol (e.g. a Shapely geometry)."""

    __geo_interface__ = {"type": "Point", "coordinates": (1.0, 2.0)}


class TestGeometryMapping:
    def test_mapping(self):
        assert get_geometry_mapping(POLYGON) is POLYGON

    def test_geo_interface(self):
        assert get_geometry_mapping(GeoInterface()) == {"type": "Point", "coordinates": (1.0, 2.0)}

    def test_none(self):
        assert get_geometry_mapping(None) is None

    def test_invalid(self):
        with pytest.raises(TypeError):
            get_geometry_mapping("POINT(1 2)")

    def test_iter_positions_collection(self):
        collection = {
            "type": "GeometryCollection",
            "geometries": [
                {"type": "Point", "coordinates": [1, 2]},
                {"type": "MultiPoint", "coordinates": [[3, 4, 5], [6, 7]]},
            ],
        }
        assert list(iter_positions(collection)) == [(1, 2), (3, 4, 5), (6, 7)]


class TestBoundingBox:
    def test_from_geometries(self):
        bbox = BoundingBox.from_geometries(
            [POLYGON, {"type": "Point", "coordinates": [-1.5, 2]}], srs_name="EPSG:4326"
        )
        assert bbox == BoundingBox(-1.5, 0, 10, 5, srs_name="EPSG:4326")
        assert bbox.lower_corner == [-1.5, 0]
        assert bbox.upper_corner == [10, 5]

    def test_from_geometries_empty(self):
        assert BoundingBox.from_geometries([]) is None
        assert BoundingBox.from_geometries([{"type": "MultiPoint", "coordinates": []}]) is None

    def test_add(self):
        total = BoundingBox(0, 0, 1, 1) + BoundingBox(-1, 0.5, 0.5, 3)
        assert total == BoundingBox(-1, 0, 1, 3)

    def test_add_different_crs(self):
        with pytest.raises(ValueError):
            BoundingBox(0, 0, 1, 1, srs_name="EPSG:4326") + BoundingBox(0, 0, 1, 1)
