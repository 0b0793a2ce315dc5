"""Output rendering in GML 2.1.2 format, as used by WFS 1.0.

This is the classic output of ``application/vnd.ogc.gml``.
Like the GML 3.2 output, the XML is written as text,
as that performs much better than building a tree first.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from gisinfo.geometries import BoundingBox

from .base import XmlOutputRenderer
from .buffer import StringBuffer
from .results import Feature
from .utils import attr_escape, format_coordinate, tag_escape, value_to_xml_string, xmlns

logger = logging.getLogger(__name__)

GML2_RENDER_FUNCTIONS = {}
COORDINATES_ATTRS = 'decimal="." cs="," ts=" "'


def register_geometry_type(geometry_type):
    def _inc(func):
        GML2_RENDER_FUNCTIONS[geometry_type] = func
        return func

    return _inc


class GML2Renderer(XmlOutputRenderer):
    """Render the feature collection in GML 2 format"""

    wfs_version = "1.0.0"

    # Aliases to use for XML namespaces
    xml_namespaces = {
        xmlns.wfs1.value: "wfs",
        xmlns.gml21.value: "gml",
        xmlns.xsi.value: "xsi",
    }

    def render_xsi_schema_location(self):
        """Render the value for the xsi:schemaLocation="..." block."""
        return " ".join(
            self.get_schema_locations()
            + ["http://www.opengis.net/wfs http://schemas.opengis.net/wfs/1.0.0/WFS-basic.xsd"]
        )

    def render_stream(self):
        """Render the XML as streaming content."""
        self.output = output = StringBuffer(self.settings.chunk_size)
        self._write = output.write

        self._write(
            f'<?xml version="1.0" encoding="{self.settings.encoding}"?>\n'
            f"<wfs:FeatureCollection {self.render_xmlns_attributes()}"
            f' xsi:schemaLocation="{attr_escape(self.render_xsi_schema_location())}">\n'
        )
        self.write_bounded_by(self.get_collection_bounds())

        for sub_collection, query, feature_qname in self.iter_results():
            srs_name = self.get_srs_name(query)
            logger.debug(
                "Writing %d features of %s as GML 2 (srsName=%s)",
                len(sub_collection),
                sub_collection.name,
                srs_name,
            )
            for feature in sub_collection:
                self._write("<gml:featureMember>\n")
                self.write_feature(sub_collection.name, feature_qname, feature, srs_name)
                self._write("</gml:featureMember>\n")

                if output.is_full():
                    yield output.flush()

        self._write("</wfs:FeatureCollection>\n")
        yield output.flush()

    def get_collection_bounds(self) -> BoundingBox | None:
        """Calculate the extent of all features.
        This is only possible when all layers share the same coordinate system.
        """
        bounds = None
        for sub_collection, query, _ in self.iter_results():
            sub_bounds = BoundingBox.from_geometries(
                [f.geometry_mapping for f in sub_collection if f.geometry_mapping is not None],
                srs_name=query.srsName,
            )
            if sub_bounds is None:
                continue
            elif bounds is None:
                bounds = sub_bounds
            elif bounds.srs_name != sub_bounds.srs_name:
                return None
            else:
                bounds += sub_bounds

        return bounds

    def write_bounded_by(self, bounds: BoundingBox | None):
        if bounds is None:
            self._write("<gml:boundedBy><gml:null>unknown</gml:null></gml:boundedBy>\n")
        else:
            self._write(f"<gml:boundedBy>{self.render_gml_box(bounds)}</gml:boundedBy>\n")

    def write_feature(self, type_name: str, feature_qname: str, feature: Feature, srs_name):
        """Write the contents of a single feature."""
        fid = f' fid="{attr_escape(f"{type_name}.{feature.id}")}"' if feature.id is not None else ""
        self._write(f"<{feature_qname}{fid}>\n")

        geometry = feature.geometry_mapping
        if geometry is not None:
            if self.settings.feature_bounding:
                bounds = BoundingBox.from_geometries([geometry], srs_name=srs_name)
                if bounds is not None:
                    self._write(f"<gml:boundedBy>{self.render_gml_box(bounds)}</gml:boundedBy>\n")

            xml_qname = self.to_app_qname(feature_qname, feature.geometry_name)
            base_attrs = f' srsName="{attr_escape(srs_name)}"' if srs_name else ""
            gml = self.render_gml_value(geometry, base_attrs=base_attrs)
            self._write(f"<{xml_qname}>{gml}</{xml_qname}>\n")

        for name, value in feature.properties.items():
            if value is None:
                # GML 2 has no xsi:nil, leave the element out.
                continue
            xml_qname = self.to_app_qname(feature_qname, name)
            self._write(f"<{xml_qname}>{value_to_xml_string(value)}</{xml_qname}>\n")

        self._write(f"</{feature_qname}>\n")

    def to_app_qname(self, feature_qname: str, name: str) -> str:
        """Give the property the same namespace prefix as its feature."""
        prefix = feature_qname.partition(":")[0] if ":" in feature_qname else None
        return f"{prefix}:{name}" if prefix else name

    def render_gml_box(self, bounds: BoundingBox) -> str:
        srs_name = f' srsName="{attr_escape(str(bounds.srs_name))}"' if bounds.srs_name else ""
        coords = self.render_coordinates([bounds.lower_corner, bounds.upper_corner])
        return f"<gml:Box{srs_name}>{coords}</gml:Box>"

    def render_coordinates(self, positions) -> str:
        num_decimals = self.settings.num_decimals
        text = " ".join(
            ",".join(format_coordinate(value, num_decimals) for value in position)
            for position in positions
        )
        return f"<gml:coordinates {COORDINATES_ATTRS}>{text}</gml:coordinates>"

    def render_gml_value(self, value: Mapping, base_attrs="") -> str:
        """Render a GML value (this is also called for the members of collections)."""
        try:
            method = GML2_RENDER_FUNCTIONS[value["type"]]
        except KeyError:
            return f"<!-- No rendering implemented for {tag_escape(str(value.get('type')))} -->"
        return method(self, value, base_attrs=base_attrs)

    @register_geometry_type("Point")
    def render_gml_point(self, value: Mapping, base_attrs=""):
        coords = self.render_coordinates([value["coordinates"]])
        return f"<gml:Point{base_attrs}>{coords}</gml:Point>"

    @register_geometry_type("LineString")
    def render_gml_line_string(self, value: Mapping, base_attrs=""):
        coords = self.render_coordinates(value["coordinates"])
        return f"<gml:LineString{base_attrs}>{coords}</gml:LineString>"

    @register_geometry_type("Polygon")
    def render_gml_polygon(self, value: Mapping, base_attrs=""):
        if not value["coordinates"]:
            # Empty polygon, there is no outer boundary to write.
            return f"<gml:Polygon{base_attrs}/>"

        exterior, *interiors = value["coordinates"]
        inner = "".join(
            f"<gml:innerBoundaryIs>{self.render_gml_linear_ring(ring)}</gml:innerBoundaryIs>"
            for ring in interiors
        )
        return (
            f"<gml:Polygon{base_attrs}>"
            f"<gml:outerBoundaryIs>{self.render_gml_linear_ring(exterior)}</gml:outerBoundaryIs>"
            f"{inner}"
            f"</gml:Polygon>"
        )

    def render_gml_linear_ring(self, positions):
        return f"<gml:LinearRing>{self.render_coordinates(positions)}</gml:LinearRing>"

    @register_geometry_type("MultiPoint")
    def render_gml_multi_point(self, value: Mapping, base_attrs=""):
        children = "".join(
            f"<gml:pointMember>{self.render_gml_point({'coordinates': c})}</gml:pointMember>"
            for c in value["coordinates"]
        )
        return f"<gml:MultiPoint{base_attrs}>{children}</gml:MultiPoint>"

    @register_geometry_type("MultiLineString")
    def render_gml_multi_line_string(self, value: Mapping, base_attrs=""):
        children = "".join(
            "<gml:lineStringMember>"
            f"{self.render_gml_line_string({'coordinates': c})}"
            "</gml:lineStringMember>"
            for c in value["coordinates"]
        )
        return f"<gml:MultiLineString{base_attrs}>{children}</gml:MultiLineString>"

    @register_geometry_type("MultiPolygon")
    def render_gml_multi_polygon(self, value: Mapping, base_attrs=""):
        children = "".join(
            f"<gml:polygonMember>{self.render_gml_polygon({'coordinates': c})}</gml:polygonMember>"
            for c in value["coordinates"]
        )
        return f"<gml:MultiPolygon{base_attrs}>{children}</gml:MultiPolygon>"

    @register_geometry_type("GeometryCollection")
    def render_gml_multi_geometry(self, value: Mapping, base_attrs=""):
        children = "".join(
            f"<gml:geometryMember>{self.render_gml_value(child)}</gml:geometryMember>"
            for child in value["geometries"]
        )
        return f"<gml:MultiGeometry{base_attrs}>{children}</gml:MultiGeometry>"
