"""Output rendering logic for GML 3.2, as used by WFS 2.0.

Note that the Django format_html() / mark_safe() logic is not used here,
as it's quite a performance improvement to just escape the values directly.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping

from gisinfo.geometries import BoundingBox

from .base import XmlOutputRenderer
from .buffer import StringBuffer
from .results import Feature, SimpleFeatureCollection
from .utils import attr_escape, format_coordinate, tag_escape, value_to_xml_string, xmlns

logger = logging.getLogger(__name__)

GML32_RENDER_FUNCTIONS = {}


def register_geometry_type(geometry_type):
    def _inc(func):
        GML32_RENDER_FUNCTIONS[geometry_type] = func
        return func

    return _inc


class GML32Renderer(XmlOutputRenderer):
    """Render the feature collection in GML 3.2 format"""

    wfs_version = "2.0.0"
    xml_collection_tag = "FeatureCollection"
    xml_sub_collection_tag = "FeatureCollection"  # Mapserver does not use SimpleFeatureCollection
    gml_seq = 0

    # Aliases to use for XML namespaces
    xml_namespaces = {
        xmlns.wfs20.value: "wfs",
        xmlns.gml32.value: "gml",
        xmlns.xsi.value: "xsi",  # for xsi:nil="true" and xsi:schemaLocation.
    }

    def render_xsi_schema_location(self):
        """Render the value for the xsi:schemaLocation="..." block."""
        return " ".join(
            self.get_schema_locations()
            + [
                "http://www.opengis.net/wfs/2.0 http://schemas.opengis.net/wfs/2.0/wfs.xsd",
                "http://www.opengis.net/gml/3.2 http://schemas.opengis.net/gml/3.2.1/gml.xsd",
            ]
        )

    def render_stream(self):
        """Render the XML as streaming content.
        This renders the standard <wfs:FeatureCollection>
        """
        collection = self.collection
        self.output = output = StringBuffer(self.settings.chunk_size)
        self._write = output.write

        self._write(
            f"""<?xml version='1.0' encoding="{self.settings.encoding}" ?>\n"""
            f"<wfs:{self.xml_collection_tag} {self.render_xmlns_attributes()}"
            f' xsi:schemaLocation="{attr_escape(self.render_xsi_schema_location())}"'
            f' timeStamp="{collection.timestamp}"'
            f' numberMatched="{int(collection.number_matched)}"'
            f' numberReturned="{int(collection.number_returned)}">\n'
        )

        has_multiple_collections = len(collection.results) > 1
        for sub_collection, query, feature_qname in self.iter_results():
            srs_name = self.get_srs_name(query)
            logger.debug(
                "Writing %d features of %s as GML 3.2 (srsName=%s)",
                len(sub_collection),
                sub_collection.name,
                srs_name,
            )
            if has_multiple_collections:
                self._write(
                    f"<wfs:member>\n"
                    f"<wfs:{self.xml_sub_collection_tag}"
                    f' timeStamp="{collection.timestamp}"'
                    f' numberMatched="{int(sub_collection.number_matched)}"'
                    f' numberReturned="{int(sub_collection.number_returned)}">\n'
                )

            for feature, gml_id in self.iter_gml_ids(sub_collection):
                self.gml_seq = 0  # need to increment this between write_gml_field calls
                self._write("<wfs:member>\n")
                self.write_feature(feature_qname, feature, gml_id, srs_name)
                self._write("</wfs:member>\n")

                if output.is_full():
                    yield output.flush()

            if has_multiple_collections:
                self._write(f"</wfs:{self.xml_sub_collection_tag}>\n</wfs:member>\n")

        self._write(f"</wfs:{self.xml_collection_tag}>\n")
        yield output.flush()

    def iter_gml_ids(
        self, sub_collection: SimpleFeatureCollection
    ) -> Iterator[tuple[Feature, str]]:
        """Give each feature a ``gml:id``, which must be unique within the document.
        Features without an identifier are numbered, skipping the numbers that are taken.
        """
        taken = {str(feature.id) for feature in sub_collection if feature.id is not None}
        number = 0
        for feature in sub_collection:
            if feature.id is not None:
                feature_id = feature.id
            else:
                number += 1
                while str(number) in taken:
                    number += 1
                feature_id = number
            yield feature, f"{sub_collection.name}.{feature_id}"

    def write_feature(
        self,
        feature_qname: str,
        feature: Feature,
        gml_id: str,
        srs_name: str | None,
    ) -> None:
        """Write the contents of the feature.
        This output is wrapped in <wfs:member> tags.
        """
        prefix = feature_qname[: feature_qname.index(":") + 1] if ":" in feature_qname else ""

        # Write <app:LayerName> start node
        self._write(f'<{feature_qname} gml:id="{attr_escape(gml_id)}">\n')

        geometry = feature.geometry_mapping
        if geometry is not None and self.settings.feature_bounding:
            envelope = BoundingBox.from_geometries([geometry], srs_name=srs_name)
            if envelope is not None:
                self._write(self.render_gml_bounds(envelope))

        if feature.geometry is not None:
            self.write_gml_field(f"{prefix}{feature.geometry_name}", gml_id, geometry, srs_name)

        for name, value in feature.properties.items():
            self.write_xml_field(f"{prefix}{name}", value)

        self._write(f"</{feature_qname}>\n")

    def write_xml_field(self, xml_qname: str, value):
        """Write the value of a single field."""
        if value is None:
            self._write(f'<{xml_qname} xsi:nil="true"/>\n')
        else:
            self._write(f"<{xml_qname}>{value_to_xml_string(value)}</{xml_qname}>\n")

    def write_gml_field(self, xml_qname: str, gml_id: str, value: Mapping, srs_name) -> None:
        """Write the geometry element of a feature."""
        self.gml_seq += 1
        base_attrs = f' gml:id="{attr_escape(f"{gml_id}.{self.gml_seq}")}"'
        if srs_name:
            base_attrs += f' srsName="{attr_escape(srs_name)}"'

        gml = self.render_gml_value(value, base_attrs=base_attrs)
        self._write(f"<{xml_qname}>{gml}</{xml_qname}>\n")

    def render_gml_bounds(self, envelope: BoundingBox) -> str:
        """Render the gml:boundedBy element that contains an Envelope."""
        srs_name = (
            f' srsName="{attr_escape(str(envelope.srs_name))}"' if envelope.srs_name else ""
        )
        lower = self.render_position(envelope.lower_corner)
        upper = self.render_position(envelope.upper_corner)
        return (
            f'<gml:boundedBy><gml:Envelope srsDimension="2"{srs_name}>'
            f"<gml:lowerCorner>{lower}</gml:lowerCorner>"
            f"<gml:upperCorner>{upper}</gml:upperCorner>"
            "</gml:Envelope></gml:boundedBy>\n"
        )

    def render_position(self, position) -> str:
        num_decimals = self.settings.num_decimals
        return " ".join(format_coordinate(value, num_decimals) for value in position)

    def render_pos_list(self, positions) -> str:
        dim = len(positions[0]) if positions else 2
        coords = " ".join(self.render_position(position) for position in positions)
        return f'<gml:posList srsDimension="{dim}">{coords}</gml:posList>'

    def render_gml_value(self, value: Mapping, base_attrs="") -> str:
        """Render a GML value (this is also called for the members of collections)."""
        try:
            # Avoid isinstance checks, do a direct lookup
            method = GML32_RENDER_FUNCTIONS[value["type"]]
        except KeyError:
            return f"<!-- No rendering implemented for {tag_escape(str(value.get('type')))} -->"
        return method(self, value, base_attrs=base_attrs)

    @register_geometry_type("Point")
    def render_gml_point(self, value: Mapping, base_attrs=""):
        position = value["coordinates"]
        return (
            f"<gml:Point{base_attrs}>"
            f'<gml:pos srsDimension="{len(position)}">{self.render_position(position)}</gml:pos>'
            f"</gml:Point>"
        )

    @register_geometry_type("LineString")
    def render_gml_line_string(self, value: Mapping, base_attrs=""):
        pos_list = self.render_pos_list(value["coordinates"])
        return f"<gml:LineString{base_attrs}>{pos_list}</gml:LineString>"

    @register_geometry_type("Polygon")
    def render_gml_polygon(self, value: Mapping, base_attrs=""):
        # lol: http://erouault.blogspot.com/2014/04/gml-madness.html
        if not value["coordinates"]:
            # Empty polygon, there is no exterior ring to write.
            return f"<gml:Polygon{base_attrs}/>"

        exterior, *interiors = value["coordinates"]
        inner = "".join(
            f"<gml:interior>{self.render_gml_linear_ring(ring)}</gml:interior>"
            for ring in interiors
        )
        return (
            f"<gml:Polygon{base_attrs}>"
            f"<gml:exterior>{self.render_gml_linear_ring(exterior)}</gml:exterior>"
            f"{inner}"
            "</gml:Polygon>"
        )

    def render_gml_linear_ring(self, positions):
        return f"<gml:LinearRing>{self.render_pos_list(positions)}</gml:LinearRing>"

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
