from __future__ import annotations

import logging
import typing
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import BinaryIO

from gisinfo import conf
from gisinfo.parsers.requests import GetFeature, Query

from .buffer import StringBuffer
from .results import FeatureCollection, SimpleFeatureCollection
from .utils import render_xmlns_attributes, to_qname

logger = logging.getLogger(__name__)

if typing.TYPE_CHECKING:
    from gisinfo.operations.base import OperationContext


@dataclass(frozen=True)
class EncoderSettings:
    """The server-wide settings that affect the GML output.

    These are passed explicitly to the renderers,
    use :meth:`from_conf` to read them from the Django settings.
    """

    #: Number of decimals for coordinates.
    num_decimals: int = 8
    #: Whether each feature has a ``<gml:boundedBy>`` element.
    feature_bounding: bool = False
    #: The character encoding of the document.
    encoding: str = "UTF-8"
    #: The aliases for the XML namespaces of the layers, as ``{uri: prefix}``.
    xml_namespaces: dict[str, str] = field(default_factory=dict)
    #: How much text is collected before it's written to the output.
    chunk_size: int = 40_000

    @classmethod
    def from_conf(cls) -> EncoderSettings:
        """Construct the settings from the ``GISINFO_...`` Django settings."""
        return cls(
            num_decimals=conf.GISINFO_NUM_DECIMALS,
            feature_bounding=conf.GISINFO_FEATURE_BOUNDING,
            encoding=conf.GISINFO_ENCODING,
            xml_namespaces={conf.GISINFO_XML_NAMESPACE: conf.GISINFO_XML_NAMESPACE_PREFIX},
        )


class OutputRenderer:
    """Base class for rendering a feature collection.

    The calling convention follows the WFS ``GetFeature`` operation:
    the operation holds the request, which has a query for each collection.
    """

    def __init__(
        self,
        operation: OperationContext,
        collection: FeatureCollection,
        settings: EncoderSettings | None = None,
    ):
        """
        :param operation: The operation that requested this output.
        :param collection: The collected data for rendering.
        :param settings: The server settings for rendering.
        """
        request = operation.request
        if not isinstance(request, GetFeature):
            raise TypeError(
                f"{self.__class__.__name__} can only render GetFeature results, not {request!r}"
            )
        if len(request.queries) != len(collection.results):
            raise ValueError(
                f"Received {len(collection.results)} feature collections"
                f" for {len(request.queries)} queries."
            )

        self.operation = operation
        self.request = request
        self.collection = collection
        self.settings = settings or EncoderSettings.from_conf()

    def write_to(self, out: BinaryIO) -> None:
        """Write the whole document to a binary output."""
        encoding = self.settings.encoding
        for chunk in self.render_stream():
            out.write(chunk.encode(encoding, errors="xmlcharrefreplace"))

    def render(self) -> bytes:
        """Render the whole document as bytes."""
        encoding = self.settings.encoding
        return b"".join(
            chunk.encode(encoding, errors="xmlcharrefreplace") for chunk in self.render_stream()
        )

    def render_stream(self) -> Iterator[str]:
        """Implement this in subclasses to implement a custom output format.
        The implementation should be a generator that emits text chunks.
        """
        raise NotImplementedError()


class XmlOutputRenderer(OutputRenderer):
    """Base class/mixin for XML-based rendering.

    This provides the logic to translate XML elements into QName aliases.
    """

    #: Default extra namespaces to include in the xmlns="..." attributes, and use for to_qname().
    xml_namespaces = {}

    #: The WFS version of the output, used for the DescribeFeatureType links.
    wfs_version = None

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.app_namespaces = {
            **self.xml_namespaces,
            **{
                sub_collection.xml_namespace: self.settings.xml_namespaces.get(
                    sub_collection.xml_namespace
                )
                for sub_collection in self.collection.results
            },
        }
        self.feature_qnames = [
            self.feature_to_qname(sub_collection) for sub_collection in self.collection.results
        ]

    def render_xmlns_attributes(self):
        """Render XML Namespace declaration attributes"""
        return render_xmlns_attributes(
            {ns: prefix for ns, prefix in self.app_namespaces.items() if prefix is not None}
        )

    def feature_to_qname(self, sub_collection: SimpleFeatureCollection) -> str:
        """Convert the layer name to a QName"""
        return to_qname(sub_collection.xml_namespace, sub_collection.name, self.app_namespaces)

    def iter_results(self) -> Iterator[tuple[SimpleFeatureCollection, Query, str]]:
        """Iterate over each collection, with the query that describes it."""
        return zip(self.collection.results, self.request.queries, self.feature_qnames)

    def get_srs_name(self, query: Query) -> str | None:
        """Tell which srsName the geometries of a collection have."""
        return str(query.srsName) if query.srsName is not None else None

    def get_xml_schema_url(self, type_names: list[str]) -> str:
        """Return the DescribeFeatureType URL that describes the layers."""
        base_url = self.request.base_url
        separator = "&" if "?" in base_url else "?"
        return (
            f"{base_url}{separator}SERVICE=WFS&VERSION={self.wfs_version}"
            f"&REQUEST=DescribeFeatureType&TYPENAME={','.join(type_names)}"
        )

    def get_schema_locations(self) -> list[str]:
        """Provide the pairs of "{namespace-uri} {schema-url}" for the layers."""
        types_by_namespace = {}
        for sub_collection, _, qname in self.iter_results():
            types_by_namespace.setdefault(sub_collection.xml_namespace, []).append(qname)

        schema_locations = []
        for xml_namespace, type_names in types_by_namespace.items():
            schema_locations.append(xml_namespace)
            schema_locations.append(self.get_xml_schema_url(type_names))
        return schema_locations
