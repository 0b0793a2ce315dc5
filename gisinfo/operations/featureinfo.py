"""GML output formats for the WMS ``GetFeatureInfo`` request.

These formats don't write GML themselves. Instead, the feature info results
are presented to the GML renderers as if they were the result of a WFS ``GetFeature`` request.
For that, a ``GetFeature`` request is constructed with a ``Query`` for each layer,
which tells the renderer which ``srsName`` the layer geometries have.
"""

from __future__ import annotations

import logging
import typing
from collections.abc import Callable
from typing import BinaryIO

from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from gisinfo import conf
from gisinfo.crs import crs_to_uri
from gisinfo.exceptions import InvalidFormat, wrap_crs_errors
from gisinfo.output import (
    FeatureCollection,
    GML2Renderer,
    GML32Renderer,
    OutputRenderer,
    SimpleFeatureCollection,
)
from gisinfo.parsers.requests import GetFeature, Query
from gisinfo.parsers.values import parse_uri

from .base import GetFeatureInfoOutputFormat, OperationContext, Service

if typing.TYPE_CHECKING:
    from gisinfo.output.base import EncoderSettings
    from gisinfo.parsers.requests import GetFeatureInfo

logger = logging.getLogger(__name__)

__all__ = (
    "GML2FeatureInfoOutputFormat",
    "GML3FeatureInfoOutputFormat",
    "get_output_format",
    "get_output_formats",
)


class GML2FeatureInfoOutputFormat(GetFeatureInfoOutputFormat):
    """GetFeatureInfo output in GML 2 format.

    This hands the results to the :class:`~gisinfo.output.GML2Renderer`,
    which is written for WFS ``GetFeature`` results.
    """

    #: The MIME type of the format this response produces
    FORMAT = "application/vnd.ogc.gml"

    content_type = FORMAT
    title = "GML 2"

    #: The class that performs the output rendering.
    renderer_class: type[OutputRenderer] = GML2Renderer

    def __init__(
        self,
        settings: EncoderSettings | None = None,
        *,
        content_type=None,
        crs_resolver: Callable[[typing.Any], str | None] = crs_to_uri,
    ):
        """
        :param settings: The server settings for rendering, defaults to the Django settings.
        :param content_type: Override the MIME-type (e.g. for aliases of the same format).
        :param crs_resolver: Function that tells which URI describes a layer CRS.
        """
        super().__init__(settings, content_type=content_type)
        self.crs_resolver = crs_resolver

    def write(self, results: FeatureCollection, request: GetFeatureInfo, out: BinaryIO):
        """Write the results by passing them to the GML renderer."""
        features, get_feature = self.build_request(results, request.base_url)
        operation = self.build_operation(get_feature)

        renderer = self.renderer_class(operation, features, settings=self.settings)
        return renderer.write_to(out)

    def build_request(
        self, results: FeatureCollection, base_url: str
    ) -> tuple[FeatureCollection, GetFeature]:
        """Construct the collection and ``GetFeature`` request to pass to the renderer.
        Each collection receives the query at the same position.
        """
        features = FeatureCollection()
        get_feature = GetFeature(base_url=base_url)

        for sub_collection in results:
            if not isinstance(sub_collection, SimpleFeatureCollection):
                raise TypeError(
                    f"Expected a SimpleFeatureCollection for each layer, not {sub_collection!r}"
                )

            features.results.append(sub_collection)
            get_feature.queries.append(self.build_query(sub_collection))

        return features, get_feature

    def build_query(self, sub_collection: SimpleFeatureCollection) -> Query:
        """Construct the query that describes a single layer."""
        srs_name = self.crs_resolver(sub_collection.crs)
        logger.debug("Layer %s has srsName %r", sub_collection.name, srs_name)
        if srs_name is None:
            # Unknown coordinate system, render without srsName.
            return Query(typeName=sub_collection.name)

        with wrap_crs_errors(sub_collection.name, srs_name):
            return Query(typeName=sub_collection.name, srsName=parse_uri(srs_name))

    def build_operation(self, get_feature: GetFeature) -> OperationContext:
        """Wrap the request in the operation the renderer expects."""
        return OperationContext(request=get_feature, name="", service=Service("WMS"))


class GML3FeatureInfoOutputFormat(GML2FeatureInfoOutputFormat):
    """GetFeatureInfo output in GML 3.2 format."""

    #: The MIME type of the format this response produces
    FORMAT = "application/vnd.ogc.gml/3.2.1"

    content_type = FORMAT
    title = "GML 3.2"
    renderer_class = GML32Renderer


def get_output_formats() -> dict[str, type[GetFeatureInfoOutputFormat]]:
    """Tell which output formats are available, as ``{content_type: class}``."""
    output_formats = {
        GML2FeatureInfoOutputFormat.FORMAT: GML2FeatureInfoOutputFormat,
        GML3FeatureInfoOutputFormat.FORMAT: GML3FeatureInfoOutputFormat,
    }

    for content_type, dotted_path in conf.GISINFO_EXTRA_OUTPUT_FORMATS.items():
        try:
            output_formats[content_type] = import_string(dotted_path)
        except ImportError as e:
            raise ImproperlyConfigured(
                f"GISINFO_EXTRA_OUTPUT_FORMATS['{content_type}'] can't be imported: {e}"
            ) from e

    return output_formats


def get_output_format(
    info_format: str, settings: EncoderSettings | None = None
) -> GetFeatureInfoOutputFormat:
    """Find the output format for the ``INFO_FORMAT`` parameter."""
    for content_type, format_class in get_output_formats().items():
        output_format = format_class(settings, content_type=content_type)
        if output_format.matches(info_format):
            return output_format

    raise InvalidFormat(
        f"Output format '{info_format}' is not supported for GetFeatureInfo.",
        locator="info_format",
    )
