"""The base protocol to implement a GetFeatureInfo output format.

Each output format receives the results of a ``GetFeatureInfo`` request
(one feature collection per queried layer) and writes them to a binary output.
The ``INFO_FORMAT`` parameter of the request selects which format is used.
"""

from __future__ import annotations

import logging
import typing
from dataclasses import dataclass, field
from io import BytesIO
from typing import BinaryIO

from django.http import HttpResponse

from gisinfo.output.base import EncoderSettings
from gisinfo.parsers.requests import GetFeature

if typing.TYPE_CHECKING:
    from gisinfo.output.results import FeatureCollection
    from gisinfo.parsers.requests import GetFeatureInfo

logger = logging.getLogger(__name__)

__all__ = (
    "Service",
    "OperationContext",
    "GetFeatureInfoOutputFormat",
)


@dataclass(frozen=True)
class Service:
    """The service an operation was called through."""

    name: str
    version: str | None = None


@dataclass(frozen=True)
class OperationContext:
    """The operation for which output is rendered.

    The GML renderers are written for the WFS ``GetFeature`` operation,
    and read the request (and its queries) from here. When the output is
    produced for another protocol, this holds a constructed request instead.
    The empty name tells this isn't a dispatched operation.
    """

    #: The request, the only argument of the operation.
    request: GetFeature
    #: The operation name.
    name: str = ""
    service: Service = field(default_factory=lambda: Service("WMS"))

    @property
    def arguments(self) -> tuple[GetFeature]:
        """The argument list of the operation."""
        return (self.request,)


class GetFeatureInfoOutputFormat:
    """Base class for the output formats of ``GetFeatureInfo``.

    Subclasses implement :meth:`write`.
    """

    #: The MIME-type used in the request to select this type.
    content_type = None

    #: A human-friendly name for an HTML overview page.
    title = None

    def __init__(self, settings: EncoderSettings | None = None, *, content_type=None):
        """
        :param settings: The server settings for rendering, defaults to the Django settings.
        :param content_type: Override the MIME-type (e.g. for aliases of the same format).
        """
        self.settings = settings if settings is not None else EncoderSettings.from_conf()
        if content_type is not None:
            self.content_type = content_type

    def matches(self, value: str) -> bool:
        """Test whether the INFO_FORMAT value selects this format."""
        # Allow "application/vnd.ogc.gml; charset=UTF-8"
        return self.content_type == value.split(";", 1)[0].strip()

    def write(self, results: FeatureCollection, request: GetFeatureInfo, out: BinaryIO):
        """Write the results of the request to the binary output."""
        raise NotImplementedError()

    def render(self, results: FeatureCollection, request: GetFeatureInfo) -> bytes:
        """Render the results as bytes."""
        out = BytesIO()
        self.write(results, request, out)
        return out.getvalue()

    def get_response(self, results: FeatureCollection, request: GetFeatureInfo) -> HttpResponse:
        """Render the results as HTTP response.

        Any :class:`~gisinfo.exceptions.OWSException` is raised,
        so the calling view can render it with ``as_response()``.
        """
        content = self.render(results, request)
        return HttpResponse(content, content_type=self.content_type)

    def __repr__(self):
        return f"<{self.__class__.__name__}: {self.content_type}>"
