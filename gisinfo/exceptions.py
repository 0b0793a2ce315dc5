"""Exceptions for the GetFeatureInfo output formats.

Not all exception codes are listed here, only the ones
that apply to rendering feature info results.

See:
https://portal.ogc.org/files/?artifact_id=14416 (WMS 1.3.0, annex A.4)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager

from django.http import HttpResponse
from django.utils.html import format_html

logger = logging.getLogger(__name__)


@contextmanager
def wrap_crs_errors(layer_name: str, srs_name: str):
    """Translate a parsing error of a srsName into an exception for the whole request."""
    try:
        yield
    except ExternalParsingError as e:
        raise InvalidCRSURI(
            f"Unable to determine coordinate system for layer '{layer_name}'."
            f" Schema told us '{srs_name}'",
            layer_name=layer_name,
            srs_name=srs_name,
        ) from e


class ExternalValueError(ValueError):
    """Raise a ValueError for external input.
    This helps to distinguish between internal bugs
    (e.g. unpacking values) and malformed external input.
    """


class ExternalParsingError(ValueError):
    """Raise a ValueError for a parsing problem."""


class OWSException(Exception):
    """Base class for XML based exceptions in this module."""

    status_code = 400  # Most common code in spec
    reason = None
    service = None
    version = "1.3.0"
    code = None
    text_template = None

    def __init__(self, text=None, code=None, locator=None, status_code=None):
        text = text or self.text_template.format(code=self.code, locator=locator)
        if (code and len(text) < len(code)) or (locator and len(text) < len(locator)):
            raise ValueError(f"text/locator arguments are switched: {text!r}, locator={locator!r}")

        super().__init__(text)
        self.locator = locator
        self.text = text
        self.code = code or self.code or self.__class__.__name__
        self.status_code = status_code or self.status_code

    def as_response(self) -> HttpResponse:
        """Return the exception as HTTP response."""
        logger.debug("Returning HTTP %d for %s: %s", self.status_code, self.code, self.text)
        xml_body = self.as_xml()
        return HttpResponse(
            b'<?xml version="1.0" encoding="UTF-8"?>\n%b' % xml_body.encode("utf-8"),
            content_type="text/xml; charset=utf-8",
            status=self.status_code,
            reason=self.reason,
        )

    def as_xml(self) -> str:
        """Serialize the exception to a WMS ``<ServiceExceptionReport>``."""
        return format_html(
            "<ServiceExceptionReport"
            ' xmlns="http://www.opengis.net/ogc"'
            ' xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"'
            ' xsi:schemaLocation="http://www.opengis.net/ogc'
            ' http://schemas.opengis.net/wms/1.3.0/exceptions_1_3_0.xsd"'
            ' version="{version}">\n'
            '  <ServiceException code="{code}"{locator_attr}>{text}</ServiceException>\n'
            "</ServiceExceptionReport>\n",
            version=self.version,
            code=self.code,
            locator_attr=(
                format_html(' locator="{locator}"', locator=self.locator) if self.locator else ""
            ),
            text=self.text,
        )

    def __html__(self):
        return self.as_xml()


class WMSException(OWSException):
    service = "WMS"


class InvalidFormat(WMSException):
    """The requested INFO_FORMAT is not offered by this server."""

    status_code = 400
    code = "InvalidFormat"
    text_template = "Request contains a format not offered by the server."


class InvalidCRSURI(WMSException):
    """A layer reports a coordinate reference system that can't be written as URI.

    This is a server-side configuration problem, so the request can't be completed.
    """

    status_code = 500
    reason = "Server processing failed"
    code = "InvalidCRS"
    text_template = "Unable to determine coordinate system."

    def __init__(self, text=None, layer_name=None, srs_name=None, **kwargs):
        super().__init__(text, locator=layer_name, **kwargs)
        self.layer_name = layer_name
        self.srs_name = srs_name
