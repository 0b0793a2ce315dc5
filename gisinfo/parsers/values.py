"""Parsing of scalar values in the request."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from urllib.parse import urlsplit

from gisinfo.exceptions import ExternalParsingError

logger = logging.getLogger(__name__)

# RFC 3986 characters, with percent-encoded octets.
# Non-ASCII characters are allowed too (IRI style), except for controls and whitespace.
RE_URI = re.compile(
    r"\A(?:[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=]|%[0-9A-Fa-f]{2}|[^\x00-\x9f\s])+\Z"
)
RE_SCHEME = re.compile(r"\A[A-Za-z][A-Za-z0-9+\-.]*\Z")


@dataclass(frozen=True)
class URI:
    """A parsed URI value, e.g. for the ``srsName`` attribute.

    This keeps the original notation, as that is what gets written in the output.
    """

    text: str
    scheme: str
    authority: str
    path: str
    query: str
    fragment: str

    @property
    def is_absolute(self) -> bool:
        return bool(self.scheme)

    def __str__(self):
        return self.text


def parse_uri(raw_value: str) -> URI:
    """Translate a string into a URI value, following the RFC 3986 syntax.

    Both URLs and URNs are accepted (e.g. ``urn:ogc:def:crs:EPSG::4326`` or ``EPSG:4326``).
    """
    if not raw_value:
        raise ExternalParsingError("URI can't be empty.")
    if not RE_URI.match(raw_value):
        raise ExternalParsingError(f"URI '{raw_value}' contains illegal characters.")

    # A colon in the first segment separates the scheme.
    first_segment = re.split(r"[/?#]", raw_value, maxsplit=1)[0]
    if ":" in first_segment:
        scheme = first_segment.split(":", 1)[0]
        if not RE_SCHEME.match(scheme):
            raise ExternalParsingError(f"URI '{raw_value}' has an invalid scheme '{scheme}'.")
    else:
        scheme = ""

    try:
        parts = urlsplit(raw_value)
        parts.port  # noqa: B018 (validates the port number)
    except ValueError as e:
        raise ExternalParsingError(f"URI '{raw_value}' is malformed: {e}") from e

    if parts.fragment and "#" in parts.fragment:
        raise ExternalParsingError(f"URI '{raw_value}' contains multiple fragments.")

    return URI(
        text=raw_value,
        scheme=scheme,  # urlsplit() lowercases the scheme, keep as-is.
        authority=parts.netloc,
        path=parts.path,
        query=parts.query,
        fragment=parts.fragment,
    )
