"""Coordinate Reference System notations.

The feature info output only needs to name the CRS of each layer in a ``srsName``
attribute. This module parses the common notations, and writes them in the configured style.
Coordinates are never transformed here.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import cached_property

import pyproj
from django.core.exceptions import ImproperlyConfigured

from gisinfo import conf
from gisinfo.exceptions import ExternalValueError

__all__ = [
    "CRS",
    "CRS84",
    "WEB_MERCATOR",
    "WGS84",
    "crs_to_uri",
]

logger = logging.getLogger(__name__)

CRS_URN_REGEX = re.compile(
    r"^urn:(?P<domain>[a-z]+)"
    r":def:crs:(?P<authority>[a-z]+)"
    r":(?P<version>[0-9]+(?:\.[0-9]+){0,2})?"
    r":(?P<id>[0-9]+|crs84)$",
    re.IGNORECASE,
)

# Notations that hold an EPSG code after the prefix.
# The lookup happens on the lowercased value.
EPSG_PREFIXES = (
    "epsg:",
    "http://www.opengis.net/gml/srs/epsg.xml#",
    "http://www.opengis.net/def/crs/epsg/0/",
)

_KNOWN_CRS = {}


@dataclass(frozen=True)
class CRS:
    """A coordinate reference system, as registered by an authority (EPSG or OGC).

    Only the identity is stored: which notation was parsed doesn't matter for the output.
    """

    #: Either "ogc" or "opengis", whereas "ogc" is recommended.
    domain: str

    #: Either "OGC" or "EPSG".
    authority: str

    #: The registry version, mostly empty.
    version: str

    #: The code in the registry, e.g. "4326" or "CRS84".
    crsid: str

    #: The numeric spatial reference ID.
    srid: int

    @classmethod
    def from_string(cls, value: str | int) -> CRS:
        """Parse a CRS notation.

        This accepts an SRID, an OGC URN (``urn:ogc:def:crs:EPSG::4326``),
        or the prefixed notations (``EPSG:4326``,
        ``http://www.opengis.net/gml/srs/epsg.xml#4326``,
        ``http://www.opengis.net/def/crs/epsg/0/4326``).
        """
        if isinstance(value, int) or value.isdigit():
            return cls.from_srid(int(value))
        elif value.lower().startswith("urn:"):
            return cls._from_urn(value)

        lower_value = value.lower()
        for prefix in EPSG_PREFIXES:
            if lower_value.startswith(prefix):
                code = value[len(prefix) :]
                if not code.isdigit():
                    raise ExternalValueError(f"CRS '{value}' should end with a numeric SRID.")
                return cls.from_srid(int(code))

        raise ExternalValueError(f"Unknown CRS notation '{value}'.")

    @classmethod
    def from_srid(cls, srid: int) -> CRS:
        """Construct the CRS for an EPSG code."""
        if known := _KNOWN_CRS.get(("EPSG", srid)):
            return known

        return cls(domain="ogc", authority="EPSG", version="", crsid=str(srid), srid=srid)

    @classmethod
    def from_proj(cls, proj_crs: pyproj.CRS) -> CRS:
        """Construct the CRS from a PROJ object (e.g. the layer's native projection).

        Only coordinate systems that are registered by EPSG (or the OGC CRS84 alias)
        can be expressed this way.
        """
        if proj_crs.to_authority() == ("OGC", "CRS84"):
            return CRS84

        srid = proj_crs.to_epsg()
        if srid is None:
            raise ExternalValueError(f"CRS '{proj_crs.name}' has no EPSG code.")
        return cls.from_srid(srid)

    @classmethod
    def _from_urn(cls, urn: str) -> CRS:
        """Parse the URN format, as defined in https://portal.ogc.org/files/?artifact_id=30575."""
        urn_match = CRS_URN_REGEX.match(urn)
        if not urn_match:
            raise ExternalValueError(f"Unknown CRS URN '{urn}'.")

        domain = urn_match["domain"].lower()
        authority = urn_match["authority"].upper()
        crsid = urn_match["id"].upper()
        if domain not in ("ogc", "opengis"):
            raise ExternalValueError(f"CRS URN '{urn}' has an unknown domain '{domain}'.")

        if authority == "EPSG" and crsid.isdigit():
            srid = int(crsid)
        elif authority == "OGC" and crsid == "CRS84":
            # Same datum as EPSG:4326, but longitude/latitude ordering.
            srid = 4326
        else:
            raise ExternalValueError(f"CRS URN '{urn}' has an unknown code '{authority}:{crsid}'.")

        if known := _KNOWN_CRS.get((authority, srid)):
            if known.crsid == crsid:
                return known

        return cls(
            domain=domain,
            authority=authority,
            version=urn_match["version"] or "",
            crsid=crsid,
            srid=srid,
        )

    @property
    def legacy(self) -> str:
        """The :samp:`http://www.opengis.net/gml/srs/epsg.xml#{srid}` notation.
        GeoServer writes this in GML 2 output.
        """
        return f"http://www.opengis.net/gml/srs/epsg.xml#{self.srid:d}"

    @cached_property
    def urn(self) -> str:
        """The OGC URN notation."""
        return f"urn:{self.domain}:def:crs:{self.authority}:{self.version}:{self.crsid}"

    def as_uri(self, style: str) -> str:
        """Write the CRS in one of the notations for a ``srsName`` attribute.

        :param style: Either "legacy", "urn" or "epsg".
        """
        if style == "legacy":
            return self.legacy
        elif style == "urn" or (style == "epsg" and self.authority != "EPSG"):
            # CRS84 has no EPSG:xxxx notation of its own
            return self.urn
        elif style == "epsg":
            return f"EPSG:{self.srid:d}"
        else:
            raise ImproperlyConfigured(
                f"Unknown CRS URI style '{style}', choose 'legacy', 'urn' or 'epsg'."
            )

    def __str__(self):
        return self.urn

    def register(self) -> CRS:
        """Reuse this instance for each parsed notation of the same CRS."""
        _KNOWN_CRS[(self.authority, self.srid)] = self
        return self


def crs_to_uri(crs: CRS | pyproj.CRS | str | int | None, style: str | None = None) -> str | None:
    """Tell which URI describes the coordinate reference system of a layer.

    Returns ``None`` when no CRS is known. Identifiers that are not recognized
    as a CRS notation are returned as-is, so the caller can decide whether that's acceptable.

    :param crs: The CRS object, PROJ object, SRID or identifier string.
    :param style: The notation to use, defaults to ``GISINFO_CRS_URI_STYLE``.
    """
    if crs is None:
        return None

    style = style or conf.GISINFO_CRS_URI_STYLE
    if isinstance(crs, pyproj.CRS):
        try:
            crs = CRS.from_proj(crs)
        except ExternalValueError:
            # Fall back to any other registered identifier (e.g. ESRI:102100).
            identifier = crs.to_authority()
            return ":".join(identifier) if identifier else None
    elif not isinstance(crs, CRS):
        try:
            crs = CRS.from_string(crs)
        except ExternalValueError as e:
            logger.debug("Using CRS identifier %r unmodified: %s", crs, e)
            return crs

    return crs.as_uri(style)


#: Worldwide GPS, latitude/longitude (y/x). https://epsg.io/4326
WGS84 = CRS.from_srid(4326).register()

#: GeoJSON default. This is like WGS84 but with longitude/latitude (x/y).
CRS84 = CRS(domain="ogc", authority="OGC", version="", crsid="CRS84", srid=4326).register()

#: Spherical Mercator (Google Maps, Bing Maps, OpenStreetMap, ...), see https://epsg.io/3857
WEB_MERCATOR = CRS.from_srid(3857).register()
