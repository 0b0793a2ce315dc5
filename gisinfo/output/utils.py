"""General utilities for outputting XML content"""

from datetime import date, datetime, time, timezone
from decimal import Decimal as D
from enum import Enum

from django.core.exceptions import ImproperlyConfigured

AUTO_STR = (int, float, D, date, time)


__all__ = (
    "xmlns",
    "attr_escape",
    "tag_escape",
    "to_qname",
    "render_xmlns_attributes",
    "value_to_xml_string",
    "format_coordinate",
)


class xmlns(Enum):
    """Common namespaces within OGC land.
    Note these short aliases are arbitrary in XML syntax; the XML code may use any alias (such as ns0).
    """

    # XML standard
    xsi = "http://www.w3.org/2001/XMLSchema-instance"

    # APIs by the Open Geospatial Consortium (OGC)
    ogc = "http://www.opengis.net/ogc"
    wfs1 = "http://www.opengis.net/wfs"
    wfs20 = "http://www.opengis.net/wfs/2.0"  # Web Feature Service (WFS)
    gml21 = "http://www.opengis.net/gml"
    gml32 = "http://www.opengis.net/gml/3.2"

    @classmethod
    def as_namespaces(cls) -> dict[str, str]:
        """Map the namespaces as {uri: alias}."""
        return {member.value: prefix for prefix, member in cls._member_map_.items()}

    def __str__(self):
        # Python 3.11+ has StrEnum for this.
        return self.value


COMMON_NAMESPACES = xmlns.as_namespaces()


def tag_escape(s: str):
    """Escape a value for usage in XML text."""
    return s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def attr_escape(s: str):
    """Escape a value for usage in an XML attribute.
    This is slightly faster than ``html.escape()`` as it doesn't replace single quotes.
    """
    return s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;")


def value_to_xml_string(value):
    """Format a Python value for usage in XML text."""
    # Simple scalar value
    if isinstance(value, str):  # most cases
        return tag_escape(value)
    elif isinstance(value, datetime):
        if value.tzinfo is None:
            return value.isoformat()
        return value.astimezone(timezone.utc).isoformat()
    elif isinstance(value, bool):
        return "true" if value else "false"
    elif isinstance(value, AUTO_STR):
        return str(value)
    else:
        return tag_escape(str(value))


def format_coordinate(value: float, num_decimals: int) -> str:
    """Format a coordinate with a limited number of decimals, without trailing zeros."""
    if isinstance(value, int):
        return str(value)

    text = f"{value:.{num_decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def render_xmlns_attributes(xml_namespaces: dict[str, str]):
    """Render XML Namespace declaration attributes, i.e. ``xmlns:prefix="uri"`` for each dict item."""
    return " ".join(
        f'xmlns:{prefix}="{xml_namespace}"' if prefix else f'xmlns="{xml_namespace}"'
        for xml_namespace, prefix in xml_namespaces.items()
    )


def to_qname(namespace, localname, namespaces: dict[str, str]) -> str:
    """Convert a fully qualified XML tag name to a prefixed short name."""
    if namespace is None:
        return localname

    prefix = namespaces.get(namespace)  # allow ""
    if prefix is None:
        try:
            prefix = COMMON_NAMESPACES[namespace]
        except KeyError:
            raise ImproperlyConfigured(
                f"No XML namespace prefix defined for '{namespace}'.\n"
                "This can be configured in 'EncoderSettings.xml_namespaces'."
            ) from None

    return f"{prefix}:{localname}" if prefix else localname
