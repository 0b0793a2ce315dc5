"""Request objects for the feature info rendering.

The :class:`GetFeatureInfo` object describes the incoming WMS request.
The :class:`GetFeature` and :class:`Query` objects follow the WFS request structure,
as the GML output rendering is written for that protocol.
For feature info results, these are constructed by the output format itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .values import URI

__all__ = (
    "GetFeatureInfo",
    "GetFeature",
    "Query",
)


@dataclass
class GetFeatureInfo:
    """The WMS ``GetFeatureInfo`` request, as far as output rendering needs it.

    This is constructed by the caller that queried the layers, e.g.::

        ?SERVICE=WMS&VERSION=1.3.0&REQUEST=GetFeatureInfo&QUERY_LAYERS=lakes&INFO_FORMAT=application/vnd.ogc.gml&...
    """

    #: The URL of the service endpoint, used to generate schema links.
    base_url: str
    #: The layers that were queried.
    query_layers: list[str] = field(default_factory=list)
    #: The requested output format.
    info_format: str | None = None
    version: str = "1.3.0"


@dataclass(frozen=True)
class Query:
    """The ``<wfs:Query>`` element, which describes how a single collection is rendered."""

    #: The name of the layer this query describes.
    typeName: str | None = None
    #: The coordinate system of the geometries (absent when unknown).
    srsName: URI | None = None


@dataclass
class GetFeature:
    """The ``<wfs:GetFeature>`` request.

    The output rendering reads the queries to find the ``srsName`` for each collection.
    """

    base_url: str
    queries: list[Query] = field(default_factory=list)
    service = "WFS"
