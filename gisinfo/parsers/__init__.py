"""Request objects and value parsing.

The :mod:`gisinfo.parsers.requests` module holds the (synthetic) request objects,
which the output rendering inspects.
"""

from .requests import GetFeature, GetFeatureInfo, Query
from .values import URI, parse_uri

__all__ = (
    "GetFeature",
    "GetFeatureInfo",
    "Query",
    "URI",
    "parse_uri",
)
