"""The output formats for GetFeatureInfo requests."""

from .base import GetFeatureInfoOutputFormat, OperationContext, Service
from .featureinfo import (
    GML2FeatureInfoOutputFormat,
    GML3FeatureInfoOutputFormat,
    get_output_format,
    get_output_formats,
)

__all__ = (
    "GetFeatureInfoOutputFormat",
    "OperationContext",
    "Service",
    "GML2FeatureInfoOutputFormat",
    "GML3FeatureInfoOutputFormat",
    "get_output_format",
    "get_output_formats",
)
