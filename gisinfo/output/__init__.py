"""The output rendering classes for the GML formats.

This also includes the collection classes that hold the feature info results.
"""

from .results import Feature, FeatureCollection, SimpleFeatureCollection  # isort: skip (fixes import loops)

from .base import EncoderSettings, OutputRenderer, XmlOutputRenderer
from .gml2 import GML2Renderer
from .gml32 import GML32Renderer
from .utils import to_qname

__all__ = [
    "EncoderSettings",
    "OutputRenderer",
    "XmlOutputRenderer",
    "Feature",
    "FeatureCollection",
    "SimpleFeatureCollection",
    "GML2Renderer",
    "GML32Renderer",
    "to_qname",
]
