from datetime import date, datetime, timezone
from io import BytesIO

import pytest
from django.core.exceptions import ImproperlyConfigured

from gisinfo.operations.base import OperationContext
from gisinfo.output import EncoderSettings, FeatureCollection, GML2Renderer, to_qname
from gisinfo.output.buffer import StringBuffer
from gisinfo.output.utils import format_coordinate, value_to_xml_string
from gisinfo.parsers import GetFeature, GetFeatureInfo, Query
from tests.utils import BASE_URL


def test_to_qname():
    """Prove XML aliases are properly rendered."""
    assert to_qname("http://example.org", "test", {"http://example.org": "ns0"}) == "ns0:test"
    assert to_qname("http://example.org", "test", {"http://example.org": ""}) == "test"
    assert to_qname("http://www.opengis.net/gml", "Point", {}) == "gml21:Point"

    with pytest.raises(ImproperlyConfigured):
        assert to_qname("http://example.com/foo", "test", {"http://example.org": "ns0"})


@pytest.mark.parametrize(
    "value,num_decimals,expect",
    [
        (4.8, 8, "4.8"),
        (121400, 3, "121400"),
        (1.23456789, 3, "1.235"),
        (2.0, 3, "2"),
        (-0.0001, 2, "0"),
    ],
)
def test_format_coordinate(value, num_decimals, expect):
    assert format_coordinate(value, num_decimals) == expect


@pytest.mark.parametrize(
    "value,expect",
    [
        ("Tom & Jerry <3", "Tom &amp; Jerry &lt;3"),
        (True, "true"),
        (False, "false"),
        (12, "12"),
        (date(2020, 1, 31), "2020-01-31"),
        (datetime(2020, 1, 31, 12, 0, tzinfo=timezone.utc), "2020-01-31T12:00:00+00:00"),
        (["a", "b"], "['a', 'b']"),
    ],
)
def test_value_to_xml_string(value, expect):
    assert value_to_xml_string(value) == expect


def test_string_buffer():
    buffer = StringBuffer(chunk_size=4)
    buffer.write("abc")
    buffer.write(None)
    assert not buffer.is_full()
    buffer.write("def")
    assert buffer.is_full()
    assert buffer.flush() == "abcdef"
    assert str(buffer) == ""


class TestEncoderSettings:
    def test_from_conf(self, settings):
        """Prove that the Django settings are read."""
        settings.GISINFO_NUM_DECIMALS = 3
        settings.GISINFO_FEATURE_BOUNDING = True
        settings.GISINFO_XML_NAMESPACE = "http://example.org/layers"
        settings.GISINFO_XML_NAMESPACE_PREFIX = "layers"

        encoder_settings = EncoderSettings.from_conf()
        assert encoder_settings.num_decimals == 3
        assert encoder_settings.feature_bounding
        assert encoder_settings.encoding == "UTF-8"
        assert encoder_settings.xml_namespaces == {"http://example.org/layers": "layers"}


class TestOutputRenderer:
    def test_requires_get_feature(self, encoder_settings):
        """Prove that the renderer checks it's called for a GetFeature request."""
        operation = OperationContext(request=GetFeatureInfo(base_url=BASE_URL))
        with pytest.raises(TypeError):
            GML2Renderer(operation, FeatureCollection(), settings=encoder_settings)

    def test_requires_query_per_collection(self, lakes, encoder_settings):
        operation = OperationContext(request=GetFeature(base_url=BASE_URL, queries=[]))
        with pytest.raises(ValueError):
            GML2Renderer(operation, FeatureCollection([lakes]), settings=encoder_settings)

    def test_unknown_namespace(self, lakes, encoder_settings):
        """Prove that layers need a known XML namespace prefix."""
        lakes.xml_namespace = "http://example.org/unknown"
        operation = OperationContext(request=GetFeature(base_url=BASE_URL, queries=[Query()]))
        with pytest.raises(ImproperlyConfigured):
            GML2Renderer(operation, FeatureCollection([lakes]), settings=encoder_settings)

    def test_render_and_write_to(self, lakes, encoder_settings):
        """Prove that both rendering methods give the same document."""
        operation = OperationContext(request=GetFeature(base_url=BASE_URL, queries=[Query()]))
        collection = FeatureCollection([lakes])

        out = BytesIO()
        GML2Renderer(operation, collection, settings=encoder_settings).write_to(out)
        content = GML2Renderer(operation, collection, settings=encoder_settings).render()
        assert out.getvalue() == content
        assert content.startswith(b'<?xml version="1.0" encoding="UTF-8"?>')

    def test_encoding(self, lakes):
        """Prove that characters outside the encoding are written as references."""
        lakes.features[0].properties["name"] = "Ĳsselmeer"
        operation = OperationContext(request=GetFeature(base_url=BASE_URL, queries=[Query()]))
        encoder_settings = EncoderSettings(
            encoding="ISO-8859-1", xml_namespaces={"http://example.org/gisinfo": "app"}
        )

        content = GML2Renderer(operation, FeatureCollection([lakes]), encoder_settings).render()
        assert content.startswith(b'<?xml version="1.0" encoding="ISO-8859-1"?>')
        assert b"<app:name>&#306;sselmeer</app:name>" in content
