import pytest

from gisinfo.exceptions import ExternalParsingError
from gisinfo.parsers.values import parse_uri


class TestParseUri:
    @pytest.mark.parametrize(
        "value,scheme,authority,path",
        [
            ("EPSG:4326", "EPSG", "", "4326"),
            ("urn:ogc:def:crs:EPSG::4326", "urn", "", "ogc:def:crs:EPSG::4326"),
            ("http://www.opengis.net/def/crs/epsg/0/4326", "http", "www.opengis.net", "/def/crs/epsg/0/4326"),
            ("http://www.opengis.net/gml/srs/epsg.xml#4326", "http", "www.opengis.net", "/gml/srs/epsg.xml"),
            ("crs/4326", "", "", "crs/4326"),
        ],
    )
    def test_valid(self, value, scheme, authority, path):
        """Prove that URLs, URNs and short notations are all accepted."""
        uri = parse_uri(value)
        assert str(uri) == value
        assert uri.scheme == scheme
        assert uri.authority == authority
        assert uri.path == path
        assert uri.is_absolute == bool(scheme)

    def test_fragment(self):
        uri = parse_uri("http://www.opengis.net/gml/srs/epsg.xml#4326")
        assert uri.fragment == "4326"
        assert uri.query == ""

    def test_escaped(self):
        uri = parse_uri("http://example.org/crs/my%20crs")
        assert uri.path == "/crs/my%20crs"

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "not a uri",
            "http://example.org/%zz",
            "1abc:def",
            "http://[::1/path",
            "http://example.org:port/",
            "http://example.org/a#b#c",
            "EPSG:<4326>",
        ],
    )
    def test_invalid(self, value):
        """Prove that malformed values are rejected."""
        with pytest.raises(ExternalParsingError):
            parse_uri(value)

    def test_non_ascii(self):
        """Prove that non-ASCII characters are accepted, as an IRI would."""
        uri = parse_uri("urn:x-local:crs:Réseau")
        assert str(uri) == "urn:x-local:crs:Réseau"
        assert uri.scheme == "urn"
        assert uri.path == "x-local:crs:Réseau"

    @pytest.mark.parametrize(
        "value", ["urn:crs:a b", "urn:crs:a\u00a0b", "urn:crs:a\u2003b", "urn:crs:\x85"]
    )
    def test_non_ascii_whitespace(self, value):
        """Whitespace and control characters are never part of a URI."""
        with pytest.raises(ExternalParsingError):
            parse_uri(value)
