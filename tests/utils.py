from __future__ import annotations

from doctest import Example

from django.http.response import HttpResponseBase
from lxml import etree
from lxml.doctestcompare import PARSE_XML, LXMLOutputChecker

from gisinfo.output.utils import xmlns

# Namespaces for tag retrieval
NAMESPACES = {
    "app": "http://example.org/gisinfo",
    "ogc": xmlns.ogc.value,
    "wfs": xmlns.wfs20.value,
    "wfs1": xmlns.wfs1.value,
    "gml": xmlns.gml32.value,
    "gml2": xmlns.gml21.value,
    "xsi": xmlns.xsi.value,
}

BASE_URL = "http://testserver/wms"

#: The srsName for EPSG:4326, in the default notation.
WGS84_LEGACY = "http://www.opengis.net/gml/srs/epsg.xml#4326"


def read_response(response: HttpResponseBase) -> str:
    # works for all HttpResponse subclasses.
    return b"".join(response).decode()


def parse_xml(content: bytes | str) -> etree._Element:
    """Parse the XML output, with a readable error on syntax errors."""
    if isinstance(content, str):
        content = content.encode()

    try:
        return etree.fromstring(content)
    except etree.XMLSyntaxError as err:
        source_lines = content.decode().splitlines()
        raise AssertionError(
            f"XML syntax error: {err} (source: {source_lines[err.lineno - 1].strip()})"
        ) from err


def assert_xml_equal(got: bytes | str, want: str):
    """Compare two XML strings."""
    checker = LXMLOutputChecker()

    if isinstance(want, str) and isinstance(got, bytes):
        got = got.decode()

    if isinstance(got, str) and got.startswith("<?"):
        # Strip <?xml version='1.0' encoding="UTF-8" ?>
        # because it's not supported on utf-8 strings
        got = got[got.index("?>") + 3 :]

    if not checker.check_output(want, got, PARSE_XML):
        example = Example("", "")
        example.want = want  # unencoded, avoid doctest for bytes type.
        message = checker.output_difference(example, got, PARSE_XML)
        raise AssertionError(message)


def assert_service_exception(
    response: HttpResponseBase,
    expect_code,
    expect_message=None,
    expect_locator=None,
    expect_status=400,
) -> etree._Element:
    """Utility to perform all assertion checks for a returned exception message."""
    content = read_response(response)

    # Test response
    assert response["content-type"] == "text/xml; charset=utf-8", content
    assert response.status_code == expect_status, content
    assert "</ServiceExceptionReport>" in content

    xml_doc = parse_xml(content)
    assert xml_doc.attrib["version"] == "1.3.0"

    exception = xml_doc.find("ogc:ServiceException", NAMESPACES)
    assert exception.attrib["code"] == expect_code, content
    if expect_message is not None:
        assert expect_message in exception.text, exception.text
    if expect_locator is not None:
        assert exception.attrib["locator"] == expect_locator, content

    return exception
