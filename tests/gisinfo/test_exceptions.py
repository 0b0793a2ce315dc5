import pytest

from gisinfo.exceptions import (
    ExternalParsingError,
    InvalidCRSURI,
    InvalidFormat,
    wrap_crs_errors,
)
from tests.utils import assert_service_exception


class TestServiceExceptions:
    def test_invalid_format(self):
        """Prove that the exception is rendered as WMS ServiceExceptionReport."""
        exception = InvalidFormat(locator="info_format")
        assert_service_exception(
            exception.as_response(),
            "InvalidFormat",
            expect_message="Request contains a format not offered by the server.",
            expect_locator="info_format",
        )

    def test_invalid_crs(self):
        exception = InvalidCRSURI(
            "Unable to determine coordinate system for layer 'lakes'.",
            layer_name="lakes",
            srs_name="not a uri",
        )
        assert_service_exception(
            exception.as_response(),
            "InvalidCRS",
            expect_message="layer 'lakes'",
            expect_locator="lakes",
            expect_status=500,
        )

    def test_escaping(self):
        """Prove that the exception text is escaped."""
        exception = InvalidFormat("Output format '<b>' is not supported.", locator="info_format")
        xml = exception.as_xml()
        assert "&lt;b&gt;" in xml
        assert "<b>" not in xml

    def test_switched_arguments(self):
        with pytest.raises(ValueError):
            InvalidFormat("x", locator="info_format")


def test_wrap_crs_errors():
    """Prove that parsing errors name the layer and the reported srsName."""
    with pytest.raises(InvalidCRSURI) as exc_info:
        with wrap_crs_errors("lakes", "not a uri"):
            raise ExternalParsingError("URI 'not a uri' contains illegal characters.")

    exception = exc_info.value
    assert str(exception) == (
        "Unable to determine coordinate system for layer 'lakes'. Schema told us 'not a uri'"
    )
    assert exception.layer_name == "lakes"
    assert exception.srs_name == "not a uri"
    assert isinstance(exception.__cause__, ExternalParsingError)


def test_wrap_crs_errors_other():
    """Other errors are not translated."""
    with pytest.raises(KeyError):
        with wrap_crs_errors("lakes", "EPSG:4326"):
            raise KeyError("lakes")
