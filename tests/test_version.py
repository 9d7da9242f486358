import httpx
import pytest

from adapters.version_negotiator import negotiate_version, parse_supported_versions, require_version
from core.domain.models import Session
from core.domain.version import BASELINE_VERSION, ApiVersion
from core.errors import UnsupportedVersionError, VersionDiscoveryError


def test_versions_compare_numerically_not_lexicographically():
    assert ApiVersion.parse("31.0") >= ApiVersion.parse("9.0")
    assert ApiVersion.parse("9.0") < ApiVersion.parse("31.0")
    assert ApiVersion.parse("33.10") > ApiVersion.parse("33.9")
    assert "31.0" < "9.0"  # the bug class being guarded against


def test_parse_accepts_numbers_and_renders_major_minor():
    assert ApiVersion.parse(34) == ApiVersion(34, 0)
    assert ApiVersion.parse(" 32.0 ") == ApiVersion(32, 0)
    assert str(ApiVersion.parse("36")) == "36.0"


@pytest.mark.parametrize("raw", ["", "abc", "37.0.0-alpha", "1.2.3"])
def test_parse_rejects_non_numeric_versions(raw):
    with pytest.raises(ValueError):
        ApiVersion.parse(raw)


def test_parse_supported_versions_drops_deprecated_json_entries():
    response = httpx.Response(
        200,
        json={
            "versionInfo": [
                {"version": "9.0", "deprecated": False},
                {"version": "30.0", "deprecated": True},
                {"version": "31.0", "deprecated": False},
                {"version": "37.0.0-alpha", "deprecated": False},
                {"version": "40.0", "deprecated": True},
            ]
        },
    )
    assert parse_supported_versions(response) == [ApiVersion(9, 0), ApiVersion(31, 0)]


def test_parse_supported_versions_reads_xml():
    xml = (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<SupportedVersions xmlns="http://www.vmware.com/vcloud/versions">'
        '<VersionInfo deprecated="false"><Version>32.0</Version></VersionInfo>'
        '<VersionInfo deprecated="true"><Version>36.0</Version></VersionInfo>'
        '<VersionInfo deprecated="false"><Version>33.0</Version></VersionInfo>'
        "</SupportedVersions>"
    )
    response = httpx.Response(200, text=xml, headers={"Content-Type": "application/xml"})
    assert parse_supported_versions(response) == [ApiVersion(32, 0), ApiVersion(33, 0)]


def _client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_negotiate_version_returns_highest_supported():
    def handler(request):
        assert request.url == "https://vcd.example.com/api/versions"
        return httpx.Response(
            200,
            json={"versionInfo": [{"version": "9.0"}, {"version": "31.0"}, {"version": "10.0"}]},
        )

    with _client(handler) as client:
        version = negotiate_version(client, Session(endpoint="vcd.example.com", token="t"))

    assert version == ApiVersion(31, 0)


def test_negotiate_version_points_at_certificates_on_transport_failure():
    def handler(request):
        raise httpx.ConnectError("certificate verify failed", request=request)

    with _client(handler) as client, pytest.raises(VersionDiscoveryError) as info:
        negotiate_version(client, Session(endpoint="vcd.example.com", token="t"))

    assert "untrusted certificate" in str(info.value)
    assert "certificate verify failed" in str(info.value)


def test_negotiate_version_fails_on_http_error_or_empty_list():
    with _client(lambda r: httpx.Response(503)) as client, pytest.raises(VersionDiscoveryError):
        negotiate_version(client, Session(endpoint="vcd.example.com", token="t"))

    def only_deprecated(request):
        return httpx.Response(200, json={"versionInfo": [{"version": "31.0", "deprecated": True}]})

    with _client(only_deprecated) as client, pytest.raises(VersionDiscoveryError):
        negotiate_version(client, Session(endpoint="vcd.example.com", token="t"))


def test_require_version_gate():
    require_version(ApiVersion(31, 0), BASELINE_VERSION, "Branding")
    with pytest.raises(UnsupportedVersionError) as info:
        require_version(ApiVersion(30, 0), BASELINE_VERSION, "Branding")
    assert "31.0" in str(info.value)
    assert "30.0" in str(info.value)
