"""API version discovery.

Queries `/api/versions`, drops deprecated versions and returns the highest
remaining one. The endpoint answers with JSON when asked for
`application/*+json`; older endpoints still answer XML, so both are read.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Any, Iterable

import httpx

from adapters.request_builder import VERSIONS_PATH
from core.domain.models import Session
from core.domain.version import ApiVersion
from core.errors import UnsupportedVersionError, VersionDiscoveryError

logger = logging.getLogger(__name__)

VERSIONS_ACCEPT = "application/*+json"


def _is_true(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _entries_from_json(payload: Any) -> Iterable[tuple[str, bool]]:
    if not isinstance(payload, dict):
        return []
    infos = payload.get("versionInfo") or payload.get("VersionInfo") or []
    out: list[tuple[str, bool]] = []
    for info in infos:
        if not isinstance(info, dict):
            continue
        version = info.get("version") or info.get("Version")
        if version is None:
            continue
        out.append((str(version), _is_true(info.get("deprecated", False))))
    return out


def _entries_from_xml(text: str) -> Iterable[tuple[str, bool]]:
    root = ET.fromstring(text)
    out: list[tuple[str, bool]] = []
    for element in root.iter():
        if _local(element.tag) != "VersionInfo":
            continue
        version = None
        for child in element:
            if _local(child.tag) == "Version":
                version = (child.text or "").strip()
                break
        if version:
            out.append((version, _is_true(element.get("deprecated", "false"))))
    return out


def parse_supported_versions(response: httpx.Response) -> list[ApiVersion]:
    """Non-deprecated versions advertised by a `/api/versions` response, ascending."""

    content_type = response.headers.get("content-type", "")
    if "xml" in content_type or response.text.lstrip().startswith("<"):
        entries = _entries_from_xml(response.text)
    else:
        entries = _entries_from_json(response.json())

    versions: list[ApiVersion] = []
    for raw, deprecated in entries:
        if deprecated:
            continue
        try:
            versions.append(ApiVersion.parse(raw))
        except ValueError:
            # Pre-release versions such as "37.0.0-alpha" are not usable.
            logger.debug("Skipping unparseable API version %r", raw)
    return sorted(set(versions))


def negotiate_version(client: httpx.Client, session: Session) -> ApiVersion:
    """Return the highest non-deprecated API version supported by `session`'s endpoint."""

    url = f"{session.base_url}{VERSIONS_PATH}"
    try:
        response = client.get(url, headers={"Accept": VERSIONS_ACCEPT})
    except httpx.HTTPError as exc:
        raise VersionDiscoveryError(session.key, str(exc) or exc.__class__.__name__) from exc

    if response.status_code != 200:
        raise VersionDiscoveryError(session.key, f"HTTP {response.status_code}")

    try:
        versions = parse_supported_versions(response)
    except (ValueError, ET.ParseError) as exc:
        raise VersionDiscoveryError(session.key, f"unreadable version list ({exc})") from exc

    if not versions:
        raise VersionDiscoveryError(session.key, "no supported API version advertised")

    version = versions[-1]
    logger.info("Negotiated API version %s with %s", version, session.key)
    return version


def require_version(negotiated: ApiVersion, minimum: ApiVersion, feature: str) -> None:
    """Reject `feature` when the negotiated version is below its minimum."""

    if negotiated < minimum:
        raise UnsupportedVersionError(feature, minimum, negotiated)
