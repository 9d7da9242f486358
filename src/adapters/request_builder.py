"""Request construction for the branding API.

Builds unsent `httpx.Request` objects: path templates, authorization and
versioned accept headers, JSON or binary bodies. Nothing here talks to the
network.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from core.domain.models import AuthScheme, Session
from core.domain.version import BRANDING_THEMES_READ_VERSION, ApiVersion

JSON = "application/json"
CSS = "text/css"
IMAGE_ANY = "image/*"

BRANDING_ROOT = "/cloudapi/branding"
VERSIONS_PATH = "/api/versions"


def _segment(value: str) -> str:
    return quote(value, safe="")


def _scoped(suffix: str = "", tenant: str | None = None) -> str:
    path = BRANDING_ROOT
    if tenant:
        path += f"/tenant/{_segment(tenant)}"
    return path + suffix


def branding_read_path(version: ApiVersion, tenant: str | None = None) -> str:
    if tenant:
        return _scoped(tenant=tenant)
    if version >= BRANDING_THEMES_READ_VERSION:
        return themes_path()
    return BRANDING_ROOT


def branding_record_path(tenant: str | None = None) -> str:
    return _scoped(tenant=tenant)


def themes_path() -> str:
    return f"{BRANDING_ROOT}/themes"


def theme_create_path() -> str:
    return f"{BRANDING_ROOT}/themes/"


def theme_path(theme: str) -> str:
    return f"{BRANDING_ROOT}/themes/{_segment(theme)}"


def theme_contents_path(theme: str) -> str:
    return f"{theme_path(theme)}/contents"


def theme_css_path(theme: str) -> str:
    return f"{theme_path(theme)}/css"


def logo_path(tenant: str | None = None) -> str:
    return _scoped("/logo", tenant)


def icon_path(tenant: str | None = None) -> str:
    return _scoped("/icon", tenant)


def accept_header(media_type: str, version: ApiVersion) -> str:
    return f"{media_type};version={version}"


def auth_headers(session: Session) -> dict[str, str]:
    if session.auth_scheme is AuthScheme.BEARER:
        return {"Authorization": f"Bearer {session.token}"}
    return {"x-vcloud-authorization": session.token}


class RequestBuilder:
    """Assembles authenticated requests for one session and negotiated version."""

    def __init__(self, client: httpx.Client, session: Session, version: ApiVersion) -> None:
        self._client = client
        self._session = session
        self._version = version

    def url(self, path: str) -> str:
        return f"{self._session.base_url}{path}"

    def headers(self, accept: str = JSON, content_type: str | None = None) -> dict[str, str]:
        headers = {"Accept": accept_header(accept, self._version)}
        headers.update(auth_headers(self._session))
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    def build(
        self,
        method: str,
        path: str,
        *,
        accept: str = JSON,
        json_body: Any = None,
        content: bytes | None = None,
        content_type: str | None = None,
        absolute_url: str | None = None,
    ) -> httpx.Request:
        if json_body is not None and content_type is None:
            content_type = JSON
        url = absolute_url or self.url(path)
        headers = self.headers(accept, content_type)
        if json_body is not None:
            return self._client.build_request(method, url, headers=headers, json=json_body)
        return self._client.build_request(method, url, headers=headers, content=content)
