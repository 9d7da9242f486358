"""Branding and theme operations.

Each operation follows the same short sequence:
resolve connection -> negotiate version -> check the minimum version ->
optional pre-flight read -> one or two requests -> typed result or error.

There is no retry. The CSS upload (register, then PUT to the returned link)
is not atomic: when the PUT fails the registration may stay behind on the
remote side.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

import httpx
from pydantic import ValidationError

from adapters import request_builder as paths
from adapters.http_client import build_client
from adapters.request_builder import CSS, IMAGE_ANY, RequestBuilder
from adapters.version_negotiator import negotiate_version, require_version
from core.config import AppSettings
from core.domain.models import (
    AssetPayload,
    BrandingSettings,
    BrandingUpdate,
    OperationResult,
    Session,
    ThemeDescriptor,
    ThemeType,
)
from core.domain.version import (
    BASELINE_VERSION,
    ICON_VERSION,
    TENANT_BRANDING_VERSION,
    ApiVersion,
)
from core.errors import (
    ApiRequestError,
    PreconditionError,
    ThemeExistsError,
    ThemeNotFoundError,
    UploadLinkMissingError,
)
from core.interfaces.session_provider import SessionProvider
from core.services.connection import resolve_connection

logger = logging.getLogger(__name__)


@dataclass
class _Call:
    """Per-operation state: the resolved session and a ready request builder."""

    session: Session
    version: ApiVersion
    client: httpx.Client
    builder: RequestBuilder

    def result(self, message: str) -> OperationResult:
        return OperationResult(message=message, endpoint=self.session.key, version=str(self.version))


def _scoped_minimum(tenant: str | None) -> ApiVersion:
    return TENANT_BRANDING_VERSION if tenant else BASELINE_VERSION


def _error_detail(response: httpx.Response) -> str | None:
    try:
        payload = response.json()
    except ValueError:
        text = response.text.strip()
        return text[:200] or None
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("minorErrorCode")
        if message:
            return str(message)
    return None


def _is_theme_listing(payload: Any) -> bool:
    if isinstance(payload, list):
        return True
    return isinstance(payload, dict) and isinstance(payload.get("values"), list)


def _upload_link(response: httpx.Response) -> str | None:
    links = response.links
    for link in links.values():
        if str(link.get("rel", "")).startswith("upload") and link.get("url"):
            return link["url"]
    for link in links.values():
        if link.get("url"):
            return link["url"]
    return None


class BrandingService:
    """Operations over the remote branding API.

    The session provider is passed in; nothing is looked up globally.
    `transport` lets callers (tests) replace the network.
    """

    def __init__(
        self,
        sessions: SessionProvider,
        settings: AppSettings | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._sessions = sessions
        self._settings = settings or AppSettings()
        self._transport = transport

    # -- plumbing ---------------------------------------------------------

    @contextmanager
    def _call(self, endpoint: str | None, minimum: ApiVersion, feature: str) -> Iterator[_Call]:
        session = resolve_connection(self._sessions.active_sessions(), endpoint)
        with build_client(self._settings, transport=self._transport) as client:
            version = negotiate_version(client, session)
            require_version(version, minimum, feature)
            yield _Call(session, version, client, RequestBuilder(client, session, version))

    def _send(self, call: _Call, request: httpx.Request) -> httpx.Response:
        try:
            response = call.client.send(request)
        except httpx.HTTPError as exc:
            raise ApiRequestError(
                method=request.method,
                url=str(request.url),
                status_code=None,
                detail=str(exc) or exc.__class__.__name__,
            ) from exc
        if not response.is_success:
            raise ApiRequestError(
                method=request.method,
                url=str(request.url),
                status_code=response.status_code,
                detail=_error_detail(response),
            )
        return response

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ApiRequestError(
                method=response.request.method,
                url=str(response.request.url),
                status_code=response.status_code,
                detail="response is not valid JSON",
            ) from exc

    def _read_record(self, call: _Call, tenant: str | None) -> BrandingSettings:
        response = self._send(call, call.builder.build("GET", paths.branding_record_path(tenant)))
        return self._branding_from(response, self._json(response))

    def _read_branding(self, call: _Call, tenant: str | None) -> BrandingSettings:
        path = paths.branding_read_path(call.version, tenant)
        response = self._send(call, call.builder.build("GET", path))
        payload = self._json(response)
        if _is_theme_listing(payload):
            # Newer endpoints answer the read path with the theme listing;
            # the record itself stays at the write path.
            logger.info("Branding read on %s returned themes; reading the record", call.session.key)
            return self._read_record(call, tenant)
        return self._branding_from(response, payload)

    def _branding_from(self, response: httpx.Response, payload: Any) -> BrandingSettings:
        try:
            return BrandingSettings.model_validate(payload)
        except ValidationError as exc:
            raise ApiRequestError(
                method="GET",
                url=str(response.request.url),
                status_code=response.status_code,
                detail="unexpected branding payload",
            ) from exc

    def _write_branding(self, call: _Call, branding: BrandingSettings, tenant: str | None) -> None:
        path = paths.branding_record_path(tenant)
        self._send(call, call.builder.build("PUT", path, json_body=branding.to_payload()))

    def _list_themes(self, call: _Call) -> list[ThemeDescriptor]:
        response = self._send(call, call.builder.build("GET", paths.themes_path()))
        payload = self._json(response)
        if isinstance(payload, dict):
            payload = payload.get("values") or []
        themes: list[ThemeDescriptor] = []
        for item in payload if isinstance(payload, list) else []:
            if not isinstance(item, dict):
                continue
            try:
                themes.append(ThemeDescriptor.model_validate(item))
            except ValidationError:
                logger.debug("Skipping unreadable theme entry %r", item)
        return themes

    def _find_theme(self, call: _Call, name: str) -> ThemeDescriptor | None:
        wanted = name.strip().lower()
        for theme in self._list_themes(call):
            if theme.name.lower() == wanted:
                return theme
        return None

    def _require_theme(self, call: _Call, name: str) -> ThemeDescriptor:
        theme = self._find_theme(call, name)
        if theme is None:
            raise ThemeNotFoundError(name)
        return theme

    def _update_branding(
        self,
        call: _Call,
        update: BrandingUpdate,
        tenant: str | None,
    ) -> BrandingSettings:
        current = self._read_record(call, tenant)
        merged = update.apply_to(current)
        self._write_branding(call, merged, tenant)
        return merged

    # -- branding ---------------------------------------------------------

    def get_branding(self, *, endpoint: str | None = None, tenant: str | None = None) -> BrandingSettings:
        feature = "Tenant branding" if tenant else "Branding"
        with self._call(endpoint, _scoped_minimum(tenant), feature) as call:
            return self._read_branding(call, tenant)

    def set_branding(
        self,
        update: BrandingUpdate,
        *,
        theme: str | None = None,
        endpoint: str | None = None,
        tenant: str | None = None,
    ) -> OperationResult:
        """Read the branding record, overlay the supplied fields and write it back.

        `theme` is a theme name resolved against the endpoint's theme list.
        """

        if theme is None and update.is_empty():
            raise PreconditionError("Nothing to update: supply at least one branding field.")

        feature = "Tenant branding" if tenant else "Branding"
        with self._call(endpoint, _scoped_minimum(tenant), feature) as call:
            if theme is not None:
                update = update.model_copy(update={"selected_theme": self._require_theme(call, theme)})
            self._update_branding(call, update, tenant)
            target = f"tenant {tenant}" if tenant else "system"
            return call.result(f"Branding updated for {target} on {call.session.key}.")

    # -- themes -----------------------------------------------------------

    def list_themes(self, *, endpoint: str | None = None) -> list[ThemeDescriptor]:
        with self._call(endpoint, BASELINE_VERSION, "Themes") as call:
            return self._list_themes(call)

    def get_theme(self, name: str, *, endpoint: str | None = None) -> ThemeDescriptor:
        with self._call(endpoint, BASELINE_VERSION, "Themes") as call:
            return self._require_theme(call, name)

    def create_theme(self, name: str, *, endpoint: str | None = None) -> OperationResult:
        with self._call(endpoint, BASELINE_VERSION, "Theme creation") as call:
            if self._find_theme(call, name) is not None:
                raise ThemeExistsError(name)
            request = call.builder.build("POST", paths.theme_create_path(), json_body={"name": name})
            self._send(call, request)
            logger.info("Created theme %s on %s", name, call.session.key)
            return call.result(f"Theme '{name}' created on {call.session.key}.")

    def remove_theme(self, name: str, *, endpoint: str | None = None) -> OperationResult:
        with self._call(endpoint, BASELINE_VERSION, "Theme removal") as call:
            theme = self._require_theme(call, name)
            if theme.theme_type is ThemeType.BUILT_IN:
                raise PreconditionError(f"Theme '{theme.name}' is built-in and cannot be removed.")
            self._send(call, call.builder.build("DELETE", paths.theme_path(theme.name)))
            logger.info("Removed theme %s on %s", theme.name, call.session.key)
            return call.result(f"Theme '{theme.name}' removed from {call.session.key}.")

    def activate_theme(
        self,
        name: str,
        *,
        endpoint: str | None = None,
        tenant: str | None = None,
    ) -> OperationResult:
        feature = "Tenant theme selection" if tenant else "Theme selection"
        with self._call(endpoint, _scoped_minimum(tenant), feature) as call:
            theme = self._require_theme(call, name)
            self._update_branding(call, BrandingUpdate(selected_theme=theme), tenant)
            return call.result(f"Theme '{theme.name}' activated on {call.session.key}.")

    # -- CSS --------------------------------------------------------------

    def upload_css(self, theme: str, asset: AssetPayload, *, endpoint: str | None = None) -> OperationResult:
        """Register the CSS file with the theme, then PUT its bytes to the returned link."""

        with self._call(endpoint, BASELINE_VERSION, "Theme CSS upload") as call:
            descriptor = self._require_theme(call, theme)
            if descriptor.theme_type is ThemeType.BUILT_IN:
                raise PreconditionError(
                    f"Theme '{descriptor.name}' is built-in; CSS can only be uploaded to custom themes."
                )

            register = call.builder.build(
                "POST",
                paths.theme_contents_path(descriptor.name),
                json_body={"fileName": asset.filename, "size": asset.size},
            )
            response = self._send(call, register)
            link = _upload_link(response)
            if link is None:
                raise UploadLinkMissingError(str(register.url))

            logger.info("Uploading %s (%d bytes) to %s", asset.filename, asset.size, link)
            upload = call.builder.build(
                "PUT",
                "",
                absolute_url=link,
                content=asset.content,
                content_type=CSS,
            )
            self._send(call, upload)
            return call.result(f"CSS '{asset.filename}' uploaded to theme '{descriptor.name}'.")

    def download_css(self, theme: str, *, endpoint: str | None = None) -> str:
        with self._call(endpoint, BASELINE_VERSION, "Theme CSS download") as call:
            request = call.builder.build("GET", paths.theme_css_path(theme), accept=CSS)
            return self._send(call, request).text

    # -- logo / icon ------------------------------------------------------

    def _upload_image(self, call: _Call, path: str, asset: AssetPayload, label: str, tenant: str | None) -> OperationResult:
        request = call.builder.build("PUT", path, content=asset.content, content_type=asset.media_type)
        self._send(call, request)
        target = f"tenant {tenant}" if tenant else "system"
        return call.result(f"{label} '{asset.filename}' uploaded for {target} on {call.session.key}.")

    def upload_logo(
        self,
        asset: AssetPayload,
        *,
        endpoint: str | None = None,
        tenant: str | None = None,
    ) -> OperationResult:
        feature = "Tenant logo" if tenant else "Logo"
        with self._call(endpoint, _scoped_minimum(tenant), feature) as call:
            return self._upload_image(call, paths.logo_path(tenant), asset, "Logo", tenant)

    def download_logo(self, *, endpoint: str | None = None, tenant: str | None = None) -> bytes:
        feature = "Tenant logo" if tenant else "Logo"
        with self._call(endpoint, _scoped_minimum(tenant), feature) as call:
            request = call.builder.build("GET", paths.logo_path(tenant), accept=IMAGE_ANY)
            return self._send(call, request).content

    def upload_icon(
        self,
        asset: AssetPayload,
        *,
        endpoint: str | None = None,
        tenant: str | None = None,
    ) -> OperationResult:
        with self._call(endpoint, ICON_VERSION, "Icon") as call:
            return self._upload_image(call, paths.icon_path(tenant), asset, "Icon", tenant)

    def download_icon(self, *, endpoint: str | None = None, tenant: str | None = None) -> bytes:
        with self._call(endpoint, ICON_VERSION, "Icon") as call:
            request = call.builder.build("GET", paths.icon_path(tenant), accept=IMAGE_ANY)
            return self._send(call, request).content
