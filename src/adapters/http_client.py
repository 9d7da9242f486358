"""httpx wrapper.

- Standardizes timeouts, headers and TLS verification for every request.
- Makes testing easy: a `httpx.MockTransport` can be injected.
"""

from __future__ import annotations

import logging
import ssl

import httpx

from core.config import AppSettings

logger = logging.getLogger(__name__)


def _log_request(request: httpx.Request) -> None:
    logger.debug("%s %s", request.method, request.url)


def _log_response(response: httpx.Response) -> None:
    request = response.request
    logger.debug("%s %s -> HTTP %s", request.method, request.url, response.status_code)


def build_client(
    settings: AppSettings | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
    extra_headers: dict[str, str] | None = None,
) -> httpx.Client:
    """Create a blocking `httpx.Client` with the configured defaults."""

    settings = settings or AppSettings()
    headers: dict[str, str] = {"User-Agent": settings.user_agent}
    if extra_headers:
        headers.update(extra_headers)

    verify: bool | ssl.SSLContext = settings.verify_tls
    if settings.verify_tls and settings.ca_bundle is not None:
        verify = ssl.create_default_context(cafile=str(settings.ca_bundle))

    return httpx.Client(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        verify=verify,
        transport=transport,
        event_hooks={"request": [_log_request], "response": [_log_response]},
    )
