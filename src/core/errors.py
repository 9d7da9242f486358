"""Error taxonomy for branding operations.

Library code raises these; only the CLI turns them into messages and exit
codes. Every error ends the current operation immediately.
"""

from __future__ import annotations


class BrandingError(Exception):
    """Base class for every failure surfaced by this package."""


# (a) connection resolution


class ConnectionResolutionError(BrandingError):
    pass


class NotConnectedError(ConnectionResolutionError):
    def __init__(self, endpoint: str | None = None) -> None:
        self.endpoint = endpoint
        if endpoint:
            message = f"You are not connected to {endpoint}. Add a session for it first."
        else:
            message = "You are not connected to any endpoint. Add a session first."
        super().__init__(message)


class AmbiguousEndpointError(ConnectionResolutionError):
    def __init__(self, endpoints: list[str]) -> None:
        self.endpoints = endpoints
        super().__init__(
            "Connected to multiple endpoints ("
            + ", ".join(endpoints)
            + "); specify the target with --endpoint."
        )


# (b) version gates


class UnsupportedVersionError(BrandingError):
    def __init__(self, feature: str, required: object, negotiated: object) -> None:
        self.feature = feature
        self.required = required
        self.negotiated = negotiated
        super().__init__(
            f"{feature} requires API version {required} or later; "
            f"the endpoint supports {negotiated}."
        )


# (c) transport


class TransportError(BrandingError):
    pass


class VersionDiscoveryError(TransportError):
    def __init__(self, endpoint: str, reason: str) -> None:
        self.endpoint = endpoint
        self.reason = reason
        super().__init__(
            f"Could not retrieve the API version of {endpoint}: {reason}. "
            "If the endpoint uses an untrusted certificate, set "
            "VCD_BRANDING_CA_BUNDLE or VCD_BRANDING_VERIFY_TLS=false."
        )


class ApiRequestError(TransportError):
    def __init__(
        self,
        *,
        method: str,
        url: str,
        status_code: int | None,
        detail: str | None = None,
    ) -> None:
        self.method = method
        self.url = url
        self.status_code = status_code
        self.detail = detail
        status = f"HTTP {status_code}" if status_code is not None else "no response"
        message = f"{method} {url} failed ({status})"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class UploadLinkMissingError(TransportError):
    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Upload registration at {url} did not return an upload link.")


# (d) preconditions


class PreconditionError(BrandingError):
    pass


class ThemeExistsError(PreconditionError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"A theme named '{name}' already exists.")


class ThemeNotFoundError(PreconditionError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No theme named '{name}' exists.")


class AssetNotFoundError(PreconditionError):
    def __init__(self, path: object) -> None:
        self.path = path
        super().__init__(f"File not found: {path}")


# (e) local output


class OutputWriteError(BrandingError):
    def __init__(self, path: object, reason: str) -> None:
        self.path = path
        super().__init__(f"Cannot write {path}: {reason}")
