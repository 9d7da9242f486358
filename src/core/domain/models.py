"""Domain models (Pydantic v2).

- Strict, self-documented data structures for sessions, branding records,
  themes and assets.
- Serialized with the remote camelCase names through field aliases.

These models describe *what* the data is, not *how* it is fetched.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

REMOVE_SENTINEL = "Remove"


def normalize_endpoint(value: str) -> str:
    """Lower-case host name without scheme or trailing slash."""

    cleaned = value.strip().lower()
    for prefix in ("https://", "http://"):
        if cleaned.startswith(prefix):
            cleaned = cleaned[len(prefix):]
    return cleaned.rstrip("/")


class AuthScheme(str, Enum):
    VCLOUD = "vcloud"
    BEARER = "bearer"


class Session(BaseModel):
    """Externally created session reference bound to one endpoint."""

    endpoint: str = Field(
        ...,
        min_length=1,
        description="Host name (optionally host:port) of the remote endpoint.",
    )
    token: str = Field(
        ...,
        min_length=1,
        repr=False,
        description="Opaque session reference sent with every request.",
    )
    auth_scheme: AuthScheme = Field(
        default=AuthScheme.VCLOUD,
        description="How the token is sent: x-vcloud-authorization or Bearer.",
    )
    org: str | None = Field(default=None, description="Organization the session belongs to.")
    user: str | None = Field(default=None, description="User name, informational only.")

    @property
    def key(self) -> str:
        return normalize_endpoint(self.endpoint)

    @property
    def base_url(self) -> str:
        return f"https://{self.key}"


class ThemeType(str, Enum):
    BUILT_IN = "BUILT_IN"
    CUSTOM = "CUSTOM"


class ThemeDescriptor(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str = Field(..., min_length=1)
    theme_type: ThemeType = Field(default=ThemeType.CUSTOM, alias="themeType")


class MenuItemType(str, Enum):
    LINK = "link"
    SEPARATOR = "separator"
    OVERRIDE = "override"


class CustomLink(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str | None = None
    menu_item_type: MenuItemType = Field(default=MenuItemType.LINK, alias="menuItemType")
    url: str | None = None


class BrandingSettings(BaseModel):
    """Branding record as stored by the remote endpoint.

    The remote API replaces the whole record on write, so this is always
    written back complete.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    portal_name: str | None = Field(default=None, alias="portalName")
    portal_color: str | None = Field(default=None, alias="portalColor")
    selected_theme: ThemeDescriptor | None = Field(default=None, alias="selectedTheme")
    custom_links: list[CustomLink] = Field(default_factory=list, alias="customLinks")

    def to_payload(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)


class BrandingUpdate(BaseModel):
    """Fields a caller wants to change; `None` means keep the prior value."""

    portal_name: str | None = None
    portal_color: str | None = Field(
        default=None,
        description=f"New colour, or '{REMOVE_SENTINEL}' to clear it.",
    )
    selected_theme: ThemeDescriptor | None = None
    custom_links: list[CustomLink] | None = None

    def is_empty(self) -> bool:
        return (
            self.portal_name is None
            and self.portal_color is None
            and self.selected_theme is None
            and self.custom_links is None
        )

    def apply_to(self, current: BrandingSettings) -> BrandingSettings:
        """Overlay the supplied fields on `current` and return the merged record."""

        merged = current.model_copy(deep=True)
        if self.portal_name is not None:
            merged.portal_name = self.portal_name
        if self.portal_color is not None:
            if self.portal_color.strip().lower() == REMOVE_SENTINEL.lower():
                merged.portal_color = None
            else:
                merged.portal_color = self.portal_color
        if self.selected_theme is not None:
            merged.selected_theme = self.selected_theme
        if self.custom_links is not None:
            merged.custom_links = list(self.custom_links)
        return merged


class AssetPayload(BaseModel):
    """Raw bytes of a CSS/PNG/SVG asset."""

    filename: str = Field(..., min_length=1)
    content: bytes = Field(..., repr=False)
    media_type: str = Field(default="application/octet-stream")

    @property
    def size(self) -> int:
        return len(self.content)


class OperationResult(BaseModel):
    """Outcome of a mutating operation, printed by the CLI."""

    message: str
    endpoint: str
    version: str
