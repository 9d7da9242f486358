"""API version values and the feature minimums that depend on them.

Versions are parsed into integers before any comparison so that `31.0`
sorts above `9.0`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_VERSION_RE = re.compile(r"^\s*(\d+)(?:\.(\d+))?\s*$")


@dataclass(frozen=True, order=True)
class ApiVersion:
    """Numeric `major.minor` API version."""

    major: int
    minor: int = 0

    @classmethod
    def parse(cls, value: "str | int | float | ApiVersion") -> "ApiVersion":
        if isinstance(value, ApiVersion):
            return value
        match = _VERSION_RE.match(str(value))
        if match is None:
            raise ValueError(f"Invalid API version: {value!r}")
        return cls(int(match.group(1)), int(match.group(2) or 0))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"


BASELINE_VERSION = ApiVersion(31, 0)
"""Branding, themes, CSS and logo."""

TENANT_BRANDING_VERSION = ApiVersion(34, 0)
"""Tenant-scoped branding and logo."""

ICON_VERSION = ApiVersion(34, 0)

BRANDING_THEMES_READ_VERSION = ApiVersion(35, 0)
"""From this version on the branding record is read from the themes path."""
