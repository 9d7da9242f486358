"""Core configuration.

- Centralizes environment variables (pydantic-settings) away from the CLI.
- Lets adapters (HTTP client, session store) read config consistently.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_NAME = "vcd-branding"


def get_user_config_dir() -> Path:
    """Directory holding the user `.env` and the session registry.

    Honours `%APPDATA%` on Windows and `$XDG_CONFIG_HOME` elsewhere.
    """

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / APP_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def get_default_sessions_path() -> Path:
    return get_user_config_dir() / "sessions.json"


def _parse_env_lines(text: str) -> dict[str, str]:
    """`KEY=value` pairs of a `.env` file; comments and malformed lines are skipped."""

    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None], env_path: Path | None = None) -> Path:
    """Merge `values` into the user `.env` read by `AppSettings`.

    A `None` value removes the key, so `doctor setup` can drop a CA bundle
    that is no longer wanted.
    """

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    for key, value in values.items():
        if value is None:
            existing.pop(key, None)
        else:
            existing[key] = value

    lines = ["# vcd-branding user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Central application settings.

    Read from `VCD_BRANDING_*` environment variables, the project `.env`
    and then the user config `.env`.
    """

    model_config = SettingsConfigDict(
        env_prefix="VCD_BRANDING_",
        extra="ignore",
        case_sensitive=False,
        # Project first (dev), then the user's global config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout per request (seconds).",
    )
    verify_tls: bool = Field(
        default=True,
        description="Verify the endpoint's TLS certificate.",
    )
    ca_bundle: Path | None = Field(
        default=None,
        description="Optional CA bundle used to verify self-signed endpoints.",
    )
    user_agent: str = Field(
        default="vcd-branding/0.1",
        min_length=1,
        description="User-Agent sent with every request.",
    )
    sessions_path: Path = Field(
        default_factory=get_default_sessions_path,
        description="JSON file holding the active session references.",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Log level for the CLI.",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.strip().upper() if isinstance(value, str) else value
