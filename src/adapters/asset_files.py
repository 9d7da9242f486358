"""Asset file I/O for CSS, logo and icon operations."""

from __future__ import annotations

from pathlib import Path

from core.domain.models import AssetPayload
from core.errors import AssetNotFoundError, OutputWriteError

_MEDIA_TYPES: dict[str, str] = {
    ".css": "text/css",
    ".png": "image/png",
    ".svg": "image/svg+xml",
}


def guess_media_type(path: Path) -> str:
    return _MEDIA_TYPES.get(path.suffix.lower(), "application/octet-stream")


def read_asset(path: Path) -> AssetPayload:
    """Load a local file into an `AssetPayload`."""

    if not path.is_file():
        raise AssetNotFoundError(path)
    return AssetPayload(
        filename=path.name,
        content=path.read_bytes(),
        media_type=guess_media_type(path),
    )


def write_output(path: Path, content: bytes | str) -> Path:
    """Write downloaded content to `path`, creating parent directories."""

    data = content.encode("utf-8") if isinstance(content, str) else content
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as exc:
        raise OutputWriteError(path, exc.strerror or str(exc)) from exc
    return path
