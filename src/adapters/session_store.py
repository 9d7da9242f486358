"""Session registries.

Sessions are obtained by logging in elsewhere; these providers only hold the
resulting references so operations can look them up.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Iterable

from pydantic import BaseModel, Field, ValidationError

from core.domain.models import Session, normalize_endpoint
from core.errors import BrandingError

logger = logging.getLogger(__name__)


class StaticSessionProvider:
    """In-memory provider, for embedding and tests."""

    def __init__(self, sessions: Iterable[Session] = ()) -> None:
        self._sessions = list(sessions)

    def active_sessions(self) -> list[Session]:
        return list(self._sessions)


class SessionsFile(BaseModel):
    sessions: list[Session] = Field(default_factory=list)


class FileSessionStore:
    """JSON file of session references, one per endpoint."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load(self) -> SessionsFile:
        if not self.path.exists():
            return SessionsFile()
        try:
            return SessionsFile.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as exc:
            raise BrandingError(f"Cannot read session registry {self.path}: {exc}") from exc

    def _save(self, data: SessionsFile) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        text = json.dumps(data.model_dump(mode="json"), indent=2, sort_keys=True) + "\n"
        # Owner-only: the file holds session tokens.
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        try:
            os.fchmod(fd, 0o600)
        except (AttributeError, OSError):
            logger.debug("Could not restrict permissions of %s", self.path)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)

    def active_sessions(self) -> list[Session]:
        return self._load().sessions

    def add(self, session: Session) -> None:
        """Store `session`, replacing any session for the same endpoint."""

        data = self._load()
        data.sessions = [s for s in data.sessions if s.key != session.key]
        data.sessions.append(session)
        self._save(data)
        logger.info("Stored session for %s", session.key)

    def remove(self, endpoint: str) -> bool:
        wanted = normalize_endpoint(endpoint)
        data = self._load()
        kept = [s for s in data.sessions if s.key != wanted]
        if len(kept) == len(data.sessions):
            return False
        data.sessions = kept
        self._save(data)
        logger.info("Removed session for %s", wanted)
        return True
