"""Session provider contract.

Sessions are created by a login step outside this package; operations only
read them through a provider that is passed in explicitly.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import Session


@runtime_checkable
class SessionProvider(Protocol):
    """Minimal contract for a session registry."""

    def active_sessions(self) -> list[Session]:
        """Return every session currently usable, one per endpoint."""

        ...
