"""Connection resolution.

Picks the one session an operation targets among the active sessions.
"""

from __future__ import annotations

from typing import Sequence

from core.domain.models import Session, normalize_endpoint
from core.errors import AmbiguousEndpointError, NotConnectedError


def resolve_connection(sessions: Sequence[Session], endpoint: str | None = None) -> Session:
    """Return exactly one target session.

    Rules:
    - no endpoint and a single active session -> that session;
    - endpoint given -> the matching active session, else not connected;
    - no endpoint and several sessions -> ambiguous.
    """

    if endpoint:
        wanted = normalize_endpoint(endpoint)
        for session in sessions:
            if session.key == wanted:
                return session
        raise NotConnectedError(endpoint)

    if not sessions:
        raise NotConnectedError()
    if len(sessions) > 1:
        raise AmbiguousEndpointError([s.key for s in sessions])
    return sessions[0]
