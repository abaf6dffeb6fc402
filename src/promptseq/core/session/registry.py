from __future__ import annotations

from threading import Lock

import structlog

from promptseq.core.errors import SessionNotFound
from promptseq.core.session.assembly import SessionHandle

log = structlog.get_logger()


class SessionRegistry:
    """
    Thread-safe registry of live sessions in this process.

    Sessions are in-memory only and are lost on restart.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._sessions: dict[str, SessionHandle] = {}

    def add(self, handle: SessionHandle) -> None:
        with self._lock:
            if handle.session_id in self._sessions:
                raise ValueError(f"duplicate session_id: {handle.session_id}")
            self._sessions[handle.session_id] = handle
        log.info("session.registered", session_id=handle.session_id)

    def get(self, *, session_id: str) -> SessionHandle:
        with self._lock:
            handle = self._sessions.get(session_id)
        if handle is None:
            raise SessionNotFound(session_id)
        return handle

    def list(self) -> list[SessionHandle]:
        with self._lock:
            items = list(self._sessions.values())
        items.sort(key=lambda h: h.created_at_utc, reverse=True)
        return items

    def remove(self, *, session_id: str) -> SessionHandle:
        with self._lock:
            handle = self._sessions.pop(session_id, None)
        if handle is None:
            raise SessionNotFound(session_id)
        handle.close()
        log.info("session.removed", session_id=session_id)
        return handle
