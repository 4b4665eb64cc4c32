from __future__ import annotations

import time
from threading import RLock
from typing import Any, Callable, Dict, List

from .contracts import AuditEvent

SessionFactory = Callable[[str], Any]


class InMemoryEditorSessionStore:
    """Live editor sessions keyed by id, expired after a period of inactivity."""

    def __init__(self, ttl_seconds: int, factory: SessionFactory, *, max_audit_events: int = 500):
        self._ttl_seconds = ttl_seconds
        self._factory = factory
        self._max_audit_events = max(1, int(max_audit_events))
        self._lock = RLock()
        self._sessions: Dict[str, Dict[str, Any]] = {}

    def _touch(self, session_id: str) -> None:
        now = time.time()
        session = self._sessions[session_id]
        session["updated_at"] = now
        session["expires_at"] = now + self._ttl_seconds

    def has_session(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def get_or_create(self, session_id: str) -> Any:
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None:
                now = time.time()
                entry = {
                    "session_id": session_id,
                    "created_at": now,
                    "updated_at": now,
                    "expires_at": now + self._ttl_seconds,
                    "audit_events": [],
                    "editor": None,
                }
                self._sessions[session_id] = entry
                # Registered before construction so load-time audit events land here.
                try:
                    entry["editor"] = self._factory(session_id)
                except Exception:
                    self._sessions.pop(session_id, None)
                    raise
            self._touch(session_id)
            return entry["editor"]

    def append_audit_event(self, session_id: str, event: AuditEvent) -> None:
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None:
                return
            events: List[AuditEvent] = entry["audit_events"]
            events.append(event)
            if len(events) > self._max_audit_events:
                del events[: len(events) - self._max_audit_events]

    def get_audit_events(self, session_id: str) -> List[AuditEvent]:
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None:
                raise KeyError(f"Unknown session_id: {session_id}")
            return list(entry["audit_events"])

    def destroy_session(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def cleanup_expired_sessions(self) -> int:
        now = time.time()
        with self._lock:
            expired = [sid for sid, entry in self._sessions.items() if entry["expires_at"] <= now]
        for session_id in expired:
            self.destroy_session(session_id)
        return len(expired)
