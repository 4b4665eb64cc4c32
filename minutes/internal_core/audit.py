from __future__ import annotations

"""
Session audit trail for editor activity.

Design intent:
- Details describe what happened (counts, codes), never the minutes text itself.
- Attendee names are personal data: any that reach a detail are masked.
"""

import datetime as _dt
import re
from typing import Iterable

from .contracts import AuditEvent, AuditEventType
from .session_store import InMemoryEditorSessionStore

REDACTED_NAME = "[attendee]"
MAX_DETAIL_CHARS = 200

_MARKUP_TAG_RE = re.compile(r"<[^>]*>")


def redact_names(detail: str, names: Iterable[str]) -> str:
    # Longest first so "佐藤様" is masked whole before "佐藤".
    for name in sorted({item for item in names if item}, key=len, reverse=True):
        detail = detail.replace(name, REDACTED_NAME)
    return detail


def _sanitize_detail(detail: str, names: Iterable[str] = ()) -> str:
    detail = _MARKUP_TAG_RE.sub(" ", detail or "")
    detail = " ".join(redact_names(detail, names).split())
    if len(detail) > MAX_DETAIL_CHARS:
        detail = detail[:MAX_DETAIL_CHARS] + "…"
    return detail


def log_event(
    store: InMemoryEditorSessionStore,
    session_id: str,
    event_type: AuditEventType,
    code: str,
    detail: str,
    *,
    attendee_names: Iterable[str] = (),
) -> None:
    event = AuditEvent(
        ts_iso=_dt.datetime.now(_dt.timezone.utc).isoformat(),
        session_id=session_id,
        type=event_type,
        code=code,
        detail=_sanitize_detail(detail, attendee_names),
    )
    store.append_audit_event(session_id, event)
