from __future__ import annotations

"""
HTTP surface for minutes editor sessions.

Design intent:
- Keep API orchestration thin and typed.
- Delegate cursor analysis, insertion and persistence to the editor session.
- Let tests inject clock and storage through `app.state`.
"""

import logging
import time
from pathlib import Path
from typing import Any, Callable, Literal

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from minutes.editor.selection import CaretRect, Viewport
from minutes.editor.session import MinutesEditorSession
from minutes.editor.suggestions import candidates_for
from minutes.editor.surface import Caret, Selection
from minutes.internal_core import audit
from minutes.internal_core.config import EditorConfig, load_config
from minutes.internal_core.content_store import RESET_CONFIRM_MESSAGE, ContentStore
from minutes.internal_core.contracts import ATTENDEE_CATEGORIES, AttendeeCategory, AuditEvent, Candidate, CursorAnchor
from minutes.internal_core.kv_store import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore
from minutes.internal_core.logging_setup import configure_logging
from minutes.internal_core.session_store import InMemoryEditorSessionStore
from minutes.names.honorific import format_honorific

DEFAULT_SESSION_ID = "default"


class CaretPayload(BaseModel):
    block: int = Field(ge=0)
    offset: int = Field(ge=0)


class SelectionPayload(BaseModel):
    anchor: CaretPayload
    focus: CaretPayload | None = None


class CaretRectPayload(BaseModel):
    top: float
    bottom: float
    left: float
    right: float


class ScrollPayload(BaseModel):
    x: float = 0.0
    y: float = 0.0


EditorEventType = Literal[
    "insert_text",
    "delete_backward",
    "split_block",
    "sync",
    "composition_start",
    "composition_update",
    "composition_end",
    "keyup",
    "click",
]


class EditorEventRequest(BaseModel):
    type: EditorEventType
    text: str | None = None
    markup: str | None = None
    selection: SelectionPayload | None = None
    caret_rect: CaretRectPayload | None = None
    scroll: ScrollPayload | None = None


class AttendeesUpdateRequest(BaseModel):
    value: str = ""


class SuggestionSelectRequest(BaseModel):
    name: str = Field(min_length=1)
    category: AttendeeCategory


class ResetRequest(BaseModel):
    confirm: bool = False


class BlockPayload(BaseModel):
    text: str
    font_size: str | None = None


class SuggestionSection(BaseModel):
    category: AttendeeCategory
    names: list[str] = Field(default_factory=list)


class SuggestionPanelPayload(BaseModel):
    visible: bool
    render: bool
    title: str
    anchor: CursorAnchor
    sections: list[SuggestionSection] = Field(default_factory=list)


class EditorStateResponse(BaseModel):
    session_id: str
    draft: dict[str, str]
    markup: str
    blocks: list[BlockPayload] = Field(default_factory=list)
    selection: SelectionPayload | None = None
    focused: bool = False
    composing: bool = False
    pending_reanalysis: bool = False
    suggestions: SuggestionPanelPayload


class SuggestionSelectResponse(BaseModel):
    inserted: bool
    token: str | None = None
    terminator_inserted: bool = False
    state: EditorStateResponse


class ResetResponse(BaseModel):
    reset: bool
    confirm_message: str
    state: EditorStateResponse


class AuditResponse(BaseModel):
    session_id: str
    events: list[AuditEvent] = Field(default_factory=list)


app = FastAPI(title="minutes editor service")
logger = logging.getLogger(__name__)


def _get_config() -> EditorConfig:
    existing = getattr(app.state, "editor_config", None)
    if isinstance(existing, EditorConfig):
        return existing
    created = load_config()
    setattr(app.state, "editor_config", created)
    return created


_startup_config = _get_config()
configure_logging(_startup_config.MINUTES_LOG_LEVEL)

if _startup_config.MINUTES_CORS_ENABLED:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _get_clock() -> Callable[[], float]:
    clock = getattr(app.state, "editor_clock", None)
    if callable(clock):
        return clock
    return time.monotonic


def _build_kv_store(cfg: EditorConfig) -> KeyValueStore:
    backend = cfg.MINUTES_STORAGE_BACKEND.strip().lower()
    if backend == "memory":
        return InMemoryKeyValueStore()
    if backend == "json_file":
        path: Path = cfg.storage_path()
        logger.info("Using JSON file key-value store path=%s", path)
        return JsonFileKeyValueStore(path)
    raise ValueError(f"Unsupported MINUTES_STORAGE_BACKEND: {cfg.MINUTES_STORAGE_BACKEND}")


def _get_kv_store() -> KeyValueStore:
    existing = getattr(app.state, "editor_kv_store", None)
    if existing is not None:
        return existing
    created = _build_kv_store(_get_config())
    setattr(app.state, "editor_kv_store", created)
    return created


def _get_session_store() -> InMemoryEditorSessionStore:
    existing = getattr(app.state, "editor_sessions", None)
    if isinstance(existing, InMemoryEditorSessionStore):
        return existing
    cfg = _get_config()

    def factory(session_id: str) -> MinutesEditorSession:
        namespace = "" if session_id == DEFAULT_SESSION_ID else session_id
        return MinutesEditorSession(
            content_store=ContentStore(_get_kv_store(), namespace=namespace),
            config=cfg,
            clock=lambda: _get_clock()(),
            audit=lambda event_type, code, detail: audit.log_event(
                created, session_id, event_type, code, detail  # type: ignore[arg-type]
            ),
        )

    created = InMemoryEditorSessionStore(
        cfg.MINUTES_SESSION_TTL_SECONDS,
        factory,
        max_audit_events=cfg.MINUTES_AUDIT_MAX_EVENTS,
    )
    setattr(app.state, "editor_sessions", created)
    return created


def _normalize_session_id(session_id: str) -> str:
    normalized = str(session_id or "").strip()
    if not normalized:
        raise HTTPException(status_code=400, detail="session_id is required.")
    if len(normalized) > 128:
        raise HTTPException(status_code=400, detail="session_id is too long.")
    return normalized


def _get_session(session_id: str) -> MinutesEditorSession:
    store = _get_session_store()
    store.cleanup_expired_sessions()
    return store.get_or_create(_normalize_session_id(session_id))


def _parse_category(raw: str) -> AttendeeCategory:
    value = str(raw or "").strip().upper()
    for category in ATTENDEE_CATEGORIES:
        if value == category:
            return category
    raise HTTPException(status_code=400, detail=f"Unsupported attendee category: {raw}")


def _caret(payload: CaretPayload) -> Caret:
    return Caret(block=payload.block, offset=payload.offset)


def _selection(payload: SelectionPayload) -> Selection:
    anchor = _caret(payload.anchor)
    focus = _caret(payload.focus) if payload.focus is not None else anchor
    return Selection(anchor=anchor, focus=focus)


def _caret_rect(payload: CaretRectPayload | None) -> CaretRect | None:
    if payload is None:
        return None
    return CaretRect(top=payload.top, bottom=payload.bottom, left=payload.left, right=payload.right)


def _state_response(session_id: str, session: MinutesEditorSession) -> EditorStateResponse:
    session.flush()
    snapshot: dict[str, Any] = session.snapshot()
    return EditorStateResponse(session_id=session_id, **snapshot)


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/editor/{session_id}", response_model=EditorStateResponse)
async def editor_state(session_id: str) -> EditorStateResponse:
    session = _get_session(session_id)
    return _state_response(session_id, session)


@app.put("/editor/{session_id}/attendees/{category}", response_model=EditorStateResponse)
async def update_attendees(session_id: str, category: str, payload: AttendeesUpdateRequest) -> EditorStateResponse:
    session = _get_session(session_id)
    session.set_attendees(_parse_category(category), payload.value)
    return _state_response(session_id, session)


@app.post("/editor/{session_id}/attendees/{category}/blur", response_model=EditorStateResponse)
async def blur_attendees(session_id: str, category: str) -> EditorStateResponse:
    session = _get_session(session_id)
    session.blur_attendees(_parse_category(category))
    return _state_response(session_id, session)


def _require_text(payload: EditorEventRequest) -> str:
    if payload.text is None:
        raise HTTPException(status_code=400, detail=f"text is required for {payload.type} events.")
    return payload.text


def _apply_event(session: MinutesEditorSession, payload: EditorEventRequest) -> None:
    viewport = Viewport(scroll_x=payload.scroll.x, scroll_y=payload.scroll.y) if payload.scroll else None
    if payload.type == "click":
        if payload.selection is None:
            raise HTTPException(status_code=400, detail="selection is required for click events.")
        if viewport is not None:
            session.selection.viewport = viewport
        session.click(_selection(payload.selection).focus, caret_rect=_caret_rect(payload.caret_rect))
        return

    if payload.selection is not None or viewport is not None:
        session.set_selection(
            _selection(payload.selection) if payload.selection is not None else session.selection.selection,
            caret_rect=_caret_rect(payload.caret_rect),
            viewport=viewport,
        )

    if payload.type == "insert_text":
        session.insert_text(_require_text(payload))
    elif payload.type == "delete_backward":
        session.delete_backward()
    elif payload.type == "split_block":
        session.split_block()
    elif payload.type == "sync":
        if payload.markup is None:
            raise HTTPException(status_code=400, detail="markup is required for sync events.")
        session.sync_markup(payload.markup)
    elif payload.type == "composition_start":
        session.composition_start()
    elif payload.type == "composition_update":
        session.composition_update(_require_text(payload))
    elif payload.type == "composition_end":
        session.composition_end(payload.text)
    elif payload.type == "keyup":
        session.key_up()


@app.post("/editor/{session_id}/events", response_model=EditorStateResponse)
async def editor_event(session_id: str, payload: EditorEventRequest) -> EditorStateResponse:
    session = _get_session(session_id)
    try:
        _apply_event(session, payload)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _state_response(session_id, session)


@app.post("/editor/{session_id}/suggestions/select", response_model=SuggestionSelectResponse)
async def select_suggestion(session_id: str, payload: SuggestionSelectRequest) -> SuggestionSelectResponse:
    session = _get_session(session_id)
    session.flush()
    if not session.refresh_suggestions():
        raise HTTPException(status_code=409, detail="Suggestion panel is not visible.")
    names = [item.name for item in candidates_for(session.draft, payload.category)]
    requested = format_honorific(payload.name) if payload.category == "SF" else payload.name
    if requested not in names:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown {payload.category} candidate: {payload.name!r}",
        )
    result = session.select_candidate(Candidate(name=requested, category=payload.category))
    return SuggestionSelectResponse(
        inserted=result.inserted,
        token=result.token.text if result.token is not None else None,
        terminator_inserted=result.terminator_inserted,
        state=_state_response(session_id, session),
    )


@app.post("/editor/{session_id}/reset", response_model=ResetResponse)
async def reset_editor(session_id: str, payload: ResetRequest) -> ResetResponse:
    session = _get_session(session_id)
    done = session.reset(lambda _message: payload.confirm)
    return ResetResponse(
        reset=done,
        confirm_message=RESET_CONFIRM_MESSAGE,
        state=_state_response(session_id, session),
    )


@app.get("/editor/{session_id}/audit", response_model=AuditResponse)
async def editor_audit(session_id: str) -> AuditResponse:
    normalized = _normalize_session_id(session_id)
    try:
        events = _get_session_store().get_audit_events(normalized)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return AuditResponse(session_id=normalized, events=events)
