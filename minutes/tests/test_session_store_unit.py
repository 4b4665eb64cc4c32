import pytest

from minutes.internal_core import audit
from minutes.internal_core.session_store import InMemoryEditorSessionStore


def test_get_or_create_reuses_session_objects() -> None:
    created: list[str] = []

    def factory(session_id: str) -> object:
        created.append(session_id)
        return object()

    store = InMemoryEditorSessionStore(3600, factory)
    first = store.get_or_create("a")
    assert store.get_or_create("a") is first
    assert store.has_session("a") is True
    assert created == ["a"]


def test_audit_events_are_bounded_and_sanitized() -> None:
    store = InMemoryEditorSessionStore(3600, lambda _sid: object(), max_audit_events=2)
    store.get_or_create("a")
    audit.log_event(store, "a", "META_SAVED", "attendees_mem", "first")
    audit.log_event(store, "a", "META_SAVED", "attendees_sf", "line one\nline two")
    audit.log_event(store, "a", "CONTENT_SAVED", "sync", "x" * 300)

    events = store.get_audit_events("a")
    assert [item.code for item in events] == ["attendees_sf", "sync"]
    assert events[0].detail == "line one line two"
    assert len(events[1].detail) == 201


def test_expired_sessions_are_destroyed() -> None:
    store = InMemoryEditorSessionStore(0, lambda _sid: object())
    store.get_or_create("a")
    assert store.cleanup_expired_sessions() == 1
    assert store.has_session("a") is False
    with pytest.raises(KeyError):
        store.get_audit_events("a")


def test_failed_factory_does_not_leave_a_session_behind() -> None:
    def factory(_session_id: str) -> object:
        raise RuntimeError("boom")

    store = InMemoryEditorSessionStore(3600, factory)
    with pytest.raises(RuntimeError):
        store.get_or_create("a")
    assert store.has_session("a") is False


def test_audit_details_drop_markup_and_mask_names() -> None:
    store = InMemoryEditorSessionStore(3600, lambda _sid: object())
    store.get_or_create("a")
    audit.log_event(
        store,
        "a",
        "CONTENT_SAVED",
        "sync",
        "<div>議題。（SF佐藤様）</div>",
        attendee_names=["佐藤", "佐藤様"],
    )
    assert store.get_audit_events("a")[0].detail == "議題。（SF[attendee]）"
