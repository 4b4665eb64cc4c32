import dataclasses

from minutes.editor.markup import INITIAL_CONTENT_MARKUP
from minutes.editor.session import MinutesEditorSession
from minutes.editor.surface import Caret, Selection
from minutes.internal_core.config import load_config
from minutes.internal_core.content_store import (
    RESET_CONFIRM_MESSAGE,
    STORAGE_KEY_CONTENT,
    STORAGE_KEY_META,
    ContentStore,
)
from minutes.internal_core.contracts import Candidate, Draft
from minutes.internal_core.kv_store import InMemoryKeyValueStore


def _session(clock, kv=None, audit=None) -> MinutesEditorSession:
    config = dataclasses.replace(load_config(), MINUTES_REANALYZE_DELAY_MS=50)
    return MinutesEditorSession(
        content_store=ContentStore(kv if kv is not None else InMemoryKeyValueStore()),
        config=config,
        clock=clock,
        audit=audit,
    )


def _type_trigger(session: MinutesEditorSession, clock) -> None:
    session.click(Caret(1, 0))
    session.insert_text("議題（")
    clock.advance_ms(60)
    session.flush()


def test_new_session_starts_from_template(clock) -> None:
    session = _session(clock)
    assert session.markup() == INITIAL_CONTENT_MARKUP
    assert session.draft == Draft()
    assert len(session.surface.blocks) == 11


def test_typing_persists_immediately_but_analysis_waits_for_delay(clock) -> None:
    kv = InMemoryKeyValueStore()
    session = _session(clock, kv)
    session.set_attendees("MEM", "田中")
    session.click(Caret(1, 0))
    session.insert_text("議題（")

    assert kv.get_item(STORAGE_KEY_CONTENT) == session.markup()
    assert session.suggestions.visible is False

    clock.advance_ms(10)
    assert session.flush() == frozenset()
    assert session.suggestions.visible is False

    clock.advance_ms(50)
    assert session.flush() == frozenset({"analyze", "restyle"})
    assert session.suggestions.visible is True
    assert session.suggestions.should_render(session.draft) is True


def test_select_candidate_inserts_token_and_persists(clock) -> None:
    kv = InMemoryKeyValueStore()
    session = _session(clock, kv)
    session.set_attendees("MEM", "田中")
    _type_trigger(session, clock)

    result = session.select_candidate(Candidate(name="田中", category="MEM"))

    assert result.inserted is True
    assert session.surface.blocks[1].text == "議題。（MEM田中）"
    assert session.suggestions.visible is False
    assert session.surface.focused is True
    assert session.selection.caret == Caret(1, len("議題。（MEM田中）"))
    assert "議題。（MEM田中）" in (kv.get_item(STORAGE_KEY_CONTENT) or "")

    # The next analysis sees the closing parenthesis, not a trigger.
    session.key_up()
    clock.advance_ms(60)
    session.flush()
    assert session.suggestions.visible is False


def test_ime_composition_defers_analysis_until_commit(clock) -> None:
    session = _session(clock)
    session.set_attendees("SF", "佐藤")
    session.click(Caret(1, 0))
    session.insert_text("議題")
    session.composition_start()
    session.composition_update("k")
    session.composition_update("（")
    assert session.surface.blocks[1].text == "議題（"

    clock.advance_ms(60)
    session.flush()
    assert session.suggestions.visible is False

    session.composition_end("（")
    assert session.surface.blocks[1].text == "議題（"
    assert session.surface.composing is False
    clock.advance_ms(60)
    session.flush()
    assert session.suggestions.visible is True


def test_restyle_promotes_bracket_lines_and_persists(clock) -> None:
    kv = InMemoryKeyValueStore()
    session = _session(clock, kv)
    session.click(Caret(2, 0))
    session.insert_text("【決定事項】")
    assert session.surface.blocks[2].font_size == "11pt"

    clock.advance_ms(60)
    session.flush()
    assert session.surface.blocks[2].font_size == "12pt"
    assert '<div style="font-size: 12pt">【決定事項】</div>' in (kv.get_item(STORAGE_KEY_CONTENT) or "")


def test_blur_formats_only_sf_field(clock) -> None:
    kv = InMemoryKeyValueStore()
    session = _session(clock, kv)
    session.set_attendees("MEM", "山田,田中")
    session.set_attendees("SF", "佐藤,鈴木")

    session.blur_attendees("MEM")
    assert session.draft.attendees_mem == "山田,田中"

    session.blur_attendees("SF")
    assert session.draft.attendees_sf == "佐藤様、鈴木様"
    assert session.draft.attendees_mem == "山田,田中"
    assert "佐藤様、鈴木様" in (kv.get_item(STORAGE_KEY_META) or "")


def test_reset_declined_leaves_state_unchanged(clock) -> None:
    kv = InMemoryKeyValueStore()
    session = _session(clock, kv)
    session.set_attendees("MEM", "田中")
    session.click(Caret(1, 0))
    session.insert_text("本文")
    before_items = {key: kv.get_item(key) for key in kv.keys()}
    before_markup = session.markup()

    prompts: list[str] = []
    assert session.reset(lambda message: prompts.append(message) or False) is False

    assert prompts == [RESET_CONFIRM_MESSAGE]
    assert {key: kv.get_item(key) for key in kv.keys()} == before_items
    assert session.markup() == before_markup
    assert session.draft.attendees_mem == "田中"


def test_reset_confirmed_clears_storage_and_restores_template(clock) -> None:
    kv = InMemoryKeyValueStore()
    session = _session(clock, kv)
    session.set_attendees("MEM", "田中")
    _type_trigger(session, clock)
    assert session.suggestions.visible is True

    assert session.reset(lambda _message: True) is True

    assert kv.keys() == []
    assert session.draft == Draft()
    assert session.markup() == INITIAL_CONTENT_MARKUP
    assert session.suggestions.visible is False
    assert session.selection.selection is None


def test_reload_restores_draft_and_surface(clock) -> None:
    kv = InMemoryKeyValueStore()
    first = _session(clock, kv)
    first.set_attendees("SF", "佐藤様")
    first.click(Caret(3, 0))
    first.insert_text("確認事項")
    first.split_block()
    first.insert_text("次回")

    second = _session(clock, kv)
    assert second.draft == first.draft
    assert second.surface.block_texts() == first.surface.block_texts()
    assert second.markup() == first.markup()


def test_malformed_metadata_is_recovered_and_audited(clock) -> None:
    events: list[tuple[str, str, str]] = []
    kv = InMemoryKeyValueStore({STORAGE_KEY_META: "{oops"})
    session = _session(clock, kv, audit=lambda t, c, d: events.append((t, c, d)))
    assert session.draft == Draft()
    assert [item[0] for item in events] == ["META_RECOVERED", "DRAFT_LOADED"]


def test_editing_helpers_keep_caret_consistent(clock) -> None:
    session = _session(clock)
    session.click(Caret(1, 0))
    session.insert_text("abc")
    assert session.delete_backward() == Caret(1, 2)
    assert session.split_block() == Caret(2, 0)
    assert session.surface.blocks[1].text == "ab"
    assert session.delete_backward() == Caret(1, 2)
    assert session.surface.blocks[1].text == "ab"


def test_sync_markup_adopts_client_surface(clock) -> None:
    kv = InMemoryKeyValueStore()
    session = _session(clock, kv)
    session.sync_markup("<div>【議題】</div><div>本文</div>")
    clock.advance_ms(60)
    session.flush()
    assert [block.font_size for block in session.surface.blocks] == ["12pt", "11pt"]
    assert kv.get_item(STORAGE_KEY_CONTENT) == session.markup()

    session.sync_markup("")
    assert len(session.surface.blocks) == 1


def test_select_after_edit_reanalyzes_before_inserting(clock) -> None:
    kv = InMemoryKeyValueStore()
    session = _session(clock, kv)
    session.set_attendees("MEM", "田中")
    _type_trigger(session, clock)
    assert session.suggestions.visible is True

    session.insert_text("x")
    result = session.select_candidate(Candidate(name="田中", category="MEM"))

    assert result.inserted is False
    assert session.surface.blocks[1].text == "議題（x"
    assert session.suggestions.visible is False
    assert "MEM田中" not in (kv.get_item(STORAGE_KEY_CONTENT) or "")


def test_select_is_ignored_while_composing(clock) -> None:
    session = _session(clock)
    session.set_attendees("MEM", "田中")
    _type_trigger(session, clock)
    session.composition_start()

    result = session.select_candidate(Candidate(name="田中", category="MEM"))

    assert result.inserted is False
    assert session.suggestions.visible is False


def test_typing_over_multi_line_selection_joins_lines(clock) -> None:
    session = _session(clock)
    session.sync_markup("<div>abc</div><div>def</div><div>ghi</div>")
    session.set_selection(Selection(anchor=Caret(2, 1), focus=Caret(0, 1)))

    assert session.insert_text("X") == Caret(0, 2)
    assert session.surface.block_texts() == ["aXhi"]

    session.set_selection(Selection(anchor=Caret(0, 1), focus=Caret(0, 3)))
    assert session.delete_backward() == Caret(0, 1)
    assert session.surface.block_texts() == ["ai"]


def test_audit_details_mask_attendee_names(clock) -> None:
    events: list[tuple[str, str, str]] = []
    session = _session(clock, audit=lambda t, c, d: events.append((t, c, d)))
    session.set_attendees("SF", "佐藤")
    session._emit("CONTENT_SAVED", "sync", "moved 佐藤様 and 佐藤")
    assert events[-1] == ("CONTENT_SAVED", "sync", "moved [attendee] and [attendee]")
