from __future__ import annotations

"""
One editing session: draft metadata, live surface and suggestion state.

Design intent:
- Event handlers only mutate and schedule; trigger analysis runs from the scheduler.
- Every surface mutation is persisted immediately; metadata persists on every change.
- The selection context is owned here and passed explicitly to each engine.
"""

import logging
from typing import Any, Callable, Optional

from minutes.editor.cursor_context import CursorContextAnalyzer, TriggerAnalysis
from minutes.editor.insertion import InsertionResult, TextInsertionEngine
from minutes.editor.layout import GridLayout
from minutes.editor.markup import initial_template_blocks, parse_markup, render_markup
from minutes.editor.scheduler import ReanalysisScheduler
from minutes.editor.selection import CaretRect, SelectionContext, Viewport
from minutes.editor.styling import StyleEngine
from minutes.editor.suggestions import SuggestionEngine
from minutes.editor.surface import Block, Caret, Selection, TextSurface
from minutes.internal_core.audit import redact_names
from minutes.internal_core.config import EditorConfig, load_config
from minutes.internal_core.content_store import ConfirmCallback, ContentStore, default_draft
from minutes.internal_core.contracts import AttendeeCategory, Candidate, Draft
from minutes.names.honorific import format_attendee_field, format_honorific
from minutes.names.parsing import split_attendee_names

logger = logging.getLogger(__name__)

AuditHook = Callable[[str, str, str], None]


class MinutesEditorSession:
    def __init__(
        self,
        *,
        content_store: ContentStore,
        config: Optional[EditorConfig] = None,
        clock: Optional[Callable[[], float]] = None,
        layout: Optional[GridLayout] = None,
        audit: Optional[AuditHook] = None,
    ) -> None:
        cfg = config or load_config()
        self._store = content_store
        self._audit = audit
        self.scheduler = ReanalysisScheduler(delay_ms=cfg.MINUTES_REANALYZE_DELAY_MS, clock=clock)
        self.analyzer = CursorContextAnalyzer(layout=layout, anchor_offset_px=cfg.MINUTES_ANCHOR_OFFSET_PX)
        self.styles = StyleEngine(
            heading_size=cfg.MINUTES_HEADING_FONT_SIZE,
            body_size=cfg.MINUTES_BODY_FONT_SIZE,
        )
        self.suggestions = SuggestionEngine()
        self.insertion = TextInsertionEngine(on_mutated=self._after_insertion)
        self.selection = SelectionContext()
        # (start caret, provisional length) of the open IME composition.
        self._composition: Optional[tuple[Caret, int]] = None

        loaded = content_store.load()
        self.draft = loaded.draft
        self.surface = TextSurface.from_blocks(parse_markup(loaded.markup))
        if not self.surface.blocks:
            self.surface.replace_blocks(initial_template_blocks())
        if loaded.meta_recovered:
            self._emit("META_RECOVERED", "meta_parse_failed", "saved metadata replaced by defaults")
        self._emit(
            "DRAFT_LOADED",
            "content_restored" if loaded.content_restored else "initial_template",
            f"blocks={len(self.surface.blocks)}",
        )

    def _emit(self, event_type: str, code: str, detail: str) -> None:
        if self._audit is None:
            return
        try:
            self._audit(event_type, code, redact_names(detail, self.attendee_names()))
        except Exception:
            # Audit must never break editing.
            logger.exception("audit hook failed type=%s code=%s", event_type, code)

    # -- attendee metadata -------------------------------------------------

    def attendee_names(self) -> list[str]:
        names = split_attendee_names(self.draft.attendees_mem)
        for name in split_attendee_names(self.draft.attendees_sf):
            names.extend((name, format_honorific(name)))
        return names

    def set_attendees(self, category: AttendeeCategory, value: str) -> Draft:
        self.draft = self.draft.with_attendees(category, value)
        self._store.save_meta(self.draft)
        self._emit("META_SAVED", f"attendees_{category.lower()}", f"chars={len(value)}")
        return self.draft

    def blur_attendees(self, category: AttendeeCategory) -> Draft:
        # MEM names are inserted raw, so only the SF field is normalized on blur.
        if category != "SF":
            return self.draft
        value = self.draft.attendees_sf
        if not value:
            return self.draft
        return self.set_attendees("SF", format_attendee_field(value))

    # -- surface -----------------------------------------------------------

    def markup(self) -> str:
        return render_markup(self.surface.blocks)

    def _persist_content(self) -> None:
        self._store.save_content(self.markup())

    def _current_caret(self) -> Caret:
        caret = self.selection.caret
        return self.surface.clamp(caret) if caret is not None else self.surface.end_caret()

    def _content_changed(self) -> None:
        self._persist_content()
        self.scheduler.schedule_event("input")

    def _collapse_range(self) -> Caret:
        selection = self.selection.selection
        if selection is not None and not selection.collapsed:
            return self.surface.delete_range(selection.anchor, selection.focus)
        return self._current_caret()

    def set_selection(
        self,
        selection: Optional[Selection],
        *,
        caret_rect: Optional[CaretRect] = None,
        viewport: Optional[Viewport] = None,
    ) -> None:
        self.selection.set_selection(selection, caret_rect)
        if viewport is not None:
            self.selection.viewport = viewport

    def insert_text(self, text: str) -> Caret:
        caret = self.surface.insert_text(self._collapse_range(), text)
        self.selection.collapse_to(caret)
        self._content_changed()
        return caret

    def delete_backward(self) -> Caret:
        selection = self.selection.selection
        if selection is not None and not selection.collapsed:
            caret = self._collapse_range()
        else:
            caret = self.surface.delete_backward(self._current_caret())
        self.selection.collapse_to(caret)
        self._content_changed()
        return caret

    def split_block(self) -> Caret:
        caret = self.surface.split_block(self._collapse_range())
        self.selection.collapse_to(caret)
        self._content_changed()
        return caret

    def sync_markup(self, markup: str) -> None:
        """Adopt the full surface markup reported by a browser client."""
        blocks = parse_markup(markup)
        self.surface.replace_blocks(blocks or [Block(text="", font_size=self.styles.size_for(""))])
        self._content_changed()
        self._emit("CONTENT_SAVED", "sync", f"blocks={len(self.surface.blocks)}")

    def composition_start(self) -> None:
        self.surface.composing = True
        self._composition = (self._collapse_range(), 0)

    def _replace_composition(self, text: str) -> Caret:
        if self._composition is None:
            self._composition = (self._current_caret(), 0)
        start, length = self._composition
        self.surface.delete_range(start, Caret(start.block, start.offset + length))
        caret = self.surface.insert_text(start, text)
        self._composition = (start, len(text))
        self.selection.collapse_to(caret)
        return caret

    def composition_update(self, text: str) -> Caret:
        # Browsers fire input events for provisional text too.
        caret = self._replace_composition(text)
        self._content_changed()
        return caret

    def composition_end(self, text: Optional[str] = None) -> Caret:
        if text is not None:
            caret = self._replace_composition(text)
        else:
            caret = self._current_caret()
        self.surface.composing = False
        self._composition = None
        self._persist_content()
        self.scheduler.schedule_event("compositionend")
        return caret

    def key_up(self) -> None:
        self.scheduler.schedule_event("keyup")

    def click(self, caret: Caret, *, caret_rect: Optional[CaretRect] = None) -> None:
        self.selection.set_selection(Selection.collapsed_at(self.surface.clamp(caret)), caret_rect)
        self.scheduler.schedule_event("click")

    # -- scheduled work ----------------------------------------------------

    def flush(self, now: Optional[float] = None) -> frozenset[str]:
        due = self.scheduler.flush_due(now)
        if "analyze" in due:
            self.analyze()
        if "restyle" in due:
            self.restyle()
        return due

    def analyze(self) -> Optional[TriggerAnalysis]:
        if self.surface.composing:
            # Mid-composition text is provisional; composition end reschedules.
            return None
        analysis = self.analyzer.analyze(self.surface, self.selection)
        self.suggestions.apply_analysis(analysis)
        return analysis

    def restyle(self) -> int:
        changed = self.styles.apply(self.surface)
        if changed:
            self._persist_content()
        return changed

    # -- suggestions -------------------------------------------------------

    def _after_insertion(self) -> None:
        self.styles.apply(self.surface)
        self._persist_content()

    def refresh_suggestions(self) -> bool:
        """Re-run trigger analysis now so panel state reflects the latest mutation."""
        analysis = self.analyze()
        if analysis is None:
            self.suggestions.hide()
            return False
        return self.suggestions.should_render(self.draft)

    def select_candidate(self, candidate: Candidate) -> InsertionResult:
        if not self.refresh_suggestions():
            logger.info("candidate selection ignored: no open trigger")
            return InsertionResult(inserted=False)
        result = self.suggestions.select(
            candidate,
            surface=self.surface,
            context=self.selection,
            insertion=self.insertion,
        )
        if result.inserted and result.token is not None:
            self._emit(
                "SUGGESTION_INSERTED",
                candidate.category,
                f"terminator_inserted={result.terminator_inserted}",
            )
        return result

    # -- reset -------------------------------------------------------------

    def reset(self, confirm: ConfirmCallback) -> bool:
        if not self._store.reset(confirm):
            self._emit("RESET_DECLINED", "declined", "reset cancelled by user")
            return False
        self.draft = default_draft()
        self.surface.replace_blocks(initial_template_blocks())
        self.surface.composing = False
        self._composition = None
        self.selection.clear()
        self.suggestions.hide()
        self.scheduler.cancel()
        self._emit("RESET", "confirmed", "draft and content cleared")
        return True

    def snapshot(self) -> dict[str, Any]:
        selection = self.selection.selection
        return {
            "draft": self.draft.model_dump(by_alias=True),
            "markup": self.markup(),
            "blocks": [{"text": item.text, "font_size": item.font_size} for item in self.surface.blocks],
            "selection": None
            if selection is None
            else {
                "anchor": {"block": selection.anchor.block, "offset": selection.anchor.offset},
                "focus": {"block": selection.focus.block, "offset": selection.focus.offset},
            },
            "focused": self.surface.focused,
            "composing": self.surface.composing,
            "pending_reanalysis": self.scheduler.pending,
            "suggestions": self.suggestions.panel(self.draft),
        }
