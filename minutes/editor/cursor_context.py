from __future__ import annotations

"""
Decide from the live caret whether the attendee suggestion trigger holds.

Design intent:
- Read only: analysis never mutates the surface, so repeated runs are safe.
- Trigger = collapsed caret inside text, directly after an opening parenthesis.
- Anchor geometry prefers client-reported caret rects, else a grid estimate.
"""

from dataclasses import dataclass
from typing import Literal, Optional

from minutes.editor.layout import GridLayout
from minutes.editor.selection import CaretRect, SelectionContext
from minutes.editor.surface import TextSurface
from minutes.internal_core.contracts import CursorAnchor

TRIGGER_CHARS = ("（", "(")
DEFAULT_ANCHOR_OFFSET_PX = 5

TriggerReason = Literal[
    "triggered",
    "no_selection",
    "range_selection",
    "outside_text",
    "caret_at_start",
    "no_opening_paren",
]


@dataclass(frozen=True)
class TriggerAnalysis:
    triggered: bool
    reason: TriggerReason
    anchor: Optional[CursorAnchor] = None


def is_trigger_char(ch: Optional[str]) -> bool:
    return ch is not None and ch in TRIGGER_CHARS


class CursorContextAnalyzer:
    def __init__(self, *, layout: Optional[GridLayout] = None, anchor_offset_px: int = DEFAULT_ANCHOR_OFFSET_PX) -> None:
        self._layout = layout or GridLayout()
        self._anchor_offset_px = anchor_offset_px

    def analyze(self, surface: TextSurface, context: SelectionContext) -> TriggerAnalysis:
        selection = context.selection
        if selection is None:
            return TriggerAnalysis(triggered=False, reason="no_selection")
        if not selection.collapsed:
            return TriggerAnalysis(triggered=False, reason="range_selection")

        caret = selection.focus
        if not surface.in_text_segment(caret):
            return TriggerAnalysis(triggered=False, reason="outside_text")
        if caret.offset <= 0:
            return TriggerAnalysis(triggered=False, reason="caret_at_start")
        if not is_trigger_char(surface.char_before(caret)):
            return TriggerAnalysis(triggered=False, reason="no_opening_paren")

        rect = context.caret_rect or self._layout.caret_rect(surface, caret)
        return TriggerAnalysis(
            triggered=True,
            reason="triggered",
            anchor=self._anchor_from_rect(rect, context),
        )

    def _anchor_from_rect(self, rect: CaretRect, context: SelectionContext) -> CursorAnchor:
        # Viewport rect -> document coordinates, just below the caret line.
        return CursorAnchor(
            top=rect.bottom + context.viewport.scroll_y + self._anchor_offset_px,
            left=rect.left + context.viewport.scroll_x,
        )
