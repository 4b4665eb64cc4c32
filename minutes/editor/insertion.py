from __future__ import annotations

"""
Insert a tagged attendee token at the caret.

Design intent:
- Every inserted reference starts a new sentence: ensure `。` precedes the parenthesis.
- Tokens are a tagged variant (category + name) rendered by a per-category rule.
- The caret always ends collapsed directly after the inserted token.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from minutes.editor.cursor_context import is_trigger_char
from minutes.editor.selection import SelectionContext
from minutes.editor.surface import Caret, TextSurface
from minutes.internal_core.contracts import AttendeeCategory, Candidate
from minutes.names.honorific import format_honorific

logger = logging.getLogger(__name__)

SENTENCE_TERMINATOR = "。"
TOKEN_CLOSER = "）"

_NAME_RULES: dict[str, Callable[[str], str]] = {
    "MEM": lambda name: name,
    "SF": format_honorific,
}


@dataclass(frozen=True)
class InsertionToken:
    category: AttendeeCategory
    name: str

    @property
    def display_name(self) -> str:
        return _NAME_RULES[self.category](self.name)

    @property
    def text(self) -> str:
        return f"{self.category}{self.display_name}{TOKEN_CLOSER}"


@dataclass(frozen=True)
class InsertionResult:
    inserted: bool
    token: Optional[InsertionToken] = None
    terminator_inserted: bool = False
    caret: Optional[Caret] = None


def build_insertion_token(candidate: Candidate) -> InsertionToken:
    return InsertionToken(category=candidate.category, name=candidate.name)


class TextInsertionEngine:
    def __init__(self, *, on_mutated: Optional[Callable[[], None]] = None) -> None:
        self._on_mutated = on_mutated

    def insert(self, surface: TextSurface, context: SelectionContext, candidate: Candidate) -> InsertionResult:
        caret = context.caret
        if caret is None or not surface.in_text_segment(caret):
            logger.debug("insertion skipped: no caret inside text")
            return InsertionResult(inserted=False)
        if not is_trigger_char(surface.char_before(caret)):
            logger.debug("insertion skipped: caret not after an opening parenthesis")
            return InsertionResult(inserted=False)

        terminator_inserted = False
        # caret - 1 is the opening parenthesis; caret - 2 precedes it.
        before_paren = surface.char_before(caret, 2)
        if before_paren is not None and before_paren != SENTENCE_TERMINATOR:
            surface.insert_text(Caret(caret.block, caret.offset - 1), SENTENCE_TERMINATOR)
            caret = Caret(caret.block, caret.offset + len(SENTENCE_TERMINATOR))
            terminator_inserted = True

        token = build_insertion_token(candidate)
        after = surface.insert_text(caret, token.text)
        context.collapse_to(after)

        if self._on_mutated is not None:
            self._on_mutated()
        return InsertionResult(
            inserted=True,
            token=token,
            terminator_inserted=terminator_inserted,
            caret=after,
        )
