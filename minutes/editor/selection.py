from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from minutes.editor.surface import Caret, Selection


@dataclass(frozen=True)
class CaretRect:
    top: float
    bottom: float
    left: float
    right: float


@dataclass(frozen=True)
class Viewport:
    scroll_x: float = 0.0
    scroll_y: float = 0.0


@dataclass
class SelectionContext:
    """Explicit replacement for the browser-wide selection object."""

    selection: Optional[Selection] = None
    # Client-reported caret geometry; only valid for the selection it came with.
    caret_rect: Optional[CaretRect] = None
    viewport: Viewport = field(default_factory=Viewport)

    @property
    def caret(self) -> Optional[Caret]:
        if self.selection is None:
            return None
        return self.selection.start

    def set_selection(self, selection: Optional[Selection], caret_rect: Optional[CaretRect] = None) -> None:
        self.selection = selection
        self.caret_rect = caret_rect

    def collapse_to(self, caret: Caret) -> None:
        self.set_selection(Selection.collapsed_at(caret))

    def clear(self) -> None:
        self.set_selection(None)
