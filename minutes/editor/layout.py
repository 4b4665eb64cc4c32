from __future__ import annotations

"""
Deterministic caret geometry for clients that do not report layout.

Design intent:
- Approximate a monospace grid: full-width characters take two cells.
- Line heights follow each block's font size so heading lines sit taller.
"""

import re
import unicodedata
from dataclasses import dataclass

from minutes.editor.selection import CaretRect
from minutes.editor.surface import Caret, TextSurface

_FONT_SIZE_RE = re.compile(r"^\s*([0-9]+(?:\.[0-9]+)?)\s*(pt|px)?\s*$", flags=re.IGNORECASE)
_PX_PER_PT = 4.0 / 3.0


def font_size_px(font_size: str | None, default_pt: float = 11.0) -> float:
    match = _FONT_SIZE_RE.match(font_size or "")
    if not match:
        return default_pt * _PX_PER_PT
    value = float(match.group(1))
    unit = (match.group(2) or "pt").lower()
    return value if unit == "px" else value * _PX_PER_PT


def _cell_count(text: str) -> int:
    return sum(2 if unicodedata.east_asian_width(ch) in ("F", "W") else 1 for ch in text)


@dataclass(frozen=True)
class GridLayout:
    origin_top: float = 0.0
    origin_left: float = 0.0
    cell_width: float = 8.0
    line_spacing: float = 1.5

    def line_height(self, surface: TextSurface, block_index: int) -> float:
        font_size = surface.blocks[block_index].font_size if surface.has_block(block_index) else None
        return font_size_px(font_size) * self.line_spacing

    def caret_rect(self, surface: TextSurface, caret: Caret) -> CaretRect:
        caret = surface.clamp(caret)
        top = self.origin_top
        for index in range(caret.block):
            top += self.line_height(surface, index)
        text = surface.blocks[caret.block].text if surface.has_block(caret.block) else ""
        left = self.origin_left + _cell_count(text[: caret.offset]) * self.cell_width
        return CaretRect(
            top=top,
            bottom=top + self.line_height(surface, caret.block),
            left=left,
            right=left,
        )
