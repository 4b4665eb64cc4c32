from __future__ import annotations

"""
In-memory editable text surface with a flattened per-block text view.

Design intent:
- Blocks are the top-level lines of the editable region; each carries one font size.
- Carets address a block and a character offset inside that block's text.
- Mutations return the resulting caret so callers never guess cursor positions.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence


@dataclass
class Block:
    text: str = ""
    font_size: Optional[str] = None


@dataclass(frozen=True, order=True)
class Caret:
    block: int
    offset: int


@dataclass(frozen=True)
class Selection:
    anchor: Caret
    focus: Caret

    @classmethod
    def collapsed_at(cls, caret: Caret) -> "Selection":
        return cls(anchor=caret, focus=caret)

    @property
    def collapsed(self) -> bool:
        return self.anchor == self.focus

    @property
    def start(self) -> Caret:
        return min(self.anchor, self.focus)


@dataclass
class TextSurface:
    blocks: list[Block] = field(default_factory=list)
    focused: bool = False
    composing: bool = False

    @classmethod
    def from_blocks(cls, blocks: Iterable[Block]) -> "TextSurface":
        return cls(blocks=[Block(text=item.text, font_size=item.font_size) for item in blocks])

    def replace_blocks(self, blocks: Sequence[Block]) -> None:
        self.blocks = [Block(text=item.text, font_size=item.font_size) for item in blocks]

    def block_texts(self) -> list[str]:
        return [item.text for item in self.blocks]

    def plain_text(self) -> str:
        return "\n".join(self.block_texts())

    def focus(self) -> None:
        self.focused = True

    def has_block(self, index: int) -> bool:
        return 0 <= index < len(self.blocks)

    def in_text_segment(self, caret: Caret) -> bool:
        """True when the caret sits inside a block that holds text (not an empty line)."""
        if not self.has_block(caret.block):
            return False
        text = self.blocks[caret.block].text
        return bool(text) and 0 <= caret.offset <= len(text)

    def char_before(self, caret: Caret, distance: int = 1) -> Optional[str]:
        if not self.has_block(caret.block):
            return None
        index = caret.offset - distance
        text = self.blocks[caret.block].text
        if index < 0 or index >= len(text):
            return None
        return text[index]

    def clamp(self, caret: Caret) -> Caret:
        if not self.blocks:
            return Caret(0, 0)
        block = min(max(caret.block, 0), len(self.blocks) - 1)
        offset = min(max(caret.offset, 0), len(self.blocks[block].text))
        return Caret(block, offset)

    def end_caret(self) -> Caret:
        if not self.blocks:
            return Caret(0, 0)
        last = len(self.blocks) - 1
        return Caret(last, len(self.blocks[last].text))

    def insert_text(self, caret: Caret, text: str) -> Caret:
        if not self.blocks:
            self.blocks.append(Block())
        caret = self.clamp(caret)
        block = self.blocks[caret.block]
        block.text = block.text[: caret.offset] + text + block.text[caret.offset :]
        return Caret(caret.block, caret.offset + len(text))

    def delete_range(self, start: Caret, end: Caret) -> Caret:
        """Remove text between two carets; a range spanning lines joins them into the first."""
        if not self.blocks:
            return Caret(0, 0)
        start, end = self.clamp(min(start, end)), self.clamp(max(start, end))
        block = self.blocks[start.block]
        block.text = block.text[: start.offset] + self.blocks[end.block].text[end.offset :]
        del self.blocks[start.block + 1 : end.block + 1]
        return start

    def delete_backward(self, caret: Caret) -> Caret:
        if not self.blocks:
            return Caret(0, 0)
        caret = self.clamp(caret)
        if caret.offset > 0:
            return self.delete_range(Caret(caret.block, caret.offset - 1), caret)
        if caret.block == 0:
            return caret
        # Merge into the previous line.
        previous = self.blocks[caret.block - 1]
        merged_offset = len(previous.text)
        previous.text += self.blocks[caret.block].text
        del self.blocks[caret.block]
        return Caret(caret.block - 1, merged_offset)

    def split_block(self, caret: Caret) -> Caret:
        if not self.blocks:
            self.blocks.append(Block())
        caret = self.clamp(caret)
        current = self.blocks[caret.block]
        tail = Block(text=current.text[caret.offset :], font_size=current.font_size)
        current.text = current.text[: caret.offset]
        self.blocks.insert(caret.block + 1, tail)
        return Caret(caret.block + 1, 0)
