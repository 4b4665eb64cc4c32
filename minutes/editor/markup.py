from __future__ import annotations

"""
Serialize the editing surface to and from the browser's block markup.

Design intent:
- Keep the persisted string byte-compatible with what the editable region produces.
- Tolerate browser quirks on parse: bare top-level text, nested inline tags, `<br>` lines.
"""

import html
import re
from typing import Iterable, Optional

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from minutes.editor.styling import BODY_FONT_SIZE, HEADING_FONT_SIZE
from minutes.editor.surface import Block

_FONT_SIZE_STYLE_RE = re.compile(r"font-size\s*:\s*([^;]+)", flags=re.IGNORECASE)

_TEMPLATE_HEADING = "【】"
_TEMPLATE_GAP_LINES = 4
_TEMPLATE_SECTIONS = 3


def _font_size_of(tag: Tag) -> Optional[str]:
    style = tag.get("style")
    if not style:
        return None
    match = _FONT_SIZE_STYLE_RE.search(str(style))
    if not match:
        return None
    return match.group(1).strip() or None


def _block_markup(block: Block) -> str:
    style = f' style="font-size: {block.font_size}"' if block.font_size else ""
    inner = html.escape(block.text, quote=False) if block.text else "<br>"
    return f"<div{style}>{inner}</div>"


def render_markup(blocks: Iterable[Block]) -> str:
    return "".join(_block_markup(block) for block in blocks)


def parse_markup(markup: Optional[str]) -> list[Block]:
    soup = BeautifulSoup(markup or "", "html.parser")
    blocks: list[Block] = []
    for node in soup.contents:
        if isinstance(node, Comment):
            continue
        if isinstance(node, Tag):
            if node.name == "br":
                continue
            blocks.append(Block(text=node.get_text(), font_size=_font_size_of(node)))
        elif isinstance(node, NavigableString):
            text = str(node)
            if text.strip():
                blocks.append(Block(text=text))
    return blocks


def initial_template_blocks() -> list[Block]:
    blocks: list[Block] = []
    for index in range(_TEMPLATE_SECTIONS):
        if index:
            blocks.extend(Block(text="", font_size=BODY_FONT_SIZE) for _ in range(_TEMPLATE_GAP_LINES))
        blocks.append(Block(text=_TEMPLATE_HEADING, font_size=HEADING_FONT_SIZE))
    return blocks


INITIAL_CONTENT_MARKUP = render_markup(initial_template_blocks())
