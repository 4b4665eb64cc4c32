from __future__ import annotations

import logging
from typing import Optional

from minutes.editor.surface import TextSurface

logger = logging.getLogger(__name__)

HEADING_FONT_SIZE = "12pt"
BODY_FONT_SIZE = "11pt"
HEADING_MARKERS = ("【", "】")


def is_heading_text(text: str) -> bool:
    return any(marker in text for marker in HEADING_MARKERS)


class StyleEngine:
    def __init__(self, *, heading_size: str = HEADING_FONT_SIZE, body_size: str = BODY_FONT_SIZE) -> None:
        self._heading_size = heading_size
        self._body_size = body_size

    def size_for(self, text: str) -> str:
        return self._heading_size if is_heading_text(text) else self._body_size

    def apply(self, surface: Optional[TextSurface]) -> int:
        """Recompute every block's font size; returns how many blocks changed."""
        if surface is None:
            return 0
        changed = 0
        for block in surface.blocks:
            size = self.size_for(block.text)
            if block.font_size != size:
                block.font_size = size
                changed += 1
        if changed:
            logger.debug("restyled blocks changed=%s total=%s", changed, len(surface.blocks))
        return changed
