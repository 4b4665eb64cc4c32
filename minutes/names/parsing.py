from __future__ import annotations

"""
Split delimited attendee strings into candidate names.

Design intent:
- Accept the three comma variants operators actually type (、 , ，).
- Preserve order and duplicates; only blank segments are dropped.
"""

import re

ATTENDEE_DELIMITERS = ("、", ",", "，")
ATTENDEE_JOINER = "、"

_DELIMITER_RE = re.compile("[" + "".join(re.escape(ch) for ch in ATTENDEE_DELIMITERS) + "]")


def split_attendee_names(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in _DELIMITER_RE.split(value) if part.strip()]
