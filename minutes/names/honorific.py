from __future__ import annotations

"""
Append the honorific suffix to external attendee names.

Design intent:
- Never double-append; `format_honorific(format_honorific(x)) == format_honorific(x)`.
- Batch formatting rewrites a whole field into the canonical `、`-joined form.
"""

from minutes.names.parsing import ATTENDEE_JOINER, split_attendee_names

HONORIFIC_SUFFIX = "様"


def format_honorific(name: str) -> str:
    if name.endswith(HONORIFIC_SUFFIX):
        return name
    return f"{name}{HONORIFIC_SUFFIX}"


def format_attendee_field(value: str | None) -> str:
    """Re-split a field, suffix every name and join with the ideographic comma."""
    return ATTENDEE_JOINER.join(format_honorific(name) for name in split_attendee_names(value))
