
"""
API boundary for the minutes editor.

Design intent:
- Host editor sessions for a browser front end.
- Keep handlers thin; editing semantics live in the editor package.
"""
