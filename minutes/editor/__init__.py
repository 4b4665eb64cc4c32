
"""
Editing-surface boundary for the minutes editor.

Design intent:
- Model the browser's editable region as blocks plus an explicit selection context.
- Keep trigger analysis, insertion and styling deterministic and unit-testable.
- Never read ambient global selection state; every operation receives it.
"""
