
"""
Attendee-name boundary for the minutes editor.

Design intent:
- Normalize operator-entered attendee lists into candidate names.
- Keep honorific handling idempotent so repeated formatting is safe.
"""
