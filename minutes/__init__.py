
"""
Minutes editor backend package.

Design intent:
- Host the cursor-aware attendee suggestion engine behind a thin API.
- Keep domain modules (names/editor) independent from persistence and transport.
"""
