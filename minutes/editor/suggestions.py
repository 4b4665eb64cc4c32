from __future__ import annotations

"""
Attendee suggestion panel state and selection.

Design intent:
- Candidates are derived from the draft on every read, never cached.
- Visibility follows the latest cursor analysis; a selection always hides the panel.
"""

from dataclasses import dataclass, field

from minutes.editor.cursor_context import TriggerAnalysis
from minutes.editor.insertion import InsertionResult, TextInsertionEngine
from minutes.editor.selection import SelectionContext
from minutes.editor.surface import TextSurface
from minutes.internal_core.contracts import ATTENDEE_CATEGORIES, AttendeeCategory, Candidate, CursorAnchor, Draft
from minutes.names.honorific import format_honorific
from minutes.names.parsing import split_attendee_names

PANEL_TITLE = "参加者を選択:"

_HONORIFIC_CATEGORIES: frozenset[str] = frozenset({"SF"})


@dataclass(frozen=True)
class CandidateGroups:
    mem: list[Candidate] = field(default_factory=list)
    sf: list[Candidate] = field(default_factory=list)

    def for_category(self, category: AttendeeCategory) -> list[Candidate]:
        return self.mem if category == "MEM" else self.sf

    @property
    def empty(self) -> bool:
        return not self.mem and not self.sf


def candidates_for(draft: Draft, category: AttendeeCategory) -> list[Candidate]:
    # SF names are shown with the honorific even before the field is blurred.
    return [
        Candidate(name=format_honorific(name) if category in _HONORIFIC_CATEGORIES else name, category=category)
        for name in split_attendee_names(draft.attendees_for(category))
    ]


class SuggestionEngine:
    def __init__(self) -> None:
        self.visible = False
        self.anchor = CursorAnchor()

    def apply_analysis(self, analysis: TriggerAnalysis) -> None:
        if analysis.triggered and analysis.anchor is not None:
            self.anchor = analysis.anchor
            self.visible = True
            return
        self.visible = False

    def hide(self) -> None:
        self.visible = False

    def candidate_groups(self, draft: Draft) -> CandidateGroups:
        return CandidateGroups(mem=candidates_for(draft, "MEM"), sf=candidates_for(draft, "SF"))

    def should_render(self, draft: Draft) -> bool:
        return self.visible and not self.candidate_groups(draft).empty

    def panel(self, draft: Draft) -> dict[str, object]:
        groups = self.candidate_groups(draft)
        render = self.visible and not groups.empty
        sections = []
        if render:
            for category in ATTENDEE_CATEGORIES:
                items = groups.for_category(category)
                if items:
                    sections.append({"category": category, "names": [item.name for item in items]})
        return {
            "visible": self.visible,
            "render": render,
            "title": PANEL_TITLE,
            "anchor": self.anchor.model_dump(),
            "sections": sections,
        }

    def select(
        self,
        candidate: Candidate,
        *,
        surface: TextSurface,
        context: SelectionContext,
        insertion: TextInsertionEngine,
    ) -> InsertionResult:
        if candidate.category in _HONORIFIC_CATEGORIES:
            candidate = Candidate(name=format_honorific(candidate.name), category=candidate.category)
        result = insertion.insert(surface, context, candidate)
        # Hidden regardless of what the next analysis would say.
        self.visible = False
        surface.focus()
        return result
