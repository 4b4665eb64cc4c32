from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

AttendeeCategory = Literal["MEM", "SF"]

ATTENDEE_CATEGORIES: tuple[AttendeeCategory, ...] = ("MEM", "SF")


class Draft(BaseModel):
    # Persisted JSON keeps the browser-era camelCase keys.
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    attendees_mem: str = Field(default="", alias="attendeesMem")
    attendees_sf: str = Field(default="", alias="attendeesSf")
    content: str = ""

    def attendees_for(self, category: AttendeeCategory) -> str:
        if category == "MEM":
            return self.attendees_mem
        return self.attendees_sf

    def with_attendees(self, category: AttendeeCategory, value: str) -> "Draft":
        if category == "MEM":
            return self.model_copy(update={"attendees_mem": value})
        return self.model_copy(update={"attendees_sf": value})


class Candidate(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(min_length=1)
    category: AttendeeCategory


class CursorAnchor(BaseModel):
    model_config = ConfigDict(extra="forbid")

    top: float = 0.0
    left: float = 0.0


AuditEventType = Literal[
    "DRAFT_LOADED",
    "META_RECOVERED",
    "META_SAVED",
    "CONTENT_SAVED",
    "SUGGESTION_INSERTED",
    "RESET",
    "RESET_DECLINED",
]


class AuditEvent(BaseModel):
    model_config = ConfigDict(extra="forbid")

    ts_iso: str
    session_id: str
    type: AuditEventType
    code: str
    detail: str
