"""Models for practice session endpoints."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from cardcoach.models.card import CardResponse, Grade


PracticeMode = Literal["due", "difficult", "all"]
PracticeState = Literal["idle", "in_session", "complete"]


class PracticeStartRequest(BaseModel):
    """Request for POST /practice/start."""
    setId: str | None = Field(None, description="Set to study; all of the user's cards when omitted")
    mode: PracticeMode = Field("due", description="Card selection: 'due', 'difficult' or 'all'")
    tag: str | None = Field(None, description="Only include cards carrying this tag")


class PracticeRateRequest(BaseModel):
    """Request for POST /practice/rate."""
    setId: str | None = Field(None, description="Set of the active session")
    rating: int | None = Field(None, description="Numeric rating, 0 (unknown) to 5 (easy)")
    grade: Grade | None = Field(None, description="Named grade, used when rating is omitted")
    correct: bool | None = Field(None, description="Correct/incorrect answer, used when rating and grade are omitted")


class PracticeActionRequest(BaseModel):
    """Request for POST /practice/flip and POST /practice/skip."""
    setId: str | None = Field(None, description="Set of the active session")


class PracticeStateResponse(BaseModel):
    """Snapshot of a practice session."""
    state: PracticeState = Field(..., description="Current session state")
    mode: PracticeMode | None = Field(None, description="Selection mode the session was started with")
    card: CardResponse | None = Field(None, description="Card currently shown, null unless in session")
    flipped: bool = Field(False, description="Whether the back side is showing")
    position: int = Field(0, description="Index of the current card in the queue", ge=0)
    queueLength: int = Field(0, description="Number of cards in the session queue", ge=0)
    rated: int = Field(0, ge=0)
    skipped: int = Field(0, ge=0)
    correct: int = Field(0, ge=0)
    lastRated: CardResponse | None = Field(
        None,
        description="The card as persisted after the most recent rating",
    )
