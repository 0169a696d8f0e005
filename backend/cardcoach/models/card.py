"""Flashcard models for API requests and responses."""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Literal
from uuid import uuid4

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from cardcoach.srs.forecast import ReviewForecast
    from cardcoach.srs.scheduler import FlashcardStats


# Difficulty bands: 1 is the hardest, 5 the easiest
MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5
DEFAULT_DIFFICULTY = 3

# Named grades accepted by the review endpoints
Grade = Literal["unknown", "again", "hard", "good", "easy"]


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid4())


def utc_now() -> datetime:
    """Get current timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


class CardBase(BaseModel):
    """Base card model with common fields."""

    front: str = Field(..., min_length=1, max_length=2000, description="Front side (source language)")
    back: str = Field(..., min_length=1, max_length=2000, description="Back side (target language)")
    tags: list[str] = Field(default_factory=list, description="Free-form tags for filtering")
    notes: str | None = Field(None, max_length=2000, description="Optional study notes")


class CardCreate(CardBase):
    """Model for creating a new card."""

    pass


class CardUpdate(BaseModel):
    """Model for updating the content of an existing card.

    Scheduling fields are not editable here; they only change through a review.
    """

    front: str | None = Field(None, min_length=1, max_length=2000, description="Front side of the card")
    back: str | None = Field(None, min_length=1, max_length=2000, description="Back side of the card")
    tags: list[str] | None = Field(None, description="Replacement tag list")
    notes: str | None = Field(None, max_length=2000, description="Optional study notes")


class Flashcard(BaseModel):
    """Full card model as stored in the database.

    Content fields are unconstrained here: stored and imported documents may
    carry blank sides, which only API input rejects.
    """

    front: str = Field("", description="Front side (source language)")
    back: str = Field("", description="Back side (target language)")
    tags: list[str] = Field(default_factory=list, description="Free-form tags for filtering")
    notes: str | None = Field(None, description="Optional study notes")
    id: str = Field(default_factory=generate_uuid, description="Unique identifier")
    setId: str | None = Field(None, description="Owning flashcard set ID")
    userId: str | None = Field(None, description="Owner user ID (partition key)")
    createdAt: datetime = Field(default_factory=utc_now, description="Creation timestamp")
    updatedAt: datetime = Field(default_factory=utc_now, description="Last update timestamp")

    # SRS fields (persisted)
    difficulty: int = Field(
        DEFAULT_DIFFICULTY,
        ge=MIN_DIFFICULTY,
        le=MAX_DIFFICULTY,
        description="Difficulty band, 1 (hardest) to 5 (easiest)",
    )
    mastered: bool = Field(False, description="Removed from active review rotation")
    lastReviewed: datetime | None = Field(None, description="Last review timestamp (never rated if null)")
    nextReview: datetime | None = Field(None, description="Next scheduled review (due now if null)")
    streak: int = Field(0, ge=0, description="Consecutive successful reviews at the top band")
    totalReviews: int = Field(0, ge=0, description="Number of ratings applied")
    correctReviews: int = Field(0, ge=0, description="Number of ratings that counted as recalled")

    class Config:
        """Pydantic config."""

        json_schema_extra = {
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174001",
                "setId": "123e4567-e89b-12d3-a456-426614174000",
                "userId": "user-001",
                "front": "la casa",
                "back": "the house",
                "tags": ["basics"],
                "difficulty": 3,
                "mastered": False,
                "lastReviewed": None,
                "nextReview": None,
                "createdAt": "2025-01-01T00:00:00Z",
                "updatedAt": "2025-01-01T00:00:00Z",
            }
        }


class CardResponse(Flashcard):
    """Card response model returned by API."""

    pass


class CardListResponse(BaseModel):
    """Response containing a list of cards."""

    cards: list[CardResponse]
    count: int


class ReviewRequest(BaseModel):
    """Rating for a single card review. One of rating, grade or correct is expected."""

    rating: int | None = Field(None, description="Numeric rating, 0 (unknown) to 5 (easy)")
    grade: Grade | None = Field(None, description="Named grade, used when rating is omitted")
    correct: bool | None = Field(None, description="Correct/incorrect answer, used when rating and grade are omitted")


class FlashcardStatsResponse(BaseModel):
    """Aggregate counts over a card collection."""

    total: int
    mastered: int
    learning: int
    toReview: int
    new: int
    totalReviews: int
    correctReviews: int
    accuracy: float

    @classmethod
    def from_stats(cls, stats: "FlashcardStats") -> "FlashcardStatsResponse":
        """Build the response from scheduler FlashcardStats."""
        return cls(
            total=stats.total,
            mastered=stats.mastered,
            learning=stats.learning,
            toReview=stats.to_review,
            new=stats.new,
            totalReviews=stats.total_reviews,
            correctReviews=stats.correct_reviews,
            accuracy=stats.accuracy,
        )


class ReviewForecastResponse(BaseModel):
    """Upcoming review workload for a set of cards."""

    dueNow: int = Field(..., description="Cards due at request time")
    dueThisWeek: int = Field(..., description="Cards coming due within 7 days (excluding due now)")
    dueNextWeek: int = Field(..., description="Cards coming due in 7 to 14 days")
    dueByDate: dict[str, int] = Field(
        default_factory=dict,
        description="Non-mastered card counts keyed by UTC review date (YYYY-MM-DD)",
    )

    @classmethod
    def from_forecast(cls, forecast: "ReviewForecast") -> "ReviewForecastResponse":
        """Build the response from a scheduler ReviewForecast."""
        return cls(
            dueNow=forecast.due_now,
            dueThisWeek=forecast.due_this_week,
            dueNextWeek=forecast.due_next_week,
            dueByDate=dict(forecast.due_by_date),
        )
