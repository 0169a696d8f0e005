"""Flashcard set models for API requests and responses."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field
from uuid import uuid4


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid4())


def utc_now() -> datetime:
    """Get current timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


# Languages a set can be studied in
LanguageCode = Literal["italian", "english"]


class FlashcardSetBase(BaseModel):
    """Base set model with common fields."""

    name: str = Field(..., min_length=1, max_length=200, description="Name of the set")
    description: str | None = Field(None, max_length=1000, description="Optional description")
    tags: list[str] = Field(default_factory=list, description="Set-level tags")
    language: LanguageCode = Field("italian", description="Language being studied")
    isPublic: bool = Field(False, description="Visible to other users")


class FlashcardSetCreate(FlashcardSetBase):
    """Model for creating a new set."""

    pass


class FlashcardSetUpdate(BaseModel):
    """Model for updating an existing set."""

    name: str | None = Field(None, min_length=1, max_length=200, description="Name of the set")
    description: str | None = Field(None, max_length=1000, description="Optional description")
    tags: list[str] | None = Field(None, description="Replacement tag list")
    language: LanguageCode | None = Field(None, description="Language being studied")
    isPublic: bool | None = Field(None, description="Visible to other users")


class FlashcardSet(FlashcardSetBase):
    """Full set model as stored in the database."""

    id: str = Field(default_factory=generate_uuid, description="Unique identifier")
    userId: str = Field(..., description="Owner user ID (partition key)")
    createdAt: datetime = Field(default_factory=utc_now, description="Creation timestamp")
    updatedAt: datetime = Field(default_factory=utc_now, description="Last update timestamp")

    class Config:
        """Pydantic config."""

        json_schema_extra = {
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "userId": "user-001",
                "name": "Italian Basics",
                "description": "Everyday Italian words",
                "tags": ["beginner"],
                "language": "italian",
                "isPublic": False,
                "createdAt": "2025-01-01T00:00:00Z",
                "updatedAt": "2025-01-01T00:00:00Z",
            }
        }


class FlashcardSetResponse(FlashcardSet):
    """Set response model returned by API, with review metrics."""

    cardCount: int | None = None
    dueCardCount: int | None = None


class FlashcardSetListResponse(BaseModel):
    """Response containing a list of sets."""

    sets: list[FlashcardSetResponse]
    count: int
