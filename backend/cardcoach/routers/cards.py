"""Cards API router (cards within a set, plus import/export)."""

import logging
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from cardcoach.auth import CurrentUser, get_current_user
from cardcoach.models import CardCreate, CardListResponse, CardResponse, CardUpdate, Flashcard
from cardcoach.repositories import (
    CardNotFoundError,
    FlashcardSetNotFoundError,
    get_card_repository,
)
from cardcoach.sessions import get_session_store
from cardcoach.srs import filter_by_tag
from cardcoach.transfer import (
    ExportError,
    ImportOptions,
    export_flashcards,
    import_flashcards,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sets/{set_id}/cards", tags=["cards"])

_EXPORT_MEDIA_TYPES = {
    "csv": "text/csv",
    "json": "application/json",
}


class CardImportRequest(BaseModel):
    """Request body for importing cards into a set."""

    content: str = Field(..., description="Raw CSV or JSON text")
    options: ImportOptions = Field(default_factory=ImportOptions)


class CardImportResponse(BaseModel):
    """Outcome of an import."""

    imported: int
    skipped: int
    failed: int
    errors: list[str]
    cards: list[CardResponse]


def _set_not_found(set_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Flashcard set with ID {set_id} not found",
    )


def _card_not_found(card_id: str, set_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Card with ID {card_id} not found in set {set_id}",
    )


def _get_card_in_set(set_id: str, card_id: str, user_id: str) -> Flashcard:
    try:
        card = get_card_repository().get_by_id(card_id, user_id)
    except CardNotFoundError:
        raise _card_not_found(card_id, set_id)
    # Verify card belongs to the specified set
    if card.setId != set_id:
        raise _card_not_found(card_id, set_id)
    return card


@router.get("", response_model=CardListResponse)
async def list_cards(
    set_id: str,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    tag: str | None = None,
) -> CardListResponse:
    """List all cards in a set, optionally filtered by tag."""
    try:
        cards = get_card_repository().list_scoped(user.user_id, set_id)
    except FlashcardSetNotFoundError:
        raise _set_not_found(set_id)

    cards = filter_by_tag(cards, tag)
    return CardListResponse(
        cards=[CardResponse(**card.model_dump()) for card in cards],
        count=len(cards),
    )


@router.get("/export", response_class=PlainTextResponse)
async def export_cards(
    set_id: str,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    format: Literal["csv", "json"] = Query("csv", description="Export format"),
) -> PlainTextResponse:
    """Export the set's cards as CSV or JSON."""
    try:
        cards = get_card_repository().list_scoped(user.user_id, set_id)
    except FlashcardSetNotFoundError:
        raise _set_not_found(set_id)

    try:
        body = export_flashcards(cards, format)
    except ExportError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return PlainTextResponse(
        content=body,
        media_type=_EXPORT_MEDIA_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="{set_id}.{format}"'},
    )


@router.post("/import", response_model=CardImportResponse, status_code=status.HTTP_201_CREATED)
async def import_cards(
    set_id: str,
    request: CardImportRequest,
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CardImportResponse:
    """Parse CSV or JSON content and add the resulting cards to the set."""
    result = import_flashcards(request.content, request.options)
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="; ".join(result.errors) or "Import failed",
        )

    try:
        created = get_card_repository().create_many(set_id, user.user_id, result.cards)
    except FlashcardSetNotFoundError:
        raise _set_not_found(set_id)

    return CardImportResponse(
        imported=len(created),
        skipped=result.skipped,
        failed=result.failed,
        errors=result.errors,
        cards=[CardResponse(**card.model_dump()) for card in created],
    )


@router.get("/{card_id}", response_model=CardResponse)
async def get_card(
    set_id: str, card_id: str, user: Annotated[CurrentUser, Depends(get_current_user)]
) -> CardResponse:
    """Get a specific card by ID."""
    card = _get_card_in_set(set_id, card_id, user.user_id)
    return CardResponse(**card.model_dump())


@router.post("", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
async def create_card(
    set_id: str,
    card_create: CardCreate,
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CardResponse:
    """Create a new card in a set."""
    try:
        card = get_card_repository().create(set_id, user.user_id, card_create)
        return CardResponse(**card.model_dump())
    except FlashcardSetNotFoundError:
        raise _set_not_found(set_id)


@router.put("/{card_id}", response_model=CardResponse)
async def update_card(
    set_id: str,
    card_id: str,
    card_update: CardUpdate,
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CardResponse:
    """Update the content of an existing card."""
    _get_card_in_set(set_id, card_id, user.user_id)

    try:
        card = get_card_repository().update(card_id, user.user_id, card_update)
        return CardResponse(**card.model_dump())
    except CardNotFoundError:
        raise _card_not_found(card_id, set_id)


@router.delete("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(
    set_id: str, card_id: str, user: Annotated[CurrentUser, Depends(get_current_user)]
) -> None:
    """Delete a card."""
    _get_card_in_set(set_id, card_id, user.user_id)

    try:
        get_card_repository().delete(card_id, user.user_id)
    except CardNotFoundError:
        raise _card_not_found(card_id, set_id)

    pruned = get_session_store().remove_card(user.user_id, card_id)
    logger.info("Deleted card %s for user %s (removed from %d practice sessions)", card_id, user.user_id, pruned)
