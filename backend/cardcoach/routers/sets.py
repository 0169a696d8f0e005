"""Flashcard sets API router."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from cardcoach.auth import CurrentUser, get_current_user
from cardcoach.models import (
    FlashcardSetCreate,
    FlashcardSetListResponse,
    FlashcardSetResponse,
    FlashcardSetUpdate,
    FlashcardStatsResponse,
    ReviewForecastResponse,
)
from cardcoach.repositories import (
    FlashcardSetNotFoundError,
    get_card_repository,
    get_set_repository,
)
from cardcoach.sessions import get_session_store
from cardcoach.srs import build_review_forecast, get_due_cards, get_flashcard_stats, utc_now

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sets", tags=["sets"])


def _set_not_found(set_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Flashcard set with ID {set_id} not found",
    )


@router.get("", response_model=FlashcardSetListResponse)
async def list_sets(user: Annotated[CurrentUser, Depends(get_current_user)]) -> FlashcardSetListResponse:
    """List all sets for the current user with card and due counts."""
    set_repo = get_set_repository()
    card_repo = get_card_repository()
    sets = set_repo.list_by_user(user.user_id)
    now = utc_now()

    set_responses = []
    for flashcard_set in sets:
        cards = card_repo.list_by_set(flashcard_set.id, user.user_id)
        set_responses.append(
            FlashcardSetResponse(
                **flashcard_set.model_dump(),
                cardCount=len(cards),
                dueCardCount=len(get_due_cards(cards, now)),
            )
        )

    return FlashcardSetListResponse(sets=set_responses, count=len(set_responses))


@router.get("/public", response_model=FlashcardSetListResponse)
async def list_public_sets(
    user: Annotated[CurrentUser, Depends(get_current_user)]
) -> FlashcardSetListResponse:
    """List sets shared publicly by any user."""
    sets = get_set_repository().list_public()
    return FlashcardSetListResponse(
        sets=[FlashcardSetResponse(**flashcard_set.model_dump()) for flashcard_set in sets],
        count=len(sets),
    )


@router.get("/{set_id}", response_model=FlashcardSetResponse)
async def get_set(
    set_id: str, user: Annotated[CurrentUser, Depends(get_current_user)]
) -> FlashcardSetResponse:
    """Get a specific set by ID."""
    try:
        flashcard_set = get_set_repository().get_by_id(set_id, user.user_id)
    except FlashcardSetNotFoundError:
        raise _set_not_found(set_id)

    cards = get_card_repository().list_by_set(set_id, user.user_id)
    return FlashcardSetResponse(
        **flashcard_set.model_dump(),
        cardCount=len(cards),
        dueCardCount=len(get_due_cards(cards, utc_now())),
    )


@router.post("", response_model=FlashcardSetResponse, status_code=status.HTTP_201_CREATED)
async def create_set(
    set_create: FlashcardSetCreate, user: Annotated[CurrentUser, Depends(get_current_user)]
) -> FlashcardSetResponse:
    """Create a new set."""
    flashcard_set = get_set_repository().create(set_create, user.user_id)
    logger.info("Created set %s for user %s", flashcard_set.id, user.user_id)
    return FlashcardSetResponse(**flashcard_set.model_dump(), cardCount=0, dueCardCount=0)


@router.put("/{set_id}", response_model=FlashcardSetResponse)
async def update_set(
    set_id: str,
    set_update: FlashcardSetUpdate,
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> FlashcardSetResponse:
    """Update an existing set."""
    try:
        flashcard_set = get_set_repository().update(set_id, user.user_id, set_update)
        return FlashcardSetResponse(**flashcard_set.model_dump())
    except FlashcardSetNotFoundError:
        raise _set_not_found(set_id)


@router.delete("/{set_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_set(set_id: str, user: Annotated[CurrentUser, Depends(get_current_user)]) -> None:
    """Delete a set and all its cards."""
    set_repo = get_set_repository()
    if not set_repo.exists(set_id, user.user_id):
        raise _set_not_found(set_id)

    deleted = get_card_repository().delete_by_set(set_id, user.user_id)
    try:
        set_repo.delete(set_id, user.user_id)
    except FlashcardSetNotFoundError:
        raise _set_not_found(set_id)

    get_session_store().reset(user.user_id, set_id)
    logger.info("Deleted set %s (%d cards) for user %s", set_id, deleted, user.user_id)


@router.get("/{set_id}/stats", response_model=FlashcardStatsResponse)
async def get_set_stats(
    set_id: str, user: Annotated[CurrentUser, Depends(get_current_user)]
) -> FlashcardStatsResponse:
    """Progress counts for one set."""
    try:
        cards = get_card_repository().list_scoped(user.user_id, set_id)
    except FlashcardSetNotFoundError:
        raise _set_not_found(set_id)
    return FlashcardStatsResponse.from_stats(get_flashcard_stats(cards, utc_now()))


@router.get("/{set_id}/forecast", response_model=ReviewForecastResponse)
async def get_set_forecast(
    set_id: str, user: Annotated[CurrentUser, Depends(get_current_user)]
) -> ReviewForecastResponse:
    """Upcoming review workload for one set."""
    try:
        cards = get_card_repository().list_scoped(user.user_id, set_id)
    except FlashcardSetNotFoundError:
        raise _set_not_found(set_id)
    return ReviewForecastResponse.from_forecast(build_review_forecast(cards, utc_now()))
