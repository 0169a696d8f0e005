"""Review API router: due/difficult queries, stats, and single-card ratings."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from cardcoach.auth import CurrentUser, get_current_user
from cardcoach.config import get_scheduler_config
from cardcoach.models import (
    CardListResponse,
    CardResponse,
    Flashcard,
    FlashcardStatsResponse,
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    ReviewRequest,
)
from cardcoach.repositories import (
    CardNotFoundError,
    FlashcardSetNotFoundError,
    get_card_repository,
)
from cardcoach.srs import (
    InvalidRatingError,
    filter_by_tag,
    get_difficult_cards,
    get_due_cards,
    get_flashcard_stats,
    resolve_rating,
    update_card_difficulty,
    utc_now,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cards", tags=["reviews"])


def _load_cards(user_id: str, set_id: str | None, tag: str | None = None) -> list[Flashcard]:
    try:
        cards = get_card_repository().list_scoped(user_id, set_id)
    except FlashcardSetNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Flashcard set with ID {set_id} not found",
        )
    return filter_by_tag(cards, tag)


def _card_list(cards: list[Flashcard]) -> CardListResponse:
    return CardListResponse(
        cards=[CardResponse(**card.model_dump()) for card in cards],
        count=len(cards),
    )


@router.get("/due", response_model=CardListResponse)
async def list_due_cards(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    setId: str | None = None,
    tag: str | None = None,
) -> CardListResponse:
    """Cards due for review now, never-reviewed first, then oldest nextReview."""
    cards = _load_cards(user.user_id, setId, tag)
    return _card_list(get_due_cards(cards, utc_now()))


@router.get("/difficult", response_model=CardListResponse)
async def list_difficult_cards(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    setId: str | None = None,
    tag: str | None = None,
    threshold: int | None = Query(
        None,
        ge=MIN_DIFFICULTY,
        le=MAX_DIFFICULTY,
        description="Highest difficulty band to include; configured default when omitted",
    ),
) -> CardListResponse:
    """Non-mastered cards in the low difficulty bands, hardest first."""
    cards = _load_cards(user.user_id, setId, tag)
    return _card_list(get_difficult_cards(cards, threshold, config=get_scheduler_config()))


@router.get("/stats", response_model=FlashcardStatsResponse)
async def get_stats(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    setId: str | None = None,
) -> FlashcardStatsResponse:
    """Progress counts across the user's cards, or one set."""
    cards = _load_cards(user.user_id, setId)
    return FlashcardStatsResponse.from_stats(get_flashcard_stats(cards, utc_now()))


@router.post("/{card_id}/review", response_model=CardResponse)
async def review_card(
    card_id: str,
    request: ReviewRequest,
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CardResponse:
    """Rate one card, reschedule it, and persist the result."""
    card_repo = get_card_repository()
    try:
        card = card_repo.get_by_id(card_id, user.user_id)
    except CardNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Card with ID {card_id} not found",
        )

    try:
        rating = resolve_rating(request.rating, request.grade, request.correct)
        updated = update_card_difficulty(card, rating, utc_now(), get_scheduler_config())
    except InvalidRatingError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    saved = card_repo.save(updated)
    logger.info(
        "Review applied: user=%s, card=%s, rating=%d, difficulty=%d, streak=%d, mastered=%s, next_review=%s",
        user.user_id,
        card_id,
        rating,
        saved.difficulty,
        saved.streak,
        saved.mastered,
        saved.nextReview,
    )
    return CardResponse(**saved.model_dump())
