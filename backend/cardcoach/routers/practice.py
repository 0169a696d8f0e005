"""Practice session API router.

Drives a PracticeSession per (user, set). Each rating is persisted before the
response carrying the next card is returned.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from cardcoach.auth import CurrentUser, get_current_user
from cardcoach.models import (
    CardResponse,
    Flashcard,
    PracticeActionRequest,
    PracticeRateRequest,
    PracticeStartRequest,
    PracticeStateResponse,
)
from cardcoach.repositories import (
    CardNotFoundError,
    FlashcardSetNotFoundError,
    get_card_repository,
)
from cardcoach.sessions import get_session_store
from cardcoach.srs import (
    InvalidRatingError,
    PracticeSession,
    SessionStateError,
    filter_by_tag,
    resolve_rating,
    utc_now,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/practice", tags=["practice"])


def _state_response(
    session: PracticeSession | None, last_rated: Flashcard | None = None
) -> PracticeStateResponse:
    if session is None:
        return PracticeStateResponse(state="idle")

    current = session.current
    return PracticeStateResponse(
        state=session.state,
        mode=session.mode,
        card=CardResponse(**current.model_dump()) if current is not None else None,
        flipped=session.flipped,
        position=min(session.index, len(session.queue)),
        queueLength=len(session.queue),
        rated=session.rated,
        skipped=session.skipped,
        correct=session.correct,
        lastRated=CardResponse(**last_rated.model_dump()) if last_rated is not None else None,
    )


def _require_session(user_id: str, set_id: str | None) -> PracticeSession:
    session = get_session_store().get(user_id, set_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="No active practice session. Call /practice/start first.",
        )
    return session


@router.post("/start", response_model=PracticeStateResponse)
async def start_practice(
    request: PracticeStartRequest,
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> PracticeStateResponse:
    """Select cards for the mode and begin a new shuffled pass.

    Starting again replaces any existing session for the same set.
    """
    try:
        cards = get_card_repository().list_scoped(user.user_id, request.setId)
    except FlashcardSetNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Flashcard set with ID {request.setId} not found",
        )

    store = get_session_store()
    session = store.get_or_create(user.user_id, request.setId)
    state = session.start(filter_by_tag(cards, request.tag), request.mode, utc_now())
    store.update(user.user_id, request.setId, session)

    logger.info(
        "Practice session started: user=%s, set=%s, mode=%s, tag=%s, queue=%d, state=%s",
        user.user_id,
        request.setId,
        request.mode,
        request.tag,
        len(session.queue),
        state,
    )
    return _state_response(session)


@router.get("/current", response_model=PracticeStateResponse)
async def current_practice(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    setId: str | None = None,
) -> PracticeStateResponse:
    """Return the session snapshot, or an idle state if none is active."""
    return _state_response(get_session_store().get(user.user_id, setId))


@router.post("/flip", response_model=PracticeStateResponse)
async def flip_card(
    request: PracticeActionRequest,
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> PracticeStateResponse:
    """Toggle the visible side of the current card."""
    session = _require_session(user.user_id, request.setId)
    try:
        session.flip()
    except SessionStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return _state_response(session)


@router.post("/rate", response_model=PracticeStateResponse)
async def rate_card(
    request: PracticeRateRequest,
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> PracticeStateResponse:
    """Rate the current card, persist its new schedule, and advance.

    The card is reloaded before scheduling so edits and reviews made outside
    the session are kept. The session only advances once the save succeeds.
    """
    session = _require_session(user.user_id, request.setId)
    store = get_session_store()
    card_repo = get_card_repository()

    try:
        rating = resolve_rating(request.rating, request.grade, request.correct)
    except InvalidRatingError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    current = session.current
    if current is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot rate while session is {session.state}",
        )

    try:
        fresh = card_repo.get_by_id(current.id, user.user_id)
    except CardNotFoundError:
        session.remove_card(current.id)
        store.update(user.user_id, request.setId, session)
        logger.info(
            "Practice card vanished: user=%s, card=%s, dropped from session",
            user.user_id,
            current.id,
        )
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Card with ID {current.id} no longer exists",
        )

    try:
        updated = session.schedule_current(rating, utc_now(), card=fresh)
    except SessionStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    saved = card_repo.save(updated)
    session.record_rating(saved, rating)
    store.update(user.user_id, request.setId, session)

    logger.info(
        "Practice rating persisted: user=%s, card=%s, rating=%d, difficulty=%d, mastered=%s, position=%d/%d",
        user.user_id,
        saved.id,
        rating,
        saved.difficulty,
        saved.mastered,
        session.index,
        len(session.queue),
    )
    if session.state == "complete":
        logger.info(
            "Practice session complete: user=%s, set=%s, rated=%d, skipped=%d, correct=%d",
            user.user_id,
            request.setId,
            session.rated,
            session.skipped,
            session.correct,
        )
    return _state_response(session, last_rated=saved)


@router.post("/skip", response_model=PracticeStateResponse)
async def skip_card(
    request: PracticeActionRequest,
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> PracticeStateResponse:
    """Move past the current card without changing its schedule."""
    session = _require_session(user.user_id, request.setId)
    try:
        session.skip()
    except SessionStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    get_session_store().update(user.user_id, request.setId, session)
    return _state_response(session)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def end_practice(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    setId: str | None = None,
) -> None:
    """Discard the session for a set."""
    get_session_store().reset(user.user_id, setId)
