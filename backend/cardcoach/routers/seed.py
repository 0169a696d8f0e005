"""Seed API router for populating sample data."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from cardcoach.auth import CurrentUser, get_current_user
from cardcoach.models import CardCreate, FlashcardSetCreate
from cardcoach.repositories import get_card_repository, get_set_repository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/seed", tags=["seed"])


# Sample data
SAMPLE_SETS = [
    FlashcardSetCreate(
        name="Italian Basics",
        description="Greetings and everyday phrases",
        tags=["beginner"],
    ),
    FlashcardSetCreate(
        name="Italian Food",
        description="Words you need at the market and the restaurant",
        tags=["beginner", "food"],
    ),
    FlashcardSetCreate(
        name="Italian Verbs",
        description="Common verbs in the infinitive",
        tags=["grammar"],
    ),
]

SAMPLE_CARDS = {
    "Italian Basics": [
        CardCreate(front="Ciao", back="Hello / Bye", tags=["greetings"]),
        CardCreate(front="Buongiorno", back="Good morning", tags=["greetings"]),
        CardCreate(front="Buonasera", back="Good evening", tags=["greetings"]),
        CardCreate(front="Arrivederci", back="Goodbye", tags=["greetings"]),
        CardCreate(front="Grazie", back="Thank you"),
        CardCreate(front="Per favore", back="Please"),
        CardCreate(front="Prego", back="You're welcome"),
        CardCreate(front="Scusi", back="Excuse me (formal)"),
        CardCreate(front="Come stai?", back="How are you?"),
        CardCreate(front="Non capisco", back="I don't understand"),
    ],
    "Italian Food": [
        CardCreate(front="il pane", back="bread"),
        CardCreate(front="il formaggio", back="cheese"),
        CardCreate(front="la mela", back="apple"),
        CardCreate(front="l'acqua", back="water", tags=["drinks"]),
        CardCreate(front="il vino", back="wine", tags=["drinks"]),
        CardCreate(front="la colazione", back="breakfast", tags=["meals"]),
        CardCreate(front="il pranzo", back="lunch", tags=["meals"]),
        CardCreate(front="la cena", back="dinner", tags=["meals"]),
        CardCreate(front="Il conto, per favore", back="The bill, please"),
        CardCreate(front="Vorrei un caffè", back="I would like a coffee", tags=["drinks"]),
    ],
    "Italian Verbs": [
        CardCreate(front="essere", back="to be"),
        CardCreate(front="avere", back="to have"),
        CardCreate(front="andare", back="to go"),
        CardCreate(front="fare", back="to do / to make"),
        CardCreate(front="parlare", back="to speak"),
        CardCreate(front="mangiare", back="to eat"),
        CardCreate(front="bere", back="to drink"),
        CardCreate(front="capire", back="to understand"),
        CardCreate(front="volere", back="to want"),
        CardCreate(front="potere", back="to be able to / can"),
    ],
}


class SeedResponse(BaseModel):
    """Response from seed operation."""

    message: str
    sets_created: int
    cards_created: int


@router.post("", response_model=SeedResponse, status_code=status.HTTP_201_CREATED)
async def seed_sample_data(
    user: Annotated[CurrentUser, Depends(get_current_user)]
) -> SeedResponse:
    """Seed the database with sample data for the current user."""
    set_repo = get_set_repository()
    card_repo = get_card_repository()

    sets_created = 0
    cards_created = 0

    for set_create in SAMPLE_SETS:
        flashcard_set = set_repo.create(set_create, user.user_id)
        sets_created += 1

        created = card_repo.create_many(
            flashcard_set.id, user.user_id, SAMPLE_CARDS.get(set_create.name, [])
        )
        cards_created += len(created)

    logger.info("Seeded %d sets and %d cards for user %s", sets_created, cards_created, user.user_id)
    return SeedResponse(
        message="Sample data created successfully",
        sets_created=sets_created,
        cards_created=cards_created,
    )
