"""Repository for Flashcard persistence.

Every document read back goes through normalize_flashcard, so cards written by
older clients or imports come out in the canonical shape.
"""

import logging
from typing import Iterable

from azure.cosmos import ContainerProxy
from azure.cosmos.exceptions import CosmosResourceNotFoundError

from cardcoach.db import get_cards_container
from cardcoach.models import CardCreate, CardUpdate, Flashcard
from cardcoach.repositories.normalize import normalize_flashcard
from cardcoach.repositories.set_repository import FlashcardSetNotFoundError, get_set_repository
from cardcoach.srs.time import utc_now

logger = logging.getLogger(__name__)


class CardNotFoundError(Exception):
    """Raised when a card is not found."""

    pass


class CardRepository:
    """Repository for Flashcard database operations."""

    def __init__(self, container: ContainerProxy | None = None):
        """Initialize the repository with an optional container."""
        self._container = container

    @property
    def container(self) -> ContainerProxy:
        """Get the container, lazily initializing if needed."""
        if self._container is None:
            self._container = get_cards_container()
        return self._container

    def _query(self, query: str, parameters: list[dict], user_id: str) -> list[Flashcard]:
        items = self.container.query_items(
            query=query,
            parameters=parameters,
            partition_key=user_id,
        )
        return [normalize_flashcard(item) for item in items]

    def list_for_user(self, user_id: str) -> list[Flashcard]:
        """List every card the user owns, across all sets."""
        query = "SELECT * FROM c WHERE c.userId = @userId"
        return self._query(query, [{"name": "@userId", "value": user_id}], user_id)

    def list_by_set(self, set_id: str, user_id: str) -> list[Flashcard]:
        """List all cards in a set."""
        query = "SELECT * FROM c WHERE c.setId = @setId AND c.userId = @userId"
        parameters = [
            {"name": "@setId", "value": set_id},
            {"name": "@userId", "value": user_id},
        ]
        return self._query(query, parameters, user_id)

    def list_scoped(self, user_id: str, set_id: str | None = None) -> list[Flashcard]:
        """List one set's cards, or every card the user owns when set_id is None."""
        if set_id is None:
            return self.list_for_user(user_id)
        self._verify_set(set_id, user_id)
        return self.list_by_set(set_id, user_id)

    def get_by_id(self, card_id: str, user_id: str) -> Flashcard:
        """Get a card by ID and user ID."""
        try:
            item = self.container.read_item(item=card_id, partition_key=user_id)
        except CosmosResourceNotFoundError:
            raise CardNotFoundError(f"Card with ID {card_id} not found")
        return normalize_flashcard(item)

    def _verify_set(self, set_id: str, user_id: str) -> None:
        if not get_set_repository().exists(set_id, user_id):
            raise FlashcardSetNotFoundError(f"Flashcard set with ID {set_id} not found")

    def create(self, set_id: str, user_id: str, card_create: CardCreate) -> Flashcard:
        """Create a new card in a set with fresh scheduling state."""
        self._verify_set(set_id, user_id)

        card = Flashcard(setId=set_id, userId=user_id, **card_create.model_dump())
        created_item = self.container.create_item(body=card.model_dump(mode="json"))
        return normalize_flashcard(created_item)

    def create_many(self, set_id: str, user_id: str, card_creates: Iterable[CardCreate]) -> list[Flashcard]:
        """Create several cards in one set (used by imports and seeding)."""
        self._verify_set(set_id, user_id)

        created = []
        for card_create in card_creates:
            card = Flashcard(setId=set_id, userId=user_id, **card_create.model_dump())
            created.append(normalize_flashcard(self.container.create_item(body=card.model_dump(mode="json"))))
        logger.info("Created %d cards in set %s for user %s", len(created), set_id, user_id)
        return created

    def update(self, card_id: str, user_id: str, card_update: CardUpdate) -> Flashcard:
        """Update the content fields of a card. Scheduling fields are left alone."""
        existing = self.get_by_id(card_id, user_id)

        update_data = card_update.model_dump(exclude_unset=True)
        if not update_data:
            return existing

        return self.save(existing.model_copy(update={**update_data, "updatedAt": utc_now()}))

    def save(self, card: Flashcard) -> Flashcard:
        """Persist a full card document. Last write wins."""
        saved_item = self.container.upsert_item(body=card.model_dump(mode="json"))
        return normalize_flashcard(saved_item)

    def delete(self, card_id: str, user_id: str) -> None:
        """Delete a card by ID."""
        try:
            self.container.delete_item(item=card_id, partition_key=user_id)
        except CosmosResourceNotFoundError:
            raise CardNotFoundError(f"Card with ID {card_id} not found")

    def delete_by_set(self, set_id: str, user_id: str) -> int:
        """Delete all cards in a set. Returns count of deleted cards."""
        cards = self.list_by_set(set_id, user_id)
        for card in cards:
            self.container.delete_item(item=card.id, partition_key=user_id)
        return len(cards)


# Singleton instance
_card_repository: CardRepository | None = None


def get_card_repository() -> CardRepository:
    """Get the card repository singleton."""
    global _card_repository
    if _card_repository is None:
        _card_repository = CardRepository()
    return _card_repository
