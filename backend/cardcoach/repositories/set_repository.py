"""Repository for FlashcardSet CRUD operations."""

from azure.cosmos import ContainerProxy
from azure.cosmos.exceptions import CosmosResourceNotFoundError

from cardcoach.db import get_sets_container
from cardcoach.models import FlashcardSet, FlashcardSetCreate, FlashcardSetUpdate
from cardcoach.srs.time import utc_now


class FlashcardSetNotFoundError(Exception):
    """Raised when a flashcard set is not found."""

    pass


class FlashcardSetRepository:
    """Repository for FlashcardSet database operations."""

    def __init__(self, container: ContainerProxy | None = None):
        """Initialize the repository with an optional container."""
        self._container = container

    @property
    def container(self) -> ContainerProxy:
        """Get the container, lazily initializing if needed."""
        if self._container is None:
            self._container = get_sets_container()
        return self._container

    def list_by_user(self, user_id: str) -> list[FlashcardSet]:
        """List all sets owned by a user."""
        query = "SELECT * FROM c WHERE c.userId = @userId ORDER BY c.createdAt DESC"
        parameters = [{"name": "@userId", "value": user_id}]

        items = self.container.query_items(
            query=query,
            parameters=parameters,
            partition_key=user_id,
        )
        return [FlashcardSet(**item) for item in items]

    def list_public(self) -> list[FlashcardSet]:
        """List sets any user marked as public (cross-partition)."""
        query = "SELECT * FROM c WHERE c.isPublic = true ORDER BY c.createdAt DESC"

        items = self.container.query_items(
            query=query,
            enable_cross_partition_query=True,
        )
        return [FlashcardSet(**item) for item in items]

    def get_by_id(self, set_id: str, user_id: str) -> FlashcardSet:
        """Get a set by ID and user ID."""
        try:
            item = self.container.read_item(item=set_id, partition_key=user_id)
            return FlashcardSet(**item)
        except CosmosResourceNotFoundError:
            raise FlashcardSetNotFoundError(f"Flashcard set with ID {set_id} not found")

    def create(self, set_create: FlashcardSetCreate, user_id: str) -> FlashcardSet:
        """Create a new set."""
        flashcard_set = FlashcardSet(userId=user_id, **set_create.model_dump())
        created_item = self.container.create_item(body=flashcard_set.model_dump(mode="json"))
        return FlashcardSet(**created_item)

    def update(self, set_id: str, user_id: str, set_update: FlashcardSetUpdate) -> FlashcardSet:
        """Update an existing set. Returns the set unchanged when there is nothing to apply."""
        existing = self.get_by_id(set_id, user_id)

        update_data = set_update.model_dump(exclude_unset=True)
        if not update_data:
            return existing

        updated = existing.model_copy(update={**update_data, "updatedAt": utc_now()})
        updated_item = self.container.replace_item(
            item=set_id,
            body=updated.model_dump(mode="json"),
        )
        return FlashcardSet(**updated_item)

    def delete(self, set_id: str, user_id: str) -> None:
        """Delete a set by ID."""
        try:
            self.container.delete_item(item=set_id, partition_key=user_id)
        except CosmosResourceNotFoundError:
            raise FlashcardSetNotFoundError(f"Flashcard set with ID {set_id} not found")

    def exists(self, set_id: str, user_id: str) -> bool:
        """Check if a set exists for the user."""
        try:
            self.get_by_id(set_id, user_id)
            return True
        except FlashcardSetNotFoundError:
            return False


# Singleton instance
_set_repository: FlashcardSetRepository | None = None


def get_set_repository() -> FlashcardSetRepository:
    """Get the flashcard set repository singleton."""
    global _set_repository
    if _set_repository is None:
        _set_repository = FlashcardSetRepository()
    return _set_repository
