"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import pytest
from azure.cosmos.exceptions import CosmosResourceNotFoundError

from cardcoach.config import get_scheduler_settings
from cardcoach.models import Flashcard
from cardcoach.repositories import CardRepository, FlashcardSetRepository
from cardcoach.repositories import card_repository as card_repository_module
from cardcoach.sessions import reset_session_store


NOW = datetime(2025, 3, 10, 12, 0, 0, tzinfo=timezone.utc)


class FakeContainer:
    """Just enough of ContainerProxy for the repositories, kept in memory."""

    def __init__(self):
        self.items: dict[str, dict] = {}

    def _missing(self, item_id):
        return CosmosResourceNotFoundError(message=f"{item_id} not found")

    def create_item(self, body):
        self.items[body["id"]] = dict(body)
        return dict(body)

    def upsert_item(self, body):
        self.items[body["id"]] = dict(body)
        return dict(body)

    def replace_item(self, item, body):
        if item not in self.items:
            raise self._missing(item)
        self.items[item] = dict(body)
        return dict(body)

    def read_item(self, item, partition_key):
        doc = self.items.get(item)
        if doc is None or doc.get("userId") != partition_key:
            raise self._missing(item)
        return dict(doc)

    def delete_item(self, item, partition_key):
        self.read_item(item, partition_key)
        del self.items[item]

    def query_items(self, query, parameters=None, partition_key=None, enable_cross_partition_query=False):
        params = {p["name"]: p["value"] for p in parameters or []}
        docs = list(self.items.values())
        if partition_key is not None:
            docs = [d for d in docs if d.get("userId") == partition_key]
        if "@setId" in params:
            docs = [d for d in docs if d.get("setId") == params["@setId"]]
        if "isPublic = true" in query:
            docs = [d for d in docs if d.get("isPublic")]
        return [dict(d) for d in docs]


@pytest.fixture(autouse=True)
def fresh_settings_and_sessions():
    """Drop cached scheduler settings and practice sessions between tests."""
    get_scheduler_settings.cache_clear()
    reset_session_store()
    yield
    get_scheduler_settings.cache_clear()
    reset_session_store()


@pytest.fixture
def now() -> datetime:
    """A fixed 'now' so schedules are reproducible."""
    return NOW


@pytest.fixture
def make_card():
    """Factory for cards with sensible defaults, created a day before NOW."""
    counter = {"n": 0}

    def _make(**overrides) -> Flashcard:
        counter["n"] += 1
        fields = {
            "id": f"card-{counter['n']}",
            "setId": "set-1",
            "userId": "user-1",
            "front": f"parola {counter['n']}",
            "back": f"word {counter['n']}",
            "createdAt": NOW - timedelta(days=1),
            "updatedAt": NOW - timedelta(days=1),
        }
        fields.update(overrides)
        return Flashcard(**fields)

    return _make


@pytest.fixture
def set_repo():
    """Set repository over an in-memory container."""
    return FlashcardSetRepository(container=FakeContainer())


@pytest.fixture
def card_repo(set_repo, monkeypatch):
    """Card repository over an in-memory container, checking sets in set_repo."""
    monkeypatch.setattr(card_repository_module, "get_set_repository", lambda: set_repo)
    return CardRepository(container=FakeContainer())
