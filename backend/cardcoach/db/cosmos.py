"""
Cosmos DB client and container access for flashcard sets and cards.

Both containers are partitioned by `/userId`, so every read and write is
scoped to a single learner.

Authentication:
- COSMOS_EMULATOR=true: local emulator with its well-known key
- otherwise: DefaultAzureCredential against COSMOS_ENDPOINT (Managed Identity
  in Azure, `az login` locally)

With COSMOS_CREATE_CONTAINERS=true the database and containers are created on
first use, which is convenient against a fresh emulator.
"""

import os
import logging
from functools import lru_cache
from azure.cosmos import CosmosClient, DatabaseProxy, ContainerProxy, PartitionKey
from azure.cosmos.exceptions import CosmosResourceNotFoundError
from azure.identity import DefaultAzureCredential

logger = logging.getLogger(__name__)

# Cosmos DB Emulator well-known key (public, not a secret)
# https://learn.microsoft.com/en-us/azure/cosmos-db/emulator#authentication
EMULATOR_KEY = "C2y6yDjf5/R+ob0N8A7Cgv30VRDJIWEHLM+4QDU5DE2nQ9nDuVTqobD4b8mGGyPMbIZnqyMsEcaGQy67XIw/Jw=="
EMULATOR_ENDPOINT = "https://localhost:8081"

PARTITION_KEY_PATH = "/userId"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").lower() in ("true", "1", "yes", "on")


class CosmosDBSettings:
    """Settings for Cosmos DB connection."""

    def __init__(self):
        self.endpoint = os.getenv("COSMOS_ENDPOINT", "")
        self.database_name = os.getenv("COSMOS_DB_NAME", "cardcoach")
        self.sets_container = os.getenv("COSMOS_SETS_CONTAINER", "sets")
        self.cards_container = os.getenv("COSMOS_CARDS_CONTAINER", "cards")
        self.use_emulator = _env_flag("COSMOS_EMULATOR")
        self.create_containers = _env_flag("COSMOS_CREATE_CONTAINERS")

    def is_configured(self) -> bool:
        """Check if Cosmos DB is configured."""
        if self.use_emulator:
            return True
        return bool(self.endpoint)


@lru_cache()
def get_settings() -> CosmosDBSettings:
    """Get cached Cosmos DB settings."""
    return CosmosDBSettings()


_client: CosmosClient | None = None
_database: DatabaseProxy | None = None


def get_client() -> CosmosClient:
    """Get or create the Cosmos DB client.

    Raises:
        RuntimeError: If neither COSMOS_ENDPOINT nor COSMOS_EMULATOR is set.
    """
    global _client
    if _client is None:
        settings = get_settings()
        if not settings.is_configured():
            raise RuntimeError(
                "Cosmos DB is not configured. "
                "Set COSMOS_ENDPOINT environment variable, or COSMOS_EMULATOR=true for local emulator."
            )

        if settings.use_emulator:
            logger.info("Using Cosmos DB Emulator at %s", EMULATOR_ENDPOINT)
            _client = CosmosClient(
                EMULATOR_ENDPOINT,
                credential=EMULATOR_KEY,
                connection_verify=False,  # Emulator uses self-signed cert
            )
        else:
            logger.info("Using DefaultAzureCredential for Cosmos DB at %s", settings.endpoint)
            _client = CosmosClient(settings.endpoint, credential=DefaultAzureCredential())

    return _client


def get_database() -> DatabaseProxy:
    """Get the database proxy, creating the database when configured to."""
    global _database
    if _database is None:
        settings = get_settings()
        client = get_client()
        if settings.create_containers:
            _database = client.create_database_if_not_exists(id=settings.database_name)
        else:
            _database = client.get_database_client(settings.database_name)
    return _database


def get_container(container_name: str) -> ContainerProxy:
    """Get a container proxy by name."""
    database = get_database()
    if get_settings().create_containers:
        return database.create_container_if_not_exists(
            id=container_name,
            partition_key=PartitionKey(path=PARTITION_KEY_PATH),
        )
    return database.get_container_client(container_name)


def get_sets_container() -> ContainerProxy:
    """Get the flashcard sets container."""
    return get_container(get_settings().sets_container)


def get_cards_container() -> ContainerProxy:
    """Get the flashcards container."""
    return get_container(get_settings().cards_container)


def verify_connection() -> bool:
    """Verify the Cosmos DB connection is working."""
    try:
        settings = get_settings()
        if not settings.is_configured():
            return False
        get_database().read()
        return True
    except CosmosResourceNotFoundError:
        logger.warning("Cosmos DB database %s not found", get_settings().database_name)
        return False
    except Exception as e:
        logger.warning("Cosmos DB connection check failed: %s", e)
        return False


def close_client():
    """Drop the cached client and database references."""
    global _client, _database
    _client = None
    _database = None
