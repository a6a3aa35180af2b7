"""MongoDB configuration using pydantic-settings."""

from functools import cached_property
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.asynchronous.mongo_client import AsyncMongoClient


class MongoConfiguration(BaseSettings):
    """Configuration and factory for MongoDB resources.

    All settings can be configured via environment variables with the
    CHAINEVENTS_MONGO_ prefix. For example:
    - CHAINEVENTS_MONGO_URI=mongodb://localhost:27017
    - CHAINEVENTS_MONGO_DATABASE=wallet
    - CHAINEVENTS_MONGO_EVENTS_COLLECTION=event_instances

    The configuration also acts as a factory, providing lazy-initialized
    properties for the MongoDB client, database, and events collection.

    Attributes:
        uri: MongoDB connection URI.
        database: Database name to use.
        events_collection: Collection name for event instances.
        use_transactions: Wrap batch writes in a multi-document transaction.
            Requires a replica set or sharded cluster. Disable it for a
            standalone server; a failed batch is then undone by compensating
            writes, which is not atomic.

    Example:
        >>> config = MongoConfiguration(database="wallet")
        >>> backend = MongoStorageBackend(config)
        >>> store = EventsDataStore(backend)
    """

    model_config = SettingsConfigDict(env_prefix="CHAINEVENTS_MONGO_")

    uri: str = "mongodb://localhost:27017"
    database: str = "chainevents"
    events_collection: str = "event_instances"
    use_transactions: bool = True

    @cached_property
    def client(self) -> AsyncMongoClient[dict[str, Any]]:
        """Get the MongoDB async client.

        The client is lazily created and cached for reuse.
        """
        return AsyncMongoClient(self.uri)

    @cached_property
    def db(self) -> AsyncDatabase[dict[str, Any]]:
        """Get the MongoDB async database."""
        return self.client[self.database]

    @cached_property
    def events(self) -> AsyncCollection[dict[str, Any]]:
        """Get the event instances collection."""
        return self.db[self.events_collection]

    async def on_shutdown(self) -> None:
        """Close the MongoDB client connection if it was created."""
        if "client" in self.__dict__:
            await self.client.close()
            del self.__dict__["client"]
            self.__dict__.pop("db", None)
            self.__dict__.pop("events", None)
