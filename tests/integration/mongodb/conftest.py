"""Pytest fixtures for MongoDB integration tests."""

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio

from chainevents import EventsDataStore
from chainevents.integrations.mongodb import MongoConfiguration, MongoStorageBackend

# Assumes a standalone MongoDB container is running locally on port 27017
LOCAL_MONGO_URI = "mongodb://localhost:27017"


@pytest_asyncio.fixture
async def mongo_config(request: pytest.FixtureRequest) -> AsyncIterator[MongoConfiguration]:
    """Create a MongoConfiguration pointing at a fresh local database."""
    db_name = f"test_{request.node.name}"[:63]
    config = MongoConfiguration(uri=LOCAL_MONGO_URI, database=db_name, use_transactions=False)
    await config.client.drop_database(config.database)
    try:
        yield config
    finally:
        await config.on_shutdown()


@pytest_asyncio.fixture
async def mongo_store(mongo_config: MongoConfiguration) -> AsyncIterator[EventsDataStore]:
    """Create an event store backed by MongoDB."""
    async with EventsDataStore(MongoStorageBackend(mongo_config)) as store:
        yield store
