"""Event store configuration using pydantic-settings."""

from typing import TYPE_CHECKING, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from .store import EventsDataStore, InMemoryStorageBackend, StorageBackend, SubscriptionRegistry

if TYPE_CHECKING:
    from .integrations.mongodb import MongoConfiguration


class EventStoreSettings(BaseSettings):
    """Settings for building an EventsDataStore.

    All settings can be configured via environment variables with the
    CHAINEVENTS_ prefix. For example:
    - CHAINEVENTS_BACKEND=mongodb
    - CHAINEVENTS_SUBSCRIBER_ERROR_LEVEL=WARNING

    Attributes:
        backend: Storage engine, "memory" or "mongodb". The MongoDB engine
            reads its own CHAINEVENTS_MONGO_* settings.
        subscriber_error_level: Log level name used when a subscriber
            callback raises.
    """

    model_config = SettingsConfigDict(env_prefix="CHAINEVENTS_")

    backend: Literal["memory", "mongodb"] = "memory"
    subscriber_error_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "ERROR"


def create_events_data_store(
    settings: EventStoreSettings | None = None,
    mongo: "MongoConfiguration | None" = None,
) -> EventsDataStore:
    """Build an EventsDataStore for the configured backend.

    Args:
        settings: Store settings. Loaded from the environment when omitted.
        mongo: MongoDB settings, used when ``settings.backend`` is "mongodb".
            Loaded from the environment when omitted.

    Returns:
        A new, empty-subscriber store owning a fresh backend.

    Examples:
        >>> store = create_events_data_store(EventStoreSettings(backend="memory"))
    """
    settings = settings or EventStoreSettings()

    backend: StorageBackend
    if settings.backend == "mongodb":
        # Imported lazily: pymongo is an optional dependency
        from .integrations.mongodb import MongoConfiguration, MongoStorageBackend

        backend = MongoStorageBackend(mongo or MongoConfiguration())
    else:
        backend = InMemoryStorageBackend()

    return EventsDataStore(
        backend,
        subscriptions=SubscriptionRegistry(error_level=settings.subscriber_error_level),
    )
