"""Registry of callbacks notified when events arrive for a token contract."""

import inspect
import logging
from collections.abc import Callable

from ulid import ULID

LOGGER = logging.getLogger(__name__)

Subscriber = Callable[[str], None]
"""Callback receiving the checksummed token-contract address."""


class SubscriptionRegistry:
    """Ordered set of subscribers keyed by generated subscription IDs.

    Subscribers are not filtered per token contract: every registered
    callback hears about every append and decides for itself whether the
    contract concerns it.

    Notification is synchronous and follows registration order. A callback
    that raises is logged and skipped; the remaining callbacks still run.
    Callbacks may register or unregister subscribers while a notification is
    in flight. Newly added subscribers start with the next notification.

    Attributes:
        error_level: Numeric logging level used to report failing callbacks.

    Examples:
        >>> registry = SubscriptionRegistry()
        >>> subscription_id = registry.subscribe(lambda contract: print(contract))
        >>> registry.notify("0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed")
        0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed
        >>> registry.unsubscribe(subscription_id)
        True
    """

    def __init__(self, error_level: str = "ERROR") -> None:
        """Initialize an empty registry.

        Args:
            error_level: Log level name for subscriber failures.
                Case-insensitive.
        """
        self.error_level = getattr(logging, error_level.upper())
        self._subscribers: dict[ULID, Subscriber] = {}

    def __len__(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Subscriber) -> ULID:
        """Register a callback.

        Registering the same callable twice creates two independent
        subscriptions, each notified once per append. Callbacks must be
        synchronous; notification never awaits.

        Returns:
            ID to pass to ``unsubscribe``.

        Raises:
            TypeError: If ``callback`` is a coroutine function.
        """
        if inspect.iscoroutinefunction(callback):
            raise TypeError("Subscribers must be synchronous callables")
        subscription_id = ULID()
        self._subscribers[subscription_id] = callback
        return subscription_id

    def unsubscribe(self, subscription_id: ULID) -> bool:
        """Remove a subscription.

        Returns:
            True if the subscription existed, False otherwise.
        """
        return self._subscribers.pop(subscription_id, None) is not None

    def notify(self, token_contract: str) -> None:
        """Invoke every subscriber with the token contract.

        Args:
            token_contract: Token contract whose events were appended.
        """
        # Snapshot so callbacks can (un)subscribe while we iterate
        for subscription_id, callback in list(self._subscribers.items()):
            if subscription_id not in self._subscribers:
                continue
            try:
                callback(token_contract)
            except Exception:
                LOGGER.log(
                    self.error_level,
                    "Event subscriber failed",
                    exc_info=True,
                    extra={
                        "subscription_id": str(subscription_id),
                        "token_contract": token_contract,
                    },
                )
