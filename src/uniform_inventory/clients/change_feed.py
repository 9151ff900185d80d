"""
Change notifications for item and order records.

ChangeFeed is a plain in-process publish/subscribe channel keyed by
ChangeKind. Whatever transport receives the service's events (a socket
client, a webhook, a test) publishes them here; nothing in this module
knows about the transport.

InventoryMonitor keeps an InventoryReport current: every relevant
notification refetches both snapshots and rebuilds the report in full.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from ..core.matching import DateWindow
from ..core.models import ItemRecord, OrderRecord
from ..core.report import InventoryReport, build_inventory_report

logger = logging.getLogger(__name__)


class ChangeKind(str, Enum):
    """Event names, as emitted by the inventory service."""

    ITEM_CREATED = "item:created"
    ITEM_UPDATED = "item:updated"
    ORDER_CREATED = "order:created"
    ORDER_UPDATED = "order:updated"
    ORDER_CLAIMED = "order:claimed"


@dataclass(frozen=True)
class ChangeNotification:
    kind: ChangeKind
    record_id: str | int | None = None
    payload: dict[str, Any] = field(default_factory=dict)


Handler = Callable[[ChangeNotification], None]
SnapshotProvider = Callable[[], tuple[list[ItemRecord], list[OrderRecord]]]


class Subscription:
    """Handle returned by ChangeFeed.subscribe(); call unsubscribe() to stop receiving."""

    def __init__(self, feed: "ChangeFeed", kind: ChangeKind, handler: Handler):
        self.feed = feed
        self.kind = kind
        self.handler = handler
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self.feed._remove(self)
            self.active = False


class ChangeFeed:
    """
    Synchronous publish/subscribe channel.

    Handlers run in subscription order on the publisher's thread. A handler
    that raises stops delivery and the exception reaches the publisher.
    """

    def __init__(self):
        self._subscriptions: dict[ChangeKind, list[Subscription]] = {}

    def subscribe(self, kind: ChangeKind | str, handler: Handler) -> Subscription:
        kind = ChangeKind(kind)
        subscription = Subscription(self, kind, handler)
        self._subscriptions.setdefault(kind, []).append(subscription)
        return subscription

    def publish(self, notification: ChangeNotification) -> int:
        """Deliver a notification; returns how many handlers received it."""
        # Copy: handlers may unsubscribe while we iterate
        subscriptions = list(self._subscriptions.get(notification.kind, []))
        for subscription in subscriptions:
            subscription.handler(notification)
        logger.debug("Delivered %s to %d handlers", notification.kind.value, len(subscriptions))
        return len(subscriptions)

    def subscriber_count(self, kind: ChangeKind | str) -> int:
        return len(self._subscriptions.get(ChangeKind(kind), []))

    def _remove(self, subscription: Subscription) -> None:
        subscriptions = self._subscriptions.get(subscription.kind, [])
        if subscription in subscriptions:
            subscriptions.remove(subscription)


class InventoryMonitor:
    """
    Rebuilds the inventory report whenever items or orders change.

    Usage:
        feed = ChangeFeed()
        monitor = InventoryMonitor(SnapshotLoader(data_dir).fetch, feed)
        feed.publish(ChangeNotification(ChangeKind.ORDER_CLAIMED, record_id=42))
        monitor.report  # rebuilt from fresh snapshots
    """

    WATCHED = (
        ChangeKind.ITEM_CREATED,
        ChangeKind.ITEM_UPDATED,
        ChangeKind.ORDER_CREATED,
        ChangeKind.ORDER_UPDATED,
        ChangeKind.ORDER_CLAIMED,
    )

    def __init__(
        self,
        provider: SnapshotProvider,
        feed: ChangeFeed,
        window: DateWindow | None = None,
        count_quantities: bool = False,
    ):
        self.provider = provider
        self.feed = feed
        self.window = window
        self.count_quantities = count_quantities
        self.refresh_count = 0
        self._report: InventoryReport | None = None
        self._subscriptions = [feed.subscribe(kind, self._on_change) for kind in self.WATCHED]

    @property
    def report(self) -> InventoryReport:
        """The current report, built on first access if nothing has changed yet."""
        if self._report is None:
            self.refresh()
        return self._report

    def refresh(self) -> InventoryReport:
        items, orders = self.provider()
        self._report = build_inventory_report(
            items, orders, window=self.window, count_quantities=self.count_quantities
        )
        self.refresh_count += 1
        return self._report

    def close(self) -> None:
        """Stop listening to the feed."""
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions = []

    def _on_change(self, notification: ChangeNotification) -> None:
        logger.info(
            "%s (%s): rebuilding inventory report", notification.kind.value, notification.record_id
        )
        self.refresh()
