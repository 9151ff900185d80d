"""Tests for change notifications and the auto-refreshing monitor."""

import pytest

from uniform_inventory.clients.change_feed import (
    ChangeFeed,
    ChangeKind,
    ChangeNotification,
    InventoryMonitor,
)

from conftest import make_item, make_order


class TestChangeFeed:
    def test_publish_reaches_subscribers_of_that_kind(self):
        feed = ChangeFeed()
        received = []
        feed.subscribe(ChangeKind.ORDER_CREATED, received.append)
        feed.subscribe(ChangeKind.ITEM_UPDATED, lambda n: pytest.fail("wrong kind"))

        note = ChangeNotification(ChangeKind.ORDER_CREATED, record_id="o1")
        assert feed.publish(note) == 1
        assert received == [note]

    def test_subscribe_by_event_name(self):
        feed = ChangeFeed()
        feed.subscribe("order:claimed", lambda n: None)
        assert feed.subscriber_count(ChangeKind.ORDER_CLAIMED) == 1

    def test_unknown_event_name(self):
        with pytest.raises(ValueError):
            ChangeFeed().subscribe("order:deleted", lambda n: None)

    def test_unsubscribe(self):
        feed = ChangeFeed()
        received = []
        subscription = feed.subscribe(ChangeKind.ITEM_CREATED, received.append)
        subscription.unsubscribe()
        subscription.unsubscribe()

        assert feed.publish(ChangeNotification(ChangeKind.ITEM_CREATED)) == 0
        assert received == []

    def test_handler_errors_reach_the_publisher(self):
        feed = ChangeFeed()

        def broken(notification):
            raise RuntimeError("boom")

        feed.subscribe(ChangeKind.ITEM_UPDATED, broken)
        with pytest.raises(RuntimeError, match="boom"):
            feed.publish(ChangeNotification(ChangeKind.ITEM_UPDATED))


class TestInventoryMonitor:
    @pytest.fixture
    def snapshots(self):
        return {
            "items": [make_item(id=1, name="Polo", size="Small", beginningInventory=10)],
            "orders": [],
        }

    @pytest.fixture
    def monitor(self, snapshots):
        provider = lambda: (list(snapshots["items"]), list(snapshots["orders"]))
        return InventoryMonitor(provider, ChangeFeed())

    def test_report_built_lazily(self, monitor):
        assert monitor.refresh_count == 0
        assert monitor.report.rows[0].ending_inventory == 10
        assert monitor.refresh_count == 1

    @pytest.mark.parametrize("kind", list(ChangeKind))
    def test_every_change_kind_rebuilds(self, monitor, snapshots, kind):
        snapshots["orders"].append(
            make_order(status="claimed", items=[{"name": "Polo", "size": "Small (S)"}])
        )
        monitor.feed.publish(ChangeNotification(kind))
        assert monitor.refresh_count == 1
        assert monitor.report.rows[0].released == 1
        assert monitor.report.rows[0].ending_inventory == 9

    def test_close_stops_refreshing(self, monitor):
        monitor.close()
        monitor.feed.publish(ChangeNotification(ChangeKind.ITEM_UPDATED))
        assert monitor.refresh_count == 0
        assert monitor.feed.subscriber_count(ChangeKind.ITEM_UPDATED) == 0

    def test_provider_errors_propagate(self):
        def failing():
            raise ConnectionError("item service down")

        feed = ChangeFeed()
        InventoryMonitor(failing, feed)
        with pytest.raises(ConnectionError):
            feed.publish(ChangeNotification(ChangeKind.ORDER_UPDATED))
