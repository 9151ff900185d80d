"""
Order-to-item matching.

Answers "how many open and fulfilled orders reference this item+size?" for
the ledger. Order lines are matched on normalized name and normalized size,
so an order line "Polo / Small (S)" counts against the inventory row
"polo / Small".

Two entry points give identical answers:
- count_orders() scans every order; fine for one-off lookups
- OrderIndex indexes the orders once per reconciliation pass, so the cost
  stops growing with the number of inventory rows
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable

from .models import OrderRecord
from .parsers import normalize_name, normalize_size

logger = logging.getLogger(__name__)


def _as_day(moment: date | datetime | None) -> date | None:
    if moment is None:
        return None
    if isinstance(moment, datetime):
        return moment.date()
    return moment


@dataclass(frozen=True)
class DateWindow:
    """Inclusive [start, end] range compared at day granularity. Either bound may be open."""

    start: date | datetime | None = None
    end: date | datetime | None = None

    @classmethod
    def last_days(cls, days: int, today: date | None = None) -> "DateWindow":
        """The `days` days ending today, e.g. the dashboard's default 30-day range."""
        today = today or date.today()
        return cls(start=today - timedelta(days=days), end=today)

    def contains(self, moment: date | datetime | None) -> bool:
        """True when `moment` falls inside the window; a missing moment never does."""
        day = _as_day(moment)
        if day is None:
            return False
        start = _as_day(self.start)
        end = _as_day(self.end)
        if start is not None and day < start:
            return False
        if end is not None and day > end:
            return False
        return True


@dataclass(frozen=True)
class OrderCounts:
    unreleased: int = 0
    released: int = 0

    def __add__(self, other: "OrderCounts") -> "OrderCounts":
        return OrderCounts(
            unreleased=self.unreleased + other.unreleased,
            released=self.released + other.released,
        )


def comparison_date(order: OrderRecord) -> datetime | None:
    """
    The timestamp an order is windowed on.

    Released orders are dated by when they were released: updated_at, then
    the completion timestamp (claimed date, then completed_at), then
    created_at. Unreleased orders are dated by created_at.
    """
    if order.status.is_released:
        return order.updated_at or order.completion_timestamp or order.created_at
    return order.created_at


def _tally(
    order: OrderRecord,
    quantity: int,
    window: DateWindow | None,
    count_quantities: bool,
) -> OrderCounts:
    status = order.status
    if not (status.is_released or status.is_unreleased):
        return OrderCounts()

    if window is not None and not window.contains(comparison_date(order)):
        return OrderCounts()

    amount = quantity if count_quantities else 1
    if amount <= 0:
        return OrderCounts()
    if status.is_released:
        return OrderCounts(released=amount)
    return OrderCounts(unreleased=amount)


def _matching_quantity(order: OrderRecord, name_key: str, size_key: str) -> int | None:
    """Summed quantity of the order's lines for name+size, or None if no line matches."""
    total = None
    for line in order.items:
        if normalize_name(line.name) == name_key and normalize_size(line.size) == size_key:
            total = (total or 0) + line.quantity
    return total


def count_orders(
    item_name: str | None,
    item_size: str | None,
    orders: Iterable[OrderRecord],
    window: DateWindow | None = None,
    count_quantities: bool = False,
) -> OrderCounts:
    """
    Count the unreleased (pending/processing) and released (completed/claimed)
    orders that contain item_name in item_size.

    Each order counts at most once, however many of its lines match. With
    count_quantities=True the matched line quantities are summed instead.
    Other statuses are ignored. With a window, orders whose comparison date
    falls outside it (or who have none) are skipped.
    """
    name_key = normalize_name(item_name)
    size_key = normalize_size(item_size)

    counts = OrderCounts()
    for order in orders:
        quantity = _matching_quantity(order, name_key, size_key)
        if quantity is None:
            continue
        counts = counts + _tally(order, quantity, window, count_quantities)
    return counts


class OrderIndex:
    """
    Orders indexed by (normalized name, normalized size) of their lines.

    Built once per reconciliation pass. Each order appears at most once per
    key, with the summed quantity of its matching lines.
    """

    def __init__(self):
        self._entries: dict[tuple[str, str], list[tuple[OrderRecord, int]]] = defaultdict(list)
        self.order_count = 0

    @classmethod
    def build(cls, orders: Iterable[OrderRecord]) -> "OrderIndex":
        index = cls()
        for order in orders:
            index.order_count += 1
            if not (order.status.is_released or order.status.is_unreleased):
                continue

            per_key: dict[tuple[str, str], int] = {}
            for line in order.items:
                key = (normalize_name(line.name), normalize_size(line.size))
                per_key[key] = per_key.get(key, 0) + line.quantity

            for key, quantity in per_key.items():
                index._entries[key].append((order, quantity))

        logger.debug(
            "Indexed %d orders under %d item/size keys", index.order_count, len(index._entries)
        )
        return index

    def count(
        self,
        item_name: str | None,
        item_size: str | None,
        window: DateWindow | None = None,
        count_quantities: bool = False,
    ) -> OrderCounts:
        """Same result as count_orders() over the indexed orders."""
        key = (normalize_name(item_name), normalize_size(item_size))
        counts = OrderCounts()
        for order, quantity in self._entries.get(key, []):
            counts = counts + _tally(order, quantity, window, count_quantities)
        return counts


def count_order_totals(
    orders: Iterable[OrderRecord], window: DateWindow | None = None
) -> OrderCounts:
    """Unreleased and released orders overall, regardless of what they contain."""
    counts = OrderCounts()
    for order in orders:
        counts = counts + _tally(order, 1, window, count_quantities=False)
    return counts
