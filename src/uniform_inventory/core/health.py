"""
Inventory health statistics for the summary cards.

Stock bands (thresholds from settings):
- 0                      -> Out of Stock
- 1 .. min-1             -> Critical
- min .. max-1           -> At Reorder Point (20-49 by default)
- max and above          -> Above Threshold

The cards must show the same numbers on every page, so every page calls
compute_health() on the same item snapshot instead of counting its own way.
"""

import logging
from dataclasses import dataclass
from typing import Iterable

from .. import settings
from .matching import DateWindow, count_order_totals
from .models import ItemRecord, ItemStatus, OrderRecord
from .notes import embedded_variations

logger = logging.getLogger(__name__)


def classify_stock(stock: int) -> ItemStatus:
    """Stock band for a unit count."""
    if stock <= 0:
        return ItemStatus.OUT_OF_STOCK
    if stock < settings.REORDER_POINT_MIN:
        return ItemStatus.CRITICAL
    if stock < settings.REORDER_POINT_MAX:
        return ItemStatus.AT_REORDER_POINT
    return ItemStatus.ABOVE_THRESHOLD


def _at_reorder_point(stock: int) -> bool:
    return settings.REORDER_POINT_MIN <= stock < settings.REORDER_POINT_MAX


@dataclass(frozen=True)
class InventoryHealthStats:
    total_item_variants: int = 0
    at_reorder_point: int = 0
    out_of_stock: int = 0

    def summary(self) -> dict:
        return {
            "total_item_variants": self.total_item_variants,
            "at_reorder_point": self.at_reorder_point,
            "out_of_stock": self.out_of_stock,
        }


def countable_units(item: ItemRecord) -> list[int]:
    """
    Stock of each countable unit an item contributes.

    An item whose note embeds size variations counts once per embedded
    size; any other item counts once with its own stock.
    """
    variations = embedded_variations(item.note)
    if variations:
        return [v.stock for v in variations]
    return [item.stock]


def compute_health(items: Iterable[ItemRecord]) -> InventoryHealthStats:
    """
    Count item variants, variants at the reorder point and variants out of
    stock across active items.
    """
    total = reorder = out = 0
    for item in items:
        if item.is_active is False:
            continue
        for stock in countable_units(item):
            total += 1
            if stock == 0:
                out += 1
            elif _at_reorder_point(stock):
                reorder += 1

    stats = InventoryHealthStats(
        total_item_variants=total, at_reorder_point=reorder, out_of_stock=out
    )
    logger.debug("Inventory health: %s", stats.summary())
    return stats


def effective_status(item: ItemRecord) -> ItemStatus:
    """The row's stored status, or its stock band when none was stored."""
    return item.status or classify_stock(item.stock)


def compute_group_health(
    items: Iterable[ItemRecord], window: DateWindow | None = None
) -> InventoryHealthStats:
    """
    Health counted per product instead of per variant.

    Rows are grouped by (name, education level). A group is out of stock if
    any of its rows is; otherwise it is at the reorder point if any row is.
    With a window, only rows created inside it are considered.
    """
    statuses: dict[tuple[str, str], set[ItemStatus]] = {}
    for item in items:
        if window is not None and not window.contains(item.created_at):
            continue
        key = (item.name or "", item.education_level or "")
        statuses.setdefault(key, set()).add(effective_status(item))

    out = reorder = 0
    for group_statuses in statuses.values():
        if ItemStatus.OUT_OF_STOCK in group_statuses:
            out += 1
        elif ItemStatus.AT_REORDER_POINT in group_statuses:
            reorder += 1

    return InventoryHealthStats(
        total_item_variants=len(statuses), at_reorder_point=reorder, out_of_stock=out
    )


@dataclass(frozen=True)
class InventoryStats:
    """Row counts per stock band plus overall order counts, for the ledger page header."""

    total_items: int = 0
    above_threshold: int = 0
    at_reorder_point: int = 0
    critical: int = 0
    out_of_stock: int = 0
    unreleased_orders: int = 0
    released_orders: int = 0

    def summary(self) -> dict:
        return {
            "total_items": self.total_items,
            "above_threshold": self.above_threshold,
            "at_reorder_point": self.at_reorder_point,
            "critical": self.critical,
            "out_of_stock": self.out_of_stock,
            "unreleased_orders": self.unreleased_orders,
            "released_orders": self.released_orders,
        }


def compute_inventory_stats(
    items: Iterable[ItemRecord], orders: Iterable[OrderRecord]
) -> InventoryStats:
    by_status = {status: 0 for status in ItemStatus}
    total = 0
    for item in items:
        total += 1
        by_status[effective_status(item)] += 1

    orders_total = count_order_totals(orders)
    return InventoryStats(
        total_items=total,
        above_threshold=by_status[ItemStatus.ABOVE_THRESHOLD],
        at_reorder_point=by_status[ItemStatus.AT_REORDER_POINT],
        critical=by_status[ItemStatus.CRITICAL],
        out_of_stock=by_status[ItemStatus.OUT_OF_STOCK],
        unreleased_orders=orders_total.unreleased,
        released_orders=orders_total.released,
    )
