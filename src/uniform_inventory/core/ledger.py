"""
Per item-size inventory ledger.

Each inventory row is reconciled against the orders that reference it:

    ending_inventory = beginning_inventory + purchases - released + returns
    available        = max(0, ending_inventory - unreleased)

Rows are recomputed in full on every pass. A negative ending inventory is a
data problem, not an engine error, and is reported as-is.
"""

import logging
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Iterable

from .. import settings
from .grouping import display_size
from .health import effective_status
from .matching import DateWindow, OrderCounts, OrderIndex
from .models import ItemRecord, ItemStatus, OrderRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconciledRow:
    item_id: str | int | None
    name: str
    size: str
    beginning_inventory: int
    unreleased: int
    purchases: int
    released: int
    returns: int
    available: int
    ending_inventory: int
    unit_price: Decimal
    total_amount: Decimal
    status: ItemStatus

    @property
    def has_negative_ending(self) -> bool:
        return self.ending_inventory < 0

    def to_dict(self) -> dict:
        return asdict(self)


def reconcile(item: ItemRecord, counts: OrderCounts) -> ReconciledRow:
    """Build one ledger row from an inventory row and its order counts."""
    beginning = item.beginning_inventory or 0
    purchases = item.purchases or 0
    returns = item.returns or 0

    ending = beginning + purchases - counts.released + returns
    available = max(0, ending - counts.unreleased)

    return ReconciledRow(
        item_id=item.id,
        name=item.name or settings.DEFAULT_ITEM_NAME,
        size=display_size(item),
        beginning_inventory=beginning,
        unreleased=counts.unreleased,
        purchases=purchases,
        released=counts.released,
        returns=returns,
        available=available,
        ending_inventory=ending,
        unit_price=item.unit_price,
        total_amount=item.total_amount,
        status=effective_status(item),
    )


class ReconciliationEngine:
    """
    Reconciles inventory rows against one order snapshot.

    The orders are indexed once at construction; every row reconciled
    afterwards uses the same index, window and counting mode.

    Usage:
        engine = ReconciliationEngine(orders, window=DateWindow.last_days(30))
        rows = engine.reconcile(items)
    """

    def __init__(
        self,
        orders: Iterable[OrderRecord],
        window: DateWindow | None = None,
        count_quantities: bool = False,
    ):
        self.index = OrderIndex.build(orders)
        self.window = window
        self.count_quantities = count_quantities

    def counts_for(self, item: ItemRecord) -> OrderCounts:
        return self.index.count(
            item.name,
            item.size,
            window=self.window,
            count_quantities=self.count_quantities,
        )

    def reconcile_item(self, item: ItemRecord) -> ReconciledRow:
        return reconcile(item, self.counts_for(item))

    def reconcile(self, items: Iterable[ItemRecord]) -> list[ReconciledRow]:
        """One row per inventory row, in input order."""
        rows = [self.reconcile_item(item) for item in items]

        anomalies = sum(1 for r in rows if r.has_negative_ending)
        if anomalies:
            logger.warning("%d ledger rows have a negative ending inventory", anomalies)
        logger.debug("Reconciled %d rows against %d orders", len(rows), self.index.order_count)
        return rows


def reconcile_inventory(
    items: Iterable[ItemRecord],
    orders: Iterable[OrderRecord],
    window: DateWindow | None = None,
    count_quantities: bool = False,
) -> list[ReconciledRow]:
    """Full reconciliation pass over an item snapshot and an order snapshot."""
    engine = ReconciliationEngine(orders, window=window, count_quantities=count_quantities)
    return engine.reconcile(items)


def summarize_ledger(rows: list[ReconciledRow]) -> dict:
    """Totals across a ledger, for summary cards and logs."""
    return {
        "rows": len(rows),
        "beginning_inventory": sum(r.beginning_inventory for r in rows),
        "purchases": sum(r.purchases for r in rows),
        "returns": sum(r.returns for r in rows),
        "released": sum(r.released for r in rows),
        "unreleased": sum(r.unreleased for r in rows),
        "ending_inventory": sum(r.ending_inventory for r in rows),
        "available": sum(r.available for r in rows),
        "negative_ending_rows": sum(1 for r in rows if r.has_negative_ending),
    }
