"""
One-shot full recomputation.

Every change to the item or order snapshots triggers a full rebuild of
the report; nothing is patched incrementally.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from .analysis import build_ledger_frame
from .grouping import ItemGroup, group_items
from .health import (
    InventoryHealthStats,
    InventoryStats,
    compute_health,
    compute_inventory_stats,
)
from .ledger import ReconciledRow, reconcile_inventory
from .matching import DateWindow
from .models import ItemRecord, OrderRecord
from .quality import DataQualityReport, check_snapshot

logger = logging.getLogger(__name__)


@dataclass
class InventoryReport:
    """Everything the inventory pages show, derived from one pair of snapshots."""

    groups: list[ItemGroup] = field(default_factory=list)
    rows: list[ReconciledRow] = field(default_factory=list)
    health: InventoryHealthStats = field(default_factory=InventoryHealthStats)
    stats: InventoryStats = field(default_factory=InventoryStats)
    quality: list[DataQualityReport] = field(default_factory=list)
    window: DateWindow | None = None

    @property
    def has_critical_issues(self) -> bool:
        return any(r.has_critical_issues for r in self.quality)

    def summary(self) -> dict:
        return {
            "groups": len(self.groups),
            "rows": len(self.rows),
            **self.health.summary(),
            "unreleased_orders": self.stats.unreleased_orders,
            "released_orders": self.stats.released_orders,
            "quality": [r.summary() for r in self.quality],
        }


def build_inventory_report(
    items: Iterable[ItemRecord],
    orders: Iterable[OrderRecord],
    window: DateWindow | None = None,
    count_quantities: bool = False,
) -> InventoryReport:
    """
    Recompute groups, ledger, health and quality from scratch.

    Pure: the same snapshots (and window) always give an equal report.
    """
    items = list(items)
    orders = list(orders)

    rows = reconcile_inventory(items, orders, window=window, count_quantities=count_quantities)
    report = InventoryReport(
        groups=group_items(items),
        rows=rows,
        health=compute_health(items),
        stats=compute_inventory_stats(items, orders),
        quality=check_snapshot(items, orders, build_ledger_frame(rows)),
        window=window,
    )
    logger.info(
        "Rebuilt inventory report: %d items, %d orders, %d groups",
        len(items),
        len(orders),
        len(report.groups),
    )
    return report
