# Reconciliation engine for the uniform inventory
# Everything in here is pure: snapshots in, derived views out

from .parsers import (
    NameNormalizer,
    SizeNormalizer,
    TimestampParser,
    normalize_name,
    normalize_size,
    parse_line_items,
)
from .models import ItemRecord, ItemStatus, OrderLineItem, OrderRecord, OrderStatus
from .notes import PlainNote, SizeVariationsNote, parse_note
from .grouping import ItemGroup, filter_groups_by_education_level, group_items
from .matching import DateWindow, OrderCounts, OrderIndex, count_order_totals, count_orders
from .ledger import ReconciledRow, ReconciliationEngine, reconcile, reconcile_inventory
from .health import (
    InventoryHealthStats,
    InventoryStats,
    classify_stock,
    compute_group_health,
    compute_health,
    compute_inventory_stats,
)
from .analysis import (
    build_ledger_frame,
    compute_key_metrics,
    identify_out_of_stock_groups,
    identify_reorder_rows,
)
from .quality import DataQualityChecker, DataQualityIssue, DataQualityReport
from .report import InventoryReport, build_inventory_report

__all__ = [
    "NameNormalizer",
    "SizeNormalizer",
    "TimestampParser",
    "normalize_name",
    "normalize_size",
    "parse_line_items",
    "ItemRecord",
    "ItemStatus",
    "OrderLineItem",
    "OrderRecord",
    "OrderStatus",
    "PlainNote",
    "SizeVariationsNote",
    "parse_note",
    "ItemGroup",
    "filter_groups_by_education_level",
    "group_items",
    "DateWindow",
    "OrderCounts",
    "OrderIndex",
    "count_order_totals",
    "count_orders",
    "ReconciledRow",
    "ReconciliationEngine",
    "reconcile",
    "reconcile_inventory",
    "InventoryHealthStats",
    "InventoryStats",
    "classify_stock",
    "compute_group_health",
    "compute_health",
    "compute_inventory_stats",
    "build_ledger_frame",
    "compute_key_metrics",
    "identify_out_of_stock_groups",
    "identify_reorder_rows",
    "DataQualityChecker",
    "DataQualityIssue",
    "DataQualityReport",
    "InventoryReport",
    "build_inventory_report",
]
