"""
Tabular views over snapshots and reconciled ledgers.

Computes frames for:
- The inventory ledger table
- Rows that need reordering attention (critical / at reorder point)
- Out-of-stock products with their per-variant ledger figures
- Headline metrics
"""

from typing import TYPE_CHECKING, Iterable

import numpy as np
import pandas as pd

from .grouping import display_size
from .health import effective_status
from .ledger import ReconciledRow, ReconciliationEngine
from .matching import DateWindow, comparison_date
from .models import ItemRecord, ItemStatus, OrderRecord
from .notes import SizeVariationsNote, parse_note
from .parsers import NameNormalizer, SizeNormalizer, normalize_name

if TYPE_CHECKING:
    from .report import InventoryReport

ITEM_COLUMNS = [
    "id", "name", "item_type", "education_level", "category", "size",
    "stock", "price", "beginning_inventory", "purchases", "returns",
    "unit_price", "total_amount", "status", "is_active", "created_at",
    "updated_at", "note_kind", "embedded_variations",
]

ORDER_COLUMNS = [
    "id", "order_number", "status", "line_count", "total_quantity",
    "created_at", "updated_at", "comparison_date",
]

LEDGER_COLUMNS = [
    "no", "item_id", "name", "size", "beginning_inventory", "unreleased",
    "purchases", "released", "returns", "available", "ending_inventory",
    "shortfall", "unit_price", "total_amount", "status",
]


def items_to_frame(items: Iterable[ItemRecord]) -> pd.DataFrame:
    """One row per inventory row, with normalized name/size columns for matching."""
    records = []
    for item in items:
        note = parse_note(item.note)
        records.append(
            {
                "id": item.id,
                "name": item.name,
                "item_type": item.item_type,
                "education_level": item.education_level,
                "category": item.category,
                "size": item.size,
                "stock": item.stock,
                "price": float(item.price),
                "beginning_inventory": item.beginning_inventory,
                "purchases": item.purchases,
                "returns": item.returns,
                "unit_price": float(item.unit_price),
                "total_amount": float(item.total_amount),
                "status": item.status.value if item.status else None,
                "is_active": item.is_active,
                "created_at": item.created_at,
                "updated_at": item.updated_at,
                "note_kind": note.kind,
                "embedded_variations": len(note.variations)
                if isinstance(note, SizeVariationsNote)
                else 0,
            }
        )

    df = pd.DataFrame(records, columns=ITEM_COLUMNS)
    df["name_normalized"] = NameNormalizer().normalize_series(df["name"])
    df["size_normalized"] = SizeNormalizer().normalize_series(df["size"])
    return df


def orders_to_frame(orders: Iterable[OrderRecord]) -> pd.DataFrame:
    """One row per order."""
    records = [
        {
            "id": order.id,
            "order_number": order.order_number,
            "status": order.status.value,
            "line_count": len(order.items),
            "total_quantity": sum(line.quantity for line in order.items),
            "created_at": order.created_at,
            "updated_at": order.updated_at,
            "comparison_date": comparison_date(order),
        }
        for order in orders
    ]
    return pd.DataFrame(records, columns=ORDER_COLUMNS)


def build_ledger_frame(rows: Iterable[ReconciledRow]) -> pd.DataFrame:
    """
    The inventory ledger table.

    Adds a 1-based `no` column and `shortfall`: the unreleased quantity not
    covered by ending inventory (what the available floor of 0 hides).
    """
    df = pd.DataFrame([row.to_dict() for row in rows])
    if len(df) == 0:
        return pd.DataFrame(columns=LEDGER_COLUMNS)

    df["status"] = df["status"].map(lambda s: s.value if isinstance(s, ItemStatus) else s)
    df["unit_price"] = df["unit_price"].astype(float)
    df["total_amount"] = df["total_amount"].astype(float)

    uncovered = df["unreleased"] - df["ending_inventory"]
    df["shortfall"] = np.where(uncovered > 0, uncovered, 0)
    df.insert(0, "no", np.arange(1, len(df) + 1))
    return df[LEDGER_COLUMNS]


def identify_reorder_rows(items: Iterable[ItemRecord]) -> pd.DataFrame:
    """
    Rows that need reordering attention: Critical or At Reorder Point.

    One row per size variant, sorted by item name, education level, size.
    """
    columns = ["id", "item_name", "education_level", "size", "current_stock", "status"]
    records = [
        {
            "id": item.id,
            "item_name": item.name or "",
            "education_level": item.education_level or "",
            "size": display_size(item),
            "current_stock": item.stock,
            "status": effective_status(item).value,
        }
        for item in items
        if effective_status(item) in (ItemStatus.CRITICAL, ItemStatus.AT_REORDER_POINT)
    ]
    df = pd.DataFrame(records, columns=columns)
    return df.sort_values(["item_name", "education_level", "size"], kind="stable").reset_index(
        drop=True
    )


def identify_out_of_stock_groups(
    items: Iterable[ItemRecord],
    orders: Iterable[OrderRecord] = (),
    window: DateWindow | None = None,
) -> list[dict]:
    """
    Out-of-stock rows grouped by (item name, education level).

    Each group lists its variants with their ledger figures. Groups are
    sorted by name, then education level.
    """
    out_of_stock = [i for i in items if effective_status(i) is ItemStatus.OUT_OF_STOCK]
    if not out_of_stock:
        return []

    engine = ReconciliationEngine(orders, window=window)
    records = []
    for item in out_of_stock:
        row = engine.reconcile_item(item)
        records.append(
            {
                "item_name": item.name or "",
                "education_level": item.education_level or "",
                "id": item.id,
                "variant": row.size,
                "beginning_inventory": row.beginning_inventory,
                "purchases": row.purchases,
                "released": row.released,
                "returns": row.returns,
                "ending_inventory": row.ending_inventory,
                "unit_price": float(item.unit_price or item.price),
            }
        )

    df = pd.DataFrame(records)
    groups = []
    for (name, level), variants in df.groupby(["item_name", "education_level"], sort=True):
        groups.append(
            {
                "item_name": name,
                "education_level": level,
                "variants": variants.drop(columns=["item_name", "education_level"]).to_dict(
                    "records"
                ),
            }
        )
    return groups


def compute_key_metrics(report: "InventoryReport") -> dict:
    """Compute summary metrics for a full inventory report."""
    ledger = build_ledger_frame(report.rows)
    products = {(normalize_name(g.name), g.item_type) for g in report.groups}

    metrics = {
        "total_rows": len(report.rows),
        "total_groups": len(report.groups),
        # Groups that exist only because a size was entered twice
        "split_groups": len(report.groups) - len(products),
        "total_item_variants": report.health.total_item_variants,
        "at_reorder_point": report.health.at_reorder_point,
        "out_of_stock": report.health.out_of_stock,
        "unreleased_orders": report.stats.unreleased_orders,
        "released_orders": report.stats.released_orders,
        "total_available": 0,
        "total_shortfall": 0,
        "negative_ending_rows": 0,
        "inventory_value": 0.0,
    }
    if len(ledger) == 0:
        return metrics

    metrics["total_available"] = int(ledger["available"].sum())
    metrics["total_shortfall"] = int(ledger["shortfall"].sum())
    metrics["negative_ending_rows"] = int((ledger["ending_inventory"] < 0).sum())
    metrics["inventory_value"] = float(
        (ledger["ending_inventory"].clip(lower=0) * ledger["unit_price"]).sum()
    )
    return metrics
