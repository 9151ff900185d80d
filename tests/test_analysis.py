"""Tests for the pandas views over items, orders and the ledger."""

import pandas as pd

from uniform_inventory.core.analysis import (
    LEDGER_COLUMNS,
    build_ledger_frame,
    compute_key_metrics,
    identify_out_of_stock_groups,
    identify_reorder_rows,
    items_to_frame,
    orders_to_frame,
)
from uniform_inventory.core.ledger import reconcile_inventory
from uniform_inventory.core.report import build_inventory_report

from conftest import make_item, make_order


def test_items_to_frame_adds_normalized_columns(polo_items):
    df = items_to_frame(polo_items)
    assert len(df) == 4
    assert df.loc[2, "name_normalized"] == "shs polo"
    assert df.loc[0, "size_normalized"] == "small"


def test_items_to_frame_counts_embedded_variations():
    item = make_item(note='{"kind":"sizeVariations","variations":[{"size":"S","stock":1}]}')
    df = items_to_frame([item])
    assert df.loc[0, "note_kind"] == "sizeVariations"
    assert df.loc[0, "embedded_variations"] == 1


def test_orders_to_frame(polo_orders):
    df = orders_to_frame(polo_orders)
    assert df["line_count"].tolist() == [1, 1, 1, 2, 1]
    assert df.loc[0, "total_quantity"] == 2
    assert df.loc[4, "status"] == "cancelled"


def test_ledger_frame(polo_items, polo_orders):
    df = build_ledger_frame(reconcile_inventory(polo_items, polo_orders))
    assert list(df.columns) == LEDGER_COLUMNS
    assert df["no"].tolist() == [1, 2, 3, 4]
    assert df.loc[0, "status"] == "Critical"
    assert (df["shortfall"] >= 0).all()


def test_ledger_frame_shortfall():
    items = [make_item(name="Polo", size="S", beginningInventory=1)]
    orders = [
        make_order(status="pending", items=[{"name": "Polo", "size": "S"}]),
        make_order(status="processing", items=[{"name": "Polo", "size": "S"}]),
        make_order(status="pending", items=[{"name": "Polo", "size": "S"}]),
    ]
    df = build_ledger_frame(reconcile_inventory(items, orders))
    assert df.loc[0, "available"] == 0
    assert df.loc[0, "shortfall"] == 2


def test_ledger_frame_empty():
    df = build_ledger_frame([])
    assert df.empty
    assert list(df.columns) == LEDGER_COLUMNS


def test_reorder_rows_sorted():
    items = [
        make_item(id=1, name="Polo", educationLevel="College", size="Medium", stock=25),
        make_item(id=2, name="Blazer", educationLevel="College", size="Large", stock=5),
        make_item(id=3, name="Polo", educationLevel="College", size="Large", stock=10),
        make_item(id=4, name="Polo", educationLevel="College", size="Small", stock=80),
        make_item(id=5, name="Cap", stock=0),
    ]
    df = identify_reorder_rows(items)
    assert df["id"].tolist() == [2, 3, 1]
    assert df["status"].tolist() == ["Critical", "Critical", "At Reorder Point"]


def test_reorder_rows_empty():
    df = identify_reorder_rows([make_item(stock=100)])
    assert df.empty
    assert "current_stock" in df.columns


def test_out_of_stock_groups(polo_items, polo_orders):
    items = polo_items + [
        make_item(id=9, name="Blazer", educationLevel="College", size="Large", stock=0),
    ]
    groups = identify_out_of_stock_groups(items, polo_orders)
    assert [(g["item_name"], g["education_level"]) for g in groups] == [
        ("Blazer", "College"),
        ("shs  polo", "Senior High"),
    ]
    [variant] = groups[1]["variants"]
    assert variant["id"] == 3
    assert variant["variant"] == "Large"


def test_out_of_stock_groups_none():
    assert identify_out_of_stock_groups([make_item(stock=100)]) == []


def test_key_metrics(polo_items, polo_orders):
    metrics = compute_key_metrics(build_inventory_report(polo_items, polo_orders))
    assert metrics["total_rows"] == 4
    assert metrics["total_groups"] == 2
    assert metrics["split_groups"] == 0
    assert metrics["out_of_stock"] == 1
    assert metrics["negative_ending_rows"] == 0
    assert isinstance(metrics["inventory_value"], float)


def test_key_metrics_count_split_groups():
    items = [make_item(name="Polo", size="S", id=1), make_item(name="Polo", size="S", id=2)]
    metrics = compute_key_metrics(build_inventory_report(items, []))
    assert metrics["split_groups"] == 1


def test_key_metrics_empty_report():
    metrics = compute_key_metrics(build_inventory_report([], []))
    assert metrics["total_rows"] == 0
    assert metrics["inventory_value"] == 0.0
