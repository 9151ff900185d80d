"""Tests for the full recomputation."""

from uniform_inventory.core.health import InventoryHealthStats
from uniform_inventory.core.report import InventoryReport, build_inventory_report

from conftest import make_item, make_order

SIZE_VARIATIONS = '{"kind":"sizeVariations","variations":[{"size":"S","stock":0},{"size":"M","stock":25}]}'


def test_report_bundles_every_view(polo_items, polo_orders, window):
    report = build_inventory_report(polo_items, polo_orders, window=window)
    assert len(report.groups) == 2
    assert [r.item_id for r in report.rows] == [1, 2, 3, 4]
    assert report.rows[0].unreleased == 1
    assert report.health == InventoryHealthStats(
        total_item_variants=4, at_reorder_point=1, out_of_stock=1
    )
    assert report.stats.total_items == 4
    assert [q.source_name for q in report.quality] == ["items", "orders", "ledger"]
    assert report.window == window


def test_identical_snapshots_give_equal_reports(polo_items, polo_orders, window):
    first = build_inventory_report(polo_items, polo_orders, window=window)
    second = build_inventory_report(polo_items, polo_orders, window=window)
    assert first == second


def test_accepts_generators(polo_items, polo_orders):
    report = build_inventory_report(iter(polo_items), (o for o in polo_orders))
    assert len(report.rows) == 4
    assert report.stats.unreleased_orders == 2


def test_empty_snapshots_give_zeroed_report():
    report = build_inventory_report([], [])
    assert report.groups == []
    assert report.rows == []
    assert report.health == InventoryHealthStats()
    assert not report.has_critical_issues


def test_health_ignores_inactive_and_expands_notes():
    items = [
        make_item(id=1, name="Polo", size="S", note=SIZE_VARIATIONS),
        make_item(id=2, name="Polo", size="M", stock=0, isActive=False),
    ]
    report = build_inventory_report(items, [])
    assert report.health == InventoryHealthStats(
        total_item_variants=2, at_reorder_point=1, out_of_stock=1
    )
    # The ledger still lists inactive rows
    assert len(report.rows) == 2


def test_negative_ending_flags_critical_quality():
    items = [make_item(name="Polo", size="S")]
    orders = [make_order(status="completed", items=[{"name": "Polo", "size": "S"}])]
    report = build_inventory_report(items, orders)
    assert report.rows[0].ending_inventory == -1
    assert report.has_critical_issues


def test_summary(polo_items, polo_orders):
    summary = build_inventory_report(polo_items, polo_orders).summary()
    assert summary["groups"] == 2
    assert summary["out_of_stock"] == 1
    assert summary["released_orders"] == 2
    assert len(summary["quality"]) == 3


def test_default_report_is_empty():
    assert InventoryReport().rows == []
