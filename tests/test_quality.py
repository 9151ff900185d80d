"""
Tests for the data quality checker and the snapshot checks built on it.
"""

import pandas as pd
import pytest

from uniform_inventory.core.analysis import build_ledger_frame, items_to_frame, orders_to_frame
from uniform_inventory.core.ledger import reconcile_inventory
from uniform_inventory.core.quality import (
    DataQualityChecker,
    DataQualityIssue,
    check_snapshot,
    item_checker,
    ledger_checker,
    order_checker,
    raw_timestamp_checker,
)

from conftest import make_item, make_order


def _issue(report, column, issue_type):
    return next(
        (i for i in report.issues if i.column == column and i.issue_type == issue_type), None
    )


class TestDataQualityChecker:
    @pytest.fixture
    def df(self):
        return pd.DataFrame(
            {
                "sku": ["A", "A", "B", None],
                "qty": [1, -4, 3, 500],
                "channel": ["pos", "web", "fax", None],
            }
        )

    def test_missing_values_severity_by_share(self, df):
        report = DataQualityChecker("t").check_missing_values(["sku"]).run(df)
        issue = _issue(report, "sku", "missing")
        assert issue.count == 1
        assert issue.severity == "critical"  # 25% missing

    def test_blank_strings_count_as_missing(self):
        df = pd.DataFrame({"name": ["Polo", "  ", ""]})
        report = DataQualityChecker("t").check_missing_values(["name"], severity="warning").run(df)
        assert _issue(report, "name", "missing").count == 2

    def test_duplicates(self, df):
        report = DataQualityChecker("t").check_duplicates(["sku"]).run(df)
        issue = _issue(report, "sku", "duplicate")
        assert issue.count == 2
        assert issue.sample_values == ["A"]

    def test_invalid_values_case_insensitive(self, df):
        report = (
            DataQualityChecker("t")
            .check_invalid_values("channel", valid_values={"POS", "WEB"})
            .run(df)
        )
        issue = _issue(report, "channel", "invalid_format")
        assert issue.count == 1
        assert issue.sample_values == ["fax"]

    def test_invalid_values_with_validator(self, df):
        report = (
            DataQualityChecker("t")
            .check_invalid_values("qty", validator=lambda q: q > 0)
            .run(df)
        )
        assert _issue(report, "qty", "invalid_format").sample_values == [-4]

    def test_outliers(self, df):
        report = (
            DataQualityChecker("t")
            .check_outliers("qty", min_val=0, max_val=100, severity="critical")
            .run(df)
        )
        issue = _issue(report, "qty", "outlier")
        assert issue.count == 2
        assert report.has_critical_issues

    def test_missing_column_is_skipped(self, df):
        report = DataQualityChecker("t").check_outliers("price", min_val=0).run(df)
        assert report.issues == []

    def test_custom_check(self, df):
        def always(d):
            return [DataQualityIssue("x", "custom", "info", 1, 100.0)]

        report = DataQualityChecker("t").add_check(always).run(df)
        assert report.summary() == {
            "source": "t",
            "total_rows": 4,
            "critical": 0,
            "warnings": 0,
            "info": 1,
        }


class TestSnapshotChecks:
    def test_negative_stock_is_critical(self):
        report = item_checker().run(items_to_frame([make_item(name="Polo", size="S", stock=-2)]))
        issue = _issue(report, "stock", "outlier")
        assert issue.severity == "critical"
        assert issue.description == "Negative stock"

    def test_duplicate_name_and_size(self):
        items = [
            make_item(id=1, name="Polo", itemType="Uniform", size="Small"),
            make_item(id=2, name="polo ", itemType="Uniform", size="Small (S)"),
        ]
        report = item_checker().run(items_to_frame(items))
        assert _issue(report, "name_normalized, item_type, size_normalized", "duplicate").count == 2

    def test_missing_status_is_info(self):
        report = item_checker().run(items_to_frame([make_item(name="Polo", size="S")]))
        assert _issue(report, "status", "missing").severity == "info"

    def test_unknown_order_status_and_empty_orders(self):
        orders = [
            make_order(id=1, status="refunded", items=[{"name": "Polo", "size": "S"}],
                       createdAt="2024-07-01"),
            make_order(id=2, status="pending", items=[], createdAt="2024-07-01"),
        ]
        report = order_checker().run(orders_to_frame(orders))
        assert _issue(report, "status", "invalid_format").sample_values == ["other"]
        assert _issue(report, "line_count", "outlier").count == 1

    def test_cancelled_orders_are_a_known_status(self):
        orders = [make_order(id=1, status="cancelled", items=[{"name": "Polo"}], createdAt="2024-07-01")]
        assert order_checker().run(orders_to_frame(orders)).issues == []

    def test_negative_ending_inventory(self):
        items = [make_item(name="Polo", size="S")]
        orders = [make_order(status="claimed", items=[{"name": "Polo", "size": "S"}])]
        ledger = build_ledger_frame(reconcile_inventory(items, orders))
        report = ledger_checker().run(ledger)
        assert _issue(report, "ending_inventory", "outlier").severity == "critical"

    def test_raw_timestamps(self):
        df = pd.DataFrame({"createdAt": ["2024-07-01", "last tuesday", None]})
        report = raw_timestamp_checker("items", ["createdAt"]).run(df)
        issue = _issue(report, "createdAt", "invalid_format")
        assert issue.count == 1
        assert issue.sample_values == ["last tuesday"]

    def test_check_snapshot_sources(self, polo_items, polo_orders):
        ledger = build_ledger_frame(reconcile_inventory(polo_items, polo_orders))
        reports = check_snapshot(polo_items, polo_orders, ledger)
        assert [r.source_name for r in reports] == ["items", "orders", "ledger"]
        assert not any(r.has_critical_issues for r in reports)

    def test_check_snapshot_empty(self):
        reports = check_snapshot([], [], build_ledger_frame([]))
        assert all(r.total_rows == 0 and r.issues == [] for r in reports)
