"""
Data quality checks for item and order snapshots.

The engine never rejects a snapshot: rows with negative stock, duplicate
sizes or orders without lines are still reconciled. This module surfaces
those anomalies as DataQualityIssues so they can be logged and shown next
to the ledger instead of silently skewing it.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

import pandas as pd

from .analysis import items_to_frame, orders_to_frame
from .models import ItemRecord, OrderRecord, OrderStatus
from .parsers import parse_timestamp

logger = logging.getLogger(__name__)

CRITICAL = "critical"
WARNING = "warning"
INFO = "info"

Check = Callable[[pd.DataFrame], list["DataQualityIssue"]]


@dataclass
class DataQualityIssue:
    """A single data quality issue found in a snapshot."""

    column: str
    issue_type: str  # "missing", "invalid_format", "outlier", "duplicate"
    severity: str
    count: int
    percentage: float
    sample_values: list[Any] = field(default_factory=list)
    description: str = ""


@dataclass
class DataQualityReport:
    source_name: str
    total_rows: int
    issues: list[DataQualityIssue] = field(default_factory=list)

    @property
    def critical_issues(self) -> list[DataQualityIssue]:
        return [i for i in self.issues if i.severity == CRITICAL]

    @property
    def warning_issues(self) -> list[DataQualityIssue]:
        return [i for i in self.issues if i.severity == WARNING]

    @property
    def has_critical_issues(self) -> bool:
        return len(self.critical_issues) > 0

    def summary(self) -> dict:
        return {
            "source": self.source_name,
            "total_rows": self.total_rows,
            "critical": len(self.critical_issues),
            "warnings": len(self.warning_issues),
            "info": len([i for i in self.issues if i.severity == INFO]),
        }


def _percentage(count: int, total: int) -> float:
    return (count / total) * 100 if total else 0.0


def _samples(values: pd.Series, limit: int = 5) -> list[Any]:
    return values.dropna().head(limit).tolist()


class DataQualityChecker:
    """
    Runs a configurable list of checks over one snapshot frame.

    Checks are added with the builder methods (which return self for
    chaining) or with add_check() for anything custom:

        report = (
            DataQualityChecker("items")
            .check_missing_values(["name"])
            .check_outliers("stock", min_val=0, severity="critical")
            .run(items_df)
        )
    """

    def __init__(self, source_name: str):
        self.source_name = source_name
        self._checks: list[Check] = []

    def add_check(self, check_fn: Check) -> "DataQualityChecker":
        self._checks.append(check_fn)
        return self

    def check_missing_values(
        self, columns: list[str], severity: str | None = None
    ) -> "DataQualityChecker":
        """
        Flag missing or blank values in the given columns.

        Without an explicit severity the share of missing rows decides it:
        over 20% is critical, over 5% a warning, anything less info.
        """

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            issues = []
            for col in columns:
                if col not in df.columns:
                    continue
                values = df[col]
                blank = values.isna() | values.astype(str).str.strip().eq("")
                missing = int(blank.sum())
                if missing == 0:
                    continue
                pct = _percentage(missing, len(df))
                level = severity or (CRITICAL if pct > 20 else WARNING if pct > 5 else INFO)
                issues.append(
                    DataQualityIssue(
                        column=col,
                        issue_type="missing",
                        severity=level,
                        count=missing,
                        percentage=pct,
                        description=f"{missing:,} missing values ({pct:.1f}%)",
                    )
                )
            return issues

        return self.add_check(check)

    def check_duplicates(
        self, key_columns: list[str], severity: str = WARNING
    ) -> "DataQualityChecker":
        """Flag rows that share all key columns with another row."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            if len(df) == 0 or not set(key_columns) <= set(df.columns):
                return []
            mask = df.duplicated(subset=key_columns, keep=False)
            dupes = int(mask.sum())
            if dupes == 0:
                return []
            samples = (
                df.loc[mask, key_columns]
                .drop_duplicates()
                .head(5)
                .apply(lambda row: " / ".join(str(v) for v in row), axis=1)
                .tolist()
            )
            return [
                DataQualityIssue(
                    column=", ".join(key_columns),
                    issue_type="duplicate",
                    severity=severity,
                    count=dupes,
                    percentage=_percentage(dupes, len(df)),
                    sample_values=samples,
                    description=f"{dupes:,} rows share the same {', '.join(key_columns)}",
                )
            ]

        return self.add_check(check)

    def check_invalid_values(
        self,
        column: str,
        valid_values: set | None = None,
        validator: Callable[[Any], bool] | None = None,
        severity: str = WARNING,
        description: str | None = None,
    ) -> "DataQualityChecker":
        """Flag non-missing values outside valid_values, or failing validator."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            if column not in df.columns:
                return []

            col_values = df[column].dropna()
            if valid_values:
                # Case-insensitive for strings
                wanted = {str(v).upper() for v in valid_values}
                invalid_mask = ~col_values.astype(str).str.upper().isin(wanted)
            elif validator:
                invalid_mask = col_values.apply(lambda x: not validator(x)).astype(bool)
            else:
                return []

            invalid = int(invalid_mask.sum())
            if invalid == 0:
                return []
            return [
                DataQualityIssue(
                    column=column,
                    issue_type="invalid_format",
                    severity=severity,
                    count=invalid,
                    percentage=_percentage(invalid, len(df)),
                    sample_values=_samples(col_values[invalid_mask]),
                    description=description or f"{invalid:,} invalid values",
                )
            ]

        return self.add_check(check)

    def check_outliers(
        self,
        column: str,
        min_val: float | None = None,
        max_val: float | None = None,
        severity: str = WARNING,
        description: str | None = None,
    ) -> "DataQualityChecker":
        """Flag numeric values outside [min_val, max_val]."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            if column not in df.columns:
                return []

            values = pd.to_numeric(df[column], errors="coerce")
            outlier_mask = pd.Series(False, index=values.index)
            if min_val is not None:
                outlier_mask |= values < min_val
            if max_val is not None:
                outlier_mask |= values > max_val

            outliers = int(outlier_mask.sum())
            if outliers == 0:
                return []
            return [
                DataQualityIssue(
                    column=column,
                    issue_type="outlier",
                    severity=severity,
                    count=outliers,
                    percentage=_percentage(outliers, len(df)),
                    sample_values=_samples(df.loc[outlier_mask, column]),
                    description=description or f"{outliers:,} values outside expected range",
                )
            ]

        return self.add_check(check)

    def run(self, df: pd.DataFrame) -> DataQualityReport:
        """Run all checks and return a quality report."""
        issues = []
        for check_fn in self._checks:
            issues.extend(check_fn(df))

        report = DataQualityReport(source_name=self.source_name, total_rows=len(df), issues=issues)
        for issue in report.critical_issues:
            logger.warning("[%s] %s: %s", self.source_name, issue.column, issue.description)
        return report


# --- Snapshot checks ---


def item_checker() -> DataQualityChecker:
    """Checks for an item frame built by analysis.items_to_frame()."""
    return (
        DataQualityChecker("items")
        .check_missing_values(["name"], severity=WARNING)
        .check_missing_values(["size"], severity=INFO)
        .check_missing_values(["created_at"], severity=WARNING)
        .check_missing_values(["status"], severity=INFO)
        .check_outliers(
            "stock", min_val=0, severity=CRITICAL, description="Negative stock"
        )
        .check_outliers(
            "beginning_inventory", min_val=0, description="Negative beginning inventory"
        )
        .check_duplicates(["name_normalized", "item_type", "size_normalized"])
    )


def order_checker() -> DataQualityChecker:
    """Checks for an order frame built by analysis.orders_to_frame()."""
    return (
        DataQualityChecker("orders")
        .check_missing_values(["created_at"], severity=WARNING)
        .check_invalid_values(
            "status",
            valid_values={s.value for s in OrderStatus if s is not OrderStatus.OTHER},
            description="Orders with an unknown status are ignored by the ledger",
        )
        .check_outliers(
            "line_count", min_val=1, description="Orders without line items"
        )
        .check_duplicates(["id"])
    )


def ledger_checker() -> DataQualityChecker:
    """Checks for a ledger frame built by analysis.build_ledger_frame()."""
    return DataQualityChecker("ledger").check_outliers(
        "ending_inventory",
        min_val=0,
        severity=CRITICAL,
        description="Negative ending inventory: more released than received",
    )


def raw_timestamp_checker(source_name: str, columns: Iterable[str]) -> DataQualityChecker:
    """
    Flags timestamps the parser can't read in a raw export.

    Records turn these into None, so this has to run on the raw frame,
    before validation.
    """
    checker = DataQualityChecker(source_name)
    for column in columns:
        checker.check_invalid_values(
            column,
            validator=lambda v: parse_timestamp(v) is not None,
            description=f"Unparseable {column} timestamps",
        )
    return checker


def check_snapshot(
    items: list[ItemRecord], orders: list[OrderRecord], ledger: pd.DataFrame
) -> list[DataQualityReport]:
    """Item, order and ledger quality reports for one reconciliation pass."""
    return [
        item_checker().run(items_to_frame(items)),
        order_checker().run(orders_to_frame(orders)),
        ledger_checker().run(ledger),
    ]
