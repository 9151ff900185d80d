"""
Normalization and parsing helpers for item and order snapshots.

The collaborators that feed the engine are not consistent with each other:
- Item names are typed by hand ("SHS Polo", "shs  polo ")
- Order line sizes carry a short code ("Small (S)") that inventory rows don't
- Timestamps arrive as ISO strings, date-only strings or datetime objects
- Order line items are sometimes stored as a JSON string instead of a list

Everything in here is total: bad input degrades to an empty value, never an
exception.
"""

import functools
import json
import logging
import math
import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, dict, tuple)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


class TimestampParser:
    """
    Timestamp parser that handles the formats the order and item services emit.

    ISO-8601 (with or without a trailing "Z") is tried first, then the
    explicit formats in TIMESTAMP_FORMATS.
    """

    TIMESTAMP_FORMATS = [
        "%Y-%m-%d %H:%M:%S",     # SQL: 2024-07-25 14:03:11
        "%Y-%m-%d",              # ISO date: 2024-07-25
        "%m/%d/%Y %H:%M",        # US with time: 05/27/2024 09:15
        "%m/%d/%Y",              # US: 05/27/2024
        "%Y/%m/%d",              # ISO slash: 2024/07/25
    ]

    CACHE_SIZE = 4096

    def __init__(self, custom_formats: list[str] | None = None, cache_size: int | None = None):
        self.formats = (custom_formats or []) + self.TIMESTAMP_FORMATS
        # Bounded: the module-level parser lives as long as the process
        self._parse_cached = functools.lru_cache(maxsize=cache_size or self.CACHE_SIZE)(
            self._parse_text
        )

    def parse(self, value: Any) -> datetime | None:
        """Parse a timestamp, returning None when it can't be understood."""
        if _is_missing(value) or value == "":
            return None

        if isinstance(value, pd.Timestamp):
            return value.to_pydatetime()
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)

        text = str(value).strip()
        if not text:
            return None

        return self._parse_cached(text)

    def cache_info(self):
        return self._parse_cached.cache_info()

    def _parse_text(self, text: str) -> datetime | None:
        iso = text[:-1] + "+00:00" if text.endswith("Z") else text
        try:
            return datetime.fromisoformat(iso)
        except ValueError:
            pass

        for fmt in self.formats:
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue
        logger.debug("Unparseable timestamp %r", text)
        return None

    def parse_series(self, series: pd.Series) -> pd.Series:
        """Parse an entire pandas Series of timestamps."""
        return series.apply(self.parse)


class NameNormalizer:
    """
    Normalizes item names for matching order lines to inventory rows.

    Handles:
    - Surrounding and repeated whitespace
    - Case (casefold, so "STRASSE" and "straße" compare equal)
    """

    def __init__(self, casefold: bool = True):
        self.casefold = casefold

    def normalize(self, name: Any) -> str:
        if _is_missing(name):
            return ""

        result = " ".join(str(name).split())
        if self.casefold:
            result = result.casefold()
        return result

    def normalize_series(self, series: pd.Series) -> pd.Series:
        """Normalize an entire pandas Series of names."""
        return series.apply(self.normalize)


class SizeNormalizer:
    """
    Normalizes size labels so "Small (S)" on an order matches "Small" in inventory.

    Only a trailing parenthesised code of up to CODE_MAX_LENGTH letters or
    digits is stripped; "Large (Boys Cut)" keeps its qualifier.
    """

    CODE_MAX_LENGTH = 4

    def __init__(self, casefold: bool = True, code_max_length: int | None = None):
        self.casefold = casefold
        max_len = code_max_length or self.CODE_MAX_LENGTH
        self._code_pattern = re.compile(
            r"^(?P<label>.+?)\s*\(\s*[A-Za-z0-9]{1,%d}\s*\)$" % max_len
        )

    def normalize(self, size: Any) -> str:
        if _is_missing(size):
            return ""

        result = " ".join(str(size).split())
        match = self._code_pattern.match(result)
        if match:
            result = match.group("label").strip()

        if self.casefold:
            result = result.casefold()
        return result

    def normalize_series(self, series: pd.Series) -> pd.Series:
        """Normalize an entire pandas Series of size labels."""
        return series.apply(self.normalize)


# --- Scalar coercion ---
# Collaborator rows arrive with numbers as strings, NaN from pandas and
# nulls from the API. These never raise.


def to_int(value: Any) -> int:
    """
    Anything that isn't a finite number counts as zero.

    Fractions round half up, so a stock of 0.5 is not out of stock.
    """
    if value is None or isinstance(value, bool):
        return int(value or 0)
    if isinstance(value, int):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    return int(Decimal(repr(number)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def to_decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")
    if not result.is_finite():
        return Decimal("0")
    return result


def to_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    return str(value)


def to_bool(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip().lower() not in ("false", "0", "no", "n", "")
    return bool(value)


def to_identifier(value: Any) -> str | int | None:
    if value is None or isinstance(value, (str, int)):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return str(value)


_name_normalizer = NameNormalizer()
_size_normalizer = SizeNormalizer()
_timestamp_parser = TimestampParser()


def normalize_name(name: Any) -> str:
    """Trimmed, whitespace-collapsed, case-folded item name ("" for None)."""
    return _name_normalizer.normalize(name)


def normalize_size(size: Any) -> str:
    """Size label without its trailing short code, case-folded ("" for None)."""
    return _size_normalizer.normalize(size)


def parse_timestamp(value: Any) -> datetime | None:
    return _timestamp_parser.parse(value)


def parse_line_items(raw: Any) -> list[dict]:
    """
    Extract an order's line items from its stored representation.

    The order service stores items either as a list or as a JSON-encoded
    list. Anything that doesn't decode to a list yields an empty list.
    """
    if _is_missing(raw):
        return []

    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except (json.JSONDecodeError, ValueError, RecursionError):
            logger.debug("Order items are not valid JSON: %.80r", raw)
            return []

    if isinstance(raw, tuple):
        raw = list(raw)
    if not isinstance(raw, list):
        return []

    return [line for line in raw if isinstance(line, dict)]
