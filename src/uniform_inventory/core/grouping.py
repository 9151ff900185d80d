"""
Variant grouping: collapse inventory rows into products with size variations.

Rows with the same normalized name and item type but different sizes are
variations of one product. Rows that repeat a size already present in a
group (data-entry duplicates) are never merged; each starts its own group
so the duplicate stays visible.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable

from .. import settings
from .models import ItemRecord
from .parsers import normalize_name, normalize_size

logger = logging.getLogger(__name__)


@dataclass
class ItemGroup:
    """A product and the inventory rows (one per size) that make it up."""

    group_key: str
    name: str
    item_type: str
    education_level: str
    category: str
    image: str | None = None
    variations: list[ItemRecord] = field(default_factory=list)

    @property
    def total_stock(self) -> int:
        return sum(v.stock for v in self.variations)

    @property
    def representative(self) -> ItemRecord | None:
        return self.variations[0] if self.variations else None

    @property
    def sizes(self) -> list[str]:
        return [display_size(v) for v in self.variations]

    def summary(self) -> dict:
        return {
            "group_key": self.group_key,
            "name": self.name,
            "item_type": self.item_type,
            "education_level": self.education_level,
            "variations": len(self.variations),
            "total_stock": self.total_stock,
        }


def display_size(item: ItemRecord) -> str:
    """The row's size label, or "N/A" for unsized rows."""
    size = (item.size or "").strip()
    return size or settings.UNSIZED_LABEL


class _OpenGroup:
    """Bookkeeping for a group while rows are still being assigned."""

    def __init__(self, group: ItemGroup):
        self.group = group
        self.sizes: set[str] = set()
        self.ids: list = []

    def accepts(self, size_key: str, item_id) -> bool:
        if size_key in self.sizes:
            return False
        # Rows without an id can only clash on size
        return item_id is None or item_id not in self.ids

    def add(self, item: ItemRecord, size_key: str) -> None:
        self.group.variations.append(item)
        self.sizes.add(size_key)
        self.ids.append(item.id)
        if not self.group.image and item.image:
            self.group.image = item.image


def group_items(items: Iterable[ItemRecord]) -> list[ItemGroup]:
    """
    Partition inventory rows into ItemGroups.

    Rows are processed in input order. A row joins the first open group with
    the same (normalized name, item type) that has neither its normalized
    size nor its id; otherwise it opens a new group. The result therefore
    depends on input order when a name/type has duplicated sizes; sort the
    input first if that matters.

    Variations inside each group are sorted by size.
    """
    open_groups: list[_OpenGroup] = []
    by_canonical_key: dict[tuple[str, str], list[_OpenGroup]] = {}
    count = 0

    for item in items:
        count += 1
        name = item.name or settings.DEFAULT_ITEM_NAME
        item_type = item.item_type or settings.DEFAULT_ITEM_TYPE
        size = display_size(item)
        size_key = normalize_size(size)
        canonical_key = (normalize_name(name), item_type)

        target = None
        for candidate in by_canonical_key.get(canonical_key, []):
            if candidate.accepts(size_key, item.id):
                target = candidate
                break

        if target is None:
            target = _OpenGroup(
                ItemGroup(
                    group_key=f"{name}-{item_type}-{size}-{item.id}",
                    name=name,
                    item_type=item_type,
                    education_level=item.education_level or settings.DEFAULT_EDUCATION_LEVEL,
                    category=item.category or settings.DEFAULT_CATEGORY,
                )
            )
            open_groups.append(target)
            by_canonical_key.setdefault(canonical_key, []).append(target)

        target.add(item, size_key)

    groups = [g.group for g in open_groups]
    for group in groups:
        group.variations.sort(key=lambda v: ((v.size or "").casefold(), v.size or ""))

    logger.debug("Grouped %d items into %d groups", count, len(groups))
    return groups


def filter_groups_by_education_level(
    groups: list[ItemGroup], education_level: str | None
) -> list[ItemGroup]:
    """
    Keep only the variations offered for one education level.

    Variations tagged "All Education Levels" match every level. Groups left
    without variations are dropped and the remaining groups take their
    education level from their new first variation. "All" (or no level)
    returns the groups unchanged.
    """
    wanted = (education_level or "").strip().casefold()
    if not wanted or wanted == "all":
        return list(groups)

    everyone = settings.ALL_EDUCATION_LEVELS.casefold()
    result = []
    for group in groups:
        kept = [
            v
            for v in group.variations
            if (v.education_level or "").strip().casefold() in (wanted, everyone)
        ]
        if not kept:
            continue
        result.append(
            replace(
                group,
                variations=kept,
                education_level=kept[0].education_level or group.education_level,
            )
        )
    return result
