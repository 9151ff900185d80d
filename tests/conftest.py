"""Pytest configuration and shared fixtures."""

import pytest
from datetime import date, datetime

from uniform_inventory.core.matching import DateWindow
from uniform_inventory.core.models import ItemRecord, OrderRecord


def make_item(**fields) -> ItemRecord:
    """ItemRecord from camelCase fields, as the item service returns them."""
    return ItemRecord.model_validate(fields)


def make_order(**fields) -> OrderRecord:
    return OrderRecord.model_validate(fields)


@pytest.fixture
def polo_items():
    """Three sizes of one polo, plus a pair of pants."""
    return [
        make_item(
            id=1, name="SHS Polo", itemType="Uniform", educationLevel="Senior High",
            size="Small", stock=10, beginningInventory=40, purchases=5, returns=0,
            unitPrice="350.00", image="polo.png",
        ),
        make_item(
            id=2, name="SHS Polo", itemType="Uniform", educationLevel="Senior High",
            size="Medium", stock=25, beginningInventory=30,
        ),
        make_item(
            id=3, name="shs  polo", itemType="Uniform", educationLevel="Senior High",
            size="Large", stock=0,
        ),
        make_item(
            id=4, name="SHS Pants", itemType="Uniform", educationLevel="Senior High",
            size="Medium", stock=60, beginningInventory=60,
        ),
    ]


@pytest.fixture
def window():
    """July 2024."""
    return DateWindow(start=date(2024, 7, 1), end=date(2024, 7, 31))


@pytest.fixture
def polo_orders():
    """Orders touching the small polo in every status."""
    return [
        make_order(
            id="o1", orderNumber="ORD-1", status="pending",
            items=[{"name": "SHS Polo", "size": "Small (S)", "quantity": 2}],
            createdAt="2024-07-10T08:00:00Z",
        ),
        make_order(
            id="o2", orderNumber="ORD-2", status="processing",
            items='[{"name": "shs polo", "size": "small"}]',
            createdAt="2024-06-10T08:00:00Z",
        ),
        make_order(
            id="o3", orderNumber="ORD-3", status="completed",
            items=[{"name": "SHS Polo", "size": "Small (S)", "quantity": 3}],
            createdAt="2024-06-01T08:00:00Z",
            updatedAt="2024-07-15T08:00:00Z",
        ),
        make_order(
            id="o4", orderNumber="ORD-4", status="claimed",
            items=[
                {"name": "SHS Polo", "size": "Small"},
                {"name": "SHS Pants", "size": "Medium"},
            ],
            createdAt="2024-07-01T08:00:00Z",
            claimedDate=datetime(2024, 7, 20, 9, 0),
        ),
        make_order(
            id="o5", orderNumber="ORD-5", status="cancelled",
            items=[{"name": "SHS Polo", "size": "Small"}],
            createdAt="2024-07-02T08:00:00Z",
        ),
    ]
