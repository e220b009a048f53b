"""Shared fixtures for the CatalogRec tests."""

from typing import List

import pytest

from src.features.models import Product, User, products_from_records, users_from_records
from src.worker.metrics import metrics_service


@pytest.fixture
def example_catalog() -> List[Product]:
    """Two products with distinct categories and colors."""
    return products_from_records([
        {"name": "A", "price": 40, "category": "shoes", "color": "red"},
        {"name": "B", "price": 200, "category": "shirts", "color": "blue"},
    ])


@pytest.fixture
def example_users() -> List[User]:
    """A 20-year-old who bought A and a 40-year-old with no purchases."""
    return users_from_records([
        {"age": 20, "purchases": [{"name": "A"}]},
        {"age": 40, "purchases": []},
    ])


@pytest.fixture
def fashion_catalog() -> List[Product]:
    """A larger catalog with repeated categories and colors."""
    return products_from_records([
        {"id": 1, "name": "Running Shoes", "category": "shoes", "price": 129.99, "color": "red"},
        {"id": 2, "name": "Leather Boots", "category": "shoes", "price": 199.99, "color": "brown"},
        {"id": 3, "name": "Cotton T-Shirt", "category": "shirts", "price": 39.99, "color": "white"},
        {"id": 4, "name": "Linen Shirt", "category": "shirts", "price": 79.99, "color": "blue"},
        {"id": 5, "name": "Denim Jacket", "category": "jackets", "price": 149.99, "color": "blue"},
        {"id": 6, "name": "Wool Beanie", "category": "accessories", "price": 24.99, "color": "red"},
    ])


@pytest.fixture
def fashion_users() -> List[User]:
    """Users with overlapping purchase histories over the fashion catalog."""
    return users_from_records([
        {"id": 1, "age": 22, "purchases": [{"name": "Running Shoes"}, {"name": "Cotton T-Shirt"}]},
        {"id": 2, "age": 45, "purchases": [{"name": "Leather Boots"}, {"name": "Denim Jacket"}]},
        {"id": 3, "age": 30, "purchases": [{"name": "Running Shoes"}]},
        {"id": 4, "age": 60, "purchases": []},
    ])


@pytest.fixture(autouse=True)
def reset_metrics():
    """Start every test with empty metrics."""
    metrics_service.reset()
    yield
    metrics_service.reset()
