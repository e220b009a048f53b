"""Tests for the scaler, index tables and purchase-age aggregation."""

import logging

import pytest

from src.features.aggregator import aggregate_purchase_ages
from src.features.exceptions import (
    EmptyInputError,
    MissingProductReferenceError,
    UnknownCategoricalValueError,
)
from src.features.indexer import build_index, lookup_index
from src.features.models import users_from_records
from src.features.scaler import compute_bounds, normalize


# ----------------------------------------------------------------------
# Scaler
# ----------------------------------------------------------------------


@pytest.mark.parametrize(
    "value, min_value, max_value, expected",
    [
        (40, 40, 200, 0.0),
        (200, 40, 200, 1.0),
        (120, 40, 200, 0.5),
        (25, 20, 40, 0.25),
    ],
)
def test_normalize_within_range(value, min_value, max_value, expected):
    """Test that normalize computes (value - min) / (max - min)."""
    assert normalize(value, min_value, max_value) == pytest.approx(expected)


def test_normalize_equal_bounds_uses_unit_range():
    """Test that equal bounds do not divide by zero."""
    assert normalize(30, 30, 30) == 0.0
    assert normalize(35, 30, 30) == 5.0


def test_normalize_does_not_clamp():
    """Test that values outside the bounds are not clamped."""
    assert normalize(250, 50, 150) == pytest.approx(2.0)
    assert normalize(0, 50, 150) == pytest.approx(-0.5)


def test_compute_bounds():
    """Test that compute_bounds returns the min and max."""
    assert compute_bounds([30, 20, 40]) == (20.0, 40.0)
    assert compute_bounds(iter([7])) == (7.0, 7.0)


def test_compute_bounds_empty_raises():
    """Test that empty input is rejected instead of producing inf."""
    with pytest.raises(EmptyInputError, match="users"):
        compute_bounds([], "users")


# ----------------------------------------------------------------------
# Index tables
# ----------------------------------------------------------------------


def test_build_index_first_occurrence_order():
    """Test that indices follow first occurrence, without sorting."""
    index = build_index(["shoes", "shirts", "shoes", "accessories", "shirts"])

    assert dict(index) == {"shoes": 0, "shirts": 1, "accessories": 2}


def test_build_index_is_contiguous_bijection():
    """Test that indices are a permutation of range(distinct count)."""
    values = ["red", "blue", "red", "green", "black", "blue"]
    index = build_index(values)

    assert sorted(index.values()) == list(range(len(set(values))))
    assert set(index.keys()) == set(values)


def test_build_index_is_deterministic():
    """Test that the same input always produces the same table."""
    values = ["b", "a", "c", "a"]
    assert dict(build_index(values)) == dict(build_index(list(values)))


def test_build_index_is_read_only():
    """Test that the returned table cannot be modified."""
    index = build_index(["red"])
    with pytest.raises(TypeError):
        index["blue"] = 1


def test_lookup_index_unknown_value_raises():
    """Test that an unseen value has no fallback index."""
    index = build_index(["shoes", "shirts"])

    assert lookup_index(index, "shirts", "category") == 1
    with pytest.raises(UnknownCategoricalValueError) as exc_info:
        lookup_index(index, "hats", "category", product_name="Fedora")

    assert exc_info.value.details == {
        "field": "category",
        "value": "hats",
        "product": "Fedora",
    }


# ----------------------------------------------------------------------
# Purchase-age aggregation
# ----------------------------------------------------------------------


def test_aggregate_average_age(fashion_catalog):
    """Test that the average purchaser age is sum / count."""
    users = users_from_records([
        {"age": 20, "purchases": [{"name": "Running Shoes"}]},
        {"age": 30, "purchases": [{"name": "Running Shoes"}, {"name": "Linen Shirt"}]},
        {"age": 60, "purchases": [{"name": "Running Shoes"}]},
    ])

    aggregate = aggregate_purchase_ages(users, fashion_catalog, 20, 60)

    assert aggregate.average_ages["Running Shoes"] == pytest.approx(110 / 3)
    assert aggregate.average_ages["Linen Shirt"] == pytest.approx(30)
    assert aggregate.purchase_counts["Running Shoes"] == 3
    assert aggregate.normalized["Linen Shirt"] == pytest.approx(0.25)


def test_aggregate_unpurchased_uses_midpoint(example_catalog, example_users):
    """Test that products without purchases get the normalized midpoint age."""
    aggregate = aggregate_purchase_ages(example_users, example_catalog, 20, 40)

    assert aggregate.average_ages["B"] == 30
    assert aggregate.normalized["B"] == pytest.approx(normalize(30, 20, 40))
    assert aggregate.normalized["A"] == pytest.approx(0.0)
    assert aggregate.purchase_counts["B"] == 0


def test_aggregate_covers_whole_catalog_without_purchases(fashion_catalog):
    """Test that every product gets an entry even with no purchases at all."""
    users = users_from_records([{"age": 25}, {"age": 35}])

    aggregate = aggregate_purchase_ages(users, fashion_catalog, 25, 35)

    assert set(aggregate.normalized) == {p.name for p in fashion_catalog}
    assert all(v == pytest.approx(0.5) for v in aggregate.normalized.values())


def test_aggregate_tolerates_unknown_product(example_catalog, caplog):
    """Test that purchases of unknown products are reported, not fatal."""
    users = users_from_records([
        {"age": 20, "purchases": [{"name": "A"}, {"name": "Ghost"}]},
        {"age": 40, "purchases": [{"name": "Ghost"}]},
    ])

    with caplog.at_level(logging.WARNING):
        aggregate = aggregate_purchase_ages(users, example_catalog, 20, 40)

    assert dict(aggregate.unreferenced) == {"Ghost": 2}
    assert "Ghost" not in aggregate.normalized
    assert aggregate.average_ages["A"] == 20
    assert "missing from the catalog" in caplog.text


def test_aggregate_strict_raises_on_unknown_product(example_catalog):
    """Test that strict mode rejects purchases of unknown products."""
    users = users_from_records([{"age": 20, "purchases": [{"name": "Ghost"}]}])

    with pytest.raises(MissingProductReferenceError, match="Ghost"):
        aggregate_purchase_ages(users, example_catalog, 20, 20, strict=True)
