"""Tests for feature context construction."""

import numpy as np
import pytest

from src.features.context import (
    DEFAULT_WEIGHTS,
    FeatureWeights,
    build_context,
)
from src.features.exceptions import (
    CatalogError,
    EmptyInputError,
    MissingProductReferenceError,
)
from src.features.models import ProductVector, products_from_records, users_from_records
from src.features.scaler import normalize


def test_build_context_example_bounds(example_catalog, example_users):
    """Test bounds, index tables and age map on the two-product example."""
    context = build_context(example_catalog, example_users)

    assert context.min_price == 40
    assert context.max_price == 200
    assert context.min_age == 20
    assert context.max_age == 40
    assert dict(context.category_index) == {"shoes": 0, "shirts": 1}
    assert dict(context.color_index) == {"red": 0, "blue": 1}
    assert context.product_avg_age_norm["A"] == pytest.approx(0.0)
    assert context.product_avg_age_norm["B"] == pytest.approx(0.5)


def test_build_context_dimensions(fashion_catalog, fashion_users):
    """Test that dimensions = 2 + categories + colors."""
    context = build_context(fashion_catalog, fashion_users)

    assert context.num_categories == 4
    assert context.num_colors == 4
    assert context.dimensions == 2 + context.num_categories + context.num_colors
    assert context.num_products == len(fashion_catalog)
    assert context.num_users == len(fashion_users)


def test_build_context_has_no_vectors_yet(example_catalog, example_users):
    """Test that a freshly built context carries no product vectors."""
    context = build_context(example_catalog, example_users)

    assert context.product_vectors == ()
    assert not context.has_vectors
    assert context.version == 0
    assert context.weights == DEFAULT_WEIGHTS
    assert context.vector_matrix().shape == (0, context.dimensions)


def test_build_context_midpoint_for_unpurchased(fashion_catalog, fashion_users):
    """Test that unpurchased products get normalize(mid age)."""
    context = build_context(fashion_catalog, fashion_users)
    mid = (context.min_age + context.max_age) / 2

    assert context.product_avg_age_norm["Wool Beanie"] == pytest.approx(
        normalize(mid, context.min_age, context.max_age)
    )


def test_build_context_single_user_equal_bounds(example_catalog):
    """Test that a single age does not produce NaN."""
    users = users_from_records([{"age": 33, "purchases": [{"name": "A"}]}])

    context = build_context(example_catalog, users)

    assert context.min_age == context.max_age == 33
    values = list(context.product_avg_age_norm.values())
    assert all(np.isfinite(values))
    assert context.product_avg_age_norm["A"] == 0.0


def test_build_context_empty_catalog_raises(example_users):
    """Test that an empty catalog is rejected."""
    with pytest.raises(EmptyInputError, match="catalog"):
        build_context([], example_users)


def test_build_context_empty_users_raises(example_catalog):
    """Test that an empty user set is rejected."""
    with pytest.raises(EmptyInputError, match="users"):
        build_context(example_catalog, [])


def test_build_context_duplicate_names_raise(example_users):
    """Test that product names must be unique."""
    catalog = products_from_records([
        {"name": "A", "price": 1, "category": "x", "color": "y"},
        {"name": "A", "price": 2, "category": "x", "color": "z"},
    ])

    with pytest.raises(CatalogError, match="duplicate"):
        build_context(catalog, example_users)


def test_build_context_records_unreferenced_purchases(example_catalog):
    """Test that unknown purchase names are kept on the context."""
    users = users_from_records([{"age": 20, "purchases": [{"name": "Ghost"}]}])

    context = build_context(example_catalog, users)

    assert dict(context.unreferenced_purchases) == {"Ghost": 1}


def test_build_context_strict_rejects_unreferenced(example_catalog):
    """Test that strict mode aborts on unknown purchase names."""
    users = users_from_records([{"age": 20, "purchases": [{"name": "Ghost"}]}])

    with pytest.raises(MissingProductReferenceError):
        build_context(example_catalog, users, strict=True)


def test_context_is_immutable(example_catalog, example_users):
    """Test that context fields and tables cannot be reassigned."""
    context = build_context(example_catalog, example_users)

    with pytest.raises(AttributeError):
        context.min_age = 0
    with pytest.raises(TypeError):
        context.category_index["hats"] = 2


def test_with_product_vectors_returns_new_context(example_catalog, example_users):
    """Test that attaching vectors leaves the original context untouched."""
    context = build_context(example_catalog, example_users)
    vectors = [
        ProductVector(name=p.name, product=p, vector=np.zeros(context.dimensions))
        for p in example_catalog
    ]

    attached = context.with_product_vectors(vectors)

    assert attached is not context
    assert len(attached.product_vectors) == 2
    assert context.product_vectors == ()
    assert attached.get_product_vector("B").product.price == 200
    assert attached.get_product_vector("missing") is None


def test_with_product_vectors_only_once(example_catalog, example_users):
    """Test that vectors can be attached a single time."""
    context = build_context(example_catalog, example_users)
    vectors = [
        ProductVector(name=p.name, product=p, vector=np.zeros(context.dimensions))
        for p in example_catalog
    ]
    attached = context.with_product_vectors(vectors)

    with pytest.raises(ValueError, match="already attached"):
        attached.with_product_vectors(vectors)


def test_with_product_vectors_checks_length(example_catalog, example_users):
    """Test that vectors of the wrong length are rejected."""
    context = build_context(example_catalog, example_users)
    product = example_catalog[0]

    with pytest.raises(ValueError, match="expected"):
        context.with_product_vectors(
            [ProductVector(name=product.name, product=product, vector=np.zeros(3))]
        )


def test_average_age_fallback_for_unknown_product(example_catalog, example_users):
    """Test that the age lookup falls back to 0.5 for unknown products."""
    context = build_context(example_catalog, example_users)

    assert context.average_age_norm("Unknown") == 0.5


def test_feature_weights_defaults_sum_to_one():
    """Test the default weights."""
    weights = FeatureWeights()

    assert weights.as_dict() == {"category": 0.4, "color": 0.3, "price": 0.2, "age": 0.1}
    assert sum(weights.as_dict().values()) == pytest.approx(1.0)


def test_feature_weights_reject_negative():
    """Test that negative weights are rejected."""
    with pytest.raises(ValueError, match="price"):
        FeatureWeights(price=-0.1)


def test_context_summary(example_catalog, example_users):
    """Test the summary used by the status endpoint."""
    summary = build_context(example_catalog, example_users).summary()

    assert summary["dimensions"] == 6
    assert summary["num_products"] == 2
    assert summary["num_vectors"] == 0
    assert summary["weights"]["category"] == 0.4
    assert isinstance(summary["built_at"], str)



def test_with_product_vectors_rejects_empty(example_catalog, example_users):
    """Test that an empty vector set cannot be attached."""
    context = build_context(example_catalog, example_users)

    with pytest.raises(ValueError, match="empty"):
        context.with_product_vectors([])
    assert context.product_vectors == ()
