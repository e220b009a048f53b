"""Product vectorization.

Encodes a product into a fixed-length weighted feature vector:

    [ price | age | one-hot category ... | one-hot color ... ]

Each block is scaled by its weight from ``FeatureWeights``.
"""

import logging
from typing import Dict, Sequence, Tuple

import numpy as np

from src.features.context import (
    DEFAULT_WEIGHTS,
    FeatureContext,
    FeatureWeights,
    build_context,
)
from src.features.indexer import lookup_index
from src.features.models import Product, ProductVector, User
from src.features.scaler import normalize

# Configure module logger
logger = logging.getLogger(__name__)

PRICE_OFFSET = 0
AGE_OFFSET = 1
CATEGORY_OFFSET = 2


def feature_layout(context: FeatureContext) -> Dict[str, slice]:
    """Position of each feature group inside an encoded vector."""
    color_offset = CATEGORY_OFFSET + context.num_categories
    return {
        "price": slice(PRICE_OFFSET, PRICE_OFFSET + 1),
        "age": slice(AGE_OFFSET, AGE_OFFSET + 1),
        "category": slice(CATEGORY_OFFSET, color_offset),
        "color": slice(color_offset, color_offset + context.num_colors),
    }


def encode(product: Product, context: FeatureContext) -> np.ndarray:
    """Encode a product against a feature context.

    Args:
        product: Product to encode.
        context: Context providing bounds, index tables and weights.

    Returns:
        Float array of length ``context.dimensions``.

    Raises:
        UnknownCategoricalValueError: If the product's category or color was
            not in the catalog the context was built from.
    """
    weights = context.weights
    category_idx = lookup_index(
        context.category_index, product.category, "category", product.name
    )
    color_idx = lookup_index(
        context.color_index, product.color, "color", product.name
    )

    vector = np.zeros(context.dimensions, dtype=np.float64)
    vector[PRICE_OFFSET] = (
        normalize(product.price, context.min_price, context.max_price) * weights.price
    )
    vector[AGE_OFFSET] = context.average_age_norm(product.name) * weights.age
    vector[CATEGORY_OFFSET + category_idx] = weights.category
    vector[CATEGORY_OFFSET + context.num_categories + color_idx] = weights.color

    return vector


def encode_catalog(
    catalog: Sequence[Product], context: FeatureContext
) -> Tuple[ProductVector, ...]:
    """Encode every product of a catalog, preserving catalog order."""
    return tuple(
        ProductVector(name=product.name, product=product, vector=encode(product, context))
        for product in catalog
    )


def encode_user(user: User, context: FeatureContext) -> np.ndarray:
    """Encode a user into the same vector space as the products.

    The profile is built from the user's purchases of products the context
    knows about:

    - price: mean normalized price of purchased products, 0.5 without any
    - age: the user's own age against the context's age bounds
    - category/color: purchase frequency per value, summing to one per block

    Purchases of products unknown to the context are ignored.
    """
    weights = context.weights
    layout = feature_layout(context)
    vector = np.zeros(context.dimensions, dtype=np.float64)

    products_by_name = {pv.name: pv.product for pv in context.product_vectors}
    purchased = [
        products_by_name[name]
        for name in user.purchased_names()
        if name in products_by_name
    ]

    if purchased:
        prices = [
            normalize(p.price, context.min_price, context.max_price) for p in purchased
        ]
        vector[PRICE_OFFSET] = float(np.mean(prices)) * weights.price

        category_block = np.zeros(context.num_categories)
        color_block = np.zeros(context.num_colors)
        for product in purchased:
            category_block[context.category_index[product.category]] += 1
            color_block[context.color_index[product.color]] += 1
        vector[layout["category"]] = category_block / len(purchased) * weights.category
        vector[layout["color"]] = color_block / len(purchased) * weights.color
    else:
        vector[PRICE_OFFSET] = 0.5 * weights.price

    vector[AGE_OFFSET] = normalize(user.age, context.min_age, context.max_age) * weights.age

    return vector


def build_trained_context(
    catalog: Sequence[Product],
    users: Sequence[User],
    weights: FeatureWeights = DEFAULT_WEIGHTS,
    strict: bool = False,
) -> FeatureContext:
    """Build a context and attach the vectors of every catalog product.

    Nothing is returned unless every product encodes successfully.

    Raises:
        EmptyInputError: If ``catalog`` or ``users`` is empty.
        UnknownCategoricalValueError: If a product cannot be encoded.
    """
    context = build_context(catalog, users, weights=weights, strict=strict)
    product_vectors = encode_catalog(catalog, context)
    context = context.with_product_vectors(product_vectors)

    logger.info(
        f"Encoded {len(product_vectors)} products into "
        f"{context.dimensions}-dimensional vectors"
    )

    return context
