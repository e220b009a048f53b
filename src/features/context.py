"""Feature context construction.

A feature context is the read-only snapshot of everything derived from one
training invocation: normalization bounds, categorical index tables, purchaser
age aggregates and, once attached, the encoded product vectors. A new context
is built for every training run; existing contexts are never modified.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Sequence, Tuple

import numpy as np

from src.features.aggregator import aggregate_purchase_ages
from src.features.exceptions import CatalogError, EmptyInputError
from src.features.indexer import build_index
from src.features.models import Product, ProductVector, User
from src.features.scaler import compute_bounds

# Configure module logger
logger = logging.getLogger(__name__)

# Age value used when a product is unknown to the context
DEFAULT_AGE_FALLBACK = 0.5


@dataclass(frozen=True)
class FeatureWeights:
    """Relative importance of each feature group in an encoded vector.

    The defaults sum to 1.0.
    """

    category: float = 0.4
    color: float = 0.3
    price: float = 0.2
    age: float = 0.1

    def __post_init__(self):
        for name, value in self.as_dict().items():
            if value < 0:
                raise ValueError(f"Weight '{name}' must be non-negative, got {value}")

    def as_dict(self) -> Dict[str, float]:
        return {
            "category": self.category,
            "color": self.color,
            "price": self.price,
            "age": self.age,
        }


DEFAULT_WEIGHTS = FeatureWeights()


@dataclass(frozen=True)
class FeatureContext:
    """Immutable snapshot of the statistics used to encode products.

    ``category_index`` and ``color_index`` are fatal on lookup misses (see
    ``src.features.indexer.lookup_index``), while ``product_avg_age_norm``
    falls back to ``DEFAULT_AGE_FALLBACK`` for unknown products.
    """

    min_age: float
    max_age: float
    min_price: float
    max_price: float
    category_index: Mapping[str, int]
    color_index: Mapping[str, int]
    product_avg_age_norm: Mapping[str, float]
    weights: FeatureWeights = DEFAULT_WEIGHTS
    unreferenced_purchases: Mapping[str, int] = field(
        default_factory=lambda: MappingProxyType({})
    )
    product_vectors: Tuple[ProductVector, ...] = ()
    num_users: int = 0
    version: int = 0
    built_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def num_categories(self) -> int:
        return len(self.category_index)

    @property
    def num_colors(self) -> int:
        return len(self.color_index)

    @property
    def dimensions(self) -> int:
        """Vector length: price + age + one-hot categories + one-hot colors."""
        return 2 + self.num_categories + self.num_colors

    @property
    def num_products(self) -> int:
        return len(self.product_avg_age_norm)

    @property
    def has_vectors(self) -> bool:
        return bool(self.product_vectors)

    def average_age_norm(self, product_name: str) -> float:
        """Normalized purchaser age of a product, 0.5 when it is unknown."""
        return self.product_avg_age_norm.get(product_name, DEFAULT_AGE_FALLBACK)

    def with_product_vectors(
        self, product_vectors: Sequence[ProductVector]
    ) -> "FeatureContext":
        """Return a copy of this context with the product vectors attached.

        Vectors can be attached only once, and there must be at least one.

        Raises:
            ValueError: If vectors are already attached, none are given, or a
                vector length differs from ``dimensions``.
        """
        if self.product_vectors:
            raise ValueError("Product vectors are already attached to this context")
        if not product_vectors:
            raise ValueError("Cannot attach an empty set of product vectors")

        for product_vector in product_vectors:
            if len(product_vector.vector) != self.dimensions:
                raise ValueError(
                    f"Vector for '{product_vector.name}' has length "
                    f"{len(product_vector.vector)}, expected {self.dimensions}"
                )

        return replace(self, product_vectors=tuple(product_vectors))

    def with_version(self, version: int) -> "FeatureContext":
        return replace(self, version=version)

    def get_product_vector(self, product_name: str) -> Optional[ProductVector]:
        """Find the attached vector of a product, or None."""
        for product_vector in self.product_vectors:
            if product_vector.name == product_name:
                return product_vector
        return None

    def vector_matrix(self) -> np.ndarray:
        """Stack all product vectors into a ``(n_products, dimensions)`` array."""
        if not self.product_vectors:
            return np.zeros((0, self.dimensions))
        return np.vstack([pv.vector for pv in self.product_vectors])

    def summary(self) -> Dict:
        """Describe the context for status reports and logs."""
        return {
            "version": self.version,
            "built_at": self.built_at.isoformat(),
            "min_age": self.min_age,
            "max_age": self.max_age,
            "min_price": self.min_price,
            "max_price": self.max_price,
            "num_categories": self.num_categories,
            "num_colors": self.num_colors,
            "dimensions": self.dimensions,
            "num_products": self.num_products,
            "num_users": self.num_users,
            "num_vectors": len(self.product_vectors),
            "weights": self.weights.as_dict(),
        }


def _check_unique_names(catalog: Sequence[Product]) -> None:
    seen = set()
    duplicates = []
    for product in catalog:
        if product.name in seen:
            duplicates.append(product.name)
        seen.add(product.name)
    if duplicates:
        raise CatalogError(
            f"Catalog contains duplicate product names: {sorted(set(duplicates))}",
            details={"duplicates": sorted(set(duplicates))},
        )


def build_context(
    catalog: Sequence[Product],
    users: Sequence[User],
    weights: FeatureWeights = DEFAULT_WEIGHTS,
    strict: bool = False,
) -> FeatureContext:
    """Build a feature context from a catalog and a user set.

    Steps:
        1. Reject empty inputs before anything is normalized.
        2. Age bounds over users, price bounds over the catalog.
        3. Category and color index tables over the catalog.
        4. Normalized average purchaser age per product.

    Args:
        catalog: Products available for recommendation.
        users: Users with ages and purchase histories.
        weights: Feature group weights used by the vectorizer.
        strict: If True, purchases of unknown products abort the build.

    Returns:
        FeatureContext without product vectors.

    Raises:
        EmptyInputError: If ``catalog`` or ``users`` is empty.
        CatalogError: If product names are not unique.
        MissingProductReferenceError: In strict mode, on unknown purchases.

    Example:
        >>> context = build_context(catalog, users)
        >>> context.dimensions == 2 + context.num_categories + context.num_colors
        True
    """
    if not catalog:
        raise EmptyInputError("catalog")
    if not users:
        raise EmptyInputError("users")

    _check_unique_names(catalog)

    min_age, max_age = compute_bounds((user.age for user in users), "users")
    min_price, max_price = compute_bounds(
        (product.price for product in catalog), "catalog"
    )

    category_index = build_index(product.category for product in catalog)
    color_index = build_index(product.color for product in catalog)

    aggregate = aggregate_purchase_ages(
        users, catalog, min_age, max_age, strict=strict
    )

    context = FeatureContext(
        min_age=min_age,
        max_age=max_age,
        min_price=min_price,
        max_price=max_price,
        category_index=category_index,
        color_index=color_index,
        product_avg_age_norm=aggregate.normalized,
        weights=weights,
        unreferenced_purchases=aggregate.unreferenced,
        num_users=len(users),
    )

    logger.info(
        "Feature context built",
        extra={
            "num_products": context.num_products,
            "num_users": context.num_users,
            "num_categories": context.num_categories,
            "num_colors": context.num_colors,
            "dimensions": context.dimensions,
        },
    )

    return context
