"""Per-product purchaser-age aggregation.

Computes the average age of the users who bought each product. The average is
what lets the age feature of a product reflect who actually buys it.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Sequence

import pandas as pd

from src.features.exceptions import MissingProductReferenceError
from src.features.models import Product, User
from src.features.scaler import normalize

# Configure module logger
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PurchaseAgeAggregate:
    """Result of a purchase-age aggregation pass.

    Attributes:
        average_ages: Product name to average purchaser age. Products without
            purchases hold the midpoint age.
        normalized: Product name to average age scaled against the age bounds.
        purchase_counts: Product name to number of purchase records.
        unreferenced: Purchase names absent from the catalog, with counts.
    """

    average_ages: Mapping[str, float]
    normalized: Mapping[str, float]
    purchase_counts: Mapping[str, int]
    unreferenced: Mapping[str, int]


def _purchase_frame(users: Sequence[User]) -> pd.DataFrame:
    """Flatten all purchase records into a (name, age) frame."""
    rows = [
        (purchase.name, user.age)
        for user in users
        for purchase in user.purchases
    ]
    return pd.DataFrame(rows, columns=["name", "age"])


def aggregate_purchase_ages(
    users: Sequence[User],
    catalog: Sequence[Product],
    min_age: float,
    max_age: float,
    strict: bool = False,
) -> PurchaseAgeAggregate:
    """Average purchaser age per catalog product.

    Sums purchaser ages and counts purchases per product name in a single
    pass, then divides. Products with no purchases fall back to the midpoint
    ``(min_age + max_age) / 2``. Every average, real or substituted, is then
    normalized against ``[min_age, max_age]``.

    Purchases naming a product that is not in the catalog are reported in
    ``unreferenced`` and logged; they never affect catalog products.

    Args:
        users: Users whose purchases are aggregated.
        catalog: Products to produce averages for.
        min_age: Lower age bound.
        max_age: Upper age bound.
        strict: If True, raise on the first unreferenced purchase name instead
            of logging a warning.

    Returns:
        PurchaseAgeAggregate covering every catalog product.

    Raises:
        MissingProductReferenceError: If ``strict`` and a purchase names a
            product absent from the catalog.
    """
    mid_age = (min_age + max_age) / 2
    purchases = _purchase_frame(users)

    if purchases.empty:
        sums: Dict[str, float] = {}
        counts: Dict[str, int] = {}
    else:
        stats = purchases.groupby("name", sort=False)["age"].agg(["sum", "count"])
        sums = stats["sum"].astype(float).to_dict()
        counts = stats["count"].astype(int).to_dict()

    catalog_names = {product.name for product in catalog}
    unreferenced = {
        name: count for name, count in counts.items() if name not in catalog_names
    }
    if unreferenced:
        if strict:
            name, count = next(iter(unreferenced.items()))
            raise MissingProductReferenceError(name, count)
        logger.warning(
            "Purchases reference products missing from the catalog",
            extra={
                "unreferenced_products": sorted(unreferenced),
                "unreferenced_records": sum(unreferenced.values()),
            },
        )

    average_ages = {}
    normalized = {}
    purchase_counts = {}
    for product in catalog:
        count = counts.get(product.name, 0)
        average = sums[product.name] / count if count else mid_age
        average_ages[product.name] = average
        normalized[product.name] = normalize(average, min_age, max_age)
        purchase_counts[product.name] = count

    logger.debug(
        f"Aggregated {len(purchases)} purchase records over "
        f"{len(catalog)} products ({sum(1 for c in purchase_counts.values() if c)} purchased)"
    )

    return PurchaseAgeAggregate(
        average_ages=MappingProxyType(average_ages),
        normalized=MappingProxyType(normalized),
        purchase_counts=MappingProxyType(purchase_counts),
        unreferenced=MappingProxyType(unreferenced),
    )
