"""Domain records for catalog products and users.

Products and users arrive as plain dictionaries (decoded JSON). These frozen
dataclasses give them a fixed shape before any feature is computed.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import numpy as np

PRODUCT_FIELDS = ("name", "price", "category", "color")


def _required_text(data: Mapping[str, Any], key: str, record: str) -> str:
    value = data.get(key)
    if value is None:
        raise ValueError(f"{record} record has no '{key}': {dict(data)}")
    return str(value)


@dataclass(frozen=True)
class Product:
    """A catalog product.

    Attributes:
        name: Unique product key.
        price: Product price.
        category: Categorical value encoded as a one-hot block.
        color: Categorical value encoded as a one-hot block.
        attributes: Any extra catalog fields, kept as metadata only.
    """

    name: str
    price: float
    category: str
    color: str
    attributes: Mapping[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Product":
        """Create a product from a decoded catalog record.

        Raises:
            ValueError: If name, category or color is missing or null, or
                the price is not numeric.
            KeyError: If the price is missing.
        """
        extra = {k: v for k, v in data.items() if k not in PRODUCT_FIELDS}
        return cls(
            name=_required_text(data, "name", "Product"),
            price=float(data["price"]),
            category=_required_text(data, "category", "Product"),
            color=_required_text(data, "color", "Product"),
            attributes=MappingProxyType(extra),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return the product as a plain dictionary, extra fields included."""
        data = dict(self.attributes)
        data.update(
            name=self.name,
            price=self.price,
            category=self.category,
            color=self.color,
        )
        return data


@dataclass(frozen=True)
class Purchase:
    """A purchase record referencing a product by name."""

    name: str


@dataclass(frozen=True)
class User:
    """A user with an age and an ordered purchase history."""

    age: float
    purchases: Tuple[Purchase, ...] = ()
    id: Optional[Any] = None
    name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "User":
        """Create a user from a decoded record.

        Purchase entries may be full product records; only their ``name`` is
        kept.
        """
        purchases = tuple(
            Purchase(name=_required_text(purchase, "name", "Purchase"))
            for purchase in data.get("purchases") or []
        )
        return cls(
            age=float(data["age"]),
            purchases=purchases,
            id=data.get("id"),
            name=data.get("name"),
        )

    def purchased_names(self) -> List[str]:
        return [purchase.name for purchase in self.purchases]


@dataclass(frozen=True)
class ProductVector:
    """Encoded feature vector of one product, with its metadata snapshot."""

    name: str
    product: Product
    vector: np.ndarray = field(compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "meta": self.product.to_dict(),
            "vector": [float(v) for v in self.vector],
        }


def products_from_records(records: Iterable[Mapping[str, Any]]) -> List[Product]:
    """Convert decoded catalog records to products."""
    return [Product.from_dict(record) for record in records]


def users_from_records(records: Iterable[Mapping[str, Any]]) -> List[User]:
    """Convert decoded user records to users."""
    return [User.from_dict(record) for record in records]
