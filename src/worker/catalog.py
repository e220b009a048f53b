"""Catalog providers.

The worker never fetches the catalog itself: it calls an injected provider,
once per training invocation. A provider is any zero-argument callable that
returns a list of products.
"""

import logging
from pathlib import Path
from typing import Callable, List, Sequence, Union

import pandas as pd

from src.features.exceptions import CatalogError
from src.features.models import PRODUCT_FIELDS, Product

# Configure module logger
logger = logging.getLogger(__name__)

# Default catalog location
DEFAULT_CATALOG_PATH = "data/products.json"

CatalogProvider = Callable[[], List[Product]]


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://", "file://"))


def load_catalog(source: Union[str, Path]) -> List[Product]:
    """Load a catalog from a JSON array of product records.

    Args:
        source: Local path or URL of the JSON document.

    Returns:
        Products in document order.

    Raises:
        FileNotFoundError: If ``source`` is a local path that does not exist.
        CatalogError: If the document cannot be parsed or lacks required fields.
    """
    source = str(source)
    if not _is_url(source) and not Path(source).exists():
        raise FileNotFoundError(f"Catalog file not found: {source}")

    logger.info(f"Loading catalog from {source}")
    try:
        df = pd.read_json(source, orient="records", dtype=False, convert_dates=False)
    except ValueError as e:
        raise CatalogError(
            f"Failed to parse catalog from '{source}': {e}",
            details={"source": source},
        ) from e

    missing = set(PRODUCT_FIELDS) - set(df.columns)
    if not df.empty and missing:
        raise CatalogError(
            f"Catalog missing required fields: {sorted(missing)}",
            details={"source": source, "missing": sorted(missing)},
        )

    # Box numpy scalars into plain Python values, NaN into None
    df = df.astype(object).where(pd.notna(df), None)
    records = df.to_dict(orient="records")

    try:
        products = [Product.from_dict(record) for record in records]
    except (TypeError, ValueError) as e:
        raise CatalogError(
            f"Invalid product record in '{source}': {e}",
            details={"source": source},
        ) from e

    logger.info(f"Loaded {len(products)} products")
    return products


class JsonCatalogProvider:
    """Reads the catalog from a JSON file or URL on every call."""

    def __init__(self, source: Union[str, Path] = DEFAULT_CATALOG_PATH):
        self.source = str(source)

    def __call__(self) -> List[Product]:
        return load_catalog(self.source)

    def __repr__(self) -> str:
        return f"JsonCatalogProvider({self.source!r})"


class StaticCatalogProvider:
    """Serves a fixed, in-memory catalog."""

    def __init__(self, products: Sequence[Product]):
        self.products = list(products)

    def __call__(self) -> List[Product]:
        return list(self.products)
