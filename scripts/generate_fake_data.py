"""Generate a fake product catalog and user set for testing and development.

This module creates a synthetic catalog (products with price, category and
color) and users (age plus a purchase history over that catalog) and writes
them as JSON arrays, the format the worker's catalog provider reads.

Example:
    Run the script directly to generate default data:
        $ python scripts/generate_fake_data.py

    Or import and use programmatically:
        from scripts.generate_fake_data import generate_fake_catalog
        catalog = generate_fake_catalog(num_products=50)
"""

import json
import random
from pathlib import Path
from typing import List, Optional

import pandas as pd

# Default configuration constants
DEFAULT_NUM_PRODUCTS = 40
DEFAULT_NUM_USERS = 25
DEFAULT_MAX_PURCHASES = 6
DEFAULT_MIN_AGE = 18
DEFAULT_MAX_AGE = 70
DEFAULT_MIN_PRICE = 9.99
DEFAULT_MAX_PRICE = 249.99
DEFAULT_RANDOM_SEED = 42

CATEGORIES = ["shoes", "shirts", "jackets", "pants", "accessories"]
COLORS = ["red", "blue", "black", "white", "green", "brown"]


def generate_fake_catalog(
    num_products: int = DEFAULT_NUM_PRODUCTS,
    categories: Optional[List[str]] = None,
    colors: Optional[List[str]] = None,
    random_seed: Optional[int] = DEFAULT_RANDOM_SEED,
) -> pd.DataFrame:
    """Generate a synthetic product catalog.

    Args:
        num_products: Number of products. Must be positive.
        categories: Category values to draw from (default: CATEGORIES).
        colors: Color values to draw from (default: COLORS).
        random_seed: Seed for reproducibility, or None for a random run.

    Returns:
        A pandas DataFrame with columns:
            - id: Integer product identifier (1 to num_products)
            - name: Unique product name
            - category: Product category
            - color: Product color
            - price: Price rounded to cents

    Raises:
        ValueError: If num_products is not positive.
    """
    if num_products <= 0:
        raise ValueError("num_products must be positive")

    rng = random.Random(random_seed)
    categories = categories or CATEGORIES
    colors = colors or COLORS

    products = []
    for product_id in range(1, num_products + 1):
        category = rng.choice(categories)
        color = rng.choice(colors)
        products.append({
            "id": product_id,
            "name": f"{color.title()} {category.title()} #{product_id}",
            "category": category,
            "color": color,
            "price": round(rng.uniform(DEFAULT_MIN_PRICE, DEFAULT_MAX_PRICE), 2),
        })

    return pd.DataFrame(products)


def generate_fake_users(
    catalog: pd.DataFrame,
    num_users: int = DEFAULT_NUM_USERS,
    max_purchases: int = DEFAULT_MAX_PURCHASES,
    random_seed: Optional[int] = DEFAULT_RANDOM_SEED,
) -> List[dict]:
    """Generate users with purchase histories drawn from ``catalog``.

    Younger users lean towards cheaper products so that purchaser-age
    averages differ across the catalog.

    Returns:
        List of user records: ``{"id", "name", "age", "purchases"}``.

    Raises:
        ValueError: If num_users is not positive or the catalog is empty.
    """
    if num_users <= 0:
        raise ValueError("num_users must be positive")
    if catalog.empty:
        raise ValueError("Cannot generate purchases from an empty catalog")

    rng = random.Random(random_seed)
    by_price = catalog.sort_values("price")["name"].tolist()

    users = []
    for user_id in range(1, num_users + 1):
        age = rng.randint(DEFAULT_MIN_AGE, DEFAULT_MAX_AGE)
        # Position in the price-sorted catalog follows the user's age
        center = (age - DEFAULT_MIN_AGE) / (DEFAULT_MAX_AGE - DEFAULT_MIN_AGE)
        purchases = []
        for _ in range(rng.randint(0, max_purchases)):
            position = min(max(rng.gauss(center, 0.2), 0.0), 1.0)
            purchases.append({"name": by_price[int(position * (len(by_price) - 1))]})
        users.append({
            "id": user_id,
            "name": f"user-{user_id}",
            "age": age,
            "purchases": purchases,
        })

    return users


def main() -> None:
    """Main entry point for the data generation script.

    Generates a fake catalog and user set with default parameters and saves
    them to data/fake_products.json and data/fake_users.json.
    """
    print(f"Generating {DEFAULT_NUM_PRODUCTS} fake products and {DEFAULT_NUM_USERS} users...")

    try:
        catalog = generate_fake_catalog()
        users = generate_fake_users(catalog)
    except ValueError as e:
        print(f"Error generating data: {e}")
        return

    data_dir = Path(__file__).parent.parent / "data"
    data_dir.mkdir(exist_ok=True)

    catalog_path = data_dir / "fake_products.json"
    catalog.to_json(catalog_path, orient="records", indent=2)

    users_path = data_dir / "fake_users.json"
    users_path.write_text(json.dumps(users, indent=2))

    purchases = sum(len(user["purchases"]) for user in users)
    print(f"\nData generated successfully!")
    print(f"Catalog saved to: {catalog_path}")
    print(f"Users saved to:   {users_path}")
    print(f"\nCatalog preview:")
    print(catalog.head(10))
    print(f"\nData summary:")
    print(f"  Products:   {len(catalog)}")
    print(f"  Categories: {catalog['category'].nunique()}")
    print(f"  Colors:     {catalog['color'].nunique()}")
    print(f"  Users:      {len(users)}")
    print(f"  Purchases:  {purchases}")


if __name__ == "__main__":
    main()
