"""Command-line interface for building a feature context.

This script runs a training invocation outside the API: it loads a catalog and
a user set from JSON, builds the feature context, encodes every product and
prints a summary.

Example:
    Build a context from the bundled sample data:
        $ python scripts/build_context.py data/users.json

    Use another catalog and show the product vectors:
        $ python scripts/build_context.py data/fake_users.json \\
            --catalog data/fake_products.json \\
            --show-vectors
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.features.context import FeatureWeights
from src.features.exceptions import CatalogRecException
from src.features.models import User, users_from_records
from src.features.vectorizer import build_trained_context, feature_layout
from src.worker.catalog import DEFAULT_CATALOG_PATH, load_catalog


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the script.

    Args:
        verbose: If True, set log level to DEBUG. Otherwise, use INFO.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def load_users(users_path: str) -> List[User]:
    """Load users from a JSON array of user records.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the document is not a JSON array.
    """
    path = Path(users_path)
    if not path.exists():
        raise FileNotFoundError(f"Users file not found: {users_path}")
    records = json.loads(path.read_text())
    if not isinstance(records, list):
        raise ValueError(f"Users file must contain a JSON array: {users_path}")
    return users_from_records(records)


def parse_arguments() -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Namespace object containing parsed arguments.
    """
    defaults = FeatureWeights()
    parser = argparse.ArgumentParser(
        description="Build a feature context from a catalog and a user set.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Build with the default catalog
  python scripts/build_context.py data/users.json

  # Use custom weights
  python scripts/build_context.py data/users.json --category-weight 0.5 --color-weight 0.2
        """,
    )

    parser.add_argument(
        "users_path",
        type=str,
        help="Path to JSON file containing user records with age and purchases",
    )
    parser.add_argument(
        "--catalog",
        type=str,
        default=DEFAULT_CATALOG_PATH,
        help=f"Path or URL of the catalog JSON (default: {DEFAULT_CATALOG_PATH})",
    )
    parser.add_argument("--category-weight", type=float, default=defaults.category)
    parser.add_argument("--color-weight", type=float, default=defaults.color)
    parser.add_argument("--price-weight", type=float, default=defaults.price)
    parser.add_argument("--age-weight", type=float, default=defaults.age)
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail when purchases reference products missing from the catalog",
    )
    parser.add_argument(
        "--show-vectors",
        action="store_true",
        help="Print the vector of every product",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging (DEBUG level)",
    )

    return parser.parse_args()


def main() -> int:
    """Main entry point for the script.

    Returns:
        Exit code: 0 on success, 1 on error.
    """
    try:
        args = parse_arguments()
        setup_logging(verbose=args.verbose)
        logger = logging.getLogger(__name__)

        weights = FeatureWeights(
            category=args.category_weight,
            color=args.color_weight,
            price=args.price_weight,
            age=args.age_weight,
        )

        catalog = load_catalog(args.catalog)
        users = load_users(args.users_path)

        context = build_trained_context(catalog, users, weights=weights, strict=args.strict)

        logger.info("=" * 70)
        logger.info("Feature Context Summary")
        logger.info("=" * 70)
        logger.info(f"Products:        {context.num_products}")
        logger.info(f"Users:           {context.num_users}")
        logger.info(f"Age range:       {context.min_age} - {context.max_age}")
        logger.info(f"Price range:     {context.min_price} - {context.max_price}")
        logger.info(f"Categories:      {dict(context.category_index)}")
        logger.info(f"Colors:          {dict(context.color_index)}")
        logger.info(f"Dimensions:      {context.dimensions}")
        for group, block in feature_layout(context).items():
            logger.info(f"  {group:<9} [{block.start}:{block.stop}]")
        if context.unreferenced_purchases:
            logger.warning(
                f"Unreferenced purchases: {dict(context.unreferenced_purchases)}"
            )
        logger.info("=" * 70)

        if args.show_vectors:
            for product_vector in context.product_vectors:
                values = ", ".join(f"{v:.3f}" for v in product_vector.vector)
                print(f"{product_vector.name}: [{values}]")

        return 0

    except FileNotFoundError as e:
        logging.error(f"File error: {e}")
        return 1
    except (CatalogRecException, ValueError) as e:
        logging.error(f"Validation error: {e}")
        return 1
    except KeyboardInterrupt:
        logging.warning("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
