"""CLI script for getting product recommendations.

Useful for testing and evaluation. Trains a worker on a user set, then asks it
for recommendations for one of those users and prints them to the console.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from scripts.build_context import load_users
from src.features.exceptions import CatalogRecException
from src.features.recommend import DEFAULT_TOP_N
from src.worker.catalog import DEFAULT_CATALOG_PATH, JsonCatalogProvider
from src.worker.events import EventLog, WorkerEvent
from src.worker.worker import ModelTrainingWorker

# Setup logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s"
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Main CLI function."""
    parser = argparse.ArgumentParser(
        description="Get product recommendations for a user",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/recommend_cli.py data/users.json 0
  python scripts/recommend_cli.py data/users.json 2 --top-n 3
  python scripts/recommend_cli.py data/fake_users.json 5 --catalog data/fake_products.json
        """
    )

    parser.add_argument(
        "users_path",
        type=str,
        help="JSON file with the users to train on"
    )

    parser.add_argument(
        "user_index",
        type=int,
        help="Position of the user to recommend for in the users file"
    )

    parser.add_argument(
        "--catalog",
        type=str,
        default=DEFAULT_CATALOG_PATH,
        help=f"Path or URL of the catalog JSON (default: {DEFAULT_CATALOG_PATH})"
    )

    parser.add_argument(
        "--top-n",
        type=int,
        default=DEFAULT_TOP_N,
        help=f"Number of recommendations to return (default: {DEFAULT_TOP_N})"
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    try:
        users = load_users(args.users_path)
        user = users[args.user_index]
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except IndexError:
        print(f"Error: no user at index {args.user_index}", file=sys.stderr)
        sys.exit(1)

    events = EventLog()
    worker = ModelTrainingWorker(
        catalog_provider=JsonCatalogProvider(args.catalog),
        emit=events,
    )

    context = worker.handle_message(
        {"action": WorkerEvent.TRAIN_MODEL.value, "users": users}
    )
    if context is None:
        failure = events.since(0)[-1]
        print(f"Error: training failed: {failure.get('error')}", file=sys.stderr)
        sys.exit(1)

    try:
        recommendations = worker.recommend(user, top_n=args.top_n)
    except CatalogRecException as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    # Print results
    label = user.name or user.id or args.user_index
    print(f"\nRecommendations for user {label} (age {user.age:g}, context v{context.version}):")
    print(f"  Purchased: {user.purchased_names()}")
    for rank, recommendation in enumerate(recommendations, start=1):
        product = recommendation.product
        print(
            f"  {rank:>2}. {recommendation.name:<30} score={recommendation.score:.4f} "
            f"({product.category}, {product.color}, {product.price:.2f})"
        )

    print()


if __name__ == "__main__":
    main()
