"""Module for getting recommendations.

Scores every product of a trained feature context against a user profile
vector and returns the most similar products.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity

from src.features.context import FeatureContext
from src.features.exceptions import ContextNotReadyError
from src.features.models import Product, User
from src.features.vectorizer import encode_user

# Configure module logger
logger = logging.getLogger(__name__)

# Default parameters
DEFAULT_TOP_N = 10


@dataclass(frozen=True)
class Recommendation:
    """A recommended product and its similarity score."""

    name: str
    score: float
    product: Product

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "score": self.score,
            "product": self.product.to_dict(),
        }


def score_products(user: User, context: FeatureContext) -> np.ndarray:
    """Cosine similarity between the user profile and every product vector.

    Returns:
        Array of scores in ``context.product_vectors`` order.
    """
    user_vector = encode_user(user, context)
    if not np.any(user_vector):
        return np.zeros(len(context.product_vectors))
    return cosine_similarity([user_vector], context.vector_matrix())[0]


def recommend(
    user: User,
    context: FeatureContext,
    top_n: int = DEFAULT_TOP_N,
    exclude_purchased: bool = True,
) -> List[Recommendation]:
    """Get recommendations for a user.

    Args:
        user: User to recommend for. Only age and purchases are used.
        context: Trained context with product vectors attached.
        top_n: Maximum number of recommendations.
        exclude_purchased: If True, skip products the user already bought.

    Returns:
        Recommendations sorted by descending score. Equal scores keep catalog
        order.

    Raises:
        ContextNotReadyError: If the context has no product vectors.
    """
    start_time = time.time()

    if not context.has_vectors:
        raise ContextNotReadyError("Feature context has no product vectors.")

    if top_n <= 0:
        return []

    scores = score_products(user, context)
    purchased = set(user.purchased_names()) if exclude_purchased else set()

    # Stable sort keeps catalog order among equal scores
    order = np.argsort(-scores, kind="stable")

    recommendations = []
    for idx in order:
        product_vector = context.product_vectors[int(idx)]
        if product_vector.name in purchased:
            continue
        recommendations.append(
            Recommendation(
                name=product_vector.name,
                score=float(scores[idx]),
                product=product_vector.product,
            )
        )
        if len(recommendations) >= top_n:
            break

    logger.info(
        "Recommendations generated",
        extra={
            "user_id": user.id,
            "context_version": context.version,
            "num_recommendations": len(recommendations),
            "total_time_ms": round((time.time() - start_time) * 1000, 2),
        },
    )

    return recommendations
