"""Recommendation endpoints for the CatalogRec API.

This module provides API endpoints for generating product recommendations
from the most recently published feature context.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from src.api.routes.train import UserModel
from src.api.state import get_worker
from src.features.recommend import DEFAULT_TOP_N
from src.worker.worker import ModelTrainingWorker

# Configure module logger
logger = logging.getLogger(__name__)

# Create API router
router = APIRouter(
    prefix="/recommend",
    tags=["recommendations"],
)


class RecommendRequest(BaseModel):
    """Request body for recommendations."""

    user: UserModel = Field(..., description="User to recommend for")
    top_n: int = Field(
        default=DEFAULT_TOP_N, description="Number of recommendations to return"
    )


class RecommendationItem(BaseModel):
    """A recommended product with its similarity score."""

    name: str
    score: float
    product: Dict[str, Any]


class RecommendationResponse(BaseModel):
    """Response model for recommendation requests.

    Attributes:
        user_id: Identifier of the user, if one was given.
        recommendations: Recommended products, best first.
        context_version: Version of the feature context used.
    """

    user_id: Optional[Any] = Field(default=None, description="User identifier")
    recommendations: List[RecommendationItem] = Field(
        ..., description="Recommended products, best first"
    )
    context_version: int = Field(..., description="Feature context version")


@router.post("", response_model=RecommendationResponse)
def get_recommendations(
    request: RecommendRequest,
    worker: ModelTrainingWorker = Depends(get_worker),
) -> RecommendationResponse:
    """Get product recommendations for a user.

    Raises:
        ContextNotReadyError: If no context has been trained yet (503).

    Example:
        POST /recommend {"user": {"age": 30, "purchases": [{"name": "A"}]}, "top_n": 5}
    """
    user = request.user.model_dump()
    logger.info(
        f"Generating recommendations for user {user.get('id')}, top_n={request.top_n}"
    )

    context = worker.store.require()
    recommendations = worker.recommend(user, top_n=request.top_n, context=context)

    return RecommendationResponse(
        user_id=user.get("id"),
        recommendations=[
            RecommendationItem(**recommendation.to_dict())
            for recommendation in recommendations
        ],
        context_version=context.version,
    )
