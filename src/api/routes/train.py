"""Training endpoints for the CatalogRec API.

Training runs as a ``trainModel`` worker command in a background task; its
progress is reported through the worker events (see ``GET /events``).
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, status
from pydantic import BaseModel, Field

from src.api.state import get_worker
from src.worker.events import WorkerEvent
from src.worker.worker import ModelTrainingWorker

# Configure module logger
logger = logging.getLogger(__name__)

# Create API router
router = APIRouter(
    prefix="/train",
    tags=["training"],
)


class PurchaseModel(BaseModel):
    """A purchase record referencing a product by name."""

    name: str = Field(..., description="Name of the purchased product")


class UserModel(BaseModel):
    """A user with an age and an ordered purchase history."""

    id: Optional[Any] = Field(default=None, description="Optional user identifier")
    name: Optional[str] = Field(default=None, description="Optional display name")
    age: float = Field(..., description="User age")
    purchases: List[PurchaseModel] = Field(
        default_factory=list, description="Purchased products, in order"
    )


class TrainRequest(BaseModel):
    """Request body for training."""

    users: List[UserModel] = Field(..., description="Users to train on")


class TrainResponse(BaseModel):
    """Response for an accepted training request.

    Attributes:
        status: Always "accepted".
        num_users: Number of users submitted.
        current_version: Version of the context current when the request
            was accepted (0 if none).
    """

    status: str = Field(default="accepted")
    num_users: int
    current_version: int


@router.post(
    "",
    response_model=TrainResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def train(
    request: TrainRequest,
    background_tasks: BackgroundTasks,
    worker: ModelTrainingWorker = Depends(get_worker),
) -> TrainResponse:
    """Queue a training invocation for the submitted users.

    The current catalog is fetched when the task runs. A failed invocation
    leaves the previously published context in place.

    Example:
        POST /train {"users": [{"age": 20, "purchases": [{"name": "A"}]}]}
    """
    users: List[Dict[str, Any]] = [user.model_dump() for user in request.users]
    logger.info(f"Accepted training request with {len(users)} users")

    background_tasks.add_task(
        worker.handle_message,
        {"action": WorkerEvent.TRAIN_MODEL.value, "users": users},
    )

    return TrainResponse(
        num_users=len(users),
        current_version=worker.store.version,
    )
