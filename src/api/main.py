"""FastAPI application main module.

This module defines the main FastAPI application instance and core API
endpoints for the CatalogRec service: health check, status, metrics, worker
events and the vectors of the current feature context.
"""

from typing import Any, Dict, List

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from src.api.logging_config import RequestLoggingMiddleware
from src.api.routes import recommend, train
from src.api.state import get_worker
from src.features.exceptions import CatalogRecException
from src.worker.events import EventLog
from src.worker.metrics import metrics_service
from src.worker.worker import ModelTrainingWorker

# Create FastAPI application instance
app = FastAPI(
    title="CatalogRec API",
    description="Product feature vectors and personalized recommendations",
    version="0.1.0",
)

app.add_middleware(RequestLoggingMiddleware)

# Include routers
app.include_router(train.router)
app.include_router(recommend.router)


@app.exception_handler(CatalogRecException)
async def catalogrec_exception_handler(
    request: Request, exc: CatalogRecException
) -> JSONResponse:
    """Report CatalogRec errors with their own status code."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": type(exc).__name__,
            "message": exc.message,
            "details": exc.details,
        },
    )


@app.get("/ping")
def ping() -> Dict[str, str]:
    """Health check endpoint.

    Returns:
        Dictionary with status key set to "ok".

    Example:
        >>> response = client.get("/ping")
        >>> assert response.json() == {"status": "ok"}
    """
    return {"status": "ok"}


@app.get("/status")
def get_status(worker: ModelTrainingWorker = Depends(get_worker)) -> Dict[str, Any]:
    """Describe the current feature context.

    ``context_loaded`` is False until the first training invocation succeeds;
    the remaining fields are then None or zero.
    """
    context = worker.store.current()
    if context is None:
        return {
            "context_loaded": False,
            "version": 0,
            "built_at": None,
            "dimensions": 0,
            "num_products": 0,
            "num_users": 0,
        }

    summary = context.summary()
    summary["context_loaded"] = True
    return summary


@app.get("/metrics")
def get_metrics() -> Dict[str, Any]:
    """Training and recommendation counters."""
    return metrics_service.get_metrics()


@app.get("/events")
def get_events(
    since: int = 0,
    worker: ModelTrainingWorker = Depends(get_worker),
) -> List[Dict[str, Any]]:
    """Worker events with a sequence number greater than ``since``."""
    if not isinstance(worker.emit, EventLog):
        return []
    return worker.emit.since(since)


@app.get("/context/vectors")
def get_product_vectors(
    worker: ModelTrainingWorker = Depends(get_worker),
) -> Dict[str, Any]:
    """Product vectors of the current feature context.

    Raises:
        ContextNotReadyError: If no context has been trained yet (503).
    """
    context = worker.store.require()
    return {
        "version": context.version,
        "dimensions": context.dimensions,
        "product_vectors": [pv.to_dict() for pv in context.product_vectors],
    }


if __name__ == "__main__":
    import uvicorn

    from src.api.logging_config import setup_logging

    setup_logging()
    uvicorn.run(
        "src.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
