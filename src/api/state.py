"""Process-wide worker used by the API routes.

The worker is created lazily on first use from ``CATALOGREC_CATALOG_PATH``.
Tests and embedding applications can install their own with ``set_worker()``.
"""

import logging
import os
from typing import Optional

from src.worker.catalog import DEFAULT_CATALOG_PATH, JsonCatalogProvider
from src.worker.events import EventLog
from src.worker.worker import ModelTrainingWorker

# Configure module logger
logger = logging.getLogger(__name__)

# Environment variable overriding the catalog location
CATALOG_PATH_ENV = "CATALOGREC_CATALOG_PATH"

_worker: Optional[ModelTrainingWorker] = None


def create_default_worker() -> ModelTrainingWorker:
    """Build a worker reading the catalog from the configured JSON source."""
    catalog_path = os.getenv(CATALOG_PATH_ENV, DEFAULT_CATALOG_PATH)
    logger.info(f"Creating worker with catalog source {catalog_path}")
    return ModelTrainingWorker(
        catalog_provider=JsonCatalogProvider(catalog_path),
        emit=EventLog(),
    )


def get_worker() -> ModelTrainingWorker:
    """Return the process-wide worker, creating it if needed."""
    global _worker

    if _worker is None:
        _worker = create_default_worker()
    return _worker


def set_worker(worker: Optional[ModelTrainingWorker]) -> None:
    """Install ``worker`` as the process-wide worker (None resets it)."""
    global _worker

    _worker = worker
