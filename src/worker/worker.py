"""Model training worker.

Receives ``trainModel`` and ``recommend`` commands as message envelopes,
builds and publishes feature contexts, answers recommendation queries and
reports everything through outbound events.

Messages are dictionaries with an ``action`` discriminant::

    {"action": "trainModel", "users": [...]}
    {"action": "recommend", "user": {...}, "top_n": 5}

The worker can be driven synchronously with ``handle_message()`` or run on a
background thread with ``start()`` / ``submit()`` / ``stop()``.
"""

import logging
import queue
import threading
import time
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from src.features.context import DEFAULT_WEIGHTS, FeatureContext, FeatureWeights
from src.features.exceptions import CatalogRecException
from src.features.models import User
from src.features.recommend import DEFAULT_TOP_N, Recommendation, recommend
from src.features.vectorizer import build_trained_context
from src.worker.catalog import CatalogProvider
from src.worker.events import EventLog, WorkerEvent, failure_event, progress_event
from src.worker.metrics import metrics_service
from src.worker.store import ContextStore

# Configure module logger
logger = logging.getLogger(__name__)

# Progress milestones reported during training
PROGRESS_STARTED = 50
PROGRESS_COMPLETE = 100

# Placeholder training log values (no iterative training happens)
PLACEHOLDER_EPOCH = 1
PLACEHOLDER_LOSS = 1
PLACEHOLDER_ACCURACY = 1

# Errors that abort a training invocation without stopping the worker
TRAINING_ERRORS = (CatalogRecException, FileNotFoundError, KeyError, TypeError, ValueError)

EventSink = Callable[[Dict[str, Any]], None]

_STOP = object()


def _coerce_user(user: Union[User, Mapping[str, Any]]) -> User:
    return user if isinstance(user, User) else User.from_dict(user)


class ModelTrainingWorker:
    """Dispatches worker commands and owns the published feature context."""

    def __init__(
        self,
        catalog_provider: CatalogProvider,
        emit: Optional[EventSink] = None,
        store: Optional[ContextStore] = None,
        weights: FeatureWeights = DEFAULT_WEIGHTS,
        strict: bool = False,
    ):
        """Initialize the worker.

        Args:
            catalog_provider: Callable returning the catalog, called once per
                training invocation.
            emit: Sink for outbound events. Defaults to a new EventLog.
            store: Context store to publish into. Defaults to a new store.
            weights: Feature weights for every context this worker builds.
            strict: Abort training when purchases reference unknown products.
        """
        self.catalog_provider = catalog_provider
        self.emit = emit if emit is not None else EventLog()
        self.store = store if store is not None else ContextStore()
        self.weights = weights
        self.strict = strict

        self.handlers = {
            WorkerEvent.TRAIN_MODEL.value: self.train_model,
            WorkerEvent.RECOMMEND.value: self.handle_recommend,
        }

        self._inbox: "queue.Queue" = queue.Queue()
        self._thread: Optional[threading.Thread] = None

        logger.info("Model training worker initialized")

    # ------------------------------------------------------------------
    # Message dispatch
    # ------------------------------------------------------------------

    def handle_message(self, message: Mapping[str, Any]) -> Any:
        """Dispatch a message envelope to its handler.

        Messages with an unknown action are logged and ignored.

        Returns:
            Whatever the handler returns, or None for unknown actions.
        """
        data = dict(message)
        action = data.pop("action", None)
        handler = self.handlers.get(action)
        if handler is None:
            logger.warning(f"Ignoring message with unknown action: {action!r}")
            return None
        return handler(data)

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    def train(self, users: Sequence[Union[User, Mapping[str, Any]]]) -> FeatureContext:
        """Build a context for ``users`` and publish it.

        The current catalog is fetched from the provider. Nothing is published
        unless every step succeeds.

        Returns:
            The published context, with its version assigned.

        Raises:
            EmptyInputError: If the catalog or user set is empty.
            UnknownCategoricalValueError: If a product cannot be encoded.
            CatalogError: If the catalog is malformed.
        """
        users = [_coerce_user(user) for user in users]
        logger.info(f"Training model with {len(users)} users")

        catalog = self.catalog_provider()
        context = build_trained_context(
            catalog, users, weights=self.weights, strict=self.strict
        )
        return self.store.publish(context)

    def train_model(self, data: Mapping[str, Any]) -> Optional[FeatureContext]:
        """Handler for ``trainModel`` commands.

        Emits progress and log events around ``train()``. Failures are
        reported as a ``trainingFailed`` event; the previously published
        context stays current.
        """
        start_time = time.time()
        self.emit(progress_event(PROGRESS_STARTED))

        try:
            context = self.train(data.get("users") or [])
        except TRAINING_ERRORS as e:
            duration_ms = (time.time() - start_time) * 1000
            metrics_service.record_training(duration_ms, success=False)
            logger.error(
                "Training failed",
                extra={
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "current_version": self.store.version,
                },
            )
            self.emit(failure_event(WorkerEvent.TRAINING_FAILED, e))
            return None

        self.emit(
            {
                "type": WorkerEvent.TRAINING_LOG.value,
                "epoch": PLACEHOLDER_EPOCH,
                "loss": PLACEHOLDER_LOSS,
                "accuracy": PLACEHOLDER_ACCURACY,
            }
        )
        self.emit(progress_event(PROGRESS_COMPLETE))
        self.emit(
            {
                "type": WorkerEvent.TRAINING_COMPLETE.value,
                "version": context.version,
                "dimensions": context.dimensions,
                "num_products": context.num_products,
            }
        )

        duration_ms = (time.time() - start_time) * 1000
        metrics_service.record_training(duration_ms)
        logger.info(
            "Training completed",
            extra={
                "context_version": context.version,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return context

    # ------------------------------------------------------------------
    # Recommendation
    # ------------------------------------------------------------------

    def recommend(
        self,
        user: Union[User, Mapping[str, Any]],
        top_n: int = DEFAULT_TOP_N,
        context: Optional[FeatureContext] = None,
    ) -> List[Recommendation]:
        """Recommend products for ``user``.

        Uses ``context`` when given, otherwise the current published context.

        Raises:
            ContextNotReadyError: If no context has been published.
        """
        start_time = time.time()
        if context is None:
            context = self.store.require()
        recommendations = recommend(_coerce_user(user), context, top_n=top_n)
        metrics_service.record_recommendation((time.time() - start_time) * 1000)
        return recommendations

    def handle_recommend(self, data: Mapping[str, Any]) -> List[Recommendation]:
        """Handler for ``recommend`` commands."""
        user = data.get("user")
        logger.info("Will recommend for user", extra={"user": user})

        try:
            if user is None:
                raise ValueError("Recommend message has no 'user'")
            top_n = int(data.get("top_n", DEFAULT_TOP_N))
            recommendations = self.recommend(user, top_n=top_n)
        except TRAINING_ERRORS as e:
            logger.warning(f"Recommendation failed: {e}")
            self.emit(failure_event(WorkerEvent.RECOMMEND_FAILED, e, user=user))
            return []

        self.emit(
            {
                "type": WorkerEvent.RECOMMEND.value,
                "user": user,
                "recommendations": [r.to_dict() for r in recommendations],
            }
        )
        return recommendations

    # ------------------------------------------------------------------
    # Background thread
    # ------------------------------------------------------------------

    def submit(self, message: Mapping[str, Any]) -> None:
        """Queue a message for the background thread."""
        self._inbox.put(dict(message))

    def start(self) -> None:
        """Start handling queued messages on a daemon thread."""
        if self.is_running:
            return
        self._thread = threading.Thread(
            target=self._run, name="model-training-worker", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Handle every message queued so far, then stop the thread."""
        if self._thread is None:
            return
        self._inbox.put(_STOP)
        self._thread.join(timeout)
        self._thread = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        while True:
            message = self._inbox.get()
            try:
                if message is _STOP:
                    break
                self.handle_message(message)
            except Exception:
                logger.error("Unhandled error while handling message", exc_info=True)
            finally:
                self._inbox.task_done()
