"""Holder of the currently published feature context.

Readers always see either the previous complete context or the new complete
one: publication is a single reference swap under a lock.
"""

import logging
import threading
from typing import Optional

from src.features.context import FeatureContext
from src.features.exceptions import ContextNotReadyError

# Configure module logger
logger = logging.getLogger(__name__)


class ContextStore:
    """Versioned slot for the current feature context."""

    def __init__(self):
        self._lock = threading.Lock()
        self._context: Optional[FeatureContext] = None
        self._version = 0

    @property
    def version(self) -> int:
        """Version of the current context, 0 before the first publication."""
        with self._lock:
            return self._version

    def publish(self, context: FeatureContext) -> FeatureContext:
        """Replace the current context and return it with its new version."""
        with self._lock:
            self._version += 1
            published = context.with_version(self._version)
            self._context = published

        logger.info(
            "Feature context published",
            extra={"context_version": published.version},
        )
        return published

    def current(self) -> Optional[FeatureContext]:
        with self._lock:
            return self._context

    def require(self) -> FeatureContext:
        """Return the current context.

        Raises:
            ContextNotReadyError: If nothing has been published yet.
        """
        context = self.current()
        if context is None:
            raise ContextNotReadyError()
        return context

    def clear(self) -> None:
        """Drop the current context (useful for testing). Versions keep counting."""
        with self._lock:
            self._context = None
