"""Worker message types and the outbound event buffer."""

import threading
from collections import deque
from enum import Enum
from typing import Any, Dict, List

# Default number of events kept by an EventLog
DEFAULT_EVENT_BUFFER_SIZE = 1000


class WorkerEvent(str, Enum):
    """Discriminant tags of inbound commands and outbound events."""

    # Inbound
    TRAIN_MODEL = "trainModel"
    RECOMMEND = "recommend"

    # Outbound
    PROGRESS_UPDATE = "progressUpdate"
    TRAINING_LOG = "trainingLog"
    TRAINING_COMPLETE = "trainingComplete"
    TRAINING_FAILED = "trainingFailed"
    RECOMMEND_FAILED = "recommendFailed"


def progress_event(progress: int) -> Dict[str, Any]:
    return {
        "type": WorkerEvent.PROGRESS_UPDATE.value,
        "progress": {"progress": progress},
    }


def failure_event(event: WorkerEvent, error: Exception, **fields: Any) -> Dict[str, Any]:
    data = {
        "type": event.value,
        "error": str(error),
        "error_type": type(error).__name__,
    }
    data.update(fields)
    return data


class EventLog:
    """Bounded, thread-safe buffer of emitted events.

    Instances are callable so they can be passed directly as a worker's
    ``emit`` sink. Every event gets a sequence number (``seq``) so readers can
    poll for what they have not seen yet.
    """

    def __init__(self, maxlen: int = DEFAULT_EVENT_BUFFER_SIZE):
        self._lock = threading.Lock()
        self._events = deque(maxlen=maxlen)
        self._seq = 0

    def __call__(self, event: Dict[str, Any]) -> None:
        with self._lock:
            self._seq += 1
            self._events.append(dict(event, seq=self._seq))

    def since(self, seq: int = 0) -> List[Dict[str, Any]]:
        """Return buffered events with a sequence number greater than ``seq``."""
        with self._lock:
            return [event for event in self._events if event["seq"] > seq]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
