"""Integration requests and the queues that deliver them.

Integrating an order or operation is two-phase: the synchronous call moves
the record to EM_PROCESSAMENTO and schedules an `IntegrationRequested`
message; a worker later consumes it and applies the terminal transition.
"""

import logging
import queue
import threading
import time
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Deque, Optional, Protocol, Tuple

ORDER = "order"
OPERATION = "operation"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntegrationRequested:
    """Message asking a worker to finalize an integration"""

    entity: str  # "order" or "operation"
    key: str
    requested_at: datetime
    actor: str


Handler = Callable[[IntegrationRequested], None]


class IntegrationScheduler(Protocol):
    def schedule(self, message: IntegrationRequested) -> None:
        ...


class InMemoryIntegrationQueue:
    """Holds requests until drained explicitly; used by tests and scripts"""

    def __init__(self) -> None:
        self.pending: Deque[IntegrationRequested] = deque()

    def schedule(self, message: IntegrationRequested) -> None:
        self.pending.append(message)

    def drain(self, handler: Handler) -> int:
        """Deliver every pending request (including ones scheduled meanwhile)"""
        delivered = 0
        while self.pending:
            handler(self.pending.popleft())
            delivered += 1
        return delivered


class BackgroundIntegrationQueue:
    """
    Worker thread that delivers each request after a fixed delay.

    Requests cannot be withdrawn once scheduled; the handler's guarded update
    decides whether the terminal transition still applies.
    """

    def __init__(self, handler: Handler, delay_seconds: float = 2.0, poll_seconds: float = 0.5):
        self.handler = handler
        self.delay_seconds = delay_seconds
        self.poll_seconds = poll_seconds
        self._queue: "queue.Queue[Tuple[float, IntegrationRequested]]" = queue.Queue()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def schedule(self, message: IntegrationRequested) -> None:
        self._queue.put((time.monotonic() + self.delay_seconds, message))

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="integration-worker", daemon=True)
        self._thread.start()
        logger.info("Integration worker started", extra={"delay_seconds": self.delay_seconds})

    def stop(self, timeout: float = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
        logger.info("Integration worker stopped", extra={"pending": self._queue.qsize()})

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                due_at, message = self._queue.get(timeout=self.poll_seconds)
            except queue.Empty:
                continue

            wait = due_at - time.monotonic()
            if wait > 0 and self._stop.wait(wait):
                break

            try:
                self.handler(message)
            except Exception:
                # Keep the worker alive; the handler records failures on the entity
                logger.exception(
                    "Integration handler crashed",
                    extra={"entity": message.entity, "key": message.key},
                )
            finally:
                self._queue.task_done()
