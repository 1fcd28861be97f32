import asyncio
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable

from refashion.errors import RemoteUnavailable
from refashion.logger import get_logger

logger = get_logger(__name__)


@dataclass
class WriteFailure:
    label: str
    error: str
    attempts: int
    failed_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class BackgroundWriter:
    """Runs remote writes off the request path.

    A write is retried on RemoteUnavailable up to ``max_attempts`` times with
    linear backoff. When it still fails the failure is logged, kept in
    ``failures`` and handed to every listener. Local state is never touched.
    """

    def __init__(self, max_attempts: int = 3, backoff: float = 0.5, history: int = 100):
        self.max_attempts = max(1, max_attempts)
        self.backoff = backoff
        self.failures: deque[WriteFailure] = deque(maxlen=history)
        self._listeners: list[Callable[[WriteFailure], None]] = []
        self._pending: set[asyncio.Task] = set()

    def add_failure_listener(self, listener: Callable[[WriteFailure], None]):
        self._listeners.append(listener)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def submit(self, label: str, factory: Callable[[], Awaitable[object]]) -> asyncio.Task:
        task = asyncio.create_task(self._run(label, factory))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _run(self, label: str, factory: Callable[[], Awaitable[object]]):
        for attempt in range(1, self.max_attempts + 1):
            try:
                await factory()
                logger.debug("Remote write %s done (attempt %d)", label, attempt)
                return
            except RemoteUnavailable as e:
                if attempt == self.max_attempts:
                    self._fail(label, str(e), attempt)
                    return
                logger.info("Remote write %s failed (attempt %d): %s", label, attempt, e)
                await asyncio.sleep(self.backoff * attempt)
            except Exception as e:
                # Not retryable; still must not escape an unobserved task
                self._fail(label, repr(e), attempt)
                return

    def _fail(self, label: str, error: str, attempts: int):
        failure = WriteFailure(label=label, error=error, attempts=attempts)
        logger.error("Remote write %s abandoned after %d attempt(s): %s", label, attempts, error)
        self.failures.append(failure)
        for listener in self._listeners:
            try:
                listener(failure)
            except Exception:
                logger.exception("Failure listener raised for %s", label)

    async def drain(self, timeout: float | None = None):
        """Wait for every outstanding write to finish."""
        if not self._pending:
            return
        await asyncio.wait(set(self._pending), timeout=timeout)
