"""Background delivery of records and settlement events."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from .errors import PersistenceError
from .ports import PersistenceStore
from .storage import Record

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[Any]]


class BackgroundDispatcher:
    """Runs submitted coroutines one at a time on a worker task.

    Submitting never blocks the caller. A failing job is retried up to
    ``retries`` times with ``backoff`` seconds between attempts, then logged
    and dropped; nothing is ever raised back into the game loop.
    """

    def __init__(self, name: str, *, retries: int = 0, backoff: float = 0.0) -> None:
        self.name = name
        self.retries = retries
        self.backoff = backoff
        self.failed = 0
        self.delivered = 0
        self._queue: asyncio.Queue[tuple[str, Job] | None] | None = None
        self._worker: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def start(self) -> None:
        if self.running:
            return
        self._queue = asyncio.Queue()
        self._worker = asyncio.create_task(self._drain(), name=f"dispatch-{self.name}")

    def submit(self, label: str, job: Job) -> None:
        if self._queue is None:
            raise RuntimeError(f"dispatcher {self.name!r} is not started")
        self._queue.put_nowait((label, job))

    async def close(self) -> None:
        """Deliver everything still queued, then stop the worker."""
        if self._queue is None or self._worker is None:
            return
        self._queue.put_nowait(None)
        await self._worker
        self._queue = None
        self._worker = None

    async def _drain(self) -> None:
        assert self._queue is not None
        while True:
            item = await self._queue.get()
            if item is None:
                return
            label, job = item
            await self._run(label, job)

    async def _run(self, label: str, job: Job) -> None:
        attempts = self.retries + 1
        for attempt in range(1, attempts + 1):
            try:
                await job()
            except Exception as exc:
                if attempt < attempts:
                    logger.debug("%s: %s failed (attempt %d/%d): %s", self.name, label, attempt, attempts, exc)
                    if self.backoff:
                        await asyncio.sleep(self.backoff * attempt)
                    continue
                self.failed += 1
                logger.warning("%s: giving up on %s after %d attempt(s): %s", self.name, label, attempts, exc)
                return
            self.delivered += 1
            return


class RecordWriter:
    """Appends records to a store through a retrying dispatcher."""

    def __init__(self, store: PersistenceStore, *, retries: int = 3, backoff: float = 0.05) -> None:
        self.store = store
        self.dispatcher = BackgroundDispatcher("records", retries=retries, backoff=backoff)

    def start(self) -> None:
        self.dispatcher.start()

    def write(self, record: Record) -> None:
        async def job() -> None:
            try:
                await self.store.append(record)
            except PersistenceError:
                raise
            except Exception as exc:
                raise PersistenceError(f"{record.kind} {record.id}: {exc}") from exc

        self.dispatcher.submit(f"{record.kind}:{record.id}", job)

    async def close(self) -> None:
        await self.dispatcher.close()
