"""Serialized write queue for the JSON data file.

Every save is appended to a FIFO and written by a single drain task, so at
most one file write is in flight and writes land in arrival order. A failed
write fails only the caller that queued it; the queue keeps draining.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base class for persistence errors."""


class StorageWriteError(StorageError):
    """The data file could not be written."""


class DocumentValidationError(StorageError):
    """The data file parsed as JSON but its contents are not a valid document."""


def write_json_atomic(path: Path, document: dict[str, Any]) -> None:
    """Pretty-print `document` to a temp file next to `path`, then swap it in."""
    payload = json.dumps(document, indent=2)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(payload)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


@dataclass
class _PendingWrite:
    document: dict[str, Any]
    future: asyncio.Future


class WriteQueue:
    """FIFO of whole-document writes with a single consumer.

    States: idle (no drain task) and writing (drain task running). Enqueueing
    while idle starts the drain task; it runs until the FIFO is empty.
    """

    def __init__(
        self,
        path: Path,
        writer: Callable[[Path, dict[str, Any]], None] = write_json_atomic,
    ):
        self.path = Path(path)
        self._writer = writer
        self._pending: deque[_PendingWrite] = deque()
        self._writing = False
        self._in_flight: Optional[dict[str, Any]] = None
        self._drain_task: Optional[asyncio.Task] = None
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def is_writing(self) -> bool:
        return self._writing

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def latest_document(self) -> Optional[dict[str, Any]]:
        """Newest document queued or being written, None when idle."""
        if self._pending:
            return self._pending[-1].document
        return self._in_flight

    def enqueue(self, document: dict[str, Any]) -> asyncio.Future:
        """Queue a write; the returned future resolves once it is on disk."""
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        self._pending.append(_PendingWrite(document=document, future=future))
        self._idle.clear()
        if not self._writing:
            self._writing = True
            self._drain_task = loop.create_task(self._drain())
        return future

    async def write(self, document: dict[str, Any]) -> None:
        """Queue a write and wait for it. Raises StorageWriteError on failure.

        Cancelling the caller does not cancel the queued write.
        """
        await asyncio.shield(self.enqueue(document))

    async def join(self) -> None:
        """Wait until every queued write has completed."""
        await self._idle.wait()

    async def _drain(self) -> None:
        entry: Optional[_PendingWrite] = None
        try:
            while self._pending:
                entry = self._pending.popleft()
                self._in_flight = entry.document
                try:
                    await asyncio.to_thread(self._writer, self.path, entry.document)
                except Exception as e:  # goes to the caller that queued this write
                    logger.exception("Error writing data file %s", self.path)
                    if not entry.future.done():
                        entry.future.set_exception(
                            StorageWriteError(f"Failed to save data: {e}")
                        )
                else:
                    logger.debug("Wrote data file %s (%d pending)", self.path, len(self._pending))
                    if not entry.future.done():
                        entry.future.set_result(None)
                finally:
                    self._in_flight = None
                entry = None
        finally:
            # Stopped early (cancelled at shutdown): every queued caller still gets an answer
            unresolved = ([entry] if entry is not None else []) + list(self._pending)
            self._pending.clear()
            for item in unresolved:
                if not item.future.done():
                    item.future.set_exception(
                        StorageWriteError("Write queue stopped before the data was saved")
                    )
            if unresolved:
                logger.error("Write queue stopped with %d unsaved writes", len(unresolved))
            self._writing = False
            self._drain_task = None
            self._idle.set()
