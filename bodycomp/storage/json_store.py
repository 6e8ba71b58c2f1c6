"""JSON document store: whole-document reads straight from disk, writes via the queue."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError

from bodycomp.core.constants import DEFAULT_HEIGHT_CM
from bodycomp.schemas.body import BodyDataDocument, default_document
from bodycomp.storage.write_queue import DocumentValidationError, WriteQueue

logger = logging.getLogger(__name__)


class JsonDocumentStore:
    """Single JSON file holding measurements, goals and height.

    Reads never wait for queued writes, so a read may see the previous
    document while a save is in flight.
    """

    def __init__(
        self,
        path: Path,
        default_height_cm: float = DEFAULT_HEIGHT_CM,
        queue: WriteQueue | None = None,
    ):
        self.path = Path(path)
        self.default_height_cm = default_height_cm
        self.queue = queue or WriteQueue(self.path)

    def default(self) -> BodyDataDocument:
        return default_document(self.default_height_cm)

    def load_raw(self) -> Optional[dict[str, Any]]:
        """File contents as a JSON object; None when missing, unparseable or not an object."""
        if not self.path.exists():
            return None
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("Error reading data file %s: %s", self.path, e)
            return None
        if not isinstance(raw, dict):
            logger.error("Data file %s does not contain a JSON object", self.path)
            return None
        return raw

    def load(self) -> BodyDataDocument:
        """Read the file; a missing or unparseable file yields the default document.

        Raises DocumentValidationError when the JSON is an object with invalid
        records, so nothing gets saved over data that could not be read.
        """
        raw = self.load_raw()
        if raw is None:
            return self.default()
        return self._parse(raw)

    def load_latest(self) -> BodyDataDocument:
        """Newest queued document if a write is pending, else the file contents.

        Mutations build on this so back-to-back saves do not drop each other's changes.
        """
        pending = self.queue.latest_document()
        if pending is not None:
            return self._parse(pending)
        return self.load()

    async def save(self, document: Union[BodyDataDocument, dict[str, Any]]) -> None:
        """Queue the whole document for writing and wait until it is on disk."""
        if isinstance(document, BodyDataDocument):
            payload = document.to_json_dict()
        else:
            payload = document
        await self.queue.write(payload)
        logger.info("Saved data file %s", self.path)

    async def close(self) -> None:
        await self.queue.join()

    def _parse(self, raw: dict[str, Any]) -> BodyDataDocument:
        try:
            document = BodyDataDocument.model_validate(raw)
        except ValidationError as e:
            logger.error("Invalid data file %s: %s", self.path, e)
            raise DocumentValidationError(f"Data file {self.path} contains invalid records") from e
        if "height" not in raw:
            document.height = self.default_height_cm
        document.measurements.sort(key=lambda m: m.date, reverse=True)
        return document
