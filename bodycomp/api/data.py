"""Whole-document endpoints used by the dashboard: GET /data and POST /data."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from bodycomp.api.deps import get_store
from bodycomp.schemas.body import BodyDataDocument
from bodycomp.storage.json_store import JsonDocumentStore
from bodycomp.storage.write_queue import DocumentValidationError, StorageWriteError

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def get_data(store: JsonDocumentStore = Depends(get_store)):
    """Current document from disk. Does not wait for queued writes.

    A file with invalid records is served as stored rather than replaced by the default.
    """
    try:
        return store.load().to_json_dict()
    except DocumentValidationError:
        return store.load_raw()


@router.post("")
async def replace_data(document: BodyDataDocument, store: JsonDocumentStore = Depends(get_store)):
    """Replace the whole document. Concurrent posts are written one at a time, in arrival order."""
    document.measurements.sort(key=lambda m: m.date, reverse=True)
    try:
        await store.save(document)
    except StorageWriteError as e:
        logger.error("POST /data failed: %s", e)
        return JSONResponse(
            status_code=500,
            content={"status": "error", "message": "Failed to save data"},
        )
    return {"status": "ok"}
