"""Health check endpoint for monitoring."""

import os

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from bodycomp.api.deps import get_store
from bodycomp.storage.json_store import JsonDocumentStore

router = APIRouter()


@router.get("")
async def health():
    """Simple liveness check."""
    return {"status": "ok"}


@router.get("/ready")
async def readiness(store: JsonDocumentStore = Depends(get_store)):
    """Readiness: data directory writable, plus write queue state."""
    directory = store.path.parent.resolve()
    if not os.access(directory, os.W_OK):
        return JSONResponse(
            status_code=500,
            content={"status": "error", "storage": f"{directory} is not writable"},
        )
    return {
        "status": "ok",
        "storage": str(store.path),
        "writing": store.queue.is_writing,
        "pending_writes": store.queue.pending_count,
    }
