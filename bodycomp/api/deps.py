"""Request dependencies: the store comes from app.state, set up by create_application.

All of them are coroutines so the write queue is only touched from the event loop.
"""

from fastapi import Request

from bodycomp.core.config import Settings
from bodycomp.services.repository import BodyDataRepository
from bodycomp.storage.json_store import JsonDocumentStore


async def get_store(request: Request) -> JsonDocumentStore:
    return request.app.state.store


async def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_repository(request: Request) -> BodyDataRepository:
    """Repository over the newest document, including writes still queued."""
    store: JsonDocumentStore = request.app.state.store
    return BodyDataRepository(store.load_latest())
