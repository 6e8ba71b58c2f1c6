"""Goal endpoints. Updates merge into the stored goals instead of replacing them."""

from fastapi import APIRouter, Depends

from bodycomp.api.deps import get_repository, get_store
from bodycomp.schemas.body import Goals, GoalsUpdate
from bodycomp.services.repository import BodyDataRepository
from bodycomp.storage.json_store import JsonDocumentStore

router = APIRouter()


@router.get("", response_model=Goals)
async def get_goals(repo: BodyDataRepository = Depends(get_repository)):
    return repo.get_goals()


@router.put("", response_model=Goals)
async def update_goals(
    payload: GoalsUpdate,
    repo: BodyDataRepository = Depends(get_repository),
    store: JsonDocumentStore = Depends(get_store),
):
    """Only fields present in the body change; send null to clear a goal."""
    goals = repo.set_goals(payload)
    await store.save(repo.to_document())
    return goals
