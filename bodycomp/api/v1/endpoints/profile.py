"""Profile endpoints: height (cm) and the BMI derived from the latest weight."""

from fastapi import APIRouter, Depends

from bodycomp.api.deps import get_repository, get_store
from bodycomp.schemas.body import ProfileRead, ProfileUpdate
from bodycomp.services.conversions import bmi_category, calculate_bmi
from bodycomp.services.repository import BodyDataRepository
from bodycomp.storage.json_store import JsonDocumentStore

router = APIRouter()


def _profile(repo: BodyDataRepository) -> ProfileRead:
    height = repo.get_height()
    latest = repo.latest()
    bmi = calculate_bmi(latest.weight, height) if latest else None
    return ProfileRead(
        height=height,
        bmi=round(bmi, 1) if bmi is not None else None,
        bmi_category=bmi_category(bmi),
    )


@router.get("", response_model=ProfileRead)
async def get_profile(repo: BodyDataRepository = Depends(get_repository)):
    return _profile(repo)


@router.put("", response_model=ProfileRead)
async def update_profile(
    payload: ProfileUpdate,
    repo: BodyDataRepository = Depends(get_repository),
    store: JsonDocumentStore = Depends(get_store),
):
    repo.set_height(payload.height)
    await store.save(repo.to_document())
    return _profile(repo)
