"""Measurement endpoints: list, upsert-by-date, update, delete.

Every mutation rewrites the whole document through the store's write queue.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from bodycomp.api.deps import get_repository, get_store
from bodycomp.schemas.body import Measurement, MeasurementCreate, MeasurementUpdate
from bodycomp.services.repository import BodyDataRepository
from bodycomp.services.trends import filter_window
from bodycomp.storage.json_store import JsonDocumentStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=list[Measurement])
async def list_measurements(
    days: Optional[int] = Query(None, ge=1, description="Filter to last N days (7, 30, 90). Omit for all."),
    repo: BodyDataRepository = Depends(get_repository),
):
    """Measurement history, newest first."""
    measurements = repo.get_measurements()
    if days is not None:
        measurements = filter_window(measurements, days)
    return measurements


@router.get("/latest", response_model=Optional[Measurement])
async def get_latest_measurement(repo: BodyDataRepository = Depends(get_repository)):
    return repo.latest()


@router.get("/{measurement_id}", response_model=Measurement)
async def get_measurement(measurement_id: str, repo: BodyDataRepository = Depends(get_repository)):
    measurement = repo.get_measurement(measurement_id)
    if not measurement:
        raise HTTPException(status_code=404, detail="Measurement not found")
    return measurement


@router.put("", response_model=Measurement)
async def upsert_measurement(
    payload: MeasurementCreate,
    repo: BodyDataRepository = Depends(get_repository),
    store: JsonDocumentStore = Depends(get_store),
):
    """Create the measurement for payload.date, or overwrite the one already logged that day."""
    existed = repo.measurement_exists_for_date(payload.date)
    measurement = repo.upsert_measurement(payload)
    await store.save(repo.to_document())
    logger.info("%s measurement for %s", "Updated" if existed else "Added", payload.date)
    return measurement


@router.patch("/{measurement_id}", response_model=Measurement)
async def update_measurement(
    measurement_id: str,
    payload: MeasurementUpdate,
    repo: BodyDataRepository = Depends(get_repository),
    store: JsonDocumentStore = Depends(get_store),
):
    measurement = repo.update_measurement(measurement_id, payload)
    if not measurement:
        raise HTTPException(status_code=404, detail="Measurement not found")
    await store.save(repo.to_document())
    return measurement


@router.delete("/{measurement_id}", status_code=204)
async def delete_measurement(
    measurement_id: str,
    repo: BodyDataRepository = Depends(get_repository),
    store: JsonDocumentStore = Depends(get_store),
):
    if not repo.delete_measurement(measurement_id):
        raise HTTPException(status_code=404, detail="Measurement not found")
    await store.save(repo.to_document())
