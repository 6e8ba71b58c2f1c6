"""In-memory view of the data document: read access for the calculators, mutations for the API.

Callers load the whole document, mutate it here and hand `to_document()` back
to the store; nothing in this module touches the disk.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from bodycomp.schemas.body import (
    BodyDataDocument,
    Goals,
    GoalsUpdate,
    Measurement,
    MeasurementCreate,
    MeasurementUpdate,
)


class BodyDataRepository:
    def __init__(self, document: BodyDataDocument):
        self._measurements: list[Measurement] = [m.model_copy() for m in document.measurements]
        self._goals = document.goals.model_copy()
        self._height = document.height
        self._sort()

    # ── Reads ────────────────────────────────────────────────────────────

    def get_measurements(self) -> list[Measurement]:
        """Newest-first copy; at most one measurement per date."""
        return list(self._measurements)

    def get_measurement(self, measurement_id: str) -> Optional[Measurement]:
        return next((m for m in self._measurements if m.id == measurement_id), None)

    def measurement_exists_for_date(self, date: dt.date) -> bool:
        return any(m.date == date for m in self._measurements)

    def latest(self) -> Optional[Measurement]:
        return self._measurements[0] if self._measurements else None

    def get_goals(self) -> Goals:
        return self._goals.model_copy()

    def get_height(self) -> float:
        return self._height

    # ── Mutations ────────────────────────────────────────────────────────

    def upsert_measurement(self, payload: MeasurementCreate) -> Measurement:
        """Insert, or replace the values of the measurement already on that date."""
        values = payload.model_dump()
        for i, existing in enumerate(self._measurements):
            if existing.date == payload.date:
                updated = Measurement(**{**existing.model_dump(), **values})
                self._measurements[i] = updated
                self._sort()
                return updated
        created = Measurement(**values)
        self._measurements.append(created)
        self._sort()
        return created

    def update_measurement(
        self, measurement_id: str, changes: MeasurementUpdate
    ) -> Optional[Measurement]:
        """Partial update by id. Moving onto another measurement's date replaces that one."""
        for i, existing in enumerate(self._measurements):
            if existing.id != measurement_id:
                continue
            values: dict[str, Any] = changes.model_dump(exclude_unset=True, exclude_none=True)
            updated = Measurement(**{**existing.model_dump(), **values})
            self._measurements[i] = updated
            if "date" in values:
                self._measurements = [
                    m for m in self._measurements
                    if m.id == measurement_id or m.date != updated.date
                ]
            self._sort()
            return updated
        return None

    def delete_measurement(self, measurement_id: str) -> bool:
        before = len(self._measurements)
        self._measurements = [m for m in self._measurements if m.id != measurement_id]
        return len(self._measurements) < before

    def set_goals(self, changes: GoalsUpdate) -> Goals:
        """Shallow merge; an explicit null clears that goal."""
        merged = {**self._goals.model_dump(), **changes.model_dump(exclude_unset=True)}
        self._goals = Goals(**merged)
        return self.get_goals()

    def set_height(self, height_cm: float) -> float:
        self._height = height_cm
        return self._height

    def to_document(self) -> BodyDataDocument:
        return BodyDataDocument(
            measurements=list(self._measurements),
            goals=self._goals.model_copy(),
            height=self._height,
        )

    def _sort(self) -> None:
        self._measurements.sort(key=lambda m: m.date, reverse=True)
