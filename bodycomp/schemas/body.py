"""Body data Pydantic schemas: Measurement, Goals and the persisted document.

Python attributes are snake_case; the JSON document and the API use the
camelCase keys of the data file (bodyFat, leanMass, weightLbs, ...).
"""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from bodycomp.core.constants import DEFAULT_HEIGHT_CM, KG_TO_LBS


class CamelModel(BaseModel):
    """Base for models serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def generate_measurement_id() -> str:
    return uuid.uuid4().hex


# ── Measurement ──────────────────────────────────────────────────────────

class Measurement(CamelModel):
    """One dated measurement. At most one per date in a document."""

    id: str = Field(default_factory=generate_measurement_id)
    date: dt.date
    weight: float = Field(..., gt=0, description="Body weight in kg")
    body_fat: float = Field(..., ge=0, le=100, description="Body fat %")
    lean_mass: float = Field(..., gt=0, description="Lean mass in kg")
    weight_lbs: Optional[float] = None
    lean_mass_lbs: Optional[float] = None

    @model_validator(mode="after")
    def _derive_lbs(self) -> "Measurement":
        # Derived values always follow the kg values
        self.weight_lbs = round(self.weight * KG_TO_LBS, 1)
        self.lean_mass_lbs = round(self.lean_mass * KG_TO_LBS, 1)
        return self


class MeasurementCreate(CamelModel):
    """Upsert payload: a measurement for `date` replaces the existing one."""

    date: dt.date
    weight: float = Field(..., gt=0)
    body_fat: float = Field(..., ge=0, le=100)
    lean_mass: float = Field(..., gt=0)


class MeasurementUpdate(CamelModel):
    date: Optional[dt.date] = None
    weight: Optional[float] = Field(None, gt=0)
    body_fat: Optional[float] = Field(None, ge=0, le=100)
    lean_mass: Optional[float] = Field(None, gt=0)


# ── Goals ────────────────────────────────────────────────────────────────

class Goals(CamelModel):
    """Target values; each one is independently optional."""

    weight: Optional[float] = Field(None, gt=0)
    body_fat: Optional[float] = Field(None, ge=0, le=100)
    lean_mass: Optional[float] = Field(None, gt=0)


class GoalsUpdate(Goals):
    """Shallow merge: only fields present in the request are replaced."""


# ── Profile ──────────────────────────────────────────────────────────────

class ProfileUpdate(CamelModel):
    height: float = Field(..., gt=50, lt=300, description="Height in centimetres")


class ProfileRead(CamelModel):
    height: float
    bmi: Optional[float] = None
    bmi_category: str = "--"


# ── Persisted document ───────────────────────────────────────────────────

class BodyDataDocument(CamelModel):
    """The whole data file: measurements, goals and height (cm)."""

    measurements: list[Measurement] = Field(default_factory=list)  # unique by date
    goals: Goals = Field(default_factory=Goals)
    height: float = Field(DEFAULT_HEIGHT_CM, gt=0)

    @model_validator(mode="after")
    def _one_measurement_per_date(self) -> "BodyDataDocument":
        seen: set[dt.date] = set()
        for m in self.measurements:
            if m.date in seen:
                raise ValueError(f"more than one measurement for {m.date.isoformat()}")
            seen.add(m.date)
        return self

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def default_document(height_cm: float = DEFAULT_HEIGHT_CM) -> BodyDataDocument:
    return BodyDataDocument(height=height_cm)
