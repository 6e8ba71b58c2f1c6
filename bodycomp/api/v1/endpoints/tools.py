"""QoL tools: unit converter and BMI calculator (pure logic, no stored data)."""

from typing import Literal, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from bodycomp.services.conversions import (
    bmi_category,
    calculate_bmi,
    cm_to_inches,
    inches_to_cm,
    kg_to_lbs,
    lbs_to_kg,
)

router = APIRouter()

Unit = Literal["kg", "lbs", "cm", "in"]

_CONVERTERS = {
    ("kg", "lbs"): kg_to_lbs,
    ("lbs", "kg"): lbs_to_kg,
    ("cm", "in"): cm_to_inches,
    ("in", "cm"): inches_to_cm,
}


class ConversionResponse(BaseModel):
    value: float
    from_unit: Unit
    to_unit: Unit
    result: float


class BmiResponse(BaseModel):
    weight_kg: float
    height_cm: float
    bmi: Optional[float]
    category: str


@router.get("/convert", response_model=ConversionResponse)
async def convert(
    value: float,
    from_unit: Unit = "kg",
    to_unit: Unit = "lbs",
):
    """Convert between kg/lbs or cm/inches. Same unit returns the value unchanged."""
    if from_unit == to_unit:
        result = value
    else:
        converter = _CONVERTERS.get((from_unit, to_unit))
        if converter is None:
            raise HTTPException(status_code=400, detail=f"Cannot convert {from_unit} to {to_unit}")
        result = converter(value)
    return ConversionResponse(value=value, from_unit=from_unit, to_unit=to_unit, result=round(result, 2))


@router.get("/bmi", response_model=BmiResponse)
async def bmi(
    weight_kg: float = Query(..., gt=0),
    height_cm: float = Query(..., gt=0),
):
    value = calculate_bmi(weight_kg, height_cm)
    return BmiResponse(
        weight_kg=weight_kg,
        height_cm=height_cm,
        bmi=round(value, 1) if value is not None else None,
        category=bmi_category(value),
    )
