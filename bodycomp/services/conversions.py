"""Unit conversion, formatting and BMI helpers. All stored values are metric."""

from __future__ import annotations

from typing import Optional

from bodycomp.core.constants import CM_TO_INCHES, INCHES_TO_CM, KG_TO_LBS


def kg_to_lbs(kg: float) -> float:
    return kg * KG_TO_LBS


def lbs_to_kg(lbs: float) -> float:
    return lbs / KG_TO_LBS


def cm_to_inches(cm: float) -> float:
    return cm * CM_TO_INCHES


def inches_to_cm(inches: float) -> float:
    return inches * INCHES_TO_CM


def convert_weight(weight_kg: float, to_metric: bool) -> float:
    """Stored kg value for display; lean mass uses the same conversion."""
    return weight_kg if to_metric else kg_to_lbs(weight_kg)


def convert_height(height_cm: float, to_cm: bool) -> float:
    return height_cm if to_cm else cm_to_inches(height_cm)


def normalize_weight(value: float, is_metric: bool) -> float:
    """User input (kg or lbs) back to kg."""
    return value if is_metric else lbs_to_kg(value)


def normalize_height(value: float, is_cm: bool) -> float:
    return value if is_cm else inches_to_cm(value)


def format_weight(weight_kg: float, use_metric: bool) -> str:
    return f"{convert_weight(weight_kg, use_metric):.1f}"


def format_height(height_cm: float, use_cm: bool) -> str:
    if use_cm:
        return f"{height_cm:.0f}"
    return f"{cm_to_inches(height_cm):.1f}"


def calculate_bmi(weight_kg: float, height_cm: Optional[float]) -> Optional[float]:
    """BMI = kg / m². None when height is missing or not positive."""
    if not height_cm or height_cm <= 0:
        return None
    height_m = height_cm / 100
    return weight_kg / (height_m * height_m)


def bmi_category(bmi: Optional[float]) -> str:
    if not bmi:
        return "--"
    if bmi < 18.5:
        return "Underweight"
    if bmi < 25:
        return "Normal"
    if bmi < 30:
        return "Overweight"
    return "Obese"
