"""Goal progress: how far the latest value has moved from the baseline toward the goal."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

from bodycomp.core.constants import CHANGE_TOLERANCE
from bodycomp.core.enums import Metric
from bodycomp.schemas.body import Goals, Measurement
from bodycomp.schemas.insights import GoalStatus
from bodycomp.services.conversions import calculate_bmi
from bodycomp.services.trends import metric_value


def initial_value(
    measurements: Sequence[Measurement], metric: Metric, fallback: float
) -> float:
    """Baseline = the oldest measurement (last in newest-first order)."""
    if not measurements:
        return fallback
    return metric_value(measurements[-1], metric)


def goal_progress(
    current: float,
    target: float,
    metric: Metric,
    measurements: Sequence[Measurement],
    lower_is_better: Optional[bool] = None,
) -> float:
    """
    Percent (0–100) of the required change already covered.

    Lower-is-better metrics (body fat by default) only count reductions and
    report 0 when the baseline is already at or below the target. Other
    metrics measure the distance moved from the baseline in either direction,
    capped at 100. A goal equal to the baseline reports 0.
    """
    if lower_is_better is None:
        lower_is_better = metric.lower_is_better
    initial = initial_value(measurements, metric, current)

    if lower_is_better:
        total_reduction = initial - target
        if total_reduction <= 0:
            return 0.0
        fraction = (initial - current) / total_reduction
        return max(0.0, min(1.0, fraction)) * 100

    total_change = abs(target - initial)
    if total_change == 0:
        return 0.0
    return min(100.0, abs(current - initial) / total_change * 100)


def is_goal_achieved(current: float, target: float, metric: Metric) -> bool:
    if metric.lower_is_better:
        return current <= target
    return abs(current - target) < CHANGE_TOLERANCE


def goal_status(
    current: float,
    target: float,
    metric: Metric,
    measurements: Sequence[Measurement] = (),
) -> GoalStatus:
    achieved = is_goal_achieved(current, target, metric)
    remaining = abs(target - current)
    if achieved:
        message = "Goal achieved!"
    else:
        direction = "to go" if target > current else "over target"
        message = f"{remaining:.1f} {metric.unit} {direction}"
    return GoalStatus(
        progress=goal_progress(current, target, metric, measurements),
        achieved=achieved,
        remaining=remaining,
        message=message,
    )


def recommended_goals(
    measurements: Sequence[Measurement], height_cm: float
) -> Optional[Goals]:
    """Conservative suggestions from the latest measurement and BMI."""
    if not measurements:
        return None
    latest = measurements[0]
    bmi = calculate_bmi(latest.weight, height_cm)
    height_m2 = (height_cm / 100) ** 2

    weight_goal = None
    if bmi is not None and bmi > 25:
        weight_goal = round(24 * height_m2, 1)
    elif bmi is not None and bmi < 18.5:
        weight_goal = round(20 * height_m2, 1)

    body_fat_goal = None
    if latest.body_fat > 20:
        body_fat_goal = max(12.0, latest.body_fat - 5)

    return Goals(
        weight=weight_goal,
        body_fat=body_fat_goal,
        lean_mass=latest.lean_mass + 1,
    )
