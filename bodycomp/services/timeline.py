"""Goal timeline estimation from the weighted trend.

`estimate_timeline` checks its preconditions in a fixed order; each failure
has its own reason and the first failing check wins.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Optional

from bodycomp.core.constants import (
    ACHIEVABLE_MIN_SLOPE,
    DEFAULT_TIMELINE_WINDOW_DAYS,
    HIGH_CONFIDENCE_R2,
    MAX_TIMELINE_DAYS,
    MEDIUM_CONFIDENCE_R2,
    MIN_TREND_SLOPE,
)
from bodycomp.core.enums import Confidence, Metric, TimelineReason
from bodycomp.schemas.body import Measurement
from bodycomp.schemas.insights import FormattedTimeline, TimelineEstimate, TimelineStatus
from bodycomp.services.trends import regress, resolve_now

TIMELINE_MESSAGES = {
    TimelineReason.INSUFFICIENT_DATA: "Need more measurement data for timeline estimation",
    TimelineReason.NO_GOAL: "Set a goal to see timeline estimate",
    TimelineReason.GOAL_ACHIEVED: "Goal already achieved!",
    TimelineReason.TREND_TOO_WEAK: "Trend too weak for reliable prediction",
    TimelineReason.TIMELINE_TOO_LONG: "Goal timeline too long to predict reliably",
    TimelineReason.INVALID_TIMELINE: "Current trend goes in opposite direction from goal",
}


def confidence_level(r_squared: float) -> Confidence:
    if r_squared >= HIGH_CONFIDENCE_R2:
        return Confidence.HIGH
    if r_squared >= MEDIUM_CONFIDENCE_R2:
        return Confidence.MEDIUM
    return Confidence.LOW


def is_goal_achievable(slope: float, required_change: float) -> bool:
    """The trend heads toward the goal and is not negligibly slow."""
    same_direction = (slope > 0 and required_change > 0) or (slope < 0 and required_change < 0)
    return same_direction and abs(slope) > ACHIEVABLE_MIN_SLOPE


def _failure(reason: TimelineReason, current: Optional[float], goal: Optional[float]) -> TimelineEstimate:
    return TimelineEstimate(success=False, reason=reason, current_value=current, goal_value=goal)


def estimate_timeline(
    measurements: Sequence[Measurement],
    metric: Metric,
    current: Optional[float],
    goal: Optional[float],
    window_days: int = DEFAULT_TIMELINE_WINDOW_DAYS,
    now: Optional[datetime] = None,
) -> TimelineEstimate:
    """Forecast days until `current` reaches `goal` at the current trend."""
    now = resolve_now(now)

    if len(measurements) < 2:
        return _failure(TimelineReason.INSUFFICIENT_DATA, current, goal)
    if goal is None:
        return _failure(TimelineReason.NO_GOAL, current, goal)
    if current is None:
        return _failure(TimelineReason.INSUFFICIENT_DATA, current, goal)
    if goal == current:
        return _failure(TimelineReason.GOAL_ACHIEVED, current, goal)

    regression = regress(measurements, metric, window_days, now)
    if regression is None or abs(regression.slope) < MIN_TREND_SLOPE:
        return _failure(TimelineReason.TREND_TOO_WEAK, current, goal)

    required_change = goal - current
    # Rounded first so float noise in the slope cannot add a day
    days_to_goal = math.ceil(round(required_change / regression.slope, 6))
    if days_to_goal <= 0:
        return _failure(TimelineReason.INVALID_TIMELINE, current, goal)
    if days_to_goal > MAX_TIMELINE_DAYS:
        return _failure(TimelineReason.TIMELINE_TOO_LONG, current, goal)

    return TimelineEstimate(
        success=True,
        current_value=current,
        goal_value=goal,
        days_to_goal=days_to_goal,
        target_date=(now + timedelta(days=days_to_goal)).date(),
        confidence=confidence_level(regression.r_squared),
        daily_rate=regression.slope,
        r_squared=regression.r_squared,
        achievable=is_goal_achievable(regression.slope, required_change),
    )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_timeline_estimate(
    days_to_goal: Optional[int], confidence: Confidence
) -> Optional[FormattedTimeline]:
    """Human estimate: days up to a month, weeks up to 90 days, then months."""
    if days_to_goal is None or days_to_goal <= 0:
        return None

    exact = f"{days_to_goal} day" if days_to_goal == 1 else f"{days_to_goal} days"
    if days_to_goal <= 30:
        estimate = f"~{exact}"
    elif days_to_goal <= 90:
        weeks = _round_half_up(days_to_goal / 7)
        estimate = f"~{weeks} weeks"
    else:
        months = _round_half_up(days_to_goal / 30)
        estimate = f"~{months} months"
    return FormattedTimeline(estimate=estimate, exact=exact, confidence=confidence)


def timeline_status(estimate: Optional[TimelineEstimate]) -> TimelineStatus:
    if estimate is None or not estimate.success:
        return TimelineStatus(status="insufficient_data", message="Need more data")
    if not estimate.achievable:
        return TimelineStatus(status="challenging", message="Adjust strategy")
    if estimate.confidence is Confidence.HIGH:
        return TimelineStatus(status="achievable", message="On track")
    if estimate.confidence is Confidence.MEDIUM:
        return TimelineStatus(status="likely", message="Likely achievable")
    return TimelineStatus(status="uncertain", message="Progress uncertain")


def timeline_message(reason: Optional[TimelineReason]) -> str:
    if reason is None:
        return "Timeline estimate not available"
    return TIMELINE_MESSAGES.get(reason, "Timeline estimate not available")
