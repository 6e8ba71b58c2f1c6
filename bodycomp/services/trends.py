"""Trend engine: recency-weighted linear regression and simple series statistics.

All functions are pure. Measurement lists are ordered newest-first. "Now" is
the wall clock at call time unless a `now` is passed in, which keeps results
reproducible in tests.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from bodycomp.core.constants import (
    CHANGE_TOLERANCE,
    RECENCY_DECAY_DAYS,
    STABLE_TREND_PCT,
)
from bodycomp.core.enums import ChangeClass, Metric, SeriesTrend, TrendDirection
from bodycomp.schemas.body import Measurement
from bodycomp.schemas.insights import RegressionResult, TrendChange

SECONDS_PER_DAY = 86400.0


# ── Time helpers ─────────────────────────────────────────────────────────

def resolve_now(now: Optional[datetime] = None) -> datetime:
    """Aware UTC datetime; naive values are taken to be UTC."""
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def date_to_datetime(d: date) -> datetime:
    """Calendar date at UTC midnight (how ISO dates are parsed by the dashboard)."""
    return datetime.combine(d, time.min, tzinfo=timezone.utc)


def days_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / SECONDS_PER_DAY


def metric_value(measurement: Measurement, metric: Metric) -> float:
    return float(getattr(measurement, metric.attr))


def filter_window(
    measurements: Sequence[Measurement],
    window_days: float,
    now: Optional[datetime] = None,
) -> list[Measurement]:
    """Measurements dated within `window_days` before now, order preserved."""
    cutoff = resolve_now(now) - timedelta(days=window_days)
    return [m for m in measurements if date_to_datetime(m.date) >= cutoff]


def recency_weight(d: date, now: datetime) -> float:
    """exp(-days_ago / 10): recent points dominate, stale ones fade."""
    days_ago = days_between(date_to_datetime(d), now)
    return math.exp(-days_ago / RECENCY_DECAY_DAYS)


# ── Regression ───────────────────────────────────────────────────────────

def regress(
    measurements: Sequence[Measurement],
    metric: Metric,
    window_days: int,
    now: Optional[datetime] = None,
) -> Optional[RegressionResult]:
    """
    Weighted least-squares line through the metric over the lookback window.

    x is whole days since the oldest point in the window, so the slope is the
    forward-in-time rate (unit/day). Returns None with fewer than 2 points or
    when every point falls on the same day (no variance in x).
    """
    now = resolve_now(now)
    points = filter_window(measurements, window_days, now)
    if len(points) < 2:
        return None

    origin = min(m.date for m in points)
    rows: list[tuple[float, float, float]] = []
    for m in points:
        x = float((m.date - origin).days)
        rows.append((x, metric_value(m, metric), recency_weight(m.date, now)))

    sum_w = sum(w for _, _, w in rows)
    sum_wx = sum(w * x for x, _, w in rows)
    sum_wy = sum(w * y for _, y, w in rows)
    sum_wxy = sum(w * x * y for x, y, w in rows)
    sum_wx2 = sum(w * x * x for x, _, w in rows)

    denominator = sum_w * sum_wx2 - sum_wx * sum_wx
    if sum_w <= 0 or denominator == 0 or not math.isfinite(denominator):
        return None

    slope = (sum_w * sum_wxy - sum_wx * sum_wy) / denominator
    intercept = (sum_wy - slope * sum_wx) / sum_w

    mean_y = sum_wy / sum_w
    ss_tot = sum(w * (y - mean_y) ** 2 for _, y, w in rows)
    ss_res = sum(w * (y - (intercept + slope * x)) ** 2 for x, y, w in rows)
    r_squared = max(0.0, 1 - ss_res / ss_tot) if ss_tot > 0 else 0.0

    return RegressionResult(
        slope=slope,
        intercept=intercept,
        r_squared=min(r_squared, 1.0),
        data_point_count=len(points),
        window_days=window_days,
    )


def trend_slope(
    measurements: Sequence[Measurement],
    metric: Metric,
    window_days: int,
    now: Optional[datetime] = None,
) -> Optional[float]:
    result = regress(measurements, metric, window_days, now)
    return result.slope if result else None


def prediction_confidence(
    measurements: Sequence[Measurement],
    metric: Metric,
    window_days: int,
    now: Optional[datetime] = None,
) -> float:
    """R² of the weighted fit, 0 when there is no fit."""
    result = regress(measurements, metric, window_days, now)
    return result.r_squared if result else 0.0


def weighted_average(
    measurements: Sequence[Measurement],
    metric: Metric,
    window_days: int,
    now: Optional[datetime] = None,
) -> Optional[float]:
    """Recency-weighted mean over the window, same decay as the regression."""
    now = resolve_now(now)
    points = filter_window(measurements, window_days, now)
    if not points:
        return None
    weights = [recency_weight(m.date, now) for m in points]
    total = sum(weights)
    if total <= 0:
        return None
    return sum(w * metric_value(m, metric) for w, m in zip(weights, points)) / total


# ── Simple series statistics ─────────────────────────────────────────────

def moving_average(values: Sequence[float], window_size: int) -> list[float]:
    """Centred moving average; the window shrinks at both ends."""
    result: list[float] = []
    half_before = window_size // 2
    half_after = math.ceil(window_size / 2)
    for i in range(len(values)):
        window = values[max(0, i - half_before):min(len(values), i + half_after)]
        result.append(sum(window) / len(window))
    return result


def average(
    measurements: Sequence[Measurement],
    metric: Metric,
    start: int = 0,
    end: Optional[int] = None,
) -> Optional[float]:
    chunk = measurements[start:end]
    if not chunk:
        return None
    return sum(metric_value(m, metric) for m in chunk) / len(chunk)


def trend_change(current: float, previous: Optional[float]) -> Optional[TrendChange]:
    """Change from the previous reading, rounded to 1 decimal."""
    if previous is None:
        return None
    diff = current - previous
    percentage = round(diff / previous * 100, 1) if previous else None
    if abs(diff) < CHANGE_TOLERANCE:
        direction = TrendDirection.NEUTRAL
    elif diff > 0:
        direction = TrendDirection.UP
    else:
        direction = TrendDirection.DOWN
    return TrendChange(diff=round(diff, 1), percentage=percentage, direction=direction)


def change_class(change: float, metric: Metric) -> ChangeClass:
    """Gains are good except for body fat, where a drop is good."""
    if abs(change) < CHANGE_TOLERANCE:
        return ChangeClass.NEUTRAL
    improved = change < 0 if metric.lower_is_better else change > 0
    return ChangeClass.POSITIVE if improved else ChangeClass.NEGATIVE


def trend_direction(values: Sequence[float]) -> SeriesTrend:
    """Direction of a newest-first series from its oldest to newest value."""
    if len(values) < 3:
        return SeriesTrend.STABLE
    first, last = values[-1], values[0]
    if first == 0:
        return SeriesTrend.STABLE
    percent_change = (last - first) / first * 100
    if abs(percent_change) < STABLE_TREND_PCT:
        return SeriesTrend.STABLE
    return SeriesTrend.INCREASING if percent_change > 0 else SeriesTrend.DECREASING
