"""Period insights: raw change of each metric over trailing or custom windows."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime, timedelta
from typing import Optional, Union

from bodycomp.core.constants import (
    CHANGE_TOLERANCE,
    DEFAULT_TIMELINE_WINDOW_DAYS,
    INSIGHT_PERIODS,
)
from bodycomp.core.enums import Metric, SeriesTrend, TimelineReason
from bodycomp.schemas.body import Goals, Measurement
from bodycomp.schemas.insights import (
    GoalCard,
    MetricPeriodChanges,
    PeriodInsight,
    PeriodSummary,
    TrendAnalysis,
)
from bodycomp.services.goals import goal_progress
from bodycomp.services.timeline import (
    estimate_timeline,
    format_timeline_estimate,
    timeline_message,
    timeline_status,
)
from bodycomp.services.trends import (
    change_class,
    date_to_datetime,
    metric_value,
    resolve_now,
    trend_direction,
)

DateLike = Union[date, datetime]

# Keys of MetricPeriodChanges for each entry of INSIGHT_PERIODS
_PERIOD_FIELDS = {
    "sevenDay": "seven_day",
    "thirtyDay": "thirty_day",
    "ninetyDay": "ninety_day",
}


def _as_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return resolve_now(value)
    return date_to_datetime(value)


def filter_by_date(
    measurements: Sequence[Measurement],
    start_date: DateLike,
    end_date: Optional[DateLike] = None,
) -> list[Measurement]:
    """Measurements on/after start_date (and on/before end_date), order kept."""
    start = _as_datetime(start_date)
    end = _as_datetime(end_date) if end_date is not None else None
    out = []
    for m in measurements:
        at = date_to_datetime(m.date)
        if at < start:
            continue
        if end is not None and at > end:
            continue
        out.append(m)
    return out


def period_insights(
    measurements: Sequence[Measurement],
    start_date: DateLike,
    end_date: Optional[DateLike] = None,
) -> Optional[PeriodInsight]:
    """
    Newest minus oldest value of every metric within the period.
    None when fewer than two measurements fall inside it.
    """
    period = filter_by_date(measurements, start_date, end_date)
    if len(period) < 2:
        return None

    latest, oldest = period[0], period[-1]
    return PeriodInsight(
        weight_change=latest.weight - oldest.weight,
        body_fat_change=latest.body_fat - oldest.body_fat,
        lean_mass_change=latest.lean_mass - oldest.lean_mass,
        period_days=(latest.date - oldest.date).days,
        start_date=oldest.date,
        end_date=latest.date,
        total_measurements=len(period),
    )


def period_start(days: int, now: Optional[datetime] = None) -> datetime:
    return resolve_now(now) - timedelta(days=days)


def standard_period_insights(
    measurements: Sequence[Measurement], now: Optional[datetime] = None
) -> dict[str, Optional[PeriodInsight]]:
    """7, 30 and 90 day insights keyed sevenDay / thirtyDay / ninetyDay."""
    now = resolve_now(now)
    return {
        key: period_insights(measurements, period_start(days, now))
        for key, days in INSIGHT_PERIODS.items()
    }


def metric_period_changes(
    measurements: Sequence[Measurement],
    metric: Metric,
    now: Optional[datetime] = None,
) -> Optional[MetricPeriodChanges]:
    """Change of one metric in each standard window; None overall with < 2 points."""
    if len(measurements) < 2:
        return None
    now = resolve_now(now)
    changes: dict[str, Optional[float]] = {}
    for key, days in INSIGHT_PERIODS.items():
        period = filter_by_date(measurements, period_start(days, now))
        if len(period) >= 2:
            changes[_PERIOD_FIELDS[key]] = metric_value(period[0], metric) - metric_value(period[-1], metric)
        else:
            changes[_PERIOD_FIELDS[key]] = None
    return MetricPeriodChanges(**changes)


def insights_summary(insight: Optional[PeriodInsight]) -> str:
    """One sentence describing the notable changes of a period."""
    if insight is None:
        return ""

    prefix = f"Over the last {insight.period_days} days: "
    changes: list[str] = []
    if abs(insight.weight_change) >= CHANGE_TOLERANCE:
        direction = "gained" if insight.weight_change > 0 else "lost"
        changes.append(f"{direction} {abs(insight.weight_change):.1f} kg")
    if abs(insight.body_fat_change) >= CHANGE_TOLERANCE:
        direction = "increased" if insight.body_fat_change > 0 else "decreased"
        changes.append(f"body fat {direction} {abs(insight.body_fat_change):.1f}%")
    if abs(insight.lean_mass_change) >= CHANGE_TOLERANCE:
        direction = "gained" if insight.lean_mass_change > 0 else "lost"
        changes.append(f"{direction} {abs(insight.lean_mass_change):.1f} kg lean mass")

    if not changes:
        return f"{prefix}measurements remained stable"
    return prefix + ", ".join(changes)


def period_summary(
    measurements: Sequence[Measurement],
    start_date: DateLike,
    end_date: Optional[DateLike] = None,
) -> PeriodSummary:
    insight = period_insights(measurements, start_date, end_date)
    if insight is None:
        return PeriodSummary(has_data=False, summary="Not enough data for this period")
    return PeriodSummary(
        has_data=True,
        insights=insight,
        summary=insights_summary(insight),
        classes={
            Metric.WEIGHT: change_class(insight.weight_change, Metric.WEIGHT),
            Metric.BODY_FAT: change_class(insight.body_fat_change, Metric.BODY_FAT),
            Metric.LEAN_MASS: change_class(insight.lean_mass_change, Metric.LEAN_MASS),
        },
    )


def trend_analysis(
    measurements: Sequence[Measurement],
    period_days: int = 30,
    now: Optional[datetime] = None,
) -> TrendAnalysis:
    """Increasing / decreasing / stable per metric; needs three points in the window."""
    period = filter_by_date(measurements, period_start(period_days, now))
    if len(period) < 3:
        return TrendAnalysis(has_data=False, message="Not enough data for trend analysis")

    trends = {metric: trend_direction([metric_value(m, metric) for m in period]) for metric in Metric}
    moving = [
        f"{metric.label.capitalize()} {trend.value}"
        for metric, trend in trends.items()
        if trend is not SeriesTrend.STABLE
    ]
    analysis = ", ".join(moving) if moving else "All metrics remain stable"
    return TrendAnalysis(has_data=True, trends=trends, analysis=analysis)


def goal_cards(
    measurements: Sequence[Measurement],
    goals: Goals,
    now: Optional[datetime] = None,
    window_days: int = DEFAULT_TIMELINE_WINDOW_DAYS,
) -> list[GoalCard]:
    """Current value, progress, recent changes and forecast for every metric."""
    now = resolve_now(now)
    latest = measurements[0] if measurements else None
    cards = []
    for metric in Metric:
        current = metric_value(latest, metric) if latest else None
        goal = getattr(goals, metric.attr)
        card = GoalCard(
            metric=metric,
            label=metric.label,
            unit=metric.unit,
            current_value=current,
            goal_value=goal,
            has_goal=goal is not None,
            changes=metric_period_changes(measurements, metric, now),
        )
        if goal is not None:
            if current is not None:
                card.progress = goal_progress(current, goal, metric, measurements)
            estimate = estimate_timeline(measurements, metric, current, goal, window_days, now)
            card.timeline = estimate
            card.status = timeline_status(estimate)
            if estimate.success:
                card.formatted = format_timeline_estimate(estimate.days_to_goal, estimate.confidence)
            else:
                card.timeline_message = timeline_message(estimate.reason)
        else:
            card.timeline_message = timeline_message(TimelineReason.NO_GOAL)
        cards.append(card)
    return cards
