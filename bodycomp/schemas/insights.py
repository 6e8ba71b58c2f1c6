"""Derived, never-persisted result schemas for trends, timelines and insights."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import Field

from bodycomp.core.enums import (
    ChangeClass,
    Confidence,
    Metric,
    SeriesTrend,
    TimelineReason,
    TrendDirection,
)
from bodycomp.schemas.body import CamelModel


class RegressionResult(CamelModel):
    slope: float  # unit/day
    intercept: float
    r_squared: float = Field(..., ge=0, le=1)
    data_point_count: int
    window_days: int


class TimelineEstimate(CamelModel):
    """Goal forecast. On failure only `reason` and the input values are set."""

    success: bool
    reason: Optional[TimelineReason] = None
    current_value: Optional[float] = None
    goal_value: Optional[float] = None
    days_to_goal: Optional[int] = None
    target_date: Optional[dt.date] = None
    confidence: Optional[Confidence] = None
    daily_rate: Optional[float] = None
    r_squared: Optional[float] = None
    achievable: Optional[bool] = None


class FormattedTimeline(CamelModel):
    estimate: str  # "~5 weeks"
    exact: str  # "35 days"
    confidence: Confidence


class TimelineStatus(CamelModel):
    status: str
    message: str


class PeriodInsight(CamelModel):
    weight_change: float
    body_fat_change: float
    lean_mass_change: float
    period_days: int
    start_date: dt.date
    end_date: dt.date
    total_measurements: int


class TrendChange(CamelModel):
    diff: float
    percentage: Optional[float] = None
    direction: TrendDirection


class GoalStatus(CamelModel):
    progress: float
    achieved: bool
    remaining: float
    message: str


class MetricPeriodChanges(CamelModel):
    seven_day: Optional[float] = None
    thirty_day: Optional[float] = None
    ninety_day: Optional[float] = None


class GoalCard(CamelModel):
    """Everything the dashboard shows for one metric."""

    metric: Metric
    label: str
    unit: str
    current_value: Optional[float] = None
    goal_value: Optional[float] = None
    has_goal: bool
    progress: Optional[float] = None
    changes: Optional[MetricPeriodChanges] = None
    timeline: Optional[TimelineEstimate] = None
    formatted: Optional[FormattedTimeline] = None
    timeline_message: Optional[str] = None
    status: Optional[TimelineStatus] = None


class TrendAnalysis(CamelModel):
    has_data: bool
    message: Optional[str] = None
    trends: Optional[dict[Metric, SeriesTrend]] = None
    analysis: Optional[str] = None


class PeriodSummary(CamelModel):
    has_data: bool
    insights: Optional[PeriodInsight] = None
    summary: Optional[str] = None
    classes: Optional[dict[Metric, ChangeClass]] = None
