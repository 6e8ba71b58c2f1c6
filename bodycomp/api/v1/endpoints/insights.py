"""Trend insights: period changes, weighted regression, goal timelines and goal cards.

Everything here is recomputed from the current document on each request.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from bodycomp.api.deps import get_app_settings, get_repository
from bodycomp.core.config import Settings
from bodycomp.core.constants import INSIGHT_PERIODS
from bodycomp.core.enums import Metric
from bodycomp.schemas.body import Goals
from bodycomp.schemas.insights import GoalCard, PeriodSummary, TimelineEstimate, TrendAnalysis
from bodycomp.services.goals import recommended_goals
from bodycomp.services.insights import goal_cards, period_start, period_summary, trend_analysis
from bodycomp.services.repository import BodyDataRepository
from bodycomp.services.timeline import estimate_timeline, format_timeline_estimate, timeline_status
from bodycomp.services.trends import metric_value, regress, weighted_average

router = APIRouter()


@router.get("/periods", response_model=dict[str, PeriodSummary], response_model_exclude_none=True)
async def period_insights(
    start_date: Optional[date] = Query(None, description="Custom range start; omit for 7/30/90-day windows"),
    end_date: Optional[date] = Query(None, description="Custom range end (inclusive)"),
    repo: BodyDataRepository = Depends(get_repository),
):
    """
    Change in weight, body fat and lean mass per period (newest minus oldest
    measurement in the period). Periods with fewer than two measurements
    report has_data=false.
    """
    measurements = repo.get_measurements()
    if start_date is not None:
        if end_date is not None and end_date < start_date:
            raise HTTPException(status_code=400, detail="end_date must not be before start_date")
        return {"custom": period_summary(measurements, start_date, end_date)}
    if end_date is not None:
        raise HTTPException(status_code=400, detail="end_date requires start_date")

    now = datetime.now(timezone.utc)
    return {
        key: period_summary(measurements, period_start(days, now))
        for key, days in INSIGHT_PERIODS.items()
    }


@router.get("/regression")
async def regression(
    metric: Metric = Metric.WEIGHT,
    window_days: int = Query(30, ge=1, le=3650),
    repo: BodyDataRepository = Depends(get_repository),
):
    """Recency-weighted linear trend of one metric. regression is null with < 2 points."""
    measurements = repo.get_measurements()
    result = regress(measurements, metric, window_days)
    return {
        "metric": metric,
        "regression": result,
        "weightedAverage": weighted_average(measurements, metric, window_days),
    }


@router.get("/timeline", response_model=TimelineEstimate, response_model_exclude_none=True)
async def timeline(
    metric: Metric = Metric.WEIGHT,
    window_days: Optional[int] = Query(None, ge=1, le=3650),
    repo: BodyDataRepository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
):
    """Days until the latest value reaches the goal at the current trend."""
    measurements = repo.get_measurements()
    latest = repo.latest()
    current = metric_value(latest, metric) if latest else None
    goal = getattr(repo.get_goals(), metric.attr)
    return estimate_timeline(
        measurements,
        metric,
        current,
        goal,
        window_days or settings.timeline_window_days,
    )


@router.get("/timeline/summary")
async def timeline_summary(
    repo: BodyDataRepository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
):
    """One line per goal that is set, e.g. "Weight: ~5 weeks (On track)"."""
    measurements = repo.get_measurements()
    goals = repo.get_goals()
    latest = repo.latest()
    summaries = []
    for metric in Metric:
        goal = getattr(goals, metric.attr)
        if goal is None:
            continue
        current = metric_value(latest, metric) if latest else None
        estimate = estimate_timeline(measurements, metric, current, goal, settings.timeline_window_days)
        formatted = format_timeline_estimate(estimate.days_to_goal, estimate.confidence) if estimate.success else None
        text = formatted.estimate if formatted else "No estimate"
        summaries.append(f"{metric.label}: {text} ({timeline_status(estimate).message})")
    if not summaries:
        return {
            "hasTimelines": False,
            "message": "Set goals and add more measurements to see timeline estimates",
        }
    return {"hasTimelines": True, "summaries": summaries}


@router.get("/goals", response_model=list[GoalCard], response_model_exclude_none=True)
async def goals_overview(
    repo: BodyDataRepository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
):
    """One card per metric: current value, goal, progress, 7/30/90-day change, forecast."""
    return goal_cards(
        repo.get_measurements(),
        repo.get_goals(),
        window_days=settings.timeline_window_days,
    )


@router.get("/trends", response_model=TrendAnalysis, response_model_exclude_none=True)
async def trends(
    days: int = Query(30, ge=1, le=3650),
    repo: BodyDataRepository = Depends(get_repository),
):
    return trend_analysis(repo.get_measurements(), days)


@router.get("/recommended-goals", response_model=Optional[Goals])
async def recommended(repo: BodyDataRepository = Depends(get_repository)):
    """Suggested goals from the latest measurement and height; null without data."""
    return recommended_goals(repo.get_measurements(), repo.get_height())
