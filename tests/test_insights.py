"""Tests for period insights, summaries, trend analysis and goal cards."""

import datetime as dt

import pytest

from bodycomp.core.enums import ChangeClass, Metric, SeriesTrend
from bodycomp.schemas.body import Goals
from bodycomp.schemas.insights import PeriodInsight
from bodycomp.services.insights import (
    filter_by_date,
    goal_cards,
    insights_summary,
    metric_period_changes,
    period_insights,
    period_start,
    period_summary,
    standard_period_insights,
    trend_analysis,
)


def _insight(weight=0.0, body_fat=0.0, lean_mass=0.0, days=7):
    return PeriodInsight(
        weight_change=weight,
        body_fat_change=body_fat,
        lean_mass_change=lean_mass,
        period_days=days,
        start_date=dt.date(2025, 6, 13),
        end_date=dt.date(2025, 6, 20),
        total_measurements=2,
    )


@pytest.fixture
def june(make_measurement):
    return [
        make_measurement("2025-06-20", weight=72.8, body_fat=18.0, lean_mass=59.0),
        make_measurement("2025-06-13", weight=72.9, body_fat=18.5, lean_mass=58.8),
        make_measurement("2025-06-06", weight=73.5, body_fat=19.0, lean_mass=58.5),
    ]


class TestPeriodInsights:
    def test_change_between_oldest_and_newest(self, june):
        insight = period_insights(june[:2], dt.date(2025, 6, 1))

        assert insight.weight_change == pytest.approx(-0.1)
        assert insight.period_days == 7
        assert insight.start_date == dt.date(2025, 6, 13)
        assert insight.end_date == dt.date(2025, 6, 20)
        assert insight.total_measurements == 2

    def test_start_date_is_inclusive(self, june):
        insight = period_insights(june, dt.date(2025, 6, 13))
        assert insight.total_measurements == 2
        assert insight.body_fat_change == pytest.approx(-0.5)

    def test_custom_end_date(self, june):
        insight = period_insights(june, dt.date(2025, 6, 1), dt.date(2025, 6, 13))
        assert insight.end_date == dt.date(2025, 6, 13)
        assert insight.weight_change == pytest.approx(-0.6)
        assert insight.lean_mass_change == pytest.approx(0.3)

    def test_fewer_than_two_points_in_period(self, june):
        assert period_insights(june, dt.date(2025, 6, 20)) is None
        assert period_insights(june, dt.date(2025, 7, 1)) is None
        assert period_insights([], dt.date(2025, 6, 1)) is None

    def test_filter_by_date_accepts_datetimes(self, june):
        start = dt.datetime(2025, 6, 13, 0, 0, tzinfo=dt.timezone.utc)
        assert [m.date for m in filter_by_date(june, start)] == [dt.date(2025, 6, 20), dt.date(2025, 6, 13)]

    def test_standard_periods(self, daily_series, now):
        insights = standard_period_insights(daily_series, now)

        assert set(insights) == {"sevenDay", "thirtyDay", "ninetyDay"}
        seven = insights["sevenDay"]
        assert seven.total_measurements == 7
        assert seven.period_days == 6
        assert seven.weight_change == pytest.approx(0.6)
        assert insights["thirtyDay"].period_days == 19
        assert insights["ninetyDay"].total_measurements == 20

    def test_period_start(self, now):
        assert period_start(7, now) == dt.datetime(2025, 7, 13, 12, 0, tzinfo=dt.timezone.utc)

    def test_metric_period_changes(self, daily_series, now):
        changes = metric_period_changes(daily_series, Metric.WEIGHT, now)
        assert changes.seven_day == pytest.approx(0.6)
        assert changes.thirty_day == pytest.approx(1.9)
        assert metric_period_changes(daily_series[:1], Metric.WEIGHT, now) is None


class TestSummaries:
    def test_summary_lists_notable_changes(self):
        text = insights_summary(_insight(weight=-1.23, body_fat=0.05, lean_mass=0.4))
        assert text == "Over the last 7 days: lost 1.2 kg, gained 0.4 kg lean mass"

    def test_summary_body_fat(self):
        text = insights_summary(_insight(body_fat=-0.8, days=30))
        assert text == "Over the last 30 days: body fat decreased 0.8%"

    def test_summary_stable(self):
        assert insights_summary(_insight()) == "Over the last 7 days: measurements remained stable"
        assert insights_summary(None) == ""

    def test_period_summary_classes(self, daily_series, now):
        summary = period_summary(daily_series, period_start(30, now))

        assert summary.has_data
        assert summary.classes[Metric.WEIGHT] is ChangeClass.POSITIVE
        assert summary.classes[Metric.BODY_FAT] is ChangeClass.POSITIVE
        assert summary.classes[Metric.LEAN_MASS] is ChangeClass.POSITIVE
        assert summary.summary.startswith("Over the last 19 days: gained 1.9 kg")

    def test_period_summary_without_data(self, now):
        summary = period_summary([], period_start(30, now))
        assert not summary.has_data
        assert summary.insights is None


class TestTrendAnalysis:
    def test_trends_per_metric(self, daily_series, now):
        analysis = trend_analysis(daily_series, 30, now)

        assert analysis.has_data
        assert analysis.trends[Metric.WEIGHT] is SeriesTrend.INCREASING
        assert analysis.trends[Metric.BODY_FAT] is SeriesTrend.DECREASING
        assert analysis.analysis == "Weight increasing, Body fat decreasing, Lean mass increasing"

    def test_stable(self, make_measurement, now):
        flat = [make_measurement(now.date() - dt.timedelta(days=i)) for i in range(4)]
        analysis = trend_analysis(flat, 30, now)
        assert analysis.analysis == "All metrics remain stable"

    def test_needs_three_points(self, daily_series, now):
        analysis = trend_analysis(daily_series[:2], 30, now)
        assert not analysis.has_data
        assert analysis.trends is None


class TestGoalCards:
    def test_card_per_metric(self, daily_series, now):
        cards = {card.metric: card for card in goal_cards(daily_series, Goals(weight=70), now)}

        assert set(cards) == set(Metric)
        weight = cards[Metric.WEIGHT]
        assert weight.has_goal
        assert weight.current_value == pytest.approx(66.9)
        assert weight.progress == pytest.approx(38)
        assert weight.timeline.success
        assert weight.timeline.days_to_goal == 31
        assert weight.formatted.estimate == "~4 weeks"
        assert weight.status.status == "achievable"
        assert weight.changes.seven_day == pytest.approx(0.6)

        body_fat = cards[Metric.BODY_FAT]
        assert not body_fat.has_goal
        assert body_fat.timeline is None
        assert body_fat.timeline_message == "Set a goal to see timeline estimate"

    def test_failed_timeline_has_message(self, daily_series, now):
        cards = goal_cards(daily_series, Goals(weight=60), now)
        weight = next(c for c in cards if c.metric is Metric.WEIGHT)
        assert not weight.timeline.success
        assert weight.timeline_message == "Current trend goes in opposite direction from goal"
        assert weight.formatted is None

    def test_without_measurements(self, now):
        cards = goal_cards([], Goals(weight=70), now)
        weight = next(c for c in cards if c.metric is Metric.WEIGHT)
        assert weight.current_value is None
        assert weight.progress is None
        assert weight.timeline_message == "Need more measurement data for timeline estimation"
