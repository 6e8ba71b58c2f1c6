"""Shared enums for models and API."""

from enum import Enum


class Metric(str, Enum):
    """A tracked body-composition metric. Values match the persisted JSON keys."""

    WEIGHT = "weight"  # kg
    BODY_FAT = "bodyFat"  # %
    LEAN_MASS = "leanMass"  # kg

    @property
    def attr(self) -> str:
        """Attribute name on the Measurement model."""
        return _METRIC_ATTRS[self]

    @property
    def lower_is_better(self) -> bool:
        return self is Metric.BODY_FAT

    @property
    def label(self) -> str:
        return _METRIC_LABELS[self]

    @property
    def unit(self) -> str:
        return "%" if self is Metric.BODY_FAT else "kg"


_METRIC_ATTRS = {
    Metric.WEIGHT: "weight",
    Metric.BODY_FAT: "body_fat",
    Metric.LEAN_MASS: "lean_mass",
}

_METRIC_LABELS = {
    Metric.WEIGHT: "Weight",
    Metric.BODY_FAT: "Body Fat",
    Metric.LEAN_MASS: "Lean Mass",
}


class Confidence(str, Enum):
    """Qualitative confidence bucket derived from regression R²."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TimelineReason(str, Enum):
    """Why a goal timeline could not be estimated."""

    INSUFFICIENT_DATA = "insufficient_data"
    NO_GOAL = "no_goal"
    GOAL_ACHIEVED = "goal_achieved"
    TREND_TOO_WEAK = "trend_too_weak"
    INVALID_TIMELINE = "invalid_timeline"  # trend points away from the goal
    TIMELINE_TOO_LONG = "timeline_too_long"


class ChangeClass(str, Enum):
    """Whether a change is good, bad or negligible for the metric."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    NEUTRAL = "neutral"


class SeriesTrend(str, Enum):
    """Direction of a metric over a whole period."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"
