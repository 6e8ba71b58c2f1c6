"""Application constants."""

# Unit conversion factors
KG_TO_LBS = 2.20462
CM_TO_INCHES = 0.393701
INCHES_TO_CM = 2.54

# Regression: recency weight w = exp(-days_ago / RECENCY_DECAY_DAYS)
RECENCY_DECAY_DAYS = 10.0

# Goal timeline
DEFAULT_TIMELINE_WINDOW_DAYS = 30
MIN_TREND_SLOPE = 0.001  # unit/day; below this the trend is too weak
ACHIEVABLE_MIN_SLOPE = 0.01  # unit/day
MAX_TIMELINE_DAYS = 1000
HIGH_CONFIDENCE_R2 = 0.7
MEDIUM_CONFIDENCE_R2 = 0.4

# Period insights (days)
INSIGHT_PERIODS = {
    "sevenDay": 7,
    "thirtyDay": 30,
    "ninetyDay": 90,
}

# Changes smaller than this are treated as no change
CHANGE_TOLERANCE = 0.1

# Relative change (%) below which a series counts as stable
STABLE_TREND_PCT = 1.0

# Persisted document defaults
DEFAULT_HEIGHT_CM = 175.0
