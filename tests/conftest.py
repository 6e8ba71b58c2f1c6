"""Shared fixtures: a fixed clock, measurement builders and an app on a temp data file."""

import datetime as dt

import pytest
from fastapi.testclient import TestClient

from bodycomp.core.config import Settings
from bodycomp.main import create_application
from bodycomp.schemas.body import Measurement

NOW = dt.datetime(2025, 7, 20, 12, 0, tzinfo=dt.timezone.utc)
TODAY = NOW.date()


def days_ago(n: int) -> dt.date:
    return TODAY - dt.timedelta(days=n)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_measurement():
    def _make(day, weight=70.0, body_fat=20.0, lean_mass=50.0):
        if isinstance(day, str):
            day = dt.date.fromisoformat(day)
        return Measurement(date=day, weight=weight, body_fat=body_fat, lean_mass=lean_mass)

    return _make


@pytest.fixture
def daily_series(make_measurement):
    """20 daily measurements ending today, newest first.

    Weight +0.1 kg/day from 65, body fat -0.05 %/day from 10, lean mass +0.08 kg/day from 42.
    """
    start = days_ago(19)
    series = [
        make_measurement(
            start + dt.timedelta(days=i),
            weight=65 + i * 0.1,
            body_fat=10 - i * 0.05,
            lean_mass=42 + i * 0.08,
        )
        for i in range(20)
    ]
    series.reverse()
    return series


@pytest.fixture
def settings(tmp_path):
    return Settings(data_file=tmp_path / "data.json", _env_file=None)


@pytest.fixture
def client(settings):
    app = create_application(settings)
    with TestClient(app) as c:
        yield c
