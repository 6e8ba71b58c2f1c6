"""API tests against an app backed by a temporary data file."""

import datetime as dt
import inspect
import json

import pytest
from fastapi.testclient import TestClient

from bodycomp.api.deps import get_app_settings, get_repository, get_store
from bodycomp.main import create_application
from bodycomp.storage.json_store import JsonDocumentStore
from bodycomp.storage.write_queue import WriteQueue

API = "/api/v1"


def _day(n):
    """ISO date n days before today (UTC); the API reads the real clock."""
    return (dt.datetime.now(dt.timezone.utc).date() - dt.timedelta(days=n)).isoformat()


def _measurement(date, weight=70.0, body_fat=20.0, lean_mass=50.0):
    return {"date": date, "weight": weight, "bodyFat": body_fat, "leanMass": lean_mass}


class TestDataDocument:
    def test_get_without_file_returns_default(self, client):
        response = client.get("/data")
        assert response.status_code == 200
        assert response.json() == {
            "measurements": [],
            "goals": {"weight": None, "bodyFat": None, "leanMass": None},
            "height": 175.0,
        }

    def test_post_then_get(self, client, settings):
        document = {
            "measurements": [
                _measurement("2025-06-13", weight=72.9),
                _measurement("2025-06-20", weight=72.8),
            ],
            "goals": {"weight": 70},
            "height": 180,
        }

        response = client.post("/data", json=document)
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

        data = client.get("/data").json()
        assert [m["date"] for m in data["measurements"]] == ["2025-06-20", "2025-06-13"]
        assert data["measurements"][0]["weightLbs"] == 160.5
        assert data["goals"]["weight"] == 70
        assert data["height"] == 180

        on_disk = json.loads(settings.data_file.read_text())
        assert on_disk["measurements"][0]["date"] == "2025-06-20"

    def test_post_invalid_document(self, client):
        response = client.post("/data", json={"measurements": [{"date": "2025-06-20", "weight": -1}]})
        assert response.status_code == 422

    def test_post_write_failure(self, settings):
        def failing_writer(path, document):
            raise OSError("read-only file system")

        app = create_application(settings)
        app.state.store = JsonDocumentStore(
            settings.data_file, queue=WriteQueue(settings.data_file, writer=failing_writer)
        )
        with TestClient(app) as client:
            response = client.post("/data", json={"measurements": [], "goals": {}, "height": 170})

            assert response.status_code == 500
            assert response.json() == {"status": "error", "message": "Failed to save data"}

            # Other mutations surface the same failure through the exception handler
            response = client.put(f"{API}/goals", json={"weight": 70})
            assert response.status_code == 500
            assert response.json()["status"] == "error"


class TestMeasurements:
    def test_crud(self, client):
        created = client.put(f"{API}/measurements", json=_measurement("2025-06-20", weight=72.8)).json()
        assert created["weightLbs"] == 160.5
        measurement_id = created["id"]

        replaced = client.put(f"{API}/measurements", json=_measurement("2025-06-20", weight=72.0)).json()
        assert replaced["id"] == measurement_id
        assert len(client.get(f"{API}/measurements").json()) == 1

        response = client.patch(f"{API}/measurements/{measurement_id}", json={"bodyFat": 17.5})
        assert response.status_code == 200
        assert response.json()["bodyFat"] == 17.5
        assert response.json()["weight"] == 72.0

        assert client.get(f"{API}/measurements/{measurement_id}").json()["bodyFat"] == 17.5
        assert client.get(f"{API}/measurements/latest").json()["id"] == measurement_id

        assert client.delete(f"{API}/measurements/{measurement_id}").status_code == 204
        assert client.get(f"{API}/measurements").json() == []
        assert client.get(f"{API}/measurements/latest").json() is None

    def test_not_found(self, client):
        assert client.get(f"{API}/measurements/nope").status_code == 404
        assert client.patch(f"{API}/measurements/nope", json={"weight": 70}).status_code == 404
        assert client.delete(f"{API}/measurements/nope").status_code == 404

    def test_invalid_payload(self, client):
        response = client.put(f"{API}/measurements", json=_measurement("2025-06-20", body_fat=120))
        assert response.status_code == 422

    def test_days_filter(self, client):
        client.put(f"{API}/measurements", json=_measurement(_day(1)))
        client.put(f"{API}/measurements", json=_measurement(_day(40)))

        assert len(client.get(f"{API}/measurements").json()) == 2
        assert len(client.get(f"{API}/measurements", params={"days": 30}).json()) == 1

    def test_mutations_are_visible_in_data_document(self, client):
        client.put(f"{API}/measurements", json=_measurement("2025-06-20"))
        client.put(f"{API}/measurements", json=_measurement("2025-06-13"))

        data = client.get("/data").json()
        assert [m["date"] for m in data["measurements"]] == ["2025-06-20", "2025-06-13"]


class TestGoalsAndProfile:
    def test_goals_merge(self, client):
        client.put(f"{API}/goals", json={"weight": 70})
        goals = client.put(f"{API}/goals", json={"bodyFat": 15}).json()
        assert goals == {"weight": 70.0, "bodyFat": 15.0, "leanMass": None}

        goals = client.put(f"{API}/goals", json={"weight": None}).json()
        assert goals["weight"] is None
        assert client.get(f"{API}/goals").json()["bodyFat"] == 15.0

    def test_profile(self, client):
        assert client.get(f"{API}/profile").json() == {"height": 175.0, "bmi": None, "bmiCategory": "--"}

        client.put(f"{API}/measurements", json=_measurement(_day(0), weight=90))
        profile = client.put(f"{API}/profile", json={"height": 180}).json()
        assert profile == {"height": 180.0, "bmi": 27.8, "bmiCategory": "Overweight"}

        assert client.put(f"{API}/profile", json={"height": 20}).status_code == 422


@pytest.fixture
def trending(client):
    """Weight rising 0.5 kg/day over the last ten days with a goal of 80 kg."""
    client.put(f"{API}/measurements", json=_measurement(_day(10), weight=70, body_fat=22, lean_mass=52))
    client.put(f"{API}/measurements", json=_measurement(_day(5), weight=72.5, body_fat=21, lean_mass=53))
    client.put(f"{API}/measurements", json=_measurement(_day(0), weight=75, body_fat=20, lean_mass=54))
    client.put(f"{API}/goals", json={"weight": 80})
    return client


class TestInsights:
    def test_timeline(self, trending):
        estimate = trending.get(f"{API}/insights/timeline", params={"metric": "weight"}).json()

        assert estimate["success"] is True
        assert estimate["daysToGoal"] == 10
        assert estimate["confidence"] == "high"
        assert estimate["achievable"] is True
        assert "reason" not in estimate

    def test_timeline_without_goal(self, trending):
        estimate = trending.get(f"{API}/insights/timeline", params={"metric": "bodyFat"}).json()
        assert estimate == {"success": False, "reason": "no_goal", "currentValue": 20.0}

    def test_timeline_invalid_metric(self, trending):
        assert trending.get(f"{API}/insights/timeline", params={"metric": "height"}).status_code == 422

    def test_timeline_summary(self, trending):
        body = trending.get(f"{API}/insights/timeline/summary").json()
        assert body == {"hasTimelines": True, "summaries": ["Weight: ~10 days (On track)"]}

    def test_timeline_summary_without_goals(self, client):
        assert client.get(f"{API}/insights/timeline/summary").json()["hasTimelines"] is False

    def test_regression(self, trending):
        body = trending.get(f"{API}/insights/regression", params={"metric": "leanMass", "window_days": 14}).json()

        assert body["metric"] == "leanMass"
        assert body["regression"]["slope"] == pytest.approx(0.2)
        assert body["regression"]["dataPointCount"] == 3
        assert body["regression"]["windowDays"] == 14
        assert 52 < body["weightedAverage"] < 54

    def test_regression_without_data(self, client):
        assert client.get(f"{API}/insights/regression").json()["regression"] is None

    def test_standard_periods(self, trending):
        body = trending.get(f"{API}/insights/periods").json()

        assert set(body) == {"sevenDay", "thirtyDay", "ninetyDay"}
        assert body["sevenDay"]["insights"]["weightChange"] == pytest.approx(2.5)
        thirty = body["thirtyDay"]
        assert thirty["insights"]["periodDays"] == 10
        assert thirty["insights"]["weightChange"] == pytest.approx(5)
        assert thirty["classes"] == {"weight": "positive", "bodyFat": "positive", "leanMass": "positive"}

    def test_custom_period(self, trending):
        body = trending.get(
            f"{API}/insights/periods", params={"start_date": _day(10), "end_date": _day(5)}
        ).json()
        assert body["custom"]["insights"]["weightChange"] == pytest.approx(2.5)

        body = trending.get(f"{API}/insights/periods", params={"start_date": _day(1)}).json()
        assert body["custom"]["hasData"] is False

    def test_bad_period_range(self, trending):
        params = {"start_date": _day(1), "end_date": _day(5)}
        assert trending.get(f"{API}/insights/periods", params=params).status_code == 400
        assert trending.get(f"{API}/insights/periods", params={"end_date": _day(1)}).status_code == 400

    def test_goal_cards(self, trending):
        cards = {card["metric"]: card for card in trending.get(f"{API}/insights/goals").json()}

        assert cards["weight"]["progress"] == pytest.approx(50)
        assert cards["weight"]["formatted"]["estimate"] == "~10 days"
        assert cards["bodyFat"]["hasGoal"] is False
        assert cards["bodyFat"]["timelineMessage"] == "Set a goal to see timeline estimate"

    def test_trends(self, trending):
        body = trending.get(f"{API}/insights/trends").json()
        assert body["trends"] == {"weight": "increasing", "bodyFat": "decreasing", "leanMass": "increasing"}

    def test_recommended_goals(self, trending):
        trending.put(f"{API}/profile", json={"height": 170})
        assert trending.get(f"{API}/insights/recommended-goals").json() == {
            "weight": 69.4,
            "bodyFat": None,
            "leanMass": 55.0,
        }


class TestHealthAndTools:
    def test_health(self, client):
        assert client.get("/").json()["status"] == "ok"
        assert client.get(f"{API}/health").json() == {"status": "ok"}
        ready = client.get(f"{API}/health/ready").json()
        assert ready["status"] == "ok"
        assert ready["writing"] is False

    def test_convert(self, client):
        body = client.get(f"{API}/tools/convert", params={"value": 100, "from_unit": "kg", "to_unit": "lbs"}).json()
        assert body["result"] == 220.46

        body = client.get(f"{API}/tools/convert", params={"value": 70, "from_unit": "in", "to_unit": "cm"}).json()
        assert body["result"] == 177.8

        response = client.get(f"{API}/tools/convert", params={"value": 1, "from_unit": "kg", "to_unit": "cm"})
        assert response.status_code == 400

    def test_bmi(self, client):
        body = client.get(f"{API}/tools/bmi", params={"weight_kg": 90, "height_cm": 180}).json()
        assert body["bmi"] == 27.8
        assert body["category"] == "Overweight"


class TestStoredDocumentSafety:
    def _write(self, settings, measurements):
        content = json.dumps({"measurements": measurements, "goals": {"weight": 70}, "height": 180})
        settings.data_file.write_text(content)
        return content

    def test_zero_body_fat_survives_mutations(self, client, settings):
        self._write(settings, [
            {"id": "a", "date": "2025-06-13", "weight": 72.9, "bodyFat": 0, "leanMass": 59.5},
            {"id": "b", "date": "2025-06-20", "weight": 72.8, "bodyFat": 18, "leanMass": 59.7},
        ])

        data = client.get("/data").json()
        assert [m["id"] for m in data["measurements"]] == ["b", "a"]
        assert data["height"] == 180

        response = client.put(f"{API}/measurements", json=_measurement("2025-06-27", body_fat=0))
        assert response.status_code == 200

        on_disk = json.loads(settings.data_file.read_text())
        assert [m["date"] for m in on_disk["measurements"]] == ["2025-06-27", "2025-06-20", "2025-06-13"]
        assert on_disk["goals"]["weight"] == 70
        assert on_disk["height"] == 180

    def test_invalid_records_are_never_overwritten(self, client, settings):
        content = self._write(settings, [
            {"id": "a", "date": "2025-06-13", "weight": -1, "bodyFat": 18, "leanMass": 59.5},
        ])

        assert client.get("/data").json() == json.loads(content)

        response = client.put(f"{API}/measurements", json=_measurement("2025-06-20"))
        assert response.status_code == 500
        assert response.json()["status"] == "error"
        assert client.put(f"{API}/goals", json={"weight": 65}).status_code == 500
        assert settings.data_file.read_text() == content

    def test_post_rejects_duplicate_dates(self, client, settings):
        document = {
            "measurements": [_measurement("2025-06-20"), _measurement("2025-06-20", weight=71)],
            "goals": {},
            "height": 175,
        }

        assert client.post("/data", json=document).status_code == 422
        assert not settings.data_file.exists()

    def test_dependencies_run_on_the_event_loop(self):
        for dependency in (get_store, get_repository, get_app_settings):
            assert inspect.iscoroutinefunction(dependency)
