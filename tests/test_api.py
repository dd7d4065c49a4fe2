"""Tests for API routes."""

from datetime import date, datetime, timedelta

import pytest
from conftest import FakeAudioPlayer, FakeNotifier, FakeTicker
from fastapi.testclient import TestClient

from hilal import __version__
from hilal.api.app import create_app
from hilal.api.routes import format_hijri_date, format_uptime, get_hijri_date
from hilal.config import AppConfig
from hilal.domain.models import CalculationMethod, PrayerName, PrayerSettings


@pytest.fixture
def client(makkah_settings: PrayerSettings, ticker: FakeTicker, tmp_path):
    """Client with a fully initialized app and fake sinks."""
    app = create_app(
        config=AppConfig(audio_dir=tmp_path, timezone="Asia/Riyadh"),
        settings=makkah_settings,
        ticker=ticker,
        notifier=FakeNotifier(),
        audio_player=FakeAudioPlayer(),
    )
    with TestClient(app) as client:
        yield client


class TestHealthEndpoint:
    """Health check endpoint tests."""

    def test_health_check(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": __version__}


class TestStatus:
    def test_status(self, client: TestClient, ticker: FakeTicker) -> None:
        """The lifespan starts the scheduler."""
        response = client.get("/api/status")
        assert response.status_code == 200
        data = response.json()
        assert data["scheduler_running"] is True
        assert data["schedule_recomputes"] >= 1
        assert data["audio_player"] == "FakeAudioPlayer"
        assert data["muezzin"] == "makkah"
        assert ticker.running

    def test_current(self, client: TestClient) -> None:
        response = client.get("/api/current")
        assert response.status_code == 200
        data = response.json()
        assert data["location"]["timezone"] == "Asia/Riyadh"
        assert data["calculation"]["method"] == "UmmAlQura"
        assert data["calculation"]["shafaq"] == "general"
        assert data["next_prayer"] in [p.value for p in PrayerName]
        assert len(data["countdown"]) == 8
        assert data["is_adhan_playing"] is False


class TestTimes:
    """Prayer times endpoints."""

    def test_today(self, client: TestClient) -> None:
        response = client.get("/api/times/today")
        assert response.status_code == 200
        data = response.json()
        assert [p["name"] for p in data["prayers"]] == [p.value for p in PrayerName]
        sunrise = next(p for p in data["prayers"] if p["name"] == "sunrise")
        assert sunrise["has_adhan"] is False

    def test_by_date(self, client: TestClient) -> None:
        response = client.get("/api/times/2024-03-20")
        assert response.status_code == 200
        data = response.json()
        assert data["date"] == "2024-03-20"
        assert data["hijri_date"] == "10 Ramadan 1445"
        times = {p["name"]: p["time"] for p in data["prayers"]}
        assert times["dhuhr"] in ("12:27", "12:28", "12:29")

    def test_invalid_date(self, client: TestClient) -> None:
        response = client.get("/api/times/not-a-date")
        assert response.status_code == 422

    def test_week(self, client: TestClient) -> None:
        response = client.get("/api/times/week")
        assert response.status_code == 200
        assert len(response.json()) == 7

    def test_range_limit(self, client: TestClient) -> None:
        assert client.get("/api/times/week", params={"days": 3}).status_code == 200
        assert client.get("/api/times/week", params={"days": 400}).status_code == 422


class TestActions:
    def test_restart_scheduler(self, client: TestClient) -> None:
        response = client.post("/api/scheduler/restart")
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert "fajr" in data["data"]

    def test_stop_audio(self, client: TestClient) -> None:
        response = client.post("/api/audio/stop")
        assert response.status_code == 200
        assert response.json()["success"] is True


class TestUtility:
    def test_methods(self, client: TestClient) -> None:
        response = client.get("/api/methods")
        assert response.status_code == 200
        methods = {m["value"]: m for m in response.json()}
        assert set(methods) == {m.value for m in CalculationMethod}
        assert methods["UmmAlQura"]["isha_interval"] == 90
        assert methods["Tehran"]["maghrib_angle"] == 4.5
        assert methods["Egyptian"]["recommended_rule"] == "MiddleOfTheNight"

    def test_prayers(self, client: TestClient) -> None:
        response = client.get("/api/prayers")
        assert response.status_code == 200
        assert len(response.json()) == 6


class TestHelpers:
    """Display helpers."""

    def test_hijri_date(self) -> None:
        assert get_hijri_date(date(2024, 3, 20)) == (1445, 9, 10)
        assert format_hijri_date(date(2024, 3, 20)) == "10 Ramadan 1445"

    def test_hijri_new_year(self) -> None:
        # Tabular 1 Muharram 1446 is 8 July 2024, a day after the sighted date
        year, month, _ = get_hijri_date(date(2024, 7, 8))
        assert (year, month) == (1446, 1)

    def test_uptime(self) -> None:
        start = datetime(2024, 3, 20, 10, 0)
        assert format_uptime(start, start + timedelta(hours=26, seconds=5)) == "26:00:05"
        assert format_uptime(start, start - timedelta(seconds=1)) == "00:00:00"
