from __future__ import annotations

# ruff: noqa: S101
import pytest
from fastapi.testclient import TestClient

from fakes import FakeLocationProvider, RecordingHandler, make_sequence
from weather_now import main
from weather_now.weather.location import PermissionStatus
from weather_now.weather.models import Loading
from weather_now.weather.service import PERMISSION_DENIED_MESSAGE
from weather_now.weather.theme import DEFAULT_THEME, RAIN_THEME, STORM_THEME


def _client(variant: str = "themed", **sequence_kwargs: object) -> TestClient:
    sequence, _, _ = make_sequence(**sequence_kwargs)  # type: ignore[arg-type]
    app = main.create_app(fetch_sequence=sequence, rate_limit_enabled=False, screen_variant=variant)
    return TestClient(app)


def test_state_is_idle_before_first_fetch() -> None:
    response = _client().get("/weather/")

    assert response.status_code == 200
    assert response.json() == {"state": {"status": "idle"}, "view": None}


def test_fetch_returns_ready_state_and_view() -> None:
    client = _client()

    response = client.post("/weather/fetch")

    assert response.status_code == 200
    body = response.json()
    assert body["state"]["status"] == "ready"
    assert body["state"]["snapshot"]["condition_main"] == "Rain"
    view = body["view"]
    assert view["location_label"] == "Lima, PE"
    assert view["temperature"] == 18
    assert view["wind_speed"] == 18
    assert view["wind_unit"] == "km/h"
    assert view["emoji"] == RAIN_THEME.emoji
    assert view["background_color"] == RAIN_THEME.background_color
    assert view["updated_at"] == "09:41"

    assert client.get("/weather/").json() == body


def test_refresh_after_ready() -> None:
    client = _client()
    client.post("/weather/fetch")

    response = client.post("/weather/fetch", params={"mode": "refresh"})

    assert response.status_code == 200
    assert response.json()["state"]["status"] == "ready"


def test_failed_fetch_is_reported_in_body() -> None:
    client = _client(provider=FakeLocationProvider(permission=PermissionStatus.DENIED))

    response = client.post("/weather/fetch")

    assert response.status_code == 200
    assert response.json() == {
        "state": {"status": "failed", "reason": PERMISSION_DENIED_MESSAGE, "kind": "permission_denied"},
        "view": None,
    }


def test_provider_error_message_reaches_client() -> None:
    client = _client(handler=RecordingHandler(status_code=500, json={"message": "server error"}))

    state = client.post("/weather/fetch").json()["state"]

    assert state == {"status": "failed", "reason": "server error", "kind": "network_failure"}


def test_invalid_mode_is_rejected() -> None:
    response = _client().post("/weather/fetch", params={"mode": "sideways"})
    assert response.status_code == 422


def test_simple_variant_view() -> None:
    view = _client(variant="simple").post("/weather/fetch").json()["view"]

    assert view["variant"] == "simple"
    assert view["wind_speed"] == 5
    assert view["wind_unit"] == "m/s"
    assert view["emoji"] == "🌧️"


class BusySequence:
    location_provider = FakeLocationProvider()
    is_busy = True
    state = Loading()

    async def fetch(self, mode: object) -> Loading:
        return self.state


def test_overlapping_fetch_returns_conflict() -> None:
    app = main.create_app(fetch_sequence=BusySequence(), rate_limit_enabled=False)  # type: ignore[arg-type]

    response = TestClient(app).post("/weather/fetch")

    assert response.status_code == 409
    assert "already in progress" in response.json()["detail"]


@pytest.mark.parametrize(
    ("condition", "expected"),
    [("Thunderstorm", STORM_THEME), ("rain", RAIN_THEME), ("Tornado", DEFAULT_THEME), (None, DEFAULT_THEME)],
)
def test_theme_endpoint(condition: str | None, expected: object) -> None:
    params = {"condition": condition} if condition is not None else {}

    response = _client().get("/weather/theme", params=params)

    assert response.status_code == 200
    assert response.json() == expected.model_dump()  # type: ignore[attr-defined]


def test_health_and_info() -> None:
    client = _client()

    assert client.get("/weather/health").json() == {"status": "healthy", "service": "weather-now"}
    info = client.get("/weather/info").json()
    assert info["location_provider"] == "FakeLocationProvider"
    assert info["screen_variant"] == "themed"
    assert info["fetch_in_progress"] is False
    assert client.get("/api").json()["fetch"] == "/weather/fetch"


class DenyingLimiter:
    max_requests = 30
    window_size = 60.0

    def __init__(self) -> None:
        self.calls = 0

    async def is_allowed(self) -> tuple[bool, int]:
        self.calls += 1
        return False, 60


def test_fetch_triggers_are_rate_limited() -> None:
    sequence, _, handler = make_sequence()
    limiter = DenyingLimiter()
    app = main.create_app(fetch_sequence=sequence, rate_limiter=limiter, rate_limit_enabled=True)  # type: ignore[arg-type]
    client = TestClient(app)

    response = client.post("/weather/fetch")

    assert response.status_code == 429
    assert response.headers["Retry-After"] == "60"
    assert handler.requests == []

    # Reads are not counted
    assert client.get("/weather/").status_code == 200
    assert limiter.calls == 1


def test_wrong_method_on_fetch_is_not_counted() -> None:
    sequence, _, _ = make_sequence()
    limiter = DenyingLimiter()
    app = main.create_app(fetch_sequence=sequence, rate_limiter=limiter, rate_limit_enabled=True)  # type: ignore[arg-type]

    response = TestClient(app).get("/weather/fetch")

    assert response.status_code == 405
    assert limiter.calls == 0


def test_overlapping_fetch_is_not_counted() -> None:
    limiter = DenyingLimiter()
    app = main.create_app(fetch_sequence=BusySequence(), rate_limiter=limiter, rate_limit_enabled=True)  # type: ignore[arg-type]

    response = TestClient(app).post("/weather/fetch")

    assert response.status_code == 409
    assert limiter.calls == 0


def test_lifespan_builds_sequence_from_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    sequence, _, _ = make_sequence()
    monkeypatch.setattr(main, "build_fetch_sequence", lambda: sequence)
    app = main.create_app(rate_limit_enabled=False)

    with TestClient(app) as client:
        assert app.state.fetch_sequence is sequence
        assert client.post("/weather/fetch").json()["state"]["status"] == "ready"

    assert app.state.fetch_sequence is None


def test_build_location_provider_rejects_unknown_kind() -> None:
    with pytest.raises(ValueError, match="Unknown location provider"):
        main.build_location_provider("satellite")


def test_build_location_provider_static() -> None:
    provider = main.build_location_provider("static")
    assert type(provider).__name__ == "StaticLocationProvider"


class ClosingLimiter:
    instances: list["ClosingLimiter"] = []

    def __init__(self) -> None:
        self.max_requests = 30
        self.window_size = 60.0
        self.closed = False
        ClosingLimiter.instances.append(self)

    async def close(self) -> None:
        self.closed = True


def test_lifespan_closes_default_rate_limiter(monkeypatch: pytest.MonkeyPatch) -> None:
    sequence, _, _ = make_sequence()
    monkeypatch.setattr(main, "build_fetch_sequence", lambda: sequence)
    monkeypatch.setattr(main, "RateLimiter", ClosingLimiter)
    ClosingLimiter.instances.clear()
    app = main.create_app(rate_limit_enabled=False)

    with TestClient(app):
        assert app.state.rate_limiter is ClosingLimiter.instances[0]
        assert app.state.rate_limiter.closed is False

    assert app.state.rate_limiter.closed is True


def test_lifespan_leaves_injected_rate_limiter_open() -> None:
    sequence, _, _ = make_sequence()
    limiter = ClosingLimiter()
    app = main.create_app(fetch_sequence=sequence, rate_limiter=limiter, rate_limit_enabled=False)  # type: ignore[arg-type]

    with TestClient(app):
        pass

    assert limiter.closed is False
