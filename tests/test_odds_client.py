from __future__ import annotations

import httpx
import pytest

from daily_parlay.odds_client import OddsAPIClient, OddsAPIError
from daily_parlay.settings import Settings


def _client(handler, **overrides) -> OddsAPIClient:
    settings = Settings(_env_file=None, ODDS_API_KEY="odds-test", **overrides)
    return OddsAPIClient(settings, http=httpx.Client(transport=httpx.MockTransport(handler)))


def test_odds_client_raises_when_key_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ODDS_API_KEY", raising=False)
    monkeypatch.delenv("DAILY_PARLAY_ODDS_API_KEY", raising=False)
    settings = Settings(_env_file=None)
    with (
        OddsAPIClient(settings) as client,
        pytest.raises(OddsAPIError, match="missing Odds API key"),
    ):
        client.get_scores(sport_key="basketball_nba", days_from=3)


def test_get_h2h_odds_requests_decimal_h2h_and_returns_quota_headers() -> None:
    captured: dict[str, httpx.URL] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = request.url
        return httpx.Response(
            200,
            json=[{"id": "e1"}],
            headers={"x-requests-remaining": "499", "x-requests-used": "1"},
        )

    with _client(handler) as client:
        response = client.get_h2h_odds(sport_key="basketball_nba", regions="us")

    url = captured["url"]
    assert url.path == "/v4/sports/basketball_nba/odds"
    assert url.params["markets"] == "h2h"
    assert url.params["oddsFormat"] == "decimal"
    assert url.params["regions"] == "us"
    assert url.params["apiKey"] == "odds-test"
    assert response.data == [{"id": "e1"}]
    assert response.headers["x-requests-remaining"] == "499"
    assert response.headers["x-requests-used"] == "1"
    assert response.retry_count == 0


def test_get_scores_passes_days_from() -> None:
    captured: dict[str, httpx.URL] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = request.url
        return httpx.Response(200, json=[])

    with _client(handler) as client:
        response = client.get_scores(sport_key="basketball_nba", days_from=3)

    assert captured["url"].path == "/v4/sports/basketball_nba/scores"
    assert captured["url"].params["daysFrom"] == "3"
    assert response.data == []


def test_get_scores_rejects_out_of_range_days() -> None:
    with (
        _client(lambda request: httpx.Response(200, json=[])) as client,
        pytest.raises(ValueError, match="days_from"),
    ):
        client.get_scores(sport_key="basketball_nba", days_from=7)


def test_error_status_fails_fast_by_default() -> None:
    calls: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(503, json={"message": "unavailable"})

    with (
        _client(handler) as client,
        pytest.raises(OddsAPIError, match="status 503"),
    ):
        client.get_h2h_odds(sport_key="basketball_nba", regions="us")
    assert len(calls) == 1


def test_client_error_is_not_retried() -> None:
    calls: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(401, json={"message": "bad key"})

    with (
        _client(handler, odds_api_max_retries=2) as client,
        pytest.raises(OddsAPIError, match="status 401"),
    ):
        client.get_scores(sport_key="basketball_nba", days_from=3)
    assert len(calls) == 1


def test_retryable_status_uses_configured_retries() -> None:
    calls: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        if len(calls) == 1:
            return httpx.Response(429, headers={"Retry-After": "0"})
        return httpx.Response(200, json=[])

    with _client(handler, odds_api_max_retries=1) as client:
        response = client.get_scores(sport_key="basketball_nba", days_from=3)

    assert len(calls) == 2
    assert response.retry_count == 1


def test_transport_error_is_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with (
        _client(handler) as client,
        pytest.raises(OddsAPIError, match="transport error"),
    ):
        client.get_scores(sport_key="basketball_nba", days_from=3)
