"""HTTP client for The Odds API v4 odds and scores endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from time import perf_counter
from typing import Any, Protocol

import httpx
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt

from daily_parlay.settings import Settings

H2H_MARKET = "h2h"
QUOTA_HEADERS = ("x-requests-last", "x-requests-used", "x-requests-remaining")


class OddsAPIError(RuntimeError):
    """Raised on Odds API failures."""


class RetryableStatusError(RuntimeError):
    """Raised for retryable status codes."""

    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        message = f"retryable status {response.status_code}"
        super().__init__(message)

    def retry_after_seconds(self) -> float | None:
        raw_value = self.response.headers.get("Retry-After")
        if not raw_value:
            return None
        try:
            return max(0.0, float(raw_value))
        except ValueError:
            try:
                date_value = parsedate_to_datetime(raw_value)
            except (TypeError, ValueError):
                return None
            now = datetime.now(UTC)
            return max(0.0, (date_value - now).total_seconds())


@dataclass(frozen=True)
class OddsResponse:
    """Response data and metadata from an API call."""

    data: Any
    status_code: int
    headers: dict[str, str]
    duration_ms: int
    retry_count: int


class OddsTransport(Protocol):
    """The two provider calls the tracker depends on."""

    def get_h2h_odds(self, *, sport_key: str, regions: str) -> OddsResponse: ...

    def get_scores(self, *, sport_key: str, days_from: int) -> OddsResponse: ...


def _wait_for_retry(retry_state) -> float:
    """Wait strategy for tenacity retries."""
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    if isinstance(exc, RetryableStatusError):
        retry_after = exc.retry_after_seconds()
        if retry_after is not None:
            return min(retry_after, 60.0)
    return min(2 ** (retry_state.attempt_number - 1), 30.0)


class OddsAPIClient:
    """Thin HTTP client around The Odds API v4.

    Retries are limited to 429/5xx responses and to ``odds_api_max_retries``
    extra attempts; the default of zero makes every call fail fast.
    """

    def __init__(self, settings: Settings, *, http: httpx.Client | None = None) -> None:
        self.settings = settings
        self._base_url = settings.odds_api_base_url.rstrip("/")
        self._http = http or httpx.Client(timeout=settings.odds_api_timeout_s)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> OddsAPIClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _request(self, *, path: str, params: dict[str, Any]) -> OddsResponse:
        api_key = str(self.settings.odds_api_key).strip()
        if not api_key:
            raise OddsAPIError("missing Odds API key; set ODDS_API_KEY")
        params_with_key = dict(params)
        params_with_key["apiKey"] = api_key
        url = f"{self._base_url}/{path.lstrip('/')}"
        retries = 0
        started = perf_counter()
        response: httpx.Response | None = None
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self.settings.odds_api_max_retries + 1),
                retry=retry_if_exception_type(RetryableStatusError),
                wait=_wait_for_retry,
                reraise=True,
            ):
                with attempt:
                    retries = attempt.retry_state.attempt_number - 1
                    response = self._http.get(url, params=params_with_key)
                    if response.status_code == 429 or 500 <= response.status_code <= 599:
                        raise RetryableStatusError(response)
                    response.raise_for_status()
        except RetryableStatusError as exc:
            raise OddsAPIError(
                f"{path} failed with status {exc.response.status_code} after {retries} retries"
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise OddsAPIError(
                f"{path} failed with status {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise OddsAPIError(f"{path} failed with transport error: {exc}") from exc
        if response is None:
            raise OddsAPIError(f"{path} failed without a response")

        try:
            data = response.json()
        except ValueError as exc:
            raise OddsAPIError(f"{path} returned a non-JSON body") from exc
        duration_ms = int((perf_counter() - started) * 1000)
        headers = {name: response.headers.get(name, "") for name in QUOTA_HEADERS}
        return OddsResponse(
            data=data,
            status_code=response.status_code,
            headers=headers,
            duration_ms=duration_ms,
            retry_count=retries,
        )

    def get_h2h_odds(self, *, sport_key: str, regions: str) -> OddsResponse:
        """Fetch head-to-head decimal odds for every upcoming event of a sport."""
        params: dict[str, Any] = {
            "regions": regions,
            "markets": H2H_MARKET,
            "oddsFormat": "decimal",
            "dateFormat": "iso",
        }
        return self._request(path=f"/sports/{sport_key}/odds", params=params)

    def get_scores(self, *, sport_key: str, days_from: int) -> OddsResponse:
        """Fetch live and recently completed scores for a sport."""
        if not 1 <= days_from <= 3:
            raise ValueError(f"days_from must be between 1 and 3, got {days_from}")
        params: dict[str, Any] = {"daysFrom": days_from, "dateFormat": "iso"}
        return self._request(path=f"/sports/{sport_key}/scores", params=params)
