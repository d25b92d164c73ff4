"""Decide whether today's metered odds fetch should be spent now."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from daily_parlay.models import TrackerState
from daily_parlay.time_utils import to_utc, today_key

DEFAULT_FETCH_WINDOW_HOURS = 4.0

REASON_ALREADY_FETCHED = "already_fetched_today"
REASON_NO_GAMES_TRACKED = "no_games_tracked_today"
REASON_IN_WINDOW = "within_pregame_window"
REASON_TOO_EARLY = "before_pregame_window"
REASON_STARTED = "first_game_started"


@dataclass(frozen=True)
class FetchDecision:
    """Outcome of the fetch gate with the reason it was reached."""

    allowed: bool
    reason: str
    hours_until_first_game: float | None = None


def first_game_start(state: TrackerState, now: datetime) -> datetime | None:
    """Return the earliest start among today's games that are not completed."""
    today = today_key(now)
    starts = [
        game.start_time
        for game in state.games.values()
        if game.date_key == today and not game.completed
    ]
    return min(starts) if starts else None


def hours_until_first_game(state: TrackerState, now: datetime) -> float | None:
    first_start = first_game_start(state, now)
    if first_start is None:
        return None
    return (to_utc(first_start) - to_utc(now)).total_seconds() / 3600.0


def decide_fetch(
    state: TrackerState,
    now: datetime,
    window_hours: float = DEFAULT_FETCH_WINDOW_HOURS,
) -> FetchDecision:
    if state.odds_fetched_on(today_key(now)):
        return FetchDecision(allowed=False, reason=REASON_ALREADY_FETCHED)
    hours = hours_until_first_game(state, now)
    if hours is None:
        return FetchDecision(allowed=True, reason=REASON_NO_GAMES_TRACKED)
    if hours <= 0:
        return FetchDecision(allowed=False, reason=REASON_STARTED, hours_until_first_game=hours)
    if hours > window_hours:
        return FetchDecision(allowed=False, reason=REASON_TOO_EARLY, hours_until_first_game=hours)
    return FetchDecision(allowed=True, reason=REASON_IN_WINDOW, hours_until_first_game=hours)


def should_fetch_odds(
    state: TrackerState,
    now: datetime,
    window_hours: float = DEFAULT_FETCH_WINDOW_HOURS,
) -> bool:
    """Return True when an odds fetch is worth its credits right now.

    At most one fetch per UTC day. With no open games known for today the
    fetch is exploratory; otherwise it is only allowed in the (0, window]
    hours before the first tip-off.
    """
    return decide_fetch(state, now, window_hours).allowed
