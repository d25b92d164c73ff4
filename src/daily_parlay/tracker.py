"""One tracker update: gate, odds, scores, valuation."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from daily_parlay.errors import DailyParlayError
from daily_parlay.fetch_gate import FetchDecision, decide_fetch
from daily_parlay.ledger import ingest_odds_payload, ingest_scores_payload, record_quota
from daily_parlay.models import TrackerState
from daily_parlay.odds_client import OddsAPIError, OddsTransport
from daily_parlay.settings import Settings
from daily_parlay.time_utils import iso_z
from daily_parlay.valuation import recompute_daily_parlays


class PartialUpdateError(DailyParlayError):
    """Raised when the scores step fails after odds were already ingested.

    ``state`` holds the ledger with the odds fetch applied; it must be saved
    so the day's fetch is not spent twice.
    """

    def __init__(self, message: str, *, state: TrackerState) -> None:
        super().__init__(message)
        self.state = state


@dataclass(frozen=True)
class UpdateReport:
    """New state plus what happened while producing it."""

    state: TrackerState
    decision: FetchDecision
    odds_fetched: bool
    odds_events: int
    new_games: int
    score_events: int
    newly_completed: int
    score_errors: tuple[str, ...] = ()


def _revalue(state: TrackerState, settings: Settings) -> TrackerState:
    return replace(
        state,
        daily_parlays=recompute_daily_parlays(state.games.values(), stake=settings.daily_stake),
    )


def run_update(
    state: TrackerState,
    transport: OddsTransport,
    settings: Settings,
    *,
    now: datetime,
    force_odds: bool = False,
) -> UpdateReport:
    """Run one update pass and return the state to persist.

    A failing odds call propagates with nothing to save. A failing scores
    call after a successful odds ingest raises ``PartialUpdateError`` carrying
    the odds-ingested state.
    """
    decision = decide_fetch(state, now, settings.fetch_window_hours)
    odds_fetched = force_odds or decision.allowed
    odds_events = 0
    new_games = 0
    if odds_fetched:
        odds = transport.get_h2h_odds(sport_key=settings.sport_key, regions=settings.regions)
        state = record_quota(state, odds.headers)
        ingested = ingest_odds_payload(
            state,
            odds.data,
            now=now,
            preferred=settings.preferred_bookmaker_keys(),
        )
        state = ingested.state
        odds_events = ingested.events_seen
        new_games = ingested.new_games

    try:
        scores = transport.get_scores(
            sport_key=settings.sport_key, days_from=settings.scores_days_from
        )
        state = record_quota(state, scores.headers)
        completed = ingest_scores_payload(state, scores.data)
    except (OddsAPIError, DailyParlayError) as exc:
        if not odds_fetched:
            raise
        raise PartialUpdateError(str(exc), state=_revalue(state, settings)) from exc

    state = replace(_revalue(completed.state, settings), last_update=iso_z(now))
    return UpdateReport(
        state=state,
        decision=decision,
        odds_fetched=odds_fetched,
        odds_events=odds_events,
        new_games=new_games,
        score_events=completed.events_seen,
        newly_completed=completed.newly_completed,
        score_errors=completed.errors,
    )
