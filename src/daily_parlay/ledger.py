"""Merge provider odds and score payloads into the tracked game ledger."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from daily_parlay.errors import MalformedPayloadError, ScoreParseError, TiedScoreError
from daily_parlay.models import Game, TrackerState
from daily_parlay.quotes import DEFAULT_PREFERRED_BOOKMAKERS, select_best_price
from daily_parlay.time_utils import iso_z, parse_iso_z, today_key
from daily_parlay.util.parsing import safe_int, strict_int


@dataclass(frozen=True)
class OddsIngestResult:
    state: TrackerState
    events_seen: int
    new_games: int


@dataclass(frozen=True)
class ScoresIngestResult:
    state: TrackerState
    events_seen: int
    newly_completed: int
    errors: tuple[str, ...] = ()


def _expect_dict(value: Any, context: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise MalformedPayloadError(f"{context} must be an object")
    return value


def _expect_list(value: Any, context: str) -> list[Any]:
    if not isinstance(value, list):
        raise MalformedPayloadError(f"{context} must be a list")
    return value


def _expect_str(event: dict[str, Any], key: str, context: str) -> str:
    value = event.get(key)
    if not isinstance(value, str) or not value.strip():
        raise MalformedPayloadError(f"{context}.{key} must be a non-empty string")
    return value


def _game_from_odds_event(event: dict[str, Any], preferred: Sequence[str]) -> Game:
    game_id = _expect_str(event, "id", "odds_event")
    home_team = _expect_str(event, "home_team", "odds_event")
    away_team = _expect_str(event, "away_team", "odds_event")
    start_time = parse_iso_z(_expect_str(event, "commence_time", "odds_event"))
    if start_time is None:
        raise MalformedPayloadError(f"odds_event {game_id} has invalid commence_time")
    bookmakers = _expect_list(event.get("bookmakers", []), "odds_event.bookmakers")
    return Game.scheduled(
        game_id=game_id,
        home_team=home_team,
        away_team=away_team,
        start_time=start_time,
        home_price=select_best_price(bookmakers, home_team, preferred),
        away_price=select_best_price(bookmakers, away_team, preferred),
    )


def ingest_odds_payload(
    state: TrackerState,
    events: Any,
    *,
    now: datetime,
    preferred: Sequence[str] = DEFAULT_PREFERRED_BOOKMAKERS,
) -> OddsIngestResult:
    """Add unseen events as new games and consume today's odds fetch.

    Games already in the ledger keep the odds recorded when they were first
    seen. Today is marked as fetched even if the payload adds nothing.
    """
    rows = _expect_list(events, "odds_payload")
    games = dict(state.games)
    new_games = 0
    for raw_event in rows:
        event = _expect_dict(raw_event, "odds_event")
        game_id = _expect_str(event, "id", "odds_event")
        if game_id in games:
            continue
        games[game_id] = _game_from_odds_event(event, preferred)
        new_games += 1
    fetched = dict(state.odds_fetched_dates)
    fetched[today_key(now)] = iso_z(now)
    return OddsIngestResult(
        state=replace(state, games=games, odds_fetched_dates=fetched),
        events_seen=len(rows),
        new_games=new_games,
    )


def _parse_score(raw: Any, *, game_id: str, team: str) -> int:
    parsed = strict_int(raw)
    if parsed is None:
        raise ScoreParseError(f"game {game_id}: score for {team} is not an integer: {raw!r}")
    return parsed


def _find_score(scores: list[Any], team: str) -> Any | None:
    for entry in scores:
        if isinstance(entry, dict) and entry.get("name") == team:
            return entry
    return None


def _completed_game(game: Game, event: dict[str, Any]) -> Game | None:
    if event.get("completed") is not True:
        return None
    scores = event.get("scores")
    if not isinstance(scores, list) or len(scores) < 2:
        return None
    home_entry = _find_score(scores, game.home_team)
    away_entry = _find_score(scores, game.away_team)
    if home_entry is None or away_entry is None:
        return None
    home_score = _parse_score(home_entry.get("score"), game_id=game.id, team=game.home_team)
    away_score = _parse_score(away_entry.get("score"), game_id=game.id, team=game.away_team)
    if home_score == away_score:
        raise TiedScoreError(
            f"game {game.id}: final score tied {home_score}-{away_score}; no winner to record"
        )
    return game.complete(home_score=home_score, away_score=away_score)


def ingest_scores_payload(state: TrackerState, events: Any) -> ScoresIngestResult:
    """Complete tracked games that the scores payload reports as final.

    A game is completed only when the event is flagged completed and both
    team names match a score entry; anything less leaves it pending for a
    later run. Games already completed are never changed. A tied or
    unparseable final score keeps that game pending and is reported in
    ``errors``; the rest of the payload is still applied.
    """
    rows = _expect_list(events, "scores_payload")
    games = dict(state.games)
    newly_completed = 0
    errors: list[str] = []
    for raw_event in rows:
        event = _expect_dict(raw_event, "scores_event")
        game = games.get(str(event.get("id", "")))
        if game is None or game.completed:
            continue
        try:
            updated = _completed_game(game, event)
        except (ScoreParseError, TiedScoreError) as exc:
            errors.append(str(exc))
            continue
        if updated is None:
            continue
        games[game.id] = updated
        newly_completed += 1
    return ScoresIngestResult(
        state=replace(state, games=games),
        events_seen=len(rows),
        newly_completed=newly_completed,
        errors=tuple(errors),
    )


def record_quota(state: TrackerState, headers: Mapping[str, str]) -> TrackerState:
    """Overwrite the advisory credit counters from provider response headers."""
    remaining = safe_int(headers.get("x-requests-remaining"))
    used = safe_int(headers.get("x-requests-used"))
    changes: dict[str, Any] = {}
    if remaining is not None:
        changes["credits_remaining"] = remaining
    if used is not None:
        changes["credits_used"] = used
    return replace(state, **changes) if changes else state
