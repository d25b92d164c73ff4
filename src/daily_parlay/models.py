"""Tracked games, derived daily parlays, and the persisted tracker state."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from daily_parlay.errors import MalformedPayloadError
from daily_parlay.time_utils import date_key, iso_z, parse_iso_z
from daily_parlay.util.parsing import safe_int, to_price


class ParlayStatus(StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class BestPrice:
    """Selected head-to-head price for one team."""

    price: float
    bookmaker: str


@dataclass(frozen=True)
class Game:
    """One tracked event.

    Identity and pregame odds are fixed when the game is first seen; only the
    completion fields change, and only once (see ``complete``).
    """

    id: str
    home_team: str
    away_team: str
    start_time: datetime
    date_key: str
    home_odds: float | None = None
    away_odds: float | None = None
    home_bookmaker: str | None = None
    away_bookmaker: str | None = None
    completed: bool = False
    winner: str | None = None
    home_score: int | None = None
    away_score: int | None = None

    @classmethod
    def scheduled(
        cls,
        *,
        game_id: str,
        home_team: str,
        away_team: str,
        start_time: datetime,
        home_price: BestPrice | None,
        away_price: BestPrice | None,
    ) -> Game:
        return cls(
            id=game_id,
            home_team=home_team,
            away_team=away_team,
            start_time=start_time,
            date_key=date_key(start_time),
            home_odds=home_price.price if home_price else None,
            away_odds=away_price.price if away_price else None,
            home_bookmaker=home_price.bookmaker if home_price else None,
            away_bookmaker=away_price.bookmaker if away_price else None,
        )

    def complete(self, *, home_score: int, away_score: int) -> Game:
        """Return the completed copy of this game with its winner set."""
        if self.completed:
            return self
        winner = self.home_team if home_score > away_score else self.away_team
        return replace(
            self,
            completed=True,
            winner=winner,
            home_score=home_score,
            away_score=away_score,
        )

    def winning_odds(self) -> float | None:
        if not self.winner:
            return None
        return self.home_odds if self.winner == self.home_team else self.away_odds

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "homeTeam": self.home_team,
            "awayTeam": self.away_team,
            "startTime": iso_z(self.start_time),
            "dateKey": self.date_key,
            "homeOdds": self.home_odds,
            "awayOdds": self.away_odds,
            "homeBookmaker": self.home_bookmaker,
            "awayBookmaker": self.away_bookmaker,
            "completed": self.completed,
            "winner": self.winner,
            "homeScore": self.home_score,
            "awayScore": self.away_score,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Game:
        start_time = parse_iso_z(str(payload.get("startTime", "")))
        if start_time is None:
            raise MalformedPayloadError(f"game {payload.get('id')!r} has invalid startTime")
        return cls(
            id=str(payload["id"]),
            home_team=str(payload["homeTeam"]),
            away_team=str(payload["awayTeam"]),
            start_time=start_time,
            date_key=str(payload.get("dateKey") or date_key(start_time)),
            home_odds=to_price(payload.get("homeOdds")),
            away_odds=to_price(payload.get("awayOdds")),
            home_bookmaker=payload.get("homeBookmaker"),
            away_bookmaker=payload.get("awayBookmaker"),
            completed=bool(payload.get("completed", False)),
            winner=payload.get("winner") or None,
            home_score=safe_int(payload.get("homeScore")),
            away_score=safe_int(payload.get("awayScore")),
        )


@dataclass(frozen=True)
class DailyParlay:
    """Parlay economics for one date, derived from the games on that date."""

    total_games: int
    completed_games: int
    all_completed: bool
    total_odds: float | None
    payout: float | None
    status: ParlayStatus

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalGames": self.total_games,
            "completedGames": self.completed_games,
            "allCompleted": self.all_completed,
            "totalOdds": self.total_odds,
            "payout": self.payout,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> DailyParlay:
        return cls(
            total_games=safe_int(payload.get("totalGames")) or 0,
            completed_games=safe_int(payload.get("completedGames")) or 0,
            all_completed=bool(payload.get("allCompleted", False)),
            total_odds=to_price(payload.get("totalOdds")),
            payout=to_price(payload.get("payout")),
            status=ParlayStatus(payload.get("status", ParlayStatus.PENDING)),
        )


def _section(payload: dict[str, Any], key: str) -> dict[str, Any]:
    # Only a missing key or null defaults to empty; any other non-object is invalid.
    value = payload.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise MalformedPayloadError(f"state {key} must be an object")
    return value


def _fetched_at(value: Any) -> str:
    # Older state files stored epoch milliseconds.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return iso_z(datetime.fromtimestamp(value / 1000.0, UTC))
    return str(value)


@dataclass(frozen=True)
class TrackerState:
    """Complete persisted state: game ledger, fetch ledger, parlays, metering."""

    games: dict[str, Game] = field(default_factory=dict)
    odds_fetched_dates: dict[str, str] = field(default_factory=dict)
    daily_parlays: dict[str, DailyParlay] = field(default_factory=dict)
    last_update: str | None = None
    credits_remaining: int | None = None
    credits_used: int = 0

    def odds_fetched_on(self, day_key: str) -> bool:
        return day_key in self.odds_fetched_dates

    def to_dict(self) -> dict[str, Any]:
        return {
            "games": {game_id: game.to_dict() for game_id, game in self.games.items()},
            "dailyParlays": {
                day: parlay.to_dict() for day, parlay in sorted(self.daily_parlays.items())
            },
            "oddsFetchedDates": dict(sorted(self.odds_fetched_dates.items())),
            "lastUpdate": self.last_update,
            "creditsRemaining": self.credits_remaining,
            "creditsUsed": self.credits_used,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> TrackerState:
        raw_games = _section(payload, "games")
        raw_parlays = _section(payload, "dailyParlays")
        raw_fetched = _section(payload, "oddsFetchedDates")
        return cls(
            games={str(key): Game.from_dict(value) for key, value in raw_games.items()},
            odds_fetched_dates={str(key): _fetched_at(value) for key, value in raw_fetched.items()},
            daily_parlays={
                str(key): DailyParlay.from_dict(value) for key, value in raw_parlays.items()
            },
            last_update=payload.get("lastUpdate"),
            credits_remaining=safe_int(payload.get("creditsRemaining")),
            credits_used=safe_int(payload.get("creditsUsed")) or 0,
        )
