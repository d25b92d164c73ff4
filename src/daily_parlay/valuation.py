"""Per-date parlay valuation, recomputed in full from the game ledger."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

from daily_parlay.models import DailyParlay, Game, ParlayStatus

DEFAULT_DAILY_STAKE = 0.10


def value_parlay(games: list[Game], *, stake: float = DEFAULT_DAILY_STAKE) -> DailyParlay:
    """Value one date's parlay from the games scheduled on it."""
    decided = [game for game in games if game.completed and game.winner]
    all_completed = all(game.completed for game in games)

    total_odds = 1.0
    odds_complete = True
    for game in decided:
        price = game.winning_odds()
        if price is None:
            odds_complete = False
            continue
        total_odds *= price

    priced = odds_complete and len(decided) > 0
    if not decided:
        status = ParlayStatus.PENDING
    elif all_completed:
        status = ParlayStatus.COMPLETED
    else:
        status = ParlayStatus.IN_PROGRESS
    return DailyParlay(
        total_games=len(games),
        completed_games=len(decided),
        all_completed=all_completed,
        total_odds=total_odds if priced else None,
        payout=stake * total_odds if priced else None,
        status=status,
    )


def recompute_daily_parlays(
    games: Iterable[Game], *, stake: float = DEFAULT_DAILY_STAKE
) -> dict[str, DailyParlay]:
    """Group games by date key and value every date's parlay."""
    by_date: dict[str, list[Game]] = defaultdict(list)
    for game in games:
        by_date[game.date_key].append(game)
    return {day: value_parlay(day_games, stake=stake) for day, day_games in sorted(by_date.items())}
