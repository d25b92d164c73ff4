"""Head-to-head price selection across bookmaker quotes."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from daily_parlay.models import BestPrice
from daily_parlay.util.parsing import to_price

H2H_MARKET = "h2h"
DEFAULT_PREFERRED_BOOKMAKERS: tuple[str, ...] = ("draftkings", "fanduel", "betmgm")


def _h2h_price(bookmaker: dict[str, Any], team_name: str) -> BestPrice | None:
    markets = bookmaker.get("markets") or []
    market = next(
        (m for m in markets if isinstance(m, dict) and m.get("key") == H2H_MARKET),
        None,
    )
    if market is None:
        return None
    for outcome in market.get("outcomes") or []:
        if not isinstance(outcome, dict) or outcome.get("name") != team_name:
            continue
        price = to_price(outcome.get("price"))
        if price is None:
            return None
        title = str(bookmaker.get("title") or bookmaker.get("key") or "")
        return BestPrice(price=price, bookmaker=title)
    return None


def select_best_price(
    bookmakers: Sequence[dict[str, Any]],
    team_name: str,
    preferred: Sequence[str] = DEFAULT_PREFERRED_BOOKMAKERS,
) -> BestPrice | None:
    """Pick the price to record for ``team_name``.

    Preferred bookmakers are tried in priority order and the first one quoting
    the team wins outright, whatever the other books offer. Only when none of
    them quotes the team are the remaining bookmakers scanned in payload order.
    """
    books = [book for book in bookmakers if isinstance(book, dict)]
    for key in preferred:
        book = next((b for b in books if b.get("key") == key), None)
        if book is None:
            continue
        price = _h2h_price(book, team_name)
        if price is not None:
            return price
    for book in books:
        price = _h2h_price(book, team_name)
        if price is not None:
            return price
    return None
