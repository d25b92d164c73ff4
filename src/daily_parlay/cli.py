"""CLI entrypoint for daily-parlay."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from daily_parlay.errors import DailyParlayError
from daily_parlay.fetch_gate import decide_fetch
from daily_parlay.models import TrackerState
from daily_parlay.odds_client import OddsAPIClient, OddsAPIError
from daily_parlay.settings import Settings
from daily_parlay.storage import StateStore
from daily_parlay.time_utils import iso_z, utc_now
from daily_parlay.tracker import PartialUpdateError, run_update


def _format_optional(value: float | None, digits: int = 4) -> str:
    if value is None:
        return ""
    return f"{value:.{digits}f}"


def _store(args: argparse.Namespace, settings: Settings) -> StateStore:
    return StateStore(Path(args.data_file or settings.data_file))


def _print_parlays(state: TrackerState, *, day: str = "") -> None:
    days = [day] if day else sorted(state.daily_parlays)
    if not days or (day and day not in state.daily_parlays):
        print("no parlays")
        return
    for key in days:
        parlay = state.daily_parlays[key]
        print(
            "date={} status={} games={}/{} total_odds={} payout={}".format(
                key,
                parlay.status.value,
                parlay.completed_games,
                parlay.total_games,
                _format_optional(parlay.total_odds),
                _format_optional(parlay.payout),
            )
        )


def _cmd_update(args: argparse.Namespace) -> int:
    settings = Settings()
    store = _store(args, settings)
    state = store.load()
    now = utc_now()
    print(f"time={iso_z(now)}")

    with OddsAPIClient(settings) as client:
        try:
            report = run_update(state, client, settings, now=now, force_odds=args.force_odds)
        except PartialUpdateError as exc:
            store.save(exc.state)
            print(f"saved={store.path} partial=true")
            raise

    decision = report.decision
    print(
        f"should_fetch_odds={str(decision.allowed).lower()} reason={decision.reason} "
        f"hours_until_first_game={_format_optional(decision.hours_until_first_game, 2)}"
    )
    if report.odds_fetched:
        print(f"odds_events={report.odds_events} new_games={report.new_games}")
    print(f"score_events={report.score_events} newly_completed={report.newly_completed}")
    print(
        "credits_remaining={} credits_used={}".format(
            "" if report.state.credits_remaining is None else report.state.credits_remaining,
            report.state.credits_used,
        )
    )
    store.save(report.state)
    print(f"saved={store.path}")
    for message in report.score_errors:
        print(f"error: {message}", file=sys.stderr)
    return 2 if report.score_errors else 0


def _cmd_status(args: argparse.Namespace) -> int:
    settings = Settings()
    state = _store(args, settings).load()
    if args.json_output:
        payload = {day: parlay.to_dict() for day, parlay in sorted(state.daily_parlays.items())}
        if args.date:
            payload = {args.date: payload[args.date]} if args.date in payload else {}
        print(json.dumps(payload, sort_keys=True, indent=2))
        return 0
    print(f"last_update={state.last_update or ''} games={len(state.games)}")
    _print_parlays(state, day=args.date)
    return 0


def _cmd_gate(args: argparse.Namespace) -> int:
    settings = Settings()
    state = _store(args, settings).load()
    decision = decide_fetch(state, utc_now(), settings.fetch_window_hours)
    print(
        f"should_fetch_odds={str(decision.allowed).lower()} reason={decision.reason} "
        f"hours_until_first_game={_format_optional(decision.hours_until_first_game, 2)}"
    )
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="daily-parlay")
    subparsers = parser.add_subparsers(dest="command")

    update = subparsers.add_parser(
        "update", help="Fetch odds when due, fetch scores, and revalue parlays"
    )
    update.set_defaults(func=_cmd_update)
    update.add_argument("--data-file", default="")
    update.add_argument(
        "--force-odds",
        action="store_true",
        help="Fetch odds even when the fetch gate says no",
    )

    status = subparsers.add_parser("status", help="Show daily parlay valuations")
    status.set_defaults(func=_cmd_status)
    status.add_argument("--data-file", default="")
    status.add_argument("--date", default="", help="Only show one date (YYYY-MM-DD)")
    status.add_argument("--json", dest="json_output", action="store_true")

    gate = subparsers.add_parser("gate", help="Explain whether odds would be fetched now")
    gate.set_defaults(func=_cmd_gate)
    gate.add_argument("--data-file", default="")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 0
    try:
        return int(func(args))
    except (DailyParlayError, OddsAPIError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
