from __future__ import annotations

import json
from pathlib import Path

import pytest

from daily_parlay import cli
from daily_parlay.cli import main
from daily_parlay.odds_client import OddsAPIError, OddsResponse


class _FakeClient:
    scores_error: str = ""
    odds_error: str = ""
    calls: list[str] = []

    def __init__(self, settings) -> None:
        self.settings = settings

    def __enter__(self) -> _FakeClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        return None

    def get_h2h_odds(self, *, sport_key: str, regions: str) -> OddsResponse:
        self.calls.append("odds")
        if self.odds_error:
            raise OddsAPIError(self.odds_error)
        return OddsResponse(
            data=[],
            status_code=200,
            headers={"x-requests-remaining": "497", "x-requests-used": "3"},
            duration_ms=1,
            retry_count=0,
        )

    def get_scores(self, *, sport_key: str, days_from: int) -> OddsResponse:
        self.calls.append("scores")
        if self.scores_error:
            raise OddsAPIError(self.scores_error)
        return OddsResponse(data=[], status_code=200, headers={}, duration_ms=1, retry_count=0)


def test_cli_without_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert main([]) == 0
    assert "daily-parlay" in capsys.readouterr().out


def test_status_on_empty_state(capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
    code = main(["status", "--data-file", str(tmp_path / "data.json")])

    assert code == 0
    assert "no parlays" in capsys.readouterr().out


def test_gate_on_empty_state(capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
    code = main(["gate", "--data-file", str(tmp_path / "data.json")])

    assert code == 0
    assert "should_fetch_odds=true reason=no_games_tracked_today" in capsys.readouterr().out


def test_update_saves_state(
    capsys: pytest.CaptureFixture[str],
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.setattr(_FakeClient, "calls", [])
    monkeypatch.setattr(cli, "OddsAPIClient", _FakeClient)
    data_file = tmp_path / "data.json"

    code = main(["update", "--data-file", str(data_file)])

    out = capsys.readouterr().out
    assert code == 0
    assert "credits_remaining=497 credits_used=3" in out
    payload = json.loads(data_file.read_text(encoding="utf-8"))
    assert len(payload["oddsFetchedDates"]) == 1
    assert payload["lastUpdate"]

    assert main(["status", "--data-file", str(data_file), "--json"]) == 0
    assert json.loads(capsys.readouterr().out) == {}


def test_scores_failure_saves_odds_fetch_so_next_run_skips_odds(
    capsys: pytest.CaptureFixture[str],
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    calls: list[str] = []
    monkeypatch.setattr(_FakeClient, "calls", calls)
    monkeypatch.setattr(_FakeClient, "scores_error", "scores failed with status 500")
    monkeypatch.setattr(cli, "OddsAPIClient", _FakeClient)
    data_file = tmp_path / "data.json"

    code = main(["update", "--data-file", str(data_file)])

    captured = capsys.readouterr()
    assert code == 2
    assert "scores failed with status 500" in captured.err
    assert "partial=true" in captured.out
    payload = json.loads(data_file.read_text(encoding="utf-8"))
    assert len(payload["oddsFetchedDates"]) == 1

    monkeypatch.setattr(_FakeClient, "scores_error", "")
    assert main(["update", "--data-file", str(data_file)]) == 0
    assert calls.count("odds") == 1
    assert calls == ["odds", "scores", "scores"]


def test_odds_failure_exits_nonzero_without_saving(
    capsys: pytest.CaptureFixture[str],
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.setattr(_FakeClient, "calls", [])
    monkeypatch.setattr(_FakeClient, "odds_error", "odds failed with status 401")
    monkeypatch.setattr(cli, "OddsAPIClient", _FakeClient)
    data_file = tmp_path / "data.json"

    code = main(["update", "--data-file", str(data_file)])

    assert code == 2
    assert "odds failed with status 401" in capsys.readouterr().err
    assert not data_file.exists()
