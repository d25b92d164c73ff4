"""Load and atomically save the tracker state file."""

from __future__ import annotations

import json
import os
import uuid
from contextlib import suppress
from pathlib import Path
from typing import Any

from daily_parlay.errors import StateFileError
from daily_parlay.models import TrackerState


def _atomic_write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".tmp-{path.name}-{uuid.uuid4().hex}")
    try:
        tmp_path.write_text(content, encoding="utf-8")
        os.replace(tmp_path, path)
    except OSError:
        with suppress(FileNotFoundError):
            tmp_path.unlink()
        raise


def _atomic_write_json(path: Path, value: Any) -> None:
    payload = json.dumps(value, sort_keys=True, ensure_ascii=True, indent=2) + "\n"
    _atomic_write_text(path, payload)


class StateStore:
    """Single-file JSON store for the whole tracker state."""

    def __init__(self, path: Path | str = Path("data.json")) -> None:
        self.path = Path(path)

    def load(self) -> TrackerState:
        """Return the saved state, or an empty one when no file exists yet."""
        if not self.path.exists():
            return TrackerState()
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StateFileError(f"cannot read state file {self.path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise StateFileError(f"state file {self.path} must hold a JSON object")
        try:
            return TrackerState.from_dict(payload)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise StateFileError(f"state file {self.path} is invalid: {exc}") from exc

    def save(self, state: TrackerState) -> None:
        _atomic_write_json(self.path, state.to_dict())
