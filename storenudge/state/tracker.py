# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""AlertState persistence for storenudge.

The decision engine carries three fields between checks:

- last_alert_date: When an alert was last produced
- skipped_version: Store version the user chose to skip
- pending_next_launch_check: User chose "Next time"; alert again on the
  next check regardless of frequency

Stores implement the AlertStateStore protocol. ``get`` returns a snapshot and
``set`` writes only the named fields, persisting immediately. Writes are not
transactional: last write wins, field by field.

State file layout (JSON, one file may hold several apps):

    {
      "metadata": {"schema_version": "1", "storenudge_version": "...",
                   "last_updated": "..."},
      "apps": {
        "com.example.app": {
          "last_alert_date": "2025-01-05T10:00:00+00:00",
          "skipped_version": null,
          "pending_next_launch_check": false
        }
      }
    }

Example:
    ```python
    from pathlib import Path
    from storenudge.state import JsonAlertStateStore

    store = JsonAlertStateStore(Path("state/alert_state.json"), "com.example.app")
    store.set(pending_next_launch_check=True)
    store.get().pending_next_launch_check   # True
    ```

"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, datetime
import json
from pathlib import Path
from typing import Any, Protocol

from storenudge import __version__
from storenudge.logging import Logger, get_global_logger

_UNSET: Any = object()


@dataclass(frozen=True)
class AlertState:
    """Snapshot of the persisted alert fields.

    Attributes:
        last_alert_date: Timezone-aware time of the last produced alert.
        skipped_version: Store version the user asked to skip.
        pending_next_launch_check: Alert on the next check unconditionally.

    """

    last_alert_date: datetime | None = None
    skipped_version: str | None = None
    pending_next_launch_check: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "last_alert_date": (
                self.last_alert_date.isoformat() if self.last_alert_date else None
            ),
            "skipped_version": self.skipped_version,
            "pending_next_launch_check": self.pending_next_launch_check,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> AlertState:
        if not data or not isinstance(data, dict):
            return cls()
        raw_date = data.get("last_alert_date")
        last_alert_date = None
        if raw_date:
            try:
                last_alert_date = _as_utc(datetime.fromisoformat(raw_date))
            except (TypeError, ValueError):
                last_alert_date = None
        skipped = data.get("skipped_version")
        return cls(
            last_alert_date=last_alert_date,
            skipped_version=str(skipped) if skipped is not None else None,
            pending_next_launch_check=bool(data.get("pending_next_launch_check")),
        )


class AlertStateStore(Protocol):
    """Durable storage for AlertState, keyed by the consuming app."""

    def get(self) -> AlertState:
        """Return the current persisted state."""
        ...

    def set(
        self,
        *,
        last_alert_date: datetime | None = ...,
        skipped_version: str | None = ...,
        pending_next_launch_check: bool = ...,
    ) -> None:
        """Persist the given fields immediately; omitted fields are untouched."""
        ...


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _apply(state: AlertState, **fields: Any) -> AlertState:
    changes = {k: v for k, v in fields.items() if v is not _UNSET}
    if changes.get("last_alert_date") is not None:
        changes["last_alert_date"] = _as_utc(changes["last_alert_date"])
    return replace(state, **changes)


class MemoryAlertStateStore:
    """In-process AlertState store.

    Useful for tests and for hosts that persist state themselves. ``writes``
    counts set() calls so callers can assert persistence happened.
    """

    def __init__(self, state: AlertState | None = None) -> None:
        self._state = state or AlertState()
        self.writes = 0

    def get(self) -> AlertState:
        return self._state

    def set(
        self,
        *,
        last_alert_date: datetime | None = _UNSET,
        skipped_version: str | None = _UNSET,
        pending_next_launch_check: bool = _UNSET,
    ) -> None:
        self._state = _apply(
            self._state,
            last_alert_date=last_alert_date,
            skipped_version=skipped_version,
            pending_next_launch_check=pending_next_launch_check,
        )
        self.writes += 1


class JsonAlertStateStore:
    """AlertState store backed by a JSON file.

    The file is re-read on every get() and rewritten on every set(), so
    several processes sharing one file see each other's writes (last write
    wins). A missing file is treated as empty state and created on first
    write. A corrupted file is backed up to ``<name>.json.backup`` and
    replaced with a fresh one.

    Attributes:
        state_file: Path to the JSON state file.
        app_key: Key of this app inside the file (usually the bundle id).

    """

    def __init__(
        self, state_file: Path, app_key: str, logger: Logger | None = None
    ) -> None:
        self.state_file = Path(state_file)
        self.app_key = app_key
        self._logger = logger

    @property
    def logger(self) -> Logger:
        return self._logger or get_global_logger()

    def _read(self) -> dict[str, Any]:
        try:
            state = load_state(self.state_file)
        except FileNotFoundError:
            return create_default_state()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return self._recover()
        if not isinstance(state, dict) or not isinstance(state.get("apps", {}), dict):
            return self._recover()
        return state

    def _recover(self) -> dict[str, Any]:
        backup = self.state_file.with_suffix(".json.backup")
        self.state_file.replace(backup)
        self.logger.verbose("STATE", f"Corrupted state file backed up to {backup}")
        state = create_default_state()
        save_state(state, self.state_file)
        return state

    def get(self) -> AlertState:
        state = self._read()
        entry = state.get("apps", {}).get(self.app_key)
        return AlertState.from_dict(entry)

    def set(
        self,
        *,
        last_alert_date: datetime | None = _UNSET,
        skipped_version: str | None = _UNSET,
        pending_next_launch_check: bool = _UNSET,
    ) -> None:
        state = self._read()
        current = AlertState.from_dict(state.get("apps", {}).get(self.app_key))
        updated = _apply(
            current,
            last_alert_date=last_alert_date,
            skipped_version=skipped_version,
            pending_next_launch_check=pending_next_launch_check,
        )
        state.setdefault("apps", {})[self.app_key] = updated.to_dict()
        state.setdefault("metadata", {})
        state["metadata"]["last_updated"] = datetime.now(UTC).isoformat()
        save_state(state, self.state_file)
        self.logger.verbose("STATE", f"Saved alert state for {self.app_key}")

    def reset(self) -> None:
        """Remove this app's entry from the state file."""
        state = self._read()
        state.get("apps", {}).pop(self.app_key, None)
        save_state(state, self.state_file)
        self.logger.verbose("STATE", f"Reset alert state for {self.app_key}")


def create_default_state() -> dict[str, Any]:
    """Create an empty state document with a metadata section."""
    return {
        "metadata": {
            "storenudge_version": __version__,
            "schema_version": "1",
            "last_updated": datetime.now(UTC).isoformat(),
        },
        "apps": {},
    }


def load_state(state_file: Path) -> dict[str, Any]:
    """Load a state document from JSON.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        json.JSONDecodeError: If the file contains invalid JSON.
        UnicodeDecodeError: If the file is not valid UTF-8.

    """
    with open(state_file, encoding="utf-8") as f:
        return json.load(f)


def save_state(state: dict[str, Any], state_file: Path) -> None:
    """Write a state document as pretty-printed JSON.

    Creates parent directories if needed. Keys are sorted and the file ends
    with a newline so diffs stay stable.
    """
    state_file.parent.mkdir(parents=True, exist_ok=True)

    with open(state_file, "w", encoding="utf-8") as f:
        json.dump(state, f, indent=2, sort_keys=True)
        f.write("\n")
