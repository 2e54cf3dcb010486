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

"""Fetcher protocol, lookup result type and fetcher registry.

A fetcher retrieves the current store metadata for an app: its numeric store
id, the latest version, the minimum OS version it requires and when that
version was released. The decision engine only ever sees a LookupResult and
never talks to the network itself.

Built-in fetchers register themselves at import time:

- itunes: Apple's iTunes Lookup API (network, via requests)
- static: Metadata supplied up front (config files, tests, offline use)

Example:
    Registering a custom fetcher:
        ```python
        from storenudge.discovery.base import LookupResult, register_fetcher

        class PlayStoreFetcher:
            def fetch(self, bundle_id: str, country: str) -> LookupResult:
                ...

        register_fetcher("play", PlayStoreFetcher)
        ```

"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Protocol

from storenudge.exceptions import ConfigError

# -------------------------------
# Lookup result
# -------------------------------


@dataclass(frozen=True)
class LookupResult:
    """Store metadata for one app. Any field may be missing.

    Attributes:
        app_id: Numeric store identifier (iTunes trackId).
        version: Latest version published in the store.
        minimum_os_version: Lowest OS version the latest build supports.
        release_date: Timezone-aware release time of the latest version.
        release_notes: Text of the "What's New" section.
        track_url: Store listing URL reported by the lookup.

    """

    app_id: int | None = None
    version: str | None = None
    minimum_os_version: str | None = None
    release_date: datetime | None = None
    release_notes: str | None = None
    track_url: str | None = None


def parse_release_date(value: Any) -> datetime | None:
    """Parse an ISO-8601 release date into an aware UTC datetime.

    Returns None for missing or unparseable values; the gate reports those
    as missing data.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _optional_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def lookup_result_from_mapping(data: dict[str, Any]) -> LookupResult:
    """Build a LookupResult from snake_case keys (config and test fixtures)."""
    return LookupResult(
        app_id=_optional_int(data.get("app_id")),
        version=_optional_str(data.get("version")),
        minimum_os_version=_optional_str(data.get("minimum_os_version")),
        release_date=parse_release_date(data.get("release_date")),
        release_notes=_optional_str(data.get("release_notes")),
        track_url=_optional_str(data.get("track_url")),
    )


# -------------------------------
# Fetcher protocol
# -------------------------------


class Fetcher(Protocol):
    """Protocol for store metadata fetchers."""

    def fetch(self, bundle_id: str, country: str) -> LookupResult:
        """Fetch the latest store metadata for an app.

        Args:
            bundle_id: The app's bundle identifier.
            country: Two-letter store region code.

        Returns:
            Store metadata for the app.

        Raises:
            NetworkError: If the lookup request fails.
            NoResultsFoundError: If the store has no listing for the app.
            LookupParseError: If the response cannot be decoded.

        """
        ...


# -------------------------------
# Registry
# -------------------------------

_FETCHERS: dict[str, type] = {}


def register_fetcher(name: str, fetcher_cls: type) -> None:
    """Register a fetcher class under a name (last registration wins)."""
    _FETCHERS[name] = fetcher_cls


def get_fetcher(name: str, **options: Any) -> Fetcher:
    """Instantiate a registered fetcher.

    Args:
        name: Registered fetcher name (e.g., "itunes").
        **options: Keyword arguments passed to the fetcher constructor.

    Raises:
        ConfigError: If no fetcher is registered under the name, or the
            options don't match its constructor.

    """
    if name not in _FETCHERS:
        available = ", ".join(sorted(_FETCHERS.keys())) or "(none)"
        raise ConfigError(f"Unknown fetcher {name!r}. Available: {available}")
    try:
        return _FETCHERS[name](**options)
    except TypeError as err:
        raise ConfigError(f"Invalid options for fetcher {name!r}: {err}") from err
