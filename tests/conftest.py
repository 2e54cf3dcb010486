"""
Pytest configuration and shared fixtures for storenudge tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
import yaml

from storenudge.discovery import LookupResult
from storenudge.gate import DecisionContext
from storenudge.state import AlertState, MemoryAlertStateStore


@pytest.fixture
def now() -> datetime:
    """A fixed 'current time' so day arithmetic is deterministic."""
    return datetime(2025, 3, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
def make_lookup(now: datetime):
    """
    Factory fixture for LookupResult.

    Usage:
        lookup = make_lookup(version="2.1.0", released_days_ago=10)
    """

    def _make(
        version: str | None = "2.1.0",
        app_id: int | None = 123456789,
        minimum_os_version: str | None = "15.0",
        released_days_ago: int | None = 10,
        **extra: Any,
    ) -> LookupResult:
        release_date = (
            now - timedelta(days=released_days_ago)
            if released_days_ago is not None
            else None
        )
        return LookupResult(
            app_id=app_id,
            version=version,
            minimum_os_version=minimum_os_version,
            release_date=release_date,
            **extra,
        )

    return _make


@pytest.fixture
def make_context(now: datetime, make_lookup):
    """
    Factory fixture for DecisionContext with sensible defaults.

    Usage:
        context = make_context(installed="2.0.0", state=AlertState(...))
    """

    def _make(
        installed: str = "2.0.0",
        lookup: LookupResult | None = None,
        state: AlertState | None = None,
        released_for_days: int = 1,
        os_version: str | None = "17.0",
        at: datetime | None = None,
    ) -> DecisionContext:
        return DecisionContext(
            installed_version=installed,
            lookup=lookup if lookup is not None else make_lookup(),
            now=at or now,
            released_for_days=released_for_days,
            state=state or AlertState(),
            current_os_version=os_version,
        )

    return _make


@pytest.fixture
def memory_store() -> MemoryAlertStateStore:
    """Provide an empty in-memory alert state store."""
    return MemoryAlertStateStore()


@pytest.fixture
def sample_config_data() -> dict[str, Any]:
    """
    Provide a complete app configuration using the static fetcher.
    """
    return {
        "app": {
            "bundle_id": "com.example.app",
            "installed_version": "2.0.0",
            "os_version": "17.0",
        },
        "fetcher": {
            "strategy": "static",
            "result": {
                "app_id": 123456789,
                "version": "2.1.0",
                "minimum_os_version": "15.0",
                "release_date": "2025-01-01T00:00:00Z",
            },
        },
        "released_for_days": 1,
        "rules": {"minor": {"alert_type": "option", "frequency": "immediately"}},
        "state_file": "state/alert_state.json",
    }


@pytest.fixture
def create_yaml_file(tmp_path: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("nudge.yaml", {"key": "value"})
    """

    def _create(filename: str, data: dict[str, Any]) -> Path:
        path = tmp_path / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create
