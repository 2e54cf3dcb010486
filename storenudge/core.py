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

"""Check-cycle orchestration for storenudge.

The Updater wires the collaborators into one version check:

    fetch -> build DecisionContext -> AlertGate.evaluate -> emit / present

Every cycle ends in exactly one CheckResult handed to the completion
callback (an outcome or an error). Errors raised by the fetcher or by version
parsing are caught here and delivered as values; start_check() never raises
a NudgeError and never retries. The next trigger starts a fresh attempt.

Reentrancy:

While an interactive alert waits for the user's choice, new start_check()
calls are dropped (not queued) and emit nothing. The guard clears when the
presenter reports an action through resolve_action(), or if present() raises.

Action resolution:

- update: open the store listing; state unchanged
- next_time: pending_next_launch_check = True
- skip: skipped_version = store version

Only the actions offered for the alert type are accepted; a force alert
cannot be skipped.

Example:
    Host application wiring:
        ```python
        from pathlib import Path
        from storenudge.core import Updater
        from storenudge.discovery import ItunesLookupFetcher
        from storenudge.policy import CRITICAL, UpdatePolicy
        from storenudge.presentation import ConsolePresenter
        from storenudge.state import JsonAlertStateStore

        updater = Updater(
            installed_version="2.0.0",
            bundle_id="com.example.app",
            fetcher=ItunesLookupFetcher(),
            store=JsonAlertStateStore(Path("state.json"), "com.example.app"),
            policy=UpdatePolicy(rules={"major": CRITICAL}),
            presenter=ConsolePresenter(),
        )
        updater.start_check(lambda result: print(result))
        ```

"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
import webbrowser

from storenudge.discovery import Fetcher, LookupResult, get_fetcher
from storenudge.exceptions import ConfigError, MalformedStoreURLError, NudgeError
from storenudge.gate import AlertGate, DecisionContext, as_utc
from storenudge.logging import Logger, get_global_logger
from storenudge.policy import UpdatePolicy
from storenudge.presentation import (
    AlertStrings,
    PresentationRequest,
    Presenter,
    actions_for,
)
from storenudge.results import Alert, AlertAction, CheckResult
from storenudge.state import AlertStateStore, JsonAlertStateStore

Completion = Callable[[CheckResult], None]

STORE_LISTING_URL = "https://itunes.apple.com/app/id{app_id}"


def store_listing_url(app_id: Any) -> str:
    """Build the store listing URL for a numeric app id.

    Raises:
        MalformedStoreURLError: If the app id is missing or not a positive int.

    """
    if isinstance(app_id, bool) or not isinstance(app_id, int) or app_id <= 0:
        raise MalformedStoreURLError(
            f"Cannot build a store URL without a valid app id (got {app_id!r})"
        )
    return STORE_LISTING_URL.format(app_id=app_id)


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class _PendingAlert:
    """An alert waiting for the user's choice."""

    outcome: Alert
    lookup: LookupResult
    completion: Completion | None
    emit: bool
    actions: tuple[AlertAction, ...]


class Updater:
    """Runs version checks for one app.

    Args:
        installed_version: Version of the running app.
        bundle_id: Bundle identifier used for the store lookup.
        fetcher: Store metadata fetcher.
        store: AlertState store for this app.
        policy: Rule table and release-age threshold.
        presenter: Renders interactive alerts. Without one, Alert results
            are emitted straight away and the caller reports the user's
            choice with resolve_action().
        os_version: Device OS version; None skips the OS compatibility check.
        country: Store region for the lookup.
        clock: Returns the current time; naive values are read as UTC.
        opener: Opens a URL (defaults to webbrowser.open).
        strings: Alert text.
        logger: Logger; defaults to the global logger.

    """

    def __init__(
        self,
        installed_version: str,
        bundle_id: str,
        fetcher: Fetcher,
        store: AlertStateStore,
        policy: UpdatePolicy | None = None,
        presenter: Presenter | None = None,
        os_version: str | None = None,
        country: str = "us",
        clock: Callable[[], datetime] | None = None,
        opener: Callable[[str], Any] | None = None,
        strings: AlertStrings | None = None,
        logger: Logger | None = None,
    ) -> None:
        self.installed_version = installed_version
        self.bundle_id = bundle_id
        self.fetcher = fetcher
        self.store = store
        self.policy = policy or UpdatePolicy()
        self.presenter = presenter
        self.os_version = os_version
        self.country = country
        self.strings = strings or AlertStrings()
        self._clock = clock or _utc_now
        self._opener = opener or webbrowser.open
        self._logger = logger
        self.gate = AlertGate(self.policy, store, logger=logger)

        self._presenting = False
        self._pending: _PendingAlert | None = None
        self._completion: Completion | None = None
        self._lookup: LookupResult | None = None

    @property
    def logger(self) -> Logger:
        return self._logger or get_global_logger()

    @property
    def presenting(self) -> bool:
        """True while an alert awaits the user's choice."""
        return self._presenting

    @property
    def lookup(self) -> LookupResult | None:
        """Store metadata from the most recent successful fetch."""
        return self._lookup

    # -------------------------------
    # Check cycle
    # -------------------------------

    def start_check(self, completion: Completion | None = None) -> None:
        """Run one full check cycle and report through ``completion``."""
        if self._presenting:
            self.logger.verbose("UPDATER", "Alert still on screen; check dropped")
            return

        self._completion = completion
        self.logger.step(1, 3, f"Fetching store metadata for {self.bundle_id}...")
        try:
            lookup = self.fetcher.fetch(self.bundle_id, self.country)
        except NudgeError as err:
            self.logger.verbose("UPDATER", f"Fetch failed: {err}")
            self._emit(completion, CheckResult(error=err))
            return
        self._lookup = lookup

        self.logger.step(2, 3, "Evaluating alert rules...")
        context = DecisionContext(
            installed_version=self.installed_version,
            lookup=lookup,
            now=as_utc(self._clock()),
            released_for_days=self.policy.released_for_days,
            state=self.store.get(),
            current_os_version=self.os_version,
        )
        try:
            outcome = self.gate.evaluate(context)
        except NudgeError as err:
            self.logger.verbose("UPDATER", f"Evaluation failed: {err}")
            self._emit(completion, CheckResult(error=err, lookup=lookup))
            return

        self.logger.step(3, 3, "Reporting result...")
        if not isinstance(outcome, Alert):
            self._emit(completion, CheckResult(outcome=outcome, lookup=lookup))
            return

        if outcome.rule.alert_type == "none":
            self._emit(
                completion, CheckResult(outcome=outcome, lookup=lookup, action="unknown")
            )
            return

        actions = actions_for(outcome.rule.alert_type)
        self._presenting = True
        if self.presenter is None:
            self._pending = _PendingAlert(outcome, lookup, completion, False, actions)
            self._emit(completion, CheckResult(outcome=outcome, lookup=lookup))
            return

        pending = _PendingAlert(outcome, lookup, completion, True, actions)
        self._pending = pending
        request = PresentationRequest(
            rule=outcome.rule,
            severity=outcome.severity,
            lookup=lookup,
            strings=self.strings,
            actions=actions,
        )
        try:
            self.presenter.present(request, self.resolve_action)
        except Exception:
            if self._pending is pending:
                self._pending = None
                self._presenting = False
            self.logger.verbose("UPDATER", "Presenter failed; alert abandoned")
            raise

    def check_now(self) -> CheckResult | None:
        """Run one cycle synchronously and return its result.

        Returns None if the check was dropped by the reentrancy guard, or if
        an asynchronous presenter has not resolved yet.
        """
        results: list[CheckResult] = []
        self.start_check(results.append)
        return results[-1] if results else None

    # -------------------------------
    # User actions
    # -------------------------------

    def resolve_action(self, action: AlertAction) -> CheckResult | None:
        """Apply the user's choice for the alert on screen.

        Returns:
            The resolved CheckResult, or None if no alert was pending.

        Raises:
            ValueError: If ``action`` is not one of the actions offered for
                the pending alert's type. The alert stays pending.

        """
        pending = self._pending
        if pending is None:
            self.logger.verbose("UPDATER", f"No alert pending; ignoring {action!r}")
            return None
        if action not in pending.actions:
            raise ValueError(
                f"Action {action!r} is not offered for a "
                f"{pending.outcome.rule.alert_type!r} alert; "
                f"expected one of {', '.join(pending.actions)}"
            )

        self._pending = None
        self._presenting = False
        self.logger.verbose("UPDATER", f"User chose {action}")

        if action == "update":
            self.open_store_listing()
        elif action == "next_time":
            self.store.set(pending_next_launch_check=True)
        elif action == "skip":
            self.store.set(skipped_version=pending.lookup.version)

        result = CheckResult(outcome=pending.outcome, lookup=pending.lookup, action=action)
        if pending.emit:
            self._emit(pending.completion, result)
        return result

    def open_store_listing(self) -> bool:
        """Open the store listing for the last fetched app.

        Failures are reported as MalformedStoreURLError through the most
        recent completion callback.

        Returns:
            True if the listing was opened.

        """
        app_id = self._lookup.app_id if self._lookup else None
        try:
            url = store_listing_url(app_id)
        except MalformedStoreURLError as err:
            self.logger.verbose("UPDATER", str(err))
            self._emit(self._completion, CheckResult(error=err, lookup=self._lookup))
            return False

        self.logger.verbose("UPDATER", f"Opening {url}")
        self._opener(url)
        return True

    def _emit(self, completion: Completion | None, result: CheckResult) -> None:
        if completion is not None:
            completion(result)


def build_updater(
    config: dict[str, Any],
    presenter: Presenter | None = None,
    state_file: Path | None = None,
    logger: Logger | None = None,
    **overrides: Any,
) -> Updater:
    """Create an Updater from a loaded configuration dict.

    Args:
        config: Merged configuration (see storenudge.config).
        presenter: Presenter for interactive alerts.
        state_file: Overrides ``config["state_file"]``.
        logger: Logger passed to every component.
        **overrides: Extra Updater keyword arguments (clock, opener, ...).

    Raises:
        ConfigError: If required settings are missing or invalid.

    """
    app = config.get("app") or {}
    bundle_id = app.get("bundle_id")
    installed_version = app.get("installed_version")
    if not bundle_id:
        raise ConfigError("Missing required setting: app.bundle_id")
    if not installed_version:
        raise ConfigError("Missing required setting: app.installed_version")

    fetcher_cfg = dict(config.get("fetcher") or {})
    strategy = fetcher_cfg.pop("strategy", "itunes")
    fetcher = get_fetcher(strategy, **fetcher_cfg)

    path = Path(state_file or config.get("state_file") or "state/alert_state.json")
    store = JsonAlertStateStore(path, bundle_id, logger=logger)

    strings = AlertStrings(app_name=app.get("name") or bundle_id)
    os_version = app.get("os_version")

    return Updater(
        installed_version=str(installed_version),
        bundle_id=bundle_id,
        fetcher=fetcher,
        store=store,
        policy=UpdatePolicy.from_config(config),
        presenter=presenter,
        os_version=str(os_version) if os_version is not None else None,
        country=app.get("country") or "us",
        strings=strings,
        logger=logger,
        **overrides,
    )
