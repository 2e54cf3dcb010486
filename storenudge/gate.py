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

"""Alert gating: decide whether an update alert should be shown.

The gate runs an ordered list of checks against a DecisionContext. The first
check that fails ends the evaluation with a Suppressed outcome; if all pass,
the result is an Alert carrying the rule for the update's severity.

Check order:

1. OS compatibility       -> Suppressed("os_unsupported")
2. Data completeness      -> Suppressed("data_missing", field=...)
3. Severity               -> Suppressed("no_update")
4. Release age            -> Suppressed("released_too_soon")
5. Rule lookup
6. Skipped version        -> Suppressed("skip_version_update")
7. Presentation frequency -> Alert(...) or Suppressed("recently_checked")

State writes happen only in step 7, through the injected AlertStateStore:

- pending_next_launch_check is cleared when it is set and an alert is produced
- last_alert_date is set to ``context.now`` before evaluate() returns an
  Alert, so a crash while the alert is on screen still counts as a
  presentation

Example:
    ```python
    from datetime import UTC, datetime, timedelta
    from storenudge.discovery import LookupResult
    from storenudge.gate import AlertGate, DecisionContext
    from storenudge.policy import UpdatePolicy
    from storenudge.state import MemoryAlertStateStore

    store = MemoryAlertStateStore()
    gate = AlertGate(UpdatePolicy(released_for_days=5), store)
    now = datetime.now(UTC)
    context = DecisionContext(
        installed_version="2.0.0",
        lookup=LookupResult(
            app_id=1, version="2.1.0", minimum_os_version="15.0",
            release_date=now - timedelta(days=10),
        ),
        now=now,
        released_for_days=5,
        state=store.get(),
        current_os_version="17.2",
    )
    gate.evaluate(context)   # Alert(rule=Rule('option', 0), severity='minor')
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from storenudge.discovery import LookupResult
from storenudge.logging import Logger, get_global_logger
from storenudge.policy import Rule, UpdatePolicy
from storenudge.results import Alert, Outcome, Suppressed
from storenudge.state import AlertState, AlertStateStore
from storenudge.versioning import UpdateSeverity, classify, compare_versions


@dataclass(frozen=True)
class DecisionContext:
    """Inputs to one evaluation. Built fresh for every check.

    Attributes:
        installed_version: Version of the running app.
        lookup: Store metadata from the fetcher.
        now: Current time (timezone-aware).
        released_for_days: Minimum age of the store version, in days.
        state: AlertState snapshot read once at the start of the check.
        current_os_version: OS version of the device; None skips the OS check.
    """

    installed_version: str
    lookup: LookupResult
    now: datetime
    released_for_days: int
    state: AlertState
    current_os_version: str | None = None


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def days_since(then: datetime, now: datetime) -> int:
    """Whole days elapsed from ``then`` to ``now``. Never negative.

    Naive datetimes are read as UTC, so mixing naive and aware values works.
    """
    return max(0, (as_utc(now) - as_utc(then)).days)


class AlertGate:
    """Runs the ordered suppression checks and produces an Outcome."""

    def __init__(
        self,
        policy: UpdatePolicy,
        store: AlertStateStore,
        logger: Logger | None = None,
    ) -> None:
        self.policy = policy
        self.store = store
        self._logger = logger

    @property
    def logger(self) -> Logger:
        return self._logger or get_global_logger()

    def evaluate(self, context: DecisionContext) -> Outcome:
        """Evaluate one check.

        Returns:
            Alert if an alert must be presented, Suppressed otherwise.

        Raises:
            MalformedVersionError: If the installed, store or OS versions
                cannot be parsed.

        """
        suppressed = self._check_os(context) or self._check_data(context)
        if suppressed:
            return self._suppress(suppressed)

        severity = classify(context.installed_version, context.lookup.version)
        self.logger.verbose(
            "GATE",
            f"Installed {context.installed_version}, store "
            f"{context.lookup.version}: severity {severity}",
        )
        if severity == "none":
            return self._suppress(Suppressed("no_update"))

        suppressed = self._check_release_age(context)
        if suppressed:
            return self._suppress(suppressed)

        rule = self.policy.rule_for(severity)
        self.logger.debug("POLICY", f"Rule for {severity}: {rule}")

        suppressed = self._check_skipped_version(context)
        if suppressed:
            return self._suppress(suppressed)

        return self._decide_presentation(context, rule, severity)

    # -------------------------------
    # Checks (return Suppressed to stop, None to continue)
    # -------------------------------

    def _check_os(self, context: DecisionContext) -> Suppressed | None:
        current = context.current_os_version
        if current is None:
            self.logger.debug("GATE", "No device OS version; skipping OS check")
            return None
        minimum = context.lookup.minimum_os_version
        if minimum is None:
            return Suppressed("os_unsupported", detail="minimum OS version unknown")
        if compare_versions(current, minimum) < 0:
            return Suppressed(
                "os_unsupported", detail=f"requires {minimum}, device has {current}"
            )
        return None

    def _check_data(self, context: DecisionContext) -> Suppressed | None:
        lookup = context.lookup
        for name in ("app_id", "version", "release_date"):
            if getattr(lookup, name) is None:
                return Suppressed("data_missing", field=name)
        return None

    def _check_release_age(self, context: DecisionContext) -> Suppressed | None:
        age = days_since(context.lookup.release_date, context.now)
        if age < context.released_for_days:
            return Suppressed(
                "released_too_soon", detail=f"{age}/{context.released_for_days}"
            )
        return None

    def _check_skipped_version(self, context: DecisionContext) -> Suppressed | None:
        # Suppresses when the skipped version DIFFERS from the store version.
        skipped = context.state.skipped_version
        if skipped is not None and skipped != context.lookup.version:
            return Suppressed(
                "skip_version_update",
                detail=f"skipped {skipped}, store {context.lookup.version}",
            )
        return None

    # -------------------------------
    # Presentation decision
    # -------------------------------

    def _decide_presentation(
        self, context: DecisionContext, rule: Rule, severity: UpdateSeverity
    ) -> Outcome:
        state = context.state

        if rule.is_immediate:
            why = "frequency is immediately"
        elif state.pending_next_launch_check:
            why = "user asked to be reminded next time"
        elif state.last_alert_date is None:
            why = "no previous alert"
        else:
            elapsed = days_since(state.last_alert_date, context.now)
            if elapsed < rule.frequency:
                return self._suppress(
                    Suppressed("recently_checked", detail=f"{elapsed}/{rule.frequency}")
                )
            why = f"{elapsed} day(s) since last alert"

        if state.pending_next_launch_check:
            self.store.set(pending_next_launch_check=False)
            self.logger.verbose("STATE", "Cleared pending next-launch check")

        self.store.set(last_alert_date=context.now)
        self.logger.verbose("GATE", f"Alert ({rule.alert_type}, {severity}): {why}")
        return Alert(rule=rule, severity=severity)

    def _suppress(self, suppressed: Suppressed) -> Suppressed:
        extra = suppressed.field or suppressed.detail
        suffix = f" ({extra})" if extra else ""
        self.logger.verbose("GATE", f"Suppressed: {suppressed.reason}{suffix}")
        return suppressed
