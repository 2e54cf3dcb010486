"""
Tests for storenudge.gate module.

Tests the ordered alert gate including:
- OS compatibility, missing data, no update, release age
- Skipped-version suppression
- Presentation frequency, next-launch flag and state writes
- Check precedence
"""

from __future__ import annotations

from datetime import timedelta

import pytest

from storenudge.exceptions import MalformedVersionError
from storenudge.gate import AlertGate, days_since
from storenudge.logging import RecordingLogger
from storenudge.policy import Rule, UpdatePolicy
from storenudge.results import Alert, Suppressed
from storenudge.state import AlertState, MemoryAlertStateStore


def _gate(store, rules=None, released_for_days=1):
    return AlertGate(
        UpdatePolicy(rules=rules or {}, released_for_days=released_for_days), store
    )


class TestDaysSince:
    """Tests for whole-day arithmetic."""

    def test_truncates_partial_days(self, now):
        """Test that 47 hours is one day."""
        assert days_since(now - timedelta(hours=47), now) == 1

    def test_exact_days(self, now):
        """Test an exact multiple of 24 hours."""
        assert days_since(now - timedelta(days=7), now) == 7

    def test_future_is_zero(self, now):
        """Test that a future date counts as zero days."""
        assert days_since(now + timedelta(days=2), now) == 0

    def test_naive_and_aware_mix(self, now):
        """Test naive datetimes are read as UTC instead of raising."""
        naive_then = (now - timedelta(days=3)).replace(tzinfo=None)
        assert days_since(naive_then, now) == 3
        assert days_since(now - timedelta(days=3), now.replace(tzinfo=None)) == 3


class TestVerdictLogging:
    """Tests for the verbose verdict of each check."""

    def test_suppression_is_logged(self, memory_store, make_context, make_lookup):
        """Test a suppression logs its reason and detail under GATE."""
        logger = RecordingLogger()
        gate = AlertGate(UpdatePolicy(released_for_days=5), memory_store, logger=logger)

        gate.evaluate(
            make_context(lookup=make_lookup(released_days_ago=2), released_for_days=5)
        )

        assert logger.messages("GATE") == ["Suppressed: released_too_soon (2/5)"]

    def test_alert_is_logged(self, memory_store, make_context):
        """Test an alert logs the rule, severity and why it passed."""
        logger = RecordingLogger()
        AlertGate(UpdatePolicy(), memory_store, logger=logger).evaluate(make_context())

        assert logger.messages("GATE") == [
            "Alert (option, minor): frequency is immediately"
        ]


class TestOsCompatibility:
    """Tests for the OS compatibility check."""

    def test_older_os_is_suppressed(self, memory_store, make_context, make_lookup):
        """Test that a device below the minimum OS is suppressed."""
        context = make_context(
            lookup=make_lookup(minimum_os_version="16.0"), os_version="15.7"
        )
        outcome = _gate(memory_store).evaluate(context)
        assert isinstance(outcome, Suppressed)
        assert outcome.reason == "os_unsupported"

    def test_equal_os_passes(self, memory_store, make_context, make_lookup):
        """Test that the minimum OS itself is supported (padded compare)."""
        context = make_context(
            lookup=make_lookup(minimum_os_version="16.0"), os_version="16"
        )
        assert isinstance(_gate(memory_store).evaluate(context), Alert)

    def test_missing_minimum_os_is_unsupported(
        self, memory_store, make_context, make_lookup
    ):
        """Test that an unknown minimum OS version is treated as unsupported."""
        context = make_context(lookup=make_lookup(minimum_os_version=None))
        outcome = _gate(memory_store).evaluate(context)
        assert outcome.reason == "os_unsupported"

    def test_unknown_device_os_skips_check(
        self, memory_store, make_context, make_lookup
    ):
        """Test that no device OS version skips the OS check entirely."""
        context = make_context(
            lookup=make_lookup(minimum_os_version=None), os_version=None
        )
        assert isinstance(_gate(memory_store).evaluate(context), Alert)

    def test_os_check_precedes_data_check(self, memory_store, make_context, make_lookup):
        """Test that OS incompatibility wins over missing data."""
        context = make_context(
            lookup=make_lookup(minimum_os_version="18.0", app_id=None),
            os_version="17.0",
        )
        assert _gate(memory_store).evaluate(context).reason == "os_unsupported"


class TestDataCompleteness:
    """Tests for the data completeness check."""

    @pytest.mark.parametrize(
        "kwargs,field",
        [
            ({"app_id": None}, "app_id"),
            ({"version": None}, "version"),
            ({"released_days_ago": None}, "release_date"),
        ],
    )
    def test_missing_field(self, memory_store, make_context, make_lookup, kwargs, field):
        """Test that each missing field is named in the suppression."""
        outcome = _gate(memory_store).evaluate(make_context(lookup=make_lookup(**kwargs)))
        assert outcome == Suppressed("data_missing", field=field)

    def test_first_missing_field_reported(self, memory_store, make_context, make_lookup):
        """Test fields are checked in order app_id, version, release_date."""
        lookup = make_lookup(version=None, released_days_ago=None)
        outcome = _gate(memory_store).evaluate(make_context(lookup=lookup))
        assert outcome.field == "version"

    def test_no_state_written(self, memory_store, make_context, make_lookup):
        """Test suppression leaves the store untouched."""
        _gate(memory_store).evaluate(make_context(lookup=make_lookup(app_id=None)))
        assert memory_store.writes == 0


class TestSeverityAndReleaseAge:
    """Tests for the no-update and release-age checks."""

    def test_same_version_is_no_update(self, memory_store, make_context, make_lookup):
        """Test installed == store is suppressed as no_update."""
        context = make_context(installed="2.1.0", lookup=make_lookup(version="2.1.0"))
        assert _gate(memory_store).evaluate(context) == Suppressed("no_update")

    def test_older_store_is_no_update(self, memory_store, make_context, make_lookup):
        """Test a store version older than installed is no_update."""
        context = make_context(installed="3.0", lookup=make_lookup(version="2.9.9"))
        assert _gate(memory_store).evaluate(context).reason == "no_update"

    def test_released_too_soon(self, memory_store, make_context, make_lookup):
        """Test a release younger than the threshold is suppressed."""
        context = make_context(
            lookup=make_lookup(released_days_ago=2), released_for_days=5
        )
        outcome = _gate(memory_store).evaluate(context)
        assert outcome.reason == "released_too_soon"
        assert outcome.detail == "2/5"

    def test_release_age_boundary_is_inclusive(
        self, memory_store, make_context, make_lookup
    ):
        """Test days since release == threshold passes the gate."""
        context = make_context(
            lookup=make_lookup(released_days_ago=5), released_for_days=5
        )
        assert isinstance(_gate(memory_store).evaluate(context), Alert)

    def test_zero_threshold_allows_same_day(
        self, memory_store, make_context, make_lookup
    ):
        """Test a zero threshold lets a same-day release through."""
        context = make_context(
            lookup=make_lookup(released_days_ago=0), released_for_days=0
        )
        assert isinstance(_gate(memory_store).evaluate(context), Alert)

    def test_no_update_precedes_release_age(
        self, memory_store, make_context, make_lookup
    ):
        """Test no_update is reported before released_too_soon."""
        context = make_context(
            installed="2.1.0",
            lookup=make_lookup(version="2.1.0", released_days_ago=0),
            released_for_days=5,
        )
        assert _gate(memory_store).evaluate(context).reason == "no_update"

    def test_malformed_installed_version_raises(
        self, memory_store, make_context, make_lookup
    ):
        """Test malformed versions surface as MalformedVersionError."""
        with pytest.raises(MalformedVersionError):
            _gate(memory_store).evaluate(make_context(installed="2.0-beta"))


class TestSkipVersion:
    """Tests for skipped-version suppression."""

    def test_skipped_version_matching_store_does_not_suppress(
        self, memory_store, make_context, make_lookup
    ):
        """Test skipped == store version does not trigger skip suppression."""
        context = make_context(
            lookup=make_lookup(version="3.0.0"),
            state=AlertState(skipped_version="3.0.0"),
        )
        outcome = _gate(memory_store).evaluate(context)
        assert isinstance(outcome, Alert)

    def test_skipped_version_differing_from_store_suppresses(
        self, memory_store, make_context, make_lookup
    ):
        """Test skipped != store version triggers skip suppression."""
        context = make_context(
            lookup=make_lookup(version="3.1.0"),
            state=AlertState(skipped_version="3.0.0"),
        )
        outcome = _gate(memory_store).evaluate(context)
        assert outcome.reason == "skip_version_update"
        assert memory_store.writes == 0

    def test_skip_check_runs_after_release_age(
        self, memory_store, make_context, make_lookup
    ):
        """Test released_too_soon is reported before skip_version_update."""
        context = make_context(
            lookup=make_lookup(version="3.1.0", released_days_ago=0),
            state=AlertState(skipped_version="3.0.0"),
            released_for_days=3,
        )
        assert _gate(memory_store).evaluate(context).reason == "released_too_soon"


class TestPresentationDecision:
    """Tests for frequency throttling and the next-launch flag."""

    def test_immediately_always_alerts(self, memory_store, make_context, now):
        """Test frequency 'immediately' ignores the last alert date."""
        context = make_context(state=AlertState(last_alert_date=now))
        outcome = _gate(memory_store).evaluate(context)
        assert outcome == Alert(rule=Rule("option", 0), severity="minor")

    def test_first_alert_without_last_date(self, memory_store, make_context):
        """Test a throttled rule alerts when there was no previous alert."""
        gate = _gate(memory_store, rules={"minor": Rule("skip", 7)})
        assert isinstance(gate.evaluate(make_context()), Alert)

    def test_recently_checked(self, memory_store, make_context, now):
        """Test an alert inside the frequency window is suppressed."""
        gate = _gate(memory_store, rules={"minor": Rule("option", 7)})
        context = make_context(state=AlertState(last_alert_date=now - timedelta(days=6)))
        outcome = gate.evaluate(context)
        assert outcome.reason == "recently_checked"
        assert outcome.detail == "6/7"
        assert memory_store.writes == 0

    def test_frequency_boundary_is_inclusive(self, memory_store, make_context, now):
        """Test days since last alert == frequency produces an Alert."""
        gate = _gate(memory_store, rules={"minor": Rule("option", 7)})
        context = make_context(state=AlertState(last_alert_date=now - timedelta(days=7)))
        assert isinstance(gate.evaluate(context), Alert)

    def test_alert_persists_last_alert_date(self, memory_store, make_context, now):
        """Test the alert date is written before evaluate returns."""
        _gate(memory_store).evaluate(make_context())
        assert memory_store.get().last_alert_date == now
        assert memory_store.writes == 1

    def test_pending_flag_forces_one_alert_then_resets(
        self, make_context, now
    ):
        """Test the next-launch flag overrides frequency exactly once."""
        store = MemoryAlertStateStore(
            AlertState(last_alert_date=now, pending_next_launch_check=True)
        )
        gate = _gate(store, rules={"minor": Rule("option", 7)})

        first = gate.evaluate(make_context(state=store.get()))
        assert isinstance(first, Alert)
        assert store.get().pending_next_launch_check is False

        second = gate.evaluate(make_context(state=store.get()))
        assert second == Suppressed("recently_checked", detail="0/7")

    def test_pending_flag_cleared_for_immediate_rule(self, make_context):
        """Test an immediate alert also consumes the next-launch flag."""
        store = MemoryAlertStateStore(AlertState(pending_next_launch_check=True))
        outcome = _gate(store).evaluate(make_context(state=store.get()))
        assert isinstance(outcome, Alert)
        assert store.get().pending_next_launch_check is False

    def test_pending_flag_kept_when_suppressed_earlier(self, make_context, make_lookup):
        """Test a suppressed check leaves the next-launch flag set."""
        store = MemoryAlertStateStore(AlertState(pending_next_launch_check=True))
        context = make_context(
            installed="2.1.0", lookup=make_lookup(version="2.1.0"), state=store.get()
        )
        _gate(store).evaluate(context)
        assert store.get().pending_next_launch_check is True

    def test_none_alert_type_still_alerts(self, memory_store, make_context, now):
        """Test alert type 'none' is an Alert and records the date."""
        gate = _gate(memory_store, rules={"minor": Rule("none", 0)})
        outcome = gate.evaluate(make_context())
        assert outcome.rule.alert_type == "none"
        assert memory_store.get().last_alert_date == now


class TestEndToEndScenario:
    """Installed 2.0.0, store 2.1.0 released 10 days ago, threshold 5."""

    def test_option_minor_alert(self, memory_store, make_context, make_lookup):
        """Test the scenario produces Alert(option, minor)."""
        gate = _gate(
            memory_store, rules={"minor": Rule("option", 0)}, released_for_days=5
        )
        context = make_context(
            installed="2.0.0",
            lookup=make_lookup(version="2.1.0", released_days_ago=10),
            released_for_days=5,
        )
        outcome = gate.evaluate(context)
        assert outcome == Alert(rule=Rule("option", 0), severity="minor")
