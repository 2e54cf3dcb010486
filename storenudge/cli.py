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

"""Command-line interface for storenudge.

Commands:

    check: Run one version check for an app config and report the outcome
    classify: Print the update severity between two versions
    state: Show or reset the persisted alert state

Example:
    Run a check, prompting on the terminal if an alert is due:
        ```bash
        $ nudge check nudge.yaml
        ```

    Run a check without prompting (CI, cron). A reported alert still records
    its date and throttles the next prompt:
        ```bash
        $ nudge check nudge.yaml --no-prompt
        ```

    Classify an upgrade:
        ```bash
        $ nudge classify 1.2.3 1.3.0
        minor
        ```

    Forget skipped versions and reminders:
        ```bash
        $ nudge state nudge.yaml --reset
        ```

Exit Codes:

- 0: Success (suppressed outcomes are successes)
- 1: Error (configuration, lookup, or malformed version)

"""

from __future__ import annotations

import argparse
from pathlib import Path
import sys

from storenudge import __version__
from storenudge.config import load_config
from storenudge.core import build_updater
from storenudge.exceptions import ConfigError, MalformedVersionError, NudgeError
from storenudge.logging import get_logger, set_global_logger
from storenudge.presentation import ConsolePresenter
from storenudge.results import Alert, CheckResult
from storenudge.state import JsonAlertStateStore
from storenudge.versioning import classify


def _print_error(err: Exception, args: argparse.Namespace) -> None:
    print(f"Error: {err}")
    if getattr(args, "verbose", False) or getattr(args, "debug", False):
        import traceback

        traceback.print_exc()


def _print_check_result(result: CheckResult) -> None:
    print("=" * 70)
    print("CHECK RESULTS")
    print("=" * 70)
    if result.lookup is not None:
        print(f"App ID:          {result.lookup.app_id}")
        print(f"Store Version:   {result.lookup.version}")
        print(f"Minimum OS:      {result.lookup.minimum_os_version}")
        print(f"Released:        {result.lookup.release_date}")
    outcome = result.outcome
    if isinstance(outcome, Alert):
        print("Outcome:         alert")
        print(f"Severity:        {outcome.severity}")
        print(f"Alert Type:      {outcome.rule.alert_type}")
        print(f"Frequency:       {outcome.rule.frequency} day(s)")
        print(f"Action:          {result.action or '(unresolved)'}")
    elif outcome is not None:
        print("Outcome:         suppressed")
        print(f"Reason:          {outcome.reason}")
        if outcome.field:
            print(f"Missing Field:   {outcome.field}")
        if outcome.detail:
            print(f"Detail:          {outcome.detail}")
    print("=" * 70)


def cmd_check(args: argparse.Namespace) -> int:
    """Handler for 'nudge check'.

    Loads the app config, runs one check cycle and prints the outcome. With
    --no-prompt, alerts are reported but not presented and no user action is
    recorded. The alert date is still saved, so a reported alert counts
    toward the rule's frequency exactly like a presented one.

    Returns:
        Exit code (0 for any outcome, 1 for errors).

    """
    set_global_logger(get_logger(verbose=args.verbose, debug=args.debug))

    config_path = Path(args.config).resolve()
    try:
        config = load_config(config_path)
        presenter = None if args.no_prompt else ConsolePresenter()
        updater = build_updater(config, presenter=presenter, state_file=args.state_file)
    except NudgeError as err:
        _print_error(err, args)
        return 1

    print(f"Checking for updates: {updater.bundle_id} {updater.installed_version}")
    print()

    result = updater.check_now()
    if result is None:
        print("Check dropped: an alert is already on screen.")
        return 0
    if result.error is not None:
        print(f"Error: {result.error}")
        return 1

    _print_check_result(result)
    return 0


def cmd_classify(args: argparse.Namespace) -> int:
    """Handler for 'nudge classify'. Prints the severity."""
    try:
        severity = classify(args.installed, args.store)
    except MalformedVersionError as err:
        _print_error(err, args)
        return 1
    print(severity)
    return 0


def cmd_state(args: argparse.Namespace) -> int:
    """Handler for 'nudge state'. Shows or resets the persisted alert state."""
    set_global_logger(get_logger(verbose=args.verbose))
    try:
        config = load_config(Path(args.config).resolve())
    except ConfigError as err:
        _print_error(err, args)
        return 1

    bundle_id = config["app"]["bundle_id"]
    state_file = Path(args.state_file or config["state_file"])
    store = JsonAlertStateStore(state_file, bundle_id)

    if args.reset:
        store.reset()
        print(f"Alert state reset for {bundle_id}")
        return 0

    state = store.get()
    print(f"State File:      {state_file}")
    print(f"App:             {bundle_id}")
    print(f"Last Alert:      {state.last_alert_date or '(never)'}")
    print(f"Skipped Version: {state.skipped_version or '(none)'}")
    print(f"Remind Next:     {state.pending_next_launch_check}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nudge",
        description="storenudge - decide when to show 'new version available' alerts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"nudge {__version__}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'check' command
    parser_check = subparsers.add_parser(
        "check",
        help="Run one version check for an app",
        description="Fetch store metadata, apply the alert rules and report the outcome.",
    )
    parser_check.add_argument("config", help="Path to the app config YAML file")
    parser_check.add_argument(
        "--state-file",
        type=Path,
        default=None,
        help="Alert state file (default: state_file from config)",
    )
    parser_check.add_argument(
        "--no-prompt",
        action="store_true",
        help=(
            "Report alerts without prompting for an action. The alert date is "
            "still recorded and counts toward the rule frequency"
        ),
    )
    parser_check.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show gate verdicts and state writes",
    )
    parser_check.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show lookup payloads and merged config (implies --verbose)",
    )
    parser_check.set_defaults(func=cmd_check)

    # 'classify' command
    parser_classify = subparsers.add_parser(
        "classify",
        help="Print the update severity between two versions",
        description="Classify an upgrade as major, minor, patch, revision or none.",
    )
    parser_classify.add_argument("installed", help="Installed version")
    parser_classify.add_argument("store", help="Store version")
    parser_classify.set_defaults(func=cmd_classify)

    # 'state' command
    parser_state = subparsers.add_parser(
        "state",
        help="Show or reset persisted alert state",
        description="Inspect the last alert date, skipped version and reminder flag.",
    )
    parser_state.add_argument("config", help="Path to the app config YAML file")
    parser_state.add_argument(
        "--state-file",
        type=Path,
        default=None,
        help="Alert state file (default: state_file from config)",
    )
    parser_state.add_argument(
        "--reset",
        action="store_true",
        help="Clear the stored state for this app",
    )
    parser_state.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show config loading details",
    )
    parser_state.set_defaults(func=cmd_state)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the nudge CLI.

    Registered as the 'nudge' console script in pyproject.toml.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
