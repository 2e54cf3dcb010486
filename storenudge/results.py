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

"""Public result types for storenudge.

A single version check ends in exactly one Outcome:

- Alert: An update prompt must be presented using the given rule
- Suppressed: No prompt, for one of a closed set of reasons

The Updater wraps the outcome (or the error that ended the check) in a
CheckResult and hands it to the caller's completion callback.

All dataclasses are frozen (immutable).

Example:
    ```python
    def on_result(result: CheckResult) -> None:
        if result.error:
            print(f"Check failed: {result.error}")
        elif isinstance(result.outcome, Alert):
            print(f"{result.outcome.severity} update, user chose {result.action}")
        else:
            print(f"Suppressed: {result.outcome.reason}")
    ```
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, Union

from storenudge.policy import Rule
from storenudge.versioning import UpdateSeverity

if TYPE_CHECKING:
    from storenudge.discovery import LookupResult
    from storenudge.exceptions import NudgeError

SuppressionReason = Literal[
    "os_unsupported",
    "data_missing",
    "no_update",
    "released_too_soon",
    "skip_version_update",
    "recently_checked",
]

AlertAction = Literal["update", "next_time", "skip", "unknown"]


@dataclass(frozen=True)
class Alert:
    """The caller must present an alert.

    Attributes:
        rule: Rule selected for the update's severity.
        severity: Magnitude of the available update.
    """

    rule: Rule
    severity: UpdateSeverity


@dataclass(frozen=True)
class Suppressed:
    """No alert should be shown.

    Attributes:
        reason: Why the alert was suppressed.
        field: Name of the missing lookup field (data_missing only).
        detail: Human-readable context (e.g., "2/5" days for released_too_soon).
    """

    reason: SuppressionReason
    field: str | None = None
    detail: str | None = None


Outcome = Union[Alert, Suppressed]


@dataclass(frozen=True)
class CheckResult:
    """What the completion callback receives for one check.

    Exactly one of ``outcome`` and ``error`` is set.

    Attributes:
        outcome: Alert or Suppressed, when the check ran to a decision.
        error: The error that ended the check.
        lookup: Store metadata, when the fetch succeeded.
        action: User's choice for a resolved alert; "unknown" for alert
            type "none"; None when not applicable or not yet resolved.
    """

    outcome: Outcome | None = None
    error: NudgeError | None = None
    lookup: LookupResult | None = None
    action: AlertAction | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def should_alert(self) -> bool:
        return isinstance(self.outcome, Alert)
