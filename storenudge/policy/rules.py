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

"""Alert presentation rules for storenudge.

Maps the severity of an available update to a Rule: which alert style to
show and how often it may be shown.

Example:
    Force major updates, let users skip anything smaller:

        from storenudge.policy.rules import CRITICAL, RELAXED, UpdatePolicy

        policy = UpdatePolicy(
            rules={"major": CRITICAL, "minor": RELAXED},
            released_for_days=3,
        )
        policy.rule_for("major")   # Rule(alert_type='force', frequency=0)
        policy.rule_for("patch")   # default rule: option, immediately

"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from storenudge.exceptions import ConfigError
from storenudge.versioning import SEVERITY_RANK, UpdateSeverity

AlertType = Literal["force", "option", "skip", "none"]

ALERT_TYPES: tuple[str, ...] = ("force", "option", "skip", "none")

# Frequency is a minimum number of days between presentations.
IMMEDIATELY = 0
DAILY = 1
WEEKLY = 7

_FREQUENCY_NAMES: dict[str, int] = {
    "immediately": IMMEDIATELY,
    "daily": DAILY,
    "weekly": WEEKLY,
}


@dataclass(frozen=True)
class Rule:
    """Alert style plus throttling frequency for one update severity.

    Attributes:
        alert_type: "force" (update only), "option" (next time or update),
            "skip" (next time, update or skip this version), or "none"
            (no alert; results are handed straight to the caller).
        frequency: Minimum days between presentations. 0 means immediately.

    """

    alert_type: AlertType = "option"
    frequency: int = IMMEDIATELY

    @property
    def is_immediate(self) -> bool:
        return self.frequency == IMMEDIATELY


# Ready-made rules
ANNOYING = Rule("option", IMMEDIATELY)
CRITICAL = Rule("force", IMMEDIATELY)
DEFAULT = Rule("skip", DAILY)
HINTING = Rule("option", WEEKLY)
PERSISTENT = Rule("option", DAILY)
RELAXED = Rule("skip", WEEKLY)

PRESETS: dict[str, Rule] = {
    "annoying": ANNOYING,
    "critical": CRITICAL,
    "default": DEFAULT,
    "hinting": HINTING,
    "persistent": PERSISTENT,
    "relaxed": RELAXED,
}


@dataclass(frozen=True)
class UpdatePolicy:
    """Per-severity rule table plus the release-age threshold.

    Attributes:
        rules: Mapping of severity to Rule. Severities not listed use
            default_rule.
        default_rule: Fallback Rule (option, immediately).
        released_for_days: Days a store version must have been public
            before any alert is shown.

    """

    rules: Mapping[str, Rule] = field(default_factory=dict)
    default_rule: Rule = Rule("option", IMMEDIATELY)
    released_for_days: int = 1

    def rule_for(self, severity: UpdateSeverity) -> Rule:
        """Return the configured Rule for a severity."""
        return self.rules.get(severity, self.default_rule)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> UpdatePolicy:
        """Build a policy from the ``rules`` and ``released_for_days`` keys.

        Each rule entry is either a preset name ("critical") or a mapping with
        ``alert_type`` and ``frequency``. The special key ``default`` sets the
        fallback rule.

        Raises:
            ConfigError: On unknown severities, presets, alert types or
                frequencies, or a negative released_for_days.

        """
        raw_rules = config.get("rules") or {}
        if not isinstance(raw_rules, Mapping):
            raise ConfigError("'rules' must be a mapping of severity to rule")

        default_rule = Rule("option", IMMEDIATELY)
        rules: dict[str, Rule] = {}
        for severity, value in raw_rules.items():
            rule = parse_rule(value, where=f"rules.{severity}")
            if severity == "default":
                default_rule = rule
            elif severity in SEVERITY_RANK and severity != "none":
                rules[severity] = rule
            else:
                raise ConfigError(
                    f"Unknown severity {severity!r} in rules. Expected one of: "
                    "major, minor, patch, revision, default"
                )

        released = config.get("released_for_days", 1)
        if isinstance(released, bool) or not isinstance(released, int):
            raise ConfigError(
                f"released_for_days must be an integer, got {released!r}"
            )
        if released < 0:
            raise ConfigError("released_for_days cannot be negative")

        return cls(rules=rules, default_rule=default_rule, released_for_days=released)


def parse_frequency(value: Any) -> int:
    """Convert a frequency setting to a day count.

    Accepts "immediately", "daily", "weekly" or a non-negative integer.

    Raises:
        ConfigError: If the value is not recognized.

    """
    if isinstance(value, bool):
        raise ConfigError(f"Invalid frequency {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise ConfigError(f"Frequency cannot be negative: {value}")
        return value
    if isinstance(value, str):
        key = value.strip().lower()
        if key in _FREQUENCY_NAMES:
            return _FREQUENCY_NAMES[key]
        if key.isdigit():
            return int(key)
    raise ConfigError(
        f"Invalid frequency {value!r}. Expected immediately, daily, weekly "
        "or a number of days"
    )


def parse_rule(value: Any, where: str = "rule") -> Rule:
    """Convert a preset name or ``{alert_type, frequency}`` mapping to a Rule."""
    if isinstance(value, Rule):
        return value
    if isinstance(value, str):
        preset = PRESETS.get(value.strip().lower())
        if preset is None:
            raise ConfigError(
                f"Unknown rule preset {value!r} at {where}. "
                f"Available: {', '.join(sorted(PRESETS))}"
            )
        return preset
    if not isinstance(value, Mapping):
        raise ConfigError(f"{where} must be a preset name or a mapping")

    alert_type = value.get("alert_type", "option")
    if alert_type not in ALERT_TYPES:
        raise ConfigError(
            f"Invalid alert_type {alert_type!r} at {where}. "
            f"Expected one of: {', '.join(ALERT_TYPES)}"
        )
    frequency = parse_frequency(value.get("frequency", IMMEDIATELY))
    return Rule(alert_type=alert_type, frequency=frequency)
