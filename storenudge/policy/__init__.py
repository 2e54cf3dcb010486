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

"""Update alert policy for storenudge.

Modules:

rules : module
    Rules, presets and the per-severity rule table.

Public API:

Rule : class
    Alert style and frequency for one update severity.
UpdatePolicy : class
    Rule table, default rule and release-age threshold.
parse_rule / parse_frequency : function
    Convert configuration values into Rules.

"""

from .rules import (
    ALERT_TYPES,
    ANNOYING,
    CRITICAL,
    DAILY,
    DEFAULT,
    HINTING,
    IMMEDIATELY,
    PERSISTENT,
    PRESETS,
    RELAXED,
    WEEKLY,
    AlertType,
    Rule,
    UpdatePolicy,
    parse_frequency,
    parse_rule,
)

__all__ = [
    "ALERT_TYPES",
    "ANNOYING",
    "CRITICAL",
    "DAILY",
    "DEFAULT",
    "HINTING",
    "IMMEDIATELY",
    "PERSISTENT",
    "PRESETS",
    "RELAXED",
    "WEEKLY",
    "AlertType",
    "Rule",
    "UpdatePolicy",
    "parse_frequency",
    "parse_rule",
]
