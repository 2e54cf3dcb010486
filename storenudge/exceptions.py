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

"""Exception hierarchy for storenudge.

Every failure that ends a version check is one of these types:

- ConfigError: Bad configuration (YAML parse, unknown rule values, missing keys)
- MalformedVersionError: A version string has an empty or non-numeric segment
- NetworkError: The store lookup could not be completed
    - NoResultsFoundError: The lookup succeeded but returned no app
    - LookupParseError: The lookup response could not be decoded
- MalformedStoreURLError: No usable store listing URL could be built

All exceptions inherit from NudgeError. Lower layers raise them; the
Updater facade catches NudgeError at the end of the pipeline and hands it to
the completion callback as a value, so a check never raises to its caller.

Suppression reasons (no update, released too soon, skipped version, recently
checked, unsupported OS, missing data) are NOT errors. They are reported as
Suppressed outcomes.

Example:
    Catching lookup failures when calling a fetcher directly:
        ```python
        from storenudge.discovery import get_fetcher
        from storenudge.exceptions import NetworkError, NoResultsFoundError

        fetcher = get_fetcher("itunes")
        try:
            lookup = fetcher.fetch("com.example.app", "us")
        except NoResultsFoundError:
            print("App is not listed in this region")
        except NetworkError as e:
            print(f"Lookup failed: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "NudgeError",
    "ConfigError",
    "MalformedVersionError",
    "NetworkError",
    "NoResultsFoundError",
    "LookupParseError",
    "MalformedStoreURLError",
]


class NudgeError(Exception):
    """Base exception for all storenudge errors."""

    pass


class ConfigError(NudgeError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - YAML parsing (syntax errors, empty documents)
    - Missing required settings (app.bundle_id, app.installed_version)
    - Unknown severities, alert types, presets or frequencies in rules
    - Unknown fetcher strategies
    """

    pass


class MalformedVersionError(NudgeError, ValueError):
    """Raised when a version string cannot be parsed.

    A version is a dot-delimited list of non-negative integers. Empty input,
    empty segments ("1..2") and non-numeric segments ("1.2a") all fail.
    """

    def __init__(self, version: object, reason: str = "") -> None:
        self.version = version
        message = f"Malformed version {version!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class NetworkError(NudgeError):
    """Raised when the store lookup fails.

    Covers connection failures, timeouts and non-2xx HTTP responses from the
    lookup endpoint.
    """

    pass


class NoResultsFoundError(NetworkError):
    """Raised when the store lookup returns zero results for the app."""

    pass


class LookupParseError(NetworkError):
    """Raised when the store lookup response is not the expected JSON shape."""

    pass


class MalformedStoreURLError(NudgeError):
    """Raised when the store listing URL cannot be built (e.g. no app id)."""

    pass
