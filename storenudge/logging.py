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

"""Logging interface for storenudge.

The decision engine is embedded in host applications, so it never prints
unless asked to. Library classes accept an optional ``logger`` argument and
fall back to a process-wide logger that is silent by default. The ``nudge``
CLI installs a printing logger when ``--verbose`` or ``--debug`` is given.

Output levels:

- step: Always printed (progress through a check cycle)
- verbose: Gate verdicts, state writes, fetch summaries
- debug: Raw lookup payloads, parsed versions, rule tables (implies verbose)

Messages carry a subsystem prefix: FETCH, GATE, STATE, POLICY or UPDATER.

Implementations: DefaultLogger (prints), SilentLogger (global default) and
RecordingLogger (keeps records in memory).

Example:
    Trace a check from a host application:
        ```python
        from storenudge.logging import get_logger, set_global_logger

        set_global_logger(get_logger(verbose=True))
        ```

    Inject a logger into one component only:
        ```python
        gate = AlertGate(policy, store, logger=get_logger(debug=True))
        ```
"""

from __future__ import annotations

import sys
from typing import Protocol, TextIO


class Logger(Protocol):
    """Protocol for logger implementations."""

    def step(self, step: int, total: int, message: str) -> None:
        """Report progress through a multi-step operation.

        Args:
            step: Current step number (1-based).
            total: Total number of steps.
            message: Step description.
        """
        ...

    def verbose(self, prefix: str, message: str) -> None:
        """Report a verbose message.

        Args:
            prefix: Subsystem prefix (e.g., "GATE", "STATE").
            message: Log message.
        """
        ...

    def debug(self, prefix: str, message: str) -> None:
        """Report a debug message.

        Args:
            prefix: Subsystem prefix (e.g., "FETCH").
            message: Log message.
        """
        ...


class DefaultLogger:
    """Logger that writes CLI-style lines, filtered by verbose/debug flags.

    Lines go to ``stream`` when given, otherwise to whatever ``sys.stdout`` is
    at the time of the call.
    """

    def __init__(
        self, verbose: bool = False, debug: bool = False, stream: TextIO | None = None
    ) -> None:
        self._verbose = verbose or debug
        self._debug = debug
        self._stream = stream

    def _write(self, line: str) -> None:
        print(line, file=self._stream or sys.stdout)

    def step(self, step: int, total: int, message: str) -> None:
        self._write(f"[{step}/{total}] {message}")

    def verbose(self, prefix: str, message: str) -> None:
        if self._verbose:
            self._write(f"[{prefix}] {message}")

    def debug(self, prefix: str, message: str) -> None:
        if self._debug:
            self._write(f"[{prefix}] {message}")


class SilentLogger:
    """Logger that discards everything. The process-wide default."""

    def step(self, step: int, total: int, message: str) -> None:
        return None

    def verbose(self, prefix: str, message: str) -> None:
        return None

    def debug(self, prefix: str, message: str) -> None:
        return None


class RecordingLogger:
    """Logger that keeps every message in memory.

    Hosts can attach it to one Updater to show why an alert was or wasn't
    shown; tests use it to assert on gate verdicts.

    Attributes:
        records: (level, prefix, message) tuples in call order. Steps are
            recorded with level "step" and prefix "".
    """

    def __init__(self) -> None:
        self.records: list[tuple[str, str, str]] = []

    def step(self, step: int, total: int, message: str) -> None:
        self.records.append(("step", "", f"[{step}/{total}] {message}"))

    def verbose(self, prefix: str, message: str) -> None:
        self.records.append(("verbose", prefix, message))

    def debug(self, prefix: str, message: str) -> None:
        self.records.append(("debug", prefix, message))

    def messages(self, prefix: str) -> list[str]:
        """Return the messages logged under ``prefix``, any level."""
        return [message for _, p, message in self.records if p == prefix]


_global_logger: Logger = SilentLogger()


def get_logger(
    verbose: bool = False, debug: bool = False, stream: TextIO | None = None
) -> Logger:
    """Build a printing logger with the given verbosity.

    Args:
        verbose: Print verbose messages.
        debug: Print debug messages (implies verbose).
        stream: Destination; defaults to the current sys.stdout.

    Returns:
        A DefaultLogger instance.
    """
    return DefaultLogger(verbose=verbose, debug=debug, stream=stream)


def get_global_logger() -> Logger:
    """Return the process-wide logger (silent unless configured)."""
    return _global_logger


def set_global_logger(logger: Logger) -> None:
    """Replace the process-wide logger.

    Components that were given an explicit logger are unaffected.
    """
    global _global_logger
    _global_logger = logger
