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

"""Presenter contract and the console presenter.

The decision engine never renders anything. When a check produces an
interactive Alert, the Updater builds a PresentationRequest and hands it to a
Presenter together with a ``respond`` callback. The presenter shows the
choices implied by the alert type and calls ``respond`` exactly once with the
chosen action, either immediately (console) or later (GUI event loop).

Actions per alert type:

    force  -> update
    option -> next_time, update
    skip   -> next_time, update, skip
    none   -> (no alert)

"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from storenudge.discovery import LookupResult
from storenudge.policy import AlertType, Rule
from storenudge.results import AlertAction
from storenudge.versioning import UpdateSeverity

_ACTIONS: dict[str, tuple[AlertAction, ...]] = {
    "force": ("update",),
    "option": ("next_time", "update"),
    "skip": ("next_time", "update", "skip"),
    "none": (),
}


def actions_for(alert_type: AlertType) -> tuple[AlertAction, ...]:
    """Return the actions a presenter must offer for an alert type."""
    return _ACTIONS[alert_type]


@dataclass(frozen=True)
class AlertStrings:
    """Text shown in the alert. English defaults; hosts pass their own.

    ``message`` may use the ``{app_name}`` and ``{version}`` placeholders.
    """

    title: str = "Update Available"
    message: str = (
        "A new version of {app_name} is available. "
        "Please update to version {version} now."
    )
    update_button: str = "Update"
    next_time_button: str = "Next time"
    skip_button: str = "Skip this version"
    app_name: str = "this app"

    def format_message(self, version: str | None) -> str:
        return self.message.format(app_name=self.app_name, version=version or "")

    def label_for(self, action: AlertAction) -> str:
        return {
            "update": self.update_button,
            "next_time": self.next_time_button,
            "skip": self.skip_button,
        }.get(action, action)


@dataclass(frozen=True)
class PresentationRequest:
    """Everything a presenter needs to render one alert."""

    rule: Rule
    severity: UpdateSeverity
    lookup: LookupResult
    strings: AlertStrings
    actions: tuple[AlertAction, ...]

    @property
    def title(self) -> str:
        return self.strings.title

    @property
    def message(self) -> str:
        return self.strings.format_message(self.lookup.version)


class Presenter(Protocol):
    """Renders an alert and reports the user's choice."""

    def present(
        self,
        request: PresentationRequest,
        respond: Callable[[AlertAction], None],
    ) -> None:
        """Show the alert; call ``respond`` once with one of request.actions."""
        ...


class ConsolePresenter:
    """Presenter that prompts on the terminal.

    Choices are numbered; the prompt repeats until a valid number is given.
    End of input resolves to "next_time" when offered, otherwise "update".
    """

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output_func: Callable[[str], None] = print,
    ) -> None:
        self._input = input_func
        self._output = output_func

    def present(
        self,
        request: PresentationRequest,
        respond: Callable[[AlertAction], None],
    ) -> None:
        self._output(request.title)
        self._output(request.message)
        if request.lookup.release_notes:
            self._output("")
            self._output(request.lookup.release_notes)
        self._output("")
        for number, action in enumerate(request.actions, start=1):
            self._output(f"  {number}) {request.strings.label_for(action)}")

        respond(self._ask(request.actions))

    def _ask(self, actions: tuple[AlertAction, ...]) -> AlertAction:
        while True:
            try:
                answer = self._input("Choose an option: ").strip()
            except EOFError:
                return "next_time" if "next_time" in actions else "update"
            if answer.isdigit() and 1 <= int(answer) <= len(actions):
                return actions[int(answer) - 1]
            self._output(f"Please enter a number between 1 and {len(actions)}.")
