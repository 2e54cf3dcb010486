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

"""Alert state persistence for storenudge.

Public API:

- AlertState: Snapshot of last alert date, skipped version, pending flag
- AlertStateStore: Protocol every store implements (get/set)
- JsonAlertStateStore: Durable JSON-file store keyed by app
- MemoryAlertStateStore: In-process store
- load_state / save_state: Raw JSON document helpers

"""

from .tracker import (
    AlertState,
    AlertStateStore,
    JsonAlertStateStore,
    MemoryAlertStateStore,
    load_state,
    save_state,
)

__all__ = [
    "AlertState",
    "AlertStateStore",
    "JsonAlertStateStore",
    "MemoryAlertStateStore",
    "load_state",
    "save_state",
]
