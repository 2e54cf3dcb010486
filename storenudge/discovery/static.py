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

"""Static fetcher: store metadata supplied up front.

Used for offline runs, staging configs and tests:

    ```yaml
    fetcher:
      strategy: static
      result:
        app_id: 123456789
        version: "2.1.0"
        minimum_os_version: "15.0"
        release_date: "2025-01-01T00:00:00Z"
    ```

An empty or absent ``result`` behaves like a lookup with no listing.
"""

from __future__ import annotations

from typing import Any

from storenudge.exceptions import NoResultsFoundError

from .base import LookupResult, lookup_result_from_mapping, register_fetcher


class StaticFetcher:
    """Fetcher that always returns the same LookupResult."""

    def __init__(self, result: LookupResult | dict[str, Any] | None = None) -> None:
        if isinstance(result, dict):
            result = lookup_result_from_mapping(result) if result else None
        self.result = result

    def fetch(self, bundle_id: str, country: str = "us") -> LookupResult:
        if self.result is None:
            raise NoResultsFoundError(f"No static result configured for {bundle_id!r}")
        return self.result


register_fetcher("static", StaticFetcher)
