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

"""Store metadata fetchers for storenudge.

Importing this package registers the built-in fetchers:

- itunes: iTunes Lookup API (requests)
- static: Preconfigured metadata

Public API:

- LookupResult: Store metadata (app id, version, minimum OS, release date)
- Fetcher: Protocol for fetchers
- get_fetcher / register_fetcher: Registry access

"""

from .base import (
    Fetcher,
    LookupResult,
    get_fetcher,
    lookup_result_from_mapping,
    parse_release_date,
    register_fetcher,
)

# Import strategies so they self-register
from .itunes import ItunesLookupFetcher  # noqa: F401
from .static import StaticFetcher  # noqa: F401

__all__ = [
    "Fetcher",
    "ItunesLookupFetcher",
    "LookupResult",
    "StaticFetcher",
    "get_fetcher",
    "lookup_result_from_mapping",
    "parse_release_date",
    "register_fetcher",
]
