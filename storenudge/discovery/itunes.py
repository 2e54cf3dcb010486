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

"""iTunes Lookup API fetcher.

Queries ``https://itunes.apple.com/lookup?bundleId=<id>&country=<cc>`` and
maps the first result onto a LookupResult:

    trackId                    -> app_id
    version                    -> version
    minimumOsVersion           -> minimum_os_version
    currentVersionReleaseDate  -> release_date
    releaseNotes               -> release_notes
    trackViewUrl               -> track_url

Error Handling:

- NetworkError: connection failures, timeouts, non-2xx responses
- LookupParseError: body is not JSON or has no "results" list
- NoResultsFoundError: "results" is empty (app not listed in that region)

Configuration:
    ```yaml
    fetcher:
      strategy: itunes
      timeout: 30          # seconds; the engine itself has no timeout
    ```

"""

from __future__ import annotations

from typing import Any

import requests

from storenudge.exceptions import LookupParseError, NetworkError, NoResultsFoundError
from storenudge.logging import get_global_logger

from .base import LookupResult, parse_release_date, register_fetcher

LOOKUP_URL = "https://itunes.apple.com/lookup"


class ItunesLookupFetcher:
    """Fetcher for Apple's iTunes Lookup API."""

    def __init__(self, timeout: float = 30, lookup_url: str = LOOKUP_URL) -> None:
        self.timeout = timeout
        self.lookup_url = lookup_url

    def fetch(self, bundle_id: str, country: str = "us") -> LookupResult:
        logger = get_global_logger()
        params = {"bundleId": bundle_id}
        if country:
            params["country"] = country.lower()

        logger.verbose("FETCH", f"Looking up {bundle_id} ({country or 'default'})")

        try:
            response = requests.get(self.lookup_url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as err:
            raise NetworkError(
                f"Store lookup failed: {response.status_code} {response.reason}"
            ) from err
        except requests.exceptions.RequestException as err:
            raise NetworkError(f"Failed to reach store lookup: {err}") from err

        try:
            payload = response.json()
        except ValueError as err:
            raise LookupParseError("Store lookup returned invalid JSON") from err

        logger.debug("FETCH", f"Lookup payload: {payload!r}")

        if not isinstance(payload, dict) or not isinstance(payload.get("results"), list):
            raise LookupParseError("Store lookup response has no 'results' list")

        results = payload["results"]
        if not results:
            raise NoResultsFoundError(
                f"No store listing found for {bundle_id!r} in region {country!r}"
            )

        first = results[0]
        if not isinstance(first, dict):
            raise LookupParseError("Store lookup result is not an object")

        lookup = _lookup_from_itunes(first)
        logger.verbose(
            "FETCH",
            f"Store version {lookup.version} (app id {lookup.app_id}, "
            f"minimum OS {lookup.minimum_os_version})",
        )
        return lookup


def _lookup_from_itunes(item: dict[str, Any]) -> LookupResult:
    track_id = item.get("trackId")
    version = item.get("version")
    minimum_os = item.get("minimumOsVersion")
    return LookupResult(
        app_id=track_id if isinstance(track_id, int) and not isinstance(track_id, bool) else None,
        version=str(version) if version else None,
        minimum_os_version=str(minimum_os) if minimum_os else None,
        release_date=parse_release_date(item.get("currentVersionReleaseDate")),
        release_notes=item.get("releaseNotes") or None,
        track_url=item.get("trackViewUrl") or None,
    )


register_fetcher("itunes", ItunesLookupFetcher)
