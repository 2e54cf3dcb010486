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

"""Core version comparison utilities for storenudge.

This module is pure: it does NOT touch the network or disk. It parses
dot-delimited numeric version strings (store versions, installed versions,
OS versions) and classifies how large an upgrade is.
"""

from __future__ import annotations

import re
from typing import Literal, Union

from storenudge.exceptions import MalformedVersionError

# ----------------------------
# Types
# ----------------------------

UpdateSeverity = Literal["none", "revision", "patch", "minor", "major"]

SEVERITY_RANK: dict[str, int] = {
    "none": 0,
    "revision": 1,
    "patch": 2,
    "minor": 3,
    "major": 4,
}

# Severity of a change at each index of the version vector; index 3 and
# beyond are revisions.
_SEVERITY_BY_INDEX: tuple[UpdateSeverity, ...] = ("major", "minor", "patch")

Version = tuple[int, ...]
VersionLike = Union[str, Version]

_DIGITS = re.compile(r"[0-9]+")


# ----------------------------
# Parsing
# ----------------------------


def parse_version(text: str) -> Version:
    """Parse a dot-delimited version string into a tuple of ints.

    Surrounding whitespace is ignored. Every segment must be a run of ASCII
    digits; there is no prerelease or "v" prefix handling because store
    versions are plain numeric.

    Args:
        text: Version string (e.g., "2.10.1").

    Returns:
        Tuple of non-negative integers (e.g., (2, 10, 1)).

    Raises:
        MalformedVersionError: If the input is empty or any segment is empty
            or non-numeric.

    Example:
        ```python
        parse_version("1.2.3")   # (1, 2, 3)
        parse_version("1.2a")    # raises MalformedVersionError
        ```

    """
    if not isinstance(text, str):
        raise MalformedVersionError(text, "expected a string")
    stripped = text.strip()
    if not stripped:
        raise MalformedVersionError(text, "empty version")

    nums: list[int] = []
    for part in stripped.split("."):
        if not _DIGITS.fullmatch(part):
            raise MalformedVersionError(
                text, f"non-numeric version component {part!r}"
            )
        nums.append(int(part))
    return tuple(nums)


def _as_version(value: VersionLike) -> Version:
    if isinstance(value, tuple):
        return value
    return parse_version(value)


def _pad_equal(a: Version, b: Version) -> tuple[Version, Version]:
    """Pad tuples with zeros so they align for element-wise comparison."""
    n = max(len(a), len(b))
    return a + (0,) * (n - len(a)), b + (0,) * (n - len(b))


# ----------------------------
# Comparison
# ----------------------------


def compare_versions(a: VersionLike, b: VersionLike) -> int:
    """Compare two versions after zero-padding the shorter one.

    Returns -1 if a < b, 0 if equal, 1 if a > b. "1.2" and "1.2.0" are equal.
    """
    aa, bb = _pad_equal(_as_version(a), _as_version(b))
    return (aa > bb) - (aa < bb)


def is_newer(store: VersionLike, installed: VersionLike) -> bool:
    """Return True iff the store version is strictly newer than installed."""
    return compare_versions(store, installed) > 0


def classify(installed: VersionLike, store: VersionLike) -> UpdateSeverity:
    """Classify the magnitude of an upgrade from installed to store.

    The severity is decided by the first index at which the zero-padded
    vectors differ: 0 is major, 1 is minor, 2 is patch, 3+ is revision.
    If the store version is not newer, the result is "none".

    Example:
        ```python
        classify("2.0.0", "2.1.0")   # "minor"
        classify("1.2", "1.2.0.1")   # "revision"
        classify("3.0", "2.9")       # "none"
        ```

    """
    old, new = _pad_equal(_as_version(installed), _as_version(store))
    if new <= old:
        return "none"

    for index, (o, n) in enumerate(zip(old, new)):
        if o != n:
            if index < len(_SEVERITY_BY_INDEX):
                return _SEVERITY_BY_INDEX[index]
            return "revision"
    return "none"  # unreachable: new > old implies a differing index


def severity_at_least(severity: UpdateSeverity, floor: UpdateSeverity) -> bool:
    """Return True if ``severity`` ranks at or above ``floor``."""
    return SEVERITY_RANK[severity] >= SEVERITY_RANK[floor]
