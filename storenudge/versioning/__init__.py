"""
Version parsing and update classification for storenudge.

Store versions, installed versions and OS versions are all plain
dot-delimited numeric strings. This package parses them into integer tuples,
compares them with zero-padding, and classifies an available upgrade as
major, minor, patch or revision.

Modules
-------
keys : module
    Parsing, comparison and severity classification.

Public API
----------
UpdateSeverity : Literal type
    "none", "revision", "patch", "minor" or "major".
SEVERITY_RANK : dict
    Ordering of severities (none < revision < patch < minor < major).
parse_version : function
    Parse a version string into a tuple of ints.
compare_versions : function
    Compare two versions, returning -1, 0, or 1.
is_newer : function
    Check if a store version is newer than the installed one.
classify : function
    Determine the UpdateSeverity between installed and store versions.
severity_at_least : function
    Compare two severities by rank.

Index Mapping
-------------
The first differing index of the padded vectors decides the severity:

    index 0 -> major      ("1.0.0" -> "2.0.0")
    index 1 -> minor      ("2.0.0" -> "2.1.0")
    index 2 -> patch      ("1.2.3" -> "1.2.4")
    index 3+ -> revision  ("1.2"   -> "1.2.0.1")

Examples
--------
    >>> from storenudge.versioning import classify, compare_versions
    >>> compare_versions("1.2", "1.2.0")
    0
    >>> classify("2.0.0", "2.1.0")
    'minor'
"""

from .keys import (
    SEVERITY_RANK,
    UpdateSeverity,
    Version,
    classify,
    compare_versions,
    is_newer,
    parse_version,
    severity_at_least,
)

__all__ = [
    "SEVERITY_RANK",
    "UpdateSeverity",
    "Version",
    "classify",
    "compare_versions",
    "is_newer",
    "parse_version",
    "severity_at_least",
]
