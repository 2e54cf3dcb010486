"""
storenudge - policy-driven "new version available" prompts

storenudge decides, given an app's installed version and freshly fetched
store metadata, whether an update alert should be shown, which kind, and
whether user preferences (skip this version, remind me next time) or
rate-limiting suppress it.

storenudge provides:
  - Version parsing and update severity classification (major/minor/patch/revision)
  - Per-severity alert rules (force, option, skip, none) with throttling
  - An ordered alert gate: OS compatibility, missing data, release age,
    skipped version, presentation frequency
  - Durable alert state (last alert date, skipped version, next-launch flag)
  - An iTunes Lookup API fetcher and a console presenter
  - A YAML-configured ``nudge`` CLI

Quick Start
-----------
Run one check from a config file:

    $ nudge check nudge.yaml

Classify an upgrade:

    $ nudge classify 2.0.0 2.1.0
    minor

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
core : module
    Updater facade: one check cycle, reentrancy guard, user actions.
gate : module
    AlertGate decision engine and DecisionContext.
versioning : package
    Version parsing, comparison and severity classification.
policy : package
    Rules, presets and the per-severity rule table.
state : package
    AlertState stores (JSON file, in-memory).
discovery : package
    Store metadata fetchers (iTunes Lookup, static).
presentation : module
    Presenter contract and console presenter.
config : package
    YAML configuration loading and merging.

Public API
----------
    from storenudge.core import Updater, build_updater
    from storenudge.gate import AlertGate, DecisionContext
    from storenudge.versioning import classify, compare_versions
    from storenudge.policy import Rule, UpdatePolicy
    from storenudge.results import Alert, Suppressed, CheckResult
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"
__description__ = "Policy-driven update alert decisions for store-distributed apps"

# Re-export commonly used names for convenience
from storenudge.config import load_config
from storenudge.core import Updater, build_updater
from storenudge.gate import AlertGate, DecisionContext
from storenudge.policy import Rule, UpdatePolicy
from storenudge.results import Alert, CheckResult, Suppressed
from storenudge.versioning import classify, compare_versions, parse_version

__all__ = [
    "__version__",
    "__license__",
    "__description__",
    "Alert",
    "AlertGate",
    "CheckResult",
    "DecisionContext",
    "Rule",
    "Suppressed",
    "UpdatePolicy",
    "Updater",
    "build_updater",
    "classify",
    "compare_versions",
    "load_config",
    "parse_version",
]
