"""
Configuration loading and merging for storenudge.

Configuration Layers
--------------------
1. **Built-in defaults** (DEFAULT_CONFIG)
   - Default rule (option, immediately), released_for_days=1, itunes fetcher
2. **Organization defaults** (defaults/org.yaml)
   - Optional; found by walking upward from the config file's directory
   - Shared rule tables for every app an organization ships
3. **App configuration** (the file passed to load_config)
   - Always required; must define app.bundle_id and app.installed_version

Merge Behavior
--------------
Deep merge with "last wins" semantics:
  - **Dicts**: Recursively merged (keys from overlay override base)
  - **Lists**: Completely replaced
  - **Scalars**: Overwritten

Path Resolution
---------------
A relative ``state_file`` is resolved against the APP CONFIG FILE location,
so configs stay relocatable.

Example File
------------
    app:
      bundle_id: com.example.app
      installed_version: "2.0.0"
      os_version: "17.0"
    released_for_days: 3
    rules:
      major: critical
      minor: {alert_type: skip, frequency: weekly}

Error Handling
--------------
- ConfigError: missing file, YAML parse errors, empty files, non-mapping
  documents, missing required keys
- All errors are chained with "from err"
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import yaml

from storenudge.exceptions import ConfigError
from storenudge.logging import Logger, get_global_logger

DEFAULT_CONFIG: dict[str, Any] = {
    "app": {
        "country": "us",
    },
    "fetcher": {
        "strategy": "itunes",
    },
    "released_for_days": 1,
    "rules": {
        "default": {"alert_type": "option", "frequency": "immediately"},
    },
    "state_file": "state/alert_state.json",
}

REQUIRED_APP_KEYS = ("bundle_id", "installed_version")


# -------------------------------
# YAML helpers
# -------------------------------


def _load_yaml_file(p: Path) -> Any:
    """
    Load a YAML file and return the parsed Python object.

    Raises:
      ConfigError - missing file, invalid YAML, or empty document
    """
    if not p.exists():
        raise ConfigError(f"Config file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err
    if data is None:
        raise ConfigError(f"YAML file is empty: {p}")
    return data


def _load_mapping(p: Path) -> dict[str, Any]:
    data = _load_yaml_file(p)
    if not isinstance(data, dict):
        raise ConfigError(f"Top-level YAML must be a mapping: {p}")
    return data


# -------------------------------
# Merge logic
# -------------------------------


def _deep_merge_dicts(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """
    Deep-merge two dicts with "overlay wins".

    Rules:
      - dict + dict -> deep merge
      - everything else -> overlay replaces base

    Does not mutate inputs.
    """
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge_dicts(result[k], v)
        else:
            result[k] = v
    return result


# -------------------------------
# Defaults discovery
# -------------------------------


def _find_org_defaults(start_dir: Path) -> Path | None:
    """Walk upward from 'start_dir' looking for 'defaults/org.yaml'."""
    for parent in [start_dir] + list(start_dir.parents):
        candidate = parent / "defaults" / "org.yaml"
        if candidate.exists():
            return candidate
    return None


def _resolve_state_file(cfg: dict[str, Any], config_dir: Path) -> None:
    """Resolve a relative state_file against the config directory (in place)."""
    raw = cfg.get("state_file")
    if isinstance(raw, str) and raw:
        p = Path(raw)
        if not p.is_absolute():
            cfg["state_file"] = str((config_dir / p).resolve())


def _check_required(cfg: dict[str, Any], config_path: Path) -> None:
    app = cfg.get("app")
    if not isinstance(app, dict):
        raise ConfigError(f"'app' must be a mapping in {config_path}")
    missing = [k for k in REQUIRED_APP_KEYS if not app.get(k)]
    if missing:
        raise ConfigError(
            f"Missing required setting(s) in {config_path}: "
            + ", ".join(f"app.{k}" for k in missing)
        )


# -------------------------------
# Public API
# -------------------------------


def load_config(
    config_path: Path,
    *,
    use_org_defaults: bool = True,
    logger: Logger | None = None,
) -> dict[str, Any]:
    """
    Load and merge the effective configuration for one app.

    Steps
      1) Read the app config YAML.
      2) Find defaults/org.yaml by scanning upwards (optional).
      3) Merge: built-in -> org -> app config.
      4) Resolve state_file relative to the config directory.
      5) Check required app settings.

    Returns
      The merged configuration dict.

    Raises
      ConfigError on any loading or validation problem.
    """
    logger = logger or get_global_logger()
    config_path = Path(config_path).resolve()
    config_dir = config_path.parent

    logger.verbose("CONFIG", f"Loading config: {config_path}")
    app_cfg = _load_mapping(config_path)

    merged = copy.deepcopy(DEFAULT_CONFIG)
    layers = 1

    if use_org_defaults:
        org_path = _find_org_defaults(config_dir)
        if org_path is not None and org_path != config_path:
            logger.verbose("CONFIG", f"Loading org defaults: {org_path}")
            merged = _deep_merge_dicts(merged, _load_mapping(org_path))
            layers += 1

    merged = _deep_merge_dicts(merged, app_cfg)
    layers += 1
    logger.verbose("CONFIG", f"Deep merged {layers} layer(s)")
    logger.debug(
        "CONFIG", yaml.safe_dump(merged, default_flow_style=False, sort_keys=False)
    )

    _resolve_state_file(merged, config_dir)
    _check_required(merged, config_path)
    return merged
