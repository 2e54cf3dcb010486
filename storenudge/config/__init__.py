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

"""Configuration loading for storenudge.

YAML app configs are merged over built-in defaults and an optional
organization-wide defaults/org.yaml:

  - Built-in defaults (DEFAULT_CONFIG)
  - Organization defaults (defaults/org.yaml, searched upward)
  - App configuration (the file you pass in)

Public API:

- load_config: Load and merge configuration for an app

Example:
    Basic usage:

        from pathlib import Path
        from storenudge.config import load_config

        config = load_config(Path("nudge.yaml"))
        print(config["app"]["bundle_id"])

"""

from .loader import DEFAULT_CONFIG, load_config

__all__ = ["DEFAULT_CONFIG", "load_config"]
