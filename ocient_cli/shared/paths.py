"""Locations of the ocient-cli configuration.

Both tools read a single YAML file::

    ~/.ocient-cli/
        config.yaml     connection, query and browse settings

``OCIENT_CLI_CONFIG_DIR`` moves the directory and ``OCIENT_CLI_CONFIG_PATH``
points at a file directly (it wins over the directory). A ``--config`` flag
bypasses both; see ``shared.config.load_config``. Values may use ``~`` and
``$VARS``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping

DEFAULT_CONFIG_DIR = "~/.ocient-cli"
DEFAULT_CONFIG_FILE = "config.yaml"

CONFIG_DIR_ENV = "OCIENT_CLI_CONFIG_DIR"
CONFIG_FILE_ENV = "OCIENT_CLI_CONFIG_PATH"


def _expand(path_str: str) -> Path:
    return Path(os.path.expandvars(path_str)).expanduser()


def get_config_dir(create: bool = False, env: Mapping[str, str] | None = None) -> Path:
    """Return the configuration directory, optionally creating it.

    An explicit ``env`` mapping is used as-is, even when empty, so callers
    (and tests) can ignore the process environment.
    """
    env = os.environ if env is None else env
    path = _expand(env.get(CONFIG_DIR_ENV) or DEFAULT_CONFIG_DIR)
    if create:
        path.mkdir(parents=True, exist_ok=True)
    return path


def default_config_path(create_parents: bool = False, env: Mapping[str, str] | None = None) -> Path:
    """Return the config file both CLIs read when no ``--config`` is given."""
    env = os.environ if env is None else env
    override = env.get(CONFIG_FILE_ENV)
    if not override:
        return get_config_dir(create=create_parents, env=env) / DEFAULT_CONFIG_FILE
    path = _expand(override)
    if create_parents:
        path.parent.mkdir(parents=True, exist_ok=True)
    return path


def resolve_path(path_str: str | Path) -> Path:
    """Expand ``~`` and environment variables in a user-supplied path."""
    return _expand(str(path_str))
