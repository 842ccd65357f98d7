# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""Connection-string resolution from the environment or an env file."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from .errors import ConfigurationError

ENV_FILE_NAME = ".env"
DATABASE_URL_KEY = "DATABASE_URL"


def load_env(path: Path) -> Dict[str, str]:
    env: Dict[str, str] = {}
    if not path.exists():
        return env
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        env[key.strip()] = value.strip().strip("'\"")
    return env


def resolve_database_url(
    env_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """Return DATABASE_URL from the process environment, else the env file.

    The env file defaults to ``.env`` in the current working directory.
    """
    environ = os.environ if environ is None else environ
    value = environ.get(DATABASE_URL_KEY, "").strip()
    if value:
        return value

    path = env_path or Path.cwd() / ENV_FILE_NAME
    value = load_env(path).get(DATABASE_URL_KEY, "")
    if value:
        return value
    raise ConfigurationError(
        f"{DATABASE_URL_KEY} is not set in the environment or in {path}"
    )
