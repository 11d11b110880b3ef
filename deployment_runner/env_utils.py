from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import dotenv_values

from .constants import BASE_ACCOUNT_ENV, MASTER_ACCOUNT_ENV, PLACEHOLDER_MARKERS

# Map canonical env names to alternative aliases that may appear in older runbooks
ENV_ALIASES: Dict[str, list[str]] = {
    BASE_ACCOUNT_ENV: ["ID", "FACTORY_ID"],
    MASTER_ACCOUNT_ENV: ["ACCOUNT_ID", "OWNER_ID"],
    "PRICE_ORACLE_ACCOUNT_ID": ["ORACLE_ID"],
}


def parse_env_file(path: Path, env: Dict[str, str]) -> None:
    """Load KEY=VALUE pairs from a .env-style file into ``env``.

    Keys already present in ``env`` win, so the process environment overrides
    the file. Keys declared without a value are ignored.
    """

    if not path.exists():
        return

    for key, value in dotenv_values(path).items():
        if value is None or key in env:
            continue
        env[key] = value


def load_environment(env_file: Optional[Path] = None, base: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    env: Dict[str, str] = dict(os.environ if base is None else base)
    if env_file is not None:
        parse_env_file(env_file, env)
    return env


def is_placeholder(value: str) -> bool:
    upper_value = value.upper()
    return any(marker in upper_value for marker in PLACEHOLDER_MARKERS)


def resolve_env_value(name: str, env: Dict[str, str]) -> str | None:
    value = env.get(name)
    if value:
        return value
    for alias in ENV_ALIASES.get(name, []):
        alias_value = env.get(alias)
        if alias_value:
            env[name] = alias_value
            return alias_value
    return None


def set_environment_variable(env: Dict[str, str], assignment: str) -> tuple[str, str, bool]:
    key, _, value = assignment.partition("=")
    key = key.strip()
    value = value.strip()
    if (value.startswith("\"") and value.endswith("\"")) or (
        value.startswith("'") and value.endswith("'")
    ):
        value = value[1:-1]
    placeholder = is_placeholder(value)
    if not placeholder:
        env[key] = value
    return key, value, placeholder
