from __future__ import annotations

import json
import shlex
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

from .constants import ENV_VAR_PATTERN
from .env_utils import resolve_env_value, set_environment_variable
from .errors import ConfigError
from .limits import parse_int
from .logging_utils import get_logger
from .steps import DeploymentStep

logger = get_logger()

_SIGNER_FLAGS = {"--accountId", "--account_id", "--masterAccount"}
_VALUE_FLAGS = _SIGNER_FLAGS | {"--gas", "--deposit", "--amount", "--depositYocto", "--networkId"}


def parse_command_file(path: Path) -> List[Tuple[str, str]]:
    """Return a list of (entry_type, content) pairs from a runbook file.

    ``entry_type`` is either ``"comment"`` or ``"command"``. Multi-line
    commands that rely on ``\\`` continuation are flattened into a single
    command string.
    """

    entries: List[Tuple[str, str]] = []
    buffer = ""

    for raw_line in path.read_text().splitlines():
        stripped = raw_line.strip()

        # Preserve stand-alone comments
        if not buffer and (not stripped or stripped.startswith("#")):
            if stripped:
                entries.append(("comment", stripped))
            continue

        line = raw_line.rstrip()
        if line.endswith("\\"):
            buffer += line[:-1].rstrip() + " "
            continue

        buffer += line.strip()
        if buffer:
            entries.append(("command", buffer.strip()))
        buffer = ""

    if buffer:
        entries.append(("command", buffer.strip()))

    return entries


def _var_name(match) -> str:
    # ${NAME} fills group 1, bare $NAME fills group 2
    return match.group(1) or match.group(2)


def expand_env(command: str, env: Dict[str, str]) -> str:
    names = {_var_name(match) for match in ENV_VAR_PATTERN.finditer(command)}
    missing = sorted(name for name in names if not resolve_env_value(name, env))
    if missing:
        raise ConfigError("Missing environment: " + ", ".join(f"${name}" for name in missing))
    return ENV_VAR_PATTERN.sub(lambda match: str(resolve_env_value(_var_name(match), env)), command)


def command_to_step(command: str, env: Dict[str, str]) -> DeploymentStep:
    """Translate a ``near call`` / ``near view`` command line into a step."""

    try:
        tokens = shlex.split(expand_env(command, env))
    except ValueError as exc:
        raise ConfigError(f"Cannot parse command: {command}") from exc

    if len(tokens) < 4 or Path(tokens[0]).name != "near" or tokens[1] not in ("call", "view"):
        raise ConfigError(f"Not a near call/view command: {command}")

    view = tokens[1] == "view"
    contract_id, method = tokens[2], tokens[3]
    rest = tokens[4:]
    raw_args = ""
    if rest and not rest[0].startswith("--"):
        raw_args = rest.pop(0)

    options: Dict[str, str] = {}
    idx = 0
    while idx < len(rest):
        flag = rest[idx]
        value = None
        if "=" in flag:
            flag, value = flag.split("=", 1)
        if flag not in _VALUE_FLAGS:
            raise ConfigError(f"Unsupported option {flag} in: {command}")
        if value is None:
            idx += 1
            if idx >= len(rest):
                raise ConfigError(f"Option {flag} needs a value in: {command}")
            value = rest[idx]
        options[flag] = value
        idx += 1

    try:
        args = json.loads(raw_args) if raw_args.strip() else {}
    except ValueError as exc:
        raise ConfigError(f"Arguments for {method} are not valid JSON: {raw_args}") from exc
    if not isinstance(args, dict):
        raise ConfigError(f"Arguments for {method} must be a JSON object")

    signer = next((options[flag] for flag in _SIGNER_FLAGS if flag in options), None)
    gas = None
    if "--gas" in options:
        gas = parse_int(options["--gas"])
        if gas is None:
            raise ConfigError(f"Gas for {method} is not an integer: {options['--gas']}")
    deposit_yocto = None
    if "--depositYocto" in options:
        deposit_yocto = parse_int(options["--depositYocto"])
        if deposit_yocto is None:
            raise ConfigError(f"Yocto deposit for {method} is not an integer: {options['--depositYocto']}")

    return DeploymentStep(
        name=method,
        contract_id=contract_id,
        method=method,
        args=args,
        signer=None if view else signer,
        gas=gas,
        deposit=options.get("--deposit", options.get("--amount")),
        deposit_yocto=deposit_yocto,
        view=view,
    )


def runbook_to_steps(entries: Iterable[Tuple[str, str]], env: Dict[str, str]) -> List[DeploymentStep]:
    steps: List[DeploymentStep] = []
    for entry_type, content in entries:
        if entry_type == "comment":
            continue
        command = content.strip()
        if command.startswith("export "):
            key, value, placeholder = set_environment_variable(env, command[len("export "):])
            if placeholder:
                logger.warning("Skipped placeholder export %s=%s", key, value)
            continue
        steps.append(command_to_step(command, env))
    return steps
