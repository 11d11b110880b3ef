from __future__ import annotations

import json
import shlex
import subprocess
from typing import Any, List, Optional

from .constants import DEFAULT_CALL_TIMEOUT, DEFAULT_CLI_BIN, DEFAULT_NETWORK
from .errors import RemoteCallError
from .steps import CallResult, DeploymentStep


def build_command(
    step: DeploymentStep,
    *,
    cli_bin: str = DEFAULT_CLI_BIN,
    network: Optional[str] = DEFAULT_NETWORK,
) -> List[str]:
    """Return the argv the ``near`` CLI needs to submit ``step``."""

    args_json = json.dumps(step.args, separators=(",", ":"))
    command = [cli_bin, "view" if step.view else "call", step.contract_id, step.method, args_json]
    if not step.view:
        if step.signer:
            command += ["--accountId", step.signer]
        if step.gas is not None:
            command += ["--gas", str(step.gas)]
        if step.deposit is not None:
            command += ["--deposit", step.deposit]
        if step.deposit_yocto is not None:
            command += ["--depositYocto", str(step.deposit_yocto)]
    if network:
        command += ["--networkId", network]
    return command


def format_command(command: List[str]) -> str:
    return shlex.join(command)


def parse_cli_output(stdout: str) -> Any:
    """Pull the returned value out of the CLI's human-oriented output.

    The CLI prints progress lines before the value. The value is taken from
    the first line that starts a JSON document; anything that does not parse
    is returned as stripped text.
    """

    text = stdout.strip()
    if not text:
        return None
    lines = text.splitlines()
    for idx, line in enumerate(lines):
        if line.lstrip().startswith(("{", "[", '"')) or line.strip() in ("null", "true", "false"):
            candidate = "\n".join(lines[idx:])
            try:
                return json.loads(candidate)
            except ValueError:
                continue
    last = lines[-1].strip()
    try:
        return json.loads(last)
    except ValueError:
        return text


class NearCli:
    """Submit deployment steps through the ``near`` command-line client."""

    def __init__(
        self,
        cli_bin: str = DEFAULT_CLI_BIN,
        network: Optional[str] = DEFAULT_NETWORK,
        timeout: float = DEFAULT_CALL_TIMEOUT,
        env: Optional[dict] = None,
    ) -> None:
        self.cli_bin = cli_bin
        self.network = network
        self.timeout = timeout
        self.env = env

    def command_for(self, step: DeploymentStep) -> List[str]:
        return build_command(step, cli_bin=self.cli_bin, network=self.network)

    def execute(self, step: DeploymentStep) -> CallResult:
        command = self.command_for(step)
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                env=self.env,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise RemoteCallError(
                f"{step.method} on {step.contract_id} timed out after {self.timeout}s",
                stdout=_text(exc.stdout),
                stderr=_text(exc.stderr),
            ) from exc
        except OSError as exc:
            raise RemoteCallError(f"Unable to run {self.cli_bin!r}: {exc}") from exc

        stdout = result.stdout or ""
        stderr = result.stderr or ""
        if result.returncode != 0:
            raise RemoteCallError(
                f"{step.method} on {step.contract_id} failed with exit code {result.returncode}",
                stdout=stdout,
                stderr=stderr,
                returncode=result.returncode,
            )
        return CallResult(
            value=parse_cli_output(stdout),
            stdout=stdout,
            stderr=stderr,
            returncode=result.returncode,
        )


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)
