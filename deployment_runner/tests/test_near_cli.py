from __future__ import annotations

import subprocess

import pytest

from deployment_runner import near_cli
from deployment_runner.errors import RemoteCallError
from deployment_runner.near_cli import NearCli, build_command, format_command, parse_cli_output
from deployment_runner.steps import DeploymentStep, build_deployment_steps


def _fake_run(returncode=0, stdout="", stderr="", calls=None):
    def run(command, **kwargs):
        if calls is not None:
            calls.append((command, kwargs))
        return subprocess.CompletedProcess(command, returncode, stdout=stdout, stderr=stderr)

    return run


def test_call_command_carries_exact_gas_literal(config):
    step = next(s for s in build_deployment_steps(config) if s.method == "create_token")

    command = build_command(step)

    assert command[:4] == ["near", "call", "factory.testnet", "create_token"]
    assert command[command.index("--gas") + 1] == "200000000000000"
    assert command[command.index("--accountId") + 1] == "factory.testnet"
    assert command[-2:] == ["--networkId", "testnet"]


def test_view_command_has_no_signer_or_allowances():
    step = DeploymentStep(name="info", contract_id="near_6.factory.testnet", method="get_info", view=True)

    assert build_command(step, network=None) == ["near", "view", "near_6.factory.testnet", "get_info", "{}"]


def test_deposit_flags():
    step = DeploymentStep(
        name="oracle", contract_id="priceoracle.testnet", method="oracle_call",
        args={"msg": ""}, signer="owner.testnet", deposit_yocto=1,
    )
    command = build_command(step, cli_bin="/opt/near", network="mainnet")

    assert command[0] == "/opt/near"
    assert command[command.index("--depositYocto") + 1] == "1"
    assert "--deposit" not in command
    assert format_command(command).startswith("/opt/near call priceoracle.testnet oracle_call '{\"msg\":\"\"}'")


def test_execute_returns_parsed_value(monkeypatch, config):
    calls = []
    monkeypatch.setattr(
        near_cli.subprocess, "run",
        _fake_run(stdout="View call: factory.testnet.get_token({})\n{\"asset_id\": \"wrap.testnet\"}\n", calls=calls),
    )
    step = next(s for s in build_deployment_steps(config) if s.method == "get_token")

    result = NearCli(timeout=5).execute(step)

    assert result.value == {"asset_id": "wrap.testnet"}
    assert result.returncode == 0
    command, kwargs = calls[0]
    assert command[1] == "view"
    assert kwargs["timeout"] == 5
    assert kwargs["check"] is False


def test_non_zero_exit_raises_with_verbatim_output(monkeypatch, config):
    stderr = "ServerTransactionError: Smart contract panicked: Wrong decimals\n"
    monkeypatch.setattr(near_cli.subprocess, "run", _fake_run(returncode=1, stdout="Scheduling a call\n", stderr=stderr))
    step = build_deployment_steps(config)[3]

    with pytest.raises(RemoteCallError) as excinfo:
        NearCli().execute(step)

    assert excinfo.value.stderr == stderr
    assert excinfo.value.stdout == "Scheduling a call\n"
    assert excinfo.value.returncode == 1


def test_timeout_raises_remote_call_error(monkeypatch, config):
    def run(command, **kwargs):
        raise subprocess.TimeoutExpired(command, kwargs["timeout"], output=b"partial")

    monkeypatch.setattr(near_cli.subprocess, "run", run)

    with pytest.raises(RemoteCallError, match="timed out") as excinfo:
        NearCli(timeout=0.5).execute(build_deployment_steps(config)[0])
    assert excinfo.value.stdout == "partial"


def test_missing_binary_raises_remote_call_error(monkeypatch, config):
    def run(command, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", command[0])

    monkeypatch.setattr(near_cli.subprocess, "run", run)

    with pytest.raises(RemoteCallError, match="Unable to run"):
        NearCli(cli_bin="near-missing").execute(build_deployment_steps(config)[0])


@pytest.mark.parametrize(
    "stdout, expected",
    [
        ("", None),
        ("Transaction Id 9xYz\n\"\"\n", ""),
        ("Scheduling a call\ntrue\n", True),
        ("View call: a.b({})\n[\n  \"wrap.testnet\"\n]\n", ["wrap.testnet"]),
        ("View call: a.b({})\n{ asset_id: 'wrap.testnet' }\n", "View call: a.b({})\n{ asset_id: 'wrap.testnet' }"),
    ],
)
def test_parse_cli_output(stdout, expected):
    assert parse_cli_output(stdout) == expected
