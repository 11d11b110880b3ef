from __future__ import annotations

from dataclasses import astuple, replace

import pytest

from deployment_runner.cmd_parser import command_to_step, expand_env, parse_command_file, runbook_to_steps
from deployment_runner.config import DeploymentConfig
from deployment_runner.constants import RUNBOOK_FILE
from deployment_runner.errors import ConfigError
from deployment_runner.steps import build_deployment_steps

ENV = {"CONTRACT_ID": "factory.testnet"}


def test_parse_command_file_flattens_continuations(tmp_path):
    runbook = tmp_path / "runbook.txt"
    runbook.write_text(
        "# deploy\n"
        "\n"
        "near call $CONTRACT_ID new '{}' \\\n"
        "   --accountId $CONTRACT_ID\n"
        "near view $CONTRACT_ID get_token '{\"token_id\": \"near_6\"}'\n"
    )

    assert parse_command_file(runbook) == [
        ("comment", "# deploy"),
        ("command", "near call $CONTRACT_ID new '{}' --accountId $CONTRACT_ID"),
        ("command", "near view $CONTRACT_ID get_token '{\"token_id\": \"near_6\"}'"),
    ]


def test_shipped_runbook_matches_built_steps():
    parsed = runbook_to_steps(parse_command_file(RUNBOOK_FILE), dict(ENV))
    built = build_deployment_steps(DeploymentConfig(base_account_id="factory.testnet"))

    assert len(parsed) == len(built)
    for from_file, from_config in zip(parsed, built):
        assert astuple(replace(from_file, name="")) == astuple(replace(from_config, name=""))


def test_command_to_step_reads_options():
    step = command_to_step(
        "near call ${CONTRACT_ID} create_token '{\"token_args\": {}}' --accountId=owner.testnet --gas 200000000000000 --deposit 0.1",
        dict(ENV),
    )

    assert step.contract_id == "factory.testnet"
    assert step.method == "create_token"
    assert step.args == {"token_args": {}}
    assert step.signer == "owner.testnet"
    assert step.gas == 200000000000000
    assert step.deposit == "0.1"
    assert not step.view


def test_bare_variable_keeps_following_brace():
    step = command_to_step(
        "near call x.testnet m '{\"n\":'$N'}' --accountId a.testnet",
        {"N": "5"},
    )
    assert step.args == {"n": 5}

    step = command_to_step("near call x.testnet m '{\"n\":$N}' --accountId a.testnet", {"N": "5"})
    assert step.args == {"n": 5}


def test_braced_variable_is_expanded():
    step = command_to_step("near view ${CONTRACT_ID}x get_info '{}'", {"CONTRACT_ID": "factory.testnet"})

    assert step.contract_id == "factory.testnetx"
    assert step.view


def test_derived_ids_are_expanded_inside_quoted_json():
    step = command_to_step(
        "near call priceoracle.testnet oracle_call '{\"receiver_id\": \"near_6.'$CONTRACT_ID'\"}' "
        "--accountId $CONTRACT_ID --depositYocto 1",
        dict(ENV),
    )

    assert step.args == {"receiver_id": "near_6.factory.testnet"}
    assert step.deposit_yocto == 1


def test_export_lines_update_environment():
    env = {}
    steps = runbook_to_steps(
        [
            ("command", "export CONTRACT_ID=factory.testnet"),
            ("command", "export MASTER_ACCOUNT=YOUR_ACCOUNT"),
            ("command", "near view $CONTRACT_ID get_info"),
        ],
        env,
    )

    assert env == {"CONTRACT_ID": "factory.testnet"}
    assert steps[0].contract_id == "factory.testnet"
    assert steps[0].args == {}
    assert steps[0].view


def test_missing_variables_are_reported():
    with pytest.raises(ConfigError, match=r"\$MASTER_ACCOUNT"):
        expand_env("near call $CONTRACT_ID new '{}' --accountId $MASTER_ACCOUNT", dict(ENV))


@pytest.mark.parametrize(
    "command",
    [
        "ls -la",
        "near deploy factory.testnet res/factory.wasm",
        "near call factory.testnet new '{not json}' --accountId factory.testnet",
        "near call factory.testnet new '[1]' --accountId factory.testnet",
        "near call factory.testnet new '{}' --unknown flag",
        "near call factory.testnet new '{}' --accountId",
        "near call factory.testnet new '{}' --accountId factory.testnet --gas lots",
        "near call factory.testnet new '{unterminated",
    ],
)
def test_rejected_commands(command):
    with pytest.raises(ConfigError):
        command_to_step(command, dict(ENV))
