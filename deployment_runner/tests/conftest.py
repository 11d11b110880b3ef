from __future__ import annotations

from typing import Dict, List, Optional, Set

import pytest

from deployment_runner.config import DeploymentConfig
from deployment_runner.errors import RemoteCallError
from deployment_runner.steps import CallResult, DeploymentStep


class RecordingTransport:
    """Transport double that records calls and fails on chosen methods."""

    def __init__(self, fail_on: Optional[Set[str]] = None) -> None:
        self.fail_on = fail_on or set()
        self.calls: List[DeploymentStep] = []
        self.errors: Dict[str, RemoteCallError] = {}

    def execute(self, step: DeploymentStep) -> CallResult:
        self.calls.append(step)
        if step.method in self.fail_on:
            error = RemoteCallError(
                f"{step.method} rejected",
                stderr="Smart contract panicked: Not enough required balance",
                returncode=1,
            )
            self.errors[step.method] = error
            raise error
        return CallResult(value={"method": step.method}, stdout="ok\n")


@pytest.fixture
def config() -> DeploymentConfig:
    return DeploymentConfig(base_account_id="factory.testnet", token_name="near_6")


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()
