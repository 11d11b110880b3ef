from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import DeploymentConfig
from .errors import RemoteCallError


class StepStatus(str, enum.Enum):
    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"


@dataclass
class DeploymentStep:
    """One call against the NEAR node.

    ``gas``, ``deposit`` and ``deposit_yocto`` are forwarded to the transport
    exactly as given. ``signer`` is ``None`` for read-only views.
    """

    name: str
    contract_id: str
    method: str
    args: Dict[str, Any] = field(default_factory=dict)
    signer: Optional[str] = None
    gas: Optional[int] = None
    deposit: Optional[str] = None
    deposit_yocto: Optional[int] = None
    view: bool = False


@dataclass
class CallResult:
    value: Any = None
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0


@dataclass
class StepResult:
    step: DeploymentStep
    status: StepStatus = StepStatus.PENDING
    result: Optional[CallResult] = None
    error: Optional[RemoteCallError] = None
    duration: float = 0.0


@dataclass
class DeploymentReport:
    results: List[StepResult]
    cancelled: bool = False

    @property
    def succeeded(self) -> bool:
        return not self.cancelled and all(r.status is StepStatus.DONE for r in self.results)

    @property
    def failed_step(self) -> Optional[StepResult]:
        for result in self.results:
            if result.status is StepStatus.FAILED:
                return result
        return None

    @property
    def error(self) -> Optional[RemoteCallError]:
        failed = self.failed_step
        return failed.error if failed else None

    def raise_for_failure(self) -> None:
        """Re-raise the error of the failed step, if any, unchanged."""
        error = self.error
        if error is not None:
            raise error

    def to_state(self) -> List[Dict[str, Any]]:
        return [
            {
                "name": r.step.name,
                "contract_id": r.step.contract_id,
                "method": r.step.method,
                "status": r.status.value,
                "value": r.result.value if r.result else None,
                "error": str(r.error) if r.error else None,
                "duration": round(r.duration, 3),
            }
            for r in self.results
        ]


def build_deployment_steps(config: DeploymentConfig) -> List[DeploymentStep]:
    base_id = config.base_account_id
    master_id = config.master_account_id

    whitelist_args: Dict[str, Any] = {
        "token_id": config.locked_token_id,
        "title": config.title,
        "decimals": config.whitelist_decimals,
    }
    if config.asset_id:
        whitelist_args["asset_id"] = config.asset_id

    token_args = {
        "token_id": config.locked_token_id,
        # U128 values travel as decimal strings in NEAR JSON
        "target_price": str(config.target_price),
        "metadata": config.metadata.to_args(),
        "backup_trigger_account_id": config.backup_trigger_account_id,
        "price_oracle_account_id": config.price_oracle_account_id,
    }

    return [
        DeploymentStep(
            name="init factory",
            contract_id=base_id,
            method="new",
            args={},
            signer=master_id,
        ),
        DeploymentStep(
            name="storage deposit",
            contract_id=base_id,
            method="storage_deposit",
            args={},
            signer=master_id,
            deposit=config.storage_deposit,
        ),
        DeploymentStep(
            name="whitelist token",
            contract_id=base_id,
            method="whitelist_token",
            args=whitelist_args,
            # whitelist_token is private to the factory account
            signer=base_id,
        ),
        DeploymentStep(
            name="create token",
            contract_id=base_id,
            method="create_token",
            args={"token_args": token_args},
            signer=master_id,
            gas=config.create_token_gas,
        ),
        DeploymentStep(
            name="get token",
            contract_id=base_id,
            method="get_token",
            args={"token_id": config.token_name},
            view=True,
        ),
        DeploymentStep(
            name="get token info",
            contract_id=config.token_account_id,
            method="get_info",
            args={},
            view=True,
        ),
        DeploymentStep(
            name="oracle call",
            contract_id=str(config.price_oracle_account_id),
            method="oracle_call",
            args={
                "receiver_id": config.token_account_id,
                "asset_ids": list(config.oracle_asset_ids),
                "msg": config.oracle_msg,
            },
            signer=master_id,
            deposit_yocto=config.oracle_deposit_yocto,
        ),
    ]
