from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional

from .constants import MAX_PREPAID_GAS
from .steps import DeploymentStep


def parse_int(token: str) -> Optional[int]:
    if not token or token.startswith("$"):
        return None
    try:
        if token.startswith("0x") or token.startswith("0X"):
            return int(token, 16)
        sanitized = token.replace("_", "")
        return int(sanitized, 10)
    except ValueError:
        return None


def parse_near_amount(token: str) -> Optional[Decimal]:
    try:
        amount = Decimal(token.replace("_", ""))
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount


def check_step_limits(step: DeploymentStep) -> Optional[str]:
    """Return a reason the step's allowances cannot be submitted, or None."""

    label = f"{step.method} on {step.contract_id}"
    if step.view:
        if step.signer or step.gas is not None or step.deposit is not None or step.deposit_yocto is not None:
            return f"{label} is a view and cannot carry a signer, gas or deposit"
        return None

    if not step.signer:
        return f"{label} has no signer"
    if step.gas is not None and not 0 < step.gas <= MAX_PREPAID_GAS:
        return f"{label} gas {step.gas} is outside (0, {MAX_PREPAID_GAS}]"
    if step.deposit is not None:
        amount = parse_near_amount(step.deposit)
        if amount is None or amount < 0:
            return f"{label} deposit {step.deposit!r} is not a non-negative NEAR amount"
    if step.deposit_yocto is not None and step.deposit_yocto < 0:
        return f"{label} yocto deposit {step.deposit_yocto} is negative"
    if step.deposit is not None and step.deposit_yocto is not None:
        return f"{label} sets both a NEAR and a yocto deposit"
    return None


def check_limits(steps: Iterable[DeploymentStep]) -> List[str]:
    issues: List[str] = []
    for step in steps:
        issue = check_step_limits(step)
        if issue:
            issues.append(issue)
    return issues
