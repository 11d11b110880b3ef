"""Read-only NEAR JSON-RPC access for view steps."""
from __future__ import annotations

import base64
import json
from typing import Any, Dict, Optional

import requests

from .constants import DEFAULT_CALL_TIMEOUT, DEFAULT_NETWORK, RPC_URLS
from .errors import RemoteCallError
from .steps import CallResult, DeploymentStep


def default_rpc_url(network: str = DEFAULT_NETWORK) -> Optional[str]:
    return RPC_URLS.get(network)


def encode_args(args: Dict[str, Any]) -> str:
    return base64.b64encode(json.dumps(args, separators=(",", ":")).encode("utf-8")).decode("ascii")


def decode_result(raw: Any) -> Any:
    """Decode the byte list returned by ``call_function`` into a JSON value."""
    data = bytes(raw or [])
    if not data:
        return None
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        return list(data)
    try:
        return json.loads(text)
    except ValueError:
        return text


class NearRpcClient:
    def __init__(
        self,
        rpc_url: str,
        *,
        timeout: float = DEFAULT_CALL_TIMEOUT,
        finality: str = "final",
        session: Optional[requests.Session] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.timeout = timeout
        self.finality = finality
        self.session = session

    def _post(self, payload: Dict[str, Any]) -> requests.Response:
        headers = {"Content-Type": "application/json"}
        if self.session is not None:
            return self.session.post(self.rpc_url, json=payload, headers=headers, timeout=self.timeout)
        return requests.post(self.rpc_url, json=payload, headers=headers, timeout=self.timeout)

    def view(self, contract_id: str, method: str, args: Dict[str, Any]) -> CallResult:
        payload = {
            "jsonrpc": "2.0",
            "id": "dontcare",
            "method": "query",
            "params": {
                "request_type": "call_function",
                "finality": self.finality,
                "account_id": contract_id,
                "method_name": method,
                "args_base64": encode_args(args),
            },
        }
        label = f"{method} on {contract_id}"
        try:
            response = self._post(payload)
        except requests.RequestException as exc:
            raise RemoteCallError(f"Error contacting NEAR RPC for {label}: {exc}") from exc

        text = response.text or ""
        if response.status_code != 200:
            raise RemoteCallError(
                f"NEAR RPC returned HTTP {response.status_code} for {label}",
                stdout=text,
                returncode=response.status_code,
            )
        try:
            body = response.json()
        except ValueError as exc:
            raise RemoteCallError(f"NEAR RPC returned invalid JSON for {label}", stdout=text) from exc
        if not isinstance(body, dict):
            raise RemoteCallError(f"NEAR RPC returned an unexpected response for {label}", stdout=text)

        if body.get("error"):
            raise RemoteCallError(
                f"NEAR RPC rejected {label}",
                stdout=text,
                stderr=json.dumps(body["error"]),
            )
        result = body.get("result") or {}
        if not isinstance(result, dict):
            raise RemoteCallError(f"NEAR RPC returned an unexpected result for {label}", stdout=text)
        if result.get("error"):
            raise RemoteCallError(f"{label} failed", stdout=text, stderr=str(result["error"]))

        try:
            value = decode_result(result.get("result"))
        except (TypeError, ValueError) as exc:
            raise RemoteCallError(f"NEAR RPC returned a malformed result for {label}", stdout=text) from exc
        return CallResult(value=value, stdout=text)

    def execute(self, step: DeploymentStep) -> CallResult:
        if not step.view:
            raise RemoteCallError(f"{step.method} on {step.contract_id} needs a signed transaction; RPC client only serves views")
        return self.view(step.contract_id, step.method, step.args)
