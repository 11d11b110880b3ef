from __future__ import annotations

from typing import Optional


class DeploymentError(Exception):
    """Base class for deployment runner failures."""


class ConfigError(DeploymentError):
    """Raised when configuration or runbook input cannot be used."""


class RemoteCallError(DeploymentError):
    """Raised when the NEAR node (or the CLI in front of it) rejects a call.

    The service's own output is kept verbatim on the exception so callers can
    surface it without interpretation.
    """

    def __init__(
        self,
        message: str,
        *,
        stdout: str = "",
        stderr: str = "",
        returncode: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode
