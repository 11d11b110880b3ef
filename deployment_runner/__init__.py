from __future__ import annotations

from .constants import BASE_DIR, RUNBOOK_FILE, LOG_FILE, DEFAULT_ENV_FILE
from .accounts import derive_account_id
from .cmd_parser import parse_command_file, runbook_to_steps
from .config import DeploymentConfig, TokenMetadata
from .errors import ConfigError, DeploymentError, RemoteCallError
from .executor import DeploymentRunner
from .steps import CallResult, DeploymentReport, DeploymentStep, StepStatus, build_deployment_steps
