from __future__ import annotations

from pathlib import Path
import re


BASE_DIR = Path(__file__).resolve().parent.parent
RUNBOOK_FILE = BASE_DIR / "deployment_commands.txt"
LOG_FILE = BASE_DIR / "deployment_results.log"
DEFAULT_ENV_FILE = BASE_DIR / ".env"

PLACEHOLDER_MARKERS = ("YOUR", "REPLACE", "<", ">")
ENV_VAR_PATTERN = re.compile(r"(?<!\\)\$(?:\{([A-Za-z_][A-Za-z0-9_]*)\}|([A-Za-z_][A-Za-z0-9_]*))")

# Environment keys
BASE_ACCOUNT_ENV = "CONTRACT_ID"
MASTER_ACCOUNT_ENV = "MASTER_ACCOUNT"
NETWORK_ENV = "NEAR_NETWORK"
CLI_BIN_ENV = "NEAR_CLI"
RPC_URL_ENV = "NEAR_RPC_URL"
CALL_TIMEOUT_ENV = "CALL_TIMEOUT"

# NEAR units
TGAS = 1_000_000_000_000
MAX_PREPAID_GAS = 300 * TGAS
ONE_YOCTO = 1

DEFAULT_NETWORK = "testnet"
DEFAULT_CLI_BIN = "near"
DEFAULT_CREATE_TOKEN_GAS = 200_000_000_000_000
DEFAULT_STORAGE_DEPOSIT = "1"
DEFAULT_CALL_TIMEOUT = 120.0

RPC_URLS = {
    "mainnet": "https://rpc.mainnet.near.org",
    "testnet": "https://rpc.testnet.near.org",
}

ACCOUNT_ID_PATTERN = re.compile(r"^(([a-z\d]+[-_])*[a-z\d]+\.)*([a-z\d]+[-_])*[a-z\d]+$")
MIN_ACCOUNT_ID_LEN = 2
MAX_ACCOUNT_ID_LEN = 64


__all__ = [
    "BASE_DIR",
    "RUNBOOK_FILE",
    "LOG_FILE",
    "DEFAULT_ENV_FILE",
    "PLACEHOLDER_MARKERS",
    "ENV_VAR_PATTERN",
    "BASE_ACCOUNT_ENV",
    "MASTER_ACCOUNT_ENV",
    "NETWORK_ENV",
    "CLI_BIN_ENV",
    "RPC_URL_ENV",
    "CALL_TIMEOUT_ENV",
    "TGAS",
    "MAX_PREPAID_GAS",
    "ONE_YOCTO",
    "DEFAULT_NETWORK",
    "DEFAULT_CLI_BIN",
    "DEFAULT_CREATE_TOKEN_GAS",
    "DEFAULT_STORAGE_DEPOSIT",
    "DEFAULT_CALL_TIMEOUT",
    "RPC_URLS",
    "ACCOUNT_ID_PATTERN",
    "MIN_ACCOUNT_ID_LEN",
    "MAX_ACCOUNT_ID_LEN",
]
