from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .accounts import derive_account_id, factory_token_name, format_price, is_valid_account_id, is_valid_symbol
from .constants import (
    BASE_ACCOUNT_ENV,
    CALL_TIMEOUT_ENV,
    CLI_BIN_ENV,
    DEFAULT_CALL_TIMEOUT,
    DEFAULT_CLI_BIN,
    DEFAULT_CREATE_TOKEN_GAS,
    DEFAULT_NETWORK,
    DEFAULT_STORAGE_DEPOSIT,
    MASTER_ACCOUNT_ENV,
    NETWORK_ENV,
    ONE_YOCTO,
    RPC_URL_ENV,
)
from .env_utils import is_placeholder, resolve_env_value
from .errors import ConfigError

# Network-specific defaults for the wrapped NEAR token and the price oracle
NETWORK_DEFAULTS: Dict[str, Dict[str, str]] = {
    "testnet": {"locked_token_id": "wrap.testnet", "price_oracle_account_id": "priceoracle.testnet"},
    "mainnet": {"locked_token_id": "wrap.near", "price_oracle_account_id": "priceoracle.near"},
}

DEFAULT_TITLE = "near"
DEFAULT_DECIMALS = 24
DEFAULT_TARGET_PRICE = 150_000
FT_METADATA_SPEC = "ft-1.0.0"


@dataclass
class TokenMetadata:
    spec: str = FT_METADATA_SPEC
    name: str = "Locked NEAR"
    symbol: str = "LNEAR"
    decimals: int = DEFAULT_DECIMALS

    def to_args(self) -> Dict[str, Any]:
        return {
            "spec": self.spec,
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
        }


@dataclass
class DeploymentConfig:
    """Named inputs for one deployment run.

    Everything the runbook used to hard-code lives here. ``token_name`` is the
    id the factory stores the created token under; when it is not configured
    it is computed from the title and target price the way the factory does.
    """

    base_account_id: str
    master_account_id: Optional[str] = None
    network: str = DEFAULT_NETWORK
    locked_token_id: Optional[str] = None
    asset_id: Optional[str] = None
    title: str = DEFAULT_TITLE
    whitelist_decimals: int = DEFAULT_DECIMALS
    metadata: TokenMetadata = field(default_factory=TokenMetadata)
    target_price: int = DEFAULT_TARGET_PRICE
    token_name: Optional[str] = None
    backup_trigger_account_id: Optional[str] = None
    price_oracle_account_id: Optional[str] = None
    oracle_asset_ids: List[str] = field(default_factory=list)
    oracle_msg: str = ""
    storage_deposit: str = DEFAULT_STORAGE_DEPOSIT
    create_token_gas: int = DEFAULT_CREATE_TOKEN_GAS
    oracle_deposit_yocto: int = ONE_YOCTO
    cli_bin: str = DEFAULT_CLI_BIN
    rpc_url: Optional[str] = None
    call_timeout: float = DEFAULT_CALL_TIMEOUT

    def __post_init__(self) -> None:
        defaults = NETWORK_DEFAULTS.get(self.network, {})
        if self.master_account_id is None:
            self.master_account_id = self.base_account_id
        if self.locked_token_id is None:
            self.locked_token_id = defaults.get("locked_token_id")
        if self.price_oracle_account_id is None:
            self.price_oracle_account_id = defaults.get("price_oracle_account_id")
        if self.token_name is None:
            self.token_name = factory_token_name(self.title, self.target_price)
        if not self.oracle_asset_ids:
            asset = self.asset_id or self.locked_token_id
            self.oracle_asset_ids = [asset] if asset else []

    @property
    def token_account_id(self) -> str:
        return derive_account_id(str(self.token_name), self.base_account_id)

    @classmethod
    def from_env(cls, env: Dict[str, str]) -> "DeploymentConfig":
        base_account_id = _lookup(env, BASE_ACCOUNT_ENV)
        if not base_account_id:
            raise ConfigError(f"{BASE_ACCOUNT_ENV} is not set")

        metadata = TokenMetadata(
            spec=_lookup(env, "TOKEN_SPEC") or FT_METADATA_SPEC,
            name=_lookup(env, "TOKEN_NAME_LABEL") or TokenMetadata.name,
            symbol=_lookup(env, "TOKEN_SYMBOL") or TokenMetadata.symbol,
            decimals=_int(env, "TOKEN_DECIMALS", DEFAULT_DECIMALS),
        )
        asset_ids = _lookup(env, "ORACLE_ASSET_IDS")
        return cls(
            base_account_id=base_account_id,
            master_account_id=_lookup(env, MASTER_ACCOUNT_ENV),
            network=_lookup(env, NETWORK_ENV) or DEFAULT_NETWORK,
            locked_token_id=_lookup(env, "LOCKED_TOKEN_ID"),
            asset_id=_lookup(env, "ASSET_ID"),
            title=_lookup(env, "TOKEN_TITLE") or DEFAULT_TITLE,
            whitelist_decimals=_int(env, "WHITELIST_DECIMALS", DEFAULT_DECIMALS),
            metadata=metadata,
            target_price=_int(env, "TARGET_PRICE", DEFAULT_TARGET_PRICE),
            token_name=_lookup(env, "TOKEN_NAME"),
            backup_trigger_account_id=_lookup(env, "BACKUP_TRIGGER_ACCOUNT_ID"),
            price_oracle_account_id=_lookup(env, "PRICE_ORACLE_ACCOUNT_ID"),
            oracle_asset_ids=[item.strip() for item in asset_ids.split(",") if item.strip()] if asset_ids else [],
            oracle_msg=env.get("ORACLE_MSG", ""),
            storage_deposit=_lookup(env, "STORAGE_DEPOSIT") or DEFAULT_STORAGE_DEPOSIT,
            create_token_gas=_int(env, "CREATE_TOKEN_GAS", DEFAULT_CREATE_TOKEN_GAS),
            oracle_deposit_yocto=_int(env, "ORACLE_DEPOSIT_YOCTO", ONE_YOCTO),
            cli_bin=_lookup(env, CLI_BIN_ENV) or DEFAULT_CLI_BIN,
            rpc_url=_lookup(env, RPC_URL_ENV),
            call_timeout=_float(env, CALL_TIMEOUT_ENV, DEFAULT_CALL_TIMEOUT),
        )

    def validate(self) -> List[str]:
        """Return human-readable problems; an empty list means the config is usable."""

        issues: List[str] = []
        accounts = {
            "base account": self.base_account_id,
            "master account": self.master_account_id,
            "locked token": self.locked_token_id,
            "price oracle": self.price_oracle_account_id,
        }
        if self.backup_trigger_account_id is not None:
            accounts["backup trigger"] = self.backup_trigger_account_id
        if self.asset_id is not None:
            accounts["asset"] = self.asset_id
        for label, account_id in accounts.items():
            if not account_id:
                issues.append(f"{label} id is not set")
            elif not is_valid_account_id(account_id):
                issues.append(f"{label} id {account_id!r} is not a valid NEAR account id")

        if not is_valid_symbol(self.title):
            issues.append(f"token title {self.title!r} may only contain 0-9, a-z, '_' and '-'")
        if self.metadata.decimals != self.whitelist_decimals:
            issues.append(
                f"token metadata decimals ({self.metadata.decimals}) differ from whitelisted "
                f"decimals ({self.whitelist_decimals}); the factory rejects create_token with 'Wrong decimals'"
            )
        if self.target_price <= 0:
            issues.append(f"target price must be positive, got {self.target_price}")
        if not self.oracle_asset_ids:
            issues.append("no asset ids configured for oracle_call")
        if self.base_account_id and not is_valid_account_id(self.token_account_id):
            issues.append(f"derived token account id {self.token_account_id!r} is not a valid NEAR account id")
        return issues


def _lookup(env: Dict[str, str], name: str) -> Optional[str]:
    value = resolve_env_value(name, env)
    if value is None:
        return None
    value = value.strip()
    if not value or is_placeholder(value):
        return None
    return value


def _int(env: Dict[str, str], name: str, default: int) -> int:
    raw = _lookup(env, name)
    if raw is None:
        return default
    try:
        return int(raw.replace("_", ""), 10)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def _float(env: Dict[str, str], name: str, default: float) -> float:
    raw = _lookup(env, name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


def config_summary(config: DeploymentConfig) -> Mapping[str, Any]:
    return {
        "base_account_id": config.base_account_id,
        "master_account_id": config.master_account_id,
        "network": config.network,
        "locked_token_id": config.locked_token_id,
        "token_name": config.token_name,
        "token_account_id": config.token_account_id,
        "price_oracle_account_id": config.price_oracle_account_id,
        "whitelist_decimals": config.whitelist_decimals,
        "metadata_decimals": config.metadata.decimals,
        "target_price": f"{config.target_price} (${format_price(config.target_price)})",
        "create_token_gas": config.create_token_gas,
    }
