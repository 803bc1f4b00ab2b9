"""Configuration loading for the token deployer."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from copy import deepcopy
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ValidationError, field_validator, model_validator

DEFAULT_CONFIG_DIR = Path(os.environ.get("SOLTOKEN_HOME", Path.home() / ".soltoken"))
CONFIG_FILENAME = "config.toml"
DEFAULT_SOLANA_WALLET = Path.home() / ".config" / "solana" / "id.json"

DEFAULT_DECIMALS = 9
DEFAULT_INITIAL_SUPPLY = 1_000_000_000

NETWORK_RPC_URLS = {
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
    "testnet": "https://api.testnet.solana.com",
    "devnet": "https://api.devnet.solana.com",
}
NETWORK_ALIASES = {"mainnet": "mainnet-beta", "main": "mainnet-beta"}
EXPLORER_BASE_URL = "https://explorer.solana.com"

# Environment variable -> config field
ENV_OVERRIDES = {
    "SOLANA_NETWORK": "network",
    "SOLANA_RPC_URL": "rpc_url",
    "IMGBB_API_KEY": "imgbb_api_key",
    "NFT_STORAGE_API_KEY": "nft_storage_api_key",
    "WALLET_PATH": "wallet_path",
    "SOLTOKEN_TOKEN_OUTPUT_DIR": "token_output_dir",
    "SOLTOKEN_IMAGE_OUTPUT_DIR": "image_output_dir",
    "SOLTOKEN_STRATEGY": "creation_strategy",
    "SPL_TOKEN_BIN": "spl_token_bin",
}

CreationStrategy = Literal["auto", "metadata", "cli"]


class ConfigurationError(RuntimeError):
    """Raised when configuration loading or wallet resolution fails."""


class SolTokenConfig(BaseModel):
    """Resolved settings shared by every command."""

    network: str = "devnet"
    rpc_url: str | None = None
    default_decimals: int = DEFAULT_DECIMALS
    default_initial_supply: int = DEFAULT_INITIAL_SUPPLY
    imgbb_api_key: str = ""
    nft_storage_api_key: str = ""
    wallet_path: str | None = None
    token_output_dir: Path = Path("token-outputs")
    image_output_dir: Path = Path("image-uploads")
    creation_strategy: CreationStrategy = "auto"
    spl_token_bin: str = "spl-token"
    confirm_timeout_secs: float = 60.0

    @field_validator("network")
    @classmethod
    def _normalise_network(cls, value: str) -> str:
        cleaned = value.strip().lower()
        cleaned = NETWORK_ALIASES.get(cleaned, cleaned)
        if cleaned not in NETWORK_RPC_URLS:
            raise ValueError(f"Unknown Solana network '{value}'. Use devnet, testnet or mainnet-beta.")
        return cleaned

    @field_validator("default_decimals")
    @classmethod
    def _check_decimals(cls, value: int) -> int:
        if value < 0 or value > 9:
            raise ValueError("default_decimals must be between 0 and 9")
        return value

    @model_validator(mode="after")
    def _derive_rpc_url(self) -> "SolTokenConfig":
        if not self.rpc_url:
            self.rpc_url = NETWORK_RPC_URLS[self.network]
        return self

    @property
    def endpoint(self) -> str:
        return self.rpc_url or NETWORK_RPC_URLS[self.network]

    @property
    def is_mainnet(self) -> bool:
        return self.network == "mainnet-beta"

    def explorer_url(self, kind: str, value: str) -> str:
        """Return a Solana Explorer link for an address or transaction."""
        url = f"{EXPLORER_BASE_URL}/{kind}/{value}"
        if self.is_mainnet:
            return url
        return f"{url}?cluster={self.network}"


def _read_config_dict(path: Path | None) -> dict[str, Any]:
    if path is None or not path.exists():
        return {}
    try:
        return tomllib.loads(path.read_text())
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigurationError(f"Failed to load config from {path}: {exc}") from exc


def _merge_dicts(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    result = deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


def _env_values(environ: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for env_name, field in ENV_OVERRIDES.items():
        raw = environ.get(env_name)
        if raw is None or not raw.strip():
            continue
        values[field] = raw.strip()
    return values


def load_config(
    *,
    config_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
    **overrides: Any,
) -> SolTokenConfig:
    """Build the configuration from defaults, config.toml, env vars and overrides."""

    directory = config_dir or DEFAULT_CONFIG_DIR
    data = _read_config_dict(directory / CONFIG_FILENAME)
    # A network switch without an explicit RPC URL must not keep a file-level URL.
    env = _env_values(os.environ if environ is None else environ)
    if "network" in env and "rpc_url" not in env:
        data.pop("rpc_url", None)
    data = _merge_dicts(data, env)
    data = _merge_dicts(data, {key: value for key, value in overrides.items() if value is not None})
    try:
        return SolTokenConfig(**data)
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc


def resolve_wallet_path(config: SolTokenConfig, wallet_path: str | Path | None = None) -> Path:
    """Return the keypair file to sign with, or raise when none can be found."""
    if wallet_path:
        return Path(wallet_path).expanduser().resolve()
    if config.wallet_path:
        return Path(config.wallet_path).expanduser().resolve()
    if DEFAULT_SOLANA_WALLET.exists():
        return DEFAULT_SOLANA_WALLET
    raise ConfigurationError(
        "Wallet keypair not found. Please provide a wallet path using --wallet option "
        "or WALLET_PATH environment variable."
    )


__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG_DIR",
    "DEFAULT_DECIMALS",
    "DEFAULT_INITIAL_SUPPLY",
    "ConfigurationError",
    "CreationStrategy",
    "SolTokenConfig",
    "load_config",
    "resolve_wallet_path",
]
