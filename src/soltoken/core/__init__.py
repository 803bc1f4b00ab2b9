"""Core services for soltoken."""

from .config import (
    DEFAULT_CONFIG_DIR,
    ConfigurationError,
    SolTokenConfig,
    load_config,
    resolve_wallet_path,
)
from .creator import CreateResult, TokenCreationError, TokenCreator, TokenInfo
from .metadata_update import UpdateResult, update_metadata_field, update_name, update_symbol, update_uri
from .minting import MintError, MintResult, mint_tokens
from .records import ImageUploadRecord, ImageUploadStore, TokenRecord, TokenStore
from .viewer import TokenDetails, TokenLookupError, get_token_details, list_tokens, resolve_index

__all__ = [
    "DEFAULT_CONFIG_DIR",
    "ConfigurationError",
    "CreateResult",
    "ImageUploadRecord",
    "ImageUploadStore",
    "MintError",
    "MintResult",
    "SolTokenConfig",
    "TokenCreationError",
    "TokenCreator",
    "TokenDetails",
    "TokenInfo",
    "TokenLookupError",
    "TokenRecord",
    "TokenStore",
    "UpdateResult",
    "get_token_details",
    "list_tokens",
    "load_config",
    "mint_tokens",
    "resolve_index",
    "resolve_wallet_path",
    "update_metadata_field",
    "update_name",
    "update_symbol",
    "update_uri",
]
