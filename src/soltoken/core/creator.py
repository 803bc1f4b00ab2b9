"""Token creation via the spl-token CLI with optional Metaplex metadata."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from spl.token.instructions import get_associated_token_address

from soltoken.core.config import ConfigurationError, CreationStrategy, SolTokenConfig, resolve_wallet_path
from soltoken.core.records import TokenRecord, slugify
from soltoken.solana.metadata import MetadataError, create_metadata_instruction, find_metadata_pda
from soltoken.solana.rpc import SolanaRPCClient, SolanaRPCError
from soltoken.solana.spl_cli import (
    ACCOUNTS_LIST_PARSER,
    MINT_ADDRESS_PARSER,
    SIGNATURE_PARSER,
    TOKEN_ACCOUNT_PARSER,
    CliOutputParseError,
    CommandResult,
    SplTokenCli,
    SplTokenError,
)
from soltoken.solana.wallet import Wallet, WalletError, load_wallet

if TYPE_CHECKING:  # pragma: no cover
    from soltoken.cli.storage import ImageUploader

logger = logging.getLogger(__name__)

SIMULATED_SIGNATURE = "SIMULATED_TRANSACTION"
DEFAULT_DESCRIPTION = "A token created using the Solana Token Deployer"


class TokenCreationError(RuntimeError):
    """Raised when a creation strategy cannot complete."""

    def __init__(self, message: str, *, mint: str | None = None) -> None:
        super().__init__(message)
        self.mint = mint


class TokenInfo(BaseModel):
    """Token parameters collected from prompts or a JSON config file."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    name: str = Field(min_length=1)
    symbol: str = Field(min_length=1)
    decimals: int = Field(ge=0, le=9)
    initial_supply: Decimal = Field(gt=0)
    description: str = ""
    image_url: str = ""
    image_path: str | None = None

    @field_validator("name", "symbol", "description", "image_url")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    @property
    def supply_text(self) -> str:
        """Initial supply as a plain decimal string for the spl-token CLI."""
        text = format(self.initial_supply, "f")
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        return text


@dataclass(slots=True)
class CreateResult:
    """Outcome of a creation attempt."""

    success: bool
    mint: str | None = None
    transaction: str | None = None
    token_account: str | None = None
    mint_signature: str | None = None
    metadata_address: str | None = None
    metadata_uri: str | None = None
    image_url: str | None = None
    explorer_url: str | None = None
    strategy: str | None = None
    is_simulated: bool = False
    error: str | None = None
    warnings: list[str] = field(default_factory=list)

    def to_record(self, info: TokenInfo) -> TokenRecord:
        supply = info.initial_supply
        return TokenRecord(
            name=info.name,
            symbol=info.symbol,
            decimals=info.decimals,
            initial_supply=int(supply) if supply == supply.to_integral_value() else float(supply),
            description=info.description or None,
            image_url=self.image_url or info.image_url or None,
            mint=self.mint,
            transaction=self.transaction,
            created_at=datetime.now(UTC),
            metadata_address=self.metadata_address,
            metadata_uri=self.metadata_uri,
            explorer_url=self.explorer_url,
            token_account=self.token_account,
            is_simulated=self.is_simulated,
        )


class TokenCreator:
    """Creates SPL tokens using one of the configured strategies."""

    def __init__(
        self,
        config: SolTokenConfig,
        *,
        wallet_path: Path | None = None,
        uploader: ImageUploader | None = None,
        rpc: SolanaRPCClient | None = None,
        spl_factory: Callable[[Path], SplTokenCli] | None = None,
    ) -> None:
        self.config = config
        self.wallet_path = wallet_path
        self.uploader = uploader
        self.rpc = rpc or SolanaRPCClient(endpoint=config.endpoint)
        self._spl_factory = spl_factory or self._default_spl

    def _default_spl(self, wallet_path: Path) -> SplTokenCli:
        return SplTokenCli(rpc_url=self.config.endpoint, wallet_path=wallet_path, binary=self.config.spl_token_bin)

    def create(
        self,
        info: TokenInfo,
        *,
        simulate: bool = False,
        strategy: CreationStrategy | None = None,
    ) -> CreateResult:
        if simulate:
            return self.simulate(info)
        chosen = strategy or self.config.creation_strategy
        try:
            wallet_path = resolve_wallet_path(self.config, self.wallet_path)
        except ConfigurationError as exc:
            return CreateResult(success=False, error=str(exc), strategy=chosen)

        if chosen == "cli":
            return self._guard(lambda: self.create_basic(info, wallet_path), "cli")
        if chosen == "metadata":
            return self._guard(lambda: self.create_with_metadata(info, wallet_path), "metadata")

        try:
            return self.create_with_metadata(info, wallet_path)
        except TokenCreationError as exc:
            logger.error("Metadata strategy failed (mint %s): %s", exc.mint, exc)
            return CreateResult(success=False, mint=exc.mint, error=str(exc), strategy="metadata")
        except SplTokenError as exc:
            # create-token itself failed, so no mint exists yet
            logger.warning("Metadata strategy failed (%s); falling back to basic creation", exc)
        return self._guard(lambda: self.create_basic(info, wallet_path), "cli")

    @staticmethod
    def _guard(run: Callable[[], CreateResult], strategy: str) -> CreateResult:
        try:
            return run()
        except (SplTokenError, CliOutputParseError, WalletError, TokenCreationError) as exc:
            logger.error("Token creation (%s) failed: %s", strategy, exc)
            return CreateResult(success=False, error=str(exc), strategy=strategy, mint=getattr(exc, "mint", None))

    def simulate(self, info: TokenInfo) -> CreateResult:
        """Fabricate a plausible result without any network or subprocess call."""
        mint = str(Keypair().pubkey())
        logger.debug("Simulated token %s (%s) as %s", info.name, info.symbol, mint)
        return CreateResult(
            success=True,
            mint=mint,
            transaction=SIMULATED_SIGNATURE,
            image_url=info.image_url or None,
            explorer_url=self.config.explorer_url("address", mint),
            strategy="simulate",
            is_simulated=True,
        )

    def create_basic(self, info: TokenInfo, wallet_path: Path) -> CreateResult:
        """create-token, create-account and mint with plain text output; no metadata."""
        spl = self._spl_factory(wallet_path)
        created = spl.create_token(info.decimals, json_output=False)
        mint = self._created_mint(created)
        signature, account, minted = self._finish_mint(spl, mint, created.output, info, wallet_path, json_output=False)
        return CreateResult(
            success=True,
            mint=mint,
            transaction=signature,
            token_account=account,
            mint_signature=SIGNATURE_PARSER.parse(minted.output),
            image_url=info.image_url or None,
            explorer_url=self.config.explorer_url("address", mint),
            strategy="cli",
        )

    def create_with_metadata(self, info: TokenInfo, wallet_path: Path) -> CreateResult:
        """JSON-output spl-token flow followed by metadata upload and CreateMetadataAccountV3."""
        spl = self._spl_factory(wallet_path)
        created = spl.create_token(info.decimals)
        mint = self._created_mint(created)
        signature, account, minted = self._finish_mint(spl, mint, created.output, info, wallet_path, json_output=True)

        warnings: list[str] = []
        image_url = self._resolve_image(info, warnings)
        document = {
            "name": info.name,
            "symbol": info.symbol,
            "description": info.description or DEFAULT_DESCRIPTION,
            "image": image_url or "",
        }
        uploaded_uri = self._publish_metadata(document, info, warnings)
        metadata_uri = uploaded_uri or str(self._save_metadata_locally(document, info))

        metadata_address: str | None = None
        try:
            metadata_address = self._create_on_chain_metadata(wallet_path, mint, info, uploaded_uri or "")
        except (SolanaRPCError, MetadataError, WalletError, ValueError) as exc:
            logger.warning("On-chain metadata creation failed: %s", exc)
            warnings.append(f"On-chain metadata creation failed: {exc}. Token created without on-chain metadata.")

        return CreateResult(
            success=True,
            mint=mint,
            transaction=signature,
            token_account=account,
            mint_signature=SIGNATURE_PARSER.parse(minted.output),
            metadata_address=metadata_address,
            metadata_uri=metadata_uri,
            image_url=image_url,
            explorer_url=self.config.explorer_url("address", mint),
            strategy="metadata",
            warnings=warnings,
        )

    @staticmethod
    def _created_mint(created: CommandResult) -> str:
        """Mint address from create-token output; unreadable output is never retried."""
        try:
            return MINT_ADDRESS_PARSER.require(created.output)
        except CliOutputParseError as exc:
            raise TokenCreationError(
                "spl-token create-token succeeded but its output could not be parsed; "
                "check the wallet for the new mint before retrying. "
                f"Output: {created.output or '(empty)'}"
            ) from exc

    def _finish_mint(
        self,
        spl: SplTokenCli,
        mint: str,
        create_output: str,
        info: TokenInfo,
        wallet_path: Path,
        *,
        json_output: bool,
    ) -> tuple[str, str, CommandResult]:
        """Parse the creation signature, open the token account and mint the initial supply."""
        try:
            signature = SIGNATURE_PARSER.require(create_output)
            account = self._create_account(spl, mint, wallet_path, json_output=json_output)
            minted = spl.mint(mint, info.supply_text, json_output=json_output)
        except (SplTokenError, CliOutputParseError) as exc:
            raise TokenCreationError(f"Token {mint} was created but setup did not finish: {exc}", mint=mint) from exc
        return signature, account, minted

    def _create_account(self, spl: SplTokenCli, mint: str, wallet_path: Path, *, json_output: bool) -> str:
        created = spl.create_account(mint, json_output=json_output)
        account = TOKEN_ACCOUNT_PARSER.parse(created.output)
        if account:
            return account
        try:
            listing = spl.accounts(mint)
        except SplTokenError as exc:
            logger.debug("spl-token accounts query failed: %s", exc)
        else:
            account = ACCOUNTS_LIST_PARSER.parse(listing.output)
            if account:
                return account
        try:
            owner = load_wallet(wallet_path).keypair.pubkey()
            derived = get_associated_token_address(owner, Pubkey.from_string(mint))
        except (WalletError, ValueError) as exc:
            raise CliOutputParseError(f"Failed to determine token account for {mint}: {exc}") from exc
        logger.debug("Using derived associated token account %s", derived)
        return str(derived)

    def _resolve_image(self, info: TokenInfo, warnings: list[str]) -> str | None:
        if info.image_url:
            return info.image_url
        if not info.image_path:
            return None
        path = Path(info.image_path).expanduser()
        if not path.exists():
            warnings.append(f"Image file not found at: {path}")
            return None
        if self.uploader is not None and self.uploader.configured:
            result = self.uploader.upload_image(path)
            if result.success and result.url:
                return result.url
            warnings.append(f"Image upload failed: {result.error}")
        return path.resolve().as_uri()

    def _publish_metadata(self, document: dict[str, Any], info: TokenInfo, warnings: list[str]) -> str | None:
        if self.uploader is None or not self.uploader.configured:
            warnings.append("No upload service configured; metadata saved locally instead.")
            return None
        result = self.uploader.upload_json(document, f"{slugify(info.symbol)}-metadata.json")
        if result.success and result.url:
            return result.url
        warnings.append(f"Metadata upload failed: {result.error}. Saved locally instead.")
        return None

    def _save_metadata_locally(self, document: dict[str, Any], info: TokenInfo) -> Path:
        directory = self.config.token_output_dir / "metadata"
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{slugify(info.symbol)}-metadata.json"
        path.write_text(json.dumps(document, indent=2))
        return path

    def _create_on_chain_metadata(self, wallet_path: Path, mint: str, info: TokenInfo, uri: str) -> str:
        wallet: Wallet = load_wallet(wallet_path)
        authority = wallet.keypair.pubkey()
        mint_key = Pubkey.from_string(mint)
        metadata = find_metadata_pda(mint_key)
        instruction = create_metadata_instruction(
            metadata=metadata,
            mint=mint_key,
            mint_authority=authority,
            payer=authority,
            update_authority=authority,
            name=info.name,
            symbol=info.symbol,
            uri=uri,
        )
        signature = self.rpc.send_and_confirm(
            [instruction], wallet.keypair, timeout_secs=self.config.confirm_timeout_secs
        )
        logger.info("On-chain metadata created: %s", self.config.explorer_url("tx", signature))
        return str(metadata)


__all__ = [
    "DEFAULT_DESCRIPTION",
    "SIMULATED_SIGNATURE",
    "CreateResult",
    "TokenCreationError",
    "TokenCreator",
    "TokenInfo",
]
