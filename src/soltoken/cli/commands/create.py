"""Token creation (the default command)."""

from __future__ import annotations

from pathlib import Path

from soltoken.cli.storage import ImageUploader
from soltoken.cli.token_prompts import confirm, load_token_config, prompt_token_info
from soltoken.cli.types import CLIState, StrategyOption, new_prompt_session
from soltoken.core.config import ConfigurationError
from soltoken.core.creator import TokenCreator, TokenInfo


def _summary(info: TokenInfo, *, simulate: bool) -> str:
    lines = [
        f"Name:           {info.name}",
        f"Symbol:         {info.symbol}",
        f"Decimals:       {info.decimals}",
        f"Initial supply: {info.supply_text}",
    ]
    if info.description:
        lines.append(f"Description:    {info.description}")
    if info.image_url:
        lines.append(f"Image URL:      {info.image_url}")
    elif info.image_path:
        lines.append(f"Image file:     {info.image_path}")
    if simulate:
        lines.append("Mode:           simulation (nothing is sent to the network)")
    return "\n".join(lines)


def run_create(
    state: CLIState,
    *,
    config_file: Path | None = None,
    simulate: bool = False,
    yes: bool = False,
    strategy: StrategyOption | None = None,
) -> None:
    """Collect token parameters, create the token and persist its record."""
    info: TokenInfo | None = None
    session = None
    if config_file is not None:
        try:
            info = load_token_config(config_file, state.config)
        except ConfigurationError as exc:
            state.warn(f"{exc}. Falling back to interactive mode.")
    if info is None:
        session = new_prompt_session()
        info = prompt_token_info(state.config, state.console, session)
        if info is None:
            state.console.print("Token creation cancelled.")
            return

    state.console.print(_summary(info, simulate=simulate))
    if not yes:
        session = session or new_prompt_session()
        if not confirm(session, "Create this token?"):
            state.console.print("Token creation cancelled.")
            return

    creator = TokenCreator(state.config, uploader=ImageUploader.from_config(state.config))
    with state.console.status("Creating token…"):
        result = creator.create(info, simulate=simulate, strategy=strategy.value if strategy else None)
    for warning in result.warnings:
        state.warn(warning)
    if not result.success:
        detail = f" (mint {result.mint})" if result.mint else ""
        state.fail(f"Token creation failed{detail}: {result.error}")

    path = state.token_store.save(result.to_record(info))
    lines = [
        f"Mint address: {result.mint}",
        f"Transaction:  {result.transaction}",
    ]
    if result.token_account:
        lines.append(f"Token account: {result.token_account}")
    if result.metadata_address:
        lines.append(f"Metadata:     {result.metadata_address}")
    if result.metadata_uri:
        lines.append(f"Metadata URI: {result.metadata_uri}")
    lines.append(f"Explorer:     {result.explorer_url}")
    lines.append(f"Saved to:     {path}")
    title = "Simulated token" if result.is_simulated else "Token created"
    state.success("\n".join(lines), title=title)
