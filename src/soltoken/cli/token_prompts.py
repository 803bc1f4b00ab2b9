"""Interactive and file-based collection of token parameters."""

from __future__ import annotations

import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Callable, Optional

from prompt_toolkit import PromptSession
from pydantic import ValidationError
from rich.console import Console

from soltoken.core.config import ConfigurationError, SolTokenConfig
from soltoken.core.creator import TokenInfo


def _required(label: str) -> Callable[[str], str]:
    def _parse(raw: str) -> str:
        if not raw:
            raise ValueError(f"{label} is required.")
        return raw

    return _parse


def _parse_decimals(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError("Decimals must be a whole number.") from exc
    if value < 0 or value > 9:
        raise ValueError("Decimals must be between 0 and 9.")
    return value


def _parse_supply(raw: str) -> Decimal:
    try:
        value = Decimal(raw.replace(",", "").replace("_", ""))
    except InvalidOperation as exc:
        raise ValueError("Initial supply must be a number.") from exc
    if not value.is_finite() or value <= 0:
        raise ValueError("Initial supply must be greater than zero.")
    return value


def _ask(
    session: PromptSession,
    console: Console,
    message: str,
    parse: Callable[[str], Any] = str,
    *,
    default: str | None = None,
) -> Any:
    suffix = f" [{default}]" if default else ""
    while True:
        raw = session.prompt(f"{message}{suffix}: ").strip()
        if not raw and default is not None:
            raw = default
        try:
            return parse(raw)
        except ValueError as exc:
            console.print(f"[red]{exc}[/red]")


def prompt_token_info(
    config: SolTokenConfig,
    console: Console,
    session: Optional[PromptSession] = None,
) -> TokenInfo | None:
    """Ask for the token parameters; returns None when the user cancels."""
    session = session or PromptSession()
    try:
        name = _ask(session, console, "Token name", _required("Token name"))
        symbol = _ask(session, console, "Token symbol", _required("Token symbol"))
        decimals = _ask(session, console, "Decimals", _parse_decimals, default=str(config.default_decimals))
        supply = _ask(session, console, "Initial supply", _parse_supply, default=str(config.default_initial_supply))
        description = _ask(session, console, "Description (optional)")
        image_url = _ask(session, console, "Image URL (optional)")
    except (KeyboardInterrupt, EOFError):
        return None
    return TokenInfo(
        name=name,
        symbol=symbol,
        decimals=decimals,
        initial_supply=supply,
        description=description,
        image_url=image_url,
    )


def load_token_config(path: Path, config: SolTokenConfig) -> TokenInfo:
    """Read a JSON token definition; missing decimals and supply take the configured defaults."""
    path = Path(path).expanduser()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Config file not found: {path}") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Error reading config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object.")
    data.setdefault("decimals", config.default_decimals)
    data.setdefault("initialSupply", config.default_initial_supply)
    try:
        return TokenInfo.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid token config in {path}: {exc}") from exc


def confirm(session: PromptSession, message: str, *, default: bool = True) -> bool:
    hint = "Y/n" if default else "y/N"
    try:
        answer = session.prompt(f"{message} [{hint}]: ").strip().lower()
    except (KeyboardInterrupt, EOFError):
        return False
    if not answer:
        return default
    return answer in {"y", "yes"}


__all__ = ["confirm", "load_token_config", "prompt_token_info"]
