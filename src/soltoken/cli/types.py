"""Shared CLI state and output helpers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import NoReturn

import typer
from prompt_toolkit import PromptSession
from rich.console import Console
from rich.markup import escape

from soltoken.cli.branding import create_semantic_panel, themed_console
from soltoken.core.config import SolTokenConfig
from soltoken.core.records import ImageUploadStore, TokenStore

logger = logging.getLogger(__name__)

CLI_CONSOLE = themed_console()


class StrategyOption(str, Enum):
    auto = "auto"
    metadata = "metadata"
    cli = "cli"


def styled_echo(message: str = "", *, nl: bool = True) -> None:
    """Print using the soltoken themed console."""
    CLI_CONSOLE.print(message, end="" if not nl else "\n")


def new_prompt_session() -> PromptSession:
    return PromptSession()


@dataclass
class CLIState:
    """Per-invocation state handed to every command through the typer context."""

    config: SolTokenConfig
    console: Console = field(default_factory=lambda: CLI_CONSOLE)

    @property
    def token_store(self) -> TokenStore:
        return TokenStore(self.config.token_output_dir)

    @property
    def image_store(self) -> ImageUploadStore:
        return ImageUploadStore(self.config.image_output_dir)

    def success(self, message: str, *, title: str | None = None) -> None:
        self.console.print(create_semantic_panel(message, panel_type="success", title=title))

    def warn(self, message: str) -> None:
        self.console.print(f"[soltoken.warning.header]⚠️  {escape(message)}[/]")

    def fail(self, message: str, *, code: int = 1) -> NoReturn:
        """Print ``message`` as an error and end the invocation."""
        logger.debug("Command failed: %s", message)
        self.console.print(f"[soltoken.error.header]❌ {escape(message)}[/]")
        raise typer.Exit(code=code)


def get_state(ctx: typer.Context) -> CLIState:
    state = ctx.find_root().obj
    if not isinstance(state, CLIState):
        raise RuntimeError("CLI state not initialised")
    return state


__all__ = ["CLIState", "CLI_CONSOLE", "StrategyOption", "get_state", "new_prompt_session", "styled_echo"]
