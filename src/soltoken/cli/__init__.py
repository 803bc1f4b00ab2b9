"""CLI package for soltoken."""

from __future__ import annotations

import logging
import os
from importlib import metadata
from pathlib import Path

import typer
from rich.markup import escape

from soltoken.core.config import DEFAULT_CONFIG_DIR, ConfigurationError, load_config

from .branding import render_banner
from .commands import register_builtin_commands
from .commands.create import run_create
from .types import CLI_CONSOLE, CLIState, StrategyOption, styled_echo

logger = logging.getLogger(__name__)

app = typer.Typer(
    invoke_without_command=True,
    no_args_is_help=False,
    add_completion=False,
    pretty_exceptions_enable=False,
    context_settings={"help_option_names": ["-h", "--help"]},
    help="Create, mint, view and update SPL tokens on Solana. Run without a command to create a token.",
)


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() not in {"", "0", "false", "no"}


def _configure_logging(verbose: bool, log_dir: Path | None) -> None:
    root_logger = logging.getLogger()
    if verbose:
        if not root_logger.handlers:
            logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
        root_logger.setLevel(logging.DEBUG)
    else:
        if root_logger.handlers:
            root_logger.setLevel(logging.WARNING)
        else:
            logging.basicConfig(level=logging.WARNING, format="%(message)s")
    if verbose and log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_dir / "soltoken.log", encoding="utf-8")
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logging.getLogger().addHandler(handler)


@app.callback()
def root(
    ctx: typer.Context,
    config_file: Path | None = typer.Option(None, "--config", help="Create the token from a JSON config file"),  # noqa: B008
    simulate: bool = typer.Option(False, "--simulate", "-s", help="Dry run: no network or spl-token calls"),  # noqa: B008
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),  # noqa: B008
    strategy: StrategyOption | None = typer.Option(None, "--strategy", help="Creation strategy (default from config)"),  # noqa: B008
) -> None:
    """Create, mint, view and update SPL tokens on Solana."""
    verbose = _env_flag("SOLTOKEN_DEBUG", default=False)
    _configure_logging(verbose, log_dir=DEFAULT_CONFIG_DIR / "logs")
    try:
        config = load_config()
    except ConfigurationError as exc:
        styled_echo(f"❌ {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    state = CLIState(config=config, console=CLI_CONSOLE)
    ctx.obj = state
    render_banner(state.console, network=config.network)
    if ctx.invoked_subcommand is None:
        run_create(state, config_file=config_file, simulate=simulate, yes=yes, strategy=strategy)


@app.command()
def version() -> None:
    """Show CLI version."""
    try:
        pkg_version = metadata.version("soltoken")
    except metadata.PackageNotFoundError:
        pkg_version = "0.0.0"
    styled_echo(f"soltoken version {pkg_version}")


register_builtin_commands(app)


def main() -> None:
    """Poetry entrypoint."""
    try:
        app(prog_name="soltoken")
    except Exception:  # noqa: BLE001
        logger.debug("Unhandled error", exc_info=True)
        CLI_CONSOLE.print_exception(show_locals=False)
        styled_echo("❌ An unexpected error occurred.")
        raise SystemExit(1) from None


__all__ = ["app", "main"]
