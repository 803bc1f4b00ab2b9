"""soltoken CLI branding helpers and Solana-inspired styling."""

from __future__ import annotations

import os
from collections.abc import Iterable
from datetime import datetime

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme

SOLTOKEN_THEME = Theme(
    {
        # Banner & Branding
        "soltoken.banner.primary": "bold #9945FF",
        "soltoken.banner.secondary": "bold #14F195",
        "soltoken.prompt": "bold #A855F7",

        # Semantic States
        "soltoken.info.border": "#38BDF8",
        "soltoken.info.text": "#E6FFFA",
        "soltoken.info.header": "bold #38BDF8",

        "soltoken.success.border": "#14F195",
        "soltoken.success.text": "#E6FFFA",
        "soltoken.success.header": "bold #14F195",

        "soltoken.warning.border": "#FBBF24",
        "soltoken.warning.text": "#FEF3C7",
        "soltoken.warning.header": "bold #FBBF24",

        "soltoken.error.border": "#FB7185",
        "soltoken.error.text": "#FEE2E2",
        "soltoken.error.header": "bold #FB7185",

        # Typography Hierarchy
        "soltoken.text.primary": "#E6FFFA",
        "soltoken.text.secondary": "#94A3B8",
        "soltoken.text.dim": "dim #64748B",
        "soltoken.address": "#FBBF24",
        "soltoken.link": "underline #38BDF8",
    }
)

BANNER_LINES: tuple[str, ...] = (
    "[#9945FF] ____   ___  _     _____ ___  _  _______ _   _ ",
    "[#6E8CFF]/ ___| / _ \\| |   |_   _/ _ \\| |/ / ____| \\ | |",
    "[#3CDCE1]\\___ \\| | | | |     | || | | | ' /|  _| |  \\| |",
    "[#19F5A5] ___) | |_| | |___  | || |_| | . \\| |___| |\\  |",
    "[#14F195]|____/ \\___/|_____| |_| \\___/|_|\\_\\_____|_| \\_|",
)

TAGLINE = "SPL token deployer"

PANEL_STYLES = {
    "info": ("ℹ️", "Info"),
    "success": ("✅", "Success"),
    "warning": ("⚠️", "Warning"),
    "error": ("❌", "Error"),
}


def themed_console(**kwargs: object) -> Console:
    """Return a Console configured with the soltoken theme."""
    return Console(theme=SOLTOKEN_THEME, **kwargs)


def banner_lines() -> Iterable[Text]:
    for line in BANNER_LINES:
        yield Text.from_markup(line)


def render_banner(console: Console, *, network: str, now: datetime | None = None) -> None:
    """Print the banner followed by the active network and the current time."""
    if os.environ.get("SOLTOKEN_DISABLE_BANNER"):
        return
    for line in banner_lines():
        console.print(line, overflow="ignore", crop=False)
    stamp = (now or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
    console.print(
        f"[soltoken.banner.secondary]{TAGLINE}[/]  "
        f"[soltoken.text.secondary]network:[/] [soltoken.banner.primary]{network}[/]  "
        f"[soltoken.text.dim]{stamp}[/]"
    )
    console.print()


def create_semantic_panel(
    message: str,
    *,
    panel_type: str = "info",
    title: str | None = None,
) -> Panel:
    """Create a semantic panel for info, success, warning, or error messages."""
    icon, default_title = PANEL_STYLES.get(panel_type, PANEL_STYLES["info"])
    if panel_type not in PANEL_STYLES:
        panel_type = "info"
    return Panel(
        Text(message, style=f"soltoken.{panel_type}.text"),
        title=f"[soltoken.{panel_type}.header]{icon} {title or default_title}[/]",
        title_align="left",
        border_style=f"soltoken.{panel_type}.border",
        box=box.ROUNDED,
        padding=(1, 2),
        expand=False,
    )


__all__ = [
    "BANNER_LINES",
    "SOLTOKEN_THEME",
    "create_semantic_panel",
    "render_banner",
    "themed_console",
]
