from __future__ import annotations

import json
from collections.abc import Iterable
from decimal import Decimal
from pathlib import Path

import pytest
from rich.console import Console

from soltoken.cli.token_prompts import confirm, load_token_config, prompt_token_info
from soltoken.core.config import ConfigurationError, SolTokenConfig


class ScriptedSession:
    """Minimal PromptSession replacement returning canned answers."""

    def __init__(self, answers: Iterable[str | BaseException]) -> None:
        self._answers = iter(answers)
        self.messages: list[str] = []

    def prompt(self, message: str) -> str:
        self.messages.append(message)
        answer = next(self._answers)
        if isinstance(answer, BaseException):
            raise answer
        return answer


def quiet_console() -> Console:
    return Console(record=True, color_system=None)


def test_prompts_use_configured_defaults() -> None:
    session = ScriptedSession(["My Token", "MTK", "", "", "", ""])

    info = prompt_token_info(SolTokenConfig(), quiet_console(), session)  # type: ignore[arg-type]

    assert info is not None
    assert (info.name, info.symbol, info.decimals) == ("My Token", "MTK", 9)
    assert info.initial_supply == Decimal(1_000_000_000)
    assert session.messages[2] == "Decimals [9]: "
    assert session.messages[3] == "Initial supply [1000000000]: "


def test_invalid_answers_are_asked_again() -> None:
    console = quiet_console()
    session = ScriptedSession(["", "Name", "SYM", "12", "4", "0", "1,500.5", "desc", "https://img.example/x.png"])

    info = prompt_token_info(SolTokenConfig(), console, session)  # type: ignore[arg-type]

    assert info is not None
    assert info.decimals == 4
    assert info.initial_supply == Decimal("1500.5")
    assert info.image_url == "https://img.example/x.png"
    output = console.export_text()
    assert "Token name is required." in output
    assert "Decimals must be between 0 and 9." in output
    assert "Initial supply must be greater than zero." in output


def test_interrupt_cancels() -> None:
    session = ScriptedSession(["Name", KeyboardInterrupt()])

    assert prompt_token_info(SolTokenConfig(), quiet_console(), session) is None  # type: ignore[arg-type]


@pytest.mark.parametrize(("answer", "expected"), [("", True), ("y", True), ("YES", True), ("n", False), ("maybe", False)])
def test_confirm(answer: str, expected: bool) -> None:
    assert confirm(ScriptedSession([answer]), "Proceed?") is expected  # type: ignore[arg-type]


def test_confirm_eof_declines() -> None:
    assert confirm(ScriptedSession([EOFError()]), "Proceed?") is False  # type: ignore[arg-type]


def test_load_token_config_applies_defaults(tmp_path: Path) -> None:
    path = tmp_path / "token.json"
    path.write_text(json.dumps({"name": "File Token", "symbol": "FTK", "imageUrl": "https://img.example/f.png"}))

    info = load_token_config(path, SolTokenConfig(default_decimals=2, default_initial_supply=50))

    assert info.decimals == 2
    assert info.initial_supply == Decimal(50)
    assert info.image_url == "https://img.example/f.png"


def test_load_token_config_errors(tmp_path: Path) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("{")
    invalid = tmp_path / "invalid.json"
    invalid.write_text(json.dumps({"name": "X", "symbol": "X", "decimals": 12}))

    with pytest.raises(ConfigurationError, match="Config file not found"):
        load_token_config(tmp_path / "missing.json", SolTokenConfig())
    with pytest.raises(ConfigurationError, match="Error reading config file"):
        load_token_config(broken, SolTokenConfig())
    with pytest.raises(ConfigurationError, match="Invalid token config"):
        load_token_config(invalid, SolTokenConfig())
