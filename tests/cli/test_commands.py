from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

import pytest
from solders.keypair import Keypair
from typer.testing import CliRunner

import soltoken.cli as cli_mod
import soltoken.cli.commands.create as create_mod
from soltoken.cli import app
from soltoken.core.config import ConfigurationError, SolTokenConfig
from soltoken.core.records import TokenStore

runner = CliRunner()


def flat(output: str) -> str:
    """Undo console line wrapping so phrases can be matched."""
    return " ".join(output.split())


class ScriptedSession:
    def __init__(self, answers: Iterable[str]) -> None:
        self._answers = iter(answers)

    def prompt(self, _message: str) -> str:
        return next(self._answers)


@pytest.fixture()
def config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> SolTokenConfig:
    wallet = tmp_path / "id.json"
    wallet.write_text(json.dumps(list(bytes(Keypair()))))
    settings = SolTokenConfig(
        token_output_dir=tmp_path / "tokens",
        image_output_dir=tmp_path / "images",
        wallet_path=str(wallet),
    )
    monkeypatch.setenv("SOLTOKEN_DISABLE_BANNER", "1")
    monkeypatch.delenv("SOLTOKEN_DEBUG", raising=False)
    monkeypatch.setattr(cli_mod, "load_config", lambda: settings)
    return settings


def write_token_file(tmp_path: Path) -> Path:
    path = tmp_path / "token.json"
    path.write_text(json.dumps({"name": "File Token", "symbol": "FTK", "decimals": 2, "initialSupply": 500}))
    return path


def test_list_without_tokens(config: SolTokenConfig) -> None:
    result = runner.invoke(app, ["list"])

    assert result.exit_code == 0
    assert "No tokens found. Create a token first." in flat(result.stdout)


def test_simulated_create_from_config_file(config: SolTokenConfig, tmp_path: Path) -> None:
    result = runner.invoke(app, ["--simulate", "--yes", "--config", str(write_token_file(tmp_path))])

    assert result.exit_code == 0, result.stdout
    assert "Simulated token" in result.stdout
    records = TokenStore(config.token_output_dir).list_records()
    assert len(records) == 1
    assert records[0].symbol == "FTK"
    assert records[0].is_simulated
    assert records[0].initial_supply == 500

    listed = runner.invoke(app, ["list"])
    assert listed.exit_code == 0
    assert "File Token" in listed.stdout
    assert "FTK" in listed.stdout

    viewed = runner.invoke(app, ["view", "1"])
    assert viewed.exit_code == 0
    assert "simulated token" in flat(viewed.stdout)


def test_missing_config_file_falls_back_to_prompts(
    config: SolTokenConfig, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(create_mod, "new_prompt_session", lambda: ScriptedSession(["Typed", "TYP", "0", "10", "", ""]))

    result = runner.invoke(app, ["-s", "-y", "--config", str(tmp_path / "absent.json")])

    assert result.exit_code == 0, result.stdout
    assert "Falling back to interactive mode" in flat(result.stdout)
    assert TokenStore(config.token_output_dir).list_records()[0].symbol == "TYP"


def test_declining_confirmation_cancels(config: SolTokenConfig, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        create_mod, "new_prompt_session", lambda: ScriptedSession(["Typed", "TYP", "", "", "", "", "n"])
    )

    result = runner.invoke(app, ["--simulate"])

    assert result.exit_code == 0
    assert "Token creation cancelled." in result.stdout
    assert TokenStore(config.token_output_dir).list_records() == []


def test_view_rejects_out_of_range_index(config: SolTokenConfig, tmp_path: Path) -> None:
    runner.invoke(app, ["-s", "-y", "--config", str(write_token_file(tmp_path))])

    result = runner.invoke(app, ["view", "5"])

    assert result.exit_code == 1
    assert "Invalid token index 5" in flat(result.stdout)


def test_mint_rejects_invalid_address(config: SolTokenConfig) -> None:
    result = runner.invoke(app, ["mint", "not-a-mint", "10"])

    assert result.exit_code == 1
    assert "Minting failed" in result.stdout


def test_update_symbol_validates_length(config: SolTokenConfig) -> None:
    mint = str(Keypair().pubkey())

    result = runner.invoke(app, ["update-symbol", mint, "WAY", "TOO", "LONG"])

    assert result.exit_code == 1
    assert "maximum is 10" in flat(result.stdout)


def test_upload_without_providers_fails(config: SolTokenConfig, tmp_path: Path) -> None:
    image = tmp_path / "logo.png"
    image.write_bytes(b"\x89PNG\r\n\x1a\n")

    result = runner.invoke(app, ["upload-image", str(image)])

    assert result.exit_code == 1
    assert "Image upload failed" in result.stdout


def test_configuration_error_exits(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken() -> SolTokenConfig:
        raise ConfigurationError("Unknown Solana network 'moonnet'")

    monkeypatch.setenv("SOLTOKEN_DISABLE_BANNER", "1")
    monkeypatch.setattr(cli_mod, "load_config", broken)

    result = runner.invoke(app, ["list"])

    assert result.exit_code == 1
    assert "moonnet" in result.stdout


def test_view_rejects_malformed_mint(config: SolTokenConfig) -> None:
    result = runner.invoke(app, ["view", "not-a-mint"])

    assert result.exit_code == 1
    assert "Invalid mint address: not-a-mint" in flat(result.stdout)
