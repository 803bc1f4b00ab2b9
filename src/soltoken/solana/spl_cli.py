"""`spl-token` CLI invocation and best-effort parsing of its output."""

from __future__ import annotations

import json
import logging
import os
import re
import subprocess
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_BASE58 = r"[1-9A-HJ-NP-Za-km-z]"
ADDRESS_PATTERN = re.compile(rf"^{_BASE58}{{32,44}}$")


class SplTokenError(RuntimeError):
    """Raised when the spl-token binary cannot be run or exits non-zero."""


class CliOutputParseError(RuntimeError):
    """Raised when every parsing strategy for a value is exhausted."""


@dataclass(slots=True)
class CommandResult:
    """Represents the outcome of an spl-token invocation."""

    command: list[str]
    duration_secs: float
    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        return self.stdout.strip()


Strategy = Callable[[str], "str | None"]


@dataclass
class OutputParser:
    """Prioritized list of extraction strategies for one value."""

    label: str
    strategies: list[tuple[str, Strategy]] = field(default_factory=list)

    def parse(self, output: str) -> str | None:
        for name, strategy in self.strategies:
            try:
                value = strategy(output)
            except (ValueError, KeyError, TypeError, AttributeError) as exc:
                logger.debug("%s strategy '%s' failed: %s", self.label, name, exc)
                continue
            if value:
                logger.debug("%s extracted via %s: %s", self.label, name, value)
                return value
        return None

    def require(self, output: str) -> str:
        value = self.parse(output)
        if value is None:
            tried = ", ".join(name for name, _ in self.strategies) or "none"
            raise CliOutputParseError(f"Failed to extract {self.label} from command output (tried: {tried})")
        return value


def _load_json(output: str) -> Any:
    return json.loads(output.strip())


def _dig(data: Any, *path: str) -> str | None:
    current = data
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current if isinstance(current, str) and current else None


def json_paths(*paths: tuple[str, ...]) -> Strategy:
    """Strategy returning the first non-empty string found at any of ``paths``."""

    def _strategy(output: str) -> str | None:
        data = _load_json(output)
        for path in paths:
            value = _dig(data, *path)
            if value:
                return value
        return None

    return _strategy


def regex(pattern: str) -> Strategy:
    compiled = re.compile(pattern)

    def _strategy(output: str) -> str | None:
        match = compiled.search(output)
        return match.group(1) if match else None

    return _strategy


def looks_like_address(value: str | None) -> bool:
    return bool(value and ADDRESS_PATTERN.match(value))


MINT_ADDRESS_PARSER = OutputParser(
    "token mint address",
    [
        ("json", json_paths(("commandOutput", "address"), ("address",))),
        ("json-regex", regex(rf'address"\s*:\s*"({_BASE58}+)"')),
        ("text", regex(rf"Address:\s+({_BASE58}+)")),
        ("creating-token", regex(rf"Creating token\s+({_BASE58}+)")),
    ],
)

SIGNATURE_PARSER = OutputParser(
    "transaction signature",
    [
        (
            "json",
            json_paths(
                ("commandOutput", "transactionData", "signature"),
                ("transactionData", "signature"),
                ("signature",),
            ),
        ),
        ("json-regex", regex(rf'signature"\s*:\s*"({_BASE58}+)"')),
        ("text", regex(rf"Signature:\s+({_BASE58}+)")),
    ],
)

TOKEN_ACCOUNT_PARSER = OutputParser(
    "token account",
    [
        ("json", json_paths(("commandOutput", "address"), ("address",))),
        ("json-regex", regex(rf'address"\s*:\s*"({_BASE58}+)"')),
        ("text", regex(rf"Creating account\s+({_BASE58}+)")),
    ],
)


def _first_listed_account(output: str) -> str | None:
    data = _load_json(output)
    accounts = data.get("accounts") if isinstance(data, dict) else None
    if not accounts:
        return None
    return _dig(accounts[0], "address")


ACCOUNTS_LIST_PARSER = OutputParser(
    "token account",
    [
        ("json", _first_listed_account),
        ("json-regex", regex(rf'address"\s*:\s*"({_BASE58}+)"')),
    ],
)


@dataclass
class SplTokenCli:
    """Runs `spl-token` with the wallet, fee payer and RPC URL pinned."""

    rpc_url: str
    wallet_path: Path
    binary: str = "spl-token"
    timeout: int = 120
    env: Mapping[str, str] | None = None
    _run: Callable[..., Any] | None = None

    def base_args(self) -> list[str]:
        wallet = str(self.wallet_path)
        return [self.binary, "--url", self.rpc_url, "--fee-payer", wallet, "--owner", wallet]

    def run(self, args: Sequence[str]) -> CommandResult:
        command = [*self.base_args(), *args]
        runner = self._run or subprocess.run
        logger.debug("Running: %s", " ".join(command))
        start = time.perf_counter()
        try:
            completed = runner(  # noqa: S603
                command,
                capture_output=True,
                text=True,
                env=dict(self.env or os.environ),
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise SplTokenError(f"Command not found: {self.binary}. Install the Solana tool suite.") from exc
        except subprocess.TimeoutExpired as exc:
            raise SplTokenError(f"Command timed out after {self.timeout} seconds: {' '.join(command)}") from exc
        result = CommandResult(
            command=command,
            duration_secs=time.perf_counter() - start,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
        logger.debug("Command output: %s", result.output)
        if not result.success:
            detail = result.stderr.strip() or result.stdout.strip() or f"exit code {result.returncode}"
            raise SplTokenError(f"{' '.join(args[:1]) or self.binary} failed: {detail}")
        return result

    def create_token(self, decimals: int, *, json_output: bool = True) -> CommandResult:
        return self.run(["create-token", "--decimals", str(decimals), *self._output(json_output)])

    def create_account(self, mint: str, *, json_output: bool = True) -> CommandResult:
        return self.run(["create-account", mint, *self._output(json_output)])

    def accounts(self, mint: str) -> CommandResult:
        return self.run(["accounts", mint, "--output", "json"])

    def mint(self, mint: str, amount: str, *, json_output: bool = True) -> CommandResult:
        return self.run(["mint", mint, amount, *self._output(json_output)])

    @staticmethod
    def _output(json_output: bool) -> list[str]:
        return ["--output", "json"] if json_output else []


__all__ = [
    "ACCOUNTS_LIST_PARSER",
    "CliOutputParseError",
    "CommandResult",
    "MINT_ADDRESS_PARSER",
    "OutputParser",
    "SIGNATURE_PARSER",
    "SplTokenCli",
    "SplTokenError",
    "TOKEN_ACCOUNT_PARSER",
    "json_paths",
    "looks_like_address",
    "regex",
]
