"""Program ids used across the deployer."""

from __future__ import annotations

from solders.pubkey import Pubkey
from spl.token.constants import TOKEN_2022_PROGRAM_ID, TOKEN_PROGRAM_ID

TOKEN_METADATA_PROGRAM_ID = Pubkey.from_string("metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s")
SYSTEM_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")

TOKEN_PROGRAMS = {str(TOKEN_PROGRAM_ID): TOKEN_PROGRAM_ID, str(TOKEN_2022_PROGRAM_ID): TOKEN_2022_PROGRAM_ID}

__all__ = [
    "SYSTEM_PROGRAM_ID",
    "TOKEN_2022_PROGRAM_ID",
    "TOKEN_METADATA_PROGRAM_ID",
    "TOKEN_PROGRAMS",
    "TOKEN_PROGRAM_ID",
]
