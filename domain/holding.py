"""
Domain: Holding-account decoding (pure).

The holding gate reads a balance out of an externally owned token account whose
binary layout is defined by a third party (SPL token-account layout):

    bytes  0..31   mint
    bytes 32..63   owner
    bytes 64..71   amount, little-endian unsigned 64-bit

Only the amount field is read. Keep every offset assumption in this module so it
can be swapped for a typed accessor if the external format changes.
"""

from __future__ import annotations

from .amounts import require_u64
from .errors import AccountMissing

AMOUNT_OFFSET: int = 64
AMOUNT_SIZE: int = 8
MIN_ACCOUNT_SIZE: int = AMOUNT_OFFSET + AMOUNT_SIZE
TOKEN_ACCOUNT_SIZE: int = 165
_KEY_SIZE: int = 32


def read_token_amount(data: bytes) -> int:
    """
    Read the amount field of a raw token account.

    Empty or truncated data counts as a missing account.
    """

    if len(data) < MIN_ACCOUNT_SIZE:
        raise AccountMissing("Holding account is empty or too short to hold a balance")
    return int.from_bytes(data[AMOUNT_OFFSET:MIN_ACCOUNT_SIZE], "little", signed=False)


def _key_bytes(key: bytes | str) -> bytes:
    raw = key.encode("utf-8") if isinstance(key, str) else key
    return raw[:_KEY_SIZE].ljust(_KEY_SIZE, b"\x00")


def encode_token_account(*, mint: bytes | str, owner: bytes | str, amount: int) -> bytes:
    """
    Build raw token-account data with the given mint, owner and amount.

    Keys longer than 32 bytes are truncated, shorter ones zero-padded. Bytes past
    the amount field are zero-filled up to the standard account size.
    """

    require_u64("amount", amount)
    head = _key_bytes(mint) + _key_bytes(owner) + amount.to_bytes(AMOUNT_SIZE, "little")
    return head.ljust(TOKEN_ACCOUNT_SIZE, b"\x00")
