"""Account-id rules shared by the factory and the runner.

The factory deploys every created token as a sub-account of itself, so the
token's account id is always ``<token_name>.<factory_id>``.
"""

from __future__ import annotations

from .constants import ACCOUNT_ID_PATTERN, MAX_ACCOUNT_ID_LEN, MIN_ACCOUNT_ID_LEN

PRICE_SCALE = 10_000
_SYMBOL_CHARS = frozenset("0123456789abcdefghijklmnopqrstuvwxyz_-")


def derive_account_id(token_id: str, base_id: str) -> str:
    return f"{token_id}.{base_id}"


def is_valid_account_id(account_id: str | None) -> bool:
    if not account_id:
        return False
    if not MIN_ACCOUNT_ID_LEN <= len(account_id) <= MAX_ACCOUNT_ID_LEN:
        return False
    return ACCOUNT_ID_PATTERN.match(account_id) is not None


def is_valid_symbol(title: str) -> bool:
    """Return True when ``title`` only uses the characters the factory accepts."""

    return all(ch in _SYMBOL_CHARS for ch in title)


def format_title(title: str) -> str:
    return "".join(ch for ch in title if not ch.isspace())


def format_price(target_price: int) -> str:
    """Render a target price stored with four implied decimals.

    ``150000`` becomes ``"15"`` and ``150500`` becomes ``"15.500"``; the
    remainder is not zero-padded, matching the name and symbol the factory
    writes into the token metadata.
    """

    short, remainder = divmod(target_price, PRICE_SCALE)
    if remainder:
        return f"{short}.{remainder}"
    return str(short)


def factory_token_name(title: str, target_price: int) -> str:
    """Return the name the factory assigns to a token created for ``title``."""

    short, remainder = divmod(target_price, PRICE_SCALE)
    return f"{format_title(title)}-{short}-{remainder:04d}".lower()
