from __future__ import annotations

import base58

PUBKEY_LEN = 32


def is_valid_address(address: str) -> bool:
    """
    A participant address is a base58-encoded 32-byte ed25519 public key,
    the same encoding used for token account owners on chain.
    """
    if not isinstance(address, str) or not address:
        return False
    try:
        raw = base58.b58decode(address)
    except ValueError:
        return False
    return len(raw) == PUBKEY_LEN


def address_from_bytes(pubkey: bytes) -> str:
    if len(pubkey) != PUBKEY_LEN:
        raise ValueError(f"Public key must be {PUBKEY_LEN} bytes, got {len(pubkey)}")
    return base58.b58encode(pubkey).decode("ascii")
