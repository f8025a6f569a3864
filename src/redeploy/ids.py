"""Identifier helpers."""

import secrets


def new_id(prefix: str) -> str:
    """Opaque record id such as ``cfg_3f9c...``; the prefix names the record kind."""
    return f"{prefix}_{secrets.token_hex(12)}"
