# src/quillpost/db/ids.py
"""Identifier helpers for database rows."""

import re
import secrets

OBJECT_ID_LENGTH = 24
_OBJECT_ID_RE = re.compile(r"[0-9a-fA-F]{24}")


def new_object_id() -> str:
    """Return a random 24-character lowercase hexadecimal identifier."""
    return secrets.token_hex(OBJECT_ID_LENGTH // 2)


def is_object_id(value: str) -> bool:
    """Return True if ``value`` has the shape of a row identifier."""
    return bool(_OBJECT_ID_RE.fullmatch(value))
