from __future__ import annotations

from typing import Optional

from ..runtime.host import current_frame
from ..runtime.storage_api import decode_u256, encode_u256


def get(key: bytes) -> Optional[bytes]:
    """Return the value for `key` (this call's writes first), or None if unset."""
    return current_frame().storage.get(key)


def set(key: bytes, value: bytes) -> None:
    """Buffer a write; it reaches the backend only if the call succeeds."""
    current_frame().storage.set(key, value)


def exists(key: bytes) -> bool:
    return current_frame().storage.exists(key)


def get_u256(key: bytes) -> int:
    return decode_u256(get(key))


def set_u256(key: bytes, value: int) -> None:
    set(key, encode_u256(value))


def get_flag(key: bytes) -> bool:
    v = get(key)
    return bool(v) and v != b"\x00"


def set_flag(key: bytes, value: bool) -> None:
    set(key, b"\x01" if value else b"\x00")


__all__ = ["get", "set", "exists", "get_u256", "set_u256", "get_flag", "set_flag"]
