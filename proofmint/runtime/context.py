"""
proofmint.runtime.context — identity coercion and the per-call environment.

The registry has no ambient "current caller". Every mutating entry point takes
the caller explicitly; the host records it in a `CallEnv` so logs and errors
can say who attempted what.

Design notes
------------
- Identities are raw bytes (typically 20-byte addresses). We don't enforce a
  fixed length here; different deployments MAY use wider identities.
- Hex strings (with or without "0x") are accepted by helpers and normalized to
  bytes. Odd-length or non-hex strings are rejected.
- The *null identity* is empty bytes or all-zero bytes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

IdentityLike = Union[bytes, bytearray, memoryview, str]


class ContextError(ValueError):
    """Validation or coercion failure for identities and call environments."""


def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_bytes(value: IdentityLike) -> bytes:
    """
    Coerce `value` to bytes.
    - If str, interpret as hex (with or without '0x'); odd-length hex is rejected.
    - If a bytes-like object, copy to immutable bytes.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        h = _strip_0x(value.strip())
        if len(h) % 2 != 0:
            raise ContextError(f"hex string must have even length, got {len(h)}")
        try:
            return bytes.fromhex(h)
        except ValueError as e:
            raise ContextError(f"invalid hex string: {value!r}") from e
    raise ContextError(f"cannot convert type {type(value).__name__} to bytes")


def to_hex(b: Union[bytes, bytearray, memoryview]) -> str:
    """Encode bytes as 0x-prefixed lowercase hex."""
    return "0x" + bytes(b).hex()


def is_null_identity(identity: Any) -> bool:
    """True for None, empty bytes and all-zero bytes."""
    if identity is None:
        return True
    if not isinstance(identity, (bytes, bytearray)):
        return False
    return len(identity) == 0 or not any(identity)


@dataclass(frozen=True)
class CallEnv:
    """
    Per-call environment recorded by the host.

    Fields
    ------
    entry:     Contract function name being executed.
    caller:    Explicit caller identity, or None for read-only queries.
    readonly:  True for views; writes are rejected.
    """

    entry: str
    caller: Optional[bytes] = None
    readonly: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entry": self.entry,
            "caller": to_hex(self.caller) if self.caller is not None else None,
            "readonly": self.readonly,
        }


__all__ = [
    "IdentityLike",
    "ContextError",
    "to_bytes",
    "to_hex",
    "is_null_identity",
    "CallEnv",
]
