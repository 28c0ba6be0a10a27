"""
proofmint.runtime.hash_api — deterministic hashing wrappers for the registry.

Goals
-----
- Strictly bytes-in, bytes-out (no implicit text/encoding).
- One switch (`PROOFMINT_HASH`) selects the digest used for allow-list leaves
  and inner nodes; both supported digests are 32 bytes wide.
- Keccak-256 comes from PyCryptodome (`Crypto.Hash.keccak`), the same
  pre-standard Keccak used by Ethereum tooling, so roots built by common
  off-chain allow-list generators verify unchanged.

Provided APIs
-------------
- sha3_256(data) -> bytes
- keccak256(data) -> bytes
- get_hasher(name=None) -> callable          # configured algorithm by default
"""

from __future__ import annotations

import hashlib
from typing import Callable, Dict, Optional, Union

from Crypto.Hash import keccak as _keccak

from ..config import load_config
from ..errors import HostError

BytesLike = Union[bytes, bytearray, memoryview]

DIGEST_SIZE = 32


def _ensure_bytes(buf: object, name: str) -> bytes:
    if isinstance(buf, (bytes, bytearray, memoryview)):
        return bytes(buf)
    raise HostError(f"{name} must be bytes-like (got {type(buf).__name__})", code="hash_bad_input")


# ------------------------------- Hash Functions ------------------------------ #


def sha3_256(data: BytesLike) -> bytes:
    return hashlib.sha3_256(_ensure_bytes(data, "data")).digest()


def keccak256(data: BytesLike) -> bytes:
    """
    Keccak-256 (pre-SHA3 padding) as used by Ethereum and many ecosystems.
    """
    h = _keccak.new(digest_bits=256)
    h.update(_ensure_bytes(data, "data"))
    return h.digest()


_ALGORITHMS: Dict[str, Callable[[BytesLike], bytes]] = {
    "keccak256": keccak256,
    "sha3_256": sha3_256,
}


def get_hasher(name: Optional[str] = None) -> Callable[[BytesLike], bytes]:
    """Return the digest function for `name` (configured algorithm if None)."""
    algo = name or load_config().hash_name
    try:
        return _ALGORITHMS[algo]
    except KeyError:
        raise HostError(f"unsupported hash algorithm {algo!r}", code="hash_unsupported") from None


__all__ = [
    "DIGEST_SIZE",
    "sha3_256",
    "keccak256",
    "get_hasher",
]
