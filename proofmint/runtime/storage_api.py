"""
proofmint.runtime.storage_api — deterministic key/value storage with journaling.

Design goals
------------
- Deterministic: pure functions over (key, value) with no wall-clock or I/O.
- Simple default: in-process memory backend for local runs & tests.
- Pluggable: a tiny backend interface so the host can swap in a real store.
- Atomic: contract calls never write the backend directly. They write into a
  `JournaledStorage` overlay which the host commits on success and drops on
  revert, so a rejected call leaves no partial state behind.

Backend API
-----------
- get(key: bytes) -> Optional[bytes]
- set(key: bytes, value: bytes) -> None
- exists(key: bytes) -> bool

Entries are never removed; the registry's maps are append/update only.
"""

from __future__ import annotations

import threading
from typing import Dict, Optional, Protocol, runtime_checkable

from ..config import MintConfig, load_config
from ..errors import HostError

U256_MAX = (1 << 256) - 1


# ---------------------------- Backend API ---------------------------- #


@runtime_checkable
class StorageBackend(Protocol):
    """Minimal backend interface for registry storage."""

    def get(self, key: bytes) -> Optional[bytes]: ...
    def set(self, key: bytes, value: bytes) -> None: ...
    def exists(self, key: bytes) -> bool: ...


class MemoryBackend:
    """Thread-safe in-memory backend for local runs and tests."""

    def __init__(self) -> None:
        self._store: Dict[bytes, bytes] = {}
        self._lock = threading.RLock()

    def get(self, key: bytes) -> Optional[bytes]:
        with self._lock:
            return self._store.get(key)

    def set(self, key: bytes, value: bytes) -> None:
        with self._lock:
            self._store[key] = value

    def exists(self, key: bytes) -> bool:
        with self._lock:
            return key in self._store

    def snapshot(self) -> Dict[bytes, bytes]:
        """Copy of the full store (tests compare snapshots to prove atomicity)."""
        with self._lock:
            return dict(self._store)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


def check_backend(backend: object) -> StorageBackend:
    for attr in ("get", "set", "exists"):
        if not callable(getattr(backend, attr, None)):
            raise HostError(f"backend missing method: {attr}", code="storage_backend_invalid")
    return backend  # type: ignore[return-value]


# --------------------------- Journaled overlay --------------------------- #


class JournaledStorage:
    """
    Write-buffering view over a backend for the duration of one call.

    Reads see this call's own writes first, then the backend. Nothing reaches
    the backend until `commit()`.
    """

    def __init__(
        self,
        backend: StorageBackend,
        *,
        readonly: bool = False,
        config: Optional[MintConfig] = None,
    ) -> None:
        self._backend = backend
        self._readonly = readonly
        self._cfg = config or load_config()
        self._writes: Dict[bytes, bytes] = {}

    # -- validation --

    def _check_key(self, key: object) -> bytes:
        if not isinstance(key, (bytes, bytearray)):
            raise HostError("storage key must be bytes", code="storage_bad_key")
        if len(key) == 0:
            raise HostError("storage key must be non-empty", code="storage_bad_key")
        if len(key) > self._cfg.max_storage_key_bytes:
            raise HostError(
                f"storage key too long (>{self._cfg.max_storage_key_bytes} bytes)",
                code="storage_bad_key",
                context={"len": len(key)},
            )
        return bytes(key)

    def _check_value(self, value: object) -> bytes:
        if not isinstance(value, (bytes, bytearray)):
            raise HostError("storage value must be bytes", code="storage_bad_value")
        if len(value) > self._cfg.max_storage_value_bytes:
            raise HostError(
                f"storage value too large (>{self._cfg.max_storage_value_bytes} bytes)",
                code="storage_bad_value",
                context={"len": len(value)},
            )
        return bytes(value)

    # -- contract-facing --

    def get(self, key: bytes) -> Optional[bytes]:
        k = self._check_key(key)
        if k in self._writes:
            return self._writes[k]
        return self._backend.get(k)

    def set(self, key: bytes, value: bytes) -> None:
        if self._readonly:
            raise HostError("storage write in a read-only call", code="storage_readonly")
        self._writes[self._check_key(key)] = self._check_value(value)

    def exists(self, key: bytes) -> bool:
        k = self._check_key(key)
        return k in self._writes or self._backend.exists(k)

    # -- journaling --

    @property
    def dirty(self) -> bool:
        return bool(self._writes)

    def commit(self) -> int:
        """Flush buffered writes to the backend; returns the number written."""
        n = 0
        for k, v in self._writes.items():
            self._backend.set(k, v)
            n += 1
        self._writes.clear()
        return n

    def discard(self) -> None:
        self._writes.clear()


# ------------------------------ Typed helpers ----------------------------- #


def encode_u256(value: int) -> bytes:
    """Fixed-width 32-byte big-endian encoding."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise HostError("u256 value must be int", code="storage_bad_value")
    if value < 0 or value > U256_MAX:
        raise HostError("u256 out of range (must fit in 256 bits)", code="storage_bad_value")
    return value.to_bytes(32, "big")


def decode_u256(raw: Optional[bytes]) -> int:
    """Missing or empty values read as 0."""
    if not raw:
        return 0
    return int.from_bytes(raw, "big", signed=False)


__all__ = [
    "U256_MAX",
    "StorageBackend",
    "MemoryBackend",
    "check_backend",
    "JournaledStorage",
    "encode_u256",
    "decode_u256",
]
