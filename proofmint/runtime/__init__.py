"""
proofmint runtime package

Host-facing APIs (storage/events/hash) and the call executor that gives the
registry its atomic, serialized execution model.

Convenience re-exports live here so callers can do:

    from proofmint.runtime import Host, MemoryBackend, CallEnv
    from proofmint.runtime import storage, events, hashing  # module namespaces

Contract code imports **only** from `proofmint.stdlib`.
"""

from __future__ import annotations

from . import events_api as events
from . import hash_api as hashing  # avoid shadowing builtin `hash`
from . import storage_api as storage
from .context import CallEnv, ContextError, is_null_identity, to_bytes, to_hex
from .events_api import CanonicalEvent, Event, events_for_receipt
from .host import Host, current_frame
from .storage_api import JournaledStorage, MemoryBackend, StorageBackend

__all__ = [
    "Host",
    "current_frame",
    "CallEnv",
    "ContextError",
    "is_null_identity",
    "to_bytes",
    "to_hex",
    "Event",
    "CanonicalEvent",
    "events_for_receipt",
    "JournaledStorage",
    "MemoryBackend",
    "StorageBackend",
    "events",
    "hashing",
    "storage",
]
