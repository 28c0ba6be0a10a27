# -*- coding: utf-8 -*-
"""
proofmint.contracts.lifecycle
=============================

One-time initialization and the administrative authority.

The registry is a two-state machine:

    UNINITIALIZED --initialize--> ACTIVE

ACTIVE is terminal. Every mutating entry point of the registry starts with
`require_active()`, so the initialization invariant is enforced in one place.
Within ACTIVE the committed root may be replaced, and the authority reassigned,
any number of times, always by the current authority.

Surface
-------
- state() -> RegistryState
- require_active()
- get_authority() -> Optional[bytes]
- require_authority(caller)
- committed_root() -> bytes               (ZERO_ROOT if never set)
- initialize(caller, root)                emits Initialized
- update_root(caller, new_root)           emits RootChanged
- transfer_authority(caller, new_authority)

`transfer_authority` rejects a null `new_authority`; there is no renounce path,
so the registry always has exactly one authority once initialized.
"""
from __future__ import annotations

import enum
from typing import Optional

from ..stdlib import abi, events, storage
from . import (
    ERR_ALREADY_INITIALIZED,
    ERR_NOT_AUTHORITY,
    ERR_NOT_INITIALIZED,
    EVT_INITIALIZED,
    EVT_ROOT_CHANGED,
    K_AUTHORITY,
    K_ROOT,
    K_STATE,
    ZERO_ROOT,
    require_identity,
    require_root,
)


class RegistryState(enum.IntEnum):
    UNINITIALIZED = 0
    ACTIVE = 1


# --- Reads ------------------------------------------------------------------


def state() -> RegistryState:
    v = storage.get(K_STATE)
    if not v:
        return RegistryState.UNINITIALIZED
    return RegistryState(v[0])


def require_active() -> None:
    if state() is not RegistryState.ACTIVE:
        abi.revert(ERR_NOT_INITIALIZED)


def get_authority() -> Optional[bytes]:
    v = storage.get(K_AUTHORITY)
    return v if v else None


def require_authority(caller: bytes) -> None:
    """
    Revert unless the registry is active and `caller` is the current authority.
    """
    require_active()
    if get_authority() != caller:
        abi.revert(ERR_NOT_AUTHORITY)


def committed_root() -> bytes:
    v = storage.get(K_ROOT)
    return v if v else ZERO_ROOT


# --- Transitions --------------------------------------------------------------


def initialize(caller: bytes, root: bytes) -> None:
    """
    UNINITIALIZED -> ACTIVE. The caller becomes the authority.

    Emits:
        - "Initialized" with {"authority": caller, "root": root}
    """
    if state() is not RegistryState.UNINITIALIZED:
        abi.revert(ERR_ALREADY_INITIALIZED)
    authority = require_identity(caller)
    root = require_root(root)

    storage.set(K_AUTHORITY, authority)
    storage.set(K_ROOT, root)
    storage.set(K_STATE, bytes([RegistryState.ACTIVE]))
    events.emit(EVT_INITIALIZED, {"authority": authority, "root": root})


def update_root(caller: bytes, new_root: bytes) -> None:
    """
    Authority-only. The zero root is accepted and halts proof-gated minting.

    Emits:
        - "RootChanged" with {"old": <previous>, "new": new_root}
    """
    require_authority(caller)
    new_root = require_root(new_root)

    old = committed_root()
    storage.set(K_ROOT, new_root)
    events.emit(EVT_ROOT_CHANGED, {"old": old, "new": new_root})


def transfer_authority(caller: bytes, new_authority: bytes) -> None:
    """Authority-only: hand the authority to a non-null identity."""
    require_authority(caller)
    storage.set(K_AUTHORITY, require_identity(new_authority))


__all__ = [
    "RegistryState",
    "state",
    "require_active",
    "get_authority",
    "require_authority",
    "committed_root",
    "initialize",
    "update_root",
    "transfer_authority",
]
