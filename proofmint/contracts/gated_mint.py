# -*- coding: utf-8 -*-
"""
Allow-list gated minting
========================

Two distinct entry points allocate tokens, sharing
`tokens.allocate_and_assign`:

- **mint_by_proof**: any identity in the committed allow-list may mint exactly
  once, by presenting the Merkle path from `H(caller)` to the committed root.
- **admin_mint**: the authority issues a token to any non-null identity,
  bypassing proof and eligibility entirely (recovery, promotions). It neither
  reads nor sets the recipient's eligibility flag, so an allow-listed
  recipient can still proof-mint afterwards.

`is_member` answers the membership question without touching state or
consuming the caller's single mint.
"""

from __future__ import annotations

from typing import Any, Sequence

from .. import merkle
from ..stdlib import abi, env, storage
from . import (
    ERR_ALREADY_MINTED,
    ERR_INVALID_PROOF,
    ERR_ROOT_UNSET,
    ZERO_ROOT,
    key_minted,
    require_identity,
)
from .lifecycle import (
    RegistryState,
    committed_root,
    require_active,
    require_authority,
    state,
)
from .tokens import allocate_and_assign

# ------------------------------------------------------------------------------
# Introspection
# ------------------------------------------------------------------------------


def has_minted(identity: bytes) -> bool:
    """The caller's mint-eligibility flag: True once a proof-gated mint succeeded."""
    if not isinstance(identity, (bytes, bytearray)) or not identity:
        return False
    return storage.get_flag(key_minted(identity))


def _check_membership(identity: bytes, proof: Sequence[bytes], root: bytes) -> bool:
    cfg = env.config()
    leaf = merkle.leaf_hash(identity, hash_name=cfg.hash_name)
    return merkle.verify(leaf, proof, root, hash_name=cfg.hash_name, max_depth=cfg.max_proof_depth)


def is_member(identity: Any, proof: Sequence[bytes]) -> bool:
    """Read-only membership check against the committed root."""
    if state() is not RegistryState.ACTIVE:
        return False
    root = committed_root()
    if root == ZERO_ROOT:
        return False
    if not isinstance(identity, (bytes, bytearray)):
        return False
    return _check_membership(bytes(identity), proof, root)


# ------------------------------------------------------------------------------
# Mint entrypoints
# ------------------------------------------------------------------------------


def mint_by_proof(caller: bytes, proof: Sequence[bytes], metadata_uri: str) -> int:
    """
    Mint one token to `caller` if `proof` places H(caller) under the committed
    root and `caller` has not proof-minted before. Returns the new token id.
    """
    require_active()
    caller = require_identity(caller)
    abi.require(not storage.get_flag(key_minted(caller)), ERR_ALREADY_MINTED)

    root = committed_root()
    abi.require(root != ZERO_ROOT, ERR_ROOT_UNSET)

    if not _check_membership(caller, proof, root):
        abi.reject_proof(ERR_INVALID_PROOF)

    token_id = allocate_and_assign(caller, metadata_uri)
    storage.set_flag(key_minted(caller), True)
    return token_id


def admin_mint(caller: bytes, to: bytes, metadata_uri: str) -> int:
    """Authority-only issuance to `to`; no proof, no eligibility bookkeeping."""
    require_authority(caller)
    return allocate_and_assign(to, metadata_uri)


__all__ = [
    "has_minted",
    "is_member",
    "mint_by_proof",
    "admin_mint",
]
