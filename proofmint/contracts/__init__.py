# -*- coding: utf-8 -*-
"""
proofmint.contracts
===================

Allow-list gated non-fungible token registry, written as plain contract
modules over `proofmint.stdlib` (storage / events / abi / env).

Modules
-------
- lifecycle   : one-time initialization latch, committed root, authority
- tokens      : ownership index, approvals, transfers, token queries
- gated_mint  : proof-gated and authority-issued minting, membership check
- registry    : `AllowlistRegistry`, the Python object facade over a Host

This package module itself holds only the shared conventions: storage key
prefixes, event names, error tags and input validation. It performs no
storage I/O of its own.

Conventions
-----------
Storage keys (prefixed bytes):
  - pm:state                          lifecycle tag (1 byte)
  - pm:root                           committed root (32 bytes)
  - pm:authority                      authority identity
  - pm:next_id                        u256 next token id (absent -> 1)
  - pm:minted:  || H(identity)        b"\\x01" once proof-minted
  - pm:owner:   || u256(id)           owner identity
  - pm:approved:|| u256(id)           approved transferer (b"" = none)
  - pm:uri:     || u256(id)           UTF-8 metadata URI
  - pm:bal:     || H(identity)        u256 owned-token count
  - pm:op:      || H(owner) || H(op)  b"\\x01" / b"\\x00"

H is Keccak-256 regardless of the configured leaf hash, so every identity
component of a key is exactly 32 bytes. Identities themselves are 1 to
MAX_IDENTITY_BYTES bytes and are stored raw in the owner, approved and
authority slots.

Events (names as bytes):
  - b"Initialized"     { "authority": bytes, "root": bytes }
  - b"RootChanged"     { "old": bytes, "new": bytes }
  - b"Transfer"        { "from": bytes, "to": bytes, "token_id": int }
  - b"Approval"        { "owner": bytes, "approved": bytes, "token_id": int }
  - b"ApprovalForAll"  { "owner": bytes, "operator": bytes, "approved": bool }

A mint is a Transfer whose "from" is empty bytes.
"""

from __future__ import annotations

from typing import Any, Final

from ..runtime.context import is_null_identity
from ..runtime.hash_api import keccak256
from ..stdlib import abi

# -----------------------------------------------------------------------------
# Storage keys & prefixes
# -----------------------------------------------------------------------------

K_STATE: Final[bytes] = b"pm:state"
K_ROOT: Final[bytes] = b"pm:root"
K_AUTHORITY: Final[bytes] = b"pm:authority"
K_NEXT_ID: Final[bytes] = b"pm:next_id"

MINTED_PREFIX: Final[bytes] = b"pm:minted:"
OWNER_PREFIX: Final[bytes] = b"pm:owner:"
APPROVED_PREFIX: Final[bytes] = b"pm:approved:"
URI_PREFIX: Final[bytes] = b"pm:uri:"
BAL_PREFIX: Final[bytes] = b"pm:bal:"
OPERATOR_PREFIX: Final[bytes] = b"pm:op:"

ROOT_SIZE: Final[int] = 32
ZERO_ROOT: Final[bytes] = b"\x00" * ROOT_SIZE
NO_IDENTITY: Final[bytes] = b""
MAX_IDENTITY_BYTES: Final[int] = 64
FIRST_TOKEN_ID: Final[int] = 1

# -----------------------------------------------------------------------------
# Events
# -----------------------------------------------------------------------------

EVT_INITIALIZED: Final[bytes] = b"Initialized"
EVT_ROOT_CHANGED: Final[bytes] = b"RootChanged"
EVT_TRANSFER: Final[bytes] = b"Transfer"
EVT_APPROVAL: Final[bytes] = b"Approval"
EVT_APPROVAL_FOR_ALL: Final[bytes] = b"ApprovalForAll"

# -----------------------------------------------------------------------------
# Stable error tags (short, comparable, log-friendly)
# -----------------------------------------------------------------------------

ERR_NOT_INITIALIZED: Final[bytes] = b"REGISTRY:NOT_INITIALIZED"
ERR_ALREADY_INITIALIZED: Final[bytes] = b"REGISTRY:ALREADY_INITIALIZED"
ERR_NOT_AUTHORITY: Final[bytes] = b"REGISTRY:NOT_AUTHORITY"
ERR_ZERO_ADDRESS: Final[bytes] = b"REGISTRY:ZERO_ADDRESS"
ERR_BAD_ADDRESS: Final[bytes] = b"REGISTRY:BAD_ADDRESS"
ERR_BAD_ROOT: Final[bytes] = b"REGISTRY:BAD_ROOT"
ERR_ROOT_UNSET: Final[bytes] = b"REGISTRY:ROOT_UNSET"
ERR_ALREADY_MINTED: Final[bytes] = b"REGISTRY:ALREADY_MINTED"
ERR_INVALID_PROOF: Final[bytes] = b"REGISTRY:INVALID_PROOF"
ERR_BAD_URI: Final[bytes] = b"REGISTRY:BAD_URI"
ERR_BAD_TOKEN_ID: Final[bytes] = b"REGISTRY:BAD_TOKEN_ID"
ERR_NONEXISTENT_TOKEN: Final[bytes] = b"REGISTRY:NONEXISTENT_TOKEN"
ERR_NOT_OWNER_NOR_APPROVED: Final[bytes] = b"REGISTRY:NOT_OWNER_NOR_APPROVED"
ERR_APPROVE_TO_OWNER: Final[bytes] = b"REGISTRY:APPROVE_TO_OWNER"
ERR_APPROVE_TO_CALLER: Final[bytes] = b"REGISTRY:APPROVE_TO_CALLER"
ERR_WRONG_FROM: Final[bytes] = b"REGISTRY:WRONG_FROM"


# -----------------------------------------------------------------------------
# Key derivation helpers (no storage I/O here)
# -----------------------------------------------------------------------------


def id_bytes(token_id: int) -> bytes:
    return int(token_id).to_bytes(32, "big")


def ident_key(identity: bytes) -> bytes:
    return keccak256(bytes(identity))


def key_minted(identity: bytes) -> bytes:
    return MINTED_PREFIX + ident_key(identity)


def key_owner(token_id: int) -> bytes:
    return OWNER_PREFIX + id_bytes(token_id)


def key_approved(token_id: int) -> bytes:
    return APPROVED_PREFIX + id_bytes(token_id)


def key_uri(token_id: int) -> bytes:
    return URI_PREFIX + id_bytes(token_id)


def key_balance(identity: bytes) -> bytes:
    return BAL_PREFIX + ident_key(identity)


def key_operator(owner: bytes, operator: bytes) -> bytes:
    return OPERATOR_PREFIX + ident_key(owner) + ident_key(operator)


# -----------------------------------------------------------------------------
# Validation helpers (revert inside the current call)
# -----------------------------------------------------------------------------


def require_identity(identity: Any) -> bytes:
    """
    Ensure `identity` is non-null bytes of at most MAX_IDENTITY_BYTES. Widths
    are otherwise free; 20- and 32-byte identities may share one registry.
    """
    if identity is not None and not isinstance(identity, (bytes, bytearray)):
        abi.revert(ERR_BAD_ADDRESS)
    if is_null_identity(identity):
        abi.revert(ERR_ZERO_ADDRESS)
    if len(identity) > MAX_IDENTITY_BYTES:
        abi.revert(ERR_BAD_ADDRESS, context={"len": len(identity), "max": MAX_IDENTITY_BYTES})
    return bytes(identity)


def require_root(root: Any) -> bytes:
    """Roots are exactly 32 bytes; the zero root is a valid (halting) value."""
    if not isinstance(root, (bytes, bytearray)) or len(root) != ROOT_SIZE:
        abi.revert(ERR_BAD_ROOT)
    return bytes(root)


def require_token_id(token_id: Any) -> int:
    if isinstance(token_id, bool) or not isinstance(token_id, int):
        abi.revert(ERR_BAD_TOKEN_ID)
    if token_id < FIRST_TOKEN_ID or token_id >= (1 << 256):
        abi.revert(ERR_NONEXISTENT_TOKEN)
    return token_id


def require_uri(uri: Any, max_bytes: int) -> bytes:
    if not isinstance(uri, str):
        abi.revert(ERR_BAD_URI)
    raw = uri.encode("utf-8")
    if len(raw) > max_bytes:
        abi.revert(ERR_BAD_URI, context={"len": len(raw), "max": max_bytes})
    return raw


__all__ = [
    # keys
    "K_STATE",
    "K_ROOT",
    "K_AUTHORITY",
    "K_NEXT_ID",
    "ROOT_SIZE",
    "ZERO_ROOT",
    "NO_IDENTITY",
    "FIRST_TOKEN_ID",
    "MAX_IDENTITY_BYTES",
    "ident_key",
    "key_minted",
    "key_owner",
    "key_approved",
    "key_uri",
    "key_balance",
    "key_operator",
    # events
    "EVT_INITIALIZED",
    "EVT_ROOT_CHANGED",
    "EVT_TRANSFER",
    "EVT_APPROVAL",
    "EVT_APPROVAL_FOR_ALL",
    # errors
    "ERR_NOT_INITIALIZED",
    "ERR_ALREADY_INITIALIZED",
    "ERR_NOT_AUTHORITY",
    "ERR_ZERO_ADDRESS",
    "ERR_BAD_ADDRESS",
    "ERR_BAD_ROOT",
    "ERR_ROOT_UNSET",
    "ERR_ALREADY_MINTED",
    "ERR_INVALID_PROOF",
    "ERR_BAD_URI",
    "ERR_BAD_TOKEN_ID",
    "ERR_NONEXISTENT_TOKEN",
    "ERR_NOT_OWNER_NOR_APPROVED",
    "ERR_APPROVE_TO_OWNER",
    "ERR_APPROVE_TO_CALLER",
    "ERR_WRONG_FROM",
    # validation
    "require_identity",
    "require_root",
    "require_token_id",
    "require_uri",
]
