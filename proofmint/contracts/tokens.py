# -*- coding: utf-8 -*-
"""
Non-fungible ownership registry
===============================

Ownership, approvals and transfers for uniquely identified tokens. Minting
lives in `gated_mint`; both mint paths go through `allocate_and_assign` here so
the ownership index, owner record and metadata always move together.

Highlights
----------
- Explicit `caller` parameters for mutating calls (no ambient sender).
- Token ids are allocated sequentially from 1 and never reused.
- One approved transferer per token (single slot, overwritten by `approve`,
  cleared by `transfer`), plus blanket per-(owner, operator) approvals.
- Authorization for `approve` / `transfer` is derived from `owner_of`, never
  from the `from_` argument, so a delegate of one owner cannot move a token
  that now belongs to someone else.

Public interface (ABI sketch)
-----------------------------
# queries (pure)
owner_of(token_id: int) -> bytes
balance_of(identity: bytes) -> int
token_metadata(token_id: int) -> str
get_approved(token_id: int) -> Optional[bytes]
is_approved_for_all(owner: bytes, operator: bytes) -> bool
total_supply() -> int

# state-changing (explicit caller)
approve(caller: bytes, to: bytes, token_id: int) -> None
set_operator_approval(caller: bytes, operator: bytes, approved: bool) -> None
transfer(caller: bytes, from_: bytes, to: bytes, token_id: int) -> None

There is no burn; once allocated, a token exists forever.
"""

from __future__ import annotations

from typing import Optional

from ..runtime.context import is_null_identity
from ..stdlib import abi, env, events, storage
from . import (
    ERR_APPROVE_TO_CALLER,
    ERR_APPROVE_TO_OWNER,
    ERR_NONEXISTENT_TOKEN,
    ERR_NOT_OWNER_NOR_APPROVED,
    ERR_WRONG_FROM,
    EVT_APPROVAL,
    EVT_APPROVAL_FOR_ALL,
    EVT_TRANSFER,
    FIRST_TOKEN_ID,
    K_NEXT_ID,
    NO_IDENTITY,
    key_approved,
    key_balance,
    key_operator,
    key_owner,
    key_uri,
    require_identity,
    require_token_id,
    require_uri,
)
from .lifecycle import require_active

# ------------------------------------------------------------------------------
# Queries
# ------------------------------------------------------------------------------


def _owner_or_none(token_id: int) -> Optional[bytes]:
    v = storage.get(key_owner(token_id))
    return v if v else None


def owner_of(token_id: int) -> bytes:
    token_id = require_token_id(token_id)
    owner = _owner_or_none(token_id)
    if owner is None:
        abi.revert(ERR_NONEXISTENT_TOKEN, context={"token_id": token_id})
    return owner


def balance_of(identity: bytes) -> int:
    return storage.get_u256(key_balance(require_identity(identity)))


def token_metadata(token_id: int) -> str:
    owner_of(token_id)
    return (storage.get(key_uri(token_id)) or b"").decode("utf-8")


def get_approved(token_id: int) -> Optional[bytes]:
    owner_of(token_id)
    v = storage.get(key_approved(token_id))
    return v if v else None


def is_approved_for_all(owner: bytes, operator: bytes) -> bool:
    for who in (owner, operator):
        if not isinstance(who, (bytes, bytearray)) or is_null_identity(who):
            return False
    return storage.get_flag(key_operator(owner, operator))


def next_token_id() -> int:
    return storage.get_u256(K_NEXT_ID) or FIRST_TOKEN_ID


def total_supply() -> int:
    return next_token_id() - FIRST_TOKEN_ID


# ------------------------------------------------------------------------------
# Approvals
# ------------------------------------------------------------------------------


def approve(caller: bytes, to: bytes, token_id: int) -> None:
    """
    Set the single approved transferer of `token_id`. Passing the null
    identity clears the slot.

    Emits:
        - "Approval" with {"owner", "approved", "token_id"}
    """
    require_active()
    owner = owner_of(token_id)
    to = bytes(to) if isinstance(to, (bytes, bytearray)) else to
    if not is_null_identity(to):
        to = require_identity(to)
    if to == owner:
        abi.revert(ERR_APPROVE_TO_OWNER)
    if caller != owner and not is_approved_for_all(owner, caller):
        abi.revert(ERR_NOT_OWNER_NOR_APPROVED)

    approved = NO_IDENTITY if is_null_identity(to) else to
    storage.set(key_approved(token_id), approved)
    events.emit(EVT_APPROVAL, {"owner": owner, "approved": approved, "token_id": token_id})


def set_operator_approval(caller: bytes, operator: bytes, approved: bool) -> None:
    """
    Grant or revoke `operator`'s blanket approval over all of the caller's
    tokens.

    Emits:
        - "ApprovalForAll" with {"owner", "operator", "approved"}
    """
    require_active()
    owner = require_identity(caller)
    operator = require_identity(operator)
    if operator == owner:
        abi.revert(ERR_APPROVE_TO_CALLER)
    flag = bool(approved)
    storage.set_flag(key_operator(owner, operator), flag)
    events.emit(EVT_APPROVAL_FOR_ALL, {"owner": owner, "operator": operator, "approved": flag})


def _is_approved_or_owner(spender: bytes, token_id: int, owner: bytes) -> bool:
    if is_null_identity(spender):
        return False
    if spender == owner:
        return True
    if storage.get(key_approved(token_id)) == spender:
        return True
    return is_approved_for_all(owner, spender)


# ------------------------------------------------------------------------------
# Transfers
# ------------------------------------------------------------------------------


def transfer(caller: bytes, from_: bytes, to: bytes, token_id: int) -> None:
    """
    Move `token_id` from `from_` to `to`.

    The caller must be the current owner, the token's approved transferer, or
    an operator of the current owner, and `from_` must be the current owner.

    Emits:
        - "Transfer" with {"from": from_, "to": to, "token_id": token_id}
    """
    require_active()
    owner = owner_of(token_id)
    if not _is_approved_or_owner(caller, token_id, owner):
        abi.revert(ERR_NOT_OWNER_NOR_APPROVED)
    if from_ != owner:
        abi.revert(ERR_WRONG_FROM)
    to = require_identity(to)

    storage.set(key_approved(token_id), NO_IDENTITY)

    k_from = key_balance(owner)
    storage.set_u256(k_from, storage.get_u256(k_from) - 1)
    k_to = key_balance(to)
    storage.set_u256(k_to, storage.get_u256(k_to) + 1)

    storage.set(key_owner(token_id), to)
    events.emit(EVT_TRANSFER, {"from": owner, "to": to, "token_id": token_id})


# ------------------------------------------------------------------------------
# Internals (shared by both mint paths)
# ------------------------------------------------------------------------------


def allocate_and_assign(to: bytes, metadata_uri: str) -> int:
    """
    Allocate the next token id, give it to `to` and record its metadata.
    Callers perform their own authorization first.

    Emits:
        - "Transfer" with {"from": b"", "to": to, "token_id": <new id>}
    """
    to = require_identity(to)
    uri = require_uri(metadata_uri, env.config().max_uri_bytes)

    token_id = next_token_id()
    storage.set_u256(K_NEXT_ID, token_id + 1)

    storage.set(key_owner(token_id), to)
    storage.set(key_uri(token_id), uri)
    k_bal = key_balance(to)
    storage.set_u256(k_bal, storage.get_u256(k_bal) + 1)

    events.emit(EVT_TRANSFER, {"from": NO_IDENTITY, "to": to, "token_id": token_id})
    return token_id


__all__ = [
    # queries
    "owner_of",
    "balance_of",
    "token_metadata",
    "get_approved",
    "is_approved_for_all",
    "next_token_id",
    "total_supply",
    # actions
    "approve",
    "set_operator_approval",
    "transfer",
    # internal primitive
    "allocate_and_assign",
]
