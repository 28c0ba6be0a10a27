# -*- coding: utf-8 -*-
"""
Ownership, approvals and transfers
- owner / delegate / operator authorization, derived from the current owner
- approve-then-transfer clears the approval slot
- wrong `from_` and unauthorized callers change nothing
- the ownership index always matches the owner records
"""

from __future__ import annotations

import pytest

from proofmint.contracts import (
    ERR_APPROVE_TO_CALLER,
    ERR_APPROVE_TO_OWNER,
    ERR_BAD_ADDRESS,
    ERR_BAD_TOKEN_ID,
    ERR_NONEXISTENT_TOKEN,
    ERR_NOT_OWNER_NOR_APPROVED,
    ERR_WRONG_FROM,
    ERR_ZERO_ADDRESS,
    MAX_IDENTITY_BYTES,
)
from proofmint.errors import PreconditionViolation

from .conftest import assert_code


def _check_index(reg, identities):
    """balance_of(x) == number of tokens whose owner is x."""
    owners = [reg.owner_of(t) for t in range(1, reg.total_supply() + 1)]
    for who in identities:
        assert reg.balance_of(who) == owners.count(who)


# ------------------------------------------------------------------------------
# Queries
# ------------------------------------------------------------------------------


@pytest.mark.parametrize("token_id", [0, 3, 999, 1 << 256])
def test_nonexistent_token(active_registry, minted, token_id):
    for query in (active_registry.owner_of, active_registry.token_metadata, active_registry.get_approved):
        with pytest.raises(PreconditionViolation) as ei:
            query(token_id)
        assert_code(ei.value, ERR_NONEXISTENT_TOKEN)


@pytest.mark.parametrize("token_id", ["1", 1.0, True, None])
def test_malformed_token_id(active_registry, minted, token_id):
    with pytest.raises(PreconditionViolation) as ei:
        active_registry.owner_of(token_id)
    assert_code(ei.value, ERR_BAD_TOKEN_ID)


def test_nonexistent_token_context(active_registry):
    with pytest.raises(PreconditionViolation) as ei:
        active_registry.owner_of(7)
    assert ei.value.context["token_id"] == 7
    assert ei.value.context["entry"] == "owner_of"


def test_balance_of_null_identity(active_registry):
    for who in (b"", b"\x00" * 20):
        with pytest.raises(PreconditionViolation) as ei:
            active_registry.balance_of(who)
        assert_code(ei.value, ERR_ZERO_ADDRESS)


def test_fresh_tokens_have_no_approval(active_registry, minted):
    assert active_registry.get_approved(minted["alice"]) is None


# ------------------------------------------------------------------------------
# Transfers
# ------------------------------------------------------------------------------


def test_owner_transfer(active_registry, accounts, minted):
    alice, dave = accounts["alice"], accounts["dave"]
    tid = minted["alice"]
    active_registry.transfer(alice, alice, dave, tid)

    assert active_registry.owner_of(tid) == dave
    assert active_registry.balance_of(alice) == 0
    assert active_registry.balance_of(dave) == 1
    ev = active_registry.events[-1]
    assert ev.name == b"Transfer"
    assert ev.args == {"from": alice, "to": dave, "token_id": tid}
    # Metadata is immutable across transfers.
    assert active_registry.token_metadata(tid) == "ipfs://meta/alice.json"


def test_wrong_from_changes_nothing(active_registry, accounts, minted):
    alice, bob, dave = accounts["alice"], accounts["bob"], accounts["dave"]
    before = active_registry.host.snapshot()
    n_events = len(active_registry.events)

    with pytest.raises(PreconditionViolation) as ei:
        active_registry.transfer(alice, bob, dave, minted["alice"])
    assert_code(ei.value, ERR_WRONG_FROM)

    assert active_registry.host.snapshot() == before
    assert len(active_registry.events) == n_events


def test_stranger_cannot_transfer(active_registry, accounts, minted):
    alice, mallory = accounts["alice"], accounts["mallory"]
    for caller in (mallory, b"", None):
        with pytest.raises(PreconditionViolation) as ei:
            active_registry.transfer(caller, alice, mallory, minted["alice"])
        assert_code(ei.value, ERR_NOT_OWNER_NOR_APPROVED)
    assert active_registry.owner_of(minted["alice"]) == alice


def test_transfer_to_null_rejected(active_registry, accounts, minted):
    alice = accounts["alice"]
    for to in (b"", b"\x00" * 20):
        with pytest.raises(PreconditionViolation) as ei:
            active_registry.transfer(alice, alice, to, minted["alice"])
        assert_code(ei.value, ERR_ZERO_ADDRESS)
    assert active_registry.balance_of(alice) == 1


def test_transfer_of_nonexistent_token(active_registry, accounts, minted):
    alice = accounts["alice"]
    with pytest.raises(PreconditionViolation) as ei:
        active_registry.transfer(alice, alice, accounts["dave"], 42)
    assert_code(ei.value, ERR_NONEXISTENT_TOKEN)


def test_self_transfer_keeps_balance(active_registry, accounts, minted):
    alice = accounts["alice"]
    active_registry.transfer(alice, alice, alice, minted["alice"])
    assert active_registry.owner_of(minted["alice"]) == alice
    assert active_registry.balance_of(alice) == 1


# ------------------------------------------------------------------------------
# Single-token approval
# ------------------------------------------------------------------------------


def test_approve_then_transfer_clears_approval(active_registry, accounts, minted):
    alice, bob, dave = accounts["alice"], accounts["bob"], accounts["dave"]
    tid = minted["alice"]

    active_registry.approve(alice, bob, tid)
    assert active_registry.get_approved(tid) == bob
    ev = active_registry.events[-1]
    assert ev.name == b"Approval"
    assert ev.args == {"owner": alice, "approved": bob, "token_id": tid}

    active_registry.transfer(bob, alice, dave, tid)
    assert active_registry.owner_of(tid) == dave
    assert active_registry.get_approved(tid) is None

    # The old delegate has no power over the token in its new owner's hands.
    with pytest.raises(PreconditionViolation) as ei:
        active_registry.transfer(bob, dave, bob, tid)
    assert_code(ei.value, ERR_NOT_OWNER_NOR_APPROVED)


def test_approval_slot_is_overwritten(active_registry, accounts, minted):
    alice, bob, carol = accounts["alice"], accounts["bob"], accounts["carol"]
    tid = minted["alice"]
    active_registry.approve(alice, bob, tid)
    active_registry.approve(alice, carol, tid)
    assert active_registry.get_approved(tid) == carol

    with pytest.raises(PreconditionViolation):
        active_registry.transfer(bob, alice, bob, tid)
    active_registry.transfer(carol, alice, carol, tid)
    assert active_registry.owner_of(tid) == carol


def test_approve_null_clears_slot(active_registry, accounts, minted):
    alice, bob = accounts["alice"], accounts["bob"]
    tid = minted["alice"]
    active_registry.approve(alice, bob, tid)
    active_registry.approve(alice, None, tid)
    assert active_registry.get_approved(tid) is None
    assert active_registry.events[-1].args == {"owner": alice, "approved": b"", "token_id": tid}

    active_registry.approve(alice, bob, tid)
    active_registry.approve(alice, b"\x00" * 20, tid)
    assert active_registry.get_approved(tid) is None


def test_approve_to_owner_rejected(active_registry, accounts, minted):
    alice = accounts["alice"]
    with pytest.raises(PreconditionViolation) as ei:
        active_registry.approve(alice, alice, minted["alice"])
    assert_code(ei.value, ERR_APPROVE_TO_OWNER)


def test_only_owner_or_operator_may_approve(active_registry, accounts, minted):
    alice, bob, mallory = accounts["alice"], accounts["bob"], accounts["mallory"]
    tid = minted["alice"]
    with pytest.raises(PreconditionViolation) as ei:
        active_registry.approve(mallory, mallory, tid)
    assert_code(ei.value, ERR_NOT_OWNER_NOR_APPROVED)

    # A single-token delegate cannot re-delegate.
    active_registry.approve(alice, bob, tid)
    with pytest.raises(PreconditionViolation) as ei:
        active_registry.approve(bob, mallory, tid)
    assert_code(ei.value, ERR_NOT_OWNER_NOR_APPROVED)
    assert active_registry.get_approved(tid) == bob


def test_approve_nonexistent_token(active_registry, accounts):
    alice = accounts["alice"]
    with pytest.raises(PreconditionViolation) as ei:
        active_registry.approve(alice, accounts["bob"], 1)
    assert_code(ei.value, ERR_NONEXISTENT_TOKEN)


# ------------------------------------------------------------------------------
# Operators
# ------------------------------------------------------------------------------


def test_operator_can_transfer_and_approve(active_registry, accounts, minted):
    alice, carol, dave = accounts["alice"], accounts["carol"], accounts["dave"]
    tid = minted["alice"]

    active_registry.set_operator_approval(alice, carol, True)
    assert active_registry.is_approved_for_all(alice, carol)
    ev = active_registry.events[-1]
    assert ev.name == b"ApprovalForAll"
    assert ev.args == {"owner": alice, "operator": carol, "approved": True}

    active_registry.approve(carol, dave, tid)
    assert active_registry.get_approved(tid) == dave

    active_registry.transfer(carol, alice, dave, tid)
    assert active_registry.owner_of(tid) == dave
    assert active_registry.get_approved(tid) is None

    # Operator status is per owner; dave never appointed carol.
    with pytest.raises(PreconditionViolation) as ei:
        active_registry.transfer(carol, dave, carol, tid)
    assert_code(ei.value, ERR_NOT_OWNER_NOR_APPROVED)


def test_operator_revocation(active_registry, accounts, minted):
    alice, carol = accounts["alice"], accounts["carol"]
    active_registry.set_operator_approval(alice, carol, True)
    active_registry.set_operator_approval(alice, carol, False)
    assert not active_registry.is_approved_for_all(alice, carol)
    assert active_registry.events[-1].args["approved"] is False

    with pytest.raises(PreconditionViolation) as ei:
        active_registry.transfer(carol, alice, carol, minted["alice"])
    assert_code(ei.value, ERR_NOT_OWNER_NOR_APPROVED)


def test_operator_must_differ_from_caller(active_registry, accounts):
    alice = accounts["alice"]
    with pytest.raises(PreconditionViolation) as ei:
        active_registry.set_operator_approval(alice, alice, True)
    assert_code(ei.value, ERR_APPROVE_TO_CALLER)


def test_null_operator_rejected(active_registry, accounts):
    alice = accounts["alice"]
    for op in (b"", b"\x00" * 20):
        with pytest.raises(PreconditionViolation) as ei:
            active_registry.set_operator_approval(alice, op, True)
        assert_code(ei.value, ERR_ZERO_ADDRESS)
    assert active_registry.is_approved_for_all(alice, b"") is False


def test_operator_without_tokens(active_registry, accounts):
    # Operators may be appointed before the owner holds anything.
    active_registry.set_operator_approval(accounts["dave"], accounts["carol"], True)
    assert active_registry.is_approved_for_all(accounts["dave"], accounts["carol"])
    assert not active_registry.is_approved_for_all(accounts["carol"], accounts["dave"])


# ------------------------------------------------------------------------------
# Identity widths
# ------------------------------------------------------------------------------


def test_operator_grants_do_not_leak_across_widths(active_registry, accounts):
    # (V|P, S) and (V, P|S) name different grants even though the raw bytes line up.
    victim, p, s = b"\x11" * 20, b"\x22" * 20, b"\x33" * 20
    token = active_registry.admin_mint(accounts["deployer"], victim, "ipfs://v")

    active_registry.set_operator_approval(victim + b"|" + p, s, True)
    assert active_registry.is_approved_for_all(victim + b"|" + p, s)
    assert not active_registry.is_approved_for_all(victim, p + b"|" + s)

    thief = p + b"|" + s
    with pytest.raises(PreconditionViolation) as ei:
        active_registry.transfer(thief, victim, thief, token)
    assert_code(ei.value, ERR_NOT_OWNER_NOR_APPROVED)
    assert active_registry.owner_of(token) == victim
    assert active_registry.balance_of(victim) == 1


def test_mixed_width_holders_share_a_registry(active_registry, accounts):
    short, wide = b"\x44" * 20, b"\x44" * MAX_IDENTITY_BYTES
    deployer, bob, carol = accounts["deployer"], accounts["bob"], accounts["carol"]
    t_short = active_registry.admin_mint(deployer, short, "u")
    t_wide = active_registry.admin_mint(deployer, wide, "u")
    assert active_registry.balance_of(short) == 1
    assert active_registry.balance_of(wide) == 1

    active_registry.set_operator_approval(wide, bob, True)
    assert active_registry.is_approved_for_all(wide, bob)
    assert not active_registry.is_approved_for_all(short, bob)

    active_registry.transfer(bob, wide, carol, t_wide)
    assert active_registry.owner_of(t_wide) == carol
    assert active_registry.owner_of(t_short) == short
    assert active_registry.balance_of(wide) == 0
    assert active_registry.balance_of(short) == 1


def test_oversized_identity_rejected(active_registry, accounts, minted):
    big = b"\x55" * (MAX_IDENTITY_BYTES + 1)
    deployer, alice, bob = accounts["deployer"], accounts["alice"], accounts["bob"]
    before = active_registry.host.snapshot()
    attempts = [
        lambda: active_registry.admin_mint(deployer, big, "u"),
        lambda: active_registry.mint_by_proof(big, [], "u"),
        lambda: active_registry.balance_of(big),
        lambda: active_registry.set_operator_approval(big, bob, True),
        lambda: active_registry.set_operator_approval(alice, big, True),
        lambda: active_registry.transfer(alice, alice, big, minted["alice"]),
        lambda: active_registry.approve(alice, big, minted["alice"]),
    ]
    for attempt in attempts:
        with pytest.raises(PreconditionViolation) as ei:
            attempt()
        assert_code(ei.value, ERR_BAD_ADDRESS)
        assert ei.value.context["max"] == MAX_IDENTITY_BYTES
    assert active_registry.host.snapshot() == before

    # Queries that take arbitrary bytes stay total.
    assert active_registry.has_minted(big) is False
    assert active_registry.is_approved_for_all(alice, big) is False
    with pytest.raises(PreconditionViolation) as ei:
        active_registry.transfer(big, alice, bob, minted["alice"])
    assert_code(ei.value, ERR_NOT_OWNER_NOR_APPROVED)


# ------------------------------------------------------------------------------
# Ownership index
# ------------------------------------------------------------------------------


def test_balance_index_consistency(active_registry, accounts, allowlist):
    deployer, alice, bob, carol, dave = (accounts[k] for k in ("deployer", "alice", "bob", "carol", "dave"))
    everyone = [deployer, alice, bob, carol, dave]

    a1 = active_registry.mint_by_proof(alice, allowlist.proof(alice), "ipfs://a1")
    b1 = active_registry.mint_by_proof(bob, allowlist.proof(bob), "ipfs://b1")
    d1 = active_registry.admin_mint(deployer, dave, "ipfs://d1")
    d2 = active_registry.admin_mint(deployer, dave, "ipfs://d2")
    _check_index(active_registry, everyone)

    active_registry.transfer(alice, alice, bob, a1)
    active_registry.set_operator_approval(dave, carol, True)
    active_registry.transfer(carol, dave, carol, d1)
    active_registry.approve(bob, alice, b1)
    active_registry.transfer(alice, bob, alice, b1)
    _check_index(active_registry, everyone)

    with pytest.raises(PreconditionViolation):
        active_registry.transfer(alice, dave, alice, d2)
    _check_index(active_registry, everyone)

    assert [active_registry.balance_of(x) for x in everyone] == [0, 1, 1, 1, 1]
