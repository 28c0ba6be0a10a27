"""
proofmint.contracts.registry — Python object facade over the contract modules.

`AllowlistRegistry` binds one `Host` (storage backend + event log) to the
lifecycle / tokens / gated_mint functions. Every method is one host call and
therefore one atomic, serialized operation: it either commits all its writes
and events or raises and changes nothing.

Inputs are normalized at this boundary: identities and hashes may be given as
raw bytes or as hex strings (with or without "0x"); proofs as any iterable of
those.

Example
-------
    from proofmint.contracts.registry import AllowlistRegistry

    reg = AllowlistRegistry()
    reg.initialize(deployer, root)
    token_id = reg.mint_by_proof(alice, proof, "ipfs://meta/alice.json")
    assert reg.owner_of(token_id) == alice
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Tuple, Union

from ..errors import PreconditionViolation
from ..runtime.context import ContextError, to_bytes, to_hex
from ..runtime.events_api import Event
from ..runtime.host import Host
from . import ERR_BAD_ADDRESS, ERR_BAD_ROOT, ERR_INVALID_PROOF, gated_mint, lifecycle, tokens
from .lifecycle import RegistryState

log = logging.getLogger(__name__)

BytesOrHex = Union[bytes, bytearray, str]


def _identity(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray, str)):
        try:
            return to_bytes(value)
        except ContextError as e:
            raise PreconditionViolation(str(e), code=ERR_BAD_ADDRESS) from e
    return value


def _hash(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, str)):
        try:
            return to_bytes(value)
        except ContextError as e:
            raise PreconditionViolation(str(e), code=ERR_BAD_ROOT) from e
    return value


def _proof(proof: Optional[Iterable[BytesOrHex]]) -> List[Any]:
    if proof is None:
        return []
    if isinstance(proof, (bytes, bytearray, str)):
        raise PreconditionViolation("proof must be a sequence of hashes", code=ERR_INVALID_PROOF)
    out: List[Any] = []
    for item in proof:
        if isinstance(item, str):
            try:
                item = to_bytes(item)
            except ContextError:
                # Unparseable siblings stay as-is; the verifier rejects them.
                pass
        out.append(item)
    return out


class AllowlistRegistry:
    """Allow-list gated NFT registry bound to a single host."""

    def __init__(self, host: Optional[Host] = None) -> None:
        self.host = host or Host()

    # ------------------------------------------------------------------ #
    # Lifecycle & authority
    # ------------------------------------------------------------------ #

    def initialize(self, caller: BytesOrHex, root: BytesOrHex) -> None:
        caller_b = _identity(caller)
        self.host.call(lifecycle.initialize, caller_b, _hash(root))
        log.info("registry initialized authority=%s root=%s", to_hex(caller_b), to_hex(self.committed_root()))

    def update_root(self, caller: BytesOrHex, new_root: BytesOrHex) -> None:
        self.host.call(lifecycle.update_root, _identity(caller), _hash(new_root))
        log.info("committed root changed to %s", to_hex(self.committed_root()))

    def transfer_authority(self, caller: BytesOrHex, new_authority: BytesOrHex) -> None:
        self.host.call(lifecycle.transfer_authority, _identity(caller), _identity(new_authority))
        log.info("authority transferred to %s", to_hex(self.authority() or b""))

    def state(self) -> RegistryState:
        return self.host.view(lifecycle.state)

    def committed_root(self) -> bytes:
        return self.host.view(lifecycle.committed_root)

    def authority(self) -> Optional[bytes]:
        return self.host.view(lifecycle.get_authority)

    # ------------------------------------------------------------------ #
    # Minting
    # ------------------------------------------------------------------ #

    def mint_by_proof(self, caller: BytesOrHex, proof: Iterable[BytesOrHex], metadata_uri: str) -> int:
        return self.host.call(gated_mint.mint_by_proof, _identity(caller), _proof(proof), metadata_uri)

    def admin_mint(self, caller: BytesOrHex, to: BytesOrHex, metadata_uri: str) -> int:
        return self.host.call(gated_mint.admin_mint, _identity(caller), _identity(to), metadata_uri)

    def is_member(self, identity: BytesOrHex, proof: Iterable[BytesOrHex]) -> bool:
        try:
            ident = _identity(identity)
            path = _proof(proof)
        except PreconditionViolation:
            return False
        return self.host.view(gated_mint.is_member, ident, path)

    def has_minted(self, identity: BytesOrHex) -> bool:
        return self.host.view(gated_mint.has_minted, _identity(identity))

    # ------------------------------------------------------------------ #
    # Ownership & approvals
    # ------------------------------------------------------------------ #

    def owner_of(self, token_id: int) -> bytes:
        return self.host.view(tokens.owner_of, token_id)

    def balance_of(self, identity: BytesOrHex) -> int:
        return self.host.view(tokens.balance_of, _identity(identity))

    def token_metadata(self, token_id: int) -> str:
        return self.host.view(tokens.token_metadata, token_id)

    def get_approved(self, token_id: int) -> Optional[bytes]:
        return self.host.view(tokens.get_approved, token_id)

    def is_approved_for_all(self, owner: BytesOrHex, operator: BytesOrHex) -> bool:
        return self.host.view(tokens.is_approved_for_all, _identity(owner), _identity(operator))

    def total_supply(self) -> int:
        return self.host.view(tokens.total_supply)

    def approve(self, caller: BytesOrHex, to: Optional[BytesOrHex], token_id: int) -> None:
        self.host.call(tokens.approve, _identity(caller), _identity(to), token_id)

    def set_operator_approval(self, caller: BytesOrHex, operator: BytesOrHex, approved: bool) -> None:
        self.host.call(tokens.set_operator_approval, _identity(caller), _identity(operator), approved)

    def transfer(self, caller: BytesOrHex, from_: BytesOrHex, to: BytesOrHex, token_id: int) -> None:
        self.host.call(tokens.transfer, _identity(caller), _identity(from_), _identity(to), token_id)

    # ------------------------------------------------------------------ #
    # Notifications
    # ------------------------------------------------------------------ #

    @property
    def events(self) -> Tuple[Event, ...]:
        return self.host.events


__all__ = ["AllowlistRegistry", "RegistryState"]
