"""
proofmint — allow-list gated non-fungible token registry.

Public entrypoints:

- AllowlistRegistry: Python object API over one in-process Host
- Host: serialized, all-or-nothing executor for the contract modules
- verify / leaf_hash: sorted-pair Merkle membership check
- AllowList: off-chain tree builder (root + per-member proofs)
- RegistryState: explicit lifecycle state (UNINITIALIZED, ACTIVE)

Example
-------
    from proofmint import AllowList, AllowlistRegistry

    tree = AllowList([alice, bob])
    reg = AllowlistRegistry()
    reg.initialize(deployer, tree.root)
    reg.mint_by_proof(alice, tree.proof(alice), "ipfs://meta/alice.json")
"""

from __future__ import annotations

from . import errors
from .contracts.lifecycle import RegistryState
from .contracts.registry import AllowlistRegistry
from .merkle import leaf_hash, verify
from .runtime.host import Host
from .tools.allowlist import AllowList
from .version import __version__

__all__ = [
    "__version__",
    "errors",
    "AllowlistRegistry",
    "AllowList",
    "Host",
    "RegistryState",
    "leaf_hash",
    "verify",
]
