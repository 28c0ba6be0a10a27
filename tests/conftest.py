# -*- coding: utf-8 -*-
"""
tests.conftest
==============

Pytest fixtures for the proofmint registry.

Goals:
- Give every test a **fresh, deterministic host** (in-memory backend, empty
  event log) and a registry facade bound to it.
- Expose **stable accounts**: 20-byte identities derived by SHA3 from a tag,
  so failures print the same addresses on every run.
- Build a small **allow-list** over a subset of those accounts.

Usage (inside a test file):
    def test_mint(active_registry, accounts, allowlist):
        alice = accounts["alice"]
        tid = active_registry.mint_by_proof(alice, allowlist.proof(alice), "ipfs://a")
        assert active_registry.owner_of(tid) == alice

Notes:
- PROOFMINT_* variables are removed from the environment and the cached
  config is reset around every test; tests that need other settings use
  `monkeypatch.setenv` followed by `load_config.cache_clear()`, or build a
  Host with an explicit `MintConfig`.
"""
from __future__ import annotations

import hashlib
import os
from typing import Dict, Iterator

import pytest

from proofmint.config import load_config
from proofmint.contracts.registry import AllowlistRegistry
from proofmint.errors import MintError
from proofmint.runtime.host import Host
from proofmint.tools.allowlist import AllowList

ACCOUNT_TAGS = ("deployer", "alice", "bob", "carol", "dave", "mallory")


def account(tag: str) -> bytes:
    """Deterministic 20-byte identity for `tag`."""
    return hashlib.sha3_256(b"proofmint-test-account|" + tag.encode("utf-8")).digest()[:20]


def assert_code(exc: MintError, tag: bytes) -> None:
    """Compare a raised error's code to a contract error tag."""
    assert exc.code == tag.decode("ascii"), f"expected {tag!r}, got {exc.code!r}"


@pytest.fixture(autouse=True)
def _clean_config(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in list(os.environ):
        if name.startswith("PROOFMINT_"):
            monkeypatch.delenv(name, raising=False)
    load_config.cache_clear()
    yield
    load_config.cache_clear()


@pytest.fixture
def accounts() -> Dict[str, bytes]:
    return {tag: account(tag) for tag in ACCOUNT_TAGS}


@pytest.fixture
def host() -> Host:
    return Host()


@pytest.fixture
def registry(host: Host) -> AllowlistRegistry:
    return AllowlistRegistry(host)


@pytest.fixture
def allowlist(accounts: Dict[str, bytes]) -> AllowList:
    return AllowList([accounts["alice"], accounts["bob"], accounts["carol"]])


@pytest.fixture
def active_registry(
    registry: AllowlistRegistry, accounts: Dict[str, bytes], allowlist: AllowList
) -> AllowlistRegistry:
    registry.initialize(accounts["deployer"], allowlist.root)
    return registry


@pytest.fixture
def minted(active_registry: AllowlistRegistry, accounts: Dict[str, bytes], allowlist: AllowList) -> Dict[str, int]:
    """alice and bob each hold one proof-minted token."""
    out = {}
    for name in ("alice", "bob"):
        who = accounts[name]
        out[name] = active_registry.mint_by_proof(who, allowlist.proof(who), f"ipfs://meta/{name}.json")
    return out
