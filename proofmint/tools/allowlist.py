"""
proofmint.tools.allowlist — off-chain allow-list tree builder

Builds the sorted-pair binary Merkle tree that `proofmint.merkle.verify`
checks against, and hands out per-member proofs. The registry never imports
this module; it exists for operators (CLI) and for tests.

Design choices
--------------
• Leaves are `leaf_hash(identity)` in the order given. Duplicate identities
  are rejected: the tree would still verify, but a duplicate is almost always
  a mistake in the source list.
• Null (empty or all-zero) identities and identities wider than the
  registry accepts are rejected up front; the registry could never mint
  for them.
• Inner nodes are `merkle.combine` (sorted pair), so proofs carry no
  direction bits.
• Odd-node handling duplicates the last node in a layer by default; pass
  `duplicate_last=False` to promote it unchanged instead (shorter proofs,
  same verifier).

Key entry points
----------------
- AllowList(identities)              build the tree
- AllowList.root                     committed root for `initialize`
- AllowList.proof(identity)          sibling list for `mint_by_proof`
- AllowList.to_json() / from_file()  distribution bundle and source lists
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..config import load_config
from ..contracts import MAX_IDENTITY_BYTES
from ..merkle import Hash, combine, leaf_hash
from ..runtime.context import is_null_identity, to_bytes, to_hex


class AllowListError(ValueError):
    """Bad input to the allow-list builder."""


def _layers(leaves: Sequence[Hash], *, hash_name: str, duplicate_last: bool) -> List[List[Hash]]:
    if not leaves:
        raise AllowListError("cannot build a tree over an empty allow-list")
    layers: List[List[Hash]] = [list(leaves)]
    while len(layers[-1]) > 1:
        layer = layers[-1]
        n = len(layer)
        nxt: List[Hash] = []
        for i in range(0, n, 2):
            left = layer[i]
            if i + 1 < n:
                nxt.append(combine(left, layer[i + 1], hash_name=hash_name))
            elif duplicate_last:
                nxt.append(combine(left, left, hash_name=hash_name))
            else:
                nxt.append(left)
        layers.append(nxt)
    return layers


class AllowList:
    """Sorted-pair Merkle tree over a list of identities."""

    def __init__(
        self,
        identities: Iterable[Any],
        *,
        hash_name: Optional[str] = None,
        duplicate_last: bool = True,
    ) -> None:
        self.hash_name = hash_name or load_config().hash_name
        self.duplicate_last = duplicate_last
        self.identities: List[bytes] = [to_bytes(i) for i in identities]

        self._index: Dict[bytes, int] = {}
        for i, ident in enumerate(self.identities):
            if is_null_identity(ident):
                raise AllowListError(f"null identity at position {i}")
            if len(ident) > MAX_IDENTITY_BYTES:
                raise AllowListError(f"identity at position {i} is wider than {MAX_IDENTITY_BYTES} bytes")
            if ident in self._index:
                raise AllowListError(f"duplicate identity {to_hex(ident)}")
            self._index[ident] = i

        self.leaves: List[Hash] = [leaf_hash(i, hash_name=self.hash_name) for i in self.identities]
        self._layers = _layers(self.leaves, hash_name=self.hash_name, duplicate_last=duplicate_last)

    # ---- queries ---- #

    @property
    def root(self) -> Hash:
        return self._layers[-1][0]

    @property
    def depth(self) -> int:
        return len(self._layers) - 1

    def __len__(self) -> int:
        return len(self.identities)

    def __contains__(self, identity: Any) -> bool:
        return to_bytes(identity) in self._index

    def proof_for_index(self, index: int) -> List[Hash]:
        if not (0 <= index < len(self.leaves)):
            raise IndexError("index out of range")
        proof: List[Hash] = []
        idx = index
        for layer in self._layers[:-1]:
            sib = idx ^ 1
            if sib < len(layer):
                proof.append(layer[sib])
            elif self.duplicate_last:
                proof.append(layer[idx])
            # else: promoted unchanged, no sibling at this level
            idx //= 2
        return proof

    def proof(self, identity: Any) -> List[Hash]:
        ident = to_bytes(identity)
        try:
            return self.proof_for_index(self._index[ident])
        except KeyError:
            raise AllowListError(f"{to_hex(ident)} is not in the allow-list") from None

    # ---- (de)serialization ---- #

    def to_json(self) -> Dict[str, Any]:
        """Distribution bundle: root plus every member's proof, all hex."""
        return {
            "hash": self.hash_name,
            "root": to_hex(self.root),
            "proofs": {to_hex(i): [to_hex(h) for h in self.proof(i)] for i in self.identities},
        }

    @classmethod
    def from_file(cls, path: Path | str, **kwargs: Any) -> "AllowList":
        """
        Load identities from a JSON array of hex strings or from a text file
        with one hex identity per line ('#' starts a comment).
        """
        p = Path(path)
        text = p.read_text(encoding="utf-8")
        if p.suffix.lower() == ".json":
            data = json.loads(text)
            if not isinstance(data, list):
                raise AllowListError(f"{p}: expected a JSON array of identities")
            return cls(data, **kwargs)
        entries = []
        for line in text.splitlines():
            line = line.split("#", 1)[0].strip()
            if line:
                entries.append(line)
        return cls(entries, **kwargs)


__all__ = ["AllowList", "AllowListError"]
