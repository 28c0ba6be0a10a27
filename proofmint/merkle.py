"""
proofmint.merkle — membership verifier for sorted-pair binary Merkle trees.

A committed root is the top of a binary hash tree whose leaves are
`H(identity)`. A proof is the ordered list of sibling hashes on the path from
the leaf to the root. Inner nodes hash the *sorted* pair:

    combine(a, b) = H(min(a, b) || max(a, b))

with `a` and `b` compared as unsigned big-endian integers (for equal-width
digests that is plain byte order). Because the pair is sorted, a proof carries
no left/right flags and verifies the same whichever side the leaf sat on.

Key functions
-------------
- leaf_hash(identity)               -> leaf digest for an identity
- combine(a, b)                     -> inner node digest
- process_proof(leaf, proof)        -> root recomputed from a proof
- verify(leaf, proof, root)         -> bool, never raises

`verify` treats every malformed input (non-bytes siblings, width mismatch,
over-deep proof) as plain non-membership. It never says *why* a proof failed.
"""
from __future__ import annotations

from typing import Any, Optional, Sequence

from .config import load_config
from .runtime.hash_api import DIGEST_SIZE, get_hasher

Hash = bytes


def leaf_hash(identity: bytes, *, hash_name: Optional[str] = None) -> Hash:
    """Leaf for an identity: digest of its raw bytes, no prefix or encoding."""
    return get_hasher(hash_name)(identity)


def combine(a: Hash, b: Hash, *, hash_name: Optional[str] = None) -> Hash:
    """
    Sorted-pair inner node.

    Preconditions:
        - len(a) == len(b) (typically 32)
    """
    if len(a) != len(b):
        raise ValueError("left/right hash length mismatch")
    h = get_hasher(hash_name)
    return h(a + b) if a <= b else h(b + a)


def process_proof(leaf: Hash, proof: Sequence[Hash], *, hash_name: Optional[str] = None) -> Hash:
    """Fold `proof` into `leaf` and return the recomputed root."""
    computed = _b(leaf)
    for sibling in proof:
        computed = combine(computed, _b(sibling), hash_name=hash_name)
    return computed


def verify(
    leaf: Any,
    proof: Any,
    root: Any,
    *,
    hash_name: Optional[str] = None,
    max_depth: Optional[int] = None,
) -> bool:
    """
    True iff `proof` folds `leaf` up to `root`.

    An empty proof verifies iff leaf == root (single-member tree).
    """
    if not _is_digest(leaf) or not _is_digest(root):
        return False
    if isinstance(proof, (bytes, bytearray, str)) or not isinstance(proof, Sequence):
        return False
    depth = max_depth if max_depth is not None else load_config().max_proof_depth
    if len(proof) > depth:
        return False
    if not all(_is_digest(s) for s in proof):
        return False
    return process_proof(leaf, proof, hash_name=hash_name) == _b(root)


def _is_digest(x: Any) -> bool:
    return isinstance(x, (bytes, bytearray, memoryview)) and len(x) == DIGEST_SIZE


def _b(x: bytes | bytearray | memoryview) -> bytes:
    if isinstance(x, bytes):
        return x
    if isinstance(x, memoryview):
        return x.tobytes()
    return bytes(x)


__all__ = [
    "Hash",
    "leaf_hash",
    "combine",
    "process_proof",
    "verify",
]
