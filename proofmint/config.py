"""
proofmint.config — hash selection, numeric caps and log level.

This module centralizes configuration for the registry runtime. It has NO
third-party deps and is safe to import very early.

Configuration precedence:
  1) Environment variables (PROOFMINT_*)
  2) Hardcoded safe defaults below

Key env vars:
  - PROOFMINT_HASH                   (str)   default: keccak256  (or sha3_256)
  - PROOFMINT_MAX_PROOF_DEPTH        (int)   default: 64
  - PROOFMINT_MAX_URI_BYTES          (int)   default: 2048
  - PROOFMINT_MAX_STORAGE_KEY_BYTES  (int)   default: 128
  - PROOFMINT_MAX_STORAGE_VAL_BYTES  (int)   default: 8192
  - PROOFMINT_MAX_EVENTS_PER_CALL    (int)   default: 16
  - PROOFMINT_LOG_LEVEL              (str)   default: WARNING

The hash choice changes every leaf and every root. An allow-list built with
one digest never verifies under the other, so pin it per deployment.

Usage:
    from proofmint.config import load_config
    CFG = load_config()
    if CFG.hash_name == "keccak256": ...
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict

SUPPORTED_HASHES = ("keccak256", "sha3_256")
DEFAULT_HASH = "keccak256"


# ----------------------------- helpers ---------------------------------------


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


def _env_hash(name: str) -> str:
    raw = (os.getenv(name) or DEFAULT_HASH).strip().lower().replace("-", "_")
    if raw in ("keccak", "keccak_256"):
        raw = "keccak256"
    if raw in ("sha3", "sha3256"):
        raw = "sha3_256"
    if raw not in SUPPORTED_HASHES:
        raise ValueError(f"{name} must be one of {SUPPORTED_HASHES}, got {raw!r}")
    return raw


def _env_log_level(name: str, default: str) -> str:
    raw = (os.getenv(name) or default).strip().upper()
    if not isinstance(logging.getLevelName(raw), int):
        return default
    return raw


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class MintConfig:
    # Digest used for leaves and inner nodes
    hash_name: str

    # Numeric caps (enforced by verifier, contracts and host runtime)
    max_proof_depth: int
    max_uri_bytes: int
    max_storage_key_bytes: int
    max_storage_value_bytes: int
    max_events_per_call: int

    log_level: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "hash_name": self.hash_name,
            "max_proof_depth": self.max_proof_depth,
            "max_uri_bytes": self.max_uri_bytes,
            "max_storage_key_bytes": self.max_storage_key_bytes,
            "max_storage_value_bytes": self.max_storage_value_bytes,
            "max_events_per_call": self.max_events_per_call,
            "log_level": self.log_level,
        }


@lru_cache(maxsize=1)
def load_config() -> MintConfig:
    """
    Build and cache a MintConfig from environment + safe defaults.

    Tests that change the environment must call ``load_config.cache_clear()``.
    """
    return MintConfig(
        hash_name=_env_hash("PROOFMINT_HASH"),
        max_proof_depth=_env_int("PROOFMINT_MAX_PROOF_DEPTH", 64, min_v=1, max_v=256),
        max_uri_bytes=_env_int("PROOFMINT_MAX_URI_BYTES", 2048, min_v=0, max_v=65_536),
        max_storage_key_bytes=_env_int("PROOFMINT_MAX_STORAGE_KEY_BYTES", 128, min_v=32, max_v=1024),
        max_storage_value_bytes=_env_int("PROOFMINT_MAX_STORAGE_VAL_BYTES", 8192, min_v=64, max_v=1_048_576),
        max_events_per_call=_env_int("PROOFMINT_MAX_EVENTS_PER_CALL", 16, min_v=1, max_v=1024),
        log_level=_env_log_level("PROOFMINT_LOG_LEVEL", "WARNING"),
    )


__all__ = ["MintConfig", "load_config", "SUPPORTED_HASHES", "DEFAULT_HASH"]
