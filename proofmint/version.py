"""proofmint.version — package version string.

Resolution order:
- PROOFMINT_VERSION environment override
- installed distribution metadata
- BASE_VERSION fallback (source checkouts)
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import metadata as importlib_metadata

# Bump on changes that affect storage layout, leaf hashing or event payloads.
BASE_VERSION = "0.1.0"


@lru_cache(maxsize=1)
def compute_version() -> str:
    env = os.getenv("PROOFMINT_VERSION")
    if env:
        return env.strip()
    try:
        return importlib_metadata.version("proofmint")
    except importlib_metadata.PackageNotFoundError:
        return BASE_VERSION


__version__ = compute_version()

__all__ = ["BASE_VERSION", "compute_version", "__version__"]
