"""
Contract-facing stdlib for registry code.

Contracts use:

    from proofmint.stdlib import abi, env, events, storage

Every function here resolves the active call frame of the host, so it only
works inside `Host.call` / `Host.view`.
"""

from . import abi, env, events, storage

__all__ = ["abi", "env", "events", "storage"]
