"""Operator tooling that runs outside the registry (allow-list building)."""

from .allowlist import AllowList, AllowListError

__all__ = ["AllowList", "AllowListError"]
