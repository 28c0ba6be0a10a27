from __future__ import annotations

from ..config import MintConfig
from ..runtime.host import current_frame


def config() -> MintConfig:
    """Configuration of the host running the current call."""
    return current_frame().config


__all__ = ["config"]
