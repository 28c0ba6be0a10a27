from __future__ import annotations

from typing import Any, Mapping, Optional

from ..runtime.host import current_frame


def emit(name: bytes, args: Optional[Mapping[Any, Any]] = None) -> None:
    """
    Contract-facing emit:

        emit(b"Transfer", {"from": b"", "to": owner, "token_id": 1})

    The event is buffered in the current frame and published only if the
    call commits.
    """
    current_frame().events.emit(name, args)


__all__ = ["emit"]
