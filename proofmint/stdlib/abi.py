from __future__ import annotations

from typing import Any, Mapping, NoReturn, Optional, Union

from ..errors import PreconditionViolation, VerificationFailure
from ..runtime.host import current_frame

Tag = Union[bytes, str]


def _context(extra: Optional[Mapping[str, Any]]) -> dict:
    ctx = dict(extra or {})
    env = current_frame().env
    ctx.setdefault("entry", env.entry)
    return ctx


def revert(tag: Tag, *, context: Optional[Mapping[str, Any]] = None) -> NoReturn:
    """
    Abort the current call with a precondition violation.

        abi.revert(b"REGISTRY:NOT_AUTHORITY")
    """
    raise PreconditionViolation(tag, code=tag, context=_context(context))


def require(condition: bool, tag: Tag, *, context: Optional[Mapping[str, Any]] = None) -> None:
    """
    Assertion helper for contracts:

        abi.require(not storage.get_flag(key), b"REGISTRY:ALREADY_MINTED")
    """
    if not condition:
        revert(tag, context=context)


def reject_proof(tag: Tag, *, context: Optional[Mapping[str, Any]] = None) -> NoReturn:
    """Abort the current call because a membership proof did not verify."""
    raise VerificationFailure(tag, code=tag, context=_context(context))


__all__ = ["revert", "require", "reject_proof"]
