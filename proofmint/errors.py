from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union


def _to_text(value: Union[str, bytes, bytearray]) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


@dataclass(eq=False)
class MintError(Exception):
    """
    Structured error raised by the registry and its host runtime.

    Call patterns:

        MintError("simple message")
        MintError("message", code="REGISTRY:NOT_AUTHORITY", context={...})

    Attributes:
        code: short machine-readable tag (e.g. "REGISTRY:ALREADY_MINTED")
        message: human-readable message
        context: optional extra fields for debugging / RPC wiring
    """

    code: str
    message: str
    context: Dict[str, Any]

    default_code = "mint_error"

    def __init__(
        self,
        message: Union[str, bytes] = "",
        *,
        code: Optional[Union[str, bytes]] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        msg = _to_text(message)
        super().__init__(msg)
        object.__setattr__(self, "code", _to_text(code) if code is not None else self.default_code)
        object.__setattr__(self, "message", msg)
        object.__setattr__(self, "context", dict(context or {}))

    def __str__(self) -> str:
        if self.message and self.message != self.code:
            return f"{self.code}: {self.message}"
        return self.code

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "context": dict(self.context),
        }


class PreconditionViolation(MintError):
    """A call was rejected because one of its preconditions does not hold."""

    default_code = "precondition_violation"


class VerificationFailure(MintError):
    """A membership proof did not recompute to the committed root."""

    default_code = "verification_failure"


class HostError(MintError):
    """Misuse of the host runtime (no frame, nested call, caps exceeded)."""

    default_code = "host_error"


__all__ = ["MintError", "PreconditionViolation", "VerificationFailure", "HostError"]
