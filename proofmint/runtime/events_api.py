from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..errors import HostError

# Basic bounds (kept generous; contracts only emit small payloads).
MAX_EVENT_NAME_BYTES = 64
MAX_KEY_LEN = 64
MAX_BYTES_LEN = 4096
MAX_INT_BITS = 256

# Keys must be identifier-like: letters/underscore, then letters/digits/underscore.
_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

ArgValue = Any  # constrained at runtime


@dataclass(frozen=True)
class Event:
    """One notification appended by a successful call."""

    name: bytes
    args: Dict[str, ArgValue] = field(default_factory=dict)


@dataclass(frozen=True)
class CanonicalEvent:
    """
    Canonical event representation for receipts and JSON output:

        name: event name decoded as ASCII
        args: sequence of {"k", "t", "v"} dicts
              t="b" => bytes encoded as 0x-prefixed hex
              t="i" => integer
              t="z" => boolean
    """

    name: str
    args: Sequence[Mapping[str, Any]]

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "args": [dict(a) for a in self.args]}


# --- Validation helpers -----------------------------------------------------


def _check_name(name: Any) -> bytes:
    if not isinstance(name, (bytes, bytearray)):
        raise HostError("event name must be bytes", code="event_invalid", context={"where": "name_type"})
    b = bytes(name)
    if len(b) == 0:
        raise HostError("event name must be non-empty", code="event_invalid", context={"where": "name_empty"})
    if len(b) > MAX_EVENT_NAME_BYTES:
        raise HostError(
            "event name too long",
            code="event_invalid",
            context={"where": "name_length", "len": len(b)},
        )
    return b


def _check_key(key: Any) -> str:
    if isinstance(key, (bytes, bytearray)):
        key = bytes(key).decode("ascii", errors="replace")
    if not isinstance(key, str) or not key:
        raise HostError("event key must be a non-empty str", code="event_invalid", context={"where": "key_type"})
    if len(key) > MAX_KEY_LEN or not _KEY_RE.match(key):
        raise HostError(
            "event key has invalid characters",
            code="event_invalid",
            context={"where": "key_grammar", "key": key},
        )
    return key


def _check_value(value: Any) -> ArgValue:
    if isinstance(value, (bytes, bytearray)):
        b = bytes(value)
        if len(b) > MAX_BYTES_LEN:
            raise HostError(
                "event bytes arg too long",
                code="event_invalid",
                context={"where": "value_bytes_length", "len": len(b)},
            )
        return b

    if isinstance(value, bool):
        # bool is a subclass of int, so check it before int.
        return value

    if isinstance(value, int):
        if value.bit_length() > MAX_INT_BITS:
            raise HostError(
                "event int arg out of range",
                code="event_invalid",
                context={"where": "value_int_bits", "bits": value.bit_length()},
            )
        return int(value)

    raise HostError(
        "unsupported event arg type",
        code="event_invalid",
        context={"where": "value_type", "py_type": type(value).__name__},
    )


def make_event(name: bytes, args: Optional[Mapping[Any, Any]] = None) -> Event:
    if args is not None and not isinstance(args, Mapping):
        raise HostError("event args must be a mapping", code="event_invalid", context={"where": "args_type"})
    checked: Dict[str, ArgValue] = {}
    for raw_k, raw_v in (args or {}).items():
        checked[_check_key(raw_k)] = _check_value(raw_v)
    return Event(_check_name(name), checked)


# --- Per-call buffer ----------------------------------------------------------


class EventBuffer:
    """Events emitted during one call; published by the host only on success."""

    def __init__(self, limit: int) -> None:
        self._events: List[Event] = []
        self._limit = limit

    def emit(self, name: bytes, args: Optional[Mapping[Any, Any]] = None) -> None:
        if len(self._events) >= self._limit:
            raise HostError(
                "too many events in one call",
                code="event_limit",
                context={"limit": self._limit},
            )
        self._events.append(make_event(name, args))

    def drain(self) -> Tuple[Event, ...]:
        out = tuple(self._events)
        self._events.clear()
        return out

    def __len__(self) -> int:
        return len(self._events)


# --- Receipt encoding ---------------------------------------------------------


def to_canonical(ev: Event) -> CanonicalEvent:
    enc_args: List[Dict[str, Any]] = []
    for k, v in ev.args.items():
        if isinstance(v, (bytes, bytearray)):
            enc_args.append({"k": k, "t": "b", "v": "0x" + bytes(v).hex()})
        elif isinstance(v, bool):
            enc_args.append({"k": k, "t": "z", "v": v})
        else:
            enc_args.append({"k": k, "t": "i", "v": int(v)})
    return CanonicalEvent(name=ev.name.decode("ascii", errors="replace"), args=tuple(enc_args))


def events_for_receipt(events: Iterable[Event]) -> List[CanonicalEvent]:
    """Convert events into canonical receipt events, preserving order."""
    return [to_canonical(ev) for ev in events]


__all__ = [
    "Event",
    "CanonicalEvent",
    "EventBuffer",
    "make_event",
    "to_canonical",
    "events_for_receipt",
    "MAX_EVENT_NAME_BYTES",
    "MAX_KEY_LEN",
    "MAX_BYTES_LEN",
    "MAX_INT_BITS",
]
