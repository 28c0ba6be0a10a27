"""
proofmint.runtime.host — serialized, all-or-nothing execution of registry calls.

The host plays the part of the execution environment the registry assumes:
atomic state persistence, an explicit caller, and ordered event delivery.

Execution model
---------------
- One call at a time. A process-wide lock serializes calls across hosts and
  threads; nested calls from inside a contract function are rejected.
- Each call gets a `Frame`: a journaled storage overlay plus an event buffer.
  Contract code reaches the frame through `proofmint.stdlib`.
- On normal return the overlay is committed to the backend and the buffered
  events are appended to the host's log, in emission order.
- On any exception both are dropped and the exception propagates unchanged,
  so a rejected call leaves storage and the event log exactly as they were.

Typical usage
-------------
    from proofmint.runtime.host import Host
    from proofmint.contracts import lifecycle

    host = Host()
    host.call(lifecycle.initialize, deployer, root)
    host.view(lifecycle.committed_root)
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..config import MintConfig, load_config
from ..errors import HostError
from .context import CallEnv, to_hex
from .events_api import Event, EventBuffer
from .storage_api import JournaledStorage, MemoryBackend, StorageBackend, check_backend

log = logging.getLogger(__name__)

_EXEC_LOCK = threading.RLock()
_CURRENT: Optional["Frame"] = None


@dataclass
class Frame:
    env: CallEnv
    storage: JournaledStorage
    events: EventBuffer
    config: MintConfig


def current_frame() -> Frame:
    """Return the active call frame; contract code outside a call is a bug."""
    if _CURRENT is None:
        raise HostError("no active call frame (call contract code through a Host)", code="no_frame")
    return _CURRENT


class Host:
    """In-process execution environment for registry contract functions."""

    def __init__(
        self,
        backend: Optional[StorageBackend] = None,
        *,
        config: Optional[MintConfig] = None,
    ) -> None:
        self.backend: StorageBackend = check_backend(backend) if backend is not None else MemoryBackend()
        self.config = config or load_config()
        self._log: List[Event] = []

    # ---- event log ---- #

    @property
    def events(self) -> Tuple[Event, ...]:
        return tuple(self._log)

    def events_since(self, index: int) -> Tuple[Event, ...]:
        return tuple(self._log[index:])

    # ---- execution ---- #

    def call(self, fn: Callable[..., Any], caller: bytes, *args: Any, **kwargs: Any) -> Any:
        """Run a mutating contract function; `caller` is passed as its first argument."""
        return self.execute(fn, caller, *args, caller=caller, **kwargs)

    def view(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run a read-only contract function; any storage write raises HostError."""
        return self.execute(fn, *args, readonly=True, **kwargs)

    def execute(
        self,
        fn: Callable[..., Any],
        *args: Any,
        caller: Optional[bytes] = None,
        readonly: bool = False,
        **kwargs: Any,
    ) -> Any:
        global _CURRENT

        env = CallEnv(entry=getattr(fn, "__name__", repr(fn)), caller=caller, readonly=readonly)
        with _EXEC_LOCK:
            if _CURRENT is not None:
                raise HostError(
                    "nested host call",
                    code="nested_call",
                    context={"outer": _CURRENT.env.entry, "inner": env.entry},
                )
            frame = Frame(
                env=env,
                storage=JournaledStorage(self.backend, readonly=readonly, config=self.config),
                events=EventBuffer(self.config.max_events_per_call),
                config=self.config,
            )
            _CURRENT = frame
            try:
                result = fn(*args, **kwargs)
            except Exception as e:
                if frame.storage.dirty:
                    frame.storage.discard()
                dropped = frame.events.drain()
                log.debug(
                    "revert %s caller=%s code=%s dropped_events=%d",
                    env.entry,
                    _fmt(caller),
                    getattr(e, "code", type(e).__name__),
                    len(dropped),
                )
                raise
            finally:
                _CURRENT = None

            written = frame.storage.commit()
            emitted = frame.events.drain()
            self._log.extend(emitted)
            if not readonly:
                log.debug(
                    "commit %s caller=%s writes=%d events=%d",
                    env.entry,
                    _fmt(caller),
                    written,
                    len(emitted),
                )
            return result

    # ---- introspection ---- #

    def snapshot(self) -> Dict[bytes, bytes]:
        snap = getattr(self.backend, "snapshot", None)
        if not callable(snap):
            raise HostError("backend does not support snapshots", code="no_snapshot")
        return snap()


def _fmt(caller: Optional[bytes]) -> str:
    return to_hex(caller) if caller is not None else "-"


__all__ = ["Frame", "Host", "current_frame"]
