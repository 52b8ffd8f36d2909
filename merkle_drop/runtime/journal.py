"""
merkle_drop.runtime.journal — journaling writes, checkpoints, revert/commit.

A deterministic, in-memory write journal layered over a StorageBackend. It
supports nested checkpoints via a stack of overlays. Writes go to the top
overlay; reads consult overlays from top → base. `commit()` merges the top
overlay into the next layer, or flushes it to the backend when it is the
last one. `revert()` discards the top overlay.

Events ride along with storage writes: an overlay keeps the events emitted
inside it, so a reverted operation drops its events together with its writes.

Intended usage
--------------
    j = Journal(backend, on_events=host_log.extend)
    j.begin()
    j.set(addr, b"k", b"v")
    j.add_event(entry)
    j.commit()          # flushes writes to backend, events to on_events

Notes
-----
- The journal does not lock; the host serializes access.
- `None` as a staged value is a deletion marker.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from .storage_api import SlotKey, StorageBackend


@dataclass
class _Overlay:
    """
    A single journal layer.

    - `storage`: staged writes. `None` means deletion for that slot.
    - `events`: events emitted while this layer was on top.
    """

    storage: Dict[SlotKey, Optional[bytes]] = field(default_factory=dict)
    events: List[Any] = field(default_factory=list)


class Journal:
    """
    A copy-on-write write journal with nested checkpoints.

    Reads consult overlays from top to bottom and then the backend. Writes
    always target the top overlay; writes with no open checkpoint go straight
    to the backend.
    """

    def __init__(
        self,
        backend: StorageBackend,
        on_events: Optional[Callable[[Sequence[Any]], None]] = None,
    ) -> None:
        self._backend = backend
        self._on_events = on_events
        self._layers: List[_Overlay] = []

    # ------------------------------------------------------------------ #
    # Checkpointing
    # ------------------------------------------------------------------ #

    def depth(self) -> int:
        """Number of open checkpoints (0 when idle)."""
        return len(self._layers)

    def begin(self) -> int:
        """Start a new checkpoint. Returns the new depth."""
        self._layers.append(_Overlay())
        return len(self._layers)

    def commit(self) -> None:
        """Merge the top overlay into its parent, or flush it to the backend."""
        if not self._layers:
            raise RuntimeError("commit without an open checkpoint")
        top = self._layers.pop()
        if self._layers:
            parent = self._layers[-1]
            parent.storage.update(top.storage)
            parent.events.extend(top.events)
            return
        self._apply_to_base(top)

    def revert(self) -> None:
        """Discard the top overlay."""
        if not self._layers:
            raise RuntimeError("revert without an open checkpoint")
        self._layers.pop()

    def _apply_to_base(self, layer: _Overlay) -> None:
        for (address, key), value in layer.storage.items():
            if value is None:
                self._backend.delete(address, key)
            else:
                self._backend.set(address, key, value)
        if layer.events and self._on_events is not None:
            self._on_events(tuple(layer.events))

    # ------------------------------------------------------------------ #
    # Storage
    # ------------------------------------------------------------------ #

    def get(self, address: bytes, key: bytes) -> Optional[bytes]:
        slot = (address, key)
        for layer in reversed(self._layers):
            if slot in layer.storage:
                return layer.storage[slot]
        return self._backend.get(address, key)

    def set(self, address: bytes, key: bytes, value: Optional[bytes]) -> None:
        if self._layers:
            self._layers[-1].storage[(address, key)] = value
        elif value is None:
            self._backend.delete(address, key)
        else:
            self._backend.set(address, key, value)

    # ------------------------------------------------------------------ #
    # Events
    # ------------------------------------------------------------------ #

    def add_event(self, event: Any) -> None:
        if self._layers:
            self._layers[-1].events.append(event)
        elif self._on_events is not None:
            self._on_events((event,))

    def pending_events(self) -> int:
        return sum(len(layer.events) for layer in self._layers)


__all__ = ["Journal"]
