"""
merkle_drop.runtime.storage_api — key/value storage for contract state.

Design goals
------------
- Deterministic: pure functions over (address, key, value) with no I/O.
- Simple default: in-process memory backend for local runs & tests.
- Pluggable: a tiny backend interface so a host can swap in a real state DB.
- Safe: strict byte-length caps; typed helpers for u256 values.

Contracts never touch a backend directly. They get a `ContractStorage`
view bound to their own address; every read and write goes through the
host journal so a failed operation leaves no trace.

Public API
----------
- StorageBackend (Protocol), MemoryBackend
- ContractStorage.get / set / delete / exists / get_int / set_int
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Dict, Optional, Protocol, Tuple, runtime_checkable

from ..errors import ValidationError
from .context import U256_MAX

if TYPE_CHECKING:  # pragma: no cover
    from .journal import Journal

MAX_STORAGE_KEY_BYTES = 64
MAX_STORAGE_VALUE_BYTES = 64 * 1024

SlotKey = Tuple[bytes, bytes]  # (contract address, key)


# ---------------------------- Backend API ---------------------------- #


@runtime_checkable
class StorageBackend(Protocol):
    """Minimal backend interface for persisted contract storage."""

    def get(self, address: bytes, key: bytes) -> Optional[bytes]: ...
    def set(self, address: bytes, key: bytes, value: bytes) -> None: ...
    def delete(self, address: bytes, key: bytes) -> None: ...


class MemoryBackend:
    """Thread-safe in-memory backend for local runs and tests."""

    def __init__(self) -> None:
        self._store: Dict[SlotKey, bytes] = {}
        self._lock = threading.RLock()

    def get(self, address: bytes, key: bytes) -> Optional[bytes]:
        with self._lock:
            return self._store.get((address, key))

    def set(self, address: bytes, key: bytes, value: bytes) -> None:
        with self._lock:
            self._store[(address, key)] = value

    def delete(self, address: bytes, key: bytes) -> None:
        with self._lock:
            self._store.pop((address, key), None)

    def __len__(self) -> int:
        return len(self._store)


# --------------------------- Validation helpers --------------------------- #


def _check_key(key: bytes) -> bytes:
    if not isinstance(key, (bytes, bytearray)):
        raise ValidationError("storage key must be bytes")
    if len(key) == 0:
        raise ValidationError("storage key must be non-empty")
    if len(key) > MAX_STORAGE_KEY_BYTES:
        raise ValidationError(f"storage key too long (>{MAX_STORAGE_KEY_BYTES} bytes)")
    return bytes(key)


def _check_value(value: bytes) -> bytes:
    if not isinstance(value, (bytes, bytearray)):
        raise ValidationError("storage value must be bytes")
    if len(value) > MAX_STORAGE_VALUE_BYTES:
        raise ValidationError(f"storage value too large (>{MAX_STORAGE_VALUE_BYTES} bytes)")
    return bytes(value)


# --------------------------- Contract-facing view --------------------------- #


class ContractStorage:
    """Storage namespace of a single contract, routed through the journal."""

    def __init__(self, journal: "Journal", address: bytes, lock: threading.RLock) -> None:
        self._journal = journal
        self._address = address
        self._lock = lock

    @property
    def address(self) -> bytes:
        return self._address

    def get(self, key: bytes) -> Optional[bytes]:
        """Return the value for `key`, or None if not set."""
        k = _check_key(key)
        with self._lock:
            return self._journal.get(self._address, k)

    def set(self, key: bytes, value: bytes) -> None:
        """Set `key` to `value` (overwrites existing)."""
        k = _check_key(key)
        v = _check_value(value)
        with self._lock:
            self._journal.set(self._address, k, v)

    def delete(self, key: bytes) -> None:
        """Delete `key` if present (no-op otherwise)."""
        k = _check_key(key)
        with self._lock:
            self._journal.set(self._address, k, None)

    def exists(self, key: bytes) -> bool:
        return self.get(key) is not None

    # ------------------------------ Typed helpers ----------------------------- #

    def get_int(self, key: bytes) -> int:
        """Read a big-endian unsigned integer at `key`; missing reads as 0."""
        raw = self.get(key)
        if not raw:
            return 0
        return int.from_bytes(raw, "big", signed=False)

    def set_int(self, key: bytes, value: int) -> None:
        """Store `value` as a 32-byte big-endian unsigned integer."""
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError("set_int value must be int")
        if value < 0 or value > U256_MAX:
            raise ValidationError("set_int out of range (must fit in 256 bits)")
        self.set(key, value.to_bytes(32, "big"))


__all__ = [
    "StorageBackend",
    "MemoryBackend",
    "ContractStorage",
    "MAX_STORAGE_KEY_BYTES",
    "MAX_STORAGE_VALUE_BYTES",
]
