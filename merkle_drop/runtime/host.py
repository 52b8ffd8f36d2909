"""
merkle_drop.runtime.host — in-process execution host for drop contracts.

The host supplies what the contracts assume from their environment:

- serialized execution: one re-entrant lock orders every operation, so two
  claims for the same recipient never interleave their read-modify-write;
- all-or-nothing operations: each externally invoked call runs inside a
  journal checkpoint; any exception reverts every storage write and drops
  every event of that call before it propagates to the caller;
- a contract registry (address → instance) and deterministic addresses;
- a committed event log.

Contracts do not call `transaction()` themselves; public mutating methods are
wrapped with `merkle_drop.runtime.contract.external`.

Usage
-----
    host = Host()
    token = FungibleToken.deploy(host, owner=deployer, name=b"Drop", symbol=b"DRP")
    with host.transaction("batch"):
        ...
"""

from __future__ import annotations

import itertools
import logging
import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Mapping, Optional, Sequence

from ..config import DropConfig, load_config
from ..errors import DropError, ValidationError
from ..hashing import keccak256
from .context import to_address
from .events_api import Event, make_event
from .journal import Journal
from .storage_api import ContractStorage, MemoryBackend, StorageBackend

if TYPE_CHECKING:  # pragma: no cover
    from .contract import Contract

log = logging.getLogger(__name__)


class Host:
    """Serialized, journaled execution environment."""

    def __init__(
        self,
        backend: Optional[StorageBackend] = None,
        *,
        config: Optional[DropConfig] = None,
    ) -> None:
        self.config = config or load_config()
        self._backend = backend if backend is not None else MemoryBackend()
        self._lock = threading.RLock()
        self._log: List[Event] = []
        self._journal = Journal(self._backend, on_events=self._log.extend)
        self._contracts: Dict[bytes, "Contract"] = {}
        self._deploy_counter = itertools.count()
        self._tx_counter = itertools.count()
        self._tx_index = -1

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #

    @contextmanager
    def transaction(self, label: str = "call") -> Iterator[int]:
        """
        Run the enclosed block atomically. Nested use opens a nested
        checkpoint; only the outermost block assigns a tx index.
        """
        with self._lock:
            outermost = self._journal.depth() == 0
            if outermost:
                self._tx_index = next(self._tx_counter)
            self._journal.begin()
            try:
                yield self._tx_index
            except BaseException as exc:
                self._journal.revert()
                if outermost:
                    if isinstance(exc, DropError):
                        log.info("tx %d (%s) reverted: %s", self._tx_index, label, exc.code)
                    else:
                        log.warning("tx %d (%s) reverted: %r", self._tx_index, label, exc)
                raise
            else:
                self._journal.commit()

    @property
    def in_transaction(self) -> bool:
        return self._journal.depth() > 0

    # ------------------------------------------------------------------ #
    # Contracts
    # ------------------------------------------------------------------ #

    def new_address(self, tag: bytes = b"") -> bytes:
        """Deterministic contract address: last 20 bytes of keccak(counter)."""
        with self._lock:
            n = next(self._deploy_counter)
        return keccak256(b"merkle-drop:deploy|" + tag + b"|" + n.to_bytes(8, "big"))[-20:]

    def register(self, contract: "Contract") -> None:
        with self._lock:
            if contract.address in self._contracts:
                raise ValidationError(
                    "address already in use",
                    context={"address": "0x" + contract.address.hex()},
                )
            self._contracts[contract.address] = contract

    def unregister(self, address: Any) -> None:
        with self._lock:
            self._contracts.pop(to_address(address), None)

    def contract_at(self, address: Any) -> "Contract":
        addr = to_address(address)
        with self._lock:
            try:
                return self._contracts[addr]
            except KeyError:
                raise ValidationError(
                    "no contract at address",
                    context={"address": "0x" + addr.hex()},
                ) from None

    def storage(self, address: bytes) -> ContractStorage:
        return ContractStorage(self._journal, address, self._lock)

    # ------------------------------------------------------------------ #
    # Events
    # ------------------------------------------------------------------ #

    def emit(self, address: bytes, name: bytes, args: Mapping[Any, Any]) -> None:
        with self._lock:
            if self._journal.pending_events() >= self.config.max_events_per_tx:
                raise DropError(
                    "too many events in one transaction",
                    code="EventLimit",
                    context={"limit": self.config.max_events_per_tx},
                )
            self._journal.add_event(make_event(address, name, args, self._tx_index))

    @property
    def events(self) -> Sequence[Event]:
        """Committed events, oldest first."""
        with self._lock:
            return tuple(self._log)

    def events_named(self, name: bytes, address: Optional[Any] = None) -> List[Event]:
        addr = to_address(address) if address is not None else None
        return [
            ev for ev in self.events
            if ev.name == name and (addr is None or ev.address == addr)
        ]

    def events_in_tx(self, tx_index: int) -> List[Event]:
        return [ev for ev in self.events if ev.tx_index == tx_index]

    @property
    def last_tx_index(self) -> int:
        return self._tx_index


__all__ = ["Host"]
