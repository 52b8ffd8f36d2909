"""
merkle_drop.runtime.contract — base class for host-bound contracts.

A contract is a plain Python object with an address, a storage namespace
and an event emitter, all provided by the Host. Public state-changing
methods are decorated with `@external`, which runs them inside a host
transaction: they either complete or leave no trace.

Mutating methods take the acting principal explicitly (`caller`), never an
ambient msg.sender.
"""

from __future__ import annotations

import functools
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Mapping, Optional, TypeVar

from .context import to_address
from .host import Host
from .storage_api import ContractStorage

F = TypeVar("F", bound=Callable[..., Any])


def external(fn: F) -> F:
    """Run a contract method as one atomic host operation."""

    @functools.wraps(fn)
    def wrapper(self: "Contract", *args: Any, **kwargs: Any) -> Any:
        label = f"{type(self).__name__}.{fn.__name__}"
        with self.host.transaction(label):
            return fn(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


C = TypeVar("C", bound="Contract")


@contextmanager
def deploying(contract: C) -> Iterator[C]:
    """Drop `contract` from the host registry if its initializer fails."""
    try:
        yield contract
    except BaseException:
        contract.host.unregister(contract.address)
        raise


class Contract:
    """Address + storage + events, bound to one Host."""

    def __init__(self, host: Host, address: Optional[Any] = None) -> None:
        self.host = host
        self.address = to_address(address) if address is not None else host.new_address(
            type(self).__name__.encode("ascii")
        )
        self._storage = host.storage(self.address)
        host.register(self)

    @property
    def storage(self) -> ContractStorage:
        return self._storage

    def emit(self, name: bytes, args: Mapping[str, Any]) -> None:
        self.host.emit(self.address, name, args)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(0x{self.address.hex()})"


__all__ = ["Contract", "deploying", "external"]
