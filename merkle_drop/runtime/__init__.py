"""
merkle_drop.runtime — the in-process host the drop contracts run on.

Submodules:
  - context      : address / amount / hash coercion
  - storage_api  : backend protocol, in-memory backend, per-contract view
  - journal      : nested checkpoints over storage and events
  - events_api   : event validation and canonical receipt encoding
  - host         : serialized, all-or-nothing execution + event log
  - contract     : Contract base class and the @external decorator
  - token        : fungible asset the drop pays out in
"""

from .context import U256_MAX, ZERO_ADDRESS, to_address, to_amount, to_hash32
from .contract import Contract, external
from .events_api import CanonicalEvent, Event, canonicalize
from .host import Host
from .journal import Journal
from .storage_api import ContractStorage, MemoryBackend, StorageBackend

__all__ = [
    "Host",
    "Contract",
    "external",
    "Journal",
    "Event",
    "CanonicalEvent",
    "canonicalize",
    "StorageBackend",
    "MemoryBackend",
    "ContractStorage",
    "U256_MAX",
    "ZERO_ADDRESS",
    "to_address",
    "to_amount",
    "to_hash32",
]
