# -*- coding: utf-8 -*-
"""
merkle_drop.access
==================

Minimal **Ownable** mixin: the authorization primitive for admin-only
operations.

- read the current owner (`owner`)
- initialize the owner once, at construction (`_init_owner`)
- check that a caller is the owner (`require_owner`)
- transfer ownership to a new account (`transfer_ownership`)
- renounce ownership (clear owner) (`renounce_ownership`)

Conventions
-----------
- Addresses are 20-byte `bytes`; hex is accepted and normalized.
- The owner lives in contract storage at `OWNER_KEY`, so ownership changes
  roll back with the rest of a failed operation.
- Events:
    - b"OwnershipTransferred" args: {"previous": bytes, "new": bytes}

Safety notes
------------
- `_init_owner` will not overwrite a previously set owner.
- `transfer_ownership` rejects the zero address; use `renounce_ownership`
  explicitly to leave the contract without an owner.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from .errors import Unauthorized, ValidationError
from .runtime.context import ZERO_ADDRESS, to_address
from .runtime.contract import external

log = logging.getLogger(__name__)

OWNER_KEY: bytes = b"access:owner"

EVT_OWNERSHIP_TRANSFERRED = b"OwnershipTransferred"


class Ownable:
    """Mixin for `Contract` subclasses with a single authorized principal."""

    # --- Owner primitives -----------------------------------------------------

    def owner(self) -> Optional[bytes]:
        """Return the current owner address, or None if unset/renounced."""
        v = self.storage.get(OWNER_KEY)
        return v if v else None

    def _init_owner(self, owner: Any) -> None:
        addr = to_address(owner)
        if addr == ZERO_ADDRESS:
            raise ValidationError("owner must not be the zero address")
        if self.owner() is None:
            self.storage.set(OWNER_KEY, addr)
            self.emit(EVT_OWNERSHIP_TRANSFERRED, {"previous": ZERO_ADDRESS, "new": addr})

    def is_owner(self, caller: Any) -> bool:
        current = self.owner()
        return current is not None and current == to_address(caller)

    def require_owner(self, caller: Any) -> None:
        """Raise Unauthorized unless `caller` equals the current owner."""
        if not self.is_owner(caller):
            raise Unauthorized(
                "caller is not the owner",
                context={"caller": "0x" + to_address(caller).hex()},
            )

    # --- Owner management ------------------------------------------------------

    @external
    def transfer_ownership(self, caller: Any, new_owner: Any) -> None:
        """Owner-only: hand the admin role to `new_owner` (non-zero)."""
        self.require_owner(caller)
        new = to_address(new_owner)
        if new == ZERO_ADDRESS:
            raise ValidationError("new owner must not be the zero address")
        previous = self.owner() or ZERO_ADDRESS
        self.storage.set(OWNER_KEY, new)
        self.emit(EVT_OWNERSHIP_TRANSFERRED, {"previous": previous, "new": new})
        log.info("ownership of 0x%s transferred to 0x%s", self.address.hex(), new.hex())

    @external
    def renounce_ownership(self, caller: Any) -> None:
        """
        Owner-only: leave the contract without an owner. Every admin-only
        operation fails afterwards.
        """
        self.require_owner(caller)
        previous = self.owner() or ZERO_ADDRESS
        self.storage.set(OWNER_KEY, b"")
        self.emit(EVT_OWNERSHIP_TRANSFERRED, {"previous": previous, "new": ZERO_ADDRESS})
        log.info("ownership of 0x%s renounced", self.address.hex())


__all__ = ["Ownable", "OWNER_KEY", "EVT_OWNERSHIP_TRANSFERRED"]
