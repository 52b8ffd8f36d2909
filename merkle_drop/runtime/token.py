# -*- coding: utf-8 -*-
"""
Fungible asset used as the drop's payable token
===============================================

Deterministic, float-free, storage-backed token. It is the asset-transfer
primitive the drop controller consumes: `mint`, `transfer`, `balance_of`.

Highlights
----------
- Explicit `caller` parameters for mutating calls (no ambient msg.sender).
- Deterministic storage layout under the `tok:` prefix.
- Events:
    - b"Transfer" {"from": bytes, "to": bytes, "value": int}
- U256-checked math (no silent wrap); overdrafts raise InsufficientBalance.
- Owner-gated `mint` (owner set at deploy).

Public interface
----------------
# metadata (pure)
name() -> bytes
symbol() -> bytes
decimals() -> int
total_supply() -> int
balance_of(addr) -> int

# state-changing (explicit caller)
mint(caller, to, amount) -> bool
transfer(caller, to, amount) -> bool

Notes
-----
- A contract paying out of its own balance calls
  `token.transfer(self.address, to, amount)`; the host runs it as a nested
  operation, so a failed transfer reverts the caller's writes too.
"""

from __future__ import annotations

from typing import Any, Final, Optional

from ..access import Ownable
from ..errors import InsufficientBalance, ValidationError
from .context import U256_MAX, ZERO_ADDRESS, to_address, to_amount
from .contract import Contract, deploying, external
from .host import Host

K_NAME: Final[bytes] = b"tok:meta:name"
K_SYMBOL: Final[bytes] = b"tok:meta:symbol"
K_DECIMALS: Final[bytes] = b"tok:meta:dec"
K_TOTAL: Final[bytes] = b"tok:meta:total"
P_BALANCE: Final[bytes] = b"tok:bal:"

EVT_TRANSFER: Final[bytes] = b"Transfer"

MAX_NAME_LEN = 64
MAX_SYMBOL_LEN = 16


def _key_balance(addr: bytes) -> bytes:
    return P_BALANCE + addr


class FungibleToken(Ownable, Contract):
    """Owner-mintable fungible token living in host storage."""

    @classmethod
    def deploy(
        cls,
        host: Host,
        *,
        owner: Any,
        name: bytes = b"Drop Token",
        symbol: bytes = b"DROP",
        decimals: int = 18,
        address: Optional[Any] = None,
    ) -> "FungibleToken":
        with deploying(cls(host, address)) as token:
            token._init(owner, name, symbol, decimals)
        return token

    @external
    def _init(self, owner: Any, name: bytes, symbol: bytes, decimals: int) -> None:
        if not isinstance(name, (bytes, bytearray)) or not 0 < len(name) <= MAX_NAME_LEN:
            raise ValidationError("token name must be 1..64 bytes")
        if not isinstance(symbol, (bytes, bytearray)) or not 0 < len(symbol) <= MAX_SYMBOL_LEN:
            raise ValidationError("token symbol must be 1..16 bytes")
        if isinstance(decimals, bool) or not isinstance(decimals, int) or not 0 <= decimals <= 36:
            raise ValidationError("decimals must be an int in [0, 36]")
        self._init_owner(owner)
        self.storage.set(K_NAME, bytes(name))
        self.storage.set(K_SYMBOL, bytes(symbol).upper())
        self.storage.set_int(K_DECIMALS, decimals)

    # ------------------------------------------------------------------------------
    # Metadata (pure)
    # ------------------------------------------------------------------------------

    def name(self) -> bytes:
        return self.storage.get(K_NAME) or b""

    def symbol(self) -> bytes:
        return self.storage.get(K_SYMBOL) or b""

    def decimals(self) -> int:
        return self.storage.get_int(K_DECIMALS)

    def total_supply(self) -> int:
        return self.storage.get_int(K_TOTAL)

    def balance_of(self, addr: Any) -> int:
        return self.storage.get_int(_key_balance(to_address(addr)))

    # ------------------------------------------------------------------------------
    # State-changing
    # ------------------------------------------------------------------------------

    @external
    def mint(self, caller: Any, to: Any, amount: int) -> bool:
        """Owner-only: create `amount` new units for `to`."""
        self.require_owner(caller)
        dst = to_address(to)
        value = to_amount(amount)
        if dst == ZERO_ADDRESS:
            raise ValidationError("cannot mint to the zero address")
        total = self.total_supply() + value
        if total > U256_MAX:
            raise ValidationError("total supply overflow")
        self.storage.set_int(K_TOTAL, total)
        self.storage.set_int(_key_balance(dst), self.balance_of(dst) + value)
        self.emit(EVT_TRANSFER, {"from": ZERO_ADDRESS, "to": dst, "value": value})
        return True

    @external
    def transfer(self, caller: Any, to: Any, amount: int) -> bool:
        """Move `amount` from `caller` to `to`; InsufficientBalance on overdraft."""
        src = to_address(caller)
        dst = to_address(to)
        value = to_amount(amount)
        if dst == ZERO_ADDRESS:
            raise ValidationError("cannot transfer to the zero address")
        held = self.balance_of(src)
        if value > held:
            raise InsufficientBalance(
                "transfer amount exceeds balance",
                context={"holder": "0x" + src.hex(), "balance": held, "amount": value},
            )
        if src != dst:
            self.storage.set_int(_key_balance(src), held - value)
            self.storage.set_int(_key_balance(dst), self.balance_of(dst) + value)
        self.emit(EVT_TRANSFER, {"from": src, "to": dst, "value": value})
        return True


__all__ = ["FungibleToken", "EVT_TRANSFER"]
