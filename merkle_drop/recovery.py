"""
Owner-only recovery of assets held by a drop contract.

Lets the owner pull out unclaimed funds, or tokens sent to the drop by
mistake. Withdrawal is independent of claim accounting: it never reads or
writes the claim ledger, so a later claim may fail on balance even though
the ledger still allows it.

Events:
    b"AdminWithdrawal" {"asset": bytes, "to": bytes, "amount": int}
"""

from __future__ import annotations

import logging
from typing import Any

from .errors import InsufficientBalance, ValidationError
from .runtime.context import to_amount
from .runtime.contract import external
from .runtime.token import FungibleToken

log = logging.getLogger(__name__)

EVT_ADMIN_WITHDRAWAL = b"AdminWithdrawal"


class AdminRecovery:
    """Mixin for Ownable contracts that hold fungible assets."""

    def _asset(self, asset: Any) -> FungibleToken:
        # Accept a token instance or its address.
        token = asset if isinstance(asset, FungibleToken) else self.host.contract_at(asset)
        if not isinstance(token, FungibleToken):
            raise ValidationError(
                "asset is not a fungible token",
                context={"address": "0x" + token.address.hex(), "kind": type(token).__name__},
            )
        return token

    @external
    def admin_withdraw(self, caller: Any, asset: Any, amount: int) -> None:
        self.require_owner(caller)
        token = self._asset(asset)
        value = to_amount(amount)
        held = token.balance_of(self.address)
        if value > held:
            raise InsufficientBalance(
                "withdrawal exceeds held balance",
                context={"asset": "0x" + token.address.hex(), "balance": held, "amount": value},
            )
        owner = self.owner()
        token.transfer(self.address, owner, value)
        self.emit(EVT_ADMIN_WITHDRAWAL, {"asset": token.address, "to": owner, "amount": value})
        log.info(
            "admin withdrew %d of 0x%s from 0x%s",
            value,
            token.address.hex(),
            self.address.hex(),
        )


__all__ = ["AdminRecovery", "EVT_ADMIN_WITHDRAWAL"]
