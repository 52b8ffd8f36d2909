"""
Per-recipient claimed-amount bookkeeping.

The ledger is the only thing standing between a cumulative root and a
double payout: it remembers, for every recipient, the cumulative amount
already paid, across every root the drop has ever had. Values only go up.

Storage layout (inside the owning contract's namespace):
    b"drop:claimed:" + recipient(20)  ->  u256 big-endian
"""

from __future__ import annotations

from typing import Any

from .errors import NothingToClaim
from .runtime.context import to_address, to_amount
from .runtime.storage_api import ContractStorage

P_CLAIMED = b"drop:claimed:"


class ClaimLedger:
    def __init__(self, storage: ContractStorage) -> None:
        self._storage = storage

    def get_claimed(self, recipient: Any) -> int:
        return self._storage.get_int(P_CLAIMED + to_address(recipient))

    def record_claim(self, recipient: Any, new_cumulative: int) -> int:
        """
        Raise the recipient's claimed total to `new_cumulative` and return the
        difference. NothingToClaim when there is no positive difference.
        """
        addr = to_address(recipient)
        target = to_amount(new_cumulative, "cumulative_amount")
        claimed = self._storage.get_int(P_CLAIMED + addr)
        if target <= claimed:
            raise NothingToClaim(
                "nothing to claim",
                context={"account": "0x" + addr.hex(), "claimed": claimed, "requested": target},
            )
        self._storage.set_int(P_CLAIMED + addr, target)
        return target - claimed


__all__ = ["ClaimLedger", "P_CLAIMED"]
