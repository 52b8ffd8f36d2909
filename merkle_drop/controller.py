# -*- coding: utf-8 -*-
"""
Cumulative Merkle drop controller
=================================

Pays recipients out of a token balance according to a Merkle root whose
leaves commit to each recipient's **cumulative** (lifetime) entitlement.
Publishing a new root never double-pays: a claim transfers only
`cumulative_amount - already_claimed`.

Lifecycle
---------
    UNINITIALIZED --set_merkle_root--> ACTIVE --set_merkle_root--> ACTIVE

Operations
----------
- set_merkle_root(caller, root)          [owner]
- claim(account, amount, root, proof)    [anyone; payout always to `account`]
- admin_withdraw(caller, asset, amount)  [owner]  (see merkle_drop.recovery)
- transfer_ownership / renounce_ownership [owner] (see merkle_drop.access)

Root policy
-----------
`claim` receives the root the proof was built against. What it does with it
is a per-deployment choice:

- RootPolicy.PERMISSIVE (default): any root the proof verifies against is
  accepted; double-pay protection comes from the ledger alone. Proofs from
  an earlier epoch stay usable.
- RootPolicy.CURRENT: the supplied root must equal the stored root, else
  RootMismatch ("MerkleRootWasUpdated").

Events
------
- b"MerkleRootUpdated" {"old_root": bytes32, "new_root": bytes32}
- b"Claimed"           {"account": bytes20, "amount": int}
- b"AdminWithdrawal"   {"asset": bytes20, "to": bytes20, "amount": int}
- b"OwnershipTransferred" {"previous": bytes20, "new": bytes20}
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Optional, Union

from .access import Ownable
from .commitment import HashCommitment, ProofLike
from .errors import InvalidProof, RootMismatch, ValidationError
from .ledger import ClaimLedger
from .recovery import AdminRecovery
from .runtime.context import ZERO_ADDRESS, ZERO_HASH, to_address, to_amount, to_hash32
from .runtime.contract import Contract, deploying, external
from .runtime.host import Host

log = logging.getLogger(__name__)

K_ROOT = b"drop:root"
K_TOKEN = b"drop:token"

EVT_ROOT_UPDATED = b"MerkleRootUpdated"
EVT_CLAIMED = b"Claimed"


class RootPolicy(str, enum.Enum):
    PERMISSIVE = "permissive"
    CURRENT = "current"


class DropState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"


class DropController(AdminRecovery, Ownable, Contract):
    """Merkle-verified, cumulatively accounted token distribution."""

    def __init__(
        self,
        host: Host,
        address: Optional[Any] = None,
        *,
        root_policy: Optional[Union[RootPolicy, str]] = None,
        commitment: Optional[HashCommitment] = None,
    ) -> None:
        super().__init__(host, address)
        self.root_policy = RootPolicy(root_policy or host.config.root_policy)
        self.commitment = commitment or HashCommitment(
            host.config.hash_name, max_depth=host.config.max_proof_depth
        )
        self.ledger = ClaimLedger(self.storage)

    @classmethod
    def deploy(
        cls,
        host: Host,
        *,
        token: Any,
        owner: Any,
        root_policy: Optional[Union[RootPolicy, str]] = None,
        commitment: Optional[HashCommitment] = None,
        address: Optional[Any] = None,
    ) -> "DropController":
        with deploying(cls(host, address, root_policy=root_policy, commitment=commitment)) as drop:
            drop._init(token, owner)
        return drop

    @external
    def _init(self, token: Any, owner: Any) -> None:
        token_addr = to_address(token)
        if token_addr == ZERO_ADDRESS:
            raise ValidationError("token must not be the zero address")
        self._init_owner(owner)
        self.storage.set(K_TOKEN, token_addr)

    # ------------------------------------------------------------------ #
    # Views
    # ------------------------------------------------------------------ #

    def merkle_root(self) -> bytes:
        return self.storage.get(K_ROOT) or ZERO_HASH

    def token(self) -> bytes:
        return self.storage.get(K_TOKEN) or ZERO_ADDRESS

    def state(self) -> DropState:
        return DropState.UNINITIALIZED if self.merkle_root() == ZERO_HASH else DropState.ACTIVE

    def cumulative_claimed(self, account: Any) -> int:
        return self.ledger.get_claimed(account)

    def verify_claim(
        self, account: Any, cumulative_amount: int, expected_root: Any, proof: ProofLike
    ) -> bool:
        """Read-only: would `proof` verify for this leaf under `expected_root`?"""
        leaf = self.commitment.leaf(account, cumulative_amount)
        return self.commitment.verify(proof, to_hash32(expected_root, "root"), leaf)

    # ------------------------------------------------------------------ #
    # Admin
    # ------------------------------------------------------------------ #

    @external
    def set_merkle_root(self, caller: Any, new_root: Any) -> None:
        """Owner-only: start a new epoch. The claim ledger is left untouched."""
        self.require_owner(caller)
        root = to_hash32(new_root, "root")
        old = self.merkle_root()
        self.storage.set(K_ROOT, root)
        self.emit(EVT_ROOT_UPDATED, {"old_root": old, "new_root": root})
        log.info("drop 0x%s root 0x%s -> 0x%s", self.address.hex(), old.hex(), root.hex())

    # ------------------------------------------------------------------ #
    # Claims
    # ------------------------------------------------------------------ #

    @external
    def claim(
        self,
        account: Any,
        cumulative_amount: int,
        expected_root: Any,
        proof: ProofLike,
    ) -> int:
        """
        Pay `account` the difference between `cumulative_amount` and what it
        has already received. Returns the amount transferred.

        Raises InvalidProof, RootMismatch (CURRENT policy), NothingToClaim,
        or whatever the token raises on transfer; in every case nothing is
        recorded.
        """
        addr = to_address(account)
        amount = to_amount(cumulative_amount, "cumulative_amount")
        root = to_hash32(expected_root, "root")

        leaf = self.commitment.leaf(addr, amount)
        if not self.commitment.verify(proof, root, leaf):
            raise InvalidProof(
                "invalid proof",
                context={"account": "0x" + addr.hex(), "root": "0x" + root.hex()},
            )

        if self.root_policy is RootPolicy.CURRENT and root != self.merkle_root():
            raise RootMismatch(
                "merkle root was updated",
                context={"supplied": "0x" + root.hex(), "current": "0x" + self.merkle_root().hex()},
            )

        delta = self.ledger.record_claim(addr, amount)
        self._asset(self.token()).transfer(self.address, addr, delta)
        self.emit(EVT_CLAIMED, {"account": addr, "amount": delta})
        log.debug("claim 0x%s cumulative=%d paid=%d", addr.hex(), amount, delta)
        return delta


__all__ = [
    "DropController",
    "DropState",
    "RootPolicy",
    "EVT_ROOT_UPDATED",
    "EVT_CLAIMED",
]
