"""
merkle_drop — cumulative Merkle airdrop engine.

An administrator commits each recipient's *lifetime* entitlement into a
Merkle root; anyone can submit a proof on a recipient's behalf, and the
recipient receives only what it has not been paid yet. Publishing a new
root never double-pays.

Layout
------
- hashing / commitment : leaf encoding and sorted-pair proof checks
- ledger               : per-recipient claimed totals
- controller           : DropController (set_merkle_root, claim)
- recovery             : AdminRecovery (admin_withdraw)
- access               : Ownable
- tree                 : off-system tree builder & distribution files
- runtime              : in-process host (storage, journal, events, token)
- cli                  : `merkle-drop` operator CLI

Quick start
-----------
    from merkle_drop import Allocation, DropController, FungibleToken, Host, build_distribution

    host = Host()
    token = FungibleToken.deploy(host, owner=admin)
    drop = DropController.deploy(host, token=token, owner=admin)

    dist = build_distribution([Allocation.of(alice, 10), Allocation.of(bob, 20)])
    token.mint(admin, drop, dist.token_total)
    drop.set_merkle_root(admin, dist.merkle_root)

    c = dist.claim_for(alice)
    drop.claim(alice, c.amount, dist.merkle_root, c.proof)
"""

from .commitment import HashCommitment
from .config import CFG, DropConfig, load_config
from .controller import DropController, DropState, RootPolicy
from .errors import (
    DropError,
    InsufficientBalance,
    InvalidProof,
    NothingToClaim,
    ProofFormatError,
    RootMismatch,
    Unauthorized,
    ValidationError,
)
from .ledger import ClaimLedger
from .runtime import Host
from .runtime.token import FungibleToken
from .tree import Allocation, Distribution, MerkleTree, build_distribution, load_allocations
from .version import __version__

__all__ = [
    "__version__",
    "CFG",
    "DropConfig",
    "load_config",
    "HashCommitment",
    "ClaimLedger",
    "DropController",
    "DropState",
    "RootPolicy",
    "FungibleToken",
    "Host",
    "Allocation",
    "Distribution",
    "MerkleTree",
    "build_distribution",
    "load_allocations",
    "DropError",
    "InvalidProof",
    "NothingToClaim",
    "Unauthorized",
    "InsufficientBalance",
    "RootMismatch",
    "ProofFormatError",
    "ValidationError",
]
