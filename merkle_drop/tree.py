"""
merkle_drop.tree — off-system tree builder for cumulative allocations.

Produces roots and proofs that `DropController.claim` accepts. The layout
matches merkletreejs with `{hashLeaves: true, sort: true}`:

- each (address, cumulative_amount) is hashed into a leaf;
- leaves are sorted ascending (bytewise);
- every layer pairs nodes left to right with sorted-pair hashing;
- an odd trailing node is promoted to the next layer unchanged.

The proof for leaf i collects, at each layer, the sibling at i ^ 1 when it
exists, then moves to i // 2.

Output format (`Distribution.to_json`):

    {
      "merkleRoot": "0x…",
      "tokenTotal": 1234,
      "hash": "keccak256",
      "claims": {
        "0xabc…": {"index": 0, "amount": 10, "leaf": "0x…", "proof": ["0x…", …]},
        …
      }
    }
"""

from __future__ import annotations

import csv
import io
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .commitment import HashCommitment
from .errors import ValidationError
from .hashing import from_hex, to_hex
from .runtime.context import to_address, to_amount


@dataclass(frozen=True)
class Allocation:
    """One recipient's cumulative entitlement."""

    address: bytes
    amount: int

    @classmethod
    def of(cls, address: Any, amount: Any) -> "Allocation":
        return cls(to_address(address), to_amount(_parse_amount(amount)))


def _parse_amount(value: Any) -> int:
    if isinstance(value, str):
        s = value.strip().replace("_", "")
        try:
            return int(s, 16) if s.lower().startswith("0x") else int(s, 10)
        except ValueError:
            raise ValidationError(f"invalid amount: {value!r}") from None
    return value


class MerkleTree:
    """Sorted-leaf, sorted-pair Merkle tree over hashed allocations."""

    def __init__(self, leaves: Sequence[bytes], commitment: Optional[HashCommitment] = None) -> None:
        if not leaves:
            raise ValidationError("cannot build a tree with no leaves")
        self.commitment = commitment or HashCommitment()
        self.layers: List[List[bytes]] = [sorted(bytes(x) for x in leaves)]
        self._positions: Dict[bytes, int] = {leaf: i for i, leaf in enumerate(self.layers[0])}
        while len(self.layers[-1]) > 1:
            self.layers.append(self._next_layer(self.layers[-1]))

    def _next_layer(self, nodes: List[bytes]) -> List[bytes]:
        out: List[bytes] = []
        for i in range(0, len(nodes) - 1, 2):
            out.append(self.commitment.combine(nodes[i], nodes[i + 1]))
        if len(nodes) % 2 == 1:
            out.append(nodes[-1])
        return out

    @classmethod
    def from_allocations(
        cls,
        allocations: Iterable[Allocation],
        commitment: Optional[HashCommitment] = None,
    ) -> "MerkleTree":
        commitment = commitment or HashCommitment()
        seen = set()
        leaves: List[bytes] = []
        for a in allocations:
            if a.address in seen:
                raise ValidationError(
                    "duplicate address in allocation table",
                    context={"address": to_hex(a.address)},
                )
            seen.add(a.address)
            leaves.append(commitment.leaf(a.address, a.amount))
        return cls(leaves, commitment)

    @property
    def root(self) -> bytes:
        return self.layers[-1][0]

    @property
    def leaves(self) -> List[bytes]:
        return list(self.layers[0])

    def index_of(self, leaf: bytes) -> int:
        try:
            return self._positions[bytes(leaf)]
        except KeyError:
            raise ValidationError("leaf not in tree", context={"leaf": to_hex(leaf)}) from None

    def proof(self, index: int) -> List[bytes]:
        if not 0 <= index < len(self.layers[0]):
            raise ValidationError("leaf index out of range", context={"index": index})
        out: List[bytes] = []
        for layer in self.layers[:-1]:
            sibling = index ^ 1
            if sibling < len(layer):
                out.append(layer[sibling])
            index //= 2
        return out

    def proof_for(self, address: Any, amount: int) -> List[bytes]:
        return self.proof(self.index_of(self.commitment.leaf(address, amount)))


# ---------------------------------------------------------------------------
# Distribution
# ---------------------------------------------------------------------------


@dataclass
class Claim:
    index: int
    amount: int
    leaf: bytes
    proof: List[bytes]


@dataclass
class Distribution:
    merkle_root: bytes
    token_total: int
    hash_name: str = "keccak256"
    claims: Dict[bytes, Claim] = field(default_factory=dict)

    def claim_for(self, address: Any) -> Claim:
        addr = to_address(address)
        try:
            return self.claims[addr]
        except KeyError:
            raise ValidationError("address not in distribution", context={"address": to_hex(addr)}) from None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "merkleRoot": to_hex(self.merkle_root),
            "tokenTotal": self.token_total,
            "hash": self.hash_name,
            "claims": {
                to_hex(addr): {
                    "index": c.index,
                    "amount": c.amount,
                    "leaf": to_hex(c.leaf),
                    "proof": [to_hex(p) for p in c.proof],
                }
                for addr, c in self.claims.items()
            },
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Distribution":
        try:
            claims = {
                to_address(addr): Claim(
                    index=int(c["index"]),
                    amount=to_amount(_parse_amount(c["amount"])),
                    leaf=from_hex(c["leaf"]),
                    proof=[from_hex(p) for p in c["proof"]],
                )
                for addr, c in data["claims"].items()
            }
            return cls(
                merkle_root=from_hex(data["merkleRoot"]),
                token_total=to_amount(_parse_amount(data["tokenTotal"])),
                hash_name=str(data.get("hash", "keccak256")),
                claims=claims,
            )
        except (KeyError, TypeError) as e:
            raise ValidationError(f"malformed distribution: {e}") from None

    @classmethod
    def from_json(cls, text: str) -> "Distribution":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValidationError(f"distribution is not valid JSON: {e}") from None
        return cls.from_dict(data)


def build_distribution(
    allocations: Iterable[Allocation],
    commitment: Optional[HashCommitment] = None,
) -> Distribution:
    """Build the tree and every recipient's proof in one pass."""
    allocs = list(allocations)
    tree = MerkleTree.from_allocations(allocs, commitment)
    dist = Distribution(
        merkle_root=tree.root,
        token_total=sum(a.amount for a in allocs),
        hash_name=tree.commitment.hash_name,
    )
    for a in allocs:
        leaf = tree.commitment.leaf(a.address, a.amount)
        index = tree.index_of(leaf)
        dist.claims[a.address] = Claim(index=index, amount=a.amount, leaf=leaf, proof=tree.proof(index))
    return dist


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------


_CSV_HEADERS = ("address", "account", "recipient")


def parse_csv(text: str) -> List[Allocation]:
    """
    `address,amount` rows. Blank lines and `#` comments are ignored. A header
    row (first column `address`, `account` or `recipient`) is skipped if it
    comes before any data row.
    """
    out: List[Allocation] = []
    for n, row in enumerate(csv.reader(io.StringIO(text))):
        if not row or not row[0].strip() or row[0].lstrip().startswith("#"):
            continue
        if len(row) < 2:
            raise ValidationError(f"row {n + 1}: expected address,amount", context={"row": row})
        if not out and row[0].strip().lower() in _CSV_HEADERS:
            continue
        out.append(Allocation.of(row[0].strip(), row[1].strip()))
    return out


def parse_json(text: str) -> List[Allocation]:
    """Either {"0xaddr": amount, …} or [{"address": …, "amount": …}, …]."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"allocations are not valid JSON: {e}") from None
    if isinstance(data, Mapping):
        return [Allocation.of(k, v) for k, v in data.items()]
    if isinstance(data, list):
        try:
            return [Allocation.of(item["address"], item["amount"]) for item in data]
        except (KeyError, TypeError) as e:
            raise ValidationError(f"malformed allocation entry: {e}") from None
    raise ValidationError("allocations JSON must be an object or a list")


def load_allocations(path: Union[str, Path]) -> List[Allocation]:
    p = Path(path)
    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() == ".json":
        return parse_json(text)
    return parse_csv(text)


__all__ = [
    "Allocation",
    "Claim",
    "Distribution",
    "MerkleTree",
    "build_distribution",
    "load_allocations",
    "parse_csv",
    "parse_json",
]
