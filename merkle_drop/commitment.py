"""
merkle_drop.commitment — leaf encoding and sorted-pair Merkle proof checks.

Leaf:
    H( recipient(20 bytes) || cumulative_amount(32 bytes, big-endian) )

Inner node (sorted pair):
    H( min(a, b) || max(a, b) )

Because siblings are ordered by value rather than by position, a proof is
just the list of sibling hashes from the leaf up; no direction bits. An
empty proof proves a single-leaf tree (leaf == root).

A proof may be passed as a sequence of 32-byte hashes or as one packed
blob (concatenated siblings). A blob whose length is not a multiple of 32
is a *format* error, distinct from a proof that simply does not verify.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, Union

from .config import load_config
from .errors import ProofFormatError, ValidationError
from .hashing import HASH_LEN, HashFn, get_hash_fn, sorted_pair
from .runtime.context import encode_amount, to_address, to_bytes

ProofLike = Union[bytes, bytearray, memoryview, str, Sequence[Union[bytes, str]]]


class HashCommitment:
    """Hash binding for leaves and sorted-pair inner nodes."""

    def __init__(self, hash_name: Optional[str] = None, *, max_depth: Optional[int] = None) -> None:
        cfg = load_config()
        self.hash_name = (hash_name or cfg.hash_name).strip().lower()
        self.hash_fn: HashFn = get_hash_fn(self.hash_name)
        self.max_depth = max_depth if max_depth is not None else cfg.max_proof_depth

    def __repr__(self) -> str:
        return f"HashCommitment({self.hash_name!r})"

    # ------------------------------------------------------------------ #
    # Encoding
    # ------------------------------------------------------------------ #

    def leaf(self, recipient: Any, cumulative_amount: int) -> bytes:
        return self.hash_fn(to_address(recipient) + encode_amount(cumulative_amount))

    def combine(self, a: bytes, b: bytes) -> bytes:
        return sorted_pair(a, b, self.hash_fn)

    # ------------------------------------------------------------------ #
    # Proofs
    # ------------------------------------------------------------------ #

    def split_proof(self, blob: Union[bytes, bytearray, memoryview]) -> List[bytes]:
        """Unpack a packed proof into 32-byte siblings."""
        raw = bytes(blob)
        if len(raw) % HASH_LEN != 0:
            raise ProofFormatError(
                f"packed proof length must be a multiple of {HASH_LEN}",
                context={"len": len(raw)},
            )
        return [raw[i:i + HASH_LEN] for i in range(0, len(raw), HASH_LEN)]

    def _siblings(self, proof: ProofLike) -> List[bytes]:
        try:
            if isinstance(proof, str):
                # A packed proof given as one hex string.
                proof = to_bytes(proof)
            if isinstance(proof, (bytes, bytearray, memoryview)):
                siblings = self.split_proof(proof)
            else:
                siblings = [to_bytes(s) for s in proof]
        except ValidationError as e:
            raise ProofFormatError(f"malformed proof sibling: {e.message}") from None
        except TypeError:
            raise ProofFormatError("proof must be bytes or a sequence of hashes") from None
        if len(siblings) > self.max_depth:
            raise ProofFormatError(
                "proof deeper than the configured maximum",
                context={"depth": len(siblings), "max_depth": self.max_depth},
            )
        return siblings

    def process_proof(self, proof: ProofLike, leaf: bytes) -> bytes:
        """Fold the siblings onto `leaf` and return the computed root."""
        node = bytes(leaf)
        for sibling in self._siblings(proof):
            node = self.combine(node, sibling)
        return node

    def verify(self, proof: ProofLike, root: bytes, leaf: bytes) -> bool:
        """
        True iff folding `proof` onto `leaf` reproduces `root`.

        Siblings, root or leaf of the wrong width never verify; only a
        malformed packed blob or an over-deep proof raises.
        """
        siblings = self._siblings(proof)
        if len(root) != HASH_LEN or len(leaf) != HASH_LEN:
            return False
        if any(len(s) != HASH_LEN for s in siblings):
            return False
        return self.process_proof(siblings, leaf) == bytes(root)


__all__ = ["HashCommitment", "ProofLike"]
