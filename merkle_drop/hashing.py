"""
merkle_drop.hashing — deterministic hashing wrappers shared by the verifier
and the off-system tree builder.

Goals
-----
- Strictly bytes-in, bytes-out (no implicit text/encoding).
- One narrow registry so the concrete algorithm is swappable without touching
  accounting code: every consumer asks `get_hash_fn(name)`.
- Keccak-256 comes from PyCryptodome and matches Ethereum / merkletreejs
  tooling byte for byte.

Provided APIs
-------------
- keccak256(data: bytes) -> bytes
- sha3_256(data: bytes) -> bytes
- sha256(data: bytes) -> bytes
- get_hash_fn(name: str) -> HashFn
- sorted_pair(a: bytes, b: bytes, hash_fn: HashFn) -> bytes
- to_hex / from_hex helpers for 0x-prefixed strings
"""

from __future__ import annotations

import hashlib
from typing import Callable, Dict, Union

from Crypto.Hash import keccak as _keccak

from .errors import ValidationError

HashFn = Callable[[bytes], bytes]
BytesLike = Union[bytes, bytearray, memoryview]

HASH_LEN = 32


def _ensure_bytes(buf: object, name: str) -> bytes:
    if isinstance(buf, (bytes, bytearray, memoryview)):
        return bytes(buf)
    raise ValidationError(f"{name} must be bytes-like (got {type(buf).__name__})")


# ------------------------------- Hash Functions ------------------------------ #

def keccak256(data: BytesLike) -> bytes:
    """Keccak-256 (pre-SHA3 padding) as used by Ethereum."""
    h = _keccak.new(digest_bits=256)
    h.update(_ensure_bytes(data, "data"))
    return h.digest()


def sha3_256(data: BytesLike) -> bytes:
    return hashlib.sha3_256(_ensure_bytes(data, "data")).digest()


def sha256(data: BytesLike) -> bytes:
    return hashlib.sha256(_ensure_bytes(data, "data")).digest()


_REGISTRY: Dict[str, HashFn] = {
    "keccak256": keccak256,
    "sha3_256": sha3_256,
    "sha256": sha256,
}


def get_hash_fn(name: str) -> HashFn:
    """Resolve a registered 32-byte hash function by name."""
    try:
        return _REGISTRY[name.strip().lower()]
    except KeyError:
        raise ValidationError(
            f"unknown hash function {name!r}",
            context={"known": sorted(_REGISTRY)},
        ) from None


def available() -> tuple:
    return tuple(sorted(_REGISTRY))


# ------------------------------ Pair combiner ------------------------------- #

def sorted_pair(a: bytes, b: bytes, hash_fn: HashFn) -> bytes:
    """
    Sorted-pair inner node: the smaller operand (bytewise) goes first, so
    proofs need no left/right direction bits.
    """
    if b < a:
        a, b = b, a
    return hash_fn(a + b)


# ------------------------------- Hex helpers -------------------------------- #

def to_hex(b: BytesLike) -> str:
    """Encode bytes as 0x-prefixed lowercase hex."""
    return "0x" + bytes(b).hex()


def from_hex(s: str) -> bytes:
    """Decode a hex string with or without a 0x prefix."""
    if not isinstance(s, str):
        raise ValidationError(f"expected hex string, got {type(s).__name__}")
    h = s.strip()
    if h.startswith(("0x", "0X")):
        h = h[2:]
    if len(h) % 2 != 0:
        raise ValidationError(f"hex string must have even length, got {len(h)}")
    try:
        return bytes.fromhex(h)
    except ValueError:
        raise ValidationError(f"invalid hex string: {s!r}") from None


__all__ = [
    "HashFn",
    "HASH_LEN",
    "keccak256",
    "sha3_256",
    "sha256",
    "get_hash_fn",
    "available",
    "sorted_pair",
    "to_hex",
    "from_hex",
]
