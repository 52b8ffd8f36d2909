"""
merkle_drop.runtime.context — value coercion for addresses, amounts and roots.

Every externally supplied value passes through these helpers before it
reaches contract storage, so the engine only ever sees:

- addresses: exactly 20 raw bytes
- amounts:   ints in [0, 2**256 - 1]
- hashes:    exactly 32 raw bytes (roots, leaves, proof siblings)

Hex strings (with or without "0x") are accepted and normalized to bytes.
"""

from __future__ import annotations

from typing import Any, Union

from ..errors import ValidationError
from ..hashing import HASH_LEN

ADDRESS_LEN = 20
AMOUNT_BYTES = 32
U256_MAX = (1 << 256) - 1

ZERO_ADDRESS = b"\x00" * ADDRESS_LEN
ZERO_HASH = b"\x00" * HASH_LEN

BytesInput = Union[bytes, bytearray, memoryview, str]


def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_bytes(value: BytesInput) -> bytes:
    """
    Coerce `value` to bytes.
    - If str, interpret as hex (with or without '0x'); odd-length hex is rejected.
    - If a bytes-like object, copy to immutable bytes.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        h = _strip_0x(value.strip())
        if len(h) % 2 != 0:
            raise ValidationError(f"hex string must have even length, got {len(h)}")
        try:
            return bytes.fromhex(h)
        except ValueError:
            raise ValidationError(f"invalid hex string: {value!r}") from None
    raise ValidationError(f"cannot convert type {type(value).__name__} to bytes")


def to_address(value: Any) -> bytes:
    """Normalize an address (bytes or hex) and enforce the 20-byte width."""
    if hasattr(value, "address") and not isinstance(value, (bytes, str)):
        # Contract instances and account records carry their address.
        value = value.address
    b = to_bytes(value)
    if len(b) != ADDRESS_LEN:
        raise ValidationError(
            f"address must be exactly {ADDRESS_LEN} bytes",
            context={"len": len(b)},
        )
    return b


def to_amount(value: Any, name: str = "amount") -> int:
    # bool is a subclass of int; an amount of True is almost certainly a bug.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be int, got {type(value).__name__}")
    if value < 0 or value > U256_MAX:
        raise ValidationError(f"{name} out of u256 range", context={name: value})
    return value


def to_hash32(value: BytesInput, name: str = "hash") -> bytes:
    b = to_bytes(value)
    if len(b) != HASH_LEN:
        raise ValidationError(
            f"{name} must be exactly {HASH_LEN} bytes",
            context={"len": len(b)},
        )
    return b


def encode_amount(amount: int) -> bytes:
    """Fixed-width 32-byte big-endian unsigned encoding."""
    return to_amount(amount).to_bytes(AMOUNT_BYTES, "big")


__all__ = [
    "ADDRESS_LEN",
    "AMOUNT_BYTES",
    "U256_MAX",
    "ZERO_ADDRESS",
    "ZERO_HASH",
    "to_bytes",
    "to_address",
    "to_amount",
    "to_hash32",
    "encode_amount",
]
