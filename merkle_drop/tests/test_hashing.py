from __future__ import annotations

import pytest

from merkle_drop.errors import ValidationError
from merkle_drop.hashing import (
    available,
    from_hex,
    get_hash_fn,
    keccak256,
    sha3_256,
    sha256,
    sorted_pair,
    to_hex,
)

KECCAK_EMPTY = "0xc5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
SHA3_EMPTY = "0xa7ffc6f8bf1ed76651c14756a061d662f580ff4de43b49fa82d80a4b80f8434a"
SHA256_EMPTY = "0xe3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def test_known_empty_digests():
    assert to_hex(keccak256(b"")) == KECCAK_EMPTY
    assert to_hex(sha3_256(b"")) == SHA3_EMPTY
    assert to_hex(sha256(b"")) == SHA256_EMPTY


def test_keccak_is_not_sha3():
    assert keccak256(b"abc") != sha3_256(b"abc")


def test_registry_lookup_is_case_insensitive():
    assert get_hash_fn("KECCAK256") is keccak256
    assert get_hash_fn(" sha256 ") is sha256
    assert set(available()) == {"keccak256", "sha3_256", "sha256"}


def test_unknown_hash_rejected():
    with pytest.raises(ValidationError) as ei:
        get_hash_fn("md5")
    assert "keccak256" in ei.value.context["known"]


def test_hash_rejects_text():
    with pytest.raises(ValidationError):
        keccak256("not bytes")  # type: ignore[arg-type]


def test_sorted_pair_is_symmetric():
    a = b"\x01" * 32
    b = b"\x02" * 32
    assert sorted_pair(a, b, keccak256) == sorted_pair(b, a, keccak256)
    assert sorted_pair(a, b, keccak256) == keccak256(a + b)


def test_hex_helpers():
    assert from_hex("0xABcd") == b"\xab\xcd"
    assert from_hex("abcd") == b"\xab\xcd"
    assert to_hex(b"\x00\xff") == "0x00ff"
    with pytest.raises(ValidationError):
        from_hex("0xabc")
    with pytest.raises(ValidationError):
        from_hex("0xzz")
