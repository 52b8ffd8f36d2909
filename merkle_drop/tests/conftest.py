# -*- coding: utf-8 -*-
"""
merkle_drop.tests.conftest
==========================

Fixtures for the drop engine:

- deterministic accounts (sha3-derived 20-byte addresses, stable across runs)
- a fresh in-memory Host per test
- a token + controller pair owned by `owner`
- `make_drop(allocations)` → (Distribution, funded DropController)

Usage:
    def test_flow(drop_env, accounts):
        dist, drop = drop_env.make_drop({accounts["alice"]: 10})
        c = dist.claim_for(accounts["alice"])
        drop.claim(accounts["alice"], c.amount, dist.merkle_root, c.proof)
"""
from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

import pytest

from merkle_drop.config import load_config
from merkle_drop.controller import DropController
from merkle_drop.runtime.host import Host
from merkle_drop.runtime.token import FungibleToken
from merkle_drop.tree import Allocation, Distribution, build_distribution

# Keep dict/set hash-iteration stable.
os.environ.setdefault("PYTHONHASHSEED", "0")


def det_address(tag: str) -> bytes:
    """Stable 20-byte address from a tag."""
    return hashlib.sha3_256(tag.encode("utf-8")).digest()[:20]


ACCOUNT_TAGS = ("owner", "alice", "bob", "carol", "dave", "eve", "relayer")


@pytest.fixture
def accounts() -> Dict[str, bytes]:
    return {tag: det_address(tag) for tag in ACCOUNT_TAGS}


@pytest.fixture
def wallets(accounts) -> Tuple[bytes, ...]:
    """Four recipients, in a fixed order."""
    return (accounts["alice"], accounts["bob"], accounts["carol"], accounts["dave"])


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch):
    for k in list(os.environ):
        if k.startswith("MERKLE_DROP_") and k != "MERKLE_DROP_VERSION":
            monkeypatch.delenv(k, raising=False)
    load_config.cache_clear()
    yield
    load_config.cache_clear()


@pytest.fixture
def host() -> Host:
    return Host()


@pytest.fixture
def owner(accounts) -> bytes:
    return accounts["owner"]


@pytest.fixture
def token(host, owner) -> FungibleToken:
    return FungibleToken.deploy(host, owner=owner, name=b"Drop Token", symbol=b"DRP")


@pytest.fixture
def drop(host, token, owner) -> DropController:
    return DropController.deploy(host, token=token, owner=owner)


@dataclass
class DropEnv:
    host: Host
    token: FungibleToken
    drop: DropController
    owner: bytes

    def distribution(self, allocations: Mapping[Any, int]) -> Distribution:
        return build_distribution(
            [Allocation.of(a, v) for a, v in allocations.items()],
            self.drop.commitment,
        )

    def fund(self, amount: int) -> None:
        self.token.mint(self.owner, self.drop, amount)

    def publish(self, allocations: Mapping[Any, int], deposit: Optional[int] = None) -> Distribution:
        """Build, fund (deposit defaults to the table total) and set the root."""
        dist = self.distribution(allocations)
        self.fund(dist.token_total if deposit is None else deposit)
        self.drop.set_merkle_root(self.owner, dist.merkle_root)
        return dist

    def claim(self, dist: Distribution, account: Any) -> int:
        c = dist.claim_for(account)
        return self.drop.claim(account, c.amount, dist.merkle_root, c.proof)

    def make_drop(self, allocations: Mapping[Any, int], deposit: Optional[int] = None):
        return self.publish(allocations, deposit), self.drop


@pytest.fixture
def drop_env(host, token, drop, owner) -> DropEnv:
    return DropEnv(host=host, token=token, drop=drop, owner=owner)
