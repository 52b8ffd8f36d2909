# -*- coding: utf-8 -*-
"""
Which root a claim may be proven against.

PERMISSIVE (default): any root the proof verifies under is accepted, so a
proof from an earlier epoch stays usable after the root is replaced.
CURRENT: only the stored root is accepted.
"""
from __future__ import annotations

import pytest

from merkle_drop.controller import DropController, RootPolicy
from merkle_drop.errors import RootMismatch

from .conftest import DropEnv


def _env(host, token, owner, policy) -> DropEnv:
    drop = DropController.deploy(host, token=token, owner=owner, root_policy=policy)
    return DropEnv(host=host, token=token, drop=drop, owner=owner)


def test_default_policy_is_permissive(drop):
    assert drop.root_policy is RootPolicy.PERMISSIVE


def test_permissive_accepts_stale_root(drop_env, wallets):
    first = drop_env.publish({wallets[0]: 1, wallets[1]: 2})
    drop_env.publish({wallets[0]: 3, wallets[1]: 5})
    assert drop_env.claim(first, wallets[0]) == 1
    assert drop_env.drop.cumulative_claimed(wallets[0]) == 1


def test_permissive_accepts_root_never_published(drop_env, wallets):
    drop_env.fund(7)
    unpublished = drop_env.distribution({wallets[0]: 7, wallets[1]: 1})
    assert drop_env.claim(unpublished, wallets[0]) == 7


def test_current_rejects_stale_root(host, token, owner, wallets):
    env = _env(host, token, owner, RootPolicy.CURRENT)
    first = env.publish({wallets[0]: 1, wallets[1]: 2})
    second = env.publish({wallets[0]: 3, wallets[1]: 5})

    with pytest.raises(RootMismatch) as ei:
        env.claim(first, wallets[0])
    assert ei.value.code == "MerkleRootWasUpdated"
    assert env.drop.cumulative_claimed(wallets[0]) == 0

    assert env.claim(second, wallets[0]) == 3


def test_current_rejects_before_first_root(host, token, owner, wallets):
    env = _env(host, token, owner, "current")
    env.fund(5)
    dist = env.distribution({wallets[0]: 5})
    with pytest.raises(RootMismatch):
        env.claim(dist, wallets[0])


def test_policy_from_environment(monkeypatch, host, token, owner):
    from merkle_drop.config import load_config
    from merkle_drop.runtime.host import Host

    monkeypatch.setenv("MERKLE_DROP_ROOT_POLICY", "CURRENT")
    load_config.cache_clear()
    h = Host()
    t = type(token).deploy(h, owner=owner)
    drop = DropController.deploy(h, token=t, owner=owner)
    assert drop.root_policy is RootPolicy.CURRENT


def test_explicit_policy_overrides_environment(monkeypatch, owner):
    from merkle_drop.config import load_config
    from merkle_drop.runtime.host import Host
    from merkle_drop.runtime.token import FungibleToken

    monkeypatch.setenv("MERKLE_DROP_ROOT_POLICY", "current")
    load_config.cache_clear()
    h = Host()
    t = FungibleToken.deploy(h, owner=owner)
    drop = DropController.deploy(h, token=t, owner=owner, root_policy=RootPolicy.PERMISSIVE)
    assert drop.root_policy is RootPolicy.PERMISSIVE
