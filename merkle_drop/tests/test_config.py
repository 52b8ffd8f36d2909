from __future__ import annotations

from merkle_drop import config as cfg_mod
from merkle_drop.config import load_config


def _reload(monkeypatch, **env):
    for k, v in env.items():
        monkeypatch.setenv(k, v)
    load_config.cache_clear()
    return load_config()


def test_defaults():
    cfg = load_config()
    assert cfg.as_dict() == {
        "hash_name": "keccak256",
        "root_policy": "permissive",
        "max_proof_depth": 256,
        "max_events_per_tx": 1024,
        "log_level": "WARNING",
    }


def test_env_overrides(monkeypatch):
    cfg = _reload(
        monkeypatch,
        MERKLE_DROP_HASH="SHA256",
        MERKLE_DROP_ROOT_POLICY="current",
        MERKLE_DROP_MAX_PROOF_DEPTH="0x20",
        MERKLE_DROP_LOG_LEVEL="debug",
    )
    assert cfg.hash_name == "sha256"
    assert cfg.root_policy == "current"
    assert cfg.max_proof_depth == 32
    assert cfg.log_level == "DEBUG"


def test_bad_values_fall_back_or_clamp(monkeypatch):
    cfg = _reload(
        monkeypatch,
        MERKLE_DROP_HASH="md5",
        MERKLE_DROP_ROOT_POLICY="sometimes",
        MERKLE_DROP_MAX_PROOF_DEPTH="100000",
        MERKLE_DROP_MAX_EVENTS_PER_TX="nope",
    )
    assert cfg.hash_name == "keccak256"
    assert cfg.root_policy == "permissive"
    assert cfg.max_proof_depth == 256
    assert cfg.max_events_per_tx == 1024


def test_config_is_cached():
    assert load_config() is load_config()
    assert isinstance(cfg_mod.CFG, cfg_mod.DropConfig)


def test_version_resolution(monkeypatch):
    from merkle_drop import version as version_mod
    from merkle_drop.version import BASE_VERSION, compute_version

    def _not_installed(name):
        raise version_mod.importlib_metadata.PackageNotFoundError(name)

    monkeypatch.setenv("MERKLE_DROP_VERSION", "9.9.9")
    compute_version.cache_clear()
    try:
        assert compute_version() == "9.9.9"
        monkeypatch.delenv("MERKLE_DROP_VERSION")
        compute_version.cache_clear()
        monkeypatch.setattr(version_mod.importlib_metadata, "version", _not_installed)
        assert compute_version() == f"{BASE_VERSION}+dev"
    finally:
        compute_version.cache_clear()
