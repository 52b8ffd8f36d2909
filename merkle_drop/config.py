"""
merkle_drop.config — hash selection, claim root policy, and numeric caps.

This module centralizes configuration for the drop engine. It has NO
third-party deps and is safe to import very early.

Configuration precedence:
  1) Explicit constructor arguments (e.g. DropController(root_policy=...))
  2) Environment variables (MERKLE_DROP_*)
  3) Hardcoded safe defaults below

Key env vars (case-insensitive where boolean / enum):
  - MERKLE_DROP_HASH                (str)   default: keccak256
  - MERKLE_DROP_ROOT_POLICY         (str)   default: permissive   (permissive|current)
  - MERKLE_DROP_MAX_PROOF_DEPTH     (int)   default: 256
  - MERKLE_DROP_MAX_EVENTS_PER_TX   (int)   default: 1024
  - MERKLE_DROP_LOG_LEVEL           (str)   default: WARNING

Usage:
    from merkle_drop.config import load_config
    CFG = load_config()
    if CFG.root_policy == "current": ...
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict

HASH_CHOICES = ("keccak256", "sha3_256", "sha256")
ROOT_POLICY_CHOICES = ("permissive", "current")
LOG_LEVEL_CHOICES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ----------------------------- helpers ---------------------------------------


def _env_choice(name: str, default: str, choices: tuple, *, upper: bool = False) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip()
    val = val.upper() if upper else val.lower()
    return val if val in choices else default


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class DropConfig:
    # Hash used for leaves and inner nodes; must match the tree builder.
    hash_name: str

    # Whether claim() accepts any verifying root or only the stored one.
    root_policy: str

    # Numeric caps
    max_proof_depth: int
    max_events_per_tx: int

    log_level: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "hash_name": self.hash_name,
            "root_policy": self.root_policy,
            "max_proof_depth": self.max_proof_depth,
            "max_events_per_tx": self.max_events_per_tx,
            "log_level": self.log_level,
        }


@lru_cache(maxsize=1)
def load_config() -> DropConfig:
    """
    Build and cache a DropConfig from environment + safe defaults.
    """
    return DropConfig(
        hash_name=_env_choice("MERKLE_DROP_HASH", "keccak256", HASH_CHOICES),
        root_policy=_env_choice("MERKLE_DROP_ROOT_POLICY", "permissive", ROOT_POLICY_CHOICES),
        max_proof_depth=_env_int("MERKLE_DROP_MAX_PROOF_DEPTH", 256, min_v=1, max_v=256),
        max_events_per_tx=_env_int("MERKLE_DROP_MAX_EVENTS_PER_TX", 1024, min_v=1, max_v=10_000),
        log_level=_env_choice("MERKLE_DROP_LOG_LEVEL", "WARNING", LOG_LEVEL_CHOICES, upper=True),
    )


CFG: DropConfig = load_config()

__all__ = [
    "DropConfig",
    "load_config",
    "CFG",
    "HASH_CHOICES",
    "ROOT_POLICY_CHOICES",
]
