"""merkle_drop.version — installed package version, overridable via MERKLE_DROP_VERSION."""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import metadata as importlib_metadata

# Bump when the leaf encoding, proof format or event layout changes.
BASE_VERSION = "0.1.0"

DIST_NAME = "merkle-drop"


@lru_cache(maxsize=1)
def compute_version() -> str:
    val = os.getenv("MERKLE_DROP_VERSION")
    if val:
        return val
    try:
        return importlib_metadata.version(DIST_NAME)
    except importlib_metadata.PackageNotFoundError:
        return f"{BASE_VERSION}+dev"


__version__ = compute_version()

__all__ = ["__version__", "BASE_VERSION", "compute_version"]
