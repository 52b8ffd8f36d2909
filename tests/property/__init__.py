# -*- coding: utf-8 -*-
"""
Hypothesis profiles for the drop engine's property tests.

Selects the active profile from HYPOTHESIS_PROFILE, otherwise "ci" when a
CI env var is truthy and "dev" locally.

Environment knobs:
- HYPOTHESIS_PROFILE=dev|ci|fast
- CI=true
"""
from __future__ import annotations

import os
from typing import Final

from hypothesis import HealthCheck, settings

# Every example deploys contracts on a fresh host; deadlines only add flakiness.
settings.register_profile(
    "dev",
    settings(
        max_examples=60,
        deadline=None,
        suppress_health_check=(HealthCheck.too_slow,),
    ),
)

settings.register_profile(
    "ci",
    settings(
        max_examples=150,
        deadline=None,
        suppress_health_check=(HealthCheck.too_slow, HealthCheck.filter_too_much),
        derandomize=True,
    ),
)

settings.register_profile(
    "fast",
    settings(max_examples=15, deadline=None, suppress_health_check=(HealthCheck.too_slow,)),
)


def _env_truthy(name: str) -> bool:
    return (os.getenv(name) or "").lower() not in ("", "0", "false", "no", "off")


_active: Final[str] = os.getenv("HYPOTHESIS_PROFILE") or ("ci" if _env_truthy("CI") else "dev")
settings.load_profile(_active)
