"""Environment-driven configuration for the selection engine."""

from __future__ import annotations

import os
import random
from typing import Optional

from dotenv import load_dotenv

# Ensure environment variables from .env are loaded when this module is imported.
load_dotenv()

DEFAULT_APP_VERSION = "0.0.0"


def current_app_version(override: Optional[str] = None) -> str:
    """Return the application version used to gate strategy plugins.

    ``override`` wins over ``FAIRPICK_APP_VERSION``; when neither is set the
    version defaults to ``"0.0.0"``.
    """
    return override or os.getenv("FAIRPICK_APP_VERSION") or DEFAULT_APP_VERSION


def random_seed() -> Optional[int]:
    """Return the integer seed configured by ``FAIRPICK_RANDOM_SEED``, if any."""
    raw = os.getenv("FAIRPICK_RANDOM_SEED")
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ValueError(
            f"Environment variable 'FAIRPICK_RANDOM_SEED' must be an integer, got {raw!r}"
        ) from exc


def make_default_random() -> random.Random:
    """Create the shared pseudo-random generator used when a request has none."""
    return random.Random(random_seed())
