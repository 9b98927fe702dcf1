"""llmlab.config.env
=================

Environment variable names and small lookup helpers.

Design Notes
------------
- ``ENV_FIELD_MAP`` maps ``ClientConfig`` field names to the variables that
  override them; everything is prefixed with ``LLMLAB_``.
- Helpers never raise on unset variables; callers decide how to proceed.
"""

from __future__ import annotations

import os
from typing import Dict, Optional

ENV_PREFIX = "LLMLAB_"

ENV_FIELD_MAP: Dict[str, str] = {
    "api_key": "LLMLAB_API_KEY",  # pragma: allowlist secret - env var name, not a secret
    "base_url": "LLMLAB_BASE_URL",
    "completions_path": "LLMLAB_COMPLETIONS_PATH",
    "classification": "LLMLAB_FRAME_CLASSIFICATION",
    "encoding": "LLMLAB_STREAM_ENCODING",
}

CONFIG_FILE_ENV = "LLMLAB_CONFIG_FILE"


def is_placeholder(val: Optional[str]) -> bool:
    """Return True if the provided string looks like a placeholder/test value.

    Heuristics: contains 'placeholder', 'changeme' or 'your apikey'
    (case-insensitive).
    """
    if val is None:
        return False
    v = str(val).strip().lower()
    return "placeholder" in v or "changeme" in v or "your apikey" in v


def env_overrides() -> Dict[str, str]:
    """Return the ``ClientConfig`` fields set through the environment."""
    out: Dict[str, str] = {}
    for field, name in ENV_FIELD_MAP.items():
        val = os.getenv(name)
        if val is not None and val.strip():
            out[field] = val.strip()
    return out


__all__ = [
    "ENV_PREFIX",
    "ENV_FIELD_MAP",
    "CONFIG_FILE_ENV",
    "is_placeholder",
    "env_overrides",
]
