"""llmlab.config.defaults
=====================

Central place for small, stable default values used by the client and the
CLI. They can be overridden via a config file, environment variables or
explicit constructor arguments.

This module intentionally avoids importing from other llmlab packages to
prevent circular dependencies. Only plain constants live here.
"""

from __future__ import annotations

# ---- Endpoint ----
DEFAULT_BASE_URL = "https://launch-api.com"
DEFAULT_COMPLETIONS_PATH = "/v1/chat/completions"

# ---- Stream decoding ----
DEFAULT_CLASSIFICATION = "structured"
DEFAULT_ENCODING = "utf-8"

# ---- CLI ----
CLI_DEFAULT_LOG_LEVEL = "WARNING"

__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_COMPLETIONS_PATH",
    "DEFAULT_CLASSIFICATION",
    "DEFAULT_ENCODING",
    "CLI_DEFAULT_LOG_LEVEL",
]
