"""Base shared constants for the agent client.

Central location for wire-protocol literals so that the decoder, the request
builder and the tests agree on a single spelling.

Security
--------
This module contains only generic sentinel strings. There are no credentials
or tokens embedded.

# pragma: allowlist secret
"""
from __future__ import annotations

# Header carrying the API key
API_KEY_HEADER = "apikey"

# Streaming frame protocol
FRAME_PREFIX = "data: "
END_SENTINEL = "undefined"
STATUS_CODE_KEY = "statusCode"

# Frame classification modes
CLASSIFY_STRUCTURED = "structured"
CLASSIFY_SUBSTRING = "substring"
CLASSIFICATION_MODES = (CLASSIFY_STRUCTURED, CLASSIFY_SUBSTRING)

# Missing credential sentinel
MISSING_API_KEY_ERROR = "missing_api_key"  # pragma: allowlist secret - generic placeholder string, not a real secret

__all__ = [
    "API_KEY_HEADER",
    "FRAME_PREFIX",
    "END_SENTINEL",
    "STATUS_CODE_KEY",
    "CLASSIFY_STRUCTURED",
    "CLASSIFY_SUBSTRING",
    "CLASSIFICATION_MODES",
    "MISSING_API_KEY_ERROR",
]
