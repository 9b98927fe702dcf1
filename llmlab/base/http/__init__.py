"""HTTP utilities package for the agent client.

Exposes the ``httpx`` client factory and HTTP error translation.
"""

from .client import build_httpx_client, http_error

__all__ = ["build_httpx_client", "http_error"]
