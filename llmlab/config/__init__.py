"""Client configuration layer.

Goals
-----
* Resolve every setting once, at client construction, into an immutable
  :class:`ClientConfig`; nothing reads module-level state afterwards.
* Merge sources in a predictable order (later wins):
    1. Built-in defaults
    2. Optional JSON config file pointed to by ``LLMLAB_CONFIG_FILE``
    3. Environment variables (``LLMLAB_API_KEY``, ``LLMLAB_BASE_URL``, ...)
    4. In-code overrides (``None`` values are ignored)

External Config File (Optional)
-------------------------------
::

    {
      "api_key": "...",
      "base_url": "https://launch-api.com",
      "classification": "structured",
      "timeouts": {"connect_timeout_seconds": 5, "stream_read_timeout_seconds": 120}
    }

A ``.env`` file (``DOTENV_FILE``, default ``.env``) is read once per process.
It never overrides variables that already hold real values.

Public API
----------
* ClientConfig
* get_client_config(overrides: dict | None = None) -> ClientConfig
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional
import json
import os

from ..base.constants import CLASSIFICATION_MODES
from ..base.errors import AgentError, ErrorCode
from ..base.timeouts import TimeoutConfig, get_timeout_config
from .defaults import (
    DEFAULT_BASE_URL,
    DEFAULT_CLASSIFICATION,
    DEFAULT_COMPLETIONS_PATH,
    DEFAULT_ENCODING,
)
from .env import CONFIG_FILE_ENV, env_overrides, is_placeholder


@dataclass(frozen=True)
class ClientConfig:
    """Immutable settings of one :class:`AgentClient`.

    Attributes:
        api_key: Sent as the ``apikey`` header; never logged.
        base_url: API base URL.
        completions_path: Chat completions path, relative to ``base_url``.
        timeouts: Transport timeouts.
        classification: Frame classification mode (``structured``/``substring``).
        encoding: Text encoding of the frame stream.
    """

    api_key: Optional[str] = field(default=None, repr=False)
    base_url: str = DEFAULT_BASE_URL
    completions_path: str = DEFAULT_COMPLETIONS_PATH
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    classification: str = DEFAULT_CLASSIFICATION
    encoding: str = DEFAULT_ENCODING

    def __post_init__(self) -> None:
        if self.classification not in CLASSIFICATION_MODES:
            raise AgentError(
                code=ErrorCode.VALIDATION,
                message=f"classification must be one of {CLASSIFICATION_MODES}, got {self.classification!r}",
            )

    def with_overrides(self, **overrides: Any) -> "ClientConfig":
        """Return a copy with the non-``None`` overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


_DOTENV_LOADED = False


def _load_dotenv_once() -> None:
    """Lightweight .env loader.

    Parses KEY=VALUE lines, ignoring comments and blank lines. Overrides
    existing environment variables only if their current values appear to be
    placeholders.
    """
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    _DOTENV_LOADED = True
    path = os.getenv("DOTENV_FILE", ".env")
    if not os.path.isfile(path):
        return
    with open(path, "r", encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            k, v = line.split("=", 1)
            k = k.strip()
            v = v.strip().strip('"').strip("'")
            if k and (k not in os.environ or is_placeholder(os.environ.get(k))):
                os.environ[k] = v


def _load_external_config() -> Dict[str, Any]:
    path = os.getenv(CONFIG_FILE_ENV)
    if not path:
        return {}
    p = Path(path)
    if not p.is_file():
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise AgentError(
            code=ErrorCode.VALIDATION,
            message=f"invalid JSON in {CONFIG_FILE_ENV}={path}: {e}",
        ) from e
    return data if isinstance(data, dict) else {}


def _timeouts_from(base: TimeoutConfig, raw: Any) -> TimeoutConfig:
    if isinstance(raw, TimeoutConfig):
        return raw
    if not isinstance(raw, dict):
        return base
    known = {f.name for f in fields(TimeoutConfig)}
    return replace(base, **{k: v for k, v in raw.items() if k in known})


def get_client_config(overrides: Optional[Dict[str, Any]] = None) -> ClientConfig:
    """Return the merged :class:`ClientConfig`.

    Merge order (later wins): defaults -> config file -> env vars -> overrides.
    Unknown keys in the config file are ignored.
    """
    _load_dotenv_once()
    known = {f.name for f in fields(ClientConfig)}
    merged: Dict[str, Any] = {}
    timeouts = get_timeout_config()

    file_cfg = _load_external_config()
    timeouts = _timeouts_from(timeouts, file_cfg.get("timeouts"))
    merged |= {k: v for k, v in file_cfg.items() if k in known and k != "timeouts" and v is not None}

    merged |= env_overrides()

    if overrides:
        timeouts = _timeouts_from(timeouts, overrides.get("timeouts"))
        merged |= {k: v for k, v in overrides.items() if k in known and k != "timeouts" and v is not None}

    base_url = str(merged.pop("base_url", DEFAULT_BASE_URL)).rstrip("/")
    return ClientConfig(base_url=base_url, timeouts=timeouts, **merged)


__all__ = [
    "ClientConfig",
    "get_client_config",
]
