"""Unified client error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``llmlab.base.errors_parts`` to keep a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.agent_error import AgentError
from .errors_parts.classification import classify_exception, code_for_status

__all__ = ["ErrorCode", "AgentError", "classify_exception", "code_for_status"]
