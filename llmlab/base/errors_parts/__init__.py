"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `llmlab.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .agent_error import AgentError
from .classification import classify_exception, code_for_status

__all__ = ["ErrorCode", "AgentError", "classify_exception", "code_for_status"]
