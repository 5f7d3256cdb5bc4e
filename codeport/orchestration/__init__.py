"""
Conversation and convergence loops.

The conversation loop alternates model turns with tool dispatches until the
model stops calling tools; the convergence loop wraps it with build checks.
"""

from .tool_defs import build_tool_definitions, to_openai_tool
from .conversation import Conversation
from .convergence import ConvergenceLoop, ConvergenceResult, ConvergenceStatus

__all__ = [
    "build_tool_definitions",
    "to_openai_tool",
    "Conversation",
    "ConvergenceLoop",
    "ConvergenceResult",
    "ConvergenceStatus",
]
