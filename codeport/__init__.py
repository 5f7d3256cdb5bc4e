"""
codeport - LLM-driven project translation

This package provides:
- A typed tool registry that dispatches model-issued tool calls
- A conversation loop over an OpenAI-compatible chat endpoint
- A convergence loop that feeds build-check diagnostics back to the model
- A command line interface
"""

from .tools import ToolRegistry
from .orchestration import Conversation, ConvergenceLoop
from .llm_call import LLMClient
from .session import TranslationSession

__all__ = [
    "ToolRegistry",
    "Conversation",
    "ConvergenceLoop",
    "LLMClient",
    "TranslationSession",
]

__version__ = "0.1.0"
