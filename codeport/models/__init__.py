"""
Data models for codeport.
"""

from .messages import Role, ToolInvocation, ConversationMessage
from .config import (
    ModelConfig,
    BuildCheckConfig,
    ConvergenceConfig,
    LoggingConfig,
    LangfuseConfig,
    AppConfig,
)

__all__ = [
    # Conversation models
    "Role",
    "ToolInvocation",
    "ConversationMessage",
    # Config models
    "ModelConfig",
    "BuildCheckConfig",
    "ConvergenceConfig",
    "LoggingConfig",
    "LangfuseConfig",
    "AppConfig",
]
