"""
Exception hierarchy for codeport.

Dispatch errors describe a model-issued tool invocation that could not be
carried out. Host-level failures (a file that cannot be read, a bad path)
are never raised; they travel back to the model as ordinary tool results.
"""

from typing import Optional


class CodeportError(Exception):
    """Base class for all codeport errors."""


class ConfigError(CodeportError, ValueError):
    """Invalid or inconsistent configuration."""


class DuplicateToolError(CodeportError, ValueError):
    """A tool with the same name is already registered."""

    def __init__(self, name: str):
        super().__init__(f"Tool '{name}' is already registered")
        self.name = name


class DispatchError(CodeportError):
    """A tool invocation could not be dispatched."""

    def __init__(self, tool_name: str, message: str):
        super().__init__(message)
        self.tool_name = tool_name


class ToolNotFound(DispatchError):
    """The model referenced a tool that is not registered."""

    def __init__(self, tool_name: str):
        super().__init__(tool_name, f"Tool '{tool_name}' not found")


class ArgumentDecodeError(DispatchError):
    """The raw argument payload does not match the tool's argument shape."""

    def __init__(self, tool_name: str, detail: str):
        super().__init__(
            tool_name, f"Failed to decode arguments for '{tool_name}': {detail}"
        )
        self.detail = detail


class ResultEncodeError(DispatchError):
    """The host function returned a value that cannot be encoded."""

    def __init__(self, tool_name: str, detail: str):
        super().__init__(
            tool_name, f"Failed to encode result of '{tool_name}': {detail}"
        )
        self.detail = detail


class ModelTransportError(CodeportError):
    """The chat-completion endpoint call failed."""

    def __init__(self, message: str, model: Optional[str] = None):
        super().__init__(message)
        self.model = model


class BuildCheckError(CodeportError):
    """The build-check command could not be run."""
