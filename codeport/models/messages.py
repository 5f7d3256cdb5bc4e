"""
Conversation data models.

Defines the transcript message and the tool invocation request carried by
assistant replies, plus their conversion to the OpenAI chat format.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class Role(Enum):
    """Author of a conversation message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


@dataclass(frozen=True)
class ToolInvocation:
    """A tool call requested by the model.

    ``arguments`` is the raw, untrusted payload exactly as the model sent it.
    ``id`` pairs the call with its result message on the wire.
    """

    name: str
    arguments: str = ""
    id: Optional[str] = None

    def to_openai(self) -> dict:
        """Convert to an OpenAI ``tool_calls`` entry."""
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


@dataclass
class ConversationMessage:
    """A single message in the transcript."""

    role: Role
    content: Optional[str] = None
    tool_invocation: Optional[ToolInvocation] = None
    tool_name: Optional[str] = None
    tool_call_id: Optional[str] = None

    @classmethod
    def system(cls, content: str) -> "ConversationMessage":
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "ConversationMessage":
        return cls(role=Role.USER, content=content)

    @classmethod
    def tool_result(
        cls, tool_name: str, content: str, tool_call_id: Optional[str] = None
    ) -> "ConversationMessage":
        return cls(
            role=Role.TOOL,
            content=content,
            tool_name=tool_name,
            tool_call_id=tool_call_id,
        )

    @property
    def has_tool_invocation(self) -> bool:
        return self.tool_invocation is not None

    def to_openai(self) -> dict[str, Any]:
        """Convert to the dict shape accepted by ``chat.completions.create``."""
        message: dict[str, Any] = {"role": self.role.value, "content": self.content}
        if self.role is Role.ASSISTANT and self.tool_invocation is not None:
            message["tool_calls"] = [self.tool_invocation.to_openai()]
        if self.role is Role.TOOL:
            message["content"] = self.content or ""
            if self.tool_call_id:
                message["tool_call_id"] = self.tool_call_id
        return message
