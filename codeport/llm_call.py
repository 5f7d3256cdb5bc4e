"""
LLM Call Interface for codeport

Sends the transcript and tool definitions to an OpenAI-compatible
chat-completion endpoint and converts the reply into a transcript message.
"""

import logging
import uuid
from typing import Any, Optional

from openai import OpenAI, OpenAIError

from .errors import ModelTransportError
from .models.config import ModelConfig
from .models.messages import ConversationMessage, Role, ToolInvocation

logger = logging.getLogger(__name__)


def message_from_completion(message: Any) -> ConversationMessage:
    """Convert an SDK ``ChatCompletionMessage`` into a transcript message.

    Only the first tool call is kept: the loop dispatches one invocation per
    turn, and every recorded invocation must receive a result.
    """
    invocation = None
    tool_calls = getattr(message, "tool_calls", None) or []
    if tool_calls:
        if len(tool_calls) > 1:
            logger.warning(
                f"Model requested {len(tool_calls)} tool calls, "
                f"dispatching only '{tool_calls[0].function.name}'"
            )
        call = tool_calls[0]
        invocation = ToolInvocation(
            name=call.function.name,
            arguments=call.function.arguments or "",
            id=call.id,
        )
    else:
        # Legacy ``function_call`` replies carry no id; the tool result needs one
        function_call = getattr(message, "function_call", None)
        if function_call is not None:
            invocation = ToolInvocation(
                name=function_call.name,
                arguments=function_call.arguments or "",
                id=f"call_{uuid.uuid4().hex}",
            )

    return ConversationMessage(
        role=Role.ASSISTANT,
        content=message.content,
        tool_invocation=invocation,
    )


class LLMClient:
    """Chat-completion client for the model driving the session."""

    def __init__(
        self,
        model_config: Optional[ModelConfig] = None,
        client: Optional[OpenAI] = None,
    ):
        self.config = model_config or ModelConfig()
        self.model = self.config.model
        if client is None:
            try:
                client = OpenAI(
                    base_url=self.config.base_url,
                    api_key=self.config.api_key,
                    timeout=self.config.timeout,
                )
            except OpenAIError as e:
                raise ModelTransportError(str(e), model=self.model) from e
        self._client = client
        self.last_usage: Optional[Any] = None

    def build_request(
        self, messages: list[ConversationMessage], tools: list[dict]
    ) -> dict[str, Any]:
        """Build the keyword arguments for ``chat.completions.create``."""
        create_kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_openai() for m in messages],
        }
        if tools:
            create_kwargs["tools"] = tools
            create_kwargs["parallel_tool_calls"] = False
        if self.config.temperature is not None:
            create_kwargs["temperature"] = self.config.temperature
        return create_kwargs

    def chat(
        self, messages: list[ConversationMessage], tools: list[dict]
    ) -> ConversationMessage:
        """
        Send the transcript and return the model's reply.

        Raises:
            ModelTransportError: If the request fails or returns no choices.
        """
        create_kwargs = self.build_request(messages, tools)
        logger.debug(
            f"Calling {self.model} with {len(messages)} messages and {len(tools)} tools"
        )
        try:
            response = self._client.chat.completions.create(**create_kwargs)
        except OpenAIError as e:
            logger.error(f"Chat completion call to {self.model} failed: {e}")
            raise ModelTransportError(str(e), model=self.model) from e

        if not response.choices:
            raise ModelTransportError("Response contained no choices", model=self.model)

        self.last_usage = getattr(response, "usage", None)
        return message_from_completion(response.choices[0].message)

    def close(self) -> None:
        """Close the underlying OpenAI client."""
        try:
            self._client.close()
        except Exception as e:
            logger.debug(f"Error closing OpenAI client: {e}")
