"""
Conversation loop.

Owns the transcript of one session. Each turn sends the full transcript and
the registry's tool definitions to the model and appends the reply. A reply
that requests a tool is dispatched and its result appended before the model
is asked again; a reply without a tool invocation ends the loop.
"""

import json
import logging
from typing import Callable, Optional

from ..errors import DispatchError
from ..llm_call import LLMClient
from ..models.messages import ConversationMessage, ToolInvocation
from ..tools.registry import ToolRegistry
from ..tracing import TracingContext
from .tool_defs import build_tool_definitions

logger = logging.getLogger(__name__)

MessageCallback = Callable[[ConversationMessage], None]


class Conversation:
    """
    Multi-turn conversation with tool dispatch.

    Per-turn flow:
        1. Send transcript + tool definitions to the model
        2. Append the reply verbatim
        3. If it carries a tool invocation: dispatch, append the tool
           message, go to 1
        4. Otherwise: done

    Dispatch errors halt the run unless ``report_dispatch_errors`` is set,
    in which case they are returned to the model as a tool result.
    """

    def __init__(
        self,
        llm_client: LLMClient,
        registry: ToolRegistry,
        messages: Optional[list[ConversationMessage]] = None,
        echo: Optional[MessageCallback] = None,
        tracing_context: Optional[TracingContext] = None,
        report_dispatch_errors: bool = False,
    ):
        self.llm_client = llm_client
        self.registry = registry
        self.messages: list[ConversationMessage] = []
        self.echo = echo
        self.tracing_context = tracing_context
        self.report_dispatch_errors = report_dispatch_errors
        self.turns = 0
        for message in messages or []:
            self._append(message)

    def _append(self, message: ConversationMessage) -> None:
        self.messages.append(message)
        logger.debug(f"{message.role.value}: {message!r}")
        if self.echo is not None:
            self.echo(message)

    def send_message(self, text: str) -> ConversationMessage:
        """
        Append a user message and run the loop until the model stops
        requesting tools.

        Returns:
            The final assistant reply (the one without a tool invocation).
        """
        self._append(ConversationMessage.user(text))
        return self.execute()

    def execute(self) -> ConversationMessage:
        """Run model turns until a reply carries no tool invocation."""
        while True:
            reply = self._call_model()
            self._append(reply)

            if not reply.has_tool_invocation:
                return reply

            self._append(self._dispatch(reply.tool_invocation))

    def _call_model(self) -> ConversationMessage:
        self.turns += 1
        tools = build_tool_definitions(self.registry)

        if self.tracing_context is None:
            return self.llm_client.chat(self.messages, tools)

        with self.tracing_context.generation(
            name=f"turn_{self.turns}",
            model=self.llm_client.model,
            input=[m.to_openai() for m in self.messages],
        ) as gen:
            try:
                reply = self.llm_client.chat(self.messages, tools)
            except Exception:
                gen.set_status("error")
                raise
            gen.set_output(reply.to_openai())
            usage = self.llm_client.last_usage
            if usage is not None:
                gen.set_usage(
                    prompt_tokens=getattr(usage, "prompt_tokens", None),
                    completion_tokens=getattr(usage, "completion_tokens", None),
                    total_tokens=getattr(usage, "total_tokens", None),
                )
            return reply

    def _dispatch(self, invocation: ToolInvocation) -> ConversationMessage:
        logger.info(f"Turn {self.turns}: calling tool '{invocation.name}'")

        if self.tracing_context is None:
            return self._dispatch_or_report(invocation)

        with self.tracing_context.span(
            name=f"tool:{invocation.name}",
            input={"arguments": invocation.arguments[:500]},
        ) as span:
            try:
                message = self._dispatch_or_report(invocation)
            except DispatchError:
                span.set_status("error")
                raise
            content = message.content or ""
            span.set_output({"result": content[:500]})
            return message

    def _dispatch_or_report(self, invocation: ToolInvocation) -> ConversationMessage:
        try:
            return self.registry.dispatch(invocation)
        except DispatchError as e:
            if not self.report_dispatch_errors:
                logger.error(f"Dispatch of '{invocation.name}' failed: {e}")
                raise
            logger.warning(f"Reporting dispatch error to the model: {e}")
            return ConversationMessage.tool_result(
                tool_name=invocation.name,
                content=json.dumps({"error": str(e)}),
                tool_call_id=invocation.id,
            )
