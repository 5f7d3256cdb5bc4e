"""Tests for the conversation loop."""

import json
from unittest.mock import MagicMock

import pytest
from pydantic import BaseModel

from codeport.errors import ArgumentDecodeError, ModelTransportError, ToolNotFound
from codeport.models.messages import ConversationMessage, Role, ToolInvocation
from codeport.orchestration.conversation import Conversation
from codeport.tools.registry import ToolRegistry


class Greeting(BaseModel):
    message: str


def _assistant(content=None, tool=None, arguments="", call_id=None):
    """Build an assistant reply, optionally carrying a tool invocation."""
    invocation = None
    if tool is not None:
        invocation = ToolInvocation(name=tool, arguments=arguments, id=call_id)
    return ConversationMessage(
        role=Role.ASSISTANT, content=content, tool_invocation=invocation
    )


@pytest.fixture
def registry():
    registry = ToolRegistry()
    registry.register("hello", "Say hello.", lambda: Greeting(message="Hello"))
    return registry


class TestTermination:
    """The loop ends exactly on a reply without a tool invocation."""

    def test_plain_reply_ends_immediately(self, make_llm, registry):
        llm = make_llm(_assistant("Nothing to do."))
        conversation = Conversation(llm, registry)

        reply = conversation.send_message("Hi")

        assert reply.content == "Nothing to do."
        assert conversation.turns == 1
        assert [m.role for m in conversation.messages] == [Role.USER, Role.ASSISTANT]

    def test_keeps_dispatching_while_tools_are_requested(self, make_llm, registry):
        replies = [_assistant(tool="hello", call_id=f"call_{i}") for i in range(5)]
        llm = make_llm(*replies, _assistant("All done."))
        conversation = Conversation(llm, registry)

        reply = conversation.send_message("Go")

        assert reply.content == "All done."
        assert conversation.turns == 6
        assert llm.chat.call_count == 6
        roles = [m.role for m in conversation.messages]
        assert roles == [Role.USER] + [Role.ASSISTANT, Role.TOOL] * 5 + [Role.ASSISTANT]

    def test_reply_with_content_and_tool_continues(self, make_llm, registry):
        """Text alongside a tool call does not end the loop."""
        llm = make_llm(
            _assistant("Let me look.", tool="hello", call_id="c1"),
            _assistant("Done."),
        )
        conversation = Conversation(llm, registry)

        conversation.send_message("Go")

        assert conversation.turns == 2


class TestTranscript:
    """Tests for transcript construction."""

    def test_tool_result_follows_invocation(self, make_llm, registry):
        llm = make_llm(_assistant(tool="hello", arguments="{}", call_id="c1"), _assistant("ok"))
        conversation = Conversation(llm, registry)

        conversation.send_message("Go")

        invocation_msg, tool_msg = conversation.messages[1], conversation.messages[2]
        assert invocation_msg.tool_invocation.id == "c1"
        assert tool_msg.role is Role.TOOL
        assert tool_msg.tool_name == "hello"
        assert tool_msg.tool_call_id == "c1"
        assert tool_msg.content == '{"message":"Hello"}'

    def test_full_transcript_sent_each_turn(self, make_llm, registry):
        llm = make_llm(_assistant(tool="hello", call_id="c1"), _assistant("ok"))
        conversation = Conversation(
            llm, registry, messages=[ConversationMessage.system("You translate code.")]
        )

        conversation.send_message("Go")

        first, second = llm.script.requests
        assert [m.role for m in first[0]] == [Role.SYSTEM, Role.USER]
        assert [m.role for m in second[0]] == [
            Role.SYSTEM,
            Role.USER,
            Role.ASSISTANT,
            Role.TOOL,
        ]

    def test_tool_definitions_sent_each_turn(self, make_llm, registry):
        llm = make_llm(_assistant(tool="hello", call_id="c1"), _assistant("ok"))
        conversation = Conversation(llm, registry)

        conversation.send_message("Go")

        for _, tools in llm.script.requests:
            assert tools == [
                {
                    "type": "function",
                    "function": {"name": "hello", "description": "Say hello."},
                }
            ]

    def test_transcript_persists_across_messages(self, make_llm, registry):
        llm = make_llm(_assistant("one"), _assistant("two"))
        conversation = Conversation(llm, registry)

        conversation.send_message("first")
        conversation.send_message("second")

        assert [m.content for m in conversation.messages] == [
            "first",
            "one",
            "second",
            "two",
        ]

    def test_echo_sees_every_message(self, make_llm, registry):
        echo = MagicMock()
        llm = make_llm(_assistant(tool="hello", call_id="c1"), _assistant("ok"))
        conversation = Conversation(
            llm,
            registry,
            messages=[ConversationMessage.system("sys")],
            echo=echo,
        )

        conversation.send_message("Go")

        echoed = [call.args[0] for call in echo.call_args_list]
        assert echoed == conversation.messages


class TestFailures:
    """Dispatch and transport failures."""

    def test_unknown_tool_is_fatal_by_default(self, make_llm, registry):
        llm = make_llm(_assistant(tool="made_up_tool", call_id="c1"))
        conversation = Conversation(llm, registry)

        with pytest.raises(ToolNotFound):
            conversation.send_message("Go")

        # The offending reply is recorded, no result is fabricated.
        assert conversation.messages[-1].tool_invocation.name == "made_up_tool"

    def test_bad_arguments_are_fatal_by_default(self, make_llm, project_registry):
        llm = make_llm(_assistant(tool="src_read_file", arguments="{", call_id="c1"))
        conversation = Conversation(llm, project_registry)

        with pytest.raises(ArgumentDecodeError):
            conversation.send_message("Go")

    def test_dispatch_errors_reported_when_enabled(self, make_llm, registry):
        llm = make_llm(
            _assistant(tool="made_up_tool", call_id="c1"),
            _assistant("Sorry, wrong tool."),
        )
        conversation = Conversation(llm, registry, report_dispatch_errors=True)

        reply = conversation.send_message("Go")

        assert reply.content == "Sorry, wrong tool."
        tool_msg = conversation.messages[2]
        assert tool_msg.role is Role.TOOL
        assert tool_msg.tool_call_id == "c1"
        assert "not found" in json.loads(tool_msg.content)["error"]

    def test_transport_error_propagates(self, make_llm, registry):
        llm = make_llm()
        llm.chat.side_effect = ModelTransportError("connection refused")
        conversation = Conversation(llm, registry)

        with pytest.raises(ModelTransportError):
            conversation.send_message("Go")

        assert [m.role for m in conversation.messages] == [Role.USER]


class TestProjectTools:
    """End-to-end dispatch through the project tools."""

    def test_read_and_write(self, make_llm, project_registry, destination_project):
        llm = make_llm(
            _assistant(tool="src_list_files", arguments="{}", call_id="c1"),
            _assistant(tool="src_read_file", arguments='{"path": "main.c"}', call_id="c2"),
            _assistant(
                tool="dst_write_file",
                arguments=json.dumps({"path": "src/main.rs", "contents": "fn main() {}"}),
                call_id="c3",
            ),
            _assistant("Translated."),
        )
        conversation = Conversation(llm, project_registry)

        conversation.send_message("Translate")

        tool_contents = [m.content for m in conversation.messages if m.role is Role.TOOL]
        assert tool_contents == [
            '{"files":["main.c"]}',
            '{"error":null,"contents":"int main(void) { return 0; }\\n"}',
            '{"error":null}',
        ]
        assert destination_project.is_dirty()
        assert (destination_project.path / "src" / "main.rs").read_text() == "fn main() {}"

    def test_rejected_path_is_data(self, make_llm, project_registry, destination_project):
        llm = make_llm(
            _assistant(
                tool="dst_write_file",
                arguments='{"path": "../evil.rs", "contents": "x"}',
                call_id="c1",
            ),
            _assistant("Oops."),
        )
        conversation = Conversation(llm, project_registry)

        conversation.send_message("Translate")

        assert conversation.messages[2].content == '{"error":"Invalid path."}'
        assert not destination_project.is_dirty()


class TestTracing:
    """Tracing hooks around model calls and dispatches."""

    def test_generation_and_span_recorded(self, make_llm, registry):
        tracing = MagicMock()
        llm = make_llm(_assistant(tool="hello", call_id="c1"), _assistant("ok"))
        conversation = Conversation(llm, registry, tracing_context=tracing)

        conversation.send_message("Go")

        assert tracing.generation.call_count == 2
        tracing.span.assert_called_once()
        assert tracing.span.call_args.kwargs["name"] == "tool:hello"

    def test_dispatch_error_marks_span(self, make_llm, registry):
        tracing = MagicMock()
        span = tracing.span.return_value.__enter__.return_value
        llm = make_llm(_assistant(tool="nope", call_id="c1"))
        conversation = Conversation(llm, registry, tracing_context=tracing)

        with pytest.raises(ToolNotFound):
            conversation.send_message("Go")

        span.set_status.assert_called_once_with("error")
