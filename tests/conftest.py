"""
Pytest configuration and fixtures for codeport tests.
"""

from unittest.mock import MagicMock

import pytest

from codeport.llm_call import LLMClient
from codeport.models.messages import ConversationMessage
from codeport.tools import Project, ToolRegistry, register_project_tools


class ScriptedLLM:
    """Side effect for a mocked LLMClient.chat that replays canned replies.

    Records a snapshot of every request so tests can inspect what the model
    was sent at each turn.
    """

    def __init__(self, replies):
        self.replies = list(replies)
        self.requests: list[tuple[list[ConversationMessage], list[dict]]] = []

    def __call__(self, messages, tools):
        self.requests.append((list(messages), tools))
        if not self.replies:
            raise AssertionError("model called more often than scripted")
        reply = self.replies.pop(0)
        if callable(reply):
            return reply(messages)
        return reply


@pytest.fixture
def make_llm():
    """Factory for a mocked LLMClient driven by a list of replies."""

    def factory(*replies):
        script = ScriptedLLM(replies)
        client = MagicMock(spec=LLMClient)
        client.model = "test-model"
        client.last_usage = None
        client.chat.side_effect = script
        client.script = script
        return client

    return factory


@pytest.fixture
def source_project(tmp_path):
    root = tmp_path / "project_src"
    root.mkdir()
    (root / "main.c").write_text("int main(void) { return 0; }\n")
    return Project(root)


@pytest.fixture
def destination_project(tmp_path):
    root = tmp_path / "project_dst"
    root.mkdir()
    return Project(root)


@pytest.fixture
def project_registry(source_project, destination_project):
    return register_project_tools(ToolRegistry(), source_project, destination_project)
