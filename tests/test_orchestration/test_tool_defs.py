"""Tests for OpenAI tool definitions."""

from codeport.orchestration.tool_defs import build_tool_definitions, to_openai_tool
from codeport.tools.registry import ToolDefinition, ToolRegistry


class TestToOpenAITool:
    """Tests for to_openai_tool."""

    def test_with_parameters(self):
        params = {"type": "object", "properties": {}}
        tool = to_openai_tool(ToolDefinition("t", "desc", params))

        assert tool == {
            "type": "function",
            "function": {"name": "t", "description": "desc", "parameters": params},
        }

    def test_without_parameters(self):
        """Tools without arguments are advertised without a schema."""
        tool = to_openai_tool(ToolDefinition("t", "desc", None))

        assert "parameters" not in tool["function"]


class TestBuildToolDefinitions:
    """Tests for build_tool_definitions."""

    def test_empty_registry(self):
        assert build_tool_definitions(ToolRegistry()) == []

    def test_project_tools(self, project_registry):
        tools = build_tool_definitions(project_registry)
        names = [t["function"]["name"] for t in tools]

        assert names == [
            "src_list_files",
            "src_read_file",
            "dst_list_files",
            "dst_read_file",
            "dst_write_file",
        ]

    def test_openai_format(self, project_registry):
        """Each tool follows the OpenAI function-calling format."""
        for tool in build_tool_definitions(project_registry):
            assert tool["type"] == "function"
            func = tool["function"]
            assert func["name"]
            assert func["description"]
            if "parameters" in func:
                assert func["parameters"]["type"] == "object"
                assert "properties" in func["parameters"]

    def test_list_tools_have_no_parameters(self, project_registry):
        by_name = {
            t["function"]["name"]: t["function"]
            for t in build_tool_definitions(project_registry)
        }

        assert "parameters" not in by_name["src_list_files"]
        assert "parameters" not in by_name["dst_list_files"]
        assert by_name["dst_write_file"]["parameters"]["required"] == [
            "path",
            "contents",
        ]
