"""
Tool definitions for the conversation loop.

Converts ToolRegistry definitions into OpenAI-style JSON tool definitions.
"""

from ..tools.registry import ToolDefinition, ToolRegistry


def to_openai_tool(definition: ToolDefinition) -> dict:
    """
    Convert one registry definition to the OpenAI function-calling format.

    Tools without arguments are advertised without a ``parameters`` key.
    """
    function: dict = {
        "name": definition.name,
        "description": definition.description,
    }
    if definition.parameters is not None:
        function["parameters"] = definition.parameters
    return {"type": "function", "function": function}


def build_tool_definitions(registry: ToolRegistry) -> list[dict]:
    """
    Build OpenAI function-calling tool definitions from the registry.

    Returns:
        List of OpenAI-format tool definitions, in registration order.
    """
    return [to_openai_tool(definition) for definition in registry.definitions()]
