"""
Tool Registry - Single source of truth for tool definitions.

Host functions are registered under a unique name. Each one is wrapped in a
uniform ``str -> str`` callable that decodes the model's raw argument
payload into the function's typed argument, calls it, and encodes its typed
result back to JSON text. The registry is built once at startup and is
append-only afterwards.
"""

import inspect
import logging
import typing
from dataclasses import dataclass
from typing import Any, Callable, Optional

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from ..errors import (
    ArgumentDecodeError,
    DuplicateToolError,
    ResultEncodeError,
    ToolNotFound,
)
from ..models.messages import ConversationMessage, ToolInvocation
from .schema import derive_schema, is_unit_type

logger = logging.getLogger(__name__)

RawCallable = Callable[[str], str]


@dataclass(frozen=True)
class ToolDefinition:
    """The externally advertised part of a tool."""

    name: str
    description: str
    parameters: Optional[dict]  # None for tools that take no arguments


@dataclass(frozen=True)
class RegisteredTool:
    """A registered tool: its definition plus the type-erased callable."""

    definition: ToolDefinition
    call: RawCallable

    @property
    def name(self) -> str:
        return self.definition.name


def _resolve_signature(function: Callable) -> tuple[Any, Any]:
    """Return ``(argument type, result type)`` for a host function.

    The argument type is ``inspect.Parameter.empty`` for functions without
    parameters. The result type is ``Any`` when the return is unannotated.
    """
    signature = inspect.signature(function)
    params = [
        p
        for p in signature.parameters.values()
        if p.kind not in (p.VAR_POSITIONAL, p.VAR_KEYWORD)
        and p.default is inspect.Parameter.empty
    ]
    if len(params) > 1:
        raise TypeError(
            f"Tool functions take at most one argument, "
            f"{getattr(function, '__name__', function)!r} takes {len(params)}"
        )

    try:
        hints = typing.get_type_hints(function)
    except (NameError, TypeError):
        hints = {}

    if not params:
        arg_type: Any = inspect.Parameter.empty
    else:
        param = params[0]
        arg_type = hints.get(param.name, param.annotation)
        if arg_type is inspect.Parameter.empty:
            raise TypeError(
                f"Argument {param.name!r} of tool function "
                f"{getattr(function, '__name__', function)!r} must be annotated"
            )

    result_type = hints.get("return", signature.return_annotation)
    if result_type is inspect.Signature.empty:
        result_type = Any
    return arg_type, result_type


def _make_caller(name: str, function: Callable, arg_type: Any, result_type: Any) -> RawCallable:
    """Build the decode -> invoke -> encode pipeline for one tool."""
    result_adapter: TypeAdapter = TypeAdapter(result_type)

    if is_unit_type(arg_type):
        # The payload of a unit tool is never decoded.
        takes_none = arg_type is not inspect.Parameter.empty

        def invoke(raw: str) -> Any:
            return function(None) if takes_none else function()

    else:
        arg_adapter: TypeAdapter = TypeAdapter(arg_type)

        def invoke(raw: str) -> Any:
            try:
                args = arg_adapter.validate_json(raw or "")
            except ValidationError as e:
                raise ArgumentDecodeError(name, str(e)) from e
            return function(args)

    def caller(raw: str) -> str:
        result = invoke(raw)
        try:
            return result_adapter.dump_json(result).decode("utf-8")
        except PydanticSerializationError as e:
            raise ResultEncodeError(name, str(e)) from e

    return caller


class ToolRegistry:
    """Registry of the tools exposed to the model."""

    def __init__(self) -> None:
        self._tools: dict[str, RegisteredTool] = {}

    def register(self, name: str, description: str, function: Callable) -> ToolDefinition:
        """
        Register a host function as a tool.

        The function takes either no argument or a single annotated one
        (a pydantic model, dataclass, or any type pydantic can validate).

        Raises:
            DuplicateToolError: If ``name`` is already registered.
            TypeError: If the function signature cannot be dispatched.
        """
        if name in self._tools:
            raise DuplicateToolError(name)

        arg_type, result_type = _resolve_signature(function)
        definition = ToolDefinition(
            name=name,
            description=description,
            parameters=derive_schema(arg_type),
        )
        self._tools[name] = RegisteredTool(
            definition=definition,
            call=_make_caller(name, function, arg_type, result_type),
        )
        logger.debug(f"Registered tool: {definition}")
        return definition

    def get(self, name: str) -> Optional[RegisteredTool]:
        """Get a tool by name."""
        return self._tools.get(name)

    def names(self) -> list[str]:
        """Registered tool names in registration order."""
        return list(self._tools)

    def definitions(self) -> list[ToolDefinition]:
        """Advertised tool definitions in registration order."""
        return [tool.definition for tool in self._tools.values()]

    def get_tools_summary(self) -> str:
        """Get formatted summary of all tools for display."""
        return "\n".join(
            f"- {tool.name}: {tool.definition.description}"
            for tool in self._tools.values()
        )

    def dispatch(self, request: ToolInvocation) -> ConversationMessage:
        """
        Dispatch a model-issued tool invocation.

        Returns:
            A ``tool`` message carrying the encoded result.

        Raises:
            ToolNotFound: The name is not registered; nothing is invoked.
            ArgumentDecodeError: The payload does not decode; nothing is invoked.
            ResultEncodeError: The function's result cannot be encoded.
        """
        tool = self._tools.get(request.name)
        if tool is None:
            raise ToolNotFound(request.name)

        output = tool.call(request.arguments)
        return ConversationMessage.tool_result(
            tool_name=request.name,
            content=output,
            tool_call_id=request.id,
        )

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
