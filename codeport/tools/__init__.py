"""
codeport tools package

- registry: typed tool registration and dispatch
- schema: argument schema derivation
- project: sandboxed project directory access
- build_check: external build-check runner
- project_tools: the fixed source/destination tool set
"""

from .registry import ToolDefinition, ToolRegistry
from .schema import derive_schema
from .project import (
    Project,
    ProjectDirectoryContents,
    ReadFileArgs,
    ReadFileResult,
    WriteFileArgs,
    WriteFileResult,
)
from .build_check import BuildChecker
from .project_tools import register_project_tools

__all__ = [
    "ToolDefinition",
    "ToolRegistry",
    "derive_schema",
    "Project",
    "ProjectDirectoryContents",
    "ReadFileArgs",
    "ReadFileResult",
    "WriteFileArgs",
    "WriteFileResult",
    "BuildChecker",
    "register_project_tools",
]
