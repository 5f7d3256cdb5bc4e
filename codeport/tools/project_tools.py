"""
The fixed tool set exposed to the model.

Binds the source and destination projects to the five project tools. The
source project is only ever read; the destination can also be written.
"""

from .project import (
    Project,
    ProjectDirectoryContents,
    ReadFileArgs,
    ReadFileResult,
    WriteFileArgs,
    WriteFileResult,
)
from .registry import ToolRegistry


def register_project_tools(
    registry: ToolRegistry, source: Project, destination: Project
) -> ToolRegistry:
    """Register the source/destination project tools on ``registry``."""

    def src_list_files() -> ProjectDirectoryContents:
        return source.list_contents()

    def src_read_file(args: ReadFileArgs) -> ReadFileResult:
        return source.read_file(args.path)

    def dst_list_files() -> ProjectDirectoryContents:
        return destination.list_contents()

    def dst_read_file(args: ReadFileArgs) -> ReadFileResult:
        return destination.read_file(args.path)

    def dst_write_file(args: WriteFileArgs) -> WriteFileResult:
        return destination.write_file(args.path, args.contents)

    registry.register(
        "src_list_files",
        "List all files in the source project directory.",
        src_list_files,
    )
    registry.register(
        "src_read_file",
        "Reads the contents of a file in the source project directory.",
        src_read_file,
    )
    registry.register(
        "dst_list_files",
        "List all files in the destination project directory.",
        dst_list_files,
    )
    registry.register(
        "dst_read_file",
        "Reads the contents of a file in the destination project directory.",
        dst_read_file,
    )
    registry.register(
        "dst_write_file",
        "Saves the contents to a file in the destination project directory.",
        dst_write_file,
    )
    return registry
