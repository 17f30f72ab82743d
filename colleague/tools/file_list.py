"""Directory listing tool."""

import asyncio
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from colleague.tools.base import ToolDefinition, ToolResult

MAX_ENTRIES = 1000


class FileListInput(BaseModel):
    """Input schema for the directory listing tool."""

    path: str = Field(default=".", description="Directory to list (defaults to the working directory)")
    recursive: bool = Field(default=False, description="Also list subdirectories")
    max_depth: int = Field(default=3, ge=0, le=10, description="Maximum depth when listing recursively")


def _list_directory(directory: Path, recursive: bool, max_depth: int, depth: int = 0) -> list[dict[str, Any]]:
    entries: list[dict[str, Any]] = []

    for child in sorted(directory.iterdir(), key=lambda p: p.name):
        if len(entries) >= MAX_ENTRIES:
            break

        stats = child.stat()
        entries.append(
            {
                "name": child.name,
                "path": str(child),
                "type": "directory" if child.is_dir() else "file",
                "size": stats.st_size,
                "modified_at": datetime.fromtimestamp(stats.st_mtime, UTC).isoformat(),
            }
        )

        if recursive and child.is_dir() and depth < max_depth:
            entries.extend(_list_directory(child, recursive, max_depth, depth + 1))

    return entries[:MAX_ENTRIES]


def create_file_list_tool() -> ToolDefinition:
    async def file_list_handler(params: FileListInput) -> ToolResult:
        directory = Path(params.path).expanduser().resolve()
        entries = await asyncio.to_thread(_list_directory, directory, params.recursive, params.max_depth)

        return ToolResult(
            success=True,
            output={
                "path": str(directory),
                "entries": entries,
                "total_count": len(entries),
                "truncated": len(entries) >= MAX_ENTRIES,
            },
        )

    return ToolDefinition(
        name="file_list",
        description="List the files and folders in a directory.",
        input_schema_class=FileListInput,
        risk_level=1,
        handler=file_list_handler,
    )
