"""File writing tool. Requires user approval."""

import asyncio
import base64
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from colleague.tools.base import ToolDefinition, ToolResult


class FileWriteInput(BaseModel):
    """Input schema for the file writing tool."""

    path: str = Field(..., min_length=1, description="Path of the file to write")
    content: str = Field(..., description="Content to write")
    encoding: Literal["utf-8", "base64"] = Field(default="utf-8", description="Encoding of content")
    create_directories: bool = Field(default=True, description="Create missing parent directories")


def _write(file_path: Path, data: bytes, create_directories: bool) -> int:
    if create_directories:
        file_path.parent.mkdir(parents=True, exist_ok=True)
    return file_path.write_bytes(data)


def create_file_write_tool() -> ToolDefinition:
    async def file_write_handler(params: FileWriteInput) -> ToolResult:
        file_path = Path(params.path).expanduser().resolve()
        data = base64.b64decode(params.content) if params.encoding == "base64" else params.content.encode("utf-8")

        bytes_written = await asyncio.to_thread(_write, file_path, data, params.create_directories)

        return ToolResult(success=True, output={"path": str(file_path), "bytes_written": bytes_written})

    return ToolDefinition(
        name="file_write",
        description="Create or overwrite a file. Writing requires the user's approval.",
        input_schema_class=FileWriteInput,
        risk_level=2,
        handler=file_write_handler,
    )
