"""File reading tool."""

import asyncio
import base64
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from colleague.tools.base import ToolDefinition, ToolResult

MAX_FILE_SIZE = 1024 * 1024  # 1MB


class FileReadInput(BaseModel):
    """Input schema for the file reading tool."""

    path: str = Field(..., min_length=1, description="Path of the file to read (relative or absolute)")
    encoding: Literal["utf-8", "base64"] = Field(
        default="utf-8", description="utf-8 for text files, base64 for binary files"
    )
    max_bytes: int = Field(default=MAX_FILE_SIZE, gt=0, le=MAX_FILE_SIZE, description="Maximum characters returned")


def create_file_read_tool() -> ToolDefinition:
    async def file_read_handler(params: FileReadInput) -> ToolResult:
        file_path = Path(params.path).expanduser().resolve()

        if params.encoding == "base64":
            raw = await asyncio.to_thread(file_path.read_bytes)
            content = base64.b64encode(raw).decode("ascii")
        else:
            content = await asyncio.to_thread(file_path.read_text, encoding="utf-8")

        return ToolResult(
            success=True,
            output={
                "content": content[: params.max_bytes],
                "path": str(file_path),
                "encoding": params.encoding,
                "truncated": len(content) > params.max_bytes,
            },
        )

    return ToolDefinition(
        name="file_read",
        description=(
            "Read the contents of a file. Use utf-8 encoding for text files and base64 for binary files."
        ),
        input_schema_class=FileReadInput,
        risk_level=1,
        handler=file_read_handler,
    )
