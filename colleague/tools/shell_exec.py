"""Shell command tool. High risk, always requires user approval."""

import asyncio
import os

from pydantic import BaseModel, Field

from colleague.tools.base import ToolDefinition, ToolResult

BLOCKED_COMMANDS = [
    "rm -rf /",
    "rm -rf ~",
    "rm -rf /*",
    "mkfs",
    "dd if=",
    ":(){:|:&};:",
    "> /dev/sda",
    "chmod -R 777 /",
]

DEFAULT_TIMEOUT_MS = 30_000
# Per stream, like a child process maxBuffer
MAX_OUTPUT_BYTES = 1024 * 1024
READ_CHUNK_BYTES = 64 * 1024


class ShellExecInput(BaseModel):
    """Input schema for the shell command tool."""

    command: str = Field(..., min_length=1, description="Shell command to run")
    cwd: str | None = Field(default=None, description="Working directory (defaults to the current directory)")
    timeout: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0, le=600_000, description="Timeout in milliseconds")


class OutputLimitExceeded(Exception):
    """A command wrote more than MAX_OUTPUT_BYTES to stdout or stderr."""


def is_blocked_command(command: str) -> bool:
    normalized = command.lower().strip()
    return any(blocked.lower() in normalized for blocked in BLOCKED_COMMANDS)


async def _read_limited(stream: asyncio.StreamReader) -> bytes:
    data = bytearray()
    while True:
        chunk = await stream.read(READ_CHUNK_BYTES)
        if not chunk:
            return bytes(data)
        data.extend(chunk)
        if len(data) > MAX_OUTPUT_BYTES:
            raise OutputLimitExceeded()


async def _collect_output(process: asyncio.subprocess.Process) -> tuple[bytes, bytes]:
    stdout, stderr = await asyncio.gather(_read_limited(process.stdout), _read_limited(process.stderr))
    await process.wait()
    return stdout, stderr


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace").strip()


async def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        process.kill()
    await process.wait()


def create_shell_exec_tool() -> ToolDefinition:
    async def shell_exec_handler(params: ShellExecInput) -> ToolResult:
        if is_blocked_command(params.command):
            return ToolResult.failure("This command is blocked for safety reasons")

        cwd = params.cwd or os.getcwd()
        process = await asyncio.create_subprocess_shell(
            params.command,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )

        try:
            stdout, stderr = await asyncio.wait_for(_collect_output(process), timeout=params.timeout / 1000)
        except TimeoutError:
            await _kill(process)
            return ToolResult.failure(f"Command timed out after {params.timeout}ms")
        except OutputLimitExceeded:
            await _kill(process)
            return ToolResult.failure(f"Command output exceeded {MAX_OUTPUT_BYTES} bytes")

        if process.returncode != 0:
            return ToolResult.failure(
                f"Command exited with code {process.returncode}",
                output={"stdout": _decode(stdout), "stderr": _decode(stderr), "exit_code": process.returncode},
            )

        return ToolResult(
            success=True,
            output={"stdout": _decode(stdout), "stderr": _decode(stderr), "command": params.command, "cwd": cwd},
        )

    return ToolDefinition(
        name="shell_exec",
        description="Run a shell command. Dangerous commands are blocked. This tool requires the user's approval.",
        input_schema_class=ShellExecInput,
        risk_level=3,
        handler=shell_exec_handler,
    )
