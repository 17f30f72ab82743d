"""Tests for the builtin tools."""

import base64

import pytest

from colleague.tools.file_list import create_file_list_tool
from colleague.tools.file_read import create_file_read_tool
from colleague.tools.file_write import create_file_write_tool
from colleague.tools.shell_exec import MAX_OUTPUT_BYTES, create_shell_exec_tool, is_blocked_command
from colleague.tools.web_search import create_web_search_tool


class TestFileList:
    """Tests for the file_list tool."""

    async def test_lists_directory(self, tmp_path):
        (tmp_path / "b.txt").write_text("bb")
        (tmp_path / "a").mkdir()

        result = await create_file_list_tool().execute({"path": str(tmp_path)})

        assert result.success is True
        entries = result.output["entries"]
        assert [(e["name"], e["type"]) for e in entries] == [("a", "directory"), ("b.txt", "file")]
        assert entries[1]["size"] == 2
        assert result.output["total_count"] == 2
        assert result.output["truncated"] is False

    async def test_recursive_listing(self, tmp_path):
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        (nested / "deep.txt").write_text("x")

        shallow = await create_file_list_tool().execute({"path": str(tmp_path)})
        deep = await create_file_list_tool().execute({"path": str(tmp_path), "recursive": True})

        assert shallow.output["total_count"] == 1
        assert [e["name"] for e in deep.output["entries"]] == ["a", "b", "deep.txt"]

    async def test_missing_directory_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            await create_file_list_tool().execute({"path": str(tmp_path / "nope")})


class TestFileRead:
    """Tests for the file_read tool."""

    async def test_reads_text(self, tmp_path):
        path = tmp_path / "note.txt"
        path.write_text("hello world", encoding="utf-8")

        result = await create_file_read_tool().execute({"path": str(path)})

        assert result.output["content"] == "hello world"
        assert result.output["truncated"] is False

    async def test_truncates(self, tmp_path):
        path = tmp_path / "note.txt"
        path.write_text("hello world", encoding="utf-8")

        result = await create_file_read_tool().execute({"path": str(path), "max_bytes": 5})

        assert result.output["content"] == "hello"
        assert result.output["truncated"] is True

    async def test_reads_base64(self, tmp_path):
        path = tmp_path / "blob.bin"
        path.write_bytes(b"\x00\x01\x02")

        result = await create_file_read_tool().execute({"path": str(path), "encoding": "base64"})

        assert base64.b64decode(result.output["content"]) == b"\x00\x01\x02"

    def test_is_low_risk(self):
        assert create_file_read_tool().risk_level == 1


class TestFileWrite:
    """Tests for the file_write tool."""

    async def test_writes_and_creates_directories(self, tmp_path):
        path = tmp_path / "out" / "file.txt"

        result = await create_file_write_tool().execute({"path": str(path), "content": "héllo"})

        assert result.success is True
        assert path.read_text(encoding="utf-8") == "héllo"
        assert result.output["bytes_written"] == len("héllo".encode())

    async def test_without_directory_creation(self, tmp_path):
        path = tmp_path / "missing" / "file.txt"

        with pytest.raises(FileNotFoundError):
            await create_file_write_tool().execute(
                {"path": str(path), "content": "x", "create_directories": False}
            )

    def test_requires_approval(self):
        assert create_file_write_tool().risk_level == 2


class TestShellExec:
    """Tests for the shell_exec tool."""

    async def test_runs_command(self, tmp_path):
        result = await create_shell_exec_tool().execute({"command": "echo hello", "cwd": str(tmp_path)})

        assert result.success is True
        assert result.output["stdout"] == "hello"
        assert result.output["cwd"] == str(tmp_path)

    async def test_non_zero_exit_is_failure(self):
        result = await create_shell_exec_tool().execute({"command": "echo oops >&2; exit 3"})

        assert result.success is False
        assert result.output["exit_code"] == 3
        assert result.output["stderr"] == "oops"

    async def test_timeout(self):
        result = await create_shell_exec_tool().execute({"command": "sleep 5", "timeout": 100})

        assert result.success is False
        assert "timed out" in result.error

    async def test_output_over_limit_fails(self):
        result = await create_shell_exec_tool().execute({"command": f"head -c {MAX_OUTPUT_BYTES + 1} /dev/zero"})

        assert result.success is False
        assert result.error == f"Command output exceeded {MAX_OUTPUT_BYTES} bytes"

    async def test_output_at_limit_is_kept(self):
        command = f"head -c {MAX_OUTPUT_BYTES} /dev/zero | tr '\\0' a"

        result = await create_shell_exec_tool().execute({"command": command})

        assert result.success is True
        assert len(result.output["stdout"]) == MAX_OUTPUT_BYTES

    @pytest.mark.parametrize("command", ["rm -rf /", "sudo mkfs.ext4 /dev/sda1", "dd if=/dev/zero of=/dev/sda"])
    async def test_blocked_commands(self, command):
        assert is_blocked_command(command)

        result = await create_shell_exec_tool().execute({"command": command})

        assert result.success is False
        assert result.error == "This command is blocked for safety reasons"

    def test_is_high_risk(self):
        assert create_shell_exec_tool().risk_level == 3


class TestWebSearch:
    """Tests for the web_search tool."""

    async def test_returns_results(self):
        result = await create_web_search_tool().execute({"query": "python asyncio"})

        assert result.success is True
        assert result.output["query"] == "python asyncio"
        assert result.output["total_results"] == len(result.output["results"]) >= 1
