"""
Command execution tool.

Runs an arbitrary shell command and reports its output. There is no
command allow-list and no execution timeout: the plugin is meant for
a trusted operator, and a non-zero exit status is treated as a normal
result rather than an error.

Output is read incrementally against a single byte budget shared by
stdout and stderr. Once the budget is used up the command's whole
process group is killed and the partial output is returned.
"""

import asyncio
import os
import signal
from typing import Any, Dict, Optional, Tuple

from cortex_plugins.tools.base import Tool, to_json

DEFAULT_MAX_OUTPUT_BYTES = 10 * 1024 * 1024
CHUNK_SIZE = 64 * 1024


class ExecuteCommandTool(Tool):
    """
    Execute a bash command through the system shell.

    Tool input schema:
    {
        "command": "ls -la",
        "working_directory": "/tmp"
    }
    """

    tool_name = "execute_command"

    def __init__(self, max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES) -> None:
        super().__init__(
            name=self.tool_name,
            description=(
                "Execute a bash command on the system. Returns stdout, stderr, and exit code. "
                "Use this for running shell commands, installing packages, checking system info, etc."
            ),
            parameters={
                "type": "object",
                "properties": {
                    "command": {
                        "type": "string",
                        "description": "The bash command to execute (e.g., 'ls -la', 'pwd', 'cat file.txt')",
                    },
                    "working_directory": {
                        "type": "string",
                        "description": (
                            "Optional: The directory to execute the command in. "
                            "Defaults to current working directory."
                        ),
                    },
                },
                "required": ["command"],
            },
        )
        self.max_output_bytes = max_output_bytes

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "ExecuteCommandTool":
        max_output_bytes = int(cfg.get("max_output_bytes", DEFAULT_MAX_OUTPUT_BYTES))
        return cls(max_output_bytes=max_output_bytes)

    @staticmethod
    def _kill(process: asyncio.subprocess.Process) -> None:
        try:
            # the shell runs in its own session, so its pid is the group id
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass  # already exited

    async def _collect(self, process: asyncio.subprocess.Process) -> Tuple[bytes, bytes, bool]:
        """
        Read stdout and stderr concurrently until EOF or until the
        combined budget is exhausted, in which case the process group
        is killed. Returns (stdout, stderr, budget_exceeded).
        """
        out = bytearray()
        err = bytearray()
        exceeded = False

        async def pump(stream: asyncio.StreamReader, buf: bytearray) -> None:
            nonlocal exceeded
            while not exceeded:
                chunk = await stream.read(CHUNK_SIZE)
                if not chunk:
                    return
                room = self.max_output_bytes - len(out) - len(err)
                if len(chunk) > room:
                    buf.extend(chunk[: max(room, 0)])
                    exceeded = True
                    self._kill(process)
                    return
                buf.extend(chunk)

        await asyncio.gather(pump(process.stdout, out), pump(process.stderr, err))
        await process.wait()
        return bytes(out), bytes(err), exceeded

    @staticmethod
    def _signal_name(returncode: Optional[int]) -> Optional[str]:
        if returncode is None or returncode >= 0:
            return None
        try:
            return signal.Signals(-returncode).name
        except ValueError:
            return str(-returncode)

    async def run(self, tool_input: Dict[str, Any]) -> str:
        tool_input = tool_input or {}
        command = tool_input.get("command", "")
        working_directory = tool_input.get("working_directory") or os.getcwd()
        if not command:
            return to_json({"success": False, "error": "'command' is required."})

        try:
            process = await asyncio.create_subprocess_shell(
                command,
                cwd=working_directory,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
            raw_stdout, raw_stderr, exceeded = await self._collect(process)
        except Exception as exc:  # noqa: BLE001
            return to_json(
                {
                    "success": False,
                    "error": str(exc),
                    "stdout": "",
                    "stderr": "",
                    "exit_code": None,
                }
            )

        stdout = raw_stdout.decode("utf-8", errors="replace").strip()
        stderr = raw_stderr.decode("utf-8", errors="replace").strip()
        if process.returncode == 0 and not exceeded:
            return to_json(
                {
                    "success": True,
                    "stdout": stdout,
                    "stderr": stderr,
                    "working_directory": working_directory,
                }
            )

        if exceeded:
            error = f"stdout/stderr maxBuffer exceeded ({self.max_output_bytes} bytes): {command}"
        else:
            error = f"Command failed: {command}"
            if stderr:
                error += f"\n{stderr}"
        result: Dict[str, Any] = {
            "success": False,
            "error": error,
            "stdout": stdout,
            "stderr": stderr,
            "exit_code": process.returncode,
        }
        killed_by = self._signal_name(process.returncode)
        if killed_by:
            result["exit_code"] = None
            result["signal"] = killed_by
        return to_json(result)
