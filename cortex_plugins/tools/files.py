"""
Filesystem tools.

Read, write and list files, and report the working directory. Paths
are resolved against the process working directory with no
containment check: the tools can reach anything the host process can.
Blocking I/O runs in a worker thread so the event loop stays free.
"""

import asyncio
import os
from datetime import datetime, timezone
from typing import Any, Dict, List

from cortex_plugins.tools.base import Tool, to_json


def _mtime(st: os.stat_result) -> str:
    return datetime.fromtimestamp(st.st_mtime, tz=timezone.utc).isoformat()


class ReadFileTool(Tool):
    """
    ReadFileTool reads a text file.

    Tool input schema:
    {
        "file_path": "relative/or/absolute/path.txt"
    }
    """

    tool_name = "read_file"

    def __init__(self) -> None:
        super().__init__(
            name=self.tool_name,
            description="Read the contents of a file from the filesystem",
            parameters={
                "type": "object",
                "properties": {
                    "file_path": {
                        "type": "string",
                        "description": "The absolute or relative path to the file to read",
                    },
                },
                "required": ["file_path"],
            },
        )

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "ReadFileTool":
        return cls()

    @staticmethod
    def _read(abs_path: str) -> Dict[str, Any]:
        with open(abs_path, "r", encoding="utf-8") as f:
            content = f.read()
        st = os.stat(abs_path)
        return {
            "success": True,
            "content": content,
            "path": abs_path,
            "size": st.st_size,
            "modified": _mtime(st),
        }

    async def run(self, tool_input: Dict[str, Any]) -> str:
        file_path = (tool_input or {}).get("file_path", "")
        if not file_path:
            return to_json({"success": False, "error": "'file_path' is required.", "path": file_path})
        try:
            result = await asyncio.to_thread(self._read, os.path.abspath(file_path))
        except Exception as exc:  # noqa: BLE001
            return to_json({"success": False, "error": str(exc), "path": file_path})
        return to_json(result)


class WriteFileTool(Tool):
    """
    WriteFileTool writes text to a file, creating parent directories.

    Tool input schema:
    {
        "file_path": "relative/or/absolute/path.txt",
        "content": "string content"
    }
    """

    tool_name = "write_file"

    def __init__(self) -> None:
        super().__init__(
            name=self.tool_name,
            description=(
                "Write content to a file. Creates the file if it doesn't exist, "
                "overwrites if it does."
            ),
            parameters={
                "type": "object",
                "properties": {
                    "file_path": {
                        "type": "string",
                        "description": "The absolute or relative path to the file to write",
                    },
                    "content": {
                        "type": "string",
                        "description": "The content to write to the file",
                    },
                },
                "required": ["file_path", "content"],
            },
        )

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "WriteFileTool":
        return cls()

    @staticmethod
    def _write(abs_path: str, content: str) -> Dict[str, Any]:
        os.makedirs(os.path.dirname(abs_path), exist_ok=True)
        with open(abs_path, "w", encoding="utf-8") as f:
            f.write(content)
        return {
            "success": True,
            "path": abs_path,
            "bytes_written": os.stat(abs_path).st_size,
        }

    async def run(self, tool_input: Dict[str, Any]) -> str:
        tool_input = tool_input or {}
        file_path = tool_input.get("file_path", "")
        content = tool_input.get("content")
        if not file_path:
            return to_json({"success": False, "error": "'file_path' is required.", "path": file_path})
        if content is None:
            return to_json({"success": False, "error": "'content' is required.", "path": file_path})
        try:
            result = await asyncio.to_thread(self._write, os.path.abspath(file_path), str(content))
        except Exception as exc:  # noqa: BLE001
            return to_json({"success": False, "error": str(exc), "path": file_path})
        return to_json(result)


class ListDirectoryTool(Tool):
    """
    List the entries of a directory with their type, size and mtime.

    Entries come back in the order the operating system enumerates
    them; no sorting is applied.
    """

    tool_name = "list_directory"

    def __init__(self) -> None:
        super().__init__(
            name=self.tool_name,
            description="List contents of a directory with details",
            parameters={
                "type": "object",
                "properties": {
                    "directory_path": {
                        "type": "string",
                        "description": (
                            "The path to the directory to list. "
                            "Defaults to current directory if not specified."
                        ),
                    },
                },
                "required": [],
            },
        )

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "ListDirectoryTool":
        return cls()

    @staticmethod
    def _list(abs_path: str) -> List[Dict[str, Any]]:
        entries: List[Dict[str, Any]] = []
        with os.scandir(abs_path) as it:
            for entry in it:
                st = os.stat(entry.path)
                entries.append(
                    {
                        "name": entry.name,
                        "type": "directory" if entry.is_dir(follow_symlinks=False) else "file",
                        "size": st.st_size,
                        "modified": _mtime(st),
                    }
                )
        return entries

    async def run(self, tool_input: Dict[str, Any]) -> str:
        directory_path = (tool_input or {}).get("directory_path") or "."
        abs_path = os.path.abspath(directory_path)
        try:
            entries = await asyncio.to_thread(self._list, abs_path)
        except Exception as exc:  # noqa: BLE001
            return to_json({"success": False, "error": str(exc), "path": directory_path})
        return to_json({"success": True, "path": abs_path, "entries": entries})


class GetCwdTool(Tool):
    """Report the host process working directory."""

    tool_name = "get_cwd"

    def __init__(self) -> None:
        super().__init__(
            name=self.tool_name,
            description="Get the current working directory",
        )

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "GetCwdTool":
        return cls()

    async def run(self, tool_input: Dict[str, Any]) -> str:
        return to_json({"success": True, "cwd": os.getcwd()})
