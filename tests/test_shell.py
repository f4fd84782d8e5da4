import asyncio
import os

import pytest

from cortex_plugins.tools.shell import ExecuteCommandTool
from tests.conftest import call


@pytest.mark.asyncio
async def test_echo_succeeds():
    result = await call(ExecuteCommandTool(), command="echo hello")
    assert result["success"] is True
    assert result["stdout"] == "hello"
    assert result["stderr"] == ""
    assert result["working_directory"] == os.getcwd()
    assert "exit_code" not in result


@pytest.mark.asyncio
async def test_non_zero_exit_is_reported():
    result = await call(ExecuteCommandTool(), command="exit 3")
    assert result["success"] is False
    assert result["exit_code"] == 3
    assert result["error"].startswith("Command failed: exit 3")


@pytest.mark.asyncio
async def test_partial_output_kept_on_failure():
    result = await call(ExecuteCommandTool(), command="echo out; echo err 1>&2; exit 1")
    assert result["success"] is False
    assert result["stdout"] == "out"
    assert result["stderr"] == "err"
    assert "err" in result["error"]


@pytest.mark.asyncio
async def test_working_directory(tmp_path):
    result = await call(ExecuteCommandTool(), command="pwd", working_directory=str(tmp_path))
    assert result["success"] is True
    assert os.path.realpath(result["stdout"]) == os.path.realpath(str(tmp_path))
    assert result["working_directory"] == str(tmp_path)


@pytest.mark.asyncio
async def test_missing_working_directory(tmp_path):
    result = await call(
        ExecuteCommandTool(), command="echo hi", working_directory=str(tmp_path / "missing")
    )
    assert result["success"] is False
    assert result["exit_code"] is None
    assert result["error"]


@pytest.mark.asyncio
async def test_output_over_budget_fails_with_partial_output():
    tool = ExecuteCommandTool(max_output_bytes=5)
    result = await call(tool, command="echo 1234567890")
    assert result["success"] is False
    assert result["stdout"] == "12345"
    assert "maxBuffer exceeded" in result["error"]


@pytest.mark.asyncio
async def test_output_within_budget_succeeds():
    tool = ExecuteCommandTool(max_output_bytes=11)
    result = await call(tool, command="echo 1234567890")
    assert result["success"] is True
    assert result["stdout"] == "1234567890"


@pytest.mark.asyncio
async def test_unbounded_output_is_killed_at_budget():
    tool = ExecuteCommandTool(max_output_bytes=1024)
    result = await asyncio.wait_for(call(tool, command="yes"), timeout=10)
    assert result["success"] is False
    assert "maxBuffer exceeded" in result["error"]
    assert 0 < len(result["stdout"]) <= 1024
    assert set(result["stdout"].split()) == {"y"}
    assert result["exit_code"] is None
    assert result["signal"] == "SIGKILL"


@pytest.mark.asyncio
async def test_unbounded_stderr_counts_against_budget():
    tool = ExecuteCommandTool(max_output_bytes=2048)
    result = await asyncio.wait_for(call(tool, command="yes 1>&2"), timeout=10)
    assert result["success"] is False
    assert result["stdout"] == ""
    assert len(result["stderr"]) <= 2048


@pytest.mark.asyncio
async def test_killed_by_signal_reports_signal_name():
    result = await call(ExecuteCommandTool(), command="kill -9 $$")
    assert result["success"] is False
    assert result["exit_code"] is None
    assert result["signal"] == "SIGKILL"


@pytest.mark.asyncio
async def test_missing_command():
    result = await call(ExecuteCommandTool())
    assert result["success"] is False
    assert "'command' is required." in result["error"]


def test_from_config():
    tool = ExecuteCommandTool.from_config({"max_output_bytes": 1024})
    assert tool.max_output_bytes == 1024
