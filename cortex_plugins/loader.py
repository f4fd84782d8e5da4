"""
Plugin groups and their registration with the host.

Each plugin is a named group of tools. Initializing a plugin builds
its tools from configuration and hands every (descriptor, handler)
pair to the host's registry.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Type

from cortex_plugins.config import get_plugin_config, get_tool_config
from cortex_plugins.tools.analysis import AnalyzeJavaScriptTool, ProbeApiEndpointsTool
from cortex_plugins.tools.base import Tool, ToolRegistry
from cortex_plugins.tools.browser import BrowseWebsiteTool
from cortex_plugins.tools.encoding import Base64DecodeTool, Base64EncodeTool, HashTextTool
from cortex_plugins.tools.files import GetCwdTool, ListDirectoryTool, ReadFileTool, WriteFileTool
from cortex_plugins.tools.search import WebSearchTool
from cortex_plugins.tools.shell import ExecuteCommandTool
from cortex_plugins.tools.web import WebRequestTool

logger = logging.getLogger(__name__)

PLUGINS: Dict[str, List[Type[Tool]]] = {
    "command": [ExecuteCommandTool],
    "filesystem": [ReadFileTool, WriteFileTool, ListDirectoryTool, GetCwdTool],
    "web": [WebRequestTool, BrowseWebsiteTool, WebSearchTool],
    "web_analysis": [AnalyzeJavaScriptTool, ProbeApiEndpointsTool],
    "encoding": [Base64EncodeTool, Base64DecodeTool, HashTextTool],
}


def init_plugin(
    name: str,
    tool_registry: ToolRegistry,
    cfg: Optional[Dict[str, Any]] = None,
) -> List[Tool]:
    """
    Build the tools of one plugin and register them with the host.

    Raises:
        KeyError: If no plugin with that name exists.
    """
    if name not in PLUGINS:
        raise KeyError(f"Unknown plugin: {name!r}")
    tools: List[Tool] = []
    for tool_cls in PLUGINS[name]:
        tool = tool_cls.from_config(get_tool_config(cfg or {}, tool_cls.tool_name))
        tool_registry.register(tool.definition, tool.run)
        tools.append(tool)
    logger.info("%s plugin initialized with %d tools", name, len(tools))
    return tools


def register_plugins(tool_registry: ToolRegistry, cfg: Optional[Dict[str, Any]] = None) -> List[str]:
    """
    Initialize every enabled plugin.

    Plugins are enabled by `plugins.<name>.enabled` in the config.
    When the config has no `plugins` section at all, every plugin
    is loaded.
    """
    cfg = cfg or {}
    has_plugin_section = bool(cfg.get("plugins"))
    loaded: List[str] = []
    for name in PLUGINS:
        plugin_cfg = get_plugin_config(cfg, name)
        enabled = plugin_cfg.get("enabled", False) if has_plugin_section else True
        if not enabled:
            logger.debug("%s plugin disabled", name)
            continue
        init_plugin(name, tool_registry, cfg)
        loaded.append(name)
    return loaded
