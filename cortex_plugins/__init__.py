"""
CortexAI official plugin set.

This package provides the tool implementations (command execution,
filesystem, web requests and browsing, search, JavaScript analysis,
encoding) together with configuration loading and the plugin
registration entry points used by the agent host.
"""

from cortex_plugins.loader import PLUGINS, init_plugin, register_plugins

__all__ = [
    "config",
    "loader",
    "tools",
    "PLUGINS",
    "init_plugin",
    "register_plugins",
]
