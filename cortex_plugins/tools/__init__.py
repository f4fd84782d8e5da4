"""
Tool plugin system.

Tools implement the capabilities the agent host exposes to its model:
running shell commands, reading and writing files, making HTTP
requests, browsing and searching the web, analyzing JavaScript, and
encoding or hashing text. Each tool is a `Tool` subclass whose
descriptor and `run` coroutine are registered with the host.
"""

__all__ = [
    "base",
    "shell",
    "files",
    "web",
    "html",
    "browser",
    "search",
    "analysis",
    "encoding",
]
