"""
Web analysis tools.

`analyze_javascript` downloads a page and its scripts and scans them
for API-looking strings; `probe_api_endpoints` requests a list of
well-known API paths on a host. Both process items one by one and
record per-item failures inline instead of aborting the whole run.
"""

import re
from typing import Any, Dict, List, Optional, Pattern
from urllib.parse import urlparse

from cortex_plugins.tools import html as html_extract
from cortex_plugins.tools.base import Tool, to_json
from cortex_plugins.tools.web import WebRequestTool

DEFAULT_PATTERNS: List[Pattern[str]] = [
    re.compile(r"/api/[^\s\"']+"),
    re.compile(r"https?://[^\s\"']*api[^\s\"']*"),
    re.compile(r"fetch\s*\(\s*['\"](.*?)['\"][^)]*\)"),
    re.compile(r"axios\.(get|post|put|delete)\s*\(\s*['\"](.*?)['\"][^)]*\)"),
    re.compile(r"\$\.ajax\s*\(\s*{[^}]*url\s*:\s*['\"](.*?)['\"][^}]*}"),
    re.compile(r"XMLHttpRequest[^;]*\.open\s*\(\s*[^,]*,\s*['\"](.*?)['\"][^)]*\)"),
    re.compile(r"graphql|gql", re.I),
    re.compile(r"websocket|ws:", re.I),
]

DEFAULT_PROBE_PATHS = [
    "/api",
    "/api/v1",
    "/api/v2",
    "/v1",
    "/v2",
    "/graphql",
    "/gql",
    "/rest",
    "/api/rest",
    "/api/graphql",
    "/api/users",
    "/api/auth",
    "/api/login",
    "/api/data",
    "/api/search",
    "/api/public",
    "/endpoints",
    "/swagger",
    "/docs",
    "/openapi.json",
    "/api-docs",
    "/.well-known/openapi_description",
]


def scan(content: str, patterns: List[Pattern[str]]) -> List[str]:
    """Whole-match strings for every pattern, de-duplicated, first seen first."""
    found: Dict[str, None] = {}
    for pattern in patterns:
        for match in pattern.finditer(content):
            found.setdefault(match.group(0), None)
    return list(found)


class AnalyzeJavaScriptTool(Tool):
    """
    Download and analyze JavaScript for API endpoints and network calls.

    Tool input schema:
    {
        "url": "https://example.com",
        "search_patterns": ["/v[0-9]+/[a-z]+"]
    }
    """

    tool_name = "analyze_javascript"

    def __init__(self, requester: Optional[WebRequestTool] = None, max_script_files: int = 10) -> None:
        super().__init__(
            name=self.tool_name,
            description=(
                "Download and analyze JavaScript files for API endpoints, AJAX calls, "
                "and network requests"
            ),
            parameters={
                "type": "object",
                "properties": {
                    "url": {
                        "type": "string",
                        "description": "Base URL to analyze for JavaScript files",
                    },
                    "search_patterns": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Regex patterns to search for (default: API patterns)",
                    },
                },
                "required": ["url"],
            },
        )
        self.requester = requester or WebRequestTool()
        self.max_script_files = max_script_files

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "AnalyzeJavaScriptTool":
        return cls(
            requester=WebRequestTool.from_config(cfg.get("request", {})),
            max_script_files=int(cfg.get("max_script_files", 10)),
        )

    async def _analyze_file(self, js_url: str, patterns: List[Pattern[str]]) -> Dict[str, Any]:
        response = await self.requester.request(js_url)
        if not response.get("success"):
            return {"file": js_url, "error": response.get("error")}
        content = response.get("body", "")
        endpoints = scan(content, patterns)
        return {
            "file": js_url,
            "size": len(content),
            "endpoints_found": endpoints,
            "contains_api_calls": bool(endpoints),
        }

    async def run(self, tool_input: Dict[str, Any]) -> str:
        tool_input = tool_input or {}
        url = tool_input.get("url", "")
        if not url:
            return to_json({"success": False, "error": "'url' is required.", "url": url})
        try:
            search_patterns = tool_input.get("search_patterns")
            if search_patterns:
                patterns = [re.compile(p) for p in search_patterns]
            else:
                patterns = DEFAULT_PATTERNS

            response = await self.requester.request(url)
            if not response.get("success"):
                return to_json({"success": False, "error": "Failed to fetch main page", "url": url})

            page = response.get("body", "")
            found: Dict[str, None] = {}
            for inline in html_extract.extract_inline_scripts(page):
                for endpoint in scan(inline, patterns):
                    found.setdefault(endpoint, None)

            js_files = [script["url"] for script in html_extract.extract_scripts(page, url)]
            analysis: List[Dict[str, Any]] = []
            for js_url in js_files[: self.max_script_files]:
                try:
                    entry = await self._analyze_file(js_url, patterns)
                except Exception as exc:  # noqa: BLE001
                    entry = {"file": js_url, "error": str(exc)}
                for endpoint in entry.get("endpoints_found", []):
                    found.setdefault(endpoint, None)
                analysis.append(entry)

            return to_json(
                {
                    "success": True,
                    "url": url,
                    "total_endpoints_found": len(found),
                    "endpoints": list(found),
                    "js_files_analyzed": len(analysis),
                    "js_files": analysis,
                    "patterns_used": [p.pattern for p in patterns],
                }
            )
        except Exception as exc:  # noqa: BLE001
            return to_json({"success": False, "error": str(exc), "url": url})


class ProbeApiEndpointsTool(Tool):
    """
    Request common API paths on a host and classify the responses.

    Tool input schema:
    {
        "base_url": "https://example.com",
        "paths": ["/api", "/graphql"]
    }
    """

    tool_name = "probe_api_endpoints"

    def __init__(self, requester: Optional[WebRequestTool] = None) -> None:
        super().__init__(
            name=self.tool_name,
            description="Systematically probe for common API endpoint patterns and paths",
            parameters={
                "type": "object",
                "properties": {
                    "base_url": {
                        "type": "string",
                        "description": "Base URL to probe for API endpoints",
                    },
                    "paths": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Custom paths to test (optional)",
                    },
                },
                "required": ["base_url"],
            },
        )
        self.requester = requester or WebRequestTool()

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "ProbeApiEndpointsTool":
        return cls(requester=WebRequestTool.from_config(cfg.get("request", {})))

    @staticmethod
    def classify(test_url: str, response: Dict[str, Any]) -> Dict[str, Any]:
        status = response.get("status_code")
        headers = response.get("headers") or {}
        body = response.get("body") or ""
        content_type = headers.get("content-type") or "unknown"
        return {
            "url": test_url,
            "status_code": status if status is not None else "error",
            "accessible": bool(response.get("success")) and status is not None and status < 400,
            "content_type": content_type,
            "response_size": len(body),
            "likely_api": (
                '{"' in body
                or "[{" in body
                or "json" in content_type
                or "xml" in content_type
            ),
        }

    async def run(self, tool_input: Dict[str, Any]) -> str:
        tool_input = tool_input or {}
        base_url = tool_input.get("base_url", "")
        try:
            parsed = urlparse(base_url)
            if not parsed.scheme or not parsed.netloc:
                raise ValueError(f"Invalid URL: {base_url!r}")
            base_domain = f"{parsed.scheme}://{parsed.netloc}"

            results: List[Dict[str, Any]] = []
            for path in tool_input.get("paths") or DEFAULT_PROBE_PATHS:
                test_url = f"{base_domain}{path}"
                try:
                    response = await self.requester.request(test_url, method="GET")
                    results.append(self.classify(test_url, response))
                except Exception as exc:  # noqa: BLE001
                    results.append({"url": test_url, "error": str(exc), "accessible": False})

            accessible = [r["url"] for r in results if r.get("accessible")]
            likely_apis = [r["url"] for r in results if r.get("likely_api")]
            return to_json(
                {
                    "success": True,
                    "base_url": base_url,
                    "total_paths_tested": len(results),
                    "accessible_endpoints": len(accessible),
                    "likely_api_endpoints": len(likely_apis),
                    "results": results,
                    "summary": {"accessible": accessible, "likely_apis": likely_apis},
                }
            )
        except Exception as exc:  # noqa: BLE001
            return to_json({"success": False, "error": str(exc), "base_url": base_url})
