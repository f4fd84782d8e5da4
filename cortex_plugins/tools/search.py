"""
Web search tool.

Queries the DuckDuckGo instant-answer API and, when it yields fewer
than three results, supplements them by scraping the lite HTML
endpoint with a command-line fetch. The scrape is best effort: its
failures are logged and the tool returns what it already has.
"""

import asyncio
import json
import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from cortex_plugins.tools.base import FallbackPolicy, Tool, to_json
from cortex_plugins.tools.web import WebRequestTool

logger = logging.getLogger(__name__)

API_ENDPOINT = "https://api.duckduckgo.com/"
LITE_ENDPOINT = "https://lite.duckduckgo.com/lite/"
MAX_RESULTS = 20
MIN_PRIMARY_RESULTS = 3

ANCHOR_RE = re.compile(r'<a href="([^"]*)"[^>]*>([^<]*)</a>')


class WebSearchTool(Tool):
    """
    Search the web using DuckDuckGo.

    Tool input schema:
    {
        "query": "CVE-2024-1234",
        "num_results": 10
    }
    """

    tool_name = "web_search"

    def __init__(
        self,
        requester: Optional[WebRequestTool] = None,
        api_endpoint: str = API_ENDPOINT,
        lite_endpoint: str = LITE_ENDPOINT,
        scrape_command: str = "curl",
        scrape_timeout: float = 30,
        default_num_results: int = 10,
    ) -> None:
        super().__init__(
            name=self.tool_name,
            description=(
                "Search the web using DuckDuckGo for vulnerability research, CVE information, "
                "security tools, and threat intelligence"
            ),
            parameters={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": (
                            "Search query (e.g., 'CVE-2024-1234', 'Apache log4j vulnerability', "
                            "'SQL injection techniques')"
                        ),
                    },
                    "num_results": {
                        "type": "number",
                        "description": "Number of search results to return (default: 10, max: 20)",
                    },
                },
                "required": ["query"],
            },
        )
        self.requester = requester or WebRequestTool()
        self.api_endpoint = api_endpoint
        self.lite_endpoint = lite_endpoint
        self.scrape_command = scrape_command
        self.scrape_timeout = scrape_timeout
        self.default_num_results = default_num_results
        self.policy = FallbackPolicy("web_search scrape")

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "WebSearchTool":
        return cls(
            requester=WebRequestTool.from_config(cfg.get("request", {})),
            api_endpoint=cfg.get("api_endpoint", API_ENDPOINT),
            lite_endpoint=cfg.get("lite_endpoint", LITE_ENDPOINT),
            scrape_command=cfg.get("scrape_command", "curl"),
            scrape_timeout=float(cfg.get("scrape_timeout", 30)),
            default_num_results=int(cfg.get("num_results", 10)),
        )

    @staticmethod
    def parse_instant_answer(data: Dict[str, Any], num_results: int) -> List[Dict[str, Any]]:
        results: List[Dict[str, Any]] = []
        if data.get("Abstract"):
            results.append(
                {
                    "title": data.get("Heading") or "Instant Answer",
                    "snippet": data["Abstract"],
                    "url": data.get("AbstractURL"),
                    "type": "instant_answer",
                }
            )
        remaining = max(num_results - len(results), 0)
        for topic in (data.get("RelatedTopics") or [])[:remaining]:
            text = topic.get("Text")
            first_url = topic.get("FirstURL")
            if text and first_url:
                results.append(
                    {
                        "title": text.split(" - ")[0] or "Related Topic",
                        "snippet": text,
                        "url": first_url,
                        "type": "related_topic",
                    }
                )
        return results

    async def scrape(self, query: str, num_results: int) -> List[Dict[str, Any]]:
        """Fetch the lite HTML results page and pull out its anchors."""
        url = f"{self.lite_endpoint}?q={quote(query, safe='')}"
        process = await asyncio.create_subprocess_exec(
            self.scrape_command,
            "-s",
            url,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, _ = await asyncio.wait_for(process.communicate(), timeout=self.scrape_timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise
        page = stdout.decode("utf-8", errors="replace")
        return [
            {
                "title": title.strip(),
                "snippet": "Search result",
                "url": href,
                "type": "web_result",
            }
            for href, title in ANCHOR_RE.findall(page)[:num_results]
        ]

    async def run(self, tool_input: Dict[str, Any]) -> str:
        tool_input = tool_input or {}
        query = tool_input.get("query", "")
        if not query:
            return to_json({"success": False, "error": "'query' is required.", "query": query})
        try:
            requested = tool_input.get("num_results")
            num_results = int(requested) if requested is not None else self.default_num_results
            num_results = min(max(num_results, 1), MAX_RESULTS)

            search_url = (
                f"{self.api_endpoint}?q={quote(query, safe='')}"
                "&format=json&no_html=1&skip_disambig=1"
            )
            response = await self.requester.request(search_url)
            if not response.get("success"):
                return to_json(
                    {"success": False, "error": "Failed to perform web search", "query": query}
                )

            results = self.parse_instant_answer(json.loads(response["body"]), num_results)

            if len(results) < MIN_PRIMARY_RESULTS:

                async def nothing() -> List[Dict[str, Any]]:
                    return []

                results.extend(
                    await self.policy.run(lambda: self.scrape(query, num_results), nothing)
                )

            return to_json(
                {
                    "success": True,
                    "query": query,
                    "results": results[:num_results],
                    "total_results": len(results),
                }
            )
        except Exception as exc:  # noqa: BLE001
            return to_json({"success": False, "error": str(exc), "query": query})
