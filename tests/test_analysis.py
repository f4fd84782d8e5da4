from unittest.mock import AsyncMock

import pytest

from cortex_plugins.tools.analysis import (
    DEFAULT_PROBE_PATHS,
    AnalyzeJavaScriptTool,
    ProbeApiEndpointsTool,
    scan,
    DEFAULT_PATTERNS,
)
from cortex_plugins.tools.web import WebRequestTool
from tests.conftest import call

MAIN_PAGE = """
<html><head>
<script src="/js/app.js"></script>
<script src="https://cdn.example/broken.js"></script>
<script>var users = "/api/users";</script>
</head></html>
"""

APP_JS = 'axios.get("/api/users"); fetch(\'/api/items\'); new WebSocket("ws://x")'


def requester_for(pages):
    async def fake_request(url, method="GET", headers=None, data=None, follow_redirects=True):
        value = pages[url]
        if isinstance(value, Exception):
            raise value
        return value

    requester = WebRequestTool()
    requester.request = AsyncMock(side_effect=fake_request)
    return requester


def ok(body, content_type="text/html", status=200):
    return {"success": True, "status_code": status, "headers": {"content-type": content_type}, "body": body}


def test_scan_deduplicates():
    found = scan('"/api/a" "/api/a" "/api/b"', DEFAULT_PATTERNS)
    assert found == ["/api/a", "/api/b"]


@pytest.mark.asyncio
async def test_analyze_javascript_aggregates_and_deduplicates():
    requester = requester_for(
        {
            "https://site.example/": ok(MAIN_PAGE),
            "https://site.example/js/app.js": ok(APP_JS, "application/javascript"),
            "https://cdn.example/broken.js": {"success": False, "error": "Request timeout"},
        }
    )
    result = await call(AnalyzeJavaScriptTool(requester=requester), url="https://site.example/")

    assert result["success"] is True
    endpoints = result["endpoints"]
    assert endpoints.count("/api/users") == 1
    assert "/api/items" in endpoints
    assert result["total_endpoints_found"] == len(endpoints) == len(set(endpoints))
    assert result["js_files_analyzed"] == 2

    app, broken = result["js_files"]
    assert app["file"] == "https://site.example/js/app.js"
    assert app["size"] == len(APP_JS)
    assert app["contains_api_calls"] is True
    assert "/api/users" in app["endpoints_found"]
    assert broken == {"file": "https://cdn.example/broken.js", "error": "Request timeout"}
    assert len(result["patterns_used"]) == len(DEFAULT_PATTERNS)


@pytest.mark.asyncio
async def test_analyze_javascript_records_file_exception_inline():
    requester = requester_for(
        {
            "https://site.example/": ok(MAIN_PAGE),
            "https://site.example/js/app.js": RuntimeError("reset by peer"),
            "https://cdn.example/broken.js": ok("nothing here"),
        }
    )
    result = await call(AnalyzeJavaScriptTool(requester=requester), url="https://site.example/")
    assert result["success"] is True
    assert result["js_files"][0] == {"file": "https://site.example/js/app.js", "error": "reset by peer"}
    assert result["js_files"][1]["contains_api_calls"] is False
    assert result["endpoints"] == ["/api/users"]


@pytest.mark.asyncio
async def test_analyze_javascript_custom_patterns_and_file_limit():
    requester = requester_for(
        {
            "https://site.example/": ok(MAIN_PAGE),
            "https://site.example/js/app.js": ok(APP_JS),
        }
    )
    tool = AnalyzeJavaScriptTool(requester=requester, max_script_files=1)
    result = await call(tool, url="https://site.example/", search_patterns=[r"/api/items"])
    assert result["endpoints"] == ["/api/items"]
    assert result["js_files_analyzed"] == 1
    assert result["patterns_used"] == ["/api/items"]


@pytest.mark.asyncio
async def test_analyze_javascript_main_page_failure():
    requester = requester_for({"https://site.example/": {"success": False, "error": "refused"}})
    result = await call(AnalyzeJavaScriptTool(requester=requester), url="https://site.example/")
    assert result == {"success": False, "error": "Failed to fetch main page", "url": "https://site.example/"}


@pytest.mark.asyncio
async def test_analyze_javascript_invalid_pattern():
    requester = requester_for({"https://site.example/": ok(MAIN_PAGE)})
    result = await call(
        AnalyzeJavaScriptTool(requester=requester), url="https://site.example/", search_patterns=["("]
    )
    assert result["success"] is False
    assert result["url"] == "https://site.example/"


@pytest.mark.asyncio
async def test_probe_api_endpoints():
    requester = requester_for(
        {
            "https://api.example/api": ok('{"status": "ok"}', "application/json"),
            "https://api.example/docs": ok("<html>docs</html>"),
            "https://api.example/missing": ok("not found", status=404),
            "https://api.example/down": {"success": False, "error": "refused"},
            "https://api.example/boom": RuntimeError("exploded"),
        }
    )
    tool = ProbeApiEndpointsTool(requester=requester)
    result = await call(
        tool,
        base_url="https://api.example/some/page?x=1",
        paths=["/api", "/docs", "/missing", "/down", "/boom"],
    )

    assert result["success"] is True
    assert result["total_paths_tested"] == 5
    by_url = {r["url"]: r for r in result["results"]}
    assert by_url["https://api.example/api"]["accessible"] is True
    assert by_url["https://api.example/api"]["likely_api"] is True
    assert by_url["https://api.example/docs"]["likely_api"] is False
    assert by_url["https://api.example/missing"]["accessible"] is False
    assert by_url["https://api.example/down"]["status_code"] == "error"
    assert by_url["https://api.example/down"]["content_type"] == "unknown"
    assert by_url["https://api.example/boom"] == {
        "url": "https://api.example/boom",
        "error": "exploded",
        "accessible": False,
    }
    assert result["accessible_endpoints"] == 2
    assert result["likely_api_endpoints"] == 1
    assert result["summary"] == {
        "accessible": ["https://api.example/api", "https://api.example/docs"],
        "likely_apis": ["https://api.example/api"],
    }


@pytest.mark.asyncio
async def test_probe_uses_default_paths():
    requester = WebRequestTool()
    requester.request = AsyncMock(return_value={"success": False, "error": "refused"})
    result = await call(ProbeApiEndpointsTool(requester=requester), base_url="http://h.example")
    assert result["total_paths_tested"] == len(DEFAULT_PROBE_PATHS)
    assert result["accessible_endpoints"] == 0


@pytest.mark.asyncio
async def test_probe_invalid_base_url():
    result = await call(ProbeApiEndpointsTool(), base_url="not a url")
    assert result["success"] is False
    assert result["base_url"] == "not a url"
