"""
Raw HTTP(S) request tool.

`WebRequestTool` is the shared HTTP primitive of the web plugins: the
browse, search and analysis tools all go through its `request`
coroutine. Requests are sent with the `requests` library in a worker
thread. Redirects are reported to the caller instead of being
followed, and response bodies are decompressed by hand so a broken
gzip/deflate stream degrades to the raw bytes instead of an error.

TLS certificate validation is off by default because the tool is used
against test targets with self-signed certificates.
"""

import asyncio
import logging
import zlib
from typing import Any, Dict, Optional
from urllib.parse import urljoin

import requests
import urllib3
from urllib3.exceptions import InsecureRequestWarning, TimeoutError as Urllib3TimeoutError

from cortex_plugins.tools.base import Tool, to_json

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
REDIRECT_STATUSES = {301, 302, 303, 307, 308}
METHODS = ["GET", "POST", "PUT", "DELETE", "HEAD", "OPTIONS"]

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
}


def decompress(body: bytes, encoding: Optional[str]) -> bytes:
    """
    Undo a gzip or deflate content-encoding.

    Returns the input unchanged for other encodings or when the
    stream cannot be decoded.
    """
    encoding = (encoding or "").strip().lower()
    try:
        if encoding == "gzip":
            return zlib.decompress(body, 16 + zlib.MAX_WBITS)
        if encoding == "deflate":
            try:
                return zlib.decompress(body)
            except zlib.error:
                # some servers send raw deflate without the zlib header
                return zlib.decompress(body, -zlib.MAX_WBITS)
    except zlib.error as exc:
        logger.warning("Decompression failed, using raw body: %s", exc)
    return body


class WebRequestTool(Tool):
    """
    Make an HTTP request and return status, headers and body.

    Tool input schema:
    {
        "url": "https://example.com",
        "method": "GET",
        "headers": {"Authorization": "Bearer token"},
        "data": "a=1&b=2",
        "follow_redirects": true
    }
    """

    tool_name = "web_request"

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, verify_tls: bool = False) -> None:
        super().__init__(
            name=self.tool_name,
            description=(
                "Make HTTP/HTTPS requests to websites and APIs for security testing, "
                "vulnerability research, and reconnaissance"
            ),
            parameters={
                "type": "object",
                "properties": {
                    "url": {
                        "type": "string",
                        "description": "The URL to request (e.g., 'https://example.com', 'http://target.com/api')",
                    },
                    "method": {
                        "type": "string",
                        "enum": METHODS,
                        "description": "HTTP method to use",
                    },
                    "headers": {
                        "type": "object",
                        "description": (
                            "HTTP headers as key-value pairs (e.g., {'User-Agent': 'Mozilla/5.0...', "
                            "'Authorization': 'Bearer token'})"
                        ),
                    },
                    "data": {
                        "type": "string",
                        "description": "Request body data for POST/PUT requests",
                    },
                    "follow_redirects": {
                        "type": "boolean",
                        "description": "Whether to follow HTTP redirects (default: true)",
                    },
                },
                "required": ["url"],
            },
        )
        self.timeout = timeout
        self.verify_tls = verify_tls
        if not verify_tls:
            urllib3.disable_warnings(InsecureRequestWarning)

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "WebRequestTool":
        timeout = float(cfg.get("timeout", DEFAULT_TIMEOUT))
        verify_tls = bool(cfg.get("verify_tls", False))
        return cls(timeout=timeout, verify_tls=verify_tls)

    def _build_headers(
        self, method: str, headers: Optional[Dict[str, Any]], data: Optional[str]
    ) -> Dict[str, str]:
        merged = dict(DEFAULT_HEADERS)
        merged.update({str(k): str(v) for k, v in (headers or {}).items()})
        if data and method in ("POST", "PUT"):
            merged["Content-Length"] = str(len(data.encode("utf-8")))
            if not any(k.lower() == "content-type" for k in merged):
                merged["Content-Type"] = "application/x-www-form-urlencoded"
        return merged

    def _send(
        self,
        url: str,
        method: str,
        headers: Dict[str, str],
        data: Optional[str],
        follow_redirects: bool,
    ) -> Dict[str, Any]:
        resp = requests.request(
            method,
            url,
            headers=headers,
            data=data.encode("utf-8") if data else None,
            timeout=self.timeout,
            verify=self.verify_tls,
            allow_redirects=False,
            stream=True,
        )
        try:
            raw = resp.raw.read(decode_content=False) or b""
        finally:
            resp.close()

        resp_headers = {k.lower(): v for k, v in resp.headers.items()}
        body = decompress(raw, resp_headers.get("content-encoding"))
        result: Dict[str, Any] = {
            "success": True,
            "status_code": resp.status_code,
            "status_message": resp.reason,
            "headers": resp_headers,
            "body": body.decode("utf-8", errors="replace"),
            "url": url,
            "method": method,
            "redirected": False,
        }
        location = resp_headers.get("location")
        if follow_redirects and resp.status_code in REDIRECT_STATUSES and location:
            result["redirected"] = True
            result["redirect_url"] = urljoin(url, location)
        return result

    async def request(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Dict[str, Any]] = None,
        data: Optional[str] = None,
        follow_redirects: bool = True,
    ) -> Dict[str, Any]:
        """
        Perform a request and return the result mapping.

        Network failures and timeouts come back as
        `{"success": False, "error": ...}`; this coroutine does not
        raise for them.
        """
        method = (method or "GET").upper()
        try:
            merged = self._build_headers(method, headers, data)
            return await asyncio.to_thread(
                self._send, url, method, merged, data, follow_redirects
            )
        except (requests.Timeout, Urllib3TimeoutError):
            # body reads time out inside urllib3, which requests does not wrap
            return {"success": False, "error": "Request timeout", "url": url, "method": method}
        except Exception as exc:  # noqa: BLE001
            return {"success": False, "error": str(exc), "url": url, "method": method}

    async def run(self, tool_input: Dict[str, Any]) -> str:
        tool_input = tool_input or {}
        url = tool_input.get("url", "")
        method = tool_input.get("method") or "GET"
        if not url:
            return to_json({"success": False, "error": "'url' is required.", "url": url, "method": method})
        follow_redirects = tool_input.get("follow_redirects")
        result = await self.request(
            url,
            method=method,
            headers=tool_input.get("headers") or {},
            data=tool_input.get("data"),
            follow_redirects=True if follow_redirects is None else bool(follow_redirects),
        )
        return to_json(result)
