"""
Browse-website tool.

Renders the page in headless Chromium through Playwright and extracts
title, visible text, links, forms, scripts, meta tags and security
headers. When the browser path fails for any reason (Playwright
browsers not installed, launch error, navigation timeout) the tool
falls back to a static fetch through `WebRequestTool` and regex
extraction. Both paths produce the same result keys; `rendered_with`
tells them apart.
"""

import logging
from typing import Any, Dict, Optional

from playwright.async_api import async_playwright

from cortex_plugins.tools import html as html_extract
from cortex_plugins.tools.base import FallbackPolicy, Tool, to_json
from cortex_plugins.tools.web import WebRequestTool

logger = logging.getLogger(__name__)

BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--no-first-run",
    "--no-default-browser-check",
    "--disable-default-apps",
]

LINKS_JS = """
() => {
    const out = [];
    document.querySelectorAll('a[href]').forEach(link => {
        out.push({
            type: 'link',
            url: link.href,
            text: link.textContent.trim(),
            relative: link.getAttribute('href'),
            visible: link.offsetParent !== null
        });
    });
    document.querySelectorAll('button').forEach(button => {
        out.push({
            type: 'button',
            onclick: button.getAttribute('onclick'),
            data_url: button.getAttribute('data-url') || button.getAttribute('data-href'),
            text: button.textContent.trim(),
            class: button.className,
            visible: button.offsetParent !== null,
            id: button.id
        });
    });
    return out;
}
"""

FORMS_JS = """
() => {
    const out = [];
    document.querySelectorAll('form').forEach(form => {
        const inputs = [];
        form.querySelectorAll('input, textarea, select').forEach(input => {
            inputs.push({
                name: input.name,
                type: input.type || input.tagName.toLowerCase(),
                value: input.value,
                id: input.id,
                placeholder: input.placeholder,
                required: input.required,
                visible: input.offsetParent !== null
            });
        });
        out.push({
            action: form.action,
            method: (form.method || 'GET').toUpperCase(),
            inputs: inputs,
            id: form.id,
            class: form.className,
            visible: form.offsetParent !== null
        });
    });
    return out;
}
"""

SCRIPTS_JS = """
() => Array.from(document.querySelectorAll('script[src]')).map(script => ({
    type: 'external',
    url: script.src,
    relative: script.getAttribute('src')
}))
"""

META_JS = """
() => {
    const tags = [];
    document.querySelectorAll('meta').forEach(meta => {
        const name = meta.getAttribute('name') || meta.getAttribute('property');
        const content = meta.getAttribute('content');
        if (name && content) {
            tags.push({name, content, type: meta.getAttribute('name') ? 'name' : 'property'});
        }
    });
    return tags;
}
"""


async def _evaluate(page, script: str, default: Any) -> Any:
    try:
        return await page.evaluate(script)
    except Exception as exc:  # noqa: BLE001
        logger.debug("In-page extraction failed: %s", exc)
        return default


class BrowseWebsiteTool(Tool):
    """
    Browse a website and extract its content and structure.

    Tool input schema:
    {
        "url": "https://example.com",
        "extract_links": true,
        "extract_forms": false,
        "extract_scripts": false,
        "user_agent": "Mozilla/5.0 ..."
    }
    """

    tool_name = "browse_website"

    def __init__(
        self,
        requester: Optional[WebRequestTool] = None,
        navigation_timeout: float = 60,
        text_limit: int = 2000,
    ) -> None:
        super().__init__(
            name=self.tool_name,
            description=(
                "Browse and extract content from websites for security analysis, "
                "documentation research, and target reconnaissance"
            ),
            parameters={
                "type": "object",
                "properties": {
                    "url": {
                        "type": "string",
                        "description": "Website URL to browse and analyze",
                    },
                    "extract_links": {
                        "type": "boolean",
                        "description": "Extract all links from the page (useful for site mapping)",
                    },
                    "extract_forms": {
                        "type": "boolean",
                        "description": "Extract HTML forms for security analysis",
                    },
                    "extract_scripts": {
                        "type": "boolean",
                        "description": "Extract JavaScript references",
                    },
                    "user_agent": {
                        "type": "string",
                        "description": "Custom User-Agent string for the request",
                    },
                },
                "required": ["url"],
            },
        )
        self.requester = requester or WebRequestTool()
        self.navigation_timeout = navigation_timeout
        self.text_limit = text_limit
        self.policy = FallbackPolicy("browse_website")

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "BrowseWebsiteTool":
        return cls(
            requester=WebRequestTool.from_config(cfg.get("request", {})),
            navigation_timeout=float(cfg.get("navigation_timeout", 60)),
            text_limit=int(cfg.get("text_limit", 2000)),
        )

    async def browse_rendered(
        self,
        url: str,
        extract_links: bool,
        extract_forms: bool,
        extract_scripts: bool,
        user_agent: Optional[str],
    ) -> Dict[str, Any]:
        timeout_ms = self.navigation_timeout * 1000
        async with async_playwright() as pw:
            browser = await pw.chromium.launch(headless=True, args=BROWSER_ARGS)
            try:
                context = await browser.new_context(
                    user_agent=user_agent or None,
                    viewport={"width": 1366, "height": 768},
                    ignore_https_errors=True,
                )
                page = await context.new_page()
                page.set_default_timeout(timeout_ms)
                response = await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
                if response is None:
                    raise RuntimeError(f"No response received for {url}")
                content = await page.content()
                headers = await response.all_headers()

                try:
                    title = await page.title()
                except Exception:  # noqa: BLE001
                    title = ""
                text = await _evaluate(
                    page,
                    "() => document.body ? document.body.innerText.substring(0, %d) : ''"
                    % self.text_limit,
                    "",
                )

                result: Dict[str, Any] = {
                    "success": True,
                    "url": url,
                    "status_code": response.status,
                    "headers": headers,
                    "content_length": len(content),
                    "title": title,
                    "text_content": text,
                    "links": await _evaluate(page, LINKS_JS, []) if extract_links else [],
                    "forms": await _evaluate(page, FORMS_JS, []) if extract_forms else [],
                    "scripts": await _evaluate(page, SCRIPTS_JS, []) if extract_scripts else [],
                    "meta_tags": await _evaluate(page, META_JS, []),
                    "security_headers": html_extract.pick_security_headers(headers),
                    "rendered_with": "playwright",
                }
                return result
            finally:
                await browser.close()

    async def browse_static(
        self,
        url: str,
        extract_links: bool,
        extract_forms: bool,
        extract_scripts: bool,
        user_agent: Optional[str],
    ) -> Dict[str, Any]:
        headers = {"User-Agent": user_agent} if user_agent else {}
        response = await self.requester.request(url, method="GET", headers=headers)
        if not response.get("success"):
            return {"success": False, "error": response.get("error"), "url": url}

        content = response.get("body", "")
        resp_headers = response.get("headers", {})
        return {
            "success": True,
            "url": url,
            "status_code": response.get("status_code"),
            "headers": resp_headers,
            "content_length": len(content),
            "title": html_extract.extract_title(content),
            "text_content": html_extract.extract_text(content, self.text_limit),
            "links": html_extract.extract_links(content, url) if extract_links else [],
            "forms": html_extract.extract_forms(content) if extract_forms else [],
            "scripts": html_extract.extract_scripts(content, url) if extract_scripts else [],
            "meta_tags": html_extract.extract_meta_tags(content),
            "security_headers": html_extract.pick_security_headers(resp_headers),
            "rendered_with": "static",
        }

    async def run(self, tool_input: Dict[str, Any]) -> str:
        tool_input = tool_input or {}
        url = tool_input.get("url", "")
        if not url:
            return to_json({"success": False, "error": "'url' is required.", "url": url})
        args = (
            url,
            bool(tool_input.get("extract_links", False)),
            bool(tool_input.get("extract_forms", False)),
            bool(tool_input.get("extract_scripts", False)),
            tool_input.get("user_agent"),
        )
        try:
            result = await self.policy.run(
                lambda: self.browse_rendered(*args),
                lambda: self.browse_static(*args),
            )
        except Exception as exc:  # noqa: BLE001
            return to_json({"success": False, "error": str(exc), "url": url})
        return to_json(result)
