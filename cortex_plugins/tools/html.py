"""
Regex-based extraction over raw HTML.

Used when no rendered DOM is available. Extraction is best effort:
missing or malformed markup gives empty results, never an exception.
Field names match what the browser-rendered path produces.
"""

import re
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urljoin

SECURITY_HEADERS = [
    "strict-transport-security",
    "content-security-policy",
    "x-frame-options",
    "x-content-type-options",
    "x-xss-protection",
    "referrer-policy",
]

TITLE_RE = re.compile(r"<title[^>]*>([^<]*)</title>", re.I)
SCRIPT_BLOCK_RE = re.compile(r"<script[^>]*>.*?</script>", re.I | re.S)
STYLE_BLOCK_RE = re.compile(r"<style[^>]*>.*?</style>", re.I | re.S)
TAG_RE = re.compile(r"<[^>]*>")
SPACE_RE = re.compile(r"\s+")

ANCHOR_RE = re.compile(r"<a[^>]+href=[\"']([^\"']+)[\"'][^>]*>([^<]*)</a>", re.I)
FORM_RE = re.compile(r"<form[^>]*>.*?</form>", re.I | re.S)
INPUT_RE = re.compile(r"<input[^>]*>", re.I)
SCRIPT_SRC_RE = re.compile(r"<script[^>]*src=[\"']([^\"']+)[\"'][^>]*>", re.I)
INLINE_SCRIPT_RE = re.compile(r"<script[^>]*>(.*?)</script>", re.I | re.S)
META_RE = re.compile(r"<meta[^>]*>", re.I)


def _attr(tag: str, name: str) -> Optional[str]:
    match = re.search(r"\b%s=[\"']([^\"']*)[\"']" % re.escape(name), tag, re.I)
    return match.group(1) if match else None


def _resolve(base_url: str, ref: str, kind: str) -> Dict[str, Any]:
    try:
        return {"type": kind, "url": urljoin(base_url, ref), "relative": ref}
    except ValueError:
        return {"type": kind, "url": ref, "relative": ref, "invalid_url": True}


def extract_title(html: str) -> str:
    match = TITLE_RE.search(html)
    return match.group(1).strip() if match else ""


def extract_text(html: str, limit: int = 2000) -> str:
    """Strip scripts, styles and tags, collapse whitespace, truncate."""
    text = SCRIPT_BLOCK_RE.sub("", html)
    text = STYLE_BLOCK_RE.sub("", text)
    text = TAG_RE.sub(" ", text)
    return SPACE_RE.sub(" ", text).strip()[:limit]


def extract_links(html: str, base_url: str) -> List[Dict[str, Any]]:
    links = []
    for match in ANCHOR_RE.finditer(html):
        link = _resolve(base_url, match.group(1), "link")
        link["text"] = match.group(2).strip()
        links.append(link)
    return links


def extract_forms(html: str) -> List[Dict[str, Any]]:
    forms = []
    for form_match in FORM_RE.finditer(html):
        form = form_match.group(0)
        open_tag = form[: form.find(">") + 1]
        inputs = [
            {
                "name": _attr(tag, "name") or "",
                "type": _attr(tag, "type") or "text",
                "value": _attr(tag, "value") or "",
            }
            for tag in INPUT_RE.findall(form)
        ]
        forms.append(
            {
                "action": _attr(open_tag, "action") or "",
                "method": (_attr(open_tag, "method") or "GET").upper(),
                "inputs": inputs,
            }
        )
    return forms


def extract_scripts(html: str, base_url: str) -> List[Dict[str, Any]]:
    return [_resolve(base_url, src, "external") for src in SCRIPT_SRC_RE.findall(html)]


def extract_inline_scripts(html: str) -> List[str]:
    """Bodies of every <script> element (external ones are usually empty)."""
    return INLINE_SCRIPT_RE.findall(html)


def extract_meta_tags(html: str) -> List[Dict[str, str]]:
    tags = []
    for meta in META_RE.findall(html):
        name = _attr(meta, "name")
        prop = _attr(meta, "property")
        content = _attr(meta, "content")
        if (name or prop) and content is not None:
            tags.append(
                {
                    "name": name or prop,
                    "content": content,
                    "type": "name" if name else "property",
                }
            )
    return tags


def pick_security_headers(headers: Mapping[str, Any]) -> Dict[str, Any]:
    lowered = {str(k).lower(): v for k, v in (headers or {}).items()}
    return {h: lowered[h] for h in SECURITY_HEADERS if lowered.get(h)}
