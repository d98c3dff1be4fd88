"""
Web fetch tool.

Fetches an http(s) page and returns it as markdown. Local and
private-network addresses are refused, both for the requested URL and
for the URL the request finally lands on after redirects.
"""

from __future__ import annotations

import html
import ipaddress
import re
from urllib.parse import urlparse

import html2text
import httpx
from loguru import logger

from codewright.errors import ToolError
from codewright.tools.base import (
    Tool,
    ToolExecutionContext,
    ToolExecutionResult,
    ToolId,
    ToolParam,
)

MAX_FETCH_CHARS = 20_000

_LOCAL_HOSTS = {"localhost", "127.0.0.1", "::1"}
_TITLE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)


def is_valid_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.hostname)


def is_unsafe_url(url: str) -> bool:
    """True for file URLs, localhost, and loopback / private / link-local IPs."""
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError:
        return True

    if parsed.scheme == "file":
        return True
    if not hostname:
        return True
    if hostname in _LOCAL_HOSTS:
        return True

    try:
        address = ipaddress.ip_address(hostname)
    except ValueError:
        # A DNS name, not a literal address.
        return False
    return address.is_private or address.is_loopback or address.is_link_local or address.is_unspecified


def html_to_markdown(page: str, base_url: str) -> str:
    converter = html2text.HTML2Text(baseurl=base_url)
    converter.body_width = 0
    converter.ignore_images = False

    markdown = converter.handle(page).strip()
    title = _TITLE.search(page)
    if title:
        markdown = f"# {html.unescape(title.group(1).strip())}\n\n{markdown}"
    return markdown


class WebFetchTool(Tool):
    tool_id = ToolId.WEB_FETCH
    description = (
        "Fetch the content of a web page as markdown. "
        "If the user prompt includes a url, use this tool to fetch the page content. "
        "This tool can be used multiple times at once."
    )
    params = {
        "url": ToolParam(description="The url of the web page to fetch"),
    }
    example = """
<web_fetch>
<url>https://www.example.com</url>
</web_fetch>
"""

    def __init__(self, transport: httpx.BaseTransport | None = None):
        self.transport = transport

    def execute(self, context: ToolExecutionContext, args: dict[str, str]) -> ToolExecutionResult:
        url = args.get("url") or args.get("content")
        if not url:
            raise ToolError("URL is required")
        if not is_valid_url(url):
            raise ToolError(f"Failed to fetch {url}: invalid URL or unsupported protocol")
        if is_unsafe_url(url):
            raise ToolError(f"Failed to fetch {url}: access to this URL is not allowed")

        logger.info(f"[TOOL] GET {url}")
        try:
            with httpx.Client(
                transport=self.transport,
                timeout=context.config.limits.fetch_timeout,
                follow_redirects=True,
            ) as client:
                response = client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise ToolError(f"Failed to fetch {url}: {e}")

        final_url = str(response.url)
        if is_unsafe_url(final_url):
            raise ToolError(f"Failed to fetch {url}: redirected to a disallowed address")

        content_type = response.headers.get("content-type", "")
        if "html" in content_type:
            body = html_to_markdown(response.text, final_url)
        else:
            body = response.text

        if len(body) > MAX_FETCH_CHARS:
            body = body[:MAX_FETCH_CHARS] + "\n...(truncated)"
        return ToolExecutionResult(result=f"Successfully fetched from {url}.\n{body}")
