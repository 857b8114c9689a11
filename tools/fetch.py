"""Page content extraction for URL documents.

This module turns a web-page URL into plain text for analysis.

Modes:
    - Reader (default): GET {reader_base_url}{url} on a reader service
      (Jina Reader) that returns the page as markdown
    - Direct: when reader_base_url is empty, fetch the HTML and reduce it
      to text locally (strips scripts, styles)

Features:
    - SSL fallback for problematic certificates
    - Content truncation for large pages
    - Never raises: failures come back as PageContent(success=False)
"""

import html
import logging
import re
from dataclasses import dataclass
from html.parser import HTMLParser
from io import StringIO

import aiohttp

from tools.utils import create_ssl_context, USER_AGENT

logger = logging.getLogger(__name__)

_READER_TITLE = re.compile(r"^Title:\s*(.+)$", re.MULTILINE)
_HTML_TITLE = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)


class _HTMLTextExtractor(HTMLParser):
    """Extract readable text from HTML, skipping non-content tags.

    Ignores content within script, style, head, meta, and link tags.
    Accumulates all other text content into a buffer.

    Usage:
        >>> parser = _HTMLTextExtractor()
        >>> parser.feed("<p>Hello <script>ignored</script> world</p>")
        >>> parser.get_text()
        'Hello  world'
    """

    # Tags whose content should be completely ignored
    SKIP_TAGS = frozenset({"script", "style", "head", "meta", "link", "noscript"})

    # Tags that end a sentence-bearing block; a newline keeps them apart
    BLOCK_TAGS = frozenset({"p", "div", "br", "li", "h1", "h2", "h3", "h4", "h5", "h6", "tr"})

    def __init__(self):
        super().__init__()
        self._buffer = StringIO()
        self._skip_depth = 0  # Nesting depth within skip tags

    def handle_starttag(self, tag, attrs):
        if tag in self.SKIP_TAGS:
            self._skip_depth += 1
        elif tag in self.BLOCK_TAGS:
            self._buffer.write("\n")

    def handle_endtag(self, tag):
        if tag in self.SKIP_TAGS and self._skip_depth > 0:
            self._skip_depth -= 1
        elif tag in self.BLOCK_TAGS:
            self._buffer.write("\n")

    def handle_data(self, data):
        # Only capture text when not inside a skip tag
        if self._skip_depth == 0:
            self._buffer.write(data)

    def get_text(self) -> str:
        """Return accumulated text content."""
        return self._buffer.getvalue()


def extract_text(html_content: str) -> str:
    """Extract readable text from HTML, one block per line."""
    parser = _HTMLTextExtractor()
    try:
        parser.feed(html_content)
        text = parser.get_text()
    except Exception:
        # Fallback: strip tags with regex
        text = re.sub(r"<[^>]+>", "\n", html_content)

    # Collapse runs of spaces within lines, then drop blank lines
    lines = (re.sub(r"[ \t\r\f\v]+", " ", line).strip() for line in text.split("\n"))
    return "\n".join(line for line in lines if line)


def extract_title(text: str, is_html: bool) -> str:
    """Title from a <title> tag or a reader 'Title:' header line."""
    pattern = _HTML_TITLE if is_html else _READER_TITLE
    match = pattern.search(text)
    if not match:
        return ""
    title = match.group(1).strip()
    return html.unescape(title) if is_html else title


def build_reader_url(url: str, reader_base_url: str) -> str:
    """URL to request: the reader-prefixed URL, or the page itself."""
    if not reader_base_url:
        return url
    return f"{reader_base_url}{url}"


@dataclass
class PageContent:
    """Extracted page content, or the reason it could not be extracted."""

    url: str
    title: str
    content: str
    success: bool
    error: str | None = None

    @property
    def summary(self) -> str:
        """Page summary for logs."""
        if not self.success:
            return f"Failed to fetch: {self.error}"
        preview = self.content[:200] + "..." if len(self.content) > 200 else self.content
        return f"Title: {self.title}\n\n{preview}"


async def _download(url: str, timeout: int) -> str:
    """GET a URL and return its decoded body.

    Raises:
        aiohttp.ClientResponseError: On non-2xx status
        aiohttp.ClientError: On network failure
    """

    async def fetch_with_ssl(session: aiohttp.ClientSession, verify: bool) -> str:
        async with session.get(
            url,
            timeout=aiohttp.ClientTimeout(total=timeout),
            headers={"User-Agent": USER_AGENT},
            ssl=create_ssl_context(verify),
        ) as resp:
            if not 200 <= resp.status < 300:
                raise aiohttp.ClientResponseError(
                    resp.request_info, resp.history, status=resp.status
                )
            return await resp.text(errors="replace")

    async with aiohttp.ClientSession() as session:
        try:
            return await fetch_with_ssl(session, verify=True)
        except aiohttp.ClientSSLError:
            logger.debug("SSL error, retrying without verification: %s", url)
            return await fetch_with_ssl(session, verify=False)


async def fetch_page_content(
    url: str,
    reader_base_url: str = "https://r.jina.ai/",
    timeout: int = 30,
    max_length: int = 50000,
) -> PageContent:
    """Fetch a page and extract its text.

    Args:
        url: Page URL
        reader_base_url: Reader service prefix; empty to fetch directly
        timeout: Request timeout in seconds
        max_length: Max content length

    Returns:
        PageContent with extracted text or error
    """
    request_url = build_reader_url(url, reader_base_url)
    via_reader = bool(reader_base_url)
    logger.debug("Fetching page | url=%s reader=%s", url, via_reader)

    try:
        body = await _download(request_url, timeout)
    except aiohttp.ClientResponseError as e:
        logger.warning("Page fetch rejected | url=%s status=%d", url, e.status)
        return PageContent(url=url, title="", content="", success=False, error=f"HTTP {e.status}")
    except Exception as e:
        logger.error("Fetch error for %s: %s", url, e, exc_info=True)
        return PageContent(url=url, title="", content="", success=False, error=str(e) or type(e).__name__)

    if via_reader:
        title = extract_title(body, is_html=False)
        content = body.strip()
    else:
        title = extract_title(body, is_html=True)
        content = extract_text(body)

    if len(content) > max_length:
        content = content[:max_length] + "... [truncated]"

    logger.debug("Page fetched | url=%s chars=%d", url, len(content))
    return PageContent(url=url, title=title, content=content, success=True)
