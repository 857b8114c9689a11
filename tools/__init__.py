"""Tools for the Sniffer AI-content detector.

fetch_page_content:
    Fetch a web page (through a reader service or directly) and extract
    its text. Handles SSL fallback and HTML parsing.

Each tool returns a result object with a .summary property
formatted for logging.

Example:
    >>> from tools import fetch_page_content
    >>> page = await fetch_page_content("https://example.com/article")
    >>> print(page.summary)
"""

from tools.utils import create_ssl_context, USER_AGENT
from tools.fetch import fetch_page_content, PageContent

__all__ = [
    "fetch_page_content",
    "PageContent",
    "create_ssl_context",
    "USER_AGENT",
]
