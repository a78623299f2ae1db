"""
Web page source over httpx with BeautifulSoup text extraction.
"""

import re
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from zettelgraph.core.importers.base import WebPageSource
from zettelgraph.models.imported import ImportedDocument
from zettelgraph.models.node import SourceKind
from zettelgraph.utils.exceptions import ImportSourceError, ValidationError
from zettelgraph.utils.logger import get_logger

logger = get_logger(__name__)

# Elements that never hold article text
_CHROME_TAGS = ["script", "style", "noscript", "nav", "footer", "aside", "header", "form"]
_TEXT_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6", "p", "li", "blockquote", "pre"]


def normalize_url(url: str) -> str:
    """
    Validate a page URL, defaulting to https when no scheme is given.

    Raises:
        ValidationError: For empty input, non-web schemes or a missing host
    """
    url = (url or "").strip()
    if not url:
        raise ValidationError("URL required")

    parsed = urlparse(url)
    if not parsed.scheme:
        url = f"https://{url}"
        parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise ValidationError(f"Unsupported URL scheme: {parsed.scheme}", context={"url": url})
    if not parsed.hostname:
        raise ValidationError("URL has no host", context={"url": url})
    return url


def compose_web_note(title: str, body: str, url: str) -> str:
    return f"# {title}\n\n{body}\n\n---\nSource: {url}"


def extract_page_title(soup: BeautifulSoup) -> str | None:
    """Page title from <title>, falling back to og:title."""
    title_tag = soup.find("title")
    if title_tag and title_tag.get_text().strip():
        return re.sub(r"\s+", " ", title_tag.get_text()).strip()

    og_title = soup.find("meta", attrs={"property": "og:title"})
    if og_title and og_title.get("content", "").strip():
        return og_title["content"].strip()
    return None


def extract_page_text(soup: BeautifulSoup) -> str:
    """
    Readable text of the main content as light markdown.

    Headings keep their `#` markers, list items become `- ` lines and
    repeated blocks are dropped.
    """
    container = soup.find("main") or soup.find("article") or soup.body or soup

    for tag in container(_CHROME_TAGS):
        tag.decompose()

    seen: set[str] = set()
    blocks: list[str] = []
    for element in container.find_all(_TEXT_TAGS):
        # Nested text blocks are emitted by their innermost element
        if element.find(_TEXT_TAGS):
            continue
        text = re.sub(r"\s+", " ", element.get_text(separator=" ", strip=True)).strip()
        if not text or text in seen:
            continue
        seen.add(text)

        if element.name[0] == "h" and element.name[1:].isdigit():
            blocks.append(f"{'#' * int(element.name[1:])} {text}")
        elif element.name == "li":
            blocks.append(f"- {text}")
        elif element.name == "blockquote":
            blocks.append(f"> {text}")
        else:
            blocks.append(text)

    if not blocks:
        fallback = re.sub(r"\s+", " ", container.get_text(separator=" ", strip=True)).strip()
        return fallback

    return "\n\n".join(blocks)


class HttpWebPageSource(WebPageSource):
    """
    Fetches pages with an async httpx client.

    Non-HTML text responses are imported as-is; HTML is reduced to its
    main content with BeautifulSoup.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = "ZettelGraph/0.1",
        max_text_chars: int = 100_000,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize web page source.

        Args:
            timeout: Request timeout in seconds
            user_agent: User-Agent header sent with every request
            max_text_chars: Extracted text beyond this length is cut off
            client: Optional preconfigured client; closed by close()
        """
        self.max_text_chars = max_text_chars
        self.client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": user_agent},
        )

    async def fetch(self, url: str) -> ImportedDocument:
        url = normalize_url(url)
        logger.debug("Fetching web page", extra={"url": url})

        try:
            response = await self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(
                f"Web page fetch failed: {e}",
                extra={"url": url, "error": str(e), "error_type": type(e).__name__},
            )
            raise ImportSourceError(f"Failed to fetch {url}: {e}", context={"url": url}) from e

        content_type = response.headers.get("content-type", "")
        hostname = urlparse(url).hostname
        if "html" in content_type or not content_type:
            soup = BeautifulSoup(response.text, "html.parser")
            title = extract_page_title(soup) or hostname
            body = extract_page_text(soup)
        elif content_type.startswith("text/"):
            title = hostname
            body = response.text.strip()
        else:
            raise ImportSourceError(
                f"Unsupported content type: {content_type}",
                context={"url": url, "content_type": content_type},
            )

        if not body:
            raise ImportSourceError(
                "Failed to scrape URL - no content returned", context={"url": url}
            )
        if len(body) > self.max_text_chars:
            body = body[: self.max_text_chars] + "\n\n[content truncated]"

        logger.info("Fetched web page", extra={"url": url, "title": title, "length": len(body)})
        return ImportedDocument(
            title=title,
            content=compose_web_note(title, body, url),
            source_kind=SourceKind.WEB,
            source_url=url,
            metadata={"content_type": content_type, "status_code": response.status_code},
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
