import asyncio
import logging
import re
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup
from pydantic import BaseModel

from favset.config import settings

logger = logging.getLogger(__name__)

UNKNOWN_DOMAIN = "unknown"
TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 500
ELLIPSIS = "..."

_WHITESPACE_RE = re.compile(r"\s+")

# (attribute, value) pairs of <meta> tags, highest priority first
TITLE_META = (("property", "og:title"), ("name", "twitter:title"))
DESCRIPTION_META = (
    ("property", "og:description"),
    ("name", "twitter:description"),
    ("name", "description"),
)


class UrlMetadata(BaseModel):
    domain: str
    title: str | None = None
    description: str | None = None


def extract_domain(url: str) -> str | None:
    """Return the lowercased host of ``url``, or None when it has none."""
    try:
        return urlparse(url).hostname or None
    except ValueError:
        return None


def clean_text(value: str | None, max_length: int) -> str | None:
    """Collapse whitespace, trim and truncate; empty results become None."""
    if value is None:
        return None
    text = _WHITESPACE_RE.sub(" ", value).strip()
    if not text:
        return None
    if len(text) > max_length:
        text = text[: max_length - len(ELLIPSIS)] + ELLIPSIS
    return text


def _meta_content(soup: BeautifulSoup, candidates: tuple[tuple[str, str], ...]) -> str | None:
    for attr, value in candidates:
        tag = soup.find("meta", attrs={attr: value})
        if tag is None:
            continue
        content = tag.get("content")
        if isinstance(content, str) and content.strip():
            return content
    return None


def parse_metadata(html: str) -> tuple[str | None, str | None]:
    """Pick the best title and description out of an HTML document."""
    soup = BeautifulSoup(html, "html.parser")

    title = _meta_content(soup, TITLE_META)
    if title is None and soup.title is not None:
        title = soup.title.get_text()
    description = _meta_content(soup, DESCRIPTION_META)

    return (
        clean_text(title, TITLE_MAX_LENGTH),
        clean_text(description, DESCRIPTION_MAX_LENGTH),
    )


class MetadataService:
    """Resolves the title and description of a page for a saved link.

    Resolution is best effort: every failure (bad URL, network error,
    timeout, non-success status, unparseable body) degrades to a result
    carrying only the domain.
    """

    def __init__(
        self,
        timeout: float | None = None,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = settings.metadata_timeout if timeout is None else timeout
        self.user_agent = user_agent or settings.metadata_user_agent
        self._transport = transport

    async def resolve(self, url: str) -> UrlMetadata:
        domain = extract_domain(url)
        if domain is None:
            return UrlMetadata(domain=UNKNOWN_DOMAIN)

        try:
            response = await asyncio.wait_for(self._fetch(url), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning("Metadata fetch failed reason=timeout url=%s", url)
            return UrlMetadata(domain=domain)
        except httpx.HTTPError as exc:
            logger.warning(
                "Metadata fetch failed reason=request_error url=%s error=%r", url, exc
            )
            return UrlMetadata(domain=domain)
        except Exception:
            logger.exception("Metadata fetch failed reason=request_error url=%s", url)
            return UrlMetadata(domain=domain)

        if not response.is_success:
            logger.warning(
                "Metadata fetch failed reason=http_status url=%s status=%s",
                url,
                response.status_code,
            )
            return UrlMetadata(domain=domain)

        try:
            title, description = parse_metadata(response.text)
        except Exception:
            logger.exception("Metadata fetch failed reason=parse_error url=%s", url)
            return UrlMetadata(domain=domain)

        return UrlMetadata(domain=domain, title=title, description=description)

    async def _fetch(self, url: str) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": self.user_agent},
            transport=self._transport,
        ) as client:
            return await client.get(url)
