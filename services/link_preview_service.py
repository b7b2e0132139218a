"""链接预览：抓取页面 title / description / og:image / favicon"""

import re
from typing import Dict, Optional
from urllib.parse import urljoin, urlparse

import httpx

from common.config import LinkPreviewConfig
from common.exceptions import LinkPreviewError, ValidationError
from common.logger import get_logger
from common.utils.text import truncate_text

logger = get_logger(__name__)

_TITLE_RE = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)
_DESCRIPTION_RES = (
    re.compile(r"""<meta[^>]*name=["']description["'][^>]*content=["']([^"']+)["']""", re.IGNORECASE),
    re.compile(r"""<meta[^>]*property=["']og:description["'][^>]*content=["']([^"']+)["']""", re.IGNORECASE),
)
_IMAGE_RES = (
    re.compile(r"""<meta[^>]*property=["']og:image["'][^>]*content=["']([^"']+)["']""", re.IGNORECASE),
    re.compile(r"""<meta[^>]*name=["']twitter:image["'][^>]*content=["']([^"']+)["']""", re.IGNORECASE),
)
_FAVICON_RE = re.compile(
    r"""<link[^>]*rel=["'](?:icon|shortcut icon)["'][^>]*href=["']([^"']+)["']""",
    re.IGNORECASE,
)


def _first_match(html: str, *patterns: re.Pattern) -> str:
    for pattern in patterns:
        match = pattern.search(html)
        if match:
            return match.group(1).strip()
    return ""


def validate_url(url: str) -> str:
    if not url or not isinstance(url, str):
        raise ValidationError("Invalid URL provided")
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError("Invalid URL format", url)
    return url


def extract_metadata(url: str, html: str) -> Dict[str, str]:
    """从 HTML 中提取预览信息，相对地址转为绝对地址"""
    parsed = urlparse(url)
    origin = f"{parsed.scheme}://{parsed.netloc}"

    title = _first_match(html, _TITLE_RE)
    description = _first_match(html, *_DESCRIPTION_RES)
    image = _first_match(html, *_IMAGE_RES)
    favicon = _first_match(html, _FAVICON_RE)

    if image and not image.startswith("http"):
        image = urljoin(origin, image)
    if favicon and not favicon.startswith("http"):
        favicon = urljoin(origin, favicon)

    return {
        "url": url,
        "title": title or parsed.hostname or "",
        "description": truncate_text(description, 300),
        "image": image or favicon,
        "favicon": favicon,
        "domain": parsed.hostname or "",
    }


class LinkPreviewService:
    def __init__(self, config: LinkPreviewConfig):
        self._user_agent = config.user_agent
        self._timeout = config.timeout_seconds
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout, connect=5.0),
                follow_redirects=True,
                headers={"User-Agent": self._user_agent},
            )
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def preview(self, url: str) -> Dict[str, str]:
        validate_url(url)
        try:
            resp = await self._get_client().get(url)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Link preview fetch failed for %s: %r", url, e)
            raise LinkPreviewError("Failed to fetch link preview", repr(e))
        return extract_metadata(url, resp.text)
