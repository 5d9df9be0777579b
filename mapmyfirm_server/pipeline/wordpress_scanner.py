"""
Pipeline - WordPress Scanner

Discovers content types and pages through the WordPress REST API.
Pages are fetched strictly one result page at a time.
"""

import logging
import re
import httpx
from typing import Any, Callable, Dict, List, Optional
from dataclasses import dataclass
from bs4 import BeautifulSoup

from mapmyfirm_server.config import get_settings
from mapmyfirm_server.exceptions import ScanError
from mapmyfirm_server.schemas.page import SiteNode


logger = logging.getLogger(__name__)

WP_API_BASE = "/wp-json/wp/v2"

POST_FIELDS = "id,title,slug,link,parent,type,status,modified,excerpt"

KNOWN_STATUSES = {"publish", "draft", "private", "future", "pending"}

# (fetched so far, total available)
PageProgress = Callable[[int, int], None]
# (fetched so far, total available, current content type)
ScanProgress = Callable[[int, int, str], None]


@dataclass
class ContentType:
    """A REST-enabled WordPress post type."""
    slug: str
    name: str
    rest_base: str
    hierarchical: bool = False
    description: str = ""


@dataclass
class PostsPage:
    """One page of REST results plus pagination headers."""
    posts: List[Dict[str, Any]]
    total_pages: int
    total: int


def normalize_site_url(url: str) -> str:
    """Ensure a scheme and drop any trailing slash."""
    normalized = url.strip()
    if not re.match(r"^https?://", normalized):
        normalized = "https://" + normalized
    return normalized.rstrip("/")


def html_to_text(html: str) -> str:
    """Rendered WordPress HTML (entities, tags) to plain text."""
    if not html:
        return ""
    return BeautifulSoup(html, "html.parser").get_text(" ", strip=True)


def transform_post_to_node(post: Dict[str, Any]) -> SiteNode:
    """
    Convert a REST post object to a SiteNode.

    Args:
        post: Post JSON restricted to POST_FIELDS

    Returns:
        SiteNode with no manual tags
    """
    title = html_to_text((post.get("title") or {}).get("rendered", ""))
    excerpt = html_to_text((post.get("excerpt") or {}).get("rendered", ""))
    parent = post.get("parent") or 0
    status = post.get("status", "publish")

    return SiteNode(
        id=str(post["id"]),
        title=title or "(No title)",
        slug=post.get("slug", ""),
        url=post.get("link", ""),
        parent_id=str(parent) if parent else None,
        type=post.get("type", "page"),
        status=status if status in KNOWN_STATUSES else "publish",
        manual_tags=[],
        date_modified=post.get("modified"),
        content_excerpt=excerpt,
    )


class WordPressScanner:
    """Scans a WordPress site into a flat list of SiteNodes."""

    def __init__(self, settings=None, transport=None):
        self.settings = settings or get_settings()
        self.per_page = self.settings.wordpress.per_page
        self.timeout = self.settings.wordpress.timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            follow_redirects=True,
        )

    async def _get(self, client: httpx.AsyncClient, url: str, **params) -> httpx.Response:
        try:
            response = await client.get(url, params=params or None)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ScanError(
                f"GET {url} failed with HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise ScanError(f"GET {url} failed: {e}") from e
        return response

    async def get_content_types(self, site_url: str) -> List[ContentType]:
        """
        List public, REST-enabled content types (attachments excluded).

        Args:
            site_url: Site root URL

        Returns:
            List of ContentType
        """
        base = normalize_site_url(site_url)
        async with self._client() as client:
            response = await self._get(client, f"{base}{WP_API_BASE}/types")
            data = response.json()

        types = [
            ContentType(
                slug=item.get("slug", key),
                name=item.get("name", key),
                rest_base=item["rest_base"],
                hierarchical=bool(item.get("hierarchical", False)),
                description=item.get("description", ""),
            )
            for key, item in data.items()
            if item.get("rest_base") and item.get("slug") != "attachment"
        ]

        return types

    async def fetch_posts_page(
        self,
        client: httpx.AsyncClient,
        site_url: str,
        rest_base: str,
        page: int = 1,
        per_page: Optional[int] = None,
    ) -> PostsPage:
        """Fetch one page of posts for a content type."""
        base = normalize_site_url(site_url)
        response = await self._get(
            client,
            f"{base}{WP_API_BASE}/{rest_base}",
            per_page=per_page or self.per_page,
            page=page,
            _fields=POST_FIELDS,
        )

        return PostsPage(
            posts=response.json(),
            total_pages=int(response.headers.get("X-WP-TotalPages", "1")),
            total=int(response.headers.get("X-WP-Total", "0")),
        )

    async def fetch_all_posts(
        self,
        client: httpx.AsyncClient,
        site_url: str,
        rest_base: str,
        on_progress: Optional[PageProgress] = None,
    ) -> List[Dict[str, Any]]:
        """
        Fetch every post of a content type, one result page at a time.

        Progress is reported after each page with the running count and
        the total announced by the first page.
        """
        first = await self.fetch_posts_page(client, site_url, rest_base, 1)
        posts = list(first.posts)
        if on_progress:
            on_progress(len(posts), first.total)

        current_page = 1
        while current_page < first.total_pages:
            current_page += 1
            page = await self.fetch_posts_page(client, site_url, rest_base, current_page)
            posts.extend(page.posts)
            if on_progress:
                on_progress(len(posts), first.total)

        return posts

    async def scan_site(
        self,
        site_url: str,
        content_types: Optional[List[str]] = None,
        on_progress: Optional[ScanProgress] = None,
    ) -> List[SiteNode]:
        """
        Scan the selected content types, one type at a time.

        Args:
            site_url: Site root URL
            content_types: REST bases to fetch (default: from settings)
            on_progress: Called with (fetched, total, content type)

        Returns:
            Flat list of SiteNode in fetch order
        """
        selected = content_types or self.settings.wordpress.content_types
        nodes: List[SiteNode] = []

        logger.info(f"Scanning {site_url} for {', '.join(selected)}")

        async with self._client() as client:
            for content_type in selected:

                def report(current: int, total: int, _type: str = content_type) -> None:
                    logger.debug(f"{_type}: {current}/{total}")
                    if on_progress:
                        on_progress(current, total, _type)

                posts = await self.fetch_all_posts(client, site_url, content_type, report)
                nodes.extend(transform_post_to_node(post) for post in posts)
                logger.info(f"Fetched {len(posts)} items of type {content_type}")

        return nodes

    async def test_api(self, site_url: str) -> bool:
        """True when the site answers on its REST API root."""
        base = normalize_site_url(site_url)
        try:
            async with self._client() as client:
                response = await client.head(f"{base}{WP_API_BASE}")
                return response.is_success
        except httpx.HTTPError as e:
            logger.warning(f"REST API check for {base} failed: {e}")
            return False
