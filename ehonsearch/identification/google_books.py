"""
Google Books API Gateway

Catalog search against the Google Books volumes endpoint:
- Title/author search restricted to Japanese books
- ISBN lookup with best-match selection
- Volume mapping to Book records

Failures are reported as GatewayError with one kind per failure class.
Nothing here retries.
"""

from typing import Optional

import httpx
from loguru import logger

from ehonsearch.config import Settings
from ehonsearch.domain.models import Book
from ehonsearch.exceptions import GatewayError, GatewayErrorKind
from ehonsearch.identification.gateway import DEFAULT_MAX_RESULTS
from ehonsearch.identification.isbn import is_valid_isbn, normalize_isbn


MISSING_TITLE = "（タイトル未取得）"
MISSING_AUTHOR = "（著者未取得）"

VOLUME_FIELDS = (
    "items(volumeInfo/title,volumeInfo/authors,volumeInfo/publisher,"
    "volumeInfo/publishedDate,volumeInfo/description,volumeInfo/pageCount,"
    "volumeInfo/categories,volumeInfo/imageLinks,volumeInfo/industryIdentifiers)"
)

ISBN_LOOKUP_RESULTS = 5


class GoogleBooksGateway:
    """
    Client for the Google Books API.

    API key is optional; without one Google applies its anonymous quota.

    Usage:
        gateway = GoogleBooksGateway(api_key="...")
        books = await gateway.search_books("ぐりとぐら", "なかがわりえこ")
        await gateway.close()
    """

    BASE_URL = "https://www.googleapis.com/books/v1"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "GoogleBooksGateway":
        return cls(
            api_key=settings.google_books_api_key,
            timeout=settings.http_timeout,
            base_url=settings.google_books_base_url,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def search_books(
        self,
        title: str,
        author: Optional[str] = None,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> list[Book]:
        """
        Search volumes by title and optional author.

        Args:
            title: Title text, already normalized by the caller
            author: Author text or None
            max_results: Maximum number of volumes to request

        Returns:
            Books in catalog relevance order

        Raises:
            GatewayError: BOOK_NOT_FOUND when the catalog has no items
        """
        query = f'intitle:"{title}"'
        if author:
            query += f' inauthor:"{author}"'

        params = {
            "q": query,
            "maxResults": max_results,
            "printType": "books",
            "langRestrict": "ja",
            "orderBy": "relevance",
            "fields": VOLUME_FIELDS,
        }

        logger.info(f"Google Books search: title={title!r} author={author!r}")
        items = await self._fetch_items(params)

        books = [self._map_volume(item) for item in items]
        logger.debug(f"Google Books returned {len(books)} volumes")
        return books

    async def search_book(self, isbn: str) -> Book:
        """
        Look up a volume by ISBN.

        Prefers a volume whose ISBN-13 matches, then ISBN-10, then the
        first volume returned.

        Raises:
            GatewayError: INVALID_ISBN before any request is made
        """
        normalized = normalize_isbn(isbn)
        if not is_valid_isbn(normalized):
            raise GatewayError(GatewayErrorKind.INVALID_ISBN, detail=isbn)

        params = {
            "q": f"isbn:{normalized}",
            "maxResults": ISBN_LOOKUP_RESULTS,
            "printType": "books",
            "langRestrict": "ja",
            "projection": "full",
            "fields": VOLUME_FIELDS,
        }

        logger.info(f"Google Books ISBN lookup: {normalized}")
        items = await self._fetch_items(params)
        return self._map_volume(self._select_best_match(items, normalized))

    async def close(self):
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------

    async def _fetch_items(self, params: dict) -> list[dict]:
        if self.api_key:
            params = {**params, "key": self.api_key}

        client = await self._get_client()

        try:
            response = await client.get(f"{self.base_url}/volumes", params=params)
        except httpx.HTTPError as e:
            logger.warning(f"Google Books request failed: {type(e).__name__}")
            raise GatewayError(GatewayErrorKind.NETWORK_ERROR, detail=str(e)) from e

        if not response.is_success:
            logger.warning(f"Google Books HTTP error: {response.status_code}")
            raise GatewayError(
                GatewayErrorKind.HTTP_ERROR,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise GatewayError(GatewayErrorKind.DECODING_ERROR, detail=str(e)) from e

        if not isinstance(data, dict):
            raise GatewayError(
                GatewayErrorKind.DECODING_ERROR,
                detail="response body is not an object",
            )

        items = data.get("items")
        if items is not None and not isinstance(items, list):
            raise GatewayError(
                GatewayErrorKind.DECODING_ERROR,
                detail="items is not a list",
            )
        if not items:
            raise GatewayError(GatewayErrorKind.BOOK_NOT_FOUND)

        return items

    def _select_best_match(self, items: list[dict], isbn: str) -> dict:
        for identifier_type in ("ISBN_13", "ISBN_10"):
            for item in items:
                identifiers = self._identifiers(item)
                if identifiers.get(identifier_type) == isbn:
                    return item
        return items[0]

    @staticmethod
    def _identifiers(item: dict) -> dict[str, str]:
        if not isinstance(item, dict):
            return {}
        info = item.get("volumeInfo") or {}
        return {
            ident.get("type"): normalize_isbn(ident.get("identifier", ""))
            for ident in info.get("industryIdentifiers") or []
            if isinstance(ident, dict)
        }

    def _map_volume(self, item: dict) -> Book:
        """Convert a volume resource to a Book."""
        if not isinstance(item, dict):
            raise GatewayError(
                GatewayErrorKind.DECODING_ERROR,
                detail="volume is not an object",
            )

        info = item.get("volumeInfo") or {}
        authors = info.get("authors") or []
        image_links = info.get("imageLinks") or {}

        return Book(
            title=info.get("title") or MISSING_TITLE,
            author=", ".join(authors) if authors else MISSING_AUTHOR,
            isbn13=self._identifiers(item).get("ISBN_13"),
            publisher=info.get("publisher"),
            published_date=info.get("publishedDate"),
            description=info.get("description"),
            small_thumbnail=_secure_url(image_links.get("smallThumbnail")),
            thumbnail=_secure_url(image_links.get("thumbnail")),
            page_count=info.get("pageCount"),
            categories=info.get("categories") or [],
        )


def _secure_url(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    if url.startswith("http://"):
        return "https://" + url[len("http://"):]
    return url
