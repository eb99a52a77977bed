"""
Feed pager - client-side consumer of the feed endpoint.

Accumulates pages for one feed view. Only one page request is in flight at
a time; refreshing abandons any in-flight page and starts over from the
first page.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class FeedClientError(Exception):
    """A page fetch failed. Raised once; the caller decides whether to retry."""

    def __init__(self, status_code: int, error: str, details: Optional[str] = None) -> None:
        self.status_code = status_code
        self.error = error
        self.details = details
        super().__init__(f"{error} ({status_code})" + (f": {details}" if details else ""))


@dataclass
class FeedEntry:
    """One displayable feed row, normalized across strategies."""

    id: Optional[str]
    author_id: Optional[str]
    text_content: Optional[str]
    created_at: Optional[str]
    media_type: Optional[str] = None
    media_url: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)


def media_url(
    media_type: Optional[str],
    playback_ref: Optional[str],
    storage_ref: Optional[str],
    video_base_url: str,
    photo_base_url: str,
) -> Optional[str]:
    """Build a displayable URL: HLS playlist for videos, public object URL for photos."""
    if media_type == "video" and playback_ref:
        return f"{video_base_url.rstrip('/')}/{playback_ref}.m3u8"
    if media_type == "photo" and storage_ref:
        return f"{photo_base_url.rstrip('/')}/{storage_ref.lstrip('/')}"
    return None


def normalize_row(row: Dict[str, Any], video_base_url: str, photo_base_url: str) -> FeedEntry:
    """
    Normalize a row from any strategy.

    Custom rows carry ``post_id`` and flat ``media_*`` columns; chronological
    rows carry ``id`` and a ``media`` list whose first element is the newest.
    """
    media_type = row.get("media_type")
    playback_ref = row.get("media_playback_ref")
    storage_ref = row.get("media_storage_ref")

    attachments = row.get("media")
    if media_type is None and isinstance(attachments, list) and attachments:
        first = attachments[0] if isinstance(attachments[0], dict) else {}
        media_type = first.get("type")
        playback_ref = first.get("playback_ref")
        storage_ref = first.get("storage_ref")

    return FeedEntry(
        id=row.get("id") or row.get("post_id"),
        author_id=row.get("author_id"),
        text_content=row.get("text_content"),
        created_at=row.get("created_at"),
        media_type=media_type,
        media_url=media_url(media_type, playback_ref, storage_ref, video_base_url, photo_base_url),
        raw=row,
    )


class FeedPager:
    """
    Incremental loader for one feed view.

    Usage:
        async with httpx.AsyncClient(base_url="https://api.example.com") as http:
            pager = FeedPager(http, token="...")
            await pager.refresh()
            await pager.load_more()
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        token: str,
        page_size: int = 10,
        feed_path: str = "/v1/feed",
        video_base_url: str = "https://stream.example.com",
        photo_base_url: str = "https://storage.example.com/photos",
    ) -> None:
        self._http = http_client
        self._token = token
        self._page_size = page_size
        self._feed_path = feed_path
        self._video_base_url = video_base_url
        self._photo_base_url = photo_base_url

        self._items: List[FeedEntry] = []
        self._offset = 0
        self._exhausted = False
        self._algorithm: Optional[str] = None
        self._generation = 0
        self._in_flight: Optional[asyncio.Task] = None

    @property
    def items(self) -> List[FeedEntry]:
        return list(self._items)

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def algorithm(self) -> Optional[str]:
        """Strategy reported by the last successful page."""
        return self._algorithm

    @property
    def loading(self) -> bool:
        return self._in_flight is not None and not self._in_flight.done()

    @property
    def has_more(self) -> bool:
        return not self._exhausted

    async def load_more(self) -> Optional[List[FeedEntry]]:
        """
        Load the next page.

        Returns the new entries, an empty list when the feed is exhausted, or
        None without issuing a request when a page is already in flight or
        the page was abandoned by a refresh.

        Raises:
            FeedClientError: If the request fails (offset is left unchanged)
        """
        if self.loading:
            return None
        if self._exhausted:
            return []
        return await self._load(self._offset)

    async def refresh(self) -> Optional[List[FeedEntry]]:
        """Drop accumulated state and any in-flight page, then load the first page."""
        if self.loading:
            self._in_flight.cancel()
        self._generation += 1
        self._items = []
        self._offset = 0
        self._exhausted = False
        return await self._load(0)

    async def _load(self, offset: int) -> Optional[List[FeedEntry]]:
        generation = self._generation
        task = asyncio.ensure_future(self._fetch_page(offset))
        self._in_flight = task
        try:
            entries, algorithm = await task
        except asyncio.CancelledError:
            # Abandoned by refresh(); the caller itself was not cancelled
            if generation != self._generation and task.cancelled():
                return None
            raise
        finally:
            if self._in_flight is task:
                self._in_flight = None

        if generation != self._generation:
            logger.debug(f"Discarding stale page at offset={offset}")
            return None

        self._items.extend(entries)
        self._offset = offset + self._page_size
        self._exhausted = len(entries) < self._page_size
        self._algorithm = algorithm
        return entries

    async def _fetch_page(self, offset: int):
        try:
            response = await self._http.post(
                self._feed_path,
                json={"limit": self._page_size, "offset": offset},
                headers={"Authorization": f"Bearer {self._token}"},
            )
        except httpx.HTTPError as e:
            logger.warning(f"Failed to fetch feed: {e}")
            raise FeedClientError(0, "network_error", str(e)) from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if not response.is_success:
            error = body.get("error", "http_error") if isinstance(body, dict) else "http_error"
            details = body.get("details") if isinstance(body, dict) else None
            logger.warning(f"Failed to fetch feed: status={response.status_code}, error={error}")
            raise FeedClientError(response.status_code, error, details)

        posts = body.get("posts") if isinstance(body, dict) else None
        if not isinstance(posts, list):
            raise FeedClientError(response.status_code, "unexpected_body", "posts is not a list")

        entries = [
            normalize_row(row, self._video_base_url, self._photo_base_url)
            for row in posts
            if isinstance(row, dict)
        ]
        return entries, body.get("algorithm")
