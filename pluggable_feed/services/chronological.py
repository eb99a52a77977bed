"""
Chronological strategy - newest posts first, no scoring.
This is both the default algorithm and the fallback for unknown ones.
"""
import logging
from typing import List

from pluggable_feed.core.exceptions import RankingFailureError
from pluggable_feed.models.interfaces import FeedStore
from pluggable_feed.models.schemas import FeedPost, MediaSummary, PageWindow

logger = logging.getLogger(__name__)


class ChronologicalStrategy:
    """Time-descending page of posts, each joined with its attachments."""

    def __init__(self, store: FeedStore) -> None:
        self._store = store

    async def fetch(self, window: PageWindow) -> List[FeedPost]:
        """
        Fetch posts in [offset, offset + limit) of the recency ordering.

        Raises:
            RankingFailureError: If the store cannot be read
        """
        if window.limit == 0:
            return []

        try:
            posts = await self._store.list_recent_posts(window.offset, window.limit)
            media = await self._store.media_for_posts(post.id for post in posts)
        except Exception as e:
            logger.error(f"Chronological read failed: {e}")
            raise RankingFailureError(str(e), error_code="chronological_failed") from e

        return [
            FeedPost(
                id=post.id,
                author_id=post.author_id,
                text_content=post.text_content,
                created_at=post.created_at,
                media=[MediaSummary.from_attachment(m) for m in media.get(post.id, [])],
            )
            for post in posts[: window.limit]
        ]
