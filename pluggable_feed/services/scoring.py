"""
Scoring engine for the custom strategy.
Scores every post from engagement, social-graph and recency features,
then orders and paginates the result.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Set

from pluggable_feed.core.exceptions import RankingFailureError
from pluggable_feed.models.interfaces import FeedStore
from pluggable_feed.models.schemas import (
    FeedPreferences,
    MediaAttachment,
    PageWindow,
    Post,
    ScoredPost,
)
from pluggable_feed.services.preferences import PreferenceResolver

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600.0


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def recency_score(created_at: datetime, now: datetime) -> float:
    """
    Inverse-linear decay in hours: 1 / (1 + hours_since_created).

    Equals 1.0 at the instant of creation and approaches 0 with age.
    Posts stamped after ``now`` are treated as brand new.
    """
    age_hours = max(0.0, (now - created_at).total_seconds() / SECONDS_PER_HOUR)
    return 1.0 / (1.0 + age_hours)


def final_score(
    preferences: FeedPreferences,
    like_count: int,
    comment_count: int,
    is_from_followed: bool,
    recency: float,
) -> float:
    """Weighted sum of the four ranking features."""
    return (
        preferences.like_weight * like_count
        + preferences.comment_weight * comment_count
        + preferences.follower_weight * (1 if is_from_followed else 0)
        + preferences.recency_weight * recency
    )


class ScoringEngine:
    """
    Custom ranking strategy.

    Every call recomputes features from current store data; nothing is
    cached between requests.
    """

    def __init__(
        self,
        store: FeedStore,
        resolver: Optional[PreferenceResolver] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize scoring engine.

        Args:
            store: Read-only record store
            resolver: Used by get_custom_ranked_feed to load the caller's weights
            clock: Wall-clock source, sampled once per evaluation
        """
        self._store = store
        self._resolver = resolver
        self._clock = clock

    async def rank(
        self,
        requester_id: str,
        window: PageWindow,
        preferences: FeedPreferences,
    ) -> List[ScoredPost]:
        """
        Score, order and paginate all posts for a requester.

        Raises:
            RankingFailureError: If the store cannot be read
        """
        try:
            posts = await self._store.list_posts()
            likes = await self._store.count_likes()
            comments = await self._store.count_comments()
            followed = await self._store.followed_author_ids(requester_id)

            now = self._clock()
            scored = self._score_posts(posts, likes, comments, followed, preferences, now)

            # Highest score first; a tie goes to the newer, then later-stored, post
            ranked = sorted(
                enumerate(scored),
                key=lambda pair: (pair[1].final_score, pair[1].created_at, pair[0]),
                reverse=True,
            )
            scored = [row for _, row in ranked]
            page = scored[window.offset : window.end]

            media = await self._store.media_for_posts(row.post_id for row in page)
        except Exception as e:
            logger.error(f"Custom ranking failed: {e}", extra={"user_id": requester_id})
            raise RankingFailureError(str(e)) from e

        page = [self._attach_media(row, media.get(row.post_id, [])) for row in page]

        logger.debug(
            f"Scored {len(posts)} posts -> returning {len(page)} "
            f"(offset={window.offset}, limit={window.limit})"
        )
        return page

    async def get_custom_ranked_feed(
        self,
        requester_id: str,
        limit: int = 20,
        offset: int = 0,
    ) -> List[ScoredPost]:
        """
        Standalone entry point: resolves the requester's own weights.

        Negative ``limit``/``offset`` are treated as zero.
        """
        preferences = (
            await self._resolver.resolve(requester_id)
            if self._resolver is not None
            else FeedPreferences()
        )
        window = PageWindow(limit=limit, offset=offset)
        return await self.rank(requester_id, window, preferences)

    @staticmethod
    def _score_posts(
        posts: List[Post],
        likes: Dict[str, int],
        comments: Dict[str, int],
        followed: Set[str],
        preferences: FeedPreferences,
        now: datetime,
    ) -> List[ScoredPost]:
        scored = []
        for post in posts:
            like_count = likes.get(post.id, 0)
            comment_count = comments.get(post.id, 0)
            is_from_followed = post.author_id in followed
            recency = recency_score(post.created_at, now)
            scored.append(
                ScoredPost(
                    post_id=post.id,
                    author_id=post.author_id,
                    text_content=post.text_content,
                    created_at=post.created_at,
                    like_count=like_count,
                    comment_count=comment_count,
                    is_from_followed=is_from_followed,
                    recency_score=recency,
                    final_score=final_score(
                        preferences, like_count, comment_count, is_from_followed, recency
                    ),
                )
            )
        return scored

    @staticmethod
    def _attach_media(row: ScoredPost, attachments: List[MediaAttachment]) -> ScoredPost:
        if not attachments:
            return row
        latest = max(attachments, key=lambda m: m.created_at)
        return row.model_copy(update={
            "media_type": latest.kind,
            "media_playback_ref": latest.playback_ref,
            "media_storage_ref": latest.storage_ref,
        })
