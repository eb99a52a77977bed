"""
In-memory repository implementations.
Used for prototyping and testing.
Production would replace these with Postgres-backed implementations.
"""
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from pluggable_feed.models.schemas import (
    Comment,
    FollowEdge,
    Like,
    MediaAttachment,
    MediaKind,
    Post,
)


class InMemoryFeedStore:
    """
    In-memory implementation of FeedStore.
    Simulates the posts, media, likes, comments and follows tables.
    """

    def __init__(self) -> None:
        self._posts: Dict[str, Post] = {}
        self._media: List[MediaAttachment] = []
        self._likes: Dict[tuple, Like] = {}
        self._comments: List[Comment] = []
        self._follows: Set[tuple] = set()

    # -------------------------------------------------------------------------
    # Loading (used by seeding and tests)
    # -------------------------------------------------------------------------

    def add_post(self, post: Post) -> None:
        self._posts[post.id] = post

    def add_media(self, attachment: MediaAttachment) -> None:
        if attachment.post_id not in self._posts:
            raise KeyError(f"Unknown post: {attachment.post_id}")
        self._media.append(attachment)

    def add_like(self, like: Like) -> None:
        # (user, post) is unique, like the table's primary key
        self._likes[(like.user_id, like.post_id)] = like

    def add_comment(self, comment: Comment) -> None:
        self._comments.append(comment)

    def add_follow(self, edge: FollowEdge) -> None:
        self._follows.add((edge.follower_id, edge.followed_id))

    # -------------------------------------------------------------------------
    # FeedStore
    # -------------------------------------------------------------------------

    async def list_posts(self) -> List[Post]:
        return list(self._posts.values())

    async def list_recent_posts(self, offset: int, limit: int) -> List[Post]:
        offset = max(offset, 0)
        limit = max(limit, 0)
        # Insertion order is the tiebreaker for identical timestamps
        ordered = [
            post
            for _, post in sorted(
                enumerate(self._posts.values()),
                key=lambda pair: (pair[1].created_at, pair[0]),
                reverse=True,
            )
        ]
        return ordered[offset : offset + limit]

    async def count_likes(self) -> Dict[str, int]:
        return dict(Counter(like.post_id for like in self._likes.values()))

    async def count_comments(self) -> Dict[str, int]:
        return dict(Counter(comment.post_id for comment in self._comments))

    async def followed_author_ids(self, follower_id: str) -> Set[str]:
        return {followed for follower, followed in self._follows if follower == follower_id}

    async def media_for_posts(self, post_ids: Iterable[str]) -> Dict[str, List[MediaAttachment]]:
        wanted = set(post_ids)
        result: Dict[str, List[MediaAttachment]] = {}
        for attachment in self._media:
            if attachment.post_id in wanted:
                result.setdefault(attachment.post_id, []).append(attachment)
        for attachments in result.values():
            attachments.sort(key=lambda m: m.created_at, reverse=True)
        return result


class InMemoryPreferenceRepository:
    """
    In-memory implementation of PreferenceRepository.
    Stores raw documents exactly as a client saved them.
    """

    def __init__(self) -> None:
        self._documents: Dict[str, Mapping[str, Any]] = {}

    async def get_preferences(self, user_id: str) -> Optional[Mapping[str, Any]]:
        """Fetch the raw preference document."""
        return self._documents.get(user_id)

    def save_preferences(self, user_id: str, document: Mapping[str, Any]) -> None:
        """Store a raw document (stands in for the owning client's upsert)."""
        self._documents[user_id] = dict(document)


class InMemoryIdentityVerifier:
    """
    In-memory implementation of IdentityVerifier.
    Maps opaque bearer tokens to user ids.
    """

    def __init__(self, tokens: Optional[Mapping[str, str]] = None) -> None:
        self._tokens: Dict[str, str] = dict(tokens or {})

    async def verify(self, token: str) -> Optional[str]:
        """Resolve a bearer token to a user id."""
        return self._tokens.get(token)


# =============================================================================
# Demo Data
# =============================================================================


DEMO_TOKENS = {
    "token_alice": "user_alice",
    "token_bob": "user_bob",
    "token_carol": "user_carol",
}


def seed_demo_store(store: InMemoryFeedStore, now: Optional[datetime] = None) -> None:
    """Load a small social graph so the API is usable out of the box."""
    now = now or datetime.now(timezone.utc)
    hour = timedelta(hours=1)

    posts = [
        Post(id="p1", author_id="user_bob", text_content="Sunrise over the bay", created_at=now - 30 * hour),
        Post(id="p2", author_id="user_carol", text_content="First climb of the season", created_at=now - 12 * hour),
        Post(id="p3", author_id="user_bob", text_content=None, created_at=now - 5 * hour),
        Post(id="p4", author_id="user_dave", text_content="Street food tour", created_at=now - 2 * hour),
        Post(id="p5", author_id="user_carol", text_content="Quick update", created_at=now - 10 * timedelta(minutes=1)),
    ]
    for post in posts:
        store.add_post(post)

    store.add_media(MediaAttachment(
        id="m1", post_id="p1", kind=MediaKind.PHOTO,
        storage_ref="user_bob/sunrise.jpg", created_at=posts[0].created_at,
    ))
    store.add_media(MediaAttachment(
        id="m2", post_id="p2", kind=MediaKind.VIDEO,
        playback_ref="climb01", created_at=posts[1].created_at,
    ))
    store.add_media(MediaAttachment(
        id="m3", post_id="p4", kind=MediaKind.PHOTO,
        storage_ref="user_dave/noodles.jpg", created_at=posts[3].created_at,
    ))
    store.add_media(MediaAttachment(
        id="m4", post_id="p4", kind=MediaKind.VIDEO,
        playback_ref="foodtour", created_at=posts[3].created_at + timedelta(minutes=5),
    ))

    for user_id, post_id in [
        ("user_alice", "p1"), ("user_carol", "p1"), ("user_dave", "p1"),
        ("user_alice", "p2"), ("user_bob", "p4"), ("user_alice", "p4"),
    ]:
        store.add_like(Like(user_id=user_id, post_id=post_id))

    store.add_comment(Comment(id="c1", post_id="p2", user_id="user_bob", content="Nice!"))
    store.add_comment(Comment(id="c2", post_id="p2", user_id="user_alice", content="Which crag?"))
    store.add_comment(Comment(id="c3", post_id="p4", user_id="user_carol", content="Hungry now"))

    store.add_follow(FollowEdge(follower_id="user_alice", followed_id="user_carol"))
    store.add_follow(FollowEdge(follower_id="user_bob", followed_id="user_dave"))


def seed_demo_preferences(preferences: InMemoryPreferenceRepository) -> None:
    """Store preference documents for the demo users."""
    preferences.save_preferences("user_alice", {
        "algorithm_id": "custom",
        "like_weight": 1.0,
        "comment_weight": 0.5,
        "follower_weight": 2.0,
        "recency_weight": 1.0,
    })
    preferences.save_preferences("user_bob", {"algorithm_id": "chronological"})
    # user_carol has no preference record and resolves to defaults
