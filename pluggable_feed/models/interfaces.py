"""
Repository interfaces (abstractions).
Using Protocol for structural subtyping (duck typing with type hints).
These define the read-only contracts the ranking subsystem consumes.
"""
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Set, runtime_checkable

from pluggable_feed.models.schemas import MediaAttachment, Post


@runtime_checkable
class FeedStore(Protocol):
    """
    Interface for the relational record store.
    Production: Postgres behind the platform's data API.
    Testing: In-memory implementation.
    """

    async def list_posts(self) -> List[Post]:
        """
        Fetch every post.

        Returns:
            All posts, in no particular order
        """
        ...

    async def list_recent_posts(self, offset: int, limit: int) -> List[Post]:
        """
        Fetch a window of posts ordered by creation time, newest first.

        Args:
            offset: Number of posts to skip
            limit: Maximum posts to return

        Returns:
            Posts in [offset, offset + limit) of the recency ordering
        """
        ...

    async def count_likes(self) -> Dict[str, int]:
        """
        Aggregate likes per post.

        Returns:
            post_id -> like count (posts without likes may be absent)
        """
        ...

    async def count_comments(self) -> Dict[str, int]:
        """
        Aggregate comments per post.

        Returns:
            post_id -> comment count (posts without comments may be absent)
        """
        ...

    async def followed_author_ids(self, follower_id: str) -> Set[str]:
        """
        Fetch identities followed by a user.

        Args:
            follower_id: The following user

        Returns:
            Set of followed user ids
        """
        ...

    async def media_for_posts(self, post_ids: Iterable[str]) -> Dict[str, List[MediaAttachment]]:
        """
        Fetch attachments for a set of posts.

        Args:
            post_ids: Posts to look up

        Returns:
            post_id -> attachments, most recently created first
        """
        ...


@runtime_checkable
class PreferenceRepository(Protocol):
    """
    Interface for the per-user preference document store.
    The document is loosely typed; parsing happens in the resolver.
    """

    async def get_preferences(self, user_id: str) -> Optional[Mapping[str, Any]]:
        """
        Fetch the raw preference document.

        Args:
            user_id: Owner of the document

        Returns:
            The stored document, or None if the user never saved one
        """
        ...


@runtime_checkable
class IdentityVerifier(Protocol):
    """
    Interface for bearer token verification.
    Token issuance is handled by the platform's auth service.
    """

    async def verify(self, token: str) -> Optional[str]:
        """
        Resolve a bearer token to a user id.

        Args:
            token: Bearer token without the scheme prefix

        Returns:
            User id, or None if the token is unknown
        """
        ...
