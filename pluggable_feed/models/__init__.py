"""Models package - domain entities and interfaces."""
from .interfaces import FeedStore, IdentityVerifier, PreferenceRepository
from .schemas import (
    Comment,
    ErrorResponse,
    FeedPost,
    FeedPreferences,
    FeedRequest,
    FeedResponse,
    FollowEdge,
    Identity,
    Like,
    MediaAttachment,
    MediaKind,
    MediaSummary,
    PageWindow,
    Post,
    ScoredPost,
)

__all__ = [
    # Interfaces
    "FeedStore",
    "IdentityVerifier",
    "PreferenceRepository",
    # Schemas
    "Comment",
    "ErrorResponse",
    "FeedPost",
    "FeedPreferences",
    "FeedRequest",
    "FeedResponse",
    "FollowEdge",
    "Identity",
    "Like",
    "MediaAttachment",
    "MediaKind",
    "MediaSummary",
    "PageWindow",
    "Post",
    "ScoredPost",
]
