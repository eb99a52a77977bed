"""
Domain models using Pydantic.
All data structures for the feed ranking system.
"""
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


# =============================================================================
# Record Store Models (read-only inputs)
# =============================================================================


class MediaKind(str, Enum):
    """Kinds of media that can be attached to a post."""

    PHOTO = "photo"
    VIDEO = "video"


class Post(BaseModel):
    """Authored content as read from the record store."""

    id: str = Field(..., description="Unique post identifier")
    author_id: str = Field(..., description="Identity of the author")
    text_content: Optional[str] = Field(default=None, description="Optional text body")
    created_at: datetime = Field(..., description="Creation timestamp (timezone-aware)")

    model_config = {"frozen": True}


class MediaAttachment(BaseModel):
    """
    Photo or video attached to exactly one post.
    Photos always carry a storage reference, videos a playback reference.
    """

    id: str = Field(..., description="Unique attachment identifier")
    post_id: str = Field(..., description="Owning post")
    kind: MediaKind = Field(..., description="photo or video")
    storage_ref: Optional[str] = Field(default=None, description="Storage path (photos)")
    playback_ref: Optional[str] = Field(default=None, description="Playback id (videos)")
    created_at: datetime = Field(..., description="Creation timestamp")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_reference(self) -> "MediaAttachment":
        if self.kind == MediaKind.PHOTO and not self.storage_ref:
            raise ValueError("photo attachment requires storage_ref")
        if self.kind == MediaKind.VIDEO and not self.playback_ref:
            raise ValueError("video attachment requires playback_ref")
        return self


class Like(BaseModel):
    """A user liking a post."""

    user_id: str
    post_id: str


class Comment(BaseModel):
    """A flat comment on a post."""

    id: str
    post_id: str
    user_id: str
    content: str


class FollowEdge(BaseModel):
    """Directed follow relation."""

    follower_id: str
    followed_id: str

    @model_validator(mode="after")
    def _no_self_follow(self) -> "FollowEdge":
        if self.follower_id == self.followed_id:
            raise ValueError("a user cannot follow themself")
        return self


# =============================================================================
# Resolved Preferences
# =============================================================================


DEFAULT_ALGORITHM_ID = "chronological"


class FeedPreferences(BaseModel):
    """
    Fully-populated feed preferences for one user.
    Produced by merging the stored document over these defaults.
    """

    algorithm_id: str = Field(default=DEFAULT_ALGORITHM_ID, description="Selected strategy")
    like_weight: float = Field(default=1.0, description="Multiplier for like count")
    comment_weight: float = Field(default=0.5, description="Multiplier for comment count")
    follower_weight: float = Field(default=1.0, description="Bonus when author is followed")
    recency_weight: float = Field(default=1.0, description="Multiplier for recency score")
    third_party_endpoint: Optional[str] = Field(
        default=None,
        description="External scorer URL for the third_party strategy",
    )
    defaulted_fields: List[str] = Field(
        default_factory=list,
        description="Fields whose stored value was malformed and replaced by the default",
    )


# =============================================================================
# Ranking Output
# =============================================================================


class MediaSummary(BaseModel):
    """Display-relevant subset of a media attachment."""

    type: MediaKind
    playback_ref: Optional[str] = None
    storage_ref: Optional[str] = None

    @classmethod
    def from_attachment(cls, attachment: MediaAttachment) -> "MediaSummary":
        return cls(
            type=attachment.kind,
            playback_ref=attachment.playback_ref,
            storage_ref=attachment.storage_ref,
        )


class ScoredPost(BaseModel):
    """Row produced by the custom ranking. Never persisted."""

    post_id: str
    author_id: str
    text_content: Optional[str] = None
    created_at: datetime
    like_count: int = 0
    comment_count: int = 0
    is_from_followed: bool = False
    recency_score: float
    final_score: float
    media_type: Optional[MediaKind] = None
    media_playback_ref: Optional[str] = None
    media_storage_ref: Optional[str] = None


class FeedPost(BaseModel):
    """Row produced by the chronological strategy: a post with all its media."""

    id: str
    author_id: str
    text_content: Optional[str] = None
    created_at: datetime
    media: List[MediaSummary] = Field(default_factory=list)


# =============================================================================
# API Models (External)
# =============================================================================


class PageWindow(BaseModel):
    """Page window; negative inputs are clamped to zero."""

    limit: int = Field(default=20, ge=0, description="Maximum items to return")
    offset: int = Field(default=0, ge=0, description="Items to skip")

    @field_validator("limit", "offset", mode="before")
    @classmethod
    def _clamp_negative(cls, value: Any) -> Any:
        if isinstance(value, int) and value < 0:
            return 0
        return value

    @property
    def end(self) -> int:
        return self.offset + self.limit


class FeedRequest(BaseModel):
    """Optional JSON body for POST /v1/feed."""

    limit: Optional[int] = Field(default=None, description="Number of items")
    offset: Optional[int] = Field(default=None, description="Items to skip")


class Identity(BaseModel):
    """Authenticated caller."""

    user_id: str = Field(..., description="Requesting user")
    authorization: str = Field(..., description="Authorization header as received")


class FeedResponse(BaseModel):
    """Successful feed page."""

    posts: Any = Field(..., description="Ranked rows; shape depends on the strategy")
    algorithm: str = Field(..., description="Strategy actually used")


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: str = Field(..., description="Error kind")
    details: Optional[str] = Field(default=None, description="Human-readable detail")
