"""Client package - consumers of the feed endpoint."""
from .pager import FeedClientError, FeedEntry, FeedPager, media_url, normalize_row

__all__ = ["FeedClientError", "FeedEntry", "FeedPager", "media_url", "normalize_row"]
