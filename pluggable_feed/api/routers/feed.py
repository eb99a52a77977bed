"""
Feed API router.
Implements GET/POST /v1/feed and GET /v1/preferences.
"""
import logging
import math
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from pluggable_feed.api.dependencies import get_feed_service, get_identity
from pluggable_feed.config import Settings, get_settings
from pluggable_feed.models.schemas import (
    ErrorResponse,
    FeedPreferences,
    FeedRequest,
    FeedResponse,
    Identity,
    PageWindow,
)
from pluggable_feed.services.feed import FeedService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["feed"])

FEED_RESPONSES = {
    200: {"model": FeedResponse, "description": "Feed page returned successfully"},
    400: {"model": ErrorResponse, "description": "Third-party endpoint missing or invalid"},
    401: {"model": ErrorResponse, "description": "Missing or invalid bearer token"},
    422: {"model": ErrorResponse, "description": "Malformed query parameters"},
    500: {"model": ErrorResponse, "description": "Ranking or third-party transport failure"},
    502: {"model": ErrorResponse, "description": "Third-party endpoint returned an error"},
}


def build_window(
    limit: Optional[int],
    offset: Optional[int],
    settings: Settings,
) -> PageWindow:
    """Apply defaults, clamp negatives to zero and cap the limit."""
    limit = settings.DEFAULT_FEED_LIMIT if limit is None else max(limit, 0)
    offset = 0 if offset is None else max(offset, 0)
    return PageWindow(limit=min(limit, settings.MAX_FEED_LIMIT), offset=offset)


def _body_number(body: Dict[str, Any], key: str) -> Optional[int]:
    value = body.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return int(value)


async def read_window_body(request: Request) -> Dict[str, Optional[int]]:
    """
    Read ``limit``/``offset`` from an optional JSON body.

    An empty, unparseable or non-object body is ignored, as is any value that
    is not a JSON number; the caller then keeps the query parameters.
    """
    try:
        body = await request.json()
    except ValueError:
        logger.debug("Ignoring unparseable feed request body")
        return {"limit": None, "offset": None}

    if not isinstance(body, dict):
        return {"limit": None, "offset": None}
    return {"limit": _body_number(body, "limit"), "offset": _body_number(body, "offset")}


async def _serve(
    feed_service: FeedService,
    identity: Identity,
    window: PageWindow,
) -> JSONResponse:
    assembled = await feed_service.get_feed(identity, window)
    return JSONResponse(status_code=assembled.status_code, content=assembled.body)


@router.get(
    "/feed",
    summary="Get Feed Page",
    description="""
    Retrieve one page of the caller's feed.

    The ranking strategy is chosen from the caller's stored preferences:
    - `custom`: weighted likes, comments, follows and recency
    - `third_party`: delegated to the caller's configured endpoint
    - `chronological`: newest first (default and fallback)
    """,
    responses=FEED_RESPONSES,
)
async def get_feed(
    limit: Optional[int] = Query(default=None, description="Number of items to return"),
    offset: Optional[int] = Query(default=None, description="Number of items to skip"),
    identity: Identity = Depends(get_identity),
    feed_service: FeedService = Depends(get_feed_service),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """Get a feed page with the window passed as query parameters."""
    return await _serve(feed_service, identity, build_window(limit, offset, settings))


@router.post(
    "/feed",
    summary="Get Feed Page (JSON body)",
    description=(
        "Same as GET /v1/feed; numeric `limit`/`offset` in the body override query "
        "parameters. A missing or malformed body is ignored."
    ),
    responses=FEED_RESPONSES,
    openapi_extra={
        "requestBody": {
            "required": False,
            "content": {"application/json": {"schema": FeedRequest.model_json_schema()}},
        }
    },
)
async def post_feed(
    request: Request,
    limit: Optional[int] = Query(default=None, description="Number of items to return"),
    offset: Optional[int] = Query(default=None, description="Number of items to skip"),
    identity: Identity = Depends(get_identity),
    feed_service: FeedService = Depends(get_feed_service),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """Get a feed page with the window passed in a JSON body."""
    body = await read_window_body(request)
    if body["limit"] is not None:
        limit = body["limit"]
    if body["offset"] is not None:
        offset = body["offset"]
    return await _serve(feed_service, identity, build_window(limit, offset, settings))


@router.get(
    "/preferences",
    response_model=FeedPreferences,
    summary="Get Resolved Preferences",
    description="The caller's stored preferences merged over defaults.",
    responses={401: {"model": ErrorResponse}},
)
async def get_preferences(
    identity: Identity = Depends(get_identity),
    feed_service: FeedService = Depends(get_feed_service),
) -> FeedPreferences:
    """Resolved preferences for the caller."""
    return await feed_service.get_preferences(identity)
