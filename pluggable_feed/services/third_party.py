"""
Third-party strategy - delegates ranking to a user-configured HTTP scorer.

The endpoint's response body is the external collaborator's contract and is
passed through untouched. Failures are reported, never retried and never
silently replaced by another strategy.
"""
import logging
from typing import Any, Optional

import httpx

from pluggable_feed.core.exceptions import (
    MissingConfigError,
    UpstreamStatusError,
    UpstreamTransportError,
)
from pluggable_feed.core.telemetry import THIRD_PARTY_LATENCY
from pluggable_feed.models.schemas import Identity, PageWindow

logger = logging.getLogger(__name__)


def validate_endpoint(endpoint: Optional[str]) -> httpx.URL:
    """
    Parse the configured endpoint.

    Raises:
        MissingConfigError: If the endpoint is empty or not an absolute http(s) URL
    """
    if not endpoint or not endpoint.strip():
        raise MissingConfigError()
    try:
        url = httpx.URL(endpoint.strip())
    except httpx.InvalidURL:
        raise MissingConfigError(endpoint)
    if url.scheme not in ("http", "https") or not url.host:
        raise MissingConfigError(endpoint)
    return url


class ThirdPartyStrategy:
    """
    Calls the external scorer with the requester's identity and page window.

    The caller's Authorization header is forwarded unchanged. The call is
    bounded by ``timeout_sec``; cancellation of the surrounding request
    propagates into the in-flight call.
    """

    def __init__(self, http_client: httpx.AsyncClient, timeout_sec: float = 5.0) -> None:
        """
        Initialize third-party strategy.

        Args:
            http_client: Shared async HTTP client
            timeout_sec: Upper bound for one delegate call
        """
        self._http = http_client
        self._timeout_sec = timeout_sec

    async def fetch(
        self,
        identity: Identity,
        window: PageWindow,
        endpoint: Optional[str],
    ) -> Any:
        """
        Fetch a ranked page from the external scorer.

        Raises:
            MissingConfigError: Endpoint missing or malformed (no request is made)
            UpstreamStatusError: Endpoint answered with a non-2xx status
            UpstreamTransportError: Network error, timeout or non-JSON body
        """
        url = validate_endpoint(endpoint).copy_merge_params({
            "user_id": identity.user_id,
            "limit": str(window.limit),
            "offset": str(window.offset),
        })

        try:
            with THIRD_PARTY_LATENCY.time():
                response = await self._http.get(
                    url,
                    headers={"Authorization": identity.authorization},
                    timeout=self._timeout_sec,
                )
        except httpx.TimeoutException as e:
            logger.error(f"Third-party call timed out: host={url.host}", extra={"user_id": identity.user_id})
            raise UpstreamTransportError(f"timed out after {self._timeout_sec}s") from e
        except httpx.HTTPError as e:
            logger.error(f"Third-party call failed: host={url.host}, error={e}", extra={"user_id": identity.user_id})
            raise UpstreamTransportError(type(e).__name__) from e

        if not response.is_success:
            logger.warning(
                f"Third-party endpoint returned {response.status_code}: host={url.host}",
                extra={"user_id": identity.user_id},
            )
            raise UpstreamStatusError(response.status_code)

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Third-party body is not JSON: host={url.host}", extra={"user_id": identity.user_id})
            raise UpstreamTransportError("response body is not valid JSON") from e
