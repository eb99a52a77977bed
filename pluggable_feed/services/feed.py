"""
Feed service - main business logic orchestrator.
Resolves preferences, dispatches to one ranking strategy and assembles the
response. Each request is independent; nothing is retained between calls.
"""
import logging
import time

from pluggable_feed.core.exceptions import InvalidPreferenceError
from pluggable_feed.core.telemetry import FEED_REQUESTS_TOTAL
from pluggable_feed.models.schemas import FeedPreferences, Identity, PageWindow
from pluggable_feed.services.dispatcher import Algorithm, DispatchResult, StrategyDispatcher
from pluggable_feed.services.preferences import PreferenceResolver
from pluggable_feed.services.response import AssembledResponse, ResponseAssembler

logger = logging.getLogger(__name__)


class FeedService:
    """
    Main feed service orchestrating one page request.

    Responsibilities:
    - Resolve the caller's preferences (fail-soft)
    - Dispatch to exactly one strategy
    - Assemble the uniform response
    """

    def __init__(
            self,
            resolver: PreferenceResolver,
            dispatcher: StrategyDispatcher,
            assembler: ResponseAssembler,
    ) -> None:
        """
        Initialize feed service with dependencies.

        Args:
            resolver: Preference resolver
            dispatcher: Strategy dispatcher
            assembler: Response assembler
        """
        self._resolver = resolver
        self._dispatcher = dispatcher
        self._assembler = assembler

    async def get_feed(self, identity: Identity, window: PageWindow) -> AssembledResponse:
        """
        Get one feed page for the caller.

        Args:
            identity: Authenticated caller
            window: Page window (already clamped)

        Returns:
            AssembledResponse with status code and body
        """
        start_time = time.time()

        try:
            preferences = await self._resolver.resolve(identity.user_id)
        except InvalidPreferenceError as e:
            # Only raised when strict preference parsing is enabled
            result = DispatchResult(algorithm=Algorithm.resolve(None), error=e)
        else:
            result = await self._dispatcher.dispatch(identity, window, preferences)

        response = self._assembler.assemble(result)
        self._record(identity, window, result, start_time)
        return response

    async def get_preferences(self, identity: Identity) -> FeedPreferences:
        """Resolved preferences for diagnostics."""
        return await self._resolver.resolve(identity.user_id)

    @staticmethod
    def _record(
            identity: Identity,
            window: PageWindow,
            result: DispatchResult,
            start_time: float,
    ) -> None:
        elapsed_ms = (time.time() - start_time) * 1000
        outcome = "ok" if result.ok else result.error.error_code
        FEED_REQUESTS_TOTAL.labels(algorithm=result.algorithm.value, outcome=outcome).inc()

        context = {
            "user_id": identity.user_id,
            "algorithm": result.algorithm.value,
            "outcome": outcome,
        }
        if result.ok:
            count = len(result.posts) if isinstance(result.posts, list) else None
            logger.info(
                f"Feed served: offset={window.offset}, limit={window.limit}, "
                f"items={count}, elapsed_ms={elapsed_ms:.2f}",
                extra=context,
            )
        else:
            logger.warning(
                f"Feed failed: {result.error.message}, elapsed_ms={elapsed_ms:.2f}",
                extra=context,
            )
