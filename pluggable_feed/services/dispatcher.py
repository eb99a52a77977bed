"""
Strategy dispatcher.
Selects exactly one of the three known ranking strategies and runs it.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pluggable_feed.core.exceptions import AppException, InternalError
from pluggable_feed.models.schemas import FeedPreferences, Identity, PageWindow
from pluggable_feed.services.chronological import ChronologicalStrategy
from pluggable_feed.services.scoring import ScoringEngine
from pluggable_feed.services.third_party import ThirdPartyStrategy

logger = logging.getLogger(__name__)


class Algorithm(str, Enum):
    """The closed set of ranking strategies."""

    CUSTOM = "custom"
    CHRONOLOGICAL = "chronological"
    THIRD_PARTY = "third_party"

    @classmethod
    def resolve(cls, algorithm_id: Optional[str]) -> "Algorithm":
        """Map a stored algorithm id to a strategy; unknown ids fall back to chronological."""
        try:
            return cls(algorithm_id)
        except ValueError:
            return cls.CHRONOLOGICAL


@dataclass
class DispatchResult:
    """Outcome of one strategy run, tagged with the strategy actually used."""

    algorithm: Algorithm
    posts: Any = None
    error: Optional[AppException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class StrategyDispatcher:
    """
    Fixed three-way dispatch over Algorithm.

    Adding a strategy means adding a member and a branch here. Every
    strategy failure is captured in the result; nothing propagates.
    """

    def __init__(
        self,
        scoring_engine: ScoringEngine,
        chronological: ChronologicalStrategy,
        third_party: ThirdPartyStrategy,
    ) -> None:
        self._scoring_engine = scoring_engine
        self._chronological = chronological
        self._third_party = third_party

    async def dispatch(
        self,
        identity: Identity,
        window: PageWindow,
        preferences: FeedPreferences,
    ) -> DispatchResult:
        """Run the strategy selected by ``preferences.algorithm_id``."""
        algorithm = Algorithm.resolve(preferences.algorithm_id)
        if algorithm.value != preferences.algorithm_id:
            logger.info(
                f"Unknown algorithm_id={preferences.algorithm_id!r}, using chronological",
                extra={"user_id": identity.user_id},
            )

        try:
            posts = await self._run(algorithm, identity, window, preferences)
        except AppException as e:
            return DispatchResult(algorithm=algorithm, error=e)
        except Exception as e:
            logger.exception(
                f"Unexpected failure in {algorithm.value} strategy: {e}",
                extra={"user_id": identity.user_id, "algorithm": algorithm.value},
            )
            return DispatchResult(algorithm=algorithm, error=InternalError())

        return DispatchResult(algorithm=algorithm, posts=posts)

    async def _run(
        self,
        algorithm: Algorithm,
        identity: Identity,
        window: PageWindow,
        preferences: FeedPreferences,
    ) -> Any:
        if algorithm is Algorithm.CUSTOM:
            return await self._scoring_engine.rank(identity.user_id, window, preferences)
        elif algorithm is Algorithm.THIRD_PARTY:
            return await self._third_party.fetch(identity, window, preferences.third_party_endpoint)
        else:
            return await self._chronological.fetch(window)
