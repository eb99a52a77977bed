"""Services package - business logic layer."""
from .chronological import ChronologicalStrategy
from .dispatcher import Algorithm, DispatchResult, StrategyDispatcher
from .feed import FeedService
from .preferences import PreferenceResolver, merge_preferences
from .response import AssembledResponse, ResponseAssembler
from .scoring import ScoringEngine, final_score, recency_score
from .third_party import ThirdPartyStrategy

__all__ = [
    "Algorithm",
    "AssembledResponse",
    "ChronologicalStrategy",
    "DispatchResult",
    "FeedService",
    "PreferenceResolver",
    "ResponseAssembler",
    "ScoringEngine",
    "StrategyDispatcher",
    "ThirdPartyStrategy",
    "final_score",
    "merge_preferences",
    "recency_score",
]
