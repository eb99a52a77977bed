"""
Dependency injection container.
Creates and wires all application components.
Uses FastAPI's dependency injection system.
"""
from functools import lru_cache
from typing import Optional

import httpx
from fastapi import Depends, Header, Request

from pluggable_feed.config import Settings, get_settings
from pluggable_feed.core.exceptions import UnauthorizedError
from pluggable_feed.models.interfaces import IdentityVerifier
from pluggable_feed.models.schemas import Identity
from pluggable_feed.repositories.memory import (
    DEMO_TOKENS,
    InMemoryFeedStore,
    InMemoryIdentityVerifier,
    InMemoryPreferenceRepository,
    seed_demo_preferences,
    seed_demo_store,
)
from pluggable_feed.services.chronological import ChronologicalStrategy
from pluggable_feed.services.dispatcher import StrategyDispatcher
from pluggable_feed.services.feed import FeedService
from pluggable_feed.services.preferences import PreferenceResolver
from pluggable_feed.services.response import ResponseAssembler
from pluggable_feed.services.scoring import ScoringEngine
from pluggable_feed.services.third_party import ThirdPartyStrategy


# =============================================================================
# Singleton Instances (Application Lifetime)
# =============================================================================


@lru_cache()
def get_feed_store() -> InMemoryFeedStore:
    """Get singleton record store."""
    store = InMemoryFeedStore()
    if get_settings().SEED_DEMO_DATA:
        seed_demo_store(store)
    return store


@lru_cache()
def get_preference_repository() -> InMemoryPreferenceRepository:
    """Get singleton preference repository."""
    repository = InMemoryPreferenceRepository()
    if get_settings().SEED_DEMO_DATA:
        seed_demo_preferences(repository)
    return repository


@lru_cache()
def get_identity_verifier() -> InMemoryIdentityVerifier:
    """Get singleton identity verifier."""
    settings = get_settings()
    tokens = dict(DEMO_TOKENS) if settings.SEED_DEMO_DATA else {}
    tokens.update(settings.AUTH_TOKENS)
    return InMemoryIdentityVerifier(tokens)


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Shared outbound HTTP client, owned by the application lifespan."""
    return request.app.state.http_client


# =============================================================================
# Request-Scoped Dependencies (Per-Request Lifetime)
# =============================================================================


async def get_identity(
    authorization: Optional[str] = Header(default=None),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> Identity:
    """
    Authenticate the caller from the ``Authorization: Bearer <token>`` header.

    Raises:
        UnauthorizedError: Header missing, malformed or token unknown
    """
    if not authorization:
        raise UnauthorizedError("Missing Authorization header")

    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise UnauthorizedError("Expected a bearer token")

    user_id = await verifier.verify(token)
    if user_id is None:
        raise UnauthorizedError("Invalid token")

    return Identity(user_id=user_id, authorization=authorization)


def get_feed_service(
    store: InMemoryFeedStore = Depends(get_feed_store),
    preference_repo: InMemoryPreferenceRepository = Depends(get_preference_repository),
    http_client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
) -> FeedService:
    """
    Get feed service with all dependencies wired.
    This is the main entry point for the feed endpoint.
    """
    resolver = PreferenceResolver(
        preference_repo,
        strict=settings.PREFERENCE_PARSE_MODE == "strict",
    )
    dispatcher = StrategyDispatcher(
        scoring_engine=ScoringEngine(store, resolver=resolver),
        chronological=ChronologicalStrategy(store),
        third_party=ThirdPartyStrategy(http_client, timeout_sec=settings.THIRD_PARTY_TIMEOUT_SEC),
    )
    return FeedService(
        resolver=resolver,
        dispatcher=dispatcher,
        assembler=ResponseAssembler(),
    )


# =============================================================================
# Cleanup Functions
# =============================================================================


def clear_caches() -> None:
    """Clear all cached singleton instances (for testing)."""
    get_feed_store.cache_clear()
    get_preference_repository.cache_clear()
    get_identity_verifier.cache_clear()
