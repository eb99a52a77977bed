"""Repository implementations package."""
from .memory import (
    InMemoryFeedStore,
    InMemoryIdentityVerifier,
    InMemoryPreferenceRepository,
    DEMO_TOKENS,
    seed_demo_preferences,
    seed_demo_store,
)

__all__ = [
    "InMemoryFeedStore",
    "InMemoryIdentityVerifier",
    "InMemoryPreferenceRepository",
    "DEMO_TOKENS",
    "seed_demo_preferences",
    "seed_demo_store",
]
