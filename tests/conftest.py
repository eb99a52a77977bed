"""
Pytest configuration and fixtures.
"""
from datetime import datetime, timedelta, timezone
from typing import List

import httpx
import pytest
from fastapi.testclient import TestClient

from pluggable_feed.api.dependencies import (
    get_feed_store,
    get_http_client,
    get_identity_verifier,
    get_preference_repository,
)
from pluggable_feed.main import app
from pluggable_feed.models.schemas import (
    Comment,
    FeedPreferences,
    FollowEdge,
    Like,
    MediaAttachment,
    MediaKind,
    Post,
)
from pluggable_feed.repositories.memory import (
    InMemoryFeedStore,
    InMemoryIdentityVerifier,
    InMemoryPreferenceRepository,
)

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """Fixed evaluation instant."""
    return NOW


@pytest.fixture
def clock(now):
    """Clock returning the fixed evaluation instant."""
    return lambda: now


@pytest.fixture
def feed_store():
    """Empty record store."""
    return InMemoryFeedStore()


@pytest.fixture
def populated_store(now):
    """
    Store with 25 posts, one per minute, p0 oldest and p24 newest.
    Authored by two users; user_a follows author_2.
    """
    store = InMemoryFeedStore()
    for i in range(25):
        store.add_post(Post(
            id=f"p{i}",
            author_id="author_1" if i % 2 else "author_2",
            text_content=f"post {i}",
            created_at=now - timedelta(minutes=25 - i),
        ))
    store.add_media(MediaAttachment(
        id="m_old", post_id="p3", kind=MediaKind.PHOTO,
        storage_ref="a/old.jpg", created_at=now - timedelta(minutes=20),
    ))
    store.add_media(MediaAttachment(
        id="m_new", post_id="p3", kind=MediaKind.VIDEO,
        playback_ref="vid3", created_at=now - timedelta(minutes=10),
    ))
    for user in ("u1", "u2", "u3"):
        store.add_like(Like(user_id=user, post_id="p3"))
    store.add_comment(Comment(id="c1", post_id="p7", user_id="u1", content="hi"))
    store.add_follow(FollowEdge(follower_id="user_a", followed_id="author_2"))
    return store


@pytest.fixture
def preference_repo():
    """Empty preference repository."""
    return InMemoryPreferenceRepository()


@pytest.fixture
def verifier():
    """Identity verifier knowing two tokens."""
    return InMemoryIdentityVerifier({"token_a": "user_a", "token_b": "user_b"})


@pytest.fixture
def default_preferences():
    """All-default preferences."""
    return FeedPreferences()


@pytest.fixture
def outbound_requests() -> List[httpx.Request]:
    """Requests captured by the fake third-party endpoint."""
    return []


@pytest.fixture
def third_party_handler():
    """Default fake third-party endpoint: returns a fixed JSON list."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"id": "tp1"}, {"id": "tp2"}])
    return handler


@pytest.fixture
def mock_http_client(outbound_requests, third_party_handler):
    """Async HTTP client backed by an in-process transport."""
    def recording_handler(request: httpx.Request) -> httpx.Response:
        outbound_requests.append(request)
        return third_party_handler(request)

    return httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))


@pytest.fixture
def test_client(populated_store, preference_repo, verifier, mock_http_client):
    """
    TestClient fixture with dependency overrides.
    Uses in-memory repositories and a fake outbound transport for isolation.
    """
    app.dependency_overrides[get_feed_store] = lambda: populated_store
    app.dependency_overrides[get_preference_repository] = lambda: preference_repo
    app.dependency_overrides[get_identity_verifier] = lambda: verifier
    app.dependency_overrides[get_http_client] = lambda: mock_http_client

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Authorization header for user_a."""
    return {"Authorization": "Bearer token_a"}
