"""
Integration tests for Feed API.
"""
import httpx
import pytest
from fastapi.testclient import TestClient

from pluggable_feed.api.dependencies import get_preference_repository
from pluggable_feed.main import app


class UnreachablePreferenceRepository:
    async def get_preferences(self, user_id):
        raise ConnectionError("preference store down")


class TestAuthentication:
    def test_missing_token(self, test_client: TestClient):
        response = test_client.get("/v1/feed")

        assert response.status_code == 401
        assert response.json() == {"error": "unauthorized"}

    @pytest.mark.parametrize("header", ["Bearer nope", "token_a", "Basic token_a", "Bearer "])
    def test_invalid_token(self, test_client: TestClient, header):
        response = test_client.get("/v1/feed", headers={"Authorization": header})

        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"

    def test_unauthorized_makes_no_outbound_call(self, test_client, preference_repo, outbound_requests):
        preference_repo.save_preferences("user_a", {
            "algorithm_id": "third_party",
            "third_party_endpoint": "https://scorer.example.com/rank",
        })

        test_client.get("/v1/feed", headers={"Authorization": "Bearer wrong"})

        assert outbound_requests == []


class TestFeedAPI:
    def test_default_user_gets_chronological(self, test_client: TestClient, auth_headers):
        """No stored preferences: chronological, default page size."""
        response = test_client.get("/v1/feed", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["algorithm"] == "chronological"
        assert len(data["posts"]) == 20
        assert data["posts"][0]["id"] == "p24"
        assert data["posts"][0]["media"] == []

    def test_chronological_includes_media(self, test_client: TestClient, auth_headers):
        response = test_client.get("/v1/feed", params={"limit": 3, "offset": 21}, headers=auth_headers)

        posts = response.json()["posts"]
        assert [p["id"] for p in posts] == ["p3", "p2", "p1"]
        assert [m["type"] for m in posts[0]["media"]] == ["video", "photo"]

    def test_custom_algorithm(self, test_client: TestClient, preference_repo, auth_headers):
        preference_repo.save_preferences("user_a", {"algorithm_id": "custom"})

        response = test_client.get("/v1/feed", params={"limit": 5}, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["algorithm"] == "custom"
        assert len(data["posts"]) == 5
        top = data["posts"][0]
        assert top["post_id"] == "p3"
        assert top["like_count"] == 3
        assert top["media_type"] == "video"
        assert top["media_playback_ref"] == "vid3"
        assert data["posts"][1]["is_from_followed"] is True

    def test_unknown_algorithm_falls_back_to_chronological(
        self, test_client: TestClient, preference_repo, auth_headers
    ):
        preference_repo.save_preferences("user_a", {"algorithm_id": "trending"})

        response = test_client.get("/v1/feed", params={"limit": 2}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["algorithm"] == "chronological"
        assert [p["id"] for p in response.json()["posts"]] == ["p24", "p23"]

    def test_pagination_is_disjoint(self, test_client: TestClient, preference_repo, auth_headers):
        preference_repo.save_preferences("user_a", {"algorithm_id": "custom"})

        first = test_client.get("/v1/feed", params={"limit": 10, "offset": 0}, headers=auth_headers)
        second = test_client.get("/v1/feed", params={"limit": 10, "offset": 10}, headers=auth_headers)

        first_ids = {p["post_id"] for p in first.json()["posts"]}
        second_ids = {p["post_id"] for p in second.json()["posts"]}
        assert len(first_ids) == 10
        assert len(second_ids) == 10
        assert first_ids.isdisjoint(second_ids)

    def test_negative_window_is_clamped(self, test_client: TestClient, auth_headers):
        empty = test_client.get("/v1/feed", params={"limit": -5}, headers=auth_headers)
        from_start = test_client.get("/v1/feed", params={"limit": 2, "offset": -3}, headers=auth_headers)

        assert empty.status_code == 200
        assert empty.json()["posts"] == []
        assert [p["id"] for p in from_start.json()["posts"]] == ["p24", "p23"]

    def test_limit_is_capped(self, test_client: TestClient, auth_headers):
        response = test_client.get("/v1/feed", params={"limit": 10_000}, headers=auth_headers)

        assert response.status_code == 200
        assert len(response.json()["posts"]) == 25

    def test_post_body_window(self, test_client: TestClient, auth_headers):
        response = test_client.post(
            "/v1/feed",
            params={"limit": 7},
            json={"limit": 2, "offset": 1},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert [p["id"] for p in response.json()["posts"]] == ["p23", "p22"]

    def test_post_without_body_uses_query(self, test_client: TestClient, auth_headers):
        response = test_client.post("/v1/feed", params={"limit": 1}, headers=auth_headers)

        assert response.status_code == 200
        assert len(response.json()["posts"]) == 1

    def test_post_unparseable_body_falls_back_to_query(self, test_client: TestClient, auth_headers):
        response = test_client.post(
            "/v1/feed",
            params={"limit": 3},
            content="{not json",
            headers={**auth_headers, "Content-Type": "application/json"},
        )

        assert response.status_code == 200
        assert len(response.json()["posts"]) == 3

    @pytest.mark.parametrize("body,expected", [
        ({"limit": 2.5}, 2),
        ({"limit": "5"}, 3),
        ({"limit": True}, 3),
        ({"limit": None, "offset": 1}, 3),
        ([1, 2], 3),
    ])
    def test_post_only_numeric_body_values_override(
        self, test_client: TestClient, auth_headers, body, expected
    ):
        response = test_client.post("/v1/feed", params={"limit": 3}, json=body, headers=auth_headers)

        assert response.status_code == 200
        assert len(response.json()["posts"]) == expected

    def test_malformed_query_uses_error_shape(self, test_client: TestClient, auth_headers):
        response = test_client.get("/v1/feed", params={"limit": "abc"}, headers=auth_headers)

        assert response.status_code == 422
        data = response.json()
        assert data["error"] == "invalid_request"
        assert data["details"].startswith("query.limit")
        assert "detail" not in data

    def test_preference_read_failure_serves_chronological(self, test_client: TestClient, auth_headers):
        app.dependency_overrides[get_preference_repository] = lambda: UnreachablePreferenceRepository()

        response = test_client.get("/v1/feed", params={"limit": 3}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["algorithm"] == "chronological"

    def test_get_preferences(self, test_client: TestClient, preference_repo, auth_headers):
        preference_repo.save_preferences("user_a", {"algorithm_id": "custom", "like_weight": "oops"})

        response = test_client.get("/v1/preferences", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["algorithm_id"] == "custom"
        assert data["like_weight"] == 1.0
        assert data["comment_weight"] == 0.5
        assert data["defaulted_fields"] == ["like_weight"]


class TestThirdPartyAPI:
    @pytest.fixture
    def endpoint_prefs(self, preference_repo):
        preference_repo.save_preferences("user_a", {
            "algorithm_id": "third_party",
            "third_party_endpoint": "https://scorer.example.com/rank",
        })

    def test_missing_endpoint(self, test_client, preference_repo, auth_headers, outbound_requests):
        preference_repo.save_preferences("user_a", {"algorithm_id": "third_party"})

        response = test_client.get("/v1/feed", headers=auth_headers)

        assert response.status_code == 400
        assert response.json() == {"error": "missing_third_party_endpoint"}
        assert outbound_requests == []

    def test_malformed_endpoint(self, test_client, preference_repo, auth_headers, outbound_requests):
        preference_repo.save_preferences("user_a", {
            "algorithm_id": "third_party",
            "third_party_endpoint": "scorer.example.com",
        })

        response = test_client.get("/v1/feed", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_third_party_endpoint"
        assert outbound_requests == []

    def test_delegates_and_passes_body_through(
        self, test_client, endpoint_prefs, auth_headers, outbound_requests
    ):
        response = test_client.get("/v1/feed", params={"limit": 4, "offset": 8}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"posts": [{"id": "tp1"}, {"id": "tp2"}], "algorithm": "third_party"}
        request = outbound_requests[0]
        assert request.headers["Authorization"] == "Bearer token_a"
        assert request.url.params["user_id"] == "user_a"
        assert request.url.params["limit"] == "4"
        assert request.url.params["offset"] == "8"


class TestThirdPartyUpstreamFailure:
    @pytest.fixture
    def third_party_handler(self):
        return lambda request: httpx.Response(500, json={"oops": True})

    def test_upstream_error_status(self, test_client, preference_repo, auth_headers):
        preference_repo.save_preferences("user_a", {
            "algorithm_id": "third_party",
            "third_party_endpoint": "https://scorer.example.com/rank",
        })

        response = test_client.get("/v1/feed", headers=auth_headers)

        assert response.status_code == 502
        assert response.json() == {"error": "third_party_failed", "details": "upstream status 500"}


class TestThirdPartyUnreachable:
    @pytest.fixture
    def third_party_handler(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)
        return handler

    def test_transport_error(self, test_client, preference_repo, auth_headers):
        preference_repo.save_preferences("user_a", {
            "algorithm_id": "third_party",
            "third_party_endpoint": "https://scorer.example.com/rank",
        })

        response = test_client.get("/v1/feed", headers=auth_headers)

        assert response.status_code == 500
        assert response.json()["error"] == "third_party_exception"


class TestHealth:
    def test_health(self, test_client: TestClient):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_readiness_reports_strategies(self, test_client: TestClient):
        response = test_client.get("/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert set(data["strategies"]) == {"custom", "chronological", "third_party"}
        assert data["preference_parse_mode"] in ("lenient", "strict")
