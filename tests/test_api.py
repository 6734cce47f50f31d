"""
tests/test_api.py – Integration tests via FastAPI TestClient.
Scenarios: every endpoint answers with the right status, body and headers.
"""
import pytest
from unittest.mock import AsyncMock, patch

from food_api.core.errors import MESSAGES, StoreFailure
from food_api.core.ratelimit import RateLimiter
from food_api.models import ServerHealth, ServerHealthDetails

from conftest import make_food

BASE = "http://localhost:8099"


def _error(r, status: int, key: str) -> None:
    assert r.status_code == status
    assert r.json() == {"status": status, "message": MESSAGES[key]}


# ── GET / and /foods ───────────────────────────────────────────────────────────

class TestIndex:

    def test_endpoint_map(self, client):
        r = client.get("/")
        assert r.status_code == 200
        body = r.json()
        assert sorted(body) == [
            "api_health_url", "get_food_url", "list_all_foods_url", "search_food_url", "show_all_tags",
        ]
        assert body["api_health_url"] == f"{BASE}/health"
        assert body["get_food_url"] == f"{BASE}/food/{{slug}}"
        assert body["search_food_url"].startswith(f"{BASE}/foods/search?q=")

    def test_foods_sub_endpoints(self, client):
        r = client.get("/foods")
        assert r.status_code == 200
        assert r.json() == {
            "list_all_foods_url": f"{BASE}/foods/list",
            "search_food_url": f"{BASE}/foods/search?q={{query}}&mode={{description, tag}}&limit={{limit}}",
        }

    def test_unknown_route(self, client):
        _error(client.get("/nope"), 404, "not_found")


# ── GET /food/{slug} ───────────────────────────────────────────────────────────

class TestFood:

    def test_found(self, client):
        r = client.get("/food/fuji-elma")
        assert r.status_code == 200
        body = r.json()
        assert body["slug"] == "fuji-elma"
        assert body["description"] == "Fuji Elma"
        assert body["verified"] is True
        assert body["image_url"] == f"{BASE}/images/fuji-elma.webp"
        assert sorted(body["tags"]) == ["elma", "meyve"]
        assert body["servings"] == {"Adet (Orta)": 182.0}
        assert body["energy"] == 1.0

    def test_absolute_image_url_untouched(self, client):
        r = client.get("/food/karpuz")
        assert r.json()["image_url"] == "https://cdn.example.com/karpuz.webp"

    def test_unknown_slug(self, client):
        _error(client.get("/food/unknown-slug"), 404, "food_not_found")

    def test_unverified(self, client):
        _error(client.get("/food/cig-kofte"), 403, "food_unverified")

    def test_slug_too_long(self, client):
        _error(client.get("/food/" + "a" * 101), 400, "slug_length")

    def test_forbidden_characters(self, client):
        _error(client.get("/food/elma;drop"), 400, "invalid_characters")

    def test_store_failure_reads_as_not_found(self, client):
        with patch("food_api.deps._store.select_food_by_slug", AsyncMock(side_effect=StoreFailure("locked"))):
            _error(client.get("/food/muz"), 404, "food_not_found")


# ── GET /foods/list, /tags ─────────────────────────────────────────────────────

class TestListings:

    def test_list_sorted_verified_only(self, client):
        r = client.get("/foods/list")
        assert r.status_code == 200
        body = r.json()
        assert list(body) == ["fuji-elma", "karpuz", "makarna", "muz"]
        assert body["muz"] == f"{BASE}/food/muz"

    def test_list_store_failure(self, client):
        with patch("food_api.deps._store.select_all_verified_slugs", AsyncMock(side_effect=StoreFailure("x"))):
            _error(client.get("/foods/list"), 500, "list_failed")

    def test_tags(self, client):
        r = client.get("/tags")
        assert r.status_code == 200
        assert sorted(r.json()) == ["elma", "et", "meyve", "tahıl"]

    def test_tags_store_failure(self, client):
        with patch("food_api.deps._store.select_all_tags", AsyncMock(side_effect=StoreFailure("x"))):
            _error(client.get("/tags"), 500, "tags_failed")


# ── GET /foods/search ──────────────────────────────────────────────────────────

class TestSearch:

    def test_description_ranked(self, client):
        r = client.get("/foods/search", params={"q": "ar"})
        assert r.status_code == 200
        # "makarna" has "ar" at 3 of 7, "karpuz" at 1 of 6
        assert [f["slug"] for f in r.json()] == ["karpuz", "makarna"]

    def test_prefix_first(self, client):
        r = client.get("/foods/search", params={"q": "m"})
        slugs = [f["slug"] for f in r.json()]
        assert slugs[:2] == ["muz", "makarna"]

    def test_name_mode_is_description_search(self, client):
        a = client.get("/foods/search", params={"q": "elma", "mode": "name"}).json()
        b = client.get("/foods/search", params={"q": "elma"}).json()
        assert a == b
        assert [f["slug"] for f in a] == ["fuji-elma"]

    def test_tag_mode(self, client):
        r = client.get("/foods/search", params={"q": "meyve", "mode": "tag"})
        assert r.status_code == 200
        assert [f["slug"] for f in r.json()] == ["fuji-elma", "muz", "karpuz"]

    def test_unverified_filtered(self, client):
        r = client.get("/foods/search", params={"q": "et", "mode": "tag"})
        assert r.status_code == 200
        assert r.json() == []

    def test_limit(self, client):
        r = client.get("/foods/search", params={"q": "meyve", "mode": "tag", "limit": 2})
        assert [f["slug"] for f in r.json()] == ["fuji-elma", "muz"]

    def test_default_limit_is_five(self, client):
        many = [make_food(f"Elma {i}", slug=f"elma-{i}", verified=True) for i in range(7)]
        with patch("food_api.deps._store.search_by_description_wild", AsyncMock(return_value=many)):
            r = client.get("/foods/search", params={"q": "elma"})
        assert [f["slug"] for f in r.json()] == [f"elma-{i}" for i in range(5)]

    def test_limit_zero(self, client):
        r = client.get("/foods/search", params={"q": "elma", "limit": 0})
        assert r.status_code == 200
        assert r.json() == []

    def test_image_urls_rewritten(self, client):
        (food,) = client.get("/foods/search", params={"q": "muz"}).json()
        assert food["image_url"] == f"{BASE}/images/muz.webp"

    def test_sql_injection_rejected(self, client):
        _error(client.get("/foods/search", params={"q": "' OR 1=1 --"}), 400, "invalid_characters")

    def test_unknown_mode(self, client):
        _error(client.get("/foods/search", params={"q": "elma", "mode": "unknown"}), 400, "invalid_mode")

    def test_limit_over_max(self, client):
        _error(client.get("/foods/search", params={"q": "elma", "limit": 51}), 400, "limit_exceeded")

    def test_negative_limit(self, client):
        _error(client.get("/foods/search", params={"q": "elma", "limit": -1}), 400, "invalid_request")

    def test_missing_q(self, client):
        _error(client.get("/foods/search"), 400, "invalid_request")

    @pytest.mark.parametrize("length, status", [(94, 200), (95, 400)])
    def test_params_size_bound(self, client, length, status):
        r = client.get("/foods/search", params={"q": "a" * length})
        assert r.status_code == status

    def test_store_failure(self, client):
        with patch("food_api.deps._store.search_by_tag_wild", AsyncMock(side_effect=StoreFailure("x"))):
            _error(client.get("/foods/search", params={"q": "meyve", "mode": "tag"}), 404, "tag_search_failed")

    @pytest.mark.parametrize("mode", [None, "description", "name"])
    def test_description_store_failure(self, client, mode):
        params = {"q": "elma"} if mode is None else {"q": "elma", "mode": mode}
        with patch("food_api.deps._store.search_by_description_wild", AsyncMock(side_effect=StoreFailure("x"))):
            _error(client.get("/foods/search", params=params), 404, "search_failed")


# ── GET /health ────────────────────────────────────────────────────────────────

class TestHealth:

    def test_report(self, client):
        report = ServerHealth(
            name="food-api",
            version="1.0.0",
            status="healthy",
            details=ServerHealthDetails(internet_connection=True, database_functionality=True),
            documentation="http://localhost:8099/docs",
            last_updated="2025-09-13T12:00:00+03:00",
        )
        with patch("food_api.core.health.HealthChecker.check", AsyncMock(return_value=report)):
            r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "healthy"
        assert r.json()["details"] == {"internet_connection": True, "database_functionality": True}
        assert r.json()["documentation"] == "http://localhost:8099/docs"
        assert r.json()["source_code"] is None


# ── Middleware ─────────────────────────────────────────────────────────────────

class TestMiddleware:

    def test_json_charset(self, client):
        r = client.get("/tags")
        assert r.headers["content-type"] == "application/json; charset=utf-8"

    def test_security_headers(self, client):
        r = client.get("/tags")
        assert r.headers["x-content-type-options"] == "nosniff"
        assert r.headers["x-frame-options"] == "DENY"

    def test_error_responses_carry_headers(self, client):
        r = client.get("/food/unknown-slug")
        assert r.headers["x-content-type-options"] == "nosniff"
        assert r.headers["content-type"] == "application/json; charset=utf-8"

    def test_unhandled_error_carries_headers(self, client):
        from fastapi.testclient import TestClient
        from food_api.main import app

        lenient = TestClient(app, raise_server_exceptions=False)
        with patch("food_api.deps._store.select_all_tags", AsyncMock(side_effect=ValueError("boom"))):
            r = lenient.get("/tags")
        _error(r, 500, "internal")
        assert r.headers["content-type"] == "application/json; charset=utf-8"
        assert r.headers["x-content-type-options"] == "nosniff"
        assert r.headers["x-frame-options"] == "DENY"

    def test_cors(self, client):
        r = client.get("/tags", headers={"Origin": "https://example.org"})
        assert r.headers["access-control-allow-origin"] == "*"

    def test_cached_response_is_replayed(self, client, cache):
        first = client.get("/tags")
        assert "http://testserver/tags" in cache

        with patch("food_api.deps._store.select_all_tags", AsyncMock(side_effect=StoreFailure("x"))):
            second = client.get("/tags")
        assert second.status_code == 200
        assert second.json() == first.json()
        assert second.headers["content-type"] == "application/json; charset=utf-8"

    def test_errors_are_not_cached(self, client, cache):
        client.get("/food/unknown-slug")
        assert len(cache) == 0

    def test_rate_limit(self, client):
        with patch("food_api.deps._limiter", RateLimiter(rate=5)):
            statuses = [client.get("/", headers={"X-Forwarded-For": "10.0.0.1"}).status_code for _ in range(6)]
            other = client.get("/", headers={"X-Forwarded-For": "10.0.0.2"})
        assert statuses == [200] * 5 + [429]
        assert other.status_code == 200

    def test_rate_limit_uses_rightmost_forwarded_ip(self, client):
        with patch("food_api.deps._limiter", RateLimiter(rate=1)):
            assert client.get("/", headers={"X-Forwarded-For": "6.6.6.6, 10.0.0.1"}).status_code == 200
            r = client.get("/", headers={"X-Forwarded-For": "7.7.7.7, 10.0.0.1"})
        _error(r, 429, "rate_limited")


# ── OpenAPI ────────────────────────────────────────────────────────────────────

class TestOpenApi:

    def test_error_envelope_is_documented(self, client):
        schema = client.get("/openapi.json").json()
        assert set(schema["components"]["schemas"]["ErrorResponse"]["properties"]) == {"status", "message"}

        ref = "#/components/schemas/ErrorResponse"
        responses = schema["paths"]["/food/{slug}"]["get"]["responses"]
        for code in ("400", "403", "404"):
            assert responses[code]["content"]["application/json"]["schema"]["$ref"] == ref
        search = schema["paths"]["/foods/search"]["get"]["responses"]
        assert search["404"]["content"]["application/json"]["schema"]["$ref"] == ref
