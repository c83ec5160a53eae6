from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

from src.ai.llm_client import LLMClient, LLMProviderError
from src.api.deps import get_llm_client_factory, get_search_provider_factory
from src.config import Settings
from src.db.database import get_db
from src.errors import UpstreamFetchError
from src.main import app
from src.models.deal import DealRecord
from src.providers.base import ShoppingSearchProvider


class StubProvider(ShoppingSearchProvider):
    name = "stub"

    def __init__(self, results=None, error=None):
        self.results = results or []
        self.error = error
        self.calls = 0

    async def search(self, query, limit):
        self.calls += 1
        if self.error:
            raise self.error
        return self.results[:limit]


@pytest.fixture
def llm():
    client = AsyncMock(spec=LLMClient)
    client.complete.return_value = "- Bose QC45 at 25% off is the best deal"
    return client


@pytest.fixture
def provider(headphone_results):
    return StubProvider(headphone_results)


@pytest.fixture
async def test_db(session_factory, provider, llm):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_search_provider_factory] = lambda: lambda: provider
    app.dependency_overrides[get_llm_client_factory] = lambda: lambda: llm
    yield session_factory
    app.dependency_overrides.clear()


@pytest.fixture
def no_keys(test_db):
    app.dependency_overrides.pop(get_search_provider_factory)
    app.dependency_overrides.pop(get_llm_client_factory)
    settings = Settings(_env_file=None, serpapi_api_key="", openai_api_key="")
    with patch("src.api.deps.get_settings", return_value=settings):
        yield test_db


async def _post(path, **kwargs):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        return await ac.post(path, **kwargs)


async def _row_count(session_factory):
    async with session_factory() as session:
        return await session.scalar(select(func.count()).select_from(DealRecord))


async def test_health():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        resp = await ac.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


class TestSearchDeals:
    async def test_search_headphones(self, test_db):
        resp = await _post("/api/deals", json={"query": "headphones"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["count"] == 3
        assert data["totalFetched"] == 3
        assert [d["discountPercent"] for d in data["deals"]] == [20, None, 25]

        first = data["deals"][0]
        assert first == {
            "title": "Sony WH-1000XM5",
            "source": "Best Buy",
            "productLink": "https://example.com/sony",
            "imageUrl": "https://example.com/sony.jpg",
            "price": 80.0,
            "originalPrice": 100.0,
            "discountPercent": 20,
            "currency": "USD",
        }
        assert data["deals"][1]["productLink"] == "https://example.com/jbl"
        assert data["deals"][1]["price"] is None
        assert await _row_count(test_db) == 3

    async def test_search_with_threshold(self, test_db):
        resp = await _post("/api/deals", json={"query": "headphones", "minDiscount": 21})
        assert resp.status_code == 200
        data = resp.json()
        assert data["count"] == 1
        assert data["totalFetched"] == 3
        assert data["deals"][0]["discountPercent"] == 25
        assert await _row_count(test_db) == 1

    @pytest.mark.parametrize(
        "body,field",
        [
            ({"query": ""}, "query"),
            ({}, "query"),
            ({"query": "tv", "minDiscount": 101}, "minDiscount"),
            ({"query": "tv", "minDiscount": -1}, "minDiscount"),
            ({"query": "tv", "limit": 0}, "limit"),
            ({"query": "tv", "limit": 101}, "limit"),
        ],
    )
    async def test_validation_errors(self, test_db, provider, body, field):
        resp = await _post("/api/deals", json=body)
        assert resp.status_code == 400
        data = resp.json()
        assert data["error"] == "Invalid request data"
        assert field in [d["field"] for d in data["details"]]
        assert provider.calls == 0

    async def test_malformed_json(self, test_db, provider):
        resp = await _post(
            "/api/deals",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid JSON in request body"
        assert provider.calls == 0

    async def test_upstream_failure(self, test_db, provider):
        provider.error = UpstreamFetchError(
            "Failed to fetch deals from SerpAPI", details="SerpAPI error: Invalid API key."
        )
        resp = await _post("/api/deals", json={"query": "headphones"})
        assert resp.status_code == 500
        assert resp.json() == {
            "error": "Failed to fetch deals from SerpAPI",
            "details": "SerpAPI error: Invalid API key.",
        }
        assert await _row_count(test_db) == 0

    async def test_missing_serpapi_key(self, no_keys):
        resp = await _post("/api/deals", json={"query": "headphones"})
        assert resp.status_code == 500
        data = resp.json()
        assert data["error"] == "SerpAPI API key not configured"
        assert "SERPAPI_API_KEY" in data["details"]

    async def test_validation_runs_before_missing_key(self, no_keys):
        resp = await _post("/api/deals", json={"query": ""})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid request data"


class TestAnalyzeDeals:
    async def test_short_question(self, test_db, llm):
        resp = await _post("/api/analyze-deals", json={"question": "abc"})
        assert resp.status_code == 400
        fields = [d["field"] for d in resp.json()["details"]]
        assert fields == ["question"]
        llm.complete.assert_not_awaited()

    async def test_no_matching_deals(self, test_db, llm):
        resp = await _post(
            "/api/analyze-deals", json={"question": "What is the best TV deal?", "query": "tv"}
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["answer"].startswith("I couldn't find any deals")
        assert data["dealsAnalyzed"] == 0
        llm.complete.assert_not_awaited()

    async def test_analyze_after_search(self, test_db, llm):
        await _post("/api/deals", json={"query": "headphones"})

        resp = await _post(
            "/api/analyze-deals",
            json={"question": "Which headphones are cheapest?", "query": "HEADPHONES", "minDiscount": 20},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["answer"] == "- Bose QC45 at 25% off is the best deal"
        assert data["dealsAnalyzed"] == 2
        llm.complete.assert_awaited_once()

    async def test_provider_failure(self, test_db, llm):
        await _post("/api/deals", json={"query": "headphones"})
        llm.complete.side_effect = LLMProviderError("boom")

        resp = await _post("/api/analyze-deals", json={"question": "Which is cheapest?"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to analyze deals with OpenAI", "details": "boom"}

    async def test_short_question_without_openai_key(self, no_keys):
        resp = await _post("/api/analyze-deals", json={"question": "abc"})
        assert resp.status_code == 400
        assert [d["field"] for d in resp.json()["details"]] == ["question"]

    async def test_no_matching_deals_without_openai_key(self, no_keys):
        resp = await _post("/api/analyze-deals", json={"question": "What is the best TV deal?"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["answer"].startswith("I couldn't find any deals")
        assert data["dealsAnalyzed"] == 0


class TestGeneratePlan:
    async def test_generate_plan(self, test_db, llm):
        llm.complete.return_value = "Plan: check both sites"
        body = {
            "sites": ["amazon.com", "bestbuy.com"],
            "minDiscount": 20,
            "maxDiscount": 60,
            "keywords": "laptop",
        }
        resp = await _post("/api/agent", json=body)
        assert resp.status_code == 200
        data = resp.json()
        assert data["plan"] == "Plan: check both sites"
        debug = data["debugInfo"]
        assert debug["receivedParams"] == body
        assert debug["sitesCount"] == 2
        assert debug["discountRange"] == "20% - 60%"
        assert debug["hasKeywords"] is True
        assert debug["timestamp"]

    async def test_received_params_echo_only_sent_fields(self, test_db):
        body = {"sites": ["amazon.com"], "minDiscount": 10, "maxDiscount": 30}
        resp = await _post("/api/agent", json=body)
        assert resp.status_code == 200
        debug = resp.json()["debugInfo"]
        assert debug["receivedParams"] == body
        assert "keywords" not in debug["receivedParams"]
        assert debug["hasKeywords"] is False

    @pytest.mark.parametrize(
        "body",
        [
            {"sites": [], "minDiscount": 0, "maxDiscount": 10},
            {"sites": [" "], "minDiscount": 0, "maxDiscount": 10},
            {"sites": ["a"], "minDiscount": 50, "maxDiscount": 10},
            {"sites": ["a"], "minDiscount": -5, "maxDiscount": 10},
            {"sites": ["a"], "minDiscount": 0, "maxDiscount": 150},
            {"sites": ["a"], "maxDiscount": 10},
        ],
    )
    async def test_invalid_plan_requests(self, test_db, llm, body):
        resp = await _post("/api/agent", json=body)
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid request data"
        llm.complete.assert_not_awaited()

    async def test_missing_openai_key(self, no_keys):
        resp = await _post(
            "/api/agent", json={"sites": ["a"], "minDiscount": 0, "maxDiscount": 10}
        )
        assert resp.status_code == 500
        assert resp.json()["error"] == "OpenAI API key not configured"
