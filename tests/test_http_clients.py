"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest

from nutrition_pipeline.adapters.edamam_client import HttpxEdamamClient
from nutrition_pipeline.adapters.fdc_client import HttpxFdcClient
from nutrition_pipeline.adapters.off_client import HttpxOpenFoodFactsClient
from nutrition_pipeline.adapters.openai_insight_client import OpenAIInsightClient
from nutrition_pipeline.services.insights import INSIGHT_SCHEMA


class _FakeResponses:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, output_text: str) -> None:
        self.responses = _FakeResponses(output_text)


def test_openai_insight_client_parses_output() -> None:
    fake = _FakeOpenAI(json.dumps({"summary": "Solid pick", "tips": []}))
    client = OpenAIInsightClient(client=fake)

    result = asyncio.run(
        client.complete(
            model="gpt-4o-mini",
            store=False,
            system_prompt="Be brief",
            prompt="Describe oatmeal",
            schema=INSIGHT_SCHEMA,
        )
    )

    assert result == {"summary": "Solid pick", "tips": []}
    payload = fake.responses.last_payload
    assert payload is not None
    assert payload["model"] == "gpt-4o-mini"
    assert payload["instructions"] == "Be brief"
    assert payload["store"] is False
    assert payload["text"]["format"]["name"] == "food_insight"
    assert payload["text"]["format"]["schema"] is INSIGHT_SCHEMA
    assert payload["input"][0]["content"][0]["text"] == "Describe oatmeal"


def test_openai_insight_client_rejects_empty_output() -> None:
    client = OpenAIInsightClient(client=_FakeOpenAI(""))

    with pytest.raises(RuntimeError):
        asyncio.run(
            client.complete(
                model="gpt-4o-mini",
                store=False,
                system_prompt="",
                prompt="",
                schema={"type": "object"},
            )
        )


def test_fdc_client_search_and_get_food() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["api_key"] == "fdc-key"
        if request.url.path.endswith("/foods/search"):
            assert request.url.params["query"] == "apple"
            assert request.url.params["pageSize"] == "3"
            assert request.url.params["dataType"] == "Survey (FNDDS),Foundation,SR Legacy"
            return httpx.Response(200, json={"foods": [{"fdcId": 1}]})
        assert request.url.path.endswith("/food/1")
        return httpx.Response(200, json={"fdcId": 1, "description": "Apple"})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxFdcClient(
        api_key="fdc-key", base_url="https://fdc.test/fdc/v1", http_client=async_client
    )

    search = asyncio.run(client.search_foods("apple", page_size=3))
    food = asyncio.run(client.get_food(1))

    assert search["foods"] == [{"fdcId": 1}]
    assert food["description"] == "Apple"


def test_fdc_client_raises_on_http_error() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "boom"})

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = HttpxFdcClient(
        api_key="fdc-key", base_url="https://fdc.test/fdc/v1", http_client=async_client
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.search_foods("apple"))


def test_off_client_search_and_product() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["User-Agent"] == "TestAgent/1.0"
        if request.url.path == "/cgi/search.pl":
            assert request.url.params["search_terms"] == "granola"
            assert request.url.params["json"] == "1"
            assert "nutriments" in request.url.params["fields"]
            return httpx.Response(200, json={"products": []})
        assert request.url.path == "/api/v0/product/0123.json"
        return httpx.Response(200, json={"status": 1, "product": {"code": "0123"}})

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = HttpxOpenFoodFactsClient(
        base_url="https://off.test", user_agent="TestAgent/1.0", http_client=async_client
    )

    search = asyncio.run(client.search_products("granola"))
    product = asyncio.run(client.get_product("0123"))

    assert search == {"products": []}
    assert product["status"] == 1


def test_edamam_client_parse() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/food-database/v2/parser"
        assert request.url.params["ingr"] == "big mac"
        assert request.url.params["app_id"] == "edamam-id"
        assert request.url.params["app_key"] == "edamam-key"
        return httpx.Response(200, json={"parsed": [], "hints": []})

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = HttpxEdamamClient(
        app_id="edamam-id",
        app_key="edamam-key",
        base_url="https://edamam.test/api/food-database/v2",
        http_client=async_client,
    )

    assert asyncio.run(client.parse("big mac")) == {"parsed": [], "hints": []}


def test_clients_close_http_sessions() -> None:
    async def run() -> list[bool]:
        fdc = HttpxFdcClient.create(api_key="k", base_url="https://fdc.test")
        off = HttpxOpenFoodFactsClient.create(base_url="https://off.test", user_agent="UA")
        edamam = HttpxEdamamClient.create(app_id="i", app_key="k", base_url="https://e.test")
        for client in (fdc, off, edamam):
            await client.close()
        return [client.http_client.is_closed for client in (fdc, off, edamam)]

    assert asyncio.run(run()) == [True, True, True]
