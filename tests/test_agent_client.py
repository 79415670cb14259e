"""Tests for the content-retrieval agent client (HTTP mocked with httpx.MockTransport)."""

import asyncio
import json

import httpx
import pytest

from listingtrust.agent import AgentError, parse_agent_payload, run_agent
from listingtrust.agent.client import AGENT_PROMPT, extract_json_from_sse
from listingtrust.config import Settings

PAYLOAD = {
    "productUrl": "https://shop.test/p/kettle",
    "productText": "Acme Kettle 2000. In stock.",
    "productTitle": "Acme Kettle",
    "policyPages": [
        {"url": "https://shop.test/returns", "text": "Returns within 14 days."},
        {"url": "https://shop.test/empty", "text": 42},
        "not-a-page",
    ],
}


def _settings(api_url: str = "https://agent.test/v1/run", timeout: float = 1.0) -> Settings:
    return Settings(
        listingtrust_mode="live",
        agent_api_url=api_url,
        agent_api_key="secret",
        agent_timeout_seconds=timeout,
    )


class TestParseAgentPayload:

    def test_valid_payload(self):
        result = parse_agent_payload(PAYLOAD, "https://shop.test/p/kettle")
        assert result.product_text == "Acme Kettle 2000. In stock."
        assert result.product_title == "Acme Kettle"
        assert [p.url for p in result.policy_pages] == ["https://shop.test/returns"]
        assert result.policy_text == "Returns within 14 days."

    def test_malformed_fields_coerced(self):
        result = parse_agent_payload(
            {"productUrl": 7, "productText": None, "policyPages": "nope", "previewImage": ""},
            "https://shop.test/p/x",
        )
        assert result.product_url == "https://shop.test/p/x"
        assert result.product_text == ""
        assert result.policy_pages == []
        assert result.preview_image is None

    def test_non_object_rejected(self):
        with pytest.raises(AgentError):
            parse_agent_payload(["a", "b"], "https://shop.test/p/x")


class TestExtractJsonFromSse:

    def test_last_payload_before_done(self):
        raw = 'event: progress\ndata: {"step": 1}\n\ndata: {"productText": "x"}\n\ndata: [DONE]\n\n'
        assert extract_json_from_sse(raw) == '{"productText": "x"}'

    def test_no_data_lines(self):
        assert extract_json_from_sse("event: ping\n\n") is None


class TestRunAgent:

    async def test_json_endpoint_uses_bearer_auth(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=PAYLOAD)

        result = await run_agent(
            "https://shop.test/p/kettle", _settings(), transport=httpx.MockTransport(handler)
        )
        assert seen["auth"] == "Bearer secret"
        assert seen["body"] == {"prompt": AGENT_PROMPT, "data": {"url": "https://shop.test/p/kettle"}}
        assert result.product_title == "Acme Kettle"

    async def test_sse_endpoint_uses_api_key_header(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["key"] = request.headers.get("x-api-key")
            seen["body"] = json.loads(request.content)
            body = f"data: {json.dumps(PAYLOAD)}\n\ndata: [DONE]\n\n"
            return httpx.Response(200, text=body)

        result = await run_agent(
            "https://shop.test/p/kettle",
            _settings("https://agent.test/v1/run-sse"),
            transport=httpx.MockTransport(handler),
        )
        assert seen["key"] == "secret"
        assert seen["body"]["goal"] == AGENT_PROMPT
        assert result.product_text == "Acme Kettle 2000. In stock."

    async def test_error_status_raises(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(502, text="bad gateway"))
        with pytest.raises(AgentError, match="Agent API error: 502"):
            await run_agent("https://shop.test/p/kettle", _settings(), transport=transport)

    async def test_invalid_json_raises(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(AgentError, match="not valid JSON"):
            await run_agent("https://shop.test/p/kettle", _settings(), transport=transport)

    async def test_empty_sse_body_raises(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text=""))
        with pytest.raises(AgentError, match="did not include JSON"):
            await run_agent(
                "https://shop.test/p/kettle",
                _settings("https://agent.test/v1/run-sse"),
                transport=transport,
            )

    async def test_timeout_budget(self):
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(1.0)
            return httpx.Response(200, json=PAYLOAD)

        with pytest.raises(AgentError, match="timed out"):
            await run_agent(
                "https://shop.test/p/kettle",
                _settings(timeout=0.05),
                transport=httpx.MockTransport(handler),
            )

    async def test_missing_configuration(self):
        settings = Settings(listingtrust_mode="live", agent_api_url=None, agent_api_key=None)
        with pytest.raises(AgentError, match="not set"):
            await run_agent("https://shop.test/p/kettle", settings)
