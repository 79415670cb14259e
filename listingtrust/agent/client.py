"""HTTP client for the content-retrieval agent that collects product and policy page text."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import httpx

from listingtrust.config import Settings, get_settings
from listingtrust.schemas.models import AgentResult, PolicyPage

logger = logging.getLogger(__name__)

AGENT_PROMPT = "\n".join([
    "Open the product page at the given url.",
    "Extract visible text from the product page.",
    "Extract the product title, displayed price, short description and main image url if present.",
    "Find links on the same site related to returns, refunds, warranty, or policies.",
    "Open up to 3 relevant policy pages (prioritize returns and warranty).",
    "Extract visible text from each policy page.",
    "Return JSON only with this schema:",
    "{",
    '  "productUrl": string,',
    '  "productText": string,',
    '  "productTitle": string | null,',
    '  "productPrice": string | null,',
    '  "productDescription": string | null,',
    '  "previewImage": string | null,',
    '  "policyPages": [',
    '    { "url": string, "text": string }',
    "  ]",
    "}",
    "No extra keys. No markdown.",
])

ERROR_SNIPPET_CHARS = 400


class AgentError(Exception):
    """Raised when the agent is misconfigured, unreachable or returns an unusable payload."""


def looks_like_sse_endpoint(api_url: str) -> bool:
    return "/run-sse" in api_url


def extract_json_from_sse(raw: str) -> str | None:
    """Return the last ``data:`` payload of an SSE body, skipping a trailing ``[DONE]``."""
    data_lines = [
        line[len("data:"):].strip()
        for line in raw.splitlines()
        if line.startswith("data:")
    ]
    data_lines = [line for line in data_lines if line]
    if not data_lines:
        return None

    for payload in reversed(data_lines):
        if payload != "[DONE]":
            return payload
    return None


def _str_or_none(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def parse_agent_payload(data: Any, url: str) -> AgentResult:
    """
    Coerce a loosely-typed agent payload into an ``AgentResult``.

    Non-string fields fall back to defaults; policy pages without a string
    ``url`` and ``text`` are dropped. A payload that is not a JSON object is
    rejected.
    """
    if not isinstance(data, dict):
        raise AgentError("Agent API response was not a JSON object")

    product_url = data.get("productUrl")
    product_text = data.get("productText")
    raw_pages = data.get("policyPages")

    pages: list[PolicyPage] = []
    if isinstance(raw_pages, list):
        for entry in raw_pages:
            if not isinstance(entry, dict):
                continue
            page_url, page_text = entry.get("url"), entry.get("text")
            if isinstance(page_url, str) and page_url and isinstance(page_text, str) and page_text:
                pages.append(PolicyPage(url=page_url, text=page_text))

    return AgentResult(
        product_url=product_url if isinstance(product_url, str) else url,
        product_text=product_text if isinstance(product_text, str) else "",
        policy_pages=pages,
        product_title=_str_or_none(data.get("productTitle")),
        product_price=_str_or_none(data.get("productPrice")),
        product_description=_str_or_none(data.get("productDescription")),
        preview_image=_str_or_none(data.get("previewImage")),
    )


class AgentClient:
    """Async agent client; one instance per analysis, closed after use."""

    def __init__(
        self,
        *,
        api_url: str | None,
        api_key: str | None,
        timeout_s: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not api_url or not api_key:
            raise AgentError("AGENT_API_URL or AGENT_API_KEY is not set")
        self.api_url = api_url
        self.use_sse = looks_like_sse_endpoint(api_url)

        headers = {"Content-Type": "application/json"}
        if self.use_sse:
            headers["X-API-Key"] = api_key
        else:
            headers["Authorization"] = f"Bearer {api_key}"

        self._client = httpx.AsyncClient(
            timeout=float(timeout_s),
            follow_redirects=True,
            headers=headers,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> AgentClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _request_body(self, url: str) -> dict[str, Any]:
        if self.use_sse:
            return {"url": url, "goal": AGENT_PROMPT}
        return {"prompt": AGENT_PROMPT, "data": {"url": url}}

    async def fetch(self, url: str) -> AgentResult:
        """POST the goal for ``url`` and parse the agent's JSON answer."""
        try:
            response = await self._client.post(self.api_url, json=self._request_body(url))
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise AgentError(f"Agent API request failed: {e}") from e

        if response.is_error:
            logger.error(
                "Agent API error: status=%s body=%s",
                response.status_code,
                response.text[:ERROR_SNIPPET_CHARS],
            )
            raise AgentError(f"Agent API error: {response.status_code}")

        raw = response.text
        if not raw.strip():
            logger.warning("Agent API returned an empty response for %s", url)
        json_text = extract_json_from_sse(raw) if self.use_sse else raw
        if not json_text or not json_text.strip():
            raise AgentError("Agent API response did not include JSON data")
        try:
            data = json.loads(json_text)
        except json.JSONDecodeError as e:
            raise AgentError("Agent API response was not valid JSON") from e

        return parse_agent_payload(data, url)


async def run_agent(
    url: str,
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AgentResult:
    """
    Fetch product and policy text for ``url`` within the configured time budget.

    Exceeding ``agent_timeout_seconds`` is reported as an ``AgentError``.
    """
    settings = settings or get_settings()
    timeout_s = settings.agent_timeout_seconds
    async with AgentClient(
        api_url=settings.agent_api_url,
        api_key=settings.agent_api_key,
        timeout_s=timeout_s,
        transport=transport,
    ) as client:
        try:
            return await asyncio.wait_for(client.fetch(url), timeout=timeout_s)
        except asyncio.TimeoutError:
            raise AgentError(f"Agent call timed out after {timeout_s:g}s") from None
