"""Pytest configuration and shared fixtures."""

import pytest

from listingtrust.config import Settings
from listingtrust.schemas.models import AgentResult, PolicyPage


@pytest.fixture
def offline_settings():
    """Offline mode: only the built-in test URLs, no network."""
    return Settings(listingtrust_mode="offline", heartbeat_interval_seconds=0.01)


@pytest.fixture
def live_settings():
    """Live mode with a dummy agent endpoint; tests inject the agent call."""
    return Settings(
        listingtrust_mode="live",
        agent_api_url="https://agent.test/v1/run",
        agent_api_key="test-key",
        agent_timeout_seconds=1.0,
        heartbeat_interval_seconds=0.01,
    )


@pytest.fixture
def make_agent():
    """Factory for async stand-ins of the retrieval agent (returns ``result`` or raises ``error``)."""

    def _make(result: AgentResult | None = None, error: Exception | None = None):
        async def _agent(url: str) -> AgentResult:
            if error is not None:
                raise error
            return result

        return _agent

    return _make


@pytest.fixture
def kettle_listing():
    """Live listing whose policy allows a shorter return window than the page claims."""
    return AgentResult(
        product_url="https://shop.test/p/acme-kettle",
        product_text="Acme Kettle 2000\nIn stock. $49.99. Free returns within 30 days.",
        policy_pages=[
            PolicyPage(url="https://shop.test/returns", text="Returns within 14 days of delivery."),
        ],
        product_title="Acme Kettle",
        preview_image="https://cdn.shop.test/kettle.jpg",
    )
