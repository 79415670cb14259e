"""Content retrieval: agent client and the offline test listings."""

from listingtrust.agent.client import AgentClient, AgentError, parse_agent_payload, run_agent
from listingtrust.agent.fixtures import OFFLINE_LISTINGS, OfflineListing, get_offline_listing

__all__ = [
    "AgentClient",
    "AgentError",
    "OFFLINE_LISTINGS",
    "OfflineListing",
    "get_offline_listing",
    "parse_agent_payload",
    "run_agent",
]
